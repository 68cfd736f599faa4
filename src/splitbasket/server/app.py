"""ASGI application for SplitBasket."""
# mypy: ignore-errors

from __future__ import annotations

import logging
from datetime import date
from time import perf_counter
from typing import Annotated, Any, List, Optional
from uuid import uuid4

from fastapi import Body, Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field, StringConstraints

from splitbasket import __version__, metrics
from splitbasket.config import Settings, get_settings
from splitbasket.db import grocery_items as grocery_store
from splitbasket.db import links as link_store
from splitbasket.db import members as member_store
from splitbasket.db import purchases as purchase_store
from splitbasket.engine import history, ledger, linking
from splitbasket.logging_utils import configure_logging as configure_app_logging
from splitbasket.models.grocery import GroceryItem, GroceryItemDetail
from splitbasket.models.link import Link
from splitbasket.models.member import Ledger, MemberBalance
from splitbasket.models.purchase import PurchaseHistory
from splitbasket.models.responses import ServiceResponse, ServiceStatus
from splitbasket.server import deps

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]

_HTTP_STATUS = {
    ServiceStatus.CREATED: status.HTTP_201_CREATED,
    ServiceStatus.UPDATED: status.HTTP_200_OK,
    ServiceStatus.DELETED: status.HTTP_200_OK,
    ServiceStatus.SUCCESS: status.HTTP_200_OK,
    ServiceStatus.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ServiceStatus.ERROR: status.HTTP_400_BAD_REQUEST,
}


def _json_safe(value: Any) -> Any:
    """Convert non-serializable values into JSON-safe representations."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value.hex()
    if isinstance(value, (list, tuple)):
        return [_json_safe(entry) for entry in value]
    if isinstance(value, dict):
        return {key: _json_safe(sub_value) for key, sub_value in value.items()}
    return repr(value)


def _normalize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Ensure validation error payloads can be serialized to JSON."""

    return [{key: _json_safe(value) for key, value in error.items()} for error in errors]


def _configure_logging(settings: Settings) -> None:
    configure_app_logging(settings.log_level, settings.log_format, settings.log_redact_emails)


def _envelope(result: ServiceResponse) -> JSONResponse:
    """Render a service response with the HTTP status matching its outcome."""

    if not result.ok:
        logger.info("Request rejected status=%s messages=%s", result.status.value, result.messages)
    return JSONResponse(status_code=_HTTP_STATUS[result.status], content=result.model_dump(mode="json"))


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    _configure_logging(settings)

    application = FastAPI(title="SplitBasket", version=__version__)
    logger.debug("Application created with log level %s", settings.log_level)

    if settings.log_requests:
        access_logger = logging.getLogger("splitbasket.access")

        @application.middleware("http")
        async def log_request_response(request: Request, call_next):
            """Log request/response details and record request metrics."""

            request_id = request.headers.get("X-Request-ID") or uuid4().hex
            request.state.request_id = request_id
            start = perf_counter()
            path = request.url.path
            method = request.method
            try:
                response: Response = await call_next(request)
            except Exception:
                duration_ms = (perf_counter() - start) * 1000
                access_logger.exception(
                    "HTTP %s %s status=500 duration_ms=%.2f",
                    method,
                    path,
                    duration_ms,
                    extra={"request_id": request_id},
                )
                metrics.REQUEST_COUNT.labels(method=method, path=path, status="500").inc()
                metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(
                    duration_ms / 1000.0
                )
                raise

            duration_ms = (perf_counter() - start) * 1000
            response.headers.setdefault("X-Request-ID", request_id)
            access_logger.info(
                "HTTP %s %s status=%s duration_ms=%.2f",
                method,
                path,
                response.status_code,
                duration_ms,
                extra={"request_id": request_id},
            )
            metrics.REQUEST_COUNT.labels(
                method=method,
                path=path,
                status=str(response.status_code),
            ).inc()
            metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
            return response

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        log_kwargs: dict[str, Any] = {}
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            log_kwargs["extra"] = {"request_id": request_id}

        logger.warning(
            "Validation error on %s %s: %s",
            request.method,
            request.url.path,
            exc.errors(),
            **log_kwargs,
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": _normalize_validation_errors(exc.errors())},
        )

    @application.get("/health", include_in_schema=False)
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    # Ledger -----------------------------------------------------------------

    @application.get("/ledger", response_model=Ledger, summary="Equal-split ledger")
    def ledger_get(store: deps.StoreFactory = Depends(deps.get_store)) -> Ledger:
        with store() as session:
            result = ledger.compute_ledger(session)
        if result is None:
            raise _not_found("No members to split between.")
        return result

    # Members ----------------------------------------------------------------

    @application.get(
        "/members",
        response_model=list[MemberBalance],
        summary="List members with their balances",
    )
    def members_list(store: deps.StoreFactory = Depends(deps.get_store)) -> list[MemberBalance]:
        with store() as session:
            return ledger.list_member_balances(session)

    @application.get("/members/{member_id}", response_model=MemberBalance, summary="Find member")
    def members_find(
        member_id: int,
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> MemberBalance:
        with store() as session:
            balance = ledger.find_member_balance(session, member_id)
        if balance is None:
            raise _not_found("Member not found.")
        return balance

    @application.get(
        "/members/{member_id}/items",
        response_model=list[str],
        summary="Names of items bought by a member",
    )
    def members_items(
        member_id: int,
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> list[str]:
        with store() as session:
            names = member_store.list_member_items(session, member_id)
        if names is None:
            raise _not_found("Member not found.")
        return names

    @application.post("/members", status_code=status.HTTP_201_CREATED, summary="Add member")
    def members_add(
        payload: MemberCreateRequest = Body(...),
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = member_store.add_member(session, name=payload.name, email=payload.email)
        return _envelope(result)

    @application.put("/members/{member_id}", summary="Update member")
    def members_update(
        member_id: int,
        payload: MemberUpdateRequest = Body(...),
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = member_store.update_member(
                session,
                member_id,
                body_id=payload.id,
                name=payload.name,
                email=payload.email,
            )
        return _envelope(result)

    @application.delete("/members/{member_id}", summary="Delete member")
    def members_delete(
        member_id: int,
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = member_store.delete_member(session, member_id)
        return _envelope(result)

    # Grocery items ----------------------------------------------------------

    @application.get(
        "/grocery-items",
        response_model=list[GroceryItemDetail],
        summary="List grocery items",
    )
    def grocery_items_list(
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> list[GroceryItemDetail]:
        with store() as session:
            return grocery_store.list_grocery_items(session)

    @application.get(
        "/grocery-items/{item_id}",
        response_model=GroceryItemDetail,
        summary="Find grocery item",
    )
    def grocery_items_find(
        item_id: int,
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> GroceryItemDetail:
        with store() as session:
            item = grocery_store.find_grocery_item(session, item_id)
        if item is None:
            raise _not_found("Grocery item not found.")
        return item

    @application.post(
        "/grocery-items",
        status_code=status.HTTP_201_CREATED,
        summary="Add grocery item (bought by member_id when given, pending otherwise)",
    )
    def grocery_items_add(
        payload: GroceryItemCreateRequest = Body(...),
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = linking.add_grocery_item(
                session,
                name=payload.name,
                quantity=payload.quantity,
                unit_price=payload.unit_price,
                member_id=payload.member_id,
                date_purchased=payload.date_purchased,
            )
        return _envelope(result)

    @application.put("/grocery-items/{item_id}", summary="Update grocery item")
    def grocery_items_update(
        item_id: int,
        payload: GroceryItemUpdateRequest = Body(...),
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = grocery_store.update_grocery_item(
                session,
                item_id,
                body_id=payload.id,
                name=payload.name,
                quantity=payload.quantity,
                unit_price=payload.unit_price,
            )
        return _envelope(result)

    @application.delete("/grocery-items/{item_id}", summary="Delete grocery item")
    def grocery_items_delete(
        item_id: int,
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = grocery_store.delete_grocery_item(session, item_id)
        return _envelope(result)

    @application.post(
        "/grocery-items/{item_id}/pending",
        status_code=status.HTTP_201_CREATED,
        summary="Put a grocery item on the wish list",
    )
    def grocery_items_mark_pending(
        item_id: int,
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = linking.mark_item_pending(session, item_id)
        return _envelope(result)

    @application.get(
        "/pending",
        response_model=list[GroceryItem],
        summary="Items still waiting to be bought",
    )
    def pending_list(store: deps.StoreFactory = Depends(deps.get_store)) -> list[GroceryItem]:
        with store() as session:
            return linking.list_pending_items(session)

    # Purchases --------------------------------------------------------------

    @application.get(
        "/purchases",
        response_model=list[PurchaseHistory],
        summary="Purchase history",
    )
    def purchases_list(
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> list[PurchaseHistory]:
        with store() as session:
            return history.list_purchase_history(session)

    @application.get(
        "/purchases/{purchase_id}",
        response_model=PurchaseHistory,
        summary="Find purchase",
    )
    def purchases_find(
        purchase_id: int,
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> PurchaseHistory:
        with store() as session:
            record = history.find_purchase_history(session, purchase_id)
        if record is None:
            raise _not_found("Purchase not found.")
        return record

    @application.post("/purchases", status_code=status.HTTP_201_CREATED, summary="Add purchase")
    def purchases_add(
        payload: PurchaseCreateRequest = Body(...),
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = purchase_store.add_purchase(
                session,
                member_id=payload.member_id,
                date_purchased=payload.date_purchased,
            )
        return _envelope(result)

    @application.post(
        "/purchases/with-items",
        status_code=status.HTTP_201_CREATED,
        summary="Add a purchase and attribute items to it",
    )
    def purchases_add_with_items(
        payload: PurchaseWithItemsRequest = Body(...),
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = linking.add_purchase_with_items(
                session,
                member_id=payload.member_id,
                date_purchased=payload.date_purchased,
                item_ids=payload.item_ids,
            )
        return _envelope(result)

    @application.put("/purchases/{purchase_id}", summary="Update purchase")
    def purchases_update(
        purchase_id: int,
        payload: PurchaseUpdateRequest = Body(...),
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = purchase_store.update_purchase(
                session,
                purchase_id,
                body_id=payload.id,
                member_id=payload.member_id,
                date_purchased=payload.date_purchased,
            )
        return _envelope(result)

    @application.delete("/purchases/{purchase_id}", summary="Delete purchase")
    def purchases_delete(
        purchase_id: int,
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = linking.delete_purchase(session, purchase_id)
        return _envelope(result)

    @application.post(
        "/purchases/{purchase_id}/items/{item_id}",
        status_code=status.HTTP_201_CREATED,
        summary="Link a grocery item to a purchase",
    )
    def purchases_link_item(
        purchase_id: int,
        item_id: int,
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = linking.link_item(session, item_id, purchase_id)
        return _envelope(result)

    @application.delete(
        "/purchases/{purchase_id}/items/{item_id}",
        summary="Unlink a grocery item from a purchase",
    )
    def purchases_unlink_item(
        purchase_id: int,
        item_id: int,
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = linking.unlink_item(session, item_id, purchase_id)
        return _envelope(result)

    # Links ------------------------------------------------------------------

    @application.get("/links", response_model=list[Link], summary="List item/purchase links")
    def links_list(store: deps.StoreFactory = Depends(deps.get_store)) -> list[Link]:
        with store() as session:
            return link_store.list_links(session)

    @application.get("/links/{link_id}", response_model=Link, summary="Find link")
    def links_find(
        link_id: int,
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> Link:
        with store() as session:
            link = link_store.get_link(session, link_id)
        if link is None:
            raise _not_found(f"Link with ID {link_id} not found.")
        return link

    @application.put("/links/{link_id}", summary="Rebind a link")
    def links_update(
        link_id: int,
        payload: LinkUpdateRequest = Body(...),
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = linking.update_link(
                session,
                link_id,
                body_id=payload.id,
                grocery_item_id=payload.grocery_item_id,
                purchase_id=payload.purchase_id,
            )
        return _envelope(result)

    @application.delete("/links/{link_id}", summary="Delete link")
    def links_delete(
        link_id: int,
        store: deps.StoreFactory = Depends(deps.get_store),
    ) -> JSONResponse:
        with store() as session:
            result = link_store.delete_link(session, link_id)
        return _envelope(result)

    return application


class MemberCreateRequest(BaseModel):
    name: NameStr
    email: str = Field(min_length=3, max_length=320, pattern=EMAIL_PATTERN)


class MemberUpdateRequest(BaseModel):
    id: int
    name: NameStr
    email: str = Field(min_length=3, max_length=320, pattern=EMAIL_PATTERN)


class GroceryItemCreateRequest(BaseModel):
    name: NameStr
    quantity: int = Field(gt=0)
    unit_price: float = Field(ge=0)
    member_id: Optional[int] = Field(default=None)
    date_purchased: Optional[date] = Field(default=None)


class GroceryItemUpdateRequest(BaseModel):
    id: int
    name: NameStr
    quantity: int = Field(gt=0)
    unit_price: float = Field(ge=0)


class PurchaseCreateRequest(BaseModel):
    member_id: int
    date_purchased: date


class PurchaseWithItemsRequest(BaseModel):
    member_id: int
    date_purchased: date
    item_ids: List[int] = Field(min_length=1)


class PurchaseUpdateRequest(BaseModel):
    id: int
    member_id: int
    date_purchased: date


class LinkUpdateRequest(BaseModel):
    id: int
    grocery_item_id: int
    purchase_id: Optional[int] = Field(default=None)


app = create_app()

__all__ = ["app", "create_app"]
