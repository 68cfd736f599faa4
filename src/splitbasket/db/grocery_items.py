"""Grocery item persistence helpers."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from splitbasket.models.grocery import GroceryItem, GroceryItemDetail
from splitbasket.models.responses import ServiceResponse

from .models import GroceryItemORM, LinkORM, MemberORM, PurchaseORM
from .writes import flush_or_report, reports_store_errors

logger = logging.getLogger(__name__)

_UNSET = object()


def _to_model(row: GroceryItemORM) -> GroceryItem:
    return GroceryItem.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "quantity": row.quantity,
            "unit_price": row.unit_price,
        }
    )


def _detail_query():
    # One row per (item, link); items without links appear once with null link columns.
    return (
        select(
            GroceryItemORM,
            LinkORM.id,
            LinkORM.purchase_id,
            PurchaseORM.date_purchased,
            MemberORM.name,
        )
        .select_from(GroceryItemORM)
        .outerjoin(LinkORM, LinkORM.grocery_item_id == GroceryItemORM.id)
        .outerjoin(PurchaseORM, PurchaseORM.id == LinkORM.purchase_id)
        .outerjoin(MemberORM, MemberORM.id == PurchaseORM.member_id)
        .order_by(GroceryItemORM.id.asc(), LinkORM.id.asc())
    )


def _collect_details(rows) -> List[GroceryItemDetail]:
    details: Dict[int, Dict[str, Any]] = {}
    for item, link_id, purchase_id, date_purchased, member_name in rows:
        entry = details.setdefault(
            item.id,
            {
                "id": item.id,
                "name": item.name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "is_bought": False,
                "member_name": None,
                "date_purchased": None,
            },
        )
        # Rows arrive in link id order, so the last bought link wins.
        if link_id is not None and purchase_id is not None:
            entry["is_bought"] = True
            entry["member_name"] = member_name
            entry["date_purchased"] = date_purchased
    return [GroceryItemDetail.model_validate(entry) for entry in details.values()]


def list_grocery_items(session: Session) -> List[GroceryItemDetail]:
    """Return every grocery item with its most recent buyer, if any."""

    return _collect_details(session.execute(_detail_query()).all())


def find_grocery_item(session: Session, item_id: int) -> Optional[GroceryItemDetail]:
    rows = session.execute(_detail_query().where(GroceryItemORM.id == item_id)).all()
    details = _collect_details(rows)
    return details[0] if details else None


def get_grocery_item(session: Session, item_id: int) -> Optional[GroceryItem]:
    row = session.get(GroceryItemORM, item_id)
    if row is None:
        return None
    return _to_model(row)


@reports_store_errors("grocery item", "updating")
def update_grocery_item(
    session: Session,
    item_id: int,
    *,
    body_id: Optional[int] = None,
    name: str | object = _UNSET,
    quantity: int | object = _UNSET,
    unit_price: float | object = _UNSET,
) -> ServiceResponse:
    if body_id is not None and body_id != item_id:
        return ServiceResponse.error("Item ID mismatch.")

    item = session.get(GroceryItemORM, item_id)
    if item is None:
        return ServiceResponse.not_found("Grocery item not found.")

    if name is not _UNSET:
        item.name = str(name).strip()
    if quantity is not _UNSET:
        item.quantity = int(quantity)  # type: ignore[arg-type]
    if unit_price is not _UNSET:
        item.unit_price = float(unit_price)  # type: ignore[arg-type]

    if failure := flush_or_report(session, GroceryItemORM, item_id, "grocery item"):
        return failure
    return ServiceResponse.updated(f"Grocery item {item_id} updated successfully.")


@reports_store_errors("grocery item", "deleting")
def delete_grocery_item(session: Session, item_id: int) -> ServiceResponse:
    """Delete an item and every link that refers to it."""

    item = session.get(GroceryItemORM, item_id)
    if item is None:
        return ServiceResponse.not_found(
            "Grocery item cannot be deleted because it does not exist."
        )

    links = (
        session.execute(select(LinkORM).where(LinkORM.grocery_item_id == item_id)).scalars().all()
    )
    for link in links:
        session.delete(link)
    if failure := flush_or_report(
        session, GroceryItemORM, item_id, "grocery item", action="deleting"
    ):
        return failure

    session.delete(item)
    if failure := flush_or_report(
        session, GroceryItemORM, item_id, "grocery item", action="deleting"
    ):
        return failure

    logger.info("Deleted grocery item %s", item_id)
    return ServiceResponse.deleted()


__all__ = [
    "list_grocery_items",
    "find_grocery_item",
    "get_grocery_item",
    "update_grocery_item",
    "delete_grocery_item",
]
