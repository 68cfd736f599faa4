"""Purchase persistence helpers.

Deleting a purchase is a linking transition and lives in
``splitbasket.engine.linking``; purchase history views live in
``splitbasket.engine.history``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from splitbasket.models.purchase import Purchase
from splitbasket.models.responses import ServiceResponse

from .models import MemberORM, PurchaseORM
from .writes import flush_or_report, reports_store_errors, row_exists

logger = logging.getLogger(__name__)

_UNSET = object()


def _to_model(row: PurchaseORM) -> Purchase:
    return Purchase.model_validate(
        {
            "id": row.id,
            "date_purchased": row.date_purchased,
            "member_id": row.member_id,
        }
    )


def get_purchase(session: Session, purchase_id: int) -> Optional[Purchase]:
    row = session.get(PurchaseORM, purchase_id)
    if row is None:
        return None
    return _to_model(row)


@reports_store_errors("purchase", "adding")
def add_purchase(session: Session, *, member_id: int, date_purchased: date) -> ServiceResponse:
    if not row_exists(session, MemberORM, member_id):
        return ServiceResponse.error("Invalid member id.")

    purchase = PurchaseORM(member_id=member_id, date_purchased=date_purchased)
    session.add(purchase)
    if failure := flush_or_report(session, PurchaseORM, None, "purchase", action="adding"):
        return failure

    logger.info("Added purchase %s for member %s", purchase.id, member_id)
    return ServiceResponse.created(purchase.id)


@reports_store_errors("purchase", "updating")
def update_purchase(
    session: Session,
    purchase_id: int,
    *,
    body_id: Optional[int] = None,
    member_id: int | object = _UNSET,
    date_purchased: date | object = _UNSET,
) -> ServiceResponse:
    if body_id is not None and body_id != purchase_id:
        return ServiceResponse.error("Purchase ID mismatch.")

    purchase = session.get(PurchaseORM, purchase_id)
    if purchase is None:
        return ServiceResponse.not_found("Purchase not found.")

    if member_id is not _UNSET:
        if not row_exists(session, MemberORM, member_id):  # type: ignore[arg-type]
            return ServiceResponse.error("Invalid member id.")
        purchase.member_id = member_id  # type: ignore[assignment]
    if date_purchased is not _UNSET:
        purchase.date_purchased = date_purchased  # type: ignore[assignment]

    if failure := flush_or_report(session, PurchaseORM, purchase_id, "purchase"):
        return failure
    return ServiceResponse.updated(f"Purchase {purchase_id} updated successfully.")


__all__ = ["get_purchase", "add_purchase", "update_purchase"]
