"""Purchase history projections."""

from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from splitbasket.db.models import GroceryItemORM, LinkORM, MemberORM, PurchaseORM
from splitbasket.models.purchase import PurchaseHistory


def _history_query():
    return (
        select(
            PurchaseORM.id,
            PurchaseORM.date_purchased,
            MemberORM.name,
            GroceryItemORM.name,
            GroceryItemORM.quantity,
            GroceryItemORM.unit_price,
        )
        .select_from(PurchaseORM)
        .join(MemberORM, MemberORM.id == PurchaseORM.member_id)
        .outerjoin(LinkORM, LinkORM.purchase_id == PurchaseORM.id)
        .outerjoin(GroceryItemORM, GroceryItemORM.id == LinkORM.grocery_item_id)
        .order_by(PurchaseORM.id.asc(), LinkORM.id.asc())
    )


def _collect(rows) -> List[PurchaseHistory]:
    grouped: Dict[int, dict] = {}
    for purchase_id, date_purchased, member_name, item_name, quantity, unit_price in rows:
        entry = grouped.setdefault(
            purchase_id,
            {
                "purchase_id": purchase_id,
                "date_purchased": date_purchased,
                "member_name": member_name,
                "item_names": [],
                "total_amount": 0.0,
            },
        )
        if item_name is not None:
            entry["item_names"].append(item_name)
            entry["total_amount"] += quantity * unit_price
    return [PurchaseHistory.model_validate(entry) for entry in grouped.values()]


def list_purchase_history(session: Session) -> List[PurchaseHistory]:
    """Return every purchase with its payer, item names and total."""

    return _collect(session.execute(_history_query()).all())


def find_purchase_history(session: Session, purchase_id: int) -> Optional[PurchaseHistory]:
    rows = session.execute(_history_query().where(PurchaseORM.id == purchase_id)).all()
    history = _collect(rows)
    return history[0] if history else None


__all__ = ["find_purchase_history", "list_purchase_history"]
