"""Member persistence helpers."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from splitbasket import metrics
from splitbasket.models.member import Member
from splitbasket.models.responses import ServiceResponse

from .links import release_purchase_links
from .models import GroceryItemORM, LinkORM, MemberORM, PurchaseORM
from .writes import flush_or_report, reports_store_errors

logger = logging.getLogger(__name__)

_UNSET = object()


def _to_model(row: MemberORM) -> Member:
    return Member.model_validate({"id": row.id, "name": row.name, "email": row.email})


def get_member(session: Session, member_id: int) -> Optional[Member]:
    row = session.get(MemberORM, member_id)
    if row is None:
        return None
    return _to_model(row)


@reports_store_errors("member", "adding")
def add_member(session: Session, *, name: str, email: str) -> ServiceResponse:
    member = MemberORM(name=name.strip(), email=email.strip())
    session.add(member)
    if failure := flush_or_report(session, MemberORM, None, "member", action="adding"):
        return failure

    logger.info("Added member %s", member.id)
    return ServiceResponse.created(member.id)


@reports_store_errors("member", "updating")
def update_member(
    session: Session,
    member_id: int,
    *,
    body_id: Optional[int] = None,
    name: str | object = _UNSET,
    email: str | object = _UNSET,
) -> ServiceResponse:
    if body_id is not None and body_id != member_id:
        return ServiceResponse.error("Member ID mismatch.")

    member = session.get(MemberORM, member_id)
    if member is None:
        return ServiceResponse.not_found("Member not found.")

    if name is not _UNSET:
        member.name = str(name).strip()
    if email is not _UNSET:
        member.email = str(email).strip()

    if failure := flush_or_report(session, MemberORM, member_id, "member"):
        return failure
    return ServiceResponse.updated(f"Member {member_id} updated successfully.")


@reports_store_errors("member", "deleting")
def delete_member(session: Session, member_id: int) -> ServiceResponse:
    """Delete a member together with their purchases.

    Items bought through those purchases return to the pending pool.
    """

    member = session.get(MemberORM, member_id)
    if member is None:
        return ServiceResponse.not_found("Member cannot be deleted because it does not exist.")

    purchases = (
        session.execute(select(PurchaseORM).where(PurchaseORM.member_id == member_id))
        .scalars()
        .all()
    )
    released = release_purchase_links(session, [purchase.id for purchase in purchases])
    if failure := flush_or_report(session, MemberORM, member_id, "member", action="deleting"):
        return failure

    for purchase in purchases:
        session.delete(purchase)
    if failure := flush_or_report(session, MemberORM, member_id, "member", action="deleting"):
        return failure

    session.delete(member)
    if failure := flush_or_report(session, MemberORM, member_id, "member", action="deleting"):
        return failure

    metrics.ITEM_TRANSITIONS.labels(transition="reverted").inc(released)

    logger.info("Deleted member %s and %s purchase(s)", member_id, len(purchases))
    return ServiceResponse.deleted()


def list_member_items(session: Session, member_id: int) -> Optional[List[str]]:
    """Return the names of items bought by a member, or None for an unknown member."""

    if session.get(MemberORM, member_id) is None:
        return None

    rows = session.execute(
        select(GroceryItemORM.id, GroceryItemORM.name)
        .join(LinkORM, LinkORM.grocery_item_id == GroceryItemORM.id)
        .join(PurchaseORM, PurchaseORM.id == LinkORM.purchase_id)
        .where(PurchaseORM.member_id == member_id)
        .distinct()
        .order_by(GroceryItemORM.id.asc())
    ).all()
    return [name for _, name in rows]


__all__ = [
    "get_member",
    "add_member",
    "update_member",
    "delete_member",
    "list_member_items",
]
