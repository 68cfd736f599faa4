"""Link persistence helpers."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from splitbasket.models.link import Link
from splitbasket.models.responses import ServiceResponse

from .models import LinkORM
from .writes import flush_or_report, reports_store_errors

logger = logging.getLogger(__name__)


def _to_model(row: LinkORM) -> Link:
    return Link.model_validate(
        {
            "id": row.id,
            "grocery_item_id": row.grocery_item_id,
            "purchase_id": row.purchase_id,
        }
    )


def list_links(session: Session) -> List[Link]:
    """Return every link, pending and bought, oldest first."""

    rows = session.execute(select(LinkORM).order_by(LinkORM.id.asc())).scalars().all()
    return [_to_model(row) for row in rows]


def get_link(session: Session, link_id: int) -> Optional[Link]:
    row = session.get(LinkORM, link_id)
    if row is None:
        return None
    return _to_model(row)


def pending_link_for(session: Session, item_id: int) -> Optional[LinkORM]:
    """Return the pending link of an item, if it has one."""

    return (
        session.execute(
            select(LinkORM)
            .where(LinkORM.grocery_item_id == item_id, LinkORM.purchase_id.is_(None))
            .order_by(LinkORM.id.asc())
            .limit(1)
        )
        .scalars()
        .first()
    )


def link_for_pair(session: Session, item_id: int, purchase_id: int) -> Optional[LinkORM]:
    return (
        session.execute(
            select(LinkORM)
            .where(LinkORM.grocery_item_id == item_id, LinkORM.purchase_id == purchase_id)
            .limit(1)
        )
        .scalars()
        .first()
    )


def release_purchase_links(session: Session, purchase_ids: Iterable[int]) -> int:
    """Return items bought by the given purchases to the pending pool.

    Each bound link has its purchase reference cleared. An item that already has
    a pending link keeps that one and the bound link is dropped, so an item never
    ends up with two pending links. Returns the number of items released; the
    caller records the transitions once its flush succeeds.
    """

    ids = list(purchase_ids)
    if not ids:
        return 0

    rows = (
        session.execute(
            select(LinkORM).where(LinkORM.purchase_id.in_(ids)).order_by(LinkORM.id.asc())
        )
        .scalars()
        .all()
    )
    released: set[int] = set()
    for row in rows:
        item_id = row.grocery_item_id
        if item_id in released or pending_link_for(session, item_id) is not None:
            session.delete(row)
        else:
            row.purchase_id = None
        released.add(item_id)

    logger.debug("Releasing %s item(s) from purchase(s) %s back to pending", len(released), ids)
    return len(released)


@reports_store_errors("link", "deleting")
def delete_link(session: Session, link_id: int) -> ServiceResponse:
    row = session.get(LinkORM, link_id)
    if row is None:
        return ServiceResponse.not_found(f"Link with ID {link_id} not found.")

    session.delete(row)
    if failure := flush_or_report(session, LinkORM, link_id, "link", action="deleting"):
        return failure
    return ServiceResponse.deleted()


__all__ = [
    "list_links",
    "get_link",
    "pending_link_for",
    "link_for_pair",
    "release_purchase_links",
    "delete_link",
]
