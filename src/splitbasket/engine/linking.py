"""Grocery item lifecycle: pending items, purchases that absorb them, and reverts.

An item is *pending* while it has a link without a purchase reference and
*bought* once a link carries one. Every operation here receives the store
session of the current request, validates every referenced id before writing,
and reports its outcome as a ``ServiceResponse``. A store failure part-way
through rolls the whole transaction back, so a caller never observes a
purchase with only some of its items linked.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from splitbasket import metrics
from splitbasket.db.links import link_for_pair, pending_link_for, release_purchase_links
from splitbasket.db.models import GroceryItemORM, LinkORM, MemberORM, PurchaseORM
from splitbasket.db.writes import flush_or_report, reports_store_errors, row_exists
from splitbasket.models.grocery import GroceryItem
from splitbasket.models.responses import ServiceResponse

logger = logging.getLogger(__name__)


def _unique(ids: Iterable[int]) -> List[int]:
    seen: set[int] = set()
    ordered: List[int] = []
    for value in ids:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def _missing_item_ids(session: Session, item_ids: Sequence[int]) -> List[int]:
    if not item_ids:
        return []
    found = set(
        session.execute(select(GroceryItemORM.id).where(GroceryItemORM.id.in_(item_ids))).scalars()
    )
    return [item_id for item_id in item_ids if item_id not in found]


def _record(transitions: Iterable[str]) -> None:
    for transition in transitions:
        metrics.ITEM_TRANSITIONS.labels(transition=transition).inc()


def _bind(session: Session, item_id: int, purchase_id: int) -> Tuple[LinkORM, str]:
    """Attribute an item to a purchase, consuming its pending link when present.

    Returns the link together with the transition to record once it is flushed.
    """

    pending = pending_link_for(session, item_id)
    if pending is not None:
        pending.purchase_id = purchase_id
        return pending, "absorbed"

    link = LinkORM(grocery_item_id=item_id, purchase_id=purchase_id)
    session.add(link)
    return link, "bought"


@reports_store_errors("grocery item", "adding")
def add_grocery_item(
    session: Session,
    *,
    name: str,
    quantity: int,
    unit_price: float,
    member_id: Optional[int] = None,
    date_purchased: Optional[date] = None,
) -> ServiceResponse:
    """Register a new grocery item.

    With ``member_id`` the item is recorded as already bought by that member
    through a fresh purchase dated ``date_purchased`` (today by default).
    Without it the item joins the pending pool.
    """

    if member_id is not None and not row_exists(session, MemberORM, member_id):
        return ServiceResponse.not_found(f"Member with ID {member_id} not found.")

    item = GroceryItemORM(name=name.strip(), quantity=quantity, unit_price=unit_price)
    session.add(item)
    if failure := flush_or_report(session, GroceryItemORM, None, "grocery item", action="adding"):
        return failure

    if member_id is None:
        session.add(LinkORM(grocery_item_id=item.id, purchase_id=None))
        transition = "created_pending"
    else:
        purchase = PurchaseORM(member_id=member_id, date_purchased=date_purchased or date.today())
        session.add(purchase)
        if failure := flush_or_report(session, PurchaseORM, None, "grocery item", action="adding"):
            return failure
        _, transition = _bind(session, item.id, purchase.id)

    if failure := flush_or_report(session, LinkORM, None, "grocery item", action="adding"):
        return failure

    _record([transition])

    logger.info(
        "Added grocery item %s (%s)",
        item.id,
        "pending" if member_id is None else f"bought by member {member_id}",
    )
    return ServiceResponse.created(item.id)


@reports_store_errors("link", "adding")
def mark_item_pending(session: Session, item_id: int) -> ServiceResponse:
    """Put an existing item back on the wish list."""

    if not row_exists(session, GroceryItemORM, item_id):
        return ServiceResponse.not_found(f"Grocery item with ID {item_id} not found.")
    if pending_link_for(session, item_id) is not None:
        return ServiceResponse.error(f"Grocery item {item_id} is already pending.")

    link = LinkORM(grocery_item_id=item_id, purchase_id=None)
    session.add(link)
    if failure := flush_or_report(session, LinkORM, None, "link", action="adding"):
        return failure

    _record(["created_pending"])
    logger.info("Grocery item %s marked pending", item_id)
    return ServiceResponse.created(link.id)


def list_pending_items(session: Session) -> List[GroceryItem]:
    """Return every item that is still waiting to be bought."""

    rows = (
        session.execute(
            select(GroceryItemORM)
            .join(LinkORM, LinkORM.grocery_item_id == GroceryItemORM.id)
            .where(LinkORM.purchase_id.is_(None))
            .distinct()
            .order_by(GroceryItemORM.id.asc())
        )
        .scalars()
        .all()
    )
    return [
        GroceryItem(id=row.id, name=row.name, quantity=row.quantity, unit_price=row.unit_price)
        for row in rows
    ]


@reports_store_errors("purchase", "adding")
def add_purchase_with_items(
    session: Session,
    *,
    member_id: int,
    date_purchased: date,
    item_ids: Iterable[int],
) -> ServiceResponse:
    """Create a purchase for a member and attribute the given items to it.

    Either the purchase and all of its links are written, or nothing is.
    """

    wanted = _unique(item_ids)
    if not row_exists(session, MemberORM, member_id):
        return ServiceResponse.not_found(f"Member with ID {member_id} not found.")
    missing = _missing_item_ids(session, wanted)
    if missing:
        return ServiceResponse.not_found(
            "Grocery item(s) not found: " + ", ".join(str(item_id) for item_id in missing) + "."
        )

    purchase = PurchaseORM(member_id=member_id, date_purchased=date_purchased)
    session.add(purchase)
    if failure := flush_or_report(session, PurchaseORM, None, "purchase", action="adding"):
        return failure

    transitions = [_bind(session, item_id, purchase.id)[1] for item_id in wanted]
    if failure := flush_or_report(session, LinkORM, None, "purchase", action="adding"):
        return failure

    _record(transitions)

    logger.info(
        "Purchase %s by member %s absorbed %s item(s)", purchase.id, member_id, len(wanted)
    )
    return ServiceResponse.created(purchase.id)


@reports_store_errors("purchase", "deleting")
def delete_purchase(session: Session, purchase_id: int) -> ServiceResponse:
    """Delete a purchase after returning its items to the pending pool."""

    purchase = session.get(PurchaseORM, purchase_id)
    if purchase is None:
        return ServiceResponse.not_found("Purchase not found.")

    released = release_purchase_links(session, [purchase_id])
    if failure := flush_or_report(session, PurchaseORM, purchase_id, "purchase", action="deleting"):
        return failure

    session.delete(purchase)
    if failure := flush_or_report(session, PurchaseORM, purchase_id, "purchase", action="deleting"):
        return failure

    _record(["reverted"] * released)

    logger.info("Deleted purchase %s", purchase_id)
    return ServiceResponse.deleted("Purchase deleted successfully.")


@reports_store_errors("link", "adding")
def link_item(session: Session, item_id: int, purchase_id: int) -> ServiceResponse:
    """Attribute an existing item to an existing purchase."""

    if not row_exists(session, GroceryItemORM, item_id):
        return ServiceResponse.not_found(f"Grocery item with ID {item_id} not found.")
    if not row_exists(session, PurchaseORM, purchase_id):
        return ServiceResponse.not_found(f"Purchase with ID {purchase_id} not found.")
    if link_for_pair(session, item_id, purchase_id) is not None:
        return ServiceResponse.error(
            f"Grocery item {item_id} is already linked to purchase {purchase_id}."
        )

    link, transition = _bind(session, item_id, purchase_id)
    if failure := flush_or_report(session, LinkORM, link.id, "link", action="adding"):
        return failure

    _record([transition])

    logger.info("Linked grocery item %s to purchase %s", item_id, purchase_id)
    return ServiceResponse.created(link.id)


@reports_store_errors("link", "deleting")
def unlink_item(session: Session, item_id: int, purchase_id: int) -> ServiceResponse:
    """Remove the link between an item and a purchase outright."""

    link = link_for_pair(session, item_id, purchase_id)
    if link is None:
        return ServiceResponse.not_found(
            f"No link between grocery item {item_id} and purchase {purchase_id}."
        )

    link_id = link.id
    session.delete(link)
    if failure := flush_or_report(session, LinkORM, link_id, "link", action="deleting"):
        return failure

    _record(["unlinked"])
    logger.info("Unlinked grocery item %s from purchase %s", item_id, purchase_id)
    return ServiceResponse.deleted()


@reports_store_errors("link", "updating")
def update_link(
    session: Session,
    link_id: int,
    *,
    grocery_item_id: int,
    purchase_id: Optional[int],
    body_id: Optional[int] = None,
) -> ServiceResponse:
    """Rebind a link to another item/purchase, or back to pending with ``purchase_id=None``."""

    if body_id is not None and body_id != link_id:
        return ServiceResponse.error("Link ID mismatch.")

    link = session.get(LinkORM, link_id)
    if link is None:
        return ServiceResponse.not_found(f"Link with ID {link_id} not found.")
    if not row_exists(session, GroceryItemORM, grocery_item_id):
        return ServiceResponse.not_found(f"Grocery item with ID {grocery_item_id} not found.")

    if purchase_id is None:
        pending = pending_link_for(session, grocery_item_id)
        if pending is not None and pending.id != link_id:
            return ServiceResponse.error(f"Grocery item {grocery_item_id} is already pending.")
    else:
        if not row_exists(session, PurchaseORM, purchase_id):
            return ServiceResponse.not_found(f"Purchase with ID {purchase_id} not found.")
        existing = link_for_pair(session, grocery_item_id, purchase_id)
        if existing is not None and existing.id != link_id:
            return ServiceResponse.error(
                f"Grocery item {grocery_item_id} is already linked to purchase {purchase_id}."
            )

    was_bought = link.purchase_id is not None
    link.grocery_item_id = grocery_item_id
    link.purchase_id = purchase_id
    if failure := flush_or_report(session, LinkORM, link_id, "link"):
        return failure

    if was_bought and purchase_id is None:
        _record(["reverted"])
    elif not was_bought and purchase_id is not None:
        _record(["absorbed"])
    return ServiceResponse.updated(f"Link {link_id} updated successfully.")


__all__ = [
    "add_grocery_item",
    "mark_item_pending",
    "list_pending_items",
    "add_purchase_with_items",
    "delete_purchase",
    "link_item",
    "unlink_item",
    "update_link",
]
