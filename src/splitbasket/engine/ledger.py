"""Equal-split ledger computation.

Balances are never stored. Every call reads the current purchases and links and
recomputes from scratch:

* ``amount_paid`` is the cost of every item bought through the member's purchases;
* ``fair_share`` is total spend divided evenly across all members;
* ``amount_owed`` is ``fair_share - amount_paid`` (negative means a refund is due).
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from splitbasket.db.models import GroceryItemORM, LinkORM, MemberORM, PurchaseORM
from splitbasket.models.member import Ledger, Member, MemberBalance

logger = logging.getLogger(__name__)

Charge = Tuple[int, float]


def summarize_balances(members: Sequence[Member], charges: Iterable[Charge]) -> Optional[Ledger]:
    """Fold ``(member_id, cost)`` charges into an equal-split ledger.

    Returns None when there are no members, since there is nobody to split
    between. Charges for ids outside ``members`` are ignored.
    """

    if not members:
        return None

    paid: Dict[int, float] = {member.id: 0.0 for member in members}
    for member_id, cost in charges:
        if member_id in paid:
            paid[member_id] += cost

    total_spent = sum(paid.values())
    fair_share = total_spent / len(members)
    balances = [
        MemberBalance(
            member_id=member.id,
            name=member.name,
            email=member.email,
            amount_paid=paid[member.id],
            amount_owed=fair_share - paid[member.id],
        )
        for member in members
    ]
    return Ledger(
        total_spent=total_spent,
        fair_share=fair_share,
        member_count=len(members),
        balances=balances,
    )


def _ledger_rows(session: Session):
    # A single statement so members and charges come from the same snapshot.
    statement = (
        select(
            MemberORM.id,
            MemberORM.name,
            MemberORM.email,
            GroceryItemORM.quantity,
            GroceryItemORM.unit_price,
        )
        .select_from(MemberORM)
        .outerjoin(PurchaseORM, PurchaseORM.member_id == MemberORM.id)
        .outerjoin(LinkORM, LinkORM.purchase_id == PurchaseORM.id)
        .outerjoin(GroceryItemORM, GroceryItemORM.id == LinkORM.grocery_item_id)
        .order_by(MemberORM.id.asc())
    )
    return session.execute(statement).all()


def compute_ledger(session: Session) -> Optional[Ledger]:
    """Return the current ledger, or None when there are no members."""

    members: Dict[int, Member] = {}
    charges: List[Charge] = []
    for member_id, name, email, quantity, unit_price in _ledger_rows(session):
        if member_id not in members:
            members[member_id] = Member(id=member_id, name=name, email=email)
        if quantity is not None and unit_price is not None:
            charges.append((member_id, quantity * unit_price))

    ledger = summarize_balances(list(members.values()), charges)
    if ledger is None:
        logger.debug("Ledger requested with no members")
        return None

    logger.debug(
        "Ledger computed: members=%s total_spent=%.2f fair_share=%.2f",
        ledger.member_count,
        ledger.total_spent,
        ledger.fair_share,
    )
    return ledger


def list_member_balances(session: Session) -> List[MemberBalance]:
    """Return balances for every member (empty when there are none)."""

    ledger = compute_ledger(session)
    return list(ledger.balances) if ledger is not None else []


def find_member_balance(session: Session, member_id: int) -> Optional[MemberBalance]:
    ledger = compute_ledger(session)
    if ledger is None:
        return None
    for balance in ledger.balances:
        if balance.member_id == member_id:
            return balance
    return None


__all__ = [
    "compute_ledger",
    "find_member_balance",
    "list_member_balances",
    "summarize_balances",
]
