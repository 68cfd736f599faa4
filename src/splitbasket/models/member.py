"""Member and ledger models."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Member(BaseModel):
    """Group member who can pay for purchases."""

    id: int
    name: str
    email: str

    model_config = ConfigDict(frozen=True)


class MemberBalance(BaseModel):
    """Paid/owed projection for a single member.

    A positive ``amount_owed`` means the member still has to pay into the pool; a
    negative value means the member is owed a refund.
    """

    member_id: int
    name: str
    email: str
    amount_paid: float = Field(default=0.0)
    amount_owed: float = Field(default=0.0)

    model_config = ConfigDict(frozen=True)


class Ledger(BaseModel):
    """Equal-split ledger across every member."""

    total_spent: float
    fair_share: float
    member_count: int
    balances: List[MemberBalance] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


__all__ = ["Ledger", "Member", "MemberBalance"]
