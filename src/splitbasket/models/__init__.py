"""Pydantic models defining shared data contracts."""

from splitbasket.models.grocery import GroceryItem, GroceryItemDetail
from splitbasket.models.link import Bought, Link, LinkState, Pending
from splitbasket.models.member import Ledger, Member, MemberBalance
from splitbasket.models.purchase import Purchase, PurchaseHistory
from splitbasket.models.responses import ServiceResponse, ServiceStatus

__all__ = [
    "GroceryItem",
    "GroceryItemDetail",
    "Bought",
    "Link",
    "LinkState",
    "Pending",
    "Ledger",
    "Member",
    "MemberBalance",
    "Purchase",
    "PurchaseHistory",
    "ServiceResponse",
    "ServiceStatus",
]
