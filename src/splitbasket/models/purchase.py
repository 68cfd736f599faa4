"""Purchase models."""

from __future__ import annotations

from datetime import date
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Purchase(BaseModel):
    """A purchase event paid for by a single member."""

    id: int
    date_purchased: date
    member_id: int

    model_config = ConfigDict(frozen=True)


class PurchaseHistory(BaseModel):
    """Purchase projected together with the items it bought."""

    purchase_id: int
    date_purchased: date
    member_name: str
    item_names: List[str] = Field(default_factory=list)
    total_amount: float = Field(default=0.0)

    model_config = ConfigDict(frozen=True)


__all__ = ["Purchase", "PurchaseHistory"]
