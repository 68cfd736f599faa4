"""Grocery item models."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class GroceryItem(BaseModel):
    """Grocery item with its per-unit price."""

    id: int
    name: str
    quantity: int = Field(gt=0)
    unit_price: float = Field(ge=0)

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[misc]
    @property
    def total_amount(self) -> float:
        return self.quantity * self.unit_price


class GroceryItemDetail(GroceryItem):
    """Grocery item annotated with who bought it, if anyone."""

    is_bought: bool = Field(default=False)
    member_name: Optional[str] = Field(default=None)
    date_purchased: Optional[date] = Field(default=None)


__all__ = ["GroceryItem", "GroceryItemDetail"]
