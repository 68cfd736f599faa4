"""Item/purchase link models.

A link's purchase reference is its state: no reference means the item is still
pending, a reference means the item was bought by that purchase.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field


@dataclass(frozen=True)
class Pending:
    """Item is wanted but not yet bought."""


@dataclass(frozen=True)
class Bought:
    """Item was bought as part of ``purchase_id``."""

    purchase_id: int


LinkState = Union[Pending, Bought]


def state_for(purchase_id: Optional[int]) -> LinkState:
    return Pending() if purchase_id is None else Bought(purchase_id)


class Link(BaseModel):
    """Association between one grocery item and at most one purchase."""

    id: int
    grocery_item_id: int
    purchase_id: Optional[int] = Field(default=None)

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[misc]
    @property
    def is_bought(self) -> bool:
        return isinstance(self.state, Bought)

    @property
    def state(self) -> LinkState:
        return state_for(self.purchase_id)


__all__ = ["Bought", "Link", "LinkState", "Pending", "state_for"]
