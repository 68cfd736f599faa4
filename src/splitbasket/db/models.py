"""SQLAlchemy models representing SplitBasket persistence tables.

Relations are plain foreign-key columns; callers resolve them through queries
rather than mapped object references. Every table carries ``version_id`` so that
a write against a row changed or removed by a concurrent transaction fails with
``StaleDataError`` instead of overwriting it.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base class for SplitBasket ORM models."""


class MemberORM(Base):
    """Group member persisted in the database."""

    __tablename__ = "members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (UniqueConstraint("email", name="uq_members_email"),)
    __mapper_args__ = {"version_id_col": version_id}


class GroceryItemORM(Base):
    """Grocery item; cost is quantity times unit price."""

    __tablename__ = "grocery_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    __mapper_args__ = {"version_id_col": version_id}


class PurchaseORM(Base):
    """Purchase event paid for by exactly one member."""

    __tablename__ = "purchases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date_purchased: Mapped[date] = mapped_column(Date, nullable=False)
    member_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True
    )
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}


class LinkORM(Base):
    """Item/purchase association; a null purchase_id marks the item as pending."""

    __tablename__ = "links"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    grocery_item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("grocery_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    purchase_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("purchases.id", ondelete="SET NULL"), nullable=True, index=True
    )
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        Index(
            "uq_links_pending_item",
            "grocery_item_id",
            unique=True,
            sqlite_where=text("purchase_id IS NULL"),
            postgresql_where=text("purchase_id IS NULL"),
        ),
    )
    __mapper_args__ = {"version_id_col": version_id}


__all__ = [
    "Base",
    "MemberORM",
    "GroceryItemORM",
    "PurchaseORM",
    "LinkORM",
]
