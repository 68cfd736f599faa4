"""Shared pytest fixtures for the SplitBasket test suite."""

from __future__ import annotations

from datetime import date
from typing import Callable, Generator, Iterable, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from splitbasket.config import get_settings
from splitbasket.db.members import add_member
from splitbasket.db.repository import reset_repository_state, session_scope
from splitbasket.engine.linking import add_grocery_item, add_purchase_with_items
from splitbasket.models.responses import ServiceStatus
from splitbasket.server.app import create_app


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database location."""

    db_path = tmp_path / "test_splitbasket.db"
    monkeypatch.setenv("SPLITBASKET_DATABASE_PATH", str(db_path))
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("SPLITBASKET_DATABASE_PATH", raising=False)
    get_settings.cache_clear()


@pytest.fixture()
def app() -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


@pytest.fixture()
def make_member() -> Callable[..., int]:
    """Add a member in its own transaction and return the new id."""

    def _make(name: str = "Dhruv", email: Optional[str] = None) -> int:
        with session_scope() as session:
            result = add_member(session, name=name, email=email or f"{name.lower()}@example.com")
        assert result.status is ServiceStatus.CREATED, result.messages
        return result.created_id

    return _make


@pytest.fixture()
def make_item() -> Callable[..., int]:
    """Register a grocery item (pending unless ``member_id`` is given)."""

    def _make(
        name: str = "Milk",
        quantity: int = 1,
        unit_price: float = 1.0,
        member_id: Optional[int] = None,
    ) -> int:
        with session_scope() as session:
            result = add_grocery_item(
                session,
                name=name,
                quantity=quantity,
                unit_price=unit_price,
                member_id=member_id,
            )
        assert result.status is ServiceStatus.CREATED, result.messages
        return result.created_id

    return _make


@pytest.fixture()
def make_purchase() -> Callable[..., int]:
    """Create a purchase absorbing the given items and return its id."""

    def _make(member_id: int, item_ids: Iterable[int], purchased_on: date = date(2025, 2, 2)) -> int:
        with session_scope() as session:
            result = add_purchase_with_items(
                session,
                member_id=member_id,
                date_purchased=purchased_on,
                item_ids=list(item_ids),
            )
        assert result.status is ServiceStatus.CREATED, result.messages
        return result.created_id

    return _make
