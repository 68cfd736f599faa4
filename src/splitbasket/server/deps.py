"""Dependency definitions for the SplitBasket API server."""

from __future__ import annotations

from typing import Callable, ContextManager

from sqlalchemy.orm import Session

from splitbasket.db.repository import session_scope

StoreFactory = Callable[[], ContextManager[Session]]


def get_store() -> StoreFactory:
    """Return the factory that opens one store transaction per request.

    Handlers pass the yielded session explicitly into every engine call; tests
    may override this dependency to point handlers at a different store.
    """

    return session_scope
