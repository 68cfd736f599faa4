"""Write helpers shared by the store modules and engines."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from splitbasket import metrics
from splitbasket.models.responses import ServiceResponse

from .models import Base

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., ServiceResponse])


def row_exists(session: Session, orm_cls: Type[Base], row_id: int) -> bool:
    """Return True when a row with ``row_id`` is visible to the session."""

    return (
        session.execute(select(orm_cls.id).where(orm_cls.id == row_id)).scalar_one_or_none()
        is not None
    )


def flush_or_report(
    session: Session,
    orm_cls: Type[Base],
    row_id: Optional[int],
    label: str,
    *,
    action: str = "updating",
) -> Optional[ServiceResponse]:
    """Flush pending writes, translating store failures into an error envelope.

    Returns None when the flush succeeded. A stale write rolls the transaction
    back and is re-checked once: a row that no longer exists yields NotFound,
    a row that was merely changed yields Error. Nothing is retried.
    """

    try:
        session.flush()
    except StaleDataError:
        session.rollback()
        metrics.STORE_CONFLICTS.labels(entity=orm_cls.__tablename__).inc()
        if row_id is not None and not row_exists(session, orm_cls, row_id):
            logger.warning("Conflict on %s %s: row removed concurrently", label, row_id)
            return ServiceResponse.not_found(
                f"{label.capitalize()} not found after concurrency check."
            )
        logger.warning("Conflict on %s %s: row changed concurrently", label, row_id)
        return ServiceResponse.error(f"An error occurred while {action} the {label}.")
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning("Store error while %s %s %s: %s", action, label, row_id, exc)
        return ServiceResponse.error(f"There was an error {action} the {label}.", str(exc))
    return None


def reports_store_errors(label: str, action: str) -> Callable[[F], F]:
    """Report store failures raised outside ``flush_or_report`` as an ``Error`` envelope.

    Wraps operations taking the session as their first argument, so lookups
    made before the first write (a locked database, a dropped connection) end
    the same way a failed flush does.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(session: Session, *args: Any, **kwargs: Any) -> ServiceResponse:
            try:
                return func(session, *args, **kwargs)
            except SQLAlchemyError as exc:
                session.rollback()
                logger.warning("Store error while %s %s: %s", action, label, exc)
                return ServiceResponse.error(f"There was an error {action} the {label}.", str(exc))

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = ["flush_or_report", "reports_store_errors", "row_exists"]
