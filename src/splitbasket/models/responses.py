"""Uniform result envelope returned by mutating operations."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ServiceStatus(str, Enum):
    """Outcome of a store or engine operation."""

    NOT_FOUND = "NotFound"
    CREATED = "Created"
    UPDATED = "Updated"
    DELETED = "Deleted"
    ERROR = "Error"
    SUCCESS = "Success"


class ServiceResponse(BaseModel):
    """Status, optional created id and human-readable messages."""

    status: ServiceStatus
    created_id: Optional[int] = Field(default=None)
    messages: List[str] = Field(default_factory=list)

    @classmethod
    def created(cls, created_id: int, *messages: str) -> "ServiceResponse":
        return cls(status=ServiceStatus.CREATED, created_id=created_id, messages=list(messages))

    @classmethod
    def updated(cls, *messages: str) -> "ServiceResponse":
        return cls(status=ServiceStatus.UPDATED, messages=list(messages))

    @classmethod
    def deleted(cls, *messages: str) -> "ServiceResponse":
        return cls(status=ServiceStatus.DELETED, messages=list(messages))

    @classmethod
    def not_found(cls, *messages: str) -> "ServiceResponse":
        return cls(status=ServiceStatus.NOT_FOUND, messages=list(messages))

    @classmethod
    def error(cls, *messages: str) -> "ServiceResponse":
        return cls(status=ServiceStatus.ERROR, messages=list(messages))

    @property
    def ok(self) -> bool:
        return self.status not in (ServiceStatus.NOT_FOUND, ServiceStatus.ERROR)


__all__ = ["ServiceResponse", "ServiceStatus"]
