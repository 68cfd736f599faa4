"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    database_path: Path = Field(
        default=Path("./data/splitbasket.db"),
        description="SQLite database location.",
    )
    database_timeout: float = Field(
        default=5.0,
        description="Seconds a write waits on a locked database before failing.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs when true.",
    )
    log_redact_emails: bool = Field(
        default=True,
        description="Mask member email addresses in log output when true.",
    )

    model_config = ConfigDict(frozen=True)


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (db_path := _env("SPLITBASKET_DATABASE_PATH")):
        payload["database_path"] = Path(db_path)
    if (db_timeout := _env("SPLITBASKET_DATABASE_TIMEOUT")):
        try:
            payload["database_timeout"] = float(db_timeout)
        except ValueError:
            pass
    if (log_level := _env("SPLITBASKET_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("SPLITBASKET_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (log_requests := _env("SPLITBASKET_LOG_REQUESTS")):
        payload["log_requests"] = _coerce_bool(log_requests)
    if (redact_emails := _env("SPLITBASKET_LOG_REDACT_EMAILS")):
        payload["log_redact_emails"] = _coerce_bool(redact_emails)
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
