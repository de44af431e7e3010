"""Application settings for the match ledger.

Environment variables are loaded from a ``.env`` file using ``python-dotenv``
and exposed through a Pydantic settings object.
"""

from __future__ import annotations

import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from a .env file if present
load_dotenv()

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DEFAULT_DB_PATH = os.path.join("data", "matchday.sqlite3")
DEFAULT_LOCK_TIMEZONE = "Europe/London"
DEFAULT_SESSION_TTL = 12 * 60 * 60  # seconds
_TRUE_SET = {"1", "true", "yes", "on"}
# Player league points per result
DEFAULT_POINTS_WIN = 1
DEFAULT_POINTS_DRAW = 1
DEFAULT_POINTS_LOSS = 0


class Settings(BaseModel):
    """Immutable settings object used across the application."""

    db_path: str = DEFAULT_DB_PATH
    lock_timezone: str = DEFAULT_LOCK_TIMEZONE
    session_secret: str = Field(..., min_length=1)
    session_ttl_seconds: int = Field(default=DEFAULT_SESSION_TTL, gt=0)
    reconcile_aggregates_on_edit: bool = False
    points_win: int = DEFAULT_POINTS_WIN
    points_draw: int = DEFAULT_POINTS_DRAW
    points_loss: int = DEFAULT_POINTS_LOSS

    model_config = ConfigDict(frozen=True)

    @field_validator("lock_timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {v}") from exc
        return v


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc


def _build_settings() -> Settings:
    """Construct the ``Settings`` instance based on environment variables."""

    secret = os.getenv("MATCHDAY_SESSION_SECRET")
    if not secret:
        raise RuntimeError("MATCHDAY_SESSION_SECRET is required to sign admin sessions")

    reconcile = os.getenv("MATCHDAY_RECONCILE_AGGREGATES", "false").strip().lower() in _TRUE_SET

    return Settings(
        db_path=os.getenv("MATCHDAY_DB_PATH", DEFAULT_DB_PATH),
        lock_timezone=os.getenv("MATCHDAY_LOCK_TIMEZONE", DEFAULT_LOCK_TIMEZONE),
        session_secret=secret,
        session_ttl_seconds=_int_env("MATCHDAY_SESSION_TTL_SECONDS", DEFAULT_SESSION_TTL),
        reconcile_aggregates_on_edit=reconcile,
        points_win=_int_env("MATCHDAY_POINTS_WIN", DEFAULT_POINTS_WIN),
        points_draw=_int_env("MATCHDAY_POINTS_DRAW", DEFAULT_POINTS_DRAW),
        points_loss=_int_env("MATCHDAY_POINTS_LOSS", DEFAULT_POINTS_LOSS),
    )


# Public settings instance
settings = _build_settings()
