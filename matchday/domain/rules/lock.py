"""Edit-lock boundary rules.

A match becomes read-only for non-admins at the first local midnight after
the day it was played. Local time defaults to the UK (``Europe/London``), so
the boundary moves with the BST/GMT clock changes.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo

LOCK_TIMEZONE = "Europe/London"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string or datetime into an aware UTC datetime.

    Naive values are taken as UTC. Returns ``None`` when the value is missing
    or cannot be parsed.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError:
        # Offsets can push edge-of-range values past datetime.max
        return None


def compute_lock_at(base: datetime, tz: tzinfo | str = LOCK_TIMEZONE) -> datetime:
    """Return the UTC instant of local midnight that ends ``base``'s local day.

    The target wall-clock time is resolved with the UTC offset in effect at
    the target itself, not at ``base``. Raises ``OverflowError`` when the
    following day falls outside the supported date range.
    """
    zone = ZoneInfo(tz) if isinstance(tz, str) else tz
    if base.tzinfo is None:
        base = base.replace(tzinfo=timezone.utc)
    local_day = base.astimezone(zone).date()
    target = datetime.combine(local_day + timedelta(days=1), time(0, 0), tzinfo=zone)
    return target.astimezone(timezone.utc)


def is_locked(lock_at: Optional[datetime], now: datetime, *, admin: bool = False) -> bool:
    """Return True if a match with ``lock_at`` is read-only for the caller at ``now``."""
    if admin:
        return False
    if lock_at is None:
        return False
    return now > lock_at
