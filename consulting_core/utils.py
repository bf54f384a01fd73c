"""Shared utilities used across the scheduler and analytics pipeline."""

import math
from datetime import date, datetime, time, timezone
from typing import Any, Optional


def parse_number(value: Any) -> Optional[float]:
    """Coerce a number or numeric string to a finite float.

    Examples:
        >>> parse_number("12.5")
        12.5
        >>> parse_number("abc") is None
        True
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def round_half_up(value: float) -> int:
    """Round .5 away from zero on the positive side, like dashboard figures do.

    Examples:
        >>> round_half_up(2.5)
        3
        >>> round_half_up(-0.5)
        0
    """
    return int(math.floor(value + 0.5))


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def start_of_day_utc(value: date) -> datetime:
    """Midnight UTC of a calendar day."""
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
