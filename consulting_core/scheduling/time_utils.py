"""Wall-clock arithmetic for booking slots."""

import re
from typing import Optional

from consulting_core.schemas.booking_schema import TimeSlot

# ASCII digits only: no underscores, no other scripts. Range is not checked.
_TIME_PART = re.compile(r"[+-]?[0-9]+")


def parse_time_to_minutes(value: Optional[str]) -> Optional[int]:
    """Convert an ``HH:MM`` string to minutes since midnight.

    Returns None for empty or malformed input instead of raising, so a
    single bad record never aborts a whole conflict check.

    Examples:
        >>> parse_time_to_minutes("10:30")
        630
        >>> parse_time_to_minutes("10h30") is None
        True
    """
    if not value:
        return None

    parts = [part.strip() for part in value.split(":")]
    if len(parts) != 2 or not all(_TIME_PART.fullmatch(part) for part in parts):
        return None

    hours, minutes = (int(part) for part in parts)
    return hours * 60 + minutes


def build_slot(start_minutes: int, duration_minutes: int) -> TimeSlot:
    """Build the half-open slot starting at ``start_minutes``."""
    return TimeSlot(start_minutes=start_minutes, end_minutes=start_minutes + duration_minutes)


def format_minutes(minutes: int) -> str:
    """Render minutes since midnight back to ``HH:MM``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
