"""
Weekly availability resolution for consultants.

A consultant publishes a list of ``{day, active}`` entries. The scheduler
only needs to know whether the candidate date falls on an active weekday.
"""

import logging
from datetime import date

from consulting_core.schemas.booking_schema import Consultant, DayAvailability, Weekday

logger = logging.getLogger(__name__)

# Indexed by date.weekday() (Monday == 0)
_WEEKDAYS_FROM_MONDAY: tuple[Weekday, ...] = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
)


def weekday_of(value: date) -> Weekday:
    """Map a calendar date to its weekday bucket."""
    return _WEEKDAYS_FROM_MONDAY[value.weekday()]


def check_day_availability(consultant: Consultant, booking_date: date) -> DayAvailability:
    """Decide whether the consultant works on the weekday of ``booking_date``.

    A consultant without any configured availability is treated as
    available every day.
    """
    weekday = weekday_of(booking_date)

    if not consultant.availability:
        return DayAvailability(available=True, weekday=weekday)

    available = any(
        entry.day == weekday and entry.active for entry in consultant.availability
    )
    if not available:
        logger.debug(
            "Consultant %s does not work on %s (%s)",
            consultant.id, weekday.value, booking_date.isoformat(),
        )
    return DayAvailability(available=available, weekday=weekday)
