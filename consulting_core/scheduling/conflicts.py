"""
Time-slot conflict detection against a consultant's existing bookings.

The caller fetches the bookings; this module only decides. Two slots
``[a, b)`` and ``[c, d)`` conflict iff ``a < d and c < b``, so touching
endpoints never conflict.
"""

import logging
from collections.abc import Iterable
from datetime import date

from consulting_core.scheduling.time_utils import parse_time_to_minutes
from consulting_core.schemas.booking_schema import BookingStatus, ConsultationBooking, TimeSlot

logger = logging.getLogger(__name__)

TERMINAL_STATUSES: frozenset[BookingStatus] = frozenset({
    BookingStatus.CANCELLED,
    BookingStatus.COMPLETED,
    BookingStatus.NO_SHOW,
})


def is_active(booking: ConsultationBooking) -> bool:
    """A booking holds its slot until it reaches a terminal status."""
    return booking.status not in TERMINAL_STATUSES


def slots_overlap(first: TimeSlot, second: TimeSlot) -> bool:
    return first.start_minutes < second.end_minutes and second.start_minutes < first.end_minutes


def check_booking_conflict(
    consultant_id: int,
    booking_date: date,
    slot: TimeSlot,
    duration_minutes: int,
    existing_bookings: Iterable[ConsultationBooking],
) -> bool:
    """Return True if the candidate slot overlaps an active booking that day.

    An existing booking without a positive stored duration is assumed to
    last ``duration_minutes`` (the candidate's duration).
    """
    for booking in existing_bookings:
        if booking.consultant_id != consultant_id or booking.scheduled_date != booking_date:
            continue

        existing_start = parse_time_to_minutes(booking.scheduled_time)
        if existing_start is None:
            logger.debug(
                "Skipping booking %s with unparseable time %r",
                booking.id, booking.scheduled_time,
            )
            continue

        existing_duration = (
            booking.duration_minutes
            if booking.duration_minutes and booking.duration_minutes > 0
            else duration_minutes
        )
        existing = TimeSlot(
            start_minutes=existing_start,
            end_minutes=existing_start + existing_duration,
        )

        if is_active(booking) and slots_overlap(slot, existing):
            logger.info(
                "Slot %d-%d on %s conflicts with booking %s",
                slot.start_minutes, slot.end_minutes, booking_date.isoformat(), booking.id,
            )
            return True

    return False
