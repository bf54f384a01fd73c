"""
Booking path orchestration.

Approval check -> weekday availability -> start time -> duration/SLA ->
conflict check -> ticket + record -> persist. Every rejection is raised
before anything is written, as a ``BookingRejectedError`` carrying a
``BAD_REQUEST`` code the presentation layer can forward verbatim.
"""

import asyncio
import weakref
from datetime import date
from typing import Optional

from consulting_core.logging_context import booking_scope, get_request_logger
from consulting_core.repositories.base import (
    BookingRepository,
    CatalogRepository,
    ConsultantRepository,
)
from consulting_core.scheduling.availability import check_day_availability
from consulting_core.scheduling.conflicts import check_booking_conflict
from consulting_core.scheduling.duration import resolve_duration_and_sla
from consulting_core.scheduling.tickets import BookingTicketFactory, TicketNumberGenerator
from consulting_core.scheduling.time_utils import build_slot, format_minutes, parse_time_to_minutes
from consulting_core.schemas.booking_schema import (
    BookingRequest,
    BookingResult,
    Consultant,
    ConsultantStatus,
    TimeSlot,
)

logger = get_request_logger(__name__)

# One lock per consultant for the whole process. Entries vanish once no
# booking attempt holds or waits on the lock.
_consultant_locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()


def consultant_lock(consultant_id: int) -> asyncio.Lock:
    lock = _consultant_locks.get(consultant_id)
    if lock is None:
        lock = asyncio.Lock()
        _consultant_locks[consultant_id] = lock
    return lock


class BookingRejectedError(Exception):
    """Base class for booking preconditions the client must fix."""

    code = "BAD_REQUEST"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class ConsultantUnavailableError(BookingRejectedError):
    """Consultant does not exist or is not approved."""


class DayUnavailableError(BookingRejectedError):
    """Consultant does not work on the requested weekday."""


class InvalidBookingTimeError(BookingRejectedError):
    """Requested start time is not a valid HH:MM value."""


class SlotConflictError(BookingRejectedError):
    """Requested slot overlaps an active booking."""


class BookingScheduler:
    """Creates consultation bookings for approved consultants.

    The conflict check and the write are serialised per consultant across
    every scheduler in this process. Writers in other processes are not
    coordinated.
    """

    def __init__(
        self,
        consultants: ConsultantRepository,
        catalog: CatalogRepository,
        bookings: BookingRepository,
        ticket_numbers: Optional[TicketNumberGenerator] = None,
    ) -> None:
        self._consultants = consultants
        self._catalog = catalog
        self._bookings = bookings
        self._factory = BookingTicketFactory(bookings, ticket_numbers)

    async def verify_consultant(self, consultant_id: int) -> Consultant:
        consultant = await self._consultants.get_consultant_by_id(consultant_id)
        if consultant is None or consultant.status != ConsultantStatus.APPROVED:
            logger.info("Rejected booking: consultant %s is not approved", consultant_id)
            raise ConsultantUnavailableError("Consultant is not available for booking")
        return consultant

    async def check_booking_conflict(
        self,
        consultant_id: int,
        booking_date: date,
        slot: TimeSlot,
        duration_minutes: int,
    ) -> bool:
        """Fetch the consultant's bookings and check the slot against them."""
        existing = await self._bookings.get_bookings_by_consultant(consultant_id)
        return check_booking_conflict(
            consultant_id, booking_date, slot, duration_minutes, existing
        )

    async def create_booking(self, request: BookingRequest) -> BookingResult:
        """Validate the request against the consultant's calendar and persist it.

        Raises:
            ConsultantUnavailableError: consultant missing or not approved.
            DayUnavailableError: consultant does not work that weekday.
            InvalidBookingTimeError: start time is not ``HH:MM``.
            SlotConflictError: slot overlaps an active booking.
        """
        with booking_scope(request.consultant_id):
            return await self._create_booking(request)

    async def _create_booking(self, request: BookingRequest) -> BookingResult:
        consultant = await self.verify_consultant(request.consultant_id)

        day = check_day_availability(consultant, request.scheduled_date)
        if not day.available:
            raise DayUnavailableError(
                f"Consultant does not take bookings on {day.weekday.value.capitalize()}"
            )

        start = parse_time_to_minutes(request.scheduled_time)
        if start is None:
            raise InvalidBookingTimeError(
                f"Invalid scheduled time {request.scheduled_time!r}, expected HH:MM"
            )

        consultation_type = await self._catalog.get_consultation_type_by_id(
            request.consultation_type_id
        )
        terms = resolve_duration_and_sla(
            request.duration_override(), consultation_type, request.package_override()
        )
        slot = build_slot(start, terms.duration)

        lock = consultant_lock(consultant.id)
        async with lock:
            if await self.check_booking_conflict(
                consultant.id, request.scheduled_date, slot, terms.duration
            ):
                raise SlotConflictError(
                    f"{format_minutes(slot.start_minutes)}-{format_minutes(slot.end_minutes)} "
                    f"on {request.scheduled_date.isoformat()} is already booked"
                )
            record = await self._factory.create(request, terms, consultation_type, consultant)

        return BookingResult(booking_id=record.id, ticket_number=record.ticket_number)
