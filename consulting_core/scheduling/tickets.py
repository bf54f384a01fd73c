"""
Ticket numbering and booking record assembly.

Ticket numbers combine the creation timestamp with a process-local
sequence, so a restarted counter can never reproduce an earlier number.
"""

import itertools
import logging
import threading
import time
from datetime import datetime
from typing import Callable, Optional

from consulting_core.config import settings
from consulting_core.repositories.base import BookingRepository
from consulting_core.scheduling.duration import (
    build_package_note,
    determine_preferred_channel,
    parse_required_info,
)
from consulting_core.schemas.booking_schema import (
    BookingRequest,
    Consultant,
    ConsultationBooking,
    ConsultationType,
    ResolvedTerms,
)
from consulting_core.utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Consultation"

# Shared by every generator so two schedulers never issue the same number
_sequence = itertools.count(1)
_sequence_lock = threading.Lock()


class TicketNumberGenerator:
    """Produces ``<prefix>-<epoch-ms>-<seq>`` ticket numbers.

    The sequence is process-wide, so numbers stay unique across generator
    instances even when their clocks return the same millisecond.
    """

    def __init__(
        self,
        prefix: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._prefix = prefix or settings.scheduling.ticket_prefix
        self._clock = clock

    def next(self) -> str:
        with _sequence_lock:
            seq = next(_sequence)
            millis = int(self._clock() * 1000)
        return f"{self._prefix}-{millis}-{seq}"


class BookingTicketFactory:
    """Builds booking records and hands them to the booking repository."""

    def __init__(
        self,
        bookings: BookingRepository,
        ticket_numbers: Optional[TicketNumberGenerator] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._bookings = bookings
        self._ticket_numbers = ticket_numbers or TicketNumberGenerator()
        self._clock = clock

    def build_record(
        self,
        request: BookingRequest,
        terms: ResolvedTerms,
        consultation_type: Optional[ConsultationType] = None,
        consultant: Optional[Consultant] = None,
    ) -> ConsultationBooking:
        """Merge request fields, resolved terms and catalog data into a record."""
        package = request.package_override()

        subject = request.subject
        price = None
        if consultation_type is not None:
            subject = subject or consultation_type.name or None
            price = (
                consultation_type.price
                if consultation_type.price is not None
                else consultation_type.base_price
            )

        channel = request.channel
        if channel is None and consultant is not None:
            channel = determine_preferred_channel(consultant)

        return ConsultationBooking(
            ticket_number=self._ticket_numbers.next(),
            client_id=request.client_id,
            consultant_id=request.consultant_id,
            consultation_type_id=request.consultation_type_id,
            scheduled_date=request.scheduled_date,
            scheduled_time=request.scheduled_time,
            duration_minutes=terms.duration,
            sla_hours=terms.sla_hours,
            first_response_hours=terms.first_response_hours,
            status=request.status,
            subject=subject or DEFAULT_SUBJECT,
            price=price,
            channel=channel,
            description=request.description,
            required_info=parse_required_info(request.required_info),
            package_name=package.package_name,
            package_price=package.package_price,
            package_sla_hours=package.package_sla_hours,
            package_note=build_package_note(package),
            created_at=self._clock(),
        )

    async def create(
        self,
        request: BookingRequest,
        terms: ResolvedTerms,
        consultation_type: Optional[ConsultationType] = None,
        consultant: Optional[Consultant] = None,
    ) -> ConsultationBooking:
        """Build the record, persist it, and return it with its new id."""
        record = self.build_record(request, terms, consultation_type, consultant)
        booking_id = await self._bookings.persist_booking(record)
        record.id = booking_id
        logger.info(
            "Booking %s persisted as id %s for consultant %s on %s at %s",
            record.ticket_number, booking_id, record.consultant_id,
            record.scheduled_date.isoformat(), record.scheduled_time,
        )
        return record
