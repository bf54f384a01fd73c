"""
In-memory repositories.

Used by the test-suite, the demo runner and the report CLI. Each store
keeps plain lists/dicts and hands out copies so callers can never mutate
stored state by accident.
"""

import logging
from collections.abc import Iterable
from typing import Optional

from consulting_core.schemas.analytics_schema import ConsultingTicket, Notification, TicketResponse
from consulting_core.schemas.booking_schema import (
    BookingStatus,
    Consultant,
    ConsultantStatus,
    ConsultationBooking,
    ConsultationType,
)

logger = logging.getLogger(__name__)


class InMemoryConsultantRepository:
    def __init__(self, consultants: Iterable[Consultant] = ()) -> None:
        self._consultants: dict[int, Consultant] = {c.id: c for c in consultants}

    def add(self, consultant: Consultant) -> None:
        self._consultants[consultant.id] = consultant

    def set_status(self, consultant_id: int, status: ConsultantStatus) -> None:
        self._consultants[consultant_id].status = status

    async def get_consultant_by_id(self, consultant_id: int) -> Optional[Consultant]:
        consultant = self._consultants.get(consultant_id)
        return consultant.model_copy(deep=True) if consultant else None

    async def get_approved_consultants(self) -> list[Consultant]:
        return [
            c.model_copy(deep=True)
            for c in self._consultants.values()
            if c.status == ConsultantStatus.APPROVED
        ]


class InMemoryCatalogRepository:
    def __init__(self, types: Iterable[ConsultationType] = ()) -> None:
        self._types: dict[int, ConsultationType] = {t.id: t for t in types}

    def add(self, consultation_type: ConsultationType) -> None:
        self._types[consultation_type.id] = consultation_type

    async def get_consultation_type_by_id(self, type_id: int) -> Optional[ConsultationType]:
        return self._types.get(type_id)


class InMemoryBookingRepository:
    def __init__(self, bookings: Iterable[ConsultationBooking] = ()) -> None:
        self._next_id = 1
        self._bookings: list[ConsultationBooking] = []
        for booking in bookings:
            self._store(booking)

    def _store(self, booking: ConsultationBooking) -> int:
        stored = booking.model_copy(deep=True)
        if stored.id is None:
            stored.id = self._next_id
        self._next_id = max(self._next_id, stored.id + 1)
        self._bookings.append(stored)
        return stored.id

    def set_status(self, booking_id: int, status: BookingStatus) -> None:
        for booking in self._bookings:
            if booking.id == booking_id:
                booking.status = status
                return
        raise KeyError(f"Booking {booking_id} not found")

    async def get_bookings_by_consultant(self, consultant_id: int) -> list[ConsultationBooking]:
        return [b.model_copy() for b in self._bookings if b.consultant_id == consultant_id]

    async def get_all_bookings(self) -> list[ConsultationBooking]:
        return [b.model_copy() for b in self._bookings]

    async def persist_booking(self, record: ConsultationBooking) -> int:
        booking_id = self._store(record.model_copy(update={"id": None}))
        logger.debug("Stored booking %s in memory", booking_id)
        return booking_id


class InMemoryTicketRepository:
    def __init__(
        self,
        tickets: Iterable[ConsultingTicket] = (),
        responses: Iterable[TicketResponse] = (),
    ) -> None:
        self._tickets: list[ConsultingTicket] = list(tickets)
        self._responses: list[TicketResponse] = list(responses)

    def add_ticket(self, ticket: ConsultingTicket) -> None:
        self._tickets.append(ticket)

    def add_response(self, response: TicketResponse) -> None:
        self._responses.append(response)

    async def get_all_tickets(self) -> list[ConsultingTicket]:
        return list(self._tickets)

    async def get_ticket_responses(self, ticket_id: int) -> list[TicketResponse]:
        return sorted(
            (r for r in self._responses if r.ticket_id == ticket_id),
            key=lambda r: r.created_at,
        )


class InMemoryNotificationPublisher:
    """Records every published notification; optionally fails on demand."""

    def __init__(self, fail_with: Optional[Exception] = None) -> None:
        self.published: list[Notification] = []
        self.fail_with = fail_with

    async def publish_notification(self, notification: Notification) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.published.append(notification)
        logger.info("Notification published: %s", notification.title)
