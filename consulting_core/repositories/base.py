"""
Persistence and publishing contracts consumed by the scheduling and
analytics core.

The core depends only on these protocols. ``memory`` provides list-backed
implementations for tests and demos, ``sql`` the SQLAlchemy-backed ones.
"""

from __future__ import annotations

from typing import Optional, Protocol

from consulting_core.schemas.analytics_schema import ConsultingTicket, Notification, TicketResponse
from consulting_core.schemas.booking_schema import (
    Consultant,
    ConsultationBooking,
    ConsultationType,
)


class ConsultantRepository(Protocol):
    async def get_consultant_by_id(self, consultant_id: int) -> Optional[Consultant]:
        """Must reflect the current approval status."""
        ...

    async def get_approved_consultants(self) -> list[Consultant]:
        ...


class CatalogRepository(Protocol):
    async def get_consultation_type_by_id(self, type_id: int) -> Optional[ConsultationType]:
        ...


class BookingRepository(Protocol):
    async def get_bookings_by_consultant(self, consultant_id: int) -> list[ConsultationBooking]:
        """All historical bookings for the consultant, any status."""
        ...

    async def get_all_bookings(self) -> list[ConsultationBooking]:
        ...

    async def persist_booking(self, record: ConsultationBooking) -> int:
        """Durably write the record and return its id."""
        ...


class TicketRepository(Protocol):
    async def get_all_tickets(self) -> list[ConsultingTicket]:
        ...

    async def get_ticket_responses(self, ticket_id: int) -> list[TicketResponse]:
        """Responses ordered oldest first."""
        ...


class NotificationPublisher(Protocol):
    async def publish_notification(self, notification: Notification) -> None:
        ...
