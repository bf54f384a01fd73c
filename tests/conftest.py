"""Shared test fixtures and helpers."""

from datetime import date, datetime, timezone
from typing import Optional

import pytest

from consulting_core.analytics.dispatcher import NotificationDispatcher
from consulting_core.analytics.executive import ExecutiveDashboard
from consulting_core.repositories.memory import (
    InMemoryBookingRepository,
    InMemoryCatalogRepository,
    InMemoryConsultantRepository,
    InMemoryNotificationPublisher,
    InMemoryTicketRepository,
)
from consulting_core.scheduling.booking_service import BookingScheduler
from consulting_core.schemas.analytics_schema import ConsultingTicket, TicketResponse, TicketStatus
from consulting_core.schemas.booking_schema import (
    AvailabilityEntry,
    BookingStatus,
    Consultant,
    ConsultantChannels,
    ConsultantSla,
    ConsultantStatus,
    ConsultationBooking,
    ConsultationType,
    Weekday,
)

# 2024-03-10 is a Sunday, 2024-03-11 a Monday, 2024-03-12 a Tuesday.
SUNDAY = date(2024, 3, 10)
MONDAY = date(2024, 3, 11)
TUESDAY = date(2024, 3, 12)


def make_consultant(
    consultant_id: int = 7,
    status: ConsultantStatus = ConsultantStatus.APPROVED,
    days: Optional[list[Weekday]] = None,
    inactive_days: Optional[list[Weekday]] = None,
    sla: Optional[ConsultantSla] = None,
    channels: Optional[ConsultantChannels] = None,
) -> Consultant:
    """Helper to create a Consultant. No ``days`` means no availability configured."""
    availability = None
    if days is not None or inactive_days is not None:
        availability = [AvailabilityEntry(day=d) for d in days or []]
        availability += [AvailabilityEntry(day=d, active=False) for d in inactive_days or []]
    return Consultant(
        id=consultant_id,
        user_id=consultant_id + 100,
        full_name=f"Consultant {consultant_id}",
        status=status,
        availability=availability,
        sla=sla,
        channels=channels,
    )


def make_booking(
    booking_id: Optional[int] = None,
    consultant_id: int = 7,
    scheduled_date: date = SUNDAY,
    scheduled_time: Optional[str] = "10:00",
    duration_minutes: Optional[int] = 60,
    status: BookingStatus = BookingStatus.PENDING,
    price: Optional[float] = None,
    created_at: Optional[datetime] = None,
) -> ConsultationBooking:
    """Helper to create a ConsultationBooking with sensible defaults."""
    return ConsultationBooking(
        id=booking_id,
        ticket_number=f"C-1-{booking_id}" if booking_id is not None else None,
        client_id=500,
        consultant_id=consultant_id,
        consultation_type_id=1,
        scheduled_date=scheduled_date,
        scheduled_time=scheduled_time,
        duration_minutes=duration_minutes,
        status=status,
        price=price,
        created_at=created_at,
    )


def make_ticket(
    ticket_id: int,
    status: TicketStatus = TicketStatus.OPEN,
    created_at: Optional[datetime] = None,
) -> ConsultingTicket:
    return ConsultingTicket(
        id=ticket_id,
        ticket_number=f"T-{ticket_id}",
        client_id=500,
        status=status,
        created_at=created_at or datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
    )


def make_response(ticket_id: int, created_at: datetime, message: str = "ok") -> TicketResponse:
    return TicketResponse(ticket_id=ticket_id, message=message, created_at=created_at)


@pytest.fixture
def consultation_type():
    return ConsultationType(id=1, name="Strategy session", duration=45, sla_hours=24, price=150)


@pytest.fixture
def consultant_repo():
    return InMemoryConsultantRepository([
        make_consultant(7, days=[Weekday.SUNDAY, Weekday.MONDAY]),
        make_consultant(8, status=ConsultantStatus.PENDING),
    ])


@pytest.fixture
def catalog_repo(consultation_type):
    return InMemoryCatalogRepository([consultation_type])


@pytest.fixture
def booking_repo():
    return InMemoryBookingRepository()


@pytest.fixture
def ticket_repo():
    return InMemoryTicketRepository()


@pytest.fixture
def publisher():
    return InMemoryNotificationPublisher()


@pytest.fixture
def scheduler(consultant_repo, catalog_repo, booking_repo):
    return BookingScheduler(consultant_repo, catalog_repo, booking_repo)


@pytest.fixture
def dispatcher(publisher):
    return NotificationDispatcher(publisher)


@pytest.fixture
def dashboard(booking_repo, ticket_repo, consultant_repo, dispatcher):
    return ExecutiveDashboard(booking_repo, ticket_repo, consultant_repo, dispatcher)
