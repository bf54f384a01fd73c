"""
Consulting core entry point.

Runs an offline walkthrough of the booking path and the executive
dashboard against in-memory repositories, or a one-off report from an
exported dataset.

Usage:
    Demo walkthrough:  python main.py demo
    SQLite-backed:     python main.py demo --sql
    Dataset report:    python main.py report --data export.json
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, timedelta

from consulting_core.analytics.dispatcher import NotificationDispatcher
from consulting_core.analytics.executive import ExecutiveDashboard
from consulting_core.analytics.run_report import format_snapshot
from consulting_core.config import settings
from consulting_core.logging_context import set_request_id
from consulting_core.repositories.memory import (
    InMemoryBookingRepository,
    InMemoryCatalogRepository,
    InMemoryConsultantRepository,
    InMemoryNotificationPublisher,
    InMemoryTicketRepository,
)
from consulting_core.repositories.sql import (
    Database,
    SqlBookingRepository,
    SqlCatalogRepository,
    SqlConsultantRepository,
    SqlNotificationPublisher,
    SqlTicketRepository,
)
from consulting_core.scheduling.booking_service import BookingRejectedError, BookingScheduler
from consulting_core.schemas.booking_schema import (
    AvailabilityEntry,
    BookingRequest,
    Consultant,
    ConsultantChannels,
    ConsultantSla,
    ConsultantStatus,
    ConsultationType,
    Weekday,
)

logger = logging.getLogger(__name__)

GREEN = "\033[92m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_CONSULTANTS = [
    Consultant(
        id=1,
        user_id=101,
        full_name="Amira Haddad",
        status=ConsultantStatus.APPROVED,
        availability=[
            AvailabilityEntry(day=Weekday.MONDAY),
            AvailabilityEntry(day=Weekday.WEDNESDAY),
            AvailabilityEntry(day=Weekday.FRIDAY),
            AvailabilityEntry(day=Weekday.SUNDAY, active=False),
        ],
        sla=ConsultantSla(response_hours=6, delivery_hours="36"),
        channels=ConsultantChannels(voice=True, chat=True),
    ),
    Consultant(
        id=2,
        user_id=102,
        full_name="Jonas Berg",
        status=ConsultantStatus.PENDING,
    ),
]

DEMO_TYPES = [
    ConsultationType(id=10, name="Contract review", duration=90, sla_hours=48, price=250),
    ConsultationType(id=11, name="Quick call", estimated_duration=30, base_price=80),
]


def _next_weekday(start: date, weekday: int) -> date:
    """Next date on or after ``start`` falling on ``weekday`` (Monday == 0)."""
    return start + timedelta(days=(weekday - start.weekday()) % 7)


def _say(text: str) -> None:
    print(f"{GREEN}{text}{RESET}")


def _warn(text: str) -> None:
    print(f"{RED}{text}{RESET}")


def _log(text: str) -> None:
    print(f"{DIM}  >> {text}{RESET}")


async def _seed_sql(database: Database):
    await database.init_models()
    consultants = SqlConsultantRepository(database)
    catalog = SqlCatalogRepository(database)
    for consultant in DEMO_CONSULTANTS:
        await consultants.add(consultant)
    for consultation_type in DEMO_TYPES:
        await catalog.add(consultation_type)
    return (
        consultants,
        catalog,
        SqlBookingRepository(database),
        SqlTicketRepository(database),
        SqlNotificationPublisher(database),
    )


async def run_demo(use_sql: bool = False) -> None:
    database = None
    if use_sql:
        database = Database(settings.database)
        consultants, catalog, bookings, tickets, publisher = await _seed_sql(database)
    else:
        consultants = InMemoryConsultantRepository(DEMO_CONSULTANTS)
        catalog = InMemoryCatalogRepository(DEMO_TYPES)
        bookings = InMemoryBookingRepository()
        tickets = InMemoryTicketRepository()
        publisher = InMemoryNotificationPublisher()

    scheduler = BookingScheduler(consultants, catalog, bookings)
    monday = _next_weekday(date.today() + timedelta(days=1), 0)
    tuesday = monday + timedelta(days=1)

    requests = [
        ("Book a contract review on Monday 10:00",
         BookingRequest(client_id=500, consultant_id=1, consultation_type_id=10,
                        scheduled_date=monday, scheduled_time="10:00",
                        required_info='{"company": "Acme"}')),
        ("Book an overlapping quick call at 11:00",
         BookingRequest(client_id=501, consultant_id=1, consultation_type_id=11,
                        scheduled_date=monday, scheduled_time="11:00")),
        ("Book a quick call right after, at 11:30",
         BookingRequest(client_id=501, consultant_id=1, consultation_type_id=11,
                        scheduled_date=monday, scheduled_time="11:30",
                        package_name="Starter", package_price=120, package_sla_hours=12)),
        ("Book on Tuesday (not a working day)",
         BookingRequest(client_id=502, consultant_id=1, consultation_type_id=11,
                        scheduled_date=tuesday, scheduled_time="09:00")),
        ("Book a consultant still awaiting approval",
         BookingRequest(client_id=503, consultant_id=2, consultation_type_id=11,
                        scheduled_date=monday, scheduled_time="09:00")),
    ]

    print()
    print(f"{BOLD}{'=' * 60}{RESET}")
    print(f"{BOLD}  CONSULTING CORE - Booking walkthrough{RESET}")
    print(f"{BOLD}  Storage: {'SQLite' if use_sql else 'in-memory'}{RESET}")
    print(f"{BOLD}{'=' * 60}{RESET}")

    for label, request in requests:
        request_id = set_request_id()
        print(f"\n{BOLD}{label}{RESET}")
        _log(f"request {request_id}")
        try:
            result = await scheduler.create_booking(request)
        except BookingRejectedError as exc:
            _warn(f"Rejected: {exc.to_dict()}")
            continue
        _say(f"Booked #{result.booking_id} with ticket {result.ticket_number}")

    for booking in await bookings.get_all_bookings():
        _log(
            f"#{booking.id} {booking.scheduled_time} {booking.duration_minutes}min "
            f"SLA {booking.sla_hours}h via {booking.channel.value if booking.channel else '-'}"
        )

    dispatcher = NotificationDispatcher(publisher)
    dashboard = ExecutiveDashboard(bookings, tickets, consultants, dispatcher)
    set_request_id()
    snapshot = await dashboard.compute_executive_snapshot()
    await dispatcher.drain()

    published = (
        await publisher.list_notifications() if use_sql else publisher.published
    )
    print()
    print(format_snapshot(snapshot, published))

    logger.info("Demo finished, %d notification(s) published", len(published))
    if database is not None:
        await database.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Consulting booking and analytics core.")
    sub = parser.add_subparsers(dest="command")

    demo = sub.add_parser("demo", help="Run the offline booking and dashboard walkthrough.")
    demo.add_argument(
        "--sql",
        action="store_true",
        help="Use the SQLAlchemy repositories (DATABASE_URL) instead of in-memory ones.",
    )
    sub.add_parser("report", help="Produce the executive report from a dataset export.")

    args, remaining = parser.parse_known_args()

    if args.command == "report":
        from consulting_core.analytics.run_report import main as report_main

        sys.argv = [sys.argv[0], *remaining]
        report_main()
    elif args.command == "demo":
        asyncio.run(run_demo(use_sql=args.sql))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
