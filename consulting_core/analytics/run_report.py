"""
CLI entry point for producing the executive report from an exported dataset.

Usage:
    python -m consulting_core.analytics.run_report --data export.json --verbose
    python -m consulting_core.analytics.run_report --data export.json --report report.txt
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from consulting_core.analytics.dispatcher import NotificationDispatcher
from consulting_core.analytics.executive import ExecutiveDashboard
from consulting_core.analytics.metrics import MetricsAggregator
from consulting_core.logging_context import set_request_id
from consulting_core.repositories.memory import (
    InMemoryBookingRepository,
    InMemoryConsultantRepository,
    InMemoryNotificationPublisher,
    InMemoryTicketRepository,
)
from consulting_core.schemas.analytics_schema import (
    ConsultingTicket,
    ExecutiveSnapshot,
    Notification,
    TicketResponse,
)
from consulting_core.schemas.booking_schema import Consultant, ConsultationBooking

logger = logging.getLogger(__name__)


class DashboardDataset(BaseModel):
    """Exported bookings, tickets and consultants."""
    consultants: list[Consultant] = Field(default_factory=list)
    bookings: list[ConsultationBooking] = Field(default_factory=list)
    tickets: list[ConsultingTicket] = Field(default_factory=list)
    responses: list[TicketResponse] = Field(default_factory=list)


def load_dataset(path: Path) -> DashboardDataset:
    """Load a dataset from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return DashboardDataset(**data)


async def build_report(dataset: DashboardDataset) -> tuple[ExecutiveSnapshot, list[Notification]]:
    """Run one analytics pass over the dataset using in-memory repositories."""
    publisher = InMemoryNotificationPublisher()
    dispatcher = NotificationDispatcher(publisher)
    dashboard = ExecutiveDashboard(
        bookings=InMemoryBookingRepository(dataset.bookings),
        tickets=InMemoryTicketRepository(dataset.tickets, dataset.responses),
        consultants=InMemoryConsultantRepository(dataset.consultants),
        dispatcher=dispatcher,
    )
    snapshot = await dashboard.compute_executive_snapshot()
    await dispatcher.drain()
    return snapshot, publisher.published


def format_snapshot(snapshot: ExecutiveSnapshot, notifications: list[Notification]) -> str:
    """Format the snapshot into a human-readable string."""
    lines = [MetricsAggregator().format_report(snapshot.metrics), ""]
    if snapshot.fallback:
        lines.append("WARNING: live figures unavailable, showing fallback snapshot.")
        lines.append("")

    if snapshot.anomalies:
        lines.append("ANOMALIES:")
        for anomaly in snapshot.anomalies:
            lines.append(f"  [{anomaly.severity.value.upper()}] {anomaly.title}: {anomaly.detail}")
            lines.append(f"      -> {anomaly.action}")
        lines.append("")
    else:
        lines.append("ANOMALIES: none")
        lines.append("")

    sla = snapshot.sla
    lines.extend([
        "SLA TARGETS:",
        f"  Consulting: first response {sla.consulting.first_response_hours}h, "
        f"delivery {sla.consulting.delivery_hours}h",
        f"  Tickets:    first response {sla.tickets.first_response_hours}h, "
        f"resolution {sla.tickets.resolution_hours}h",
        f"  Hiring:     first response {sla.hiring.first_response_hours}h, "
        f"decision {sla.hiring.decision_days} days",
        f"  Target compliance: {sla.target_compliance}%",
    ])

    for notification in notifications:
        lines.append("")
        lines.append(f"NOTIFICATION: {notification.title} - {notification.body}")

    return "\n".join(lines)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Compute the executive consulting report from an exported dataset."
    )
    parser.add_argument(
        "--data",
        type=str,
        required=True,
        help="Path to a JSON export with consultants, bookings, tickets and responses.",
    )
    parser.add_argument(
        "--report",
        type=str,
        default=None,
        help="Path to write the report (default: stdout).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging output.",
    )

    args = parser.parse_args()

    # handlers are installed when settings load; only the level changes here
    logging.getLogger().setLevel(logging.DEBUG if args.verbose else logging.INFO)
    set_request_id()

    data_path = Path(args.data)
    if not data_path.exists():
        logger.error("Dataset not found: %s", data_path)
        sys.exit(1)

    try:
        dataset = load_dataset(data_path)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error("Invalid dataset %s: %s", data_path, e)
        sys.exit(1)

    logger.info(
        "Loaded %d booking(s) and %d ticket(s) from %s",
        len(dataset.bookings), len(dataset.tickets), data_path,
    )

    snapshot, notifications = asyncio.run(build_report(dataset))
    output = format_snapshot(snapshot, notifications)

    if args.report:
        report_path = Path(args.report)
        report_path.write_text(output, encoding="utf-8")
        logger.info("Report written to %s", report_path)
    else:
        sys.stdout.write(output + "\n")


if __name__ == "__main__":
    main()
