"""
Key performance indicators for the executive dashboard.

KPIs across three areas: consultation pipeline (time-to-fill, acceptance,
backlog), revenue, and support tickets (resolution time, open count).
Everything is derived from full booking and ticket snapshots; no tenant
filtering is applied.
"""

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from consulting_core.config import settings
from consulting_core.schemas.analytics_schema import (
    ConsultingTicket,
    MetricsSnapshot,
    TicketResponse,
    TicketStatus,
)
from consulting_core.schemas.booking_schema import BookingStatus, ConsultationBooking
from consulting_core.utils import as_utc, parse_number, round_half_up, start_of_day_utc, utcnow

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24
SECONDS_PER_HOUR = 60 * 60


@dataclass
class AggregatedMetrics:
    """Raw aggregation results; ``to_snapshot`` rounds them for display."""

    # Consultation pipeline
    pending_bookings: int = 0
    completed_bookings: int = 0
    total_bookings: int = 0
    avg_time_to_fill_days: float = 0.0
    time_to_fill_delta: int = 0
    offer_acceptance_rate: int = 0

    # Revenue
    consulting_revenue: float = 0.0

    # Tickets
    avg_time_to_resolve_hours: float = 0.0
    pending_tickets: int = 0

    def to_snapshot(self) -> MetricsSnapshot:
        return MetricsSnapshot(
            time_to_fill_days=round_half_up(self.avg_time_to_fill_days),
            time_to_fill_delta=self.time_to_fill_delta,
            time_to_resolve_hours=round_half_up(self.avg_time_to_resolve_hours),
            consulting_revenue=self.consulting_revenue,
            offer_acceptance_rate=self.offer_acceptance_rate,
            pending_ticket_count=self.pending_tickets,
            pending_consultation_count=self.pending_bookings,
            completed_consultation_count=self.completed_bookings,
        )


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class MetricsAggregator:
    """Calculates executive KPIs from booking and ticket collections."""

    def __init__(self, target_fill_days: Optional[float] = None) -> None:
        self._target_fill_days = (
            target_fill_days if target_fill_days is not None
            else settings.analytics.target_fill_days
        )

    def aggregate(
        self,
        bookings: Sequence[ConsultationBooking],
        tickets: Sequence[ConsultingTicket],
        responses_by_ticket: Mapping[int, Sequence[TicketResponse]],
        now: Optional[datetime] = None,
    ) -> AggregatedMetrics:
        """Calculate all KPIs.

        Args:
            bookings: every booking, any status.
            tickets: every support ticket.
            responses_by_ticket: responses per ticket id, oldest first.
            now: stand-in for bookings without a creation timestamp.
        """
        now = now or utcnow()
        metrics = AggregatedMetrics()

        # Consultation pipeline
        metrics.total_bookings = len(bookings)
        metrics.pending_bookings = sum(1 for b in bookings if b.status == BookingStatus.PENDING)
        metrics.completed_bookings = sum(
            1 for b in bookings if b.status == BookingStatus.COMPLETED
        )

        fill_days = [
            diff for diff in (self._fill_days(b, now) for b in bookings) if diff is not None
        ]
        metrics.avg_time_to_fill_days = _mean(fill_days)
        if fill_days:
            metrics.time_to_fill_delta = round_half_up(
                metrics.avg_time_to_fill_days - self._target_fill_days
            )

        if metrics.total_bookings:
            metrics.offer_acceptance_rate = round_half_up(
                metrics.completed_bookings / metrics.total_bookings * 100
            )

        # Revenue
        metrics.consulting_revenue = sum(parse_number(b.price) or 0.0 for b in bookings)

        # Tickets
        resolve_hours = []
        for ticket in tickets:
            hours = self._resolve_hours(ticket, responses_by_ticket.get(ticket.id, ()))
            if hours is not None:
                resolve_hours.append(hours)
        metrics.avg_time_to_resolve_hours = _mean(resolve_hours)
        metrics.pending_tickets = sum(1 for t in tickets if t.status != TicketStatus.CLOSED)

        logger.debug(
            "Aggregated %d bookings and %d tickets (%d fill samples, %d resolve samples)",
            len(bookings), len(tickets), len(fill_days), len(resolve_hours),
        )
        return metrics

    @staticmethod
    def _fill_days(booking: ConsultationBooking, now: datetime) -> Optional[float]:
        created_at = as_utc(booking.created_at) if booking.created_at else now
        scheduled = start_of_day_utc(booking.scheduled_date)
        diff = (scheduled - created_at).total_seconds() / SECONDS_PER_DAY
        return diff if math.isfinite(diff) else None

    @staticmethod
    def _resolve_hours(
        ticket: ConsultingTicket, responses: Sequence[TicketResponse]
    ) -> Optional[float]:
        if not responses:
            return None
        last_response_at = max(r.created_at for r in responses)
        diff = (as_utc(last_response_at) - as_utc(ticket.created_at)).total_seconds()
        hours = diff / SECONDS_PER_HOUR
        return hours if math.isfinite(hours) else None

    def format_report(self, snapshot: MetricsSnapshot) -> str:
        """Format a metrics snapshot into a human-readable report."""
        targets = settings.analytics

        lines = [
            "=" * 60,
            "EXECUTIVE CONSULTING REPORT",
            "=" * 60,
            "",
            "CONSULTATION PIPELINE",
            f"  Time to fill:           {snapshot.time_to_fill_days} days  "
            f"({snapshot.time_to_fill_delta:+d} vs target {self._target_fill_days:g})",
            f"  Offer acceptance rate:  {snapshot.offer_acceptance_rate}%  "
            f"(target: >={targets.acceptance_rate_threshold:g}%)",
            f"  Pending consultations:  {snapshot.pending_consultation_count}  "
            f"(threshold: {targets.pending_bookings_threshold})",
            f"  Completed:              {snapshot.completed_consultation_count}",
            "",
            "REVENUE",
            f"  Consulting revenue:     {snapshot.consulting_revenue:,.2f}",
            "",
            "SUPPORT TICKETS",
            f"  Time to resolve:        {snapshot.time_to_resolve_hours}h  "
            f"(threshold: {targets.resolve_hours_threshold:g}h)",
            f"  Open tickets:           {snapshot.pending_ticket_count}  "
            f"(threshold: {targets.pending_tickets_threshold})",
            "=" * 60,
        ]
        return "\n".join(lines)
