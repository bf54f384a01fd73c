"""
Executive dashboard pipeline.

Orchestrates loading, metrics aggregation, anomaly detection, notification
dedup and the SLA summary into a single snapshot. A failed analytics pass
degrades to a zeroed snapshot flagged with ``fallback=True``.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from consulting_core.analytics.anomaly_detector import AnomalyDetector
from consulting_core.analytics.dispatcher import NotificationDispatcher
from consulting_core.analytics.metrics import AggregatedMetrics, MetricsAggregator
from consulting_core.config import SlaConfig, settings
from consulting_core.logging_context import dashboard_scope, get_request_logger
from consulting_core.repositories.base import (
    BookingRepository,
    ConsultantRepository,
    TicketRepository,
)
from consulting_core.scheduling.duration import extract_sla_info
from consulting_core.schemas.analytics_schema import (
    Anomaly,
    ConsultingSla,
    ExecutiveSnapshot,
    HiringSla,
    MetricsSnapshot,
    SlaSummary,
    TicketResponse,
    TicketSla,
)
from consulting_core.schemas.booking_schema import Consultant
from consulting_core.utils import round_half_up

logger = get_request_logger(__name__)

DEFAULT_CHANNEL = "executive"


@dataclass
class AnalyticsPass:
    """Intermediate results of one analytics pass."""
    metrics: AggregatedMetrics
    anomalies: list[Anomaly]


def summarize_sla(
    consultants: Sequence[Consultant], config: Optional[SlaConfig] = None
) -> SlaSummary:
    """Average the approved consultants' SLA terms, falling back to configured defaults."""
    config = config or settings.sla
    delivery_values: list[float] = []
    response_values: list[float] = []
    for consultant in consultants:
        delivery, response = extract_sla_info(consultant)
        if delivery is not None and delivery > 0:
            delivery_values.append(delivery)
        if response is not None and response > 0:
            response_values.append(response)

    avg_response = (
        sum(response_values) / len(response_values)
        if response_values else config.consulting_response_hours
    )
    avg_delivery = (
        sum(delivery_values) / len(delivery_values)
        if delivery_values else config.consulting_delivery_hours
    )

    return SlaSummary(
        hiring=HiringSla(
            first_response_hours=config.hiring_first_response_hours,
            decision_days=config.hiring_decision_days,
        ),
        tickets=TicketSla(
            first_response_hours=config.tickets_first_response_hours,
            resolution_hours=config.tickets_resolution_hours,
        ),
        consulting=ConsultingSla(
            first_response_hours=round_half_up(avg_response),
            delivery_hours=round_half_up(avg_delivery),
        ),
        target_compliance=config.target_compliance,
    )


def fallback_snapshot() -> ExecutiveSnapshot:
    """Zeroed snapshot returned when live figures cannot be computed."""
    return ExecutiveSnapshot(
        metrics=MetricsSnapshot(),
        anomalies=[],
        sla=summarize_sla([]),
        fallback=True,
    )


class ExecutiveDashboard:
    """Computes the executive snapshot for one dashboard channel."""

    def __init__(
        self,
        bookings: BookingRepository,
        tickets: TicketRepository,
        consultants: ConsultantRepository,
        dispatcher: NotificationDispatcher,
        aggregator: Optional[MetricsAggregator] = None,
        detector: Optional[AnomalyDetector] = None,
        channel: str = DEFAULT_CHANNEL,
    ) -> None:
        self._bookings = bookings
        self._tickets = tickets
        self._consultants = consultants
        self.dispatcher = dispatcher
        self._aggregator = aggregator or MetricsAggregator()
        self._detector = detector or AnomalyDetector()
        self.channel = channel

    async def run_analytics(self) -> AnalyticsPass:
        """Load data, aggregate and detect. Errors propagate to the caller."""
        bookings = await self._bookings.get_all_bookings()
        tickets = await self._tickets.get_all_tickets()

        responses: dict[int, list[TicketResponse]] = {}
        for ticket in tickets:
            responses[ticket.id] = await self._tickets.get_ticket_responses(ticket.id)

        metrics = self._aggregator.aggregate(bookings, tickets, responses)
        anomalies = self._detector.detect(metrics)
        return AnalyticsPass(metrics=metrics, anomalies=anomalies)

    async def compute_executive_snapshot(self) -> ExecutiveSnapshot:
        """Return fresh KPIs and anomalies, notifying operators when anomalies change.

        Never raises: any failure yields the fallback snapshot.
        """
        with dashboard_scope(self.channel):
            return await self._compute_snapshot()

    async def _compute_snapshot(self) -> ExecutiveSnapshot:
        try:
            result = await self.run_analytics()
            consultants = await self._consultants.get_approved_consultants()
        except Exception:
            logger.exception("Executive analytics failed, returning fallback snapshot")
            return fallback_snapshot()

        await self._notify(result.anomalies)

        return ExecutiveSnapshot(
            metrics=result.metrics.to_snapshot(),
            anomalies=result.anomalies,
            sla=summarize_sla(consultants),
        )

    async def _notify(self, anomalies: list[Anomaly]) -> None:
        try:
            await self.dispatcher.dispatch(anomalies)
        except Exception:
            logger.warning("Notification dispatch failed", exc_info=True)
