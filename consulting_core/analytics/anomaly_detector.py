"""
Operational anomaly detection for the executive dashboard.

Four fixed-threshold rules evaluated independently; every rule that fires
contributes one anomaly, in rule order (backlog first).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from consulting_core.analytics.metrics import AggregatedMetrics
from consulting_core.config import AnalyticsConfig, settings
from consulting_core.schemas.analytics_schema import Anomaly, Severity
from consulting_core.utils import round_half_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnomalyThresholds:
    pending_bookings: int
    pending_tickets: int
    acceptance_rate: float
    resolve_hours: float

    @classmethod
    def from_config(cls, config: AnalyticsConfig) -> "AnomalyThresholds":
        return cls(
            pending_bookings=config.pending_bookings_threshold,
            pending_tickets=config.pending_tickets_threshold,
            acceptance_rate=config.acceptance_rate_threshold,
            resolve_hours=config.resolve_hours_threshold,
        )


class AnomalyDetector:
    """Applies the dashboard thresholds to aggregated metrics."""

    def __init__(self, thresholds: Optional[AnomalyThresholds] = None) -> None:
        self.thresholds = thresholds or AnomalyThresholds.from_config(settings.analytics)

    def detect(self, metrics: AggregatedMetrics) -> list[Anomaly]:
        """Run every rule and return all anomalies found."""
        anomalies: list[Anomaly] = []

        anomalies.extend(self._detect_booking_backlog(metrics))
        anomalies.extend(self._detect_open_tickets(metrics))
        anomalies.extend(self._detect_low_acceptance(metrics))
        anomalies.extend(self._detect_slow_resolution(metrics))

        if anomalies:
            logger.info(
                "Detected %d anomaly(ies): %s",
                len(anomalies), ", ".join(a.title for a in anomalies),
            )
        return anomalies

    def _detect_booking_backlog(self, metrics: AggregatedMetrics) -> list[Anomaly]:
        if metrics.pending_bookings <= self.thresholds.pending_bookings:
            return []
        return [
            Anomaly(
                title="Pending bookings",
                detail=(
                    f"{metrics.pending_bookings} pending bookings need follow-up"
                    " within 48 hours."
                ),
                severity=Severity.HIGH,
                action="Review the booking team and speed up client outreach.",
            )
        ]

    def _detect_open_tickets(self, metrics: AggregatedMetrics) -> list[Anomaly]:
        if metrics.pending_tickets <= self.thresholds.pending_tickets:
            return []
        return [
            Anomaly(
                title="Open support tickets",
                detail=f"{metrics.pending_tickets} support tickets are still open.",
                severity=Severity.MEDIUM,
                action="Redistribute tickets across consultants and supervisors.",
            )
        ]

    def _detect_low_acceptance(self, metrics: AggregatedMetrics) -> list[Anomaly]:
        # No bookings yet means no rate to judge, not a 0% rate.
        if metrics.total_bookings == 0:
            return []
        if metrics.offer_acceptance_rate >= self.thresholds.acceptance_rate:
            return []
        return [
            Anomaly(
                title="Low offer acceptance rate",
                detail=(
                    f"Acceptance rate is {metrics.offer_acceptance_rate}%,"
                    f" below the {self.thresholds.acceptance_rate:g}% target."
                ),
                severity=Severity.MEDIUM,
                action="Refresh packages and pricing and make the value clearer.",
            )
        ]

    def _detect_slow_resolution(self, metrics: AggregatedMetrics) -> list[Anomaly]:
        if metrics.avg_time_to_resolve_hours <= self.thresholds.resolve_hours:
            return []
        return [
            Anomaly(
                title="Slow ticket resolution",
                detail=(
                    "Average resolution time is"
                    f" {round_half_up(metrics.avg_time_to_resolve_hours)} hours."
                ),
                severity=Severity.MEDIUM,
                action="Enable SLA alerts and reschedule outstanding work.",
            )
        ]
