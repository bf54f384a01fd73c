"""Tests for the fixed-threshold anomaly rules."""

from consulting_core.analytics.anomaly_detector import AnomalyDetector, AnomalyThresholds
from consulting_core.analytics.metrics import AggregatedMetrics
from consulting_core.schemas.analytics_schema import Severity


def _metrics(**overrides) -> AggregatedMetrics:
    data = dict(
        pending_bookings=0,
        completed_bookings=9,
        total_bookings=10,
        offer_acceptance_rate=90,
        avg_time_to_resolve_hours=5.0,
        pending_tickets=0,
    )
    data.update(overrides)
    return AggregatedMetrics(**data)


class TestAnomalyDetector:
    def setup_method(self):
        self.detector = AnomalyDetector(AnomalyThresholds(
            pending_bookings=5, pending_tickets=4, acceptance_rate=70, resolve_hours=18,
        ))

    def test_healthy_metrics(self):
        assert self.detector.detect(_metrics()) == []

    def test_backlog_only(self):
        anomalies = self.detector.detect(_metrics(
            pending_bookings=6, pending_tickets=2, offer_acceptance_rate=85,
            avg_time_to_resolve_hours=5,
        ))
        assert [(a.title, a.severity) for a in anomalies] == [("Pending bookings", Severity.HIGH)]
        assert "6 pending bookings" in anomalies[0].detail

    def test_thresholds_are_strict(self):
        anomalies = self.detector.detect(_metrics(
            pending_bookings=5, pending_tickets=4, offer_acceptance_rate=70,
            avg_time_to_resolve_hours=18,
        ))
        assert anomalies == []

    def test_open_tickets(self):
        [anomaly] = self.detector.detect(_metrics(pending_tickets=5))
        assert anomaly.title == "Open support tickets"
        assert anomaly.severity == Severity.MEDIUM

    def test_low_acceptance(self):
        [anomaly] = self.detector.detect(_metrics(offer_acceptance_rate=69))
        assert anomaly.title == "Low offer acceptance rate"
        assert "69%" in anomaly.detail

    def test_low_acceptance_skipped_without_bookings(self):
        metrics = _metrics(total_bookings=0, completed_bookings=0, offer_acceptance_rate=0)
        assert self.detector.detect(metrics) == []

    def test_slow_resolution_uses_unrounded_hours(self):
        [anomaly] = self.detector.detect(_metrics(avg_time_to_resolve_hours=18.2))
        assert anomaly.title == "Slow ticket resolution"
        assert "18 hours" in anomaly.detail

    def test_rule_order(self):
        anomalies = self.detector.detect(_metrics(
            pending_bookings=9, pending_tickets=9, offer_acceptance_rate=10,
            avg_time_to_resolve_hours=40,
        ))
        assert [a.title for a in anomalies] == [
            "Pending bookings",
            "Open support tickets",
            "Low offer acceptance rate",
            "Slow ticket resolution",
        ]

    def test_default_thresholds_from_config(self):
        detector = AnomalyDetector()
        assert detector.thresholds.pending_bookings == 5
        assert detector.thresholds.resolve_hours == 18
