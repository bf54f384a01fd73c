from consulting_core.analytics.anomaly_detector import AnomalyDetector, AnomalyThresholds
from consulting_core.analytics.dispatcher import DispatchState, NotificationDispatcher
from consulting_core.analytics.executive import ExecutiveDashboard
from consulting_core.analytics.metrics import AggregatedMetrics, MetricsAggregator

__all__ = [
    "AggregatedMetrics",
    "AnomalyDetector",
    "AnomalyThresholds",
    "DispatchState",
    "ExecutiveDashboard",
    "MetricsAggregator",
    "NotificationDispatcher",
]
