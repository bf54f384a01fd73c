"""
Deduplicated operator notifications for dashboard anomalies.

The dispatcher remembers the signature of the last anomaly set it
notified about and only publishes again when the set changes. Publishing
runs as a detached task; its failures are logged and discarded so a
dashboard read never fails because of a notification.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

from consulting_core.config import settings
from consulting_core.repositories.base import NotificationPublisher
from consulting_core.schemas.analytics_schema import (
    SEVERITY_RANK,
    Anomaly,
    Notification,
    Severity,
)

logger = logging.getLogger(__name__)

SUMMARY_FALLBACK_BODY = "Check the executive dashboard figures."


@dataclass
class DispatchState:
    """Signature of the last notified anomaly set for one dashboard channel."""

    last_signature: Optional[str] = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    def reset(self) -> None:
        self.last_signature = None


def anomaly_signature(anomalies: Sequence[Anomaly]) -> str:
    """Order-sensitive encoding of severities and titles."""
    return "|".join(f"{a.severity.value}:{a.title}" for a in anomalies)


def build_summary_notification(anomalies: Sequence[Anomaly], top_n: int) -> Notification:
    snippet = " | ".join(f"{a.title} ({a.severity.value})" for a in anomalies[:top_n])
    severity = max(
        (a.severity for a in anomalies),
        key=SEVERITY_RANK.__getitem__,
        default=Severity.LOW,
    )
    return Notification(
        title=f"Executive alerts ({len(anomalies)})",
        body=snippet or SUMMARY_FALLBACK_BODY,
        severity=severity,
        user_id=None,
        metadata={"anomalies": [a.title for a in anomalies]},
    )


class NotificationDispatcher:
    """Publishes one summary notification per distinct anomaly set."""

    def __init__(
        self,
        publisher: NotificationPublisher,
        state: Optional[DispatchState] = None,
        top_n: Optional[int] = None,
    ) -> None:
        self._publisher = publisher
        self.state = state or DispatchState()
        self._top_n = top_n or settings.analytics.notification_top_n
        self._pending: set[asyncio.Task] = set()

    async def dispatch(self, anomalies: Sequence[Anomaly]) -> bool:
        """Notify if the anomaly set changed since the last notification.

        Returns True when a publish task was started.
        """
        if not anomalies:
            return False

        signature = anomaly_signature(anomalies)
        async with self.state.lock:
            if signature == self.state.last_signature:
                logger.debug("Anomaly set unchanged, skipping notification")
                return False
            self.state.last_signature = signature

        notification = build_summary_notification(anomalies, self._top_n)
        task = asyncio.create_task(self._publish(notification))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return True

    async def _publish(self, notification: Notification) -> None:
        try:
            await self._publisher.publish_notification(notification)
        except Exception:
            logger.warning("Failed to publish notification %r", notification.title, exc_info=True)

    async def drain(self) -> None:
        """Wait for every in-flight publish task to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending))
