"""Request logging context for booking attempts and dashboard reads.

Every log record carries the request correlation ID plus the scope the
request is working in: the consultant being booked, or the dashboard
channel being computed. A single booking attempt or dashboard read can
then be followed through the scheduler, the repositories and the
notification dispatcher.

Usage:
    from consulting_core.logging_context import booking_scope, get_request_logger, set_request_id

    set_request_id("REQ-abc123")
    logger = get_request_logger(__name__)
    with booking_scope(7):
        logger.info("Creating booking")  # record.scope == "consultant=7"
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional

NO_SCOPE = "-"

_request_id: ContextVar[str] = ContextVar("request_id", default="NO_REQUEST_ID")
_consultant_id: ContextVar[Optional[int]] = ContextVar("consultant_id", default=None)
_dashboard_channel: ContextVar[Optional[str]] = ContextVar("dashboard_channel", default=None)


def set_request_id(request_id: Optional[str] = None) -> str:
    """Start a new request in the current async context.

    A fresh ``REQ-xxxxxxxx`` id is generated when none is given.
    """
    value = request_id or f"REQ-{uuid.uuid4().hex[:8]}"
    _request_id.set(value)
    return value


def get_request_id() -> str:
    return _request_id.get()


@contextmanager
def booking_scope(consultant_id: int) -> Iterator[None]:
    """Tag log records with the consultant a booking is being made for."""
    token = _consultant_id.set(consultant_id)
    try:
        yield
    finally:
        _consultant_id.reset(token)


@contextmanager
def dashboard_scope(channel: str) -> Iterator[None]:
    """Tag log records with the dashboard channel being computed."""
    token = _dashboard_channel.set(channel)
    try:
        yield
    finally:
        _dashboard_channel.reset(token)


def describe_scope() -> str:
    """``consultant=<id>`` and/or ``channel=<name>``, or ``-`` outside any scope."""
    parts = []
    consultant_id = _consultant_id.get()
    if consultant_id is not None:
        parts.append(f"consultant={consultant_id}")
    channel = _dashboard_channel.get()
    if channel is not None:
        parts.append(f"channel={channel}")
    return " ".join(parts) or NO_SCOPE


class RequestIdFilter(logging.Filter):
    """Adds request_id, consultant_id, dashboard_channel and scope to records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        record.consultant_id = _consultant_id.get()  # type: ignore[attr-defined]
        record.dashboard_channel = _dashboard_channel.get()  # type: ignore[attr-defined]
        record.scope = describe_scope()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached.

    Formatters can then use ``%(request_id)s`` and ``%(scope)s``.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger
