"""
Centralized configuration with environment variable overrides.

Scheduling defaults, analytics thresholds, SLA summary defaults and the
database URL are all configurable here. Nothing is hardcoded in the
scheduler or analytics logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from consulting_core.logging_context import RequestIdFilter

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    raw = os.getenv(env_var, default)
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class SchedulingConfig:
    """Booking path defaults."""

    default_duration_minutes: int = _safe_int("DEFAULT_DURATION_MINUTES", "60")
    default_sla_hours: int = _safe_int("DEFAULT_SLA_HOURS", "24")
    ticket_prefix: str = os.getenv("TICKET_PREFIX", "C")


@dataclass(frozen=True)
class AnalyticsConfig:
    """Executive dashboard targets and anomaly thresholds."""

    target_fill_days: float = _safe_float("TARGET_FILL_DAYS", "25")
    pending_bookings_threshold: int = _safe_int("PENDING_BOOKINGS_THRESHOLD", "5")
    pending_tickets_threshold: int = _safe_int("PENDING_TICKETS_THRESHOLD", "4")
    acceptance_rate_threshold: float = _safe_float("ACCEPTANCE_RATE_THRESHOLD", "70")
    resolve_hours_threshold: float = _safe_float("RESOLVE_HOURS_THRESHOLD", "18")
    notification_top_n: int = _safe_int("NOTIFICATION_TOP_N", "3")


@dataclass(frozen=True)
class SlaConfig:
    """Fallback values for the SLA summary shown on the executive dashboard."""

    consulting_response_hours: float = _safe_float("SLA_CONSULTING_RESPONSE_HOURS", "8")
    consulting_delivery_hours: float = _safe_float("SLA_CONSULTING_DELIVERY_HOURS", "48")
    hiring_first_response_hours: int = _safe_int("SLA_HIRING_FIRST_RESPONSE_HOURS", "24")
    hiring_decision_days: int = _safe_int("SLA_HIRING_DECISION_DAYS", "7")
    tickets_first_response_hours: int = _safe_int("SLA_TICKETS_FIRST_RESPONSE_HOURS", "4")
    tickets_resolution_hours: int = _safe_int("SLA_TICKETS_RESOLUTION_HOURS", "24")
    target_compliance: int = _safe_int("SLA_TARGET_COMPLIANCE", "92")


@dataclass(frozen=True)
class DatabaseConfig:
    """Relational persistence settings."""

    url: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    echo: bool = _safe_bool("DATABASE_ECHO", "false")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    sla: SlaConfig = field(default_factory=SlaConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "consulting-core")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.scheduling.default_duration_minutes < 1:
        raise ValueError(
            "DEFAULT_DURATION_MINUTES must be >= 1, "
            f"got {config.scheduling.default_duration_minutes}"
        )
    if config.scheduling.default_sla_hours < 1:
        raise ValueError(
            f"DEFAULT_SLA_HOURS must be >= 1, got {config.scheduling.default_sla_hours}"
        )
    if not config.scheduling.ticket_prefix.strip():
        raise ValueError("TICKET_PREFIX must not be empty")

    if config.analytics.target_fill_days < 0:
        raise ValueError(
            f"TARGET_FILL_DAYS must be >= 0, got {config.analytics.target_fill_days}"
        )
    if not 0.0 <= config.analytics.acceptance_rate_threshold <= 100.0:
        raise ValueError(
            "ACCEPTANCE_RATE_THRESHOLD must be between 0 and 100, "
            f"got {config.analytics.acceptance_rate_threshold}"
        )
    for name, value in [
        ("PENDING_BOOKINGS_THRESHOLD", config.analytics.pending_bookings_threshold),
        ("PENDING_TICKETS_THRESHOLD", config.analytics.pending_tickets_threshold),
        ("RESOLVE_HOURS_THRESHOLD", config.analytics.resolve_hours_threshold),
    ]:
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value}")
    if config.analytics.notification_top_n < 1:
        raise ValueError(
            f"NOTIFICATION_TOP_N must be >= 1, got {config.analytics.notification_top_n}"
        )

    if not 0 <= config.sla.target_compliance <= 100:
        raise ValueError(
            "SLA_TARGET_COMPLIANCE must be between 0 and 100, "
            f"got {config.sla.target_compliance}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s [%(request_id)s %(scope)s]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # every record needs request_id and scope for the format above, not only request loggers
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
    logger.info("Configuration loaded for '%s'", config.service_name)
    return config


# Singleton instance
settings = load_config()
