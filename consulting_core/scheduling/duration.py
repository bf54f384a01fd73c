"""
Duration and SLA resolution plus the small consultant/package helpers
used when a booking record is assembled.

Precedence is applied independently to each value:
explicit override, then the consultation type, then the package (SLA
only), then the configured hard default.
"""

import json
import logging
from typing import Any, Optional

from consulting_core.config import settings
from consulting_core.schemas.booking_schema import (
    Channel,
    Consultant,
    ConsultationType,
    DurationOverride,
    PackageOverride,
    ResolvedTerms,
)
from consulting_core.utils import parse_number

logger = logging.getLogger(__name__)


def _first_present(*values: Optional[int]) -> Optional[int]:
    for value in values:
        if value is not None:
            return value
    return None


def resolve_duration_and_sla(
    override: Optional[DurationOverride] = None,
    consultation_type: Optional[ConsultationType] = None,
    package_override: Optional[PackageOverride] = None,
) -> ResolvedTerms:
    """Resolve the effective duration (minutes) and SLA hours for a booking."""
    override = override or DurationOverride()
    defaults = settings.scheduling

    type_duration = type_estimated = type_sla = None
    if consultation_type is not None:
        type_duration = consultation_type.duration
        type_estimated = consultation_type.estimated_duration
        type_sla = consultation_type.sla_hours

    package_sla = package_override.package_sla_hours if package_override else None

    duration = _first_present(
        override.duration_minutes, type_duration, type_estimated,
        defaults.default_duration_minutes,
    )
    sla_hours = _first_present(
        override.sla_hours, type_sla, package_sla, defaults.default_sla_hours,
    )
    first_response_hours = _first_present(
        override.first_response_hours, type_sla, defaults.default_sla_hours,
    )

    return ResolvedTerms(
        duration=duration,
        sla_hours=sla_hours,
        first_response_hours=first_response_hours,
    )


def extract_sla_info(consultant: Consultant) -> tuple[Optional[float], Optional[float]]:
    """Return ``(delivery_hours, response_hours)`` from the consultant's SLA terms."""
    if consultant.sla is None:
        return None, None
    sla_hours = parse_number(consultant.sla.delivery_hours) if consultant.sla.delivery_hours else None
    first_response = parse_number(consultant.sla.response_hours) if consultant.sla.response_hours else None
    return sla_hours, first_response


def determine_preferred_channel(consultant: Consultant) -> Optional[Channel]:
    """In-person beats voice, voice beats chat."""
    channels = consultant.channels
    if channels is None:
        return None
    if channels.in_person:
        return Channel.IN_PERSON
    if channels.voice:
        return Channel.VOICE
    if channels.chat:
        return Channel.CHAT
    return None


def parse_required_info(raw: Optional[str]) -> Optional[dict[str, Any]]:
    """Parse the client's extra-information blob.

    Non-JSON text is kept under a ``raw`` key rather than rejected.
    """
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return {"raw": raw}
    if not isinstance(parsed, dict):
        return {"raw": parsed}
    return parsed


def build_package_note(package: PackageOverride) -> Optional[str]:
    """Summarise the selected package for the consultant, or None if no package."""
    parts = []
    if package.package_name:
        parts.append(f"Package: {package.package_name}")
    if package.package_price is not None:
        parts.append(f"Price: {package.package_price:g}")
    if package.package_sla_hours:
        parts.append(f"SLA: {package.package_sla_hours}h")

    if not parts:
        return None
    return "Selected package details:\n" + " | ".join(parts)
