"""Ticket, metrics, anomaly and notification schemas for the executive dashboard."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    CLOSED = "closed"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SEVERITY_RANK: dict[Severity, int] = {
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


class ConsultingTicket(BaseModel):
    """Support ticket raised by a client."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_number: str = ""
    client_id: Optional[int] = None
    status: TicketStatus = TicketStatus.OPEN
    created_at: datetime


class TicketResponse(BaseModel):
    """A single reply on a ticket."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    ticket_id: int
    message: str = ""
    created_at: datetime


class Anomaly(BaseModel):
    """Operational anomaly shown on the executive dashboard. Never persisted."""
    title: str
    detail: str
    severity: Severity
    action: str


class MetricsSnapshot(BaseModel):
    """Derived KPIs, recomputed per dashboard read."""
    time_to_fill_days: int = 0
    time_to_fill_delta: int = 0
    time_to_resolve_hours: int = 0
    consulting_revenue: float = 0.0
    offer_acceptance_rate: int = 0
    pending_ticket_count: int = 0
    pending_consultation_count: int = 0
    completed_consultation_count: int = 0


class HiringSla(BaseModel):
    first_response_hours: int
    decision_days: int


class TicketSla(BaseModel):
    first_response_hours: int
    resolution_hours: int


class ConsultingSla(BaseModel):
    first_response_hours: int
    delivery_hours: int


class SlaSummary(BaseModel):
    """Service-level targets displayed next to the KPIs."""
    hiring: HiringSla
    tickets: TicketSla
    consulting: ConsultingSla
    target_compliance: int


class ExecutiveSnapshot(BaseModel):
    """Everything the executive dashboard renders.

    ``fallback`` is True when the analytics pass failed and the zeroed
    placeholder was returned instead of live figures.
    """
    metrics: MetricsSnapshot
    anomalies: list[Anomaly] = Field(default_factory=list)
    sla: SlaSummary
    fallback: bool = False


class Notification(BaseModel):
    """Operator notification handed to the publishing collaborator."""
    title: str
    body: str
    severity: Severity
    user_id: Optional[int] = None
    metadata: Optional[dict[str, Any]] = None
