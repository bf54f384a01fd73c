"""Consultant, catalog and booking data models."""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Weekday(str, Enum):
    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"


class ConsultantStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


class Channel(str, Enum):
    IN_PERSON = "in_person"
    VOICE = "voice"
    CHAT = "chat"


class ConsultationType(BaseModel):
    """Read-only catalog entry describing a kind of consultation."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str = ""
    duration: Optional[int] = None
    estimated_duration: Optional[int] = None
    sla_hours: Optional[int] = None
    price: Optional[float] = None
    base_price: Optional[float] = None


class AvailabilityEntry(BaseModel):
    """One weekday in a consultant's weekly schedule."""
    day: Weekday
    active: bool = True


class ConsultantSla(BaseModel):
    """Consultant's own service terms. Values may arrive as numeric strings."""
    response_hours: Optional[Union[float, str]] = None
    delivery_hours: Optional[Union[float, str]] = None


class ConsultantChannels(BaseModel):
    in_person: bool = False
    voice: bool = False
    chat: bool = False


class Consultant(BaseModel):
    """Consultant profile as seen by the scheduler."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    full_name: str = ""
    status: ConsultantStatus = ConsultantStatus.PENDING
    availability: Optional[list[AvailabilityEntry]] = None
    sla: Optional[ConsultantSla] = None
    channels: Optional[ConsultantChannels] = None


class TimeSlot(BaseModel):
    """Half-open ``[start_minutes, end_minutes)`` interval on a single day."""
    start_minutes: int
    end_minutes: int


class DayAvailability(BaseModel):
    """Result of a weekday availability check."""
    available: bool
    weekday: Weekday


class DurationOverride(BaseModel):
    """Caller-supplied per-booking values that win over the catalog."""
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    sla_hours: Optional[int] = Field(default=None, gt=0)
    first_response_hours: Optional[int] = Field(default=None, gt=0)


class PackageOverride(BaseModel):
    """Package selected by the client, copied verbatim onto the booking."""
    package_name: Optional[str] = None
    package_price: Optional[float] = None
    package_sla_hours: Optional[int] = None


class ResolvedTerms(BaseModel):
    """Effective duration and SLA for a booking."""
    duration: int
    sla_hours: int
    first_response_hours: int


class BookingRequest(BaseModel):
    """Validated booking request data."""
    client_id: int
    consultant_id: int
    consultation_type_id: int
    scheduled_date: date
    scheduled_time: str
    description: Optional[str] = None
    subject: Optional[str] = None
    required_info: Optional[str] = None
    channel: Optional[Channel] = None
    status: BookingStatus = BookingStatus.PENDING
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    sla_hours: Optional[int] = Field(default=None, gt=0)
    first_response_hours: Optional[int] = Field(default=None, gt=0)
    package_name: Optional[str] = None
    package_price: Optional[float] = None
    package_sla_hours: Optional[int] = None

    def duration_override(self) -> DurationOverride:
        return DurationOverride(
            duration_minutes=self.duration_minutes,
            sla_hours=self.sla_hours,
            first_response_hours=self.first_response_hours,
        )

    def package_override(self) -> PackageOverride:
        return PackageOverride(
            package_name=self.package_name,
            package_price=self.package_price,
            package_sla_hours=self.package_sla_hours,
        )


class ConsultationBooking(BaseModel):
    """Booking record as persisted."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    ticket_number: Optional[str] = None
    client_id: int
    consultant_id: int
    consultation_type_id: int
    scheduled_date: date
    scheduled_time: Optional[str] = None
    duration_minutes: Optional[int] = None
    sla_hours: Optional[int] = None
    first_response_hours: Optional[int] = None
    status: BookingStatus = BookingStatus.PENDING
    subject: Optional[str] = None
    price: Optional[float] = None
    channel: Optional[Channel] = None
    description: Optional[str] = None
    required_info: Optional[dict[str, Any]] = None
    package_name: Optional[str] = None
    package_price: Optional[float] = None
    package_sla_hours: Optional[int] = None
    package_note: Optional[str] = None
    created_at: Optional[datetime] = None


class BookingResult(BaseModel):
    """Booking creation result."""
    booking_id: int
    ticket_number: str
