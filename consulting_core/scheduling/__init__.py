from consulting_core.scheduling.availability import check_day_availability
from consulting_core.scheduling.booking_service import (
    BookingRejectedError,
    BookingScheduler,
    ConsultantUnavailableError,
    DayUnavailableError,
    InvalidBookingTimeError,
    SlotConflictError,
)
from consulting_core.scheduling.conflicts import check_booking_conflict
from consulting_core.scheduling.duration import resolve_duration_and_sla
from consulting_core.scheduling.tickets import BookingTicketFactory, TicketNumberGenerator
from consulting_core.scheduling.time_utils import parse_time_to_minutes

__all__ = [
    "BookingScheduler",
    "BookingTicketFactory",
    "TicketNumberGenerator",
    "BookingRejectedError",
    "ConsultantUnavailableError",
    "DayUnavailableError",
    "InvalidBookingTimeError",
    "SlotConflictError",
    "check_day_availability",
    "check_booking_conflict",
    "resolve_duration_and_sla",
    "parse_time_to_minutes",
]
