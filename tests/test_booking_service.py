"""Tests for the booking path: approval, day, time, conflict and persistence."""

import asyncio
import gc
import logging

import pytest

from consulting_core.repositories.memory import InMemoryBookingRepository
from consulting_core.scheduling.booking_service import (
    BookingRejectedError,
    BookingScheduler,
    ConsultantUnavailableError,
    DayUnavailableError,
    InvalidBookingTimeError,
    SlotConflictError,
    _consultant_locks,
    consultant_lock,
)
from consulting_core.scheduling.tickets import TicketNumberGenerator
from consulting_core.schemas.booking_schema import (
    BookingRequest,
    BookingStatus,
    ConsultantStatus,
)
from tests.conftest import MONDAY, SUNDAY, TUESDAY


class YieldingBookingRepository(InMemoryBookingRepository):
    """Suspends on every call so concurrent booking attempts interleave."""

    async def get_bookings_by_consultant(self, consultant_id):
        await asyncio.sleep(0)
        return await super().get_bookings_by_consultant(consultant_id)

    async def persist_booking(self, record):
        await asyncio.sleep(0)
        return await super().persist_booking(record)


def _request(**overrides) -> BookingRequest:
    data = dict(
        client_id=500,
        consultant_id=7,
        consultation_type_id=1,
        scheduled_date=SUNDAY,
        scheduled_time="10:00",
    )
    data.update(overrides)
    return BookingRequest(**data)


class TestCreateBooking:
    @pytest.mark.asyncio
    async def test_success_uses_type_terms(self, scheduler, booking_repo):
        result = await scheduler.create_booking(_request())
        assert result.booking_id == 1
        assert result.ticket_number.startswith("C-")

        [stored] = await booking_repo.get_all_bookings()
        assert stored.duration_minutes == 45
        assert stored.sla_hours == 24
        assert stored.subject == "Strategy session"
        assert stored.price == 150
        assert stored.status == BookingStatus.PENDING

    @pytest.mark.asyncio
    async def test_unknown_type_falls_back_to_defaults(self, scheduler, booking_repo):
        await scheduler.create_booking(_request(consultation_type_id=999))
        [stored] = await booking_repo.get_all_bookings()
        assert stored.duration_minutes == 60
        assert stored.sla_hours == 24
        assert stored.subject == "Consultation"

    @pytest.mark.asyncio
    async def test_unapproved_consultant_rejected(self, scheduler, booking_repo):
        with pytest.raises(ConsultantUnavailableError) as exc_info:
            await scheduler.create_booking(_request(consultant_id=8))
        assert exc_info.value.code == "BAD_REQUEST"
        assert exc_info.value.to_dict()["code"] == "BAD_REQUEST"
        assert await booking_repo.get_all_bookings() == []

    @pytest.mark.asyncio
    async def test_missing_consultant_rejected(self, scheduler):
        with pytest.raises(ConsultantUnavailableError):
            await scheduler.create_booking(_request(consultant_id=404))

    @pytest.mark.asyncio
    async def test_revoked_approval_is_seen_immediately(self, scheduler, consultant_repo):
        await scheduler.create_booking(_request())
        consultant_repo.set_status(7, ConsultantStatus.REJECTED)
        with pytest.raises(ConsultantUnavailableError):
            await scheduler.create_booking(_request(scheduled_time="14:00"))

    @pytest.mark.asyncio
    async def test_non_working_day_rejected(self, scheduler, booking_repo):
        with pytest.raises(DayUnavailableError, match="Tuesday"):
            await scheduler.create_booking(_request(scheduled_date=TUESDAY))
        assert await booking_repo.get_all_bookings() == []

    @pytest.mark.asyncio
    async def test_invalid_time_rejected(self, scheduler):
        with pytest.raises(InvalidBookingTimeError):
            await scheduler.create_booking(_request(scheduled_time="10am"))

    @pytest.mark.asyncio
    async def test_overlap_rejected(self, scheduler, booking_repo):
        await scheduler.create_booking(_request(scheduled_time="10:00"))
        with pytest.raises(SlotConflictError):
            await scheduler.create_booking(_request(scheduled_time="10:30"))
        assert len(await booking_repo.get_all_bookings()) == 1

    @pytest.mark.asyncio
    async def test_adjacent_slot_accepted(self, scheduler, booking_repo):
        await scheduler.create_booking(_request(scheduled_time="10:00"))
        await scheduler.create_booking(_request(scheduled_time="10:45"))
        assert len(await booking_repo.get_all_bookings()) == 2

    @pytest.mark.asyncio
    async def test_same_time_other_day_accepted(self, scheduler, booking_repo):
        await scheduler.create_booking(_request(scheduled_date=SUNDAY))
        await scheduler.create_booking(_request(scheduled_date=MONDAY))
        assert len(await booking_repo.get_all_bookings()) == 2

    @pytest.mark.asyncio
    async def test_cancelled_booking_frees_slot(self, scheduler, booking_repo):
        first = await scheduler.create_booking(_request())
        booking_repo.set_status(first.booking_id, BookingStatus.CANCELLED)
        second = await scheduler.create_booking(_request())
        assert second.booking_id != first.booking_id

    @pytest.mark.asyncio
    async def test_override_duration_drives_conflict(self, scheduler):
        await scheduler.create_booking(_request(scheduled_time="10:00", duration_minutes=120))
        with pytest.raises(SlotConflictError):
            await scheduler.create_booking(_request(scheduled_time="11:30"))

    @pytest.mark.asyncio
    async def test_rejections_share_base_class(self, scheduler):
        with pytest.raises(BookingRejectedError):
            await scheduler.create_booking(_request(scheduled_date=TUESDAY))


class TestConcurrentBooking:
    @pytest.mark.asyncio
    async def test_concurrent_overlapping_requests_yield_one_booking(self, scheduler, booking_repo):
        results = await asyncio.gather(
            *(scheduler.create_booking(_request(client_id=500 + i)) for i in range(5)),
            return_exceptions=True,
        )
        successes = [r for r in results if not isinstance(r, Exception)]
        conflicts = [r for r in results if isinstance(r, SlotConflictError)]
        assert len(successes) == 1
        assert len(conflicts) == 4
        assert len(await booking_repo.get_all_bookings()) == 1

    @pytest.mark.asyncio
    async def test_ticket_numbers_unique(self, scheduler):
        results = await asyncio.gather(
            *(scheduler.create_booking(_request(scheduled_time=f"{h:02d}:00")) for h in range(8, 16))
        )
        assert len({r.ticket_number for r in results}) == len(results)


class TestCheckBookingConflictQuery:
    @pytest.mark.asyncio
    async def test_queries_repository(self, scheduler):
        from consulting_core.scheduling.time_utils import build_slot

        await scheduler.create_booking(_request(scheduled_time="10:00"))
        assert await scheduler.check_booking_conflict(7, SUNDAY, build_slot(630, 60), 60)
        assert not await scheduler.check_booking_conflict(7, SUNDAY, build_slot(645, 60), 60)


class TestSchedulersSharingAProcess:
    @pytest.mark.asyncio
    async def test_two_schedulers_serialise_the_same_consultant(
        self, consultant_repo, catalog_repo
    ):
        booking_repo = YieldingBookingRepository()
        first = BookingScheduler(consultant_repo, catalog_repo, booking_repo)
        second = BookingScheduler(consultant_repo, catalog_repo, booking_repo)
        results = await asyncio.gather(
            *(
                scheduler.create_booking(_request(client_id=600 + i))
                for i, scheduler in enumerate([first, second] * 3)
            ),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 5
        assert all(isinstance(r, SlotConflictError) for r in failures)
        assert len(await booking_repo.get_all_bookings()) == 1

    @pytest.mark.asyncio
    async def test_two_schedulers_issue_distinct_ticket_numbers(
        self, consultant_repo, catalog_repo, booking_repo
    ):
        frozen = TicketNumberGenerator(clock=lambda: 1.0)
        other = TicketNumberGenerator(clock=lambda: 1.0)
        first = BookingScheduler(consultant_repo, catalog_repo, booking_repo, frozen)
        second = BookingScheduler(consultant_repo, catalog_repo, booking_repo, other)
        a = await first.create_booking(_request(scheduled_time="09:00"))
        b = await second.create_booking(_request(scheduled_time="12:00"))
        assert a.ticket_number != b.ticket_number

    @pytest.mark.asyncio
    async def test_idle_consultant_locks_are_released(self, scheduler):
        await scheduler.create_booking(_request())
        gc.collect()
        assert 7 not in _consultant_locks

    def test_lock_shared_while_held(self):
        lock = consultant_lock(42)
        assert consultant_lock(42) is lock


class TestBookingLogScope:
    @pytest.mark.asyncio
    async def test_rejection_logged_with_consultant_scope(self, scheduler, caplog):
        caplog.set_level(logging.INFO, logger="consulting_core.scheduling.booking_service")
        with pytest.raises(ConsultantUnavailableError):
            await scheduler.create_booking(_request(consultant_id=8))
        [record] = [r for r in caplog.records if "not approved" in r.getMessage()]
        assert record.consultant_id == 8
        assert record.scope == "consultant=8"
