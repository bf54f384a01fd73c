"""Tests for weekday availability and HH:MM slot arithmetic."""

from datetime import date, timedelta

import pytest

from consulting_core.scheduling.availability import check_day_availability, weekday_of
from consulting_core.scheduling.time_utils import build_slot, format_minutes, parse_time_to_minutes
from consulting_core.schemas.booking_schema import Weekday
from tests.conftest import MONDAY, SUNDAY, TUESDAY, make_consultant


class TestWeekdayOf:
    def test_known_dates(self):
        assert weekday_of(SUNDAY) == Weekday.SUNDAY
        assert weekday_of(MONDAY) == Weekday.MONDAY
        assert weekday_of(TUESDAY) == Weekday.TUESDAY


class TestCheckDayAvailability:
    def test_tuesday_unavailable_for_sunday_monday_consultant(self):
        consultant = make_consultant(days=[Weekday.SUNDAY, Weekday.MONDAY])
        result = check_day_availability(consultant, TUESDAY)
        assert result.available is False
        assert result.weekday == Weekday.TUESDAY

    def test_working_day_available(self):
        consultant = make_consultant(days=[Weekday.SUNDAY, Weekday.MONDAY])
        assert check_day_availability(consultant, MONDAY).available is True

    def test_inactive_entry_counts_as_unavailable(self):
        consultant = make_consultant(days=[Weekday.MONDAY], inactive_days=[Weekday.SUNDAY])
        result = check_day_availability(consultant, SUNDAY)
        assert result.available is False
        assert result.weekday == Weekday.SUNDAY

    def test_no_availability_means_every_day(self):
        consultant = make_consultant(days=None)
        for offset in range(7):
            assert check_day_availability(consultant, SUNDAY + timedelta(days=offset)).available

    def test_empty_availability_means_every_day(self):
        consultant = make_consultant(days=[])
        assert check_day_availability(consultant, TUESDAY).available is True

    def test_matches_active_set_across_a_year(self):
        active = {Weekday.SUNDAY, Weekday.WEDNESDAY, Weekday.FRIDAY}
        consultant = make_consultant(days=sorted(active), inactive_days=[Weekday.MONDAY])
        day = date(2024, 1, 1)
        while day.year == 2024:
            result = check_day_availability(consultant, day)
            assert result.available == (result.weekday in active)
            day += timedelta(days=1)


class TestParseTimeToMinutes:
    @pytest.mark.parametrize("value,expected", [
        ("00:00", 0),
        ("09:05", 545),
        ("10:30", 630),
        ("23:59", 1439),
    ])
    def test_valid(self, value, expected):
        assert parse_time_to_minutes(value) == expected

    @pytest.mark.parametrize("value", [None, "", "10", "10:30:00", "ab:cd", "10h30"])
    def test_invalid(self, value):
        assert parse_time_to_minutes(value) is None

    @pytest.mark.parametrize("value", ["1_0:00", "10:3_0", "\u0661\u0660:00", "10:\u0663\u0660", "1e1:00"])
    def test_only_ascii_digits_accepted(self, value):
        assert parse_time_to_minutes(value) is None

    def test_out_of_range_values_are_not_clamped(self):
        assert parse_time_to_minutes("25:99") == 1599
        assert parse_time_to_minutes("-1:00") == -60
        assert parse_time_to_minutes(" 9:05 ") == 545


class TestSlotHelpers:
    def test_build_slot(self):
        slot = build_slot(630, 45)
        assert (slot.start_minutes, slot.end_minutes) == (630, 675)

    def test_format_minutes(self):
        assert format_minutes(545) == "09:05"
        assert format_minutes(675) == "11:15"
