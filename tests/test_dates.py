"""Tests for the logical calendar."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from jogfile.core.dates import LogicalCalendar, parse_date_key
from jogfile.core.errors import ValidationFailure

LA = ZoneInfo("America/Los_Angeles")


@pytest.fixture
def calendar():
    return LogicalCalendar(timezone="America/Los_Angeles", day_start_hour=3)


def at(year, month, day, hour, minute=0, second=0, microsecond=0):
    return datetime(year, month, day, hour, minute, second, microsecond, tzinfo=LA)


class TestDayWindow:
    def test_morning_belongs_to_same_day(self, calendar):
        window = calendar.day_window(at(2026, 1, 22, 10))
        assert window.key == date(2026, 1, 22)
        assert window.start == at(2026, 1, 22, 3)
        assert window.end == at(2026, 1, 23, 3)

    def test_before_start_hour_belongs_to_previous_day(self, calendar):
        window = calendar.day_window(at(2026, 1, 22, 2))
        assert window.key == date(2026, 1, 21)
        assert window.start == at(2026, 1, 21, 3)
        assert window.end == at(2026, 1, 22, 3)

    def test_exactly_at_start_hour_is_new_day(self, calendar):
        assert calendar.day_key(at(2026, 1, 22, 3)) == date(2026, 1, 22)

    def test_one_tick_before_start_hour_is_previous_day(self, calendar):
        instant = at(2026, 1, 22, 3) - timedelta(microseconds=1)
        assert calendar.day_key(instant) == date(2026, 1, 21)

    def test_late_evening(self, calendar):
        window = calendar.day_window(at(2026, 1, 22, 23, 59))
        assert window.key == date(2026, 1, 22)
        assert window.end.date() == date(2026, 1, 23)

    def test_converts_other_zones(self, calendar):
        # 09:30 UTC is 01:30 in Los Angeles (PST, UTC-8)
        instant = datetime(2026, 1, 22, 9, 30, tzinfo=timezone.utc)
        assert calendar.day_key(instant) == date(2026, 1, 21)

    def test_naive_datetime_is_local_wall_time(self, calendar):
        assert calendar.day_key(datetime(2026, 1, 22, 2, 0)) == date(2026, 1, 21)
        assert calendar.day_key(datetime(2026, 1, 22, 4, 0)) == date(2026, 1, 22)

    def test_contains(self, calendar):
        window = calendar.day_window(at(2026, 1, 22, 10))
        assert window.contains(at(2026, 1, 22, 3))
        assert window.contains(at(2026, 1, 23, 2, 59))
        assert not window.contains(at(2026, 1, 23, 3))
        assert not window.contains(at(2026, 1, 22, 2, 59))

    def test_midpoint(self, calendar):
        window = calendar.day_window(at(2026, 1, 22, 10))
        assert window.midpoint == at(2026, 1, 22, 15)
        assert window.contains(window.midpoint)


class TestHourRule:
    @pytest.mark.parametrize("hour", range(24))
    def test_day_key_matches_local_date_rule(self, calendar, hour):
        instant = at(2026, 3, 1, hour, 30)
        expected = date(2026, 3, 1) if hour >= 3 else date(2026, 2, 28)
        assert calendar.day_key(instant) == expected


class TestTiling:
    @pytest.mark.parametrize(
        "instant",
        [
            at(2026, 1, 22, 10),
            at(2026, 2, 28, 12),  # month end
            at(2026, 3, 8, 1),  # DST starts this night
            at(2026, 11, 1, 1),  # DST ends this night
            at(2026, 12, 31, 23),
        ],
    )
    def test_windows_tile_without_gap_or_overlap(self, calendar, instant):
        window = calendar.day_window(instant)
        assert calendar.day_window(window.end).start == window.end

    def test_dst_spring_forward_window_is_23_hours(self, calendar):
        # Clocks jump from 02:00 to 03:00 on the morning of March 8
        window = calendar.window_for_key(date(2026, 3, 7))
        elapsed = window.end.astimezone(timezone.utc) - window.start.astimezone(timezone.utc)
        assert elapsed == timedelta(hours=23)
        assert window.end.hour == 3

    def test_tomorrow_window(self, calendar):
        today = calendar.day_window(at(2026, 1, 31, 12))
        tomorrow = calendar.tomorrow_window(at(2026, 1, 31, 12))
        assert tomorrow.key == date(2026, 2, 1)
        assert tomorrow.start == today.end


class TestScheduleInstant:
    def test_is_local_noon(self, calendar):
        assert calendar.schedule_instant(date(2026, 1, 25)) == at(2026, 1, 25, 12)

    def test_falls_inside_its_own_day(self, calendar):
        key = date(2026, 1, 25)
        assert calendar.day_key(calendar.schedule_instant(key)) == key


class TestConfiguration:
    def test_rejects_hour_after_noon(self):
        with pytest.raises(ValidationFailure):
            LogicalCalendar(day_start_hour=13)

    def test_rejects_negative_hour(self):
        with pytest.raises(ValidationFailure):
            LogicalCalendar(day_start_hour=-1)

    def test_rejects_unknown_timezone(self):
        with pytest.raises(ValidationFailure, match="Unknown timezone"):
            LogicalCalendar(timezone="Mars/Olympus_Mons")

    def test_midnight_start(self):
        calendar = LogicalCalendar(timezone="UTC", day_start_hour=0)
        instant = datetime(2026, 1, 22, 0, 0, tzinfo=timezone.utc)
        assert calendar.day_key(instant) == date(2026, 1, 22)


class TestParseDateKey:
    def test_valid(self):
        assert parse_date_key("2026-01-25") == date(2026, 1, 25)

    def test_strips_whitespace(self):
        assert parse_date_key(" 2026-01-25 ") == date(2026, 1, 25)

    @pytest.mark.parametrize("value", ["", "tomorrow", "2026-13-01", "2026-02-30"])
    def test_invalid(self, value):
        with pytest.raises(ValidationFailure, match="Invalid date"):
            parse_date_key(value)
