"""Tests for time frame resolution and labels."""

from datetime import date

import pytest

from attendbot.attendance.schemas import TimeRange
from attendbot.attendance.timeframes import format_day, format_time_frame_text, resolve_time_frame


@pytest.mark.parametrize(
    "time_frame,expected",
    [
        ("day", (date(2026, 10, 21), date(2026, 10, 21))),
        ("week", (date(2026, 10, 19), date(2026, 10, 25))),
        ("month", (date(2026, 10, 1), date(2026, 10, 31))),
        ("quarter", (date(2026, 10, 1), date(2026, 12, 31))),
        ("year", (date(2026, 1, 1), date(2026, 12, 31))),
    ],
)
def test_resolve_named_time_frames(time_frame, expected):
    # Wednesday
    assert resolve_time_frame(time_frame, date(2026, 10, 21)) == expected


def test_resolve_february_in_leap_year():
    assert resolve_time_frame("month", date(2028, 2, 10)) == (date(2028, 2, 1), date(2028, 2, 29))


def test_resolve_first_quarter():
    assert resolve_time_frame("quarter", date(2026, 2, 14)) == (date(2026, 1, 1), date(2026, 3, 31))


def test_resolve_explicit_range(today):
    time_range = TimeRange(start=date(2026, 3, 1), end=date(2026, 3, 5))
    assert resolve_time_frame(time_range, today) == (date(2026, 3, 1), date(2026, 3, 5))


def test_format_time_frame_text():
    assert format_time_frame_text("day") == "Today"
    assert format_time_frame_text("week") == "This Week"
    assert format_time_frame_text("quarter") == "This Quarter"
    time_range = TimeRange(start=date(2026, 3, 1), end=date(2026, 3, 5))
    assert format_time_frame_text(time_range) == "1 Mar 2026 to 5 Mar 2026"


def test_format_day():
    assert format_day(date(2026, 10, 19)) == "19 Oct 2026"
