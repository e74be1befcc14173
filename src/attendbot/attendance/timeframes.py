"""Calendar helpers for query time frames."""

import calendar
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from attendbot.attendance.schemas import TimeFrameName, TimeRange


def local_today(tz_name: str) -> date:
    """Today's date in the given IANA timezone."""
    return datetime.now(ZoneInfo(tz_name)).date()


def resolve_time_frame(time_frame: TimeFrameName | TimeRange, today: date) -> tuple[date, date]:
    """Turn a plan's time frame into an inclusive (start, end) date window.

    Named frames are the calendar period containing ``today``: the day,
    the Monday-Sunday week, the month, the quarter or the year.
    """
    if isinstance(time_frame, TimeRange):
        return time_frame.start, time_frame.end

    if time_frame == "week":
        start = today - timedelta(days=today.weekday())
        return start, start + timedelta(days=6)
    if time_frame == "month":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    if time_frame == "quarter":
        first_month = 3 * ((today.month - 1) // 3) + 1
        last_month = first_month + 2
        last_day = calendar.monthrange(today.year, last_month)[1]
        return date(today.year, first_month, 1), date(today.year, last_month, last_day)
    if time_frame == "year":
        return date(today.year, 1, 1), date(today.year, 12, 31)
    return today, today


def format_time_frame_text(time_frame: TimeFrameName | TimeRange) -> str:
    """Human label for a time frame, used in reply headers."""
    if isinstance(time_frame, TimeRange):
        return f"{format_day(time_frame.start)} to {format_day(time_frame.end)}"

    return {
        "day": "Today",
        "week": "This Week",
        "month": "This Month",
        "quarter": "This Quarter",
        "year": "This Year",
    }.get(time_frame, "Selected Period")


def format_day(value: date) -> str:
    """Render a date as ``19 Oct 2026``."""
    return f"{value.day} {value.strftime('%b %Y')}"
