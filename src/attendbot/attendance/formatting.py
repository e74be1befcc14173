"""Slack mrkdwn rendering of query results."""

import math
from collections import Counter
from collections.abc import Sequence

from attendbot.attendance.models import AttendanceRecord
from attendbot.attendance.schemas import Category, QueryPlan
from attendbot.attendance.timeframes import format_day, format_time_frame_text

NO_RESULTS_TEXT = "No matching records found for your query."
MAX_BAR_WIDTH = 10
TOP_USERS = 5


def _category_heading(plan: QueryPlan) -> str:
    if plan.category == "all":
        return "Attendance"
    return Category(plan.category).display_name


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def format_record(record: AttendanceRecord) -> str:
    """One record as a Slack block."""
    start = format_day(record.start_date) if record.start_date else "?"
    end = format_day(record.end_date) if record.end_date else start
    return (
        f"👤 *{record.display_name}*\n"
        f"  📅 Dates: {start} - {end}\n"
        f"  🏷️ Type: {record.category.display_name}\n"
        f"  📝 {record.message or 'No message provided'}"
    )


def format_records(records: Sequence[AttendanceRecord]) -> str:
    return "\n\n".join(format_record(record) for record in records)


def format_count(plan: QueryPlan, records: Sequence[AttendanceRecord]) -> str:
    """Ranked per-user counts, or a plain total when not grouped by user."""
    if plan.group_by != "user":
        return f"Found {_plural(len(records), 'matching record')}."

    counts = Counter(record.display_name for record in records)
    lines = [
        f"*{_category_heading(plan)} Count for {format_time_frame_text(plan.time_frame)}*",
        "",
    ]
    for rank, (user, count) in enumerate(counts.most_common(plan.limit), start=1):
        lines.append(f"{rank}. {user}: {_plural(count, 'time')}")
    lines.append("")
    lines.append(f"Found {_plural(len(records), 'matching record')}.")
    return "\n".join(lines)


def format_trend(plan: QueryPlan, records: Sequence[AttendanceRecord]) -> str:
    """Records per start date as a bar chart scaled to at most ten blocks."""
    daily = Counter(record.start_date for record in records if record.start_date)
    if not daily:
        return "No data available for trend analysis."

    max_count = max(daily.values())
    scale = MAX_BAR_WIDTH / max_count if max_count > MAX_BAR_WIDTH else 1

    lines = [
        f"*{_category_heading(plan)} Trend for {format_time_frame_text(plan.time_frame)}*",
        "",
    ]
    for day in sorted(daily):
        count = daily[day]
        bars = "█" * math.ceil(count * scale)
        lines.append(f"{day.strftime('%a')}, {format_day(day)}: {bars} ({count})")
    return "\n".join(lines)


def format_summary(plan: QueryPlan, records: Sequence[AttendanceRecord]) -> str:
    """Counts by category, the most frequent users, and the total."""
    by_category = Counter(record.category for record in records)
    by_user = Counter(record.display_name for record in records)

    lines = [f"*Attendance Summary for {format_time_frame_text(plan.time_frame)}*", ""]
    lines.append("*By Category:*")
    for category, count in by_category.most_common():
        lines.append(f"• {category.display_name}: {count}")

    lines.append("")
    lines.append("*Top Users:*")
    for rank, (user, count) in enumerate(by_user.most_common(TOP_USERS), start=1):
        lines.append(f"{rank}. {user}: {_plural(count, 'record')}")

    lines.append("")
    lines.append(f"*Total Records:* {len(records)}")
    return "\n".join(lines)


def format_list(plan: QueryPlan, records: Sequence[AttendanceRecord]) -> str:
    shown = records[: plan.limit]
    text = format_records(shown)
    if len(records) > len(shown):
        text += f"\n\n_...and {len(records) - len(shown)} more records_"
    return text


def format_query_response(plan: QueryPlan, records: Sequence[AttendanceRecord]) -> str:
    """Render query results according to the plan's query type."""
    if not records:
        return NO_RESULTS_TEXT

    if plan.query_type == "count":
        return format_count(plan, records)
    if plan.query_type == "trend":
        return format_trend(plan, records)
    if plan.query_type == "summary":
        return format_summary(plan, records)
    return format_list(plan, records)


def format_error(error: BaseException | str) -> str:
    """Error reply shown to the user; only the first line of the message."""
    text = str(error).strip() or error.__class__.__name__
    return f"⚠️ Error processing query: {text.splitlines()[0]}"
