"""Tests for Slack reply formatting."""

from datetime import date

from attendbot.attendance.formatting import (
    NO_RESULTS_TEXT,
    format_error,
    format_query_response,
    format_record,
)
from attendbot.attendance.models import AttendanceRecord
from attendbot.attendance.schemas import Category, QueryPlan


def record(
    name: str | None = "Alice Smith",
    category: Category = Category.WFH,
    start: date = date(2026, 10, 19),
    end: date | None = None,
    message: str | None = "wfh today",
    **fields,
) -> AttendanceRecord:
    return AttendanceRecord(
        user_id=fields.pop("user_id", "U001"),
        user_name=name,
        category=category,
        start_date=start,
        end_date=end or start,
        message=message,
        **fields,
    )


class TestFormatRecord:
    def test_record_block(self):
        text = format_record(
            record(category=Category.FULL_LEAVE, end=date(2026, 10, 21), message="off till wed")
        )

        assert text == (
            "👤 *Alice Smith*\n"
            "  📅 Dates: 19 Oct 2026 - 21 Oct 2026\n"
            "  🏷️ Type: Full Day Leave\n"
            "  📝 off till wed"
        )

    def test_missing_name_and_message(self):
        text = format_record(
            record(name=None, message=None, first_name="Bob", last_name="Jones")
        )

        assert "👤 *Bob Jones*" in text
        assert "📝 No message provided" in text


def test_no_records():
    assert format_query_response(QueryPlan(query_type="count"), []) == NO_RESULTS_TEXT


def test_count_ranked_by_user():
    plan = QueryPlan(query_type="count", category="wfh", time_frame="week")
    records = [record("Alice"), record("Bob"), record("Alice")]

    text = format_query_response(plan, records)

    assert text.splitlines()[0] == "*Work From Home Count for This Week*"
    assert "1. Alice: 2 times" in text
    assert "2. Bob: 1 time" in text
    assert text.endswith("Found 3 matching records.")


def test_count_without_user_grouping():
    plan = QueryPlan(query_type="count", group_by="day")

    assert format_query_response(plan, [record()]) == "Found 1 matching record."


def test_trend_bars():
    plan = QueryPlan(query_type="trend", category="come_late", time_frame="week")
    records = [
        record("Alice", Category.COME_LATE, date(2026, 10, 20)),
        record("Bob", Category.COME_LATE, date(2026, 10, 19)),
        record("Carol", Category.COME_LATE, date(2026, 10, 19)),
    ]

    lines = format_query_response(plan, records).splitlines()

    assert lines[0] == "*Coming Late Trend for This Week*"
    assert lines[2] == "Mon, 19 Oct 2026: ██ (2)"
    assert lines[3] == "Tue, 20 Oct 2026: █ (1)"


def test_trend_scales_long_bars():
    plan = QueryPlan(query_type="trend")
    records = [record(f"User {i}") for i in range(20)]

    last_line = format_query_response(plan, records).splitlines()[-1]

    assert last_line == "Mon, 19 Oct 2026: ██████████ (20)"


def test_summary():
    plan = QueryPlan(query_type="summary", time_frame="month")
    records = [
        record("Alice", Category.WFH),
        record("Alice", Category.FULL_LEAVE),
        record("Bob", Category.WFH),
    ]

    text = format_query_response(plan, records)

    assert text.startswith("*Attendance Summary for This Month*")
    assert "• Work From Home: 2" in text
    assert "• Full Day Leave: 1" in text
    assert "1. Alice: 2 records" in text
    assert "2. Bob: 1 record" in text
    assert text.endswith("*Total Records:* 3")


def test_list_truncates_to_limit():
    plan = QueryPlan(limit=2)
    records = [record(f"User {i}") for i in range(5)]

    text = format_query_response(plan, records)

    assert text.count("👤") == 2
    assert text.endswith("_...and 3 more records_")


def test_format_error_uses_first_line():
    assert format_error(ValueError("Query is required\ntrace")) == (
        "⚠️ Error processing query: Query is required"
    )
    assert format_error(RuntimeError()) == "⚠️ Error processing query: RuntimeError"
