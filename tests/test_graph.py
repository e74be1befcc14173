"""End-to-end tests for the ingestion and query graphs."""

from datetime import date

import pytest
from sqlalchemy import select

from attendbot.agent.graph import (
    build_ingestion_graph,
    build_query_graph,
    run_ingestion,
    run_query,
)
from attendbot.attendance.models import AttendanceRecord
from attendbot.attendance.schemas import Category, IncomingMessage
from attendbot.attendance.service import AttendanceService

WFH_RESPONSES = {
    "classification": {"category": "WORK FROM HOME", "confidence": 0.95},
    "details": {
        "isWorkingFromHome": True,
        "isLeaveRequest": False,
        "startDate": "2026-10-19",
        "endDate": "2026-10-19",
        "durationDays": 1,
        "reason": "plumber visit",
    },
    "query": {
        "queryType": "list",
        "category": "wfh",
        "timeFrame": "day",
        "groupBy": "user",
        "limit": 10,
        "filters": {},
    },
}


@pytest.fixture
def service(session_factory):
    return AttendanceService(session_factory)


@pytest.fixture
def message():
    return IncomingMessage(
        user_id="U001",
        text="WFH today, plumber visit",
        ts="1760864400.000100",
        channel_id="C123",
        user_name="Alice Smith",
        first_name="Alice",
        last_name="Smith",
        email="alice@example.com",
    )


async def stored_records(session_factory) -> list[AttendanceRecord]:
    async with session_factory() as session:
        result = await session.execute(select(AttendanceRecord))
        return list(result.scalars().all())


class TestIngestionGraph:
    async def test_message_is_stored(self, fake_backend, service, session_factory, message, today):
        backend = fake_backend(WFH_RESPONSES)
        graph = build_ingestion_graph(backend, service)

        state = await run_ingestion(graph, message, today)

        assert state["error"] is None
        assert state["result"].action == "created"
        assert [call[2] for call in backend.calls] == ["classification", "details"]

        records = await stored_records(session_factory)
        assert len(records) == 1
        record = records[0]
        assert record.category is Category.WFH
        assert record.confidence == 0.95
        assert record.is_working_from_home is True
        assert record.reason == "plumber visit"
        assert record.start_date == date(2026, 10, 19)
        assert record.user_name == "Alice Smith"
        assert record.message_ts == "1760864400.000100"

    async def test_second_message_for_same_day_replaces_first(
        self, fake_backend, service, session_factory, message, today
    ):
        graph = build_ingestion_graph(fake_backend(WFH_RESPONSES), service)
        await run_ingestion(graph, message, today)

        leave = dict(WFH_RESPONSES)
        leave["classification"] = {"category": "FULL DAY LEAVE", "confidence": 0.9}
        leave["details"] = {"isLeaveRequest": True, "startDate": "2026-10-19"}
        second = message.model_copy(update={"text": "Taking the day off", "ts": "1760868000.000200"})

        state = await run_ingestion(
            build_ingestion_graph(fake_backend(leave), service), second, today
        )

        assert state["result"].action == "updated_overlap"
        records = await stored_records(session_factory)
        assert len(records) == 1
        assert records[0].category is Category.FULL_LEAVE
        assert records[0].message == "Taking the day off"

    async def test_edit_updates_original(
        self, fake_backend, service, session_factory, message, today
    ):
        graph = build_ingestion_graph(fake_backend(WFH_RESPONSES), service)
        await run_ingestion(graph, message, today)

        moved = dict(WFH_RESPONSES)
        moved["details"] = {"isWorkingFromHome": True, "startDate": "2026-10-23"}
        edit = message.model_copy(
            update={
                "text": "WFH friday instead",
                "is_edit": True,
                "original_ts": message.ts,
            }
        )

        state = await run_ingestion(
            build_ingestion_graph(fake_backend(moved), service), edit, today
        )

        assert state["result"].action == "updated_edit"
        records = await stored_records(session_factory)
        assert [r.start_date for r in records] == [date(2026, 10, 23)]

    async def test_unclassified_message_skipped(
        self, fake_backend, service, session_factory, message, today
    ):
        backend = fake_backend({"classification": {"category": "Other", "confidence": 0.9}})
        graph = build_ingestion_graph(backend, service, ignore_unclassified=True)

        state = await run_ingestion(graph, message, today)

        assert state["skipped"] is True
        assert state["result"] is None
        assert len(backend.calls) == 1
        assert await stored_records(session_factory) == []

    async def test_unclassified_message_stored_as_unknown(
        self, fake_backend, service, session_factory, message, today
    ):
        responses = dict(WFH_RESPONSES)
        responses["classification"] = {"category": "Other", "confidence": 0.4}
        graph = build_ingestion_graph(fake_backend(responses), service)

        await run_ingestion(graph, message, today)

        records = await stored_records(session_factory)
        assert records[0].category is Category.UNKNOWN

    async def test_invalid_details_are_still_stored(
        self, fake_backend, service, session_factory, message, today
    ):
        responses = dict(WFH_RESPONSES)
        responses["details"] = {
            "isWorkingFromHome": "N/A",
            "isLeaveRequest": True,
            "startDate": "2026-10-19",
        }
        graph = build_ingestion_graph(fake_backend(responses), service)

        state = await run_ingestion(graph, message, today)

        assert state["error"] is None
        assert state["result"].action == "created"
        records = await stored_records(session_factory)
        assert len(records) == 1
        assert records[0].is_working_from_home is True
        assert records[0].start_date == today

    async def test_out_of_range_duration_is_stored(
        self, fake_backend, service, session_factory, message, today
    ):
        responses = dict(WFH_RESPONSES)
        responses["details"] = {"startDate": "2026-10-19", "durationDays": 1e7}
        graph = build_ingestion_graph(fake_backend(responses), service)

        state = await run_ingestion(graph, message, today)

        assert state["result"].action == "created"
        records = await stored_records(session_factory)
        assert records[0].duration_days == 366
        assert records[0].end_date == date(2027, 10, 19)

    async def test_provider_failure_uses_fallbacks(
        self, fake_backend, service, session_factory, message, today
    ):
        backend = fake_backend(error=RuntimeError("provider down"))
        graph = build_ingestion_graph(backend, service)

        state = await run_ingestion(graph, message, today)

        assert state["result"].action == "created"
        records = await stored_records(session_factory)
        assert records[0].category is Category.WFH
        assert records[0].start_date == today


class TestQueryGraph:
    async def test_answers_query(self, fake_backend, service, message, today):
        backend = fake_backend(WFH_RESPONSES)
        await run_ingestion(build_ingestion_graph(backend, service), message, today)

        state = await run_query(build_query_graph(backend, service), "who is wfh today?", today)

        assert state["error"] is None
        assert len(state["records"]) == 1
        assert "👤 *Alice Smith*" in state["response"]
        assert "Type: Work From Home" in state["response"]

    async def test_no_results(self, fake_backend, service, today):
        backend = fake_backend(WFH_RESPONSES)

        state = await run_query(build_query_graph(backend, service), "who is wfh today?", today)

        assert state["response"] == "No matching records found for your query."

    async def test_empty_query_reports_error(self, fake_backend, service, today):
        backend = fake_backend(WFH_RESPONSES)

        state = await run_query(build_query_graph(backend, service), "   ", today)

        assert state["response"] == "⚠️ Error processing query: Query is required"
        assert backend.calls == []
