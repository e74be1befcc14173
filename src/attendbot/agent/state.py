"""Pipeline state definitions for LangGraph."""

from datetime import date
from typing import TypedDict

from attendbot.attendance.models import AttendanceRecord
from attendbot.attendance.repository import UpsertResult
from attendbot.attendance.schemas import (
    AttendanceDetails,
    ClassificationResult,
    IncomingMessage,
    QueryPlan,
)


class IngestionState(TypedDict):
    """State carried through classify → extract → record."""

    message: IncomingMessage
    today: date

    classification: ClassificationResult | None
    details: AttendanceDetails | None
    result: UpsertResult | None

    # Set when the message fits no attendance category and is not stored
    skipped: bool
    error: str | None


class QueryState(TypedDict):
    """State carried through plan → execute → respond."""

    query: str
    today: date

    plan: QueryPlan | None
    records: list[AttendanceRecord]

    response: str | None
    error: str | None


def create_ingestion_state(message: IncomingMessage, today: date) -> IngestionState:
    """Create the initial state for one incoming message."""
    return {
        "message": message,
        "today": today,
        "classification": None,
        "details": None,
        "result": None,
        "skipped": False,
        "error": None,
    }


def create_query_state(query: str, today: date) -> QueryState:
    """Create the initial state for one query."""
    return {
        "query": query,
        "today": today,
        "plan": None,
        "records": [],
        "response": None,
        "error": None,
    }
