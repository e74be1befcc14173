"""Business logic for attendance records."""

from contextlib import asynccontextmanager
from datetime import date
from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from attendbot.attendance.models import AttendanceRecord
from attendbot.attendance.repository import (
    AttendanceRepository,
    UpsertResult,
    get_async_session_factory,
)
from attendbot.attendance.schemas import (
    AttendanceDetails,
    ClassificationResult,
    IncomingMessage,
    QueryPlan,
)
from attendbot.utils.logging import get_logger

logger = get_logger(__name__)


class AttendanceService:
    """Service layer for attendance operations."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self._session_factory = session_factory or get_async_session_factory()

    @asynccontextmanager
    async def get_repository(self) -> AsyncGenerator[AttendanceRepository, None]:
        """Get a repository instance with managed session."""
        async with self._session_factory() as session:
            yield AttendanceRepository(session)

    @staticmethod
    def build_record(
        message: IncomingMessage,
        classification: ClassificationResult,
        details: AttendanceDetails,
    ) -> dict[str, Any]:
        """Map a Slack message and the model's output to table columns.

        Args:
            message: Incoming Slack message with the author's profile.
            classification: Category label and confidence.
            details: Normalised details (dates always set).

        Returns:
            Column values for ``AttendanceRecord``.
        """
        return {
            "user_id": message.user_id,
            "user_name": message.user_name,
            "first_name": message.first_name,
            "last_name": message.last_name,
            "email": message.email,
            "channel_id": message.channel_id,
            "message_ts": message.ts,
            "timestamp": message.sent_at,
            "message": message.text,
            "category": classification.mapped_category,
            "confidence": classification.confidence,
            "is_working_from_home": details.is_working_from_home,
            "is_leave_requested": details.is_leave_request,
            "is_coming_late": details.is_running_late,
            "is_leave_early": details.is_leaving_early,
            "reason": details.reason,
            "start_date": details.start_date,
            "end_date": details.end_date,
            "duration_days": details.duration_days,
        }

    async def record_attendance(
        self,
        message: IncomingMessage,
        classification: ClassificationResult,
        details: AttendanceDetails,
    ) -> UpsertResult:
        """Store an attendance message, reconciling it with the user's records."""
        record_data = self.build_record(message, classification, details)
        original_ts = message.original_ts if message.is_edit else None

        async with self.get_repository() as repo:
            result = await repo.upsert_attendance(record_data, original_message_ts=original_ts)

        logger.info(
            "attendance_recorded",
            user_id=message.user_id,
            action=result.action,
            record_id=result.record_id,
            category=record_data["category"].value,
        )
        return result

    async def search(self, plan: QueryPlan, today: date) -> list[AttendanceRecord]:
        """Run a query plan and return the matching records."""
        async with self.get_repository() as repo:
            return await repo.search(plan, today)
