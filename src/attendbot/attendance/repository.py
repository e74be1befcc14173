"""Data access layer for attendance records."""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field
from sqlalchemy import ColumnElement, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from attendbot.attendance.models import AttendanceRecord, Base
from attendbot.attendance.schemas import (
    Category,
    QueryPlan,
    TimeRange,
    coerce_date,
    map_attendance_category,
)
from attendbot.attendance.timeframes import resolve_time_frame
from attendbot.config import get_settings
from attendbot.utils.errors import AttendanceDBError, QueryExecutionError
from attendbot.utils.logging import get_logger

logger = get_logger(__name__)

BOOLEAN_COLUMNS = {
    "is_working_from_home",
    "is_leave_requested",
    "is_coming_late",
    "is_leave_early",
}
SUBSTRING_COLUMNS = {"user_name", "first_name", "last_name"}
EXACT_COLUMNS = {"user_id", "email", "channel_id", "message_ts"}
DATE_COLUMNS = {"start_date", "end_date"}
DATETIME_COLUMNS = {"timestamp", "created_at", "updated_at"}

# Names the query prompt (or older table layouts) use for the same columns
COLUMN_ALIASES = {
    "is_leaving_early": "is_leave_early",
    "is_leave_request": "is_leave_requested",
    "is_running_late": "is_coming_late",
}

RANGE_OPERATORS = ("eq", "gte", "gt", "lte", "lt")


def get_async_engine() -> AsyncEngine:
    """Create async database engine."""
    settings = get_settings()
    return create_async_engine(
        settings.database_url,
        echo=settings.app_env == "development" and settings.log_level == "DEBUG",
        pool_pre_ping=True,
    )


def get_async_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker[AsyncSession]:
    """Create async session factory."""
    return async_sessionmaker(
        engine or get_async_engine(), class_=AsyncSession, expire_on_commit=False
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create the attendance tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("tables_created")


async def check_connection(session_factory: async_sessionmaker[AsyncSession]) -> bool:
    """Run a trivial query against the attendance table.

    Returns:
        True if the database answered, False otherwise.
    """
    try:
        async with session_factory() as session:
            await session.execute(select(AttendanceRecord.id).limit(1))
        logger.info("database_connection_verified")
        return True
    except Exception as e:
        logger.warning("database_connection_failed", error=str(e))
        return False


class UpsertResult(BaseModel):
    """Outcome of reconciling a new attendance record with stored ones."""

    action: Literal["created", "updated_edit", "updated_overlap"]
    record_id: int
    deleted_ids: list[int] = Field(default_factory=list)


class AttendanceRepository:
    """Data access layer for attendance records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, record_id: int) -> AttendanceRecord | None:
        """Get a record by its primary key."""
        return await self.session.get(AttendanceRecord, record_id)

    async def get_by_message_ts(self, user_id: str, message_ts: str) -> AttendanceRecord | None:
        """Get the user's record created from the Slack message with this ts."""
        result = await self.session.execute(
            select(AttendanceRecord)
            .where(
                AttendanceRecord.user_id == user_id,
                AttendanceRecord.message_ts == message_ts,
            )
            .order_by(AttendanceRecord.timestamp.desc())
        )
        return result.scalars().first()

    async def find_overlapping(
        self, user_id: str, start_date: date, end_date: date
    ) -> list[AttendanceRecord]:
        """Find the user's records whose [start, end] window overlaps the given one.

        Returns:
            Overlapping records, most recent message first.
        """
        result = await self.session.execute(
            select(AttendanceRecord)
            .where(
                AttendanceRecord.user_id == user_id,
                AttendanceRecord.start_date <= end_date,
                AttendanceRecord.end_date >= start_date,
            )
            .order_by(AttendanceRecord.timestamp.desc(), AttendanceRecord.id.desc())
        )
        return list(result.scalars().all())

    async def upsert_attendance(
        self,
        record_data: dict[str, Any],
        original_message_ts: str | None = None,
    ) -> UpsertResult:
        """Store a record, keeping at most one record per user per day.

        1. For an edited message, update the record created from the
           original message if there is one.
        2. Otherwise update the most recent record overlapping the new date
           range and delete the other overlapping ones.
        3. Otherwise insert a new record.

        Args:
            record_data: Column values for the record.
            original_message_ts: Slack ts of the message being edited, if any.

        Returns:
            What was done, with the affected record ID.
        """
        user_id = record_data["user_id"]

        try:
            if original_message_ts:
                existing = await self.get_by_message_ts(user_id, original_message_ts)
                if existing:
                    self._apply(existing, record_data)
                    await self.session.commit()
                    await self.session.refresh(existing)
                    logger.info(
                        "updated_record_from_edit", record_id=existing.id, user_id=user_id
                    )
                    return UpsertResult(action="updated_edit", record_id=existing.id)

                logger.info("edited_record_not_found", user_id=user_id, ts=original_message_ts)

            start_date = record_data.get("start_date")
            end_date = record_data.get("end_date")
            if start_date and end_date:
                overlapping = await self.find_overlapping(user_id, start_date, end_date)
                if overlapping:
                    target, *redundant = overlapping
                    deleted_ids = [record.id for record in redundant]

                    self._apply(target, record_data)
                    for record in redundant:
                        await self.session.delete(record)

                    await self.session.commit()
                    await self.session.refresh(target)
                    logger.info(
                        "updated_overlapping_record",
                        record_id=target.id,
                        user_id=user_id,
                        deleted=len(deleted_ids),
                    )
                    return UpsertResult(
                        action="updated_overlap", record_id=target.id, deleted_ids=deleted_ids
                    )

            record = AttendanceRecord(**record_data)
            self.session.add(record)
            await self.session.commit()
            await self.session.refresh(record)
            logger.info(
                "created_record",
                record_id=record.id,
                user_id=user_id,
                category=record.category.value,
            )
            return UpsertResult(action="created", record_id=record.id)

        except Exception as e:
            await self.session.rollback()
            logger.error("attendance_db_error", error=str(e), user_id=user_id)
            raise AttendanceDBError(f"Failed to store attendance record: {e}") from e

    @staticmethod
    def _apply(record: AttendanceRecord, record_data: dict[str, Any]) -> None:
        for key, value in record_data.items():
            if key != "id" and hasattr(record, key):
                setattr(record, key, value)

    async def search(self, plan: QueryPlan, today: date) -> list[AttendanceRecord]:
        """Run a query plan against the table.

        The plan's time frame is applied as an overlap window. Named time
        frames are skipped when the filters yield a usable start_date or
        end_date bound, since the filters are the more specific of the two. Only
        list queries are limited in SQL; aggregate queries need every row.

        Args:
            plan: Structured query.
            today: Anchor date for named time frames.

        Returns:
            Matching records, most recent message first.
        """
        conditions: list[ColumnElement[bool]] = []

        if plan.category != "all":
            conditions.append(AttendanceRecord.category == Category(plan.category))

        conditions.extend(self._filter_conditions(plan.filters))

        has_date_filters = any(
            self._range_conditions(key, plan.filters[key])
            for key in DATE_COLUMNS
            if plan.filters.get(key) is not None
        )
        if isinstance(plan.time_frame, TimeRange) or not has_date_filters:
            start, end = resolve_time_frame(plan.time_frame, today)
            conditions.append(AttendanceRecord.start_date <= end)
            conditions.append(AttendanceRecord.end_date >= start)

        stmt = select(AttendanceRecord).where(*conditions)
        stmt = stmt.order_by(AttendanceRecord.timestamp.desc(), AttendanceRecord.id.desc())
        if plan.query_type == "list":
            stmt = stmt.limit(plan.limit)

        try:
            result = await self.session.execute(stmt)
        except Exception as e:
            logger.error("query_execution_failed", error=str(e))
            raise QueryExecutionError(f"Failed to run query: {e}") from e

        records = list(result.scalars().all())
        logger.info(
            "query_executed",
            query_type=plan.query_type,
            category=plan.category,
            conditions=len(conditions),
            results=len(records),
        )
        return records

    def _filter_conditions(self, filters: dict[str, Any]) -> list[ColumnElement[bool]]:
        """Translate plan filters into SQL conditions on whitelisted columns."""
        conditions: list[ColumnElement[bool]] = []

        for raw_key, value in filters.items():
            key = COLUMN_ALIASES.get(raw_key, raw_key)
            if value is None:
                continue

            if key == "category":
                category = map_attendance_category(str(value))
                if category is not Category.UNKNOWN:
                    conditions.append(AttendanceRecord.category == category)
                continue

            if key in BOOLEAN_COLUMNS:
                flag = _coerce_bool(value)
                if flag is not None:
                    conditions.append(getattr(AttendanceRecord, key) == flag)
                continue

            if key in SUBSTRING_COLUMNS and isinstance(value, str):
                conditions.append(getattr(AttendanceRecord, key).ilike(f"%{value}%"))
                continue

            if key in EXACT_COLUMNS and isinstance(value, (str, int)):
                conditions.append(getattr(AttendanceRecord, key) == str(value))
                continue

            if key in DATE_COLUMNS or key in DATETIME_COLUMNS:
                conditions.extend(self._range_conditions(key, value))
                continue

            logger.debug("query_filter_ignored", column=raw_key)

        return conditions

    @staticmethod
    def _range_conditions(key: str, value: Any) -> list[ColumnElement[bool]]:
        column = getattr(AttendanceRecord, key)
        parse = coerce_date if key in DATE_COLUMNS else _coerce_datetime
        operations = value if isinstance(value, dict) else {"eq": value}

        conditions = []
        for operator in RANGE_OPERATORS:
            # Prompts sometimes emit "gte?" style keys copied from the schema hint
            raw = operations.get(operator, operations.get(f"{operator}?"))
            bound = parse(raw)
            if bound is None:
                continue
            if operator == "eq":
                conditions.append(column == bound)
            elif operator == "gte":
                conditions.append(column >= bound)
            elif operator == "gt":
                conditions.append(column > bound)
            elif operator == "lte":
                conditions.append(column <= bound)
            else:
                conditions.append(column < bound)
        return conditions


def _coerce_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return None


def _coerce_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None
