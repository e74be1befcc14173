"""Pydantic schemas for attendance classification, extraction and queries."""

import math
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Category(str, Enum):
    """Stored attendance categories."""

    WFH = "wfh"
    FULL_LEAVE = "full_leave"
    HALF_LEAVE = "half_leave"
    LEAVE_EARLY = "leave_early"
    COME_LATE = "come_late"
    OUT_OF_OFFICE = "out_of_office"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return CATEGORY_DISPLAY_NAMES[self]


CATEGORY_DISPLAY_NAMES = {
    Category.WFH: "Work From Home",
    Category.FULL_LEAVE: "Full Day Leave",
    Category.HALF_LEAVE: "Half Day Leave",
    Category.LEAVE_EARLY: "Leave Early",
    Category.COME_LATE: "Coming Late",
    Category.OUT_OF_OFFICE: "Out Of Office",
    Category.UNKNOWN: "Unknown",
}

# Longest leave a single message can describe
MAX_DURATION_DAYS = 366

# Labels emitted by the different prompts and fallbacks, upper-cased
CATEGORY_LABELS = {
    "WFH": Category.WFH,
    "WORK FROM HOME": Category.WFH,
    "FULL DAY LEAVE": Category.FULL_LEAVE,
    "HALF DAY LEAVE": Category.HALF_LEAVE,
    "LATE TO OFFICE": Category.COME_LATE,
    "RUNNING LATE OR LATE ARRIVAL": Category.COME_LATE,
    "RUNNING LATE": Category.COME_LATE,
    "LATE ARRIVAL": Category.COME_LATE,
    "LEAVING EARLY": Category.LEAVE_EARLY,
    "EARLY LEAVE": Category.LEAVE_EARLY,
    "OUT FOR OFFICE": Category.OUT_OF_OFFICE,
    "OUT OF OFFICE": Category.OUT_OF_OFFICE,
}


def map_attendance_category(label: str | None) -> Category:
    """Map a model-produced category label to a stored Category."""
    if not label:
        return Category.UNKNOWN

    normalized = label.strip()
    try:
        return Category(normalized.lower())
    except ValueError:
        return CATEGORY_LABELS.get(normalized.upper(), Category.UNKNOWN)


def coerce_date(value: Any) -> date | None:
    """Turn ``2025-04-20`` / ``2025-04-20T00:00:00Z`` / datetime into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


class ClassificationResult(BaseModel):
    """Category label and confidence returned by the classifier."""

    category: str = Field(default="FULL DAY LEAVE", description="Category label")
    confidence: float = Field(default=0.8, description="Model confidence in [0, 1]")

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: Any) -> str:
        return str(value) if value else "FULL DAY LEAVE"

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        try:
            confidence = float(value)
        except (TypeError, ValueError):
            return 0.8
        if math.isnan(confidence):
            return 0.8
        return min(max(confidence, 0.0), 1.0)

    @property
    def mapped_category(self) -> Category:
        return map_attendance_category(self.category)


class AttendanceDetails(BaseModel):
    """Structured details extracted from an attendance message.

    Field aliases match the camelCase keys the extraction prompt asks for.
    """

    model_config = ConfigDict(populate_by_name=True)

    is_working_from_home: bool = Field(default=False, alias="isWorkingFromHome")
    is_leave_request: bool = Field(default=False, alias="isLeaveRequest")
    is_running_late: bool = Field(default=False, alias="isRunningLate")
    is_leaving_early: bool = Field(default=False, alias="isLeavingEarly")
    reason: str | None = Field(default=None)
    start_date: date | None = Field(default=None, alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")
    duration_days: float | None = Field(default=None, alias="durationDays")
    additional_details: dict[str, Any] = Field(default_factory=dict, alias="additionalDetails")

    @field_validator(
        "is_working_from_home",
        "is_leave_request",
        "is_running_late",
        "is_leaving_early",
        mode="before",
    )
    @classmethod
    def _none_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> date | None:
        return coerce_date(value)

    @field_validator("reason", mode="before")
    @classmethod
    def _blank_reason(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return None if not text or text.lower() in ("null", "none") else text

    @field_validator("duration_days", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> float | None:
        try:
            duration = float(value)
        except (TypeError, ValueError):
            return None
        if math.isnan(duration) or duration <= 0:
            return None
        return min(duration, MAX_DURATION_DAYS)

    @field_validator("additional_details", mode="before")
    @classmethod
    def _details_dict(cls, value: Any) -> dict[str, Any]:
        return value if isinstance(value, dict) else {}

    def normalized(self, today: date) -> "AttendanceDetails":
        """Fill defaults so start, end and duration are always set.

        Missing start → today; missing duration → 1; missing end →
        start + ceil(duration) - 1; an end before the start, or past the
        last representable date, is clamped to the start.
        """
        start = self.start_date or today
        duration = self.duration_days or 1
        end = self.end_date
        if end is None:
            try:
                end = start + timedelta(days=max(math.ceil(duration), 1) - 1)
            except OverflowError:
                end = start
        if end < start:
            end = start

        return self.model_copy(
            update={"start_date": start, "end_date": end, "duration_days": duration}
        )


class TimeRange(BaseModel):
    """Explicit date window for a query."""

    start: date
    end: date

    @field_validator("start", "end", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> date | None:
        parsed = coerce_date(value)
        if parsed is None:
            raise ValueError(f"invalid date: {value!r}")
        return parsed

    @model_validator(mode="after")
    def _ordered(self) -> "TimeRange":
        if self.start > self.end:
            self.start, self.end = self.end, self.start
        return self


TimeFrameName = Literal["day", "week", "month", "quarter", "year"]
QUERY_TYPES = ("count", "list", "trend", "summary")
GROUP_BY_VALUES = ("user", "day", "category")
TIME_FRAME_NAMES = ("day", "week", "month", "quarter", "year")
MAX_QUERY_LIMIT = 500


class QueryPlan(BaseModel):
    """Structured query produced from a natural-language question.

    Validation is lenient: unknown or missing values fall back to the
    defaults (list, all, day, user, 10, no filters) rather than failing.
    """

    model_config = ConfigDict(populate_by_name=True)

    query_type: Literal["count", "list", "trend", "summary"] = Field(
        default="list", alias="queryType"
    )
    category: str = Field(default="all")
    time_frame: TimeFrameName | TimeRange = Field(default="day", alias="timeFrame")
    group_by: Literal["user", "day", "category"] = Field(default="user", alias="groupBy")
    limit: int = Field(default=10)
    filters: dict[str, Any] = Field(default_factory=dict)

    @field_validator("query_type", mode="before")
    @classmethod
    def _query_type(cls, value: Any) -> str:
        value = str(value).lower() if value else ""
        return value if value in QUERY_TYPES else "list"

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value: Any) -> str:
        if not value or str(value).lower() == "all":
            return "all"
        category = map_attendance_category(str(value))
        return "all" if category is Category.UNKNOWN else category.value

    @field_validator("time_frame", mode="before")
    @classmethod
    def _time_frame(cls, value: Any) -> Any:
        if isinstance(value, dict):
            if coerce_date(value.get("start")) and coerce_date(value.get("end")):
                return value
            return "day"
        if isinstance(value, TimeRange):
            return value
        value = str(value).lower() if value else ""
        return value if value in TIME_FRAME_NAMES else "day"

    @field_validator("group_by", mode="before")
    @classmethod
    def _group_by(cls, value: Any) -> str:
        value = str(value).lower() if value else ""
        if value in ("user_id", "user_name"):
            return "user"
        return value if value in GROUP_BY_VALUES else "user"

    @field_validator("limit", mode="before")
    @classmethod
    def _limit(cls, value: Any) -> int:
        try:
            limit = int(value)
        except (TypeError, ValueError):
            return 10
        return min(limit, MAX_QUERY_LIMIT) if limit > 0 else 10

    @field_validator("filters", mode="before")
    @classmethod
    def _filters(cls, value: Any) -> dict[str, Any]:
        return value if isinstance(value, dict) else {}


class IncomingMessage(BaseModel):
    """An attendance message received from Slack, with the author's profile."""

    user_id: str
    text: str
    ts: str = Field(..., description="Slack message timestamp")
    channel_id: str | None = None
    is_edit: bool = False
    original_ts: str | None = Field(default=None, description="ts of the edited message")
    user_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None

    @property
    def sent_at(self) -> datetime:
        """Message time as a timezone-aware UTC datetime."""
        return datetime.fromtimestamp(float(self.ts), tz=timezone.utc)
