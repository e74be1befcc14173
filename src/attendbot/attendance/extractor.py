"""Attendance details extraction (flags, reason, date range, duration)."""

import re
from datetime import date, datetime, timedelta, timezone

from pydantic import ValidationError

from attendbot.attendance.schemas import MAX_DURATION_DAYS, AttendanceDetails
from attendbot.attendance.timeframes import local_today
from attendbot.config import get_settings
from attendbot.llm.prompts import render_details_prompt
from attendbot.llm.provider import CompletionBackend
from attendbot.utils.logging import get_logger
from attendbot.utils.parsing import extract_json_object

logger = get_logger(__name__)

HALF_DAY_PHRASES = (
    "half day",
    "half-day",
    "half leave",
    "partial day",
    "morning off",
    "afternoon off",
    "0.5 days",
    "4 hours",
    "morning only",
    "afternoon only",
)

_DAYS_RE = re.compile(r"(\d+)\s+days?", re.IGNORECASE)
_START_RE = re.compile(r"start_?date[\"':\s]*(\d{4}-\d{2}-\d{2})", re.IGNORECASE)
_END_RE = re.compile(r"end_?date[\"':\s]*(\d{4}-\d{2}-\d{2})", re.IGNORECASE)
_DURATION_RE = re.compile(r"duration_?days[\"':\s]*([0-9]*\.?[0-9]+)", re.IGNORECASE)


def fallback_details_extraction(message: str, today: date) -> AttendanceDetails:
    """Keyword and regex rules used when the model cannot be reached."""
    msg = message.lower()

    flags = {
        "is_working_from_home": False,
        "is_leave_request": False,
        "is_running_late": False,
        "is_leaving_early": False,
    }
    if any(word in msg for word in ("wfh", "work from home", "remote")):
        flags["is_working_from_home"] = True
    elif any(word in msg for word in ("leave", "off", "vacation")):
        flags["is_leave_request"] = True
    elif "late" in msg or "delayed" in msg:
        flags["is_running_late"] = True
    elif "leaving early" in msg or "early departure" in msg:
        flags["is_leaving_early"] = True

    duration: float = 1
    if any(phrase in msg for phrase in HALF_DAY_PHRASES):
        duration = 0.5
        flags["is_leave_request"] = True

    start = today
    if "tomorrow" in msg:
        start = today + timedelta(days=1)
    elif "next week" in msg:
        start = today + timedelta(days=7)
        if duration == 1:
            duration = 5

    if duration != 0.5:
        match = _DAYS_RE.search(message)
        if match and int(match.group(1)) > 0:
            duration = min(int(match.group(1)), MAX_DURATION_DAYS)

    details = AttendanceDetails(**flags, start_date=start, duration_days=duration)
    return details.normalized(today)


def parse_text_response(text: str, today: date) -> AttendanceDetails:
    """Pull flags and dates out of model output that carried no JSON."""
    lowered = text.lower()

    start = _START_RE.search(text)
    end = _END_RE.search(text)
    duration = _DURATION_RE.search(text)

    details = AttendanceDetails(
        is_working_from_home="workingfromhome" in lowered or "wfh" in lowered,
        is_leave_request="leaverequest" in lowered or "leave" in lowered,
        is_running_late="runninglate" in lowered or "late" in lowered,
        is_leaving_early="leavingearly" in lowered or "early" in lowered,
        start_date=start.group(1) if start else None,
        end_date=end.group(1) if end else None,
        duration_days=duration.group(1) if duration else None,
    )
    return details.normalized(today)


class DetailsExtractor:
    """Extracts structured attendance details from a Slack message."""

    def __init__(self, backend: CompletionBackend):
        self.backend = backend

    async def extract(self, message: str, today: date | None = None) -> AttendanceDetails:
        """Extract details, falling back to keyword rules on provider errors.

        The result is always normalised: start and end dates are set and the
        end never precedes the start.

        Raises:
            ValueError: If the message is empty.
        """
        if not message or not message.strip():
            raise ValueError("Message is required")

        today = today or local_today(get_settings().timezone)
        prompt = render_details_prompt(message, today)

        try:
            text = await self.backend.complete(prompt, message, "details")
        except Exception as e:
            logger.warning("details_provider_failed", error=str(e))
            details = fallback_details_extraction(message, today)
        else:
            parsed = extract_json_object(text)
            if parsed is None:
                logger.warning("details_not_json", preview=text[:120])
                details = parse_text_response(text, today)
            else:
                try:
                    details = AttendanceDetails.model_validate(parsed)
                except ValidationError as e:
                    logger.warning("details_invalid", error=str(e))
                    details = fallback_details_extraction(message, today)

        details = details.normalized(today).model_copy(
            update={
                "additional_details": {
                    "original_message": message,
                    "extracted_at": datetime.now(timezone.utc).isoformat(),
                }
            }
        )

        logger.info(
            "details_extracted",
            start_date=str(details.start_date),
            end_date=str(details.end_date),
            duration_days=details.duration_days,
        )
        return details
