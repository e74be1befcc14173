"""Natural-language attendance queries to structured query plans."""

from datetime import date

from pydantic import ValidationError

from attendbot.attendance.schemas import QueryPlan
from attendbot.attendance.timeframes import local_today
from attendbot.config import get_settings
from attendbot.llm.prompts import render_query_prompt
from attendbot.llm.provider import CompletionBackend
from attendbot.utils.logging import get_logger
from attendbot.utils.parsing import extract_json_object

logger = get_logger(__name__)

# Boolean column that agrees with each category
CATEGORY_FLAG_FILTERS = {
    "wfh": "is_working_from_home",
    "full_leave": "is_leave_requested",
    "come_late": "is_coming_late",
    "leave_early": "is_leave_early",
}


def fallback_query_plan(query: str) -> QueryPlan:
    """Keyword rules used when the model cannot be reached."""
    q = query.lower()

    query_type = "list"
    if "count" in q or "how many" in q:
        query_type = "count"
    elif "trend" in q or "over time" in q:
        query_type = "trend"
    elif "summary" in q or "report" in q:
        query_type = "summary"

    category = "all"
    if "wfh" in q or "work from home" in q:
        category = "wfh"
    elif "half day" in q:
        category = "half_leave"
    elif "leave" in q or "off" in q:
        category = "full_leave"
    elif "late" in q:
        category = "come_late"
    elif "early" in q:
        category = "leave_early"

    time_frame = "day"
    if "week" in q:
        time_frame = "week"
    elif "month" in q:
        time_frame = "month"
    elif "quarter" in q:
        time_frame = "quarter"
    elif "year" in q:
        time_frame = "year"

    filters = {}
    if category in CATEGORY_FLAG_FILTERS:
        filters[CATEGORY_FLAG_FILTERS[category]] = True

    return QueryPlan(
        query_type=query_type,
        category=category,
        time_frame=time_frame,
        group_by="user",
        limit=10,
        filters=filters,
    )


def parse_text_response(text: str, query: str) -> QueryPlan:
    """Build a plan from model output that carried no JSON."""
    text = text.lower()
    q = query.lower()

    query_type = "list"
    if "count" in text or "count" in q or "how many" in q:
        query_type = "count"
    elif "summary" in text or "summary" in q:
        query_type = "summary"
    elif "trend" in text or "trend" in q:
        query_type = "trend"

    category = "all"
    if "wfh" in text or "wfh" in q or "work from home" in q:
        category = "wfh"
    elif "leave" in text or "leave" in q:
        category = "full_leave"

    time_frame = "day"
    if "week" in text or "week" in q:
        time_frame = "week"
    elif "month" in text or "month" in q:
        time_frame = "month"

    return QueryPlan(query_type=query_type, category=category, time_frame=time_frame)


class QueryPlanner:
    """Turns a natural-language question into a ``QueryPlan``."""

    def __init__(self, backend: CompletionBackend):
        self.backend = backend

    async def plan(self, query: str, today: date | None = None) -> QueryPlan:
        """Plan a query, falling back to keyword rules on provider errors.

        Args:
            query: The user's question, e.g. "who is on leave this week?".
            today: Date anchor for the prompt, defaults to today in the configured zone.

        Returns:
            A validated plan with defaults filled in.

        Raises:
            ValueError: If the query is empty.
        """
        if not query or not query.strip():
            raise ValueError("Query is required")

        today = today or local_today(get_settings().timezone)
        prompt = render_query_prompt(query, today)

        try:
            text = await self.backend.complete(prompt, query, "query")
        except Exception as e:
            logger.warning("query_provider_failed", error=str(e))
            plan = fallback_query_plan(query)
            logger.info("query_planned_with_fallback", query_type=plan.query_type)
            return plan

        parsed = extract_json_object(text)
        if parsed is None:
            logger.warning("query_plan_not_json", preview=text[:120])
            plan = parse_text_response(text, query)
        else:
            try:
                plan = QueryPlan.model_validate(parsed)
            except ValidationError as e:
                logger.warning("query_plan_invalid", error=str(e))
                plan = fallback_query_plan(query)

        logger.info(
            "query_planned",
            query_type=plan.query_type,
            category=plan.category,
            time_frame=plan.time_frame if isinstance(plan.time_frame, str) else "range",
            group_by=plan.group_by,
        )
        return plan
