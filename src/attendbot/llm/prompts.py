"""Prompt templates for classification, details extraction and query planning.

Templates use ``$name`` placeholders so the JSON examples need no escaping.
They are rendered on every call so relative dates stay anchored to the
current day in long-running processes.
"""

import calendar
from datetime import date, timedelta
from string import Template

CLASSIFICATION_PROMPT = Template("""Employee Message Categorization
You are an AI assistant that categorizes employee messages into workplace attendance categories.
Analyze the user's message and pick the single most appropriate category from the list below.

Categories:
- Work from home
- Half day leave
- Full day leave
- Running late or late arrival
- Early leave
- Out for office
- Other

Instructions:
1. Read the entire message and understand the PRIMARY INTENT
2. Consider the context and meaning, not just individual keywords
3. Identify what the employee is actually planning to do
4. Match it to the most specific applicable category

Key Classification Rules:

**Work from home**: Employee is working remotely (full or partial day). They are WORKING, not on leave.
- Keywords: "wfh", "work from home", "remote", "working from home"
- Example: "wfh today", "working from home due to back pain", "wfh in the morning"

**Half day leave**: Employee is taking LEAVE for roughly half the workday.
- Keywords: "half day leave", "half-day off", "taking half day", "half day sick leave"
- Example: "taking half day leave for doctor appointment"

**Full day leave**: Taking leave for the entire workday.
- Keywords: "full day leave", "taking leave", "off today", "sick leave"

**Running late or late arrival**: Delayed start but will attend office.
- Keywords: "running late", "will be late", "delayed"

**Early leave**: Leaving office before the scheduled end time.
- Keywords: "leaving early", "early departure", "need to leave early"

**Out for office**: Temporarily away from office during work hours for work.
- Keywords: "out for meeting", "client visit", "appointment"

**Other**: Messages that don't fit the above categories.

Context analysis:
- If the message mentions "wfh" or "work from home", prefer "Work from home" even if "half" is mentioned
- If the message mentions taking leave or time off, use "Half day leave" or "Full day leave"

Today's date is $today ($weekday).

User message: $message

Return ONLY JSON in this format:
{
  "category": "CATEGORY_NAME",
  "confidence": 0.95
}
""")

DETAILS_PROMPT = Template("""You are the attendance and leave management assistant for a company.
Interpret the employee message below and convert it into structured JSON used for payroll and resource planning.

CURRENT DATE CONTEXT:
- Today's date: $today
- Current day of week: $weekday
- Current month: $month
- Current year: $year

DATE REFERENCE POINTS:
- "today" = $today ($weekday)
- "tomorrow" = $tomorrow ($tomorrow_weekday)
- "yesterday" = $yesterday
- "next week" = starting $next_week
- "next month" = $next_month_name (starting on the 1st)

WEEKDAY CALCULATIONS (for "next Tuesday" style requests):
$next_weekdays

For an unqualified day name ("on leave Monday"): if today is that day or
the day has already passed this week, use next week's occurrence;
otherwise use this week's occurrence.

DURATION RULES:
1. endDate = startDate + (durationDays - 1)
2. "X days" → durationDays = X
3. "X weeks" → durationDays = X * 7
4. "X hours" → durationDays = 1 (same day)
5. "half day", "half-day", "partial day", "morning off", "afternoon off", "0.5 days", "4 hours" → durationDays = 0.5 and endDate = startDate
6. A specific date with no period → durationDays = 1 and endDate = startDate
7. "the Xth of next month" is the Xth day of next month, not the 1st

EXAMPLES:
- "I'll work from home for four days from tomorrow" → isWorkingFromHome: true, startDate: $tomorrow, durationDays: 4, endDate: $tomorrow_plus_3
- "I'm partially not available on the 20th April" → isLeaveRequest: true, startDate: $year-04-20, durationDays: 0.5, endDate: $year-04-20
- "I'm not available on the 25th of the next month" → isLeaveRequest: true, startDate: $next_month_25th, durationDays: 1, endDate: $next_month_25th
- "I'm not available for 3 days after the 15th of the next month" → isLeaveRequest: true, startDate: $next_month_16th, durationDays: 3, endDate: $next_month_18th
- "Coming in 2 hours late tomorrow" → isRunningLate: true, startDate: $tomorrow, durationDays: 1, endDate: $tomorrow

REQUIRED FIELDS:
- isWorkingFromHome: true/false
- isLeaveRequest: true/false
- isRunningLate: true/false
- isLeavingEarly: true/false
- reason: string or null
- startDate: YYYY-MM-DD, never null
- durationDays: number, never null
- endDate: YYYY-MM-DD, never null

User message: $message

Provide ONLY a valid JSON response, without any explanation:
{
  "isWorkingFromHome": false,
  "isLeaveRequest": true,
  "isRunningLate": false,
  "isLeavingEarly": false,
  "reason": "extracted reason or null",
  "startDate": "YYYY-MM-DD",
  "endDate": "YYYY-MM-DD",
  "durationDays": 1
}
""")

QUERY_PROMPT = Template("""You convert natural language questions about employee attendance and leave into structured query JSON.

Current reference points:
- Today's date: $today ($weekday)
- Current month: $month
- Current year: $year

Time periods:
- "today" = $today
- "tomorrow" = $tomorrow
- "yesterday" = $yesterday
- "this week" = $week_start to $week_end (Monday to Sunday)
- "this month" = $month_start to $month_end
- "last month" = $last_month_start to $last_month_end
- "next month" = $next_month_start to $next_month_end

Records overlap a period when start_date <= period_end AND end_date >= period_start.

Table columns:
- user_id, user_name, first_name, last_name, email: TEXT
- timestamp: TIMESTAMPTZ (when the message was sent)
- start_date, end_date: DATE
- category: one of wfh, full_leave, half_leave, leave_early, come_late, out_of_office
- is_working_from_home, is_leave_requested, is_coming_late, is_leave_early: BOOLEAN
- reason: TEXT

Query types:
- "list": individual records
- "count": number of matching records
- "trend": records per day over time
- "summary": aggregated stats by category and user

Category mapping:
- "wfh", "work from home", "remote" → "wfh"
- "leave", "day off", "absent", "pto", "vacation" → "full_leave"
- "half day", "partial leave" → "half_leave"
- "late", "delayed", "running late" → "come_late"
- "leaving early", "early departure" → "leave_early"
- "out for a meeting", "client visit" → "out_of_office"
- "unavailable" without specifics → "all"

Rules:
- "groupBy" MUST be one of "user", "day", "category"; default "user"
- For specific dates or ranges use timeFrame {"start": "YYYY-MM-DD", "end": "YYYY-MM-DD"}
- For the current week, month, quarter or year you may use the shorthand "week", "month", "quarter", "year"
- Put person names in filters.user_name

Examples:

"Who took leave on $today?"
{"queryType": "list", "category": "full_leave", "timeFrame": {"start": "$today", "end": "$today"}, "groupBy": "user", "limit": 50, "filters": {}}

"Show me who's working from home this week"
{"queryType": "list", "category": "wfh", "timeFrame": "week", "groupBy": "user", "limit": 50, "filters": {"is_working_from_home": true}}

"How many people were late last month"
{"queryType": "count", "category": "come_late", "timeFrame": {"start": "$last_month_start", "end": "$last_month_end"}, "groupBy": "user", "limit": 10, "filters": {"is_coming_late": true}}

"Summary report of this month"
{"queryType": "summary", "category": "all", "timeFrame": "month", "groupBy": "category", "limit": 10, "filters": {}}

Query: $message

Respond with ONLY JSON in exactly this structure:
{
  "queryType": "count|list|trend|summary",
  "category": "all|wfh|full_leave|half_leave|leave_early|come_late|out_of_office",
  "timeFrame": "day|week|month|quarter|year|{\\"start\\": \\"YYYY-MM-DD\\", \\"end\\": \\"YYYY-MM-DD\\"}",
  "groupBy": "user|day|category",
  "limit": 10,
  "filters": {}
}
""")


def _add_months(value: date, months: int, day: int = 1) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def _month_end(value: date) -> date:
    return value.replace(day=calendar.monthrange(value.year, value.month)[1])


def next_weekday(today: date, weekday: int) -> date:
    """Next occurrence of ``weekday`` (Monday=0) strictly after today."""
    return today + timedelta(days=(weekday - today.weekday()) % 7 or 7)


def date_anchors(today: date) -> dict[str, str]:
    """Template values describing ``today`` and the dates around it."""
    tomorrow = today + timedelta(days=1)
    week_start = today - timedelta(days=today.weekday())
    month_start = today.replace(day=1)
    last_month_start = _add_months(today, -1)
    next_month_start = _add_months(today, 1)

    next_weekdays = "\n".join(
        f"- Next {calendar.day_name[weekday]} = {next_weekday(today, weekday).isoformat()}"
        for weekday in range(7)
    )

    return {
        "today": today.isoformat(),
        "weekday": today.strftime("%A"),
        "month": today.strftime("%B %Y"),
        "year": str(today.year),
        "tomorrow": tomorrow.isoformat(),
        "tomorrow_weekday": tomorrow.strftime("%A"),
        "tomorrow_plus_3": (tomorrow + timedelta(days=3)).isoformat(),
        "yesterday": (today - timedelta(days=1)).isoformat(),
        "next_week": (today + timedelta(days=7)).isoformat(),
        "next_weekdays": next_weekdays,
        "week_start": week_start.isoformat(),
        "week_end": (week_start + timedelta(days=6)).isoformat(),
        "month_start": month_start.isoformat(),
        "month_end": _month_end(today).isoformat(),
        "last_month_start": last_month_start.isoformat(),
        "last_month_end": _month_end(last_month_start).isoformat(),
        "next_month_name": next_month_start.strftime("%B %Y"),
        "next_month_start": next_month_start.isoformat(),
        "next_month_end": _month_end(next_month_start).isoformat(),
        "next_month_16th": _add_months(today, 1, day=16).isoformat(),
        "next_month_18th": _add_months(today, 1, day=18).isoformat(),
        "next_month_25th": _add_months(today, 1, day=25).isoformat(),
    }


def render_classification_prompt(message: str, today: date) -> str:
    return CLASSIFICATION_PROMPT.safe_substitute(date_anchors(today), message=message)


def render_details_prompt(message: str, today: date) -> str:
    return DETAILS_PROMPT.safe_substitute(date_anchors(today), message=message)


def render_query_prompt(query: str, today: date) -> str:
    return QUERY_PROMPT.safe_substitute(date_anchors(today), message=query)
