"""Tests for attendance details extraction."""

from datetime import date

import pytest

from attendbot.attendance.extractor import (
    DetailsExtractor,
    fallback_details_extraction,
    parse_text_response,
)
from attendbot.utils.errors import LLMProviderError


class TestFallbackDetailsExtraction:
    """Keyword rules used when the provider fails."""

    def test_wfh_today(self, today):
        details = fallback_details_extraction("WFH today", today)
        assert details.is_working_from_home is True
        assert details.is_leave_request is False
        assert details.start_date == today
        assert details.end_date == today
        assert details.duration_days == 1

    def test_leave_tomorrow(self, today):
        details = fallback_details_extraction("On leave tomorrow", today)
        assert details.is_leave_request is True
        assert details.start_date == date(2026, 10, 20)
        assert details.end_date == date(2026, 10, 20)

    def test_half_day_tomorrow(self, today):
        details = fallback_details_extraction("half day tomorrow, doctor appointment", today)
        assert details.is_leave_request is True
        assert details.duration_days == 0.5
        assert details.start_date == details.end_date == date(2026, 10, 20)

    def test_next_week_defaults_to_five_days(self, today):
        details = fallback_details_extraction("vacation next week", today)
        assert details.start_date == date(2026, 10, 26)
        assert details.duration_days == 5
        assert details.end_date == date(2026, 10, 30)

    def test_explicit_day_count(self, today):
        details = fallback_details_extraction("leave for 3 days from tomorrow", today)
        assert details.duration_days == 3
        assert details.start_date == date(2026, 10, 20)
        assert details.end_date == date(2026, 10, 22)

    def test_day_count_is_capped(self, today):
        details = fallback_details_extraction("leave for 99999999 days", today)
        assert details.duration_days == 366
        assert details.end_date == date(2027, 10, 19)

    def test_running_late(self, today):
        details = fallback_details_extraction("running late", today)
        assert details.is_running_late is True
        assert details.is_leave_request is False


def test_parse_text_response(today):
    text = "isWorkingFromHome yes, startDate: 2026-10-21, durationDays: 2"
    details = parse_text_response(text, today)

    assert details.is_working_from_home is True
    assert details.start_date == date(2026, 10, 21)
    assert details.duration_days == 2
    assert details.end_date == date(2026, 10, 22)


class TestDetailsExtractor:
    """Tests for DetailsExtractor.extract."""

    async def test_json_response(self, fake_backend, today):
        backend = fake_backend(
            {
                "details": {
                    "isWorkingFromHome": False,
                    "isLeaveRequest": True,
                    "isRunningLate": False,
                    "isLeavingEarly": False,
                    "reason": "family function",
                    "startDate": "2026-11-25",
                    "endDate": "2026-11-26",
                    "durationDays": 2,
                }
            }
        )

        details = await DetailsExtractor(backend).extract(
            "Out on the 25th and 26th of next month for a family function", today
        )

        assert details.is_leave_request is True
        assert details.reason == "family function"
        assert details.start_date == date(2026, 11, 25)
        assert details.end_date == date(2026, 11, 26)
        assert details.duration_days == 2
        assert details.additional_details["original_message"].startswith("Out on the 25th")
        assert backend.calls[0][2] == "details"

    async def test_missing_dates_are_filled(self, fake_backend, today):
        backend = fake_backend({"details": {"isWorkingFromHome": True, "durationDays": 4}})

        details = await DetailsExtractor(backend).extract("wfh for four days", today)

        assert details.start_date == today
        assert details.end_date == date(2026, 10, 22)

    async def test_text_response(self, fake_backend, today):
        backend = fake_backend({"details": "leaveRequest. startDate: 2026-10-23"})

        details = await DetailsExtractor(backend).extract("off friday", today)

        assert details.is_leave_request is True
        assert details.start_date == date(2026, 10, 23)
        assert details.end_date == date(2026, 10, 23)

    async def test_provider_error_uses_fallback(self, fake_backend, today):
        backend = fake_backend(error=LLMProviderError("rate limited"))

        details = await DetailsExtractor(backend).extract("WFH tomorrow", today)

        assert details.is_working_from_home is True
        assert details.start_date == date(2026, 10, 20)

    async def test_invalid_field_values_use_fallback(self, fake_backend, today):
        backend = fake_backend(
            {
                "details": {
                    "isWorkingFromHome": "N/A",
                    "isLeaveRequest": True,
                    "startDate": "2026-10-19",
                }
            }
        )

        details = await DetailsExtractor(backend).extract("On leave tomorrow", today)

        assert details.is_leave_request is True
        assert details.is_working_from_home is False
        assert details.start_date == date(2026, 10, 20)
        assert details.end_date == date(2026, 10, 20)

    async def test_huge_duration_is_capped(self, fake_backend, today):
        backend = fake_backend({"details": {"startDate": "2026-10-19", "durationDays": 1e7}})

        details = await DetailsExtractor(backend).extract("long sabbatical", today)

        assert details.duration_days == 366
        assert details.end_date == date(2027, 10, 19)

    async def test_empty_message(self, fake_backend, today):
        with pytest.raises(ValueError, match="Message is required"):
            await DetailsExtractor(fake_backend()).extract("", today)
