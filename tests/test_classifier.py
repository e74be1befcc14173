"""Tests for message classification."""

import pytest

from attendbot.attendance.classifier import (
    MessageClassifier,
    fallback_classification,
    parse_text_response,
)
from attendbot.attendance.schemas import Category
from attendbot.utils.errors import WorkflowRequestError


class TestFallbackClassification:
    """Keyword rules used when the provider fails."""

    @pytest.mark.parametrize(
        "message,category,confidence",
        [
            ("WFH today", "WFH", 0.8),
            ("working from home, half day", "WFH", 0.8),
            ("taking half day leave for the dentist", "HALF DAY LEAVE", 0.8),
            ("afternoon off", "HALF DAY LEAVE", 0.8),
            ("on sick leave", "FULL DAY LEAVE", 0.7),
            ("train delayed, will be in by 11", "LATE TO OFFICE", 0.6),
            ("leaving early for a school event", "LEAVING EARLY", 0.6),
            ("hello team", "FULL DAY LEAVE", 0.5),
        ],
    )
    def test_rules(self, message, category, confidence):
        result = fallback_classification(message)
        assert result.category == category
        assert result.confidence == confidence


class TestParseTextResponse:
    """Heuristics for model output without JSON."""

    def test_wfh_from_original_message(self):
        result = parse_text_response("Half day leave", "wfh for half the day")
        assert result.category == "WFH"

    def test_half_day_from_model_text(self):
        result = parse_text_response("Category: Half day leave", "not feeling great")
        assert result.category == "HALF DAY LEAVE"
        assert result.confidence == 0.8

    def test_confidence_is_read_from_text(self):
        result = parse_text_response("Running late. confidence: 0.65", "stuck in traffic")
        assert result.category == "LATE TO OFFICE"
        assert result.confidence == 0.65

    def test_default(self):
        result = parse_text_response("I am not sure", "hmm")
        assert result.category == "FULL DAY LEAVE"
        assert result.confidence == 0.6


class TestMessageClassifier:
    """Tests for MessageClassifier.classify."""

    async def test_json_response(self, fake_backend, today):
        backend = fake_backend({"classification": {"category": "Work from home", "confidence": 0.93}})

        result = await MessageClassifier(backend).classify("wfh today", today)

        assert result.category == "Work from home"
        assert result.confidence == 0.93
        assert result.mapped_category is Category.WFH

        prompt, message, task = backend.calls[0]
        assert task == "classification"
        assert message == "wfh today"
        assert "wfh today" in prompt
        assert "2026-10-19" in prompt

    async def test_fenced_json_response(self, fake_backend, today):
        backend = fake_backend(
            {"classification": '```json\n{"category": "Early leave", "confidence": 0.9}\n```'}
        )

        result = await MessageClassifier(backend).classify("leaving at 3pm", today)

        assert result.mapped_category is Category.LEAVE_EARLY

    async def test_missing_fields_use_defaults(self, fake_backend, today):
        backend = fake_backend({"classification": {}})

        result = await MessageClassifier(backend).classify("off", today)

        assert result.category == "FULL DAY LEAVE"
        assert result.confidence == 0.8

    async def test_text_response(self, fake_backend, today):
        backend = fake_backend({"classification": "This is running late"})

        result = await MessageClassifier(backend).classify("traffic, in by 10", today)

        assert result.category == "LATE TO OFFICE"

    async def test_provider_error_uses_fallback(self, fake_backend, today):
        backend = fake_backend(error=WorkflowRequestError("HTTP 502 from workflow"))

        result = await MessageClassifier(backend).classify("WFH tomorrow", today)

        assert result.category == "WFH"
        assert result.confidence == 0.8

    async def test_empty_message(self, fake_backend, today):
        with pytest.raises(ValueError, match="Message is required"):
            await MessageClassifier(fake_backend()).classify("   ", today)
