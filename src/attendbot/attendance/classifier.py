"""Attendance message classification."""

import re
from datetime import date

from attendbot.attendance.schemas import ClassificationResult
from attendbot.attendance.timeframes import local_today
from attendbot.config import get_settings
from attendbot.llm.prompts import render_classification_prompt
from attendbot.llm.provider import CompletionBackend
from attendbot.utils.logging import get_logger
from attendbot.utils.parsing import extract_json_object

logger = get_logger(__name__)

_CONFIDENCE_RE = re.compile(r"confidence[\"':\s]*([0-9]*\.?[0-9]+)")


def _mentions(text: str, *phrases: str) -> bool:
    return any(phrase in text for phrase in phrases)


def fallback_classification(message: str) -> ClassificationResult:
    """Keyword rules used when the model cannot be reached."""
    msg = message.lower()

    if _mentions(msg, "wfh", "work from home", "working from home", "remote") or (
        "work" in msg and "home" in msg
    ):
        return ClassificationResult(category="WFH", confidence=0.8)

    if _mentions(
        msg,
        "half day leave",
        "half-day leave",
        "taking half day",
        "half day off",
        "half day sick",
        "partial day leave",
        "morning off",
        "afternoon off",
    ):
        return ClassificationResult(category="HALF DAY LEAVE", confidence=0.8)

    if _mentions(msg, "leave", "off today", "sick leave", "vacation", "taking off"):
        return ClassificationResult(category="FULL DAY LEAVE", confidence=0.7)

    if _mentions(msg, "late", "delayed"):
        return ClassificationResult(category="LATE TO OFFICE", confidence=0.6)

    if _mentions(msg, "leaving early", "early departure"):
        return ClassificationResult(category="LEAVING EARLY", confidence=0.6)

    return ClassificationResult(category="FULL DAY LEAVE", confidence=0.5)


def parse_text_response(text: str, message: str) -> ClassificationResult:
    """Classify from free-form model output that carried no JSON.

    WFH wins whenever the original message talks about working from home.
    """
    text = text.lower()
    msg = message.lower()

    category, confidence = "FULL DAY LEAVE", 0.6
    if "work from home" in text or _mentions(msg, "wfh", "work from home", "working from home") or (
        "work" in msg and "home" in msg
    ):
        category, confidence = "WFH", 0.8
    elif _mentions(text, "half", "partial"):
        category, confidence = "HALF DAY LEAVE", 0.8
    elif "late" in text:
        category, confidence = "LATE TO OFFICE", 0.8
    elif "early" in text:
        category, confidence = "LEAVING EARLY", 0.8
    elif _mentions(text, "leave", "full day"):
        category, confidence = "FULL DAY LEAVE", 0.8

    match = _CONFIDENCE_RE.search(text)
    if match:
        confidence = float(match.group(1))

    return ClassificationResult(category=category, confidence=confidence)


class MessageClassifier:
    """Assigns an attendance category to a Slack message."""

    def __init__(self, backend: CompletionBackend):
        self.backend = backend

    async def classify(self, message: str, today: date | None = None) -> ClassificationResult:
        """Classify a message, falling back to keyword rules on provider errors.

        Args:
            message: Raw Slack message text.
            today: Date anchor for the prompt, defaults to today in the configured zone.

        Raises:
            ValueError: If the message is empty.
        """
        if not message or not message.strip():
            raise ValueError("Message is required")

        prompt = render_classification_prompt(message, today or local_today(get_settings().timezone))
        try:
            text = await self.backend.complete(prompt, message, "classification")
        except Exception as e:
            logger.warning("classification_provider_failed", error=str(e))
            result = fallback_classification(message)
            logger.info("classified_with_fallback", category=result.category)
            return result

        parsed = extract_json_object(text)
        if parsed is None:
            logger.warning("classification_not_json", preview=text[:120])
            result = parse_text_response(text, message)
        else:
            result = ClassificationResult.model_validate(parsed)

        logger.info(
            "message_classified",
            category=result.category,
            confidence=result.confidence,
            mapped=result.mapped_category.value,
        )
        return result
