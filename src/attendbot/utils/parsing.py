"""Helpers for pulling JSON out of free-form model output."""

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?|\n?```", re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```json ... ```) around model output."""
    return _FENCE_RE.sub("", text).strip()


def extract_json_object(text: str | None) -> dict[str, Any] | None:
    """Parse the first JSON object found in ``text``.

    Tries the whole (fence-stripped) text first, then the widest ``{...}``
    span. Returns None when nothing parses to a JSON object.
    """
    if not text:
        return None

    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _OBJECT_RE.search(cleaned)
        if not match:
            return None
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError:
            return None

    return parsed if isinstance(parsed, dict) else None
