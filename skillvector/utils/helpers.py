"""Helper utilities shared by the extraction agents and parsers."""

import json
import re
from typing import Any, List, Optional

EMAIL_PATTERN = r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"


def extract_emails(text: str) -> List[str]:
    """Extract email addresses from text using regex."""
    if not text:
        return []
    return list(dict.fromkeys(re.findall(EMAIL_PATTERN, text)))


def strip_code_fence(text: str) -> str:
    """Remove an optional markdown code block around an LLM answer."""
    raw = (text or "").strip()
    if raw.startswith("```"):
        raw = re.sub(r"^```(?:json)?\s*", "", raw, flags=re.IGNORECASE)
        raw = re.sub(r"\s*```$", "", raw)
    return raw.strip()


def parse_llm_json(text: str) -> Optional[Any]:
    """
    Parse JSON from an LLM response, stripping markdown code blocks if present.
    Falls back to the outermost {...} or [...] block when the model wrapped it
    in prose, trying whichever opens first.
    """
    raw = strip_code_fence(text)
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass
    spans = [r"\{[\s\S]*\}", r"\[[\s\S]*\]"]
    if 0 <= raw.find("[") < raw.find("{") or "{" not in raw:
        spans.reverse()
    for pattern in spans:
        match = re.search(pattern, raw)
        if not match:
            continue
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            continue
    return None


def to_number(value: Any) -> Optional[float]:
    """Best-effort numeric coercion ("5", "5 years", 5.0 -> 5.0); None if no number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    m = re.search(r"-?\d+(?:\.\d+)?", str(value))
    return float(m.group(0)) if m else None


def format_number(value: float) -> str:
    """Render 5.0 as "5" and 2.5 as "2.5"."""
    return str(int(value)) if float(value).is_integer() else str(value)
