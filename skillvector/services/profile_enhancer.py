"""
Pattern matchers that fill missing or generic profile fields from raw text.

Each matcher is a plain function (text -> value or None) so it can be tested on
its own; enhance_profile is the single entry point used by the pipeline.
"""

import re
from typing import Callable, List, Optional, Pattern

from skillvector.schemas.profile import Profile, is_blank
from skillvector.utils.helpers import extract_emails

_LOCATION_PATTERNS: List[Pattern] = [
    re.compile(r"\bfrom\s+([A-Z][a-zA-Z\s]+(?:,\s*[A-Z][a-zA-Z\s]+)?)", re.IGNORECASE),
    re.compile(r"\bin\s+([A-Z][a-zA-Z\s]+,\s*[A-Z][a-zA-Z\s]+)", re.IGNORECASE),
    re.compile(r"career\s+in\s+([A-Z][a-zA-Z\s]+(?:,\s*[A-Z][a-zA-Z\s]+)?)", re.IGNORECASE),
    re.compile(r"location:\s*([A-Z][a-zA-Z\s,]+?)(?:\.|;|\n|$)", re.IGNORECASE),
    re.compile(r"based\s+in\s+([A-Z][a-zA-Z\s,]+?)(?:\.|;|\n|$)", re.IGNORECASE),
    re.compile(r"lives?\s+in\s+([A-Z][a-zA-Z\s,]+?)(?:\.|;|\n|$)", re.IGNORECASE),
    re.compile(r"works?\s+in\s+([A-Z][a-zA-Z\s,]+?)(?:\.|;|\n|$)", re.IGNORECASE),
]

_SKILLS_PATTERNS: List[Pattern] = [
    re.compile(r"skills?:\s*([^.\n]+)", re.IGNORECASE),
    re.compile(r"specializes?\s+in\s+([^.\n]+?)(?:\s+with|\s+and has|\.|$)", re.IGNORECASE | re.MULTILINE),
    re.compile(r"expertise\s+in\s+([^.\n]+?)(?:\s+and|\.|$)", re.IGNORECASE | re.MULTILINE),
]

_EXPERIENCE_PATTERNS: List[Pattern] = [
    re.compile(r"(\d+(?:\.\d+)?)\+?\s+years?\s+of\s+(?:professional\s+)?experience", re.IGNORECASE),
    re.compile(r"experience:\s*(\d+(?:\.\d+)?)\s*years?", re.IGNORECASE),
    re.compile(r"with\s+(\d+(?:\.\d+)?)\+?\s+years", re.IGNORECASE),
]

_NAME_PATTERNS: List[Pattern] = [
    re.compile(r"^\s*name:\s*(.+)$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^\s*([A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,3})\s+is\s+an?\s+", re.MULTILINE),
]

_ROLE_PATTERNS: List[Pattern] = [
    re.compile(r"^\s*(?:role|title|position):\s*(.+)$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"\bis\s+an?\s+([A-Za-z][A-Za-z\s/-]+?)(?:\s+(?:from|based|in|at|with|who)\b|[.,;\n])"),
]

# Trailing words the location patterns tend to swallow
_LOCATION_STOP = re.compile(r"\s+(?:with|and|who|where|since|for|at)\b.*$", re.IGNORECASE)


def _first_match(patterns: List[Pattern], text: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text or "")
        if match:
            value = match.group(1).strip().strip(",").strip()
            if value:
                return value
    return None


def extract_location(text: str) -> Optional[str]:
    value = _first_match(_LOCATION_PATTERNS, text)
    if not value:
        return None
    value = _LOCATION_STOP.sub("", value).strip().strip(",").strip()
    return value or None


def extract_skills(text: str) -> Optional[str]:
    return _first_match(_SKILLS_PATTERNS, text)


def extract_experience(text: str) -> Optional[float]:
    value = _first_match(_EXPERIENCE_PATTERNS, text)
    return float(value) if value is not None else None


def extract_email(text: str) -> Optional[str]:
    emails = extract_emails(text)
    return emails[0] if emails else None


def extract_name(text: str) -> Optional[str]:
    return _first_match(_NAME_PATTERNS, text)


def extract_role(text: str) -> Optional[str]:
    return _first_match(_ROLE_PATTERNS, text)


def extract_description(text: str, max_chars: int = 500) -> Optional[str]:
    """First paragraph of the text, collapsed to one line."""
    for block in re.split(r"\n\s*\n", text or ""):
        line = " ".join(block.split())
        if line:
            return line[:max_chars]
    return None


def _missing_experience(profile: Profile) -> bool:
    if profile.experience is None:
        return True
    years = profile.experience_years()
    if years is not None:
        return years == 0
    return is_blank(profile.experience)


def enhance_profile(profile: Profile, source_text: str, fill_description: bool = False) -> Profile:
    """
    Return a copy of the profile with missing or generic location, skills,
    experience and email filled from source_text. Existing values are kept.
    With fill_description the description falls back to the text's first paragraph.
    """
    text = source_text or ""
    if not text.strip():
        return profile

    updates = {}
    if is_blank(profile.location):
        location = extract_location(text)
        if location:
            updates["location"] = location
    if is_blank(profile.skills):
        skills = extract_skills(text)
        if skills:
            updates["skills"] = [s.strip() for s in skills.split(",") if s.strip()] if "," in skills else skills
    if _missing_experience(profile):
        years = extract_experience(text)
        if years is not None:
            updates["experience"] = years
    if not profile.email:
        email = extract_email(text)
        if email:
            updates["email"] = email
    if fill_description and is_blank(profile.description):
        description = extract_description(text)
        if description:
            updates["description"] = description

    if not updates:
        return profile
    return profile.model_copy(update=updates)


# Matchers used by the regex extraction strategy, keyed by Profile field
FIELD_MATCHERS: dict[str, Callable[[str], Optional[object]]] = {
    "name": extract_name,
    "role": extract_role,
    "location": extract_location,
    "skills": extract_skills,
    "experience": extract_experience,
    "email": extract_email,
    "description": extract_description,
}

__all__ = [
    "FIELD_MATCHERS",
    "enhance_profile",
    "extract_description",
    "extract_email",
    "extract_experience",
    "extract_location",
    "extract_name",
    "extract_role",
    "extract_skills",
]
