"""Map profiles to namespaced index payloads and payloads back to API person objects."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from skillvector.schemas.profile import Profile, canonical_text

HASH_KEY = "personHash"
CONTENT_KEY = "content"
STORED_AT_KEY = "stored_at"
DATA_PREFIX = "data_"
META_PREFIX = "meta_"

# Payload fields that carry a secondary index
INDEXED_FIELDS = (
    "data_location",
    "data_role",
    "data_skills",
    "data_experience_years",
    HASH_KEY,
    CONTENT_KEY,
)


def build_payload(
    profile: Profile,
    content_hash: str,
    metadata: Optional[Dict[str, Any]] = None,
    content: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Flatten a profile into the stored payload. Core fields and extras go under
    data_*, ingestion metadata (file name, data type) under meta_*.
    """
    payload: Dict[str, Any] = {
        HASH_KEY: content_hash,
        CONTENT_KEY: content if content is not None else canonical_text(profile),
        STORED_AT_KEY: datetime.now(timezone.utc).isoformat(),
    }
    for key, value in profile.extra.items():
        payload[f"{DATA_PREFIX}{key}"] = value

    years = profile.experience_years()
    payload.update(
        {
            "data_name": profile.name,
            "data_role": profile.role,
            "data_location": profile.location,
            "data_skills": profile.skills_text(),
            "data_experience_years": years if years is not None else profile.experience_text(),
            "data_email": profile.email,
            "data_description": profile.description,
        }
    )
    for key, value in (metadata or {}).items():
        if value is not None:
            payload[f"{META_PREFIX}{key}"] = value
    return payload


def person_from_payload(payload: Dict[str, Any], score: Optional[float] = None) -> Dict[str, Any]:
    """Shape a stored payload into the person object returned by /search and /people."""
    years = payload.get("data_experience_years")
    if years is None:
        years = payload.get("data_experience", 0)
    person = {
        "name": payload.get("data_name") or "Unknown",
        "role": payload.get("data_role") or "Unknown",
        "location": payload.get("data_location") or "Unknown",
        "skills": payload.get("data_skills") or "Unknown",
        "experience": years,
        "experience_years": years,
        "description": payload.get("data_description") or "",
        "email": payload.get("data_email") or "",
        "relevanceScore": score,
        "rawContent": payload.get(CONTENT_KEY, ""),
    }
    return person


def source_from_payload(payload: Dict[str, Any], score: Optional[float] = None) -> Dict[str, Any]:
    """Backwards-compatible `sources[]` entry: stored content plus full metadata."""
    metadata = dict(payload)
    if score is not None:
        metadata["score"] = score
    return {"content": payload.get(CONTENT_KEY, ""), "metadata": metadata}
