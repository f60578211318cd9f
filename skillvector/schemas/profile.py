"""Profile schema: the typed core of a person record plus a side-map of extra fields."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from skillvector.utils.helpers import format_number, to_number

REQUIRED_FIELDS = ("name", "role", "location", "skills", "experience", "description")

# Values the extractors emit when they could not find a field
GENERIC_PLACEHOLDERS = {
    "",
    "unknown",
    "unknown location",
    "unknown role",
    "no skills listed",
    "n/a",
    "none",
    "null",
}

_CORE_KEYS = {"name", "role", "location", "skills", "experience", "description", "email"}
_EXPERIENCE_ALIASES = ("experience", "experience_years", "years_of_experience", "years")


def is_blank(value: Any) -> bool:
    """True for None, empty/placeholder strings and empty lists."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() in GENERIC_PLACEHOLDERS
    if isinstance(value, (list, tuple)):
        return not any(not is_blank(v) for v in value)
    return False


def _clean_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v).strip() for v in value if str(v).strip())
    return str(value).strip()


def _normalize_skills(value: Any) -> Union[str, List[str]]:
    """Comma-separated strings become lists; lists are trimmed."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return [str(s).strip() for s in value if str(s).strip()]
    text = str(value).strip()
    if "," in text:
        return [s.strip() for s in text.split(",") if s.strip()]
    return text


class Profile(BaseModel):
    """A professional profile as parsed from CSV, JSON or free text."""

    name: str = Field(default="", description="Full name")
    role: str = Field(default="", description="Job title or role")
    location: str = Field(default="", description="City and/or country")
    skills: Union[List[str], str] = Field(default="", description="Skills as a list or free string")
    experience: Optional[Union[float, str]] = Field(default=None, description="Years of experience")
    description: str = Field(default="", description="Short biography or summary")
    email: str = Field(default="", description="Contact email")
    extra: Dict[str, str] = Field(default_factory=dict, description="Any additional fields, stringified")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Profile":
        """
        Build a Profile from an arbitrary parsed record. Keys are matched
        case-insensitively; experience_years is accepted for experience; unknown
        keys land in `extra`.
        """
        lowered = {str(k).strip().lower(): v for k, v in (record or {}).items()}
        experience: Any = None
        for alias in _EXPERIENCE_ALIASES:
            if not is_blank(lowered.get(alias)) or isinstance(lowered.get(alias), (int, float)):
                experience = lowered.get(alias)
                break
        if isinstance(experience, str):
            experience = experience.strip()
        elif isinstance(experience, bool):
            experience = None

        extra: Dict[str, str] = {}
        for key, value in lowered.items():
            if key in _CORE_KEYS or key in _EXPERIENCE_ALIASES or value is None:
                continue
            text = _clean_str(value)
            if text:
                extra[key] = text

        return cls(
            name=_clean_str(lowered.get("name")),
            role=_clean_str(lowered.get("role") or lowered.get("title")),
            location=_clean_str(lowered.get("location")),
            skills=_normalize_skills(lowered.get("skills")),
            experience=experience,
            description=_clean_str(lowered.get("description") or lowered.get("bio") or lowered.get("summary")),
            email=_clean_str(lowered.get("email")),
            extra=extra,
        )

    def skills_text(self) -> str:
        if isinstance(self.skills, list):
            return ", ".join(self.skills)
        return (self.skills or "").strip()

    def experience_years(self) -> Optional[float]:
        return to_number(self.experience)

    def experience_text(self) -> str:
        years = self.experience_years()
        if years is not None:
            return format_number(years)
        return _clean_str(self.experience)

    def missing_fields(self) -> List[str]:
        """Required fields that are empty or hold a placeholder value."""
        missing = []
        for field in REQUIRED_FIELDS:
            value = getattr(self, field)
            if field == "experience":
                if value is None or (isinstance(value, str) and not value.strip()):
                    missing.append(field)
                continue
            if is_blank(value):
                missing.append(field)
        return missing

    def is_ingestible(self) -> bool:
        return not self.missing_fields()

    def to_record(self) -> Dict[str, Any]:
        """Flat dict view used for API responses (extra fields merged in)."""
        data: Dict[str, Any] = dict(self.extra)
        data.update(
            {
                "name": self.name,
                "role": self.role,
                "location": self.location,
                "skills": self.skills,
                "experience": self.experience,
                "description": self.description,
                "email": self.email,
            }
        )
        return data


def canonical_text(profile: Profile) -> str:
    """
    Canonical textual form of a profile. Fingerprint input, stored content and
    embedding input; must stay free of timestamps or ids.
    """
    name = profile.name or "Unknown"
    role = profile.role or "Unknown role"
    location = profile.location or "Unknown location"
    skills = profile.skills_text() or "No skills listed"
    experience = profile.experience_text() or "Unknown"
    content = f"{name} is a {role} from {location}. Skills: {skills}. Experience: {experience} years."
    if profile.email:
        content += f" Email: {profile.email}."
    if profile.description:
        content += f" {profile.description}"
    return content
