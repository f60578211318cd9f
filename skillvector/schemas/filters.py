"""Query filter spec (extracted from natural language) and its index-level form."""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from skillvector.utils.helpers import to_number


class QueryFilterSpec(BaseModel):
    """Optional structured filters recognised in a query. All fields empty = no filter."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    location: Optional[str] = None
    skills: Optional[str] = None
    role: Optional[str] = None
    min_experience: Optional[float] = Field(default=None, alias="minExperience")
    max_experience: Optional[float] = Field(default=None, alias="maxExperience")

    @field_validator("location", "role", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, dict):
            raise ValueError("expected a string")
        if isinstance(value, (list, tuple)):
            value = " ".join(str(v) for v in value)
        text = str(value).strip()
        return text or None

    @field_validator("skills", mode="before")
    @classmethod
    def _skills(cls, value: Any) -> Optional[str]:
        # Multiple skills collapse to one space-joined string
        if value is None:
            return None
        if isinstance(value, dict):
            raise ValueError("expected a string or list of strings")
        if isinstance(value, (list, tuple)):
            value = " ".join(str(v).strip() for v in value if str(v).strip())
        text = " ".join(str(value).replace(",", " ").split())
        return text or None

    @field_validator("min_experience", "max_experience", mode="before")
    @classmethod
    def _years(cls, value: Any) -> Optional[float]:
        return to_number(value)

    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (self.location, self.skills, self.role, self.min_experience, self.max_experience)
        )

    def to_public(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class IndexFilter(BaseModel):
    """
    Index-level constraints, all AND-ed together:
    exact keyword matches, full-text matches and numeric ranges (gte, lte).
    """

    exact: Dict[str, str] = Field(default_factory=dict)
    text: Dict[str, str] = Field(default_factory=dict)
    ranges: Dict[str, Tuple[Optional[float], Optional[float]]] = Field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.exact or self.text or self.ranges)

    def fields(self) -> List[str]:
        return sorted(set(self.exact) | set(self.text) | set(self.ranges))
