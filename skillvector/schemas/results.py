"""Search candidates, ranked results and the paginated page returned to callers."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SearchCandidate(BaseModel):
    """Raw similarity hit from the vector index, before boosting."""

    id: str
    raw_score: float = Field(alias="rawScore")
    payload: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


class RankedResult(BaseModel):
    """A candidate after boosting; relevance_score is clamped to at most 1.0."""

    id: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    raw_score: float = Field(alias="rawScore")
    relevance_score: float = Field(alias="relevanceScore")
    boosts: List[str] = Field(default_factory=list, description="Boost reasons that fired")

    model_config = ConfigDict(populate_by_name=True)


class ResultPage(BaseModel):
    results: List[RankedResult] = Field(default_factory=list)
    total: int = 0
    limit: int = 0
    offset: int = 0
    has_more: bool = Field(default=False, alias="hasMore")
    summary: str = ""

    model_config = ConfigDict(populate_by_name=True)


class IndexedRecord(BaseModel):
    """A stored point as read back from the index (vector omitted on scroll)."""

    id: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    vector: Optional[List[float]] = None
