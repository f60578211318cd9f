"""Schema exports."""

from .filters import IndexFilter, QueryFilterSpec
from .ingestion import DataType, IngestionOutcome, SourceFile
from .profile import Profile, canonical_text
from .results import IndexedRecord, RankedResult, ResultPage, SearchCandidate

__all__ = [
    "Profile",
    "canonical_text",
    "QueryFilterSpec",
    "IndexFilter",
    "SearchCandidate",
    "RankedResult",
    "ResultPage",
    "IndexedRecord",
    "DataType",
    "SourceFile",
    "IngestionOutcome",
]
