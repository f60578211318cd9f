"""Source files handed to the ingestion pipeline and the per-file outcome."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DataType(str, Enum):
    CSV = "csv"
    JSON = "json"
    TEXT = "text"


class SourceFile(BaseModel):
    name: str
    data_type: DataType = Field(alias="dataType")
    content: str
    path: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class IngestionOutcome(BaseModel):
    """Result of ingesting one file. Counts are per file; duplicates are successes."""

    file_name: str = Field(alias="fileName")
    data_type: DataType = Field(alias="dataType")
    already_exists: bool = Field(default=False, alias="alreadyExists")
    stored_in_qdrant: bool = Field(default=False, alias="storedInQdrant")
    stored_count: int = Field(default=0, alias="storedCount")
    duplicate_count: int = Field(default=0, alias="duplicateCount")
    invalid_count: int = Field(default=0, alias="invalidCount")
    processed_data: List[Dict[str, Any]] = Field(default_factory=list, alias="processedData")
    error: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @property
    def succeeded(self) -> bool:
        return self.error is None
