"""Exception types shared across ingestion and search."""

from typing import List, Optional


class SkillVectorError(Exception):
    """Base class for all errors raised by this package."""


class ProfileValidationError(SkillVectorError):
    """A parsed profile is missing one or more required fields."""

    def __init__(self, missing_fields: List[str], name: Optional[str] = None) -> None:
        self.missing_fields = list(missing_fields)
        self.name = name
        who = name or "Unknown"
        super().__init__(f"Profile '{who}' missing required fields: {', '.join(self.missing_fields)}")


class DuplicateProfileError(SkillVectorError):
    """The profile fingerprint is already present in the index."""

    def __init__(self, fingerprint: str) -> None:
        self.fingerprint = fingerprint
        super().__init__(f"Profile already indexed (fingerprint {fingerprint})")


class ProviderError(SkillVectorError):
    """An embedding or language-model provider call failed."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class VectorIndexError(SkillVectorError):
    """The vector index is unreachable or its schema does not match."""


class FileValidationError(SkillVectorError):
    """An uploaded file does not match its declared type."""
