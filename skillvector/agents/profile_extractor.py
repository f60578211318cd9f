"""Free-text profile extraction: interchangeable LLM and regex strategies."""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from skillvector.config import TEXT_EXTRACTION_MAX_CHARS
from skillvector.errors import ProviderError
from skillvector.schemas.profile import REQUIRED_FIELDS, Profile
from skillvector.services.llm_service import LLMService
from skillvector.services.profile_enhancer import FIELD_MATCHERS
from skillvector.services.text_cleaner import clean_text
from skillvector.utils.helpers import parse_llm_json
from skillvector.utils.logger import get_logger

logger = get_logger(__name__)

EXTRACTION_SYSTEM_PROMPT = """You are a profile information extraction system.
Extract every person described in the text below.
Return only valid JSON (no markdown, no code block): an array of objects matching this schema:
{
  "name": "string",
  "role": "string (job title)",
  "location": "string (city and/or country)",
  "skills": ["string"],
  "experience": number (years of experience) or null,
  "description": "string (one or two sentence summary of the person)",
  "email": "string or null"
}
Use an empty string for anything not stated in the text. Do not invent values."""


class ProfileExtractionStrategy(ABC):
    """Abstract base for turning free text into profiles."""

    name: str = "extractor"

    @abstractmethod
    async def extract(self, text: str) -> List[Profile]:
        """Return the profiles found in the text (possibly incomplete)."""
        pass


def _records_from_answer(parsed: Any) -> List[dict]:
    if isinstance(parsed, list):
        return [r for r in parsed if isinstance(r, dict)]
    if isinstance(parsed, dict):
        for key in ("people", "persons", "profiles"):
            if isinstance(parsed.get(key), list):
                return [r for r in parsed[key] if isinstance(r, dict)]
        return [parsed]
    return []


class LLMProfileExtractor(ProfileExtractionStrategy):
    """Language-model extraction to the fixed Profile schema."""

    name = "llm"

    def __init__(self, llm: LLMService) -> None:
        self._llm = llm

    async def extract(self, text: str) -> List[Profile]:
        answer = await self._llm.complete(EXTRACTION_SYSTEM_PROMPT, f"Text:\n{text}")
        records = _records_from_answer(parse_llm_json(answer))
        if not records:
            raise ProviderError(self._llm.name, "extraction answer held no profile objects")
        profiles = []
        for record in records:
            try:
                profile = Profile.from_record(record)
            except ValidationError as e:
                logger.warning("Discarding malformed extracted profile: %s", e)
                continue
            # An all-empty object means the model found nobody
            if len(profile.missing_fields()) < len(REQUIRED_FIELDS):
                profiles.append(profile)
        if not profiles:
            raise ProviderError(self._llm.name, "extraction answer held no usable profile")
        return profiles


class RegexProfileExtractor(ProfileExtractionStrategy):
    """Pattern-matcher extraction: one profile from the whole text."""

    name = "regex"

    async def extract(self, text: str) -> List[Profile]:
        record = {}
        for field, matcher in FIELD_MATCHERS.items():
            value = matcher(text)
            if value is not None:
                record[field] = value
        if not record:
            return []
        return [Profile.from_record(record)]


class FallbackProfileExtractor(ProfileExtractionStrategy):
    """Try strategies in order; the first that succeeds with at least one profile wins."""

    name = "fallback"

    def __init__(self, strategies: Sequence[ProfileExtractionStrategy]) -> None:
        self._strategies = list(strategies)
        self.fallback_count = 0

    async def extract(self, text: str) -> List[Profile]:
        for strategy in self._strategies:
            try:
                profiles = await strategy.extract(text)
            except ProviderError as e:
                self.fallback_count += 1
                logger.warning("%s extraction failed (%s); trying next strategy", strategy.name, e)
                continue
            if profiles:
                logger.info("%s extraction found %s profile(s)", strategy.name, len(profiles))
                return profiles
        return []


def build_profile_extractor(llm: Optional[LLMService]) -> FallbackProfileExtractor:
    strategies: List[ProfileExtractionStrategy] = []
    if llm is not None:
        strategies.append(LLMProfileExtractor(llm))
    strategies.append(RegexProfileExtractor())
    return FallbackProfileExtractor(strategies)


def prepare_text(raw: str) -> str:
    """Clean uploaded text (markdown or stray HTML) before extraction."""
    return clean_text(raw, max_chars=TEXT_EXTRACTION_MAX_CHARS)
