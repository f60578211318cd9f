"""Filter Agent: turn a free-form people query into a structured filter spec (fail-open)."""

import re
from typing import Optional

from pydantic import ValidationError

from skillvector.errors import ProviderError
from skillvector.schemas.filters import QueryFilterSpec
from skillvector.services.llm_service import LLMService
from skillvector.utils.helpers import parse_llm_json
from skillvector.utils.logger import get_logger

logger = get_logger(__name__)

FILTER_SYSTEM_PROMPT = """You extract search filters from a query about people.
Return a JSON object with these optional fields:
- location: city or country mentioned (e.g. "Italy", "New York")
- skills: specific skills mentioned as a single STRING (e.g. "Python", "React JavaScript", "Docker Kubernetes")
- role: job title mentioned (e.g. "Developer", "Manager")
- minExperience: minimum years of experience (number)
- maxExperience: maximum years of experience (number)

Rules:
- Only include fields that are explicitly mentioned in the query
- For experience like "5+ years", set minExperience to 5
- For experience like "less than 3 years", set maxExperience to 3
- For skills, if multiple skills are mentioned, join them with spaces into a SINGLE STRING
- Return ONLY valid JSON, no markdown, no explanations
- If no filters are found, return {}"""

_MIN_YEARS = re.compile(
    r"(?:(\d+(?:\.\d+)?)\s*\+\s*(?:years?|yrs?)|(?:at least|more than|over|minimum of)\s+(\d+(?:\.\d+)?)\s+(?:years?|yrs?))",
    re.IGNORECASE,
)
_MAX_YEARS = re.compile(
    r"(?:less than|fewer than|under|at most|up to)\s+(\d+(?:\.\d+)?)\s+(?:years?|yrs?)",
    re.IGNORECASE,
)


def experience_bounds(query: str) -> QueryFilterSpec:
    """Deterministic pass for "N+ years" (min) and "less than N years" (max)."""
    spec = QueryFilterSpec()
    m = _MIN_YEARS.search(query or "")
    if m:
        spec.min_experience = float(m.group(1) or m.group(2))
    m = _MAX_YEARS.search(query or "")
    if m:
        spec.max_experience = float(m.group(1))
    return spec


class QueryFilterExtractor:
    """
    One language-model call per query. Any call or parse failure yields an empty
    spec, is logged at WARNING and counted in `fallback_count`.
    """

    def __init__(self, llm: Optional[LLMService]) -> None:
        self._llm = llm
        self.fallback_count = 0

    def _fallback(self, query: str, reason: str) -> QueryFilterSpec:
        self.fallback_count += 1
        logger.warning("Filter extraction failed for %r (%s); searching without filters", query, reason)
        return QueryFilterSpec()

    async def extract_filters(self, query: str) -> QueryFilterSpec:
        if not (query or "").strip():
            return QueryFilterSpec()
        if self._llm is None:
            logger.debug("No language model configured; skipping filter extraction")
            return QueryFilterSpec()

        try:
            answer = await self._llm.complete(FILTER_SYSTEM_PROMPT, f'Query: "{query}"')
        except ProviderError as e:
            return self._fallback(query, str(e))
        except Exception as e:
            logger.exception("Unexpected filter extraction error: %s", e)
            return self._fallback(query, type(e).__name__)

        parsed = parse_llm_json(answer)
        if not isinstance(parsed, dict):
            return self._fallback(query, "response was not a JSON object")
        try:
            spec = QueryFilterSpec.model_validate(parsed)
        except ValidationError as e:
            return self._fallback(query, f"invalid filter fields: {e.error_count()} errors")

        # Fill experience bounds the model left out
        bounds = experience_bounds(query)
        if spec.min_experience is None and bounds.min_experience is not None:
            spec.min_experience = bounds.min_experience
        if spec.max_experience is None and bounds.max_experience is not None:
            spec.max_experience = bounds.max_experience

        logger.info("Extracted filters for %r: %s", query, spec.to_public())
        return spec
