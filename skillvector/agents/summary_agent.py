"""Summary Agent: 1-2 sentence synopsis of a result page."""

from typing import List, Optional

from skillvector.config import SUMMARY_CONTEXT_RESULTS, SUMMARY_SNIPPET_CHARS
from skillvector.schemas.results import RankedResult
from skillvector.services.llm_service import LLMService
from skillvector.utils.logger import get_logger

logger = get_logger(__name__)

SUMMARY_SYSTEM_PROMPT = """You are a search assistant. Provide a brief summary of the search results.
Generate a concise 1-2 sentence summary highlighting:
- How many people were found
- Key qualifications or roles
- Locations if relevant
Answer with the summary text only."""

NO_MATCHES_SUMMARY = "I couldn't find any people matching your criteria."
NO_MORE_SUMMARY = "No more people matching your search."


def fallback_summary(total: int) -> str:
    return f"Found {total} people matching your search."


def _results_context(results: List[RankedResult]) -> str:
    lines = []
    for idx, result in enumerate(results[:SUMMARY_CONTEXT_RESULTS], start=1):
        content = str(result.payload.get("content") or "")
        lines.append(f"{idx}. {content[:SUMMARY_SNIPPET_CHARS]}")
    return "\n".join(lines)


class SummaryGenerator:
    """Summarizes the top results; falls back to a templated sentence on any failure."""

    def __init__(self, llm: Optional[LLMService]) -> None:
        self._llm = llm
        self.fallback_count = 0

    async def summarize(self, query: str, results: List[RankedResult], total: Optional[int] = None) -> str:
        count = total if total is not None else len(results)
        if self._llm is None:
            return fallback_summary(count)
        user_prompt = (
            f'Query: "{query}"\n\n'
            f"Results ({count} people found):\n{_results_context(results)}\n\nSummary:"
        )
        try:
            answer = await self._llm.complete(SUMMARY_SYSTEM_PROMPT, user_prompt, temperature=0.2)
        except Exception as e:
            self.fallback_count += 1
            logger.warning("Summary generation failed (%s); using templated summary", e)
            return fallback_summary(count)
        text = (answer or "").strip()
        if not text:
            self.fallback_count += 1
            logger.warning("Summary generation returned empty text; using templated summary")
            return fallback_summary(count)
        return text
