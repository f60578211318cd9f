"""Metadata boosting, relevance threshold and pagination over raw similarity candidates."""

import re
from typing import Iterable, List, Optional, Set, Tuple

from skillvector.config import (
    MAX_SCORE,
    RELEVANCE_THRESHOLD_DEFAULT,
    ROLE_EXACT_BOOST,
    ROLE_PARTIAL_BOOST,
    SKILLS_BOOST,
)
from skillvector.schemas.filters import IndexFilter, QueryFilterSpec
from skillvector.schemas.results import RankedResult, SearchCandidate

BOOST_ROLE_EXACT = "role_exact"
BOOST_ROLE_PARTIAL = "role_partial"
BOOST_SKILLS = "skills"

# Shortest query token allowed to fire a substring role match
MIN_PARTIAL_TOKEN = 3

STOPWORDS = {
    "a", "an", "and", "any", "are", "at", "by", "for", "from", "in", "is", "of",
    "on", "or", "the", "to", "who", "with", "find", "show", "me", "people",
    "person", "someone", "years", "year", "experience", "based", "near", "than",
    "less", "more", "least", "over", "under",
}

_TOKEN_RE = re.compile(r"[a-z0-9+#.]+")


def tokenize(text: str) -> List[str]:
    """Lowercase word tokens; keeps + # . inside tokens (c++, c#, node.js)."""
    tokens = []
    for raw in _TOKEN_RE.findall((text or "").lower()):
        token = raw.strip(".")
        if token:
            tokens.append(token)
    return tokens


def query_tokens(query: str) -> Set[str]:
    """Query tokens minus stopwords, plus a singular form for plurals (developers -> developer)."""
    out: Set[str] = set()
    for token in tokenize(query):
        if token in STOPWORDS or token.rstrip("+").isdigit():
            continue
        out.add(token)
        if len(token) > 3 and token.endswith("s") and not token.endswith("ss"):
            out.add(token[:-1])
    return out


def _skills_tokens(skills: object) -> Set[str]:
    if isinstance(skills, (list, tuple)):
        skills = " ".join(str(s) for s in skills)
    return set(tokenize(str(skills or "")))


def boost_candidate(candidate: SearchCandidate, tokens: Set[str]) -> RankedResult:
    """Apply role/skills boosts to one candidate and clamp the result to MAX_SCORE."""
    payload = candidate.payload
    role = str(payload.get("data_role") or "").lower()
    role_tokens = set(tokenize(role))
    boosts: List[str] = []
    score = candidate.raw_score

    if tokens & role_tokens:
        score += ROLE_EXACT_BOOST
        boosts.append(BOOST_ROLE_EXACT)
    elif role and any(len(t) >= MIN_PARTIAL_TOKEN and t in role for t in tokens):
        score += ROLE_PARTIAL_BOOST
        boosts.append(BOOST_ROLE_PARTIAL)

    if tokens & _skills_tokens(payload.get("data_skills")):
        score += SKILLS_BOOST
        boosts.append(BOOST_SKILLS)

    return RankedResult(
        id=candidate.id,
        payload=payload,
        raw_score=candidate.raw_score,
        relevance_score=min(score, MAX_SCORE),
        boosts=boosts,
    )


def rank_candidates(
    candidates: Iterable[SearchCandidate],
    query: str,
    threshold: float = RELEVANCE_THRESHOLD_DEFAULT,
) -> List[RankedResult]:
    """Boost, drop below threshold, sort by boosted score descending (ties by id)."""
    tokens = query_tokens(query)
    ranked = [boost_candidate(c, tokens) for c in candidates]
    kept = [r for r in ranked if r.relevance_score >= threshold]
    kept.sort(key=lambda r: (-r.relevance_score, r.id))
    return kept


def paginate(ranked: List[RankedResult], limit: int, offset: int) -> Tuple[List[RankedResult], int, bool]:
    """Slice [offset, offset+limit). Returns (page, total, has_more)."""
    total = len(ranked)
    page = ranked[offset: offset + limit]
    return page, total, total > offset + limit


def fetch_limit(limit: int, offset: int, min_pool: int = 0) -> int:
    """Over-fetch size: one past the requested window, never below the candidate pool."""
    return max(limit + offset + 1, min_pool)


def translate_filters(spec: Optional[QueryFilterSpec], text_location_role: bool = False) -> IndexFilter:
    """
    Map an extracted filter spec onto index constraints. Skills and experience
    are always hard constraints; location and role only when they are text-indexed.
    """
    index_filter = IndexFilter()
    if spec is None or spec.is_empty():
        return index_filter
    if spec.skills:
        index_filter.text["data_skills"] = spec.skills
    if spec.min_experience is not None or spec.max_experience is not None:
        index_filter.ranges["data_experience_years"] = (spec.min_experience, spec.max_experience)
    if text_location_role:
        if spec.location:
            index_filter.text["data_location"] = spec.location
        if spec.role:
            index_filter.text["data_role"] = spec.role
    return index_filter
