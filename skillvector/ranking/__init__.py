"""Ranking: Qdrant people index and hybrid boost/threshold/paginate ranker."""

from skillvector.ranking.hybrid_ranker import paginate, rank_candidates, translate_filters
from skillvector.ranking.vector_index import PeopleVectorIndex

__all__ = ["PeopleVectorIndex", "rank_candidates", "paginate", "translate_filters"]
