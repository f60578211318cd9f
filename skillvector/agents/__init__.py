"""Agent exports."""

from .filter_agent import QueryFilterExtractor
from .profile_extractor import build_profile_extractor
from .summary_agent import SummaryGenerator

__all__ = ["QueryFilterExtractor", "SummaryGenerator", "build_profile_extractor"]
