"""Service exports (leaf helpers only; pipelines are imported from their modules)."""

from .fingerprint import fingerprint, point_id
from .text_cleaner import clean_text

__all__ = ["fingerprint", "point_id", "clean_text"]
