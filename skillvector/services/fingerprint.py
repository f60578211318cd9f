"""Content fingerprints: the sole deduplication key for stored profiles."""

import hashlib
import uuid
from typing import TYPE_CHECKING

from skillvector.utils.logger import get_logger

if TYPE_CHECKING:
    from skillvector.ranking.vector_index import PeopleVectorIndex

logger = get_logger(__name__)


def fingerprint(text: str) -> str:
    """SHA-256 hex digest of the canonical text. Pure: no timestamps, no ids."""
    return hashlib.sha256((text or "").encode("utf-8")).hexdigest()


def point_id(content_hash: str) -> str:
    """Stable point id for a fingerprint (UUID built from its first 128 bits)."""
    return str(uuid.UUID(hex=content_hash[:32]))


class FingerprintStore:
    """Read-only existence checks against the personHash payload field."""

    def __init__(self, index: "PeopleVectorIndex") -> None:
        self._index = index

    async def exists(self, content_hash: str) -> bool:
        found = await self._index.exists_by_fingerprint(content_hash)
        if found:
            logger.debug("Fingerprint %s already indexed", content_hash[:12])
        return found
