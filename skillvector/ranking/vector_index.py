"""Qdrant-backed people index: collection lifecycle, upsert, filtered search, scroll, delete."""

from typing import Any, Dict, List, Optional, Tuple

from qdrant_client import AsyncQdrantClient, models

from skillvector.errors import VectorIndexError
from skillvector.schemas.filters import IndexFilter
from skillvector.schemas.results import IndexedRecord, SearchCandidate
from skillvector.services.profile_payload import HASH_KEY
from skillvector.utils.logger import get_logger

logger = get_logger(__name__)

_KEYWORD = models.PayloadSchemaType.KEYWORD
_FLOAT = models.PayloadSchemaType.FLOAT
_TEXT = models.TextIndexParams(
    type=models.TextIndexType.TEXT,
    tokenizer=models.TokenizerType.WORD,
    lowercase=True,
)

SCROLL_PAGE_SIZE = 256


def payload_index_schema(text_location_role: bool = False) -> Dict[str, Any]:
    """Payload field -> index type. Location/role become text indexes when hard-filtered."""
    text_or_keyword = _TEXT if text_location_role else _KEYWORD
    return {
        HASH_KEY: _KEYWORD,
        "content": _TEXT,
        "data_skills": _TEXT,
        "data_experience_years": _FLOAT,
        "data_location": text_or_keyword,
        "data_role": text_or_keyword,
    }


def build_qdrant_filter(index_filter: Optional[IndexFilter]) -> Optional[models.Filter]:
    """Translate an IndexFilter into a Qdrant filter; every condition goes under `must`."""
    if index_filter is None or index_filter.is_empty():
        return None
    must: List[models.FieldCondition] = []
    for key, value in index_filter.exact.items():
        must.append(models.FieldCondition(key=key, match=models.MatchValue(value=value)))
    for key, value in index_filter.text.items():
        must.append(models.FieldCondition(key=key, match=models.MatchText(text=value)))
    for key, (gte, lte) in index_filter.ranges.items():
        if gte is None and lte is None:
            continue
        must.append(models.FieldCondition(key=key, range=models.Range(gte=gte, lte=lte)))
    return models.Filter(must=must) if must else None


def _vector_size(info: Any) -> Optional[int]:
    vectors = info.config.params.vectors
    if isinstance(vectors, dict):
        first = next(iter(vectors.values()), None)
        return getattr(first, "size", None)
    return getattr(vectors, "size", None)


class PeopleVectorIndex:
    """
    One Qdrant collection of people. Point ids are derived from the content
    fingerprint; writes and deletes wait for completion so a following
    duplicate check sees them.
    """

    def __init__(
        self,
        client: AsyncQdrantClient,
        collection: str,
        dimension: int,
        text_location_role: bool = False,
    ) -> None:
        self._client = client
        self._collection = collection
        self._dimension = dimension
        self._schema = payload_index_schema(text_location_role)

    @classmethod
    def from_url(
        cls,
        url: str,
        collection: str,
        dimension: int,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        text_location_role: bool = False,
    ) -> "PeopleVectorIndex":
        client = AsyncQdrantClient(url=url, api_key=api_key, timeout=int(timeout))
        return cls(client, collection, dimension, text_location_role)

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def dimension(self) -> int:
        return self._dimension

    async def ensure_schema(self) -> None:
        """
        Create the collection (cosine, current dimension) and its payload indexes
        if missing. Safe to call repeatedly; only missing indexes are added.
        Raises VectorIndexError if an existing collection has another vector size.
        """
        try:
            exists = await self._client.collection_exists(self._collection)
            if not exists:
                await self._client.create_collection(
                    collection_name=self._collection,
                    vectors_config=models.VectorParams(size=self._dimension, distance=models.Distance.COSINE),
                )
                logger.info("Created collection %s (dimension=%s)", self._collection, self._dimension)
                existing_indexes: Dict[str, Any] = {}
            else:
                info = await self._client.get_collection(self._collection)
                size = _vector_size(info)
                if size is not None and size != self._dimension:
                    raise VectorIndexError(
                        f"Collection {self._collection} has vector size {size}, "
                        f"embedding dimension is {self._dimension}"
                    )
                existing_indexes = dict(info.payload_schema or {})

            for field, schema in self._schema.items():
                if field in existing_indexes:
                    continue
                await self._client.create_payload_index(
                    collection_name=self._collection,
                    field_name=field,
                    field_schema=schema,
                    wait=True,
                )
                logger.debug("Created payload index %s on %s", field, self._collection)
        except VectorIndexError:
            raise
        except Exception as e:
            raise VectorIndexError(f"ensure_schema failed: {e}") from e

    async def upsert(self, point_id: str, vector: List[float], payload: Dict[str, Any]) -> None:
        if len(vector) != self._dimension:
            raise VectorIndexError(
                f"Vector length {len(vector)} does not match collection dimension {self._dimension}"
            )
        try:
            await self._client.upsert(
                collection_name=self._collection,
                points=[models.PointStruct(id=point_id, vector=vector, payload=payload)],
                wait=True,
            )
        except Exception as e:
            raise VectorIndexError(f"upsert failed: {e}") from e

    async def search(
        self,
        vector: List[float],
        limit: int,
        index_filter: Optional[IndexFilter] = None,
    ) -> List[SearchCandidate]:
        """Similarity search; returns candidates ordered by raw cosine score."""
        try:
            response = await self._client.query_points(
                collection_name=self._collection,
                query=vector,
                limit=limit,
                query_filter=build_qdrant_filter(index_filter),
                with_payload=True,
            )
        except Exception as e:
            raise VectorIndexError(f"search failed: {e}") from e
        return [
            SearchCandidate(id=str(p.id), raw_score=float(p.score), payload=dict(p.payload or {}))
            for p in response.points
        ]

    async def _scroll_page(
        self,
        limit: int,
        offset: Any = None,
        scroll_filter: Optional[models.Filter] = None,
    ) -> Tuple[List[Any], Any]:
        try:
            return await self._client.scroll(
                collection_name=self._collection,
                scroll_filter=scroll_filter,
                limit=limit,
                offset=offset,
                with_payload=True,
                with_vectors=False,
            )
        except Exception as e:
            raise VectorIndexError(f"scroll failed: {e}") from e

    async def scroll_all(self, limit: Optional[int] = None) -> List[IndexedRecord]:
        """Read up to `limit` records (all if None) with cursor-style scrolling."""
        records: List[IndexedRecord] = []
        offset = None
        while limit is None or len(records) < limit:
            page_size = SCROLL_PAGE_SIZE if limit is None else min(SCROLL_PAGE_SIZE, limit - len(records))
            points, offset = await self._scroll_page(page_size, offset)
            records.extend(IndexedRecord(id=str(p.id), payload=dict(p.payload or {})) for p in points)
            if offset is None or not points:
                break
        return records

    async def exists_by_fingerprint(self, content_hash: str) -> bool:
        scroll_filter = models.Filter(
            must=[models.FieldCondition(key=HASH_KEY, match=models.MatchValue(value=content_hash))]
        )
        points, _ = await self._scroll_page(1, scroll_filter=scroll_filter)
        return bool(points)

    async def delete(self, point_id: str) -> None:
        try:
            await self._client.delete(
                collection_name=self._collection,
                points_selector=models.PointIdsList(points=[point_id]),
                wait=True,
            )
        except Exception as e:
            raise VectorIndexError(f"delete failed: {e}") from e

    async def count(self) -> int:
        try:
            result = await self._client.count(collection_name=self._collection, exact=True)
        except Exception as e:
            raise VectorIndexError(f"count failed: {e}") from e
        return int(result.count)

    async def ping(self) -> bool:
        """True if the index answers; used by the health endpoint."""
        try:
            await self._client.collection_exists(self._collection)
            return True
        except Exception as e:
            logger.warning("Vector index unreachable: %s", e)
            return False

    async def close(self) -> None:
        await self._client.close()
