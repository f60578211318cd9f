"""Ingestion pipeline: parse, enhance, validate, fingerprint, dedupe, embed and store profiles."""

import asyncio
import threading
from typing import Dict, List, Optional, Sequence, Tuple

from skillvector.agents.profile_extractor import FallbackProfileExtractor, prepare_text
from skillvector.embeddings.embedding_service import EmbeddingService
from skillvector.errors import DuplicateProfileError, ProfileValidationError, SkillVectorError
from skillvector.ranking.vector_index import PeopleVectorIndex
from skillvector.schemas.ingestion import DataType, IngestionOutcome, SourceFile
from skillvector.schemas.profile import Profile, canonical_text
from skillvector.services.file_parsers import parse_csv, parse_json
from skillvector.services.fingerprint import FingerprintStore, fingerprint, point_id
from skillvector.services.profile_enhancer import enhance_profile
from skillvector.services.profile_payload import build_payload
from skillvector.utils.logger import get_logger

logger = get_logger(__name__)


class RunCounters:
    """
    Duplicate/invalid tallies shared by every file of one ingestion run.
    Counting never stops; logging of each kind stops at its cap.
    """

    def __init__(self, max_logged_duplicates: int = 20, max_logged_invalid: int = 20) -> None:
        self._lock = threading.Lock()
        self._caps = {"duplicate": max_logged_duplicates, "invalid": max_logged_invalid}
        self._counts = {"duplicate": 0, "invalid": 0}

    def _record(self, kind: str) -> Tuple[int, bool]:
        with self._lock:
            self._counts[kind] += 1
            count = self._counts[kind]
        return count, count <= self._caps[kind]

    def record_duplicate(self, label: str) -> bool:
        """Count one duplicate; True if it should still be logged."""
        count, log_it = self._record("duplicate")
        if log_it:
            logger.info("Duplicate profile skipped: %s", label)
        elif count == self._caps["duplicate"] + 1:
            logger.info("Duplicate log cap (%s) reached; suppressing further duplicate messages", self._caps["duplicate"])
        return log_it

    def record_invalid(self, label: str, missing: Sequence[str]) -> bool:
        """Count one rejected record; True if it should still be logged."""
        count, log_it = self._record("invalid")
        if log_it:
            logger.warning("Invalid profile skipped: %s (missing %s)", label, ", ".join(missing))
        elif count == self._caps["invalid"] + 1:
            logger.warning("Invalid log cap (%s) reached; suppressing further invalid-record messages", self._caps["invalid"])
        return log_it

    @property
    def duplicates(self) -> int:
        with self._lock:
            return self._counts["duplicate"]

    @property
    def invalid(self) -> int:
        with self._lock:
            return self._counts["invalid"]

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counts)


class IngestionPipeline:
    """Turns one source file into stored, deduplicated profile points."""

    def __init__(
        self,
        embedder: EmbeddingService,
        index: PeopleVectorIndex,
        extractor: FallbackProfileExtractor,
        max_logged_duplicates: int = 20,
        max_logged_invalid: int = 20,
        concurrency: int = 4,
    ) -> None:
        self._embedder = embedder
        self._index = index
        self._fingerprints = FingerprintStore(index)
        self._extractor = extractor
        self._max_logged_duplicates = max_logged_duplicates
        self._max_logged_invalid = max_logged_invalid
        self._concurrency = max(1, concurrency)

    def new_run(self) -> RunCounters:
        return RunCounters(self._max_logged_duplicates, self._max_logged_invalid)

    async def _parse(self, source: SourceFile) -> List[Tuple[Profile, str, bool]]:
        """(profile, text to enhance from, whether description may be filled) per record."""
        if source.data_type is DataType.CSV:
            records = parse_csv(source.content)
        elif source.data_type is DataType.JSON:
            records = parse_json(source.content)
        else:
            text = prepare_text(source.content)
            profiles = await self._extractor.extract(text)
            if len(profiles) == 1:
                return [(profiles[0], text, True)]
            # Several people share the file: each may only be enhanced from its own description
            return [(p, p.description, False) for p in profiles]
        parsed = []
        for record in records:
            profile = Profile.from_record(record)
            parsed.append((profile, profile.description, False))
        return parsed

    async def store_profile(self, profile: Profile, metadata: Optional[Dict[str, str]] = None) -> str:
        """
        Validate, fingerprint, dedupe, embed and upsert one profile. Returns the point id.
        Raises ProfileValidationError or DuplicateProfileError for the two local outcomes.
        """
        missing = profile.missing_fields()
        if missing:
            raise ProfileValidationError(missing, profile.name or None)
        content = canonical_text(profile)
        content_hash = fingerprint(content)
        if await self._fingerprints.exists(content_hash):
            raise DuplicateProfileError(content_hash)
        vector = await self._embedder.embed_text(content)
        pid = point_id(content_hash)
        await self._index.upsert(pid, vector, build_payload(profile, content_hash, metadata, content))
        logger.debug("Stored %s as %s", profile.name, pid)
        return pid

    async def ingest(self, source: SourceFile, counters: Optional[RunCounters] = None) -> IngestionOutcome:
        """
        Ingest one file. Invalid and duplicate records are local outcomes; provider
        and index errors propagate so the caller can fail just this file.
        """
        counters = counters or self.new_run()
        outcome = IngestionOutcome(file_name=source.name, data_type=source.data_type)
        metadata = {"file_name": source.name, "data_type": source.data_type.value}

        for profile, source_text, fill_description in await self._parse(source):
            enhanced = enhance_profile(profile, source_text, fill_description=fill_description)
            label = enhanced.name or "Unknown"
            try:
                await self.store_profile(enhanced, metadata)
            except ProfileValidationError as e:
                outcome.invalid_count += 1
                counters.record_invalid(label, e.missing_fields)
                continue
            except DuplicateProfileError:
                outcome.duplicate_count += 1
                counters.record_duplicate(label)
            else:
                outcome.stored_count += 1
            outcome.processed_data.append(enhanced.to_record())

        outcome.stored_in_qdrant = outcome.stored_count > 0
        outcome.already_exists = outcome.stored_count == 0 and outcome.duplicate_count > 0
        logger.info(
            "Ingested %s: stored=%s duplicates=%s invalid=%s",
            source.name,
            outcome.stored_count,
            outcome.duplicate_count,
            outcome.invalid_count,
        )
        return outcome

    async def ingest_files(
        self,
        files: Sequence[SourceFile],
        counters: Optional[RunCounters] = None,
    ) -> List[IngestionOutcome]:
        """Ingest a batch with bounded per-file concurrency; one failing file does not stop the rest."""
        counters = counters or self.new_run()
        sem = asyncio.Semaphore(self._concurrency)

        async def _one(source: SourceFile) -> IngestionOutcome:
            async with sem:
                try:
                    return await self.ingest(source, counters)
                except SkillVectorError as e:
                    logger.error("Ingestion of %s failed: %s", source.name, e)
                    return IngestionOutcome(file_name=source.name, data_type=source.data_type, error=str(e))

        outcomes = await asyncio.gather(*[_one(f) for f in files])
        totals = counters.snapshot()
        logger.info(
            "Ingestion run finished: %s file(s), %s duplicate(s), %s invalid record(s)",
            len(outcomes),
            totals["duplicate"],
            totals["invalid"],
        )
        return list(outcomes)
