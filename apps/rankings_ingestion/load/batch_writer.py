"""
Chunked, bounded-parallel writes of Observations into the ranking store.

Items are split into chunks of at most 25 (the per-call write limit). Up to
`parallel_chunks` chunk writes run together as a group, and the next group
starts only once every write of the current group has resolved. Failed
chunks are reported back to the caller, never retried here: the scraper
treats any failure as fatal, the migration logs it and moves on.
"""

from __future__ import annotations

import asyncio
import logging

from typing import Iterable, List, Optional, Protocol, Sequence

from apps.rankings_ingestion.config import get_store_config
from apps.rankings_ingestion.models import ChunkFailure, Observation, WriteResult

logger = logging.getLogger(__name__)

MAX_CHUNK_SIZE = 25


class ObservationSink(Protocol):
    async def upsert_observations(self, observations: Sequence[Observation]) -> int:
        """Idempotently write one chunk; returns the number of items written."""


def chunk_observations(
    items: Sequence[Observation],
    chunk_size: int = MAX_CHUNK_SIZE,
) -> List[List[Observation]]:
    """Split items into consecutive chunks of at most `chunk_size` (ceil(N / size) chunks)."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be at least 1")
    return [list(items[i : i + chunk_size]) for i in range(0, len(items), chunk_size)]


class BatchWriter:
    """Commits Observations in size-bounded, concurrency-bounded chunk groups."""

    def __init__(
        self,
        store: ObservationSink,
        parallel_chunks: Optional[int] = None,
        chunk_size: int = MAX_CHUNK_SIZE,
    ) -> None:
        if not 1 <= chunk_size <= MAX_CHUNK_SIZE:
            raise ValueError(f"chunk_size must be between 1 and {MAX_CHUNK_SIZE}")
        parallel_chunks = parallel_chunks or get_store_config().write_parallel_chunks
        if parallel_chunks < 1:
            raise ValueError("parallel_chunks must be at least 1")

        self.store = store
        self.parallel_chunks = parallel_chunks
        self.chunk_size = chunk_size

    async def commit(self, items: Iterable[Observation]) -> WriteResult:
        """
        Write every item, one parallel group of chunks at a time.

        Returns:
            WriteResult with per-chunk failures; success when it has none.
        """
        chunks = chunk_observations(list(items), self.chunk_size)
        result = WriteResult()
        if not chunks:
            return result

        for group_start in range(0, len(chunks), self.parallel_chunks):
            group = chunks[group_start : group_start + self.parallel_chunks]
            outcomes = await asyncio.gather(
                *(self.store.upsert_observations(chunk) for chunk in group),
                return_exceptions=True,
            )

            for offset, (chunk, outcome) in enumerate(zip(group, outcomes)):
                chunk_index = group_start + offset
                if isinstance(outcome, Exception):
                    logger.error(f"Chunk {chunk_index + 1}/{len(chunks)} ({len(chunk)} items) failed: {outcome}")
                    result.failures.append(
                        ChunkFailure(chunk_index=chunk_index, size=len(chunk), error=str(outcome) or type(outcome).__name__)
                    )
                elif isinstance(outcome, BaseException):
                    raise outcome
                else:
                    result.chunks_written += 1
                    result.items_written += len(chunk)

            logger.debug(
                f"Batch group {group_start // self.parallel_chunks + 1}: "
                f"{len(group)} chunks ({result.chunks_written} written so far)"
            )

        return result
