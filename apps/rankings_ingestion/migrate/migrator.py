"""
One-off backfill of the legacy wide-format table into the narrow rankings table.

Pages of legacy records are read one at a time, translated into
Observations and flushed through a BatchWriter before the next page is
read, so memory stays bounded by one page. A failed chunk is logged and
counted but never stops the migration. A shutdown request is honoured
between pages, and the summary carries the cursor to resume from.
"""

from __future__ import annotations

import logging

from typing import Callable, List, Mapping, Optional, Protocol, Sequence, Set

import asyncpg

from apps.rankings_ingestion.config import MigrationConfig, get_migration_config
from apps.rankings_ingestion.errors import MalformedSourceRecord, MigrationAborted
from apps.rankings_ingestion.graceful_shutdown import should_shutdown
from apps.rankings_ingestion.load.batch_writer import BatchWriter
from apps.rankings_ingestion.load.ranking_store import RankingStore
from apps.rankings_ingestion.migrate.legacy_source import LegacySource, LegacyTableReader, ScanCursor
from apps.rankings_ingestion.migrate.translate import translate_record
from apps.rankings_ingestion.models import MigrationSummary, Observation
from apps.rankings_ingestion.statistics import LEGACY_FIELD_TO_STATISTIC

logger = logging.getLogger(__name__)


class DestinationStore(Protocol):
    async def exists(self) -> bool:
        """Whether the destination can be written."""

    async def upsert_observations(self, observations: Sequence[Observation]) -> int:
        """Write one chunk of observations."""


class Migrator:
    """Copies legacy records into the rankings table, page by page."""

    def __init__(
        self,
        open_source: Callable[[str], LegacySource],
        open_destination: Callable[[str], DestinationStore],
        config: Optional[MigrationConfig] = None,
        shutdown_requested: Callable[[], bool] = should_shutdown,
        field_names: Mapping[str, str] = LEGACY_FIELD_TO_STATISTIC,
    ) -> None:
        self.open_source = open_source
        self.open_destination = open_destination
        self.config = config or get_migration_config()
        self.shutdown_requested = shutdown_requested
        self.field_names = field_names

    @classmethod
    def from_pool(cls, pool: asyncpg.Pool, config: Optional[MigrationConfig] = None) -> "Migrator":
        """Migrator reading and writing tables through one connection pool."""
        return cls(
            open_source=lambda table: LegacyTableReader(pool, table),
            open_destination=lambda table: RankingStore(pool, table),
            config=config,
        )

    async def _preflight(self, source: LegacySource, destination: DestinationStore, summary: MigrationSummary) -> None:
        for role, name, target in (
            ("Source", summary.source, source),
            ("Destination", summary.destination, destination),
        ):
            try:
                available = await target.exists()
            except Exception as e:
                raise MigrationAborted(f"{role} table {name!r} is not reachable: {e}") from e
            if not available:
                raise MigrationAborted(f"{role} table {name!r} does not exist")

    async def migrate(
        self,
        source_locator: Optional[str] = None,
        destination_locator: Optional[str] = None,
        start_cursor: Optional[ScanCursor] = None,
    ) -> MigrationSummary:
        """
        Migrate every legacy record into the destination table.

        Args:
            source_locator: Legacy table (defaults to MIGRATION_SOURCE_TABLE).
            destination_locator: Rankings table (defaults to MIGRATION_DESTINATION_TABLE).
            start_cursor: Resume after this (team, date) key instead of the beginning.

        Returns:
            MigrationSummary with running totals; `interrupted` is set and
            `last_cursor` holds the resume point if a shutdown was requested.

        Raises:
            MigrationAborted: if either table is missing or unreachable before
                any data is read.
        """
        summary = MigrationSummary(
            source=source_locator or self.config.source_table,
            destination=destination_locator or self.config.destination_table,
            last_cursor=start_cursor,
        )
        source = self.open_source(summary.source)
        destination = self.open_destination(summary.destination)
        await self._preflight(source, destination, summary)

        writer = BatchWriter(destination, parallel_chunks=self.config.parallel_chunks)
        logger.info(
            f"Starting migration from {summary.source} to {summary.destination} "
            f"(page size {self.config.scan_page_size})"
        )

        cursor = start_cursor
        warned_fields: Set[str] = set()
        while True:
            if self.shutdown_requested():
                summary.interrupted = True
                logger.warning(f"Shutdown requested, stopping migration; resume after {cursor}")
                break

            page = await source.scan_page(cursor, self.config.scan_page_size)
            summary.pages_scanned += 1
            if not page.records:
                logger.info("No more items to process")
                summary.last_cursor = None
                break

            observations: List[Observation] = []
            for record in page.records:
                try:
                    translated = translate_record(record, self.field_names)
                except MalformedSourceRecord as e:
                    logger.warning(f"Skipping record: {e}")
                    summary.records_skipped += 1
                    continue

                for field_name in translated.skipped_fields:
                    if field_name not in warned_fields:
                        warned_fields.add(field_name)
                        logger.warning(f"No mapping found for field: {field_name}")
                summary.fields_skipped += len(translated.skipped_fields)
                observations.extend(translated.observations)

            result = await writer.commit(observations)
            summary.items_scanned += len(page.records)
            summary.items_written += result.items_written
            summary.batches_committed += result.chunks_written
            summary.failed_batches += len(result.failures)
            if result.failures:
                logger.error(
                    f"Page {summary.pages_scanned}: {len(result.failures)} chunk(s) failed, "
                    f"{result.items_failed} items not written"
                )

            cursor = page.cursor
            summary.last_cursor = cursor
            logger.info(
                f"Page {summary.pages_scanned}: scanned {summary.items_scanned} items, "
                f"wrote {summary.items_written} observations in {summary.batches_committed} batches"
            )
            if cursor is None:
                break

        logger.info(
            f"Migration {'interrupted' if summary.interrupted else 'completed'}: "
            f"{summary.items_scanned} items scanned, {summary.items_written} observations written, "
            f"{summary.failed_batches} failed batches"
        )
        return summary
