"""
Per-statistic ranking extraction.

`Extractor.extract` resolves a statistic to its source page, drives one
exclusively owned browser session through up to three attempts of pages
1..3, and accepts an attempt only when its first row is ranked "1". A source
that renders a blocking or placeholder page never produces that first row,
so the check doubles as the detector for silently blocked scrapes.
"""

from __future__ import annotations

import logging

from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Mapping, Optional, Sequence

from apps.rankings_ingestion.config import ScraperConfig, get_scraper_config
from apps.rankings_ingestion.errors import ConfigurationError, ExtractionFailed
from apps.rankings_ingestion.extract.browser import BrowserSession, BrowserSessionFactory
from apps.rankings_ingestion.extract.ranking_table import scrape_all_pages
from apps.rankings_ingestion.extract.tie_break import rows_to_observations
from apps.rankings_ingestion.load.batch_writer import BatchWriter
from apps.rankings_ingestion.models import Observation, RankedRow
from apps.rankings_ingestion.statistics import STATISTIC_LOCATORS, resolve_locator

logger = logging.getLogger(__name__)

EXPECTED_FIRST_RANK = "1"


def is_accepted_attempt(rows: Sequence[RankedRow]) -> bool:
    """An attempt is usable only if the first row holds rank "1"."""
    return bool(rows) and rows[0].rank == EXPECTED_FIRST_RANK


class Extractor:
    """Scrapes one statistic's ranking table into Observations."""

    def __init__(
        self,
        session_factory: BrowserSessionFactory,
        writer: Optional[BatchWriter] = None,
        config: Optional[ScraperConfig] = None,
        locators: Mapping[str, str] = STATISTIC_LOCATORS,
    ) -> None:
        self.session_factory = session_factory
        self.writer = writer
        self.config = config or get_scraper_config()
        self.locators = locators

    @asynccontextmanager
    async def _browser_session(self) -> AsyncIterator[BrowserSession]:
        session = await self.session_factory.launch()
        try:
            yield session
        finally:
            await session.close()

    async def _scrape_with_retries(
        self,
        session: BrowserSession,
        statistic: str,
        locator: str,
    ) -> List[RankedRow]:
        for attempt in range(1, self.config.max_attempts + 1):
            rows = await scrape_all_pages(session, locator, self.config)
            if is_accepted_attempt(rows):
                logger.info(f"Scrape attempt {attempt} for {statistic} accepted with {len(rows)} rows")
                return rows

            first_rank = rows[0].rank if rows else None
            logger.warning(
                f"Scrape attempt {attempt} for {statistic} failed "
                f"(rows={len(rows)}, first rank={first_rank!r}), retrying..."
            )

        raise ExtractionFailed(
            f"Failed to scrape data for {statistic} after {self.config.max_attempts} attempts"
        )

    async def extract(self, statistic: str, as_of_date: str) -> List[Observation]:
        """
        Scrape the current rankings for one statistic.

        Args:
            statistic: Display name of the statistic, e.g. "Total Offense".
            as_of_date: Timestamp string recorded on every Observation.

        Returns:
            One Observation per ranked team, ties resolved.

        Raises:
            UnknownStatistic: before any browser activity, if no locator exists.
            ExtractionFailed: if no attempt passed the first-row check.
        """
        locator = resolve_locator(statistic, self.config.base_url, self.locators)
        logger.info(f"Scraping {statistic} from {locator}")

        async with self._browser_session() as session:
            rows = await self._scrape_with_retries(session, statistic, locator)

        return rows_to_observations(rows, statistic, as_of_date)

    async def scrape_and_store(self, statistic: str, as_of_date: str) -> int:
        """
        Extract a statistic and commit it to the ranking store.

        Any chunk write failure is fatal for the statistic.

        Returns:
            Number of teams written.

        Raises:
            WriteFailure: if a chunk was not committed.
        """
        if self.writer is None:
            raise ConfigurationError("Extractor has no BatchWriter configured")

        observations = await self.extract(statistic, as_of_date)
        result = await self.writer.commit(observations)
        result.raise_for_failures()
        logger.info(f"Stored {result.items_written} rankings for {statistic} ({as_of_date})")
        return len(observations)
