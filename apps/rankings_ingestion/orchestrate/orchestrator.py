"""
Fan-out of one scrape per statistic, with per-statistic failure isolation.

Every statistic runs as its own task behind an error boundary that turns
any exception into a failed ScrapeOutcome, so one broken statistic never
cancels or corrupts its siblings. After all tasks settle, exactly one
summary report is sent.
"""

from __future__ import annotations

import asyncio
import logging

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Iterable, List, Optional, Protocol, Sequence

from apps.rankings_ingestion.config import get_notification_config, get_scraper_config
from apps.rankings_ingestion.models import RunSummary, ScrapeOutcome
from apps.rankings_ingestion.orchestrate.report import Notifier, build_report
from apps.rankings_ingestion.statistics import ALL_STATISTICS
from apps.rankings_ingestion.utils import resolve_as_of_date, utc_now

logger = logging.getLogger(__name__)


class StatisticScraper(Protocol):
    async def scrape_and_store(self, statistic: str, as_of_date: str) -> int:
        """Scrape and persist one statistic; returns teams processed."""


class Orchestrator:
    """Runs every statistic's scrape concurrently and reports the run."""

    def __init__(
        self,
        scraper: StatisticScraper,
        notifier: Notifier,
        recipients: Optional[Sequence[str]] = None,
        max_concurrent: Optional[int] = None,
    ) -> None:
        self.scraper = scraper
        self.notifier = notifier
        self.recipients = list(recipients) if recipients is not None else get_notification_config().recipients
        if max_concurrent is None:
            max_concurrent = get_scraper_config().max_concurrent_extractions
        self._semaphore = asyncio.Semaphore(max_concurrent) if max_concurrent else None

    @asynccontextmanager
    async def _slot(self) -> AsyncIterator[None]:
        if self._semaphore is None:
            yield
            return
        async with self._semaphore:
            yield

    async def _run_one(self, statistic: str, as_of_date: str) -> ScrapeOutcome:
        try:
            async with self._slot():
                teams_processed = await self.scraper.scrape_and_store(statistic, as_of_date)
        except Exception as e:
            logger.error(f"Error scraping {statistic}: {e}", exc_info=True)
            return ScrapeOutcome(statistic=statistic, success=False, error=str(e) or type(e).__name__)

        return ScrapeOutcome(statistic=statistic, success=True, teams_processed=teams_processed)

    async def _send_report(
        self,
        success: bool,
        started_at: datetime,
        finished_at: datetime,
        failures: Sequence[ScrapeOutcome] = (),
        overall_error: Optional[BaseException] = None,
    ) -> None:
        subject, body = build_report(success, started_at, finished_at, failures, overall_error)
        try:
            await self.notifier.send(subject, body, self.recipients)
        except Exception as e:
            logger.error(f"Failed to send run report {subject!r}: {e}")

    async def run_all(
        self,
        statistics: Iterable[str] = ALL_STATISTICS,
        as_of_date: Optional[str] = None,
    ) -> RunSummary:
        """
        Scrape every statistic concurrently and send one summary report.

        Args:
            statistics: Statistic display names; duplicates are run once.
            as_of_date: Timestamp recorded on every observation (defaults to now).

        Returns:
            RunSummary with one outcome per statistic.

        Raises:
            Exception: only systemic errors outside any single statistic, after
                a failure report has been sent.
        """
        started_at = utc_now()
        try:
            as_of_date = resolve_as_of_date(as_of_date)
            unique_statistics: List[str] = list(dict.fromkeys(statistics))
            logger.info(f"Starting scrape of {len(unique_statistics)} statistics as of {as_of_date}")

            outcomes = await asyncio.gather(
                *(self._run_one(statistic, as_of_date) for statistic in unique_statistics)
            )
            summary = RunSummary(started_at=started_at, finished_at=utc_now(), outcomes=list(outcomes))
        except Exception as e:
            logger.error(f"Orchestrator error: {e}", exc_info=True)
            await self._send_report(False, started_at, utc_now(), overall_error=e)
            raise

        logger.info(
            f"Scrape finished: {summary.success_count}/{summary.total_statistics} succeeded, "
            f"{len(summary.failures)} failed"
        )
        await self._send_report(summary.success, summary.started_at, summary.finished_at, summary.failures)
        return summary
