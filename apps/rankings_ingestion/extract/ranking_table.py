"""
Read ranking rows from the source's paginated statistics table.

A page that cannot be read (navigation timeout, blocking page, missing
table) is logged with diagnostics and contributes no rows; deciding whether
the collected rows are usable is left to the extractor's attempt check.
"""

from __future__ import annotations

import logging
import re

from typing import Any, List, Optional, Sequence

from apps.rankings_ingestion.config import ScraperConfig
from apps.rankings_ingestion.errors import AccessBlocked, PageExtractionError, TableNotFound
from apps.rankings_ingestion.extract.browser import BrowserSession
from apps.rankings_ingestion.models import TIE_MARKER, RankedRow
from apps.rankings_ingestion.statistics import page_url

logger = logging.getLogger(__name__)

TABLE_SELECTOR = ".block-stats__stats-table"

# Markup fragments that identify a challenge/denial page instead of rankings.
BLOCKING_MARKERS = {
    "Access Denied": "Access denied by the website",
    "Just a moment...": "Cloudflare protection detected",
}

TABLE_PRESENT_SCRIPT = "() => !!document.querySelector('table.block-stats__stats-table')"

# Returns [rank, team] text pairs for every body row with at least two cells.
EXTRACT_ROWS_SCRIPT = """
() => {
    const table = document.querySelector('.block-stats__stats-table');
    if (!table) return [];
    const data = [];
    for (const row of table.querySelectorAll('tbody > tr')) {
        const cells = row.querySelectorAll('td');
        if (cells.length >= 2) {
            data.push([
                (cells[0].textContent || '').trim(),
                (cells[1].textContent || '').trim(),
            ]);
        }
    }
    return data;
}
"""

_TEAM_NAME = re.compile(r"^[a-zA-Z]")

HTML_PREVIEW_LENGTH = 1000


def find_blocking_marker(html: str) -> Optional[str]:
    """Return a description of the blocking page, or None for normal markup."""
    for marker, description in BLOCKING_MARKERS.items():
        if marker in html:
            return description
    return None


def parse_table_rows(raw_rows: Sequence[Any]) -> List[RankedRow]:
    """
    Turn raw [rank, team] cell text into RankedRows.

    Empty rank cells become the tie marker; rows whose team text does not
    start with a letter (footers, ads, blank rows) are dropped.
    """
    rows: List[RankedRow] = []
    for raw in raw_rows or []:
        if not isinstance(raw, (list, tuple)) or len(raw) < 2:
            continue
        rank = str(raw[0] or "").strip() or TIE_MARKER
        team = str(raw[1] or "").strip()
        if team and _TEAM_NAME.match(team):
            rows.append(RankedRow(rank=rank, team=team))
    return rows


async def capture_diagnostics(session: BrowserSession, url: str) -> None:
    """Log screenshot size, markup size/preview and blocking markers for a failed page."""
    try:
        screenshot = await session.screenshot()
        logger.info(f"Error screenshot taken for {url} - size: {len(screenshot)} bytes")

        html = await session.content()
        logger.info(f"Page HTML length: {len(html)}")
        logger.info(f"Page HTML preview: {html[:HTML_PREVIEW_LENGTH]}")

        blocking = find_blocking_marker(html)
        if blocking:
            logger.error(f"{blocking} ({url})")
    except Exception as e:
        logger.error(f"Debug capture failed for {url}: {e}")


async def read_page(session: BrowserSession, url: str, config: ScraperConfig) -> List[RankedRow]:
    """
    Load one ranking page and extract its rows.

    Raises:
        PageExtractionError: navigation or page script failure.
        AccessBlocked: the source served a blocking page.
        TableNotFound: the page loaded without a ranking table.
    """
    await session.navigate(url, config.navigation_timeout_ms)

    if not await session.wait_for_selector(TABLE_SELECTOR, config.wait_timeout_ms):
        logger.info("Primary selector failed, checking page content...")
        blocking = find_blocking_marker(await session.content())
        if blocking:
            raise AccessBlocked(blocking)
        if not await session.evaluate(TABLE_PRESENT_SCRIPT):
            raise TableNotFound(f"Table not found on page {url}")

    return parse_table_rows(await session.evaluate(EXTRACT_ROWS_SCRIPT))


async def scrape_page(session: BrowserSession, url: str, config: ScraperConfig) -> List[RankedRow]:
    """Read one page, returning no rows (after logging diagnostics) if it fails."""
    try:
        rows = await read_page(session, url, config)
    except PageExtractionError as e:
        logger.error(f"Error scraping page {url}: {e}")
        await capture_diagnostics(session, url)
        return []

    logger.info(f"Successfully scraped {len(rows)} teams from {url}")
    return rows


async def scrape_all_pages(
    session: BrowserSession,
    locator: str,
    config: ScraperConfig,
) -> List[RankedRow]:
    """Scrape pages 1..N of a ranking table in order and concatenate their rows."""
    all_rows: List[RankedRow] = []
    for page_number in range(1, config.pages_per_attempt + 1):
        rows = await scrape_page(session, page_url(locator, page_number), config)
        if not rows:
            logger.warning(f"Page {page_number} of {locator} contributed no rows")
        all_rows.extend(rows)
    return all_rows
