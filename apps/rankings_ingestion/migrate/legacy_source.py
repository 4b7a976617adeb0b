"""
Cursor-paginated reads from the legacy wide-format rankings table.

The legacy table holds one row per (team, date) with every statistic stored
as a typed attribute inside a JSONB column, exactly as the old attribute
store exported it:

    team TEXT, date TEXT, attributes JSONB
    -- attributes: {"ThirdDownConversionPct": {"N": "5"}, ...}

Pages are read with keyset pagination on (team, date); the cursor is the
key of the last row of a full page, and None once the table is exhausted.
"""

from __future__ import annotations

import json
import logging

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple

import asyncpg

from apps.rankings_ingestion.load.ranking_store import quote_table_name, table_exists

logger = logging.getLogger(__name__)

ScanCursor = Tuple[Optional[str], Optional[str]]


@dataclass
class ScanPage:
    """One page of legacy records and the cursor to continue after it."""

    records: List[Dict[str, Any]] = field(default_factory=list)
    cursor: Optional[ScanCursor] = None


class LegacySource(Protocol):
    async def exists(self) -> bool:
        """Whether the source can be read."""

    async def scan_page(self, cursor: Optional[ScanCursor], limit: int) -> ScanPage:
        """Read up to `limit` records after `cursor` (from the start when None)."""


def _decode_attributes(raw: Any) -> Dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, (str, bytes)):
        raw = json.loads(raw)
    if not isinstance(raw, dict):
        raise ValueError(f"Expected attributes to be a JSON object, got {type(raw).__name__}")
    return raw


class LegacyTableReader:
    """Scans a legacy PostgreSQL table page by page."""

    def __init__(self, pool: asyncpg.Pool, table: str) -> None:
        self.pool = pool
        self.table = table
        self._table_sql = quote_table_name(table)

    async def exists(self) -> bool:
        return await table_exists(self.pool, self.table)

    async def scan_page(self, cursor: Optional[ScanCursor], limit: int) -> ScanPage:
        if cursor is None:
            rows = await self.pool.fetch(
                f"SELECT team, date, attributes FROM {self._table_sql} "
                f"ORDER BY team, date LIMIT $1",
                limit,
            )
        else:
            rows = await self.pool.fetch(
                f"SELECT team, date, attributes FROM {self._table_sql} "
                f"WHERE (team, date) > ($1, $2) ORDER BY team, date LIMIT $3",
                cursor[0],
                cursor[1],
                limit,
            )

        records: List[Dict[str, Any]] = []
        for row in rows:
            record: Dict[str, Any] = {"team": row["team"], "date": row["date"]}
            try:
                attributes = _decode_attributes(row["attributes"])
            except ValueError as e:
                logger.warning(f"Unreadable attributes for {row['team']!r}/{row['date']!r}: {e}")
                attributes = {}
            for name, value in attributes.items():
                if name not in record:
                    record[name] = value
            records.append(record)

        next_cursor: Optional[ScanCursor] = None
        if rows and len(rows) == limit:
            next_cursor = (rows[-1]["team"], rows[-1]["date"])
        return ScanPage(records=records, cursor=next_cursor)
