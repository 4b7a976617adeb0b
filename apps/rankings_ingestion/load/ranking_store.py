"""
PostgreSQL-backed ranking store.

One row per (team, date, statistic) observation. The primary key serves the
team + date access path; the secondary index on (statistic, date) serves the
"all teams for a stat, most recent first" path. Both paths read the same row,
so they are created, updated and deleted together.
"""

from __future__ import annotations

import logging
import re

from typing import Any, Dict, List, Optional, Sequence, Tuple

import asyncpg

from apps.rankings_ingestion.config import get_store_config
from apps.rankings_ingestion.errors import ConfigurationError
from apps.rankings_ingestion.models import Observation

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def quote_table_name(table: str) -> str:
    """
    Quote a `table` or `schema.table` name for interpolation into SQL.

    Raises:
        ConfigurationError: if any part is not a plain identifier.
    """
    parts = table.split(".")
    if not 1 <= len(parts) <= 2 or not all(_IDENTIFIER.match(part) for part in parts):
        raise ConfigurationError(f"Invalid table name: {table!r}")
    return ".".join(f'"{part}"' for part in parts)


async def table_exists(conn: asyncpg.Connection | asyncpg.Pool, table: str) -> bool:
    """Check whether a table is visible to the current connection."""
    return bool(await conn.fetchval("SELECT to_regclass($1) IS NOT NULL", quote_table_name(table)))


class RankingStore:
    """Idempotent upserts and range reads over the rankings table."""

    def __init__(self, pool: asyncpg.Pool, table: Optional[str] = None) -> None:
        self.pool = pool
        self.table = table or get_store_config().rankings_table
        self._table_sql = quote_table_name(self.table)
        self._index_sql = f'"{self.table.split(".")[-1]}_stat_date_idx"'

    async def ensure_schema(self) -> None:
        """Create the rankings table and its stat + date index if missing."""
        async with self.pool.acquire() as conn:
            await conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self._table_sql} (
                    team TEXT NOT NULL,
                    observed_date TEXT NOT NULL,
                    statistic TEXT NOT NULL,
                    value INTEGER NOT NULL,
                    updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                    PRIMARY KEY (team, observed_date, statistic)
                )
            """)
            await conn.execute(f"""
                CREATE INDEX IF NOT EXISTS {self._index_sql}
                ON {self._table_sql} (statistic, observed_date DESC, team)
            """)
        logger.info(f"Ensured ranking store schema for {self.table}")

    async def exists(self) -> bool:
        return await table_exists(self.pool, self.table)

    async def upsert_observations(self, observations: Sequence[Observation]) -> int:
        """
        Write a chunk of observations in one transaction.

        A later write for the same (team, statistic, date) replaces the value,
        so replaying a chunk is a no-op in effect.

        Returns:
            Number of observations written.
        """
        if not observations:
            return 0

        rows = [(obs.team, obs.date, obs.statistic, obs.value) for obs in observations]
        upsert_query = f"""
            INSERT INTO {self._table_sql} (team, observed_date, statistic, value)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (team, observed_date, statistic)
            DO UPDATE SET value = EXCLUDED.value, updated_at = now()
        """
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.executemany(upsert_query, rows)
        return len(rows)

    async def get_latest_for_team(self, team: str) -> Optional[Tuple[str, Dict[str, int]]]:
        """
        All statistics for a team on its most recent observation date.

        Returns:
            (date, {statistic: value}) or None if the team has no data.
        """
        async with self.pool.acquire() as conn:
            latest_date = await conn.fetchval(
                f"SELECT max(observed_date) FROM {self._table_sql} WHERE team = $1",
                team,
            )
            if latest_date is None:
                return None
            rows = await conn.fetch(
                f"SELECT statistic, value FROM {self._table_sql} "
                f"WHERE team = $1 AND observed_date = $2",
                team,
                latest_date,
            )
        return latest_date, {row["statistic"]: row["value"] for row in rows}

    async def get_team_history(
        self,
        team: str,
        start_date: str,
        end_date: str,
    ) -> Dict[str, Dict[str, int]]:
        """
        Statistics for a team grouped by observation date, inclusive range.

        `end_date` may be a day ("2025-10-04"); every timestamp on that day is
        included.
        """
        rows = await self.pool.fetch(
            f"""
            SELECT observed_date, statistic, value
            FROM {self._table_sql}
            WHERE team = $1
              AND observed_date >= $2
              AND left(observed_date, length($3)) <= $3
            ORDER BY observed_date
            """,
            team,
            start_date,
            end_date,
        )
        stats_by_date: Dict[str, Dict[str, int]] = {}
        for row in rows:
            stats_by_date.setdefault(row["observed_date"], {})[row["statistic"]] = row["value"]
        return stats_by_date

    async def get_latest_by_statistic(self, statistic: str) -> List[Dict[str, Any]]:
        """Latest value of one statistic for every team, best rank first."""
        rows = await self.pool.fetch(
            f"""
            SELECT team, observed_date, value FROM (
                SELECT DISTINCT ON (team) team, observed_date, value
                FROM {self._table_sql}
                WHERE statistic = $1
                ORDER BY team, observed_date DESC
            ) latest
            ORDER BY value, team
            """,
            statistic,
        )
        return [
            {"team": row["team"], "date": row["observed_date"], "value": row["value"]}
            for row in rows
        ]
