"""
Health check for the rankings ingestion service.

Verifies the database answers a trivial query and the rankings table exists.
Exits 0 if healthy, 1 otherwise.
Invoked by a container healthcheck: python -m apps.rankings_ingestion.health_check
"""

from __future__ import annotations

import asyncio
import logging
import sys

from typing import Any, Dict, Optional

import asyncpg

from apps.rankings_ingestion.config import get_store_config
from apps.rankings_ingestion.load.ranking_store import table_exists
from libs.db.database import get_db_connection

logger = logging.getLogger(__name__)


async def check_database(pool: Optional[asyncpg.Pool] = None) -> Dict[str, Any]:
    """
    Probe the database.

    Returns:
        {"database": bool, "rankingsTable": bool, "error": Optional[str]}
    """
    table = get_store_config().rankings_table
    status: Dict[str, Any] = {"database": False, "rankingsTable": False, "error": None}
    conn = None
    try:
        if pool is not None:
            await pool.fetchval("SELECT 1")
            status["database"] = True
            status["rankingsTable"] = await table_exists(pool, table)
        else:
            conn = await get_db_connection()
            await conn.fetchval("SELECT 1")
            status["database"] = True
            status["rankingsTable"] = await table_exists(conn, table)
    except (ConnectionError, OSError, ValueError, asyncpg.PostgresError) as e:
        status["error"] = str(e)
    finally:
        if conn is not None:
            await conn.close()
    return status


async def is_healthy(pool: Optional[asyncpg.Pool] = None) -> bool:
    status = await check_database(pool)
    if status["error"]:
        logger.warning(f"Health check failed: {status['error']}")
    return status["database"] and status["rankingsTable"]


async def main_async() -> int:
    return 0 if await is_healthy() else 1


def main() -> int:
    return asyncio.run(main_async())


if __name__ == "__main__":
    sys.exit(main())
