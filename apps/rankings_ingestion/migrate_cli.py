"""
Backfill the legacy wide-format rankings table into the rankings table.

Usage:
    python -m apps.rankings_ingestion.migrate_cli [source] [destination]
    python -m apps.rankings_ingestion.migrate_cli --resume-after "Alabama" "2024-10-01T00:00:00.000Z"
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from typing import List, Optional

from apps.rankings_ingestion.config import get_migration_config
from apps.rankings_ingestion.errors import MigrationAborted
from apps.rankings_ingestion.graceful_shutdown import setup_graceful_shutdown
from apps.rankings_ingestion.migrate.migrator import Migrator
from libs.db.database import create_db_pool

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


async def run_migration(args: argparse.Namespace) -> int:
    config = get_migration_config()
    if args.page_size:
        config.scan_page_size = args.page_size
    if args.parallel_chunks:
        config.parallel_chunks = args.parallel_chunks

    print("=" * 70)
    print("HISTORICAL RANKINGS MIGRATION")
    print("=" * 70)
    print(f"Config: {config!r}")

    setup_graceful_shutdown()
    start_cursor = tuple(args.resume_after) if args.resume_after else None

    pool = await create_db_pool()
    try:
        migrator = Migrator.from_pool(pool, config)
        try:
            summary = await migrator.migrate(args.source, args.destination, start_cursor)
        except MigrationAborted as e:
            print(f"\n✗ Migration aborted: {e}")
            return 1
    finally:
        await pool.close()

    print("\n" + "-" * 70)
    print(json.dumps(summary.to_dict(), indent=2))
    print("-" * 70)
    if summary.interrupted and summary.last_cursor:
        team, date = summary.last_cursor
        print(f'Interrupted. Resume with: --resume-after "{team}" "{date}"')
    if summary.failed_batches:
        print(f"✗ {summary.failed_batches} batch(es) failed; re-run to retry them (writes are idempotent)")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Migrate legacy wide-format rankings into the rankings table",
    )
    parser.add_argument("source", nargs="?", default=None, help="Legacy table. Default: MIGRATION_SOURCE_TABLE.")
    parser.add_argument(
        "destination",
        nargs="?",
        default=None,
        help="Rankings table. Default: MIGRATION_DESTINATION_TABLE.",
    )
    parser.add_argument("--page-size", type=int, default=None, help="Records read per page. Default: 100.")
    parser.add_argument("--parallel-chunks", type=int, default=None, help="Chunks written concurrently. Default: 10.")
    parser.add_argument(
        "--resume-after",
        nargs=2,
        metavar=("TEAM", "DATE"),
        default=None,
        help="Resume after this (team, date) key, as printed by an interrupted run.",
    )
    args = parser.parse_args(argv)

    try:
        exit_code = asyncio.run(run_migration(args))
    except ConnectionError as e:
        print(f"\n✗ {e}")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
