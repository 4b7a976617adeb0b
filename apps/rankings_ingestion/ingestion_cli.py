"""
Rankings ingestion entry point: scrape team rankings into PostgreSQL.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from typing import List, Optional, Tuple

import asyncpg

from apps.rankings_ingestion.config import (
    get_http_config,
    get_notification_config,
    get_scraper_config,
    get_store_config,
)
from apps.rankings_ingestion.errors import RankingIngestionError
from apps.rankings_ingestion.extract.browser import PlaywrightSessionFactory
from apps.rankings_ingestion.extract.extractor import Extractor
from apps.rankings_ingestion.graceful_shutdown import setup_graceful_shutdown
from apps.rankings_ingestion.http_api import create_app, run_server, scrape_single_stat
from apps.rankings_ingestion.load.batch_writer import BatchWriter
from apps.rankings_ingestion.load.ranking_store import RankingStore
from apps.rankings_ingestion.orchestrate.orchestrator import Orchestrator
from apps.rankings_ingestion.orchestrate.report import SesNotifier
from apps.rankings_ingestion.statistics import ALL_STATISTICS
from libs.db.config import get_db_config
from libs.db.database import create_db_pool

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


def build_pipeline(pool: asyncpg.Pool) -> Tuple[RankingStore, Extractor, Orchestrator]:
    """Wire the store, extractor and orchestrator over one connection pool."""
    store = RankingStore(pool, get_store_config().rankings_table)
    writer = BatchWriter(store, parallel_chunks=get_store_config().write_parallel_chunks)
    scraper_config = get_scraper_config()
    extractor = Extractor(PlaywrightSessionFactory(scraper_config), writer=writer, config=scraper_config)
    orchestrator = Orchestrator(
        extractor,
        SesNotifier(get_notification_config()),
        max_concurrent=scraper_config.max_concurrent_extractions,
    )
    return store, extractor, orchestrator


async def run_command(args: argparse.Namespace) -> int:
    print("=" * 70)
    print(f"RANKINGS INGESTION: {args.command.upper()}")
    print("=" * 70)
    print(f"Database: {get_db_config()!r}")
    print(f"Store:    {get_store_config()!r}")

    missing = get_db_config().missing_settings()
    if missing:
        print(f"\n✗ Missing database settings: {', '.join(missing)}")
        return 1

    pool = await create_db_pool()
    try:
        store, extractor, orchestrator = build_pipeline(pool)

        if args.command == "init-db":
            await store.ensure_schema()
            print(f"\n✓ Schema ready for table {store.table}")
            return 0

        if not await store.exists():
            print(f"\n✗ Rankings table {store.table} does not exist. Run 'init-db' first.")
            return 1

        if args.command == "scrape":
            result = await scrape_single_stat({"stat": args.stat, "date": args.date}, extractor)
            print(f"\n✓ {result['stat']}: {result['teamsProcessed']} teams stored as of {result['date']}")
            return 0

        if args.command == "run-all":
            statistics: List[str] = args.stats or list(ALL_STATISTICS)
            summary = await orchestrator.run_all(statistics, args.date)
            print("\n" + "-" * 70)
            print(f"Succeeded: {summary.success_count}/{summary.total_statistics}")
            for failure in summary.failures:
                print(f"  ✗ {failure.statistic}: {failure.error}")
            print("-" * 70)
            return 0 if summary.success else 1

        if args.command == "serve":
            http_config = get_http_config()
            app = create_app(extractor, orchestrator, pool)
            await run_server(app, args.host or http_config.host, args.port or http_config.port, setup_graceful_shutdown())
            return 0
    finally:
        await pool.close()

    return 2


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Scrape team statistic rankings into PostgreSQL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  init-db   Create the rankings table and its index
  scrape    Scrape and store a single statistic
  run-all   Scrape every statistic concurrently and email a summary
  serve     Expose /scrape, /run and /health over HTTP
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create the rankings table if it does not exist.")

    scrape_parser = subparsers.add_parser("scrape", help="Scrape and store one statistic.")
    scrape_parser.add_argument("stat", help='Statistic display name, e.g. "Total Offense".')
    scrape_parser.add_argument("--date", default=None, help="As-of timestamp. Default: now (UTC).")

    run_parser = subparsers.add_parser("run-all", help="Scrape every statistic.")
    run_parser.add_argument(
        "--stats",
        nargs="+",
        default=None,
        help="Only scrape these statistics. Default: all known statistics.",
    )
    run_parser.add_argument("--date", default=None, help="As-of timestamp. Default: now (UTC).")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP invocation surface.")
    serve_parser.add_argument("--host", default=None, help="Bind host. Default: RANKINGS_HTTP_HOST.")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port. Default: RANKINGS_HTTP_PORT.")

    args = parser.parse_args(argv)

    try:
        exit_code = asyncio.run(run_command(args))
    except (RankingIngestionError, ValueError, ConnectionError) as e:
        print(f"\n✗ {e}")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
