"""
HTTP invocation surface for rankings ingestion (aiohttp).

Routes:
    GET  /scrape?stat=<name>&date=<timestamp>  scrape and store one statistic
    POST /run                                  scrape every statistic and report
    GET  /health                               database and rankings table probe

Error bodies are JSON objects with a "message" key: 400 when `stat` is
missing, 404 for an unknown statistic, 500 when extraction or the write fails.
"""

from __future__ import annotations

import asyncio
import json
import logging

from typing import Any, Dict, Mapping, Optional

import asyncpg
from aiohttp import web

from apps.rankings_ingestion.errors import UnknownStatistic
from apps.rankings_ingestion.extract.extractor import Extractor
from apps.rankings_ingestion.graceful_shutdown import GracefulShutdown
from apps.rankings_ingestion.health_check import check_database
from apps.rankings_ingestion.orchestrate.orchestrator import Orchestrator
from apps.rankings_ingestion.statistics import ALL_STATISTICS
from apps.rankings_ingestion.utils import resolve_as_of_date

logger = logging.getLogger(__name__)

EXTRACTOR_KEY = web.AppKey("extractor", Extractor)
ORCHESTRATOR_KEY = web.AppKey("orchestrator", Orchestrator)
POOL_KEY = web.AppKey("pool", object)


async def scrape_single_stat(event: Mapping[str, Any], extractor: Extractor) -> Dict[str, Any]:
    """
    Scrape and store one statistic.

    Args:
        event: {"stat": display name, "date": optional as-of timestamp}
        extractor: Extractor with a writer attached.

    Returns:
        {"stat", "date", "teamsProcessed"}

    Raises:
        ValueError: if "stat" is missing.
        UnknownStatistic, ExtractionFailed, WriteFailure: propagated to the caller.
    """
    stat = (event.get("stat") or "").strip()
    if not stat:
        raise ValueError("stat parameter is required")
    date = resolve_as_of_date(event.get("date"))

    teams_processed = await extractor.scrape_and_store(stat, date)
    return {"stat": stat, "date": date, "teamsProcessed": teams_processed}


async def handle_scrape(request: web.Request) -> web.Response:
    stat = request.query.get("stat", "").strip()
    if not stat:
        return web.json_response({"message": "stat parameter is required"}, status=400)

    try:
        result = await scrape_single_stat(
            {"stat": stat, "date": request.query.get("date")},
            request.app[EXTRACTOR_KEY],
        )
    except UnknownStatistic as e:
        return web.json_response({"message": str(e)}, status=404)
    except Exception as e:
        logger.error(f"Error scraping {stat}: {e}", exc_info=True)
        return web.json_response({"message": "Error scraping stat", "error": str(e)}, status=500)

    return web.json_response(result)


async def handle_run(request: web.Request) -> web.Response:
    options: Dict[str, Any] = {}
    if request.can_read_body:
        try:
            options = await request.json()
        except json.JSONDecodeError:
            return web.json_response({"message": "Request body must be JSON"}, status=400)
        if not isinstance(options, dict):
            return web.json_response({"message": "Request body must be a JSON object"}, status=400)

    statistics = options.get("stats") or ALL_STATISTICS
    if isinstance(statistics, str) or not all(isinstance(name, str) for name in statistics):
        return web.json_response({"message": "stats must be a list of statistic names"}, status=400)
    date = options.get("date")
    if date is not None and not isinstance(date, str):
        return web.json_response({"message": "date must be a string"}, status=400)
    try:
        summary = await request.app[ORCHESTRATOR_KEY].run_all(statistics, date)
    except Exception as e:
        return web.json_response({"message": "Scrape run failed", "error": str(e)}, status=500)

    return web.json_response(summary.to_dict())


async def handle_health(request: web.Request) -> web.Response:
    status = await check_database(request.app[POOL_KEY])
    healthy = status["database"] and status["rankingsTable"]
    return web.json_response({"healthy": healthy, **status}, status=200 if healthy else 503)


def create_app(
    extractor: Extractor,
    orchestrator: Orchestrator,
    pool: Optional[asyncpg.Pool] = None,
) -> web.Application:
    app = web.Application()
    app[EXTRACTOR_KEY] = extractor
    app[ORCHESTRATOR_KEY] = orchestrator
    app[POOL_KEY] = pool
    app.router.add_get("/scrape", handle_scrape)
    app.router.add_post("/run", handle_run)
    app.router.add_get("/health", handle_health)
    return app


async def run_server(
    app: web.Application,
    host: str,
    port: int,
    shutdown: GracefulShutdown,
    poll_interval: float = 1.0,
) -> None:
    """Serve `app` until a shutdown is requested."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"Rankings ingestion listening on http://{host}:{port}")

    try:
        while not shutdown.should_shutdown:
            await asyncio.sleep(poll_interval)
    finally:
        logger.info("Stopping HTTP server...")
        await runner.cleanup()
