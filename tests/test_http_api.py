"""Unit tests for the HTTP invocation surface."""

from __future__ import annotations

import asyncio

from typing import Any, Dict, Optional, Tuple

import pytest
from aiohttp import test_utils, web

from apps.rankings_ingestion.config import ScraperConfig
from apps.rankings_ingestion.extract.extractor import Extractor
from apps.rankings_ingestion.graceful_shutdown import GracefulShutdown
from apps.rankings_ingestion.http_api import EXTRACTOR_KEY, create_app, run_server, scrape_single_stat
from apps.rankings_ingestion.load.batch_writer import BatchWriter
from apps.rankings_ingestion.orchestrate.orchestrator import Orchestrator
from fakes import BASE_URL, FakeBrowserSession, FakeNotifier, FakeSessionFactory, FakeStore, ranked_rows

LOCATOR = f"{BASE_URL}/21"


class HealthyPool:
    async def fetchval(self, query: str, *args: Any) -> Any:
        return True


def make_app(pages: Optional[Dict[str, Any]] = None, pool: Any = None) -> Tuple[web.Application, FakeStore, FakeNotifier]:
    config = ScraperConfig()
    config.base_url = BASE_URL
    config.max_attempts = 3
    config.pages_per_attempt = 3
    store = FakeStore()
    notifier = FakeNotifier()
    extractor = Extractor(
        FakeSessionFactory(lambda: FakeBrowserSession(pages=pages or {})),
        writer=BatchWriter(store, parallel_chunks=10),
        config=config,
    )
    orchestrator = Orchestrator(extractor, notifier, recipients=["ops@example.com"], max_concurrent=0)
    return create_app(extractor, orchestrator, pool), store, notifier


async def request(app: web.Application, method: str, path: str, **kwargs: Any) -> Tuple[int, Dict[str, Any]]:
    async with test_utils.TestClient(test_utils.TestServer(app)) as client:
        response = await client.request(method, path, **kwargs)
        return response.status, await response.json()


def test_scrape_without_stat_is_bad_request() -> None:
    app, _, _ = make_app()

    status, body = asyncio.run(request(app, "GET", "/scrape"))

    assert status == 400
    assert body == {"message": "stat parameter is required"}


def test_scrape_unknown_statistic_is_not_found() -> None:
    app, store, _ = make_app()

    status, body = asyncio.run(request(app, "GET", "/scrape", params={"stat": "Hot Dog Sales"}))

    assert status == 404
    assert body["message"] == "Failed to get URL for statistic: Hot Dog Sales"
    assert store.calls == 0


def test_scrape_extraction_failure_is_server_error() -> None:
    app, store, _ = make_app(pages={LOCATOR: ranked_rows(50, first_rank=2)})

    status, body = asyncio.run(request(app, "GET", "/scrape", params={"stat": "Total Offense"}))

    assert status == 500
    assert body["message"] == "Error scraping stat"
    assert "after 3 attempts" in body["error"]
    assert store.calls == 0


def test_scrape_success_reports_teams_processed() -> None:
    app, store, _ = make_app(pages={LOCATOR: ranked_rows(40)})

    status, body = asyncio.run(request(
        app, "GET", "/scrape", params={"stat": "Total Offense", "date": "2024-10-04T14:00:00.000Z"},
    ))

    assert status == 200
    assert body == {"stat": "Total Offense", "date": "2024-10-04T14:00:00.000Z", "teamsProcessed": 40}
    assert len(store.rows) == 40


def test_run_returns_summary_and_sends_one_report() -> None:
    app, _, notifier = make_app(pages={LOCATOR: ranked_rows(40)})

    status, body = asyncio.run(request(
        app, "POST", "/run", json={"stats": ["Total Offense", "Net Punting"], "date": "2024-10-04"},
    ))

    assert status == 200
    assert body["totalStats"] == 2
    assert body["successCount"] == 1
    assert [failure["stat"] for failure in body["failures"]] == ["Net Punting"]
    assert len(notifier.sent) == 1


def test_run_rejects_non_object_body() -> None:
    app, _, _ = make_app()

    status, _ = asyncio.run(request(app, "POST", "/run", json=["Total Offense"]))

    assert status == 400


def test_run_rejects_non_string_date_without_reporting() -> None:
    app, store, notifier = make_app(pages={LOCATOR: ranked_rows(40)})

    status, body = asyncio.run(request(app, "POST", "/run", json={"stats": ["Total Offense"], "date": 5}))

    assert status == 400
    assert body == {"message": "date must be a string"}
    assert notifier.sent == []
    assert store.calls == 0


def test_health_reports_database_and_table() -> None:
    app, _, _ = make_app(pool=HealthyPool())

    status, body = asyncio.run(request(app, "GET", "/health"))

    assert status == 200
    assert body["healthy"] is True
    assert body["rankingsTable"] is True


def test_scrape_single_stat_requires_stat() -> None:
    app, _, _ = make_app()

    with pytest.raises(ValueError, match="stat parameter is required"):
        asyncio.run(scrape_single_stat({"date": "2024-10-04"}, app[EXTRACTOR_KEY]))


def test_run_server_stops_once_shutdown_is_requested() -> None:
    app, _, _ = make_app()
    shutdown = GracefulShutdown()

    async def serve_until_stopped() -> None:
        server = asyncio.create_task(run_server(app, "127.0.0.1", 0, shutdown, poll_interval=0.01))
        await asyncio.sleep(0.05)
        assert not server.done()
        shutdown.request_shutdown()
        await asyncio.wait_for(server, timeout=1)

    asyncio.run(serve_until_stopped())
