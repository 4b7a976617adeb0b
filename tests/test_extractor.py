"""Unit tests for per-statistic extraction and storage."""

from __future__ import annotations

import asyncio

import pytest

from apps.rankings_ingestion.config import ScraperConfig
from apps.rankings_ingestion.errors import (
    ConfigurationError,
    ExtractionFailed,
    UnknownStatistic,
    WriteFailure,
)
from apps.rankings_ingestion.extract.extractor import Extractor, is_accepted_attempt
from apps.rankings_ingestion.load.batch_writer import BatchWriter
from apps.rankings_ingestion.models import RankedRow
from fakes import BASE_URL, FakeBrowserSession, FakeSessionFactory, FakeStore, ranked_rows

STATISTIC = "Total Offense"
LOCATOR = f"{BASE_URL}/21"
AS_OF = "2024-10-04T14:00:00.000Z"


def make_config() -> ScraperConfig:
    config = ScraperConfig()
    config.base_url = BASE_URL
    config.max_attempts = 3
    config.pages_per_attempt = 3
    return config


def full_table_session() -> FakeBrowserSession:
    return FakeBrowserSession(pages={
        LOCATOR: ranked_rows(50),
        f"{LOCATOR}/p2": ranked_rows(50, first_rank=51),
        f"{LOCATOR}/p3": ranked_rows(34, first_rank=101),
    })


def test_is_accepted_attempt_requires_first_rank_one() -> None:
    assert is_accepted_attempt([RankedRow("1", "Alabama")])
    assert not is_accepted_attempt([RankedRow("2", "Alabama")])
    assert not is_accepted_attempt([])


def test_extract_returns_one_observation_per_team() -> None:
    factory = FakeSessionFactory(full_table_session)
    extractor = Extractor(factory, config=make_config())

    observations = asyncio.run(extractor.extract(STATISTIC, AS_OF))

    assert len(observations) == 134
    assert {o.statistic for o in observations} == {STATISTIC}
    assert {o.date for o in observations} == {AS_OF}
    assert observations[0].value == 1
    assert factory.launches == 1
    assert factory.sessions[0].closed


def test_extract_retries_until_first_row_is_rank_one() -> None:
    """An empty first attempt (blocked page) is retried on the same session."""
    def first_page(visit: int):
        return [] if visit == 1 else ranked_rows(50)

    factory = FakeSessionFactory(lambda: FakeBrowserSession(pages={LOCATOR: first_page}))
    extractor = Extractor(factory, config=make_config())

    observations = asyncio.run(extractor.extract(STATISTIC, AS_OF))

    assert len(observations) == 50
    assert factory.sessions[0].visits.count(LOCATOR) == 2


def test_extract_fails_after_three_rejected_attempts() -> None:
    factory = FakeSessionFactory(lambda: FakeBrowserSession(pages={LOCATOR: ranked_rows(50, first_rank=2)}))
    extractor = Extractor(factory, config=make_config())

    with pytest.raises(ExtractionFailed, match="after 3 attempts"):
        asyncio.run(extractor.extract(STATISTIC, AS_OF))

    session = factory.sessions[0]
    assert session.visits.count(LOCATOR) == 3
    assert len(session.visits) == 9
    assert session.close_calls == 1


def test_extract_unknown_statistic_never_launches_browser() -> None:
    factory = FakeSessionFactory()
    extractor = Extractor(factory, config=make_config())

    with pytest.raises(UnknownStatistic):
        asyncio.run(extractor.extract("Hot Dog Sales", AS_OF))

    assert factory.launches == 0


def test_scrape_and_store_writes_every_team_in_chunks() -> None:
    store = FakeStore()
    extractor = Extractor(
        FakeSessionFactory(full_table_session),
        writer=BatchWriter(store, parallel_chunks=10),
        config=make_config(),
    )

    teams = asyncio.run(extractor.scrape_and_store(STATISTIC, AS_OF))

    assert teams == 134
    assert len(store.chunks) == 6
    assert all(len(chunk) <= 25 for chunk in store.chunks)
    assert store.rows[("Team 1", STATISTIC, AS_OF)] == 1


def test_scrape_and_store_is_idempotent() -> None:
    store = FakeStore()
    extractor = Extractor(
        FakeSessionFactory(full_table_session),
        writer=BatchWriter(store, parallel_chunks=10),
        config=make_config(),
    )

    asyncio.run(extractor.scrape_and_store(STATISTIC, AS_OF))
    first = dict(store.rows)
    asyncio.run(extractor.scrape_and_store(STATISTIC, AS_OF))

    assert store.rows == first


def test_scrape_and_store_raises_on_chunk_failure() -> None:
    store = FakeStore(fail_calls={2})
    extractor = Extractor(
        FakeSessionFactory(full_table_session),
        writer=BatchWriter(store, parallel_chunks=10),
        config=make_config(),
    )

    with pytest.raises(WriteFailure):
        asyncio.run(extractor.scrape_and_store(STATISTIC, AS_OF))


def test_scrape_and_store_requires_writer() -> None:
    extractor = Extractor(FakeSessionFactory(full_table_session), config=make_config())

    with pytest.raises(ConfigurationError):
        asyncio.run(extractor.scrape_and_store(STATISTIC, AS_OF))
