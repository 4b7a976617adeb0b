"""Unit tests for keyset-paginated reads of the legacy table."""

from __future__ import annotations

import asyncio
import json

from typing import Any, Dict, List, Tuple

from apps.rankings_ingestion.migrate.legacy_source import LegacyTableReader


class ScriptedPool:
    def __init__(self, rows: List[Dict[str, Any]]) -> None:
        self.rows = rows
        self.queries: List[Tuple[str, Tuple[Any, ...]]] = []

    async def fetch(self, query: str, *args: Any) -> List[Dict[str, Any]]:
        self.queries.append((query, args))
        return self.rows


def test_first_page_flattens_attributes_and_returns_cursor_when_full() -> None:
    pool = ScriptedPool([
        {"team": "Army", "date": "2023-11-01", "attributes": json.dumps({"TotalOffense": {"N": "4"}})},
        {"team": "Navy", "date": "2023-11-01", "attributes": {"TotalOffense": {"N": "9"}}},
    ])

    page = asyncio.run(LegacyTableReader(pool, "historical_rankings").scan_page(None, 2))

    assert page.records == [
        {"team": "Army", "date": "2023-11-01", "TotalOffense": {"N": "4"}},
        {"team": "Navy", "date": "2023-11-01", "TotalOffense": {"N": "9"}},
    ]
    assert page.cursor == ("Navy", "2023-11-01")
    query, args = pool.queries[0]
    assert 'FROM "historical_rankings"' in query
    assert "WHERE" not in query
    assert args == (2,)


def test_later_page_continues_after_cursor_and_ends_when_short() -> None:
    pool = ScriptedPool([{"team": "Navy", "date": "2023-11-08", "attributes": None}])

    page = asyncio.run(LegacyTableReader(pool, "historical_rankings").scan_page(("Navy", "2023-11-01"), 100))

    assert page.records == [{"team": "Navy", "date": "2023-11-08"}]
    assert page.cursor is None
    query, args = pool.queries[0]
    assert "(team, date) > ($1, $2)" in query
    assert args == ("Navy", "2023-11-01", 100)


def test_attributes_never_override_key_columns() -> None:
    pool = ScriptedPool([{"team": "Navy", "date": "D", "attributes": {"team": "Army", "TotalOffense": 3}}])

    page = asyncio.run(LegacyTableReader(pool, "historical_rankings").scan_page(None, 100))

    assert page.records == [{"team": "Navy", "date": "D", "TotalOffense": 3}]
