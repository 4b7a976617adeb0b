"""
Rank normalization for scraped ranking tables.

The source prints a tie marker ("-") instead of repeating the rank for teams
tied with the row above. These helpers are pure: they never modify their
input and can be tested without a live scrape.
"""

from __future__ import annotations

import re

from typing import List, Optional, Sequence

from apps.rankings_ingestion.models import TIE_MARKER, UNKNOWN_VALUE, Observation, RankedRow

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


def fill_tied_ranks(ranks: Sequence[str]) -> List[str]:
    """
    Replace each tie marker with the nearest preceding resolved rank.

    A tie marker with no resolved rank before it stays unresolved.

    Example:
        ["1", "2", "-", "-", "5"] -> ["1", "2", "2", "2", "5"]
        ["-", "2"] -> ["-", "2"]
    """
    filled: List[str] = []
    last_resolved: Optional[str] = None
    for rank in ranks:
        if rank == TIE_MARKER:
            filled.append(last_resolved if last_resolved is not None else TIE_MARKER)
        else:
            filled.append(rank)
            last_resolved = rank
    return filled


def resolve_ties(rows: Sequence[RankedRow]) -> List[RankedRow]:
    """Return new rows with tie markers filled, preserving row order."""
    filled = fill_tied_ranks([row.rank for row in rows])
    return [RankedRow(rank=rank, team=row.team) for rank, row in zip(filled, rows)]


def parse_rank(rank: str) -> int:
    """
    Parse a rank cell into an integer.

    Leading digits are used ("12T" -> 12). Anything unparseable, and a zero
    rank, becomes UNKNOWN_VALUE.
    """
    match = _LEADING_INTEGER.match(rank or "")
    if not match:
        return UNKNOWN_VALUE
    value = int(match.group(1))
    return value if value != 0 else UNKNOWN_VALUE


def rows_to_observations(rows: Sequence[RankedRow], statistic: str, date: str) -> List[Observation]:
    """Resolve ties and map every row to an Observation for `statistic` on `date`."""
    return [
        Observation(team=row.team, statistic=statistic, date=date, value=parse_rank(row.rank))
        for row in resolve_ties(rows)
    ]
