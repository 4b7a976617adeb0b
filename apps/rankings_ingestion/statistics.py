"""
Static schema tables: known statistics, their source locators, and the
legacy field name translation used by the historical migration.

Both tables are loaded from the CSV files in `libs.rankings_data` once at
import time, checked against `ALL_STATISTICS`, and exposed as read-only
mappings. A missing or extra entry is a configuration error raised here,
not a surprise deep inside a scrape.
"""

from __future__ import annotations

import csv
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Mapping

from apps.rankings_ingestion.errors import ConfigurationError, UnknownStatistic
from libs.rankings_data import LEGACY_FIELD_NAMES_PATH, STATISTIC_LOCATORS_PATH

ALL_STATISTICS: tuple[str, ...] = (
    "3rd Down Conversion Pct",
    "3rd Down Conversion Pct Defense",
    "4th Down Conversion Pct",
    "4th Down Conversion Pct Defense",
    "Blocked Kicks",
    "Blocked Kicks Allowed",
    "Blocked Punts",
    "Blocked Punts Allowed",
    "Completion Percentage",
    "Defensive TDs",
    "Fewest Penalties",
    "Fewest Penalties Per Game",
    "Fewest Penalty Yards",
    "Fewest Penalty Yards Per Game",
    "First Downs Defense",
    "First Downs Offense",
    "Fumbles Lost",
    "Fumbles Recovered",
    "Kickoff Return Defense",
    "Kickoff Returns",
    "Net Punting",
    "Passes Had Intercepted",
    "Passes Intercepted",
    "Passing Offense",
    "Passing Yards Allowed",
    "Passing Yards Per Completion",
    "Punt Return Defense",
    "Punt Returns",
    "Red Zone Defense",
    "Red Zone Offense",
    "Rushing Defense",
    "Rushing Offense",
    "Sacks Allowed",
    "Scoring Defense",
    "Scoring Offense",
    "Tackles For Loss Allowed",
    "Team Passing Efficiency",
    "Team Passing Efficiency Defense",
    "Team Sacks",
    "Team Tackles For Loss",
    "Time Of Possession",
    "Total Defense",
    "Total Offense",
    "Turnover Margin",
    "Turnovers Gained",
    "Turnovers Lost",
    "Winning Percentage",
)


def _read_pairs(path: Path, key_column: str, value_column: str) -> Dict[str, str]:
    """Read a two-column CSV into a dict, rejecting blank and duplicate keys."""
    if not path.exists():
        raise ConfigurationError(f"Schema table not found: {path}")

    pairs: Dict[str, str] = {}
    with open(path, "r", encoding="utf-8-sig") as f:  # utf-8-sig handles BOM
        reader = csv.DictReader(f)
        for line_number, row in enumerate(reader, start=2):
            key = (row.get(key_column) or "").strip()
            value = (row.get(value_column) or "").strip()
            if not key or not value:
                raise ConfigurationError(f"{path.name}:{line_number}: empty {key_column} or {value_column}")
            if key in pairs:
                raise ConfigurationError(f"{path.name}:{line_number}: duplicate entry for {key!r}")
            pairs[key] = value
    return pairs


def validate_coverage(names: Iterable[str], known: Iterable[str], table: str) -> None:
    """
    Ensure a table covers exactly the known statistic set.

    Raises:
        ConfigurationError: listing the missing and unexpected statistics.
    """
    names_set = set(names)
    known_set = set(known)
    missing = sorted(known_set - names_set)
    unexpected = sorted(names_set - known_set)
    if missing or unexpected:
        problems = []
        if missing:
            problems.append(f"missing {missing}")
        if unexpected:
            problems.append(f"unexpected {unexpected}")
        raise ConfigurationError(f"{table} does not match the known statistics: {'; '.join(problems)}")


def load_statistic_locators(path: Path = STATISTIC_LOCATORS_PATH) -> Mapping[str, str]:
    """
    Load the statistic name -> source stat id table.

    Returns:
        Read-only mapping from display name to the source's numeric stat id.
    """
    locators = _read_pairs(path, "Statistic", "StatId")
    validate_coverage(locators.keys(), ALL_STATISTICS, path.name)
    return MappingProxyType(locators)


def load_legacy_field_names(path: Path = LEGACY_FIELD_NAMES_PATH) -> Mapping[str, str]:
    """
    Load the legacy internal field name -> statistic display name table.

    The table must be a bijection onto `ALL_STATISTICS`.
    """
    field_names = _read_pairs(path, "FieldName", "Statistic")
    display_names = list(field_names.values())
    if len(set(display_names)) != len(display_names):
        duplicates = sorted({name for name in display_names if display_names.count(name) > 1})
        raise ConfigurationError(f"{path.name} maps several fields onto {duplicates}")
    validate_coverage(display_names, ALL_STATISTICS, path.name)
    return MappingProxyType(field_names)


STATISTIC_LOCATORS: Mapping[str, str] = load_statistic_locators()
LEGACY_FIELD_TO_STATISTIC: Mapping[str, str] = load_legacy_field_names()


def resolve_locator(
    statistic: str,
    base_url: str,
    locators: Mapping[str, str] = STATISTIC_LOCATORS,
) -> str:
    """
    Return the ranking page URL for a statistic.

    Raises:
        UnknownStatistic: if the statistic has no registered locator.
    """
    stat_id = locators.get(statistic)
    if stat_id is None:
        raise UnknownStatistic(statistic)
    return f"{base_url.rstrip('/')}/{stat_id}"


def page_url(locator: str, page_number: int) -> str:
    """URL of a ranking page; page 1 is the locator itself, later pages add `/p<N>`."""
    if page_number <= 1:
        return locator
    return f"{locator}/p{page_number}"
