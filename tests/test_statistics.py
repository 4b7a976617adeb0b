"""Unit tests for the static statistic tables."""

from __future__ import annotations

from pathlib import Path

import pytest

from apps.rankings_ingestion.errors import ConfigurationError, UnknownStatistic
from apps.rankings_ingestion.statistics import (
    ALL_STATISTICS,
    LEGACY_FIELD_TO_STATISTIC,
    STATISTIC_LOCATORS,
    load_legacy_field_names,
    load_statistic_locators,
    page_url,
    resolve_locator,
)


def test_every_known_statistic_has_a_locator() -> None:
    assert set(STATISTIC_LOCATORS) == set(ALL_STATISTICS)
    assert all(stat_id.isdigit() for stat_id in STATISTIC_LOCATORS.values())


def test_legacy_field_names_are_a_bijection_onto_known_statistics() -> None:
    display_names = list(LEGACY_FIELD_TO_STATISTIC.values())

    assert len(display_names) == len(set(display_names))
    assert set(display_names) == set(ALL_STATISTICS)


def test_known_field_translation() -> None:
    assert LEGACY_FIELD_TO_STATISTIC["ThirdDownConversionPct"] == "3rd Down Conversion Pct"


def test_resolve_locator_joins_base_url_and_stat_id() -> None:
    url = resolve_locator("3rd Down Conversion Pct", "https://rankings.test/stats/")

    assert url == "https://rankings.test/stats/699"


def test_resolve_locator_rejects_unknown_statistic() -> None:
    with pytest.raises(UnknownStatistic) as exc_info:
        resolve_locator("Hot Dog Sales", "https://rankings.test/stats")

    assert exc_info.value.statistic == "Hot Dog Sales"
    assert "Failed to get URL for statistic: Hot Dog Sales" in str(exc_info.value)


def test_page_url_adds_page_suffix_after_first_page() -> None:
    assert page_url("https://rankings.test/stats/699", 1) == "https://rankings.test/stats/699"
    assert page_url("https://rankings.test/stats/699", 2) == "https://rankings.test/stats/699/p2"
    assert page_url("https://rankings.test/stats/699", 3) == "https://rankings.test/stats/699/p3"


def test_locator_table_missing_statistic_is_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "locators.csv"
    path.write_text("Statistic,StatId\nTotal Offense,21\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="missing"):
        load_statistic_locators(path)


def test_locator_table_duplicate_entry_is_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "locators.csv"
    path.write_text("Statistic,StatId\nTotal Offense,21\nTotal Offense,22\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="duplicate"):
        load_statistic_locators(path)


def test_field_table_mapping_two_fields_to_one_statistic_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "fields.csv"
    path.write_text(
        "FieldName,Statistic\nTotalOffense,Total Offense\nOffenseTotal,Total Offense\n",
        encoding="utf-8",
    )

    with pytest.raises(ConfigurationError, match="several fields"):
        load_legacy_field_names(path)


def test_missing_table_file_is_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_statistic_locators(tmp_path / "absent.csv")
