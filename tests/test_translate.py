"""Unit tests for legacy record translation."""

from __future__ import annotations

import pytest

from apps.rankings_ingestion.errors import MalformedSourceRecord
from apps.rankings_ingestion.migrate.translate import parse_legacy_value, translate_record
from apps.rankings_ingestion.models import UNKNOWN_VALUE, Observation


def test_typed_numeric_attribute_becomes_observation() -> None:
    translated = translate_record({"team": "X", "date": "D", "ThirdDownConversionPct": {"N": "5"}})

    assert translated.observations == [Observation("X", "3rd Down Conversion Pct", "D", 5)]
    assert translated.skipped_fields == []


def test_one_observation_per_known_field() -> None:
    record = {
        "team": "Navy",
        "date": "2023-11-01T00:00:00.000Z",
        "TotalOffense": {"N": "12"},
        "RushingOffense": 1,
        "NetPunting": "88",
    }

    translated = translate_record(record)

    assert sorted((o.statistic, o.value) for o in translated.observations) == [
        ("Net Punting", 88),
        ("Rushing Offense", 1),
        ("Total Offense", 12),
    ]
    assert {o.team for o in translated.observations} == {"Navy"}


def test_unknown_field_is_skipped_not_fatal() -> None:
    translated = translate_record({"team": "X", "date": "D", "MascotSpeed": {"N": "3"}, "TotalOffense": {"N": "4"}})

    assert translated.skipped_fields == ["MascotSpeed"]
    assert [o.statistic for o in translated.observations] == ["Total Offense"]


@pytest.mark.parametrize("record", [
    {"date": "D", "TotalOffense": {"N": "4"}},
    {"team": "X", "TotalOffense": {"N": "4"}},
    {"team": "", "date": "D"},
    {"team": {"S": "X"}, "date": None},
])
def test_record_without_team_or_date_is_malformed(record) -> None:
    with pytest.raises(MalformedSourceRecord):
        translate_record(record)


def test_typed_string_keys_are_accepted() -> None:
    translated = translate_record({"team": {"S": "X"}, "date": {"S": "D"}, "TotalOffense": {"N": "4"}})

    assert translated.observations == [Observation("X", "Total Offense", "D", 4)]


def test_parse_legacy_value_falls_back_to_unknown() -> None:
    assert parse_legacy_value({"N": "5"}) == 5
    assert parse_legacy_value({"N": "5.7"}) == 5
    assert parse_legacy_value(7) == 7
    assert parse_legacy_value("0") == 0
    assert parse_legacy_value({"N": "abc"}) == UNKNOWN_VALUE
    assert parse_legacy_value({"S": "7"}) == UNKNOWN_VALUE
    assert parse_legacy_value(None) == UNKNOWN_VALUE
    assert parse_legacy_value(True) == UNKNOWN_VALUE


def test_parse_legacy_value_rejects_non_finite_floats() -> None:
    assert parse_legacy_value(7.9) == 7
    assert parse_legacy_value(float("inf")) == UNKNOWN_VALUE
    assert parse_legacy_value(float("-inf")) == UNKNOWN_VALUE
    assert parse_legacy_value(float("nan")) == UNKNOWN_VALUE
