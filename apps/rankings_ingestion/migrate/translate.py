"""
Translate legacy wide-format records into narrow Observations.

A legacy record carries `team`, `date` and one attribute per statistic under
its internal field name. Each known attribute becomes one Observation under
the statistic's display name; unknown attributes are skipped so that fields
added later never abort a migration.
"""

from __future__ import annotations

import math
import re

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from apps.rankings_ingestion.errors import MalformedSourceRecord
from apps.rankings_ingestion.models import UNKNOWN_VALUE, Observation
from apps.rankings_ingestion.statistics import LEGACY_FIELD_TO_STATISTIC

KEY_FIELDS = ("team", "date")

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class TranslatedRecord:
    """Observations produced from one legacy record, plus the fields it skipped."""

    team: str
    date: str
    observations: List[Observation] = field(default_factory=list)
    skipped_fields: List[str] = field(default_factory=list)


def _string_value(raw: Any) -> Optional[str]:
    """Plain string, or the `S` member of a typed attribute."""
    if isinstance(raw, dict):
        raw = raw.get("S")
    if isinstance(raw, str) and raw.strip():
        return raw
    return None


def parse_legacy_value(raw: Any) -> int:
    """
    Parse a legacy statistic value into an integer rank.

    Accepts typed attributes ({"N": "5"}), integers and numeric strings;
    anything else becomes UNKNOWN_VALUE.
    """
    if isinstance(raw, dict):
        raw = raw.get("N")
    if isinstance(raw, bool) or raw is None:
        return UNKNOWN_VALUE
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else UNKNOWN_VALUE
    match = _LEADING_INTEGER.match(str(raw))
    return int(match.group(1)) if match else UNKNOWN_VALUE


def translate_record(
    record: Mapping[str, Any],
    field_names: Mapping[str, str] = LEGACY_FIELD_TO_STATISTIC,
) -> TranslatedRecord:
    """
    Translate one legacy record.

    Raises:
        MalformedSourceRecord: if team or date is missing or empty.
    """
    team = _string_value(record.get("team"))
    date = _string_value(record.get("date"))
    if team is None or date is None:
        raise MalformedSourceRecord(
            f"Missing team or date in record (team={record.get('team')!r}, date={record.get('date')!r})"
        )

    translated = TranslatedRecord(team=team, date=date)
    for field_name, raw_value in record.items():
        if field_name in KEY_FIELDS:
            continue
        statistic = field_names.get(field_name)
        if statistic is None:
            translated.skipped_fields.append(field_name)
            continue
        translated.observations.append(
            Observation(team=team, statistic=statistic, date=date, value=parse_legacy_value(raw_value))
        )
    return translated
