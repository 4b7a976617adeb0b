"""
Utility functions shared by the ingestion entry points.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """
    Format a datetime as an ISO 8601 UTC string with millisecond precision.

    Example: "2025-10-04T14:00:00.000Z". Observation dates are stored as these
    strings so that lexical order matches chronological order.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def resolve_as_of_date(date: Optional[str]) -> str:
    """Use the caller's date string as-is, or the current UTC timestamp when absent."""
    if date and date.strip():
        return date.strip()
    return format_timestamp(utc_now())
