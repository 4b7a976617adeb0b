"""
Exception hierarchy for the rankings ingestion pipeline.

Page-level errors are absorbed inside the extractor, statistic-level errors
are absorbed by the orchestrator, and only pre-flight and systemic failures
escape the top-level entry points.
"""

from __future__ import annotations


class RankingIngestionError(Exception):
    """Base exception for all rankings ingestion failures."""


class ConfigurationError(RankingIngestionError):
    """Raised for missing or inconsistent configuration and static tables."""


class UnknownStatistic(RankingIngestionError):
    """Raised when no source locator is registered for a statistic."""

    def __init__(self, statistic: str) -> None:
        super().__init__(f"Failed to get URL for statistic: {statistic}")
        self.statistic = statistic


class PageExtractionError(RankingIngestionError):
    """Raised when a single ranking page could not be read."""


class AccessBlocked(PageExtractionError):
    """Raised when the source served a blocking/challenge page."""


class TableNotFound(PageExtractionError):
    """Raised when the ranking table is missing from a loaded page."""


class ExtractionFailed(RankingIngestionError):
    """Raised when every attempt for a statistic was rejected."""


class WriteFailure(RankingIngestionError):
    """Raised when one or more chunk writes were not committed."""


class MigrationAborted(RankingIngestionError):
    """Raised when the pre-flight reachability check fails."""


class MalformedSourceRecord(RankingIngestionError):
    """Raised for a legacy record missing its team or date key."""
