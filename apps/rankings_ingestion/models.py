"""
Data structures shared by the scraper, the writer and the migration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from apps.rankings_ingestion.errors import WriteFailure

# Reserved value for "source provided no numeric rank". Sorts after every
# real rank so "best N teams" queries keep unknowns last.
UNKNOWN_VALUE = 99999

# Rank marker the source uses for a row tied with the row above it.
TIE_MARKER = "-"


@dataclass(frozen=True)
class Observation:
    """One (team, statistic, date) -> rank fact."""

    team: str
    statistic: str
    date: str
    value: int

    @property
    def key(self) -> Tuple[str, str, str]:
        """Identity used for last-write-wins upserts."""
        return (self.team, self.statistic, self.date)


@dataclass(frozen=True)
class RankedRow:
    """A single scraped table row, before tie resolution."""

    rank: str
    team: str


@dataclass
class ScrapeOutcome:
    """Result of one statistic's extraction inside an orchestrator run."""

    statistic: str
    success: bool
    error: Optional[str] = None
    teams_processed: int = 0


@dataclass
class RunSummary:
    """Aggregate result of one orchestrator invocation."""

    started_at: datetime
    finished_at: datetime
    outcomes: List[ScrapeOutcome] = field(default_factory=list)

    @property
    def total_statistics(self) -> int:
        return len(self.outcomes)

    @property
    def success_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failures(self) -> List[ScrapeOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    @property
    def success(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalStats": self.total_statistics,
            "successCount": self.success_count,
            "failures": [
                {"stat": failure.statistic, "error": failure.error}
                for failure in self.failures
            ],
            "startTime": self.started_at.isoformat(),
            "endTime": self.finished_at.isoformat(),
        }


@dataclass
class ChunkFailure:
    """A chunk write that the store did not commit."""

    chunk_index: int
    size: int
    error: str


@dataclass
class WriteResult:
    """Outcome of a BatchWriter commit: success or partial failure."""

    chunks_written: int = 0
    items_written: int = 0
    failures: List[ChunkFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures

    @property
    def items_failed(self) -> int:
        return sum(failure.size for failure in self.failures)

    def raise_for_failures(self) -> None:
        """Raise WriteFailure if any chunk was not committed."""
        if self.failures:
            details = "; ".join(
                f"chunk {failure.chunk_index} ({failure.size} items): {failure.error}"
                for failure in self.failures
            )
            raise WriteFailure(
                f"{len(self.failures)} of {self.chunks_written + len(self.failures)} "
                f"chunk writes failed: {details}"
            )


@dataclass
class MigrationSummary:
    """Running totals for one migration run."""

    source: str
    destination: str
    pages_scanned: int = 0
    items_scanned: int = 0
    items_written: int = 0
    batches_committed: int = 0
    records_skipped: int = 0
    fields_skipped: int = 0
    failed_batches: int = 0
    last_cursor: Optional[Tuple[str, str]] = None
    interrupted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "destination": self.destination,
            "pagesScanned": self.pages_scanned,
            "itemsScanned": self.items_scanned,
            "itemsWritten": self.items_written,
            "batchCount": self.batches_committed,
            "recordsSkipped": self.records_skipped,
            "fieldsSkipped": self.fields_skipped,
            "failedBatches": self.failed_batches,
            "lastCursor": list(self.last_cursor) if self.last_cursor else None,
            "interrupted": self.interrupted,
        }
