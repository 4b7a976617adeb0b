"""
Extract module for rankings ingestion.

Contains the browser collaborator, the paginated table reader, rank
normalization and the per-statistic Extractor.
"""

from apps.rankings_ingestion.extract.browser import (
    BrowserSession,
    BrowserSessionFactory,
    PlaywrightSessionFactory,
)
from apps.rankings_ingestion.extract.extractor import Extractor, is_accepted_attempt
from apps.rankings_ingestion.extract.tie_break import (
    fill_tied_ranks,
    parse_rank,
    resolve_ties,
    rows_to_observations,
)

__all__ = [
    'BrowserSession',
    'BrowserSessionFactory',
    'PlaywrightSessionFactory',
    'Extractor',
    'is_accepted_attempt',
    'fill_tied_ranks',
    'parse_rank',
    'resolve_ties',
    'rows_to_observations',
]
