"""
Load module for rankings ingestion.

Contains the PostgreSQL ranking store and the chunked BatchWriter that both
the scraper and the historical migration write through.
"""

from apps.rankings_ingestion.load.batch_writer import MAX_CHUNK_SIZE, BatchWriter, chunk_observations
from apps.rankings_ingestion.load.ranking_store import RankingStore, quote_table_name, table_exists

__all__ = [
    'MAX_CHUNK_SIZE',
    'BatchWriter',
    'chunk_observations',
    'RankingStore',
    'quote_table_name',
    'table_exists',
]
