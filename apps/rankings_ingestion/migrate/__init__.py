"""
Migration module for rankings ingestion.

Backfills the legacy wide-format table into the rankings table.
"""

from apps.rankings_ingestion.migrate.legacy_source import LegacyTableReader, ScanPage
from apps.rankings_ingestion.migrate.migrator import Migrator
from apps.rankings_ingestion.migrate.translate import parse_legacy_value, translate_record

__all__ = ['LegacyTableReader', 'ScanPage', 'Migrator', 'parse_legacy_value', 'translate_record']
