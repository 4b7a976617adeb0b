"""
Shared ranking data files for the rankings project.

This package contains the static schema tables used by the scraper and the
historical migration.
"""

from pathlib import Path

# Path to the statistic name -> source stat id CSV file
STATISTIC_LOCATORS_PATH = Path(__file__).parent / "statistic_locators.csv"

# Path to the legacy field name -> statistic display name CSV file
LEGACY_FIELD_NAMES_PATH = Path(__file__).parent / "legacy_field_names.csv"

__all__ = ['STATISTIC_LOCATORS_PATH', 'LEGACY_FIELD_NAMES_PATH']
