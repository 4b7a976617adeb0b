"""
Shared database configuration and utilities for the rankings project.

This package provides reusable database connection functions that can be used
across different services (scraper, migration, health check).
"""

from libs.db.config import get_db_config, DatabaseConfig
from libs.db.database import create_db_pool, get_db_connection

__all__ = [
    'get_db_config',
    'DatabaseConfig',
    'create_db_pool',
    'get_db_connection',
]
