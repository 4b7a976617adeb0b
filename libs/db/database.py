"""
PostgreSQL connection utilities shared across services using asyncpg.
"""

from __future__ import annotations

import logging

from typing import Optional

import asyncpg

from libs.db.config import get_db_config

logger = logging.getLogger(__name__)


def _resolve_params(
    host: Optional[str],
    port: Optional[int],
    database: Optional[str],
    user: Optional[str],
    password: Optional[str],
) -> tuple[str, int, str, str, Optional[str]]:
    """Fill any missing connection parameter from the environment config."""
    if host is None or port is None or database is None or user is None:
        db_config = get_db_config()
        host = host or db_config.host
        port = port or db_config.port
        database = database or db_config.database
        user = user or db_config.user
        password = password or db_config.password

    missing = [name for name, value in (("host", host), ("port", port), ("database", database), ("user", user)) if not value]
    if missing:
        raise ValueError(f"Missing required database connection parameters: {', '.join(missing)}")

    return host, port, database, user, password


async def get_db_connection(
    host: Optional[str] = None,
    port: Optional[int] = None,
    database: Optional[str] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
) -> asyncpg.Connection:
    """Connect to PostgreSQL asynchronously. Uses environment config for any missing parameters."""
    host, port, database, user, password = _resolve_params(host, port, database, user, password)
    logger.info(f"Connecting to PostgreSQL at {host}:{port}/{database}...")

    try:
        conn = await asyncpg.connect(
            host=host,
            port=port,
            database=database,
            user=user,
            password=password,
        )
        logger.info("Successfully connected to database")
        return conn
    except (asyncpg.PostgresError, OSError) as e:
        raise ConnectionError(f"Failed to connect to database: {e}") from e


async def create_db_pool(
    host: Optional[str] = None,
    port: Optional[int] = None,
    database: Optional[str] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
    min_size: Optional[int] = None,
    max_size: Optional[int] = None,
) -> asyncpg.Pool:
    """
    Create an asyncpg connection pool. Uses environment config for any missing parameters.

    Concurrent writers each acquire their own connection from the pool.
    """
    host, port, database, user, password = _resolve_params(host, port, database, user, password)
    db_config = get_db_config()
    min_size = min_size if min_size is not None else db_config.pool_min_size
    max_size = max_size if max_size is not None else db_config.pool_max_size

    logger.info(f"Creating connection pool for PostgreSQL at {host}:{port}/{database}...")

    try:
        pool = await asyncpg.create_pool(
            host=host,
            port=port,
            database=database,
            user=user,
            password=password,
            min_size=min_size,
            max_size=max_size,
            command_timeout=db_config.command_timeout,
        )
        logger.info("Successfully created database connection pool")
        return pool
    except (asyncpg.PostgresError, OSError) as e:
        raise ConnectionError(f"Failed to create database connection pool: {e}") from e
