"""
Database configuration from environment variables.

POSTGRES_HOST, POSTGRES_DB and POSTGRES_USER are required; port, password,
pool sizes and the per-statement timeout have defaults. A `.env` file at the
repository root is loaded first without overriding the real environment.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


LIBS_DIR = Path(__file__).parent.parent
ROOT_DIR = LIBS_DIR.parent
ENV_FILE = ROOT_DIR / ".env"

if ENV_FILE.exists():
    load_dotenv(dotenv_path=ENV_FILE, override=False)

REQUIRED_SETTINGS = {
    "host": "POSTGRES_HOST",
    "database": "POSTGRES_DB",
    "user": "POSTGRES_USER",
}


class DatabaseConfig:
    """PostgreSQL connection and pool settings for the rankings store."""

    def __init__(self) -> None:
        self.host: Optional[str] = os.getenv("POSTGRES_HOST")
        self.port: int = int(os.getenv("POSTGRES_PORT", "5432"))
        self.database: Optional[str] = os.getenv("POSTGRES_DB")
        self.user: Optional[str] = os.getenv("POSTGRES_USER")
        self.password: Optional[str] = os.getenv("POSTGRES_PASSWORD")
        self.pool_min_size: int = int(os.getenv("POSTGRES_POOL_MIN_SIZE", "2"))
        self.pool_max_size: int = int(os.getenv("POSTGRES_POOL_MAX_SIZE", "10"))
        self.command_timeout: float = float(os.getenv("POSTGRES_COMMAND_TIMEOUT", "60"))

    def missing_settings(self) -> List[str]:
        """Environment variable names of required settings that are unset."""
        return [env_name for attr, env_name in REQUIRED_SETTINGS.items() if not getattr(self, attr)]

    def __repr__(self) -> str:
        return (
            f"DatabaseConfig(host={self.host!r}, port={self.port}, "
            f"database={self.database!r}, user={self.user!r}, password=***, "
            f"pool_min_size={self.pool_min_size}, pool_max_size={self.pool_max_size}, "
            f"command_timeout={self.command_timeout})"
        )


_db_config: Optional[DatabaseConfig] = None


def get_db_config() -> DatabaseConfig:
    """Get or create the singleton config instance."""
    global _db_config
    if _db_config is None:
        _db_config = DatabaseConfig()
    return _db_config
