"""
Rankings ingestion configuration from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

APP_DIR = Path(__file__).resolve().parent
ROOT_DIR = APP_DIR.parent.parent
ENV_FILE = ROOT_DIR / ".env"

if ENV_FILE.exists():
    load_dotenv(dotenv_path=ENV_FILE, override=False)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str = "") -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class ScraperConfig:
    """Browser and source settings for the per-statistic scraper."""

    def __init__(self) -> None:
        self.base_url: str = os.getenv(
            "RANKINGS_SOURCE_BASE_URL",
            "https://www.ncaa.com/stats/football/fbs/current/team",
        ).rstrip("/")
        self.user_agent: str = os.getenv("SCRAPER_USER_AGENT", DEFAULT_USER_AGENT)
        self.navigation_timeout_ms: int = int(os.getenv("SCRAPER_NAVIGATION_TIMEOUT_MS", "60000"))
        self.wait_timeout_ms: int = int(os.getenv("SCRAPER_WAIT_TIMEOUT_MS", "30000"))
        self.max_attempts: int = int(os.getenv("SCRAPER_MAX_ATTEMPTS", "3"))
        self.pages_per_attempt: int = int(os.getenv("SCRAPER_PAGES_PER_ATTEMPT", "3"))
        self.headless: bool = _env_bool("SCRAPER_HEADLESS", True)
        # Local Chromium build for development; Playwright's bundled browser otherwise.
        self.executable_path: Optional[str] = os.getenv("SCRAPER_CHROMIUM_PATH") or None
        max_concurrent = os.getenv("SCRAPER_MAX_CONCURRENT_EXTRACTIONS")
        self.max_concurrent_extractions: Optional[int] = int(max_concurrent) if max_concurrent else None

    def __repr__(self) -> str:
        return (
            f"ScraperConfig(base_url={self.base_url!r}, "
            f"navigation_timeout_ms={self.navigation_timeout_ms}, "
            f"wait_timeout_ms={self.wait_timeout_ms}, "
            f"max_attempts={self.max_attempts}, "
            f"pages_per_attempt={self.pages_per_attempt}, "
            f"headless={self.headless}, "
            f"max_concurrent_extractions={self.max_concurrent_extractions})"
        )


class StoreConfig:
    """Ranking store table and write fan-out settings."""

    def __init__(self) -> None:
        self.rankings_table: str = os.getenv("RANKINGS_TABLE", "all_rankings")
        self.write_parallel_chunks: int = int(os.getenv("WRITE_PARALLEL_CHUNKS", "10"))

    def __repr__(self) -> str:
        return (
            f"StoreConfig(rankings_table={self.rankings_table!r}, "
            f"write_parallel_chunks={self.write_parallel_chunks})"
        )


class NotificationConfig:
    """Run summary email settings."""

    def __init__(self) -> None:
        self.enabled: bool = _env_bool("REPORT_EMAIL_ENABLED", True)
        self.sender: Optional[str] = os.getenv("REPORT_EMAIL_SENDER")
        self.recipients: List[str] = _env_list("REPORT_EMAIL_RECIPIENTS")
        self.aws_region: Optional[str] = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")

    def __repr__(self) -> str:
        return (
            f"NotificationConfig(enabled={self.enabled}, sender={self.sender!r}, "
            f"recipients={self.recipients!r}, aws_region={self.aws_region!r})"
        )


class MigrationConfig:
    """Historical migration settings."""

    def __init__(self) -> None:
        self.source_table: str = os.getenv("MIGRATION_SOURCE_TABLE", "historical_rankings")
        self.destination_table: str = os.getenv("MIGRATION_DESTINATION_TABLE", "all_rankings")
        self.scan_page_size: int = int(os.getenv("MIGRATION_SCAN_PAGE_SIZE", "100"))
        self.parallel_chunks: int = int(os.getenv("MIGRATION_PARALLEL_CHUNKS", "10"))

    def __repr__(self) -> str:
        return (
            f"MigrationConfig(source_table={self.source_table!r}, "
            f"destination_table={self.destination_table!r}, "
            f"scan_page_size={self.scan_page_size}, "
            f"parallel_chunks={self.parallel_chunks})"
        )


class HTTPConfig:
    """Bind address for the HTTP invocation surface."""

    def __init__(self) -> None:
        self.host: str = os.getenv("RANKINGS_HTTP_HOST", "0.0.0.0")
        self.port: int = int(os.getenv("RANKINGS_HTTP_PORT", "8080"))

    def __repr__(self) -> str:
        return f"HTTPConfig(host={self.host!r}, port={self.port})"


_scraper_config: Optional[ScraperConfig] = None
_store_config: Optional[StoreConfig] = None
_notification_config: Optional[NotificationConfig] = None
_migration_config: Optional[MigrationConfig] = None
_http_config: Optional[HTTPConfig] = None


def get_scraper_config() -> ScraperConfig:
    """Get or create the singleton config instance."""
    global _scraper_config
    if _scraper_config is None:
        _scraper_config = ScraperConfig()
    return _scraper_config


def get_store_config() -> StoreConfig:
    """Get or create the singleton config instance."""
    global _store_config
    if _store_config is None:
        _store_config = StoreConfig()
    return _store_config


def get_notification_config() -> NotificationConfig:
    """Get or create the singleton config instance."""
    global _notification_config
    if _notification_config is None:
        _notification_config = NotificationConfig()
    return _notification_config


def get_migration_config() -> MigrationConfig:
    """Get or create the singleton config instance."""
    global _migration_config
    if _migration_config is None:
        _migration_config = MigrationConfig()
    return _migration_config


def get_http_config() -> HTTPConfig:
    """Get or create the singleton config instance."""
    global _http_config
    if _http_config is None:
        _http_config = HTTPConfig()
    return _http_config
