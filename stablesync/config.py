"""Application configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "StableSync"
    app_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./data/stablesync.db"
    prod_database_url: str | None = None
    database_target: Literal["local", "production"] = "local"

    # Scraping
    tjk_base_url: str = "https://www.tjk.org"
    scraping_delay: float = 1.0  # seconds between horses
    fetch_timeout_ms: int = 30000
    selector_timeout_ms: int = 5000
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    browser_locale: str = "tr-TR"
    browser_headless: bool = True
    browser_ws_endpoint: str | None = None
    browser_proxy_server: str | None = None
    browser_proxy_username: str | None = None
    browser_proxy_password: SecretStr | None = None
    gallop_lookback_days: int | None = None

    # Notifications
    notify_webhook_url: str | None = None
    notify_timeout: float = 10.0

    # Logging
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    @property
    def effective_database_url(self) -> str:
        """Database URL selected by ``database_target``."""
        if self.database_target == "production":
            if not self.prod_database_url:
                raise ValueError("database_target=production requires PROD_DATABASE_URL")
            return self.prod_database_url
        return self.database_url

    @property
    def async_database_url(self) -> str:
        """Async driver variant of the effective database URL."""
        return to_async_url(self.effective_database_url)


def to_async_url(url: str) -> str:
    """Convert a sync SQLAlchemy URL to its asyncio driver form."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
