"""Environment-backed settings for chain tracker."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from chain_tracker.prices.coingecko import DEFAULT_BASE_URL


class Settings(BaseSettings):
    """Application settings loaded from environment and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: Path = Field(default=Path("/root/.backend"), alias="DATA_DIR")
    db_connection_override: str | None = Field(default=None, alias="DB_CONNECTION")

    price_feed_url: str = Field(default=DEFAULT_BASE_URL, alias="PRICE_FEED_URL")
    price_currency: str = Field(default="usd", alias="PRICE_CURRENCY")
    http_timeout: float = Field(default=30.0, gt=0, alias="HTTP_TIMEOUT")

    debug_chains: str | None = Field(default=None, alias="DEBUG_CHAINS")
    debug_chains_events: str | None = Field(default=None, alias="DEBUG_CHAINS_EVENTS")

    data_interval_seconds: int = Field(default=60, alias="DATA_INTERVAL_SECONDS")
    price_interval_seconds: int = Field(default=300, alias="PRICE_INTERVAL_SECONDS")
    database_interval_seconds: int = Field(default=3600, alias="DATABASE_INTERVAL_SECONDS")
    subscribe_events: bool = Field(default=True, alias="SUBSCRIBE_EVENTS")

    @property
    def db_connection(self) -> str:
        if self.db_connection_override:
            return self.db_connection_override
        return f"sqlite+aiosqlite:///{self.data_dir / 'validators.db'}"
