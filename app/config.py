"""Application configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Yahoo Finance (history, quote, profile)
    yahoo_finance_api_base: str = "https://query1.finance.yahoo.com"

    # Alpha Vantage (news sentiment); empty key disables news
    alpha_vantage_key: str = ""
    alpha_vantage_api_base: str = "https://www.alphavantage.co"
    news_limit: int = 6

    # HTTP client
    http_timeout: float = 15.0
    requests_per_minute: int = 600

    # Synthetic history when the provider returns nothing
    synthetic_fallback: bool = True
    synthetic_periods: int = 200

    # Request defaults
    default_range: str = "1y"
    default_interval: str = "1d"
    default_indicator: str = "sma"
    default_forecast_model: str = "simple"
    default_forecast_horizon: int = 60
    default_initial_capital: float = 10000.0

    # Server
    allowed_origins: list[str] = ["*"]
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
