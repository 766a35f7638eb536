"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from pydantic_settings import BaseSettings


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "Deal Metrics"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Deal form defaults (applied by the API, never by the engine)
    default_appreciation_rate: float = 3.0
    default_rent_growth_rate: float = 2.0
    default_expense_growth_rate: float = 2.0
    default_selling_cost_rate: float = 6.0

    # Monthly market rent estimate as % of price when a primary residence has no rent comp
    market_rent_fallback_rate: float = 0.5
    renter_reinvestment_rate: float = 3.0

    class Config:
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
