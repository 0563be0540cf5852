"""
Configuration settings for Tamboon.

Uses Pydantic Settings to load environment variables for gateway credentials,
dispatch pacing, and logging. Values can also come from a local `.env` file.
"""
from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Payment gateway
    omise_public_key: str = Field("", alias="OMISE_PUBLIC_KEY")
    omise_secret_key: str = Field("", alias="OMISE_SECRET_KEY")
    omise_api_url: str = Field("https://api.omise.co", alias="OMISE_API_URL")
    omise_vault_url: str = Field("https://vault.omise.co", alias="OMISE_VAULT_URL")
    gateway_timeout_seconds: float = Field(30.0, alias="GATEWAY_TIMEOUT_SECONDS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Donation run defaults
    donation_currency: str = Field("thb", alias="DONATION_CURRENCY")
    dispatch_interval_ms: int = Field(150, alias="DISPATCH_INTERVAL_MS")
    dispatch_max_workers: int = Field(64, alias="DISPATCH_MAX_WORKERS")
    top_donors: int = Field(3, alias="TOP_DONORS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
