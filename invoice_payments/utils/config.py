"""
Configuration management for Invoice Payment Processing.
Supports environment variables and a .env file.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal
from decimal import Decimal
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Application
    APP_NAME: str = "Invoice Payment Processor"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Business Rules - Tax
    TAX_RATE: Decimal = Decimal("0.14")  # Levied on taxable payments

    # Storage
    STORAGE_BACKEND: Literal["memory", "sqlite"] = "memory"
    DATABASE_PATH: str = "data/invoices.db"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
