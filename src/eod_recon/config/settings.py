"""Configuration settings for the reconciliation engine."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

FUND_IN_CATEGORY = "GPO Fund-in"


class Settings(BaseSettings):
    """Flat settings loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )

    # Expense categories that are fund injections rather than expenses
    fund_in_categories: list[str] = Field(
        default_factory=lambda: [FUND_IN_CATEGORY],
        validation_alias="FUND_IN_CATEGORIES",
    )

    # Reject malformed amounts at the boundary instead of zeroing them
    strict_input: bool = Field(default=True, validation_alias="STRICT_INPUT")

    # Display
    currency_symbol: str = Field(default="₱", validation_alias="CURRENCY_SYMBOL")
    recent_entries_limit: int = Field(
        default=7, ge=1, validation_alias="RECENT_ENTRIES_LIMIT"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
