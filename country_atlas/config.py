import os
import sys
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    environment: str = Field(default="development", alias="NODE_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # World Bank API
    worldbank_base_url: str = Field(default="https://api.worldbank.org/v2", alias="WORLDBANK_BASE_URL")
    worldbank_per_page: int = Field(
        default=300,
        alias="WORLDBANK_PER_PAGE",
        description="Page size for every request; the full directory fits in one page",
    )
    indicator_year: str = Field(default="2022", alias="INDICATOR_YEAR")
    population_indicator: str = Field(default="SP.POP.TOTL", alias="POPULATION_INDICATOR")
    gdp_indicator: str = Field(default="NY.GDP.MKTP.CD", alias="GDP_INDICATOR")

    # HTTP transport
    http_timeout: float = Field(default=30.0, alias="HTTP_TIMEOUT")
    user_agent: str = Field(
        default="country-atlas/1.0 (world-bank-country-aggregator)",
        alias="USER_AGENT",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,  # Treat empty strings as not set
    )

    @field_validator("worldbank_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("worldbank_per_page")
    @classmethod
    def validate_per_page(cls, v: int) -> int:
        """The World Bank API caps a single page at 1000 rows."""
        if not 1 <= v <= 1000:
            raise ValueError("WORLDBANK_PER_PAGE must be between 1 and 1000")
        return v

    @field_validator("indicator_year")
    @classmethod
    def validate_year(cls, v: str) -> str:
        v = v.strip()
        if len(v) != 4 or not v.isdigit():
            raise ValueError(f"INDICATOR_YEAR must be a four-digit year, got {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def dev_mode(self) -> bool:
        """Check if running in development/test mode."""
        in_test = "pytest" in sys.modules or os.getenv("TEST") == "true"
        in_dev = self.environment == "development"
        return in_test or in_dev


@lru_cache
def get_settings() -> Settings:
    return Settings()
