"""
config.py — pydantic-settings Settings class.

All environment variables for econpulse are declared here. Settings are
built once at process start (see get_settings()) and handed explicitly to
the sources, the document store loader, and the pipeline.

Usage:
    from econpulse_shared.config import get_settings
    settings = get_settings()
    print(settings.document_store_url)
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_FRED_KEY_RE = re.compile(r"^[a-f0-9]{32}$", re.IGNORECASE)


def _find_dotenv() -> Path | None:
    """Walk up from CWD to find the nearest .env file."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / ".env"
        if candidate.is_file():
            return candidate
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_find_dotenv() or ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Providers
    # -------------------------------------------------------------------------
    fred_api_key: str = Field(default="")
    fred_base_url: str = Field(default="https://api.stlouisfed.org/fred")
    worldbank_base_url: str = Field(default="https://api.worldbank.org/v2")
    worldbank_per_page: int = Field(default=100, ge=1)

    # -------------------------------------------------------------------------
    # Document store
    # -------------------------------------------------------------------------
    document_store_url: str = Field(default="https://api.github.com/gists")
    document_store_token: str = Field(
        default="",
        validation_alias=AliasChoices("document_store_token", "gist_token"),
    )
    document_id: str = Field(
        default="",
        validation_alias=AliasChoices("document_id", "economic_gist_id", "gist_id"),
    )
    document_file_name: str = Field(default="economic-data.json")

    # -------------------------------------------------------------------------
    # Run shape
    # -------------------------------------------------------------------------
    enabled_countries: str = Field(default="US")
    lookback_years: int = Field(default=5, ge=1)
    max_points: int = Field(default=60, ge=1)
    http_timeout: float = Field(default=30.0, gt=0)
    fetch_max_attempts: int = Field(default=1, ge=1)

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")

    # -------------------------------------------------------------------------
    # Derived / computed
    # -------------------------------------------------------------------------
    @property
    def enabled_countries_list(self) -> list[str]:
        return [c.strip().upper() for c in self.enabled_countries.split(",") if c.strip()]

    @property
    def fred_api_key_looks_valid(self) -> bool:
        """FRED keys are 32-character lowercase hex strings."""
        return bool(_FRED_KEY_RE.fullmatch(self.fred_api_key))

    @field_validator(
        "fred_api_key", "document_store_token", "document_id", mode="before"
    )
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @field_validator(
        "fred_base_url", "worldbank_base_url", "document_store_url", mode="before"
    )
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") if isinstance(v, str) else v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build the process-wide Settings once and reuse it."""
    return Settings()
