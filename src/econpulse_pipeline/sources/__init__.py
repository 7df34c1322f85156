"""
econpulse_pipeline.sources — provider series adapters.

Each source wraps one external data provider:
  FredSource      — FRED series observations (US)
  WorldBankSource — World Bank Indicators API (global, annual)

build_sources() wires both from a Settings object so the pipeline can look
up a source by CountryConfig.provider.
"""

from __future__ import annotations

from econpulse_pipeline.sources.base import SeriesSource, raw_observation_frame
from econpulse_pipeline.sources.fred import FredSource
from econpulse_pipeline.sources.worldbank import WorldBankSource
from econpulse_shared.config import Settings
from econpulse_shared.models.indicators import Provider


def build_sources(settings: Settings) -> dict[Provider, SeriesSource]:
    """Instantiate one source per provider from explicit settings."""
    return {
        Provider.FRED: FredSource(
            api_key=settings.fred_api_key,
            base_url=settings.fred_base_url,
            timeout=settings.http_timeout,
            max_attempts=settings.fetch_max_attempts,
        ),
        Provider.WORLD_BANK: WorldBankSource(
            base_url=settings.worldbank_base_url,
            per_page=settings.worldbank_per_page,
            timeout=settings.http_timeout,
            max_attempts=settings.fetch_max_attempts,
        ),
    }


__all__ = [
    "SeriesSource",
    "FredSource",
    "WorldBankSource",
    "build_sources",
    "raw_observation_frame",
]
