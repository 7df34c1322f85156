"""
sources/fred.py — FRED (St. Louis Fed) series observations adapter.

Endpoint:
  GET /series/observations?series_id=...&api_key=...&file_type=json
      &observation_start=YYYY-MM-DD&observation_end=YYYY-MM-DD

Observation response shape:
  {
    "observation_start": "2020-06-01",
    "observations": [
      { "realtime_start": "...", "date": "2024-01-01", "value": "5.33" },
      { "realtime_start": "...", "date": "2024-02-01", "value": "." },
      ...
    ]
  }

Errors come back either as a non-2xx status or as a JSON body carrying
error_code / error_message.

Series we pull (see econpulse_shared.constants):
  FEDFUNDS  — effective federal funds rate (monthly)
  CPIAUCSL  — CPI for all urban consumers, index (monthly) -> YoY
  UNRATE    — civilian unemployment rate (monthly)

Usage:
    source = FredSource(api_key=settings.fred_api_key)
    raw = await source.fetch("UNRATE", "US", window)
    # columns: date, value
"""

from __future__ import annotations

from typing import Any

import polars as pl

from econpulse_pipeline.sources.base import SeriesSource, raw_observation_frame
from econpulse_shared.models.indicators import FetchWindow


class FredSource(SeriesSource):
    """Pulls monthly observations from the FRED API."""

    name = "FRED"

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.stlouisfed.org/fred",
        timeout: float = 30.0,
        max_attempts: int = 1,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout, max_attempts=max_attempts)
        self._api_key = api_key

    async def extract(
        self,
        series_id: str,
        country_code: str,
        window: FetchWindow,
    ) -> pl.DataFrame:
        """
        Download observations for one FRED series.

        Returns:
            Raw polars DataFrame with columns date, value (value may be ".").
        """
        if not self._api_key:
            raise self._error("API key not configured (set FRED_API_KEY)", series_id)

        url = f"{self._base_url}/series/observations"
        params = {
            "series_id": series_id,
            "api_key": self._api_key,
            "file_type": "json",
            "observation_start": window.start.isoformat(),
            "observation_end": window.end.isoformat(),
        }
        # never log the key
        self._log.info("fred_fetch", url=url, series_id=series_id, country=country_code)
        payload = await self._get_json(url, params, series_id=series_id)

        if not isinstance(payload, dict):
            raise self._error("unexpected response shape", series_id)
        if payload.get("error_code"):
            raise self._error(
                f"API error {payload['error_code']}: {payload.get('error_message', '')}",
                series_id,
            )

        observations = payload.get("observations") or []
        if not isinstance(observations, list):
            raise self._error("observations is not a list", series_id)

        return raw_observation_frame(
            obs for obs in observations if isinstance(obs, dict)
        )

    async def get_metadata(self) -> dict[str, Any]:
        return {
            "source_name": self.name,
            "base_url": self._base_url,
            "description": "FRED series observations — US rates, CPI, unemployment",
            "has_api_key": bool(self._api_key),
        }
