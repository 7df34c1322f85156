"""
sources/worldbank.py — World Bank Indicators API (v2) adapter.

Endpoint:
  GET /country/{code}/indicator/{indicator}?date=YYYY:YYYY&format=json&per_page=N

Response shape is a positional pair:
  [
    { "page": 1, "pages": 1, "per_page": 100, "total": 6, ... },
    [
      { "indicator": {...}, "country": {...}, "date": "2023", "value": 0.2 },
      { "indicator": {...}, "country": {...}, "date": "2022", "value": null },
      ...
    ]
  ]

Errors arrive with a 200 status as a single-element list:
  [ { "message": [ { "id": "120", "key": "Invalid value", "value": "..." } ] } ]

Period labels ("2023", "2023M07", "2023Q2") are mapped to ISO dates by
parse_provider_period(); annual values land in December.

Usage:
    source = WorldBankSource()
    raw = await source.fetch("SL.UEM.TOTL.ZS", "CN", window)
    # columns: date, value
"""

from __future__ import annotations

from typing import Any

import polars as pl

from econpulse_pipeline.sources.base import SeriesSource, raw_observation_frame
from econpulse_shared.models.indicators import FetchWindow
from econpulse_shared.time_utils import parse_provider_period


class WorldBankSource(SeriesSource):
    """Pulls annual country indicators from the World Bank API."""

    name = "WorldBank"

    def __init__(
        self,
        *,
        base_url: str = "https://api.worldbank.org/v2",
        per_page: int = 100,
        timeout: float = 30.0,
        max_attempts: int = 1,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout, max_attempts=max_attempts)
        self._per_page = per_page

    async def extract(
        self,
        series_id: str,
        country_code: str,
        window: FetchWindow,
    ) -> pl.DataFrame:
        """
        Download one indicator for one country over the window's years.

        Returns:
            Raw polars DataFrame with columns date (ISO), value.
        """
        url = f"{self._base_url}/country/{country_code.lower()}/indicator/{series_id}"
        params = {
            "date": f"{window.start.year}:{window.end.year}",
            "format": "json",
            "per_page": self._per_page,
        }
        self._log.info("worldbank_fetch", url=url, params=params)
        payload = await self._get_json(url, params, series_id=series_id)

        if not isinstance(payload, list) or not payload:
            raise self._error("invalid response envelope", series_id)

        if len(payload) < 2:
            messages = payload[0].get("message") if isinstance(payload[0], dict) else None
            if messages:
                detail = "; ".join(
                    f"{m.get('key', '')}: {m.get('value', '')}".strip(": ")
                    for m in messages
                    if isinstance(m, dict)
                )
                raise self._error(f"API error: {detail or messages}", series_id)
            raise self._error("invalid response envelope", series_id)

        observations = payload[1] or []
        if not isinstance(observations, list):
            raise self._error("data element is not a list", series_id)

        return raw_observation_frame(
            {"date": parse_provider_period(obs.get("date")), "value": obs.get("value")}
            for obs in observations
            if isinstance(obs, dict)
        )

    async def get_metadata(self) -> dict[str, Any]:
        return {
            "source_name": self.name,
            "base_url": self._base_url,
            "description": "World Bank Indicators API — annual country indicators",
            "per_page": self._per_page,
        }
