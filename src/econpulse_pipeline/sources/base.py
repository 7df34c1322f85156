"""
sources/base.py — Abstract base class for provider series adapters.

Each concrete source must implement:
  extract()      — request one series and map the provider envelope to
                   RawObservation rows (date, value), raising FetchError
  get_metadata() — return dict with source info for run summaries

The fetch() method wraps extract() with timing, structured logging, and
the empty-result check. Pipelines call fetch() rather than extract().

Provider-specific response shapes never leave the adapter: every source
returns a polars DataFrame with RAW_OBSERVATION_SCHEMA.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

import httpx
import polars as pl
import structlog

from econpulse_pipeline.errors import FetchError
from econpulse_pipeline.utils.retry import call_with_retry
from econpulse_shared.models.indicators import FetchWindow

log = structlog.get_logger(__name__)

RAW_OBSERVATION_SCHEMA: dict[str, type[pl.DataType]] = {
    "date": pl.String,
    "value": pl.String,
}

# Characters of an error body kept in FetchError messages
_BODY_PREVIEW = 300


def raw_observation_frame(rows: Iterable[Mapping[str, Any]]) -> pl.DataFrame:
    """Build a RawObservation DataFrame, stringifying values and keeping nulls."""
    data = [
        {
            "date": None if row.get("date") is None else str(row["date"]),
            "value": None if row.get("value") is None else str(row["value"]),
        }
        for row in rows
    ]
    return pl.DataFrame(data, schema=RAW_OBSERVATION_SCHEMA)


class SeriesSource(ABC):
    """Abstract base for econpulse provider adapters."""

    # Override in subclass — used for logging and FetchError.source
    name: str = "unknown"

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 30.0,
        max_attempts: int = 1,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._log = log.bind(source_name=self.name)

    # ------------------------------------------------------------------
    # Abstract interface
    # ------------------------------------------------------------------

    @abstractmethod
    async def extract(
        self,
        series_id: str,
        country_code: str,
        window: FetchWindow,
    ) -> pl.DataFrame:
        """
        Fetch one series from the provider.

        Implementations should:
        - Issue exactly one request (via _get_json)
        - Detect provider-reported errors embedded in 2xx responses
        - Return a RawObservation DataFrame (possibly empty)

        Raises:
            FetchError: on any transport, HTTP, or payload problem.
        """
        ...

    @abstractmethod
    async def get_metadata(self) -> dict[str, Any]:
        """Return source-level metadata (source_name, base_url, description)."""
        ...

    # ------------------------------------------------------------------
    # Orchestration — pipelines call this
    # ------------------------------------------------------------------

    async def fetch(
        self,
        series_id: str,
        country_code: str,
        window: FetchWindow,
    ) -> pl.DataFrame:
        """
        Extract one series with timing and structured logging.

        Returns:
            Non-empty RawObservation DataFrame.

        Raises:
            FetchError: on any failure, including an empty observation list.
        """
        run_log = self._log.bind(series_id=series_id, country=country_code)
        run_log.info("source_run_start", start=str(window.start), end=str(window.end))

        t0 = time.monotonic()
        try:
            raw = await self.extract(series_id, country_code, window)
            if raw.is_empty():
                raise self._error("no observations received", series_id)
        except FetchError as exc:
            run_log.warning(
                "source_run_failed",
                error=str(exc),
                duration_ms=int((time.monotonic() - t0) * 1000),
            )
            raise

        run_log.info(
            "source_run_complete",
            raw_rows=len(raw),
            duration_ms=int((time.monotonic() - t0) * 1000),
        )
        return raw

    # ------------------------------------------------------------------
    # Shared helpers available to all subclasses
    # ------------------------------------------------------------------

    def _error(self, message: str, series_id: str | None = None) -> FetchError:
        return FetchError(f"{self.name}: {message}", source=self.name, series_id=series_id)

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any],
        *,
        series_id: str | None = None,
    ) -> Any:
        """
        GET url and decode the JSON body.

        Transport errors are retried only when max_attempts > 1.

        Raises:
            FetchError: transport failure, non-2xx status, or non-JSON body.
        """

        async def _request() -> httpx.Response:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await client.get(url, params=params)

        try:
            response = await call_with_retry(
                _request,
                max_attempts=self._max_attempts,
                retry_on=(httpx.TransportError,),
            )
        except httpx.HTTPError as exc:
            raise self._error(f"transport error: {exc!r}", series_id) from exc

        if response.is_error:
            raise self._error(
                f"HTTP {response.status_code} - {response.text[:_BODY_PREVIEW]}",
                series_id,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise self._error("response is not valid JSON", series_id) from exc
