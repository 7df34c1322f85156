"""
pipelines/economic_data.py — interest rate, inflation, and unemployment pipeline.

Orchestrates:
  1. Resolve requested country codes -> CountryConfig (unknown codes skipped)
  2. Per country, fetch the three indicators in parallel from the country's
     provider (FRED for US, World Bank elsewhere)
  3. Normalize -> canonical monthly series; CPI index -> YoY inflation
  4. Log a per-country / per-indicator summary and classify run health
  5. Read-merge-write the published document

Failure policy:
  - one indicator failing -> that indicator is an empty series
  - one country failing entirely -> that country is present with empty series
  - every series empty -> NoDataError
  - document write rejected -> PublishWriteError

Usage:
    from econpulse_pipeline.pipelines.economic_data import run
    from econpulse_shared.config import get_settings

    result = await run(get_settings(), countries=["US", "CN"], dry_run=True)
    print(result.health, result.total_points)
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Literal

from econpulse_pipeline.errors import ConfigurationError, FetchError, NoDataError
from econpulse_pipeline.loaders.document_store import DocumentStoreLoader, PublishResult
from econpulse_pipeline.sources import SeriesSource, build_sources
from econpulse_pipeline.transforms.normalize import normalize_observations
from econpulse_pipeline.transforms.time_series import to_points, year_over_year
from econpulse_pipeline.utils.logging import get_logger
from econpulse_shared.config import Settings
from econpulse_shared.constants import COUNTRY_CONFIGS, INDICATOR_METADATA
from econpulse_shared.models.indicators import (
    CanonicalPoint,
    CountryConfig,
    CountryResult,
    FetchWindow,
    Indicator,
    IndicatorKind,
    Provider,
    SeriesSpec,
)

log = get_logger(__name__, pipeline="economic_data")

Health = Literal["healthy", "degraded", "failed"]


@dataclass
class RunResult:
    """Outcome of one pipeline run."""

    status: Literal["success", "dry_run", "nothing_to_do"]
    countries: list[str] = field(default_factory=list)
    point_counts: dict[str, dict[str, int]] = field(default_factory=dict)
    health: Health | None = None
    publish: PublishResult | None = None

    @property
    def total_points(self) -> int:
        return sum(sum(counts.values()) for counts in self.point_counts.values())


# ---------------------------------------------------------------------------
# Country selection and configuration checks
# ---------------------------------------------------------------------------


def resolve_countries(
    codes: Iterable[str],
    catalogue: Mapping[str, CountryConfig] = COUNTRY_CONFIGS,
) -> list[CountryConfig]:
    """Map country codes to configs, skipping unknown codes and duplicates."""
    configs: list[CountryConfig] = []
    seen: set[str] = set()
    for raw in codes:
        code = raw.strip().upper()
        if not code or code in seen:
            continue
        seen.add(code)
        config = catalogue.get(code)
        if config is None:
            log.warning("unsupported_country", country=code, supported=sorted(catalogue))
            continue
        configs.append(config)
    return configs


def check_settings(
    settings: Settings,
    configs: Sequence[CountryConfig],
    *,
    dry_run: bool = False,
) -> None:
    """
    Validate configuration before any network call.

    Raises:
        ConfigurationError: document store token or id missing (not required
            for dry runs).
    """
    if not dry_run and not (settings.document_store_token and settings.document_id):
        raise ConfigurationError(
            "DOCUMENT_STORE_TOKEN (or GIST_TOKEN) and DOCUMENT_ID are required"
        )

    fred_countries = [c.code for c in configs if c.provider is Provider.FRED]
    if fred_countries and not settings.fred_api_key:
        log.warning(
            "fred_api_key_missing",
            countries=fred_countries,
            effect="FRED series will come back empty",
        )
    elif fred_countries and not settings.fred_api_key_looks_valid:
        log.warning(
            "fred_api_key_format",
            expected="32-character hexadecimal string",
            received_length=len(settings.fred_api_key),
        )


# ---------------------------------------------------------------------------
# Fetch
# ---------------------------------------------------------------------------


async def fetch_indicator(
    source: SeriesSource,
    spec: SeriesSpec,
    config: CountryConfig,
    window: FetchWindow,
    *,
    now: date,
) -> list[CanonicalPoint]:
    """
    Fetch -> normalize (-> YoY for index series) -> trailing window.

    Raises:
        FetchError: the provider call failed or returned nothing.
    """
    raw = await source.fetch(spec.series_id, config.request_code, window)

    if spec.kind is IndicatorKind.INDEX:
        # full history first: YoY needs the 12 months before the window
        monthly = normalize_observations(raw, now=now)
        series = year_over_year(monthly, max_points=window.max_points)
    else:
        series = normalize_observations(raw, now=now, max_points=window.max_points)

    return to_points(series)


async def fetch_country(
    config: CountryConfig,
    window: FetchWindow,
    *,
    sources: Mapping[Provider, SeriesSource],
    now: date | None = None,
) -> CountryResult:
    """
    Fetch all indicators for one country concurrently.

    Never raises: each failed indicator becomes an empty series.
    """
    now = now or date.today()
    fetched_at = datetime.now(timezone.utc)
    country_log = log.bind(country=config.code, provider=config.provider.value)

    source = sources.get(config.provider)
    if source is None:
        country_log.error("source_not_configured")
        return CountryResult.empty(config, fetched_at)

    country_log.info("country_fetch_start", indicators=[i.value for i in config.series])
    indicators = list(config.series)
    outcomes = await asyncio.gather(
        *(
            fetch_indicator(source, config.series[ind], config, window, now=now)
            for ind in indicators
        ),
        return_exceptions=True,
    )

    series: dict[Indicator, list[CanonicalPoint]] = {}
    for indicator, outcome in zip(indicators, outcomes):
        ind_log = country_log.bind(
            indicator=indicator.value,
            series_id=config.series[indicator].series_id,
        )
        if isinstance(outcome, FetchError):
            ind_log.warning("indicator_fetch_failed", error=str(outcome))
            series[indicator] = []
        elif isinstance(outcome, Exception):
            ind_log.error("indicator_fetch_crashed", error=repr(outcome), exc_info=outcome)
            series[indicator] = []
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            ind_log.info("indicator_ready", points=len(outcome))
            series[indicator] = outcome

    return CountryResult(
        code=config.code,
        display_name=config.display_name,
        currency=config.currency,
        interest_rate=series.get(Indicator.INTEREST_RATE, []),
        inflation=series.get(Indicator.INFLATION, []),
        unemployment=series.get(Indicator.UNEMPLOYMENT, []),
        fetched_at=fetched_at,
    )


async def fetch_all(
    configs: Sequence[CountryConfig],
    window: FetchWindow,
    *,
    sources: Mapping[Provider, SeriesSource],
    now: date | None = None,
) -> dict[str, CountryResult]:
    """
    Fetch every requested country concurrently.

    Every requested code is a key of the result, even when nothing came back.
    """
    outcomes = await asyncio.gather(
        *(fetch_country(c, window, sources=sources, now=now) for c in configs),
        return_exceptions=True,
    )

    results: dict[str, CountryResult] = {}
    for config, outcome in zip(configs, outcomes):
        if isinstance(outcome, CountryResult):
            results[config.code] = outcome
        elif isinstance(outcome, Exception):
            log.error("country_fetch_crashed", country=config.code, error=repr(outcome))
            results[config.code] = CountryResult.empty(config)
        else:
            raise outcome
    return results


# ---------------------------------------------------------------------------
# Summary and document sections
# ---------------------------------------------------------------------------


def classify_health(results: Mapping[str, CountryResult]) -> Health:
    if not results or all(r.is_empty for r in results.values()):
        return "failed"
    if all(r.is_complete for r in results.values()):
        return "healthy"
    return "degraded"


def summarize(results: Mapping[str, CountryResult]) -> tuple[dict[str, dict[str, int]], Health]:
    """Log point counts per country/indicator and return them with run health."""
    counts: dict[str, dict[str, int]] = {}
    for code, result in results.items():
        counts[code] = result.point_counts()
        log.info(
            "country_summary",
            country=code,
            name=result.display_name,
            **counts[code],
        )
    health = classify_health(results)
    log.info(
        "run_summary",
        health=health,
        countries=list(results),
        total_points=sum(sum(c.values()) for c in counts.values()),
    )
    return counts, health


def build_country_section(result: CountryResult, config: CountryConfig) -> dict[str, Any]:
    """Published JSON section for one country."""
    section: dict[str, Any] = {
        "country": result.code,
        "name": result.display_name,
        "currency": result.currency,
        "lastUpdate": result.fetched_at.isoformat(),
    }
    for indicator in Indicator:
        section[indicator.value] = [p.to_published_dict() for p in result.series_for(indicator)]

    section["indicators"] = {
        indicator.value: {
            **INDICATOR_METADATA[indicator],
            "seriesId": spec.series_id,
            "source": config.provider.value,
        }
        for indicator, spec in config.series.items()
    }
    return section


def build_partial_document(
    results: Mapping[str, CountryResult],
    catalogue: Mapping[str, CountryConfig] = COUNTRY_CONFIGS,
) -> dict[str, Any]:
    """Top-level sections this run replaces, keyed by country code."""
    return {
        code: build_country_section(result, catalogue[code])
        for code, result in results.items()
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def run(
    settings: Settings,
    *,
    countries: Sequence[str] | None = None,
    dry_run: bool = False,
    today: date | None = None,
    sources: Mapping[Provider, SeriesSource] | None = None,
    loader: DocumentStoreLoader | None = None,
) -> RunResult:
    """
    Run the pipeline end-to-end.

    Args:
        settings:  Explicit configuration for sources and the document store.
        countries: Country codes (default: settings.enabled_countries_list).
        dry_run:   Fetch and merge but do not write the document.
        today:     Reference date for windows and the future-month filter.
        sources:   Provider -> source mapping (default: build_sources(settings)).
        loader:    Document store loader (default: built from settings).

    Returns:
        RunResult.

    Raises:
        ConfigurationError: required document store settings are missing.
        NoDataError:        every indicator of every country is empty.
        PublishWriteError:  the document store rejected the update.
    """
    codes = list(countries) if countries else settings.enabled_countries_list
    configs = resolve_countries(codes)
    check_settings(settings, configs, dry_run=dry_run)

    log.info("economic_data_start", countries=[c.code for c in configs], dry_run=dry_run)
    if not configs:
        log.warning("nothing_to_do", requested=codes)
        return RunResult(status="nothing_to_do")

    run_started = datetime.now(timezone.utc)
    today = today or run_started.date()
    window = FetchWindow.trailing(
        years=settings.lookback_years,
        max_points=settings.max_points,
        today=today,
    )

    if sources is None:
        sources = build_sources(settings)
    for provider in sorted({c.provider for c in configs}, key=lambda p: p.value):
        if provider in sources:
            log.info("source_configured", **await sources[provider].get_metadata())

    results = await fetch_all(configs, window, sources=sources, now=today)
    counts, health = summarize(results)
    if health == "failed":
        raise NoDataError("Failed to fetch data for any country")

    partial = build_partial_document(results)
    outcome = RunResult(
        status="dry_run" if dry_run else "success",
        countries=list(results),
        point_counts=counts,
        health=health,
    )

    if dry_run and not (settings.document_store_token and settings.document_id):
        log.info("dry_run_complete", publish="skipped", reason="no document store configured")
        return outcome

    loader = loader or DocumentStoreLoader(
        base_url=settings.document_store_url,
        token=settings.document_store_token,
        file_name=settings.document_file_name,
        timeout=settings.http_timeout,
    )
    outcome.publish = await loader.publish(
        partial, settings.document_id, now=run_started, dry_run=dry_run
    )
    return outcome
