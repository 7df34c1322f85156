"""
econpulse_shared.models — Pydantic models for the indicator sync pipeline.

These models are used by:
- econpulse_pipeline.sources / pipelines: typed country configuration
- econpulse_pipeline.loaders: serialising country sections into the
  published document
"""

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

__all__ = [
    "Indicator",
    "IndicatorKind",
    "Provider",
    "SeriesSpec",
    "CountryConfig",
    "CanonicalPoint",
    "CountryResult",
    "FetchWindow",
]
