"""
models/indicators.py — Pydantic models for countries, series, and results.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from econpulse_shared.time_utils import MONTH_KEY_PATTERN, trailing_start


class Indicator(str, Enum):
    """Tracked indicators; values double as the published section keys."""

    INTEREST_RATE = "interestRate"
    INFLATION = "inflation"
    UNEMPLOYMENT = "unemployment"


class IndicatorKind(str, Enum):
    RATE = "rate"     # published as-is
    INDEX = "index"   # published as a year-over-year % change


class Provider(str, Enum):
    FRED = "FRED"
    WORLD_BANK = "WorldBank"


class SeriesSpec(BaseModel):
    """One provider series backing an indicator."""

    model_config = ConfigDict(frozen=True)

    series_id: str
    kind: IndicatorKind = IndicatorKind.RATE


class CountryConfig(BaseModel):
    """Static per-country configuration. Immutable at run time."""

    model_config = ConfigDict(frozen=True)

    code: str                         # e.g. "US"
    display_name: str
    currency: str
    provider: Provider
    provider_code: str | None = None  # code the provider expects, if not `code`
    series: dict[Indicator, SeriesSpec]

    @property
    def request_code(self) -> str:
        return self.provider_code or self.code


class CanonicalPoint(BaseModel):
    """A normalized, deduplicated, monthly observation."""

    model_config = ConfigDict(frozen=True)

    month: str = Field(pattern=MONTH_KEY_PATTERN)
    value: float

    def to_published_dict(self) -> dict[str, Any]:
        return {"date": self.month, "value": self.value}


class FetchWindow(BaseModel):
    """Closed date range to request plus the number of trailing months kept."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: date
    max_points: int = Field(default=60, ge=1)

    @classmethod
    def trailing(
        cls,
        *,
        years: int = 5,
        max_points: int = 60,
        today: date | None = None,
    ) -> "FetchWindow":
        end = today or date.today()
        return cls(start=trailing_start(end, years), end=end, max_points=max_points)


class CountryResult(BaseModel):
    """
    Per-country output of one run.

    An indicator that failed to fetch is an empty list, never an error.
    """

    code: str
    display_name: str
    currency: str
    interest_rate: list[CanonicalPoint] = Field(default_factory=list)
    inflation: list[CanonicalPoint] = Field(default_factory=list)
    unemployment: list[CanonicalPoint] = Field(default_factory=list)
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def empty(cls, config: CountryConfig, fetched_at: datetime | None = None) -> "CountryResult":
        extra: dict[str, Any] = {"fetched_at": fetched_at} if fetched_at else {}
        return cls(
            code=config.code,
            display_name=config.display_name,
            currency=config.currency,
            **extra,
        )

    def series_for(self, indicator: Indicator) -> list[CanonicalPoint]:
        match indicator:
            case Indicator.INTEREST_RATE:
                return self.interest_rate
            case Indicator.INFLATION:
                return self.inflation
            case Indicator.UNEMPLOYMENT:
                return self.unemployment
        raise ValueError(f"Unknown indicator: {indicator!r}")

    def point_counts(self) -> dict[str, int]:
        return {ind.value: len(self.series_for(ind)) for ind in Indicator}

    @property
    def is_empty(self) -> bool:
        return not any(self.point_counts().values())

    @property
    def is_complete(self) -> bool:
        return all(self.point_counts().values())
