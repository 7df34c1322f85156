"""
transforms/time_series.py — Deduplication, windowing, and YoY change for monthly series.

Works entirely on polars DataFrames with the canonical series schema
(month: String "YYYY-MM", value: Float64), sorted ascending by month.

Usage:
    from econpulse_pipeline.transforms.time_series import (
        deduplicate_series,
        trailing_window,
        year_over_year,
        to_points,
    )

    # Remove duplicate months, keeping the last row seen
    df = deduplicate_series(df, ["month"], keep="last")

    # CPI index -> YoY inflation, most recent 60 months
    inflation = year_over_year(cpi, max_points=60)

    points = to_points(inflation)   # list[CanonicalPoint]
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

import polars as pl
import structlog

from econpulse_shared.constants import YOY_PERIODS
from econpulse_shared.models.indicators import CanonicalPoint

log = structlog.get_logger(__name__)

SERIES_SCHEMA: dict[str, type[pl.DataType]] = {
    "month": pl.String,
    "value": pl.Float64,
}


def empty_series_frame() -> pl.DataFrame:
    """An empty DataFrame with the canonical series schema."""
    return pl.DataFrame(schema=SERIES_SCHEMA)


def deduplicate_series(
    df: pl.DataFrame,
    key_cols: list[str],
    *,
    keep: Literal["first", "last"] = "last",
) -> pl.DataFrame:
    """
    Remove duplicate rows by (key_cols), keeping first or last occurrence.

    Use case: daily or weekly observations collapsing to one row per
    month, where the latest row in fetch order wins.

    Args:
        df:       Input DataFrame.
        key_cols: Columns that define uniqueness.
        keep:     Which duplicate to keep ("first" | "last").

    Returns:
        Deduplicated DataFrame.
    """
    n_before = len(df)

    df = df.unique(subset=key_cols, keep=keep, maintain_order=True)

    dropped = n_before - len(df)
    if dropped:
        log.debug("deduplicated", dropped=dropped, key_cols=key_cols)

    return df


def trailing_window(df: pl.DataFrame, max_points: int | None) -> pl.DataFrame:
    """
    Keep only the last max_points rows (the most recent months).

    Older rows are evicted, never the newest. None keeps everything.
    """
    if max_points is None:
        return df
    if max_points < 1:
        raise ValueError(f"max_points must be >= 1, got {max_points}")
    return df.tail(max_points)


def round_half_away(value: float, ndigits: int = 2) -> float:
    """Round to ndigits decimals, halves away from zero (2.675 -> 2.68)."""
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def year_over_year(
    series: pl.DataFrame,
    *,
    periods: int = YOY_PERIODS,
    max_points: int | None = None,
) -> pl.DataFrame:
    """
    Percent change against the value `periods` rows earlier.

    The input must already be canonical (sorted, one row per month). The
    lag is positional: row i is compared to row i - periods.

    Args:
        series:     Canonical index series (month, value).
        periods:    Lag in rows (12 = year-over-year on monthly data).
        max_points: Trailing window applied to the derived series.

    Returns:
        Canonical series of percent changes rounded to 2 dp. Empty when
        the input has no more than `periods` rows. Rows whose base value
        is zero are dropped.
    """
    if len(series) <= periods:
        log.debug("yoy_insufficient_history", rows=len(series), required=periods + 1)
        return empty_series_frame()

    base = pl.col("value").shift(periods)
    df = (
        series.select(
            pl.col("month"),
            ((pl.col("value") - base) / base * 100.0).alias("value"),
        )
        .slice(periods)
        .filter(pl.col("value").is_finite())
        .with_columns(
            pl.col("value").map_elements(round_half_away, return_dtype=pl.Float64)
        )
    )
    return trailing_window(df, max_points)


def to_points(df: pl.DataFrame) -> list[CanonicalPoint]:
    """Convert a canonical series DataFrame into CanonicalPoint models."""
    return [
        CanonicalPoint(month=month, value=value)
        for month, value in df.select(["month", "value"]).iter_rows()
    ]


def points_frame(points: Iterable[CanonicalPoint]) -> pl.DataFrame:
    """Inverse of to_points()."""
    rows = [{"month": p.month, "value": p.value} for p in points]
    return pl.DataFrame(rows, schema=SERIES_SCHEMA)
