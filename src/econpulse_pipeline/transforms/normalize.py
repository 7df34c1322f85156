"""
transforms/normalize.py — RawObservation -> canonical monthly series.

Takes the (date, value) DataFrame every source returns and produces the
canonical (month, value) series:

  1. drop missing values: the FRED "." marker, nulls, unparseable numbers
  2. drop dates that are malformed or later than the current month
  3. truncate dates to "YYYY-MM"
  4. one row per month, the last row in fetch order wins
  5. sort ascending by month
  6. keep the trailing max_points months

Normalizing an already-canonical series returns it unchanged.

Usage:
    from econpulse_pipeline.transforms.normalize import normalize_observations

    monthly = normalize_observations(raw, now=date.today(), max_points=60)
    # columns: month (String), value (Float64)
"""

from __future__ import annotations

from datetime import date

import polars as pl
import structlog

from econpulse_pipeline.transforms.time_series import (
    deduplicate_series,
    empty_series_frame,
    trailing_window,
)
from econpulse_shared.constants import MISSING_VALUE
from econpulse_shared.time_utils import MONTH_KEY_PATTERN, month_key

log = structlog.get_logger(__name__)


def _value_expr(raw: pl.DataFrame, missing_marker: str) -> pl.Expr:
    value = pl.col("value")
    if raw.schema["value"] == pl.String:
        stripped = value.str.strip_chars()
        value = pl.when(stripped == missing_marker).then(None).otherwise(stripped)
    return value.cast(pl.Float64, strict=False)


def normalize_observations(
    raw: pl.DataFrame,
    *,
    now: date,
    max_points: int | None = None,
    date_col: str = "date",
    missing_marker: str = MISSING_VALUE,
) -> pl.DataFrame:
    """
    Normalize provider observations into a canonical monthly series.

    Args:
        raw:            DataFrame with date_col and value columns.
        now:            Reference date; months after now's month are dropped.
        max_points:     Trailing window size (None keeps everything).
        date_col:       Name of the date column ("month" for canonical input).
        missing_marker: Provider sentinel meaning "no value".

    Returns:
        DataFrame with columns month (String), value (Float64).
    """
    if raw.is_empty():
        return empty_series_frame()

    df = raw.select(
        pl.col(date_col).cast(pl.String).str.strip_chars().str.slice(0, 7).alias("month"),
        _value_expr(raw, missing_marker).alias("value"),
    )

    df = df.filter(
        pl.col("value").is_finite()
        & pl.col("month").str.contains(MONTH_KEY_PATTERN)
        & (pl.col("month") <= month_key(now))
    )

    df = deduplicate_series(df, ["month"], keep="last")
    df = trailing_window(df.sort("month"), max_points)

    log.debug(
        "observations_normalized",
        raw_rows=len(raw),
        monthly_rows=len(df),
        dropped=len(raw) - len(df),
    )
    return df.select(["month", "value"])
