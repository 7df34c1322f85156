"""
time_utils.py — Period parsing and window helpers.

Providers publish observation periods in a few shapes:
- FRED:       "2024-01-01" (ISO, always first of the period)
- World Bank: "2024" (annual), "2024M01" (monthly), "2024Q1" (quarterly)

Everything downstream works on ISO dates and zero-padded "YYYY-MM" month
keys, which compare correctly as plain strings.

Usage:
    from econpulse_shared.time_utils import month_key, parse_provider_period

    month_key(date(2024, 3, 15))        # "2024-03"
    parse_provider_period("2023")       # "2023-12-31"
    parse_provider_period("2023Q2")     # "2023-06-30"
    parse_provider_period("2023M07")    # "2023-07-31"
    trailing_start(date(2025, 6, 1), 5) # date(2020, 6, 1)
"""

from __future__ import annotations

import calendar
import re
from datetime import date

from dateutil.relativedelta import relativedelta

MONTH_KEY_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


def month_key(d: date) -> str:
    """Return the zero-padded "YYYY-MM" key for a date."""
    return f"{d.year:04d}-{d.month:02d}"


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def parse_provider_period(raw: str | None) -> str | None:
    """
    Convert a provider period label into an ISO date string.

    Annual and quarterly periods are pinned to the last day of the period
    so that, once truncated to a month key, annual data lands in December.
    ISO dates are passed through untouched. Returns None for empty input
    and the stripped label for shapes it does not recognise.

    Args:
        raw: Period label from a provider payload.

    Returns:
        "YYYY-MM-DD" string, the unrecognised label, or None.
    """
    if not raw:
        return None

    s = str(raw).strip()

    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", s):
        return s

    m = re.fullmatch(r"(\d{4})", s)
    if m:
        return _month_end(int(m.group(1)), 12).isoformat()

    m = re.fullmatch(r"(\d{4})[Mm](\d{1,2})", s)
    if m:
        month = int(m.group(2))
        if 1 <= month <= 12:
            return _month_end(int(m.group(1)), month).isoformat()
        return s

    m = re.fullmatch(r"(\d{4})-?[Qq]([1-4])", s)
    if m:
        return _month_end(int(m.group(1)), int(m.group(2)) * 3).isoformat()

    return s


def trailing_start(today: date, years: int) -> date:
    """Return the date `years` years before today (Feb 29 clamps to Feb 28)."""
    return today - relativedelta(years=years)
