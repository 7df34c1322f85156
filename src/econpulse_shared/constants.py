"""
constants.py — static country and indicator catalogue.

Country configs, provider series IDs, and the indicator descriptions that
are published alongside each country section live here so the pipeline,
the CLI, and the tests agree on one source of truth.
"""

from __future__ import annotations

from typing import Final

from econpulse_shared.models.indicators import (
    CountryConfig,
    Indicator,
    IndicatorKind,
    Provider,
    SeriesSpec,
)

# FRED marks a missing observation with a lone dot
MISSING_VALUE: Final[str] = "."

# Top-level key refreshed on every publish
LAST_UPDATED_KEY: Final[str] = "lastUpdate"

# Lag used for year-over-year change on a monthly series
YOY_PERIODS: Final[int] = 12

# ---------------------------------------------------------------------------
# World Bank series shared by every non-US country
# ---------------------------------------------------------------------------
_WORLD_BANK_SERIES: Final[dict[Indicator, SeriesSpec]] = {
    Indicator.INTEREST_RATE: SeriesSpec(series_id="FR.INR.RINR"),     # real interest rate
    Indicator.INFLATION: SeriesSpec(series_id="FP.CPI.TOTL.ZG"),      # CPI, annual %
    Indicator.UNEMPLOYMENT: SeriesSpec(series_id="SL.UEM.TOTL.ZS"),   # % of labour force
}

# ---------------------------------------------------------------------------
# Supported countries: code -> config
# ---------------------------------------------------------------------------
COUNTRY_CONFIGS: Final[dict[str, CountryConfig]] = {
    "US": CountryConfig(
        code="US",
        display_name="United States",
        currency="USD",
        provider=Provider.FRED,
        series={
            Indicator.INTEREST_RATE: SeriesSpec(series_id="FEDFUNDS"),
            Indicator.INFLATION: SeriesSpec(series_id="CPIAUCSL", kind=IndicatorKind.INDEX),
            Indicator.UNEMPLOYMENT: SeriesSpec(series_id="UNRATE"),
        },
    ),
    "CN": CountryConfig(
        code="CN",
        display_name="China",
        currency="CNY",
        provider=Provider.WORLD_BANK,
        series=_WORLD_BANK_SERIES,
    ),
    "EU": CountryConfig(
        code="EU",
        display_name="European Union",
        currency="EUR",
        provider=Provider.WORLD_BANK,
        provider_code="EUU",  # World Bank aggregate code
        series=_WORLD_BANK_SERIES,
    ),
    "JP": CountryConfig(
        code="JP",
        display_name="Japan",
        currency="JPY",
        provider=Provider.WORLD_BANK,
        series=_WORLD_BANK_SERIES,
    ),
}

# ---------------------------------------------------------------------------
# Published indicator descriptions
# ---------------------------------------------------------------------------
INDICATOR_METADATA: Final[dict[Indicator, dict[str, str]]] = {
    Indicator.INTEREST_RATE: {
        "name": "Interest rate",
        "unit": "%",
        "description": "Policy or real interest rate",
    },
    Indicator.INFLATION: {
        "name": "Inflation",
        "unit": "%",
        "description": "Consumer price inflation, year-over-year change",
    },
    Indicator.UNEMPLOYMENT: {
        "name": "Unemployment rate",
        "unit": "%",
        "description": "Unemployment, share of labour force",
    },
}
