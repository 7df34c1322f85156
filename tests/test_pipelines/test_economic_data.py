"""
tests/test_pipelines/test_economic_data.py — Tests for the economic data pipeline.

Sources are replaced by an in-memory FakeSource; the end-to-end test goes
through the real adapters and loader with HTTP mocked by respx.
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any

import httpx
import polars as pl
import pytest
import respx

from econpulse_pipeline.errors import (
    ConfigurationError,
    FetchError,
    NoDataError,
    PublishWriteError,
)
from econpulse_pipeline.loaders.document_store import DocumentStoreLoader
from econpulse_pipeline.pipelines.economic_data import (
    build_partial_document,
    classify_health,
    fetch_all,
    fetch_country,
    resolve_countries,
    run,
)
from econpulse_pipeline.sources.base import SeriesSource, raw_observation_frame
from econpulse_shared.constants import COUNTRY_CONFIGS
from econpulse_shared.models.indicators import CountryResult, FetchWindow, Provider

TODAY = date(2025, 12, 15)
STORE_URL = "https://store.test/gists"
DOC_URL = f"{STORE_URL}/doc123"
FILE_NAME = "economic-data.json"


class FakeSource(SeriesSource):
    """Serves canned frames (or raises) per series_id without any HTTP."""

    name = "Fake"

    def __init__(self, responses: dict[str, pl.DataFrame | Exception]) -> None:
        super().__init__(base_url="https://fake.test")
        self.responses = responses
        self.calls: list[tuple[str, str]] = []
        self.metadata_requests = 0

    async def extract(self, series_id: str, country_code: str, window: FetchWindow) -> pl.DataFrame:
        self.calls.append((series_id, country_code))
        response = self.responses.get(series_id)
        if response is None:
            return raw_observation_frame([])
        if isinstance(response, Exception):
            raise response
        return response

    async def get_metadata(self) -> dict[str, Any]:
        self.metadata_requests += 1
        return {"source_name": self.name, "base_url": self._base_url}


def _monthly(n: int, start: float = 1.0, step: float = 0.0, start_year: int = 2024) -> pl.DataFrame:
    return raw_observation_frame(
        {"date": f"{start_year + i // 12}-{i % 12 + 1:02d}-01", "value": start + step * i}
        for i in range(n)
    )


def _annual(values: dict[int, float]) -> pl.DataFrame:
    return raw_observation_frame({"date": f"{y}-12-31", "value": v} for y, v in values.items())


def _us_source() -> FakeSource:
    return FakeSource(
        {
            "FEDFUNDS": _monthly(6, start=4.33),
            "CPIAUCSL": _monthly(24, start=300.0, step=1.0),
            "UNRATE": _monthly(6, start=4.1),
        }
    )


def _wb_source() -> FakeSource:
    return FakeSource(
        {
            "FR.INR.RINR": _annual({2022: 3.1, 2023: 4.2}),
            "FP.CPI.TOTL.ZG": _annual({2022: 2.0, 2023: 0.2}),
            "SL.UEM.TOTL.ZS": _annual({2023: 4.67, 2024: 4.57}),
        }
    )


@pytest.fixture
def window() -> FetchWindow:
    return FetchWindow.trailing(years=5, max_points=60, today=TODAY)


# ---------------------------------------------------------------------------
# resolve_countries
# ---------------------------------------------------------------------------

class TestResolveCountries:
    def test_known_codes_in_order(self):
        configs = resolve_countries(["cn", "US"])
        assert [c.code for c in configs] == ["CN", "US"]

    def test_unknown_and_duplicate_codes_skipped(self):
        configs = resolve_countries(["US", "XX", "us", " ", "JP"])
        assert [c.code for c in configs] == ["US", "JP"]

    def test_eu_uses_aggregate_request_code(self):
        (eu,) = resolve_countries(["EU"])
        assert eu.request_code == "EUU"


# ---------------------------------------------------------------------------
# fetch_country / fetch_all
# ---------------------------------------------------------------------------

class TestFetchCountry:
    @pytest.mark.asyncio
    async def test_all_indicators_fetched(self, window: FetchWindow):
        result = await fetch_country(
            COUNTRY_CONFIGS["US"], window, sources={Provider.FRED: _us_source()}, now=TODAY
        )
        assert result.point_counts() == {"interestRate": 6, "inflation": 12, "unemployment": 6}
        assert result.is_complete

    @pytest.mark.asyncio
    async def test_cpi_published_as_yoy(self, window: FetchWindow):
        result = await fetch_country(
            COUNTRY_CONFIGS["US"], window, sources={Provider.FRED: _us_source()}, now=TODAY
        )
        # 300 -> 312 over twelve months
        assert result.inflation[0].month == "2025-01"
        assert result.inflation[0].value == 4.0

    @pytest.mark.asyncio
    async def test_failed_indicator_is_empty_and_others_survive(self, window: FetchWindow):
        source = _us_source()
        source.responses["FEDFUNDS"] = FetchError("FRED: HTTP 500 - boom", source="FRED")

        result = await fetch_country(
            COUNTRY_CONFIGS["US"], window, sources={Provider.FRED: source}, now=TODAY
        )
        assert result.interest_rate == []
        assert len(result.inflation) == 12
        assert len(result.unemployment) == 6

    @pytest.mark.asyncio
    async def test_unexpected_error_is_absorbed(self, window: FetchWindow):
        source = _us_source()
        source.responses["UNRATE"] = RuntimeError("parser exploded")

        result = await fetch_country(
            COUNTRY_CONFIGS["US"], window, sources={Provider.FRED: source}, now=TODAY
        )
        assert result.unemployment == []
        assert result.interest_rate

    @pytest.mark.asyncio
    async def test_insufficient_cpi_history_gives_empty_inflation(self, window: FetchWindow):
        source = _us_source()
        source.responses["CPIAUCSL"] = _monthly(12, start=300.0, step=1.0)

        result = await fetch_country(
            COUNTRY_CONFIGS["US"], window, sources={Provider.FRED: source}, now=TODAY
        )
        assert result.inflation == []

    @pytest.mark.asyncio
    async def test_world_bank_country_uses_request_code(self, window: FetchWindow):
        source = _wb_source()
        result = await fetch_country(
            COUNTRY_CONFIGS["EU"], window, sources={Provider.WORLD_BANK: source}, now=TODAY
        )
        assert {code for _, code in source.calls} == {"EUU"}
        assert [p.month for p in result.unemployment] == ["2023-12", "2024-12"]
        # World Bank inflation is already a percentage
        assert [p.value for p in result.inflation] == [2.0, 0.2]

    @pytest.mark.asyncio
    async def test_missing_source_gives_empty_result(self, window: FetchWindow):
        result = await fetch_country(COUNTRY_CONFIGS["JP"], window, sources={}, now=TODAY)
        assert result.is_empty
        assert result.code == "JP"


class TestFetchAll:
    @pytest.mark.asyncio
    async def test_every_requested_country_present(self, window: FetchWindow):
        sources = {Provider.FRED: _us_source(), Provider.WORLD_BANK: FakeSource({})}
        configs = resolve_countries(["US", "CN", "JP"])

        results = await fetch_all(configs, window, sources=sources, now=TODAY)

        assert list(results) == ["US", "CN", "JP"]
        assert results["CN"].is_empty
        assert results["JP"].is_empty
        assert classify_health(results) == "degraded"


# ---------------------------------------------------------------------------
# Document sections
# ---------------------------------------------------------------------------

class TestBuildPartialDocument:
    def test_sections_keyed_by_country(self):
        results = {"CN": CountryResult.empty(COUNTRY_CONFIGS["CN"])}
        document = build_partial_document(results)

        section = document["CN"]
        assert set(document) == {"CN"}
        assert section["country"] == "CN"
        assert section["name"] == "China"
        assert section["currency"] == "CNY"
        assert section["interestRate"] == []
        assert section["inflation"] == []
        assert section["unemployment"] == []
        assert section["indicators"]["unemployment"]["seriesId"] == "SL.UEM.TOTL.ZS"
        assert section["indicators"]["unemployment"]["source"] == "WorldBank"

    def test_section_is_json_serializable(self):
        results = {"US": CountryResult.empty(COUNTRY_CONFIGS["US"])}
        json.dumps(build_partial_document(results))


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------

class TestRun:
    @pytest.mark.asyncio
    async def test_missing_store_settings_fail_before_fetch(self, settings):
        source = _us_source()
        bad = settings.model_copy(update={"document_store_token": ""})

        with pytest.raises(ConfigurationError):
            await run(bad, countries=["US"], today=TODAY, sources={Provider.FRED: source})

        assert source.calls == []

    @pytest.mark.asyncio
    async def test_all_empty_raises_no_data(self, settings):
        sources = {Provider.FRED: FakeSource({}), Provider.WORLD_BANK: FakeSource({})}
        with pytest.raises(NoDataError, match="any country"):
            await run(settings, countries=["US", "CN"], today=TODAY, sources=sources)

    @pytest.mark.asyncio
    async def test_unsupported_countries_only_is_nothing_to_do(self, settings):
        result = await run(settings, countries=["XX"], today=TODAY, sources={})
        assert result.status == "nothing_to_do"
        assert result.publish is None

    @pytest.mark.asyncio
    async def test_dry_run_without_store_skips_publish(self, settings):
        bare = settings.model_copy(update={"document_store_token": "", "document_id": ""})
        result = await run(
            bare,
            countries=["US"],
            dry_run=True,
            today=TODAY,
            sources={Provider.FRED: _us_source()},
        )
        assert result.status == "dry_run"
        assert result.publish is None
        assert result.health == "healthy"
        assert result.total_points == 24

    @pytest.mark.asyncio
    async def test_only_sources_in_use_are_described(self, settings):
        fred, world_bank = _us_source(), _wb_source()
        bare = settings.model_copy(update={"document_store_token": "", "document_id": ""})

        await run(
            bare,
            countries=["US"],
            dry_run=True,
            today=TODAY,
            sources={Provider.FRED: fred, Provider.WORLD_BANK: world_bank},
        )

        assert fred.metadata_requests == 1
        assert world_bank.metadata_requests == 0

    @pytest.mark.asyncio
    async def test_dry_run_reads_but_does_not_write(self, settings):
        with respx.mock(assert_all_called=False) as router:
            router.get(DOC_URL).mock(
                return_value=httpx.Response(200, json={"files": {}})
            )
            patch = router.patch(DOC_URL).mock(return_value=httpx.Response(200, json={}))

            result = await run(
                settings,
                countries=["US"],
                dry_run=True,
                today=TODAY,
                sources={Provider.FRED: _us_source()},
            )

        assert not patch.called
        assert result.publish is not None
        assert result.publish.status == "dry_run"


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_us_run_replaces_us_and_keeps_cn(
        self,
        settings,
        fred_cpi_payload: dict,
        fred_fedfunds_payload: dict,
    ):
        unrate = {
            "observations": [
                {"date": "2025-10-01", "value": "4.4"},
                {"date": "2025-11-01", "value": "4.6"},
            ]
        }
        by_series = {
            "CPIAUCSL": fred_cpi_payload,
            "FEDFUNDS": fred_fedfunds_payload,
            "UNRATE": unrate,
        }

        def fred_handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=by_series[request.url.params["series_id"]])

        cn_section = {"country": "CN", "unemployment": [{"date": "2024-12", "value": 4.57}]}
        prior = {
            "US": {"country": "US", "interestRate": [{"date": "2019-01", "value": 2.4}]},
            "CN": cn_section,
            "lastUpdate": "2025-11-15T06:00:00+00:00",
        }
        gist = {"files": {FILE_NAME: {"content": json.dumps(prior)}}}

        with respx.mock() as router:
            router.get(url__regex=r"https://fred\.test/fred/series/observations.*").mock(
                side_effect=fred_handler
            )
            router.get(DOC_URL).mock(return_value=httpx.Response(200, json=gist))
            patch = router.patch(DOC_URL).mock(return_value=httpx.Response(200, json={}))

            result = await run(settings, countries=["US"], today=TODAY)

        assert result.status == "success"
        assert result.point_counts["US"] == {"interestRate": 5, "inflation": 2, "unemployment": 2}

        body = json.loads(patch.calls[0].request.content)
        document = json.loads(body["files"][FILE_NAME]["content"])
        assert json.dumps(document["CN"]) == json.dumps(cn_section)
        assert document["US"]["inflation"] == [
            {"date": "2025-10", "value": 2.93},
            {"date": "2025-11", "value": 2.71},
        ]
        assert document["US"]["interestRate"][-1] == {"date": "2025-11", "value": 3.88}
        assert document["lastUpdate"] != prior["lastUpdate"]

    @pytest.mark.asyncio
    async def test_write_rejection_propagates(self, settings):
        with respx.mock() as router:
            router.get(DOC_URL).mock(return_value=httpx.Response(200, json={"files": {}}))
            router.patch(DOC_URL).mock(return_value=httpx.Response(401, text="Bad credentials"))

            with pytest.raises(PublishWriteError):
                await run(
                    settings,
                    countries=["US"],
                    today=TODAY,
                    sources={Provider.FRED: _us_source()},
                    loader=DocumentStoreLoader(
                        base_url=STORE_URL, token="test-token", file_name=FILE_NAME
                    ),
                )
