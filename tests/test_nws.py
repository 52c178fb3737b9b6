"""Tests for the NWS fetcher (core/nws.py)."""

import httpx
import pytest

from core import nws
from core.models import GridpointForecast, HourlyForecast, SummaryForecast
from core.nws import ForecastError, ForecastKind

LAT, LON = "37.3918", "-122.0601"


class TestPoints:

    @pytest.mark.asyncio
    async def test_resolves_links(self, fake_nws):
        points = await nws.get_points(LAT, LON)
        assert points.forecast == f"https://nws.test/forecast/{LAT},{LON}"
        assert points.forecast_hourly.endswith(f"/hourly/{LAT},{LON}")
        assert points.forecast_grid_data.endswith(f"/grid/{LAT},{LON}")

    @pytest.mark.asyncio
    async def test_sends_identifying_headers(self, fake_nws):
        await nws.get_points(LAT, LON)
        request = fake_nws.requests[0]
        assert request.url.path == f"/points/{LAT},{LON}"
        assert request.headers["User-Agent"] == nws.USER_AGENT
        assert request.headers["Accept"] == "application/ld+json"

    @pytest.mark.asyncio
    async def test_missing_link_is_an_error(self, fake_nws):
        fake_nws.points_override = {"forecast": "https://nws.test/forecast/x"}
        with pytest.raises(ForecastError, match="forecastGridData"):
            await nws.get_gridpoint_forecast(LAT, LON)


class TestFetchForecast:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kind, expected_type",
        [
            (ForecastKind.FORECAST, SummaryForecast),
            (ForecastKind.HOURLY, HourlyForecast),
            (ForecastKind.GRIDPOINT, GridpointForecast),
        ],
    )
    async def test_follows_matching_link(self, fake_nws, kind, expected_type):
        fake_nws.serve(200, {"periods": [], "temperature": {"values": []}})
        payload = await nws.fetch_forecast(kind, LAT, LON)
        assert isinstance(payload, expected_type)

        followed = fake_nws.requests[1].url.path
        prefix = {
            ForecastKind.FORECAST: "/forecast/",
            ForecastKind.HOURLY: "/hourly/",
            ForecastKind.GRIDPOINT: "/grid/",
        }[kind]
        assert followed == f"{prefix}{LAT},{LON}"

    @pytest.mark.asyncio
    async def test_summary_forecast(self, fake_nws):
        fake_nws.serve(200, {"periods": [{"temperature": {"value": 75}}]})
        forecast = await nws.get_forecast(LAT, LON)
        assert forecast.periods[0].temperature == 75

    @pytest.mark.asyncio
    async def test_hourly_forecast(self, fake_nws):
        fake_nws.serve(200, {"periods": [{"temperature": 75, "dewpoint": {"value": 12.2}}]})
        forecast = await nws.get_hourly_forecast(LAT, LON)
        assert forecast.periods[0].temperature == 75
        assert forecast.periods[0].dewpoint == 12.2

    @pytest.mark.asyncio
    async def test_gridpoint_forecast(self, fake_nws):
        fake_nws.serve(200, {"temperature": {"values": [{"value": 23.88}]}})
        forecast = await nws.get_gridpoint_forecast(LAT, LON)
        assert forecast.temperature.values[0].value == 23.88


class TestFailures:

    @pytest.mark.asyncio
    async def test_not_found(self, fake_nws):
        fake_nws.serve(404, {"title": "Not Found", "detail": "Unable to provide data for requested point"})
        with pytest.raises(ForecastError, match="404") as exc_info:
            await nws.get_forecast(LAT, LON)
        assert "Unable to provide data" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_server_error_without_body(self, fake_nws):
        fake_nws.serve(500, "")
        with pytest.raises(ForecastError, match="500"):
            await nws.get_hourly_forecast(LAT, LON)

    @pytest.mark.asyncio
    async def test_invalid_json(self, fake_nws):
        fake_nws.serve(200, "<html>maintenance</html>")
        with pytest.raises(ForecastError, match="invalid JSON"):
            await nws.get_forecast(LAT, LON)

    @pytest.mark.asyncio
    async def test_non_object_document(self, fake_nws):
        fake_nws.serve(200, "[1, 2, 3]")
        with pytest.raises(ForecastError, match="JSON object"):
            await nws.get_forecast(LAT, LON)

    @pytest.mark.asyncio
    async def test_timeout(self, monkeypatch):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        monkeypatch.setattr(nws, "_client", lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        with pytest.raises(ForecastError, match="timed out"):
            await nws.get_forecast(LAT, LON)

    @pytest.mark.asyncio
    async def test_connection_error(self, monkeypatch):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        monkeypatch.setattr(nws, "_client", lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        with pytest.raises(ForecastError, match="connection refused"):
            await nws.get_gridpoint_forecast(LAT, LON)
