# =============================================================================
# core/nws.py  —  National Weather Service forecast fetcher
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Fetches forecasts from api.weather.gov for a latitude/longitude pair.
#   Every lookup is two requests:
#     1. GET /points/{lat},{lon}   → grid cell + links to the forecast documents
#     2. GET <link>                → the forecast document itself
#
#   Which link is followed depends on the ForecastKind:
#     FORECAST   → "forecast"          → SummaryForecast
#     HOURLY     → "forecastHourly"    → HourlyForecast
#     GRIDPOINT  → "forecastGridData"  → GridpointForecast
#
# ERRORS:
#   Anything that goes wrong (HTTP status, network, timeout, bad JSON, a
#   points document without the needed link) is raised as ForecastError.
#   Callers get one failure type and a readable message; nothing is retried
#   and nothing is cached.
#
# SETTINGS (environment, read at import; main.py loads .env first):
#   NWS_API_BASE    base URL                    (default https://api.weather.gov)
#   NWS_USER_AGENT  User-Agent sent upstream    (NWS rejects requests without one)
#   NWS_TIMEOUT     per-request timeout, seconds (default 30)
#
# Each lookup opens its own httpx.AsyncClient and closes it before returning,
# so concurrent lookups share no connection state.
# =============================================================================

import logging
import os
from enum import Enum
from typing import Optional, Union

import httpx

from core.models import (
    ForecastParams,
    GridpointForecast,
    HourlyForecast,
    Points,
    SummaryForecast,
)

logger = logging.getLogger(__name__)

NWS_API_BASE = os.environ.get("NWS_API_BASE", "https://api.weather.gov").rstrip("/")
USER_AGENT = os.environ.get("NWS_USER_AGENT", "mcp-nws/1.0")
REQUEST_TIMEOUT = float(os.environ.get("NWS_TIMEOUT", "30"))

# JSON-LD gives flat documents ("periods" at the top level).
ACCEPT = "application/ld+json"

ForecastPayload = Union[SummaryForecast, HourlyForecast, GridpointForecast]


class ForecastError(Exception):
    """Any failure to obtain a forecast from the upstream provider."""


class ForecastKind(Enum):
    """The three forecast representations; value is the points link key."""

    FORECAST = "forecast"
    HOURLY = "forecastHourly"
    GRIDPOINT = "forecastGridData"


_PAYLOADS = {
    ForecastKind.FORECAST: SummaryForecast,
    ForecastKind.HOURLY: HourlyForecast,
    ForecastKind.GRIDPOINT: GridpointForecast,
}

# Points attribute holding each kind's document URL.
_LINKS = {
    ForecastKind.FORECAST: "forecast",
    ForecastKind.HOURLY: "forecast_hourly",
    ForecastKind.GRIDPOINT: "forecast_grid_data",
}


def _client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"User-Agent": USER_AGENT, "Accept": ACCEPT},
        timeout=REQUEST_TIMEOUT,
        follow_redirects=True,
        transport=transport,
    )


def _problem_detail(response: httpx.Response) -> str:
    """Pull the human-readable part out of an NWS problem+json body."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(body, dict):
        return body.get("detail") or body.get("title") or ""
    return ""


async def _get_json(client: httpx.AsyncClient, url: str) -> dict:
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        detail = _problem_detail(e.response)
        message = f"{status} {e.response.reason_phrase} from {url}"
        raise ForecastError(f"{message}: {detail}" if detail else message) from e
    except httpx.TimeoutException as e:
        raise ForecastError(f"timed out requesting {url}") from e
    except httpx.RequestError as e:
        raise ForecastError(f"request to {url} failed: {e}") from e

    try:
        data = response.json()
    except ValueError as e:
        raise ForecastError(f"invalid JSON from {url}: {e}") from e
    if not isinstance(data, dict):
        raise ForecastError(f"unexpected document from {url}: expected a JSON object")
    return data


async def _resolve(client: httpx.AsyncClient, latitude: str, longitude: str) -> Points:
    data = await _get_json(client, f"{NWS_API_BASE}/points/{latitude},{longitude}")
    return Points.from_json(data)


# =============================================================================
# PUBLIC API
# =============================================================================
async def get_points(latitude: str, longitude: str) -> Points:
    """Resolve a coordinate to its NWS office, grid cell and forecast links."""
    async with _client() as client:
        return await _resolve(client, latitude, longitude)


async def fetch_forecast(kind: ForecastKind, latitude: str, longitude: str) -> ForecastPayload:
    """Fetch one forecast representation for a coordinate.

    Args:
        kind: Which document to follow from the points lookup.
        latitude: Passed through to NWS unchanged.
        longitude: Passed through to NWS unchanged.

    Returns:
        The payload dataclass matching ``kind``.

    Raises:
        ForecastError: on any upstream, network or decoding failure.
    """
    async with _client() as client:
        points = await _resolve(client, latitude, longitude)
        url = getattr(points, _LINKS[kind])
        if not url:
            raise ForecastError(
                f"NWS points for {latitude},{longitude} has no '{kind.value}' link"
            )
        logger.debug("%s for %s,%s → %s", kind.name, latitude, longitude, url)
        data = await _get_json(client, url)
    return _PAYLOADS[kind].from_json(data)


async def get_forecast(latitude: str, longitude: str) -> SummaryForecast:
    """Standard forecast: 14 periods (day and night for 7 days)."""
    return await fetch_forecast(ForecastKind.FORECAST, latitude, longitude)


async def get_hourly_forecast(latitude: str, longitude: str) -> HourlyForecast:
    """Hourly forecast covering 7 days."""
    return await fetch_forecast(ForecastKind.HOURLY, latitude, longitude)


async def get_gridpoint_forecast(latitude: str, longitude: str) -> GridpointForecast:
    """Detailed 7 day forecast with raw time series data."""
    return await fetch_forecast(ForecastKind.GRIDPOINT, latitude, longitude)


async def fetch_for(kind: ForecastKind, params: ForecastParams) -> ForecastPayload:
    """fetch_forecast() for a ForecastParams value."""
    return await fetch_forecast(kind, params.latitude, params.longitude)
