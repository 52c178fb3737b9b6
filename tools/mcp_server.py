# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines the three MCP tools the server exposes.  Each tool is a thin
#   wrapper around core/nws.py: it turns the call arguments into a
#   ForecastParams, fetches, and encodes the payload as a ToolResult.
#
# HOW IT WORKS (the flow):
#   1. An agent calls a tool by name via MCP (e.g. "HourlyForecast")
#   2. FastMCP validates {latitude, longitude} and routes to the function below
#   3. call_forecast_tool() fetches the matching ForecastKind from NWS
#   4. tools/results.py wraps the payload: structured_content + JSON text
#   5. A ForecastError is NOT caught here.  FastMCP turns it into an error
#      result (isError: true) for that call only; the server keeps running.
#
# TOOLS (name → handler, fixed):
#   Forecast           → forecast()           → SummaryForecast
#   HourlyForecast     → hourly_forecast()    → HourlyForecast
#   GridpointForecast  → gridpoint_forecast() → GridpointForecast
#
# Registration happens at import, so both transports (see main.py) serve
# exactly the same tool set.
# =============================================================================

import logging
import sys
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.tools.tool import ToolResult
from pydantic import Field

from core.models import ForecastParams
from core.nws import ForecastKind, fetch_for
from tools.results import encode_forecast

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR: in stdio mode STDOUT carries the MCP JSON-RPC stream,
# and anything else written there corrupts it.
#
# ANSI colors:
#   CYAN for incoming requests, GREEN for response JSON,
#   YELLOW for status, RED for failures.
# =============================================================================

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"
_RESET = "\033[0m"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_failure(tool_name: str, error: Exception) -> None:
    logging.warning(f"{_RED}  ✗ {tool_name} failed: {error}{_RESET}")


def _log_response(tool_name: str, result: ToolResult) -> ToolResult:
    """Log the tool's JSON text in GREEN, then return the result."""
    logging.info(f"{_GREEN}  ← {tool_name} response: {result.content[0].text}{_RESET}")
    return result


# =============================================================================
# Create the FastMCP server instance
# =============================================================================
mcp = FastMCP(
    "mcp-nws",
    instructions="US National Weather Service MCP Server",
)

# Tool name and description per forecast kind.  These strings are part of
# the protocol surface; clients look tools up by them.
FORECAST_TOOLS: dict[ForecastKind, tuple[str, str]] = {
    ForecastKind.FORECAST: (
        "Forecast",
        "Basic 7 Day Weather Forecast",
    ),
    ForecastKind.HOURLY: (
        "HourlyForecast",
        "Basic Hourly 7 Day Weather Forecast",
    ),
    ForecastKind.GRIDPOINT: (
        "GridpointForecast",
        "Detailed 7 Day Weather Forecast with Raw Timeseries Data",
    ),
}

Latitude = Annotated[str, Field(description="The latitude of the forecast location.")]
Longitude = Annotated[str, Field(description="The longitude of the forecast location.")]


# =============================================================================
# The one handler behind all three tools
# =============================================================================
async def call_forecast_tool(kind: ForecastKind, params: ForecastParams) -> ToolResult:
    """Fetch ``kind`` for ``params`` and encode it as a ToolResult.

    Raises:
        ForecastError: the fetch (or encoding) failed.  No result is built.
    """
    tool_name, _ = FORECAST_TOOLS[kind]
    _log_request(tool_name, latitude=params.latitude, longitude=params.longitude)

    try:
        payload = await fetch_for(kind, params)
        _log_status(f"Got {type(payload).__name__} from NWS")
        result = encode_forecast(payload)
    except Exception as e:
        _log_failure(tool_name, e)
        raise

    return _log_response(tool_name, result)


# =============================================================================
# TOOL 1: Forecast
# =============================================================================
async def forecast(latitude: Latitude, longitude: Longitude) -> ToolResult:
    """Standard weather forecast covering 14 periods (day and night for 7 days)."""
    return await call_forecast_tool(ForecastKind.FORECAST, ForecastParams(latitude, longitude))


# =============================================================================
# TOOL 2: HourlyForecast
# =============================================================================
async def hourly_forecast(latitude: Latitude, longitude: Longitude) -> ToolResult:
    """Hourly weather forecast covering 7 days."""
    return await call_forecast_tool(ForecastKind.HOURLY, ForecastParams(latitude, longitude))


# =============================================================================
# TOOL 3: GridpointForecast
# =============================================================================
async def gridpoint_forecast(latitude: Latitude, longitude: Longitude) -> ToolResult:
    """Detailed 7 day forecast with raw time series data."""
    return await call_forecast_tool(ForecastKind.GRIDPOINT, ForecastParams(latitude, longitude))


# Each function is registered under its fixed tool name.  mcp.tool(...) is
# applied as a call, not a decorator, so forecast(), hourly_forecast() and
# gridpoint_forecast() remain plain coroutines at module level.
for _kind, _handler in (
    (ForecastKind.FORECAST, forecast),
    (ForecastKind.HOURLY, hourly_forecast),
    (ForecastKind.GRIDPOINT, gridpoint_forecast),
):
    _name, _description = FORECAST_TOOLS[_kind]
    mcp.tool(name=_name, description=_description)(_handler)
