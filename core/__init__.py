# =============================================================================
# core/__init__.py
# =============================================================================
# Forecast data and the NWS fetcher.
#
# Nothing in this package imports FastMCP or any MCP type.  models.py holds
# the payload dataclasses; nws.py talks to api.weather.gov and raises
# ForecastError on every kind of failure.
# =============================================================================
