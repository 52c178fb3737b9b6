# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the shape of every piece of forecast data that
# flows through the server.  They carry no network behavior: the fetcher in
# core/nws.py builds them, the tools/ layer serializes them.
#
# WIRE NAMES:
#   Fields are snake_case in Python and camelCase on the wire, matching the
#   NWS document keys ("startTime", "isDaytime", "validTime", ...).  to_dict()
#   does the renaming through asdict(dict_factory=...), so nested dataclasses
#   are converted in one pass.
#
# QUANTITATIVE VALUES:
#   NWS sends some numbers either bare (75) or as a QuantitativeValue
#   ({"unitCode": "wmoUnit:degF", "value": 75}).  Both collapse to the scalar.
#   Numbers keep their JSON type: an integer stays an integer.
# =============================================================================

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Optional


def _camel(name: str) -> str:
    """snake_case → camelCase ("start_time" → "startTime")."""
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _camel_dict(items: list[tuple[str, Any]]) -> dict[str, Any]:
    return {_camel(key): value for key, value in items}


def _quantity(raw: Any) -> Optional[float]:
    """Normalize a bare number or a QuantitativeValue object to a scalar."""
    if isinstance(raw, dict):
        raw = raw.get("value")
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    return raw


def _unwrap(data: dict) -> dict:
    # GeoJSON documents nest everything under "properties"; JSON-LD is flat.
    props = data.get("properties")
    return props if isinstance(props, dict) else data


class _WireModel:
    """Mixin: render a dataclass as a camelCase, JSON-ready dict."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self, dict_factory=_camel_dict)


# -----------------------------------------------------------------------------
# ForecastParams — the coordinate a tool is asked about
# -----------------------------------------------------------------------------
# Both values are opaque strings.  Nothing here checks that they are real
# coordinates; api.weather.gov rejects bad ones and that rejection becomes a
# ForecastError.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ForecastParams:
    """Latitude and longitude to obtain a forecast for."""

    latitude: str
    longitude: str


# -----------------------------------------------------------------------------
# Points — result of resolving a coordinate (/points/{lat},{lon})
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Points(_WireModel):
    """NWS metadata for a coordinate: office, grid cell and endpoint links."""

    id: str = ""
    cwa: str = ""
    forecast_office: str = ""
    grid_id: str = ""
    grid_x: Optional[int] = None
    grid_y: Optional[int] = None
    forecast: str = ""                 # → SummaryForecast
    forecast_hourly: str = ""          # → HourlyForecast
    forecast_grid_data: str = ""       # → GridpointForecast
    observation_stations: str = ""
    time_zone: str = ""
    radar_station: str = ""

    @classmethod
    def from_json(cls, data: dict) -> "Points":
        data = _unwrap(data)
        return cls(
            id=data.get("@id") or data.get("id") or "",
            cwa=data.get("cwa") or "",
            forecast_office=data.get("forecastOffice") or "",
            grid_id=data.get("gridId") or "",
            grid_x=data.get("gridX"),
            grid_y=data.get("gridY"),
            forecast=data.get("forecast") or "",
            forecast_hourly=data.get("forecastHourly") or "",
            forecast_grid_data=data.get("forecastGridData") or "",
            observation_stations=data.get("observationStations") or "",
            time_zone=data.get("timeZone") or "",
            radar_station=data.get("radarStation") or "",
        )


# -----------------------------------------------------------------------------
# ForecastPeriod — one entry of a summary (12h) or hourly forecast
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ForecastPeriod(_WireModel):
    """A single forecast period as published by NWS."""

    number: int = 0
    name: str = ""                     # "Tonight", "Wednesday"; empty for hourly
    start_time: str = ""
    end_time: str = ""
    is_daytime: bool = False
    temperature: Optional[float] = None
    temperature_unit: str = ""
    temperature_trend: Optional[str] = None
    probability_of_precipitation: Optional[float] = None
    dewpoint: Optional[float] = None
    relative_humidity: Optional[float] = None
    wind_speed: Any = ""
    wind_direction: str = ""
    icon: str = ""
    short_forecast: str = ""
    detailed_forecast: str = ""

    @classmethod
    def from_json(cls, data: dict) -> "ForecastPeriod":
        return cls(
            number=data.get("number") or 0,
            name=data.get("name") or "",
            start_time=data.get("startTime") or "",
            end_time=data.get("endTime") or "",
            is_daytime=bool(data.get("isDaytime", False)),
            temperature=_quantity(data.get("temperature")),
            temperature_unit=data.get("temperatureUnit") or "",
            temperature_trend=data.get("temperatureTrend"),
            probability_of_precipitation=_quantity(data.get("probabilityOfPrecipitation")),
            dewpoint=_quantity(data.get("dewpoint")),
            relative_humidity=_quantity(data.get("relativeHumidity")),
            wind_speed=data.get("windSpeed") or "",
            wind_direction=data.get("windDirection") or "",
            icon=data.get("icon") or "",
            short_forecast=data.get("shortForecast") or "",
            detailed_forecast=data.get("detailedForecast") or "",
        )


@dataclass(frozen=True)
class _PeriodForecast(_WireModel):
    updated: str = ""
    units: str = ""
    forecast_generator: str = ""
    generated_at: str = ""
    update_time: str = ""
    valid_times: str = ""
    elevation: Optional[float] = None
    periods: list[ForecastPeriod] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict):
        data = _unwrap(data)
        return cls(
            updated=data.get("updated") or "",
            units=data.get("units") or "",
            forecast_generator=data.get("forecastGenerator") or "",
            generated_at=data.get("generatedAt") or "",
            update_time=data.get("updateTime") or "",
            valid_times=data.get("validTimes") or "",
            elevation=_quantity(data.get("elevation")),
            periods=[ForecastPeriod.from_json(p) for p in data.get("periods") or []],
        )


@dataclass(frozen=True)
class SummaryForecast(_PeriodForecast):
    """Basic 7 day forecast: up to 14 day/night periods."""


@dataclass(frozen=True)
class HourlyForecast(_PeriodForecast):
    """Hourly forecast covering 7 days."""


# -----------------------------------------------------------------------------
# Gridpoint time series — the raw numeric forecast behind the text products
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class GridpointValue(_WireModel):
    valid_time: str = ""               # ISO 8601 interval, "2025-07-10T06:00:00+00:00/PT1H"
    value: Optional[float] = None

    @classmethod
    def from_json(cls, data: dict) -> "GridpointValue":
        return cls(valid_time=data.get("validTime") or "", value=_quantity(data.get("value")))


@dataclass(frozen=True)
class GridpointSeries(_WireModel):
    uom: str = ""
    values: list[GridpointValue] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> "GridpointSeries":
        if not isinstance(data, dict):
            return cls()
        return cls(
            uom=data.get("uom") or "",
            values=[GridpointValue.from_json(v) for v in data.get("values") or [] if isinstance(v, dict)],
        )


@dataclass(frozen=True)
class GridpointForecast(_WireModel):
    """Detailed 7 day forecast as named numeric time series."""

    updated: str = ""
    update_time: str = ""
    valid_times: str = ""
    elevation: Optional[float] = None
    grid_id: str = ""
    grid_x: Optional[int] = None
    grid_y: Optional[int] = None

    temperature: GridpointSeries = field(default_factory=GridpointSeries)
    dewpoint: GridpointSeries = field(default_factory=GridpointSeries)
    max_temperature: GridpointSeries = field(default_factory=GridpointSeries)
    min_temperature: GridpointSeries = field(default_factory=GridpointSeries)
    relative_humidity: GridpointSeries = field(default_factory=GridpointSeries)
    apparent_temperature: GridpointSeries = field(default_factory=GridpointSeries)
    heat_index: GridpointSeries = field(default_factory=GridpointSeries)
    wind_chill: GridpointSeries = field(default_factory=GridpointSeries)
    sky_cover: GridpointSeries = field(default_factory=GridpointSeries)
    wind_direction: GridpointSeries = field(default_factory=GridpointSeries)
    wind_speed: GridpointSeries = field(default_factory=GridpointSeries)
    wind_gust: GridpointSeries = field(default_factory=GridpointSeries)
    probability_of_precipitation: GridpointSeries = field(default_factory=GridpointSeries)
    quantitative_precipitation: GridpointSeries = field(default_factory=GridpointSeries)
    ice_accumulation: GridpointSeries = field(default_factory=GridpointSeries)
    snowfall_amount: GridpointSeries = field(default_factory=GridpointSeries)
    snow_level: GridpointSeries = field(default_factory=GridpointSeries)
    visibility: GridpointSeries = field(default_factory=GridpointSeries)

    @classmethod
    def from_json(cls, data: dict) -> "GridpointForecast":
        data = _unwrap(data)
        series = {
            f.name: GridpointSeries.from_json(data.get(_camel(f.name)))
            for f in fields(cls)
            if f.type is GridpointSeries or f.type == "GridpointSeries"
        }
        return cls(
            updated=data.get("updated") or "",
            update_time=data.get("updateTime") or "",
            valid_times=data.get("validTimes") or "",
            elevation=_quantity(data.get("elevation")),
            grid_id=data.get("gridId") or "",
            grid_x=data.get("gridX"),
            grid_y=data.get("gridY"),
            **series,
        )
