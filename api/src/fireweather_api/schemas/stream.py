"""Pydantic models for weather stream endpoints.

Wind directions are compass degrees (direction the wind blows from).
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from fireweather.types import FFMCMethod, ImportStatus, InvalidHandling


class LocationParams(BaseModel):
    """Station position and local time rules."""

    latitude: float = Field(..., ge=-90, le=90, description="Latitude (degrees north)")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude (degrees east)")
    utc_offset_hours: float = Field(
        default=0.0, ge=-14, le=14, description="Standard time offset from UTC (hours)"
    )
    dst_hours: float = Field(default=0.0, ge=0, le=2, description="Daylight saving shift (hours)")
    dst_start: int | None = Field(default=None, ge=1, le=366, description="First DST day of year")
    dst_end: int | None = Field(
        default=None, ge=1, le=366, description="First day of year after DST"
    )


class InitialParams(BaseModel):
    """Codes in effect before the first day."""

    ffmc: float = Field(default=85.0, ge=0, le=101, description="Fine Fuel Moisture Code")
    dmc: float = Field(default=6.0, ge=0, le=500, description="Duff Moisture Code")
    dc: float = Field(default=15.0, ge=0, le=1500, description="Drought Code")
    bui: float | None = Field(default=None, ge=0, description="Buildup Index")
    rain: float = Field(default=0.0, ge=0, description="Rain before the first day (mm)")
    hffmc: float | None = Field(default=None, ge=0, le=101, description="Hourly FFMC seed")
    hffmc_hour: float | None = Field(
        default=None, ge=0, lt=24, description="Hour of day the hourly FFMC seed applies"
    )


class OptionsParams(BaseModel):
    ffmc_method: FFMCMethod = Field(
        default=FFMCMethod.VAN_WAGNER,
        description="Hourly FFMC method (1 Van Wagner, 2 Hybrid, 3 Lawson)",
    )
    use_specified_fwi: bool = Field(default=False, description="Prefer specified codes")


class StreamCreate(BaseModel):
    """Request body for creating a weather stream."""

    location: LocationParams
    initial: InitialParams = Field(default_factory=InitialParams)
    options: OptionsParams = Field(default_factory=OptionsParams)


class SunWarningSchema(BaseModel):
    day: date
    no_sunrise: bool
    no_sunset: bool


class StreamSummary(BaseModel):
    """Stream state and valid time range."""

    stream_id: str
    days: int
    start: datetime | None = None
    end: datetime | None = None
    options: OptionsParams
    initial: InitialParams
    any_corrected: bool = False
    sun_warnings: list[SunWarningSchema] = []


class DailyWeatherSchema(BaseModel):
    """Daily summary weather."""

    min_temp: float = Field(..., ge=-50, le=60, description="Minimum temperature (C)")
    max_temp: float = Field(..., ge=-50, le=60, description="Maximum temperature (C)")
    min_ws: float = Field(..., ge=0, description="Minimum wind speed (km/h)")
    max_ws: float = Field(..., ge=0, description="Maximum wind speed (km/h)")
    rh: float = Field(..., ge=0, le=100, description="Relative humidity at the maximum (%)")
    precip: float = Field(default=0.0, ge=0, description="24-hour precipitation (mm)")
    wd: float = Field(..., ge=0, le=360, description="Wind direction (degrees, FROM)")
    min_gust: float | None = Field(default=None, ge=0, description="Minimum gust (km/h)")
    max_gust: float | None = Field(default=None, ge=0, description="Maximum gust (km/h)")


class HourlyWeatherSchema(BaseModel):
    """Weather for one hour."""

    temperature: float = Field(..., ge=-50, le=60, description="Temperature (C)")
    rh: float = Field(..., ge=0, le=100, description="Relative humidity (%)")
    wind_speed: float = Field(..., ge=0, description="Wind speed (km/h)")
    wind_direction: float = Field(..., ge=0, le=360, description="Wind direction (degrees, FROM)")
    precipitation: float = Field(default=0.0, ge=0, description="Precipitation (mm)")
    wind_gust: float | None = Field(default=None, ge=0, description="Wind gust (km/h)")
    dewpoint: float | None = Field(default=None, description="Dew point (C); derived when omitted")
    interpolated: bool = False
    corrected: bool = False


class DailyWeatherOut(BaseModel):
    """Daily summary weather as stored.

    Values accepted by an import may lie outside the input ranges.
    """

    min_temp: float
    max_temp: float
    min_ws: float
    max_ws: float
    rh: float
    precip: float
    wd: float
    min_gust: float | None = None
    max_gust: float | None = None


class HourlyWeatherOut(BaseModel):
    temperature: float
    rh: float
    wind_speed: float
    wind_direction: float
    precipitation: float
    dewpoint: float
    wind_gust: float | None = None
    interpolated: bool = False
    corrected: bool = False


class DailyCodes(BaseModel):
    ffmc: float | None = Field(default=None, ge=0, le=101)
    dmc: float | None = Field(default=None, ge=0, le=500)
    dc: float | None = Field(default=None, ge=0, le=1500)
    bui: float | None = Field(default=None, ge=0)
    isi: float | None = Field(default=None, ge=0)
    fwi: float | None = Field(default=None, ge=0)


class HourlyCodes(BaseModel):
    ffmc: float | None = Field(default=None, ge=0, le=101)
    isi: float | None = Field(default=None, ge=0)
    fwi: float | None = Field(default=None, ge=0)


class DailyUpdate(BaseModel):
    """Request body for setting a day: weather and/or specified codes."""

    weather: DailyWeatherSchema | None = None
    specified: DailyCodes | None = None


class HourlyUpdate(BaseModel):
    """Request body for setting an hour: weather and/or specified codes."""

    weather: HourlyWeatherSchema | None = None
    specified: HourlyCodes | None = None


class DailyFWISchema(BaseModel):
    """Daily codes; ``specified`` names the ones taken from overrides."""

    ffmc: float | None = None
    dmc: float | None = None
    dc: float | None = None
    bui: float | None = None
    isi: float | None = None
    fwi: float | None = None
    specified: list[str] = []


class HourlyFWISchema(BaseModel):
    ffmc: float | None = None
    isi: float | None = None
    fwi: float | None = None
    ffmc_specified: bool = False


class DailyResponse(BaseModel):
    day: date
    mode: str
    weather: DailyWeatherOut
    fwi: DailyFWISchema


class HourlyResponse(BaseModel):
    time: datetime
    weather: HourlyWeatherOut
    fwi: HourlyFWISchema
    daily: DailyFWISchema | None = None


class ImportRequest(BaseModel):
    """Weather file contents and import options."""

    text: str = Field(..., min_length=1, description="Weather file contents, header first")
    purge: bool = Field(default=False, description="Clear the stream first")
    append: bool = Field(default=True, description="Allow rows past the current end")
    overwrite: bool = Field(default=False, description="Allow rows replacing existing data")
    invalid: InvalidHandling = Field(
        default=InvalidHandling.FAIL, description="Out-of-range policy"
    )
    date_format: str | None = Field(default=None, description="strptime format of the date column")


class ImportResponse(BaseModel):
    status: ImportStatus
    format: str
    rows: int
    interpolated_hours: int
    corrected_rows: int
    warnings: list[str] = []
