"""Shared dataclasses and type definitions for fireweather."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, IntEnum


class FFMCMethod(IntEnum):
    """Hourly FFMC recurrence used by a weather stream.

    The integer values are the ones stored in the low two bits of the
    persisted options word.
    """

    VAN_WAGNER = 1
    HYBRID = 2
    LAWSON = 3


class DayMode(str, Enum):
    """How a day's weather was supplied."""

    DAILY = "daily"  # min/max summary, hourly values synthesized
    HOURLY = "hourly"  # 24 observed hours


class InvalidHandling(str, Enum):
    """What an import does with out-of-range values."""

    FAIL = "fail"
    ALLOW = "allow"
    FIX = "fix"


class ImportStatus(str, Enum):
    """Outcome of a successful import."""

    OK = "ok"
    INTERPOLATED = "interpolated"
    INVALID_DATA_ACCEPTED = "invalid_data_accepted"
    INTERPOLATE_BEFORE_INVALID_DATA = "interpolate_before_invalid_data"


@dataclass(frozen=True)
class DailyWeather:
    """Daily summary weather for one day."""

    min_temp: float  # Celsius
    max_temp: float  # Celsius
    min_ws: float  # km/h
    max_ws: float  # km/h
    rh: float  # percent, observed at the temperature maximum
    precip: float  # mm
    wd: float  # radians, Cartesian (0 = east, counter-clockwise)
    min_gust: float | None = None  # km/h
    max_gust: float | None = None  # km/h


@dataclass(frozen=True)
class HourlyWeather:
    """Weather for a single hour (or an interpolated instant)."""

    temperature: float  # Celsius
    rh: float  # percent
    precipitation: float  # mm
    wind_speed: float  # km/h
    wind_direction: float  # radians, Cartesian
    dewpoint: float  # Celsius
    wind_gust: float | None = None  # km/h
    interpolated: bool = False
    corrected: bool = False


@dataclass(frozen=True)
class DailyFWI:
    """Daily FWI codes. ``specified`` names the codes taken from user overrides."""

    ffmc: float | None
    dmc: float | None
    dc: float | None
    bui: float | None
    isi: float | None
    fwi: float | None
    specified: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class HourlyFWI:
    """Hourly FFMC, ISI and FWI."""

    ffmc: float | None
    isi: float | None
    fwi: float | None
    ffmc_specified: bool = False


@dataclass(frozen=True)
class InstantaneousValues:
    """Weather and codes at an arbitrary instant."""

    time: datetime
    weather: HourlyWeather
    hourly: HourlyFWI
    daily: DailyFWI | None


@dataclass(frozen=True)
class SunWarning:
    """A day whose sunrise or sunset could not be resolved."""

    day: date
    no_sunrise: bool
    no_sunset: bool
