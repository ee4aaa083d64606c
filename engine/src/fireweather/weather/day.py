"""Per-day weather and FWI records held by a timeline."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime

from fireweather.types import DailyWeather, DayMode

HOURS_PER_DAY = 24

DAILY_CODES = ("ffmc", "dmc", "dc", "bui", "isi", "fwi")
HOURLY_CODES = ("ffmc", "isi", "fwi")


def _hours(value: float = 0.0) -> list[float]:
    return [value] * HOURS_PER_DAY


def _empty_summary() -> DailyWeather:
    return DailyWeather(
        min_temp=0.0, max_temp=0.0, min_ws=0.0, max_ws=0.0, rh=0.0, precip=0.0, wd=0.0
    )


@dataclass
class HourFlags:
    gust_specified: bool = False
    dewpoint_specified: bool = False
    interpolated: bool = False
    corrected: bool = False


@dataclass
class DailyCodes:
    """The six daily codes; None means unset."""

    ffmc: float | None = None
    dmc: float | None = None
    dc: float | None = None
    bui: float | None = None
    isi: float | None = None
    fwi: float | None = None

    def clear(self) -> None:
        for f in fields(self):
            setattr(self, f.name, None)


@dataclass
class HourlyCodes:
    ffmc: float | None = None
    isi: float | None = None
    fwi: float | None = None


def _hourly_codes() -> list[HourlyCodes]:
    return [HourlyCodes() for _ in range(HOURS_PER_DAY)]


@dataclass
class FWIRecord:
    """User-specified and calculated codes for one day.

    ``calculated`` and ``calculated_hourly`` are a cache rebuilt by the FWI
    chain; only the ``specified`` halves are inputs.
    """

    specified: DailyCodes = field(default_factory=DailyCodes)
    calculated: DailyCodes = field(default_factory=DailyCodes)
    specified_hourly: list[HourlyCodes] = field(default_factory=_hourly_codes)
    calculated_hourly: list[HourlyCodes] = field(default_factory=_hourly_codes)

    def clear_calculated(self) -> None:
        self.calculated.clear()
        self.calculated_hourly = _hourly_codes()


@dataclass
class DayRecord:
    """One calendar day of a weather stream.

    For DAILY days the hourly lists are synthesized from ``daily`` on every
    recalculation. For HOURLY days they are the observations themselves and
    ``daily`` is ignored.
    """

    day_start: datetime
    mode: DayMode = DayMode.DAILY
    daily: DailyWeather = field(default_factory=_empty_summary)
    temperature: list[float] = field(default_factory=_hours)
    dewpoint: list[float] = field(default_factory=_hours)
    rh: list[float] = field(default_factory=_hours)
    wind_speed: list[float] = field(default_factory=_hours)
    wind_gust: list[float] = field(default_factory=_hours)
    wind_direction: list[float] = field(default_factory=_hours)
    precipitation: list[float] = field(default_factory=_hours)
    flags: list[HourFlags] = field(
        default_factory=lambda: [HourFlags() for _ in range(HOURS_PER_DAY)]
    )
    from_file: bool = False
    sunrise: datetime | None = None
    solar_noon: datetime | None = None
    sunset: datetime | None = None
    fwi: FWIRecord = field(default_factory=FWIRecord)

    @property
    def is_hourly(self) -> bool:
        return self.mode is DayMode.HOURLY

    @property
    def anchored(self) -> bool:
        return (
            self.sunrise is not None
            and self.solar_noon is not None
            and self.sunset is not None
        )

    def hour_of(self, when: datetime) -> int:
        return int((when - self.day_start).total_seconds() // 3600)

    def any_corrected(self) -> bool:
        return any(f.corrected for f in self.flags)
