"""Location, local time and sun events.

Timeline instants are naive local wall-clock datetimes: standard time plus
the location's daylight saving amount while DST is in effect. Daily FWI
observations are tied to noon local standard time (LST), which is 13:00 on
the wall clock during DST.

Sun events come from astral (NOAA solar equations).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from astral import LocationInfo
from astral.sun import noon, sunrise, sunset

logger = logging.getLogger(__name__)

HOUR = timedelta(hours=1)
DAY = timedelta(days=1)
_NO_SHIFT = timedelta(0)


@dataclass(frozen=True)
class SunTimes:
    """Sun events for one day, in local wall-clock time."""

    sunrise: datetime | None
    solar_noon: datetime
    sunset: datetime | None

    @property
    def complete(self) -> bool:
        return self.sunrise is not None and self.sunset is not None


@dataclass(frozen=True)
class Location:
    """Geographic position and local time rules of a weather stream.

    Args:
        latitude: Degrees north
        longitude: Degrees east
        utc_offset: Standard time offset from UTC
        dst_amount: Clock shift while DST is in effect
        dst_start: First day of year (1-366) with DST in effect
        dst_end: First day of year after DST ends. A start later than the
            end means the DST period wraps the new year.
    """

    latitude: float
    longitude: float
    utc_offset: timedelta = _NO_SHIFT
    dst_amount: timedelta = _NO_SHIFT
    dst_start: int | None = None
    dst_end: int | None = None

    def dst_in_effect(self, when: date | datetime) -> bool:
        if not self.dst_amount or self.dst_start is None or self.dst_end is None:
            return False
        day_of_year = when.timetuple().tm_yday
        if self.dst_start <= self.dst_end:
            return self.dst_start <= day_of_year < self.dst_end
        return day_of_year >= self.dst_start or day_of_year < self.dst_end

    def dst_offset(self, when: date | datetime) -> timedelta:
        return self.dst_amount if self.dst_in_effect(when) else _NO_SHIFT

    def to_standard(self, when: datetime) -> datetime:
        """Convert a wall-clock instant to local standard time."""
        return when - self.dst_offset(when)

    def lst_midnight(self, day_start: datetime) -> datetime:
        """Wall-clock time of standard-time midnight for the day."""
        return day_start + self.dst_offset(day_start)

    def noon_lst(self, day_start: datetime) -> datetime:
        """Wall-clock time of standard-time noon for the day."""
        return self.lst_midnight(day_start) + 12 * HOUR

    def noon_hour(self, day_start: datetime) -> int:
        return self.noon_lst(day_start).hour

    def sun_times(self, day_start: datetime) -> SunTimes:
        """Sunrise, solar noon and sunset for the day starting at ``day_start``.

        Sunrise or sunset is None when the sun does not cross the horizon
        that day.
        """
        observer = LocationInfo(
            latitude=self.latitude, longitude=self.longitude, timezone="UTC"
        ).observer
        tz = timezone(self.utc_offset)
        day = day_start.date()
        shift = self.dst_offset(day_start)

        solar_noon = noon(observer, date=day, tzinfo=tz).replace(tzinfo=None) + shift
        events: list[datetime | None] = []
        for event in (sunrise, sunset):
            try:
                events.append(
                    event(observer, date=day, tzinfo=tz).replace(tzinfo=None) + shift
                )
            except ValueError:
                logger.debug(
                    "No %s on %s at (%.3f, %.3f)",
                    event.__name__, day, self.latitude, self.longitude,
                )
                events.append(None)
        return SunTimes(sunrise=events[0], solar_noon=solar_noon, sunset=events[1])


def day_start_of(when: datetime) -> datetime:
    """Midnight of the day containing ``when``."""
    return when.replace(hour=0, minute=0, second=0, microsecond=0)


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start) / HOUR
