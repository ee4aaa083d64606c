"""Hourly weather synthesis from daily summaries.

Based on:
    Beck, J.A. and Trevitt, A.C.F. (1989). Forecasting diurnal variations
    in meteorological parameters for predicting fire behaviour.
    Canadian Journal of Forest Research 19: 791-797.

Temperature, wind speed and gust follow curves anchored on the day's sun
events: the minimum falls at ``sunrise + alpha`` (tn) and the maximum at
``solar noon + beta`` (tx). Between tn and tx the curve is a quarter sine.
Overnight temperature decays exponentially from the previous sunset toward
the new minimum; overnight wind falls along a sine from the previous
afternoon's peak. Relative humidity follows temperature at constant
absolute humidity, and dew point is derived from both.

Hours are measured as floats from the day's local midnight; the previous
day's events therefore sit at negative offsets.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from fireweather.options import CurveParameters, DiurnalParameters
from fireweather.types import SunWarning
from fireweather.weather.day import HOURS_PER_DAY, DayRecord
from fireweather.weather.location import DAY, Location, hours_between
from fireweather.weather.timeline import Timeline

logger = logging.getLogger(__name__)

HALF_PI = math.pi / 2.0


@dataclass(frozen=True)
class DiurnalCurve:
    """One day's curve for a single channel.

    Args:
        low: Daily minimum
        high: Daily maximum
        tn: Hour of the minimum
        tx: Hour of the maximum
    """

    low: float
    high: float
    tn: float
    tx: float

    def rise(self, t: float) -> float:
        """Sine rise from the minimum at tn to the maximum at tx."""
        fraction = (t - self.tn) / (self.tx - self.tn)
        return self.low + (self.high - self.low) * math.sin(fraction * HALF_PI)

    def approach(self, t: float, ts: float, start_value: float, gamma: float) -> float:
        """Exponential approach from ``start_value`` at ts to the minimum at tn."""
        fraction = (t - ts) / (self.tn - ts)
        return self.low + (start_value - self.low) * math.exp(fraction * gamma)

    def fall(self, t: float, peak_time: float, peak_value: float) -> float:
        """Sine fall from ``peak_value`` at ``peak_time`` to the minimum at tn."""
        fraction = (t - peak_time) / (self.tn - peak_time)
        return peak_value - (peak_value - self.low) * math.sin(fraction * HALF_PI)


def rh_constant(max_temp: float, rh: float) -> float:
    """Absolute humidity term that reproduces ``rh`` (%) at ``max_temp``."""
    svp = 6.108 * math.exp(max_temp * 17.27 / (max_temp + 237.3))
    vp = svp * rh * 0.01
    qt = 217.0 * vp / (273.17 + max_temp)
    return 100.0 * qt / (6.108 * 217.0)


def rh_from_temperature(constant: float, temp: float) -> float:
    """Relative humidity (%) at ``temp`` for a fixed absolute humidity."""
    rh = constant * (273.17 + temp) / math.exp(17.27 * temp / (temp + 237.3))
    return min(max(rh, 0.0), 100.0)


def dewpoint(temp: float, rh: float) -> float:
    """Dew point (Celsius) from temperature and relative humidity (%)."""
    vps = 0.6112 * 10.0 ** (7.5 * temp / (237.7 + temp))
    vp = rh * 0.01 * vps
    if vp <= 0.0:
        return -273.0
    x = math.log10(vp / 0.6112)
    return 237.7 * x / (7.5 - x)


def value_at(values: list[float], hour: float) -> float:
    """Linear interpolation of an hourly list at a fractional hour."""
    hour = min(max(hour, 0.0), float(HOURS_PER_DAY - 1))
    index = int(hour)
    if index >= HOURS_PER_DAY - 1:
        return values[-1]
    frac = hour - index
    return values[index] * (1.0 - frac) + values[index + 1] * frac


def _fill(values: list[float], curve: Callable[[float], float], stop: float) -> int:
    """Write ``curve`` for hours up to ``stop`` and repeat the last value after.

    Returns:
        Number of hours written from the curve
    """
    count = 0
    while count < HOURS_PER_DAY and count <= stop:
        values[count] = curve(float(count))
        count += 1
    if count == 0:
        return 0
    for i in range(count, HOURS_PER_DAY):
        values[i] = values[count - 1]
    return count


class DiurnalSynthesizer:
    """Expands daily-summary days of a timeline into hourly values.

    Hourly days are left untouched, except that their dew points are
    derived where not specified.
    """

    def __init__(self, params: DiurnalParameters, location: Location):
        self.params = params
        self.location = location

    def synthesize(self, timeline: Timeline) -> list[SunWarning]:
        """Fill hourly values for every daily day, in chronological order.

        Returns:
            Days whose sunrise or sunset could not be resolved. Those days
            keep whatever hourly temperature and wind they already hold.
        """
        warnings = self.resolve_anchors(timeline)

        for index, day in enumerate(timeline.days):
            if day.is_hourly:
                continue
            self._precip_and_direction(day)
            if not day.anchored:
                continue
            prev = timeline.yesterday(index)
            self._temperature(day, prev)
            self._wind(day, prev, gust=False)
            if self._has_gust(day):
                self._wind(day, prev, gust=True)

        if timeline.days:
            self._close_last_day(timeline.days[-1])

        for day in timeline.days:
            if not day.is_hourly:
                self._humidity(day)
            self._dewpoints(day)
        return warnings

    def resolve_anchors(self, timeline: Timeline) -> list[SunWarning]:
        warnings = []
        for day in timeline.days:
            self._anchor(day)
            if day.sunrise is None or day.sunset is None:
                warnings.append(
                    SunWarning(
                        day=day.day_start.date(),
                        no_sunrise=day.sunrise is None,
                        no_sunset=day.sunset is None,
                    )
                )
        if warnings:
            logger.warning("%d day(s) without sunrise or sunset", len(warnings))
        return warnings

    def _anchor(self, day: DayRecord) -> None:
        sun = self.location.sun_times(day.day_start)
        day.sunrise = sun.sunrise
        day.solar_noon = sun.solar_noon
        day.sunset = sun.sunset

    def _anchors(self, day: DayRecord) -> tuple[float, float, float]:
        return (
            hours_between(day.day_start, day.sunrise),
            hours_between(day.day_start, day.solar_noon),
            hours_between(day.day_start, day.sunset),
        )

    @staticmethod
    def _has_gust(day: DayRecord) -> bool:
        return day.daily.min_gust is not None and day.daily.max_gust is not None

    def _curve(
        self, day: DayRecord, params: CurveParameters, low: float, high: float
    ) -> DiurnalCurve:
        rise, noon, _ = self._anchors(day)
        return DiurnalCurve(low=low, high=high, tn=rise + params.alpha, tx=noon + params.beta)

    def _precip_and_direction(self, day: DayRecord) -> None:
        noon = self.location.noon_hour(day.day_start)
        day.precipitation = [0.0] * HOURS_PER_DAY
        day.precipitation[noon] = day.daily.precip
        day.wind_direction = [day.daily.wd] * HOURS_PER_DAY
        gust = self._has_gust(day)
        for flags in day.flags:
            flags.gust_specified = gust
            flags.dewpoint_specified = False

    def _temperature(self, day: DayRecord, prev: DayRecord | None) -> None:
        params = self.params.temperature
        summary = day.daily
        _, _, sunset = self._anchors(day)
        curve = self._curve(day, params, summary.min_temp, summary.max_temp)
        if curve.tx <= curve.tn:
            logger.debug("Degenerate temperature curve on %s", day.day_start.date())
            return

        if prev is None:
            ts = sunset - 24.0
            start_value = curve.rise(sunset)
        else:
            ts = self._prev_event(day, prev.sunset, sunset)
            start_value = self._sunset_temperature(prev, ts + 24.0)

        def temperature(t: float) -> float:
            if t < curve.tn:
                return curve.approach(t, ts, start_value, params.gamma)
            return curve.rise(t)

        _fill(day.temperature, temperature, sunset)

        if prev is not None and not prev.is_hourly and prev.anchored:
            for hour in range(int(math.floor(ts + 24.0)) + 1, HOURS_PER_DAY):
                prev.temperature[hour] = temperature(hour - 24.0)

    def _sunset_temperature(self, prev: DayRecord, sunset: float) -> float:
        if prev.is_hourly or not prev.anchored:
            return value_at(prev.temperature, sunset)
        summary = prev.daily
        curve = self._curve(prev, self.params.temperature, summary.min_temp, summary.max_temp)
        return curve.rise(sunset)

    def _wind(self, day: DayRecord, prev: DayRecord | None, gust: bool) -> None:
        params = self.params.wind
        summary = day.daily
        if gust:
            low, high, values = summary.min_gust, summary.max_gust, day.wind_gust
        else:
            low, high, values = summary.min_ws, summary.max_ws, day.wind_speed
        _, noon, _ = self._anchors(day)
        curve = self._curve(day, params, low, high)
        if curve.tx <= curve.tn:
            logger.debug("Degenerate wind curve on %s", day.day_start.date())
            return

        if prev is None:
            peak_time = noon - 24.0 + params.beta
            peak_value = high
        else:
            peak_time = self._prev_event(day, prev.solar_noon, noon) + params.beta
            peak_value = self._previous_peak(prev, peak_time + 24.0, gust)

        def wind(t: float) -> float:
            if t < curve.tn:
                return max(curve.fall(t, peak_time, peak_value), 0.0)
            return max(curve.rise(t), 0.0)

        _fill(values, wind, curve.tx)

        if (
            prev is not None
            and not prev.is_hourly
            and prev.anchored
            and (not gust or self._has_gust(prev))
        ):
            prev_values = prev.wind_gust if gust else prev.wind_speed
            for hour in range(int(math.floor(peak_time + 24.0)) + 1, HOURS_PER_DAY):
                prev_values[hour] = wind(hour - 24.0)

    def _previous_peak(self, prev: DayRecord, peak_time: float, gust: bool) -> float:
        values = prev.wind_gust if gust else prev.wind_speed
        if prev.is_hourly or not prev.anchored:
            return value_at(values, peak_time)
        high = prev.daily.max_gust if gust else prev.daily.max_ws
        return value_at(values, peak_time) if high is None else high

    @staticmethod
    def _prev_event(day: DayRecord, event: datetime | None, fallback: float) -> float:
        """Hour of a previous-day event relative to ``day``'s midnight."""
        if event is None:
            return fallback - 24.0
        return hours_between(day.day_start, event)

    def _close_last_day(self, last: DayRecord) -> None:
        """Fill the last daily day's evening from a copy of itself on the next day."""
        if last.is_hourly or not last.anchored:
            return
        ghost = DayRecord(day_start=last.day_start + DAY, daily=last.daily)
        self._anchor(ghost)
        if not ghost.anchored:
            return
        self._temperature(ghost, last)
        self._wind(ghost, last, gust=False)
        if self._has_gust(ghost):
            self._wind(ghost, last, gust=True)

    @staticmethod
    def _humidity(day: DayRecord) -> None:
        constant = rh_constant(day.daily.max_temp, day.daily.rh)
        day.rh = [rh_from_temperature(constant, t) for t in day.temperature]

    @staticmethod
    def _dewpoints(day: DayRecord) -> None:
        for hour in range(HOURS_PER_DAY):
            if not day.flags[hour].dewpoint_specified:
                day.dewpoint[hour] = dewpoint(day.temperature[hour], day.rh[hour])
