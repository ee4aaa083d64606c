"""Day-by-day FWI computation over a timeline.

Daily codes are computed from the standard-time noon observation of each
day. Hourly FFMC follows one of three recurrences (Van Wagner, Hybrid,
Lawson) and feeds hourly ISI and FWI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from fireweather.fwi.calculator import SECONDS_PER_HOUR, FWICalculator
from fireweather.options import InitialConditions, Options
from fireweather.types import FFMCMethod
from fireweather.weather.day import HOURS_PER_DAY, DayRecord
from fireweather.weather.location import HOUR, Location
from fireweather.weather.timeline import Timeline

logger = logging.getLogger(__name__)

RAIN_WINDOW_HOURS = 24
HYBRID_WINDOW_HOURS = 48


@dataclass(frozen=True)
class _Carry:
    """Daily codes in effect before a day's noon observation."""

    ffmc: float
    dmc: float
    dc: float
    bui: float


def rain_ending_at(timeline: Timeline, end: datetime, hours: int) -> list[float]:
    """Hourly rain for ``hours`` hours ending at ``end``, newest first.

    Hours outside the timeline's valid range count as dry.
    """
    rain = []
    for k in range(hours):
        when = end - k * HOUR
        rain.append(timeline.precip_at(when) if timeline.contains(when) else 0.0)
    return rain


def daily_rain(
    timeline: Timeline, location: Location, index: int, initial_rain: float = 0.0
) -> float:
    """Rain (mm) feeding the daily codes of day ``index``.

    Daily-summary days report their own total. Hourly days sum the 24 hours
    ending at standard-time noon; on the first day that window is cut at the
    stream start and the initial rain stands in for the hours before it.
    """
    day = timeline.days[index]
    if not day.is_hourly:
        return day.daily.precip
    noon = location.noon_lst(day.day_start)
    rain = sum(rain_ending_at(timeline, noon, RAIN_WINDOW_HOURS))
    if index == 0:
        rain += initial_rain
    return rain


class FWIChain:
    """Computes the calculated codes of every day of a timeline.

    Any code the caller specified replaces the calculated one when
    ``options.use_specified_fwi`` is set; later days and hours then build
    on the specified value.
    """

    def __init__(
        self,
        timeline: Timeline,
        location: Location,
        options: Options,
        initial: InitialConditions,
    ):
        self.timeline = timeline
        self.location = location
        self.options = options
        self.initial = initial
        self.calc = FWICalculator(latitude=location.latitude)

    def run(self) -> None:
        seeds = self.initial
        bui = seeds.bui if seeds.bui is not None else self.calc.calculate_bui(seeds.dmc, seeds.dc)
        carry = _Carry(ffmc=seeds.ffmc, dmc=seeds.dmc, dc=seeds.dc, bui=bui)

        for index, day in enumerate(self.timeline.days):
            day.fwi.clear_calculated()
            today = self._daily(index, day, carry)
            self._hourly_ffmc(index, day, carry, today)
            self._hourly_indices(index, day, carry, today)
            carry = today

        logger.debug("FWI chain ran over %d day(s)", len(self.timeline))

    def _specified(self, value: float | None, calculate) -> float:
        if self.options.use_specified_fwi and value is not None:
            return value
        return calculate()

    def _noon_in_range(self, index: int, noon: int) -> bool:
        return self.timeline.first_hour_of(index) <= noon <= self.timeline.last_hour_of(index)

    def _daily(self, index: int, day: DayRecord, carry: _Carry) -> _Carry:
        """Daily codes for ``day``.

        Without a noon reading the day reports ``carry`` unchanged, with no ISI
        or FWI of its own.
        """
        out = day.fwi.calculated
        noon = self.location.noon_hour(day.day_start)
        if not self._noon_in_range(index, noon):
            logger.debug("No noon observation on %s", day.day_start.date())
            out.ffmc, out.dmc, out.dc, out.bui = carry.ffmc, carry.dmc, carry.dc, carry.bui
            out.isi = out.fwi = None
            return carry

        calc = self.calc
        spec = day.fwi.specified
        temp = day.temperature[noon]
        rh = day.rh[noon]
        wind = day.wind_speed[noon]
        rain = daily_rain(self.timeline, self.location, index, self.initial.rain)
        month = day.day_start.month

        dc = self._specified(spec.dc, lambda: calc.calculate_dc(temp, rain, month, carry.dc))
        dmc = self._specified(
            spec.dmc, lambda: calc.calculate_dmc(temp, rh, rain, month, carry.dmc)
        )
        bui = self._specified(spec.bui, lambda: calc.calculate_bui(dmc, dc))
        ffmc = self._specified(
            spec.ffmc, lambda: calc.calculate_ffmc(temp, rh, wind, rain, carry.ffmc)
        )
        isi = self._specified(spec.isi, lambda: calc.calculate_isi(ffmc, wind))
        fwi = self._specified(spec.fwi, lambda: calc.calculate_fwi(isi, bui))

        out.ffmc, out.dmc, out.dc, out.bui, out.isi, out.fwi = ffmc, dmc, dc, bui, isi, fwi
        return _Carry(ffmc=ffmc, dmc=dmc, dc=dc, bui=bui)

    def _seconds_into_day(self, day: DayRecord, hour: int) -> float:
        """Seconds from standard-time midnight to the hour."""
        when = day.day_start + hour * HOUR
        return (when - self.location.lst_midnight(day.day_start)).total_seconds()

    def _previous_hour(self, index: int, day: DayRecord, hour: int) -> float | None:
        if hour > 0:
            return day.fwi.calculated_hourly[hour - 1].ffmc
        yesterday = self.timeline.yesterday(index)
        if yesterday is None:
            return None
        return yesterday.fwi.calculated_hourly[HOURS_PER_DAY - 1].ffmc

    def _set_hourly_ffmc(self, day: DayRecord, hour: int, calculate) -> None:
        specified = day.fwi.specified_hourly[hour].ffmc
        day.fwi.calculated_hourly[hour].ffmc = self._specified(specified, calculate)

    def _hourly_ffmc(self, index: int, day: DayRecord, carry: _Carry, today: _Carry) -> None:
        first = self.timeline.first_hour_of(index)
        last = self.timeline.last_hour_of(index)
        method = self.options.ffmc_method
        calc = self.calc

        def lawson(hour: int) -> float:
            return calc.calculate_lawson_ffmc(
                carry.ffmc, today.ffmc, self._seconds_into_day(day, hour)
            )

        start = first
        if index == 0:
            seed_hour, seed_value = self._seed(day, today)
            seed_hour = min(max(seed_hour, first), last)
            self._set_hourly_ffmc(day, seed_hour, lambda: seed_value)
            for hour in range(seed_hour - 1, first - 1, -1):
                later = day.fwi.calculated_hourly[hour + 1].ffmc
                if method is FFMCMethod.VAN_WAGNER:
                    # Weather of the hour that ends at ``later``.
                    step = hour + 1
                    self._set_hourly_ffmc(
                        day,
                        hour,
                        lambda: calc.calculate_previous_hourly_ffmc(
                            day.temperature[step],
                            day.rh[step],
                            day.wind_speed[step],
                            day.precipitation[step],
                            later,
                        ),
                    )
                else:
                    self._set_hourly_ffmc(day, hour, lambda: lawson(hour))
            start = seed_hour + 1

        for hour in range(start, last + 1):
            previous = self._previous_hour(index, day, hour)
            if previous is None:
                previous = carry.ffmc
            temp = day.temperature[hour]
            rh = day.rh[hour]
            wind = day.wind_speed[hour]
            if method is FFMCMethod.VAN_WAGNER:
                rain = day.precipitation[hour]
                self._set_hourly_ffmc(
                    day,
                    hour,
                    lambda: calc.calculate_hourly_ffmc(temp, rh, wind, rain, previous),
                )
            elif method is FFMCMethod.LAWSON:
                self._set_hourly_ffmc(day, hour, lambda: lawson(hour))
            else:
                rain48 = rain_ending_at(
                    self.timeline, day.day_start + hour * HOUR, HYBRID_WINDOW_HOURS
                )
                seconds = self._seconds_into_day(day, hour)
                self._set_hourly_ffmc(
                    day,
                    hour,
                    lambda: calc.calculate_hybrid_ffmc(
                        carry.ffmc, today.ffmc, previous, rain48, temp, rh, wind, seconds
                    ),
                )

    def _seed(self, day: DayRecord, today: _Carry) -> tuple[int, float]:
        """Hour and value that start the hourly FFMC recurrence."""
        seeds = self.initial
        if seeds.hffmc_time is not None and self.options.ffmc_method is FFMCMethod.VAN_WAGNER:
            return int(seeds.hffmc_time // HOUR), seeds.hourly_ffmc
        return self.location.noon_hour(day.day_start), today.ffmc

    def _hourly_indices(self, index: int, day: DayRecord, carry: _Carry, today: _Carry) -> None:
        noon = self.location.noon_hour(day.day_start)
        first = self.timeline.first_hour_of(index)
        for hour in range(first, self.timeline.last_hour_of(index) + 1):
            calculated = day.fwi.calculated_hourly[hour]
            specified = day.fwi.specified_hourly[hour]
            ffmc = calculated.ffmc
            wind = day.wind_speed[hour]
            bui = carry.bui if hour < noon else today.bui
            calculated.isi = self._specified(
                specified.isi,
                lambda: self.calc.calculate_isi(ffmc, wind, SECONDS_PER_HOUR),
            )
            isi = calculated.isi
            calculated.fwi = self._specified(
                specified.fwi, lambda: self.calc.calculate_fwi(isi, bui)
            )

