"""Tests for diurnal weather synthesis."""

from dataclasses import replace
from datetime import timedelta

import pytest

from fireweather.options import DiurnalParameters
from fireweather.weather.diurnal import (
    DiurnalCurve,
    DiurnalSynthesizer,
    dewpoint,
    rh_constant,
    rh_from_temperature,
    value_at,
)
from fireweather.weather.location import Location
from fireweather.weather.timeline import Timeline

EPS = 1e-9


@pytest.fixture
def curve():
    return DiurnalCurve(low=10.0, high=20.0, tn=4.0, tx=15.0)


@pytest.fixture
def synthesized(location, july_first, summer_day):
    """A one-day timeline expanded to hourly values."""
    timeline = Timeline()
    day = timeline.get_or_create_day(july_first, allow_create=True)
    day.daily = summer_day
    DiurnalSynthesizer(DiurnalParameters(), location).synthesize(timeline)
    return day


class TestCurve:
    def test_rise_hits_minimum_and_maximum(self, curve):
        assert curve.rise(curve.tn) == 10.0
        assert curve.rise(curve.tx) == pytest.approx(20.0)

    def test_approach_ends_at_minimum(self, curve):
        assert curve.approach(-3.0, -3.0, 17.0, -2.2) == 17.0
        at_minimum = curve.approach(curve.tn, -3.0, 17.0, -2.2)
        assert at_minimum == pytest.approx(10.0 + 7.0 * 0.1108, rel=1e-3)

    def test_fall_from_peak(self, curve):
        assert curve.fall(-9.0, -9.0, 20.0) == 20.0
        assert curve.fall(curve.tn, -9.0, 20.0) == pytest.approx(10.0)


class TestHumidity:
    def test_constant_reproduces_rh_at_max_temp(self):
        constant = rh_constant(25.0, 40.0)
        assert rh_from_temperature(constant, 25.0) == pytest.approx(40.0)

    def test_cooler_air_is_more_humid(self):
        constant = rh_constant(25.0, 40.0)
        assert rh_from_temperature(constant, 10.0) > 40.0

    def test_rh_is_capped(self):
        constant = rh_constant(25.0, 90.0)
        assert rh_from_temperature(constant, -5.0) == 100.0

    def test_saturated_dewpoint_is_temperature(self):
        assert dewpoint(20.0, 100.0) == pytest.approx(20.0, abs=0.01)

    def test_dry_air_dewpoint(self):
        assert dewpoint(20.0, 0.0) == -273.0


def test_value_at_interpolates():
    values = [float(h) for h in range(24)]
    assert value_at(values, 4.25) == pytest.approx(4.25)
    assert value_at(values, 30.0) == 23.0


class TestSynthesis:
    def test_temperature_within_daily_range(self, synthesized, summer_day):
        for t in synthesized.temperature:
            assert summer_day.min_temp - EPS <= t <= summer_day.max_temp + EPS

    def test_warmest_in_afternoon(self, synthesized):
        warmest = synthesized.temperature.index(max(synthesized.temperature))
        assert 13 <= warmest <= 17

    def test_wind_within_daily_range(self, synthesized, summer_day):
        for ws in synthesized.wind_speed:
            assert summer_day.min_ws - EPS <= ws <= summer_day.max_ws + EPS

    def test_rain_falls_at_noon_lst(self, synthesized, summer_day):
        assert synthesized.precipitation[12] == summer_day.precip
        assert sum(synthesized.precipitation) == summer_day.precip

    def test_direction_is_constant(self, synthesized, summer_day):
        assert synthesized.wind_direction == [summer_day.wd] * 24

    def test_humidity_tracks_temperature(self, synthesized):
        temps = synthesized.temperature
        warm = temps.index(max(temps))
        cool = temps.index(min(temps))
        assert synthesized.rh[warm] < synthesized.rh[cool]
        assert all(0.0 <= rh <= 100.0 for rh in synthesized.rh)

    def test_no_gusts_without_gust_summary(self, synthesized):
        assert not any(f.gust_specified for f in synthesized.flags)

    def test_gusts_follow_gust_summary(self, location, july_first, summer_day):
        timeline = Timeline()
        day = timeline.get_or_create_day(july_first, allow_create=True)
        day.daily = replace(summer_day, min_gust=10.0, max_gust=30.0)
        DiurnalSynthesizer(DiurnalParameters(), location).synthesize(timeline)
        assert all(f.gust_specified for f in day.flags)
        assert all(10.0 - EPS <= g <= 30.0 + EPS for g in day.wind_gust)

    def test_second_day_continues_from_first(self, location, july_first, summer_day):
        """Overnight temperature decays from the first day's evening."""
        timeline = Timeline()
        first = timeline.get_or_create_day(july_first, allow_create=True)
        first.daily = summer_day
        second = timeline.get_or_create_day(july_first.replace(day=2), allow_create=True)
        second.daily = replace(summer_day, min_temp=0.0, max_temp=10.0)
        DiurnalSynthesizer(DiurnalParameters(), location).synthesize(timeline)

        assert first.temperature[23] > second.temperature[0] > second.daily.min_temp
        assert min(second.temperature) >= 0.0 - EPS
        assert first.temperature[23] < first.temperature[20]

    def test_polar_day_is_reported(self, july_first, summer_day):
        svalbard = Location(latitude=78.2, longitude=15.6, utc_offset=timedelta(hours=1))
        timeline = Timeline()
        day = timeline.get_or_create_day(july_first, allow_create=True)
        day.daily = summer_day
        warnings = DiurnalSynthesizer(DiurnalParameters(), svalbard).synthesize(timeline)
        assert len(warnings) == 1
        assert warnings[0].no_sunrise and warnings[0].no_sunset
