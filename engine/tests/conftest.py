"""Shared test fixtures for fireweather engine tests."""

from datetime import datetime, timedelta

import pytest

from fireweather.options import InitialConditions, Options
from fireweather.types import DailyWeather, FFMCMethod, HourlyWeather
from fireweather.weather.diurnal import dewpoint
from fireweather.weather.location import Location
from fireweather.weather.stream import WeatherStream
from fireweather.weather.wind import compass_to_cartesian


@pytest.fixture
def location():
    """Central Alberta on Mountain Standard Time, no daylight saving."""
    return Location(latitude=53.5, longitude=-113.5, utc_offset=timedelta(hours=-7))


@pytest.fixture
def july_first():
    return datetime(2024, 7, 1)


@pytest.fixture
def summer_day():
    """Daily summary for a mild summer day with a southerly wind."""
    return DailyWeather(
        min_temp=10.0,
        max_temp=20.0,
        min_ws=5.0,
        max_ws=15.0,
        rh=60.0,
        precip=5.0,
        wd=compass_to_cartesian(180.0),
    )


@pytest.fixture
def stream(location):
    """Empty stream seeded with FFMC=85, DC=100, DMC=20."""
    return WeatherStream(location, initial=InitialConditions(ffmc=85.0, dc=100.0, dmc=20.0))


@pytest.fixture
def make_hour():
    """Factory for one hour of weather."""

    def _make(temperature=20.0, rh=40.0, wind_speed=10.0, precipitation=0.0, compass=270.0):
        return HourlyWeather(
            temperature=temperature,
            rh=rh,
            precipitation=precipitation,
            wind_speed=wind_speed,
            wind_direction=compass_to_cartesian(compass),
            dewpoint=dewpoint(temperature, rh),
        )

    return _make


@pytest.fixture
def hourly_stream(location, july_first, make_hour):
    """Two full days of hourly observations following a simple daily cycle."""
    s = WeatherStream(location, options=Options(ffmc_method=FFMCMethod.VAN_WAGNER))
    for hour in range(48):
        local = hour % 24
        warm = 1.0 - abs(local - 15) / 15.0
        weather = make_hour(
            temperature=10.0 + 15.0 * warm,
            rh=80.0 - 45.0 * warm,
            wind_speed=5.0 + 10.0 * warm,
        )
        assert s.set_hourly_values(july_first + timedelta(hours=hour), weather)
    return s
