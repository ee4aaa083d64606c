"""Tests for local time rules and sun events."""

from datetime import datetime, timedelta

from fireweather.weather.location import Location, day_start_of, hours_between

MOUNTAIN_DST = Location(
    latitude=53.5,
    longitude=-113.5,
    utc_offset=timedelta(hours=-7),
    dst_amount=timedelta(hours=1),
    dst_start=70,
    dst_end=308,
)


class TestDaylightSaving:
    def test_summer_is_daylight_time(self):
        assert MOUNTAIN_DST.dst_in_effect(datetime(2024, 7, 1))

    def test_winter_is_standard_time(self):
        assert not MOUNTAIN_DST.dst_in_effect(datetime(2024, 1, 15))

    def test_noon_lst_is_one_on_the_clock_in_summer(self):
        assert MOUNTAIN_DST.noon_hour(datetime(2024, 7, 1)) == 13
        assert MOUNTAIN_DST.noon_hour(datetime(2024, 1, 15)) == 12

    def test_to_standard_removes_shift(self):
        assert MOUNTAIN_DST.to_standard(datetime(2024, 7, 1, 13)) == datetime(2024, 7, 1, 12)

    def test_period_can_wrap_new_year(self):
        southern = Location(
            latitude=-37.8,
            longitude=145.0,
            utc_offset=timedelta(hours=10),
            dst_amount=timedelta(hours=1),
            dst_start=280,
            dst_end=97,
        )
        assert southern.dst_in_effect(datetime(2024, 1, 10))
        assert not southern.dst_in_effect(datetime(2024, 6, 10))

    def test_no_rules_means_no_shift(self, location):
        assert location.dst_offset(datetime(2024, 7, 1)) == timedelta(0)


class TestSunTimes:
    def test_summer_day_events_are_ordered(self, location):
        sun = location.sun_times(datetime(2024, 7, 1))
        assert sun.complete
        assert sun.sunrise < sun.solar_noon < sun.sunset

    def test_solar_noon_follows_longitude(self, location):
        """West of the time zone meridian the sun peaks after 12:00 LST."""
        sun = location.sun_times(datetime(2024, 7, 1))
        assert 12.0 < hours_between(datetime(2024, 7, 1), sun.solar_noon) < 13.5

    def test_daylight_time_shifts_events(self, location):
        sun = location.sun_times(datetime(2024, 7, 1))
        shifted = MOUNTAIN_DST.sun_times(datetime(2024, 7, 1))
        assert shifted.solar_noon - sun.solar_noon == timedelta(hours=1)

    def test_polar_day_has_no_sunset(self):
        svalbard = Location(latitude=78.2, longitude=15.6, utc_offset=timedelta(hours=1))
        sun = svalbard.sun_times(datetime(2024, 6, 21))
        assert sun.sunrise is None
        assert sun.sunset is None
        assert not sun.complete


def test_day_start_of_truncates_to_midnight():
    assert day_start_of(datetime(2024, 7, 1, 17, 45, 12)) == datetime(2024, 7, 1)
