"""Tests for contiguous day storage."""

from datetime import datetime, timedelta

import pytest

from fireweather.types import DayMode
from fireweather.weather.timeline import Timeline

START = datetime(2024, 7, 1)
HOUR = timedelta(hours=1)
DAY = timedelta(days=1)


@pytest.fixture
def timeline():
    tl = Timeline()
    tl.get_or_create_day(START, allow_create=True)
    return tl


class TestGetOrCreate:
    def test_empty_timeline_anchors_on_first_day(self):
        tl = Timeline()
        day = tl.get_or_create_day(START + 15 * HOUR, allow_create=True)
        assert tl.start == START
        assert day.day_start == START

    def test_no_create_without_permission(self):
        assert Timeline().get_or_create_day(START) is None

    def test_appends_next_day(self, timeline):
        day = timeline.get_or_create_day(START + DAY, allow_create=True)
        assert day.day_start == START + DAY
        assert len(timeline) == 2

    def test_rejects_gap(self, timeline):
        assert timeline.get_or_create_day(START + 2 * DAY, allow_create=True) is None
        assert len(timeline) == 1

    def test_rejects_before_start(self, timeline):
        assert timeline.get_or_create_day(START - HOUR, allow_create=True) is None

    def test_existing_day_returned(self, timeline):
        assert timeline.get_or_create_day(START + 5 * HOUR) is timeline.days[0]

    def test_preset_start_rejects_earlier_day(self):
        tl = Timeline(START + DAY)
        assert tl.get_or_create_day(START, allow_create=True) is None
        assert tl.append_hour(START + 5 * HOUR) is None
        assert tl.start == START + DAY
        assert tl.is_empty

    def test_preset_start_accepts_its_own_day(self):
        tl = Timeline(START + 6 * HOUR)
        day = tl.get_or_create_day(START + 9 * HOUR, allow_create=True)
        assert day.day_start == START


class TestAppendHour:
    def test_empty_timeline_starts_at_hour(self):
        tl = Timeline()
        tl.append_hour(START + 9 * HOUR)
        assert tl.begin == START + 9 * HOUR
        assert tl.end == START + 9 * HOUR

    def test_appends_consecutive_hours_across_midnight(self):
        tl = Timeline()
        for h in range(22, 27):
            assert tl.append_hour(START + h * HOUR) is not None
        assert len(tl) == 2
        assert tl.first_hour == 22
        assert tl.last_hour == 2
        assert tl.end == START + 26 * HOUR

    def test_rejects_gap(self):
        tl = Timeline()
        tl.append_hour(START)
        assert tl.append_hour(START + 2 * HOUR) is None

    def test_partial_last_day_blocks_new_day(self):
        tl = Timeline()
        tl.append_hour(START)
        assert tl.get_or_create_day(START + DAY, allow_create=True) is None


class TestQueries:
    def test_valid_range_of_full_day(self, timeline):
        assert timeline.begin == START
        assert timeline.end == START + 23 * HOUR
        assert timeline.contains(START + 23 * HOUR)
        assert not timeline.contains(START + DAY)

    def test_slot(self, timeline):
        day, hour = timeline.slot(START + 13 * HOUR + timedelta(minutes=40))
        assert day is timeline.days[0]
        assert hour == 13

    def test_yesterday(self, timeline):
        timeline.get_or_create_day(START + DAY, allow_create=True)
        assert timeline.yesterday(1) is timeline.days[0]
        assert timeline.yesterday(0) is None


class TestResize:
    def test_set_end_time_grows_with_copies(self, timeline, summer_day):
        timeline.days[0].daily = summer_day
        assert timeline.set_end_time(START + 2 * DAY + 5 * HOUR)
        assert len(timeline) == 3
        assert timeline.days[2].daily == summer_day

    def test_set_end_time_completes_partial_hourly_day(self, summer_day):
        tl = Timeline()
        for hour in range(6):
            day = tl.append_hour(START + hour * HOUR)
            day.mode = DayMode.HOURLY
            day.temperature[hour] = 10.0 + hour
            day.precipitation[hour] = 1.0
        assert tl.set_end_time(START + DAY, summer_day)

        first = tl.days[0]
        assert first.temperature[6:] == [15.0] * 18
        assert first.precipitation[6:] == [0.0] * 18
        assert all(f.interpolated for f in first.flags[6:])
        assert not first.flags[5].interpolated
        assert tl.last_hour_of(0) == 23
        assert tl.days[1].daily == summer_day

    def test_set_end_time_shrinks(self, timeline):
        timeline.set_end_time(START + 3 * DAY)
        assert timeline.set_end_time(START + DAY)
        assert len(timeline) == 2

    def test_set_end_time_on_empty(self):
        assert not Timeline().set_end_time(START)

    def test_truncate_everything_clears(self, timeline):
        timeline.truncate_from_end(5)
        assert timeline.is_empty
        assert timeline.start is None
