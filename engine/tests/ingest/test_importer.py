"""Tests for daily and hourly weather file import."""

from datetime import datetime, timedelta

import pytest

from fireweather.errors import (
    AttemptAppend,
    AttemptOverwrite,
    AttemptPrepend,
    BadFileType,
    InvalidData,
    InvalidTime,
    ReadFault,
    StartAfterNoon,
)
from fireweather.ingest.columns import FileFormat
from fireweather.ingest.importer import ImportOptions
from fireweather.types import DayMode, ImportStatus, InvalidHandling
from fireweather.weather.stream import WeatherStream

HOUR = timedelta(hours=1)
DAY = timedelta(days=1)

DAILY_HEADER = "daily,min_temp,max_temp,rh,precip,min_ws,max_ws,wd"
HOURLY_HEADER = "date,hour,temp,rh,wd,ws,precip"


def hourly_lines(day: str, hours, temp=lambda h: 10.0 + h, rh=50.0, extra=""):
    """Hourly file lines for ``hours`` of ``day``."""
    header = HOURLY_HEADER + ("," + extra.split("=")[0] if extra else "")
    lines = [header]
    for h in hours:
        row = f"{day},{h},{temp(h)},{rh},270,10,0"
        if extra:
            row += "," + extra.split("=")[1]
        lines.append(row)
    return lines


class TestDailyImport:
    def test_single_row(self, stream):
        """One daily row produces a synthesized day with codes."""
        result = stream.import_file([DAILY_HEADER, "2024-07-01,10,20,60,5,5,15,180"])
        assert result.status is ImportStatus.OK
        assert result.format is FileFormat.DAILY
        assert result.rows == 1

        start = datetime(2024, 7, 1)
        for h in range(24):
            t = stream.get_hourly_values(start + h * HOUR).temperature
            assert 10.0 - 1e-9 <= t <= 20.0 + 1e-9
        assert 0.0 < stream.fwi_for_day(start).ffmc < 101.0
        assert stream.is_imported_from_file(start)
        assert stream.options.origin_file

    def test_reversed_min_max_are_swapped(self, stream):
        stream.import_file([DAILY_HEADER, "2024-07-01,20,10,60,5,15,5,180"])
        weather = stream.get_daily_values(datetime(2024, 7, 1))
        assert (weather.min_temp, weather.max_temp) == (10.0, 20.0)
        assert (weather.min_ws, weather.max_ws) == (5.0, 15.0)

    def test_appends_to_existing_days(self, stream):
        stream.import_file([DAILY_HEADER, "2024-07-01,10,20,60,5,5,15,180"])
        stream.import_file([DAILY_HEADER, "2024-07-02,12,22,55,0,5,15,200"])
        assert len(stream) == 2

    def test_append_disabled(self, stream):
        stream.import_file([DAILY_HEADER, "2024-07-01,10,20,60,5,5,15,180"])
        with pytest.raises(AttemptAppend):
            stream.import_file(
                [DAILY_HEADER, "2024-07-02,12,22,55,0,5,15,200"], ImportOptions(append=False)
            )
        assert len(stream) == 1

    def test_gap_after_end(self, stream):
        stream.import_file([DAILY_HEADER, "2024-07-01,10,20,60,5,5,15,180"])
        with pytest.raises(InvalidTime):
            stream.import_file([DAILY_HEADER, "2024-07-03,12,22,55,0,5,15,200"])

    def test_rows_out_of_order(self, stream):
        with pytest.raises(AttemptOverwrite):
            stream.import_file(
                [
                    DAILY_HEADER,
                    "2024-07-01,10,20,60,5,5,15,180",
                    "2024-07-02,10,20,60,5,5,15,180",
                    "2024-07-01,10,20,60,5,5,15,180",
                ]
            )
        assert len(stream) == 0

    def test_prepend_before_preset_start(self, location):
        s = WeatherStream(location, start_time=datetime(2024, 7, 2))
        with pytest.raises(AttemptPrepend):
            s.import_file([DAILY_HEADER, "2024-07-01,10,20,60,5,5,15,180"])
        assert s.start_time == datetime(2024, 7, 2)
        assert len(s) == 0

    def test_purge_replaces_contents(self, stream):
        stream.import_file([DAILY_HEADER, "2024-07-01,10,20,60,5,5,15,180"])
        stream.import_file(
            [DAILY_HEADER, "2024-08-01,10,20,60,5,5,15,180"], ImportOptions(purge=True)
        )
        assert stream.start_time == datetime(2024, 8, 1)
        assert len(stream) == 1

    def test_codes_become_specified(self, stream):
        stream.import_file(
            [
                DAILY_HEADER + ",ffmc,dmc,dc",
                "2024-07-01,10,20,60,5,5,15,180,88,30,200",
                "2024-07-02,10,20,60,5,5,15,180,-1,32,205",
            ]
        )
        assert stream.options.use_specified_fwi
        assert stream.initial.dc == 200.0
        assert stream.initial.dmc == 30.0

        day1 = stream.fwi_for_day(datetime(2024, 7, 1))
        assert day1.ffmc == 88.0
        assert day1.specified == frozenset({"ffmc", "dmc", "dc"})
        day2 = stream.fwi_for_day(datetime(2024, 7, 2))
        assert day2.dc == 205.0
        assert "ffmc" not in day2.specified

    def test_from_path(self, stream, tmp_path):
        path = tmp_path / "daily.csv"
        path.write_text(DAILY_HEADER + "\n2024-07-01,10,20,60,5,5,15,180\n", encoding="utf-8")
        assert stream.import_file(path).rows == 1

    def test_missing_path(self, stream, tmp_path):
        with pytest.raises(ReadFault):
            stream.import_file(tmp_path / "nope.csv")


class TestInvalidValues:
    ROW = "2024-07-01,10,20,105,5,5,15,180"

    def test_fail_rejects(self, stream):
        with pytest.raises(InvalidData) as info:
            stream.import_file([DAILY_HEADER, self.ROW])
        assert info.value.line == 2
        assert len(stream) == 0

    def test_fix_clamps(self, stream):
        options = ImportOptions(invalid=InvalidHandling.FIX)
        result = stream.import_file([DAILY_HEADER, self.ROW], options)
        assert result.status is ImportStatus.INVALID_DATA_ACCEPTED
        assert result.corrected_rows == 1
        assert result.warnings
        assert stream.get_daily_values(datetime(2024, 7, 1)).rh == 100.0
        assert stream.has_any_corrected()

    def test_allow_keeps_value(self, stream):
        stream.import_file([DAILY_HEADER, self.ROW], ImportOptions(invalid=InvalidHandling.ALLOW))
        assert stream.get_daily_values(datetime(2024, 7, 1)).rh == 105.0
        assert stream.options.any_corrected

    def test_unparseable_value(self, stream):
        with pytest.raises(ReadFault):
            stream.import_file([DAILY_HEADER, "2024-07-01,10,twenty,60,5,5,15,180"])

    def test_short_row(self, stream):
        with pytest.raises(ReadFault):
            stream.import_file([DAILY_HEADER, "2024-07-01,10,20"])

    def test_bad_header(self, stream):
        with pytest.raises(BadFileType):
            stream.import_file(["station,temp,rh", "x,1,2"])

    def test_empty_file(self, stream):
        with pytest.raises(ReadFault):
            stream.import_file([])


class TestHourlyImport:
    def test_full_day(self, stream):
        result = stream.import_file(hourly_lines("2024-07-01", range(24)))
        assert result.status is ImportStatus.OK
        assert result.format is FileFormat.HOURLY
        assert stream.timeline.days[0].mode is DayMode.HOURLY
        assert stream.get_hourly_values(datetime(2024, 7, 1, 5)).temperature == 15.0

    def test_short_gap_is_filled(self, stream):
        """Hours 3-5 are filled from their neighbours."""
        result = stream.import_file(hourly_lines("2024-07-01", [0, 1, 2, 6, 7, 8]))
        assert result.status is ImportStatus.INTERPOLATED
        assert result.interpolated_hours == 3
        for h in (3, 4, 5):
            weather = stream.get_hourly_values(datetime(2024, 7, 1, h))
            assert weather.temperature == pytest.approx(10.0 + h, abs=1e-6)
            assert 12.0 <= weather.temperature <= 16.0
            assert weather.rh == pytest.approx(50.0)
            assert weather.precipitation == 0.0
            assert weather.interpolated
        assert stream.valid_time_range()[1] == datetime(2024, 7, 1, 8)

    def test_long_gap_is_rejected(self, stream):
        with pytest.raises(InvalidData):
            stream.import_file(hourly_lines("2024-07-01", [0, 1, 2, 9]))
        assert len(stream) == 0

    def test_warnings_survive_rejection(self, stream):
        lines = hourly_lines("2024-07-01", [0, 1, 2, 9], rh=120.0)
        with pytest.raises(InvalidData) as info:
            stream.import_file(lines, ImportOptions(invalid=InvalidHandling.FIX))
        assert any("fixed" in w for w in info.value.warnings)

    def test_start_after_noon(self, stream):
        with pytest.raises(StartAfterNoon):
            stream.import_file(hourly_lines("2024-07-01", range(14, 24)))

    def test_append_starting_after_noon(self, stream):
        stream.import_file(hourly_lines("2024-07-01", range(15)))
        with pytest.raises(InvalidData):
            stream.import_file(hourly_lines("2024-07-01", range(15, 24)))
        assert stream.valid_time_range()[1] == datetime(2024, 7, 1, 14)

    def test_append_starting_at_noon(self, stream):
        stream.import_file(hourly_lines("2024-07-01", range(12)))
        stream.import_file(hourly_lines("2024-07-01", range(12, 24)))
        assert stream.valid_time_range()[1] == datetime(2024, 7, 1, 23)

    def test_first_row_off_the_hour(self, stream):
        lines = [HOURLY_HEADER, "2024-07-01,0:30,10,50,270,10,0"]
        with pytest.raises(InvalidData):
            stream.import_file(lines)

    def test_hour_24_is_next_midnight(self, stream):
        stream.import_file(hourly_lines("2024-07-01", range(1, 25)))
        assert stream.valid_time_range() == (datetime(2024, 7, 1, 1), datetime(2024, 7, 2))

    def test_prepend_leaves_stream_unchanged(self, stream):
        stream.import_file(hourly_lines("2024-07-02", range(24)))
        before = stream.valid_time_range()
        with pytest.raises(AttemptPrepend):
            stream.import_file(hourly_lines("2024-07-01", [12]))
        assert stream.valid_time_range() == before
        assert len(stream) == 1

    def test_import_adopts_only_imported_state(self, stream, summer_day):
        """Weather, options and seeds come from the import; the rest stays the stream's."""
        location, diurnal = stream.location, stream.diurnal
        stream.set_daily_values(datetime(2024, 7, 1), summer_day)
        stream.fwi_for_day(datetime(2024, 7, 1))
        stream.set_daily_values(datetime(2024, 7, 1), summer_day)
        assert stream.calculation_count == 1

        stream.import_file(hourly_lines("2024-07-02", range(24)))
        assert stream.calculation_count == 1
        assert not stream.is_valid
        assert stream.location is location
        assert stream.diurnal is diurnal
        assert stream.options.origin_file
        assert len(stream) == 2

    def test_prepend_before_preset_start(self, location):
        s = WeatherStream(location, start_time=datetime(2024, 7, 2))
        with pytest.raises(AttemptPrepend):
            s.import_file(hourly_lines("2024-07-01", range(24)))
        assert s.start_time == datetime(2024, 7, 2)
        assert len(s) == 0

    def test_overwrite_requires_option(self, stream):
        stream.import_file(hourly_lines("2024-07-01", range(24)))
        with pytest.raises(AttemptOverwrite):
            stream.import_file(hourly_lines("2024-07-01", range(24), temp=lambda h: 5.0))
        assert stream.get_hourly_values(datetime(2024, 7, 1, 3)).temperature == 13.0

        stream.import_file(
            hourly_lines("2024-07-01", range(24), temp=lambda h: 5.0),
            ImportOptions(overwrite=True),
        )
        assert stream.get_hourly_values(datetime(2024, 7, 1, 3)).temperature == 5.0

    def test_continues_across_days(self, stream):
        stream.import_file(hourly_lines("2024-07-01", range(24)))
        stream.import_file(hourly_lines("2024-07-02", range(6)))
        assert stream.valid_time_range()[1] == datetime(2024, 7, 2, 5)

    def test_hourly_codes_are_specified(self, stream):
        stream.import_file(hourly_lines("2024-07-01", range(24), extra="ffmc=87.5"))
        assert stream.options.use_specified_fwi
        codes = stream.hourly_fwi(datetime(2024, 7, 1, 9))
        assert codes.ffmc == 87.5
        assert codes.ffmc_specified

    def test_late_afternoon_ffmc_is_daily(self, stream):
        """The reading four hours after noon becomes the daily FFMC."""
        stream.import_file(hourly_lines("2024-07-01", range(24), extra="ffmc=90"))
        assert stream.fwi_for_day(datetime(2024, 7, 1)).ffmc == 90.0
        assert stream.initial.hffmc == 90.0
        assert stream.initial.hffmc_time == timedelta(hours=16)

    def test_switching_daily_day_to_hourly(self, stream):
        stream.import_file([DAILY_HEADER, "2024-07-01,10,20,60,5,5,15,180"])
        stream.import_file(
            hourly_lines("2024-07-01", range(12, 24)), ImportOptions(overwrite=True)
        )
        day = stream.timeline.days[0]
        assert day.mode is DayMode.HOURLY
        assert stream.get_hourly_values(datetime(2024, 7, 1, 12)).temperature == 22.0
        assert 10.0 - 1e-9 <= day.temperature[3] <= 20.0 + 1e-9
