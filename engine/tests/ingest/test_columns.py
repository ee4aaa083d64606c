"""Tests for header detection and column parsing."""

from datetime import datetime

import pytest

from fireweather.errors import BadFileType, ReadFault
from fireweather.ingest.columns import FileFormat, parse_date, parse_header, parse_hour, tokenize


class TestHeader:
    def test_daily_header(self):
        header = parse_header("daily,min_temp,max_temp,rh,precip,min_ws,max_ws,wd")
        assert header.format is FileFormat.DAILY
        assert header.columns["precip"] == 4
        assert "ffmc" not in header.columns

    def test_hourly_header_with_aliases(self):
        header = parse_header("HOURLY;Temperature;RH;Direction;WSPD;Rain;hffmc")
        assert header.format is FileFormat.HOURLY
        assert header.columns["ws"] == 4
        assert header.columns["ffmc"] == 6

    def test_date_header_detects_hourly_by_hour_column(self):
        assert parse_header("date,hour,temp,rh,wd,ws,precip").format is FileFormat.HOURLY
        header = parse_header("date,min_temp,max_temp,rh,precip,min_ws,max_ws,wd")
        assert header.format is FileFormat.DAILY

    def test_unknown_leading_column(self):
        with pytest.raises(BadFileType):
            parse_header("station,temp,rh")

    def test_missing_required_column(self):
        with pytest.raises(BadFileType, match="precip"):
            parse_header("hourly,temp,rh,wd,ws")


def test_tokenize_strips_quotes_and_padding():
    assert tokenize('"2024-07-01", 12 ;\t20.5\r\n') == ["2024-07-01", "12", "", "20.5"]


class TestDates:
    @pytest.mark.parametrize("text", ["2024-07-01", "2024/07/01", "01/07/2024"])
    def test_common_forms(self, text):
        assert parse_date(text) == datetime(2024, 7, 1)

    def test_custom_format(self):
        assert parse_date("07-01-2024", "%m-%d-%Y") == datetime(2024, 7, 1)

    def test_unparseable(self):
        with pytest.raises(ReadFault):
            parse_date("yesterday", line=3)


class TestHours:
    @pytest.mark.parametrize(
        "text,expected",
        [("13", (13, 0)), ("13:30", (13, 30)), ("1300", (13, 0)), ("0", (0, 0)), ("24", (24, 0))],
    )
    def test_forms(self, text, expected):
        assert parse_hour(text) == expected

    def test_unparseable(self):
        with pytest.raises(ReadFault):
            parse_hour("noon")
