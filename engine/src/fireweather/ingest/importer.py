"""Daily and hourly weather file import.

A file is a header row followed by one row per day or per hour. The header
decides the format (see :mod:`fireweather.ingest.columns`). Rows are
validated against physical ranges, checked for ordering against each other
and against the stream, and written into the stream's days. Hourly files
may miss up to five consecutive hours; those are filled with a natural
cubic spline.

The importer writes straight into the stream it is given. Callers wanting
all-or-nothing behaviour import into a copy (see
:meth:`WeatherStream.import_file`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from fireweather.errors import (
    AttemptAppend,
    AttemptOverwrite,
    AttemptPrepend,
    InvalidData,
    InvalidTime,
    ReadFault,
    StartAfterNoon,
    WeatherImportError,
)
from fireweather.ingest.columns import (
    CODE_ALIASES,
    FileFormat,
    Header,
    parse_date,
    parse_header,
    parse_hour,
    tokenize,
)
from fireweather.ingest.interpolate import MAX_GAP_HOURS, missing_runs, spline_fill
from fireweather.options import CODE_RANGES, WEATHER_RANGES
from fireweather.types import DailyWeather, DayMode, ImportStatus, InvalidHandling
from fireweather.weather.day import DayRecord
from fireweather.weather.location import DAY, HOUR, day_start_of
from fireweather.weather.wind import direction_from_compass

if TYPE_CHECKING:
    from fireweather.weather.stream import WeatherStream

logger = logging.getLogger(__name__)

# Column -> entry of WEATHER_RANGES it is validated against.
_WEATHER_FIELDS = {
    "min_temp": "temperature",
    "max_temp": "temperature",
    "temp": "temperature",
    "rh": "rh",
    "wd": "wind_direction",
    "min_ws": "wind_speed",
    "max_ws": "wind_speed",
    "ws": "wind_speed",
    "min_gust": "wind_gust",
    "max_gust": "wind_gust",
    "gust": "wind_gust",
    "precip": "precipitation",
}
_VALIDATED_CODES = ("dmc", "dc")
_OPTIONAL = ("min_gust", "max_gust", "gust")

# Hours after standard-time noon at which an hourly FFMC reading is taken
# as the day's daily FFMC.
DAILY_FFMC_DELAY = 4


@dataclass(frozen=True)
class ImportOptions:
    """How an import treats existing data and invalid values.

    Args:
        purge: Clear the stream before importing
        append: Allow rows past the current end of a non-empty stream
        overwrite: Allow rows that replace existing days or hours
        invalid: Policy for out-of-range values
        date_format: strptime format of the date column (default: ISO
            and a few common forms)
    """

    purge: bool = False
    append: bool = True
    overwrite: bool = False
    invalid: InvalidHandling = InvalidHandling.FAIL
    date_format: str | None = None


@dataclass
class ImportResult:
    status: ImportStatus
    format: FileFormat
    rows: int
    interpolated_hours: int = 0
    corrected_rows: int = 0
    warnings: list[str] = field(default_factory=list)


@dataclass
class _Row:
    line: int
    time: datetime
    values: dict[str, float | None]
    codes: dict[str, float] = field(default_factory=dict)
    corrected: bool = False
    interpolated: bool = False


def _read_lines(source: str | Path | Iterable[str]) -> list[str]:
    if isinstance(source, (str, Path)):
        try:
            with open(source, encoding="utf-8") as f:
                return f.read().splitlines()
        except OSError as exc:
            raise ReadFault(f"Cannot read {source}: {exc}") from exc
    return [line.rstrip("\r\n") for line in source]


class WeatherImporter:
    """Loads one weather file into a stream.

    Args:
        stream: Stream receiving the rows
        options: Import options
    """

    def __init__(self, stream: WeatherStream, options: ImportOptions | None = None):
        self.stream = stream
        self.options = options or ImportOptions()
        self._warnings: list[str] = []
        self._invalid_accepted = False
        self._interpolated = 0
        self._any_codes = False

    def load(self, source: str | Path | Iterable[str]) -> ImportResult:
        """Import ``source``, a path or an iterable of text lines.

        Raises:
            WeatherImportError: A subclass naming why the file was rejected.
                The stream may have been partly written.
        """
        try:
            return self._load(source)
        except WeatherImportError as exc:
            exc.warnings = self._warnings + exc.warnings
            logger.warning("Weather import rejected: %s", exc)
            raise

    def _load(self, source: str | Path | Iterable[str]) -> ImportResult:
        lines = [(number, line) for number, line in enumerate(_read_lines(source), 1)]
        lines = [(number, line) for number, line in lines if line.strip()]
        if not lines:
            raise ReadFault("Weather file is empty")

        header = parse_header(lines[0][1])
        rows = [self._parse_row(header, number, line) for number, line in lines[1:]]
        if not rows:
            raise ReadFault("Weather file has no data rows")

        stream = self.stream
        if self.options.purge:
            stream.clear()

        if header.format is FileFormat.DAILY:
            self._load_daily(rows)
        else:
            rows = self._load_hourly(rows)

        stream.options = replace(
            stream.options,
            origin_file=True,
            any_corrected=stream.options.any_corrected or self._invalid_accepted,
            use_specified_fwi=self._any_codes or stream.options.use_specified_fwi,
        )
        corrected = sum(1 for row in rows if row.corrected)
        result = ImportResult(
            status=self._status(),
            format=header.format,
            rows=len(rows),
            interpolated_hours=self._interpolated,
            corrected_rows=corrected,
            warnings=list(self._warnings),
        )
        logger.info(
            "Imported %d %s row(s): %s", result.rows, header.format.value, result.status.value
        )
        return result

    def _status(self) -> ImportStatus:
        if self._interpolated and self._invalid_accepted:
            return ImportStatus.INTERPOLATE_BEFORE_INVALID_DATA
        if self._interpolated:
            return ImportStatus.INTERPOLATED
        if self._invalid_accepted:
            return ImportStatus.INVALID_DATA_ACCEPTED
        return ImportStatus.OK

    # -- parsing -----------------------------------------------------------

    def _parse_row(self, header: Header, number: int, line: str) -> _Row:
        tokens = tokenize(line)
        needed = max(header.columns.values()) + 1
        if len(tokens) < needed:
            raise ReadFault(f"Expected {needed} columns, found {len(tokens)}", line=number)

        when = parse_date(tokens[0], self.options.date_format, number)
        if header.has("hour"):
            hour, minute = parse_hour(tokens[header.columns["hour"]], number)
            when = day_start_of(when).replace(hour=hour % 24, minute=minute)
            if hour == 24:
                when += DAY

        row = _Row(line=number, time=when, values={})
        for name, index in header.columns.items():
            if name == "hour":
                continue
            text = tokens[index]
            if not text:
                if name in _OPTIONAL or name in CODE_ALIASES:
                    continue
                raise ReadFault(f"Missing value for {name}", line=number)
            try:
                value = float(text)
            except ValueError:
                raise ReadFault(f"Cannot parse {name} value {text!r}", line=number) from None
            if name in CODE_ALIASES:
                if value == -1.0:
                    continue
                if name in _VALIDATED_CODES:
                    value = self._validate(row, name, value, CODE_RANGES, name)
                row.codes[name] = value
            else:
                row.values[name] = self._validate(
                    row, name, value, WEATHER_RANGES, _WEATHER_FIELDS[name]
                )

        speed = row.values.get("max_ws", row.values.get("ws", 0.0))
        row.values["wd"] = direction_from_compass(row.values["wd"], speed)
        return row

    def _validate(
        self,
        row: _Row,
        name: str,
        value: float,
        ranges: dict[str, tuple[float, float | None]],
        key: str,
    ) -> float:
        low, high = ranges[key]
        if value >= low and (high is None or value <= high):
            return value
        bounds = f"[{low:g}, {'inf' if high is None else f'{high:g}'}]"
        policy = self.options.invalid
        if policy is InvalidHandling.FAIL:
            raise InvalidData(f"{name} {value:g} outside {bounds}", line=row.line)

        row.corrected = True
        self._invalid_accepted = True
        if policy is InvalidHandling.FIX:
            fixed = max(value, low) if high is None else min(max(value, low), high)
            self._warnings.append(f"line {row.line}: {name} {value:g} fixed to {fixed:g}")
            return fixed
        self._warnings.append(f"line {row.line}: {name} {value:g} outside {bounds} accepted")
        return value

    # -- ordering ----------------------------------------------------------

    def _check_order(self, row: _Row, when: datetime, previous: datetime | None, unit) -> None:
        timeline = self.stream.timeline
        overwrite = self.options.overwrite
        if not timeline.is_empty:
            if unit == HOUR:
                first, last = timeline.begin, timeline.end
            else:
                first = timeline.start
                last = timeline.start + (len(timeline) - 1) * DAY
            if when < first:
                raise AttemptPrepend(f"{when} is before the stream start {first}", line=row.line)
            if previous is None:
                if when <= last and not overwrite:
                    raise AttemptOverwrite(f"{when} replaces existing data", line=row.line)
                if when > last + unit:
                    raise InvalidTime(f"{when} leaves a gap after {last}", line=row.line)
                return
        elif timeline.start is not None and when < timeline.start:
            raise AttemptPrepend(
                f"{when} is before the stream start {timeline.start}", line=row.line
            )

        if previous is None:
            return
        if when <= previous:
            if not overwrite:
                raise AttemptOverwrite(f"{when} does not follow {previous}", line=row.line)
        elif when != previous + unit:
            raise InvalidTime(f"{when} does not follow {previous}", line=row.line)

    def _create(self, allow: bool, row: _Row, when: datetime, hourly: bool) -> DayRecord:
        if not allow:
            raise AttemptAppend(f"Appending {when} is not enabled", line=row.line)
        timeline = self.stream.timeline
        day = timeline.append_hour(when) if hourly else self.stream.get_or_create_day(when, True)
        if day is None:
            raise AttemptAppend(f"Cannot append {when}", line=row.line)
        return day

    # -- daily ---------------------------------------------------------------

    def _load_daily(self, rows: list[_Row]) -> None:
        stream = self.stream
        timeline = stream.timeline
        was_empty = timeline.is_empty
        allow_append = self.options.append or was_empty
        previous = None
        for row in rows:
            when = day_start_of(row.time)
            self._check_order(row, when, previous, DAY)
            day = timeline.day_at(when)
            if day is None:
                day = self._create(allow_append, row, when, hourly=False)

            v = row.values
            min_temp, max_temp = sorted((v["min_temp"], v["max_temp"]))
            min_ws, max_ws = sorted((v["min_ws"], v["max_ws"]))
            min_gust, max_gust = v.get("min_gust"), v.get("max_gust")
            if min_gust is not None and max_gust is not None and min_gust > max_gust:
                min_gust, max_gust = max_gust, min_gust
            day.mode = DayMode.DAILY
            day.daily = DailyWeather(
                min_temp=min_temp,
                max_temp=max_temp,
                min_ws=min_ws,
                max_ws=max_ws,
                rh=v["rh"],
                precip=v["precip"],
                wd=v["wd"],
                min_gust=min_gust,
                max_gust=max_gust,
            )
            day.from_file = True
            for flags in day.flags:
                flags.interpolated = False
                flags.corrected = row.corrected
            self._daily_codes(day, row, seed=was_empty and previous is None)
            previous = when
        stream.invalidate()

    def _daily_codes(self, day: DayRecord, row: _Row, seed: bool) -> None:
        if not row.codes:
            return
        self._any_codes = True
        if seed:
            self._seed(row)
        for name, value in row.codes.items():
            setattr(day.fwi.specified, name, value)

    def _seed(self, row: _Row) -> None:
        seeds = {name: row.codes[name] for name in ("dmc", "dc", "bui") if name in row.codes}
        if seeds:
            self.stream.initial = replace(self.stream.initial, **seeds)

    # -- hourly --------------------------------------------------------------

    def _load_hourly(self, rows: list[_Row]) -> list[_Row]:
        stream = self.stream
        timeline = stream.timeline
        was_empty = timeline.is_empty

        rows = self._sorted_unique(rows)
        first = rows[0]
        if first.time.minute or first.time.second:
            raise InvalidData(f"First row {first.time} is not on the hour", line=first.line)
        noon = stream.location.noon_lst(day_start_of(first.time))
        if first.time > noon:
            message = f"First row {first.time} is after standard-time noon"
            if was_empty:
                raise StartAfterNoon(message, line=first.line)
            raise InvalidData(message, line=first.line)
        rows = self._fill_gaps(rows)

        if not was_empty:
            # Days switching to hourly keep their synthesized hours.
            stream.ensure_calculated()

        allow_append = self.options.append or was_empty
        previous = None
        for row in rows:
            self._check_order(row, row.time, previous, HOUR)
            day = timeline.day_at(row.time) if timeline.contains(row.time) else None
            if day is None:
                day = self._create(allow_append, row, row.time, hourly=True)
            hour = day.hour_of(row.time)
            self._write_hour(day, hour, row)
            self._hourly_codes(day, hour, row, seed=was_empty and previous is None)
            previous = row.time
        stream.invalidate()
        return rows

    def _sorted_unique(self, rows: list[_Row]) -> list[_Row]:
        ordered = sorted(rows, key=lambda r: r.time)
        unique: list[_Row] = []
        for row in ordered:
            if unique and unique[-1].time == row.time:
                if not self.options.overwrite:
                    raise AttemptOverwrite(f"{row.time} appears more than once", line=row.line)
                unique[-1] = row
            else:
                unique.append(row)
        return unique

    def _fill_gaps(self, rows: list[_Row]) -> list[_Row]:
        start = rows[0].time
        offsets = []
        for row in rows:
            offset = (row.time - start) / HOUR
            if offset != int(offset):
                raise InvalidTime(f"{row.time} is not on the hour", line=row.line)
            offsets.append(int(offset))

        runs = missing_runs(offsets)
        if not runs:
            return rows
        by_offset = dict(zip(offsets, rows))
        for gap_start, length in runs:
            if length > MAX_GAP_HOURS:
                before = by_offset[gap_start - 1]
                raise InvalidData(
                    f"{length} consecutive hours missing after {before.time}", line=before.line
                )

        missing = [gap_start + k for gap_start, length in runs for k in range(length)]
        channels = ["temp", "rh", "ws"]
        if all(row.values.get("gust") is not None for row in rows):
            channels.append("gust")
        filled = {
            name: dict(zip(missing, spline_fill(offsets, [r.values[name] for r in rows], missing)))
            for name in channels
        }

        result: list[_Row] = []
        for offset in range(offsets[-1] + 1):
            row = by_offset.get(offset)
            if row is None:
                previous = result[-1]
                values: dict[str, float | None] = {
                    name: self._clamp(name, filled[name][offset]) for name in channels
                }
                values["wd"] = previous.values["wd"]
                values["precip"] = 0.0
                row = _Row(
                    line=previous.line,
                    time=start + offset * HOUR,
                    values=values,
                    interpolated=True,
                )
            result.append(row)

        self._interpolated += len(missing)
        self._warnings.append(f"Interpolated {len(missing)} missing hour(s)")
        return result

    @staticmethod
    def _clamp(name: str, value: float) -> float:
        low, high = WEATHER_RANGES[_WEATHER_FIELDS[name]]
        value = max(value, low)
        return value if high is None else min(value, high)

    @staticmethod
    def _write_hour(day: DayRecord, hour: int, row: _Row) -> None:
        v = row.values
        day.mode = DayMode.HOURLY
        day.from_file = True
        day.temperature[hour] = v["temp"]
        day.rh[hour] = v["rh"]
        day.wind_speed[hour] = v["ws"]
        day.wind_direction[hour] = v["wd"]
        day.precipitation[hour] = v["precip"]
        gust = v.get("gust")
        day.wind_gust[hour] = gust if gust is not None else 0.0
        flags = day.flags[hour]
        flags.gust_specified = gust is not None
        flags.dewpoint_specified = False
        flags.interpolated = row.interpolated
        flags.corrected = row.corrected

    def _hourly_codes(self, day: DayRecord, hour: int, row: _Row, seed: bool) -> None:
        codes = row.codes
        if not codes:
            return
        self._any_codes = True
        if seed:
            self._seed(row)

        location = self.stream.location
        noon = location.noon_hour(day.day_start)
        specified = day.fwi.specified
        if hour == noon:
            specified.dmc = codes.get("dmc", specified.dmc)
            specified.dc = codes.get("dc", specified.dc)
        if "bui" in codes:
            specified.bui = codes["bui"]

        hourly = day.fwi.specified_hourly[hour]
        for name in ("ffmc", "isi", "fwi"):
            if name in codes:
                setattr(hourly, name, codes[name])

        if "ffmc" in codes and hour == noon + DAILY_FFMC_DELAY:
            specified.ffmc = codes["ffmc"]
            if self.stream.timeline.index_of(day.day_start) == 0:
                self.stream.initial = replace(
                    self.stream.initial,
                    hffmc=codes["ffmc"],
                    hffmc_time=location.noon_lst(day.day_start)
                    + DAILY_FFMC_DELAY * HOUR
                    - day.day_start,
                )
