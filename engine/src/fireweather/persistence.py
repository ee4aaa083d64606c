"""Saving and loading weather streams as JSON documents.

Only inputs are saved: location, options, seeds, diurnal parameters, each
day's weather and specified codes. Calculated codes are rebuilt on load.

Documents carry a schema version. Each versioned part is read through a
table of :class:`Field` entries; a field missing from an older document
takes its default and may add a warning to the load result.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable

from fireweather.errors import PersistenceError
from fireweather.options import CurveParameters, DiurnalParameters, InitialConditions, Options
from fireweather.types import DailyWeather, DayMode, FFMCMethod
from fireweather.weather.day import DAILY_CODES, HOURLY_CODES, HOURS_PER_DAY, DayRecord
from fireweather.weather.location import Location
from fireweather.weather.stream import WeatherStream

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 3
MINIMUM_VERSION = 1

GUST_BIT = 0x1
DEWPOINT_BIT = 0x2
INTERPOLATED_BIT = 0x4
CORRECTED_BIT = 0x8

HOUR_CHANNELS = (
    "temperature",
    "rh",
    "wind_speed",
    "wind_gust",
    "wind_direction",
    "precipitation",
)


@dataclass(frozen=True)
class Field:
    """One versioned entry of a saved document.

    Args:
        name: Key in the document
        min_version: First schema version that writes the field
        max_version: Last schema version that reads it (None = current)
        default: Value (or factory) used when the field is absent
        warning: Added to the load warnings when the field is absent
        when: Limits the warning to documents it returns True for
    """

    name: str
    min_version: int = MINIMUM_VERSION
    max_version: int | None = None
    default: Any = None
    warning: str | None = None
    when: Callable[[dict], bool] | None = None


INITIAL_FIELDS = (
    Field("ffmc"),
    Field("dc"),
    Field("dmc"),
    Field("bui"),
    Field("rain", min_version=3, default=0.0),
    Field(
        "hffmc",
        min_version=2,
        warning="Hourly FFMC seed not saved; seeding from the initial FFMC at noon",
    ),
    Field("hffmc_time", min_version=2),
)

DAY_FIELDS = (
    Field("day_start"),
    Field("mode"),
    Field("from_file", default=False),
    Field("daily"),
    Field("hours"),
    Field("flags", default=lambda: [0] * HOURS_PER_DAY),
    Field("specified", default=dict),
    Field("specified_hourly", default=list),
    Field(
        "dewpoint",
        min_version=3,
        warning="Dew points not saved; recalculating from temperature and humidity",
        when=lambda doc: doc.get("mode") == DayMode.HOURLY.value,
    ),
)


@dataclass
class LoadedStream:
    stream: WeatherStream
    warnings: list[str] = field(default_factory=list)


def read_fields(doc: dict, fields: tuple[Field, ...], version: int, warnings: list[str]) -> dict:
    """Pick ``fields`` out of ``doc`` as saved by schema ``version``."""
    values = {}
    for f in fields:
        if f.max_version is not None and version > f.max_version:
            continue
        if version >= f.min_version and f.name in doc:
            values[f.name] = doc[f.name]
            continue
        values[f.name] = f.default() if callable(f.default) else f.default
        if f.warning and (f.when is None or f.when(doc)) and f.warning not in warnings:
            warnings.append(f.warning)
    return values


def _minutes(delta: timedelta) -> float:
    return delta.total_seconds() / 60.0


def _flags_to_bits(day: DayRecord) -> list[int]:
    bits = []
    for f in day.flags:
        value = 0
        if f.gust_specified:
            value |= GUST_BIT
        if f.dewpoint_specified:
            value |= DEWPOINT_BIT
        if f.interpolated:
            value |= INTERPOLATED_BIT
        if f.corrected:
            value |= CORRECTED_BIT
        bits.append(value)
    return bits


def _day_to_dict(day: DayRecord) -> dict:
    doc: dict[str, Any] = {
        "day_start": day.day_start.isoformat(),
        "mode": day.mode.value,
        "from_file": day.from_file,
        "flags": _flags_to_bits(day),
        "specified": {
            name: getattr(day.fwi.specified, name)
            for name in DAILY_CODES
            if getattr(day.fwi.specified, name) is not None
        },
        "specified_hourly": [],
    }
    for hour, codes in enumerate(day.fwi.specified_hourly):
        values = {n: getattr(codes, n) for n in HOURLY_CODES if getattr(codes, n) is not None}
        if values:
            doc["specified_hourly"].append([hour, values])
    if day.is_hourly:
        doc["hours"] = {name: list(getattr(day, name)) for name in HOUR_CHANNELS}
        doc["dewpoint"] = list(day.dewpoint)
    else:
        d = day.daily
        doc["daily"] = {
            "min_temp": d.min_temp,
            "max_temp": d.max_temp,
            "min_ws": d.min_ws,
            "max_ws": d.max_ws,
            "rh": d.rh,
            "precip": d.precip,
            "wd": d.wd,
            "min_gust": d.min_gust,
            "max_gust": d.max_gust,
        }
    return doc


def to_dict(stream: WeatherStream) -> dict:
    """Saved form of ``stream`` at the current schema version."""
    loc = stream.location
    seeds = stream.initial
    timeline = stream.timeline
    return {
        "version": SCHEMA_VERSION,
        "location": {
            "latitude": loc.latitude,
            "longitude": loc.longitude,
            "utc_offset": _minutes(loc.utc_offset),
            "dst_amount": _minutes(loc.dst_amount),
            "dst_start": loc.dst_start,
            "dst_end": loc.dst_end,
        },
        "options": stream.options.to_bits(),
        "initial": {
            "ffmc": seeds.ffmc,
            "dc": seeds.dc,
            "dmc": seeds.dmc,
            "bui": seeds.bui,
            "rain": seeds.rain,
            "hffmc": seeds.hffmc,
            "hffmc_time": None
            if seeds.hffmc_time is None
            else seeds.hffmc_time.total_seconds(),
        },
        "diurnal": {
            "temperature": _curve_to_list(stream.diurnal.temperature),
            "wind": _curve_to_list(stream.diurnal.wind),
        },
        "start": timeline.start.isoformat() if timeline.start else None,
        "first_hour": timeline.first_hour,
        "last_hour": timeline.last_hour,
        "days": [_day_to_dict(day) for day in timeline.days],
    }


def _curve_to_list(curve: CurveParameters) -> list[float]:
    return [curve.alpha, curve.beta, curve.gamma]


def _day_from_dict(doc: dict, version: int, warnings: list[str]) -> DayRecord:
    values = read_fields(doc, DAY_FIELDS, version, warnings)
    day = DayRecord(
        day_start=datetime.fromisoformat(values["day_start"]),
        mode=DayMode(values["mode"]),
        from_file=bool(values["from_file"]),
    )
    for flags, bits in zip(day.flags, values["flags"]):
        flags.gust_specified = bool(bits & GUST_BIT)
        flags.dewpoint_specified = bool(bits & DEWPOINT_BIT)
        flags.interpolated = bool(bits & INTERPOLATED_BIT)
        flags.corrected = bool(bits & CORRECTED_BIT)

    if day.is_hourly:
        hours = values["hours"]
        if hours is None:
            raise PersistenceError(f"Hourly day {values['day_start']} has no hours")
        for name in HOUR_CHANNELS:
            setattr(day, name, [float(v) for v in hours[name]])
        if values["dewpoint"] is None:
            for flags in day.flags:
                flags.dewpoint_specified = False
        else:
            day.dewpoint = [float(v) for v in values["dewpoint"]]
    else:
        if values["daily"] is None:
            raise PersistenceError(f"Daily day {values['day_start']} has no summary")
        day.daily = DailyWeather(**values["daily"])

    for name, value in values["specified"].items():
        setattr(day.fwi.specified, name, value)
    for hour, codes in values["specified_hourly"]:
        for name, value in codes.items():
            setattr(day.fwi.specified_hourly[hour], name, value)
    return day


def from_dict(doc: dict) -> LoadedStream:
    """Rebuild a stream from its saved form.

    Raises:
        PersistenceError: The document is older than the oldest supported
            schema or is malformed
    """
    warnings: list[str] = []
    try:
        version = int(doc["version"])
    except (KeyError, TypeError, ValueError) as exc:
        raise PersistenceError("Document has no schema version") from exc
    if version < MINIMUM_VERSION:
        raise PersistenceError(
            f"Schema version {version} predates the oldest supported ({MINIMUM_VERSION})"
        )
    if version > SCHEMA_VERSION:
        warnings.append(
            f"Saved with schema version {version}; reading as version {SCHEMA_VERSION}"
        )
        version = SCHEMA_VERSION

    try:
        loc = doc["location"]
        location = Location(
            latitude=loc["latitude"],
            longitude=loc["longitude"],
            utc_offset=timedelta(minutes=loc["utc_offset"]),
            dst_amount=timedelta(minutes=loc["dst_amount"]),
            dst_start=loc["dst_start"],
            dst_end=loc["dst_end"],
        )

        options = Options.from_bits(int(doc["options"]))
        if version < 2 and options.ffmc_method is FFMCMethod.HYBRID:
            options = Options(
                ffmc_method=FFMCMethod.VAN_WAGNER,
                use_specified_fwi=options.use_specified_fwi,
                origin_file=options.origin_file,
                any_corrected=options.any_corrected,
            )
            warnings.append("Hybrid hourly FFMC is not available in this file; using Van Wagner")

        seeds = read_fields(doc["initial"], INITIAL_FIELDS, version, warnings)
        if seeds["hffmc_time"] is not None:
            seeds["hffmc_time"] = timedelta(seconds=seeds["hffmc_time"])
        initial = InitialConditions(**seeds)

        curves = doc["diurnal"]
        diurnal = DiurnalParameters(
            temperature=CurveParameters(*curves["temperature"]),
            wind=CurveParameters(*curves["wind"]),
        )

        stream = WeatherStream(location, options=options, initial=initial, diurnal=diurnal)
        timeline = stream.timeline
        timeline.days = [_day_from_dict(day, version, warnings) for day in doc["days"]]
        if timeline.days:
            timeline.start = datetime.fromisoformat(doc["start"])
            timeline.first_hour = int(doc["first_hour"])
            timeline.last_hour = int(doc["last_hour"])
    except (KeyError, TypeError, ValueError) as exc:
        raise PersistenceError(f"Malformed weather stream document: {exc}") from exc

    for warning in warnings:
        logger.warning("Loading weather stream: %s", warning)
    return LoadedStream(stream=stream, warnings=warnings)


def dumps(stream: WeatherStream) -> str:
    return json.dumps(to_dict(stream))


def loads(text: str) -> LoadedStream:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PersistenceError(f"Not a JSON document: {exc}") from exc
    return from_dict(doc)


def dump(stream: WeatherStream, path: str | Path) -> None:
    Path(path).write_text(dumps(stream), encoding="utf-8")


def load(path: str | Path) -> LoadedStream:
    return loads(Path(path).read_text(encoding="utf-8"))
