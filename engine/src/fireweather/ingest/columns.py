"""Weather file header detection and column aliases."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from fireweather.errors import BadFileType, ReadFault

_SEPARATORS = re.compile(r"[,;\t]")


class FileFormat(str, Enum):
    DAILY = "daily"
    HOURLY = "hourly"


# Field name -> accepted header spellings (lower case).
DAILY_ALIASES: dict[str, tuple[str, ...]] = {
    "min_temp": ("min_temp",),
    "max_temp": ("max_temp",),
    "rh": ("rh", "min_rh", "relative_humidity"),
    "wd": ("wd", "dir", "wind_direction"),
    "min_ws": ("min_ws",),
    "max_ws": ("max_ws",),
    "min_gust": ("min_wg", "min_gust"),
    "max_gust": ("max_wg", "max_gust"),
    "precip": ("precip", "rain", "precipitation"),
}

HOURLY_ALIASES: dict[str, tuple[str, ...]] = {
    "hour": ("hour", "time(cst)"),
    "temp": ("temp", "temperature"),
    "rh": ("rh", "relative_humidity", "min_rh", "min rh"),
    "wd": ("wd", "dir", "wind_direction", "direction"),
    "ws": ("ws", "wspd", "wind_speed", "windspeed"),
    "gust": ("wg", "gust", "gusting", "wind_gust", "windgust"),
    "precip": ("precip", "rain", "precipitation", "prec"),
}

CODE_ALIASES: dict[str, tuple[str, ...]] = {
    "ffmc": ("ffmc", "hffmc"),
    "dmc": ("dmc",),
    "dc": ("dc",),
    "bui": ("bui",),
    "isi": ("isi",),
    "fwi": ("fwi",),
}

REQUIRED: dict[FileFormat, tuple[str, ...]] = {
    FileFormat.DAILY: ("min_temp", "max_temp", "rh", "wd", "min_ws", "max_ws", "precip"),
    FileFormat.HOURLY: ("temp", "rh", "wd", "ws", "precip"),
}

DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%d/%m/%Y")


def tokenize(line: str) -> list[str]:
    """Split a row on commas, semicolons or tabs, dropping quotes and padding."""
    return [token.strip().strip('"').strip() for token in _SEPARATORS.split(line.rstrip("\r\n"))]


@dataclass(frozen=True)
class Header:
    """Detected file format and the column index of each known field.

    The date is always the first column.
    """

    format: FileFormat
    columns: dict[str, int]

    def has(self, name: str) -> bool:
        return name in self.columns


def parse_header(line: str) -> Header:
    """Detect the file format from its header row.

    Raises:
        BadFileType: Unknown leading column or a required column missing
    """
    tokens = [token.lower() for token in tokenize(line)]
    first = tokens[0] if tokens else ""
    if first == "daily":
        file_format = FileFormat.DAILY
    elif first == "hourly":
        file_format = FileFormat.HOURLY
    elif first == "date":
        hourly = any(t in HOURLY_ALIASES["hour"] for t in tokens[1:])
        file_format = FileFormat.HOURLY if hourly else FileFormat.DAILY
    else:
        raise BadFileType(f"Unrecognized weather file header: {line.strip()!r}", line=1)

    aliases = dict(DAILY_ALIASES if file_format is FileFormat.DAILY else HOURLY_ALIASES)
    aliases.update(CODE_ALIASES)
    columns: dict[str, int] = {}
    for index, token in enumerate(tokens[1:], start=1):
        for name, spellings in aliases.items():
            if token in spellings and name not in columns:
                columns[name] = index
                break

    missing = [name for name in REQUIRED[file_format] if name not in columns]
    if missing:
        raise BadFileType(
            f"{file_format.value} weather file lacks column(s): {', '.join(missing)}", line=1
        )
    return Header(format=file_format, columns=columns)


def parse_date(text: str, date_format: str | None = None, line: int | None = None) -> datetime:
    """Parse the date column; ISO date-times are accepted as well."""
    formats = (date_format,) if date_format else DATE_FORMATS
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ReadFault(f"Cannot parse date {text!r}", line=line) from None


def parse_hour(text: str, line: int | None = None) -> tuple[int, int]:
    """Parse an hour column: ``13``, ``13:00`` or ``1300``.

    Returns:
        (hour, minute)
    """
    try:
        if ":" in text:
            hour, minute = text.split(":", 1)
            return int(hour), int(float(minute))
        value = int(float(text))
    except ValueError:
        raise ReadFault(f"Cannot parse hour {text!r}", line=line) from None
    if value >= 100:
        return value // 100, value % 100
    return value, 0
