"""Exceptions raised by the fireweather engine."""

from __future__ import annotations


class FireWeatherError(Exception):
    """Base class for engine errors."""


class WeatherImportError(FireWeatherError):
    """An import was rejected. The stream is left as it was before the import.

    Args:
        message: Human readable reason
        line: 1-based line number of the offending row, when known
        warnings: Warnings collected before the import failed
    """

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        warnings: list[str] | None = None,
    ):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line
        self.warnings = list(warnings or [])


class ReadFault(WeatherImportError):
    """The source could not be read or a row could not be parsed."""


class InvalidData(WeatherImportError):
    """A value is out of physical range, or too many hours are missing."""


class InvalidTime(WeatherImportError):
    """Rows are not contiguous in time."""


class AttemptPrepend(WeatherImportError):
    """A row falls before the start of the stream."""


class AttemptOverwrite(WeatherImportError):
    """A row would replace existing data and overwriting was not requested."""


class AttemptAppend(WeatherImportError):
    """A row could not be added to the end of the stream."""


class BadFileType(WeatherImportError):
    """The header does not describe a daily or hourly weather file."""


class StartAfterNoon(WeatherImportError):
    """The first hourly row is later than local standard-time noon."""


class PersistenceError(FireWeatherError):
    """A saved stream cannot be loaded."""
