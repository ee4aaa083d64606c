"""fireweather: weather streams and the Canadian Fire Weather Index System."""

from fireweather.errors import FireWeatherError, PersistenceError, WeatherImportError
from fireweather.ingest.importer import ImportOptions, ImportResult
from fireweather.options import DiurnalParameters, InitialConditions, Options
from fireweather.types import (
    DailyFWI,
    DailyWeather,
    FFMCMethod,
    HourlyFWI,
    HourlyWeather,
    ImportStatus,
    InstantaneousValues,
    InvalidHandling,
)
from fireweather.weather.location import Location
from fireweather.weather.stream import WeatherStream

__version__ = "1.0.0"

__all__ = [
    "DailyFWI",
    "DailyWeather",
    "DiurnalParameters",
    "FFMCMethod",
    "FireWeatherError",
    "HourlyFWI",
    "HourlyWeather",
    "ImportOptions",
    "ImportResult",
    "ImportStatus",
    "InitialConditions",
    "InstantaneousValues",
    "InvalidHandling",
    "Location",
    "Options",
    "PersistenceError",
    "WeatherImportError",
    "WeatherStream",
]
