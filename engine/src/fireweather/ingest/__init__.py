"""Weather file import."""

from fireweather.ingest.columns import FileFormat
from fireweather.ingest.importer import ImportOptions, ImportResult, WeatherImporter

__all__ = ["FileFormat", "ImportOptions", "ImportResult", "WeatherImporter"]
