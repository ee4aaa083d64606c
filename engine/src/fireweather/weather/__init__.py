"""Weather timeline, local time and diurnal synthesis."""

from fireweather.weather.location import Location, SunTimes
from fireweather.weather.timeline import Timeline

__all__ = ["Location", "SunTimes", "Timeline"]
