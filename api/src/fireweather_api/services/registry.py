"""Weather stream registry service.

Holds the service's streams in memory, each guarded by its own lock so
requests against one stream are serialized.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import timedelta

from fireweather.options import InitialConditions, Options
from fireweather.weather.location import Location
from fireweather.weather.stream import WeatherStream

from fireweather_api.schemas.stream import StreamCreate

logger = logging.getLogger(__name__)


class StreamEntry:
    """A registered stream and the lock serializing access to it."""

    def __init__(self, stream_id: str, stream: WeatherStream):
        self.id = stream_id
        self.stream = stream
        self.lock = threading.Lock()


class StreamRegistry:
    """Manages weather streams.

    Streams live in memory for the life of the process.
    """

    def __init__(self) -> None:
        self._entries: dict[str, StreamEntry] = {}
        self._lock = threading.Lock()

    def create(self, params: StreamCreate) -> StreamEntry:
        """Create an empty stream.

        Args:
            params: Location, seed values and options

        Returns:
            The registered entry
        """
        loc = params.location
        location = Location(
            latitude=loc.latitude,
            longitude=loc.longitude,
            utc_offset=timedelta(hours=loc.utc_offset_hours),
            dst_amount=timedelta(hours=loc.dst_hours),
            dst_start=loc.dst_start,
            dst_end=loc.dst_end,
        )
        seeds = params.initial
        initial = InitialConditions(
            ffmc=seeds.ffmc,
            dmc=seeds.dmc,
            dc=seeds.dc,
            bui=seeds.bui,
            rain=seeds.rain,
            hffmc=seeds.hffmc,
            hffmc_time=None if seeds.hffmc_hour is None else timedelta(hours=seeds.hffmc_hour),
        )
        options = Options(
            ffmc_method=params.options.ffmc_method,
            use_specified_fwi=params.options.use_specified_fwi,
        )
        stream_id = str(uuid.uuid4())[:8]
        entry = StreamEntry(stream_id, WeatherStream(location, options=options, initial=initial))

        with self._lock:
            self._entries[stream_id] = entry

        logger.info(
            "Created stream %s at (%.3f, %.3f)", stream_id, loc.latitude, loc.longitude
        )
        return entry

    def get(self, stream_id: str) -> StreamEntry | None:
        with self._lock:
            return self._entries.get(stream_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
