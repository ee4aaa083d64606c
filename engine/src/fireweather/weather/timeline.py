"""Contiguous day storage for a weather stream."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Iterator

from fireweather.types import DailyWeather, DayMode
from fireweather.weather.day import HOURS_PER_DAY, DayRecord
from fireweather.weather.location import DAY, HOUR, day_start_of

LAST_HOUR = HOURS_PER_DAY - 1


class Timeline:
    """Ordered, gap-free list of days anchored at a local midnight.

    Days are addressed by offset from ``start``; "yesterday" of day ``i`` is
    day ``i - 1``. ``first_hour`` and ``last_hour`` bound the valid hours of
    the first and last day, which may be partial for hourly data.
    """

    def __init__(self, start: datetime | None = None):
        self.start = day_start_of(start) if start is not None else None
        self.days: list[DayRecord] = []
        self.first_hour = 0
        self.last_hour = LAST_HOUR

    def __len__(self) -> int:
        return len(self.days)

    def __iter__(self) -> Iterator[DayRecord]:
        return iter(self.days)

    @property
    def is_empty(self) -> bool:
        return not self.days

    @property
    def begin(self) -> datetime | None:
        """First valid hour."""
        if not self.days:
            return None
        return self.start + self.first_hour * HOUR

    @property
    def end(self) -> datetime | None:
        """Last valid hour (inclusive)."""
        if not self.days:
            return None
        return self.start + (len(self.days) - 1) * DAY + self.last_hour * HOUR

    def index_of(self, when: datetime) -> int | None:
        if self.start is None or when < self.start:
            return None
        index = (when - self.start) // DAY
        return index if index < len(self.days) else None

    def day_at(self, when: datetime) -> DayRecord | None:
        index = self.index_of(when)
        return None if index is None else self.days[index]

    def yesterday(self, index: int) -> DayRecord | None:
        return self.days[index - 1] if index > 0 else None

    def first_hour_of(self, index: int) -> int:
        return self.first_hour if index == 0 else 0

    def last_hour_of(self, index: int) -> int:
        return self.last_hour if index == len(self.days) - 1 else LAST_HOUR

    def valid_hours(self, index: int) -> range:
        return range(self.first_hour_of(index), self.last_hour_of(index) + 1)

    def contains(self, when: datetime) -> bool:
        return bool(self.days) and self.begin <= when <= self.end

    def slot(self, when: datetime) -> tuple[DayRecord, int] | None:
        """Day and hour index holding the hour that contains ``when``."""
        if not self.contains(when.replace(minute=0, second=0, microsecond=0)):
            return None
        day = self.days[(when - self.start) // DAY]
        return day, day.hour_of(when)

    def precip_at(self, when: datetime) -> float:
        day = self.day_at(when)
        if day is None:
            return 0.0
        return day.precipitation[day.hour_of(when)]

    def get_or_create_day(
        self, when: datetime, allow_create: bool = False
    ) -> DayRecord | None:
        """Day containing ``when``, appending it if permitted.

        A new day is created only for an empty timeline (which then starts
        on that day, unless that is before a preset start) or directly after
        a complete last day.
        """
        if not self.days:
            if not allow_create:
                return None
            if self.start is not None and when < self.start:
                return None
            self.start = day_start_of(when)
            self.first_hour = 0
            self.last_hour = LAST_HOUR
            day = DayRecord(day_start=self.start)
            self.days.append(day)
            return day

        if when < self.start:
            return None
        index = (when - self.start) // DAY
        if index < len(self.days):
            return self.days[index]
        if allow_create and index == len(self.days) and self.last_hour == LAST_HOUR:
            day = DayRecord(day_start=self.start + index * DAY)
            self.days.append(day)
            return day
        return None

    def append_hour(self, when: datetime) -> DayRecord | None:
        """Extend the timeline by the hour ``when``.

        ``when`` must be the hour right after the current end; an empty
        timeline starts at it. Returns the day holding the new hour.
        """
        if not self.days:
            day = self.get_or_create_day(when, allow_create=True)
            if day is None:
                return None
            self.first_hour = self.last_hour = day.hour_of(when)
            return day
        if when != self.end + HOUR:
            return None
        if self.last_hour == LAST_HOUR:
            day = self.get_or_create_day(when, allow_create=True)
            self.last_hour = 0
            return day
        self.last_hour += 1
        return self.days[-1]

    def truncate_from_end(self, count: int) -> None:
        if count <= 0:
            return
        if count >= len(self.days):
            self.clear()
            return
        del self.days[-count:]
        self.last_hour = LAST_HOUR

    def set_end_time(self, end: datetime, summary: DailyWeather | None = None) -> bool:
        """Grow or shrink the timeline so its last day contains ``end``.

        New days are daily-summary copies of ``summary`` (the last day's
        daily values). A partial hourly last day is first completed by
        repeating its last observed hour, with no further rain.
        """
        if not self.days:
            return False
        target = (day_start_of(end) - self.start) // DAY + 1
        if target < 1:
            return False
        if target < len(self.days):
            self.truncate_from_end(len(self.days) - target)
        elif target > len(self.days):
            self._complete_last_day()
            template = summary if summary is not None else self.days[-1].daily
            while len(self.days) < target:
                self.days.append(
                    DayRecord(
                        day_start=self.start + len(self.days) * DAY,
                        mode=DayMode.DAILY,
                        daily=replace(template),
                    )
                )
            self.last_hour = LAST_HOUR
        return True

    def _complete_last_day(self) -> None:
        day = self.days[-1]
        last = self.last_hour
        if not day.is_hourly or last == LAST_HOUR:
            return
        for name in ("temperature", "dewpoint", "rh", "wind_speed", "wind_gust", "wind_direction"):
            values = getattr(day, name)
            values[last + 1 :] = [values[last]] * (LAST_HOUR - last)
        day.precipitation[last + 1 :] = [0.0] * (LAST_HOUR - last)
        observed = day.flags[last]
        for flags in day.flags[last + 1 :]:
            flags.gust_specified = observed.gust_specified
            flags.dewpoint_specified = observed.dewpoint_specified
            flags.interpolated = True
            flags.corrected = False
        self.last_hour = LAST_HOUR

    def clear(self) -> None:
        self.days = []
        self.start = None
        self.first_hour = 0
        self.last_hour = LAST_HOUR
