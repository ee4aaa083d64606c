"""Pydantic schemas for the API."""

from fireweather_api.schemas.stream import (
    DailyResponse,
    DailyUpdate,
    HourlyResponse,
    HourlyUpdate,
    ImportRequest,
    ImportResponse,
    StreamCreate,
    StreamSummary,
)

__all__ = [
    "DailyResponse",
    "DailyUpdate",
    "HourlyResponse",
    "HourlyUpdate",
    "ImportRequest",
    "ImportResponse",
    "StreamCreate",
    "StreamSummary",
]
