"""Weather stream REST endpoints."""

from __future__ import annotations

import logging
from datetime import date, datetime, time

from fastapi import APIRouter, HTTPException, Query

from fireweather.errors import WeatherImportError
from fireweather.ingest.importer import ImportOptions
from fireweather.types import DailyFWI, DailyWeather, HourlyFWI, HourlyWeather
from fireweather.weather.diurnal import dewpoint
from fireweather.weather.stream import WeatherStream
from fireweather.weather.wind import cartesian_to_compass, direction_from_compass

from fireweather_api.schemas.stream import (
    DailyFWISchema,
    DailyResponse,
    DailyUpdate,
    DailyWeatherOut,
    HourlyFWISchema,
    HourlyResponse,
    HourlyUpdate,
    HourlyWeatherOut,
    ImportRequest,
    ImportResponse,
    InitialParams,
    OptionsParams,
    StreamCreate,
    StreamSummary,
    SunWarningSchema,
)
from fireweather_api.services.registry import StreamEntry, StreamRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/streams", tags=["streams"])

# Shared state, injected from main app
registry: StreamRegistry | None = None


def _entry(stream_id: str) -> StreamEntry:
    if registry is None:
        raise HTTPException(status_code=500, detail="Registry not initialized")
    entry = registry.get(stream_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Stream not found")
    return entry


def _summary(entry: StreamEntry) -> StreamSummary:
    stream = entry.stream
    span = stream.valid_time_range()
    seeds = stream.initial
    return StreamSummary(
        stream_id=entry.id,
        days=len(stream),
        start=span[0] if span else None,
        end=span[1] if span else None,
        options=OptionsParams(
            ffmc_method=stream.options.ffmc_method,
            use_specified_fwi=stream.options.use_specified_fwi,
        ),
        initial=InitialParams(
            ffmc=seeds.ffmc,
            dmc=seeds.dmc,
            dc=seeds.dc,
            bui=seeds.bui,
            rain=seeds.rain,
            hffmc=seeds.hffmc,
            hffmc_hour=None
            if seeds.hffmc_time is None
            else seeds.hffmc_time.total_seconds() / 3600.0,
        ),
        any_corrected=stream.has_any_corrected(),
        sun_warnings=[
            SunWarningSchema(day=w.day, no_sunrise=w.no_sunrise, no_sunset=w.no_sunset)
            for w in stream.sun_warnings()
        ],
    )


def _daily_fwi(codes: DailyFWI | None) -> DailyFWISchema | None:
    if codes is None:
        return None
    return DailyFWISchema(
        ffmc=codes.ffmc,
        dmc=codes.dmc,
        dc=codes.dc,
        bui=codes.bui,
        isi=codes.isi,
        fwi=codes.fwi,
        specified=sorted(codes.specified),
    )


def _hourly_fwi(codes: HourlyFWI) -> HourlyFWISchema:
    return HourlyFWISchema(
        ffmc=codes.ffmc, isi=codes.isi, fwi=codes.fwi, ffmc_specified=codes.ffmc_specified
    )


def _hourly_weather(weather: HourlyWeather) -> HourlyWeatherOut:
    return HourlyWeatherOut(
        temperature=weather.temperature,
        rh=weather.rh,
        wind_speed=weather.wind_speed,
        wind_direction=cartesian_to_compass(weather.wind_direction),
        precipitation=weather.precipitation,
        dewpoint=weather.dewpoint,
        wind_gust=weather.wind_gust,
        interpolated=weather.interpolated,
        corrected=weather.corrected,
    )


def _daily_response(stream: WeatherStream, day: date) -> DailyResponse:
    when = datetime.combine(day, time())
    weather = stream.get_daily_values(when)
    if weather is None:
        raise HTTPException(status_code=404, detail=f"No weather for {day}")
    return DailyResponse(
        day=day,
        mode="daily" if stream.is_daily_observations(when) else "hourly",
        weather=DailyWeatherOut(
            min_temp=weather.min_temp,
            max_temp=weather.max_temp,
            min_ws=weather.min_ws,
            max_ws=weather.max_ws,
            rh=weather.rh,
            precip=weather.precip,
            wd=cartesian_to_compass(weather.wd),
            min_gust=weather.min_gust,
            max_gust=weather.max_gust,
        ),
        fwi=_daily_fwi(stream.fwi_for_day(when)),
    )


def _hourly_response(stream: WeatherStream, when: datetime) -> HourlyResponse:
    weather = stream.get_hourly_values(when)
    if weather is None:
        raise HTTPException(status_code=404, detail=f"No weather for {when}")
    return HourlyResponse(
        time=when,
        weather=_hourly_weather(weather),
        fwi=_hourly_fwi(stream.hourly_fwi(when)),
        daily=_daily_fwi(stream.daily_fwi(when)),
    )


@router.post("", response_model=StreamSummary)
def create_stream(params: StreamCreate) -> StreamSummary:
    """Create an empty weather stream."""
    if registry is None:
        raise HTTPException(status_code=500, detail="Registry not initialized")
    entry = registry.create(params)
    with entry.lock:
        return _summary(entry)


@router.get("/{stream_id}", response_model=StreamSummary)
def get_stream(stream_id: str) -> StreamSummary:
    """Get stream options, seeds and valid time range."""
    entry = _entry(stream_id)
    with entry.lock:
        return _summary(entry)


@router.delete("/{stream_id}/data", response_model=StreamSummary)
def clear_stream(stream_id: str) -> StreamSummary:
    """Remove all days from a stream."""
    entry = _entry(stream_id)
    with entry.lock:
        entry.stream.clear()
        logger.info("Cleared stream %s", stream_id)
        return _summary(entry)


@router.post("/{stream_id}/import", response_model=ImportResponse)
def import_weather(stream_id: str, body: ImportRequest) -> ImportResponse:
    """Import a daily or hourly weather file."""
    entry = _entry(stream_id)
    options = ImportOptions(
        purge=body.purge,
        append=body.append,
        overwrite=body.overwrite,
        invalid=body.invalid,
        date_format=body.date_format,
    )
    with entry.lock:
        try:
            result = entry.stream.import_file(body.text.splitlines(), options)
        except WeatherImportError as e:
            raise HTTPException(
                status_code=422,
                detail={"error": type(e).__name__, "message": str(e), "warnings": e.warnings},
            ) from e
    return ImportResponse(
        status=result.status,
        format=result.format.value,
        rows=result.rows,
        interpolated_hours=result.interpolated_hours,
        corrected_rows=result.corrected_rows,
        warnings=result.warnings,
    )


@router.get("/{stream_id}/daily/{day}", response_model=DailyResponse)
def get_daily(stream_id: str, day: date) -> DailyResponse:
    """Daily weather and the codes from that day's noon observation."""
    entry = _entry(stream_id)
    with entry.lock:
        return _daily_response(entry.stream, day)


@router.put("/{stream_id}/daily/{day}", response_model=DailyResponse)
def put_daily(stream_id: str, day: date, body: DailyUpdate) -> DailyResponse:
    """Set a day's summary weather and/or specified codes."""
    entry = _entry(stream_id)
    when = datetime.combine(day, time())
    with entry.lock:
        stream = entry.stream
        if body.weather is not None:
            w = body.weather
            weather = DailyWeather(
                min_temp=w.min_temp,
                max_temp=w.max_temp,
                min_ws=w.min_ws,
                max_ws=w.max_ws,
                rh=w.rh,
                precip=w.precip,
                wd=direction_from_compass(w.wd, w.max_ws),
                min_gust=w.min_gust,
                max_gust=w.max_gust,
            )
            if not stream.set_daily_values(when, weather):
                raise HTTPException(status_code=409, detail=f"Cannot set daily weather for {day}")
        if body.specified is not None:
            codes = body.specified.model_dump(exclude_unset=True)
            if codes and not stream.set_specified_daily(when, **codes):
                raise HTTPException(status_code=409, detail=f"Cannot set codes for {day}")
        return _daily_response(stream, day)


@router.get("/{stream_id}/hourly/{when}", response_model=HourlyResponse)
def get_hourly(stream_id: str, when: datetime) -> HourlyResponse:
    """Weather and codes of the hour containing ``when``."""
    entry = _entry(stream_id)
    with entry.lock:
        return _hourly_response(entry.stream, when)


@router.put("/{stream_id}/hourly/{when}", response_model=HourlyResponse)
def put_hourly(stream_id: str, when: datetime, body: HourlyUpdate) -> HourlyResponse:
    """Set an hour's weather and/or specified codes."""
    entry = _entry(stream_id)
    with entry.lock:
        stream = entry.stream
        if body.weather is not None:
            w = body.weather
            weather = HourlyWeather(
                temperature=w.temperature,
                rh=w.rh,
                precipitation=w.precipitation,
                wind_speed=w.wind_speed,
                wind_direction=direction_from_compass(w.wind_direction, w.wind_speed),
                dewpoint=w.dewpoint if w.dewpoint is not None else dewpoint(w.temperature, w.rh),
                wind_gust=w.wind_gust,
                interpolated=w.interpolated,
                corrected=w.corrected,
            )
            if not stream.set_hourly_values(
                when, weather, dewpoint_specified=w.dewpoint is not None
            ):
                raise HTTPException(status_code=409, detail=f"Cannot set hourly weather for {when}")
        if body.specified is not None:
            codes = body.specified.model_dump(exclude_unset=True)
            if codes and not stream.set_specified_hourly(when, **codes):
                raise HTTPException(status_code=409, detail=f"Cannot set codes for {when}")
        return _hourly_response(stream, when)


@router.get("/{stream_id}/instant", response_model=HourlyResponse)
def get_instant(
    stream_id: str,
    at: datetime = Query(..., alias="time", description="Local wall-clock time"),
) -> HourlyResponse:
    """Weather and codes interpolated to an arbitrary instant."""
    entry = _entry(stream_id)
    with entry.lock:
        values = entry.stream.instantaneous(at)
    if values is None:
        raise HTTPException(status_code=404, detail=f"No weather at {at}")
    return HourlyResponse(
        time=values.time,
        weather=_hourly_weather(values.weather),
        fwi=_hourly_fwi(values.hourly),
        daily=_daily_fwi(values.daily),
    )
