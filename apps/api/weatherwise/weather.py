from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional, Tuple

import httpx
import numpy as np
from pydantic import ValidationError

from weatherwise import metno, mock, providers, units
from weatherwise.models import (
    UNKNOWN_LOCATION,
    CurrentWeatherData,
    DailyForecastItem,
    HourlyForecastItem,
    LocationInfo,
    WeatherData,
)
from weatherwise.providers import (
    ProviderError,
    ProviderUnavailable,
    WeatherFetchError,
    get_json,
    new_client,
    require_key,
)
from weatherwise.schemas import AirPollutionResponse, OneCallResponse, OwmCondition

logger = logging.getLogger(__name__)

ONECALL_URL = "https://api.openweathermap.org/data/3.0/onecall"
AIR_POLLUTION_URL = "https://api.openweathermap.org/data/2.5/air_pollution"

# Location name that always fails; lets callers exercise their error path.
FORCED_FAILURE_NAME = "error"

HOURLY_HOURS = 24
OWM_DAILY_DAYS = 5

Fetcher = Callable[[LocationInfo, httpx.AsyncClient], Awaitable[WeatherData]]


async def fetch_air_quality(client: httpx.AsyncClient, key: str, lat: float, lon: float) -> Optional[int]:
    """AQI on the 0-300 display scale, or None if the provider can't say."""
    try:
        resp = await get_json(
            client,
            AIR_POLLUTION_URL,
            AirPollutionResponse,
            params={"lat": lat, "lon": lon, "appid": key},
            provider="OpenWeatherMap air pollution",
        )
    except ProviderError as e:
        logger.warning("Could not fetch AQI data: %s", e)
        return None
    if not resp.entries:
        return None
    return units.aqi_from_category(resp.entries[0].main.aqi)


def _icon(cond: OwmCondition) -> str:
    return cond.icon or units.DEFAULT_CONDITION_CODE


def transform_onecall(data: OneCallResponse, location: LocationInfo, aqi: Optional[int] = None) -> WeatherData:
    if len(data.hourly) < HOURLY_HOURS or not data.daily:
        raise ProviderUnavailable(
            f"One Call returned {len(data.hourly)} hourly / {len(data.daily)} daily entries"
        )
    tz = units.get_tz(data.timezone)
    cur = data.current
    icon = _icon(cur.weather[0])

    current = CurrentWeatherData(
        temp=units.round_half_up(cur.temp),
        feels_like=units.round_half_up(cur.feels_like),
        humidity=cur.humidity,
        wind_speed=units.ms_to_kmh(cur.wind_speed),
        uv_index=units.round_half_up(cur.uvi),
        description=units.title_case(cur.weather[0].description),
        condition_code=icon,
        location_name=location.name,
        observation_time=units.format_observation(units.from_unix(cur.dt, tz)),
        is_day=units.is_day_code(icon),
        sunrise=units.format_clock(units.from_unix(cur.sunrise, tz)) if cur.sunrise else "",
        sunset=units.format_clock(units.from_unix(cur.sunset, tz)) if cur.sunset else "",
        aqi=aqi,
        # not part of One Call
        pollen_count=None,
    )

    hourly = []
    for h in data.hourly[:HOURLY_HOURS]:
        code = _icon(h.weather[0])
        hourly.append(HourlyForecastItem(
            time=units.format_hour(units.from_unix(h.dt, tz)),
            temp=units.round_half_up(h.temp),
            condition_code=code,
            is_day=units.is_day_code(code),
        ))

    daily = []
    for d in data.daily[:OWM_DAILY_DAYS]:
        when = units.from_unix(d.dt, tz)
        daily.append(DailyForecastItem(
            date=units.format_date(when),
            day_name=units.format_day_name(when),
            short_date=units.format_short_date(when),
            high_temp=units.round_half_up(d.temp.max),
            low_temp=units.round_half_up(d.temp.min),
            condition_code=_icon(d.weather[0]),
            description=units.title_case(d.weather[0].description),
        ))

    return WeatherData(current=current, hourly=hourly, daily=daily)


async def fetch_openweathermap(location: LocationInfo, client: httpx.AsyncClient) -> WeatherData:
    """Strategy A: One Call forecast plus an independent air-quality lookup."""
    key = require_key(providers.OPENWEATHERMAP_API_KEY, "OpenWeatherMap")
    forecast, aqi = await asyncio.gather(
        get_json(
            client,
            ONECALL_URL,
            OneCallResponse,
            params={
                "lat": location.lat,
                "lon": location.lon,
                "exclude": "minutely",
                "units": "metric",
                "appid": key,
            },
            provider="OpenWeatherMap One Call",
        ),
        fetch_air_quality(client, key, location.lat, location.lon),
        return_exceptions=True,
    )
    if isinstance(forecast, BaseException):
        raise forecast
    if isinstance(aqi, BaseException):
        logger.warning("AQI lookup raised unexpectedly: %r", aqi)
        aqi = None
    try:
        return transform_onecall(forecast, location, aqi)
    except (ValidationError, TypeError, ValueError) as e:
        raise ProviderUnavailable(f"One Call payload could not be transformed: {e}") from e


STRATEGIES: Dict[str, Tuple[Fetcher, int]] = {
    "openweathermap": (fetch_openweathermap, OWM_DAILY_DAYS),
    "metno": (metno.fetch_metno, metno.MAX_DAYS),
}


def _strategy(name: Optional[str]) -> Tuple[Fetcher, int]:
    name = (name or providers.WEATHER_PROVIDER).lower()
    if name not in STRATEGIES:
        logger.warning("Unknown weather provider %r; using openweathermap", name)
        name = "openweathermap"
    return STRATEGIES[name]


async def fetch_weather_sourced(
    location: LocationInfo,
    client: httpx.AsyncClient | None = None,
    provider: Optional[str] = None,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[WeatherData, bool]:
    """Weather for ``location`` and whether a live provider produced it.

    The location named ``error`` raises WeatherFetchError. Every other failure
    (no coordinates, unconfigured or failing provider, bad payload) returns
    mock data carrying the requested location name, flagged as not live.
    """
    if location.name.strip().lower() == FORCED_FAILURE_NAME:
        raise WeatherFetchError(f"Could not fetch weather for '{location.name}'")

    fetcher, days = _strategy(provider)
    fallback = location if location.name.strip() else LocationInfo(name=UNKNOWN_LOCATION)

    if not location.has_coordinates:
        logger.warning("Location %r has no coordinates; using mock weather data", location.name)
        return mock.mock_weather(fallback, days=days, rng=rng), False

    try:
        if client is None:
            async with new_client() as c:
                return await fetcher(location, c), True
        return await fetcher(location, client), True
    except ProviderError as e:
        logger.warning("Falling back to mock weather data: %s", e)
        return mock.mock_weather(fallback, days=days, rng=rng), False


async def fetch_weather(
    location: LocationInfo,
    client: httpx.AsyncClient | None = None,
    provider: Optional[str] = None,
    rng: Optional[np.random.Generator] = None,
) -> WeatherData:
    """Current, hourly and daily weather for ``location``; mock data on any provider failure."""
    data, _ = await fetch_weather_sourced(location, client=client, provider=provider, rng=rng)
    return data
