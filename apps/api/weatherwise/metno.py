from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import List, Optional, Sequence

import httpx
import pandas as pd
from pydantic import ValidationError

from weatherwise import providers, units
from weatherwise.models import (
    CurrentWeatherData,
    DailyForecastItem,
    HourlyForecastItem,
    LocationInfo,
    WeatherData,
)
from weatherwise.providers import ProviderUnavailable, get_json
from weatherwise.schemas import MetForecastResponse, MetTimestep

METNO_URL = "https://api.met.no/weatherapi/locationforecast/2.0/compact"

HOURLY_HOURS = 24
MAX_DAYS = 7


def nearest_index(times: Sequence[datetime], now: datetime) -> int:
    """Index of the timestamp closest to ``now``; the first one wins a tie."""
    best, best_diff = 0, None
    for i, t in enumerate(times):
        diff = abs((t - now).total_seconds())
        if best_diff is None or diff < best_diff:
            best, best_diff = i, diff
    return best


def day_frame(steps: Sequence[MetTimestep], tz) -> pd.DataFrame:
    """One row per timestep with its local time, day key, temperature and symbol."""
    rows = []
    for s in steps:
        local = s.time.astimezone(tz)
        rows.append({
            "time": local,
            "day": units.day_key(local),
            "temp": s.data.instant.details.air_temperature,
            "symbol": s.data.symbol_code,
        })
    return pd.DataFrame(rows, columns=["time", "day", "temp", "symbol"])


def dominant_symbol(symbols: Sequence[Optional[str]]) -> str:
    counts = Counter(s for s in symbols if s)
    if not counts:
        return units.DEFAULT_SYMBOL
    # most_common keeps first-encountered order among equal counts
    return counts.most_common(1)[0][0]


def daily_from_steps(steps: Sequence[MetTimestep], tz, max_days: int = MAX_DAYS) -> List[DailyForecastItem]:
    df = day_frame(steps, tz)
    out: List[DailyForecastItem] = []
    for _, g in df.groupby("day", sort=False):
        if len(out) >= max_days:
            break
        first = g["time"].iloc[0]
        symbol = dominant_symbol(list(g["symbol"]))
        out.append(DailyForecastItem(
            date=units.format_date(first),
            day_name=units.format_day_name(first),
            short_date=units.format_short_date(first),
            high_temp=units.round_half_up(float(g["temp"].max())),
            low_temp=units.round_half_up(float(g["temp"].min())),
            condition_code=symbol,
            description=units.describe_symbol(symbol),
        ))
    return out


def _is_day(symbol: str, when: datetime) -> bool:
    return units.is_day_code(symbol, default=6 <= when.hour < 18)


def transform_forecast(
    resp: MetForecastResponse,
    location: LocationInfo,
    now: Optional[datetime] = None,
    tz=None,
) -> WeatherData:
    steps = resp.properties.timeseries
    tz = tz or units.get_tz(providers.LOCAL_TIMEZONE)
    now = now or datetime.now(tz)

    idx = nearest_index([s.time for s in steps], now) if steps else 0
    window = steps[idx: idx + HOURLY_HOURS]
    if len(window) < HOURLY_HOURS:
        raise ProviderUnavailable(f"met.no returned {len(window)} hourly steps from now, need {HOURLY_HOURS}")

    cur = steps[idx]
    cur_time = cur.time.astimezone(tz)
    details = cur.data.instant.details
    symbol = cur.data.symbol_code or units.DEFAULT_SYMBOL
    current = CurrentWeatherData(
        temp=units.round_half_up(details.air_temperature),
        feels_like=units.round_half_up(details.air_temperature),
        humidity=units.round_half_up(details.relative_humidity or 0.0),
        wind_speed=units.ms_to_kmh(details.wind_speed or 0.0),
        uv_index=units.round_half_up(details.ultraviolet_index_clear_sky or 0.0),
        description=units.describe_symbol(symbol),
        condition_code=symbol,
        location_name=location.name,
        observation_time=units.format_observation(cur_time),
        is_day=_is_day(symbol, cur_time),
    )

    hourly = []
    for s in window:
        local = s.time.astimezone(tz)
        code = s.data.symbol_code or units.DEFAULT_SYMBOL
        hourly.append(HourlyForecastItem(
            time=units.format_hour(local),
            temp=units.round_half_up(s.data.instant.details.air_temperature),
            condition_code=code,
            is_day=_is_day(code, local),
        ))

    return WeatherData(current=current, hourly=hourly, daily=daily_from_steps(steps, tz))


async def fetch_metno(location: LocationInfo, client: httpx.AsyncClient) -> WeatherData:
    """Strategy B: every series from the met.no timeseries. No key, but a User-Agent is mandatory."""
    if not location.has_coordinates:
        raise ProviderUnavailable("met.no needs coordinates")
    resp = await get_json(
        client,
        METNO_URL,
        MetForecastResponse,
        params={"lat": round(location.lat, 4), "lon": round(location.lon, 4)},
        headers={"User-Agent": providers.USER_AGENT},
        provider="met.no locationforecast",
    )
    try:
        return transform_forecast(resp, location)
    except (ValidationError, TypeError, ValueError) as e:
        raise ProviderUnavailable(f"met.no payload could not be transformed: {e}") from e
