from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

import numpy as np

from weatherwise import units
from weatherwise.models import (
    CurrentWeatherData,
    DailyForecastItem,
    HourlyForecastItem,
    LocationInfo,
    NewsItem,
    WeatherData,
)
from weatherwise.providers import LOCAL_TIMEZONE

MOCK_CONDITION_CODES = ["01", "02", "03", "04", "09", "10", "11", "13", "50"]
MOCK_DESCRIPTIONS = {
    "01": "Clear Sky",
    "02": "Few Clouds",
    "03": "Scattered Clouds",
    "04": "Broken Clouds",
    "09": "Shower Rain",
    "10": "Rain",
    "11": "Thunderstorm",
    "13": "Snow",
    "50": "Mist",
}

WEATHER_FACTS = [
    "The highest temperature ever recorded on Earth was 56.7°C (134°F) in Death Valley, USA.",
    "Clouds can weigh over a million pounds!",
    "Snowflakes always have six sides.",
    "Lightning strikes the Earth about 100 times every second.",
    "The windiest place on Earth is Commonwealth Bay, Antarctica.",
    "Rain contains Vitamin B12.",
    "A rainbow is actually a full circle of light, but from the ground we only see part of it.",
    "Fog is essentially a cloud that is close to the ground.",
    "Hurricanes can release energy equivalent to 10,000 nuclear bombs.",
    "Some tornadoes can be faster than Formula One race cars.",
    "Weather forecasting has been practiced for thousands of years, but modern methods began in the 19th century.",
    "The Atacama Desert in Chile is the driest place on Earth, with some areas not seeing rain for centuries.",
]

MOCK_IMAGE_LOCAL = "https://placehold.co/300x200.png/FFA07A/FFFFFF?text=Local+Weather"
MOCK_IMAGE_HEATWAVE = "https://placehold.co/300x200.png/FFD700/000000?text=Heatwave+Advisory"


def _rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now(units.get_tz(LOCAL_TIMEZONE))


def is_day_hour(dt: datetime) -> bool:
    return 6 <= dt.hour < 18


def _base_code(rng: np.random.Generator) -> str:
    return MOCK_CONDITION_CODES[int(rng.integers(0, len(MOCK_CONDITION_CODES)))]


def mock_current(
    location: LocationInfo,
    now: Optional[datetime] = None,
    rng: Optional[np.random.Generator] = None,
) -> CurrentWeatherData:
    rng = _rng(rng)
    now = _now(now)
    is_day = is_day_hour(now)
    base = _base_code(rng)
    sunrise = now.replace(hour=6, minute=int(rng.integers(15, 45)), second=0, microsecond=0)
    sunset = now.replace(hour=18, minute=int(rng.integers(30, 60)), second=0, microsecond=0)
    return CurrentWeatherData(
        temp=int(rng.integers(5, 30)),
        feels_like=int(rng.integers(3, 28)),
        humidity=int(rng.integers(30, 100)),
        wind_speed=int(rng.integers(5, 35)),
        uv_index=int(rng.integers(0, 11)),
        description=MOCK_DESCRIPTIONS.get(base, "Clear Sky"),
        condition_code=f"{base}{'d' if is_day else 'n'}",
        location_name=location.name,
        observation_time=units.format_observation(now),
        is_day=is_day,
        sunrise=units.format_clock(sunrise),
        sunset=units.format_clock(sunset),
        aqi=int(rng.integers(10, 160)),
        pollen_count=int(rng.integers(0, 5)),
    )


def mock_hourly(
    now: Optional[datetime] = None,
    rng: Optional[np.random.Generator] = None,
    hours: int = 24,
) -> List[HourlyForecastItem]:
    rng = _rng(rng)
    start = _now(now).replace(minute=0, second=0, microsecond=0)
    items = []
    for i in range(hours):
        t = units.add_hours(start, i)
        is_day = is_day_hour(t)
        items.append(HourlyForecastItem(
            time=units.format_hour(t),
            temp=int(rng.integers(5, 25)),
            condition_code=f"{_base_code(rng)}{'d' if is_day else 'n'}",
            is_day=is_day,
        ))
    return items


def mock_daily(
    days: int = 5,
    now: Optional[datetime] = None,
    rng: Optional[np.random.Generator] = None,
) -> List[DailyForecastItem]:
    rng = _rng(rng)
    today = _now(now)
    items = []
    for i in range(days):
        # wall-clock day arithmetic: consecutive dates across DST changes
        d = today + timedelta(days=i)
        high = int(rng.integers(10, 25))
        base = _base_code(rng)
        items.append(DailyForecastItem(
            date=units.format_date(d),
            day_name=units.format_day_name(d),
            short_date=units.format_short_date(d),
            high_temp=high,
            low_temp=high - int(rng.integers(3, 8)),
            # daily rows always use the day icon
            condition_code=f"{base}d",
            description=MOCK_DESCRIPTIONS.get(base, "Clear Sky"),
        ))
    return items


def mock_weather(
    location: LocationInfo,
    days: int = 5,
    now: Optional[datetime] = None,
    rng: Optional[np.random.Generator] = None,
) -> WeatherData:
    """Synthetic WeatherData shaped exactly like a live provider result."""
    rng = _rng(rng)
    now = _now(now)
    return WeatherData(
        current=mock_current(location, now=now, rng=rng),
        hourly=mock_hourly(now=now, rng=rng),
        daily=mock_daily(days=days, now=now, rng=rng),
    )


def mock_articles(location_name: Optional[str] = None, now: Optional[datetime] = None) -> List[NewsItem]:
    now = _now(now)
    yesterday = now - timedelta(days=1)
    return [
        NewsItem(
            id="mock-article-1",
            type="article",
            title=f"Local Weather Patterns Shifting in {location_name or 'Region'}, Experts Say",
            source="Mock Local News",
            url="#mock-local-weather",
            raw_published_at=yesterday.isoformat(),
            published_at=units.format_news_date(yesterday),
            description=(
                f"Experts in {location_name or 'the region'} discuss recent changes in weather "
                "patterns and their potential impact. This is mock data."
            ),
            image_url=MOCK_IMAGE_LOCAL,
        ),
        NewsItem(
            id="mock-article-2",
            type="article",
            title="Upcoming Heatwave Advisory Issued for Many Areas (Mock Data)",
            source="Global Climate Watch (Mock)",
            url="#mock-heatwave",
            raw_published_at=now.isoformat(),
            published_at=units.format_news_date(now),
            description=(
                "A significant heatwave is expected to affect multiple regions in the coming days. "
                "This is mock data, please add a NewsAPI key."
            ),
            image_url=MOCK_IMAGE_HEATWAVE,
        ),
    ]


def random_fact(rng: Optional[np.random.Generator] = None) -> str:
    return WEATHER_FACTS[int(_rng(rng).integers(0, len(WEATHER_FACTS)))]
