"""Boundary schemas for upstream provider payloads.

Only the fields the aggregators read are declared; everything else the
providers send is ignored. A payload missing a declared required field fails
validation and is handled as an unavailable provider.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class _Upstream(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ---------- OpenWeatherMap geocoding ----------
class GeoPlace(_Upstream):
    name: Optional[str] = None
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    state: Optional[str] = None
    country: Optional[str] = None


# ---------- OpenWeatherMap One Call 3.0 ----------
class OwmCondition(_Upstream):
    description: str = ""
    icon: str = ""


class OwmCurrent(_Upstream):
    dt: int
    temp: float
    feels_like: float
    humidity: int = Field(..., ge=0, le=100)
    wind_speed: float  # m/s with units=metric
    uvi: float = 0.0
    sunrise: Optional[int] = None
    sunset: Optional[int] = None
    weather: List[OwmCondition] = Field(..., min_length=1)


class OwmHourly(_Upstream):
    dt: int
    temp: float
    weather: List[OwmCondition] = Field(..., min_length=1)


class OwmDailyTemp(_Upstream):
    min: float
    max: float


class OwmDaily(_Upstream):
    dt: int
    temp: OwmDailyTemp
    weather: List[OwmCondition] = Field(..., min_length=1)


class OneCallResponse(_Upstream):
    timezone: str = "UTC"
    current: OwmCurrent
    hourly: List[OwmHourly]
    daily: List[OwmDaily]


# ---------- OpenWeatherMap air pollution ----------
class AirMain(_Upstream):
    aqi: int


class AirEntry(_Upstream):
    main: AirMain


class AirPollutionResponse(_Upstream):
    entries: List[AirEntry] = Field(default_factory=list, alias="list")


# ---------- met.no locationforecast 2.0 ----------
class MetInstantDetails(_Upstream):
    air_temperature: float
    wind_speed: Optional[float] = None  # m/s
    relative_humidity: Optional[float] = None
    ultraviolet_index_clear_sky: Optional[float] = None


class MetInstant(_Upstream):
    details: MetInstantDetails


class MetSummary(_Upstream):
    symbol_code: str


class MetPeriod(_Upstream):
    summary: MetSummary


class MetData(_Upstream):
    instant: MetInstant
    next_1_hours: Optional[MetPeriod] = None
    next_6_hours: Optional[MetPeriod] = None
    next_12_hours: Optional[MetPeriod] = None

    @property
    def symbol_code(self) -> Optional[str]:
        for period in (self.next_1_hours, self.next_6_hours, self.next_12_hours):
            if period is not None:
                return period.summary.symbol_code
        return None


class MetTimestep(_Upstream):
    time: AwareDatetime
    data: MetData


class MetProperties(_Upstream):
    timeseries: List[MetTimestep]


class MetForecastResponse(_Upstream):
    properties: MetProperties


# ---------- NewsAPI.org /v2/everything ----------
class NewsSource(_Upstream):
    name: Optional[str] = None


class NewsArticle(_Upstream):
    source: NewsSource = Field(default_factory=NewsSource)
    title: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    published_at: Optional[str] = Field(default=None, alias="publishedAt")
    url_to_image: Optional[str] = Field(default=None, alias="urlToImage")


class NewsSearchResponse(_Upstream):
    status: str = "ok"
    articles: List[NewsArticle] = Field(default_factory=list)


# ---------- YouTube Data API v3 /search ----------
class YtVideoId(_Upstream):
    video_id: Optional[str] = Field(default=None, alias="videoId")


class YtThumbnail(_Upstream):
    url: Optional[str] = None


class YtSnippet(_Upstream):
    title: Optional[str] = None
    channel_title: Optional[str] = Field(default=None, alias="channelTitle")
    published_at: Optional[str] = Field(default=None, alias="publishedAt")
    description: Optional[str] = None
    thumbnails: Dict[str, YtThumbnail] = Field(default_factory=dict)


class YtSearchItem(_Upstream):
    id: YtVideoId
    snippet: YtSnippet


class YtSearchResponse(_Upstream):
    items: List[YtSearchItem] = Field(default_factory=list)
