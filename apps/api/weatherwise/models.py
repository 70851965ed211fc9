from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# Display names that stand in for "no real place".
CURRENT_LOCATION = "My Current Location"
UNKNOWN_CITY = "Unknown City"
SEARCH_ERROR = "Search Error"
UNKNOWN_LOCATION = "Unknown Location"
PLACEHOLDER_NAMES = {CURRENT_LOCATION.lower(), UNKNOWN_CITY.lower(), SEARCH_ERROR.lower()}


class LocationInfo(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    name: str
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lon: Optional[float] = Field(default=None, ge=-180, le=180)

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    @property
    def is_unknown(self) -> bool:
        return self.name == UNKNOWN_CITY and not self.has_coordinates


class CurrentWeatherData(BaseModel):
    model_config = ConfigDict(extra="forbid")
    temp: int
    feels_like: int
    humidity: int = Field(..., ge=0, le=100)
    wind_speed: int  # km/h
    uv_index: int
    description: str
    condition_code: str = Field(..., min_length=1)
    location_name: str
    observation_time: str
    is_day: bool
    sunrise: str = ""
    sunset: str = ""
    aqi: Optional[int] = None
    pollen_count: Optional[int] = Field(default=None, ge=0, le=5)


class HourlyForecastItem(BaseModel):
    model_config = ConfigDict(extra="forbid")
    time: str
    temp: int
    condition_code: str = Field(..., min_length=1)
    is_day: bool


class DailyForecastItem(BaseModel):
    model_config = ConfigDict(extra="forbid")
    date: str
    day_name: str
    short_date: str
    high_temp: int
    low_temp: int
    condition_code: str = Field(..., min_length=1)
    description: str


class WeatherData(BaseModel):
    model_config = ConfigDict(extra="forbid")
    current: CurrentWeatherData
    hourly: List[HourlyForecastItem]
    daily: List[DailyForecastItem]


class NewsItem(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str
    type: Literal["article", "video"]
    title: str
    source: str
    url: str
    description: str
    published_at: str
    raw_published_at: Optional[str] = None
    image_url: Optional[str] = None
    video_id: Optional[str] = None

    @property
    def is_usable(self) -> bool:
        if not self.title.strip():
            return False
        if self.type == "video":
            return bool(self.video_id)
        return bool(self.url)


AlertKey = Literal["rainTomorrow", "tempAbove35", "tempBelow5"]


class WeatherAlertPreference(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str
    label: str
    key: AlertKey
    type: Literal["boolean", "number_gt", "number_lt"]
    threshold: Optional[float] = None
    enabled: bool = False
