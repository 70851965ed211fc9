from __future__ import annotations

import os
import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from weatherwise import alerts, cache, geocoding, mock, news, weather
from weatherwise.models import LocationInfo, NewsItem, WeatherAlertPreference, WeatherData
from weatherwise.providers import WeatherFetchError

APP_NAME = "WeatherWise API"

logging.basicConfig(
    level=os.environ.get("WEATHERWISE_LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=APP_NAME, version="0.1.0")

# Rate limiting (in-memory)
limiter = Limiter(key_func=get_remote_address, default_limits=[os.environ.get("WEATHERWISE_RATE_LIMIT", "60/minute")])
app.state.limiter = limiter
app.add_exception_handler(
    RateLimitExceeded,
    lambda r, e: JSONResponse(status_code=429, content={"detail": "Rate limit exceeded"}),
)
app.add_middleware(SlowAPIMiddleware)

cors = os.environ.get("WEATHERWISE_CORS_ORIGINS")
origins = [o.strip() for o in cors.split(",")] if cors else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Models ----------
class AlertsRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    weather: WeatherData
    preferences: Optional[List[WeatherAlertPreference]] = None


class AlertsResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")
    alerts: List[str]


class FactResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")
    fact: str


# ---------- Endpoints ----------
@app.get("/health")
def health():
    return {"ok": True, "name": APP_NAME, "version": app.version}


@app.get("/v1/location", response_model=LocationInfo)
async def location(request: Request, q: str = Query(..., min_length=1)):
    try:
        return await geocoding.resolve_location(q)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/v1/weather", response_model=WeatherData)
async def get_weather(request: Request, loc: LocationInfo):
    params = loc.model_dump()
    cached = cache.lookup("weather:v1", params)
    if cached:
        return WeatherData(**cached)

    try:
        data, live = await weather.fetch_weather_sourced(loc)
    except WeatherFetchError as e:
        logger.error("Weather fetch failed for %r: %s", loc.name, e)
        raise HTTPException(status_code=502, detail=str(e))

    cache.store("weather:v1", params, data.model_dump(), live=live)
    return data


@app.get("/v1/news", response_model=List[NewsItem])
async def get_news(
    request: Request,
    keywords: List[str] = Query(default=[]),
    location: Optional[str] = None,
):
    kw = [k for k in keywords if k.strip()] or list(news.DEFAULT_KEYWORDS)
    params = {"keywords": kw, "location": location}
    cached = cache.lookup("news:v1", params)
    if cached:
        return [NewsItem(**it) for it in cached]

    items, live = await news.fetch_news_feed_sourced(kw, location)
    cache.store("news:v1", params, [it.model_dump() for it in items], live=live)
    return items


@app.post("/v1/alerts", response_model=AlertsResponse)
def check_alerts(request: Request, req: AlertsRequest):
    prefs = req.preferences if req.preferences is not None else alerts.default_preferences()
    return AlertsResponse(alerts=alerts.evaluate_alerts(req.weather, prefs))


@app.get("/v1/facts/random", response_model=FactResponse)
def random_fact(request: Request):
    return FactResponse(fact=mock.random_fact())
