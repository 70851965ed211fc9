from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List

import httpx
import pytest
import redis

from weatherwise import providers

KEY_NAMES = ("OPENWEATHERMAP_API_KEY", "NEWSAPI_API_KEY", "YOUTUBE_API_KEY")


@pytest.fixture
def no_keys(monkeypatch):
    for name in KEY_NAMES:
        monkeypatch.setattr(providers, name, None)


@pytest.fixture
def all_keys(monkeypatch):
    for name in KEY_NAMES:
        monkeypatch.setattr(providers, name, "test-key")


class Recorder:
    """MockTransport handler that routes by URL path and records every request."""

    def __init__(self, routes: Dict[str, Callable[[httpx.Request], httpx.Response]]):
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for path, handler in self.routes.items():
            if request.url.path.endswith(path):
                return handler(request)
        return httpx.Response(404, json={"message": "no route"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


def json_response(body, status: int = 200):
    return lambda request: httpx.Response(status, json=body)


def onecall_payload(start: int = 1_780_000_000, hours: int = 48, days: int = 8, tz: str = "UTC") -> dict:
    return {
        "timezone": tz,
        "current": {
            "dt": start,
            "temp": 21.5,
            "feels_like": 20.4,
            "humidity": 55,
            "wind_speed": 10.0,
            "uvi": 4.6,
            "sunrise": start - 6 * 3600,
            "sunset": start + 6 * 3600,
            "weather": [{"description": "scattered clouds", "icon": "03d"}],
        },
        "hourly": [
            {"dt": start + i * 3600, "temp": 20 + i % 5, "weather": [{"description": "rain", "icon": "10n" if i % 2 else "10d"}]}
            for i in range(hours)
        ],
        "daily": [
            {"dt": start + i * 86400, "temp": {"min": 11.4, "max": 24.6}, "weather": [{"description": "light rain", "icon": "10d"}]}
            for i in range(days)
        ],
    }


def air_payload(category: int) -> dict:
    return {"coord": {"lat": 1, "lon": 2}, "list": [{"main": {"aqi": category}, "components": {}}]}


def met_step(when: datetime, temp: float, symbol: str = "partlycloudy_day") -> dict:
    return {
        "time": when.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "data": {
            "instant": {"details": {"air_temperature": temp, "wind_speed": 5.0, "relative_humidity": 71.3}},
            "next_1_hours": {"summary": {"symbol_code": symbol}, "details": {}},
        },
    }


def met_payload(start: datetime, hours: int = 72, temp: Callable[[int], float] = lambda i: 10.0 + i % 6) -> dict:
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [10.75, 59.91, 20]},
        "properties": {
            "meta": {"updated_at": start.isoformat()},
            "timeseries": [met_step(start + timedelta(hours=i), temp(i)) for i in range(hours)],
        },
    }


class FakeRedis:
    """In-memory stand-in for the redis client methods the cache uses."""

    def __init__(self, fail: bool = False):
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.fail = fail

    def get(self, key):
        if self.fail:
            raise redis.ConnectionError("redis down")
        return self.data.get(key)

    def set(self, key, value, ex=None):
        if self.fail:
            raise redis.ConnectionError("redis down")
        self.data[key] = value
        self.ttls[key] = ex


@pytest.fixture
def fake_redis(monkeypatch):
    from weatherwise import cache

    fake = FakeRedis()
    monkeypatch.setattr(cache, "REDIS_URL", "redis://fake:6379/0")
    monkeypatch.setattr(cache, "_redis", fake)
    return fake
