from __future__ import annotations

import os
import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

OPENWEATHERMAP_API_KEY = os.environ.get("OPENWEATHERMAP_API_KEY")
NEWSAPI_API_KEY = os.environ.get("NEWSAPI_API_KEY")
YOUTUBE_API_KEY = os.environ.get("YOUTUBE_API_KEY")

WEATHER_PROVIDER = os.environ.get("WEATHERWISE_WEATHER_PROVIDER", "openweathermap").lower()
USER_AGENT = os.environ.get("WEATHERWISE_USER_AGENT", "WeatherWise/0.1 github.com/weatherwise")
HTTP_TIMEOUT = float(os.environ.get("WEATHERWISE_HTTP_TIMEOUT", "8"))
LOCAL_TIMEZONE = os.environ.get("WEATHERWISE_TIMEZONE", "UTC")

# Values shipped in example .env files; treated the same as a missing key.
PLACEHOLDERS = {
    "YOUR_OPENWEATHERMAP_API_KEY_HERE",
    "YOUR_NEWSAPI_API_KEY_HERE",
    "YOUR_YOUTUBE_API_KEY_HERE",
}

T = TypeVar("T")


class ProviderError(Exception):
    """Base class for upstream provider failures."""


class ProviderUnconfigured(ProviderError):
    """Credential missing or still a placeholder."""


class ProviderUnavailable(ProviderError):
    """Network error, non-2xx status, timeout or a payload that failed validation."""


class WeatherFetchError(Exception):
    """Weather could not be produced and no fallback applies."""


def is_configured(key: Optional[str]) -> bool:
    return bool(key) and key.strip() not in PLACEHOLDERS


def require_key(key: Optional[str], provider: str) -> str:
    if not is_configured(key):
        raise ProviderUnconfigured(f"{provider} API key not found or is a placeholder")
    return key  # type: ignore[return-value]


def new_client(headers: Dict[str, str] | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=HTTP_TIMEOUT, headers=headers)


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    schema: Type[T] | Any,
    params: Dict[str, Any] | None = None,
    headers: Dict[str, str] | None = None,
    provider: str = "provider",
) -> T:
    """GET ``url`` and validate the JSON body against ``schema``.

    Any transport error, non-200 status, undecodable body or schema mismatch is
    raised as ProviderUnavailable so callers only have one failure to handle.
    ``schema`` may be a pydantic model or any type TypeAdapter understands
    (e.g. ``List[GeoPlace]``).
    """
    try:
        r = await client.get(url, params=params, headers=headers)
    except httpx.HTTPError as e:
        raise ProviderUnavailable(f"{provider} request failed: {e!r}") from e

    if r.status_code != 200:
        raise ProviderUnavailable(f"{provider} returned {r.status_code}: {r.text[:200]}")

    try:
        body = r.json()
    except ValueError as e:
        raise ProviderUnavailable(f"{provider} returned a non-JSON body") from e

    try:
        if isinstance(schema, type) and issubclass(schema, BaseModel):
            return schema.model_validate(body)  # type: ignore[return-value]
        return TypeAdapter(schema).validate_python(body)
    except ValidationError as e:
        raise ProviderUnavailable(f"{provider} payload failed validation: {e.error_count()} error(s)") from e
