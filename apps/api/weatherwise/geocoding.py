from __future__ import annotations

import math
import logging
from typing import List, Optional, Tuple

import httpx
import numpy as np

from weatherwise import providers, units
from weatherwise.models import CURRENT_LOCATION, UNKNOWN_CITY, LocationInfo
from weatherwise.providers import ProviderError, get_json, new_client, require_key
from weatherwise.schemas import GeoPlace

logger = logging.getLogger(__name__)

GEO_BASE_URL = "https://api.openweathermap.org/geo/1.0"


def parse_coordinates(query: str) -> Optional[Tuple[float, float]]:
    """Return ``(lat, lon)`` when ``query`` is a ``"<lat>,<lon>"`` pair in range."""
    parts = query.split(",")
    if len(parts) != 2:
        return None
    try:
        lat, lon = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return None
    return lat, lon


def compose_name(place: GeoPlace) -> str:
    return ", ".join(p for p in (place.name, place.state, place.country) if p)


def unknown_location() -> LocationInfo:
    return LocationInfo(name=UNKNOWN_CITY)


def mock_location(query: str, rng: Optional[np.random.Generator] = None) -> LocationInfo:
    if query.strip().lower() == "unknown":
        return unknown_location()
    coords = parse_coordinates(query)
    if coords:
        return LocationInfo(name=CURRENT_LOCATION, lat=coords[0], lon=coords[1])
    rng = rng if rng is not None else np.random.default_rng()
    return LocationInfo(
        name=units.title_case(query.strip()),
        lat=round(float(rng.uniform(-90, 90)), 4),
        lon=round(float(rng.uniform(-180, 180)), 4),
    )


async def _reverse(client: httpx.AsyncClient, key: str, lat: float, lon: float) -> LocationInfo:
    places = await get_json(
        client,
        f"{GEO_BASE_URL}/reverse",
        List[GeoPlace],
        params={"lat": lat, "lon": lon, "limit": 1, "appid": key},
        provider="OpenWeatherMap reverse geocoding",
    )
    if not places:
        return LocationInfo(name=CURRENT_LOCATION, lat=lat, lon=lon)
    return LocationInfo(name=compose_name(places[0]) or CURRENT_LOCATION, lat=lat, lon=lon)


async def _forward(client: httpx.AsyncClient, key: str, query: str) -> LocationInfo:
    places = await get_json(
        client,
        f"{GEO_BASE_URL}/direct",
        List[GeoPlace],
        params={"q": query, "limit": 1, "appid": key},
        provider="OpenWeatherMap direct geocoding",
    )
    if not places:
        return unknown_location()
    top = places[0]
    return LocationInfo(name=compose_name(top) or query.strip(), lat=top.lat, lon=top.lon)


async def resolve_location(
    query: str,
    client: httpx.AsyncClient | None = None,
    rng: Optional[np.random.Generator] = None,
) -> LocationInfo:
    """Resolve a place name or ``"lat,lon"`` string to a LocationInfo.

    Never raises for non-empty string input. ``Unknown City`` without
    coordinates means the provider found nothing; ``My Current Location`` keeps
    the caller's coordinates when no place name is known.
    """
    if not isinstance(query, str) or not query.strip():
        raise ValueError("location query must be a non-empty string")

    if query.strip().lower() == "unknown":
        return unknown_location()

    coords = parse_coordinates(query)
    try:
        key = require_key(providers.OPENWEATHERMAP_API_KEY, "OpenWeatherMap")
        if client is None:
            async with new_client() as c:
                return await (_reverse(c, key, *coords) if coords else _forward(c, key, query.strip()))
        return await (_reverse(client, key, *coords) if coords else _forward(client, key, query.strip()))
    except ProviderError as e:
        logger.warning("Geocoding unavailable (%s); falling back to mock location", e)
        return mock_location(query, rng=rng)
