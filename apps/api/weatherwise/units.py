from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytz
from dateutil import parser as dtparse

# OpenWeatherMap air pollution categories (1 good .. 5 very poor) mapped to the
# midpoint of the matching band on a 0-300 display scale. Rough heuristic.
AQI_CATEGORY_MIDPOINTS = {1: 25, 2: 75, 3: 125, 4: 175, 5: 250}

DEFAULT_CONDITION_CODE = "01d"
DEFAULT_SYMBOL = "cloudy"

_MET_WORDS = sorted(
    ["clear", "sky", "fair", "partly", "cloudy", "fog", "light", "heavy",
     "rain", "sleet", "snow", "showers", "and", "thunder"],
    key=len,
    reverse=True,
)
_MET_WORD_RE = re.compile("|".join(_MET_WORDS))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def ms_to_kmh(value: float) -> int:
    return round_half_up(value * 3.6)


def aqi_from_category(category: int) -> int:
    return AQI_CATEGORY_MIDPOINTS.get(category, category * 50)


def title_case(text: str) -> str:
    """Upper-case the first character of every word, leaving the rest alone."""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), text)


def is_day_code(code: str, default: bool = False) -> bool:
    """Day/night flag carried by a condition code.

    OpenWeatherMap icons end in ``d``/``n`` (``10d``); met.no symbols carry a
    ``_day``/``_night``/``_polartwilight`` suffix. Codes without a marker
    return ``default``.
    """
    c = (code or "").lower()
    if c.endswith("_day"):
        return True
    if c.endswith("_night") or c.endswith("_polartwilight"):
        return False
    if re.fullmatch(r"\d{2}[dn]", c):
        return c.endswith("d")
    return default


def describe_symbol(symbol: str) -> str:
    """Readable text for a met.no symbol code, e.g. ``lightrainshowers_day``."""
    base = (symbol or DEFAULT_SYMBOL).split("_", 1)[0]
    words = _MET_WORD_RE.findall(base)
    if "".join(words) != base:
        return title_case(base)
    return title_case(" ".join(words))


def get_tz(name: Optional[str]):
    try:
        return pytz.timezone(name or "UTC")
    except Exception:
        return pytz.UTC


def from_unix(ts: int, tz=pytz.UTC) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc).astimezone(tz)


def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    try:
        dt = dtparse.isoparse(raw)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def timestamp_ms(raw: Optional[str]) -> float:
    """Epoch milliseconds for an ISO timestamp; unparsable input sorts as 0."""
    dt = parse_timestamp(raw)
    return dt.timestamp() * 1000.0 if dt else 0.0


def add_hours(dt: datetime, hours: int) -> datetime:
    """``dt`` moved by elapsed hours, with the zone offset valid at the result."""
    return (dt.astimezone(timezone.utc) + timedelta(hours=hours)).astimezone(dt.tzinfo)


def day_key(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d")


def _hour12(dt: datetime) -> str:
    return str(int(dt.strftime("%I")))


# ---------- display formats ----------
def format_observation(dt: datetime) -> str:
    """``3:05 PM, Monday, June 3``"""
    return f"{_hour12(dt)}:{dt.strftime('%M %p')}, {dt.strftime('%A, %B')} {dt.day}"


def format_clock(dt: datetime) -> str:
    return f"{_hour12(dt)}:{dt.strftime('%M %p')}"


def format_hour(dt: datetime) -> str:
    return f"{_hour12(dt)}{dt.strftime('%p')}"


def format_date(dt: datetime) -> str:
    return f"{dt.strftime('%a, %b')} {dt.day}"


def format_day_name(dt: datetime) -> str:
    return dt.strftime("%A")


def format_short_date(dt: datetime) -> str:
    return f"{dt.month}/{dt.day}"


def format_news_date(dt: datetime) -> str:
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}"
