from __future__ import annotations

from typing import List, Sequence

from weatherwise.models import WeatherAlertPreference, WeatherData

RAIN_CODES = ("09", "10")


def default_preferences() -> List[WeatherAlertPreference]:
    return [
        WeatherAlertPreference(
            id="rainTomorrow", label="Notify if rain is expected tomorrow",
            key="rainTomorrow", type="boolean", enabled=False,
        ),
        WeatherAlertPreference(
            id="tempAbove35", label="Notify if temperature goes above 35°C",
            key="tempAbove35", type="number_gt", threshold=35, enabled=False,
        ),
        WeatherAlertPreference(
            id="tempBelow5", label="Notify if temperature goes below 5°C",
            key="tempBelow5", type="number_lt", threshold=5, enabled=False,
        ),
    ]


def _fmt(value: float) -> str:
    return f"{value:g}"


def evaluate_alerts(weather: WeatherData, preferences: Sequence[WeatherAlertPreference]) -> List[str]:
    """Messages for every enabled preference the forecast triggers, without repeats."""
    out: List[str] = []

    def add(msg: str) -> None:
        if msg not in out:
            out.append(msg)

    current = weather.current
    for pref in preferences:
        if not pref.enabled:
            continue

        if pref.key == "rainTomorrow":
            if len(weather.daily) < 2:
                continue
            tomorrow = weather.daily[1]
            if any(c in tomorrow.condition_code for c in RAIN_CODES) or "rain" in tomorrow.description.lower():
                add(f"Rain is expected tomorrow ({tomorrow.description}).")

        elif pref.key == "tempAbove35" and pref.threshold is not None:
            t = _fmt(pref.threshold)
            if current.temp > pref.threshold:
                add(f"Current temperature ({current.temp}°C) is above your alert threshold of {t}°C.")
            for day in weather.daily:
                if day.high_temp > pref.threshold:
                    add(f"High temperature alert: {day.day_name} will reach {day.high_temp}°C (threshold {t}°C).")

        elif pref.key == "tempBelow5" and pref.threshold is not None:
            t = _fmt(pref.threshold)
            if current.temp < pref.threshold:
                add(f"Current temperature ({current.temp}°C) is below your alert threshold of {t}°C.")
            for day in weather.daily:
                if day.low_temp < pref.threshold:
                    add(f"Low temperature alert: {day.day_name} will drop to {day.low_temp}°C (threshold {t}°C).")

    return out
