"""
FarmerAid - Forecast aggregation.
One place that turns an Open-Meteo style payload into the 5-day numbers used by
both the suitability check and the advisory generator.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

import numpy as np

from errors import InsufficientForecastData

FORECAST_WINDOW_DAYS = 5
HOURS_PER_DAY = 24

WEATHER_CODES: Dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Light rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Light snow",
    73: "Moderate snow",
    75: "Heavy snow",
    77: "Snow grains",
    80: "Light rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


def weather_condition(code) -> str:
    """Human-readable description for an Open-Meteo weather code."""
    try:
        return WEATHER_CODES.get(int(code), "Unknown")
    except (TypeError, ValueError):
        return "Unknown"


@dataclass(frozen=True)
class ForecastAggregate:
    days: int
    avg_max_temp: float
    avg_min_temp: float
    total_rain_5d: float
    avg_daily_rain: float
    avg_humidity: Optional[float] = None
    avg_et0: Optional[float] = None
    avg_soil_temp: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _series(values, length: int) -> np.ndarray:
    """First `length` entries as floats; missing or non-numeric entries become NaN."""
    out = np.full(length, np.nan)
    for i, value in enumerate(list(values or [])[:length]):
        if _is_number(value):
            out[i] = float(value)
    return out


def _nanmean(arr: np.ndarray) -> Optional[float]:
    if arr.size == 0 or np.isnan(arr).all():
        return None
    return float(np.nanmean(arr))


def available_days(payload: Dict[str, Any]) -> int:
    daily = (payload or {}).get("daily") or {}
    return len(daily.get("time") or daily.get("temperature_2m_max") or [])


def _humidity(daily: Dict[str, Any], days: int) -> Optional[float]:
    hum_max = _nanmean(_series(daily.get("relative_humidity_2m_max"), days))
    hum_min = _nanmean(_series(daily.get("relative_humidity_2m_min"), days))
    known = [v for v in (hum_max, hum_min) if v is not None]
    if not known:
        return None
    return sum(known) / len(known)


def _daily_et0(hourly: Dict[str, Any], days: int) -> Optional[float]:
    hourly_et0 = _series(hourly.get("et0_fao_evapotranspiration"), days * HOURS_PER_DAY)
    if np.isnan(hourly_et0).all():
        return None
    per_day = np.nansum(hourly_et0.reshape(days, HOURS_PER_DAY), axis=1)
    return float(per_day.mean())


def _soil_temp(hourly: Dict[str, Any], days: int) -> Optional[float]:
    samples = hourly.get("soil_temperature_0cm") or []
    # Only trusted when the hourly series covers the whole window
    if len(samples) < days * HOURS_PER_DAY:
        return None
    return _nanmean(_series(samples, days * HOURS_PER_DAY))


def compute_forecast_aggregate(payload: Dict[str, Any], max_days: int = FORECAST_WINDOW_DAYS) -> ForecastAggregate:
    """
    Averages / totals over the first min(max_days, available) forecast days.
    Raises InsufficientForecastData when no day (or no temperature) is available.
    """
    payload = payload or {}
    daily = payload.get("daily") or {}
    hourly = payload.get("hourly") or {}

    days = min(max_days, available_days(payload))
    if days <= 0:
        raise InsufficientForecastData("Insufficient forecast data: the forecast has no daily entries.")

    avg_max = _nanmean(_series(daily.get("temperature_2m_max"), days))
    avg_min = _nanmean(_series(daily.get("temperature_2m_min"), days))
    if avg_max is None or avg_min is None:
        raise InsufficientForecastData("Insufficient forecast data: daily temperatures are missing.")

    rain_values = daily.get("precipitation_sum")
    if not rain_values:
        rain_values = daily.get("rain_sum")
    total_rain = float(np.nansum(_series(rain_values, days)))

    return ForecastAggregate(
        days=days,
        avg_max_temp=avg_max,
        avg_min_temp=avg_min,
        total_rain_5d=total_rain,
        avg_daily_rain=total_rain / days,
        avg_humidity=_humidity(daily, days),
        avg_et0=_daily_et0(hourly, days),
        avg_soil_temp=_soil_temp(hourly, days),
    )


def daily_outlook(payload: Dict[str, Any], max_days: int = FORECAST_WINDOW_DAYS) -> List[Dict[str, Any]]:
    """Per-day rows (date, temps, humidity range, rain, condition) for display and prompts."""
    daily = (payload or {}).get("daily") or {}
    days = min(max_days, available_days(payload))

    def pick(field: str, i: int):
        values = daily.get(field) or []
        return values[i] if i < len(values) else None

    rows = []
    for i in range(days):
        rain = pick("precipitation_sum", i)
        rows.append({
            "date": pick("time", i),
            "max_temp": pick("temperature_2m_max", i),
            "min_temp": pick("temperature_2m_min", i),
            "humidity_min": pick("relative_humidity_2m_min", i),
            "humidity_max": pick("relative_humidity_2m_max", i),
            "rain": rain if _is_number(rain) else 0.0,
            "condition": weather_condition(pick("weathercode", i)),
        })
    return rows


def hourly_summary(payload: Dict[str, Any], hours: int = 48, step: int = 6) -> List[Dict[str, Any]]:
    """Every `step`-th hour over the next `hours` hours."""
    hourly = (payload or {}).get("hourly") or {}
    times = hourly.get("time") or []
    temps = hourly.get("temperature_2m") or []
    humidity = hourly.get("relative_humidity_2m") or []
    rain = hourly.get("rain") or []

    rows = []
    for i in range(0, min(hours, len(times)), step):
        rows.append({
            "time": times[i],
            "temp": temps[i] if i < len(temps) else None,
            "humidity": humidity[i] if i < len(humidity) else None,
            "rain": rain[i] if i < len(rain) and _is_number(rain[i]) else 0.0,
        })
    return rows
