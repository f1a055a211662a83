"""
FarmerAid - Open-Meteo geocoding and forecast client.
"""
from typing import Any, Dict, Optional, Tuple

import requests

from app_config import settings
from app_logging import get_logger
from districts import canonical_zone, geocode_hint, resolve_district
from errors import UpstreamError

logger = get_logger("weather_service")

DAILY_FIELDS = [
    "temperature_2m_max",
    "temperature_2m_min",
    "weathercode",
    "relative_humidity_2m_max",
    "relative_humidity_2m_min",
    "sunrise",
    "sunset",
    "precipitation_sum",
    "rain_sum",
]

HOURLY_FIELDS = [
    "temperature_2m",
    "relative_humidity_2m",
    "rain",
    "weathercode",
    "soil_temperature_0cm",
    "et0_fao_evapotranspiration",
]

FORECAST_DAYS = 7
PAKISTAN = "PK"


def _get_json(url: str, params: Dict[str, Any], upstream: str, failure: str) -> Dict[str, Any]:
    try:
        response = requests.get(url, params=params, timeout=settings.UPSTREAM_TIMEOUT)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.Timeout:
        logger.error("%s request timed out", upstream, extra={"upstream": upstream})
        raise UpstreamError(failure, details="Request timed out")
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        logger.error("%s answered HTTP %s", upstream, status, extra={"upstream": upstream, "status": status})
        raise UpstreamError(failure, details=f"HTTP {status}")
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error("%s request failed: %s", upstream, e, extra={"upstream": upstream})
        raise UpstreamError(failure, details=str(e))


def geocode(
    name: str,
    count: int = 1,
    language: str = "en",
    countrycodes: Optional[str] = None,
) -> Dict[str, Any]:
    """Raw geocoder response for a place name. Raises UpstreamError."""
    params: Dict[str, Any] = {"name": name, "count": count, "language": language}
    if countrycodes:
        params["countrycodes"] = countrycodes
    return _get_json(settings.GEOCODE_URL, params, "geocoding", "Geocoding failed")


def fetch_forecast(latitude: float, longitude: float) -> Dict[str, Any]:
    """7-day daily + hourly forecast with current weather, in the location's timezone."""
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "daily": ",".join(DAILY_FIELDS),
        "hourly": ",".join(HOURLY_FIELDS),
        "current_weather": "true",
        "timezone": "auto",
        "forecast_days": FORECAST_DAYS,
    }
    return _get_json(settings.FORECAST_URL, params, "forecast", "Weather fetch failed")


def _first_result(data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    results = (data or {}).get("results") or []
    return results[0] if results else None


def _is_pakistan(result: Dict[str, Any]) -> bool:
    code = result.get("country_code") or result.get("country") or ""
    return code.strip().upper() in (PAKISTAN, "PAKISTAN")


def locate_place(name: str, zone_selection: Optional[str] = None) -> Optional[Tuple[float, float, str]]:
    """
    (latitude, longitude, display name) for a place, or None when nothing matches.
    Known districts are queried as "<District>, Pakistan" (falling back to the raw
    name when that finds nothing); a non-Pakistan hit for a known district is
    re-queried once with the bare canonical name restricted to PK.
    """
    hint = geocode_hint(name)
    zone_biased = bool(canonical_zone(zone_selection))

    primary = None
    if hint:
        primary = _first_result(geocode(hint, countrycodes=PAKISTAN))
    if primary is None:
        primary = _first_result(geocode(name, countrycodes=PAKISTAN if zone_biased else None))
    if primary is None:
        logger.info("No geocoding result for %r", name)
        return None

    district = resolve_district(name)
    if district and not _is_pakistan(primary):
        forced = _first_result(geocode(district, countrycodes=PAKISTAN))
        if forced is not None:
            primary = forced

    return float(primary["latitude"]), float(primary["longitude"]), primary.get("name") or name


