"""Shared fixtures: forecast payload builder, temp threshold store, API client."""
import pytest
from fastapi.testclient import TestClient

from threshold_store import CustomThresholdStore


def make_forecast(
    max_temps,
    min_temps,
    rain=None,
    humidity_max=None,
    humidity_min=None,
    hourly_et0=None,
    hourly_soil=None,
    weathercodes=None,
):
    """Open-Meteo shaped payload with one daily entry per max temperature."""
    days = len(max_temps)
    daily = {
        "time": [f"2026-10-{16 + i:02d}" for i in range(days)],
        "temperature_2m_max": list(max_temps),
        "temperature_2m_min": list(min_temps),
        "precipitation_sum": list(rain) if rain is not None else [0.0] * days,
        "weathercode": list(weathercodes) if weathercodes is not None else [0] * days,
    }
    if humidity_max is not None:
        daily["relative_humidity_2m_max"] = list(humidity_max)
    if humidity_min is not None:
        daily["relative_humidity_2m_min"] = list(humidity_min)

    hourly = {}
    if hourly_et0 is not None:
        hourly["et0_fao_evapotranspiration"] = list(hourly_et0)
    if hourly_soil is not None:
        hourly["soil_temperature_0cm"] = list(hourly_soil)
    return {"daily": daily, "hourly": hourly}


@pytest.fixture
def forecast_factory():
    return make_forecast


@pytest.fixture
def hot_forecast():
    return make_forecast([30, 29, 31, 30, 32], [20, 19, 21, 20, 22])


@pytest.fixture
def mild_forecast():
    return make_forecast([18, 20, 19, 21, 18], [8, 9, 7, 10, 8], rain=[0, 0, 0, 0, 0])


@pytest.fixture
def store(tmp_path):
    return CustomThresholdStore(tmp_path / "thresholds.json")


@pytest.fixture
def client(store, monkeypatch):
    import main
    from app_config import settings
    from rate_limiter import gemini_limiter

    monkeypatch.setattr(settings, "FRONTEND_API_KEY", None)
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "")
    gemini_limiter.reset()
    main.app.dependency_overrides[main.get_threshold_store] = lambda: store
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()
    gemini_limiter.reset()
