"""Tests for forecast aggregation and display helpers."""
import pytest

from errors import InsufficientForecastData
from forecast import compute_forecast_aggregate, daily_outlook, hourly_summary, weather_condition


class TestComputeForecastAggregate:
    def test_five_day_means(self, hot_forecast):
        agg = compute_forecast_aggregate(hot_forecast)
        assert agg.days == 5
        assert agg.avg_max_temp == pytest.approx(30.4)
        assert agg.avg_min_temp == pytest.approx(20.4)
        assert agg.total_rain_5d == 0.0
        assert agg.avg_humidity is None
        assert agg.avg_et0 is None
        assert agg.avg_soil_temp is None

    def test_window_is_capped_at_five_days(self, forecast_factory):
        payload = forecast_factory([10] * 5 + [40, 40], [0] * 7, rain=[1] * 7)
        agg = compute_forecast_aggregate(payload)
        assert agg.days == 5
        assert agg.avg_max_temp == pytest.approx(10.0)
        assert agg.total_rain_5d == pytest.approx(5.0)
        assert agg.avg_daily_rain == pytest.approx(1.0)

    def test_short_forecast_uses_available_days(self, forecast_factory):
        agg = compute_forecast_aggregate(forecast_factory([20, 22, 24], [10, 12, 14], rain=[3, 0, 3]))
        assert agg.days == 3
        assert agg.avg_max_temp == pytest.approx(22.0)
        assert agg.avg_daily_rain == pytest.approx(2.0)

    def test_missing_rain_counts_as_zero(self, forecast_factory):
        agg = compute_forecast_aggregate(forecast_factory([20, 20], [10, 10], rain=[None, 4]))
        assert agg.total_rain_5d == pytest.approx(4.0)

    def test_rain_sum_fallback(self, forecast_factory):
        payload = forecast_factory([20, 20], [10, 10])
        del payload["daily"]["precipitation_sum"]
        payload["daily"]["rain_sum"] = [2, 3]
        assert compute_forecast_aggregate(payload).total_rain_5d == pytest.approx(5.0)

    def test_humidity_average_of_max_and_min(self, forecast_factory):
        payload = forecast_factory([20, 20], [10, 10], humidity_max=[90, 80], humidity_min=[50, 60])
        assert compute_forecast_aggregate(payload).avg_humidity == pytest.approx(70.0)

    def test_et0_is_daily_sum_averaged(self, forecast_factory):
        payload = forecast_factory([20, 20], [10, 10], hourly_et0=[0.25] * 24 + [0.5] * 24)
        assert compute_forecast_aggregate(payload).avg_et0 == pytest.approx(9.0)

    def test_soil_needs_full_window(self, forecast_factory):
        partial = forecast_factory([20, 20], [10, 10], hourly_soil=[15] * 30)
        full = forecast_factory([20, 20], [10, 10], hourly_soil=[15] * 48)
        assert compute_forecast_aggregate(partial).avg_soil_temp is None
        assert compute_forecast_aggregate(full).avg_soil_temp == pytest.approx(15.0)

    def test_empty_daily_raises(self):
        with pytest.raises(InsufficientForecastData):
            compute_forecast_aggregate({"daily": {"time": [], "temperature_2m_max": []}})
        with pytest.raises(InsufficientForecastData):
            compute_forecast_aggregate({})

    def test_missing_temperatures_raise(self):
        payload = {"daily": {"time": ["2026-10-16"], "temperature_2m_max": [None], "temperature_2m_min": [None]}}
        with pytest.raises(InsufficientForecastData):
            compute_forecast_aggregate(payload)

    def test_insufficient_data_is_a_value_error(self):
        with pytest.raises(ValueError):
            compute_forecast_aggregate({"daily": {}})


class TestDisplayHelpers:
    def test_weather_condition(self):
        assert weather_condition(0) == "Clear sky"
        assert weather_condition("63") == "Moderate rain"
        assert weather_condition(1234) == "Unknown"
        assert weather_condition(None) == "Unknown"

    def test_daily_outlook_rows(self, forecast_factory):
        rows = daily_outlook(forecast_factory([20, 21], [10, 11], rain=[None, 2], weathercodes=[3, 95]))
        assert [r["date"] for r in rows] == ["2026-10-16", "2026-10-17"]
        assert rows[0]["rain"] == 0.0
        assert rows[1]["condition"] == "Thunderstorm"

    def test_hourly_summary_steps(self):
        payload = {"hourly": {
            "time": [f"t{i}" for i in range(60)],
            "temperature_2m": list(range(60)),
            "relative_humidity_2m": [50] * 60,
            "rain": [0.5] * 60,
        }}
        rows = hourly_summary(payload)
        assert [r["time"] for r in rows] == ["t0", "t6", "t12", "t18", "t24", "t30", "t36", "t42"]
        assert rows[1]["temp"] == 6
