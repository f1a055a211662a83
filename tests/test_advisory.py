"""Tests for the rule-based crop care advisory."""
from datetime import date

from advisory import (
    RISK_HIGH,
    RISK_LOW,
    RISK_MODERATE,
    STANDARD_RECOMMENDATIONS,
    assess_risk,
    build_advisory_prompt,
    fertilizer_guidance,
    generate_advisory,
    pest_guidance,
    watering_schedule,
)
from context import build_context
from forecast import ForecastAggregate


def aggregate(avg_max, avg_min, rain=0.0, humidity=None, et0=None, soil=None, days=5):
    return ForecastAggregate(
        days=days,
        avg_max_temp=avg_max,
        avg_min_temp=avg_min,
        total_rain_5d=rain,
        avg_daily_rain=rain / days,
        avg_humidity=humidity,
        avg_et0=et0,
        avg_soil_temp=soil,
    )


class TestAssessRisk:
    def test_wheat_rust_is_high(self):
        risk = assess_risk(aggregate(27, 15, rain=15, humidity=75), "wheat")
        assert risk.level == RISK_HIGH
        assert "Wheat Rust" in risk.threats[0]
        assert "presents some challenges" in risk.summary

    def test_wheat_cold_needs_dry_week(self):
        assert assess_risk(aggregate(12, 3, rain=0), "wheat").level == RISK_MODERATE
        assert assess_risk(aggregate(12, 3, rain=2), "wheat").level == RISK_LOW

    def test_humidity_rules_skip_without_humidity(self):
        risk = assess_risk(aggregate(35, 28, rain=30, humidity=None), "rice")
        assert risk.level == RISK_LOW

    def test_rice_blight(self):
        risk = assess_risk(aggregate(33, 26, rain=25, humidity=90), "Rice")
        assert risk.level == RISK_HIGH
        assert "Bacterial Blight" in risk.threats[0]

    def test_cotton_whitefly(self):
        risk = assess_risk(aggregate(38, 27, rain=0, humidity=40), "cotton")
        assert risk.level == RISK_HIGH
        assert "Whitefly" in risk.threats[0]

    def test_maize_cold(self):
        assert assess_risk(aggregate(18, 8), "maize").level == RISK_MODERATE

    def test_sugarcane_moderate(self):
        assert assess_risk(aggregate(30, 20, humidity=65), "sugarcane").level == RISK_MODERATE

    def test_unknown_crop_uses_generic_rules(self):
        risk = assess_risk(aggregate(37, 25, rain=2), "okra")
        assert risk.level == RISK_MODERATE
        assert "heat stress" in risk.threats[0]

    def test_favorable_week(self):
        risk = assess_risk(aggregate(20, 10, rain=0, humidity=40), "wheat")
        assert risk.level == RISK_LOW
        assert "appears largely favorable" in risk.summary
        assert risk.threats == ["No significant pest or disease activity is currently indicated by the weather forecast."]

    def test_standard_recommendations_always_present(self):
        data = assess_risk(aggregate(20, 10), "wheat").to_dict()
        assert data["recommendations"][-3:] == STANDARD_RECOMMENDATIONS
        assert data["disclaimer"]


class TestCareSections:
    def test_wheat_fertilizer_wet_and_cool(self):
        section = fertilizer_guidance(aggregate(16, 5, rain=110), "wheat")
        assert any("Zinc Sulfate" in item for item in section.items)
        assert any("Delay heavy N" in item for item in section.items)
        assert any("smaller split N" in item for item in section.items)
        assert "Soil temp: n/a" in section.summary

    def test_generic_fertilizer(self):
        section = fertilizer_guidance(aggregate(25, 15), "okra")
        assert section.items == ["Balanced N-P-K program; prefer split N applications to reduce leaching."]

    def test_watering_reduced_when_rain_covers_demand(self):
        section = watering_schedule(aggregate(25, 15, rain=30, et0=4), "rice")
        assert any("Reduced irrigation" in item for item in section.items)
        assert section.items[-1].startswith("Maintain appropriate standing water")

    def test_watering_increased_when_hot_and_dry(self):
        section = watering_schedule(aggregate(34, 22, rain=1, et0=6), "cotton")
        assert any("Increased irrigation" in item for item in section.items)

    def test_watering_without_et0(self):
        section = watering_schedule(aggregate(25, 15, rain=0), "maize")
        assert section.items[0].startswith("Estimated ET0: n/a")
        assert any("Regular irrigation" in item for item in section.items)

    def test_pest_guidance_levels(self):
        high = pest_guidance(aggregate(32, 20, rain=0), RISK_HIGH)
        assert high.items[0].startswith("High Alert")
        assert any("whiteflies" in item for item in high.items)
        assert high.items[-1].startswith("Integrated Pest Management")
        low = pest_guidance(aggregate(20, 10), RISK_LOW)
        assert len(low.items) == 2


class TestGenerateAdvisory:
    def test_sections_share_one_aggregate(self, hot_forecast):
        context = build_context("wheat", hot_forecast, location_name="Multan")
        advisory = generate_advisory(context)
        data = advisory.to_dict()
        assert data["location"] == "Multan"
        assert data["risk"]["level"] == RISK_LOW
        assert "30.4°C" in data["risk"]["summary"]
        assert "Avg Tmax 30.4°C" in data["fertilizer"]["summary"]

    def test_prompt_contents(self, forecast_factory):
        payload = forecast_factory([20, 21], [10, 11], rain=[0, 1.5], weathercodes=[0, 61])
        payload["current_weather"] = {"temperature": 19.5, "weathercode": 3, "windspeed": 4}
        context = build_context("rice", payload, location_name="Lahore")
        prompt = build_advisory_prompt(context, today=date(2026, 10, 16))
        assert "farmer in Lahore for their rice crop" in prompt
        assert "Assume the current date is 2026-10-16." in prompt
        assert "Condition: Overcast" in prompt
        assert "2026-10-17: Max Temp 21°C" in prompt
        assert "Rain 1.5mm, Condition: Light rain." in prompt
        assert "Hourly Forecast Summary" not in prompt
