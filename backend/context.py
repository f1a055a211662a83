"""
FarmerAid - Per-request assessment context.
Carries everything one evaluation needs (crop, forecast, location, resolved zone,
aggregate) so the suitability check and the advisory generator share inputs
explicitly instead of through module state.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from districts import AUTO_ZONE, ResolvedLocation, resolve_zone_selection
from forecast import ForecastAggregate, compute_forecast_aggregate


@dataclass(frozen=True)
class AssessmentContext:
    crop: str
    forecast: Dict[str, Any]
    aggregate: ForecastAggregate
    location: ResolvedLocation
    location_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    zone_selection: str = AUTO_ZONE

    @property
    def location_label(self) -> str:
        return self.location_name or "your location"


def build_context(
    crop: str,
    forecast: Dict[str, Any],
    location_name: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    zone_selection: Optional[str] = AUTO_ZONE,
) -> AssessmentContext:
    """Resolve the zone and aggregate the forecast once. Raises InsufficientForecastData."""
    aggregate = compute_forecast_aggregate(forecast)
    location = resolve_zone_selection(zone_selection, location_name, latitude, longitude)
    return AssessmentContext(
        crop=crop,
        forecast=forecast,
        aggregate=aggregate,
        location=location,
        location_name=location_name,
        latitude=latitude,
        longitude=longitude,
        zone_selection=zone_selection or AUTO_ZONE,
    )
