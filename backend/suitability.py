"""
FarmerAid - Crop suitability evaluation.
Compares the 5-day forecast aggregate against the effective threshold set for a
crop and location. Every violated condition adds one reason; the status is the
reason count (0 Suitable, 1 Marginal, 2+ Unsuitable), unweighted.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from context import AssessmentContext
from crop_thresholds import ThresholdRegistry, ThresholdSet
from forecast import ForecastAggregate

SUITABLE = "Suitable"
MARGINAL = "Marginal"
UNSUITABLE = "Unsuitable"


@dataclass
class SuitabilityResult:
    status: str
    reasons: List[str]
    metrics: ForecastAggregate
    zone: Optional[str] = None
    district: Optional[str] = None
    is_custom: bool = False
    threshold_source: Optional[str] = None
    thresholds: Optional[ThresholdSet] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "reasons": list(self.reasons),
            "metrics": self.metrics.to_dict(),
            "zone": self.zone,
            "district": self.district,
            "is_custom": self.is_custom,
            "threshold_source": self.threshold_source,
            "thresholds": self.thresholds.to_dict() if self.thresholds else None,
        }


def classify_status(reasons: List[str]) -> str:
    if not reasons:
        return SUITABLE
    if len(reasons) == 1:
        return MARGINAL
    return UNSUITABLE


def check_thresholds(aggregate: ForecastAggregate, thresholds: ThresholdSet, crop: str) -> List[str]:
    """One human-readable reason per violated bound."""
    reasons = []
    avg_max = aggregate.avg_max_temp
    avg_min = aggregate.avg_min_temp

    if avg_max > thresholds.ideal_max[1]:
        reasons.append(f"Average daytime temperature ({avg_max:.1f}°C) is above the recommended upper bound for {crop}.")
    if avg_max < thresholds.ideal_max[0]:
        reasons.append(f"Average daytime temperature ({avg_max:.1f}°C) is below the typical lower expected range for {crop}.")
    if avg_min > thresholds.ideal_min[1]:
        reasons.append(f"Average night temperature ({avg_min:.1f}°C) is higher than ideal upper bound for {crop}.")
    if avg_min < thresholds.ideal_min[0]:
        reasons.append(f"Average night temperature ({avg_min:.1f}°C) is lower than ideal lower bound for {crop}.")

    soil = aggregate.avg_soil_temp
    if thresholds.min_soil_temp and soil is not None and soil < thresholds.min_soil_temp:
        reasons.append(
            f"Soil temperature (~{soil:.1f}°C) is below recommended minimum "
            f"({thresholds.min_soil_temp:g}°C) for {crop} establishment."
        )

    if thresholds.min_total_rain_5d and aggregate.total_rain_5d < thresholds.min_total_rain_5d:
        reasons.append(
            f"Forecast rainfall ({aggregate.total_rain_5d:.1f} mm over {aggregate.days} days) "
            f"may be insufficient for {crop} without irrigation."
        )
    return reasons


def generic_reasons(aggregate: ForecastAggregate) -> List[str]:
    """Crop-agnostic extremes, used when no thresholds are known for the crop."""
    reasons = []
    if aggregate.avg_max_temp > 40:
        reasons.append("Extreme daytime heat (avg max > 40°C) likely unsuitable.")
    if aggregate.avg_min_temp < -5:
        reasons.append("Very low night temperatures (avg min < -5°C) likely unsuitable.")
    if aggregate.avg_max_temp > 35 and aggregate.total_rain_5d < 5:
        reasons.append("Very hot and dry conditions — high water demand and heat stress risk.")
    return reasons


def evaluate_suitability(context: AssessmentContext, registry: ThresholdRegistry) -> SuitabilityResult:
    """Suitability for context.crop at context.location using the registry's effective thresholds."""
    zone = context.location.zone
    district = context.location.district
    resolved = registry.resolve(context.crop, zone, district)

    if resolved is None:
        reasons = generic_reasons(context.aggregate)
        return SuitabilityResult(
            status=classify_status(reasons),
            reasons=reasons,
            metrics=context.aggregate,
            zone=zone,
            district=district,
        )

    reasons = check_thresholds(context.aggregate, resolved.thresholds, context.crop)
    return SuitabilityResult(
        status=classify_status(reasons),
        reasons=reasons,
        metrics=context.aggregate,
        zone=zone,
        district=district,
        is_custom=resolved.is_custom,
        threshold_source=resolved.source,
        thresholds=resolved.thresholds,
    )


def suitability_alert(result: SuitabilityResult, crop: str, location_label: str) -> Optional[str]:
    """Banner text for Marginal / Unsuitable results."""
    if result.status == SUITABLE:
        return None
    zone_text = f" ({result.zone})" if result.zone else ""
    return f"Suitability Alert: {result.status} for {crop} at {location_label}{zone_text}."
