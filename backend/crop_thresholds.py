"""
FarmerAid - Crop threshold tables.
Agronomic ranges used for the rule-based suitability check: ideal average daily
max / min temperature, minimum soil temperature and minimum 5-day rainfall.
Three built-in tiers (generic per crop, zone-tuned, district-tuned) plus user
overrides from the custom threshold store.
"""
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from app_logging import get_logger

logger = get_logger("thresholds")

SOURCE_CUSTOM = "custom"
SOURCE_DISTRICT = "district"
SOURCE_ZONE = "zone"
SOURCE_GENERIC = "generic"


@dataclass(frozen=True)
class ThresholdSet:
    ideal_max: Tuple[float, float]
    ideal_min: Tuple[float, float]
    min_soil_temp: float = 0.0
    min_total_rain_5d: float = 0.0

    def __post_init__(self):
        ideal_max = tuple(float(v) for v in self.ideal_max)
        ideal_min = tuple(float(v) for v in self.ideal_min)
        min_soil_temp = float(self.min_soil_temp or 0)
        min_total_rain_5d = float(self.min_total_rain_5d or 0)
        if not all(math.isfinite(v) for v in ideal_max + ideal_min + (min_soil_temp, min_total_rain_5d)):
            raise ValueError("threshold values must be finite numbers")
        if len(ideal_max) != 2 or len(ideal_min) != 2:
            raise ValueError("ideal_max and ideal_min must be [low, high] pairs")
        if ideal_max[0] > ideal_max[1]:
            raise ValueError(f"ideal_max lower bound {ideal_max[0]} exceeds upper bound {ideal_max[1]}")
        if ideal_min[0] > ideal_min[1]:
            raise ValueError(f"ideal_min lower bound {ideal_min[0]} exceeds upper bound {ideal_min[1]}")
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "ideal_max", ideal_max)
        object.__setattr__(self, "ideal_min", ideal_min)
        object.__setattr__(self, "min_soil_temp", min_soil_temp)
        object.__setattr__(self, "min_total_rain_5d", min_total_rain_5d)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ideal_max": list(self.ideal_max),
            "ideal_min": list(self.ideal_min),
            "min_soil_temp": self.min_soil_temp,
            "min_total_rain_5d": self.min_total_rain_5d,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ThresholdSet":
        return cls(
            ideal_max=tuple(data["ideal_max"]),
            ideal_min=tuple(data["ideal_min"]),
            min_soil_temp=data.get("min_soil_temp", 0),
            min_total_rain_5d=data.get("min_total_rain_5d", 0),
        )


def _t(ideal_max, ideal_min, min_soil_temp, min_total_rain_5d) -> ThresholdSet:
    return ThresholdSet(tuple(ideal_max), tuple(ideal_min), min_soil_temp, min_total_rain_5d)


# --- Generic per-crop ranges (Pakistan plains) ---
GENERIC_THRESHOLDS: Dict[str, ThresholdSet] = {
    "wheat": _t([15, 25], [5, 15], 5, 0),         # winter crop
    "rice": _t([25, 32], [20, 26], 18, 20),       # kharif, warm and wet
    "cotton": _t([28, 36], [18, 26], 16, 0),
    "sugarcane": _t([25, 34], [18, 26], 18, 10),
    "maize": _t([20, 30], [12, 22], 12, 5),
}

# --- Zone-tuned ranges ---
ZONE_THRESHOLDS: Dict[str, Dict[str, ThresholdSet]] = {
    "Punjab": {
        "wheat": _t([12, 24], [4, 14], 5, 0),
        "rice": _t([28, 34], [22, 28], 20, 25),
        "cotton": _t([30, 38], [20, 28], 18, 0),
        "sugarcane": _t([26, 34], [20, 28], 20, 15),
        "maize": _t([22, 32], [14, 24], 14, 5),
    },
}

# --- District-tuned ranges: zone -> district -> crop ---
DISTRICT_THRESHOLDS: Dict[str, Dict[str, Dict[str, ThresholdSet]]] = {
    "Punjab": {
        "Kot Addu": {
            "wheat": _t([12, 26], [4, 14], 5, 0),
            "rice": _t([28, 35], [22, 30], 20, 25),
            "cotton": _t([30, 38], [20, 30], 18, 0),
            "sugarcane": _t([26, 36], [20, 30], 20, 15),
            "maize": _t([22, 34], [14, 26], 14, 5),
        },
        "Multan": {
            "wheat": _t([14, 28], [6, 16], 6, 0),
            "rice": _t([29, 36], [23, 31], 20, 30),
            "cotton": _t([32, 40], [22, 32], 18, 0),
            "sugarcane": _t([28, 38], [22, 32], 22, 15),
            "maize": _t([24, 36], [16, 28], 14, 5),
        },
        "Muzaffargarh": {
            "wheat": _t([13, 27], [5, 15], 5, 0),
            "rice": _t([28, 35], [22, 30], 20, 25),
            "cotton": _t([31, 39], [21, 31], 18, 0),
            "sugarcane": _t([27, 36], [20, 30], 20, 12),
            "maize": _t([23, 34], [15, 26], 14, 5),
        },
        "Lahore": {
            "wheat": _t([11, 24], [3, 14], 4, 0),
            "rice": _t([26, 33], [21, 28], 18, 20),
            "cotton": _t([28, 36], [18, 28], 16, 0),
            "sugarcane": _t([25, 34], [18, 28], 18, 12),
            "maize": _t([20, 30], [12, 22], 12, 5),
        },
        "Faisalabad": {
            "wheat": _t([12, 25], [4, 15], 5, 0),
            "rice": _t([27, 34], [21, 29], 19, 22),
            "cotton": _t([29, 37], [19, 29], 17, 0),
            "sugarcane": _t([26, 35], [19, 29], 19, 12),
            "maize": _t([21, 32], [13, 24], 13, 5),
        },
        "Rawalpindi": {
            "wheat": _t([10, 22], [2, 12], 4, 0),
            "rice": _t([24, 31], [19, 26], 17, 18),
            "cotton": _t([26, 34], [16, 26], 15, 0),
            "sugarcane": _t([24, 33], [17, 27], 17, 10),
            "maize": _t([19, 29], [11, 21], 12, 5),
        },
        "Dera Ghazi Khan": {
            "wheat": _t([14, 30], [6, 18], 6, 0),
            "rice": _t([30, 36], [24, 32], 21, 30),
            "cotton": _t([33, 41], [23, 33], 19, 0),
            "sugarcane": _t([29, 38], [23, 33], 22, 15),
            "maize": _t([25, 37], [17, 29], 15, 5),
        },
        "Rahim Yar Khan": {
            "wheat": _t([15, 31], [7, 19], 6, 0),
            "rice": _t([30, 37], [24, 33], 22, 30),
            "cotton": _t([33, 41], [23, 33], 19, 0),
            "sugarcane": _t([29, 38], [23, 33], 22, 15),
            "maize": _t([25, 37], [17, 29], 15, 5),
        },
        "Sargodha": {
            "wheat": _t([11, 24], [3, 14], 4, 0),
            "rice": _t([26, 33], [20, 28], 18, 20),
            "cotton": _t([28, 36], [18, 28], 16, 0),
            "sugarcane": _t([25, 34], [18, 28], 18, 12),
            "maize": _t([20, 31], [12, 23], 12, 5),
        },
        "Gujranwala": {
            "wheat": _t([12, 25], [4, 15], 5, 0),
            "rice": _t([27, 34], [21, 29], 19, 22),
            "cotton": _t([29, 37], [19, 29], 17, 0),
            "sugarcane": _t([26, 35], [19, 29], 19, 12),
            "maize": _t([21, 32], [13, 24], 13, 5),
        },
    },
}


def crop_key(crop: Optional[str]) -> str:
    return (crop or "").strip().lower()


def custom_key(zone: Optional[str], crop: Optional[str]) -> str:
    """Override key: '<zone or default>::<crop lowercased>'."""
    return f"{zone or 'default'}::{crop_key(crop)}"


def default_thresholds(crop: Optional[str]) -> Optional[ThresholdSet]:
    """Generic built-in thresholds for a crop, or None."""
    return GENERIC_THRESHOLDS.get(crop_key(crop))


def district_thresholds(zone: Optional[str], district: Optional[str], crop: Optional[str]) -> Optional[ThresholdSet]:
    """District-tuned thresholds; only consulted when the district sits in the given zone."""
    if not zone or not district:
        return None
    entry = DISTRICT_THRESHOLDS.get(zone, {}).get(district.strip())
    if not entry:
        return None
    return entry.get(crop_key(crop))


def zone_thresholds(zone: Optional[str], crop: Optional[str]) -> Optional[ThresholdSet]:
    if not zone:
        return None
    return ZONE_THRESHOLDS.get(zone, {}).get(crop_key(crop))


@dataclass(frozen=True)
class ResolvedThresholds:
    thresholds: ThresholdSet
    source: str

    @property
    def is_custom(self) -> bool:
        return self.source == SOURCE_CUSTOM


class ThresholdRegistry:
    """
    Effective threshold lookup: custom override -> district -> zone -> generic.
    `custom_store` is anything with get(zone, crop) -> Optional[ThresholdSet].
    """

    def __init__(self, custom_store=None):
        self.custom_store = custom_store

    def resolve(
        self,
        crop: Optional[str],
        zone: Optional[str] = None,
        district: Optional[str] = None,
    ) -> Optional[ResolvedThresholds]:
        if not crop_key(crop):
            return None

        if self.custom_store is not None:
            custom = self.custom_store.get(zone, crop)
            if custom is not None:
                return ResolvedThresholds(custom, SOURCE_CUSTOM)

        found = district_thresholds(zone, district, crop)
        if found is not None:
            return ResolvedThresholds(found, SOURCE_DISTRICT)

        found = zone_thresholds(zone, crop)
        if found is not None:
            return ResolvedThresholds(found, SOURCE_ZONE)

        found = default_thresholds(crop)
        if found is not None:
            return ResolvedThresholds(found, SOURCE_GENERIC)

        logger.debug("No thresholds known for crop %r (zone=%s, district=%s)", crop, zone, district)
        return None
