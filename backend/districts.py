"""
FarmerAid - Zone / district resolver.
Maps a free-text place name (or a lat/lon pair) to a Pakistan province ("zone")
and, where possible, a canonical district name. Pure lookups over static tables;
nothing here raises for bad input, unknown places resolve to None.
"""
import re
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Tuple

from app_logging import get_logger

logger = get_logger("districts")

AUTO_ZONE = "auto"
DEFAULT_ZONE = "default"

# --- Province -> district lists ---
PROVINCE_DISTRICTS: Dict[str, List[str]] = {
    "Punjab": [
        "Attock", "Bahawalnagar", "Bahawalpur", "Barki", "Bhakkar", "Chakwal", "Chiniot", "Dera Ghazi Khan",
        "Faisalabad", "Gujranwala", "Gujrat", "Hafizabad", "Jhang", "Jhelum", "Khanewal", "Kasur", "Khushab",
        "Lahore", "Layyah", "Lodhran", "Mandi Bahauddin", "Mianwali", "Multan", "Muzaffargarh", "Nankana Sahib",
        "Narowal", "Okara", "Pakpattan", "Rahim Yar Khan", "Rajanpur", "Rawalpindi", "Sahiwal", "Sargodha",
        "Sheikhupura", "Sialkot", "Toba Tek Singh", "Vehari", "Kot Addu", "Taunsa", "Liaqatpur",
    ],
    "Sindh": [
        "Badin", "Dadu", "Ghotki", "Hyderabad", "Jacobabad", "Jamshoro", "Kamber Shahdadkot", "Karachi",
        "Kashmore", "Khairpur", "Larkana", "Mirpur Khas", "Naushahro Feroze", "Qambar Shahdadkot", "Sanghar",
        "Shaheed Benazirabad", "Shikarpur", "Sukkur", "Thatta", "Tharparkar", "Tando Allahyar",
        "Tando Muhammad Khan", "Umerkot", "Malir",
    ],
    "Khyber Pakhtunkhwa": [
        "Abbottabad", "Bannu", "Battagram", "Bajaur", "Charsadda", "Chitral", "Dera Ismail Khan", "Hangu",
        "Haripur", "Karak", "Kohat", "Lakki Marwat", "Lower Dir", "Lower Kohistan", "Mansehra", "Mardan",
        "Nowshera", "Peshawar", "Shangla", "Swabi", "Swat", "Tank", "Torghar", "Upper Dir", "Upper Kohistan",
        "Khyber", "Kurram", "Orakzai", "Mohmand",
    ],
    "Balochistan": [
        "Awaran", "Barkhan", "Chagai", "Dera Bugti", "Gwadar", "Harnai", "Jafarabad", "Jhal Magsi", "Kachhi",
        "Kalat", "Kech", "Kharan", "Khuzdar", "Killa Saifullah", "Kohlu", "Lasbela", "Loralai", "Mastung",
        "Nushki", "Panjgur", "Pishin", "Quetta", "Sibi", "Washuk", "Zhob", "Ziarat", "Sohbatpur",
    ],
    "Gilgit-Baltistan": [
        "Gilgit", "Skardu", "Hunza", "Nagar", "Ghizer", "Ghanche", "Astore", "Diamer", "Shigar", "Kharmang",
    ],
    "Azad Jammu and Kashmir": [
        "Muzaffarabad", "Mirpur", "Kotli", "Poonch", "Bhimber", "Bagh", "Neelum", "Hattian Bala", "Sudhanoti",
        "Haveli",
    ],
    "Islamabad": ["Islamabad"],
}

# Common spellings and sub-city names -> canonical district
ALIASES: Dict[str, str] = {
    "dg khan": "Dera Ghazi Khan",
    "d g khan": "Dera Ghazi Khan",
    "dgkhan": "Dera Ghazi Khan",
    "di khan": "Dera Ismail Khan",
    "d i khan": "Dera Ismail Khan",
    "ry khan": "Rahim Yar Khan",
    "rahim yar": "Rahim Yar Khan",
    "toba": "Toba Tek Singh",
    "kot addu city": "Kot Addu",
    "nawabshah": "Shaheed Benazirabad",
    "keamari": "Karachi",
    "karachi east": "Karachi",
    "karachi west": "Karachi",
    "karachi south": "Karachi",
    "karachi central": "Karachi",
    "multan city": "Multan",
    "muzaffar garh": "Muzaffargarh",
    # Sanawan is a town near Kot Addu; geocoders sometimes place it in India
    "sanawan": "Kot Addu",
    "sanawan uttar pradesh": "Kot Addu",
    "sanawan india": "Kot Addu",
    "sanawan uttar pradesh india": "Kot Addu",
}

# Punjab towns that are not districts themselves (zone-only hints)
PUNJAB_TOWNS: List[str] = [
    "daska", "chishtian", "shujabad", "jalalpur pirwala", "sangla hill", "kamoke", "wazirabad",
    "burewala", "arifwala", "jaranwala",
]

# Province keywords, checked in order when no district matches
PROVINCE_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("Punjab", ("punjab",)),
    ("Sindh", ("sindh",)),
    ("Khyber Pakhtunkhwa", ("khyber", "kpk", "pakhtunkhwa")),
    ("Balochistan", ("baloch",)),
    ("Gilgit-Baltistan", ("gilgit", "skardu", "hunza")),
    ("Azad Jammu and Kashmir", ("azad kashmir", "azad jammu")),
]

# Approximate rectangles (lat_min, lat_max, lon_min, lon_max); first hit wins
ZONE_BOUNDS: List[Tuple[str, float, float, float, float]] = [
    ("Punjab", 27.5, 33.5, 69.5, 75.5),
    ("Sindh", 23.5, 28.0, 67.0, 71.5),
    ("Khyber Pakhtunkhwa", 31.0, 36.5, 69.0, 74.5),
    ("Balochistan", 24.0, 30.5, 61.0, 70.5),
    ("Gilgit-Baltistan", 35.0, 37.5, 70.0, 78.0),
]

# Short names accepted for an explicit zone selection
ZONE_NAMES: Dict[str, str] = {
    "punjab": "Punjab",
    "sindh": "Sindh",
    "kpk": "Khyber Pakhtunkhwa",
    "kp": "Khyber Pakhtunkhwa",
    "khyber pakhtunkhwa": "Khyber Pakhtunkhwa",
    "balochistan": "Balochistan",
    "gilgit": "Gilgit-Baltistan",
    "gb": "Gilgit-Baltistan",
    "gilgit baltistan": "Gilgit-Baltistan",
    "ajk": "Azad Jammu and Kashmir",
    "azad jammu and kashmir": "Azad Jammu and Kashmir",
    "islamabad": "Islamabad",
}

_PUNCTUATION = re.compile(r"[.\-,'/]")
_WHITESPACE = re.compile(r"\s+")


def normalize_place(text: Optional[str]) -> str:
    """Lowercase, turn . - , ' / into spaces, collapse whitespace."""
    if not text or not isinstance(text, str):
        return ""
    lowered = _PUNCTUATION.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def _build_lookups() -> Tuple[Dict[str, str], Dict[str, str], Dict[str, str]]:
    """
    Build (district -> zone, normalized key -> district, normalized alias -> district).
    Raises ValueError if a district is listed under two zones or an alias points nowhere.
    """
    district_zone: Dict[str, str] = {}
    district_keys: Dict[str, str] = {}
    for zone, districts in PROVINCE_DISTRICTS.items():
        for district in districts:
            owner = district_zone.get(district)
            if owner and owner != zone:
                raise ValueError(f"District {district!r} listed under both {owner} and {zone}")
            district_zone[district] = zone
            district_keys.setdefault(normalize_place(district), district)

    alias_keys: Dict[str, str] = {}
    for alias, district in ALIASES.items():
        if district not in district_zone:
            raise ValueError(f"Alias {alias!r} points to unknown district {district!r}")
        key = normalize_place(alias)
        existing = alias_keys.get(key)
        if existing and existing != district:
            raise ValueError(f"Alias {alias!r} maps to both {existing} and {district}")
        alias_keys[key] = district
        district_keys.setdefault(key, district)

    return district_zone, district_keys, alias_keys


DISTRICT_ZONES, DISTRICT_KEYS, ALIAS_KEYS = _build_lookups()


@dataclass(frozen=True)
class ResolvedLocation:
    zone: Optional[str] = None
    district: Optional[str] = None
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


def match_district(name: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Return (canonical district, match kind) for a place string, or None.
    Kinds: alias, district, token, substring. Substring ties go to the longest key.
    """
    norm = normalize_place(name)
    if not norm:
        return None

    if norm in ALIAS_KEYS:
        return ALIAS_KEYS[norm], "alias"

    if norm in DISTRICT_KEYS:
        return DISTRICT_KEYS[norm], "district"

    for token in norm.split(" "):
        if token in DISTRICT_KEYS:
            return DISTRICT_KEYS[token], "token"

    candidates = [key for key in DISTRICT_KEYS if key in norm]
    if candidates:
        best = max(candidates, key=len)
        return DISTRICT_KEYS[best], "substring"

    return None


def resolve_district(name: Optional[str]) -> Optional[str]:
    """Canonical district name (e.g. 'Kot Addu') for a place string."""
    match = match_district(name)
    return match[0] if match else None


def _zone_hint(norm: str) -> Optional[Tuple[str, str]]:
    for town in PUNJAB_TOWNS:
        if town in norm:
            return "Punjab", "town"
    for zone, keywords in PROVINCE_KEYWORDS:
        if any(k in norm for k in keywords):
            return zone, "province"
    return None


def zone_from_name(name: Optional[str]) -> Optional[str]:
    """Zone for a place string via district match, town list, then province keywords."""
    match = match_district(name)
    if match:
        return DISTRICT_ZONES[match[0]]
    hint = _zone_hint(normalize_place(name))
    return hint[0] if hint else None


def zone_from_coords(latitude, longitude) -> Optional[str]:
    """Zone whose bounding box contains the point; None outside every box."""
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        return None
    for zone, lat_min, lat_max, lon_min, lon_max in ZONE_BOUNDS:
        if lat_min <= lat <= lat_max and lon_min <= lon <= lon_max:
            return zone
    return None


def resolve_location(
    name: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
) -> ResolvedLocation:
    """Name-based match first, coordinates as fallback."""
    match = match_district(name)
    if match:
        district, kind = match
        return ResolvedLocation(zone=DISTRICT_ZONES[district], district=district, source=kind)

    hint = _zone_hint(normalize_place(name))
    if hint:
        return ResolvedLocation(zone=hint[0], district=None, source=hint[1])

    zone = zone_from_coords(latitude, longitude)
    if zone:
        return ResolvedLocation(zone=zone, district=None, source="coordinates")

    logger.debug("No zone resolved for %r (%s, %s)", name, latitude, longitude)
    return ResolvedLocation()


def canonical_zone(zone: Optional[str]) -> Optional[str]:
    """Map a zone selection ('KPK', 'punjab', ...) to its canonical name; unknown names pass through."""
    if not zone or not zone.strip():
        return None
    key = normalize_place(zone)
    if key in (AUTO_ZONE, DEFAULT_ZONE):
        return None
    return ZONE_NAMES.get(key, zone.strip())


def resolve_zone_selection(
    selection: Optional[str],
    name: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
) -> ResolvedLocation:
    """
    'auto', 'default' (or empty) run resolve_location. An explicit zone is used as-is;
    a district from the name is kept only when it lies inside that zone.
    """
    if not selection or normalize_place(selection) in (AUTO_ZONE, DEFAULT_ZONE):
        return resolve_location(name, latitude, longitude)

    zone = canonical_zone(selection)
    district = resolve_district(name)
    if district and DISTRICT_ZONES.get(district) != zone:
        district = None
    return ResolvedLocation(zone=zone, district=district, source="selected")


def geocode_hint(name: Optional[str]) -> Optional[str]:
    """'<District>, Pakistan' when the name maps to a known district, for biasing the geocoder."""
    district = resolve_district(name)
    if district:
        return f"{district}, Pakistan"
    return None
