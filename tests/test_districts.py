"""Tests for zone / district resolution."""
import pytest

from districts import (
    DISTRICT_ZONES,
    canonical_zone,
    geocode_hint,
    match_district,
    normalize_place,
    resolve_district,
    resolve_location,
    resolve_zone_selection,
    zone_from_coords,
    zone_from_name,
)


class TestNormalizePlace:
    def test_punctuation_and_case(self):
        assert normalize_place("  D.G.  Khan ") == "d g khan"
        assert normalize_place("Toba-Tek/Singh") == "toba tek singh"

    def test_empty_and_non_string(self):
        assert normalize_place(None) == ""
        assert normalize_place("") == ""
        assert normalize_place(42) == ""


class TestDistrictTables:
    def test_every_district_has_one_zone(self):
        assert DISTRICT_ZONES["Multan"] == "Punjab"
        assert DISTRICT_ZONES["Karachi"] == "Sindh"
        assert DISTRICT_ZONES["Quetta"] == "Balochistan"

    def test_keamari_is_an_alias_not_a_district(self):
        assert "Keamari" not in DISTRICT_ZONES
        assert resolve_district("Keamari") == "Karachi"


class TestMatchDistrict:
    @pytest.mark.parametrize("name", ["D.G. Khan", "dg khan", "Dera Ghazi Khan", "DG KHAN"])
    def test_dera_ghazi_khan_spellings(self, name):
        assert resolve_district(name) == "Dera Ghazi Khan"
        assert zone_from_name(name) == "Punjab"

    def test_alias_kind(self):
        assert match_district("Nawabshah") == ("Shaheed Benazirabad", "alias")

    def test_exact_district_kind(self):
        assert match_district("lahore") == ("Lahore", "district")

    def test_token_kind(self):
        assert match_district("Multan Cantt") == ("Multan", "token")

    def test_substring_prefers_longest_key(self):
        # both "nagar" (Gilgit-Baltistan) and "bahawalnagar" (Punjab) are contained
        assert match_district("bahawalnagarroad") == ("Bahawalnagar", "substring")

    def test_sanawan_geocoder_label_maps_to_kot_addu(self):
        assert resolve_district("Sanawan, Uttar Pradesh, India") == "Kot Addu"

    def test_unknown_place(self):
        assert match_district("Springfield") is None
        assert match_district("") is None


class TestZoneFromName:
    def test_town_hint(self):
        assert zone_from_name("Burewala") == "Punjab"

    def test_province_keyword(self):
        assert zone_from_name("somewhere in KPK") == "Khyber Pakhtunkhwa"
        assert zone_from_name("Balochistan coast") == "Balochistan"

    def test_unknown(self):
        assert zone_from_name("Paris") is None


class TestZoneFromCoords:
    def test_inside_boxes(self):
        assert zone_from_coords(30.2, 71.5) == "Punjab"
        assert zone_from_coords(24.9, 67.1) == "Sindh"
        assert zone_from_coords(30.2, 67.0) == "Balochistan"

    def test_outside_every_box_is_none(self):
        assert zone_from_coords(48.85, 2.35) is None

    def test_bad_input_is_none(self):
        assert zone_from_coords(None, 71.5) is None
        assert zone_from_coords("north", "east") is None


class TestResolveLocation:
    def test_name_wins_over_coordinates(self):
        location = resolve_location("Karachi", 30.2, 71.5)
        assert location.zone == "Sindh"
        assert location.district == "Karachi"

    def test_coordinate_fallback(self):
        location = resolve_location("Unknown Village", 30.2, 71.5)
        assert location.zone == "Punjab"
        assert location.district is None
        assert location.source == "coordinates"

    def test_nothing_resolves(self):
        location = resolve_location("Paris", 48.85, 2.35)
        assert location.zone is None
        assert location.district is None


class TestZoneSelection:
    @pytest.mark.parametrize("value", ["auto", "default", "", None])
    def test_non_zone_values(self, value):
        assert canonical_zone(value) is None

    def test_short_names(self):
        assert canonical_zone("KPK") == "Khyber Pakhtunkhwa"
        assert canonical_zone("punjab") == "Punjab"

    def test_auto_runs_resolution(self):
        assert resolve_zone_selection("auto", "Multan").zone == "Punjab"

    @pytest.mark.parametrize("value", ["default", "Default", ""])
    def test_default_runs_resolution_like_auto(self, value):
        location = resolve_zone_selection(value, "Multan")
        assert location.zone == "Punjab"
        assert location.district == "Multan"
        assert location.source == "district"

    def test_explicit_zone_keeps_matching_district(self):
        location = resolve_zone_selection("Punjab", "Multan")
        assert location.zone == "Punjab"
        assert location.district == "Multan"
        assert location.source == "selected"

    def test_explicit_zone_drops_foreign_district(self):
        location = resolve_zone_selection("Sindh", "Multan")
        assert location.zone == "Sindh"
        assert location.district is None


class TestGeocodeHint:
    def test_known_district(self):
        assert geocode_hint("dg khan") == "Dera Ghazi Khan, Pakistan"

    def test_unknown(self):
        assert geocode_hint("Paris") is None
