"""
Unit tests for the upstream payload parsers.

Covers:
- safe_get: nested dict/list traversal
- parse_map_units: expected shape, malformed payloads, non-string fields
- parse_feature / parse_biome_features: Polygon and MultiPolygon rings,
  BIOME_NAME fallback, skipped features, property extraction
"""

import pytest

from geotiles.parsers import (
    MapUnit,
    parse_biome_features,
    parse_feature,
    parse_map_units,
    safe_get,
)
from geotiles.tables import BiomeClass


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SQUARE = [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0], [0.0, 0.0]]


def make_feature(geometry=None, **props):
    props.setdefault("BIOME_NUM", 4)
    return {
        "type": "Feature",
        "properties": props,
        "geometry": geometry if geometry is not None else {
            "type": "Polygon", "coordinates": [SQUARE],
        },
    }


# ---------------------------------------------------------------------------
# safe_get
# ---------------------------------------------------------------------------

class TestSafeGet:
    def test_nested_dicts(self):
        assert safe_get({"a": {"b": {"c": 1}}}, "a", "b", "c") == 1

    def test_list_index(self):
        assert safe_get({"a": [10, 20]}, "a", 1) == 20

    def test_missing_key_returns_default(self):
        assert safe_get({"a": {}}, "a", "b", default="x") == "x"

    def test_out_of_range_index(self):
        assert safe_get([1, 2], 5) is None

    def test_none_value_returns_default(self):
        assert safe_get({"a": None}, "a", default=0) == 0


# ---------------------------------------------------------------------------
# parse_map_units
# ---------------------------------------------------------------------------

class TestParseMapUnits:
    def test_expected_shape(self):
        payload = {"success": {"data": [
            {"name": "Manhattan Schist", "lith": "Major:{schist}", "descrip": "ignored"},
            {"name": "Fordham Gneiss", "lith": "gneiss"},
        ]}}
        assert parse_map_units(payload) == [
            MapUnit(name="Manhattan Schist", lith="Major:{schist}"),
            MapUnit(name="Fordham Gneiss", lith="gneiss"),
        ]

    @pytest.mark.parametrize("payload", [
        None,
        [],
        "not json",
        {"error": "bad request"},
        {"success": {"data": "nope"}},
        {"success": None},
    ])
    def test_malformed_payload_is_empty(self, payload):
        assert parse_map_units(payload) == []

    def test_non_string_fields_become_empty(self):
        payload = {"success": {"data": [{"name": 42, "lith": None}]}}
        assert parse_map_units(payload) == [MapUnit(name="", lith="")]

    def test_non_dict_items_skipped(self):
        payload = {"success": {"data": [None, "x", {"name": "A", "lith": "shale"}]}}
        assert parse_map_units(payload) == [MapUnit(name="A", lith="shale")]


# ---------------------------------------------------------------------------
# parse_feature
# ---------------------------------------------------------------------------

class TestParseFeature:
    def test_polygon_outer_ring_only(self):
        hole = [[0.2, 0.2], [0.4, 0.2], [0.4, 0.4], [0.2, 0.2]]
        feature = parse_feature(make_feature({"type": "Polygon", "coordinates": [SQUARE, hole]}))
        assert len(feature.rings) == 1
        assert feature.rings[0][0] == (0.0, 0.0)

    def test_multipolygon_first_ring_of_each(self):
        other = [[5.0, 5.0], [6.0, 5.0], [6.0, 6.0], [5.0, 5.0]]
        geometry = {"type": "MultiPolygon", "coordinates": [[SQUARE], [other]]}
        feature = parse_feature(make_feature(geometry))
        assert len(feature.rings) == 2

    def test_properties_extracted(self):
        feature = parse_feature(make_feature(
            BIOME_NUM=12,
            BIOME_NAME="Mediterranean Forests, Woodlands & Scrub",
            ECO_ID="785",
            ECO_BIOME_="PA12",
            REALM="Palearctic",
        ))
        assert feature.biome is BiomeClass.MEDITERRANEAN
        assert feature.biome_name == "Mediterranean Forests, Woodlands & Scrub"
        assert feature.ecoregion_id == 785
        assert feature.realm_biome == "PA12"
        assert feature.realm == "Palearctic"

    def test_biome_name_fallback(self):
        feature = parse_feature(make_feature(BIOME_NUM=None, BIOME_NAME="Tundra"))
        assert feature.biome is BiomeClass.TUNDRA

    def test_unknown_biome_skipped(self):
        assert parse_feature(make_feature(BIOME_NUM=98, BIOME_NAME="Rock and Ice")) is None

    def test_missing_geometry_skipped(self):
        feature = make_feature()
        feature["geometry"] = None
        assert parse_feature(feature) is None

    def test_degenerate_ring_skipped(self):
        geometry = {"type": "Polygon", "coordinates": [[[0.0, 0.0], [1.0, 1.0]]]}
        assert parse_feature(make_feature(geometry)) is None

    def test_unsupported_geometry_skipped(self):
        geometry = {"type": "Point", "coordinates": [0.0, 0.0]}
        assert parse_feature(make_feature(geometry)) is None

    def test_missing_name_uses_biome_code(self):
        feature = parse_feature(make_feature(BIOME_NUM=6))
        assert feature.biome_name == "boreal"


class TestParseBiomeFeatures:
    def test_keeps_order_and_drops_unusable(self):
        collection = {"type": "FeatureCollection", "features": [
            make_feature(BIOME_NUM=1),
            make_feature(BIOME_NUM=99),
            "garbage",
            make_feature(BIOME_NUM=13),
        ]}
        parsed = parse_biome_features(collection)
        assert [f.biome for f in parsed] == [
            BiomeClass.TROPICAL_MOIST_BROADLEAF,
            BiomeClass.DESERT,
        ]

    def test_no_feature_list(self):
        assert parse_biome_features({"type": "FeatureCollection"}) == []
        assert parse_biome_features([]) == []
