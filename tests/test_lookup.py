"""
Unit tests for hierarchical point lookups.

Covers:
- detailed tiles (precision 5, then 4) with unknown fields filled from the
  precision-3 tile
- coarse-only and fallback results
- coordinate validation
- LocationGeoData.to_dict
"""

import pytest

from geotiles.geo import decode, encode
from geotiles.lookup import (
    FALLBACK_CONFIDENCE,
    FALLBACK_LITHOLOGY,
    FALLBACK_SECONDARY,
    GeoLookup,
)
from geotiles.records import BiomeData, GeologyData, GeoTile
from geotiles.store.builder import write_store
from geotiles.store.loader import TileLoader
from geotiles.tables import estimate_biome

NYC = (40.7128, -74.006)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_lookup(tmp_path, tiles):
    path = str(tmp_path / "lookup.db")
    write_store({t.cell_id: t for t in tiles}, path)
    return GeoLookup(TileLoader(path))


def same_coarse_other_cell(lat, lng):
    """A point in the same precision-3 cell whose precision-4 cell differs."""
    fine = encode(lat, lng, 4)
    for suffix in "0123456789bcdefghjkmnpqrstuvwxyz":
        candidate = fine[:3] + suffix
        if candidate != fine:
            return decode(candidate)
    raise AssertionError("unreachable")


# ---------------------------------------------------------------------------
# GeoLookup
# ---------------------------------------------------------------------------

class TestDetailedLookup:
    def test_fine_tile_with_biome_filled_from_coarse(self, loader):
        result = GeoLookup(loader).lookup(*NYC)
        assert result.data_source == "detailed"
        assert result.cell_id == encode(*NYC, 5)
        assert result.geology.primary_lithology == "granite"
        assert result.biome.biome_code == "temperate_broadleaf_mixed"
        assert result.filled_fields == ("biome",)

    def test_precision_four_used_when_no_fine_tile(self, tmp_path):
        cell_id = encode(*NYC, 4)
        lookup = make_lookup(tmp_path, [
            GeoTile(cell_id, GeologyData("schist", (), 0.7), BiomeData("temperate_conifer", 0.9)),
        ])
        result = lookup.lookup(*NYC)
        assert result.data_source == "detailed"
        assert result.cell_id == cell_id
        assert result.filled_fields == ()

    def test_fine_preferred_over_precision_four(self, tmp_path):
        lookup = make_lookup(tmp_path, [
            GeoTile(encode(*NYC, 4), GeologyData("schist", (), 0.7), BiomeData("boreal", 0.9)),
            GeoTile(encode(*NYC, 5), GeologyData("marble", (), 0.8), BiomeData("boreal", 0.9)),
        ])
        assert lookup.lookup(*NYC).geology.primary_lithology == "marble"

    def test_unknown_geology_without_coarse_uses_fallback(self, tmp_path):
        lookup = make_lookup(tmp_path, [
            GeoTile(encode(*NYC, 5), GeologyData(), BiomeData("temperate_conifer", 0.9)),
        ])
        result = lookup.lookup(*NYC)
        assert result.geology.primary_lithology == FALLBACK_LITHOLOGY
        assert result.geology.confidence == pytest.approx(FALLBACK_CONFIDENCE)
        assert result.biome.biome_code == "temperate_conifer"
        assert result.filled_fields == ("geology",)


class TestCoarseLookup:
    def test_coarse_only(self, loader):
        lat, lng = same_coarse_other_cell(*NYC)
        result = GeoLookup(loader).lookup(lat, lng)
        assert result.data_source == "coarse"
        assert result.cell_id == encode(*NYC, 3)
        assert result.geology.primary_lithology == "sandstone"
        assert result.biome.realm == "Nearctic"
        assert result.filled_fields == ()

    def test_coarse_unknown_biome_uses_estimate(self, tmp_path):
        lookup = make_lookup(tmp_path, [
            GeoTile(encode(*NYC, 3), GeologyData("shale", (), 0.6), BiomeData()),
        ])
        result = lookup.lookup(*NYC)
        assert result.data_source == "coarse"
        assert result.biome.biome_code == estimate_biome(*NYC).value
        assert result.filled_fields == ("biome",)


class TestFallbackLookup:
    def test_nothing_stored(self, loader):
        result = GeoLookup(loader).lookup(-33.8688, 151.2093)
        assert result.data_source == "fallback"
        assert result.cell_id == encode(-33.8688, 151.2093, 3)
        assert result.geology.primary_lithology == FALLBACK_LITHOLOGY
        assert result.geology.secondary_lithologies == FALLBACK_SECONDARY
        assert result.biome.biome_code == "tropical_dry_broadleaf"
        assert result.biome.confidence == pytest.approx(FALLBACK_CONFIDENCE)
        assert result.filled_fields == ("geology", "biome")

    def test_missing_store(self, tmp_path):
        result = GeoLookup(TileLoader(str(tmp_path / "missing.db"))).lookup(70.0, 20.0)
        assert result.data_source == "fallback"
        assert result.biome.biome_code == "tundra"

    @pytest.mark.parametrize("lat,lng", [(91.0, 0.0), (-90.5, 0.0), (0.0, 180.5), (0.0, -181.0)])
    def test_out_of_range(self, loader, lat, lng):
        with pytest.raises(ValueError):
            GeoLookup(loader).lookup(lat, lng)


class TestToDict:
    def test_shape(self, loader):
        data = GeoLookup(loader).lookup(*NYC).to_dict()
        assert data["cell_id"] == encode(*NYC, 5)
        assert data["lat"] == NYC[0]
        assert data["lng"] == NYC[1]
        assert data["data_source"] == "detailed"
        assert data["filled_fields"] == ["biome"]
        assert data["geology"]["secondary_lithologies"] == ["schist"]
        assert data["biome"]["realm_biome"] == "NA04"
