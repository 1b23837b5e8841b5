"""
Hierarchical Point Lookup

Resolves geology and biome for any coordinate:

1. Detailed tile: precision 5, then precision 4
2. Unknown fields of the detailed tile are filled from the precision-3 tile
3. No detailed tile: the precision-3 tile alone
4. Nothing stored: a latitude-based fallback
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .config import CITY_PRECISION, COARSE_PRECISION, INGESTION_PRECISION
from .geo import encode
from .records import BiomeData, GeologyData, GeoTile
from .store.loader import TileLoader
from .tables import estimate_biome

FALLBACK_CONFIDENCE = 0.3
FALLBACK_LITHOLOGY = "mixed_sedimentary"
FALLBACK_SECONDARY = ("sandstone", "limestone", "shale")

DETAILED_PRECISIONS = (CITY_PRECISION, INGESTION_PRECISION)


@dataclass(frozen=True)
class LocationGeoData:
    geology: GeologyData
    biome: BiomeData
    data_source: str  # "detailed", "coarse" or "fallback"
    cell_id: str
    lat: float = 0.0
    lng: float = 0.0
    filled_fields: Tuple[str, ...] = field(default=())

    def to_dict(self) -> Dict[str, Any]:
        tile = GeoTile(cell_id=self.cell_id, geology=self.geology, biome=self.biome).to_dict()
        tile.update({
            "lat": self.lat,
            "lng": self.lng,
            "data_source": self.data_source,
            "filled_fields": list(self.filled_fields),
        })
        return tile


def fallback_geology() -> GeologyData:
    return GeologyData(
        primary_lithology=FALLBACK_LITHOLOGY,
        secondary_lithologies=FALLBACK_SECONDARY,
        confidence=FALLBACK_CONFIDENCE,
    )


def fallback_biome(lat: float, lng: float) -> BiomeData:
    return BiomeData(biome_code=estimate_biome(lat, lng).value, confidence=FALLBACK_CONFIDENCE)


class GeoLookup:
    """Point lookups over a TileLoader with coarse and latitude fallbacks."""

    def __init__(self, loader: TileLoader):
        self.loader = loader

    def _detailed_tile(self, lat: float, lng: float) -> Optional[GeoTile]:
        for precision in DETAILED_PRECISIONS:
            tile = self.loader.get_tile(encode(lat, lng, precision))
            if tile is not None:
                return tile
        return None

    def lookup(self, lat: float, lng: float) -> LocationGeoData:
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
            raise ValueError(f"Coordinates out of range: {lat}, {lng}")

        coarse_id = encode(lat, lng, COARSE_PRECISION)
        coarse = self.loader.get_tile(coarse_id)
        detailed = self._detailed_tile(lat, lng)

        if detailed is not None:
            filled = []

            geology = detailed.geology
            if geology.is_unknown:
                filled.append("geology")
                if coarse is not None and not coarse.geology.is_unknown:
                    geology = coarse.geology
                else:
                    geology = fallback_geology()

            biome = detailed.biome
            if biome.is_unknown:
                filled.append("biome")
                if coarse is not None and not coarse.biome.is_unknown:
                    biome = coarse.biome
                else:
                    biome = fallback_biome(lat, lng)

            return LocationGeoData(
                geology=geology,
                biome=biome,
                data_source="detailed",
                cell_id=detailed.cell_id,
                lat=lat,
                lng=lng,
                filled_fields=tuple(filled),
            )

        if coarse is not None:
            filled = []
            geology = coarse.geology
            if geology.is_unknown:
                filled.append("geology")
                geology = fallback_geology()
            biome = coarse.biome
            if biome.is_unknown:
                filled.append("biome")
                biome = fallback_biome(lat, lng)

            return LocationGeoData(
                geology=geology,
                biome=biome,
                data_source="coarse",
                cell_id=coarse_id,
                lat=lat,
                lng=lng,
                filled_fields=tuple(filled),
            )

        return LocationGeoData(
            geology=fallback_geology(),
            biome=fallback_biome(lat, lng),
            data_source="fallback",
            cell_id=coarse_id,
            lat=lat,
            lng=lng,
            filled_fields=("geology", "biome"),
        )
