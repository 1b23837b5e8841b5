"""
Record Types

Frozen records passed between pipeline stages and returned by the runtime.

- BiomeRecord: one biome classification per cell (build pipeline)
- LithologyRecord: one lithology classification per cell (build pipeline)
- GeoTile: merged geology + biome for a cell (store and runtime)

Raw intermediate files use the snake_case keys produced by to_dict().
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

UNKNOWN = "unknown"


def _check_confidence(value: float, owner: str):
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{owner}.confidence must be within [0, 1], got {value}")


@dataclass(frozen=True)
class BiomeRecord:
    """Biome assigned to a cell, with the point it was evaluated at"""
    cell_id: str
    lat: float
    lng: float
    biome_code: str
    biome_name: str
    confidence: float
    source: str  # "resolve_ecoregions" or "estimated"
    ecoregion_id: Optional[int] = None
    realm_biome: Optional[str] = None  # e.g. "PA04"
    realm: Optional[str] = None  # e.g. "Palearctic"

    def __post_init__(self):
        _check_confidence(self.confidence, "BiomeRecord")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cell_id": self.cell_id,
            "lat": self.lat,
            "lng": self.lng,
            "biome_code": self.biome_code,
            "biome_name": self.biome_name,
            "confidence": self.confidence,
            "source": self.source,
            "ecoregion_id": self.ecoregion_id,
            "realm_biome": self.realm_biome,
            "realm": self.realm,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BiomeRecord":
        return cls(
            cell_id=data["cell_id"],
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            biome_code=data.get("biome_code", UNKNOWN),
            biome_name=data.get("biome_name", ""),
            confidence=float(data.get("confidence", 0.0)),
            source=data.get("source", ""),
            ecoregion_id=data.get("ecoregion_id"),
            realm_biome=data.get("realm_biome"),
            realm=data.get("realm"),
        )


@dataclass(frozen=True)
class LithologyRecord:
    """Lithology assigned to a cell from the upstream map units"""
    cell_id: str
    lat: float
    lng: float
    primary_lithology: str
    secondary_lithologies: Tuple[str, ...] = ()  # most specific first
    confidence: float = 0.0
    source: str = "macrostrat"

    def __post_init__(self):
        _check_confidence(self.confidence, "LithologyRecord")
        # Accept lists from callers and JSON; store immutably
        object.__setattr__(self, "secondary_lithologies", tuple(self.secondary_lithologies))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cell_id": self.cell_id,
            "lat": self.lat,
            "lng": self.lng,
            "primary_lithology": self.primary_lithology,
            "secondary_lithologies": list(self.secondary_lithologies),
            "confidence": self.confidence,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LithologyRecord":
        return cls(
            cell_id=data["cell_id"],
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            primary_lithology=data.get("primary_lithology", UNKNOWN),
            secondary_lithologies=tuple(data.get("secondary_lithologies") or ()),
            confidence=float(data.get("confidence", 0.0)),
            source=data.get("source", "macrostrat"),
        )


@dataclass(frozen=True)
class GeologyData:
    primary_lithology: str = UNKNOWN
    secondary_lithologies: Tuple[str, ...] = ()
    confidence: float = 0.0

    def __post_init__(self):
        _check_confidence(self.confidence, "GeologyData")
        object.__setattr__(self, "secondary_lithologies", tuple(self.secondary_lithologies))

    @property
    def is_unknown(self) -> bool:
        return self.primary_lithology == UNKNOWN


@dataclass(frozen=True)
class BiomeData:
    biome_code: str = UNKNOWN
    confidence: float = 0.0
    ecoregion_id: Optional[int] = None
    realm: Optional[str] = None
    realm_biome: Optional[str] = None

    def __post_init__(self):
        _check_confidence(self.confidence, "BiomeData")

    @property
    def is_unknown(self) -> bool:
        return self.biome_code == UNKNOWN


@dataclass(frozen=True)
class GeoTile:
    """Merged geology and biome data for one cell"""
    cell_id: str
    geology: GeologyData = field(default_factory=GeologyData)
    biome: BiomeData = field(default_factory=BiomeData)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cell_id": self.cell_id,
            "geology": {
                "primary_lithology": self.geology.primary_lithology,
                "secondary_lithologies": list(self.geology.secondary_lithologies),
                "confidence": self.geology.confidence,
            },
            "biome": {
                "biome_code": self.biome.biome_code,
                "confidence": self.biome.confidence,
                "ecoregion_id": self.biome.ecoregion_id,
                "realm": self.biome.realm,
                "realm_biome": self.biome.realm_biome,
            },
        }
