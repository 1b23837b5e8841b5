"""
Biome Feature Parser

Parses a Resolve Ecoregions GeoJSON FeatureCollection into polygon features.

Feature properties used:
    BIOME_NUM   = 1..14 biome id (preferred)
    BIOME_NAME  = biome name, used when BIOME_NUM is missing or unknown
    ECO_ID      = ecoregion id
    ECO_BIOME_  = realm + biome code, e.g. "PA04"
    REALM       = biogeographic realm, e.g. "Palearctic"

Only outer rings are kept: a Polygon contributes its first ring, a
MultiPolygon the first ring of each member polygon.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..tables import BiomeClass, resolve_biome

logger = logging.getLogger(__name__)

Ring = Tuple[Tuple[float, float], ...]


@dataclass(frozen=True)
class PolygonFeature:
    """A biome polygon with its outer rings"""
    biome: BiomeClass
    biome_name: str
    rings: Tuple[Ring, ...]
    ecoregion_id: Optional[int] = None
    realm_biome: Optional[str] = None
    realm: Optional[str] = None


def _parse_ring(raw: Any) -> Optional[Ring]:
    """Convert a raw coordinate ring; None when it cannot form a polygon."""
    if not isinstance(raw, Sequence) or isinstance(raw, str):
        return None

    points = []
    for vertex in raw:
        if not isinstance(vertex, Sequence) or len(vertex) < 2:
            return None
        try:
            points.append((float(vertex[0]), float(vertex[1])))
        except (TypeError, ValueError):
            return None

    if len(points) < 3:
        return None
    return tuple(points)


def _outer_rings(geometry: Dict) -> List[Any]:
    geom_type = geometry.get("type")
    coords = geometry.get("coordinates") or []

    if geom_type == "Polygon":
        return coords[:1]
    if geom_type == "MultiPolygon":
        return [poly[0] for poly in coords if isinstance(poly, list) and poly]
    return []


def _optional_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def parse_feature(feature: Dict, index: int = 0) -> Optional[PolygonFeature]:
    """Parse one GeoJSON feature. Returns None (and logs) when it is unusable."""
    if not isinstance(feature, dict):
        logger.warning("Feature %d: not an object, skipped", index)
        return None

    props = feature.get("properties") or {}
    biome = resolve_biome(props.get("BIOME_NUM"), props.get("BIOME_NAME"))
    if biome is None:
        logger.info(
            "Feature %d: unknown biome (BIOME_NUM=%r, BIOME_NAME=%r), skipped",
            index, props.get("BIOME_NUM"), props.get("BIOME_NAME"),
        )
        return None

    geometry = feature.get("geometry")
    if not isinstance(geometry, dict):
        logger.warning("Feature %d: missing geometry, skipped", index)
        return None

    rings = []
    for raw_ring in _outer_rings(geometry):
        ring = _parse_ring(raw_ring)
        if ring is None:
            logger.warning("Feature %d: degenerate ring skipped", index)
            continue
        rings.append(ring)

    if not rings:
        logger.warning("Feature %d: no usable polygon rings, skipped", index)
        return None

    name = props.get("BIOME_NAME")
    return PolygonFeature(
        biome=biome,
        biome_name=name if isinstance(name, str) and name else biome.value,
        rings=tuple(rings),
        ecoregion_id=_optional_int(props.get("ECO_ID")),
        realm_biome=props.get("ECO_BIOME_") or None,
        realm=props.get("REALM") or None,
    )


def parse_biome_features(geojson: Any) -> List[PolygonFeature]:
    """Parse a FeatureCollection, keeping input order and dropping unusable features."""
    features = geojson.get("features") if isinstance(geojson, dict) else None
    if not isinstance(features, list):
        logger.warning("GeoJSON has no feature list")
        return []

    parsed = []
    for i, feature in enumerate(features):
        result = parse_feature(feature, i)
        if result is not None:
            parsed.append(result)

    skipped = len(features) - len(parsed)
    if skipped:
        logger.info("Skipped %d of %d features", skipped, len(features))
    return parsed
