"""
Biome Resolution

Assigns a biome to each geohash cell from Resolve Ecoregions polygons, or
from a latitude-band estimate when no polygon dataset is available.

Polygon resolution is a fold over the features in input order: a cell is
claimed by the first polygon whose outer ring contains the cell centroid,
and later polygons never overwrite it. With overlapping polygons the input
order therefore decides the result.
"""

import json
import logging
import os
from collections import Counter
from datetime import datetime
from functools import reduce
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..config import INGESTION_PRECISION
from ..exceptions import SourceDataError
from ..geo import (
    AreaBoundary,
    BIOME_ESTIMATE_REGIONS,
    bounding_box,
    decode,
    generate_boundary_grid,
    generate_grid,
    point_in_polygon,
)
from ..parsers.features import PolygonFeature, parse_biome_features
from ..records import BiomeRecord
from ..tables import BiomeClass, estimate_biome
from .collector import save_records

logger = logging.getLogger(__name__)

POLYGON_CONFIDENCE = 0.9
ESTIMATE_CONFIDENCE = 0.5


def resolve_feature(
    claims: Mapping[str, BiomeRecord],
    feature: PolygonFeature,
    precision: int = INGESTION_PRECISION,
) -> Dict[str, BiomeRecord]:
    """
    Claim the unclaimed cells whose centroid lies inside the feature.

    Returns a new mapping; `claims` is left untouched.
    """
    new_claims: Dict[str, BiomeRecord] = {}

    for ring in feature.rings:
        min_lat, max_lat, min_lng, max_lng = bounding_box(ring)
        for cell_id in generate_grid(min_lat, max_lat, min_lng, max_lng, precision):
            if cell_id in claims or cell_id in new_claims:
                continue

            lat, lng = decode(cell_id)
            if not point_in_polygon(lat, lng, ring):
                continue

            new_claims[cell_id] = BiomeRecord(
                cell_id=cell_id,
                lat=lat,
                lng=lng,
                biome_code=feature.biome.value,
                biome_name=feature.biome_name,
                confidence=POLYGON_CONFIDENCE,
                source="resolve_ecoregions",
                ecoregion_id=feature.ecoregion_id,
                realm_biome=feature.realm_biome,
                realm=feature.realm,
            )

    if not new_claims:
        return dict(claims)
    return {**claims, **new_claims}


def resolve_features(
    features: Iterable[PolygonFeature],
    precision: int = INGESTION_PRECISION,
) -> Dict[str, BiomeRecord]:
    """Resolve all features in order; the first claim on a cell wins."""
    return reduce(
        lambda claims, feature: resolve_feature(claims, feature, precision),
        features,
        {},
    )


_ESTIMATE_NAMES = {
    BiomeClass.TUNDRA: "Tundra",
    BiomeClass.BOREAL: "Boreal Forests/Taiga",
    BiomeClass.TEMPERATE_CONIFER: "Temperate Conifer Forests",
    BiomeClass.TEMPERATE_BROADLEAF_MIXED: "Temperate Broadleaf & Mixed Forests",
    BiomeClass.MEDITERRANEAN: "Mediterranean Forests",
    BiomeClass.TROPICAL_DRY_BROADLEAF: "Tropical Dry Broadleaf",
    BiomeClass.TROPICAL_MOIST_BROADLEAF: "Tropical Moist Broadleaf",
}


def estimate_biome_records(
    regions: Sequence[AreaBoundary] = BIOME_ESTIMATE_REGIONS,
    precision: int = INGESTION_PRECISION,
) -> List[BiomeRecord]:
    """Latitude-estimated records for every cell of the given regions."""
    records = []
    seen = set()

    for region in regions:
        for cell_id in generate_boundary_grid(region, precision):
            if cell_id in seen:
                continue
            seen.add(cell_id)

            lat, lng = decode(cell_id)
            biome = estimate_biome(lat, lng)
            records.append(BiomeRecord(
                cell_id=cell_id,
                lat=lat,
                lng=lng,
                biome_code=biome.value,
                biome_name=_ESTIMATE_NAMES[biome],
                confidence=ESTIMATE_CONFIDENCE,
                source="estimated",
            ))

    return records


def load_geojson(path: str) -> Dict:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise SourceDataError(f"Could not read GeoJSON {path}: {e}") from e


def process_biomes(
    source_path: Optional[str],
    output_path: str,
    precision: int = INGESTION_PRECISION,
    verbose: bool = True,
) -> List[BiomeRecord]:
    """
    Build the raw biome layer and write it to output_path.

    Args:
        source_path: Resolve Ecoregions GeoJSON, or None for the latitude estimate
        output_path: Destination JSON ({_meta, records})
        precision: Cell precision
        verbose: Print progress

    Returns:
        The written records
    """
    if verbose:
        print("=" * 70)
        print("BIOME PROCESSING (Resolve Ecoregions)")
        print("=" * 70)

    if source_path:
        if not os.path.exists(source_path):
            raise SourceDataError(f"GeoJSON file not found: {source_path}")

        features = parse_biome_features(load_geojson(source_path))
        if verbose:
            print(f"  Usable features: {len(features)}")

        records = list(resolve_features(features, precision).values())
        source = "Resolve Ecoregions 2017"
    else:
        if verbose:
            print("  No GeoJSON provided - generating latitude-based estimate")
        records = estimate_biome_records(BIOME_ESTIMATE_REGIONS, precision)
        source = "Latitude-based estimation"

    save_records(output_path, records, {
        'source': source,
        'generatedAt': datetime.now().isoformat(),
        'precision': precision,
    })

    if verbose:
        print(f"\n  Saved {len(records)} records to {output_path}")
        counts = Counter(r.biome_code for r in records)
        if records:
            print("\nBiome distribution:")
            for biome, count in counts.most_common():
                print(f"  {biome}: {count} ({count / len(records) * 100:.1f}%)")

    return records
