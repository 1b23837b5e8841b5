"""
Tile Store Builder

Builds the SQLite tile store from the raw intermediate files:

1. Load global lithology (precision 4), city lithology (precision 5), biomes
2. Merge per cell: city records override global ones, lithology normalized
3. Aggregate precision-3 tiles by majority vote
4. Write everything to a temp database
5. Run quality gates against the temp database
6. Publish with an atomic rename; a failing gate leaves the old store in place
"""

import json
import logging
import os
import sqlite3
import tempfile
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type

from ..config import COARSE_PRECISION, STORE_SCHEMA_VERSION
from ..config_manager import PipelineConfig
from ..exceptions import QualityGateError, SourceDataError, StoreError
from ..records import BiomeData, BiomeRecord, GeologyData, GeoTile, LithologyRecord
from .normalize import normalize_lithology
from .validation import QualityGateSettings, ValidationReport, load_mapping, run_quality_gates

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS tiles (
    cell_id TEXT PRIMARY KEY,
    prefix TEXT NOT NULL,
    lat REAL,
    lng REAL,
    primary_lithology TEXT NOT NULL,
    secondary_lithologies TEXT NOT NULL DEFAULT '[]',
    geology_confidence REAL NOT NULL,
    biome_code TEXT NOT NULL,
    biome_confidence REAL NOT NULL,
    ecoregion_id INTEGER,
    realm_biome TEXT,
    realm TEXT
);
CREATE INDEX IF NOT EXISTS idx_tiles_prefix ON tiles(prefix);
CREATE INDEX IF NOT EXISTS idx_tiles_realm_biome ON tiles(realm_biome);
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


@dataclass
class BuildResult:
    store_path: str
    total_tiles: int
    coarse_tiles: int
    report: Optional[ValidationReport] = None


# =============================================================================
# Loading
# =============================================================================

def load_raw_records(path: str, record_type: Type) -> List:
    """Load {_meta, records} JSON into records. A missing file gives []."""
    if not os.path.exists(path):
        logger.info("No raw data at %s", path)
        return []

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return [record_type.from_dict(r) for r in data.get('records', [])]
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
        raise SourceDataError(f"Could not read {path}: {e}") from e


# =============================================================================
# Merge & Aggregate
# =============================================================================

def _geology_from(record: LithologyRecord) -> GeologyData:
    return GeologyData(
        primary_lithology=normalize_lithology(record.primary_lithology),
        secondary_lithologies=tuple(
            normalize_lithology(s) for s in record.secondary_lithologies
        ),
        confidence=record.confidence,
    )


def _biome_from(record: BiomeRecord) -> BiomeData:
    return BiomeData(
        biome_code=record.biome_code,
        confidence=record.confidence,
        ecoregion_id=record.ecoregion_id,
        realm=record.realm,
        realm_biome=record.realm_biome,
    )


def merge_records(
    lithology: Iterable[LithologyRecord],
    city_lithology: Iterable[LithologyRecord],
    biomes: Iterable[BiomeRecord],
) -> Dict[str, GeoTile]:
    """
    Merge the raw layers into one tile per cell.

    City records replace global records for the same cell. A cell missing
    one of the layers gets an unknown geology or biome with confidence 0.
    """
    geology: Dict[str, LithologyRecord] = {r.cell_id: r for r in lithology}
    for record in city_lithology:
        geology[record.cell_id] = record

    biome_map: Dict[str, BiomeRecord] = {r.cell_id: r for r in biomes}

    tiles = {}
    for cell_id in dict.fromkeys([*geology, *biome_map]):
        geo = geology.get(cell_id)
        bio = biome_map.get(cell_id)
        tiles[cell_id] = GeoTile(
            cell_id=cell_id,
            geology=_geology_from(geo) if geo else GeologyData(),
            biome=_biome_from(bio) if bio else BiomeData(),
        )
    return tiles


def aggregate_coarse_tiles(
    tiles: Mapping[str, GeoTile],
    precision: int = COARSE_PRECISION,
) -> Dict[str, GeoTile]:
    """
    Build coarse tiles by majority vote over finer tiles sharing a prefix.

    Confidence is the share of the winning value among tiles that had one.
    Unknown values do not vote. Ties go to the value seen first.
    """
    geology_votes: Dict[str, Counter] = defaultdict(Counter)
    biome_votes: Dict[str, Counter] = defaultdict(Counter)
    biome_samples: Dict[str, Dict[str, BiomeData]] = defaultdict(dict)
    prefixes: Dict[str, None] = {}

    for cell_id, tile in tiles.items():
        if len(cell_id) <= precision:
            continue
        prefix = cell_id[:precision]
        prefixes.setdefault(prefix)

        if not tile.geology.is_unknown:
            geology_votes[prefix][tile.geology.primary_lithology] += 1
        if not tile.biome.is_unknown:
            biome_votes[prefix][tile.biome.biome_code] += 1
            biome_samples[prefix].setdefault(tile.biome.biome_code, tile.biome)

    coarse = {}
    for prefix in prefixes:
        geology = GeologyData()
        votes = geology_votes.get(prefix)
        if votes:
            lith, count = votes.most_common(1)[0]
            geology = GeologyData(
                primary_lithology=lith,
                confidence=round(count / sum(votes.values()), 4),
            )

        biome = BiomeData()
        votes = biome_votes.get(prefix)
        if votes:
            code, count = votes.most_common(1)[0]
            sample = biome_samples[prefix][code]
            biome = BiomeData(
                biome_code=code,
                confidence=round(count / sum(votes.values()), 4),
                ecoregion_id=sample.ecoregion_id,
                realm=sample.realm,
                realm_biome=sample.realm_biome,
            )

        coarse[prefix] = GeoTile(cell_id=prefix, geology=geology, biome=biome)

    return coarse


# =============================================================================
# Writing & Publishing
# =============================================================================

def write_store(
    tiles: Mapping[str, GeoTile],
    path: str,
    metadata: Optional[Mapping[str, Any]] = None,
    coords: Optional[Mapping[str, tuple]] = None,
):
    """Write tiles and metadata to a new SQLite database at path."""
    if os.path.exists(path):
        os.remove(path)

    coords = coords or {}
    conn = sqlite3.connect(path)
    try:
        conn.executescript(SCHEMA)
        with conn:
            conn.executemany(
                """
                INSERT OR REPLACE INTO tiles
                (cell_id, prefix, lat, lng, primary_lithology, secondary_lithologies,
                 geology_confidence, biome_code, biome_confidence,
                 ecoregion_id, realm_biome, realm)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    (
                        tile.cell_id,
                        tile.cell_id[:COARSE_PRECISION],
                        *coords.get(tile.cell_id, (None, None)),
                        tile.geology.primary_lithology,
                        json.dumps(list(tile.geology.secondary_lithologies)),
                        tile.geology.confidence,
                        tile.biome.biome_code,
                        tile.biome.confidence,
                        tile.biome.ecoregion_id,
                        tile.biome.realm_biome,
                        tile.biome.realm,
                    )
                    for tile in tiles.values()
                ),
            )
            conn.executemany(
                "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
                [(str(k), str(v)) for k, v in (metadata or {}).items()],
            )
    except sqlite3.Error as e:
        raise StoreError(f"Could not write tile store {path}: {e}") from e
    finally:
        conn.close()


def _record_coords(*layers: Iterable) -> Dict[str, tuple]:
    coords = {}
    for layer in layers:
        for record in layer:
            coords[record.cell_id] = (record.lat, record.lng)
    return coords


def build_store(
    config: Optional[PipelineConfig] = None,
    skip_validation: bool = False,
    settings: Optional[QualityGateSettings] = None,
) -> BuildResult:
    """
    Build, validate and publish the tile store.

    Raises:
        QualityGateError: a gate failed; the published store is unchanged
        StoreError: no raw data or the store could not be written
    """
    config = config or PipelineConfig()
    verbose = config.verbose

    if verbose:
        print("=" * 70)
        print("TILE STORE BUILD")
        print("=" * 70)

    lithology = load_raw_records(config.lithology_raw_path, LithologyRecord)
    city_lithology = load_raw_records(config.city_lithology_raw_path, LithologyRecord)
    biomes = load_raw_records(config.biomes_raw_path, BiomeRecord)

    if verbose:
        print(f"  Global lithology records (precision 4): {len(lithology)}")
        print(f"  City lithology records (precision 5): {len(city_lithology)}")
        print(f"  Biome records: {len(biomes)}")

    if not (lithology or city_lithology or biomes):
        raise StoreError(
            f"No raw data in {config.output_dir}; run fetch-lithology / process-biomes first"
        )

    tiles = merge_records(lithology, city_lithology, biomes)
    coarse = aggregate_coarse_tiles(tiles, COARSE_PRECISION)
    # Coarse tiles never replace a fine record with the same id
    all_tiles = {**coarse, **tiles}

    if verbose:
        print(f"  Unique cells: {len(tiles)}")
        print(f"  Precision-{COARSE_PRECISION} tiles: {len(coarse)}")
        print(f"  Total tiles: {len(all_tiles)}")

    metadata = {
        'version': STORE_SCHEMA_VERSION,
        'generatedAt': datetime.now().isoformat(),
        'sources': json.dumps({
            'geology': 'Macrostrat API' if (lithology or city_lithology) else None,
            'biomes': biomes[0].source if biomes else None,
        }),
        'totalTiles': len(all_tiles),
    }

    store_dir = os.path.dirname(os.path.abspath(config.store_path))
    os.makedirs(store_dir, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=".tiles-", suffix=".db", dir=store_dir)
    os.close(fd)

    try:
        write_store(
            all_tiles, tmp_path, metadata,
            coords=_record_coords(lithology, biomes, city_lithology),
        )

        report = None
        if not skip_validation:
            report = run_quality_gates(
                tmp_path, load_mapping(config.mapping_path), settings
            )
            # Callers print failing reports from QualityGateError.report
            if not report.passed:
                raise QualityGateError(report)
            if verbose:
                print()
                print(report.format())

        os.replace(tmp_path, config.store_path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)

    if verbose:
        size_mb = os.path.getsize(config.store_path) / 1024 / 1024
        print(f"\n  Published: {config.store_path} ({size_mb:.2f} MB)")

    return BuildResult(
        store_path=config.store_path,
        total_tiles=len(all_tiles),
        coarse_tiles=len(coarse),
        report=report,
    )
