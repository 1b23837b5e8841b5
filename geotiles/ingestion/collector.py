"""
Lithology Fetch Jobs

Resumable, checkpointed collection of lithology records.

Features:
1. Work units are geohash cells tagged with the region or city they came from
2. Sequential querying with a shared rate limiter
3. Resume: previously saved records are kept and their cells skipped
4. Full snapshot checkpoints every N new records, plus a final snapshot
5. Cells shared by overlapping regions or cities are only queried once
"""

import json
import logging
import os
import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from ..config import (
    CHECKPOINT_INTERVAL,
    CITY_PRECISION,
    CITY_RADIUS_KM,
    INGESTION_PRECISION,
    MAX_CITIES,
)
from ..config_manager import PipelineConfig
from ..geo import (
    AreaBoundary,
    City,
    FETCH_REGIONS,
    decode,
    generate_boundary_grid,
    generate_grid_around_point,
    get_cities_by_population,
)
from ..records import LithologyRecord
from .lithology import BROAD_PROFILE, CITY_PROFILE, ConfidenceProfile, build_lithology_record
from .macrostrat import RETRYABLE_ERRORS, MacrostratClient
from .rate_limit import RateLimiter, RetryPolicy

logger = logging.getLogger(__name__)


# =============================================================================
# Cell with Source Tracking
# =============================================================================

@dataclass(frozen=True)
class TaggedCell:
    """A cell to query, tagged with the region or city it belongs to."""
    cell_id: str
    lat: float
    lng: float
    source_area: str


def region_cells(
    regions: Iterable[AreaBoundary] = FETCH_REGIONS,
    precision: int = INGESTION_PRECISION,
) -> Iterator[TaggedCell]:
    """Cells covering each region in order, queried at the cell centroid."""
    seen = set()
    for region in regions:
        for cell_id in generate_boundary_grid(region, precision):
            if cell_id in seen:
                continue
            seen.add(cell_id)
            lat, lng = decode(cell_id)
            yield TaggedCell(cell_id=cell_id, lat=lat, lng=lng, source_area=region.name)


def city_cells(
    cities: Iterable[City],
    precision: int = CITY_PRECISION,
    radius_km: float = CITY_RADIUS_KM,
) -> Iterator[TaggedCell]:
    """Cells around each city, queried at the exact grid sample point."""
    seen = set()
    for city in cities:
        for point in generate_grid_around_point(city.lat, city.lng, radius_km, precision):
            if point.cell_id in seen:
                continue
            seen.add(point.cell_id)
            yield TaggedCell(
                cell_id=point.cell_id,
                lat=point.lat,
                lng=point.lng,
                source_area=city.name,
            )


# =============================================================================
# Persistence
# =============================================================================

def load_existing_records(path: str) -> List[LithologyRecord]:
    """
    Load records from a previous run.

    Missing or unreadable files give []. Individual malformed records are
    skipped with a warning and the rest are kept.
    """
    if not os.path.exists(path):
        return []

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        raw_records = data.get('records') or []
    except (OSError, ValueError, AttributeError) as e:
        logger.warning("Could not load existing data from %s: %s", path, e)
        return []

    if not isinstance(raw_records, list):
        logger.warning("Could not load existing data from %s: records is not a list", path)
        return []

    records = []
    for i, raw in enumerate(raw_records):
        try:
            records.append(LithologyRecord.from_dict(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Skipping malformed record %d in %s: %s", i, path, e)
    return records


def save_records(path: str, records: Sequence, meta: Dict[str, Any]):
    """Write a full {_meta, records} snapshot, replacing the file atomically."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    data = {
        '_meta': dict(meta, totalRecords=len(records)),
        'records': [r.to_dict() for r in records],
    }
    tmp_path = f"{path}.tmp"
    with open(tmp_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)


# =============================================================================
# Fetch Job
# =============================================================================

@dataclass
class FetchResult:
    """Outcome of a fetch job."""
    output_path: str
    records: List[LithologyRecord] = field(default_factory=list)
    existing_count: int = 0
    new_count: int = 0
    skipped_count: int = 0
    no_data_count: int = 0
    elapsed_seconds: float = 0.0

    def top_lithologies(self, n: int = 10) -> List[tuple]:
        counts = Counter(r.primary_lithology for r in self.records)
        return counts.most_common(n)


def print_summary(result: FetchResult, resume: bool = False):
    print(f"\n{'='*70}")
    print("FETCH COMPLETE")
    print("=" * 70)
    print(f"  Output: {result.output_path}")
    print(f"  Total records: {len(result.records)}")
    if resume:
        print(f"    - Existing: {result.existing_count}")
        print(f"    - New: {result.new_count}")
        print(f"    - Skipped (already fetched): {result.skipped_count}")
    print(f"  Cells without data: {result.no_data_count}")
    print(f"  Time: {result.elapsed_seconds:.1f}s ({result.elapsed_seconds/60:.1f} min)")

    total = len(result.records)
    if total:
        print("\nTop 10 lithologies found:")
        for lith, count in result.top_lithologies(10):
            print(f"  {lith}: {count} ({count / total * 100:.1f}%)")


def run_fetch_job(
    cells: Iterable[TaggedCell],
    output_path: str,
    client: MacrostratClient,
    profile: ConfidenceProfile = BROAD_PROFILE,
    resume: bool = False,
    checkpoint_interval: int = CHECKPOINT_INTERVAL,
    rate_limiter: Optional[RateLimiter] = None,
    meta: Optional[Dict[str, Any]] = None,
    verbose: bool = True,
) -> FetchResult:
    """
    Query every cell sequentially and persist the resulting records.

    Args:
        cells: Work units in processing order
        output_path: JSON file for snapshots and the final output
        client: Upstream client used for each point
        profile: Confidence profile for the records
        resume: Keep records already in output_path and skip their cells
        checkpoint_interval: Write a snapshot every N new records
        rate_limiter: Spacing between requests (default: config delay)
        meta: Extra _meta fields written with every snapshot
        verbose: Print progress

    Returns:
        FetchResult with all records (existing + new)
    """
    start_time = time.time()
    rate_limiter = rate_limiter or RateLimiter()
    base_meta = dict(meta or {})

    existing: List[LithologyRecord] = []
    if resume:
        existing = load_existing_records(output_path)
        if verbose:
            print(f"Loaded {len(existing)} existing records")

    records: List[LithologyRecord] = list(existing)
    done = {r.cell_id for r in existing}
    result = FetchResult(output_path=output_path, existing_count=len(existing))

    def snapshot(checkpoint: bool):
        snapshot_meta = dict(base_meta, fetchedAt=datetime.now().isoformat())
        if checkpoint:
            snapshot_meta['checkpoint'] = True
        save_records(output_path, records, snapshot_meta)

    current_area = None
    for cell in cells:
        if cell.cell_id in done:
            result.skipped_count += 1
            continue
        done.add(cell.cell_id)

        if verbose and cell.source_area != current_area:
            current_area = cell.source_area
            print(f"\nProcessing {current_area}... ({len(records)} records so far)")

        rate_limiter.wait()
        labels = client.fetch_labels(cell.lat, cell.lng)
        record = build_lithology_record(
            cell.cell_id, cell.lat, cell.lng, labels, client.table, profile
        )

        if record is None:
            result.no_data_count += 1
            continue

        records.append(record)
        result.new_count += 1

        if result.new_count % checkpoint_interval == 0:
            snapshot(checkpoint=True)
            if verbose:
                print(f"    >> Checkpoint saved ({len(records)} records)")

    snapshot(checkpoint=False)

    result.records = records
    result.elapsed_seconds = time.time() - start_time

    if verbose:
        print_summary(result, resume)

    return result


def _client_for(config: PipelineConfig) -> MacrostratClient:
    policy = RetryPolicy(
        max_attempts=config.max_retries,
        delay=config.retry_delay,
        retry_on=RETRYABLE_ERRORS,
    )
    return MacrostratClient(retry_policy=policy)


def fetch_lithology(
    config: Optional[PipelineConfig] = None,
    resume: bool = False,
    regions: Sequence[AreaBoundary] = FETCH_REGIONS,
    client: Optional[MacrostratClient] = None,
) -> FetchResult:
    """Fetch the global lithology layer (regions at precision 4)."""
    config = config or PipelineConfig()

    if config.verbose:
        print("=" * 70)
        print("LITHOLOGY FETCH (Macrostrat)")
        print(f"Regions: {len(regions)} | Precision: {INGESTION_PRECISION}")
        if resume:
            print("Mode: RESUME (skipping existing cells)")
        print("=" * 70)

    owns_client = client is None
    client = client or _client_for(config)
    try:
        return run_fetch_job(
            region_cells(regions, INGESTION_PRECISION),
            config.lithology_raw_path,
            client,
            profile=BROAD_PROFILE,
            resume=resume,
            checkpoint_interval=config.checkpoint_interval,
            rate_limiter=RateLimiter(min_interval=config.request_delay),
            meta={'source': 'Macrostrat API', 'precision': INGESTION_PRECISION},
            verbose=config.verbose,
        )
    finally:
        if owns_client:
            client.close()


def fetch_city_lithology(
    config: Optional[PipelineConfig] = None,
    resume: bool = False,
    max_cities: int = MAX_CITIES,
    client: Optional[MacrostratClient] = None,
) -> FetchResult:
    """Fetch fine lithology grids around the most populous cities (precision 5)."""
    config = config or PipelineConfig()
    cities = get_cities_by_population(max_cities)

    if config.verbose:
        print("=" * 70)
        print("CITY LITHOLOGY FETCH (Macrostrat)")
        print(f"Cities: {len(cities)} | Precision: {CITY_PRECISION} | Radius: {CITY_RADIUS_KM}km")
        if resume:
            print("Mode: RESUME (skipping existing cells)")
        print("=" * 70)

    owns_client = client is None
    client = client or _client_for(config)
    try:
        return run_fetch_job(
            city_cells(cities, CITY_PRECISION, CITY_RADIUS_KM),
            config.city_lithology_raw_path,
            client,
            profile=CITY_PROFILE,
            resume=resume,
            checkpoint_interval=config.checkpoint_interval,
            rate_limiter=RateLimiter(min_interval=config.request_delay),
            meta={
                'source': 'Macrostrat API (city grids)',
                'precision': CITY_PRECISION,
                'cities': len(cities),
                'radiusKm': CITY_RADIUS_KM,
            },
            verbose=config.verbose,
        )
    finally:
        if owns_client:
            client.close()
