"""
Grid Generation

Enumerates the geohash cells covering a geographic area for systematic querying.
"""

import math
from dataclasses import dataclass
from typing import Dict, List

from ..config import KM_PER_LAT_DEGREE
from .geohash import cell_size_degrees, encode

# Sample at 80% of the cell size so rounding at cell edges never leaves a gap
STEP_FACTOR = 0.8


@dataclass
class AreaBoundary:
    """Represents the boundary of a geographic area"""
    name: str
    north: float
    south: float
    east: float
    west: float


@dataclass
class GridPoint:
    """An exact sample coordinate and the cell it falls in"""
    lat: float
    lng: float
    cell_id: str


def _axis_samples(start: float, stop: float, step: float) -> List[float]:
    """Values from start to stop (inclusive) at `step`, always ending on stop."""
    samples = []
    i = 0
    value = start
    while value < stop:
        samples.append(value)
        i += 1
        value = start + i * step
    samples.append(stop)
    return samples


def generate_grid(
    lat_min: float,
    lat_max: float,
    lng_min: float,
    lng_max: float,
    precision: int,
) -> List[str]:
    """
    Generate all geohashes covering a bounding box.

    Args:
        lat_min: Southern edge
        lat_max: Northern edge
        lng_min: Western edge
        lng_max: Eastern edge
        precision: Geohash precision

    Returns:
        Deduplicated cell ids in sampling order
    """
    cell_lat, cell_lng = cell_size_degrees(precision)
    lat_step = cell_lat * STEP_FACTOR
    lng_step = cell_lng * STEP_FACTOR

    cells: Dict[str, None] = {}
    lng_samples = _axis_samples(lng_min, lng_max, lng_step)

    for lat in _axis_samples(lat_min, lat_max, lat_step):
        for lng in lng_samples:
            cells.setdefault(encode(lat, lng, precision))

    return list(cells)


def generate_boundary_grid(boundary: AreaBoundary, precision: int) -> List[str]:
    """Generate the covering cells of an AreaBoundary."""
    return generate_grid(
        boundary.south, boundary.north, boundary.west, boundary.east, precision
    )


def km_step_for_precision(precision: int) -> float:
    """Sample spacing in km for city grids (slightly under one cell)."""
    if precision == 5:
        return 4.0
    if precision == 4:
        return 30.0
    return 150.0


def generate_grid_around_point(
    center_lat: float,
    center_lng: float,
    radius_km: float,
    precision: int,
) -> List[GridPoint]:
    """
    Generate a square grid of sample points around a center coordinate.

    Unlike generate_grid, the returned coordinates are the exact sample
    points rather than cell centroids. Only the first point falling in
    each cell is kept.

    Args:
        center_lat: Center latitude
        center_lng: Center longitude
        radius_km: Half-width of the square in km
        precision: Geohash precision for the cell ids

    Returns:
        List of GridPoint objects, one per distinct cell
    """
    lat_deg_per_km = 1 / KM_PER_LAT_DEGREE
    lng_deg_per_km = 1 / (KM_PER_LAT_DEGREE * math.cos(math.radians(center_lat)))

    step_km = km_step_for_precision(precision)
    lat_step = step_km * lat_deg_per_km
    lng_step = step_km * lng_deg_per_km

    lat_min = center_lat - radius_km * lat_deg_per_km
    lat_max = center_lat + radius_km * lat_deg_per_km
    lng_min = center_lng - radius_km * lng_deg_per_km
    lng_max = center_lng + radius_km * lng_deg_per_km

    points = []
    seen = set()

    lat = lat_min
    i = 0
    while lat <= lat_max:
        lng = lng_min
        j = 0
        while lng <= lng_max:
            cell_id = encode(lat, lng, precision)
            if cell_id not in seen:
                seen.add(cell_id)
                points.append(GridPoint(lat=lat, lng=lng, cell_id=cell_id))
            j += 1
            lng = lng_min + j * lng_step
        i += 1
        lat = lat_min + i * lat_step

    return points

