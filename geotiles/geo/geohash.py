"""
Geohash Encoding

Encodes lat/lng points to base32 cell identifiers and back.

Precision levels used by the pipeline:
    3: ~156km x 156km
    4: ~39km x 19.5km
    5: ~4.9km x 4.9km

Cells are not square: longitude receives ceil(5p/2) bits and latitude
floor(5p/2), so even precisions are twice as wide as they are tall.
"""

from typing import NamedTuple, Tuple

BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"


class LatLng(NamedTuple):
    lat: float
    lng: float


class CellBounds(NamedTuple):
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float


def encode(lat: float, lng: float, precision: int = 5) -> str:
    """
    Encode a point to a geohash.

    Args:
        lat: Latitude (-90 to 90)
        lng: Longitude (-180 to 180)
        precision: Number of characters

    Returns:
        Geohash string of length `precision`
    """
    if precision < 1:
        raise ValueError(f"precision must be >= 1, got {precision}")

    lat_min, lat_max = -90.0, 90.0
    lng_min, lng_max = -180.0, 180.0
    chars = []
    is_lng = True
    bit = 0
    ch = 0

    while len(chars) < precision:
        if is_lng:
            mid = (lng_min + lng_max) / 2
            if lng >= mid:
                ch |= 1 << (4 - bit)
                lng_min = mid
            else:
                lng_max = mid
        else:
            mid = (lat_min + lat_max) / 2
            if lat >= mid:
                ch |= 1 << (4 - bit)
                lat_min = mid
            else:
                lat_max = mid

        is_lng = not is_lng
        bit += 1

        if bit == 5:
            chars.append(BASE32[ch])
            bit = 0
            ch = 0

    return "".join(chars)


def bounds(cell_id: str) -> CellBounds:
    """
    Get the bounding box of a geohash cell.

    Characters outside the base32 alphabet are skipped rather than rejected,
    so "9q5!c" names the same cell as "9q5c".
    """
    lat_min, lat_max = -90.0, 90.0
    lng_min, lng_max = -180.0, 180.0
    is_lng = True

    for char in cell_id.lower():
        idx = BASE32.find(char)
        if idx == -1:
            continue

        for shift in range(4, -1, -1):
            bit_set = (idx >> shift) & 1
            if is_lng:
                mid = (lng_min + lng_max) / 2
                if bit_set:
                    lng_min = mid
                else:
                    lng_max = mid
            else:
                mid = (lat_min + lat_max) / 2
                if bit_set:
                    lat_min = mid
                else:
                    lat_max = mid
            is_lng = not is_lng

    return CellBounds(lat_min, lat_max, lng_min, lng_max)


def decode(cell_id: str) -> LatLng:
    """Decode a geohash to the centroid of its cell (not the encoded point)."""
    b = bounds(cell_id)
    return LatLng((b.min_lat + b.max_lat) / 2, (b.min_lng + b.max_lng) / 2)


def cell_size_degrees(precision: int) -> Tuple[float, float]:
    """Return (lat_degrees, lng_degrees) spanned by one cell at a precision."""
    total_bits = precision * 5
    lng_bits = (total_bits + 1) // 2
    lat_bits = total_bits // 2
    return 180.0 / (2 ** lat_bits), 360.0 / (2 ** lng_bits)
