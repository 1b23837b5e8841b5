"""
Polygon Containment

Ray-casting point-in-polygon test over a single outer ring. Holes are not
supported; only the outer boundary is tested.
"""

from typing import Sequence, Tuple

Ring = Sequence[Sequence[float]]  # (lng, lat) vertices, GeoJSON order


def point_in_polygon(lat: float, lng: float, ring: Ring) -> bool:
    """
    Check if a point lies inside a polygon ring.

    Args:
        lat: Latitude of the point
        lng: Longitude of the point
        ring: Ordered (lng, lat) vertices; closing vertex optional

    Returns:
        True if the point is inside. Points exactly on an edge may go either way.
    """
    inside = False
    n = len(ring)
    j = n - 1

    for i in range(n):
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[j][0], ring[j][1]

        if (yi > lat) != (yj > lat):
            x_cross = (xj - xi) * (lat - yi) / (yj - yi) + xi
            if lng < x_cross:
                inside = not inside
        j = i

    return inside


def bounding_box(ring: Ring) -> Tuple[float, float, float, float]:
    """Return (min_lat, max_lat, min_lng, max_lng) of a ring."""
    lngs = [p[0] for p in ring]
    lats = [p[1] for p in ring]
    return min(lats), max(lats), min(lngs), max(lngs)
