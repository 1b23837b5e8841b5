"""
Unit tests for point-in-polygon containment.

Covers:
- point_in_polygon: square, concave ring, open vs closed rings
- bounding_box
"""

from geotiles.geo import bounding_box, point_in_polygon

# (lng, lat) vertices, GeoJSON order
SQUARE = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0), (0.0, 0.0)]

# A "U" shape open to the north: the notch x in (4, 6), y in (4, 10) is outside
U_SHAPE = [
    (0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (6.0, 10.0),
    (6.0, 4.0), (4.0, 4.0), (4.0, 10.0), (0.0, 10.0),
]


class TestPointInPolygon:
    def test_center_inside(self):
        assert point_in_polygon(5.0, 5.0, SQUARE)

    def test_outside(self):
        assert not point_in_polygon(15.0, 5.0, SQUARE)
        assert not point_in_polygon(5.0, -1.0, SQUARE)

    def test_argument_order_is_lat_then_lng(self):
        tall = [(0.0, 0.0), (1.0, 0.0), (1.0, 20.0), (0.0, 20.0)]
        assert point_in_polygon(15.0, 0.5, tall)
        assert not point_in_polygon(0.5, 15.0, tall)

    def test_open_ring_same_as_closed(self):
        open_ring = SQUARE[:-1]
        for lat, lng in [(5.0, 5.0), (1.0, 9.0), (11.0, 5.0), (-3.0, -3.0)]:
            assert point_in_polygon(lat, lng, open_ring) == point_in_polygon(lat, lng, SQUARE)

    def test_concave_notch_is_outside(self):
        assert not point_in_polygon(7.0, 5.0, U_SHAPE)

    def test_concave_arms_are_inside(self):
        assert point_in_polygon(7.0, 2.0, U_SHAPE)
        assert point_in_polygon(7.0, 8.0, U_SHAPE)
        assert point_in_polygon(2.0, 5.0, U_SHAPE)

    def test_negative_coordinates(self):
        ring = [(-80.0, 30.0), (-70.0, 30.0), (-70.0, 45.0), (-80.0, 45.0)]
        assert point_in_polygon(40.7128, -74.006, ring)
        assert not point_in_polygon(40.7128, -118.0, ring)


class TestBoundingBox:
    def test_square(self):
        assert bounding_box(SQUARE) == (0.0, 10.0, 0.0, 10.0)

    def test_returns_lat_range_first(self):
        ring = [(-80.0, 30.0), (-70.0, 30.0), (-70.0, 45.0)]
        assert bounding_box(ring) == (30.0, 45.0, -80.0, -70.0)
