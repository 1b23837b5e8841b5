"""
Geographic utilities module.

- geohash.py: Cell id encoding/decoding
- grid.py: Covering grids for bounding boxes and around cities
- polygon.py: Point-in-polygon containment
- regions.py: Fetch regions and city lists
"""

from .geohash import BASE32, LatLng, CellBounds, encode, decode, bounds, cell_size_degrees
from .grid import AreaBoundary, GridPoint, generate_grid, generate_boundary_grid, generate_grid_around_point
from .polygon import point_in_polygon, bounding_box
from .regions import City, CITIES, MAJOR_CITIES, FETCH_REGIONS, BIOME_ESTIMATE_REGIONS, get_cities_by_population
