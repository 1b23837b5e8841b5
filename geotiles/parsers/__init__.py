"""
Parsers module for upstream payloads.

- map_units.py: Parse Macrostrat geologic map unit responses
- features.py: Parse GeoJSON biome polygon features
"""

from .map_units import MapUnit, parse_map_units, safe_get
from .features import PolygonFeature, parse_biome_features, parse_feature
