"""
Default configuration for the geotiles build pipeline and lookup service.

Every value can be overridden with a GEOTILES_* environment variable.
For library usage prefer PipelineConfig (config_manager.py), which resolves
explicit arguments before falling back to these defaults.
"""

import os


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


# Upstream classification API (Macrostrat)
MACROSTRAT_API_URL = os.environ.get(
    "GEOTILES_MACROSTRAT_URL",
    "https://macrostrat.org/api/v2/geologic_units/map",
)
USER_AGENT = "geotiles/1.0"
REQUEST_TIMEOUT = _env_float("GEOTILES_REQUEST_TIMEOUT", 30.0)

# Rate Limiting (seconds)
DELAY_BETWEEN_REQUESTS = _env_float("GEOTILES_REQUEST_DELAY", 0.1)

# Retry policy: ~1 hour of retrying at 10s intervals
RETRY_DELAY = _env_float("GEOTILES_RETRY_DELAY", 10.0)
MAX_RETRIES = _env_int("GEOTILES_MAX_RETRIES", 360)

# Checkpoint a full snapshot every N new records
CHECKPOINT_INTERVAL = _env_int("GEOTILES_CHECKPOINT_INTERVAL", 500)

# Geohash precisions
COARSE_PRECISION = 3  # ~156km cells
INGESTION_PRECISION = 4  # ~39km cells
CITY_PRECISION = 5  # ~5km cells

# City grids
CITY_RADIUS_KM = 25.0
MAX_CITIES = _env_int("GEOTILES_MAX_CITIES", 200)

# Geographic Constants
KM_PER_LAT_DEGREE = 111.32

# Paths
OUTPUT_DIR = os.environ.get("GEOTILES_OUTPUT_DIR", "output")
TILE_STORE_PATH = os.environ.get("GEOTILES_STORE_PATH", "assets/tiles.db")
MAPPING_PATH = os.environ.get("GEOTILES_MAPPING_PATH", "data/lithology_materials.json")

LITHOLOGY_RAW_FILE = "lithology_raw.json"
CITY_LITHOLOGY_RAW_FILE = "cities_lithology.json"
BIOMES_RAW_FILE = "biomes_raw.json"

# Quality gates
MAX_GENERIC_PERCENTAGE = _env_float("GEOTILES_MAX_GENERIC_PERCENTAGE", 80.0)
MAJOR_CITIES_TO_CHECK = 20
MIN_SPECIFIC_CITIES_PERCENTAGE = _env_float("GEOTILES_MIN_SPECIFIC_CITIES_PERCENTAGE", 25.0)
MAX_NO_DATA_CITIES = _env_int("GEOTILES_MAX_NO_DATA_CITIES", 2)
DISTRIBUTION_TOP_N = 20

# Lookup service
API_HOST = os.environ.get("GEOTILES_API_HOST", "0.0.0.0")
API_PORT = _env_int("GEOTILES_API_PORT", 8000)

# Store schema version written to the metadata table
STORE_SCHEMA_VERSION = "1.0.0"
