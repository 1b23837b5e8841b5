"""
GeoTiles

Offline biome and lithology lookups for arbitrary coordinates.

Quick start (library usage):
    from geotiles import TileLoader, GeoLookup

    with TileLoader("assets/tiles.db") as loader:
        data = GeoLookup(loader).lookup(40.7128, -74.006)
        print(data.geology.primary_lithology, data.biome.biome_code)

The build pipeline (fetching, biome processing, store building) lives in
geotiles.ingestion and geotiles.store, or use the CLI: python -m geotiles --help
"""

from .exceptions import (
    GeoTilesError,
    ConfigurationError,
    SourceDataError,
    TransientAPIError,
    StoreError,
    QualityGateError,
)
from .records import BiomeRecord, LithologyRecord, GeologyData, BiomeData, GeoTile
from .config_manager import PipelineConfig
from .geo import encode, decode

__version__ = "1.0.0"
__all__ = [
    "GeoTilesError",
    "ConfigurationError",
    "SourceDataError",
    "TransientAPIError",
    "StoreError",
    "QualityGateError",
    "BiomeRecord",
    "LithologyRecord",
    "GeologyData",
    "BiomeData",
    "GeoTile",
    "PipelineConfig",
    "encode",
    "decode",
    "TileLoader",
    "GeoLookup",
    "build_store",
]


def __getattr__(name):
    """Lazy imports for the runtime and build entry points.

    TileLoader/GeoLookup pull in the lookup chain, and build_store the
    ingestion modules (and httpx with them). Deferring them keeps
    `import geotiles` light for callers that only need the codec or records.
    """
    if name == "TileLoader":
        from .store.loader import TileLoader
        return TileLoader
    if name == "GeoLookup":
        from .lookup import GeoLookup
        return GeoLookup
    if name == "build_store":
        from .store.builder import build_store
        return build_store
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
