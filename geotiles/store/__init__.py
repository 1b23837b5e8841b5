"""
Tile store module.

- normalize.py: Lithology normalization to mapping keys
- builder.py: Merge, aggregate, write and publish the SQLite store
- validation.py: Quality gates run before publishing
- loader.py: Cached, thread-safe runtime reads

Only the runtime loader is exported here; the build modules pull in the
ingestion chain (and httpx) and are imported from their own modules.
"""

from .loader import TileLoader, CacheStats
