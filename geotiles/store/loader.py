"""
Tile Loader

Runtime read access to a published tile store.

- Opens the SQLite file read-only, lazily on first lookup
- Caches hits and misses in memory
- All connection and cache access is serialized with a lock, so a single
  loader can be shared across threads
- Never raises on lookup: a missing store, a closed loader or a SQLite
  error all read as "no tile"
"""

import json
import logging
import os
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, Optional

from ..config import COARSE_PRECISION, TILE_STORE_PATH
from ..records import BiomeData, GeologyData, GeoTile

logger = logging.getLogger(__name__)

_SELECT_TILE = """
SELECT cell_id, primary_lithology, secondary_lithologies, geology_confidence,
       biome_code, biome_confidence, ecoregion_id, realm_biome, realm
FROM tiles WHERE cell_id = ?
"""


@dataclass(frozen=True)
class CacheStats:
    files_cached: int  # distinct coarse prefixes with at least one cached tile
    tiles_cached: int


def readonly_uri(path: str) -> str:
    return Path(path).resolve().as_uri() + "?mode=ro"


def _clamp(value) -> float:
    try:
        return min(1.0, max(0.0, float(value or 0.0)))
    except (TypeError, ValueError):
        return 0.0


def row_to_tile(row) -> GeoTile:
    (cell_id, primary, secondary_json, geo_conf,
     biome_code, biome_conf, ecoregion_id, realm_biome, realm) = row

    try:
        secondary = tuple(json.loads(secondary_json or "[]"))
    except ValueError:
        secondary = ()

    return GeoTile(
        cell_id=cell_id,
        geology=GeologyData(
            primary_lithology=primary or "unknown",
            secondary_lithologies=secondary,
            confidence=_clamp(geo_conf),
        ),
        biome=BiomeData(
            biome_code=biome_code or "unknown",
            confidence=_clamp(biome_conf),
            ecoregion_id=ecoregion_id,
            realm=realm,
            realm_biome=realm_biome,
        ),
    )


class TileLoader:
    """
    Cached, thread-safe lookups against a tile store.

    Usage:
        loader = TileLoader("assets/tiles.db")
        tile = loader.get_tile("dr5ru")
        loader.close()
    """

    def __init__(self, db_path: str = TILE_STORE_PATH):
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._cache: Dict[str, Optional[GeoTile]] = {}
        self._closed = False
        self._lock = Lock()

    def _ensure_open(self) -> bool:
        """Open the connection if needed. Caller must hold the lock."""
        if self._closed:
            return False
        if self._conn is not None:
            return True
        if not os.path.exists(self.db_path):
            logger.warning("Tile store not found at %s", self.db_path)
            return False
        try:
            self._conn = sqlite3.connect(
                readonly_uri(self.db_path), uri=True, check_same_thread=False
            )
        except sqlite3.Error as e:
            logger.warning("Could not open tile store %s: %s", self.db_path, e)
            return False
        return True

    def initialize(self) -> bool:
        """Open the store eagerly. Returns False when it is unavailable."""
        with self._lock:
            return self._ensure_open()

    def _lookup(self, cell_id: str) -> Optional[GeoTile]:
        """Caller must hold the lock."""
        if cell_id in self._cache:
            return self._cache[cell_id]
        if not self._ensure_open():
            return None

        try:
            row = self._conn.execute(_SELECT_TILE, (cell_id,)).fetchone()
        except sqlite3.Error as e:
            logger.warning("Tile lookup failed for %s: %s", cell_id, e)
            return None

        tile = row_to_tile(row) if row else None
        self._cache[cell_id] = tile
        return tile

    def get_tile(self, cell_id: str) -> Optional[GeoTile]:
        with self._lock:
            return self._lookup(cell_id.lower())

    def get_tiles(self, cell_ids: Iterable[str]) -> Dict[str, GeoTile]:
        """Found tiles keyed by cell id; misses are omitted."""
        found = {}
        with self._lock:
            for cell_id in cell_ids:
                tile = self._lookup(cell_id.lower())
                if tile is not None:
                    found[cell_id] = tile
        return found

    def clear_cache(self):
        with self._lock:
            self._cache.clear()

    def get_cache_stats(self) -> CacheStats:
        with self._lock:
            tiles = [cell_id for cell_id, tile in self._cache.items() if tile is not None]
        return CacheStats(
            files_cached=len({cell_id[:COARSE_PRECISION] for cell_id in tiles}),
            tiles_cached=len(tiles),
        )

    def get_metadata(self) -> Dict[str, str]:
        with self._lock:
            if not self._ensure_open():
                return {}
            try:
                return dict(self._conn.execute("SELECT key, value FROM metadata"))
            except sqlite3.Error as e:
                logger.warning("Could not read store metadata: %s", e)
                return {}

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._cache.clear()
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
