"""
Shared pytest fixtures for the GeoTiles test suite.
"""

import json

import httpx
import pytest

from geotiles.geo import encode
from geotiles.ingestion.macrostrat import MacrostratClient
from geotiles.ingestion.rate_limit import RateLimiter, RetryPolicy
from geotiles.records import BiomeData, GeologyData, GeoTile
from geotiles.store.builder import write_store
from geotiles.store.loader import TileLoader

NYC = (40.7128, -74.006)
LONDON = (51.5074, -0.1278)


class SleepRecorder:
    """Stands in for time.sleep and remembers every requested delay."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


def units_payload(*units):
    """Build a Macrostrat response body from (name, lith) pairs."""
    return {"success": {"data": [{"name": name, "lith": lith} for name, lith in units]}}


@pytest.fixture
def no_sleep():
    """A sleep replacement that returns immediately and records delays."""
    return SleepRecorder()


@pytest.fixture
def fast_limiter(no_sleep):
    """A rate limiter that never blocks."""
    return RateLimiter(min_interval=0.0, sleep=no_sleep)


@pytest.fixture
def make_client(no_sleep):
    """Factory for MacrostratClient instances backed by an httpx.MockTransport.

    `handler` receives the httpx.Request and returns an httpx.Response.
    """
    clients = []

    def factory(handler, max_attempts=3, retry_on=(Exception,)):
        client = MacrostratClient(
            base_url="https://macrostrat.test/api/v2/geologic_units/map",
            retry_policy=RetryPolicy(
                max_attempts=max_attempts,
                delay=10.0,
                retry_on=retry_on,
                sleep=no_sleep,
            ),
            transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def granite_handler():
    """Transport handler answering every point with a single granite unit."""
    def handler(request):
        return httpx.Response(200, json=units_payload(("Test Granite", "Major:{granite}")))
    return handler


@pytest.fixture
def nyc_tiles():
    """A detailed tile at New York with no biome, plus its coarse parent."""
    fine_id = encode(*NYC, 5)
    coarse_id = fine_id[:3]
    return {
        fine_id: GeoTile(
            cell_id=fine_id,
            geology=GeologyData("granite", ("schist",), 0.8),
            biome=BiomeData(),
        ),
        coarse_id: GeoTile(
            cell_id=coarse_id,
            geology=GeologyData("sandstone", (), 0.6),
            biome=BiomeData("temperate_broadleaf_mixed", 0.75, realm="Nearctic", realm_biome="NA04"),
        ),
    }


@pytest.fixture
def store_path(tmp_path, nyc_tiles):
    """A small tile store written to a temp directory."""
    path = tmp_path / "tiles.db"
    write_store(nyc_tiles, str(path), {"version": "1.0.0", "totalTiles": len(nyc_tiles)})
    return str(path)


@pytest.fixture
def loader(store_path):
    """A TileLoader over the small temp store, closed after the test."""
    tile_loader = TileLoader(store_path)
    yield tile_loader
    tile_loader.close()


@pytest.fixture
def mapping_path(tmp_path):
    """A lithology mapping file covering a handful of keys."""
    path = tmp_path / "mapping.json"
    path.write_text(json.dumps({
        "_meta": {"version": "1.0.0"},
        "granite": {"stoneIds": ["granite"]},
        "sandstone": {"stoneIds": ["sandstone"]},
        "basalt": {"stoneIds": ["basalt"]},
    }))
    return str(path)
