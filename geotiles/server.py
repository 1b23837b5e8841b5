"""
FastAPI Server for GeoTiles

Read-only lookup service over a published tile store.

Endpoints:
- GET /api/health            - Health check and cache statistics
- GET /api/tiles/{cell_id}   - Raw tile for a geohash cell (404 if absent)
- GET /api/lookup?lat=&lng=  - Hierarchical lookup for a coordinate
"""

from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .config import API_HOST, API_PORT
from .geo import BASE32
from .lookup import GeoLookup
from .records import GeoTile
from .store.loader import TileLoader


# Response Models
class GeologyModel(BaseModel):
    primary_lithology: str
    secondary_lithologies: List[str]
    confidence: float


class BiomeModel(BaseModel):
    biome_code: str
    confidence: float
    ecoregion_id: Optional[int] = None
    realm: Optional[str] = None
    realm_biome: Optional[str] = None


class TileResponse(BaseModel):
    cell_id: str
    geology: GeologyModel
    biome: BiomeModel


class LookupResponse(TileResponse):
    lat: float
    lng: float
    data_source: str
    filled_fields: List[str]


class HealthResponse(BaseModel):
    status: str
    store_available: bool
    files_cached: int
    tiles_cached: int


def _tile_response(tile: GeoTile) -> TileResponse:
    return TileResponse(**tile.to_dict())


def create_app(loader: Optional[TileLoader] = None) -> FastAPI:
    """Build the API around a loader (default: the configured store path)."""
    loader = loader or TileLoader()
    geo_lookup = GeoLookup(loader)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        loader.close()

    app = FastAPI(title="GeoTiles Lookup API", lifespan=lifespan)
    app.state.loader = loader

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/api/health", response_model=HealthResponse)
    def health_check():
        """Health check endpoint."""
        stats = loader.get_cache_stats()
        return HealthResponse(
            status="ok",
            store_available=loader.initialize(),
            files_cached=stats.files_cached,
            tiles_cached=stats.tiles_cached,
        )

    @app.get("/api/tiles/{cell_id}", response_model=TileResponse)
    def get_tile(cell_id: str):
        cell_id = cell_id.lower()
        if not cell_id or any(c not in BASE32 for c in cell_id):
            raise HTTPException(status_code=400, detail=f"Invalid cell id: {cell_id}")

        tile = loader.get_tile(cell_id)
        if tile is None:
            raise HTTPException(status_code=404, detail=f"No tile for {cell_id}")
        return _tile_response(tile)

    @app.get("/api/lookup", response_model=LookupResponse)
    def lookup(
        lat: float = Query(..., ge=-90, le=90),
        lng: float = Query(..., ge=-180, le=180),
    ):
        return LookupResponse(**geo_lookup.lookup(lat, lng).to_dict())

    return app


app = create_app()


def run_server(host: str = API_HOST, port: int = API_PORT, store_path: Optional[str] = None):
    """Run the API server."""
    import uvicorn
    target = create_app(TileLoader(store_path)) if store_path else app
    uvicorn.run(target, host=host, port=port)


if __name__ == "__main__":
    run_server()
