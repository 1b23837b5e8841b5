#!/usr/bin/env python
"""
Run the API Server

Starts the FastAPI lookup server over the published tile store.

Usage:
    python run_server.py

The server runs on http://localhost:8000 (GEOTILES_API_HOST / GEOTILES_API_PORT)

Endpoints:
    GET  /api/health            - Health check
    GET  /api/tiles/{cell_id}   - Tile for a geohash cell
    GET  /api/lookup?lat=&lng=  - Hierarchical point lookup
"""

import uvicorn

from geotiles.config import API_HOST, API_PORT

uvicorn.run("geotiles.server:app", host=API_HOST, port=API_PORT, reload=False)
