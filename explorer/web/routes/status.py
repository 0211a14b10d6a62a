"""
Status routes.

GET /health - liveness document
GET /api    - endpoint index
"""

from aiohttp import web

from explorer import __version__
from explorer.web.responses import timestamp

routes = web.RouteTableDef()

AVAILABLE_ENDPOINTS = [
    "GET /api/apod",
    "GET /api/apod/:date",
    "GET /api/apod/range/:start_date/:end_date",
    "GET /api/apod/random",
    "GET /api/apod/search",
    "GET /api/apod/stats",
    "GET /api/mars-rover",
    "GET /api/mars-rover/manifests",
    "GET /api/mars-rover/cameras",
    "GET /api/mars-rover/latest",
    "GET /api/mars-rover/stats",
    "GET /api/mars-rover/search",
    "GET /api/neo",
    "GET /api/neo/feed",
    "GET /api/neo/lookup/:asteroid_id",
    "GET /api/neo/browse",
    "GET /api/neo/stats",
    "GET /api/neo/search",
    "GET /api/neo/risk/:level",
    "GET /health",
]


@routes.get("/health")
async def health(request: web.Request) -> web.Response:
    config = request.app["config"]
    return web.json_response({
        "status": "OK",
        "message": "NASA Data Explorer Backend is running",
        "timestamp": timestamp(),
        "environment": config.server.environment,
    })


@routes.get("/api")
async def api_index(request: web.Request) -> web.Response:
    return web.json_response({
        "message": "Welcome to NASA Data Explorer API",
        "version": __version__,
        "endpoints": {
            "apod": "/api/apod",
            "marsRover": "/api/mars-rover",
            "neo": "/api/neo",
            "health": "/health",
        },
        "documentation": "https://api.nasa.gov/",
    })
