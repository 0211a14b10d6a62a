"""
Mars rover routes - /api/mars-rover

GET /api/mars-rover            - photos by sol or earth_date (+camera, page)
GET /api/mars-rover/manifests  - mission manifest
GET /api/mars-rover/cameras    - cameras used over the mission
GET /api/mars-rover/latest     - most recent photos
GET /api/mars-rover/stats      - manifest plus latest-photo count
GET /api/mars-rover/search     - photos from cameras matching q
"""

import logging

from aiohttp import web

from explorer.services.nasa_client import NasaAPIError
from explorer.web import validation
from explorer.web.responses import error_response, ok

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


@routes.get("/api/mars-rover")
async def rover_photos(request: web.Request) -> web.Response:
    q = request.query
    rover = validation.rover_name(q.get("rover"))
    sol, earth_date = validation.sol_or_earth_date(q.get("sol"), q.get("earth_date"))
    page = validation.page_number(q.get("page"))
    camera = q.get("camera", "").strip().lower() or None

    try:
        photos = await request.app["mars_rover_service"].get_photos(
            rover, sol=sol, earth_date=earth_date, camera=camera, page=page,
        )
    except NasaAPIError as e:
        logger.error(f"Mars rover error: {e}")
        return error_response(500, "Failed to fetch Mars rover photos", str(e))

    return ok(
        photos,
        rover=rover,
        filters={"sol": sol, "earth_date": earth_date, "camera": camera, "page": page},
    )


@routes.get("/api/mars-rover/manifests")
async def rover_manifest(request: web.Request) -> web.Response:
    rover = validation.rover_name(request.query.get("rover"))
    try:
        manifest = await request.app["mars_rover_service"].get_manifest(rover)
    except NasaAPIError as e:
        logger.error(f"Mars rover manifest error: {e}")
        return error_response(500, "Failed to fetch rover manifest", str(e))
    return ok(manifest, rover=rover)


@routes.get("/api/mars-rover/cameras")
async def rover_cameras(request: web.Request) -> web.Response:
    rover = validation.rover_name(request.query.get("rover"))
    try:
        cameras = await request.app["mars_rover_service"].get_cameras(rover)
    except NasaAPIError as e:
        logger.error(f"Mars rover cameras error: {e}")
        return error_response(500, "Failed to fetch rover cameras", str(e))
    return ok(cameras, rover=rover)


@routes.get("/api/mars-rover/latest")
async def rover_latest(request: web.Request) -> web.Response:
    rover = validation.rover_name(request.query.get("rover"))
    try:
        latest = await request.app["mars_rover_service"].get_latest(rover)
    except NasaAPIError as e:
        logger.error(f"Mars rover latest photos error: {e}")
        return error_response(500, "Failed to fetch latest rover photos", str(e))
    return ok(latest, rover=rover)


@routes.get("/api/mars-rover/stats")
async def rover_stats(request: web.Request) -> web.Response:
    rover = validation.rover_name(request.query.get("rover"))
    try:
        stats = await request.app["mars_rover_service"].get_stats(rover)
    except NasaAPIError as e:
        logger.error(f"Mars rover stats error: {e}")
        return error_response(500, "Failed to fetch rover statistics", str(e))
    return ok(stats, rover=rover)


@routes.get("/api/mars-rover/search")
async def rover_camera_search(request: web.Request) -> web.Response:
    q = request.query
    rover = validation.rover_name(q.get("rover"))
    query = validation.search_query(q.get("q"))
    sol, earth_date = validation.sol_or_earth_date(q.get("sol"), q.get("earth_date"))

    try:
        results = await request.app["mars_rover_service"].search_by_camera(
            rover, query, sol=sol, earth_date=earth_date,
        )
    except NasaAPIError as e:
        logger.error(f"Mars rover camera search error: {e}")
        return error_response(500, "Failed to search rover photos by camera", str(e))
    return ok(results, rover=rover, query=query, count=len(results))
