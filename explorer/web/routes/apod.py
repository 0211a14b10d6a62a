"""
APOD routes - /api/apod

GET /api/apod                                  - today's picture
GET /api/apod/{date}                           - picture for a date
GET /api/apod/range/{start_date}/{end_date}    - pictures in a range
GET /api/apod/random?start_date=&end_date=     - random pick from a range
GET /api/apod/search?q=&start_date=&end_date=  - title/explanation search
GET /api/apod/stats?start_date=&end_date=      - media/year/copyright stats
"""

import logging

from aiohttp import web

from explorer.services.nasa_client import NasaAPIError
from explorer.web import validation
from explorer.web.responses import error_response, ok

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


@routes.get("/api/apod")
async def apod_today(request: web.Request) -> web.Response:
    try:
        apod = await request.app["apod_service"].get_today()
    except NasaAPIError as e:
        logger.error(f"APOD error: {e}")
        return error_response(500, "Failed to fetch APOD", str(e))
    return ok(apod)


@routes.get("/api/apod/range/{start_date}/{end_date}")
async def apod_range(request: web.Request) -> web.Response:
    start, end = validation.date_range(
        request.match_info["start_date"], request.match_info["end_date"],
    )
    try:
        apods = await request.app["apod_service"].get_range(start, end)
    except NasaAPIError as e:
        logger.error(f"APOD range error: {e}")
        return error_response(500, "Failed to fetch APOD range", str(e))
    return ok(apods, count=len(apods))


@routes.get("/api/apod/random")
async def apod_random(request: web.Request) -> web.Response:
    start, end = validation.date_range(
        request.query.get("start_date"), request.query.get("end_date"),
    )
    try:
        apod = await request.app["apod_service"].get_random(start, end)
    except NasaAPIError as e:
        logger.error(f"Random APOD error: {e}")
        return error_response(500, "Failed to fetch random APOD", str(e))
    return ok(apod)


@routes.get("/api/apod/search")
async def apod_search(request: web.Request) -> web.Response:
    query = validation.search_query(request.query.get("q"))
    start, end = validation.date_range(
        request.query.get("start_date"), request.query.get("end_date"),
    )
    try:
        matches = await request.app["apod_service"].search(query, start, end)
    except NasaAPIError as e:
        logger.error(f"APOD search error: {e}")
        return error_response(500, "Failed to search APOD", str(e))
    return ok(matches, count=len(matches), query=query)


@routes.get("/api/apod/stats")
async def apod_stats(request: web.Request) -> web.Response:
    start, end = validation.date_range(
        request.query.get("start_date"), request.query.get("end_date"),
    )
    try:
        stats = await request.app["apod_service"].get_stats(start, end)
    except NasaAPIError as e:
        logger.error(f"APOD stats error: {e}")
        return error_response(500, "Failed to fetch APOD statistics", str(e))
    return ok(stats)


@routes.get("/api/apod/{date}")
async def apod_by_date(request: web.Request) -> web.Response:
    date = validation.apod_date(request.match_info["date"])
    try:
        apod = await request.app["apod_service"].get_by_date(date)
    except NasaAPIError as e:
        logger.error(f"APOD date error: {e}")
        return error_response(500, "Failed to fetch APOD for specified date", str(e))
    return ok(apod)
