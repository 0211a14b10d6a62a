"""
Near-Earth Object routes - /api/neo

GET /api/neo                      - paged feed for a date range (max 7 days)
GET /api/neo/feed                 - whole feed, optional detailed=true
GET /api/neo/lookup/{asteroid_id} - one asteroid with orbital data
GET /api/neo/browse               - catalogue browse (0-based pages)
GET /api/neo/stats                - hazard, risk and size counts
GET /api/neo/search               - name search within a range
GET /api/neo/risk/{level}         - objects with one risk label
"""

import logging

from aiohttp import web

from explorer.services.nasa_client import NasaAPIError
from explorer.services.neo_service import RISK_LEVELS
from explorer.web import validation
from explorer.web.responses import bad_request, error_response, ok

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()

# URL slug -> label, e.g. "very-low" -> "Very Low"
RISK_SLUGS = {level.lower().replace(" ", "-"): level for level in RISK_LEVELS}


def _neo_range(request: web.Request) -> tuple[str, str]:
    return validation.date_range(
        request.query.get("start_date"),
        request.query.get("end_date"),
        max_days=validation.MAX_NEO_RANGE_DAYS,
    )


@routes.get("/api/neo")
async def neo_list(request: web.Request) -> web.Response:
    start, end = _neo_range(request)
    page = validation.page_number(request.query.get("page"))
    size = validation.page_size(request.query.get("size"))

    try:
        data = await request.app["neo_service"].get_neos(start, end, page=page, size=size)
    except NasaAPIError as e:
        logger.error(f"NEO error: {e}")
        return error_response(500, "Failed to fetch NEO data", str(e))

    return ok(data, filters={"start_date": start, "end_date": end, "page": page, "size": size})


@routes.get("/api/neo/feed")
async def neo_feed(request: web.Request) -> web.Response:
    start, end = _neo_range(request)
    detailed = validation.flag(request.query.get("detailed"))

    try:
        data = await request.app["neo_service"].get_feed(start, end, detailed=detailed)
    except NasaAPIError as e:
        logger.error(f"NEO feed error: {e}")
        return error_response(500, "Failed to fetch NEO feed data", str(e))

    return ok(data, filters={"start_date": start, "end_date": end, "detailed": detailed})


@routes.get("/api/neo/lookup/{asteroid_id}")
async def neo_lookup(request: web.Request) -> web.Response:
    asteroid_id = request.match_info["asteroid_id"].strip()
    if not (asteroid_id.isascii() and asteroid_id.isdigit()):
        raise bad_request("Invalid asteroid ID", "Asteroid ID must be a numeric NeoWs identifier")

    try:
        data = await request.app["neo_service"].lookup(asteroid_id)
    except NasaAPIError as e:
        logger.error(f"NEO lookup error: {e}")
        return error_response(500, "Failed to fetch asteroid details", str(e))

    return ok(data, asteroid_id=asteroid_id)


@routes.get("/api/neo/browse")
async def neo_browse(request: web.Request) -> web.Response:
    page = validation.page_number(request.query.get("page"), default=0, minimum=0)
    size = validation.page_size(request.query.get("size"))

    try:
        data = await request.app["neo_service"].browse(page=page, size=size)
    except NasaAPIError as e:
        logger.error(f"NEO browse error: {e}")
        return error_response(500, "Failed to browse NEOs", str(e))

    return ok(data, pagination={"page": page, "size": size})


@routes.get("/api/neo/stats")
async def neo_stats(request: web.Request) -> web.Response:
    start, end = _neo_range(request)
    try:
        stats = await request.app["neo_service"].get_stats(start, end)
    except NasaAPIError as e:
        logger.error(f"NEO stats error: {e}")
        return error_response(500, "Failed to fetch NEO statistics", str(e))
    return ok(stats)


@routes.get("/api/neo/search")
async def neo_search(request: web.Request) -> web.Response:
    query = validation.search_query(request.query.get("q"))
    start, end = _neo_range(request)
    try:
        matches = await request.app["neo_service"].search_by_name(query, start, end)
    except NasaAPIError as e:
        logger.error(f"NEO search error: {e}")
        return error_response(500, "Failed to search NEOs", str(e))
    return ok(matches, count=len(matches), query=query)


@routes.get("/api/neo/risk/{level}")
async def neo_by_risk(request: web.Request) -> web.Response:
    slug = request.match_info["level"].strip().lower()
    if slug not in RISK_SLUGS:
        raise bad_request(
            "Invalid risk level",
            f"Risk level must be one of: {', '.join(RISK_SLUGS)}",
        )
    start, end = _neo_range(request)

    try:
        matches = await request.app["neo_service"].get_by_risk_level(RISK_SLUGS[slug], start, end)
    except NasaAPIError as e:
        logger.error(f"NEO risk filter error: {e}")
        return error_response(500, "Failed to fetch NEOs by risk level", str(e))
    return ok(matches, count=len(matches), risk_level=RISK_SLUGS[slug])
