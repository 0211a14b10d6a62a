"""
Page routes - server-rendered views over the same services as the API.

GET /            - home, with today's picture
GET /apod        - picture of the day, ?date= or ?random=1
GET /mars-rover  - rover photos, ?rover=&sol=&earth_date=&camera=&page=
GET /neo         - NEO tracker, ?start_date=&end_date=&q=&risk=
GET /about       - project and data-source notes
"""

import logging
from datetime import date
from urllib.parse import urlencode

import aiohttp_jinja2
from aiohttp import web

from explorer.dates import APOD_FIRST_DATE, default_range, parse_date, random_date
from explorer.services.mars_rover_service import ROVERS
from explorer.services.nasa_client import NasaAPIError
from explorer.services.neo_service import RISK_LEVELS
from explorer.web import validation

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()

# Page size of the upstream mars-photos API
PHOTOS_PER_PAGE = 25


@routes.get("/")
@aiohttp_jinja2.template("home.html")
async def home_page(request: web.Request) -> dict:
    apod, error = None, None
    try:
        apod = await request.app["apod_service"].get_today()
    except NasaAPIError as e:
        logger.warning(f"Home page APOD unavailable: {e}")
        error = str(e)
    return {"page": "home", "apod": apod, "error": error}


@routes.get("/apod")
@aiohttp_jinja2.template("apod.html")
async def apod_page(request: web.Request) -> dict:
    today = date.today()
    requested = request.query.get("date", "").strip()
    apod, error = None, None

    if validation.flag(request.query.get("random")):
        requested = random_date(APOD_FIRST_DATE, today).isoformat()
    elif requested:
        d = parse_date(requested)
        if d is None:
            error = "Date must be in YYYY-MM-DD format"
        elif d < APOD_FIRST_DATE or d > today:
            error = f"Date must be between {APOD_FIRST_DATE.isoformat()} and today"

    if error is None:
        service = request.app["apod_service"]
        try:
            apod = await (service.get_by_date(requested) if requested else service.get_today())
        except NasaAPIError as e:
            error = str(e)

    return {
        "page": "apod",
        "apod": apod,
        "error": error,
        "selected_date": requested or today.isoformat(),
        "min_date": APOD_FIRST_DATE.isoformat(),
        "max_date": today.isoformat(),
    }


@routes.get("/mars-rover")
@aiohttp_jinja2.template("mars_rover.html")
async def mars_rover_page(request: web.Request) -> dict:
    q = request.query
    rover = q.get("rover", "curiosity").strip().lower()
    sol = q.get("sol", "").strip()
    earth_date = q.get("earth_date", "").strip()
    camera = q.get("camera", "").strip().lower() or None
    sol_value = validation.int_param(sol, 0, 0) if sol else None
    page = validation.int_param(q.get("page", "").strip(), 1, 1)
    result, error = None, None

    if rover not in ROVERS:
        error = f"Rover must be one of: {', '.join(ROVERS)}"
    elif sol and sol_value is None:
        error = "Sol must be a non-negative integer"
    elif earth_date and parse_date(earth_date) is None:
        error = "Earth date must be in YYYY-MM-DD format"
    elif page is None:
        error = "Page must be a positive integer"

    browsing = bool(sol or earth_date)
    if error is None:
        service = request.app["mars_rover_service"]
        try:
            if browsing:
                result = await service.get_photos(
                    rover, sol=sol_value, earth_date=earth_date or None, camera=camera, page=page,
                )
            else:
                result = await service.get_latest(rover)
        except NasaAPIError as e:
            error = str(e)

    photos = result["photos"] if result else []
    prev_url = next_url = None
    if browsing and error is None:
        filters = {k: v for k, v in (("rover", rover), ("sol", sol), ("earth_date", earth_date), ("camera", camera)) if v}
        if page > 1:
            prev_url = f"/mars-rover?{urlencode({**filters, 'page': page - 1})}"
        # A full page means the archive may hold more
        if len(photos) >= PHOTOS_PER_PAGE:
            next_url = f"/mars-rover?{urlencode({**filters, 'page': page + 1})}"

    return {
        "page": "mars-rover",
        "rovers": ROVERS,
        "rover": rover,
        "sol": sol,
        "earth_date": earth_date,
        "camera": camera or "",
        "photos": photos,
        "page_number": page or 1,
        "prev_url": prev_url,
        "next_url": next_url,
        "error": error,
    }


@routes.get("/neo")
@aiohttp_jinja2.template("neo.html")
async def neo_page(request: web.Request) -> dict:
    q = request.query
    default_start, default_end = default_range(validation.MAX_NEO_RANGE_DAYS)
    start = q.get("start_date", "").strip() or default_start
    end = q.get("end_date", "").strip() or default_end
    search = q.get("q", "").strip()
    risk = q.get("risk", "all").strip()
    neos, error = [], None

    start_d, end_d = parse_date(start), parse_date(end)
    if start_d is None or end_d is None:
        error = "Dates must be in YYYY-MM-DD format"
    elif start_d > end_d:
        error = "Start date must be before or equal to end date"
    elif (end_d - start_d).days > validation.MAX_NEO_RANGE_DAYS:
        error = f"Date range cannot exceed {validation.MAX_NEO_RANGE_DAYS} days"

    if error is None:
        try:
            feed = await request.app["neo_service"].get_feed(start, end)
            neos = feed["neos"]
        except NasaAPIError as e:
            error = str(e)

    if search:
        neos = [n for n in neos if search.lower() in (n["name"] or "").lower()]
    if risk != "all":
        neos = [n for n in neos if n["risk_level"] == risk]

    return {
        "page": "neo",
        "neos": neos,
        "hazardous_count": sum(1 for n in neos if n["is_potentially_hazardous_asteroid"]),
        "start_date": start,
        "end_date": end,
        "q": search,
        "risk": risk,
        "risk_levels": RISK_LEVELS,
        "error": error,
    }


@routes.get("/about")
@aiohttp_jinja2.template("about.html")
async def about_page(request: web.Request) -> dict:
    return {"page": "about"}
