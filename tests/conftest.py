"""Shared fixtures: sample NASA payloads, a fake upstream server, mocked services."""

import copy
from unittest.mock import AsyncMock

import pytest
from aiohttp import web

from explorer.config import Config
from explorer.services import ApodService, MarsRoverService, NasaClient, NeoService
from explorer.web.server import WebServer

BAD_KEY = "BAD_KEY"


# =========================================================================
# Sample upstream payloads
# =========================================================================

APOD_IMAGE = {
    "date": "2024-01-01",
    "title": "The Cosmic Cliffs",
    "explanation": "A star-forming region in the Carina Nebula.",
    "url": "https://apod.nasa.gov/apod/image/2401/cliffs_small.jpg",
    "hdurl": "https://apod.nasa.gov/apod/image/2401/cliffs.jpg",
    "media_type": "image",
    "service_version": "v1",
    "copyright": "Jane Doe",
}

APOD_VIDEO = {
    "date": "2024-01-02",
    "title": "Eclipse Timelapse",
    "explanation": "Totality over the Andes.",
    "url": "https://www.youtube.com/embed/abc123",
    "media_type": "video",
    "service_version": "v1",
}

ROVER_PHOTO = {
    "id": 102693,
    "sol": 1000,
    "camera": {"id": 20, "name": "FHAZ", "rover_id": 5, "full_name": "Front Hazard Avoidance Camera"},
    "img_src": "http://mars.jpl.nasa.gov/msl-raw-images/FLB_486265257EDR_F0481570FHAZ00323M_.JPG",
    "earth_date": "2015-05-30",
    "rover": {
        "id": 5,
        "name": "Curiosity",
        "landing_date": "2012-08-06",
        "launch_date": "2011-11-26",
        "status": "active",
    },
}

MANIFEST = {
    "photo_manifest": {
        "name": "Curiosity",
        "landing_date": "2012-08-06",
        "launch_date": "2011-11-26",
        "status": "active",
        "max_sol": 100,
        "max_date": "2012-11-16",
        "total_photos": 1050,
        "photos": [
            {"sol": 0, "earth_date": "2012-08-06", "total_photos": 50, "cameras": ["FHAZ", "MARDI"]},
            {"sol": 1, "earth_date": "2012-08-07", "total_photos": 500, "cameras": ["MAST", "FHAZ"]},
            {"sol": 2, "earth_date": "2012-08-08", "total_photos": 500, "cameras": ["FHAZ", "NAVCAM"]},
        ],
    }
}


def make_neo(neo_id: str, name: str, miss_km: str | None, diameter_max_km: float, hazardous: bool = False) -> dict:
    approaches = []
    if miss_km is not None:
        approaches.append({
            "close_approach_date": "2024-01-01",
            "close_approach_date_full": "2024-Jan-01 12:00",
            "epoch_date_close_approach": 1704110400000,
            "relative_velocity": {
                "kilometers_per_second": "12.5",
                "kilometers_per_hour": "45000.0",
                "miles_per_hour": "27961.7",
            },
            "miss_distance": {
                "astronomical": "0.02",
                "lunar": "7.8",
                "kilometers": miss_km,
                "miles": "1864114.0",
            },
            "orbiting_body": "Earth",
        })
    return {
        "id": neo_id,
        "neo_reference_id": neo_id,
        "name": name,
        "nasa_jpl_url": f"https://ssd.jpl.nasa.gov/tools/sbdb_lookup.html#/?sstr={neo_id}",
        "absolute_magnitude_h": 20.1,
        "estimated_diameter": {
            "kilometers": {"estimated_diameter_min": diameter_max_km / 2, "estimated_diameter_max": diameter_max_km},
            "meters": {"estimated_diameter_min": diameter_max_km * 500, "estimated_diameter_max": diameter_max_km * 1000},
            "miles": {"estimated_diameter_min": 0.1, "estimated_diameter_max": 0.2},
            "feet": {"estimated_diameter_min": 500.0, "estimated_diameter_max": 1000.0},
        },
        "is_potentially_hazardous_asteroid": hazardous,
        "close_approach_data": approaches,
    }


NEO_FEED = {
    "links": {"self": "http://api.nasa.gov/neo/rest/v1/feed?start_date=2024-01-01&end_date=2024-01-02"},
    "element_count": 3,
    "near_earth_objects": {
        "2024-01-02": [
            make_neo("3", "(2024 CC)", "20000000", 0.005),
        ],
        "2024-01-01": [
            make_neo("1", "(2024 AA)", "500000", 1.5, hazardous=True),
            make_neo("2", "(2024 BB)", "3000000", 0.7),
        ],
    },
    "start_date": "2024-01-01",
    "end_date": "2024-01-02",
}

NEO_LOOKUP = {
    **make_neo("3542519", "(2010 PK9)", "7000000", 0.3),
    "orbital_data": {
        "orbit_id": "52",
        "first_observation_date": "2010-08-08",
        "last_observation_date": "2023-09-17",
    },
}

NEO_BROWSE = {
    "links": {"next": "http://api.nasa.gov/neo/rest/v1/neo/browse?page=1&size=20"},
    "page": {"size": 20, "total_elements": 2, "total_pages": 1, "number": 0},
    "near_earth_objects": [
        make_neo("2000433", "433 Eros (A898 PA)", "26000000", 35.0),
        make_neo("2000719", "719 Albert (A911 TB)", None, 3.1),
    ],
}


@pytest.fixture
def neo_feed_payload():
    return copy.deepcopy(NEO_FEED)


# =========================================================================
# Fake NASA upstream
# =========================================================================


def make_fake_nasa_app() -> web.Application:
    """Minimal stand-in for api.nasa.gov; records every request's query.

    app["overrides"] maps a path to a zero-argument callable returning the
    response to serve instead of the canned one.
    """
    app = web.Application()
    app["requests"] = []
    app["overrides"] = {}
    routes = web.RouteTableDef()

    @web.middleware
    async def record_and_authorize(request: web.Request, handler):
        request.app["requests"].append((request.path, dict(request.query)))
        override = request.app["overrides"].get(request.path)
        if override is not None:
            return override()
        if request.query.get("api_key") == BAD_KEY:
            return web.json_response(
                {"error": {"code": "API_KEY_INVALID", "message": "An invalid api_key was supplied."}},
                status=403,
            )
        return await handler(request)

    @routes.get("/planetary/apod")
    async def apod(request: web.Request) -> web.Response:
        q = request.query
        if q.get("date") == "2000-01-01":
            return web.json_response({"code": 404, "msg": "No data available for date: 2000-01-01"}, status=404)
        if "start_date" in q:
            return web.json_response([APOD_IMAGE, APOD_VIDEO])
        if "date" in q:
            return web.json_response({**APOD_IMAGE, "date": q["date"]})
        return web.json_response(APOD_IMAGE)

    @routes.get("/mars-photos/api/v1/rovers/{rover}/photos")
    async def photos(request: web.Request) -> web.Response:
        camera = request.query.get("camera")
        if camera and camera.upper() != ROVER_PHOTO["camera"]["name"]:
            return web.json_response({"photos": []})
        return web.json_response({"photos": [ROVER_PHOTO]})

    @routes.get("/mars-photos/api/v1/rovers/{rover}/latest_photos")
    async def latest(request: web.Request) -> web.Response:
        return web.json_response({"latest_photos": [ROVER_PHOTO, {**ROVER_PHOTO, "id": 102694}]})

    @routes.get("/mars-photos/api/v1/manifests/{rover}")
    async def manifest(request: web.Request) -> web.Response:
        return web.json_response(MANIFEST)

    @routes.get("/neo/rest/v1/feed")
    async def feed(request: web.Request) -> web.Response:
        return web.json_response(NEO_FEED)

    @routes.get("/neo/rest/v1/lookup/{asteroid_id}")
    async def lookup(request: web.Request) -> web.Response:
        if request.match_info["asteroid_id"] != NEO_LOOKUP["id"]:
            return web.Response(status=404, text="Not Found")
        return web.json_response(NEO_LOOKUP)

    @routes.get("/neo/rest/v1/browse")
    async def browse(request: web.Request) -> web.Response:
        return web.json_response(NEO_BROWSE)

    app.middlewares.append(record_and_authorize)
    app.router.add_routes(routes)
    return app


@pytest.fixture
async def fake_nasa(aiohttp_server):
    """Running fake upstream; its app["requests"] lists (path, query) pairs."""
    return await aiohttp_server(make_fake_nasa_app())


@pytest.fixture
async def nasa_client(fake_nasa):
    client = NasaClient(api_key="TEST_KEY", base_url=f"http://{fake_nasa.host}:{fake_nasa.port}")
    await client.start()
    yield client
    await client.stop()


@pytest.fixture
def apod_service(nasa_client):
    return ApodService(nasa_client)


@pytest.fixture
def mars_rover_service(nasa_client):
    return MarsRoverService(nasa_client)


@pytest.fixture
def neo_service(nasa_client):
    return NeoService(nasa_client)


# =========================================================================
# App under test with mocked services
# =========================================================================


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def live_client(aiohttp_client, config, apod_service, mars_rover_service, neo_service):
    """App client whose services talk to the fake NASA upstream."""
    server = WebServer(
        config=config,
        apod_service=apod_service,
        mars_rover_service=mars_rover_service,
        neo_service=neo_service,
    )
    return aiohttp_client(server.app)


@pytest.fixture
def mock_services():
    """AsyncMock stand-ins keyed by their app slot name."""
    return {
        "apod_service": AsyncMock(spec=ApodService),
        "mars_rover_service": AsyncMock(spec=MarsRoverService),
        "neo_service": AsyncMock(spec=NeoService),
    }


@pytest.fixture
def web_app(config, mock_services):
    """Full application (middleware, routes, templates) over mocked services."""
    return WebServer(config=config, **mock_services).app


@pytest.fixture
def client(aiohttp_client, web_app):
    """aiohttp test client wired to the application."""
    return aiohttp_client(web_app)
