"""Tests for NasaClient and the services over a fake NASA upstream."""

import pytest
from aiohttp import web

from explorer.services import NasaAPIError, NasaClient
from explorer.services.nasa_client import extract_error_message
from tests.conftest import BAD_KEY


def _last_query(fake_nasa) -> tuple[str, dict]:
    return fake_nasa.app["requests"][-1]


# =========================================================================
# NasaClient
# =========================================================================


async def test_api_key_added_to_every_request(nasa_client, fake_nasa):
    await nasa_client.get_json("/planetary/apod", {"hd": "true"})
    path, query = _last_query(fake_nasa)
    assert path == "/planetary/apod"
    assert query == {"api_key": "TEST_KEY", "hd": "true"}


async def test_none_params_are_dropped(nasa_client, fake_nasa):
    await nasa_client.get_json("/neo/rest/v1/browse", {"page": 0, "size": None})
    _, query = _last_query(fake_nasa)
    assert query == {"api_key": "TEST_KEY", "page": "0"}


async def test_gateway_error_message_surfaces(fake_nasa):
    client = NasaClient(api_key=BAD_KEY, base_url=f"http://{fake_nasa.host}:{fake_nasa.port}")
    try:
        with pytest.raises(NasaAPIError) as exc_info:
            await client.get_json("/planetary/apod")
    finally:
        await client.stop()
    assert exc_info.value.status == 403
    assert str(exc_info.value) == "An invalid api_key was supplied."


async def test_plain_text_error_body_used_as_message(nasa_client):
    with pytest.raises(NasaAPIError) as exc_info:
        await nasa_client.get_json("/neo/rest/v1/lookup/999")
    assert exc_info.value.status == 404
    assert str(exc_info.value) == "Not Found"


async def test_connection_failure_becomes_nasa_api_error():
    # Port 9 (discard) on localhost is not expected to be listening
    client = NasaClient(base_url="http://127.0.0.1:9", timeout=2.0)
    try:
        with pytest.raises(NasaAPIError, match="connection error"):
            await client.get_json("/planetary/apod")
    finally:
        await client.stop()


def test_extract_error_message_variants():
    assert extract_error_message({"error_message": "a"}, "x") == "a"
    assert extract_error_message({"code": 400, "msg": "b"}, "x") == "b"
    assert extract_error_message({"error": {"message": "c"}}, "x") == "c"
    assert extract_error_message({"error": "d"}, "x") == "d"
    assert extract_error_message(None, "fallback") == "fallback"


def test_with_context_prefixes_message_and_keeps_status():
    err = NasaAPIError("boom", status=502).with_context("Failed to fetch APOD")
    assert str(err) == "Failed to fetch APOD: boom"
    assert err.status == 502


# =========================================================================
# ApodService
# =========================================================================


async def test_apod_today_requests_hd(apod_service, fake_nasa):
    apod = await apod_service.get_today()
    assert apod["title"] == "The Cosmic Cliffs"
    _, query = _last_query(fake_nasa)
    assert query["hd"] == "true"
    assert "date" not in query


async def test_apod_by_date_forwards_date(apod_service, fake_nasa):
    apod = await apod_service.get_by_date("2023-07-04")
    assert apod["date"] == "2023-07-04"
    assert apod["formatted_date"] == "Tuesday, July 4, 2023"
    _, query = _last_query(fake_nasa)
    assert query["date"] == "2023-07-04"


async def test_apod_by_date_upstream_error_has_context(apod_service):
    with pytest.raises(NasaAPIError) as exc_info:
        await apod_service.get_by_date("2000-01-01")
    assert str(exc_info.value) == (
        "Failed to fetch APOD for date 2000-01-01: No data available for date: 2000-01-01"
    )
    assert exc_info.value.status == 404


async def test_apod_range_and_stats(apod_service, fake_nasa):
    apods = await apod_service.get_range("2024-01-01", "2024-01-02")
    assert [a["media_type"] for a in apods] == ["image", "video"]
    _, query = _last_query(fake_nasa)
    assert query["start_date"] == "2024-01-01"
    assert query["end_date"] == "2024-01-02"

    stats = await apod_service.get_stats("2024-01-01", "2024-01-02")
    assert stats["total_count"] == 2
    assert stats["image_count"] == 1
    assert stats["video_count"] == 1
    assert stats["years"] == [2024]
    assert stats["copyright_holders"] == ["Jane Doe"]


async def test_apod_search_matches_title_or_explanation(apod_service):
    assert [a["title"] for a in await apod_service.search("CARINA", "2024-01-01", "2024-01-02")] == ["The Cosmic Cliffs"]
    assert [a["title"] for a in await apod_service.search("eclipse", "2024-01-01", "2024-01-02")] == ["Eclipse Timelapse"]
    assert await apod_service.search("quasar", "2024-01-01", "2024-01-02") == []


async def test_apod_random_comes_from_range(apod_service):
    apod = await apod_service.get_random("2024-01-01", "2024-01-02")
    assert apod["date"] in ("2024-01-01", "2024-01-02")


# =========================================================================
# MarsRoverService
# =========================================================================


async def test_photos_by_sol_with_camera(mars_rover_service, fake_nasa):
    result = await mars_rover_service.get_photos("curiosity", sol=1000, camera="fhaz", page=2)
    path, query = _last_query(fake_nasa)
    assert path == "/mars-photos/api/v1/rovers/curiosity/photos"
    assert query == {"api_key": "TEST_KEY", "sol": "1000", "camera": "fhaz", "page": "2"}
    assert result["total_photos"] == 1
    assert result["photos"][0]["camera"]["name"] == "FHAZ"
    assert result["filters"] == {"sol": 1000, "earth_date": None, "camera": "fhaz", "page": 2}


async def test_sol_zero_is_sent_upstream(mars_rover_service, fake_nasa):
    await mars_rover_service.get_photos("spirit", sol=0)
    _, query = _last_query(fake_nasa)
    assert query["sol"] == "0"
    assert "earth_date" not in query


async def test_photos_by_earth_date(mars_rover_service, fake_nasa):
    await mars_rover_service.get_photos("opportunity", earth_date="2010-03-21")
    _, query = _last_query(fake_nasa)
    assert query["earth_date"] == "2010-03-21"
    assert "sol" not in query


async def test_manifest_cameras_latest_and_stats(mars_rover_service):
    cameras = await mars_rover_service.get_cameras("curiosity")
    assert [c["name"] for c in cameras] == ["FHAZ", "MARDI", "MAST", "NAVCAM"]

    latest = await mars_rover_service.get_latest("curiosity")
    assert latest["total_photos"] == 2
    assert latest["rover"] == "curiosity"

    stats = await mars_rover_service.get_stats("curiosity")
    assert stats["latest_photos_count"] == 2
    assert stats["mission_duration_days"] == 102
    assert stats["status"] == "active"


async def test_search_by_camera_queries_each_match(mars_rover_service, fake_nasa):
    results = await mars_rover_service.search_by_camera("curiosity", "hazard", sol=1000)
    assert [r["camera"]["name"] for r in results] == ["FHAZ"]
    assert len(results[0]["photos"]) == 1

    # "Mars Descent Imager" has no "camera" in its name
    results = await mars_rover_service.search_by_camera("curiosity", "camera", sol=1000)
    assert [r["camera"]["name"] for r in results] == ["FHAZ", "MAST", "NAVCAM"]
    # Only FHAZ has photos in the fake upstream
    assert [len(r["photos"]) for r in results] == [1, 0, 0]


# =========================================================================
# NeoService
# =========================================================================


async def test_neos_paginated_locally(neo_service):
    page1 = await neo_service.get_neos("2024-01-01", "2024-01-02", page=1, size=2)
    assert [n["id"] for n in page1["neos"]] == ["1", "2"]
    assert page1["total_count"] == 3
    assert (page1["page"], page1["size"]) == (1, 2)

    page2 = await neo_service.get_neos("2024-01-01", "2024-01-02", page=2, size=2)
    assert [n["id"] for n in page2["neos"]] == ["3"]


async def test_feed_detailed_flag_forwarded(neo_service, fake_nasa):
    await neo_service.get_feed("2024-01-01", "2024-01-02", detailed=True)
    _, query = _last_query(fake_nasa)
    assert query["detailed"] == "true"

    await neo_service.get_feed("2024-01-01", "2024-01-02")
    _, query = _last_query(fake_nasa)
    assert "detailed" not in query


async def test_lookup_and_browse(neo_service, fake_nasa):
    asteroid = await neo_service.lookup("3542519")
    assert asteroid["name"] == "(2010 PK9)"

    browse = await neo_service.browse(page=0, size=20)
    assert browse["total_count"] == 2
    path, query = _last_query(fake_nasa)
    assert path == "/neo/rest/v1/browse"
    assert (query["page"], query["size"]) == ("0", "20")


async def test_lookup_unknown_id_raises_with_context(neo_service):
    with pytest.raises(NasaAPIError, match="^Failed to fetch asteroid details: "):
        await neo_service.lookup("1")


async def test_stats_counts(neo_service):
    stats = await neo_service.get_stats("2024-01-01", "2024-01-02")
    assert stats["total_count"] == 3
    assert stats["hazardous_count"] == 1
    assert stats["non_hazardous_count"] == 2
    assert stats["risk_levels"] == {"high": 1, "medium": 1, "low": 0, "very_low": 1, "unknown": 0}
    assert stats["size_categories"] == {"large": 1, "medium": 1, "small": 0, "very_small": 1}


async def test_search_and_risk_filter(neo_service):
    matches = await neo_service.search_by_name("bb", "2024-01-01", "2024-01-02")
    assert [n["id"] for n in matches] == ["2"]

    high = await neo_service.get_by_risk_level("High", "2024-01-01", "2024-01-02")
    assert [n["id"] for n in high] == ["1"]


# =========================================================================
# Malformed upstream bodies
# =========================================================================


def _serve(fake_nasa, path, factory):
    fake_nasa.app["overrides"][path] = factory


async def test_non_json_success_body_is_nasa_api_error(nasa_client, fake_nasa):
    _serve(fake_nasa, "/planetary/apod", lambda: web.Response(text="<html>Bad Gateway</html>", content_type="text/html"))
    with pytest.raises(NasaAPIError) as exc_info:
        await nasa_client.get_json("/planetary/apod")
    assert str(exc_info.value) == "Invalid JSON from NASA API"
    assert exc_info.value.status == 200


async def test_get_object_rejects_non_object_body(nasa_client, fake_nasa):
    _serve(fake_nasa, "/planetary/apod", lambda: web.json_response([1, 2]))
    with pytest.raises(NasaAPIError, match="Unexpected response format"):
        await nasa_client.get_object("/planetary/apod")


async def test_apod_today_non_json_has_context(apod_service, fake_nasa):
    _serve(fake_nasa, "/planetary/apod", lambda: web.Response(text="oops", content_type="text/plain"))
    with pytest.raises(NasaAPIError, match="^Failed to fetch APOD: Invalid JSON from NASA API$"):
        await apod_service.get_today()


async def test_apod_range_rejects_scalar_body(apod_service, fake_nasa):
    _serve(fake_nasa, "/planetary/apod", lambda: web.json_response("nope"))
    with pytest.raises(NasaAPIError, match="^Failed to fetch APOD range: "):
        await apod_service.get_range("2024-01-01", "2024-01-02")


@pytest.mark.parametrize("body", [[1, 2], {"latest_photos": [1, 2]}, {"latest_photos": "none"}])
async def test_latest_photos_wrong_shape(mars_rover_service, fake_nasa, body):
    _serve(fake_nasa, "/mars-photos/api/v1/rovers/curiosity/latest_photos", lambda: web.json_response(body))
    with pytest.raises(NasaAPIError, match="^Failed to fetch latest rover photos: "):
        await mars_rover_service.get_latest("curiosity")


async def test_manifest_wrong_shape(mars_rover_service, fake_nasa):
    _serve(fake_nasa, "/mars-photos/api/v1/manifests/curiosity", lambda: web.json_response({"photo_manifest": []}))
    with pytest.raises(NasaAPIError, match="^Failed to fetch rover manifest: "):
        await mars_rover_service.get_manifest("curiosity")


async def test_photos_wrong_shape(mars_rover_service, fake_nasa):
    _serve(fake_nasa, "/mars-photos/api/v1/rovers/curiosity/photos", lambda: web.json_response({"photos": [None]}))
    with pytest.raises(NasaAPIError, match="^Failed to fetch Mars rover photos: "):
        await mars_rover_service.get_photos("curiosity", sol=1)


async def test_feed_wrong_shape(neo_service, fake_nasa):
    _serve(fake_nasa, "/neo/rest/v1/feed", lambda: web.json_response({"near_earth_objects": ["a"]}))
    with pytest.raises(NasaAPIError, match="^Failed to fetch NEO feed: "):
        await neo_service.get_feed("2024-01-01", "2024-01-02")


async def test_browse_wrong_shape(neo_service, fake_nasa):
    _serve(fake_nasa, "/neo/rest/v1/browse", lambda: web.json_response({"near_earth_objects": {"a": 1}}))
    with pytest.raises(NasaAPIError, match="^Failed to browse NEOs: "):
        await neo_service.browse()
