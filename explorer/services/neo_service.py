"""
Near-Earth Object Service

Feed, lookup and browse queries against NeoWs, with a risk-level label and
size category computed for every object.
"""

import logging
from typing import Any

from explorer.dates import format_display_date, year_of
from explorer.services.nasa_client import NasaAPIError, NasaClient, object_list

logger = logging.getLogger(__name__)

RISK_LEVELS = ("High", "Medium", "Low", "Very Low", "Unknown")
SIZE_CATEGORIES = ("Large (>1km)", "Medium (100m-1km)", "Small (10m-100m)", "Very Small (<10m)")


def max_diameter_km(neo: dict[str, Any]) -> float:
    km = (neo.get("estimated_diameter") or {}).get("kilometers") or {}
    return float(km.get("estimated_diameter_max") or 0.0)


def calculate_risk_level(neo: dict[str, Any]) -> str:
    """Label from the first close approach's miss distance and the max diameter."""
    approaches = neo.get("close_approach_data") or []
    if not approaches:
        return "Unknown"

    try:
        miss_km = float(approaches[0]["miss_distance"]["kilometers"])
    except (KeyError, TypeError, ValueError):
        return "Unknown"
    diameter_km = max_diameter_km(neo)

    if miss_km < 1_000_000 and diameter_km > 1:
        return "High"
    if miss_km < 5_000_000 and diameter_km > 0.5:
        return "Medium"
    if miss_km < 10_000_000:
        return "Low"
    return "Very Low"


def size_category(diameter_km: float) -> str:
    if diameter_km >= 1:
        return "Large (>1km)"
    if diameter_km >= 0.1:
        return "Medium (100m-1km)"
    if diameter_km >= 0.01:
        return "Small (10m-100m)"
    return "Very Small (<10m)"


def _transform_approach(approach: dict[str, Any]) -> dict[str, Any]:
    velocity = approach.get("relative_velocity") or {}
    miss = approach.get("miss_distance") or {}
    return {
        "close_approach_date": approach.get("close_approach_date"),
        "close_approach_date_full": approach.get("close_approach_date_full"),
        "epoch_date_close_approach": approach.get("epoch_date_close_approach"),
        "relative_velocity": {
            "kilometers_per_second": velocity.get("kilometers_per_second"),
            "kilometers_per_hour": velocity.get("kilometers_per_hour"),
            "miles_per_hour": velocity.get("miles_per_hour"),
        },
        "miss_distance": {
            "astronomical": miss.get("astronomical"),
            "lunar": miss.get("lunar"),
            "kilometers": miss.get("kilometers"),
        },
        "orbiting_body": approach.get("orbiting_body"),
    }


def transform_neo(neo: dict[str, Any], feed_date: str) -> dict[str, Any]:
    """One object from a feed day, with display fields."""
    diameter = neo.get("estimated_diameter") or {}
    return {
        "id": neo.get("id"),
        "name": neo.get("name"),
        "nasa_jpl_url": neo.get("nasa_jpl_url"),
        "absolute_magnitude_h": neo.get("absolute_magnitude_h"),
        "estimated_diameter": {
            "kilometers": diameter.get("kilometers"),
            "meters": diameter.get("meters"),
            "miles": diameter.get("miles"),
            "feet": diameter.get("feet"),
        },
        "is_potentially_hazardous_asteroid": neo.get("is_potentially_hazardous_asteroid"),
        "close_approach_data": [_transform_approach(a) for a in neo.get("close_approach_data") or []],
        "date": feed_date,
        "formatted_date": format_display_date(feed_date),
        "year": year_of(feed_date),
        "risk_level": calculate_risk_level(neo),
        "size_category": size_category(max_diameter_km(neo)),
    }


def transform_feed(data: dict[str, Any]) -> dict[str, Any]:
    """Flatten the date-keyed feed into one list, in date order."""
    by_date = data.get("near_earth_objects") or {}
    neos = [
        transform_neo(neo, feed_date)
        for feed_date in sorted(by_date)
        for neo in by_date[feed_date]
    ]
    return {
        "neos": neos,
        "total_count": len(neos),
        "date_range": {"start": data.get("start_date"), "end": data.get("end_date")},
        "links": data.get("links"),
        "element_count": data.get("element_count"),
    }


def transform_asteroid(data: dict[str, Any]) -> dict[str, Any]:
    orbital = data.get("orbital_data") or {}
    return {
        "id": data.get("id"),
        "name": data.get("name"),
        "nasa_jpl_url": data.get("nasa_jpl_url"),
        "absolute_magnitude_h": data.get("absolute_magnitude_h"),
        "estimated_diameter": data.get("estimated_diameter"),
        "is_potentially_hazardous_asteroid": data.get("is_potentially_hazardous_asteroid"),
        "close_approach_data": data.get("close_approach_data"),
        "orbital_data": data.get("orbital_data"),
        "risk_level": calculate_risk_level(data),
        "size_category": size_category(max_diameter_km(data)),
        "discovery_date": orbital.get("first_observation_date"),
        "last_updated": orbital.get("last_observation_date"),
    }


def transform_browse(data: dict[str, Any]) -> dict[str, Any]:
    neos = [
        {
            "id": neo.get("id"),
            "name": neo.get("name"),
            "nasa_jpl_url": neo.get("nasa_jpl_url"),
            "absolute_magnitude_h": neo.get("absolute_magnitude_h"),
            "estimated_diameter": neo.get("estimated_diameter"),
            "is_potentially_hazardous_asteroid": neo.get("is_potentially_hazardous_asteroid"),
            "risk_level": calculate_risk_level(neo),
            "size_category": size_category(max_diameter_km(neo)),
        }
        for neo in data.get("near_earth_objects") or []
    ]
    return {
        "neos": neos,
        "total_count": len(neos),
        "page": data.get("page"),
        "links": data.get("links"),
    }


class NeoService:
    """Queries against the NeoWs feed, lookup and browse endpoints."""

    def __init__(self, client: NasaClient):
        self.client = client

    async def _feed(self, start_date: str, end_date: str, detailed: bool = False) -> dict[str, Any]:
        params = {"start_date": start_date, "end_date": end_date}
        if detailed:
            params["detailed"] = "true"
        data = await self.client.get_object("/neo/rest/v1/feed", params, long=True)
        by_date = data.get("near_earth_objects") or {}
        if not isinstance(by_date, dict):
            raise NasaAPIError("Unexpected 'near_earth_objects' format from NASA API", status=200)
        for feed_date in by_date:
            object_list(by_date, feed_date)
        return transform_feed(data)

    async def get_neos(self, start_date: str, end_date: str, page: int = 1, size: int = 20) -> dict[str, Any]:
        """One page (1-based) of the flattened feed for a date range."""
        try:
            feed = await self._feed(start_date, end_date)
        except NasaAPIError as e:
            raise e.with_context("Failed to fetch NEO data") from e

        offset = (page - 1) * size
        feed["neos"] = feed["neos"][offset:offset + size]
        feed["page"] = page
        feed["size"] = size
        return feed

    async def get_feed(self, start_date: str, end_date: str, detailed: bool = False) -> dict[str, Any]:
        """The whole feed for a date range, unpaginated."""
        try:
            return await self._feed(start_date, end_date, detailed=detailed)
        except NasaAPIError as e:
            raise e.with_context("Failed to fetch NEO feed") from e

    async def lookup(self, asteroid_id: str) -> dict[str, Any]:
        try:
            data = await self.client.get_object(f"/neo/rest/v1/lookup/{asteroid_id}")
        except NasaAPIError as e:
            raise e.with_context("Failed to fetch asteroid details") from e
        return transform_asteroid(data)

    async def browse(self, page: int = 0, size: int = 20) -> dict[str, Any]:
        """The whole NEO catalogue, paged upstream (0-based)."""
        try:
            data = await self.client.get_object("/neo/rest/v1/browse", {"page": page, "size": size}, long=True)
            object_list(data, "near_earth_objects")
        except NasaAPIError as e:
            raise e.with_context("Failed to browse NEOs") from e
        return transform_browse(data)

    async def get_stats(self, start_date: str, end_date: str) -> dict[str, Any]:
        feed = await self.get_feed(start_date, end_date)
        neos = feed["neos"]
        hazardous = sum(1 for n in neos if n["is_potentially_hazardous_asteroid"])
        risk_keys = {level: level.lower().replace(" ", "_") for level in RISK_LEVELS}
        size_keys = dict(zip(SIZE_CATEGORIES, ("large", "medium", "small", "very_small")))
        return {
            "total_count": feed["total_count"],
            "hazardous_count": hazardous,
            "non_hazardous_count": len(neos) - hazardous,
            "risk_levels": {
                key: sum(1 for n in neos if n["risk_level"] == level)
                for level, key in risk_keys.items()
            },
            "size_categories": {
                key: sum(1 for n in neos if n["size_category"] == category)
                for category, key in size_keys.items()
            },
            "date_range": feed["date_range"],
        }

    async def search_by_name(self, query: str, start_date: str, end_date: str) -> list[dict[str, Any]]:
        term = query.lower()
        feed = await self.get_feed(start_date, end_date)
        return [n for n in feed["neos"] if term in (n["name"] or "").lower()]

    async def get_by_risk_level(self, risk_level: str, start_date: str, end_date: str) -> list[dict[str, Any]]:
        feed = await self.get_feed(start_date, end_date)
        return [n for n in feed["neos"] if n["risk_level"] == risk_level]
