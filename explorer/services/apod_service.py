"""
Astronomy Picture of the Day Service

Fetches APOD records (today, by date, by range) and reshapes them with
display fields. Random pick, text search and stats are built on the range
query since the upstream API has no such operations.
"""

import logging
import random
from typing import Any

from explorer.dates import format_display_date, year_of
from explorer.services.nasa_client import NasaAPIError, NasaClient

logger = logging.getLogger(__name__)

APOD_PATH = "/planetary/apod"


def transform_apod(data: dict[str, Any]) -> dict[str, Any]:
    """Reshape one upstream APOD record and add computed fields."""
    media_type = data.get("media_type")
    is_video = media_type == "video"
    return {
        "date": data.get("date"),
        "title": data.get("title"),
        "explanation": data.get("explanation"),
        "url": data.get("url"),
        "hdurl": data.get("hdurl"),
        "media_type": media_type,
        "service_version": data.get("service_version"),
        "copyright": data.get("copyright"),
        "is_video": is_video,
        "is_image": not is_video,
        "formatted_date": format_display_date(data.get("date")),
        "year": year_of(data.get("date")),
    }


class ApodService:
    """APOD queries against the NASA planetary/apod endpoint."""

    def __init__(self, client: NasaClient):
        self.client = client

    async def get_today(self) -> dict[str, Any]:
        """Today's picture."""
        try:
            data = await self.client.get_object(APOD_PATH, {"hd": "true"})
        except NasaAPIError as e:
            raise e.with_context("Failed to fetch APOD") from e
        return transform_apod(data)

    async def get_by_date(self, date: str) -> dict[str, Any]:
        """Picture for a specific YYYY-MM-DD date."""
        try:
            data = await self.client.get_object(APOD_PATH, {"date": date, "hd": "true"})
        except NasaAPIError as e:
            raise e.with_context(f"Failed to fetch APOD for date {date}") from e
        return transform_apod(data)

    async def get_range(self, start_date: str, end_date: str) -> list[dict[str, Any]]:
        """All pictures between two dates, inclusive."""
        try:
            data = await self.client.get_json(
                APOD_PATH,
                {"start_date": start_date, "end_date": end_date, "hd": "true"},
                long=True,
            )
            # A single-day range comes back as an object rather than a list
            if isinstance(data, dict):
                data = [data]
            if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
                raise NasaAPIError("Unexpected response format from NASA API", status=200)
        except NasaAPIError as e:
            raise e.with_context("Failed to fetch APOD range") from e
        return [transform_apod(item) for item in data]

    async def get_random(self, start_date: str, end_date: str) -> dict[str, Any]:
        """One picture chosen at random from a date range."""
        apods = await self.get_range(start_date, end_date)
        if not apods:
            raise NasaAPIError("No APOD data found for the specified date range", status=404)
        return random.choice(apods)

    async def search(self, query: str, start_date: str, end_date: str) -> list[dict[str, Any]]:
        """Case-insensitive match on title or explanation within a range."""
        term = query.lower()
        apods = await self.get_range(start_date, end_date)
        return [
            a for a in apods
            if term in (a["title"] or "").lower() or term in (a["explanation"] or "").lower()
        ]

    async def get_stats(self, start_date: str, end_date: str) -> dict[str, Any]:
        """Counts by media type, years covered and copyright holders."""
        apods = await self.get_range(start_date, end_date)

        copyright_holders: list[str] = []
        for a in apods:
            holder = (a["copyright"] or "").strip()
            if holder and holder not in copyright_holders:
                copyright_holders.append(holder)

        return {
            "total_count": len(apods),
            "image_count": sum(1 for a in apods if a["is_image"]),
            "video_count": sum(1 for a in apods if a["is_video"]),
            "years": sorted({a["year"] for a in apods if a["year"] is not None}),
            "copyright_holders": copyright_holders,
            "date_range": {"start": start_date, "end": end_date},
        }
