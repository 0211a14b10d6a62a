"""
Mars Rover Photos Service

Photo queries, latest photos and mission manifests for the four rovers,
with camera codes expanded to full names.
"""

import asyncio
import logging
import math
from typing import Any

from explorer.dates import format_display_date, parse_date, year_of
from explorer.services.nasa_client import NasaAPIError, NasaClient, object_list

logger = logging.getLogger(__name__)

ROVERS = ("curiosity", "opportunity", "spirit", "perseverance")

CAMERA_NAMES = {
    "FHAZ": "Front Hazard Avoidance Camera",
    "RHAZ": "Rear Hazard Avoidance Camera",
    "MAST": "Mast Camera",
    "CHEMCAM": "Chemistry and Camera Complex",
    "MAHLI": "Mars Hand Lens Imager",
    "MARDI": "Mars Descent Imager",
    "NAVCAM": "Navigation Camera",
    "PANCAM": "Panoramic Camera",
    "MINITES": "Miniature Thermal Emission Spectrometer (Mini-TES)",
    "ENTRY": "Entry, Descent, and Landing Camera",
    "EDL_RUCAM": "Rover Up-Look Camera",
    "EDL_DDCAM": "Descent Stage Down-Look Camera",
    "EDL_PUCAM1": "Parachute Up-Look Camera A",
    "EDL_PUCAM2": "Parachute Up-Look Camera B",
    "NAVCAM_LEFT": "Navigation Camera - Left",
    "NAVCAM_RIGHT": "Navigation Camera - Right",
    "MCZ_RIGHT": "Mast Camera Zoom - Right",
    "MCZ_LEFT": "Mast Camera Zoom - Left",
    "FRONT_HAZCAM_LEFT_A": "Front Hazard Avoidance Camera - Left A",
    "FRONT_HAZCAM_RIGHT_A": "Front Hazard Avoidance Camera - Right A",
    "REAR_HAZCAM_LEFT": "Rear Hazard Avoidance Camera - Left",
    "REAR_HAZCAM_RIGHT": "Rear Hazard Avoidance Camera - Right",
    "SKYCAM": "MEDA Skycam",
    "SHERLOC_WATSON": "SHERLOC WATSON Camera",
    "SUPERCAM_RMI": "SuperCam Remote Micro Imager",
    "LCAM": "Lander Vision System Camera",
}


def camera_full_name(code: str | None) -> str | None:
    """Expand a camera code; unknown codes are returned unchanged."""
    if code is None:
        return None
    return CAMERA_NAMES.get(code.upper(), code)


def mission_duration_days(landing_date: str | None, max_date: str | None) -> int | None:
    landing, last = parse_date(landing_date), parse_date(max_date)
    if landing is None or last is None:
        return None
    return abs((last - landing).days)


def transform_photo(photo: dict[str, Any]) -> dict[str, Any]:
    camera = photo.get("camera") or {}
    rover = photo.get("rover") or {}
    return {
        "id": photo.get("id"),
        "sol": photo.get("sol"),
        "camera": {
            "id": camera.get("id"),
            "name": camera.get("name"),
            "rover_id": camera.get("rover_id"),
            "full_name": camera.get("full_name") or camera_full_name(camera.get("name")),
        },
        "img_src": photo.get("img_src"),
        "earth_date": photo.get("earth_date"),
        "rover": {
            "id": rover.get("id"),
            "name": rover.get("name"),
            "landing_date": rover.get("landing_date"),
            "launch_date": rover.get("launch_date"),
            "status": rover.get("status"),
        },
        "formatted_date": format_display_date(photo.get("earth_date")),
        "year": year_of(photo.get("earth_date")),
        # Upstream exposes no dimensions; kept so clients can rely on the key
        "image_metadata": {"width": None, "height": None, "size": None},
    }


def summarize_cameras(sol_entries: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Distinct cameras across a manifest's per-sol entries, first-seen order."""
    cameras: dict[str, dict[str, Any]] = {}
    for entry in sol_entries:
        for code in entry.get("cameras") or []:
            cam = cameras.get(code)
            if cam is None:
                cameras[code] = {
                    "name": code,
                    "full_name": camera_full_name(code),
                    "first_sol": entry.get("sol"),
                    "first_earth_date": entry.get("earth_date"),
                    "last_sol": entry.get("sol"),
                    "last_earth_date": entry.get("earth_date"),
                    "sols_active": 1,
                }
                continue
            cam["sols_active"] += 1
            if entry.get("sol") is not None and (cam["last_sol"] is None or entry["sol"] > cam["last_sol"]):
                cam["last_sol"] = entry["sol"]
                cam["last_earth_date"] = entry.get("earth_date")
    return list(cameras.values())


def transform_manifest(manifest: dict[str, Any]) -> dict[str, Any]:
    total_photos = manifest.get("total_photos") or 0
    max_sol = manifest.get("max_sol") or 0
    return {
        "name": manifest.get("name"),
        "landing_date": manifest.get("landing_date"),
        "launch_date": manifest.get("launch_date"),
        "status": manifest.get("status"),
        "max_sol": manifest.get("max_sol"),
        "max_date": manifest.get("max_date"),
        "total_photos": manifest.get("total_photos"),
        "cameras": summarize_cameras(manifest.get("photos") or []),
        "mission_duration": mission_duration_days(manifest.get("landing_date"), manifest.get("max_date")),
        # Halves round up, not to even
        "average_photos_per_sol": math.floor(total_photos / max_sol + 0.5) if max_sol else 0,
    }


class MarsRoverService:
    """Queries against the mars-photos API."""

    def __init__(self, client: NasaClient):
        self.client = client

    async def get_photos(
        self,
        rover: str,
        sol: int | None = None,
        earth_date: str | None = None,
        camera: str | None = None,
        page: int = 1,
    ) -> dict[str, Any]:
        """Photos for one sol or Earth date, optionally for a single camera.

        sol takes precedence when both are given.
        """
        params: dict[str, str | int] = {"page": page}
        if sol is not None:
            params["sol"] = sol
        elif earth_date:
            params["earth_date"] = earth_date
        if camera:
            params["camera"] = camera

        try:
            data = await self.client.get_object(
                f"/mars-photos/api/v1/rovers/{rover}/photos", params, long=True,
            )
            raw_photos = object_list(data, "photos")
        except NasaAPIError as e:
            raise e.with_context("Failed to fetch Mars rover photos") from e

        photos = [transform_photo(p) for p in raw_photos]
        return {
            "photos": photos,
            "total_photos": len(photos),
            "rover": rover,
            "filters": {"sol": sol, "earth_date": earth_date, "camera": camera, "page": page},
        }

    async def get_manifest(self, rover: str) -> dict[str, Any]:
        """Mission manifest (dates, status, photo totals, cameras)."""
        try:
            data = await self.client.get_object(f"/mars-photos/api/v1/manifests/{rover}")
            manifest = data.get("photo_manifest") or {}
            if not isinstance(manifest, dict):
                raise NasaAPIError("Unexpected 'photo_manifest' format from NASA API", status=200)
            object_list(manifest, "photos")
        except NasaAPIError as e:
            raise e.with_context("Failed to fetch rover manifest") from e
        return transform_manifest(manifest)

    async def get_cameras(self, rover: str) -> list[dict[str, Any]]:
        manifest = await self.get_manifest(rover)
        return manifest["cameras"]

    async def get_latest(self, rover: str) -> dict[str, Any]:
        """Photos from the rover's most recent sol with imagery."""
        try:
            data = await self.client.get_object(
                f"/mars-photos/api/v1/rovers/{rover}/latest_photos", long=True,
            )
            raw_photos = object_list(data, "latest_photos")
        except NasaAPIError as e:
            raise e.with_context("Failed to fetch latest rover photos") from e

        photos = [transform_photo(p) for p in raw_photos]
        return {"photos": photos, "total_photos": len(photos), "rover": rover}

    async def get_stats(self, rover: str) -> dict[str, Any]:
        manifest, latest = await asyncio.gather(
            self.get_manifest(rover),
            self.get_latest(rover),
        )
        return {
            "rover": rover,
            "manifest": manifest,
            "latest_photos_count": latest["total_photos"],
            "mission_duration_days": manifest["mission_duration"],
            "average_photos_per_sol": manifest["average_photos_per_sol"],
            "cameras": manifest["cameras"],
            "status": manifest["status"],
        }

    async def search_by_camera(
        self,
        rover: str,
        query: str,
        sol: int | None = None,
        earth_date: str | None = None,
    ) -> list[dict[str, Any]]:
        """Photos from every camera whose code or full name contains query."""
        term = query.lower()
        cameras = await self.get_cameras(rover)
        matching = [
            c for c in cameras
            if term in c["name"].lower() or term in (c["full_name"] or "").lower()
        ]
        logger.info(f"Camera search '{query}' on {rover}: {len(matching)} camera(s) match")

        results = await asyncio.gather(*(
            self.get_photos(rover, sol=sol, earth_date=earth_date, camera=c["name"].lower())
            for c in matching
        ))
        return [
            {"camera": camera, "photos": result["photos"]}
            for camera, result in zip(matching, results)
        ]
