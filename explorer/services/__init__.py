"""NASA Data Explorer Services Package."""

from explorer.services.nasa_client import NasaAPIError, NasaClient
from explorer.services.apod_service import ApodService
from explorer.services.mars_rover_service import MarsRoverService
from explorer.services.neo_service import NeoService

__all__ = ["NasaAPIError", "NasaClient", "ApodService", "MarsRoverService", "NeoService"]
