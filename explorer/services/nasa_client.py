"""
NASA API Client

Shared aiohttp session for all upstream NASA calls. Adds the API key to
every request and turns non-200 responses, timeouts and connection errors
into NasaAPIError carrying the upstream message. A 200 whose body is not
JSON, or not the expected shape, is a NasaAPIError too.
"""

import asyncio
import logging
from typing import Any

import aiohttp

logger = logging.getLogger(__name__)


class NasaAPIError(RuntimeError):
    """Upstream NASA request failed."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status

    def with_context(self, context: str) -> "NasaAPIError":
        """Return a copy whose message is prefixed with what was being fetched."""
        return NasaAPIError(f"{context}: {self}", status=self.status)


def extract_error_message(payload: Any, fallback: str) -> str:
    """Pull the human-readable message out of one of NASA's error bodies.

    APOD answers {"code": 400, "msg": ...}, api.nasa.gov's gateway answers
    {"error": {"code": ..., "message": ...}}, older endpoints use
    "error_message".
    """
    if isinstance(payload, dict):
        if payload.get("error_message"):
            return str(payload["error_message"])
        if payload.get("msg"):
            return str(payload["msg"])
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return fallback


class NasaClient:
    """Thin async client for api.nasa.gov."""

    def __init__(
        self,
        api_key: str = "DEMO_KEY",
        base_url: str = "https://api.nasa.gov",
        timeout: float = 10.0,
        long_timeout: float = 15.0,
    ):
        """
        Initialize the client.

        Args:
            api_key: NASA API key (DEMO_KEY works with low rate limits)
            base_url: Upstream root, without trailing slash
            timeout: Total timeout for single-record requests (seconds)
            long_timeout: Total timeout for ranges, feeds and photo lists
        """
        self.api_key = api_key or "DEMO_KEY"
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.long_timeout = long_timeout
        self._session: aiohttp.ClientSession | None = None

    async def start(self) -> None:
        """Initialize the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                headers={"Accept": "application/json"},
            )
            logger.info(f"NASA client started (base_url: {self.base_url})")

    async def stop(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
            logger.info("NASA client stopped")

    async def get_json(
        self,
        path: str,
        params: dict[str, str | int] | None = None,
        long: bool = False,
    ) -> Any:
        """
        GET a NASA endpoint and return the decoded JSON body.

        Args:
            path: Path below base_url, e.g. "/planetary/apod"
            params: Query parameters (api_key is added automatically)
            long: Use long_timeout instead of timeout

        Raises:
            NasaAPIError: On non-200 status, timeout or connection failure
        """
        if self._session is None:
            await self.start()

        url = f"{self.base_url}{path}"
        query = {"api_key": self.api_key}
        if params:
            query.update({k: v for k, v in params.items() if v is not None})
        timeout = aiohttp.ClientTimeout(total=self.long_timeout if long else self.timeout)

        logger.debug(f"GET {url} ({', '.join(k for k in query if k != 'api_key') or 'no params'})")
        try:
            async with self._session.get(url, params=query, timeout=timeout) as response:
                if response.status != 200:
                    text = await response.text()
                    try:
                        payload = await response.json(content_type=None)
                    except ValueError:
                        payload = None
                    fallback = text.strip()[:200] or f"HTTP {response.status} {response.reason}"
                    message = extract_error_message(payload, fallback)
                    logger.error(f"NASA API error ({response.status}) for {path}: {message}")
                    raise NasaAPIError(message, status=response.status)

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    logger.error(f"NASA API returned a non-JSON body for {path}")
                    raise NasaAPIError("Invalid JSON from NASA API", status=response.status) from e

        except asyncio.TimeoutError as e:
            logger.error(f"NASA API timeout for {path}")
            raise NasaAPIError(f"Request to {path} timed out") from e
        except aiohttp.ClientError as e:
            logger.error(f"NASA API connection error for {path}: {e}")
            raise NasaAPIError(f"NASA API connection error: {e}") from e

    async def get_object(
        self,
        path: str,
        params: dict[str, str | int] | None = None,
        long: bool = False,
    ) -> dict[str, Any]:
        """get_json for endpoints whose body must be a JSON object."""
        data = await self.get_json(path, params, long=long)
        if not isinstance(data, dict):
            logger.error(f"NASA API returned {type(data).__name__} instead of an object for {path}")
            raise NasaAPIError("Unexpected response format from NASA API", status=200)
        return data


def object_list(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    """data[key] as a list of objects, or NasaAPIError if it is anything else."""
    items = data.get(key) or []
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise NasaAPIError(f"Unexpected '{key}' format from NASA API", status=200)
    return items
