"""JSON envelopes shared by the API routes."""

import json
from datetime import datetime, timezone
from typing import Any

from aiohttp import web


def timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def ok(data: Any, **extra: Any) -> web.Response:
    """{"success": true, "data": ..., <extra>, "timestamp": ...}"""
    return web.json_response({"success": True, "data": data, **extra, "timestamp": timestamp()})


def error_response(status: int, error: str, message: str) -> web.Response:
    return web.json_response(
        {"success": False, "error": error, "message": message},
        status=status,
    )


def bad_request(error: str, message: str) -> web.HTTPBadRequest:
    """HTTPBadRequest carrying the JSON error envelope; raise it from a handler."""
    return web.HTTPBadRequest(
        text=json.dumps({"success": False, "error": error, "message": message}),
        content_type="application/json",
    )
