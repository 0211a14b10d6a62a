"""
NASA Data Explorer Web Server

aiohttp application serving the JSON proxy API under /api and the
server-rendered pages. Runs on port 5000 by default.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import aiohttp_jinja2
import jinja2
from aiohttp import web

from explorer.web.middleware import (
    RateLimiter,
    compression_middleware,
    cors_headers,
    cors_middleware,
    error_middleware,
    rate_limit_middleware,
    security_headers,
)

if TYPE_CHECKING:
    from explorer.config import Config
    from explorer.services import ApodService, MarsRoverService, NeoService

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
STATIC_DIR = Path(__file__).parent / "static"


class WebServer:
    """Proxy API + pages for NASA's public datasets."""

    def __init__(
        self,
        config: "Config",
        apod_service: "ApodService",
        mars_rover_service: "MarsRoverService",
        neo_service: "NeoService",
        app_name: str = "NASA Data Explorer",
    ):
        self.config = config
        self.host = config.server.host
        self.port = config.server.port
        self.rate_limiter = RateLimiter(
            max_requests=config.rate_limit.max_requests,
            window_seconds=config.rate_limit.window_seconds,
        )
        self.app = web.Application(middlewares=[
            error_middleware(debug=config.is_development),
            cors_middleware(config.server.cors_origins),
            rate_limit_middleware(self.rate_limiter),
            compression_middleware,
        ])
        self._runner: web.AppRunner | None = None

        # Store references in app for route handlers
        self.app["config"] = config
        self.app["apod_service"] = apod_service
        self.app["mars_rover_service"] = mars_rover_service
        self.app["neo_service"] = neo_service

        self.app.on_response_prepare.append(security_headers)
        self.app.on_response_prepare.append(cors_headers(config.server.cors_origins))

        env = aiohttp_jinja2.setup(
            self.app,
            loader=jinja2.FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=jinja2.select_autoescape(["html"]),
        )
        env.globals["app_name"] = app_name

        self._setup_routes()

    def _setup_routes(self) -> None:
        """Register all route handlers."""
        from explorer.web.routes.apod import routes as apod_routes
        from explorer.web.routes.mars_rover import routes as mars_rover_routes
        from explorer.web.routes.neo import routes as neo_routes
        from explorer.web.routes.status import routes as status_routes
        from explorer.web.routes.pages import routes as page_routes

        self.app.router.add_routes(status_routes)
        self.app.router.add_routes(apod_routes)
        self.app.router.add_routes(mars_rover_routes)
        self.app.router.add_routes(neo_routes)
        self.app.router.add_routes(page_routes)

        # Static files
        self.app.router.add_static("/static", STATIC_DIR, name="static")

    async def start(self) -> None:
        """Start the web server."""
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(f"Web server started at http://{self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop the web server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Web server stopped")
