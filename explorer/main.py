#!/usr/bin/env python3
"""
NASA Data Explorer

Main entry point. Loads configuration, starts the NASA client and the web
server, and runs until SIGINT/SIGTERM.
"""

import asyncio
import logging
import signal

from explorer.config import Config
from explorer.services import ApodService, MarsRoverService, NasaClient, NeoService
from explorer.web.server import WebServer

logger = logging.getLogger("explorer")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


async def main() -> None:
    """Main application entry point."""
    config = Config.load()
    configure_logging(config.log_level)

    logger.info("=" * 50)
    logger.info("NASA Data Explorer starting...")
    logger.info("=" * 50)

    if config.nasa.api_key == "DEMO_KEY":
        logger.warning("NASA_API_KEY not set - using DEMO_KEY (heavily rate limited upstream)")

    client = NasaClient(
        api_key=config.nasa.api_key,
        base_url=config.nasa.base_url,
        timeout=config.nasa.timeout,
        long_timeout=config.nasa.long_timeout,
    )
    web_server = WebServer(
        config=config,
        apod_service=ApodService(client),
        mars_rover_service=MarsRoverService(client),
        neo_service=NeoService(client),
    )

    shutdown_event = asyncio.Event()

    def handle_shutdown(sig: signal.Signals) -> None:
        logger.info(f"Received {sig.name}, initiating shutdown...")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, handle_shutdown, sig)

    try:
        await client.start()
        await web_server.start()

        base = f"http://localhost:{config.server.port}"
        logger.info("")
        logger.info(f"Environment:  {config.server.environment}")
        logger.info(f"Health check: {base}/health")
        logger.info(f"API base URL: {base}/api")
        logger.info(f"Web pages:    {base}/")
        logger.info("")
        logger.info("Press Ctrl+C to stop")

        await shutdown_event.wait()

    except Exception as e:
        logger.exception(f"Error running NASA Data Explorer: {e}")
    finally:
        try:
            await asyncio.wait_for(web_server.stop(), timeout=8.0)
        except asyncio.TimeoutError:
            logger.warning("Web server shutdown timed out after 8s")
        await client.stop()
        logger.info("NASA Data Explorer stopped.")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
