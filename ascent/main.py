"""Ascent entry point.

Initializes all components and starts the server:
  Settings -> TransportClient -> GeminiClient / ActivityFeed -> App -> Uvicorn

Components are built before the app so routes can hold direct
references; the Starlette lifespan closes the shared httpx client.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from starlette.applications import Starlette

from ascent.activity.feed import ActivityFeed
from ascent.api.rest import create_app
from ascent.config import Settings
from ascent.errors import ConfigurationError
from ascent.interview.gemini import GeminiClient
from ascent.transport import TransportClient

logger = logging.getLogger(__name__)


def create_components(settings: Settings) -> dict:
    """Initialize components in dependency order.

    Raises ConfigurationError when a required credential is missing, before
    any network call is attempted.
    """
    missing = settings.missing_credentials()
    if missing:
        raise ConfigurationError(missing)

    transport = TransportClient(timeout=settings.http_timeout)
    gemini = GeminiClient(
        transport,
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_base_url,
    )
    feed = ActivityFeed(
        transport,
        token=settings.github_token,
        api_url=settings.github_api_url,
        api_version=settings.github_api_version,
    )
    return {"transport": transport, "gemini": gemini, "feed": feed}


async def shutdown_components(components: dict) -> None:
    """Graceful shutdown."""
    logger.info("Shutting down Ascent...")
    transport = components.get("transport")
    if transport:
        await transport.close()


def build_app(settings: Settings) -> Starlette:
    """Build the Starlette app with components wired in."""
    components = create_components(settings)

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        app.state.components = components
        logger.info("Ascent started on %s:%d", settings.host, settings.port)
        yield
        await shutdown_components(components)

    return create_app(
        gemini=components["gemini"],
        feed=components["feed"],
        settings=settings,
        lifespan=lifespan,
    )


def main() -> None:
    """Entry point: parse settings, build app, run server."""
    settings = Settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    logger.info("Model endpoint: %s", settings.gemini_base_url)
    logger.info("Activity API: %s (version %s)", settings.github_api_url, settings.github_api_version)

    try:
        app = build_app(settings)
    except ConfigurationError as e:
        logger.error("%s", e)
        sys.exit(2)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
