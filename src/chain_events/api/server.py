"""
API server for node status and metrics endpoints.

Provides HTTP endpoints for:
- /health - Health check endpoint
- /metrics - Prometheus metrics endpoint
- /events/subscriptions - Active subscriptions per event kind

Events themselves are not served here. Carrying events to remote clients is
the job of the subscription layer.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from aiohttp import web

from chain_events.hub import EventBroadcastHub

from .endpoints import health, metrics, subscriptions

logger = logging.getLogger(__name__)


def _no_hub() -> EventBroadcastHub | None:
    """Default hub getter that returns None."""
    return None


@dataclass(frozen=True, slots=True)
class ApiServerConfig:
    """Configuration for the API server."""

    host: str = "0.0.0.0"
    """Host address to bind to."""

    port: int = 5052
    """Port to listen on."""

    enabled: bool = True
    """Whether the API server is enabled."""


@dataclass(slots=True)
class ApiServer:
    """
    HTTP API server for node status.

    Uses aiohttp to handle HTTP protocol details efficiently.
    """

    config: ApiServerConfig
    """Server configuration."""

    hub_getter: Callable[[], EventBroadcastHub | None] = _no_hub
    """Callable that returns the current hub instance."""

    _runner: web.AppRunner | None = field(default=None, init=False)
    """The aiohttp application runner."""

    _site: web.TCPSite | None = field(default=None, init=False)
    """The TCP site for the server."""

    @property
    def hub(self) -> EventBroadcastHub | None:
        """Get the current hub instance."""
        return self.hub_getter()

    def build_app(self) -> web.Application:
        """Create the aiohttp application with all routes registered."""
        app = web.Application()
        app.add_routes(
            [
                web.get("/health", health.handle),
                web.get("/metrics", metrics.handle),
                web.get("/events/subscriptions", subscriptions.make_handler(self.hub_getter)),
            ]
        )
        return app

    async def start(self) -> None:
        """Start the API server in the background."""
        if not self.config.enabled:
            logger.info("API server is disabled")
            return

        self._runner = web.AppRunner(self.build_app())
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.config.host, self.config.port)
        await self._site.start()

        logger.info("API server listening on %s:%d", self.config.host, self.config.port)

    async def run(self) -> None:
        """
        Run the API server until shutdown.

        This method blocks until stop() is called.
        """
        await self.start()

        # Keep running until stopped
        while self._runner is not None:
            await asyncio.sleep(1)

    async def stop(self) -> None:
        """Gracefully stop the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            logger.info("API server stopped")
