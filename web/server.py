"""
Health-check server for the omikuji bot.
Uses aiohttp for async web serving.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from aiohttp import web

if TYPE_CHECKING:
    from bot.state import BotState

logger = logging.getLogger("omikuji.web")

HEALTH_TEXT = "Health check passed"


class HealthServer:
    """Liveness probe plus a read-only view of registered responses."""

    def __init__(self, state: BotState, host: str = "0.0.0.0", port: int = 8080) -> None:
        self.state = state
        self.host = host
        self.port = port
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None

        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.router.add_get("/health-check", self.handle_health)
        self.app.router.add_get("/stats", self.handle_stats)

    async def handle_health(self, request: web.Request) -> web.Response:
        return web.Response(text=HEALTH_TEXT)

    async def handle_stats(self, request: web.Request) -> web.Response:
        """Number of registered responses per channel."""
        stats = self.state.reactions.channel_stats()
        return web.json_response({"channels": dict(stats)})

    async def start(self) -> None:
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, self.host, self.port)
        await site.start()
        logger.info("Health server started at http://%s:%s", self.host, self.port)

    async def stop(self) -> None:
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            logger.info("Health server stopped")
