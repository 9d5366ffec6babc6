# lolbuild/keepalive.py - Liveness endpoint for hosts that ping a port
import logging
from typing import Optional

from aiohttp import web

logger = logging.getLogger("red.lolbuild.keepalive")

ALIVE_TEXT = "I'm still running! Bot is alive!"


class KeepAliveServer:
    """Answers 200 on / and /health while the cog is loaded"""

    def __init__(self, port: int, host: str = "0.0.0.0"):
        if not 1 <= port <= 65535:
            raise ValueError(f"Invalid port: {port}")
        self.port = port
        self.host = host
        self._runner: Optional[web.AppRunner] = None

    @staticmethod
    async def _alive(request: web.Request) -> web.Response:
        return web.Response(text=ALIVE_TEXT)

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/", self._alive)
        app.router.add_get("/health", self._alive)
        return app

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self):
        if self._runner is not None:
            return
        runner = web.AppRunner(self.make_app())
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port)
        try:
            await site.start()
        except OSError:
            await runner.cleanup()
            raise
        self._runner = runner
        logger.info(f"Keep-alive server listening on port {self.port}")

    async def stop(self):
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Keep-alive server stopped")
