# lolbuild/fetcher.py - HTTP helpers that never raise
import asyncio
import logging
from typing import Dict, Optional

import aiohttp

from .constants import HTTP_TIMEOUT
from .models import FetchResult
from .ratelimit import HostRateLimiter

logger = logging.getLogger("red.lolbuild.fetcher")


class HttpFetcher:
    """Thin aiohttp wrapper returning FetchResult instead of raising"""

    def __init__(self, session: Optional[aiohttp.ClientSession] = None,
                 rate_limiter: Optional[HostRateLimiter] = None):
        self._session = session
        self._owns_session = session is None
        self.rate_limiter = rate_limiter or HostRateLimiter()

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=HTTP_TIMEOUT)
            )
            self._owns_session = True
        return self._session

    async def close(self):
        """Close the HTTP session if we created it"""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def _get(self, url: str, kind: str, headers: Dict[str, str] = None) -> FetchResult:
        await self.rate_limiter.wait(url)
        try:
            async with self.session.get(url, headers=headers) as resp:
                if resp.status != 200:
                    logger.info(f"GET {url} -> HTTP {resp.status}")
                    return FetchResult(status=resp.status, error=f"HTTP {resp.status}")
                if kind == "json":
                    data = await resp.json(content_type=None)
                elif kind == "bytes":
                    data = await resp.read()
                else:
                    data = await resp.text()
                return FetchResult(status=resp.status, data=data)
        except asyncio.TimeoutError:
            logger.warning(f"GET {url} timed out")
            return FetchResult(error="timeout")
        except aiohttp.ClientError as e:
            logger.warning(f"GET {url} failed: {e}")
            return FetchResult(error=str(e) or type(e).__name__)
        except ValueError as e:
            # Malformed JSON body
            logger.warning(f"GET {url} returned an unreadable body: {e}")
            return FetchResult(status=200, error="invalid body")

    async def fetch_text(self, url: str, headers: Dict[str, str] = None) -> FetchResult:
        return await self._get(url, "text", headers)

    async def fetch_json(self, url: str, headers: Dict[str, str] = None) -> FetchResult:
        return await self._get(url, "json", headers)

    async def fetch_bytes(self, url: str, headers: Dict[str, str] = None) -> FetchResult:
        return await self._get(url, "bytes", headers)
