# lolbuild/ratelimit.py - Per-host request throttling
import asyncio
import logging
import time
from collections import deque
from typing import Dict, List, Tuple
from urllib.parse import urlparse

from .constants import HOST_RATE_LIMITS, UNTHROTTLED_PATHS

logger = logging.getLogger("red.lolbuild.ratelimit")


class WindowRateLimiter:
    """Sliding-window limiter for one host"""

    def __init__(self, limits: List[Tuple[int, int]]):
        self.limits = limits  # List of (requests, seconds) tuples
        self.request_times = [deque(maxlen=limit[0]) for limit in limits]
        self._lock = asyncio.Lock()

    async def wait_for_rate_limit(self):
        """Wait if necessary to respect every window of this host"""
        async with self._lock:
            current_time = time.monotonic()

            for i, (max_requests, time_window) in enumerate(self.limits):
                request_times = self.request_times[i]

                while request_times and current_time - request_times[0] >= time_window:
                    request_times.popleft()

                if len(request_times) >= max_requests:
                    wait_time = time_window - (current_time - request_times[0])
                    if wait_time > 0:
                        logger.warning(f"Rate limit hit, waiting {wait_time:.2f}s")
                        await asyncio.sleep(wait_time)
                        current_time = time.monotonic()

            for request_times in self.request_times:
                request_times.append(current_time)

    def get_status(self) -> Dict[str, str]:
        """Get current usage for each window"""
        current_time = time.monotonic()
        status = {}
        for i, (max_requests, time_window) in enumerate(self.limits):
            used = sum(1 for t in self.request_times[i] if current_time - t < time_window)
            status[f"{time_window}s"] = f"{used}/{max_requests}"
        return status


class HostRateLimiter:
    """Routes each URL to the limiter of its host"""

    def __init__(self, limits: Dict[str, List[Tuple[int, int]]] = None,
                 unthrottled: Dict[str, Tuple[str, ...]] = None):
        limits = HOST_RATE_LIMITS if limits is None else limits
        self.limiters = {host: WindowRateLimiter(windows) for host, windows in limits.items()}
        self.unthrottled = UNTHROTTLED_PATHS if unthrottled is None else unthrottled

    def _limiter_for(self, url: str):
        parsed = urlparse(url)
        host = parsed.netloc.lower()
        if any(fragment in parsed.path for fragment in self.unthrottled.get(host, ())):
            return None
        if host in self.limiters:
            return self.limiters[host]
        # Riot platform hosts look like kr.api.riotgames.com
        for suffix, limiter in self.limiters.items():
            if host.endswith("." + suffix):
                return limiter
        return None

    async def wait(self, url: str):
        limiter = self._limiter_for(url)
        if limiter is not None:
            await limiter.wait_for_rate_limit()

    def get_status(self) -> Dict[str, Dict[str, str]]:
        return {host: limiter.get_status() for host, limiter in self.limiters.items()}
