from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import aiohttp

from .config import Settings
from .errors import AuthRejected, DecodeError, NetworkError, NotFound

log = logging.getLogger(__name__)


# --------------------------------------------------------------------------
# RateLimiter
# --------------------------------------------------------------------------
class RateLimiter:
    """Token bucket: at most ``max_calls`` per ``period`` seconds, bursting up to the cap."""

    def __init__(self, max_calls: int, period: float):
        self.capacity = max_calls
        self.period = period
        self.fill_rate = max_calls / period
        self.tokens = float(max_calls)
        self.timestamp = time.monotonic()
        self._lock = asyncio.Lock()

    async def acquire(self):
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self.timestamp
            self.timestamp = now
            self.tokens = min(self.capacity, self.tokens + elapsed * self.fill_rate)
            if self.tokens < 1:
                wait = (1 - self.tokens) / self.fill_rate
                await asyncio.sleep(wait)
                self.timestamp = time.monotonic()
                self.tokens = 1
            self.tokens -= 1


class ResourceFetcher:
    """
    One authenticated GET per call against the regional profile API.

    Never retries: a 401 comes back as ``AuthRejected`` and the caller
    decides whether to refresh the token and try again.
    """

    def __init__(
        self,
        settings: Settings,
        session: aiohttp.ClientSession,
        limiters: list[RateLimiter] | None = None,
    ):
        self.settings = settings
        self.session = session
        if limiters is None:
            limiters = [
                RateLimiter(settings.rate_cap, 1),
                RateLimiter(36000, 3600),
            ]
        self.limiters = limiters
        self.metrics = {"total": 0, "200": 0, "401": 0, "404": 0, "429": 0, "5xx": 0, "exceptions": 0}

    async def fetch(self, path: str, token: str) -> Any:
        url = f"{self.settings.api_base}{path}"
        params = {
            "namespace": self.settings.profile_namespace,
            "locale": self.settings.locale,
        }
        headers = {"Authorization": f"Bearer {token}"}
        timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout)

        for limiter in self.limiters:
            await limiter.acquire()

        self.metrics["total"] += 1
        log.debug("[FETCH] GET %s", path)
        try:
            async with self.session.get(
                url, headers=headers, params=params, timeout=timeout
            ) as resp:
                status = resp.status
                if status == 200:
                    self.metrics["200"] += 1
                    try:
                        return await resp.json(content_type=None)
                    except (aiohttp.ContentTypeError, ValueError) as exc:
                        raise DecodeError(f"invalid JSON from {path}: {exc}") from exc
                if status == 401:
                    self.metrics["401"] += 1
                    raise AuthRejected(f"token rejected for {path}")
                if status == 404:
                    self.metrics["404"] += 1
                    raise NotFound(f"{path} not found")
                if status == 429:
                    self.metrics["429"] += 1
                elif 500 <= status < 600:
                    self.metrics["5xx"] += 1
                raise NetworkError(f"HTTP {status} for {path}", status=status)
        except asyncio.TimeoutError as exc:
            self.metrics["exceptions"] += 1
            raise NetworkError(
                f"timed out after {self.settings.request_timeout}s: {path}"
            ) from exc
        except aiohttp.ClientError as exc:
            self.metrics["exceptions"] += 1
            raise NetworkError(f"{type(exc).__name__} for {path}: {exc}") from exc
