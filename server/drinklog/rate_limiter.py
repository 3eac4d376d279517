from __future__ import annotations

import threading
import time
from typing import Dict, Tuple

from fastapi import Request

from drinklog.errors import RateLimitError


class FixedWindowRateLimiter:
    """Counts hits per key inside a fixed window that starts at the first hit."""

    def __init__(self, limit: int, window_seconds: int) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._hits: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def _prune(self, now: float) -> None:
        expired = [key for key, (_, reset) in self._hits.items() if now > reset]
        for key in expired:
            del self._hits[key]

    def check(self, key: str) -> None:
        if self.limit <= 0:
            return
        now = time.time()
        with self._lock:
            self._prune(now)
            count, reset = self._hits.get(key, (0, now + self.window_seconds))
            count += 1
            self._hits[key] = (count, reset)
        if count > self.limit:
            raise RateLimitError("Too many requests, please try again later")


def client_ip(request: Request, *, trust_proxy: bool = False) -> str:
    # X-Forwarded-For is client-controlled unless a proxy in front rewrites it.
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit_api(request: Request) -> None:
    """Router dependency applying the app's limiter to the calling client."""
    limiter: FixedWindowRateLimiter = request.app.state.rate_limiter
    trust_proxy = request.app.state.settings.trust_proxy
    limiter.check(f"api:{client_ip(request, trust_proxy=trust_proxy)}")
