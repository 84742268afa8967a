# automart/core/rate_limit.py
"""
Fixed-window request limiting.

The counters live behind :class:`RateLimitStore` and the store is hung on
``app.state.rate_limit_store`` at startup, so a shared backend (redis, ...) can
replace the in-memory one without touching the routers.
"""
import math
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

from fastapi import Depends, HTTPException, Request, Response, status

from automart.core.auth import get_current_user_optional
from automart.core.config import settings
from automart.models.user import User


class RateLimitStore(ABC):
    @abstractmethod
    def hit(self, key: str, window: float) -> Tuple[int, float]:
        """Count one request for ``key``; return (count in window, window reset time)."""

    @abstractmethod
    def reset(self) -> None:
        """Drop every counter."""


class InMemoryRateLimitStore(RateLimitStore):
    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, window: float) -> Tuple[int, float]:
        now = self._clock()
        with self._lock:
            count, reset_at = self._entries.get(key, (0, 0.0))
            if reset_at <= now:
                count, reset_at = 0, now + window
            count += 1
            self._entries[key] = (count, reset_at)
            self._expire(now)
            return count, reset_at

    def _expire(self, now: float) -> None:
        expired = [k for k, (_, reset_at) in self._entries.items() if reset_at <= now]
        for k in expired:
            del self._entries[k]

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RateLimiter:
    def __init__(self, max_requests: int, window_seconds: Optional[int] = None, scope: str = "standard"):
        self.max_requests = max_requests
        self.window_seconds = window_seconds or settings.RATE_LIMIT_WINDOW_SECONDS
        self.scope = scope

    def _key(self, request: Request, me: Optional[User]) -> str:
        if me is not None:
            return f"{self.scope}:user:{me.id}"
        host = request.client.host if request.client else "unknown"
        return f"{self.scope}:ip:{host}"

    def __call__(
        self,
        request: Request,
        response: Response,
        me: Optional[User] = Depends(get_current_user_optional),
    ) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return

        store: RateLimitStore = request.app.state.rate_limit_store
        count, reset_at = store.hit(self._key(request, me), self.window_seconds)
        remaining = max(0, self.max_requests - count)

        headers = {
            "X-RateLimit-Limit": str(self.max_requests),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(math.ceil(reset_at)),
        }
        response.headers.update(headers)

        if count > self.max_requests:
            retry_after = max(1, math.ceil(reset_at - time.time()))
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="rate_limit_exceeded",
                headers={**headers, "Retry-After": str(retry_after)},
            )


standard_limit = RateLimiter(settings.RATE_LIMIT_STANDARD, scope="standard")
auth_limit = RateLimiter(settings.RATE_LIMIT_AUTH, scope="auth")
public_listings_limit = RateLimiter(settings.RATE_LIMIT_PUBLIC_LISTINGS, scope="listings")
