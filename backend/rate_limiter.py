"""
FarmerAid - In-memory sliding-window rate limiter, keyed by client address.
"""
import time
from collections import deque
from threading import Lock
from typing import Callable, Deque, Dict, Optional

from fastapi import HTTPException, Request

from app_config import settings
from app_logging import get_logger

logger = get_logger("rate_limiter")

RATE_LIMIT_MESSAGE = "Too many requests, please slow down."


class SlidingWindowRateLimiter:
    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = Lock()
        self._last_sweep = clock()

    def __len__(self) -> int:
        """Number of clients with hits still inside the window."""
        with self._lock:
            return len(self._hits)

    def _prune(self, hits: Deque[float], now: float):
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()

    def _sweep(self, now: float):
        # drop every client whose hits have all expired; runs at most once per window
        for client in list(self._hits):
            hits = self._hits[client]
            self._prune(hits, now)
            if not hits:
                del self._hits[client]
        self._last_sweep = now

    def hit(self, client: str) -> Optional[float]:
        """Record a request; None if allowed, else seconds until the oldest hit expires."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            hits = self._hits.setdefault(client, deque())
            self._prune(hits, now)
            if len(hits) >= self.max_requests:
                return max(self.window_seconds - (now - hits[0]), 0.0)
            hits.append(now)
            return None

    def reset(self):
        with self._lock:
            self._hits.clear()
            self._last_sweep = self._clock()


gemini_limiter = SlidingWindowRateLimiter(settings.RATE_LIMIT_MAX, settings.RATE_LIMIT_WINDOW_SECONDS)


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def limit_gemini(request: Request) -> None:
    """FastAPI dependency: 429 once a client exceeds the window."""
    client = client_address(request)
    retry_after = gemini_limiter.hit(client)
    if retry_after is not None:
        logger.warning("Rate limit exceeded for %s", client, extra={"path": request.url.path})
        raise HTTPException(
            status_code=429,
            detail=RATE_LIMIT_MESSAGE,
            headers={"Retry-After": str(int(retry_after) + 1)},
        )
