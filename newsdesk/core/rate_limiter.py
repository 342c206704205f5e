"""
In-process sliding-window rate limiting for FastAPI routes.
"""

import math
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from fastapi import HTTPException, Request, Response

MAX_TRACKED_KEYS = 10000


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """
    Allows max_requests per window_seconds for each client key.
    Used as a route dependency: Depends(limiter).
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        key_func: Callable[[Request], str] = client_key,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.key_func = key_func
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> tuple:
        """
        Record one request for key.

        Returns:
            (allowed, remaining, reset_seconds)
        """
        now = self.clock()
        cutoff = now - self.window_seconds
        with self._lock:
            if len(self._hits) > MAX_TRACKED_KEYS:
                self._prune(cutoff)
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()

            if len(hits) >= self.max_requests:
                reset = hits[0] + self.window_seconds - now
                return False, 0, reset

            hits.append(now)
            reset = hits[0] + self.window_seconds - now
            return True, self.max_requests - len(hits), reset

    def _prune(self, cutoff: float) -> None:
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)

    async def __call__(self, request: Request, response: Response) -> None:
        allowed, remaining, reset = self.hit(self.key_func(request))
        headers = {
            "RateLimit-Limit": str(self.max_requests),
            "RateLimit-Remaining": str(remaining),
            "RateLimit-Reset": str(max(0, math.ceil(reset))),
        }
        if not allowed:
            headers["Retry-After"] = headers["RateLimit-Reset"]
            raise HTTPException(status_code=429, detail="Too many requests, please try again later.", headers=headers)
        response.headers.update(headers)
