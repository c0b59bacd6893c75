"""
Fixed-window rate limiting per client IP.
"""
import math
import time
from typing import Callable, Dict, List, Optional, Tuple

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from ..cache.client import CacheManager
from ..exceptions import RateLimitError
from ..models.base import APIResponse


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limiting middleware.

    Counters live in Redis (through the CacheManager) so every instance shares
    them. While the cache is unavailable each process counts on its own.
    """

    def __init__(
        self,
        app,
        *,
        cache: Optional[CacheManager] = None,
        max_requests: int = 30,
        window_seconds: int = 60,
        exclude_paths: Optional[List[str]] = None,
        enabled: bool = True
    ):
        super().__init__(app)
        self.cache = cache
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.exclude_paths = exclude_paths or ["/health"]
        self.enabled = enabled

        # Fallback storage keyed by (client_ip, window_start)
        self._request_counts: Dict[Tuple[str, int], int] = {}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Apply rate limiting."""
        if not self.enabled or any(request.url.path.startswith(path) for path in self.exclude_paths):
            return await call_next(request)

        client_ip = self._get_client_ip(request)
        now = time.time()
        window_start = int(now // self.window_seconds) * self.window_seconds
        reset_in = max(1, math.ceil(window_start + self.window_seconds - now))

        count = await self._record_request(client_ip, window_start)

        if count > self.max_requests:
            logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
            error = RateLimitError(retry_after=reset_in)
            content = APIResponse.error_response(error.message).to_content()
            content["retryAfter"] = reset_in
            return JSONResponse(
                status_code=error.status_code,
                content=content,
                headers={"Retry-After": str(reset_in), **self._limit_headers(0, reset_in)}
            )

        response = await call_next(request)
        response.headers.update(self._limit_headers(self.max_requests - count, reset_in))
        return response

    def _limit_headers(self, remaining: int, reset_in: int) -> Dict[str, str]:
        return {
            "RateLimit-Limit": str(self.max_requests),
            "RateLimit-Remaining": str(max(0, remaining)),
            "RateLimit-Reset": str(reset_in),
        }

    def _get_client_ip(self, request: Request) -> str:
        """Get client IP address."""
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"

    async def _record_request(self, client_ip: str, window_start: int) -> int:
        """Count this request and return the total for the current window."""
        if self.cache is not None:
            key = f"ratelimit:{client_ip}:{window_start}"
            count = await self.cache.increment(key)
            if count is not None:
                if count == 1:
                    await self.cache.expire(key, self.window_seconds)
                return count

        return self._record_local(client_ip, window_start)

    def _record_local(self, client_ip: str, window_start: int) -> int:
        # Drop counters from finished windows
        stale = [key for key in self._request_counts if key[1] < window_start]
        for key in stale:
            del self._request_counts[key]

        key = (client_ip, window_start)
        self._request_counts[key] = self._request_counts.get(key, 0) + 1
        return self._request_counts[key]
