"""
Request timing and access logging middleware.
"""
import time
from typing import Callable, List, Optional

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware


class TimingMiddleware(BaseHTTPMiddleware):
    """
    Adds ``X-Process-Time`` headers and logs one line per request.

    Requests slower than ``slow_request_threshold`` seconds are logged at
    WARNING, the rest at INFO.
    """

    def __init__(
        self,
        app,
        *,
        add_timing_header: bool = True,
        slow_request_threshold: float = 1.0,
        exclude_paths: Optional[List[str]] = None
    ):
        super().__init__(app)
        self.add_timing_header = add_timing_header
        self.slow_request_threshold = slow_request_threshold
        self.exclude_paths = exclude_paths or []

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with timing measurement."""
        if any(request.url.path.startswith(path) for path in self.exclude_paths):
            return await call_next(request)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed = time.perf_counter() - start
            logger.error(f"{request.method} {request.url.path} - failed ({elapsed * 1000:.2f}ms)")
            raise

        elapsed = time.perf_counter() - start

        if self.add_timing_header:
            response.headers["X-Process-Time"] = f"{elapsed:.6f}"
            response.headers["X-Process-Time-Ms"] = f"{elapsed * 1000:.2f}"

        message = f"{request.method} {request.url.path} - {response.status_code} ({elapsed * 1000:.2f}ms)"
        if elapsed >= self.slow_request_threshold:
            logger.warning(f"Slow request: {message}")
        else:
            logger.info(message)

        return response
