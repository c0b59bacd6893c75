"""HTTP middleware."""
from .rate_limit import RateLimitMiddleware
from .timing import TimingMiddleware

__all__ = ["RateLimitMiddleware", "TimingMiddleware"]
