"""Application exceptions."""
from .base import (
    ChapterAPIException,
    ValidationError,
    UnauthorizedError,
    ForbiddenError,
    BadRequestError,
    PayloadTooLargeError,
    RateLimitError,
)
from .service import DatabaseError

__all__ = [
    "ChapterAPIException",
    "ValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "BadRequestError",
    "PayloadTooLargeError",
    "RateLimitError",
    "DatabaseError",
]
