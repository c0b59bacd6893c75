"""
Base exception classes for the application.
"""
from typing import Optional, Any, Dict, List

from pydantic import ValidationError as PydanticValidationError


class ChapterAPIException(Exception):
    """Base exception for all application exceptions."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ChapterAPIException):
    """Raised when validation fails.

    ``errors`` holds ``{field, message, value}`` entries.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[List[Dict[str, Any]]] = None,
        **kwargs
    ):
        super().__init__(message, status_code=400, **kwargs)
        self.errors = errors or []
        self.details["errors"] = self.errors

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        """Build from a pydantic error, one entry per failing field."""
        return cls(errors=[
            {
                "field": ".".join(str(part) for part in error["loc"]) or "body",
                "message": error["msg"],
                "value": error.get("input"),
            }
            for error in exc.errors(include_url=False)
        ])

    @property
    def summary(self) -> str:
        """Human readable ``field: message`` list, or the bare message."""
        if not self.errors:
            return self.message
        return ", ".join(f"{error['field']}: {error['message']}" for error in self.errors)


class UnauthorizedError(ChapterAPIException):
    """Raised when authentication is required but not provided."""

    def __init__(
        self,
        message: str = "Authentication required",
        **kwargs
    ):
        super().__init__(message, status_code=401, **kwargs)


class ForbiddenError(ChapterAPIException):
    """Raised when the caller doesn't have permission."""

    def __init__(
        self,
        message: str = "Permission denied",
        **kwargs
    ):
        super().__init__(message, status_code=403, **kwargs)


class BadRequestError(ChapterAPIException):
    """Raised when request is malformed or invalid."""

    def __init__(
        self,
        message: str = "Bad request",
        **kwargs
    ):
        super().__init__(message, status_code=400, **kwargs)


class PayloadTooLargeError(ChapterAPIException):
    """Raised when an uploaded payload exceeds the configured limit."""

    def __init__(
        self,
        message: str = "Payload too large",
        limit_bytes: Optional[int] = None,
        **kwargs
    ):
        super().__init__(message, status_code=413, **kwargs)
        if limit_bytes:
            self.details["limit_bytes"] = limit_bytes


class RateLimitError(ChapterAPIException):
    """Raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Too many requests from this IP, please try again later.",
        retry_after: Optional[int] = None,
        **kwargs
    ):
        super().__init__(message, status_code=429, **kwargs)
        self.retry_after = retry_after
        if retry_after:
            self.details["retry_after"] = retry_after
