"""
Service and infrastructure-related exceptions.
"""
from typing import Optional

from .base import ChapterAPIException


class DatabaseError(ChapterAPIException):
    """Raised when database operation fails."""

    def __init__(
        self,
        message: str = "Database operation failed",
        operation: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, status_code=500, **kwargs)
        if operation:
            self.details["operation"] = operation
