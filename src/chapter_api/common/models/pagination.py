"""
Pagination models and helpers.
"""
import math
from typing import Dict, Any

from pydantic import Field

from .base import BaseSchema


class PaginationParams(BaseSchema):
    """Page/limit pagination parameters for list endpoints."""
    page: int = Field(1, ge=1, description="Page number")
    limit: int = Field(10, ge=1, le=100, description="Items per page")

    @property
    def offset(self) -> int:
        """Calculate offset for database query."""
        return (self.page - 1) * self.limit


class PaginationHelper:
    """Pagination arithmetic shared by list services."""

    @staticmethod
    def total_pages(total: int, limit: int) -> int:
        return math.ceil(total / limit) if limit > 0 else 0

    @staticmethod
    def validate_params(page: int, limit: int, max_limit: int = 100) -> None:
        """Raise ValueError for out-of-range page or limit."""
        if page < 1:
            raise ValueError("Page must be a positive integer")
        if limit < 1 or limit > max_limit:
            raise ValueError(f"Limit must be between 1 and {max_limit}")

    @classmethod
    def create_metadata(cls, page: int, limit: int, total: int) -> Dict[str, Any]:
        """Compute the page navigation fields for a result set of ``total`` items."""
        total_pages = cls.total_pages(total, limit)
        return {
            "current_page": page,
            "total_pages": total_pages,
            "has_next_page": page < total_pages,
            "has_prev_page": page > 1,
            "limit": limit,
        }
