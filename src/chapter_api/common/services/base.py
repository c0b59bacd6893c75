"""
Base service pattern for business logic operations.
"""

from typing import Any, Dict, TypeVar, Generic
from abc import ABC

from ..exceptions import ValidationError
from ..models.pagination import PaginationParams, PaginationHelper

T = TypeVar('T')


class BaseService(ABC, Generic[T]):
    """
    Base service class providing common business logic patterns.

    This class implements common patterns for:
    - Pagination arithmetic and validation
    - Standardized validation errors
    """

    def create_pagination_metadata(
        self,
        page: int,
        limit: int,
        total_count: int
    ) -> Dict[str, Any]:
        """Create pagination metadata from query results.

        Args:
            page: Current page number
            limit: Items per page
            total_count: Total number of items

        Returns:
            Dict with current_page, total_pages, has_next_page, has_prev_page, limit
        """
        return PaginationHelper.create_metadata(page, limit, total_count)

    def validate_pagination_params(
        self,
        page: int,
        limit: int,
        max_limit: int = 100
    ) -> PaginationParams:
        """Validate and create pagination parameters.

        Raises:
            ValidationError: If parameters are invalid
        """
        try:
            PaginationHelper.validate_params(page, limit, max_limit)
        except ValueError as e:
            raise ValidationError(
                errors=[{
                    "field": "pagination",
                    "message": str(e),
                    "value": f"page={page}, limit={limit}"
                }]
            )
        return PaginationParams(page=page, limit=limit)
