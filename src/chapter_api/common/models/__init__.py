"""Shared models."""
from .base import BaseSchema, APIResponse, HealthStatus
from .pagination import PaginationParams, PaginationHelper
from .results import ServiceResult

__all__ = [
    "BaseSchema",
    "APIResponse",
    "HealthStatus",
    "PaginationParams",
    "PaginationHelper",
    "ServiceResult",
]
