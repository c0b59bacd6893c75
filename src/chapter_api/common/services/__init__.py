"""Base services."""
from .base import BaseService
from .cached import CachedService

__all__ = ["BaseService", "CachedService"]
