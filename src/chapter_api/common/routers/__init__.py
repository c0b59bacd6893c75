"""Router utilities."""
from .base import ChapterAPIRouter

__all__ = ["ChapterAPIRouter"]
