"""Chapter repositories."""
from .chapter_repository import ChapterRepository

__all__ = ["ChapterRepository"]
