"""Base repositories."""
from .base import BaseRepository

__all__ = ["BaseRepository"]
