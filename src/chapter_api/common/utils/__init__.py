"""Utility helpers."""
from .datetime import utc_now, format_iso8601

__all__ = ["utc_now", "format_iso8601"]
