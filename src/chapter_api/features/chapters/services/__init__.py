"""Chapter services."""
from .chapter_service import ChapterService
from .analytics_service import AnalyticsService

__all__ = ["ChapterService", "AnalyticsService"]
