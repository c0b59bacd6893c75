"""
Collection-wide aggregates: dashboard analytics and filter options.

Both are cached under fixed keys and, unless configured otherwise, refresh
only when their TTL expires.
"""

import asyncio
from typing import Optional

from ....common.cache.client import CacheManager
from ....common.config.settings import Settings
from ....common.models.results import ServiceResult
from ....common.services.cached import CachedService
from ..models.domain import completion_percentage
from ..models.response import (
    AnalyticsOverview,
    AnalyticsResponse,
    SubjectBreakdown,
    FilterOptionsResponse,
)
from ..repositories.chapter_repository import ChapterRepository
from . import cache_keys


class AnalyticsService(CachedService[AnalyticsResponse]):
    """Cached aggregate views over all chapters."""

    def __init__(
        self,
        repository: ChapterRepository,
        cache: CacheManager,
        settings: Optional[Settings] = None
    ):
        super().__init__(cache)
        self.repository = repository
        self.analytics_ttl = settings.cache_ttl_analytics if settings else 1800

    async def get_analytics(self) -> ServiceResult[AnalyticsResponse]:
        async def load() -> AnalyticsResponse:
            counts, distribution = await asyncio.gather(
                self.repository.get_status_counts(),
                self.repository.get_subject_distribution(),
            )
            total = counts["total"]
            return AnalyticsResponse(
                overview=AnalyticsOverview(
                    total_chapters=total,
                    completed_chapters=counts["completed"],
                    in_progress_chapters=counts["in_progress"],
                    not_started_chapters=counts["not_started"],
                    weak_chapters=counts["weak"],
                    completion_percentage=completion_percentage(counts["completed"], total),
                ),
                subject_distribution=[SubjectBreakdown(**row) for row in distribution],
            )

        result = await self.read_through(
            cache_keys.ANALYTICS_KEY, AnalyticsResponse, load, ttl=self.analytics_ttl
        )
        return ServiceResult.ok(result)

    async def get_filter_options(self) -> ServiceResult[FilterOptionsResponse]:
        async def load() -> FilterOptionsResponse:
            subjects, classes, units, statuses = await asyncio.gather(
                self.repository.get_distinct_values("subject"),
                self.repository.get_distinct_values("class_name"),
                self.repository.get_distinct_values("unit"),
                self.repository.get_distinct_values("status"),
            )
            return FilterOptionsResponse(
                subjects=subjects,
                classes=classes,
                units=units,
                statuses=statuses,
            )

        result = await self.read_through(cache_keys.FILTERS_KEY, FilterOptionsResponse, load)
        return ServiceResult.ok(result)
