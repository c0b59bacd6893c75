"""
Service layer for chapter reads and writes.

Reads go through the cache. Writes go to the store and, once at least one
record was affected, drop the list and entity cache namespaces.
"""

import asyncio
from typing import Any, Dict, List, Optional, Union

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ....common.cache.client import CacheManager
from ....common.config.settings import Settings
from ....common.exceptions import ValidationError
from ....common.models.results import ServiceResult
from ....common.services.cached import CachedService
from ..models.domain import Chapter, ChapterFields
from ..models.request import ChapterCreateRequest, ChapterUpdateRequest, ChapterFilter
from ..models.response import (
    ChapterListResponse,
    PaginationInfo,
    BulkCreateResult,
    BulkCreateSuccess,
    BulkCreateFailure,
)
from ..repositories.chapter_repository import ChapterRepository
from . import cache_keys

CHAPTER_NOT_FOUND = "Chapter not found"


class ChapterService(CachedService[Chapter]):
    """Cache-aware chapter queries and mutations."""

    def __init__(
        self,
        repository: ChapterRepository,
        cache: CacheManager,
        settings: Optional[Settings] = None
    ):
        super().__init__(cache)
        self.repository = repository
        self.max_page_size = settings.max_page_size if settings else 100
        self.invalidate_aggregates = (
            settings.cache_invalidate_aggregates_on_write if settings else False
        )

    async def list_chapters(
        self,
        filters: Optional[ChapterFilter] = None,
        page: int = 1,
        limit: int = 10
    ) -> ServiceResult[ChapterListResponse]:
        """One page of chapters matching ``filters``, newest first."""
        filters = filters or ChapterFilter()
        pagination = self.validate_pagination_params(page, limit, self.max_page_size)
        key = cache_keys.list_key(filters, pagination.page, pagination.limit)

        async def load() -> ChapterListResponse:
            store_filters = filters.to_store_filters()
            chapters, total = await asyncio.gather(
                self.repository.find(store_filters, limit=pagination.limit, offset=pagination.offset),
                self.repository.count(store_filters),
            )
            metadata = self.create_pagination_metadata(pagination.page, pagination.limit, total)
            return ChapterListResponse(
                chapters=chapters,
                pagination=PaginationInfo(total_chapters=total, **metadata),
            )

        result = await self.read_through(key, ChapterListResponse, load)
        return ServiceResult.ok(result)

    async def get_chapter(self, chapter_id: str) -> ServiceResult[Chapter]:
        """A single chapter. Not-found results are not cached."""
        chapter = await self.read_through(
            cache_keys.entity_key(chapter_id),
            Chapter,
            lambda: self.repository.get_by_id(chapter_id),
        )
        if chapter is None:
            return ServiceResult.fail(CHAPTER_NOT_FOUND)
        return ServiceResult.ok(chapter)

    async def create_chapter(
        self,
        data: Union[ChapterFields, Dict[str, Any]]
    ) -> ServiceResult[Chapter]:
        """Create one chapter.

        Raises:
            ValidationError: if ``data`` is not a valid chapter
        """
        request = self._validate(ChapterCreateRequest, data)
        chapter = await self.repository.create(request)
        await self._invalidate_after_write()
        logger.info(f"Created chapter {chapter.id}")
        return ServiceResult.ok(chapter, "Chapter created successfully")

    async def create_chapters(self, records: List[Any]) -> ServiceResult[BulkCreateResult]:
        """Create each record independently, collecting per-record outcomes.

        A record that fails validation (in the model or in the store) is
        reported with its index and does not stop the batch. Store outages abort
        the whole call, but cached views are still dropped when earlier rows
        were already written.
        """
        result = BulkCreateResult()

        try:
            for index, record in enumerate(records):
                try:
                    request = self._validate(ChapterCreateRequest, record)
                    chapter = await self.repository.create(request)
                except ValidationError as e:
                    result.failed.append(BulkCreateFailure(index=index, chapter=record, error=e.summary))
                    continue
                result.successful.append(BulkCreateSuccess(index=index, chapter=chapter))
        finally:
            # Rows committed before an outage are visible in the store
            if result.successful:
                await self._invalidate_after_write()

        logger.info(f"Bulk create finished: {result.summary}")
        return ServiceResult(
            success=len(result.successful) > 0,
            data=result,
            message=result.summary,
        )

    async def update_chapter(
        self,
        chapter_id: str,
        data: Union[ChapterFields, Dict[str, Any]]
    ) -> ServiceResult[Chapter]:
        """Replace a chapter's attributes.

        Raises:
            ValidationError: if ``data`` is not a valid chapter
        """
        request = self._validate(ChapterUpdateRequest, data)
        chapter = await self.repository.update(chapter_id, request)
        if chapter is None:
            return ServiceResult.fail(CHAPTER_NOT_FOUND)

        await self._invalidate_after_write()
        logger.info(f"Updated chapter {chapter_id}")
        return ServiceResult.ok(chapter, "Chapter updated successfully")

    async def delete_chapter(self, chapter_id: str) -> ServiceResult[None]:
        deleted = await self.repository.delete(chapter_id)
        if not deleted:
            return ServiceResult.fail(CHAPTER_NOT_FOUND)

        await self._invalidate_after_write()
        logger.info(f"Deleted chapter {chapter_id}")
        return ServiceResult.ok(message="Chapter deleted successfully")

    def _validate(self, model, data: Any) -> ChapterFields:
        if isinstance(data, model):
            return data
        if isinstance(data, ChapterFields):
            data = data.model_dump(by_alias=True)
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e

    async def _invalidate_after_write(self) -> None:
        patterns = list(cache_keys.WRITE_INVALIDATION_PATTERNS)
        if self.invalidate_aggregates:
            patterns.extend(cache_keys.AGGREGATE_INVALIDATION_PATTERNS)
        removed = await self.invalidate(patterns)
        logger.debug(f"Invalidated {removed} cached chapter entries")
