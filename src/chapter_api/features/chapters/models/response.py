"""
Response models for chapter endpoints.
"""
from typing import List, Any

from pydantic import Field

from ....common.models.base import BaseSchema
from .domain import Chapter


class PaginationInfo(BaseSchema):
    current_page: int
    total_pages: int
    total_chapters: int
    has_next_page: bool
    has_prev_page: bool
    limit: int


class ChapterListResponse(BaseSchema):
    """One page of chapters."""
    chapters: List[Chapter]
    pagination: PaginationInfo


class BulkCreateSuccess(BaseSchema):
    index: int
    chapter: Chapter
    message: str = "Successfully created"


class BulkCreateFailure(BaseSchema):
    index: int
    chapter: Any = Field(description="The submitted record, unchanged")
    error: str


class BulkCreateResult(BaseSchema):
    """Per-record outcome of a bulk create, in input order."""
    successful: List[BulkCreateSuccess] = Field(default_factory=list)
    failed: List[BulkCreateFailure] = Field(default_factory=list)

    @property
    def summary(self) -> str:
        return f"{len(self.successful)} chapters created successfully, {len(self.failed)} failed"


class AnalyticsOverview(BaseSchema):
    total_chapters: int
    completed_chapters: int
    in_progress_chapters: int
    not_started_chapters: int
    weak_chapters: int
    completion_percentage: int


class SubjectBreakdown(BaseSchema):
    subject: str
    count: int
    completed: int
    weak_chapters: int


class AnalyticsResponse(BaseSchema):
    overview: AnalyticsOverview
    subject_distribution: List[SubjectBreakdown]


class FilterOptionsResponse(BaseSchema):
    subjects: List[str]
    classes: List[str]
    units: List[str]
    statuses: List[str]
