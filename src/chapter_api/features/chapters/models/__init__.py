"""Chapter models."""
from .domain import (
    Chapter,
    ChapterFields,
    Subject,
    ChapterClass,
    ChapterStatus,
    completion_percentage,
)
from .request import ChapterCreateRequest, ChapterUpdateRequest, ChapterFilter, parse_boolean_flag
from .response import (
    PaginationInfo,
    ChapterListResponse,
    BulkCreateSuccess,
    BulkCreateFailure,
    BulkCreateResult,
    AnalyticsOverview,
    SubjectBreakdown,
    AnalyticsResponse,
    FilterOptionsResponse,
)

__all__ = [
    "Chapter",
    "ChapterFields",
    "Subject",
    "ChapterClass",
    "ChapterStatus",
    "completion_percentage",
    "ChapterCreateRequest",
    "ChapterUpdateRequest",
    "ChapterFilter",
    "parse_boolean_flag",
    "PaginationInfo",
    "ChapterListResponse",
    "BulkCreateSuccess",
    "BulkCreateFailure",
    "BulkCreateResult",
    "AnalyticsOverview",
    "SubjectBreakdown",
    "AnalyticsResponse",
    "FilterOptionsResponse",
]
