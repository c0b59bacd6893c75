"""
Request models for chapter endpoints.
"""
from typing import Optional, Dict, Any

from pydantic import Field, field_validator

from ....common.models.base import BaseSchema
from .domain import ChapterFields, Subject, ChapterClass, ChapterStatus


class ChapterCreateRequest(ChapterFields):
    """Payload for creating a chapter."""
    pass


class ChapterUpdateRequest(ChapterFields):
    """Full replacement payload for an existing chapter."""
    pass


def parse_boolean_flag(value: Any) -> Optional[bool]:
    """Parse a boolean given as a bool or as the strings ``true`` / ``false``."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ValueError("Must be true or false")


class ChapterFilter(BaseSchema):
    """Filter parameters for chapter listing. Absent fields do not filter."""
    subject: Optional[Subject] = None
    class_name: Optional[ChapterClass] = Field(None, alias="class")
    unit: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[ChapterStatus] = None
    weak_chapters: Optional[bool] = None

    @field_validator("weak_chapters", mode="before")
    @classmethod
    def parse_weak_chapters(cls, value: Any) -> Optional[bool]:
        return parse_boolean_flag(value)

    def to_store_filters(self) -> Dict[str, Any]:
        """Column equality filters for the store, present fields only."""
        columns = {
            "subject": self.subject,
            "class_name": self.class_name,
            "unit": self.unit,
            "status": self.status,
            "is_weak_chapter": self.weak_chapters,
        }
        return {column: value for column, value in columns.items() if value is not None}
