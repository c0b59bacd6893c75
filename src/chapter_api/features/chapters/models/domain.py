"""
Domain models for chapters.
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict

from pydantic import Field, NonNegativeInt, computed_field

from ....common.models.base import BaseSchema


class Subject(str, Enum):
    PHYSICS = "Physics"
    CHEMISTRY = "Chemistry"
    MATHEMATICS = "Mathematics"


class ChapterClass(str, Enum):
    CLASS_11 = "Class 11"
    CLASS_12 = "Class 12"


class ChapterStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


def completion_percentage(solved: int, total: int) -> int:
    """Percentage of ``total`` that ``solved`` represents, rounded half up.

    Zero when there is nothing to solve.
    """
    if total <= 0:
        return 0
    ratio = Decimal(solved) * 100 / Decimal(total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class ChapterFields(BaseSchema):
    """Writable chapter attributes with their validation rules."""
    subject: Subject
    chapter: str = Field(..., min_length=1, max_length=200)
    class_name: ChapterClass = Field(..., alias="class")
    unit: str = Field(..., min_length=1, max_length=100)
    year_wise_question_count: Dict[str, NonNegativeInt] = Field(default_factory=dict)
    question_solved: NonNegativeInt = 0
    status: ChapterStatus = ChapterStatus.NOT_STARTED
    is_weak_chapter: bool = False

    @computed_field(alias="totalQuestions")
    @property
    def total_questions(self) -> int:
        return sum(self.year_wise_question_count.values())

    @computed_field(alias="completionPercentage")
    @property
    def completion_percentage(self) -> int:
        return completion_percentage(self.question_solved, self.total_questions)


class Chapter(ChapterFields):
    """A stored chapter."""
    id: str
    created_at: datetime
    updated_at: datetime
