"""
Tests for chapter request, domain and response models.
"""

import pytest
from pydantic import ValidationError

from chapter_api.features.chapters.models.domain import completion_percentage
from chapter_api.features.chapters.models.request import (
    ChapterCreateRequest,
    ChapterFilter,
    parse_boolean_flag,
)
from chapter_api.features.chapters.models.response import BulkCreateResult, BulkCreateFailure


def test_create_request_accepts_wire_format(chapter_payload):
    request = ChapterCreateRequest.model_validate(chapter_payload())

    assert request.class_name == "Class 11"
    assert request.year_wise_question_count == {"2019": 4, "2020": 6}
    assert request.total_questions == 10
    assert request.completion_percentage == 50


def test_dump_uses_camel_case_and_computed_fields(chapter_payload):
    payload = ChapterCreateRequest.model_validate(chapter_payload()).to_payload()

    assert payload["class"] == "Class 11"
    assert payload["isWeakChapter"] is False
    assert payload["totalQuestions"] == 10
    assert payload["completionPercentage"] == 50


def test_defaults_for_optional_fields(chapter_payload):
    payload = chapter_payload()
    for field in ("yearWiseQuestionCount", "questionSolved", "status", "isWeakChapter"):
        del payload[field]

    request = ChapterCreateRequest.model_validate(payload)

    assert request.year_wise_question_count == {}
    assert request.question_solved == 0
    assert request.status == "Not Started"
    assert request.is_weak_chapter is False
    assert request.completion_percentage == 0


@pytest.mark.parametrize("overrides", [
    {"subject": "Biology"},
    {"class": "Class 10"},
    {"status": "Done"},
    {"chapter": ""},
    {"chapter": "x" * 201},
    {"unit": "u" * 101},
    {"questionSolved": -1},
    {"yearWiseQuestionCount": {"2020": -3}},
])
def test_invalid_chapters_are_rejected(chapter_payload, overrides):
    with pytest.raises(ValidationError):
        ChapterCreateRequest.model_validate(chapter_payload(**overrides))


def test_missing_required_field_is_rejected(chapter_payload):
    payload = chapter_payload()
    del payload["subject"]

    with pytest.raises(ValidationError):
        ChapterCreateRequest.model_validate(payload)


@pytest.mark.parametrize("solved, total, expected", [
    (0, 0, 0),
    (5, 0, 0),
    (1, 3, 33),
    (2, 3, 67),
    (1, 8, 13),
    (1, 200, 1),
    (10, 10, 100),
])
def test_completion_percentage_rounds_half_up(solved, total, expected):
    assert completion_percentage(solved, total) == expected


@pytest.mark.parametrize("value, expected", [
    (None, None),
    (True, True),
    ("true", True),
    ("TRUE", True),
    (" false ", False),
])
def test_parse_boolean_flag(value, expected):
    assert parse_boolean_flag(value) is expected


def test_parse_boolean_flag_rejects_other_strings():
    with pytest.raises(ValueError):
        parse_boolean_flag("yes")


def test_filter_maps_to_store_columns():
    filters = ChapterFilter.model_validate({
        "subject": "Physics",
        "class": "Class 12",
        "weakChapters": "true",
    })

    assert filters.to_store_filters() == {
        "subject": "Physics",
        "class_name": "Class 12",
        "is_weak_chapter": True,
    }
    assert ChapterFilter().to_store_filters() == {}


def test_bulk_result_summary():
    result = BulkCreateResult(failed=[BulkCreateFailure(index=0, chapter={}, error="subject: Field required")])

    assert result.summary == "0 chapters created successfully, 1 failed"
