"""
API routes for chapters.
"""

import json
from typing import Any, Optional
from uuid import UUID

from fastapi import Depends, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from ....common.config.settings import Settings
from ....common.dependencies import (
    get_app_settings,
    get_chapter_service,
    get_analytics_service,
    require_admin,
)
from ....common.exceptions import BadRequestError, PayloadTooLargeError, ValidationError
from ....common.models.base import APIResponse
from ....common.routers.base import ChapterAPIRouter
from ..models.domain import Chapter, Subject, ChapterClass, ChapterStatus
from ..models.request import ChapterCreateRequest, ChapterUpdateRequest, ChapterFilter
from ..models.response import (
    ChapterListResponse,
    BulkCreateResult,
    AnalyticsResponse,
    FilterOptionsResponse,
)
from ..services.chapter_service import ChapterService
from ..services.analytics_service import AnalyticsService

router = ChapterAPIRouter(prefix="/chapters", tags=["Chapters"])

UPLOAD_FIELD = "chapters"
NO_DATA_MESSAGE = (
    "Please provide chapters data as JSON array in request body or upload a JSON file"
)


def validate_chapter_id(chapter_id: str) -> str:
    """Normalize a chapter id, rejecting anything that is not a UUID."""
    try:
        return str(UUID(chapter_id))
    except ValueError:
        raise ValidationError(
            message="Invalid chapter ID format",
            errors=[{"field": "id", "message": "Invalid ID format", "value": chapter_id}]
        )


def _not_found(error: str) -> JSONResponse:
    return APIResponse.error_response(error).to_response(status.HTTP_404_NOT_FOUND)


async def _read_upload(file: UploadFile, max_bytes: int) -> Any:
    if file.content_type != "application/json":
        raise BadRequestError("Unsupported file type. Only JSON files are allowed")

    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise PayloadTooLargeError(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB",
            limit_bytes=max_bytes
        )

    try:
        return json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequestError("Invalid JSON file format")


def _body_too_large(max_bytes: int) -> PayloadTooLargeError:
    return PayloadTooLargeError(
        f"Request body too large. Maximum size is {max_bytes // (1024 * 1024)}MB",
        limit_bytes=max_bytes
    )


async def _read_body(request: Request, max_bytes: int) -> Any:
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise _body_too_large(max_bytes)

    body = await request.body()
    if len(body) > max_bytes:
        raise _body_too_large(max_bytes)
    if not body.strip():
        raise BadRequestError(NO_DATA_MESSAGE)

    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequestError("Invalid JSON format")

    if not isinstance(data, list):
        raise BadRequestError(NO_DATA_MESSAGE)
    return data


@router.get(
    "",
    response_model=APIResponse[ChapterListResponse],
    summary="List chapters",
    description="Filtered, paginated chapter list, newest first"
)
async def list_chapters(
    subject: Optional[Subject] = Query(None, description="Filter by subject"),
    class_name: Optional[ChapterClass] = Query(None, alias="class", description="Filter by class"),
    unit: Optional[str] = Query(None, min_length=1, max_length=100, description="Filter by unit"),
    chapter_status: Optional[ChapterStatus] = Query(None, alias="status", description="Filter by status"),
    weak_chapters: Optional[str] = Query(
        None, alias="weakChapters", description="Only weak (true) or non-weak (false) chapters"
    ),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    service: ChapterService = Depends(get_chapter_service)
):
    try:
        filters = ChapterFilter.model_validate({
            "subject": subject,
            "class": class_name,
            "unit": unit,
            "status": chapter_status,
            "weakChapters": weak_chapters,
        })
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e)

    result = await service.list_chapters(filters, page=page, limit=limit)
    return APIResponse.success_response(data=result.data).to_response()


@router.get(
    "/analytics",
    response_model=APIResponse[AnalyticsResponse],
    summary="Chapter analytics",
    description="Status totals, completion percentage and per-subject breakdown"
)
async def get_analytics(service: AnalyticsService = Depends(get_analytics_service)):
    result = await service.get_analytics()
    return APIResponse.success_response(data=result.data).to_response()


@router.get(
    "/filters",
    response_model=APIResponse[FilterOptionsResponse],
    summary="Filter options",
    description="Distinct subjects, classes, units and statuses present in the data"
)
async def get_filter_options(service: AnalyticsService = Depends(get_analytics_service)):
    result = await service.get_filter_options()
    return APIResponse.success_response(data=result.data).to_response()


@router.get(
    "/{chapter_id}",
    response_model=APIResponse[Chapter],
    summary="Get chapter"
)
async def get_chapter(
    chapter_id: str,
    service: ChapterService = Depends(get_chapter_service)
):
    result = await service.get_chapter(validate_chapter_id(chapter_id))
    if not result.success:
        return _not_found(result.error)
    return APIResponse.success_response(data=result.data).to_response()


@router.post(
    "",
    response_model=APIResponse[BulkCreateResult],
    status_code=status.HTTP_201_CREATED,
    summary="Upload chapters",
    description=(
        "Create chapters from a JSON array body or a JSON file uploaded in the "
        "'chapters' form field. Returns 201 when every record was created, 207 "
        "when some failed and 400 when none were created."
    ),
    dependencies=[Depends(require_admin)]
)
async def upload_chapters(
    request: Request,
    service: ChapterService = Depends(get_chapter_service),
    settings: Settings = Depends(get_app_settings)
):
    max_bytes = settings.max_upload_size_bytes
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get(UPLOAD_FIELD)
        if not isinstance(upload, UploadFile):
            raise BadRequestError(NO_DATA_MESSAGE)
        records = await _read_upload(upload, max_bytes)
    else:
        records = await _read_body(request, max_bytes)

    if not isinstance(records, list):
        raise BadRequestError("Chapters data must be an array")
    if not records:
        raise BadRequestError("Chapters array cannot be empty")

    result = await service.create_chapters(records)

    if not result.success:
        status_code = status.HTTP_400_BAD_REQUEST
    elif result.data.failed:
        status_code = status.HTTP_207_MULTI_STATUS
    else:
        status_code = status.HTTP_201_CREATED

    return APIResponse(
        success=result.success,
        data=result.data,
        message=result.message
    ).to_response(status_code)


@router.post(
    "/single",
    response_model=APIResponse[Chapter],
    status_code=status.HTTP_201_CREATED,
    summary="Create chapter",
    dependencies=[Depends(require_admin)]
)
async def create_chapter(
    payload: ChapterCreateRequest,
    service: ChapterService = Depends(get_chapter_service)
):
    result = await service.create_chapter(payload)
    return APIResponse.success_response(
        data=result.data, message=result.message
    ).to_response(status.HTTP_201_CREATED)


@router.put(
    "/{chapter_id}",
    response_model=APIResponse[Chapter],
    summary="Update chapter",
    dependencies=[Depends(require_admin)]
)
async def update_chapter(
    chapter_id: str,
    payload: ChapterUpdateRequest,
    service: ChapterService = Depends(get_chapter_service)
):
    result = await service.update_chapter(validate_chapter_id(chapter_id), payload)
    if not result.success:
        return _not_found(result.error)
    return APIResponse.success_response(data=result.data, message=result.message).to_response()


@router.delete(
    "/{chapter_id}",
    response_model=APIResponse[None],
    summary="Delete chapter",
    dependencies=[Depends(require_admin)]
)
async def delete_chapter(
    chapter_id: str,
    service: ChapterService = Depends(get_chapter_service)
):
    result = await service.delete_chapter(validate_chapter_id(chapter_id))
    if not result.success:
        return _not_found(result.error)
    return APIResponse.success_response(message=result.message).to_response()
