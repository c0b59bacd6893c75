"""
Application exception handlers.

Every error leaves the service in the standard envelope:
``{success: false, error, details?, timestamp}``.
"""
from typing import Any, Callable, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import ChapterAPIException, ValidationError, RateLimitError
from .models.base import APIResponse

ResponseFormatter = Callable[[str, Optional[List[Dict[str, Any]]]], Dict[str, Any]]


def _api_response_formatter(
    error: str,
    details: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """Format an error body using the APIResponse envelope."""
    return APIResponse.error_response(error=error, details=details or None).to_content()


def _request_validation_details(exc: RequestValidationError) -> List[Dict[str, Any]]:
    details = []
    for error in exc.errors():
        # Drop the "query"/"path"/"body" source prefix
        location = [str(part) for part in error.get("loc", ())]
        if len(location) > 1 and location[0] in ("query", "path", "body", "header"):
            location = location[1:]
        details.append({
            "field": ".".join(location),
            "message": error.get("msg"),
            "value": error.get("input"),
        })
    return jsonable_encoder(details)


class ExceptionHandlerRegistry:
    """Registers the application's exception handlers."""

    def __init__(
        self,
        response_formatter: Optional[ResponseFormatter] = None,
        is_production: bool = True
    ):
        self.response_formatter = response_formatter or _api_response_formatter
        self.is_production = is_production

    def register_handlers(self, app: FastAPI) -> None:
        @app.exception_handler(ChapterAPIException)
        async def chapter_api_exception_handler(request: Request, exc: ChapterAPIException):
            """Handle application exceptions."""
            details = jsonable_encoder(exc.errors) if isinstance(exc, ValidationError) else None
            content = self.response_formatter(exc.message, details)
            headers = None
            if isinstance(exc, RateLimitError) and exc.retry_after:
                content["retryAfter"] = exc.retry_after
                headers = {"Retry-After": str(exc.retry_after)}
            if exc.status_code >= 500:
                logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
            return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

        @app.exception_handler(RequestValidationError)
        async def request_validation_handler(request: Request, exc: RequestValidationError):
            """Handle request parsing errors as a 400 with per-field details."""
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=self.response_formatter("Validation failed", _request_validation_details(exc))
            )

        @app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(request: Request, exc: StarletteHTTPException):
            """Handle routing errors such as unknown paths or methods."""
            if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
                message = f"Route {request.url.path} not found"
            else:
                message = str(exc.detail)
            return JSONResponse(
                status_code=exc.status_code,
                content=self.response_formatter(message, None),
                headers=getattr(exc, "headers", None)
            )

        @app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle unexpected exceptions."""
            logger.opt(exception=exc).error(f"Unhandled exception on {request.method} {request.url.path}")

            if self.is_production:
                message = "Internal server error occurred"
            else:
                message = str(exc) or exc.__class__.__name__

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=self.response_formatter(message, None)
            )


def register_exception_handlers(app: FastAPI, is_production: bool = True) -> None:
    """Register exception handlers for the application."""
    registry = ExceptionHandlerRegistry(is_production=is_production)
    registry.register_handlers(app)
