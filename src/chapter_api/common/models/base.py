"""
Base models for API requests and responses.
"""
from typing import Optional, Any, Dict, List, TypeVar, Generic
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from fastapi.responses import JSONResponse

from ..utils.datetime import utc_now, format_iso8601


class BaseSchema(BaseModel):
    """Base schema with common configuration.

    Fields are declared in snake_case and exchanged as camelCase.
    """
    model_config = ConfigDict(
        from_attributes=True,
        use_enum_values=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
    )

    def to_payload(self) -> Dict[str, Any]:
        """Dump to the JSON-compatible wire shape."""
        return self.model_dump(mode="json", by_alias=True)


class HealthStatus(str, Enum):
    """Health check status."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


T = TypeVar('T')


def _timestamp() -> str:
    return format_iso8601(utc_now())


class APIResponse(BaseSchema, Generic[T]):
    """Standard API response wrapper."""
    success: bool = Field(description="Operation success flag")
    data: Optional[T] = Field(None, description="Response data")
    error: Optional[str] = Field(None, description="Error message")
    message: Optional[str] = Field(None, description="Response message")
    details: Optional[List[Dict[str, Any]]] = Field(None, description="Error details")
    timestamp: str = Field(default_factory=_timestamp, description="Response time (ISO 8601)")

    @classmethod
    def success_response(
        cls,
        data: Optional[T] = None,
        message: Optional[str] = None
    ) -> "APIResponse[T]":
        """Create a success response."""
        return cls(success=True, data=data, message=message)

    @classmethod
    def error_response(
        cls,
        error: str,
        details: Optional[List[Dict[str, Any]]] = None,
        data: Optional[T] = None,
        message: Optional[str] = None
    ) -> "APIResponse[T]":
        """Create an error response."""
        return cls(success=False, error=error, details=details, data=data, message=message)

    def to_content(self) -> Dict[str, Any]:
        """Dump for a JSONResponse, leaving out unset envelope members."""
        payload = self.to_payload()
        return {key: value for key, value in payload.items() if value is not None}

    def to_response(self, status_code: int = 200) -> JSONResponse:
        """Wrap the envelope in a JSONResponse with the given status."""
        return JSONResponse(status_code=status_code, content=self.to_content())
