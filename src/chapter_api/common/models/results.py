"""
Typed service results.

Expected outcomes such as "not found" are values, not exceptions; routers map
a failed result to the matching HTTP status.
"""
from dataclasses import dataclass
from typing import Optional, TypeVar, Generic

T = TypeVar('T')


@dataclass
class ServiceResult(Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Optional[T] = None, message: Optional[str] = None) -> "ServiceResult[T]":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str) -> "ServiceResult[T]":
        return cls(success=False, error=error)
