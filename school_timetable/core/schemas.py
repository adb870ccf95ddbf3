from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from school_timetable.core.config import settings

T = TypeVar("T")


class ErrorInfo(BaseModel):
    """Machine-readable error carried in a failed response."""

    code: str
    message: str


class ApiResponse(BaseModel, Generic[T]):
    """Canonical envelope returned by every endpoint.

    ``data`` holds the payload on success (it may legitimately be null, e.g. a
    timetable lookup that found nothing); ``error`` is set only on failure.
    """

    success: bool = True
    message: str = ""
    data: Optional[T] = None
    error: Optional[ErrorInfo] = None
    api_version: str = settings.api_version


def fail(code: str, message: str) -> dict:
    return {
        "success": False,
        "message": message,
        "data": None,
        "error": {"code": code, "message": message},
        "api_version": settings.api_version,
    }
