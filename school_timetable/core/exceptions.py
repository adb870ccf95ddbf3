from typing import Optional

from fastapi import status

from school_timetable.core.enums import ConflictOutcome


class ServiceError(Exception):
    """Base exception for service layer errors."""

    code = "SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        if code is not None:
            self.code = code


class ValidationError(ServiceError):
    """Malformed input detected before any mutation."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class NotFoundError(ServiceError):
    code = "NOT_FOUND"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ConflictError(ServiceError):
    """A period could not be committed because of a scheduling conflict.

    ``kind`` is a ConflictOutcome other than OK; its value doubles as the
    error code surfaced to the client.
    """

    def __init__(self, kind: ConflictOutcome, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT, code=kind.value)
        self.kind = kind


class InUseError(ServiceError):
    """Deletion blocked by rows that still reference the target."""

    code = "IN_USE"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)
