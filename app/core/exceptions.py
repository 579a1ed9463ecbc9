from typing import Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class MalformedRequest(ServiceError):
    """Payload absent, empty, or not a JSON object."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class ValidationError(ServiceError):
    """A required field is missing/blank or the date range is invalid."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)
        self.field = field


class StoreError(ServiceError):
    """Persistence or read failure against the record store."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)


class StoreUnavailable(StoreError):
    """Raised by queries when the record store cannot be read."""


class CalendarError(ServiceError):
    """Calendar event could not be created. Never surfaced to callers."""


class MailError(ServiceError):
    """An email could not be sent. Never surfaced to callers."""
