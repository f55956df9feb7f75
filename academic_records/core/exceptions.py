from typing import Any, List, Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def detail(self) -> Any:
        return self.message


class ValidationError(ServiceError):
    """Malformed or out-of-range input. `fields` names the offending inputs."""

    def __init__(self, message: str, fields: Optional[List[str]] = None) -> None:
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.fields = fields or []

    @property
    def detail(self) -> Any:
        return {"message": self.message, "fields": self.fields}


class NotFoundError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ConstraintError(ServiceError):
    """Unique constraint violation (subject code, student code)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)
