"""
Service Exceptions

Base error types raised by the service layer. Routers translate them into
HTTP responses of the form ``{"success": false, "error": ..., "code": ...}``.
"""

from typing import Any


class ServiceError(Exception):
    """Base exception for expected business-rule and validation failures."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 400,
        extra: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.extra = extra or {}
        super().__init__(message)

    def to_detail(self) -> dict[str, Any]:
        """Build the response body fields for this error."""
        return {"error": self.message, "code": self.error_code, **self.extra}


class InvalidInputError(ServiceError):
    """Raised when request data is malformed or out of bounds."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="VALIDATION_ERROR", status_code=400)


class NotFoundError(ServiceError):
    """Raised when a referenced record does not exist."""

    def __init__(self, entity: str, entity_id: int | str | None = None):
        message = (
            f"{entity} {entity_id} not found" if entity_id is not None else f"{entity} not found"
        )
        super().__init__(
            message=message,
            error_code=f"{entity.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
        )
