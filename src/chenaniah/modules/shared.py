"""
Shared Router Helpers

Response pieces and error translation used by every module router.
"""

from fastapi import HTTPException
from pydantic import BaseModel, Field

from chenaniah.core.exceptions import ServiceError
from chenaniah.core.phone import PHONE_LOOKUP_MAX_LENGTH


class MessageResponse(BaseModel):
    """Generic success response carrying a message."""

    success: bool = True
    message: str


def to_http_exception(e: ServiceError) -> HTTPException:
    """Convert a service error into an HTTPException with a structured detail."""
    return HTTPException(status_code=e.status_code, detail=e.to_detail())


class PhoneRequest(BaseModel):
    """Request body carrying only a phone number."""

    phone: str = Field(..., min_length=1, max_length=PHONE_LOOKUP_MAX_LENGTH)
