"""
Submission Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from chenaniah.modules.submissions.models import SubmissionStatus


class SubmissionCreate(BaseModel):
    """Request body for POST /submissions."""

    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=30)
    church: str | None = Field(None, max_length=200)
    address: str | None = Field(None, max_length=500)
    telegram_username: str | None = Field(None, max_length=100)
    user_id: int | None = None
    audio_file_path: str | None = Field(None, max_length=500)
    audio_file_size: int | None = Field(None, ge=0)
    audio_duration: float | None = Field(None, ge=0)


class SubmissionResponse(BaseModel):
    """A submission as shown to reviewers."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int | None = None
    name: str
    phone: str
    church: str | None = None
    address: str | None = None
    telegram_username: str | None = None
    audio_file_path: str | None = None
    audio_file_size: int | None = None
    audio_duration: float | None = None
    status: str
    reviewer_comments: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    submitted_at: datetime


class SubmissionCreateResponse(BaseModel):
    """Response after a submission is stored."""

    success: bool = True
    submission_id: int
    message: str = "Application submitted successfully"


class Pagination(BaseModel):
    """Pagination metadata for list endpoints."""

    current_page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    total_count: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)
    offset: int = Field(..., ge=0)
    has_next: bool
    has_prev: bool


class SubmissionListResponse(BaseModel):
    """Paginated submissions for the review dashboard."""

    success: bool = True
    submissions: list[SubmissionResponse]
    pagination: Pagination
    search_query: str = ""


class SubmissionDetailResponse(BaseModel):
    success: bool = True
    submission: SubmissionResponse


class UpdateSubmissionStatusRequest(BaseModel):
    """Request body for PUT /submissions/{id}/status."""

    status: SubmissionStatus
    comments: str | None = Field(None, max_length=2000)


class SubmissionStats(BaseModel):
    total: int = Field(..., ge=0)
    pending: int = Field(..., ge=0)
    approved: int = Field(..., ge=0)
    rejected: int = Field(..., ge=0)


class SubmissionStatsResponse(BaseModel):
    success: bool = True
    stats: SubmissionStats
