"""
Submissions Router

Endpoints:
- POST /submissions - Submit an application (public)
- GET /submissions - List submissions with filters and pagination (staff)
- GET /submissions/{id} - Get a single submission (staff)
- PUT /submissions/{id}/status - Approve, reject or reset a submission (staff)
- GET /stats - Submission counts per status (staff)
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from chenaniah.core.auth import CurrentUser, get_staff_user
from chenaniah.core.database import get_db
from chenaniah.core.exceptions import ServiceError
from chenaniah.modules.shared import MessageResponse, to_http_exception
from chenaniah.modules.submissions import service
from chenaniah.modules.submissions.schemas import (
    SubmissionCreate,
    SubmissionCreateResponse,
    SubmissionDetailResponse,
    SubmissionListResponse,
    SubmissionResponse,
    SubmissionStatsResponse,
    UpdateSubmissionStatusRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()
stats_router = APIRouter()


@router.post(
    "",
    response_model=SubmissionCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Application",
)
async def create_submission(
    data: SubmissionCreate,
    db: AsyncSession = Depends(get_db),
) -> SubmissionCreateResponse:
    """Store a new applicant submission in the pending state."""
    try:
        return await service.create_submission(db, data)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.get("", response_model=SubmissionListResponse, summary="List Submissions")
async def list_submissions(
    status_filter: str | None = Query(None, alias="status"),
    search: str | None = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    limit: int = Query(service.DEFAULT_PAGE_SIZE, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_staff_user),
) -> SubmissionListResponse:
    """
    List submissions, newest first.

    Search matches name, phone, church, address and Telegram username
    (case-insensitive).
    """
    return await service.list_submissions(
        db,
        status=status_filter,
        search=search,
        page=page,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{submission_id}",
    response_model=SubmissionDetailResponse,
    summary="Get Submission",
)
async def get_submission(
    submission_id: int,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_staff_user),
) -> SubmissionDetailResponse:
    try:
        submission = await service.get_submission(db, submission_id)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return SubmissionDetailResponse(submission=SubmissionResponse.model_validate(submission))


@router.put(
    "/{submission_id}/status",
    response_model=MessageResponse,
    summary="Update Submission Status",
)
async def update_submission_status(
    submission_id: int,
    data: UpdateSubmissionStatusRequest,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_staff_user),
) -> MessageResponse:
    """Record a review decision. The reviewer is taken from the caller's token."""
    try:
        await service.update_submission_status(
            db,
            submission_id,
            data.status,
            data.comments,
            reviewer=user.username,
        )
    except ServiceError as e:
        logger.warning(f"Status update rejected for submission {submission_id}: {e.message}")
        raise to_http_exception(e) from e

    return MessageResponse(message="Status updated successfully")


@stats_router.get("", response_model=SubmissionStatsResponse, summary="Submission Statistics")
async def get_stats(
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_staff_user),
) -> SubmissionStatsResponse:
    return SubmissionStatsResponse(stats=await service.get_submission_stats(db))
