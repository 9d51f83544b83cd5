"""
Submissions Service Layer

Business logic for applicant submissions: intake, reviewer decisions,
dashboard listing and statistics.
"""

import logging
import math

from sqlalchemy.ext.asyncio import AsyncSession

from chenaniah.core.exceptions import NotFoundError
from chenaniah.core.phone import require_phone_key
from chenaniah.modules.submissions import repository
from chenaniah.modules.submissions.models import Submission, SubmissionStatus
from chenaniah.modules.submissions.schemas import (
    Pagination,
    SubmissionCreate,
    SubmissionCreateResponse,
    SubmissionListResponse,
    SubmissionResponse,
    SubmissionStats,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


class SubmissionNotFoundError(NotFoundError):
    """Raised when a submission id does not exist."""

    def __init__(self, submission_id: int | None = None):
        super().__init__("Submission", submission_id)


async def create_submission(db: AsyncSession, data: SubmissionCreate) -> SubmissionCreateResponse:
    """
    Store a new application.

    Raises:
        InvalidPhoneError: If the phone number has fewer than 8 digits
    """
    key = require_phone_key(data.phone)

    submission = await repository.create(db, data)
    logger.info(f"Created submission {submission.id} for phone key ...{key[-4:]}")

    return SubmissionCreateResponse(submission_id=submission.id)


async def list_submissions(
    db: AsyncSession,
    *,
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> SubmissionListResponse:
    """
    List submissions for the review dashboard.

    ``page`` takes precedence over ``offset`` when it is greater than 1.
    """
    search = search.strip() if search else None
    actual_offset = (page - 1) * limit if page > 1 else offset

    submissions = await repository.list_submissions(
        db, status=status, search=search, limit=limit, offset=actual_offset
    )
    total_count = await repository.count_submissions(db, status=status, search=search)
    total_pages = math.ceil(total_count / limit) if limit else 0

    return SubmissionListResponse(
        submissions=[SubmissionResponse.model_validate(s) for s in submissions],
        pagination=Pagination(
            current_page=page,
            total_pages=total_pages,
            total_count=total_count,
            limit=limit,
            offset=actual_offset,
            has_next=page < total_pages,
            has_prev=page > 1,
        ),
        search_query=search or "",
    )


async def get_submission(db: AsyncSession, submission_id: int) -> Submission:
    """
    Get a submission by id.

    Raises:
        SubmissionNotFoundError: If it does not exist
    """
    submission = await repository.get_by_id(db, submission_id)
    if not submission:
        raise SubmissionNotFoundError(submission_id)
    return submission


async def update_submission_status(
    db: AsyncSession,
    submission_id: int,
    status: SubmissionStatus,
    comments: str | None,
    reviewer: str,
) -> Submission:
    """
    Record a review decision.

    Reviewers may revise an earlier decision, so any status may follow any other.

    Raises:
        SubmissionNotFoundError: If the submission does not exist
    """
    await get_submission(db, submission_id)

    submission = await repository.update_status(db, submission_id, status, comments, reviewer)
    logger.info(f"Submission {submission_id} marked {status.value} by {reviewer}")
    return submission


async def find_latest_by_phone_key(db: AsyncSession, key: str) -> Submission | None:
    """Return the newest submission for a phone match key, if any."""
    submissions = await repository.list_by_phone_key(db, key)
    return submissions[0] if submissions else None


async def get_submission_stats(db: AsyncSession) -> SubmissionStats:
    """Count submissions per review status."""
    counts = await repository.count_by_status(db)
    return SubmissionStats(
        total=sum(counts.values()),
        pending=counts.get(SubmissionStatus.PENDING.value, 0),
        approved=counts.get(SubmissionStatus.APPROVED.value, 0),
        rejected=counts.get(SubmissionStatus.REJECTED.value, 0),
    )
