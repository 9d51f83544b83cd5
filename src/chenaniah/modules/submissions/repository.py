"""
Submissions Repository

Database operations for applicant submissions. Only data access lives
here; review rules live in the service layer.
"""

from datetime import UTC, datetime

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from chenaniah.core.phone import matches_key

from .models import Submission, SubmissionStatus
from .schemas import SubmissionCreate


async def create(db: AsyncSession, data: SubmissionCreate) -> Submission:
    """Create a new submission in the pending state."""

    submission = Submission(
        user_id=data.user_id,
        name=data.name.strip(),
        phone=data.phone.strip(),
        church=data.church,
        address=data.address,
        telegram_username=data.telegram_username,
        audio_file_path=data.audio_file_path,
        audio_file_size=data.audio_file_size,
        audio_duration=data.audio_duration,
        status=SubmissionStatus.PENDING.value,
    )

    db.add(submission)
    await db.commit()
    await db.refresh(submission)

    return submission


async def get_by_id(db: AsyncSession, id: int) -> Submission | None:
    """Get submission by ID."""
    return await db.get(Submission, id)


def _apply_filters(stmt: Select, status: str | None, search: str | None) -> Select:
    if status:
        stmt = stmt.where(func.lower(Submission.status) == status.lower())

    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(
            or_(
                Submission.name.ilike(pattern),
                Submission.phone.ilike(pattern),
                Submission.church.ilike(pattern),
                Submission.address.ilike(pattern),
                Submission.telegram_username.ilike(pattern),
            )
        )

    return stmt


async def list_submissions(
    db: AsyncSession,
    *,
    status: str | None = None,
    search: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[Submission]:
    """List submissions, newest first, with optional status and text filters."""
    stmt = _apply_filters(select(Submission), status, search)
    stmt = stmt.order_by(Submission.submitted_at.desc(), Submission.id.desc())
    stmt = stmt.limit(limit).offset(offset)

    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_submissions(
    db: AsyncSession,
    *,
    status: str | None = None,
    search: str | None = None,
) -> int:
    """Count submissions matching the same filters as list_submissions."""
    stmt = _apply_filters(select(func.count(Submission.id)), status, search)
    result = await db.execute(stmt)
    return result.scalar_one()


async def list_by_phone_key(db: AsyncSession, key: str) -> list[Submission]:
    """
    Get every submission whose phone normalises to ``key``, newest first.

    Stored phones are free-format, so this scans the table and compares the
    normalised form of each row in Python.
    """
    result = await db.execute(
        select(Submission).order_by(Submission.submitted_at.desc(), Submission.id.desc())
    )
    return [sub for sub in result.scalars().all() if matches_key(sub.phone, key)]


async def update_status(
    db: AsyncSession,
    id: int,
    status: SubmissionStatus,
    comments: str | None,
    reviewed_by: str,
) -> Submission:
    """
    Record a reviewer decision on a submission.

    Raises:
        ValueError: If the submission does not exist
    """
    submission = await get_by_id(db, id)
    if not submission:
        raise ValueError(f"Submission {id} not found")

    submission.status = status.value
    submission.reviewer_comments = comments
    submission.reviewed_by = reviewed_by
    submission.reviewed_at = datetime.now(UTC)

    await db.commit()
    await db.refresh(submission)

    return submission


async def count_by_status(db: AsyncSession) -> dict[str, int]:
    """Count submissions per lower-cased status."""
    result = await db.execute(
        select(func.lower(Submission.status), func.count(Submission.id)).group_by(
            func.lower(Submission.status)
        )
    )
    return {status: count for status, count in result.all()}
