"""
Submission Models

An applicant's initial audition/application record. Submissions are
created when the applicant applies and only change through reviewer actions.
"""

import enum
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Float, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from chenaniah.core.database import Base


class SubmissionStatus(str, enum.Enum):
    """Review status of a submission."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Submission(Base):
    """
    Applicant submission.

    ``phone`` is stored exactly as the applicant typed it. ``status`` is a
    plain string column because legacy rows use mixed casing; compare it
    through ``normalized_status``.
    """

    __tablename__ = "submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # External bot user id (applications arrive through a messaging bot)
    user_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    # Applicant
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    church: Mapped[str | None] = mapped_column(String(200), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    telegram_username: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Audition recording
    audio_file_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    audio_file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    audio_duration: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Review
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SubmissionStatus.PENDING.value
    )
    reviewer_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Audit timestamps
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_submissions_status", "status"),
        Index("ix_submissions_submitted_at", "submitted_at"),
    )

    @property
    def normalized_status(self) -> str:
        return (self.status or "").lower()

    def __repr__(self) -> str:
        return f"<Submission(id={self.id}, name={self.name}, status={self.status})>"
