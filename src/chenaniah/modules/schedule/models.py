"""
Schedule Models

Database models for interview time slots, appointments and judge evaluations.
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chenaniah.core.database import Base


class AppointmentStatus(str, enum.Enum):
    """Scheduling status of an appointment."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"
    CANCELLED = "cancelled"


class FinalDecision(str, enum.Enum):
    """Authoritative interview outcome, set independently of the status."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


_INFERRED_DECISIONS = {
    AppointmentStatus.COMPLETED.value: FinalDecision.ACCEPTED,
    AppointmentStatus.NO_SHOW.value: FinalDecision.REJECTED,
}

_KNOWN_DECISIONS = {decision.value: decision for decision in FinalDecision}


def infer_decision(status: str | None, final_decision: str | None) -> FinalDecision | None:
    """
    Outcome of one appointment from its stored status and decision.

    An explicit decision wins. Unrecognised explicit values are ignored and
    the status decides: completed means accepted, no_show means rejected.
    """
    explicit = final_decision.lower() if final_decision else None
    if explicit in _KNOWN_DECISIONS:
        return _KNOWN_DECISIONS[explicit]
    return _INFERRED_DECISIONS.get((status or "").lower())


class TimeSlot(Base):
    """A bookable interview slot."""

    __tablename__ = "time_slots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    label: Mapped[str] = mapped_column(String(20), nullable=False)
    period: Mapped[str | None] = mapped_column(String(20), nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (UniqueConstraint("date", "time", name="uq_time_slots_date_time"),)


class Appointment(Base):
    """
    Interview appointment.

    Re-scheduling creates a new row, so one applicant phone may own several
    appointments. ``status`` and ``final_decision`` are plain strings because
    legacy rows use mixed casing; compare them through the ``normalized_*``
    properties.
    """

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Applicant
    applicant_name: Mapped[str] = mapped_column(String(200), nullable=False)
    applicant_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    applicant_phone: Mapped[str] = mapped_column(String(30), nullable=False)

    # Slot
    scheduled_date: Mapped[str] = mapped_column(String(10), nullable=False)
    scheduled_time: Mapped[str] = mapped_column(String(5), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AppointmentStatus.SCHEDULED.value
    )

    # Audition details
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    selected_song: Mapped[str | None] = mapped_column(String(200), nullable=True)
    additional_song: Mapped[str | None] = mapped_column(String(200), nullable=True)
    additional_song_singer: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Coordinator checks (attendance, then approval for evaluation)
    coordinator_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    coordinator_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    coordinator_approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    coordinator_approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Outcome
    final_decision: Mapped[str | None] = mapped_column(String(20), nullable=True)
    decision_made_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    evaluations: Mapped[list["InterviewEvaluation"]] = relationship(
        "InterviewEvaluation", back_populates="appointment", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_appointments_status", "status"),
        Index("ix_appointments_schedule", "scheduled_date", "scheduled_time"),
    )

    @property
    def normalized_status(self) -> str:
        return (self.status or "").lower()

    def __repr__(self) -> str:
        return (
            f"<Appointment(id={self.id}, date={self.scheduled_date} {self.scheduled_time}, "
            f"status={self.status}, decision={self.final_decision})>"
        )


class InterviewEvaluation(Base):
    """One judge's rating of one criterion for one appointment."""

    __tablename__ = "interview_evaluations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    appointment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
    )
    judge_name: Mapped[str] = mapped_column(String(100), nullable=False)
    criteria_name: Mapped[str] = mapped_column(String(100), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    appointment: Mapped["Appointment"] = relationship("Appointment", back_populates="evaluations")

    __table_args__ = (
        UniqueConstraint(
            "appointment_id",
            "judge_name",
            "criteria_name",
            name="uq_interview_evaluations_appointment_judge_criteria",
        ),
    )
