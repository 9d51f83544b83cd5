"""
Applicant Schemas

The fixed-shape status view returned to applicants.
"""

from datetime import datetime

from pydantic import BaseModel

from chenaniah.modules.applicants.resolver import (
    AppointmentResolution,
    OverallStatus,
    derive_overall_status,
    status_message,
)
from chenaniah.modules.schedule.models import FinalDecision
from chenaniah.modules.submissions.models import Submission

DEFAULT_APPLICANT_NAME = "Applicant"


class StatusView(BaseModel):
    """
    Applicant status for POST /applicant/status.

    Every branch returns the same fields; fields that do not apply are null.
    Build instances through the named constructors rather than directly.
    """

    success: bool = True
    is_applicant: bool
    message: str | None = None
    applicant_name: str | None = None
    overall_status: OverallStatus | None = None
    status_message: str | None = None
    final_decision: FinalDecision | None = None
    decision_made_at: datetime | None = None
    appointment_date: str | None = None
    appointment_time: str | None = None
    submission_status: str | None = None
    submitted_at: datetime | None = None
    reviewer_comments: str | None = None

    @classmethod
    def not_found(cls) -> "StatusView":
        return cls(is_applicant=False, message="Phone number not found in our system")

    @classmethod
    def from_both(
        cls,
        submission: Submission,
        resolution: AppointmentResolution,
    ) -> "StatusView":
        """Submission plus (possibly empty) appointment history."""
        overall = derive_overall_status(resolution, submission)
        return cls(
            is_applicant=True,
            applicant_name=submission.name,
            overall_status=overall,
            status_message=status_message(overall, resolution, submission),
            final_decision=resolution.final_decision,
            decision_made_at=resolution.decision_made_at,
            appointment_date=resolution.appointment_date,
            appointment_time=resolution.appointment_time,
            submission_status=submission.normalized_status,
            submitted_at=submission.submitted_at,
            reviewer_comments=submission.reviewer_comments,
        )

    @classmethod
    def from_submission_only(cls, submission: Submission) -> "StatusView":
        return cls.from_both(submission, AppointmentResolution())

    @classmethod
    def from_appointment_only(cls, resolution: AppointmentResolution) -> "StatusView":
        """Appointments exist but no submission matches the phone."""
        overall = derive_overall_status(resolution, None)
        return cls(
            is_applicant=True,
            applicant_name=resolution.applicant_name or DEFAULT_APPLICANT_NAME,
            overall_status=overall,
            status_message=status_message(overall, resolution, None),
            final_decision=resolution.final_decision,
            decision_made_at=resolution.decision_made_at,
            appointment_date=resolution.appointment_date,
            appointment_time=resolution.appointment_time,
        )
