"""
Applicant Lifecycle Resolver

Pure functions that turn an applicant's submission and appointment records
into a single verdict. Nothing here touches the database, so the same record
set always resolves to the same result.

Lifecycle:
    submission (pending -> approved/rejected)
        -> appointment (scheduled -> completed/no_show/cancelled)
        -> final decision (accepted/rejected)
        -> one student registration per accepted appointment

Decision derivation for a single appointment:
1. An explicit ``final_decision`` wins.
2. Otherwise ``completed`` counts as accepted and ``no_show`` as rejected.
3. Anything else has no decision yet.
"""

import enum
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from chenaniah.modules.schedule.models import (
    Appointment,
    AppointmentStatus,
    FinalDecision,
    infer_decision,
)
from chenaniah.modules.submissions.models import Submission, SubmissionStatus


class OverallStatus(str, enum.Enum):
    """Applicant-facing summary of where an applicant is in the pipeline."""

    PENDING = "pending"
    APPROVED = "approved"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


def derive_decision(appointment: Appointment) -> FinalDecision | None:
    """
    Derive the outcome of one appointment.

    An explicit final decision overrides whatever the status implies.
    Unrecognised explicit values are ignored and the status is used instead.
    """
    return infer_decision(appointment.status, appointment.final_decision)


@dataclass(frozen=True)
class AppointmentResolution:
    """
    Result of scanning an applicant's appointments.

    Attributes:
        final_decision: Decision of the first decisive appointment, if any
        decision_made_at: When that decision was recorded
        appointment: The decisive appointment, or else the newest undecided one
        applicant_name: First applicant name found while scanning
    """

    final_decision: FinalDecision | None = None
    decision_made_at: datetime | None = None
    appointment: Appointment | None = None
    applicant_name: str | None = None

    @property
    def current_status(self) -> str | None:
        return self.appointment.normalized_status if self.appointment else None

    @property
    def appointment_date(self) -> str | None:
        return self.appointment.scheduled_date if self.appointment else None

    @property
    def appointment_time(self) -> str | None:
        return self.appointment.scheduled_time if self.appointment else None

    @property
    def is_accepted(self) -> bool:
        return self.final_decision == FinalDecision.ACCEPTED


def resolve_appointments(appointments: Sequence[Appointment]) -> AppointmentResolution:
    """
    Scan appointments newest first and stop at the first decisive one.

    Undecided appointments are skipped, but the first of them is remembered
    as the current appointment in case no later one carries a decision.

    Args:
        appointments: The applicant's appointments, newest first

    Returns:
        AppointmentResolution (empty when there are no appointments)
    """
    applicant_name: str | None = None
    current: Appointment | None = None

    for appointment in appointments:
        if applicant_name is None and appointment.applicant_name:
            applicant_name = appointment.applicant_name

        decision = derive_decision(appointment)
        if decision is not None:
            return AppointmentResolution(
                final_decision=decision,
                decision_made_at=appointment.decision_made_at,
                appointment=appointment,
                applicant_name=applicant_name,
            )

        if current is None and appointment.status:
            current = appointment

    return AppointmentResolution(appointment=current, applicant_name=applicant_name)


def derive_overall_status(
    resolution: AppointmentResolution,
    submission: Submission | None,
) -> OverallStatus:
    """
    Combine the appointment outcome with the submission review status.

    A final decision always wins. Without one, the submission's review status
    decides; with no submission at all, a scheduled interview implies the
    application was approved.
    """
    if resolution.final_decision == FinalDecision.ACCEPTED:
        return OverallStatus.ACCEPTED
    if resolution.final_decision == FinalDecision.REJECTED:
        return OverallStatus.REJECTED

    if submission is not None:
        if submission.normalized_status == SubmissionStatus.APPROVED.value:
            return OverallStatus.APPROVED
        if submission.normalized_status == SubmissionStatus.REJECTED.value:
            return OverallStatus.REJECTED
        return OverallStatus.PENDING

    if resolution.current_status == AppointmentStatus.SCHEDULED.value:
        return OverallStatus.APPROVED
    return OverallStatus.PENDING


def status_message(
    overall: OverallStatus,
    resolution: AppointmentResolution,
    submission: Submission | None,
) -> str:
    """
    Applicant-facing explanation of the overall status and the next step.

    Without a submission, an approved status can only come from a scheduled
    interview, so the message says so. With one, approval refers to the
    application review.
    """
    if overall == OverallStatus.ACCEPTED:
        return "Congratulations! You have been accepted."
    if overall == OverallStatus.APPROVED:
        if submission is None:
            return "Your interview has been scheduled."
        return (
            "Your application has been approved. "
            "Interview scheduling will be available soon."
        )
    if overall == OverallStatus.REJECTED:
        rejected_on_review = (
            resolution.final_decision is None
            and submission is not None
            and submission.normalized_status == SubmissionStatus.REJECTED.value
        )
        if rejected_on_review:
            return "Your application was not approved at this time."
        return "Unfortunately, your application was not approved at this time."
    return "Your application is still under review. Please check back later."
