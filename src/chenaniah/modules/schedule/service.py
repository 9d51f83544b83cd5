"""
Schedule Service Layer

Business logic for interview scheduling:
1. Time slot management (single and bulk creation, availability)
2. Public booking, gated on an approved submission
3. Appointment status workflow and coordinator checks
4. Final decisions, judge evaluations and per-criterion averages
"""

import logging
from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from chenaniah.core.exceptions import NotFoundError, ServiceError
from chenaniah.core.phone import require_phone_key
from chenaniah.modules.schedule import repository
from chenaniah.modules.schedule.models import (
    Appointment,
    AppointmentStatus,
    FinalDecision,
    InterviewEvaluation,
    TimeSlot,
    infer_decision,
)
from chenaniah.modules.schedule.schemas import (
    ApplicantLookupResponse,
    AppointmentCreate,
    BulkCreateResponse,
    EvaluationCreate,
    ScheduleStats,
    TimeSlotBulkCreate,
    TimeSlotCreate,
)
from chenaniah.modules.submissions.models import SubmissionStatus
from chenaniah.modules.submissions.service import find_latest_by_phone_key

logger = logging.getLogger(__name__)


# Status workflow. Completed and no_show may be swapped to correct a mistake.
VALID_STATUS_TRANSITIONS: dict[AppointmentStatus, set[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: {
        AppointmentStatus.COMPLETED,
        AppointmentStatus.NO_SHOW,
        AppointmentStatus.CANCELLED,
    },
    AppointmentStatus.COMPLETED: {AppointmentStatus.NO_SHOW},
    AppointmentStatus.NO_SHOW: {AppointmentStatus.COMPLETED},
    # Terminal
    AppointmentStatus.CANCELLED: set(),
}


# ============================================
# Errors
# ============================================


class AppointmentNotFoundError(NotFoundError):
    def __init__(self, appointment_id: int | None = None):
        super().__init__("Appointment", appointment_id)


class TimeSlotNotFoundError(NotFoundError):
    def __init__(self, slot_id: int | None = None):
        super().__init__("Time slot", slot_id)


class TimeSlotExistsError(ServiceError):
    def __init__(self, date: str, time: str):
        super().__init__(
            message=f"A time slot already exists on {date} at {time}",
            error_code="TIME_SLOT_EXISTS",
            status_code=409,
        )


class ActiveAppointmentExistsError(ServiceError):
    """The applicant already holds a scheduled appointment."""

    def __init__(self, appointment: Appointment):
        super().__init__(
            message="You already have a scheduled interview appointment.",
            error_code="ACTIVE_APPOINTMENT_EXISTS",
            status_code=400,
            extra={
                "existing_appointment": {
                    "date": appointment.scheduled_date,
                    "time": appointment.scheduled_time,
                }
            },
        )


class SubmissionRequiredError(ServiceError):
    def __init__(self):
        super().__init__(
            message=(
                "Phone number not found in our system. "
                "Please ensure you have submitted an application first."
            ),
            error_code="SUBMISSION_NOT_FOUND",
            status_code=400,
        )


class ApplicationNotApprovedError(ServiceError):
    """The applicant's submission has not been approved for an interview."""

    _MESSAGES = {
        SubmissionStatus.PENDING.value: (
            "APPLICATION_PENDING",
            "Your application is still under review. "
            "Please wait for approval before scheduling an interview.",
        ),
        SubmissionStatus.REJECTED.value: (
            "APPLICATION_REJECTED",
            "Your application was not approved. "
            "You cannot schedule an interview at this time.",
        ),
    }

    def __init__(self, submission_status: str):
        self.submission_status = submission_status
        code, message = self._MESSAGES.get(
            submission_status,
            (
                "APPLICATION_NOT_APPROVED",
                "Your application must be approved before you can schedule an interview.",
            ),
        )
        super().__init__(message=message, error_code=code, status_code=400)


class InvalidStatusTransitionError(ServiceError):
    def __init__(self, current_status: str, new_status: AppointmentStatus):
        self.current_status = current_status
        self.new_status = new_status
        try:
            valid = VALID_STATUS_TRANSITIONS.get(AppointmentStatus(current_status), set())
        except ValueError:
            valid = set()
        super().__init__(
            message=(
                f"Invalid status transition: {current_status} -> {new_status.value}. "
                f"Valid transitions: {sorted(s.value for s in valid)}"
            ),
            error_code="INVALID_STATUS_TRANSITION",
            status_code=409,
        )


# ============================================
# Time slots
# ============================================


def slot_label(time: str) -> str:
    """12-hour display label, e.g. "14:30" -> "2:30 PM"."""
    hours, minutes = (int(part) for part in time.split(":"))
    suffix = "AM" if hours < 12 else "PM"
    return f"{hours % 12 or 12}:{minutes:02d} {suffix}"


def slot_period(time: str) -> str | None:
    """Morning is 09:00-13:59, afternoon 14:00-17:59; other hours have no period."""
    hours = int(time.split(":")[0])
    if 9 <= hours < 14:
        return "morning"
    if 14 <= hours <= 17:
        return "afternoon"
    return None


def _to_minutes(time: str) -> int:
    hours, minutes = (int(part) for part in time.split(":"))
    return hours * 60 + minutes


def _from_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


async def list_time_slots(db: AsyncSession, date: str | None = None) -> list[TimeSlot]:
    return await repository.list_time_slots(db, date)


async def _add_time_slot(
    db: AsyncSession, date: str, time: str, location: str | None
) -> TimeSlot | None:
    """Create a slot, returning None when one already exists at that date and time."""
    if await repository.get_time_slot(db, date, time):
        return None

    return await repository.create_time_slot(
        db,
        date=date,
        time=time,
        label=slot_label(time),
        period=slot_period(time),
        location=location,
    )


async def create_time_slot(db: AsyncSession, data: TimeSlotCreate) -> TimeSlot:
    """
    Raises:
        TimeSlotExistsError: If a slot already exists at that date and time
    """
    slot = await _add_time_slot(db, data.date, data.time, data.location)
    if slot is None:
        raise TimeSlotExistsError(data.date, data.time)

    logger.info(f"Created time slot {slot.id} on {slot.date} at {slot.time}")
    return slot


async def bulk_create_time_slots(db: AsyncSession, data: TimeSlotBulkCreate) -> BulkCreateResponse:
    """
    Create evenly spaced slots in ``[start_time, end_time)``.

    Existing slots are skipped. With ``number_of_slots`` the interval is the
    window divided by the count (at least one minute) and creation stops once
    that many new slots exist.
    """
    start = _to_minutes(data.start_time)
    end = _to_minutes(data.end_time)

    interval = data.interval_minutes
    if data.number_of_slots:
        interval = max(1, (end - start) // data.number_of_slots)

    created = 0
    skipped = 0
    current = start
    while current < end:
        slot = await _add_time_slot(db, data.date, _from_minutes(current), data.location)
        if slot is None:
            skipped += 1
        else:
            created += 1

        current += interval

        if data.number_of_slots and created >= data.number_of_slots:
            break

    logger.info(f"Bulk slot creation on {data.date}: {created} created, {skipped} skipped")

    return BulkCreateResponse(
        message=f"Created {created} time slots, skipped {skipped} existing slots",
        slots_created=created,
        slots_skipped=skipped,
    )


async def set_time_slot_availability(db: AsyncSession, slot_id: int, available: bool) -> TimeSlot:
    """
    Raises:
        TimeSlotNotFoundError: If the slot does not exist
    """
    slot = await repository.get_time_slot_by_id(db, slot_id)
    if not slot:
        raise TimeSlotNotFoundError(slot_id)
    return await repository.set_time_slot_availability(db, slot, available)


# ============================================
# Appointments
# ============================================


async def list_appointments(db: AsyncSession, search: str | None = None) -> list[Appointment]:
    search = search.strip() if search else None
    return await repository.list_appointments(db, search or None)


async def get_appointment(db: AsyncSession, appointment_id: int) -> Appointment:
    """
    Raises:
        AppointmentNotFoundError: If it does not exist
    """
    appointment = await repository.get_by_id(db, appointment_id)
    if not appointment:
        raise AppointmentNotFoundError(appointment_id)
    return appointment


async def find_active_appointments(db: AsyncSession, phone: str) -> list[Appointment]:
    """
    Scheduled (not yet held) appointments for a phone, newest first.

    Raises:
        InvalidPhoneError: If the phone has fewer than 8 digits
    """
    key = require_phone_key(phone)
    appointments = await repository.list_appointments_by_phone_key(db, key)
    return [
        apt for apt in appointments if apt.normalized_status == AppointmentStatus.SCHEDULED.value
    ]


async def create_appointment(db: AsyncSession, data: AppointmentCreate) -> Appointment:
    """
    Book an interview for an applicant.

    Steps:
    1. Reject when the applicant already holds a scheduled appointment
    2. Require an approved submission for the same phone
    3. Create the appointment and mark the matching slot unavailable

    Raises:
        InvalidPhoneError: If the phone has fewer than 8 digits
        ActiveAppointmentExistsError: If a scheduled appointment already exists
        SubmissionRequiredError: If no submission matches the phone
        ApplicationNotApprovedError: If the submission is not approved
    """
    key = require_phone_key(data.applicant_phone)

    active = await find_active_appointments(db, data.applicant_phone)
    if active:
        logger.warning(f"Booking rejected for ...{key[-4:]}: active appointment exists")
        raise ActiveAppointmentExistsError(active[0])

    submission = await find_latest_by_phone_key(db, key)
    if submission is None:
        logger.warning(f"Booking rejected for ...{key[-4:]}: no submission")
        raise SubmissionRequiredError()

    if submission.normalized_status != SubmissionStatus.APPROVED.value:
        logger.warning(
            f"Booking rejected for ...{key[-4:]}: submission {submission.normalized_status}"
        )
        raise ApplicationNotApprovedError(submission.normalized_status)

    appointment = await repository.create_appointment(db, data)

    slot = await repository.get_time_slot(db, data.scheduled_date, data.scheduled_time)
    if slot:
        await repository.set_time_slot_availability(db, slot, False)

    logger.info(
        f"Created appointment {appointment.id} on {appointment.scheduled_date} "
        f"at {appointment.scheduled_time}"
    )
    return appointment


async def lookup_applicant(db: AsyncSession, phone: str) -> ApplicantLookupResponse:
    """
    Check whether a phone belongs to someone who submitted an application.

    Raises:
        InvalidPhoneError: If the phone has fewer than 8 digits
    """
    key = require_phone_key(phone)
    submission = await find_latest_by_phone_key(db, key)

    if submission is None:
        return ApplicantLookupResponse(is_applicant=False)

    return ApplicantLookupResponse(is_applicant=True, applicant_name=submission.name)


async def update_appointment_status(
    db: AsyncSession,
    appointment_id: int,
    status: AppointmentStatus,
) -> Appointment:
    """
    Move an appointment through the status workflow.

    The final decision is left untouched; it is recorded separately.

    Raises:
        AppointmentNotFoundError: If the appointment does not exist
        InvalidStatusTransitionError: If the workflow does not allow the change
    """
    appointment = await get_appointment(db, appointment_id)
    current = appointment.normalized_status

    if current != status.value:
        try:
            allowed = VALID_STATUS_TRANSITIONS[AppointmentStatus(current)]
        except ValueError:
            allowed = set()
        if status not in allowed:
            logger.warning(f"Rejected transition {current} -> {status.value} on {appointment_id}")
            raise InvalidStatusTransitionError(current, status)

    appointment = await repository.update_status(db, appointment, status)
    logger.info(f"Appointment {appointment_id} status set to {status.value}")
    return appointment


async def record_attendance(db: AsyncSession, appointment_id: int, present: bool) -> Appointment:
    appointment = await get_appointment(db, appointment_id)
    return await repository.set_coordinator_verified(db, appointment, present)


async def record_approval(db: AsyncSession, appointment_id: int, approved: bool) -> Appointment:
    appointment = await get_appointment(db, appointment_id)
    return await repository.set_coordinator_approved(db, appointment, approved)


async def list_evaluation_queue(db: AsyncSession) -> list[Appointment]:
    return await repository.list_verified_and_approved(db)


async def set_final_decision(
    db: AsyncSession,
    appointment_id: int,
    decision: FinalDecision,
    decided_by: str,
) -> Appointment:
    """
    Record the authoritative interview outcome.

    Raises:
        AppointmentNotFoundError: If the appointment does not exist
    """
    appointment = await get_appointment(db, appointment_id)
    appointment = await repository.set_final_decision(db, appointment, decision.value)
    logger.info(f"Appointment {appointment_id} marked {decision.value} by {decided_by}")
    return appointment


# ============================================
# Evaluations
# ============================================


def compute_criteria_averages(evaluations: Iterable[InterviewEvaluation]) -> dict[str, float]:
    """
    Mean rating per criterion across judges.

    Criteria nobody rated do not appear in the result.
    """
    ratings: dict[str, list[int]] = defaultdict(list)
    for evaluation in evaluations:
        ratings[evaluation.criteria_name].append(evaluation.rating)

    return {criteria: sum(values) / len(values) for criteria, values in ratings.items()}


async def submit_evaluation(
    db: AsyncSession,
    appointment_id: int,
    data: EvaluationCreate,
) -> None:
    """
    Store a judge's rating, replacing their earlier rating of the same criterion.

    Raises:
        AppointmentNotFoundError: If the appointment does not exist
    """
    await get_appointment(db, appointment_id)
    await repository.upsert_evaluation(
        db,
        appointment_id=appointment_id,
        judge_name=data.judge_name.strip(),
        criteria_name=data.criteria_name.strip(),
        rating=data.rating,
        comments=data.comments or None,
    )


async def get_evaluations(
    db: AsyncSession,
    appointment_id: int,
) -> tuple[list[InterviewEvaluation], dict[str, float]]:
    """Evaluations for an appointment together with per-criterion averages."""
    evaluations = await repository.list_evaluations(db, appointment_id)
    return evaluations, compute_criteria_averages(evaluations)


# ============================================
# Statistics
# ============================================


async def get_schedule_stats(db: AsyncSession) -> ScheduleStats:
    """Appointment counts; accepted and rejected follow the decision derivation rule."""
    rows = await repository.list_status_and_decisions(db)

    scheduled = cancelled = accepted = rejected = 0
    for status, decision in rows:
        normalized = (status or "").lower()
        if normalized == AppointmentStatus.SCHEDULED.value:
            scheduled += 1
        elif normalized == AppointmentStatus.CANCELLED.value:
            cancelled += 1

        outcome = infer_decision(status, decision)
        if outcome == FinalDecision.ACCEPTED:
            accepted += 1
        elif outcome == FinalDecision.REJECTED:
            rejected += 1

    return ScheduleStats(
        total_appointments=len(rows),
        scheduled=scheduled,
        accepted=accepted,
        rejected=rejected,
        cancelled=cancelled,
    )
