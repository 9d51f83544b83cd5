"""
Schedule Router

Endpoints:
- GET /schedule/stats - Appointment counts (staff)
- GET /schedule/appointments - List appointments (staff)
- POST /schedule/appointments - Book an interview (public)
- POST /schedule/appointments/check - Active appointments for a phone (public)
- POST /schedule/verify-applicant - Whether a phone has applied (public)
- PUT /schedule/appointments/{id} - Update status (staff)
- PUT /schedule/appointments/{id}/attendance - Mark attendance (coordinator, admin)
- PUT /schedule/appointments/{id}/approve - Clear for judging (coordinator, admin)
- PUT /schedule/appointments/{id}/decision - Record final decision (decision roles)
- GET /schedule/appointments/evaluation - Judging queue (judge, admin)
- POST /schedule/appointments/{id}/evaluation - Submit a rating (judge, admin)
- GET /schedule/appointments/{id}/evaluations - Ratings and averages
- GET/POST /schedule/time-slots, POST /schedule/time-slots/bulk,
  PUT /schedule/time-slots/{id} - Slot management
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from chenaniah.core.auth import CurrentUser, get_decision_maker, get_staff_user, require_roles
from chenaniah.core.database import get_db
from chenaniah.core.exceptions import ServiceError
from chenaniah.modules.schedule import service
from chenaniah.modules.schedule.schemas import (
    ApplicantLookupResponse,
    AppointmentCheckResponse,
    AppointmentCreate,
    AppointmentCreateResponse,
    AppointmentListResponse,
    AppointmentResponse,
    ApprovalRequest,
    AttendanceRequest,
    BulkCreateResponse,
    DecisionRequest,
    EvaluationCreate,
    EvaluationListResponse,
    EvaluationResponse,
    ScheduleStatsResponse,
    TimeSlotBulkCreate,
    TimeSlotCreate,
    TimeSlotListResponse,
    TimeSlotResponse,
    TimeSlotUpdate,
    UpdateAppointmentStatusRequest,
)
from chenaniah.modules.shared import MessageResponse, PhoneRequest, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()

coordinator_access = require_roles("coordinator", "admin")
judge_access = require_roles("judge", "admin")
evaluation_viewer_access = require_roles("judge", "admin", "coordinator")


# ============================================
# Statistics and listing
# ============================================


@router.get("/stats", response_model=ScheduleStatsResponse, summary="Schedule Statistics")
async def get_stats(
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_staff_user),
) -> ScheduleStatsResponse:
    return ScheduleStatsResponse(stats=await service.get_schedule_stats(db))


@router.get("/appointments", response_model=AppointmentListResponse, summary="List Appointments")
async def list_appointments(
    search: str | None = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_staff_user),
) -> AppointmentListResponse:
    """List appointments newest first. Search matches applicant name or phone."""
    appointments = await service.list_appointments(db, search)
    return AppointmentListResponse(
        appointments=[AppointmentResponse.model_validate(a) for a in appointments]
    )


@router.get(
    "/appointments/evaluation",
    response_model=AppointmentListResponse,
    summary="Appointments Ready For Evaluation",
)
async def list_evaluation_queue(
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(judge_access),
) -> AppointmentListResponse:
    """Appointments a coordinator marked present and approved, soonest first."""
    appointments = await service.list_evaluation_queue(db)
    return AppointmentListResponse(
        appointments=[AppointmentResponse.model_validate(a) for a in appointments]
    )


# ============================================
# Public booking
# ============================================


@router.post(
    "/appointments",
    response_model=AppointmentCreateResponse,
    summary="Book Interview",
    description="""
Book an interview slot.

The applicant must have an approved submission for the same phone number
(matched on the last 8 digits) and no other scheduled appointment.
""",
)
async def create_appointment(
    data: AppointmentCreate,
    db: AsyncSession = Depends(get_db),
) -> AppointmentCreateResponse:
    try:
        appointment = await service.create_appointment(db, data)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return AppointmentCreateResponse(appointment_id=appointment.id)


@router.post(
    "/appointments/check",
    response_model=AppointmentCheckResponse,
    summary="Check Existing Appointment",
)
async def check_existing_appointment(
    data: PhoneRequest,
    db: AsyncSession = Depends(get_db),
) -> AppointmentCheckResponse:
    try:
        active = await service.find_active_appointments(db, data.phone)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return AppointmentCheckResponse(
        has_existing_appointment=bool(active),
        appointments=[AppointmentResponse.model_validate(a) for a in active],
    )


@router.post(
    "/verify-applicant",
    response_model=ApplicantLookupResponse,
    summary="Verify Applicant",
)
async def verify_applicant(
    data: PhoneRequest,
    db: AsyncSession = Depends(get_db),
) -> ApplicantLookupResponse:
    try:
        return await service.lookup_applicant(db, data.phone)
    except ServiceError as e:
        raise to_http_exception(e) from e


# ============================================
# Staff workflow
# ============================================


@router.put(
    "/appointments/{appointment_id}",
    response_model=MessageResponse,
    summary="Update Appointment Status",
)
async def update_appointment_status(
    appointment_id: int,
    data: UpdateAppointmentStatusRequest,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_staff_user),
) -> MessageResponse:
    """
    Valid transitions: scheduled -> completed, no_show or cancelled;
    completed <-> no_show. Cancelled appointments cannot change.
    """
    try:
        await service.update_appointment_status(db, appointment_id, data.status)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return MessageResponse(message="Appointment status updated successfully")


@router.put(
    "/appointments/{appointment_id}/attendance",
    response_model=MessageResponse,
    summary="Mark Attendance",
)
async def mark_attendance(
    appointment_id: int,
    data: AttendanceRequest,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(coordinator_access),
) -> MessageResponse:
    try:
        await service.record_attendance(db, appointment_id, data.present)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return MessageResponse(message="Attendance updated")


@router.put(
    "/appointments/{appointment_id}/approve",
    response_model=MessageResponse,
    summary="Approve For Evaluation",
)
async def approve_applicant(
    appointment_id: int,
    data: ApprovalRequest,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(coordinator_access),
) -> MessageResponse:
    try:
        await service.record_approval(db, appointment_id, data.approved)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return MessageResponse(message="Approval status updated")


@router.put(
    "/appointments/{appointment_id}/decision",
    response_model=MessageResponse,
    summary="Set Final Decision",
)
async def set_final_decision(
    appointment_id: int,
    data: DecisionRequest,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_decision_maker),
) -> MessageResponse:
    """Record the interview outcome. It overrides whatever the status implies."""
    try:
        await service.set_final_decision(db, appointment_id, data.decision, user.username)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return MessageResponse(message=f"Applicant marked as {data.decision.value}")


# ============================================
# Evaluations
# ============================================


@router.post(
    "/appointments/{appointment_id}/evaluation",
    response_model=MessageResponse,
    summary="Submit Evaluation",
)
async def submit_evaluation(
    appointment_id: int,
    data: EvaluationCreate,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(judge_access),
) -> MessageResponse:
    """Rate one criterion from 0 to 5. Re-submitting replaces the earlier rating."""
    try:
        await service.submit_evaluation(db, appointment_id, data)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return MessageResponse(message="Evaluation submitted successfully")


@router.get(
    "/appointments/{appointment_id}/evaluations",
    response_model=EvaluationListResponse,
    summary="Get Evaluations",
)
async def get_evaluations(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(evaluation_viewer_access),
) -> EvaluationListResponse:
    evaluations, averages = await service.get_evaluations(db, appointment_id)
    return EvaluationListResponse(
        evaluations=[EvaluationResponse.model_validate(e) for e in evaluations],
        averages=averages,
    )


# ============================================
# Time slots
# ============================================


@router.get("/time-slots", response_model=TimeSlotListResponse, summary="List Time Slots")
async def list_time_slots(
    date: str | None = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    db: AsyncSession = Depends(get_db),
) -> TimeSlotListResponse:
    slots = await service.list_time_slots(db, date)
    return TimeSlotListResponse(time_slots=[TimeSlotResponse.model_validate(s) for s in slots])


@router.post("/time-slots", response_model=MessageResponse, summary="Create Time Slot")
async def create_time_slot(
    data: TimeSlotCreate,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_staff_user),
) -> MessageResponse:
    try:
        await service.create_time_slot(db, data)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return MessageResponse(message="Time slot created successfully")


@router.post(
    "/time-slots/bulk",
    response_model=BulkCreateResponse,
    summary="Bulk Create Time Slots",
)
async def bulk_create_time_slots(
    data: TimeSlotBulkCreate,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_staff_user),
) -> BulkCreateResponse:
    return await service.bulk_create_time_slots(db, data)


@router.put("/time-slots/{slot_id}", response_model=MessageResponse, summary="Update Time Slot")
async def update_time_slot(
    slot_id: int,
    data: TimeSlotUpdate,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_staff_user),
) -> MessageResponse:
    try:
        await service.set_time_slot_availability(db, slot_id, data.available)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return MessageResponse(message="Time slot updated successfully")
