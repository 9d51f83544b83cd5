"""
Schedule Schemas

Pydantic schemas for time slots, appointments, decisions and evaluations.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from chenaniah.modules.schedule.models import AppointmentStatus, FinalDecision

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


# ============================================
# Time slots
# ============================================


class TimeSlotCreate(BaseModel):
    date: str = Field(..., pattern=DATE_PATTERN)
    time: str = Field(..., pattern=TIME_PATTERN)
    location: str | None = Field(None, max_length=200)


class TimeSlotBulkCreate(BaseModel):
    """
    Generate slots between two times on one date.

    When ``number_of_slots`` is given the interval is derived from it and
    ``interval_minutes`` is ignored.
    """

    date: str = Field(..., pattern=DATE_PATTERN)
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    location: str = Field(..., min_length=1, max_length=200)
    interval_minutes: int = Field(30, ge=1, le=720)
    number_of_slots: int | None = Field(None, ge=1, le=500)

    @model_validator(mode="after")
    def validate_range(self) -> "TimeSlotBulkCreate":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class TimeSlotUpdate(BaseModel):
    available: bool


class TimeSlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: str
    time: str
    label: str
    period: str | None
    location: str | None
    available: bool


class TimeSlotListResponse(BaseModel):
    success: bool = True
    time_slots: list[TimeSlotResponse] = Field(serialization_alias="timeSlots")


class BulkCreateResponse(BaseModel):
    success: bool = True
    message: str
    slots_created: int
    slots_skipped: int


# ============================================
# Appointments
# ============================================


class AppointmentCreate(BaseModel):
    """Public booking request."""

    applicant_name: str = Field(..., min_length=1, max_length=200)
    applicant_email: EmailStr | None = None
    applicant_phone: str = Field(..., min_length=1, max_length=30)
    scheduled_date: str = Field(..., pattern=DATE_PATTERN)
    scheduled_time: str = Field(..., pattern=TIME_PATTERN)
    notes: str | None = Field(None, max_length=2000)
    selected_song: str | None = Field(None, max_length=200)
    additional_song: str | None = Field(None, max_length=200)
    additional_song_singer: str | None = Field(None, max_length=200)

    @field_validator("applicant_email", mode="before")
    @classmethod
    def blank_email_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    applicant_name: str
    applicant_email: str | None
    applicant_phone: str
    scheduled_date: str
    scheduled_time: str
    status: str
    notes: str | None
    selected_song: str | None
    additional_song: str | None
    additional_song_singer: str | None
    coordinator_verified: bool
    coordinator_verified_at: datetime | None
    coordinator_approved: bool
    coordinator_approved_at: datetime | None
    final_decision: str | None
    decision_made_at: datetime | None
    created_at: datetime
    updated_at: datetime


class AppointmentListResponse(BaseModel):
    success: bool = True
    appointments: list[AppointmentResponse]


class AppointmentCreateResponse(BaseModel):
    success: bool = True
    appointment_id: int
    message: str = "Appointment created successfully"


class AppointmentCheckResponse(BaseModel):
    success: bool = True
    has_existing_appointment: bool
    appointments: list[AppointmentResponse]


class UpdateAppointmentStatusRequest(BaseModel):
    status: AppointmentStatus


class AttendanceRequest(BaseModel):
    present: bool


class ApprovalRequest(BaseModel):
    approved: bool


class DecisionRequest(BaseModel):
    decision: FinalDecision


# ============================================
# Evaluations
# ============================================


class EvaluationCreate(BaseModel):
    judge_name: str = Field(..., min_length=1, max_length=100)
    criteria_name: str = Field(..., min_length=1, max_length=100)
    rating: int = Field(..., ge=0, le=5, strict=True)
    comments: str | None = Field(None, max_length=2000)


class EvaluationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    appointment_id: int
    judge_name: str
    criteria_name: str
    rating: int
    comments: str | None
    created_at: datetime
    updated_at: datetime


class EvaluationListResponse(BaseModel):
    success: bool = True
    evaluations: list[EvaluationResponse]
    averages: dict[str, float]


# ============================================
# Statistics
# ============================================


class ScheduleStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_appointments: int = Field(serialization_alias="totalAppointments")
    scheduled: int
    accepted: int
    rejected: int
    cancelled: int


class ScheduleStatsResponse(BaseModel):
    success: bool = True
    stats: ScheduleStats


class ApplicantLookupResponse(BaseModel):
    """Whether a phone belongs to someone who submitted an application."""

    success: bool = True
    is_applicant: bool
    applicant_name: str | None = None
