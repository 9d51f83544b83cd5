"""
Schedule Repository

Database operations for time slots, appointments and interview evaluations.
"""

from datetime import UTC, datetime

from sqlalchemy import func, or_, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from chenaniah.core.phone import matches_key

from .models import Appointment, AppointmentStatus, InterviewEvaluation, TimeSlot
from .schemas import AppointmentCreate

# Newest first; id breaks ties between re-bookings of the same slot
NEWEST_FIRST = (
    Appointment.scheduled_date.desc(),
    Appointment.scheduled_time.desc(),
    Appointment.id.desc(),
)


# ============================================
# Time slots
# ============================================


async def list_time_slots(db: AsyncSession, date: str | None = None) -> list[TimeSlot]:
    """List slots for one date by time, or every slot by date desc then time."""
    stmt = select(TimeSlot)
    if date:
        stmt = stmt.where(TimeSlot.date == date).order_by(TimeSlot.time.asc())
    else:
        stmt = stmt.order_by(TimeSlot.date.desc(), TimeSlot.time.asc())

    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_time_slot(db: AsyncSession, date: str, time: str) -> TimeSlot | None:
    result = await db.execute(
        select(TimeSlot).where(TimeSlot.date == date, TimeSlot.time == time)
    )
    return result.scalar_one_or_none()


async def get_time_slot_by_id(db: AsyncSession, id: int) -> TimeSlot | None:
    return await db.get(TimeSlot, id)


async def create_time_slot(
    db: AsyncSession,
    *,
    date: str,
    time: str,
    label: str,
    period: str | None,
    location: str | None,
) -> TimeSlot:
    slot = TimeSlot(
        date=date,
        time=time,
        label=label,
        period=period,
        location=location,
        available=True,
    )

    db.add(slot)
    await db.commit()
    await db.refresh(slot)

    return slot


async def set_time_slot_availability(db: AsyncSession, slot: TimeSlot, available: bool) -> TimeSlot:
    slot.available = available
    await db.commit()
    await db.refresh(slot)
    return slot


# ============================================
# Appointments
# ============================================


async def get_by_id(db: AsyncSession, id: int) -> Appointment | None:
    """Get appointment by ID."""
    return await db.get(Appointment, id)


async def list_appointments(db: AsyncSession, search: str | None = None) -> list[Appointment]:
    """List appointments newest first, optionally matching name or phone."""
    stmt = select(Appointment)

    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(
            or_(
                Appointment.applicant_name.ilike(pattern),
                Appointment.applicant_phone.ilike(pattern),
            )
        )

    result = await db.execute(stmt.order_by(*NEWEST_FIRST))
    return list(result.scalars().all())


async def list_appointments_by_phone_key(db: AsyncSession, key: str) -> list[Appointment]:
    """
    Get every appointment whose phone normalises to ``key``, newest first.

    Stored phones are free-format, so this scans the table and compares the
    normalised form of each row in Python.
    """
    result = await db.execute(select(Appointment).order_by(*NEWEST_FIRST))
    return [apt for apt in result.scalars().all() if matches_key(apt.applicant_phone, key)]


async def list_verified_and_approved(db: AsyncSession) -> list[Appointment]:
    """Appointments a coordinator marked present and cleared for judging, soonest first."""
    result = await db.execute(
        select(Appointment)
        .where(
            Appointment.coordinator_verified.is_(True),
            Appointment.coordinator_approved.is_(True),
        )
        .order_by(Appointment.scheduled_date.asc(), Appointment.scheduled_time.asc())
    )
    return list(result.scalars().all())


async def create_appointment(db: AsyncSession, data: AppointmentCreate) -> Appointment:
    """Create a new appointment in the scheduled state."""

    appointment = Appointment(
        applicant_name=data.applicant_name.strip(),
        applicant_email=data.applicant_email,
        applicant_phone=data.applicant_phone.strip(),
        scheduled_date=data.scheduled_date,
        scheduled_time=data.scheduled_time,
        status=AppointmentStatus.SCHEDULED.value,
        notes=data.notes or None,
        selected_song=data.selected_song or None,
        additional_song=data.additional_song or None,
        additional_song_singer=data.additional_song_singer or None,
    )

    db.add(appointment)
    await db.commit()
    await db.refresh(appointment)

    return appointment


async def update_status(
    db: AsyncSession,
    appointment: Appointment,
    status: AppointmentStatus,
) -> Appointment:
    appointment.status = status.value
    await db.commit()
    await db.refresh(appointment)
    return appointment


async def set_final_decision(
    db: AsyncSession,
    appointment: Appointment,
    decision: str,
) -> Appointment:
    appointment.final_decision = decision
    appointment.decision_made_at = datetime.now(UTC)
    await db.commit()
    await db.refresh(appointment)
    return appointment


async def set_coordinator_verified(
    db: AsyncSession,
    appointment: Appointment,
    verified: bool,
) -> Appointment:
    """Record attendance. Clearing the flag also clears its timestamp."""
    appointment.coordinator_verified = verified
    appointment.coordinator_verified_at = datetime.now(UTC) if verified else None
    await db.commit()
    await db.refresh(appointment)
    return appointment


async def set_coordinator_approved(
    db: AsyncSession,
    appointment: Appointment,
    approved: bool,
) -> Appointment:
    appointment.coordinator_approved = approved
    appointment.coordinator_approved_at = datetime.now(UTC) if approved else None
    await db.commit()
    await db.refresh(appointment)
    return appointment


async def list_status_and_decisions(db: AsyncSession) -> list[tuple[str, str | None]]:
    """(status, final_decision) for every appointment, for statistics."""
    result = await db.execute(select(Appointment.status, Appointment.final_decision))
    return [(status, decision) for status, decision in result.all()]


# ============================================
# Evaluations
# ============================================


async def upsert_evaluation(
    db: AsyncSession,
    *,
    appointment_id: int,
    judge_name: str,
    criteria_name: str,
    rating: int,
    comments: str | None,
) -> None:
    """Insert a rating, or replace the judge's earlier rating of the same criterion."""
    stmt = insert(InterviewEvaluation).values(
        appointment_id=appointment_id,
        judge_name=judge_name,
        criteria_name=criteria_name,
        rating=rating,
        comments=comments,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[
            InterviewEvaluation.appointment_id,
            InterviewEvaluation.judge_name,
            InterviewEvaluation.criteria_name,
        ],
        set_={
            "rating": stmt.excluded.rating,
            "comments": stmt.excluded.comments,
            "updated_at": func.now(),
        },
    )

    await db.execute(stmt)
    await db.commit()


async def list_evaluations(db: AsyncSession, appointment_id: int) -> list[InterviewEvaluation]:
    result = await db.execute(
        select(InterviewEvaluation)
        .where(InterviewEvaluation.appointment_id == appointment_id)
        .order_by(InterviewEvaluation.judge_name.asc(), InterviewEvaluation.criteria_name.asc())
    )
    return list(result.scalars().all())
