"""
Applicant Service Layer

Answers "where is this applicant in the pipeline?" using nothing but a phone
number. Submissions and appointments share no foreign key, so both are
matched on the normalised phone (last 8 digits).
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from chenaniah.core.phone import require_phone_key
from chenaniah.modules.applicants.resolver import AppointmentResolution, resolve_appointments
from chenaniah.modules.applicants.schemas import StatusView
from chenaniah.modules.schedule import repository as schedule_repository
from chenaniah.modules.schedule.models import Appointment
from chenaniah.modules.submissions.service import find_latest_by_phone_key

logger = logging.getLogger(__name__)


async def load_appointments(
    db: AsyncSession,
    key: str,
) -> tuple[list[Appointment], AppointmentResolution]:
    """Fetch an applicant's appointments (newest first) and resolve them."""
    appointments = await schedule_repository.list_appointments_by_phone_key(db, key)
    return appointments, resolve_appointments(appointments)


async def resolve_applicant_status(db: AsyncSession, phone: str) -> StatusView:
    """
    Resolve the current status of the applicant owning ``phone``.

    Read-only: repeated calls over the same records return the same view.

    Raises:
        InvalidPhoneError: If the phone has fewer than 8 digits
    """
    key = require_phone_key(phone)

    submission = await find_latest_by_phone_key(db, key)
    appointments, resolution = await load_appointments(db, key)

    if submission is None and not appointments:
        logger.info(f"Status lookup for unknown phone key ...{key[-4:]}")
        return StatusView.not_found()

    if submission is None:
        logger.info(f"Status lookup for ...{key[-4:]} resolved from appointments only")
        return StatusView.from_appointment_only(resolution)

    if not appointments:
        return StatusView.from_submission_only(submission)

    return StatusView.from_both(submission, resolution)
