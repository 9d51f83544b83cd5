"""
Student Service Layer

Turns an accepted interview into exactly one student account.

Registration flow:
1. Validate the form fields
2. Require an accepted interview for the phone
3. Require that the accepted appointment has not backed an account yet
4. Require the submitted phone to match the appointment phone
5. Require a free username and phone
6. Create the account and issue a student token

The unique constraint on ``students.appointment_id`` closes the race between
two concurrent registrations for the same appointment.
"""

import logging
import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from chenaniah.core.exceptions import InvalidInputError, NotFoundError, ServiceError
from chenaniah.core.phone import (
    PHONE_MAX_LENGTH,
    digits_only,
    phone_key,
    phones_match,
    require_phone_key,
)
from chenaniah.core.security import create_access_token, hash_password, verify_password
from chenaniah.modules.applicants.resolver import AppointmentResolution
from chenaniah.modules.applicants.service import load_appointments
from chenaniah.modules.schedule.models import Appointment, AppointmentStatus, FinalDecision
from chenaniah.modules.students.models import (
    STUDENT_APPOINTMENT_CONSTRAINT,
    STUDENT_PHONE_CONSTRAINT,
    STUDENT_USERNAME_CONSTRAINT,
    Student,
)
from chenaniah.modules.students.repository import StudentRepository
from chenaniah.modules.students.schemas import (
    AppointmentInfo,
    EligibilityView,
    PasswordResetRequest,
    StudentAuthResponse,
    StudentProfile,
    StudentRegisterRequest,
)

logger = logging.getLogger(__name__)

STUDENT_ROLE = "student"

USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_-]{3,30}")
VALID_GENDERS = frozenset({"male", "female"})

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128
PHONE_MIN_DIGITS = 8
PHONE_MAX_DIGITS = 15

ALREADY_REGISTERED_MESSAGE = "This phone number is already registered. Please login instead."


# ============================================
# Errors
# ============================================


class InterviewNotAcceptedError(ServiceError):
    def __init__(self):
        super().__init__(
            message=(
                "You must have passed the interview to register as a student. "
                "Please check your interview status or contact us for assistance."
            ),
            error_code="INTERVIEW_NOT_ACCEPTED",
            status_code=403,
        )


class AppointmentAlreadyUsedError(ServiceError):
    MESSAGE = (
        "This interview appointment has already been used to create a student account. "
        "Each accepted interview can only be used once for registration."
    )

    def __init__(self):
        super().__init__(
            message=self.MESSAGE,
            error_code="APPOINTMENT_ALREADY_USED",
            status_code=400,
        )


class PhoneMismatchError(ServiceError):
    def __init__(self):
        super().__init__(
            message=(
                "The phone number provided does not match the phone number "
                "associated with your accepted interview appointment."
            ),
            error_code="PHONE_MISMATCH",
            status_code=403,
        )


class UsernameTakenError(ServiceError):
    def __init__(self):
        super().__init__(
            message="Username already exists. Please choose a different username.",
            error_code="USERNAME_TAKEN",
            status_code=400,
        )


class PhoneTakenError(ServiceError):
    def __init__(self):
        super().__init__(
            message=ALREADY_REGISTERED_MESSAGE,
            error_code="PHONE_TAKEN",
            status_code=400,
            extra={"canLogin": True},
        )


class InvalidCredentialsError(ServiceError):
    def __init__(self):
        super().__init__(
            message="Invalid username or password",
            error_code="INVALID_CREDENTIALS",
            status_code=401,
        )


class StudentNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Student")


# ============================================
# Validation
# ============================================


def _check_length(value: str, label: str, minimum: int, maximum: int) -> None:
    if not minimum <= len(value) <= maximum:
        raise InvalidInputError(f"{label} must be between {minimum} and {maximum} characters")


def validate_password(password: str) -> None:
    """
    Raises:
        InvalidInputError: If the password is too short or too long
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        raise InvalidInputError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        )
    if len(password) > PASSWORD_MAX_LENGTH:
        raise InvalidInputError(f"Password must be less than {PASSWORD_MAX_LENGTH} characters")


def validate_registration(data: StudentRegisterRequest) -> StudentRegisterRequest:
    """
    Check every registration rule and return a normalised copy.

    Text fields are trimmed and gender is lower-cased; the phone keeps the
    format the student typed.

    Raises:
        InvalidInputError: With a message naming the first rule that failed
    """
    fields = (
        data.full_name_amharic,
        data.full_name_english,
        data.gender,
        data.local_church,
        data.address,
        data.phone,
        data.username,
        data.password,
    )
    if not all(fields):
        raise InvalidInputError("All fields are required")

    full_name_amharic = data.full_name_amharic.strip()
    full_name_english = data.full_name_english.strip()
    local_church = data.local_church.strip()
    address = data.address.strip()

    _check_length(full_name_amharic, "Full name (Amharic)", 2, 100)
    _check_length(full_name_english, "Full name (English)", 2, 100)
    _check_length(local_church, "Local church", 2, 200)
    _check_length(address, "Address", 5, 500)

    if len(data.phone) > PHONE_MAX_LENGTH:
        raise InvalidInputError(
            f"Phone number must be at most {PHONE_MAX_LENGTH} characters long"
        )
    if not PHONE_MIN_DIGITS <= len(digits_only(data.phone)) <= PHONE_MAX_DIGITS:
        raise InvalidInputError(
            "Invalid phone number format. Phone number must contain 8-15 digits"
        )

    if not USERNAME_PATTERN.fullmatch(data.username):
        raise InvalidInputError(
            "Username must be 3-30 characters long and contain only letters, "
            "numbers, underscores, or hyphens"
        )

    validate_password(data.password)

    gender = data.gender.strip().lower()
    if gender not in VALID_GENDERS:
        raise InvalidInputError('Gender must be either "male" or "female"')

    return data.model_copy(
        update={
            "full_name_amharic": full_name_amharic,
            "full_name_english": full_name_english,
            "local_church": local_church,
            "address": address,
            "gender": gender,
        }
    )


# ============================================
# Eligibility
# ============================================


def _not_accepted_message(
    appointments: list[Appointment],
    resolution: AppointmentResolution,
) -> str:
    if not appointments:
        return (
            "No interview record found for this phone number. "
            "Please complete the application and interview process first."
        )
    if appointments[0].normalized_status == AppointmentStatus.SCHEDULED.value:
        return (
            "Your interview is scheduled but not yet completed. "
            "Please complete your interview first."
        )
    if resolution.final_decision == FinalDecision.REJECTED:
        return (
            "Unfortunately, your application was not accepted. "
            "Please contact us for more information."
        )
    return (
        "You must have passed the interview to register as a student. "
        "Please check your interview status."
    )


async def check_registration_eligibility(db: AsyncSession, phone: str) -> EligibilityView:
    """
    Tell a would-be student whether they can register, and why not.

    Read-only. Checks stop at the first that fails:
    1. An account already uses this exact phone (log in instead)
    2. The applicant's interview was not accepted
    3. The accepted appointment already backs an account (log in instead)

    Raises:
        InvalidPhoneError: If the phone has fewer than 8 digits
    """
    key = require_phone_key(phone)

    if await StudentRepository.get_by_phone(db, phone):
        return EligibilityView(eligible=False, message=ALREADY_REGISTERED_MESSAGE, can_login=True)

    appointments, resolution = await load_appointments(db, key)

    if not resolution.is_accepted:
        return EligibilityView(
            eligible=False,
            message=_not_accepted_message(appointments, resolution),
            can_login=False,
        )

    accepted = resolution.appointment
    if await StudentRepository.get_by_appointment_id(db, accepted.id):
        return EligibilityView(
            eligible=False,
            message=AppointmentAlreadyUsedError.MESSAGE,
            can_login=True,
            code="APPOINTMENT_ALREADY_USED",
        )

    return EligibilityView(
        eligible=True,
        message="You are eligible to register!",
        appointment_info=AppointmentInfo(
            scheduled_date=accepted.scheduled_date,
            scheduled_time=accepted.scheduled_time,
        ),
    )


# ============================================
# Registration and authentication
# ============================================


def _issue_token(student: Student) -> StudentAuthResponse:
    token = create_access_token(
        subject=str(student.id),
        additional_claims={"username": student.username, "role": STUDENT_ROLE},
    )
    return StudentAuthResponse(
        token=token,
        username=student.username,
        role=STUDENT_ROLE,
        user=StudentProfile.from_student(student),
    )


def _translate_integrity_error(e: IntegrityError) -> ServiceError | None:
    """Map a unique constraint violation on students to its business error."""
    detail = str(e.orig)
    if STUDENT_APPOINTMENT_CONSTRAINT in detail:
        return AppointmentAlreadyUsedError()
    if STUDENT_USERNAME_CONSTRAINT in detail:
        return UsernameTakenError()
    if STUDENT_PHONE_CONSTRAINT in detail:
        return PhoneTakenError()
    return None


async def _phone_registered(db: AsyncSession, phone: str) -> bool:
    """Whether any account uses this phone, exactly or by its last 8 digits."""
    if await StudentRepository.get_by_phone(db, phone):
        return True

    key = phone_key(phone)
    return any(phone_key(stored) == key for stored in await StudentRepository.list_phones(db))


async def register_student(db: AsyncSession, data: StudentRegisterRequest) -> StudentAuthResponse:
    """
    Create a student account from an accepted interview.

    Raises:
        InvalidInputError: If a form field breaks a validation rule
        InterviewNotAcceptedError: If the phone has no accepted interview
        AppointmentAlreadyUsedError: If the accepted appointment already backs an account
        PhoneMismatchError: If the submitted phone differs from the appointment phone
        UsernameTakenError: If the username is in use
        PhoneTakenError: If the phone is already registered
    """
    data = validate_registration(data)
    key = require_phone_key(data.phone)

    _, resolution = await load_appointments(db, key)
    if not resolution.is_accepted:
        logger.warning(f"Registration rejected for ...{key[-4:]}: interview not accepted")
        raise InterviewNotAcceptedError()

    appointment = resolution.appointment
    if await StudentRepository.get_by_appointment_id(db, appointment.id):
        logger.warning(f"Registration rejected: appointment {appointment.id} already used")
        raise AppointmentAlreadyUsedError()

    if not phones_match(appointment.applicant_phone, data.phone):
        logger.warning(f"Registration rejected: phone mismatch on appointment {appointment.id}")
        raise PhoneMismatchError()

    if await StudentRepository.get_by_username(db, data.username):
        raise UsernameTakenError()

    if await _phone_registered(db, data.phone):
        logger.warning(f"Registration rejected for ...{key[-4:]}: phone already registered")
        raise PhoneTakenError()

    try:
        student = await StudentRepository.create(
            db,
            username=data.username,
            password_hash=hash_password(data.password),
            full_name_amharic=data.full_name_amharic,
            full_name_english=data.full_name_english,
            gender=data.gender,
            local_church=data.local_church,
            address=data.address,
            phone=data.phone,
            appointment_id=appointment.id,
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        error = _translate_integrity_error(e)
        if error is None:
            raise
        logger.warning(f"Registration lost a uniqueness race for appointment {appointment.id}")
        raise error from e

    logger.info(f"Registered student {student.id} from appointment {appointment.id}")
    return _issue_token(student)


async def authenticate_student(
    db: AsyncSession,
    username: str,
    password: str,
) -> StudentAuthResponse:
    """
    Raises:
        InvalidCredentialsError: If the username is unknown or the password is wrong
    """
    student = await StudentRepository.get_by_username(db, username)

    if not student or not verify_password(password, student.password_hash):
        logger.warning(f"Failed student login for username: {username}")
        raise InvalidCredentialsError()

    logger.info(f"Student {student.id} logged in")
    return _issue_token(student)


async def reset_password(db: AsyncSession, data: PasswordResetRequest) -> None:
    """
    Set a new password after the student proves ownership of their phone.

    Raises:
        StudentNotFoundError: If the username is unknown
        InvalidPhoneError: If the phone has fewer than 8 digits
        ServiceError: PHONE_MISMATCH when the phone differs from the stored one
        InvalidInputError: If the new password breaks a length rule
    """
    student = await StudentRepository.get_by_username(db, data.username)
    if not student:
        raise StudentNotFoundError()

    key = require_phone_key(data.phone)
    if phone_key(student.phone) != key:
        logger.warning(f"Password reset rejected for {data.username}: phone mismatch")
        raise ServiceError(
            message="Phone number does not match",
            error_code="PHONE_MISMATCH",
            status_code=400,
        )

    validate_password(data.new_password)

    await StudentRepository.update_password_hash(db, student, hash_password(data.new_password))
    logger.info(f"Password reset for student {student.id}")
