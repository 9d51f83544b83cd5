"""
Authentication router.

Endpoints:
- POST /auth/login - Admin login
- POST /auth/coordinator/login - Coordinator login
- POST /auth/judge/login - Judge login
- POST /auth/student/check-eligibility - Can this phone register?
- POST /auth/student/register - Create a student account
- POST /auth/student/login - Student login
- POST /auth/student/reset-password - Reset a student password by phone
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from chenaniah.core.database import get_db
from chenaniah.core.exceptions import ServiceError
from chenaniah.core.rate_limit import ACCOUNT_CHANGE, LOGIN, rate_limit
from chenaniah.modules.auth.schemas import LoginRequest, LoginResponse
from chenaniah.modules.auth.service import authenticate_staff
from chenaniah.modules.shared import MessageResponse, PhoneRequest, to_http_exception
from chenaniah.modules.students import service as student_service
from chenaniah.modules.students.schemas import (
    EligibilityView,
    PasswordResetRequest,
    StudentAuthResponse,
    StudentLoginRequest,
    StudentRegisterRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _staff_login(role: str, credentials: LoginRequest) -> LoginResponse:
    try:
        return authenticate_staff(role, credentials.username, credentials.password)
    except ServiceError as e:
        raise to_http_exception(e) from e


# ============================================
# Staff
# ============================================


@router.post("/login", response_model=LoginResponse, summary="Admin Login")
@rate_limit(LOGIN)
async def login(request: Request, credentials: LoginRequest) -> LoginResponse:
    return _staff_login("admin", credentials)


@router.post("/coordinator/login", response_model=LoginResponse, summary="Coordinator Login")
@rate_limit(LOGIN)
async def coordinator_login(request: Request, credentials: LoginRequest) -> LoginResponse:
    return _staff_login("coordinator", credentials)


@router.post("/judge/login", response_model=LoginResponse, summary="Judge Login")
@rate_limit(LOGIN)
async def judge_login(request: Request, credentials: LoginRequest) -> LoginResponse:
    return _staff_login("judge", credentials)


# ============================================
# Students
# ============================================


@router.post(
    "/student/check-eligibility",
    response_model=EligibilityView,
    response_model_exclude_none=True,
    summary="Check Registration Eligibility",
)
async def check_eligibility(
    data: PhoneRequest,
    db: AsyncSession = Depends(get_db),
) -> EligibilityView:
    """
    Check whether a phone can register as a student.

    Always answers 200 with `eligible` and a message, except for malformed
    phone numbers. `canLogin=true` means an account already exists.
    """
    try:
        return await student_service.check_registration_eligibility(db, data.phone)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.post(
    "/student/register",
    response_model=StudentAuthResponse,
    summary="Register Student",
    description="""
Create a student account from an accepted interview.

Each accepted appointment can back exactly one account. A second attempt
fails with `APPOINTMENT_ALREADY_USED`.
""",
)
@rate_limit(ACCOUNT_CHANGE)
async def register(
    request: Request,
    data: StudentRegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> StudentAuthResponse:
    try:
        return await student_service.register_student(db, data)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.post("/student/login", response_model=StudentAuthResponse, summary="Student Login")
@rate_limit(LOGIN)
async def student_login(
    request: Request,
    credentials: StudentLoginRequest,
    db: AsyncSession = Depends(get_db),
) -> StudentAuthResponse:
    try:
        return await student_service.authenticate_student(
            db, credentials.username, credentials.password
        )
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.post(
    "/student/reset-password",
    response_model=MessageResponse,
    summary="Reset Student Password",
)
@rate_limit(ACCOUNT_CHANGE)
async def reset_password(
    request: Request,
    data: PasswordResetRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Reset a password. The phone must match the one on the student's account."""
    try:
        await student_service.reset_password(db, data)
    except ServiceError as e:
        raise to_http_exception(e) from e

    return MessageResponse(message="Password reset successfully")
