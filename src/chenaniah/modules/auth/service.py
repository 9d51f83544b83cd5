"""
Staff Authentication

Staff accounts are not stored in the database. Admin, coordinator and judge
credentials come from configuration.
"""

import logging
import secrets

from chenaniah.core.config import settings
from chenaniah.core.exceptions import ServiceError
from chenaniah.core.security import create_access_token
from chenaniah.modules.auth.schemas import LoginResponse

logger = logging.getLogger(__name__)


class InvalidStaffCredentialsError(ServiceError):
    def __init__(self):
        super().__init__(
            message="Invalid credentials",
            error_code="INVALID_CREDENTIALS",
            status_code=401,
        )


def _staff_accounts(role: str) -> list[tuple[str, str]]:
    if role == "admin":
        return [(settings.admin_username, settings.admin_password)]
    if role == "coordinator":
        return settings.coordinator_accounts_list
    if role == "judge":
        return settings.judge_accounts_list
    return []


def _credentials_match(accounts: list[tuple[str, str]], username: str, password: str) -> bool:
    # Check every account so timing does not reveal which usernames exist
    matched = False
    for account_username, account_password in accounts:
        username_ok = secrets.compare_digest(account_username.encode(), username.encode())
        password_ok = secrets.compare_digest(account_password.encode(), password.encode())
        matched |= username_ok and password_ok
    return matched


def authenticate_staff(role: str, username: str, password: str) -> LoginResponse:
    """
    Check staff credentials for ``role`` and issue a token.

    Raises:
        InvalidStaffCredentialsError: If no configured account matches
    """
    if not _credentials_match(_staff_accounts(role), username, password):
        logger.warning(f"Failed {role} login for username: {username}")
        raise InvalidStaffCredentialsError()

    token = create_access_token(
        subject=username,
        additional_claims={"username": username, "role": role},
    )

    logger.info(f"{role.capitalize()} {username} logged in")
    return LoginResponse(token=token, username=username, role=role)
