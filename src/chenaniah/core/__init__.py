"""
Core module - Configuration, database, security, and utilities.
"""

from chenaniah.core.config import get_settings, settings
from chenaniah.core.database import Base, close_db, get_db, init_db
from chenaniah.core.exceptions import InvalidInputError, NotFoundError, ServiceError
from chenaniah.core.phone import InvalidPhoneError, phone_key, phones_match, require_phone_key
from chenaniah.core.redis import close_redis, get_redis, init_redis
from chenaniah.core.security import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    # Errors
    "ServiceError",
    "InvalidInputError",
    "NotFoundError",
    # Phone matching
    "InvalidPhoneError",
    "phone_key",
    "phones_match",
    "require_phone_key",
    # Redis
    "get_redis",
    "init_redis",
    "close_redis",
    # Security
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
]
