"""Authentication module: staff logins and student account endpoints."""

from chenaniah.modules.auth.router import router
from chenaniah.modules.auth.schemas import LoginRequest, LoginResponse

__all__ = ["router", "LoginRequest", "LoginResponse"]
