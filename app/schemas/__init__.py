"""Pydantic request/response schemas."""

from app.schemas.auth import Identity, LoginRequest, LoginResponse
from app.schemas.common import ErrorResponse, StatusResponse
from app.schemas.health import HealthResponse
from app.schemas.users import CreateUserRequest, UserResponse

__all__ = [
    "CreateUserRequest",
    "ErrorResponse",
    "HealthResponse",
    "Identity",
    "LoginRequest",
    "LoginResponse",
    "StatusResponse",
    "UserResponse",
]
