"""Request/response schemas for user endpoints."""

from pydantic import BaseModel, Field, field_validator

from app.core.security import (
    validate_email_address,
    validate_password_policy,
    validate_username,
)


class CreateUserRequest(BaseModel):
    """
    Admin-only user registration.

    username: 3-50 characters. email: valid address. password: 8 to 72
    bytes with upper, lower, digit and one of @$!%*?&. role: any non-blank tag.
    """

    username: str | None = Field(default=None, validate_default=True)
    email: str | None = Field(default=None, validate_default=True)
    password: str | None = Field(default=None, validate_default=True)
    role: str | None = Field(default=None, validate_default=True)

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str | None) -> str:
        error = validate_username(v or "")
        if error:
            raise ValueError(error)
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str:
        error = validate_email_address(v or "")
        if error:
            raise ValueError(error)
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str | None) -> str:
        error = validate_password_policy(v or "")
        if error:
            raise ValueError(error)
        return v

    @field_validator("role")
    @classmethod
    def check_role(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("Role is required")
        return v.strip()


class UserResponse(BaseModel):
    """Public user view (no password hash)."""

    id: int
    username: str
    email: str
    roles: list[str]
