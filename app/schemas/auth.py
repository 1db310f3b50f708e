"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoginRequest(BaseModel):
    """Credentials for login. Both fields must be present and non-blank."""

    username: str | None = Field(default=None, validate_default=True, description="Username")
    password: str | None = Field(default=None, validate_default=True, description="Password")

    @field_validator("username")
    @classmethod
    def username_required(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("Username is required")
        return v

    @field_validator("password")
    @classmethod
    def password_required(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("Password is required")
        return v


class LoginResponse(BaseModel):
    """Opaque bearer token returned after successful login. Shown once; send as Authorization: Bearer <token>."""

    status: str = Field(default="success")
    message: str = Field(default="Authentication successful")
    token: str = Field(..., description="Opaque bearer token")


class Identity(BaseModel):
    """Authenticated caller resolved from a bearer token; passed explicitly to services."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    username: str
    role: str
