"""Shared status and error envelopes."""

from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    status: str = Field(default="success")
    message: str


class ErrorResponse(BaseModel):
    """Body of every error response. errors is only set for request validation failures."""

    status: str = Field(default="error")
    message: str
    errors: dict[str, str] | None = None
