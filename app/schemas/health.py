"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["UP"] = Field(default="UP", description="Service status")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Database connectivity status when check_db=true",
    )
