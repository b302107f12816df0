"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthzRequest(BaseModel):
    pass


class HealthzResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["Healthy", "Unhealthy"] = Field(default="Healthy", description="Service status")
    timestamp: str = Field(description="Server time, YYYY-MM-DD HH:MM:SS")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Database connectivity status when check is performed",
    )
