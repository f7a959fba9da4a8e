"""
Common API response models.
"""

from typing import Literal

from pydantic import BaseModel, Field


class RenderSuccessResponse(BaseModel):
    """Response returned once the captioned video is published."""

    status: Literal["success"] = "success"
    job_id: str = Field(..., description="Job identifier from the request")
    video_url: str = Field(..., description="URL of the published artifact")
    reservation_id: str | None = Field(None, description="Caller reference, when one was supplied")


class RenderErrorResponse(BaseModel):
    """Standard error body for every failed render request."""

    status: Literal["error"] = "error"
    error: str = Field(..., description="Error message")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Service status")
    message: str = Field(..., description="Health check message")
    version: str | None = Field(None, description="Service version")
    dependencies: dict[str, str] | None = Field(None, description="Dependency status")
