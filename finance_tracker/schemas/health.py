"""
Health check and environment endpoint schemas.

Both endpoints are PUBLIC (no authentication required).
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """
    Response model for GET /health endpoint.

    Used by load balancers, monitoring systems, and deployment checks.
    """

    status: str = Field(
        default="ok",
        description="Health status of the API (always 'ok' if responding)",
        examples=["ok"]
    )
    service: str = Field(default="finance-tracker-backend", description="Service name")


class EnvironmentBanner(BaseModel):
    """Banner a front-end shows on non-production deployments."""
    type: Literal["warning", "info"] = Field(..., description="Alert style")
    message: str = Field(..., description="Banner headline", examples=["STAGING Environment"])
    description: Optional[str] = Field(None, description="Banner body text (absent for unrecognised environments)")


class EnvironmentResponse(BaseModel):
    """Response model for GET /environment."""
    environment: str = Field(..., description="Deployment environment name")
    banner: Optional[EnvironmentBanner] = Field(None, description="Banner to display, null in production")
