"""
Health check and environment routes for the Finance Tracker backend.

Both endpoints are PUBLIC (no authentication required):
- GET /health - status check for load balancers and deployment verification
- GET /environment - which deployment this is, plus the banner a front-end
  should show outside production
"""

from typing import Optional

from fastapi import APIRouter

from finance_tracker.config import settings
from finance_tracker.schemas.health import EnvironmentBanner, EnvironmentResponse, HealthResponse
from finance_tracker.utils.logging import get_logger

logger = get_logger(__name__)

# Create router with no prefix (mounted at root level in main.py)
router = APIRouter(tags=["system"])

ENVIRONMENT_BANNERS = {
    "staging": EnvironmentBanner(
        type="warning",
        message="STAGING Environment",
        description="This is a staging environment - Not for production use",
    ),
    "development": EnvironmentBanner(
        type="info",
        message="DEVELOPMENT Environment",
        description="This is a local development environment",
    ),
}


def build_environment_banner(environment: Optional[str]) -> Optional[EnvironmentBanner]:
    """
    Banner for a deployment environment; None for production or unset.

    Environments without a configured banner get a plain info banner
    named after them (e.g. "QA Environment").
    """
    name = (environment or "").strip()
    if not name or name.lower() == "production":
        return None

    banner = ENVIRONMENT_BANNERS.get(name.lower())
    if banner is None:
        return EnvironmentBanner(type="info", message=f"{name.upper()} Environment")
    return banner


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description=(
        "Public health check endpoint (no authentication required). "
        "Returns a simple status indicator for monitoring and load balancing."
    ),
    status_code=200,
)
async def health_check() -> HealthResponse:
    """
    Public health check endpoint.

    Example response:
        {
            "status": "ok",
            "service": "finance-tracker-backend"
        }
    """
    logger.debug("Health check endpoint called")

    return HealthResponse(status="ok")


@router.get(
    "/environment",
    response_model=EnvironmentResponse,
    summary="Deployment environment",
    status_code=200,
)
async def get_environment() -> EnvironmentResponse:
    """Report ENVIRONMENT and the banner for it (null in production)."""
    return EnvironmentResponse(
        environment=settings.ENVIRONMENT,
        banner=build_environment_banner(settings.ENVIRONMENT),
    )
