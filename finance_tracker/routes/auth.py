"""
Auth API endpoints.

- GET /auth/me - Get authenticated user identity

Requires valid Bearer token authentication.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from finance_tracker.auth.dependencies import AuthenticatedUser, get_authenticated_user
from finance_tracker.schemas.auth import AuthMeResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get(
    "/me",
    response_model=AuthMeResponse,
    status_code=status.HTTP_200_OK,
    summary="Get authenticated user identity",
    description="""
    Return the caller's user id and email, taken from the verified access token.

    Security:
    - Requires valid authentication token
    """
)
async def get_me(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> AuthMeResponse:
    logger.info(f"Returning identity for user {auth_user.user_id}")

    return AuthMeResponse(user_id=auth_user.user_id, email=auth_user.email)
