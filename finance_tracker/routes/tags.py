"""
Tag CRUD API endpoints.

Endpoints:
- GET /tags - List the user's active tags
- POST /tags - Create a tag
- GET /tags/{tag_id} - Get single tag
- PATCH /tags/{tag_id} - Update tag
- DELETE /tags/{tag_id} - Soft-delete tag
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from finance_tracker.auth.dependencies import AuthenticatedUser, get_authenticated_user
from finance_tracker.db.client import get_supabase_client
from finance_tracker.schemas.tags import (
    TagCreateRequest,
    TagCreateResponse,
    TagDeleteResponse,
    TagListResponse,
    TagResponse,
    TagUpdateRequest,
    TagUpdateResponse,
)
from finance_tracker.services.tag_service import (
    create_tag,
    delete_tag,
    get_all_tags,
    get_tag_by_id,
    update_tag,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tags", tags=["tags"])


def _build_tag_response(tag: dict) -> TagResponse:
    return TagResponse(
        id=str(tag.get("id")),
        user_id=str(tag.get("user_id")) if tag.get("user_id") else None,
        name=tag.get("name", ""),
        description=tag.get("description"),
        created_at=tag.get("created_at"),
        updated_at=tag.get("updated_at"),
        deleted_at=tag.get("deleted_at"),
    )


def _not_found(tag_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": "not_found",
            "details": f"Tag {tag_id} not found or not accessible"
        }
    )


@router.get("", response_model=TagListResponse, summary="List tags")
async def list_tags(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> TagListResponse:
    logger.info(f"Listing tags for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        tags = await get_all_tags(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            limit=limit,
            offset=offset,
        )
        tag_responses = [_build_tag_response(tag) for tag in tags]
        return TagListResponse(tags=tag_responses, count=len(tag_responses), limit=limit, offset=offset)

    except Exception as e:
        logger.error(f"Failed to fetch tags: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve tags from database"
            }
        )


@router.post(
    "",
    response_model=TagCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a tag",
)
async def create_user_tag(
    request: TagCreateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> TagCreateResponse:
    logger.info(f"Creating tag for user {auth_user.user_id}: name={request.name}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        created = await create_tag(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            name=request.name,
            description=request.description,
        )
        return TagCreateResponse(
            status="CREATED",
            tag=_build_tag_response(created),
            message="Tag created successfully"
        )

    except Exception as e:
        logger.error(f"Failed to create tag: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "create_error",
                "details": "Failed to create tag"
            }
        )


@router.get("/{tag_id}", response_model=TagResponse, summary="Get tag details")
async def get_tag(
    tag_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> TagResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        tag = await get_tag_by_id(supabase_client=supabase_client, user_id=auth_user.user_id, tag_id=tag_id)
        if not tag:
            raise _not_found(tag_id)
        return _build_tag_response(tag)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch tag {tag_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve tag from database"
            }
        )


@router.patch("/{tag_id}", response_model=TagUpdateResponse, summary="Update a tag")
async def update_user_tag(
    tag_id: str,
    request: TagUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> TagUpdateResponse:
    updates = request.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": "At least one field must be provided for update"
            }
        )

    logger.info(f"Updating tag {tag_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        updated = await update_tag(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            tag_id=tag_id,
            updates=updates,
        )
        if not updated:
            raise _not_found(tag_id)

        return TagUpdateResponse(
            status="UPDATED",
            tag=_build_tag_response(updated),
            message="Tag updated successfully"
        )

    except HTTPException:
        raise
    except ValueError as e:
        logger.warning(f"Invalid tag update: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": str(e)
            }
        )
    except Exception as e:
        logger.error(f"Failed to update tag {tag_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "update_error",
                "details": "Failed to update tag"
            }
        )


@router.delete(
    "/{tag_id}",
    response_model=TagDeleteResponse,
    summary="Delete a tag",
    description="Soft-delete a tag. Existing transaction and budget links are kept.",
)
async def delete_user_tag(
    tag_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> TagDeleteResponse:
    logger.info(f"Deleting tag {tag_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        deleted = await delete_tag(supabase_client=supabase_client, user_id=auth_user.user_id, tag_id=tag_id)
        if not deleted:
            raise _not_found(tag_id)

        return TagDeleteResponse(
            status="DELETED",
            tag_id=tag_id,
            deleted_at=deleted.get("deleted_at"),
            message="Tag deleted successfully"
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete tag {tag_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "delete_error",
                "details": "Failed to delete tag"
            }
        )
