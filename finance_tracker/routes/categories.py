"""
Category CRUD API endpoints.

Endpoints:
- GET /categories - List the user's active categories (optionally by type)
- POST /categories - Create a category
- GET /categories/{category_id} - Get single category
- PATCH /categories/{category_id} - Update category
- DELETE /categories/{category_id} - Soft-delete category
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from finance_tracker.auth.dependencies import AuthenticatedUser, get_authenticated_user
from finance_tracker.db.client import get_supabase_client
from finance_tracker.schemas.categories import (
    CategoryCreateRequest,
    CategoryCreateResponse,
    CategoryDeleteResponse,
    CategoryListResponse,
    CategoryResponse,
    CategoryUpdateRequest,
    CategoryUpdateResponse,
)
from finance_tracker.services.category_service import (
    create_category,
    delete_category,
    get_all_categories,
    get_category_by_id,
    update_category,
)
from finance_tracker.utils.constants import TransactionType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["categories"])


def _build_category_response(cat: dict) -> CategoryResponse:
    """Helper to build CategoryResponse from a category dict."""
    return CategoryResponse(
        id=str(cat.get("id")),
        user_id=str(cat.get("user_id")) if cat.get("user_id") else None,
        type=cat.get("type", "spend"),
        name=cat.get("name", ""),
        description=cat.get("description"),
        created_at=cat.get("created_at"),
        updated_at=cat.get("updated_at"),
        deleted_at=cat.get("deleted_at"),
    )


def _not_found(category_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": "not_found",
            "details": f"Category {category_id} not found or not accessible"
        }
    )


@router.get(
    "",
    response_model=CategoryListResponse,
    status_code=status.HTTP_200_OK,
    summary="List categories",
    description="""
    Retrieve the authenticated user's active categories, ordered by name.

    Query parameters:
    - type: Only return categories of this transaction type (earn, spend, save)
    - limit/offset: Pagination

    Security:
    - Requires valid authentication token
    - RLS restricts results to the caller's categories
    """
)
async def list_categories(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    type: Optional[TransactionType] = Query(None, description="Filter by transaction type"),
) -> CategoryListResponse:
    """List the user's categories."""
    logger.info(f"Listing categories for user {auth_user.user_id} (limit={limit}, offset={offset}, type={type})")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        categories = await get_all_categories(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            limit=limit,
            offset=offset,
            transaction_type=type,
        )

        category_responses = [_build_category_response(cat) for cat in categories]

        return CategoryListResponse(
            categories=category_responses,
            count=len(category_responses),
            limit=limit,
            offset=offset
        )

    except Exception as e:
        logger.error(f"Failed to fetch categories: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve categories from database"
            }
        )


@router.post(
    "",
    response_model=CategoryCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
async def create_user_category(
    request: CategoryCreateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> CategoryCreateResponse:
    """Create a new category for the authenticated user."""
    logger.info(f"Creating category for user {auth_user.user_id}: name={request.name}, type={request.type}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        created_category = await create_category(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            transaction_type=request.type,
            name=request.name,
            description=request.description,
        )

        return CategoryCreateResponse(
            status="CREATED",
            category=_build_category_response(created_category),
            message="Category created successfully"
        )

    except ValueError as e:
        logger.warning(f"Validation error creating category: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "validation_error",
                "details": str(e)
            }
        )
    except Exception as e:
        logger.error(f"Failed to create category: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "create_error",
                "details": "Failed to create category"
            }
        )


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    status_code=status.HTTP_200_OK,
    summary="Get category details",
)
async def get_category(
    category_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> CategoryResponse:
    """Get details of a single category."""
    logger.info(f"Fetching category {category_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        category = await get_category_by_id(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            category_id=category_id,
        )

        if not category:
            raise _not_found(category_id)

        return _build_category_response(category)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch category {category_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve category from database"
            }
        )


@router.patch(
    "/{category_id}",
    response_model=CategoryUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a category",
    description="""
    Update an existing category. Only the fields provided are changed and at
    least one field is required.
    """
)
async def update_user_category(
    category_id: str,
    request: CategoryUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> CategoryUpdateResponse:
    """
    Update a category (partial update).

    Raises:
        HTTPException 400: If no fields provided
        HTTPException 404: If category not found or not accessible
    """
    updates = request.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": "At least one field must be provided for update"
            }
        )

    logger.info(f"Updating category {category_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        updated_category = await update_category(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            category_id=category_id,
            updates=updates,
        )

        if not updated_category:
            raise _not_found(category_id)

        return CategoryUpdateResponse(
            status="UPDATED",
            category=_build_category_response(updated_category),
            message="Category updated successfully"
        )

    except HTTPException:
        raise
    except ValueError as e:
        logger.warning(f"Invalid category update: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": str(e)
            }
        )
    except Exception as e:
        logger.error(f"Failed to update category {category_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "update_error",
                "details": "Failed to update category"
            }
        )


@router.delete(
    "/{category_id}",
    response_model=CategoryDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete a category",
    description="""
    Soft-delete a category (deleted_at is stamped).

    Transactions and budgets keep referencing the category, so history and
    dashboard totals are unaffected.
    """
)
async def delete_user_category(
    category_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> CategoryDeleteResponse:
    """Soft-delete a category."""
    logger.info(f"Deleting category {category_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        deleted = await delete_category(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            category_id=category_id,
        )

        if not deleted:
            raise _not_found(category_id)

        return CategoryDeleteResponse(
            status="DELETED",
            category_id=category_id,
            deleted_at=deleted.get("deleted_at"),
            message="Category deleted successfully"
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete category {category_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "delete_error",
                "details": "Failed to delete category"
            }
        )
