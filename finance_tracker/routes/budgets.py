"""
Budget CRUD API endpoints.

Budgets are targets for one transaction type, optionally restricted to
categories and tags and to a date range.

Endpoints:
- GET /budgets - List the user's active budgets
- POST /budgets - Create a budget (and link categories/tags)
- GET /budgets/{budget_id} - Get single budget
- PATCH /budgets/{budget_id} - Update budget (and replace links)
- DELETE /budgets/{budget_id} - Soft-delete budget

Progress is served by GET /dashboard/budgets.
"""

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from finance_tracker.auth.dependencies import AuthenticatedUser, get_authenticated_user
from finance_tracker.db.client import get_supabase_client
from finance_tracker.schemas.budgets import (
    BudgetCreateRequest,
    BudgetCreateResponse,
    BudgetDeleteResponse,
    BudgetListResponse,
    BudgetResponse,
    BudgetUpdateRequest,
    BudgetUpdateResponse,
)
from finance_tracker.services.budget_service import (
    create_budget,
    delete_budget,
    get_all_budgets,
    get_budget_by_id,
    update_budget,
)
from finance_tracker.utils.constants import TransactionType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/budgets", tags=["budgets"])


def _build_budget_response(budget: dict) -> BudgetResponse:
    """Helper to build BudgetResponse from a flattened budget dict."""
    return BudgetResponse(
        id=str(budget.get("id")),
        user_id=str(budget.get("user_id")) if budget.get("user_id") else None,
        name=budget.get("name", ""),
        description=budget.get("description"),
        type=budget.get("type", "spend"),
        target_amount=float(budget.get("target_amount") or 0),
        start_date=budget.get("start_date"),
        end_date=budget.get("end_date"),
        category_ids=[str(c) for c in budget.get("category_ids") or []],
        tag_ids=[str(t) for t in budget.get("tag_ids") or []],
        created_at=budget.get("created_at"),
        updated_at=budget.get("updated_at"),
        deleted_at=budget.get("deleted_at"),
    )


def _saved_message(action: str, link_errors: List[str]) -> str:
    if link_errors:
        return f"Budget {action} but failed to link: {', '.join(link_errors)}"
    return f"Budget {action} successfully"


def _not_found(budget_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": "not_found",
            "details": f"Budget {budget_id} not found or not accessible"
        }
    )


@router.get(
    "",
    response_model=BudgetListResponse,
    status_code=status.HTTP_200_OK,
    summary="List all budgets",
    description="""
    Retrieve the authenticated user's active budgets, newest first, each with
    its linked category_ids and tag_ids.
    """
)
async def list_budgets(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    type: Optional[TransactionType] = Query(None, description="Filter by transaction type"),
) -> BudgetListResponse:
    """List the user's budgets."""
    logger.info(f"Listing budgets for user {auth_user.user_id} (limit={limit}, offset={offset}, type={type})")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        budgets = await get_all_budgets(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            limit=limit,
            offset=offset,
            transaction_type=type,
        )

        budget_responses = [_build_budget_response(b) for b in budgets]

        return BudgetListResponse(
            budgets=budget_responses,
            count=len(budget_responses),
            limit=limit,
            offset=offset
        )

    except Exception as e:
        logger.error(f"Failed to fetch budgets: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve budgets from database"
            }
        )


@router.post(
    "",
    response_model=BudgetCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new budget",
    description="""
    Create a budget, then link its categories and tags.

    A failed link write does not undo the budget: the response is still 201
    and link_errors names the links that were not saved.
    """
)
async def create_new_budget(
    request: BudgetCreateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> BudgetCreateResponse:
    """Create a new budget for the authenticated user."""
    logger.info(
        f"Creating budget for user {auth_user.user_id}: name={request.name}, type={request.type}, "
        f"categories={len(request.category_ids)}, tags={len(request.tag_ids)}"
    )

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        created, link_errors = await create_budget(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            name=request.name,
            transaction_type=request.type,
            target_amount=request.target_amount,
            description=request.description,
            start_date=request.start_date,
            end_date=request.end_date,
            category_ids=request.category_ids,
            tag_ids=request.tag_ids,
        )

        return BudgetCreateResponse(
            status="CREATED",
            budget=_build_budget_response(created),
            link_errors=link_errors,
            message=_saved_message("created", link_errors)
        )

    except ValueError as e:
        logger.warning(f"Invalid budget data: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "validation_error",
                "details": str(e)
            }
        )
    except Exception as e:
        logger.error(f"Failed to create budget: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "create_error",
                "details": "Failed to create budget"
            }
        )


@router.get(
    "/{budget_id}",
    response_model=BudgetResponse,
    status_code=status.HTTP_200_OK,
    summary="Get budget details",
)
async def get_budget(
    budget_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> BudgetResponse:
    logger.info(f"Fetching budget {budget_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        budget = await get_budget_by_id(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            budget_id=budget_id,
        )

        if not budget:
            raise _not_found(budget_id)

        return _build_budget_response(budget)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch budget {budget_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve budget from database"
            }
        )


@router.patch(
    "/{budget_id}",
    response_model=BudgetUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Update budget",
    description="""
    Update budget details. Only the fields provided are changed; null clears
    description, start_date or end_date. The resulting range is checked
    against the stored dates.

    Passing category_ids or tag_ids replaces that link set (delete, then
    insert). Failed steps are listed in link_errors, e.g. "tags (insert)".
    """
)
async def update_existing_budget(
    budget_id: str,
    request: BudgetUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> BudgetUpdateResponse:
    """
    Update a budget (partial update).

    Raises:
        HTTPException 400: If no fields provided
        HTTPException 404: If budget not found or not accessible
    """
    # Only fields present in the body; an explicit null clears the column
    updates = request.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": "At least one field must be provided for update"
            }
        )

    logger.info(f"Updating budget {budget_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        updated, link_errors = await update_budget(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            budget_id=budget_id,
            updates=updates,
        )

        if not updated:
            raise _not_found(budget_id)

        return BudgetUpdateResponse(
            status="UPDATED",
            budget=_build_budget_response(updated),
            link_errors=link_errors,
            message=_saved_message("updated", link_errors)
        )

    except HTTPException:
        raise
    except ValueError as e:
        logger.warning(f"Invalid budget update: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": str(e)
            }
        )
    except Exception as e:
        logger.error(f"Failed to update budget {budget_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "update_error",
                "details": "Failed to update budget"
            }
        )


@router.delete(
    "/{budget_id}",
    response_model=BudgetDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete budget",
    description="Soft-delete a budget. Transactions are never touched.",
)
async def delete_existing_budget(
    budget_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> BudgetDeleteResponse:
    logger.info(f"Deleting budget {budget_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        deleted = await delete_budget(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            budget_id=budget_id,
        )

        if not deleted:
            raise _not_found(budget_id)

        return BudgetDeleteResponse(
            status="DELETED",
            budget_id=budget_id,
            deleted_at=deleted.get("deleted_at"),
            message="Budget deleted successfully"
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete budget {budget_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "delete_error",
                "details": "Failed to delete budget"
            }
        )
