"""
Bank account CRUD API endpoints.

Bank accounts are plain labels that transactions can point at; no balance is
stored or computed.

Endpoints:
- GET /bank-accounts - List the user's active bank accounts
- POST /bank-accounts - Create a bank account
- GET /bank-accounts/{bank_account_id} - Get single bank account
- PATCH /bank-accounts/{bank_account_id} - Update bank account
- DELETE /bank-accounts/{bank_account_id} - Soft-delete bank account
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from finance_tracker.auth.dependencies import AuthenticatedUser, get_authenticated_user
from finance_tracker.db.client import get_supabase_client
from finance_tracker.schemas.bank_accounts import (
    BankAccountCreateRequest,
    BankAccountCreateResponse,
    BankAccountDeleteResponse,
    BankAccountListResponse,
    BankAccountResponse,
    BankAccountUpdateRequest,
    BankAccountUpdateResponse,
)
from finance_tracker.services.bank_account_service import (
    create_bank_account,
    delete_bank_account,
    get_bank_account_by_id,
    get_user_bank_accounts,
    update_bank_account,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bank-accounts", tags=["bank-accounts"])


def _build_bank_account_response(account: dict) -> BankAccountResponse:
    """Helper to build BankAccountResponse from a bank account dict."""
    return BankAccountResponse(
        id=str(account.get("id")),
        user_id=str(account.get("user_id")) if account.get("user_id") else None,
        name=account.get("name", ""),
        description=account.get("description"),
        created_at=account.get("created_at"),
        updated_at=account.get("updated_at"),
        deleted_at=account.get("deleted_at"),
    )


def _not_found(bank_account_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": "not_found",
            "details": f"Bank account {bank_account_id} not found or not accessible"
        }
    )


@router.get(
    "",
    response_model=BankAccountListResponse,
    status_code=status.HTTP_200_OK,
    summary="List bank accounts",
)
async def list_bank_accounts(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> BankAccountListResponse:
    """List the user's bank accounts ordered by name."""
    logger.info(f"Listing bank accounts for user {auth_user.user_id} (limit={limit}, offset={offset})")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        accounts = await get_user_bank_accounts(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            limit=limit,
            offset=offset,
        )

        account_responses = [_build_bank_account_response(a) for a in accounts]

        return BankAccountListResponse(
            bank_accounts=account_responses,
            count=len(account_responses),
            limit=limit,
            offset=offset
        )

    except Exception as e:
        logger.error(f"Failed to fetch bank accounts: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve bank accounts from database"
            }
        )


@router.post(
    "",
    response_model=BankAccountCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a bank account",
)
async def create_user_bank_account(
    request: BankAccountCreateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> BankAccountCreateResponse:
    """Create a new bank account for the authenticated user."""
    logger.info(f"Creating bank account for user {auth_user.user_id}: name={request.name}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        created = await create_bank_account(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            name=request.name,
            description=request.description,
        )

        return BankAccountCreateResponse(
            status="CREATED",
            bank_account=_build_bank_account_response(created),
            message="Bank account created successfully"
        )

    except Exception as e:
        logger.error(f"Failed to create bank account: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "create_error",
                "details": "Failed to create bank account"
            }
        )


@router.get(
    "/{bank_account_id}",
    response_model=BankAccountResponse,
    status_code=status.HTTP_200_OK,
    summary="Get bank account details",
)
async def get_bank_account(
    bank_account_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> BankAccountResponse:
    """Get details of a single bank account."""
    logger.info(f"Fetching bank account {bank_account_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        account = await get_bank_account_by_id(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            bank_account_id=bank_account_id,
        )

        if not account:
            raise _not_found(bank_account_id)

        return _build_bank_account_response(account)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch bank account {bank_account_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve bank account from database"
            }
        )


@router.patch(
    "/{bank_account_id}",
    response_model=BankAccountUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a bank account",
)
async def update_user_bank_account(
    bank_account_id: str,
    request: BankAccountUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> BankAccountUpdateResponse:
    """Update a bank account (partial update)."""
    updates = request.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": "At least one field must be provided for update"
            }
        )

    logger.info(f"Updating bank account {bank_account_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        updated = await update_bank_account(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            bank_account_id=bank_account_id,
            updates=updates,
        )

        if not updated:
            raise _not_found(bank_account_id)

        return BankAccountUpdateResponse(
            status="UPDATED",
            bank_account=_build_bank_account_response(updated),
            message="Bank account updated successfully"
        )

    except HTTPException:
        raise
    except ValueError as e:
        logger.warning(f"Invalid bank account update: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": str(e)
            }
        )
    except Exception as e:
        logger.error(f"Failed to update bank account {bank_account_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "update_error",
                "details": "Failed to update bank account"
            }
        )


@router.delete(
    "/{bank_account_id}",
    response_model=BankAccountDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete a bank account",
    description="""
    Soft-delete a bank account. Transactions that reference it are kept and
    still show its name.
    """
)
async def delete_user_bank_account(
    bank_account_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> BankAccountDeleteResponse:
    """Soft-delete a bank account."""
    logger.info(f"Deleting bank account {bank_account_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        deleted = await delete_bank_account(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            bank_account_id=bank_account_id,
        )

        if not deleted:
            raise _not_found(bank_account_id)

        return BankAccountDeleteResponse(
            status="DELETED",
            bank_account_id=bank_account_id,
            deleted_at=deleted.get("deleted_at"),
            message="Bank account deleted successfully"
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete bank account {bank_account_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "delete_error",
                "details": "Failed to delete bank account"
            }
        )
