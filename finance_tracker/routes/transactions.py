"""
Transaction CRUD API endpoints.

Transactions are individual money movements of one type (earn, spend or save),
tied to a category, optionally to a bank account, and to any number of tags.

Endpoints:
- GET /transactions?type=spend - List transactions of one type (with names resolved)
- POST /transactions - Create a transaction (and attach tags)
- GET /transactions/{transaction_id} - Get single transaction
- PATCH /transactions/{transaction_id} - Update transaction (and replace tags)
- DELETE /transactions/{transaction_id} - Soft-delete transaction
"""

import logging
from typing import Annotated, Any, List, Literal, Optional, cast

from fastapi import APIRouter, Depends, HTTPException, Query, status

from finance_tracker.auth.dependencies import AuthenticatedUser, get_authenticated_user
from finance_tracker.db.client import get_supabase_client
from finance_tracker.schemas.transactions import (
    TransactionCreateRequest,
    TransactionCreateResponse,
    TransactionDeleteResponse,
    TransactionDetailResponse,
    TransactionListResponse,
    TransactionUpdateRequest,
    TransactionUpdateResponse,
)
from finance_tracker.services.transaction_service import (
    create_transaction,
    delete_transaction,
    get_transaction_by_id,
    get_user_transactions,
    update_transaction,
)
from finance_tracker.utils.constants import TRANSACTION_TYPE_VALUES, TransactionType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])

TAGS_NOT_SAVED_MESSAGE = "Transaction saved but failed to update tags"


def _require_field(data: dict, key: str):
    """Return data[key] or raise ValueError if missing/None."""
    val = data.get(key)
    if val is None:
        raise ValueError(f"Missing required field '{key}' in transaction data")
    return val


def _coerce_type(data: dict) -> TransactionType:
    val = _require_field(data, "type")
    if val not in TRANSACTION_TYPE_VALUES:
        raise ValueError(f"Invalid transaction type: {val}")
    return cast(TransactionType, val)


def _coerce_float(data: dict, key: str) -> float:
    val = _require_field(data, key)
    try:
        return float(val)
    except (TypeError, ValueError):
        raise ValueError(f"Field '{key}' is not convertible to float: {val}")


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def _str_list(value: Any) -> List[str]:
    return [str(v) for v in (value or []) if v is not None]


def _build_transaction_response(txn: dict) -> TransactionDetailResponse:
    """Build a response from either a view row or a flattened base-table row."""
    return TransactionDetailResponse(
        id=str(_require_field(txn, "id")),
        user_id=_optional_str(txn.get("user_id")),
        date=str(_require_field(txn, "date")),
        type=_coerce_type(txn),
        amount=_coerce_float(txn, "amount"),
        category_id=_optional_str(txn.get("category_id")),
        category_name=txn.get("category_name"),
        bank_account_id=_optional_str(txn.get("bank_account_id")),
        bank_account_name=txn.get("bank_account_name"),
        notes=txn.get("notes"),
        tag_ids=_str_list(txn.get("tag_ids")),
        tag_names=_str_list(txn.get("tag_names")),
        created_at=txn.get("created_at"),
        updated_at=txn.get("updated_at"),
        deleted_at=txn.get("deleted_at"),
    )


def _not_found(transaction_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": "not_found",
            "details": f"Transaction {transaction_id} not found or not accessible"
        }
    )


@router.post(
    "",
    response_model=TransactionCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new transaction",
    description="""
    Create a new transaction.

    This endpoint:
    - Inserts the row into the transactions table with RLS enforcement
    - Attaches tag_ids through the set_transaction_tags RPC

    If the tag RPC fails the transaction is still saved: the response has
    tags_updated=false and a message saying the tags were not saved.
    """
)
async def create_new_transaction(
    request: TransactionCreateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> TransactionCreateResponse:
    """Create a new transaction for the authenticated user."""
    logger.info(
        f"Creating transaction for user {auth_user.user_id}: "
        f"type={request.type}, tags={len(request.tag_ids)}"
    )

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        created, tags_updated = await create_transaction(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            date=request.date,
            transaction_type=request.type,
            category_id=request.category_id,
            amount=request.amount,
            bank_account_id=request.bank_account_id,
            notes=request.notes,
            tag_ids=request.tag_ids,
        )

        return TransactionCreateResponse(
            status="CREATED",
            transaction=_build_transaction_response(created),
            tags_updated=tags_updated,
            message="Transaction created successfully" if tags_updated else TAGS_NOT_SAVED_MESSAGE
        )

    except ValueError as e:
        logger.warning(f"Invalid transaction data: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": str(e)
            }
        )
    except Exception as e:
        logger.error(f"Failed to create transaction: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "create_error",
                "details": "Failed to create transaction"
            }
        )


@router.get(
    "",
    response_model=TransactionListResponse,
    status_code=status.HTTP_200_OK,
    summary="List transactions of one type",
    description="""
    List the user's transactions of one type from the transactions_with_details
    view, which resolves category, bank account and tag names.

    Query parameters:
    - type: earn, spend or save (default spend)
    - from_date/to_date: Inclusive ISO-8601 date range
    - category_id, bank_account_id: Optional filters
    - sort_by: date, amount, category_name or bank_account_name
    - sort_order: asc or desc
    """
)
async def list_transactions(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    type: TransactionType = Query("spend", description="Transaction type to list"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    from_date: Optional[str] = Query(None, description="Inclusive start date (ISO-8601)"),
    to_date: Optional[str] = Query(None, description="Inclusive end date (ISO-8601)"),
    category_id: Optional[str] = Query(None, description="Filter by category UUID"),
    bank_account_id: Optional[str] = Query(None, description="Filter by bank account UUID"),
    sort_by: Literal["date", "amount", "category_name", "bank_account_name"] = Query("date"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
) -> TransactionListResponse:
    """List the user's transactions of one type."""
    logger.info(f"Listing {type} transactions for user {auth_user.user_id} (limit={limit}, offset={offset})")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        transactions = await get_user_transactions(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            transaction_type=type,
            limit=limit,
            offset=offset,
            from_date=from_date,
            to_date=to_date,
            category_id=category_id,
            bank_account_id=bank_account_id,
            sort_by=sort_by,
            sort_order=sort_order,
        )

        transaction_responses = [_build_transaction_response(txn) for txn in transactions]

        return TransactionListResponse(
            transactions=transaction_responses,
            count=len(transaction_responses),
            type=type,
            limit=limit,
            offset=offset
        )

    except Exception as e:
        logger.error(f"Failed to fetch transactions: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve transactions from database"
            }
        )


@router.get(
    "/{transaction_id}",
    response_model=TransactionDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get transaction details",
)
async def get_transaction(
    transaction_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> TransactionDetailResponse:
    """Get a single transaction with its tag ids."""
    logger.info(f"Fetching transaction {transaction_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        transaction = await get_transaction_by_id(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            transaction_id=transaction_id,
        )

        if not transaction:
            raise _not_found(transaction_id)

        return _build_transaction_response(transaction)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch transaction {transaction_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve transaction from database"
            }
        )


@router.patch(
    "/{transaction_id}",
    response_model=TransactionUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a transaction",
    description="""
    Update a transaction. Only the fields provided are changed; sending null
    for bank_account_id or notes clears it.

    Passing tag_ids (even an empty list) replaces the tag set through the
    set_transaction_tags RPC. As on create, a failed tag RPC keeps the update
    and returns tags_updated=false.
    """
)
async def update_existing_transaction(
    transaction_id: str,
    request: TransactionUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> TransactionUpdateResponse:
    """
    Update a transaction (partial update).

    Raises:
        HTTPException 400: If no fields provided
        HTTPException 404: If transaction not found or not accessible
    """
    # Only fields present in the body; null clears bank_account_id or notes,
    # tag_ids=[] clears the tags
    updates = request.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": "At least one field must be provided for update"
            }
        )

    logger.info(f"Updating transaction {transaction_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        updated, tags_updated = await update_transaction(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            transaction_id=transaction_id,
            updates=updates,
        )

        if not updated:
            raise _not_found(transaction_id)

        return TransactionUpdateResponse(
            status="UPDATED",
            transaction=_build_transaction_response(updated),
            tags_updated=tags_updated,
            message="Transaction updated successfully" if tags_updated else TAGS_NOT_SAVED_MESSAGE
        )

    except HTTPException:
        raise
    except ValueError as e:
        logger.warning(f"Invalid transaction data: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": str(e)
            }
        )
    except Exception as e:
        logger.error(f"Failed to update transaction {transaction_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "update_error",
                "details": "Failed to update transaction"
            }
        )


@router.delete(
    "/{transaction_id}",
    response_model=TransactionDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete a transaction",
    description="Soft-delete a transaction. It disappears from lists and dashboard totals.",
)
async def delete_existing_transaction(
    transaction_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> TransactionDeleteResponse:
    """Soft-delete a transaction."""
    logger.info(f"Deleting transaction {transaction_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        deleted = await delete_transaction(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            transaction_id=transaction_id,
        )

        if not deleted:
            raise _not_found(transaction_id)

        return TransactionDeleteResponse(
            status="DELETED",
            transaction_id=transaction_id,
            deleted_at=deleted.get("deleted_at"),
            message="Transaction deleted successfully"
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete transaction {transaction_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "delete_error",
                "details": "Failed to delete transaction"
            }
        )
