"""
Pydantic schemas for transaction CRUD endpoints.

These models define the strict request/response contracts for transaction management.
Transactions are individual money movements typed earn, spend or save, tied to a
category, optionally to a bank account, and to any number of tags.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from finance_tracker.utils.constants import TransactionType

# --- Transaction creation models ---

class TransactionCreateRequest(BaseModel):
    """
    Request to create a new transaction.

    Tags are linked after the row is inserted, through the set_transaction_tags RPC.
    """
    date: str = Field(
        ...,
        description="ISO-8601 date when the transaction occurred",
        examples=["2025-10-30"]
    )
    type: TransactionType = Field(..., description="Transaction type: 'earn', 'spend' or 'save'")
    category_id: str = Field(..., description="UUID of the category")
    amount: float = Field(
        ...,
        description="Transaction amount (must be >= 0)",
        ge=0.0,
        examples=[128.50, 1500.00]
    )
    bank_account_id: Optional[str] = Field(None, description="UUID of the bank account")
    notes: Optional[str] = Field(
        None,
        max_length=1000,
        description="Free-text note for this transaction",
        examples=["Weekly groceries"]
    )
    tag_ids: List[str] = Field(
        default_factory=list,
        description="UUIDs of tags to attach"
    )


# --- Transaction update models ---

class TransactionUpdateRequest(BaseModel):
    """
    Request to update an existing transaction.

    All fields are optional - only provided fields will be updated.
    An explicit null clears a nullable field (bank_account_id, notes).
    When tag_ids is provided (even empty), the tag set is replaced.
    """
    date: Optional[str] = Field(None, description="Updated ISO-8601 date")
    type: Optional[TransactionType] = Field(None, description="Updated transaction type")
    category_id: Optional[str] = Field(None, description="Updated category UUID")
    amount: Optional[float] = Field(None, ge=0.0, description="Updated amount (must be >= 0)")
    bank_account_id: Optional[str] = Field(None, description="Updated bank account UUID")
    notes: Optional[str] = Field(None, max_length=1000, description="Updated note")
    tag_ids: Optional[List[str]] = Field(None, description="Replacement set of tag UUIDs")


# --- Transaction response models ---

class TransactionDetailResponse(BaseModel):
    """
    Transaction record with display names resolved.

    List responses come from the transactions_with_details view (names);
    single-record responses come from the base table with joins (ids).
    """
    id: str = Field(..., description="Transaction UUID")
    user_id: Optional[str] = Field(None, description="Owner user UUID")
    date: str = Field(..., description="ISO-8601 date when the transaction occurred")
    type: TransactionType = Field(..., description="Transaction type")
    amount: float = Field(..., description="Transaction amount")
    category_id: Optional[str] = Field(None, description="Category UUID")
    category_name: Optional[str] = Field(None, description="Category display name")
    bank_account_id: Optional[str] = Field(None, description="Bank account UUID")
    bank_account_name: Optional[str] = Field(None, description="Bank account display name")
    notes: Optional[str] = Field(None, description="Free-text note")
    tag_ids: List[str] = Field(default_factory=list, description="Attached tag UUIDs")
    tag_names: List[str] = Field(default_factory=list, description="Attached tag names")
    created_at: Optional[str] = Field(None, description="Creation timestamp (ISO-8601)")
    updated_at: Optional[str] = Field(None, description="Last update timestamp (ISO-8601)")
    deleted_at: Optional[str] = Field(None, description="Soft-delete timestamp (ISO-8601)")


class TransactionListResponse(BaseModel):
    """Response for listing transactions of one type."""
    transactions: List[TransactionDetailResponse] = Field(..., description="List of transactions")
    count: int = Field(..., description="Number of transactions returned")
    type: TransactionType = Field(..., description="Transaction type the list is filtered by")
    limit: int = Field(..., description="Query limit applied")
    offset: int = Field(..., description="Query offset applied")


class TransactionCreateResponse(BaseModel):
    status: Literal["CREATED"] = Field(..., description="Status indicator")
    transaction: TransactionDetailResponse = Field(..., description="Created transaction")
    tags_updated: bool = Field(..., description="False if the tag links could not be saved")
    message: str = Field(..., description="Success message")


class TransactionUpdateResponse(BaseModel):
    status: Literal["UPDATED"] = Field(..., description="Status indicator")
    transaction: TransactionDetailResponse = Field(..., description="Updated transaction")
    tags_updated: bool = Field(..., description="False if the tag links could not be saved")
    message: str = Field(..., description="Success message")


class TransactionDeleteResponse(BaseModel):
    status: Literal["DELETED"] = Field(..., description="Status indicator")
    transaction_id: str = Field(..., description="Deleted transaction UUID")
    deleted_at: Optional[str] = Field(None, description="Soft-delete timestamp")
    message: str = Field(..., description="Success message")
