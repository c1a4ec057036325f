"""
Pydantic schemas for bank account endpoints.

A bank account is where money sits; transactions optionally point at one.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class BankAccountResponse(BaseModel):
    """Response model for a single bank account."""
    id: str = Field(..., description="Bank account UUID")
    user_id: Optional[str] = Field(None, description="Owner user ID")
    name: str = Field(..., description="Bank account display name")
    description: Optional[str] = Field(None, description="Optional description")
    created_at: Optional[str] = Field(None, description="Creation timestamp (ISO-8601)")
    updated_at: Optional[str] = Field(None, description="Last update timestamp (ISO-8601)")
    deleted_at: Optional[str] = Field(None, description="Soft-delete timestamp (ISO-8601)")


class BankAccountListResponse(BaseModel):
    """Response for listing the user's bank accounts."""
    bank_accounts: list[BankAccountResponse] = Field(..., description="List of bank accounts")
    count: int = Field(..., description="Number of bank accounts returned")
    limit: int = Field(..., description="Query limit applied")
    offset: int = Field(..., description="Query offset applied")


class BankAccountCreateRequest(BaseModel):
    """Request to create a new bank account."""
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Bank account display name",
        examples=["Main Checking", "Emergency Savings"]
    )
    description: Optional[str] = Field(None, max_length=500, description="Optional description")


class BankAccountCreateResponse(BaseModel):
    status: Literal["CREATED"] = Field(..., description="Status indicator")
    bank_account: BankAccountResponse = Field(..., description="Created bank account")
    message: str = Field(..., description="Success message")


class BankAccountUpdateRequest(BaseModel):
    """
    Request to update a bank account.

    All fields are optional - only provided fields will be updated.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="New name")
    description: Optional[str] = Field(None, max_length=500, description="New description")


class BankAccountUpdateResponse(BaseModel):
    status: Literal["UPDATED"] = Field(..., description="Status indicator")
    bank_account: BankAccountResponse = Field(..., description="Updated bank account")
    message: str = Field(..., description="Success message")


class BankAccountDeleteResponse(BaseModel):
    status: Literal["DELETED"] = Field(..., description="Status indicator")
    bank_account_id: str = Field(..., description="Deleted bank account UUID")
    deleted_at: Optional[str] = Field(None, description="Soft-delete timestamp")
    message: str = Field(..., description="Success message")
