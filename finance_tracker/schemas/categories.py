"""
Pydantic models for category endpoints.

Categories group transactions and budgets. Every category belongs to one
transaction type (earn, spend or save) and to exactly one user.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from finance_tracker.utils.constants import TransactionType


class CategoryResponse(BaseModel):
    """
    Response model for a single category.

    Fields:
        id: UUID of the category
        user_id: Owner user ID
        type: Transaction type the category applies to
        name: User-facing category label
        description: Optional free text
        created_at: ISO-8601 timestamp
        updated_at: ISO-8601 timestamp
        deleted_at: Soft-delete timestamp (NULL while active)
    """
    id: str = Field(..., description="Category UUID")
    user_id: Optional[str] = Field(None, description="Owner user ID")
    type: TransactionType = Field(..., description="Transaction type: 'earn', 'spend' or 'save'")
    name: str = Field(..., description="Category display name")
    description: Optional[str] = Field(None, description="Optional description")
    created_at: Optional[str] = Field(None, description="Creation timestamp (ISO-8601)")
    updated_at: Optional[str] = Field(None, description="Last update timestamp (ISO-8601)")
    deleted_at: Optional[str] = Field(None, description="Soft-delete timestamp (ISO-8601)")


class CategoryListResponse(BaseModel):
    """Response model for listing categories."""
    categories: list[CategoryResponse] = Field(..., description="List of categories")
    count: int = Field(..., description="Number of categories returned")
    limit: int = Field(..., description="Query limit applied")
    offset: int = Field(..., description="Query offset applied")


class CategoryCreateRequest(BaseModel):
    """Request model for creating a new category."""
    type: TransactionType = Field(..., description="Transaction type: 'earn', 'spend' or 'save'")
    name: str = Field(..., min_length=1, max_length=100, description="Category display name")
    description: Optional[str] = Field(None, max_length=500, description="Optional description")


class CategoryCreateResponse(BaseModel):
    """Response for successful category creation."""
    status: Literal["CREATED"] = Field(..., description="Status indicator")
    category: CategoryResponse = Field(..., description="Created category")
    message: str = Field(..., description="Success message")


class CategoryUpdateRequest(BaseModel):
    """
    Request model for updating a category.

    All fields optional (partial update). At least one field must be provided.
    """
    type: Optional[TransactionType] = Field(None, description="New transaction type")
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="New category name")
    description: Optional[str] = Field(None, max_length=500, description="New description")


class CategoryUpdateResponse(BaseModel):
    """Response for successful category update."""
    status: Literal["UPDATED"] = Field(..., description="Status indicator")
    category: CategoryResponse = Field(..., description="Updated category")
    message: str = Field(..., description="Success message")


class CategoryDeleteResponse(BaseModel):
    """
    Response for successful category deletion.

    Categories are soft-deleted: transactions keep pointing at them.
    """
    status: Literal["DELETED"] = Field(..., description="Status indicator")
    category_id: str = Field(..., description="Deleted category UUID")
    deleted_at: Optional[str] = Field(None, description="Soft-delete timestamp")
    message: str = Field(..., description="Success message")
