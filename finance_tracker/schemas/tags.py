"""
Pydantic models for tag endpoints.

Tags are free-form labels attached to transactions (many-to-many through
transaction_tags) and to budgets (through budget_tags).
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class TagResponse(BaseModel):
    """Response model for a single tag."""
    id: str = Field(..., description="Tag UUID")
    user_id: Optional[str] = Field(None, description="Owner user ID")
    name: str = Field(..., description="Tag name")
    description: Optional[str] = Field(None, description="Optional description")
    created_at: Optional[str] = Field(None, description="Creation timestamp (ISO-8601)")
    updated_at: Optional[str] = Field(None, description="Last update timestamp (ISO-8601)")
    deleted_at: Optional[str] = Field(None, description="Soft-delete timestamp (ISO-8601)")


class TagListResponse(BaseModel):
    tags: list[TagResponse] = Field(..., description="List of tags")
    count: int = Field(..., description="Number of tags returned")
    limit: int = Field(..., description="Query limit applied")
    offset: int = Field(..., description="Query offset applied")


class TagCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Tag name")
    description: Optional[str] = Field(None, max_length=500, description="Optional description")


class TagCreateResponse(BaseModel):
    status: Literal["CREATED"] = Field(..., description="Status indicator")
    tag: TagResponse = Field(..., description="Created tag")
    message: str = Field(..., description="Success message")


class TagUpdateRequest(BaseModel):
    """Partial update; at least one field must be provided."""
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="New tag name")
    description: Optional[str] = Field(None, max_length=500, description="New description")


class TagUpdateResponse(BaseModel):
    status: Literal["UPDATED"] = Field(..., description="Status indicator")
    tag: TagResponse = Field(..., description="Updated tag")
    message: str = Field(..., description="Success message")


class TagDeleteResponse(BaseModel):
    status: Literal["DELETED"] = Field(..., description="Status indicator")
    tag_id: str = Field(..., description="Deleted tag UUID")
    deleted_at: Optional[str] = Field(None, description="Soft-delete timestamp")
    message: str = Field(..., description="Success message")
