"""
Pydantic schemas for budget CRUD endpoints.

Budgets are targets (a spending cap, an earning or a saving goal) for one
transaction type over an optional date range. Categories and tags are linked
via the budget_categories and budget_tags junction tables.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from finance_tracker.utils.constants import TransactionType


# --- Budget response models ---

class BudgetResponse(BaseModel):
    """
    Response for budget details.

    Progress (current amount) is computed by the get_budget_progress RPC, not stored.
    """
    id: str = Field(..., description="Budget UUID")
    user_id: Optional[str] = Field(None, description="Owner user UUID")
    name: str = Field(..., description="Budget name (e.g., 'Monthly Groceries')")
    description: Optional[str] = Field(None, description="Optional description")
    type: TransactionType = Field(..., description="Transaction type this budget tracks")
    target_amount: float = Field(..., description="Target amount for the period")
    start_date: Optional[str] = Field(None, description="First day counted (ISO-8601 date)")
    end_date: Optional[str] = Field(None, description="Last day counted (ISO-8601 date)")
    category_ids: List[str] = Field(default_factory=list, description="Linked category UUIDs")
    tag_ids: List[str] = Field(default_factory=list, description="Linked tag UUIDs")
    created_at: Optional[str] = Field(None, description="ISO-8601 timestamp when created")
    updated_at: Optional[str] = Field(None, description="ISO-8601 timestamp of last update")
    deleted_at: Optional[str] = Field(None, description="Soft-delete timestamp (ISO-8601)")


class BudgetListResponse(BaseModel):
    """
    Response for listing user budgets with pagination support.
    """
    budgets: List[BudgetResponse] = Field(..., description="List of user's budgets")
    count: int = Field(..., description="Number of budgets returned in this response")
    limit: int = Field(..., description="Maximum number of budgets requested")
    offset: int = Field(..., description="Number of budgets skipped for pagination")


class BudgetProgressResponse(BaseModel):
    """One row of the get_budget_progress RPC, plus the completion percentage."""
    id: str = Field(..., description="Budget UUID")
    name: str = Field(..., description="Budget name")
    description: Optional[str] = Field(None, description="Optional description")
    type: TransactionType = Field(..., description="Transaction type this budget tracks")
    target_amount: float = Field(..., description="Target amount")
    current_amount: float = Field(..., description="Amount accumulated so far in the period")
    percent: int = Field(..., ge=0, le=100, description="Progress towards target, capped at 100")
    start_date: Optional[str] = Field(None, description="Period start (ISO-8601 date)")
    end_date: Optional[str] = Field(None, description="Period end (ISO-8601 date)")
    created_at: Optional[str] = Field(None, description="ISO-8601 timestamp when created")
    updated_at: Optional[str] = Field(None, description="ISO-8601 timestamp of last update")


class BudgetProgressListResponse(BaseModel):
    budgets: List[BudgetProgressResponse] = Field(..., description="Progress for each active budget")
    count: int = Field(..., description="Number of budgets returned")


# --- Budget create/update models ---

class BudgetCreateRequest(BaseModel):
    """
    Request to create a new budget.

    Categories and tags are linked after the budget row is created.
    """
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Budget name",
        examples=["Monthly Groceries", "Vacation Fund"]
    )
    description: Optional[str] = Field(None, max_length=500, description="Optional description")
    type: TransactionType = Field(..., description="Transaction type this budget tracks")
    target_amount: float = Field(
        ...,
        description="Target amount (at least 0.01)",
        ge=0.01,
        examples=[1200.00, 500.00]
    )
    start_date: Optional[str] = Field(None, description="First day counted (ISO-8601 date)", examples=["2025-11-01"])
    end_date: Optional[str] = Field(None, description="Last day counted (ISO-8601 date)", examples=["2025-11-30"])
    category_ids: List[str] = Field(default_factory=list, description="Category UUIDs to link")
    tag_ids: List[str] = Field(default_factory=list, description="Tag UUIDs to link")

    @model_validator(mode='after')
    def validate_date_range(self):
        """ISO dates compare correctly as strings."""
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class BudgetUpdateRequest(BaseModel):
    """
    Request to update an existing budget.

    All fields optional. Providing category_ids or tag_ids replaces the links.
    An explicit null clears description, start_date or end_date.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="New name")
    description: Optional[str] = Field(None, max_length=500, description="New description")
    type: Optional[TransactionType] = Field(None, description="New transaction type")
    target_amount: Optional[float] = Field(None, ge=0.01, description="New target amount")
    start_date: Optional[str] = Field(None, description="New start date (ISO-8601 date)")
    end_date: Optional[str] = Field(None, description="New end date (ISO-8601 date)")
    category_ids: Optional[List[str]] = Field(None, description="Replacement set of category UUIDs")
    tag_ids: Optional[List[str]] = Field(None, description="Replacement set of tag UUIDs")

    @model_validator(mode='after')
    def validate_date_range(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class BudgetCreateResponse(BaseModel):
    """
    Response after creating a budget.

    link_errors lists the link tables that failed ("categories", "tags");
    the budget itself is kept.
    """
    status: Literal["CREATED"] = Field(..., description="Status indicator")
    budget: BudgetResponse = Field(..., description="Created budget")
    link_errors: List[str] = Field(default_factory=list, description="Link tables that failed to save")
    message: str = Field(..., description="Success message")


class BudgetUpdateResponse(BaseModel):
    status: Literal["UPDATED"] = Field(..., description="Status indicator")
    budget: BudgetResponse = Field(..., description="Updated budget")
    link_errors: List[str] = Field(default_factory=list, description="Link operations that failed")
    message: str = Field(..., description="Success message")


class BudgetDeleteResponse(BaseModel):
    status: Literal["DELETED"] = Field(..., description="Status indicator")
    budget_id: str = Field(..., description="Deleted budget UUID")
    deleted_at: Optional[str] = Field(None, description="Soft-delete timestamp")
    message: str = Field(..., description="Success message")
