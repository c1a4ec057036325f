"""
Pydantic schemas for the dashboard endpoints.

The dashboard shows, for a year or a single month, the total per transaction
type and a per-category breakdown inside each type.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from finance_tracker.utils.constants import TransactionType


class TypeSummary(BaseModel):
    """Total amount for one transaction type over the period."""
    type: TransactionType = Field(..., description="Transaction type")
    label: str = Field(..., description="Display label (e.g., 'Spend')")
    total: float = Field(..., description="Sum of amounts from sum_transactions_amount")
    formatted_total: str = Field(..., description="Total formatted as currency", examples=["$1,234.50"])


class CategorySummary(BaseModel):
    """Total amount for one category over the period."""
    category_id: str = Field(..., description="Category UUID")
    category_name: str = Field(..., description="Category name ('Unknown' when unresolved)")
    type: TransactionType = Field(..., description="Transaction type of the grouped rows")
    total: float = Field(..., description="Sum of amounts")
    formatted_total: str = Field(..., description="Total formatted as currency")


class CategoryBreakdown(BaseModel):
    """Categories of one transaction type, largest total first."""
    type: TransactionType = Field(..., description="Transaction type")
    label: str = Field(..., description="Display label")
    categories: List[CategorySummary] = Field(default_factory=list, description="Sorted by total descending")
    total: float = Field(..., description="Sum over the listed categories")
    formatted_total: str = Field(..., description="Total formatted as currency")


class DashboardStatsResponse(BaseModel):
    """Statistics for one period."""
    period: Literal["year", "month"] = Field(..., description="Granularity of the period")
    year: int = Field(..., description="Selected year")
    month: Optional[int] = Field(None, ge=1, le=12, description="Selected month (1-12) for monthly stats")
    start_date: str = Field(..., description="First day of the period (ISO-8601)")
    end_date: str = Field(..., description="Last day of the period (ISO-8601)")
    type_summary: List[TypeSummary] = Field(..., description="Totals ordered earn, spend, save")
    category_breakdown: List[CategoryBreakdown] = Field(..., description="Breakdowns ordered earn, spend, save")


class PeriodOption(BaseModel):
    label: str = Field(..., description="Display label")
    value: int = Field(..., description="Numeric value")


class PeriodOptionsResponse(BaseModel):
    """Selectable years (current and five previous) and months."""
    years: List[PeriodOption] = Field(..., description="Year options, newest first")
    months: List[PeriodOption] = Field(..., description="Month options, January to December")
    current_year: int = Field(..., description="Current year")
    current_month: int = Field(..., ge=1, le=12, description="Current month (1-12)")
