"""
Dashboard API endpoints.

Endpoints:
- GET /dashboard/stats - Totals per type and per category for a year or month
- GET /dashboard/budgets - Progress of every active budget
- GET /dashboard/periods - Selectable years and months
"""

import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from finance_tracker.auth.dependencies import AuthenticatedUser, get_authenticated_user
from finance_tracker.config import settings
from finance_tracker.db.client import get_supabase_client
from finance_tracker.schemas.budgets import BudgetProgressListResponse, BudgetProgressResponse
from finance_tracker.schemas.dashboard import (
    DashboardStatsResponse,
    PeriodOption,
    PeriodOptionsResponse,
)
from finance_tracker.services.budget_service import get_budget_progress
from finance_tracker.services.dashboard_service import (
    get_month_options,
    get_period_stats,
    get_year_options,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _build_progress_response(row: dict) -> BudgetProgressResponse:
    return BudgetProgressResponse(
        id=str(row.get("id")),
        name=row.get("name", ""),
        description=row.get("description"),
        type=row.get("type", "spend"),
        target_amount=row["target_amount"],
        current_amount=row["current_amount"],
        percent=row["percent"],
        start_date=row.get("start_date"),
        end_date=row.get("end_date"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


@router.get(
    "/stats",
    response_model=DashboardStatsResponse,
    status_code=status.HTTP_200_OK,
    summary="Dashboard statistics",
    description="""
    Totals for a whole year, or for one month when `month` is given.

    - type_summary: one total per type (earn, spend, save) from the
      sum_transactions_amount RPC, retried with backoff
    - category_breakdown: per type, categories sorted by total descending

    `year` defaults to the current year and must be within the last six years.
    """
)
async def get_dashboard_stats(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    year: Optional[int] = Query(None, description="Year (defaults to the current year)"),
    month: Optional[int] = Query(None, ge=1, le=12, description="Month 1-12 for monthly stats"),
) -> DashboardStatsResponse:
    """Statistics for the selected period."""
    selected_year = year if year is not None else date.today().year

    logger.info(f"Dashboard stats for user {auth_user.user_id}: year={selected_year}, month={month}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        stats = await get_period_stats(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            year=selected_year,
            month=month,
            currency=settings.DEFAULT_CURRENCY,
        )
        return DashboardStatsResponse(**stats)

    except ValueError as e:
        logger.warning(f"Invalid dashboard period: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_period",
                "details": str(e)
            }
        )
    except Exception as e:
        logger.error(f"Failed to compute dashboard stats: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "stats_error",
                "details": "Failed to load dashboard statistics"
            }
        )


@router.get(
    "/budgets",
    response_model=BudgetProgressListResponse,
    status_code=status.HTTP_200_OK,
    summary="Budget progress",
    description="""
    Current amount and completion percentage (capped at 100) of every active
    budget, computed by the get_budget_progress RPC.
    """
)
async def get_dashboard_budgets(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> BudgetProgressListResponse:
    logger.info(f"Budget progress for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        progress = await get_budget_progress(supabase_client)
        budgets = [_build_progress_response(row) for row in progress]
        return BudgetProgressListResponse(budgets=budgets, count=len(budgets))

    except Exception as e:
        logger.error(f"Failed to fetch budget progress: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve budget progress"
            }
        )


@router.get(
    "/periods",
    response_model=PeriodOptionsResponse,
    status_code=status.HTTP_200_OK,
    summary="Selectable periods",
)
async def get_dashboard_periods(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> PeriodOptionsResponse:
    """Years (current and five previous) and the twelve months."""
    today = date.today()
    return PeriodOptionsResponse(
        years=[PeriodOption(**option) for option in get_year_options(today)],
        months=[PeriodOption(**option) for option in get_month_options()],
        current_year=today.year,
        current_month=today.month,
    )
