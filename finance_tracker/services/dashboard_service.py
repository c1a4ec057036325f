"""
Dashboard statistics service.

For a period (a whole year or a single month) the dashboard shows:
- the total per transaction type, from the sum_transactions_amount RPC
  (one call per type, earn -> spend -> save)
- a per-category breakdown, grouped here from the period's transaction rows

Both queries run under RLS, so only the caller's rows are counted.
"""

import calendar
import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, cast

from supabase import Client

from finance_tracker.utils.constants import (
    TRANSACTION_TYPE_LABELS,
    TRANSACTION_TYPE_VALUES,
    TRANSACTIONS_TABLE,
)
from finance_tracker.utils.currency import format_currency
from finance_tracker.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)

# Years selectable on the dashboard: the current one and the five before it
YEAR_OPTIONS_COUNT = 6

CATEGORY_BREAKDOWN_SELECT = "type, category_id, categories(name), amount"


def _to_float(value: Any) -> float:
    """Numeric value of an RPC or row field; null, non-numeric, NaN and infinite all count as 0."""
    try:
        number = float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def get_period_range(year: int, month: Optional[int] = None) -> Tuple[str, str]:
    """
    First and last day of a year, or of one month in it, as ISO dates.

    Args:
        year: Calendar year
        month: 1-12 for a monthly period, None for the whole year

    Raises:
        ValueError: If month is outside 1-12
    """
    if month is None:
        return date(year, 1, 1).isoformat(), date(year, 12, 31).isoformat()

    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")

    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1).isoformat(), date(year, month, last_day).isoformat()


def get_year_options(today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Selectable years, newest first."""
    current_year = (today or date.today()).year
    return [
        {"label": str(current_year - i), "value": current_year - i}
        for i in range(YEAR_OPTIONS_COUNT)
    ]


def get_month_options() -> List[Dict[str, Any]]:
    """Selectable months, January (1) to December (12)."""
    return [
        {"label": calendar.month_name[m], "value": m}
        for m in range(1, 13)
    ]


def validate_year(year: int, today: Optional[date] = None) -> None:
    """
    Raises:
        ValueError: If the year is not one of the selectable years
    """
    current_year = (today or date.today()).year
    oldest = current_year - YEAR_OPTIONS_COUNT + 1
    if not oldest <= year <= current_year:
        raise ValueError(f"Year must be between {oldest} and {current_year}, got {year}")


def _category_name(row: Dict[str, Any]) -> Optional[str]:
    # The embedded relation comes back as an object or a one-element list
    joined = row.get("categories")
    if isinstance(joined, list):
        joined = joined[0] if joined else None
    if isinstance(joined, dict):
        return joined.get("name")
    return None


def aggregate_by_category(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Group transaction rows into one total per category.

    Rows without a category_id are skipped. The first row seen for a category
    decides its name and type; an unresolved name becomes "Unknown".
    Insertion order of categories is preserved.
    """
    category_map: Dict[str, Dict[str, Any]] = {}

    for row in rows:
        key = row.get("category_id")
        if not key:
            continue

        amount = _to_float(row.get("amount"))
        existing = category_map.get(key)
        if existing:
            existing["total"] += amount
        else:
            category_map[key] = {
                "category_id": str(key),
                "category_name": _category_name(row) or "Unknown",
                "type": row.get("type"),
                "total": amount,
            }

    return list(category_map.values())


def build_category_breakdown(
    summaries: List[Dict[str, Any]],
    currency: str = "USD",
) -> List[Dict[str, Any]]:
    """
    Split category summaries by transaction type, largest total first.

    Every type is present (possibly with no categories), ordered earn, spend, save.
    """
    breakdown = []
    for transaction_type in TRANSACTION_TYPE_VALUES:
        categories = sorted(
            (s for s in summaries if s.get("type") == transaction_type),
            key=lambda s: s["total"],
            reverse=True,
        )
        total = sum(c["total"] for c in categories)
        breakdown.append({
            "type": transaction_type,
            "label": TRANSACTION_TYPE_LABELS[transaction_type],
            "categories": [
                {**c, "formatted_total": format_currency(c["total"], currency)}
                for c in categories
            ],
            "total": total,
            "formatted_total": format_currency(total, currency),
        })
    return breakdown


async def sum_transactions_amount(
    supabase_client: Client,
    start_date: str,
    end_date: str,
    transaction_type: str,
) -> float:
    """
    Total of one transaction type in [start_date, end_date], via RPC.

    The RPC is retried with backoff; a null or non-numeric result counts as 0.

    Raises:
        Exception: The last RPC error if every attempt failed
    """
    async def _call() -> Any:
        return supabase_client.rpc(
            "sum_transactions_amount",
            {
                "p_from": start_date,
                "p_to": end_date,
                "p_type": transaction_type,
            },
        ).execute()

    outcome = await retry_with_backoff(_call)
    if not outcome.success:
        logger.error(f"sum_transactions_amount failed for type={transaction_type}: {outcome.error}")
        raise outcome.error or Exception("sum_transactions_amount failed")

    return _to_float(getattr(outcome.data, "data", None))


async def get_type_summary(
    supabase_client: Client,
    start_date: str,
    end_date: str,
    currency: str = "USD",
) -> List[Dict[str, Any]]:
    """Totals per transaction type, one RPC call per type in order."""
    summary = []
    for transaction_type in TRANSACTION_TYPE_VALUES:
        total = await sum_transactions_amount(supabase_client, start_date, end_date, transaction_type)
        summary.append({
            "type": transaction_type,
            "label": TRANSACTION_TYPE_LABELS[transaction_type],
            "total": total,
            "formatted_total": format_currency(total, currency),
        })
    return summary


async def get_category_summary(
    supabase_client: Client,
    start_date: str,
    end_date: str,
) -> List[Dict[str, Any]]:
    """Per-category totals for transactions dated within the period."""
    result = (
        supabase_client.table(TRANSACTIONS_TABLE)
        .select(CATEGORY_BREAKDOWN_SELECT)
        .gte("date", start_date)
        .lte("date", end_date)
        .is_("deleted_at", "null")
        .execute()
    )

    rows = cast(List[Dict[str, Any]], result.data or [])
    return aggregate_by_category(rows)


async def get_period_stats(
    supabase_client: Client,
    user_id: str,
    year: int,
    month: Optional[int] = None,
    currency: str = "USD",
) -> Dict[str, Any]:
    """
    Dashboard statistics for a year, or for one month of it.

    Args:
        supabase_client: Authenticated Supabase client
        user_id: The authenticated user's ID (logging only; RLS scopes the data)
        year: Selected year
        month: 1-12 for monthly statistics, None for yearly
        currency: ISO code used for formatted totals

    Returns:
        Dict matching DashboardStatsResponse

    Raises:
        ValueError: If year or month is out of range
    """
    validate_year(year)
    start_date, end_date = get_period_range(year, month)
    period = "month" if month is not None else "year"

    logger.info(f"Computing {period} stats for user {user_id}: {start_date}..{end_date}")

    type_summary = await get_type_summary(supabase_client, start_date, end_date, currency)
    category_summary = await get_category_summary(supabase_client, start_date, end_date)

    return {
        "period": period,
        "year": year,
        "month": month,
        "start_date": start_date,
        "end_date": end_date,
        "type_summary": type_summary,
        "category_breakdown": build_category_breakdown(category_summary, currency),
    }
