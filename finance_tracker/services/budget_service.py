"""
Budget persistence service.

RULES:
1. A budget targets one transaction type over an optional date range
2. Categories are linked via budget_categories, tags via budget_tags
3. Links are written after the budget row; a failed link write does NOT undo
   the budget, it is reported back in link_errors
4. Budgets are soft-deleted (deleted_at is stamped); links are kept
5. Progress (current amount per budget) is computed by the get_budget_progress RPC
6. RLS is enforced automatically via the authenticated Supabase client
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple, cast

from supabase import Client

from finance_tracker.db.partial_update import build_update_data
from finance_tracker.db.soft_delete import delete_record
from finance_tracker.utils.constants import (
    BUDGET_CATEGORIES_TABLE,
    BUDGET_TAGS_TABLE,
    BUDGETS_TABLE,
)

logger = logging.getLogger(__name__)

BUDGET_SELECT = "*, budget_categories(category_id), budget_tags(tag_id)"

BUDGET_COLUMNS = ("name", "description", "type", "target_amount", "start_date", "end_date")
REQUIRED_BUDGET_COLUMNS = ("name", "type", "target_amount")


def flatten_budget(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replace the embedded junction rows with plain id lists.

    budget_categories: [{"category_id": "..."}] -> category_ids: ["..."]
    budget_tags: [{"tag_id": "..."}] -> tag_ids: ["..."]
    """
    budget = {k: v for k, v in row.items() if k not in ("budget_categories", "budget_tags")}

    budget["category_ids"] = [
        str(link["category_id"])
        for link in (row.get("budget_categories") or [])
        if link and link.get("category_id")
    ]
    budget["tag_ids"] = [
        str(link["tag_id"])
        for link in (row.get("budget_tags") or [])
        if link and link.get("tag_id")
    ]

    return budget


def compute_progress_percent(current_amount: float, target_amount: float) -> int:
    """Progress towards target as a whole percentage, capped at 100 (0 if no target)."""
    if target_amount <= 0:
        return 0
    # half-up, so 12.5% shows as 13%
    return min(100, math.floor(current_amount / target_amount * 100 + 0.5))


def check_date_range(start_date: Optional[str], end_date: Optional[str]) -> None:
    """Raise ValueError if end_date falls before start_date. Open ends always pass."""
    # ISO-8601 dates order lexically; timestamps are cut to the date part
    if start_date and end_date and str(end_date)[:10] < str(start_date)[:10]:
        raise ValueError("end_date must not be before start_date")


def _to_float(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


async def get_all_budgets(
    supabase_client: Client,
    user_id: str,
    limit: int = 50,
    offset: int = 0,
    transaction_type: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Fetch the user's active budgets with linked category and tag ids.

    Args:
        supabase_client: Authenticated Supabase client
        user_id: The authenticated user's ID
        limit: Maximum number of budgets to return (default 50)
        offset: Number of budgets to skip for pagination (default 0)
        transaction_type: Optional filter by type (earn/spend/save)

    Returns:
        List of budget records, newest first
    """
    logger.debug(f"Fetching budgets for user {user_id} (limit={limit}, offset={offset}, type={transaction_type})")

    query = (
        supabase_client.table(BUDGETS_TABLE)
        .select(BUDGET_SELECT)
        .eq("user_id", user_id)
        .is_("deleted_at", "null")
    )

    if transaction_type:
        query = query.eq("type", transaction_type)

    result = query.order("created_at", desc=True).range(offset, offset + limit - 1).execute()

    budgets = [flatten_budget(row) for row in cast(List[Dict[str, Any]], result.data or [])]

    logger.info(f"Fetched {len(budgets)} budgets for user {user_id}")

    return budgets


async def get_budget_by_id(
    supabase_client: Client,
    user_id: str,
    budget_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Fetch a single active budget with linked category and tag ids.

    Returns:
        Budget record if found and accessible, None otherwise
    """
    logger.debug(f"Fetching budget {budget_id} for user {user_id}")

    result = (
        supabase_client.table(BUDGETS_TABLE)
        .select(BUDGET_SELECT)
        .eq("id", budget_id)
        .eq("user_id", user_id)
        .is_("deleted_at", "null")
        .execute()
    )

    if not result.data:
        logger.warning(f"Budget {budget_id} not found or not accessible by user {user_id}")
        return None

    return flatten_budget(cast(Dict[str, Any], result.data[0]))


async def _insert_links(
    supabase_client: Client,
    table: str,
    column: str,
    budget_id: str,
    ids: List[str],
) -> bool:
    if not ids:
        return True
    try:
        supabase_client.table(table).insert(
            [{"budget_id": budget_id, column: value} for value in ids]
        ).execute()
        return True
    except Exception as e:
        logger.error(f"Failed to link {len(ids)} rows into {table} for budget {budget_id}: {e}", exc_info=True)
        return False


async def _delete_links(
    supabase_client: Client,
    table: str,
    budget_id: str,
) -> bool:
    try:
        supabase_client.table(table).delete().eq("budget_id", budget_id).execute()
        return True
    except Exception as e:
        logger.error(f"Failed to clear {table} for budget {budget_id}: {e}", exc_info=True)
        return False


async def create_budget(
    supabase_client: Client,
    user_id: str,
    name: str,
    transaction_type: str,
    target_amount: float,
    description: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    category_ids: Optional[List[str]] = None,
    tag_ids: Optional[List[str]] = None,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Create a budget, then link its categories and tags.

    Returns:
        Tuple of (created budget, link_errors) where link_errors names the
        link tables that failed ("categories", "tags")

    Raises:
        Exception: If the budget insert returns no row
    """
    budget_data = {
        "user_id": user_id,
        "name": name,
        "description": description,
        "type": transaction_type,
        "target_amount": target_amount,
        "start_date": start_date,
        "end_date": end_date,
    }

    logger.info(f"Creating {transaction_type} budget for user {user_id}: name={name}")

    result = supabase_client.table(BUDGETS_TABLE).insert(budget_data).execute()

    if not result.data:
        raise Exception("Failed to create budget: no data returned")

    created = cast(Dict[str, Any], result.data[0])
    budget_id = str(created["id"])

    category_ids = category_ids or []
    tag_ids = tag_ids or []
    link_errors: List[str] = []

    if await _insert_links(supabase_client, BUDGET_CATEGORIES_TABLE, "category_id", budget_id, category_ids):
        created["category_ids"] = category_ids
    else:
        created["category_ids"] = []
        link_errors.append("categories")

    if await _insert_links(supabase_client, BUDGET_TAGS_TABLE, "tag_id", budget_id, tag_ids):
        created["tag_ids"] = tag_ids
    else:
        created["tag_ids"] = []
        link_errors.append("tags")

    logger.info(f"Budget created successfully: id={budget_id}, link_errors={link_errors}")

    return created, link_errors


async def update_budget(
    supabase_client: Client,
    user_id: str,
    budget_id: str,
    updates: Dict[str, Any],
) -> Tuple[Optional[Dict[str, Any]], List[str]]:
    """
    Update a budget (partial update) and replace its links when given.

    updates holds only the fields the caller sent; description, start_date
    and end_date may be set to None to clear them. The resulting date range
    (sent values over stored ones) must not end before it starts.

    Link replacement deletes the existing rows and inserts the new set.
    Each failed step is reported as e.g. "categories (delete)" or "tags (insert)".

    Returns:
        Tuple of (updated budget or None if not found, link_errors)

    Raises:
        ValueError: If a required column is cleared or the date range is inverted
    """
    update_data = build_update_data(updates, columns=BUDGET_COLUMNS, required=REQUIRED_BUDGET_COLUMNS)
    category_ids: Optional[List[str]] = updates.get("category_ids")
    tag_ids: Optional[List[str]] = updates.get("tag_ids")

    existing = await get_budget_by_id(supabase_client, user_id, budget_id)
    if not existing:
        return None, []

    check_date_range(
        update_data.get("start_date", existing.get("start_date")),
        update_data.get("end_date", existing.get("end_date")),
    )

    updated = existing
    if update_data:
        logger.info(f"Updating budget {budget_id} for user {user_id}: fields={list(update_data)}")

        result = (
            supabase_client.table(BUDGETS_TABLE)
            .update(update_data)
            .eq("id", budget_id)
            .execute()
        )

        if not result.data:
            logger.warning(f"Update of budget {budget_id} returned no rows")
            return None, []

        updated = {**existing, **cast(Dict[str, Any], result.data[0])}

    link_errors: List[str] = []

    if category_ids is not None:
        if not await _delete_links(supabase_client, BUDGET_CATEGORIES_TABLE, budget_id):
            link_errors.append("categories (delete)")
        elif not await _insert_links(supabase_client, BUDGET_CATEGORIES_TABLE, "category_id", budget_id, category_ids):
            link_errors.append("categories (insert)")
            updated["category_ids"] = []
        else:
            updated["category_ids"] = category_ids

    if tag_ids is not None:
        if not await _delete_links(supabase_client, BUDGET_TAGS_TABLE, budget_id):
            link_errors.append("tags (delete)")
        elif not await _insert_links(supabase_client, BUDGET_TAGS_TABLE, "tag_id", budget_id, tag_ids):
            link_errors.append("tags (insert)")
            updated["tag_ids"] = []
        else:
            updated["tag_ids"] = tag_ids

    logger.info(f"Budget {budget_id} updated successfully (link_errors={link_errors})")

    return updated, link_errors


async def delete_budget(
    supabase_client: Client,
    user_id: str,
    budget_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Soft-delete a budget. Transactions are never touched.

    Returns:
        The soft-deleted row, or None if not found
    """
    existing = await get_budget_by_id(supabase_client, user_id, budget_id)
    if not existing:
        logger.warning(f"Cannot delete budget {budget_id}: not found or not accessible")
        return None

    return delete_record(supabase_client, BUDGETS_TABLE, budget_id)


async def get_budget_progress(supabase_client: Client) -> List[Dict[str, Any]]:
    """
    Fetch progress for every active budget of the caller.

    Calls the get_budget_progress RPC (scoped to auth.uid() on the database
    side), coerces the numeric columns PostgREST returns as strings, and adds
    the capped completion percentage.

    Raises:
        postgrest.exceptions.APIError: If the RPC fails
    """
    result = supabase_client.rpc("get_budget_progress").execute()

    rows = cast(List[Dict[str, Any]], result.data or [])

    progress = []
    for row in rows:
        target = _to_float(row.get("target_amount"))
        current = _to_float(row.get("current_amount"))
        progress.append({
            **row,
            "target_amount": target,
            "current_amount": current,
            "percent": compute_progress_percent(current, target),
        })

    logger.info(f"Fetched progress for {len(progress)} budgets")

    return progress
