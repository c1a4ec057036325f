"""
Category persistence service.

RULES:
1. Every category belongs to one user and one transaction type (earn/spend/save)
2. Categories are soft-deleted (deleted_at is stamped); transactions keep their
   category_id so history stays intact
3. Soft-deleted categories are hidden from list and get
4. RLS is enforced automatically via the authenticated Supabase client
"""

import logging
from typing import Any, Dict, List, Optional, cast

from supabase import Client

from finance_tracker.db.partial_update import build_update_data
from finance_tracker.db.soft_delete import delete_record
from finance_tracker.utils.constants import CATEGORIES_TABLE

logger = logging.getLogger(__name__)


async def get_all_categories(
    supabase_client: Client,
    user_id: str,
    limit: int = 100,
    offset: int = 0,
    transaction_type: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Fetch the user's active categories.

    Args:
        supabase_client: Authenticated Supabase client
        user_id: The authenticated user's ID
        limit: Maximum number of categories to return
        offset: Number of categories to skip (for pagination)
        transaction_type: Optional filter ("earn", "spend" or "save")

    Returns:
        List of category records ordered by name

    Security:
        - Categories filtered by RLS to owner only
    """
    logger.debug(f"Fetching categories for user {user_id} (limit={limit}, offset={offset}, type={transaction_type})")

    query = (
        supabase_client.table(CATEGORIES_TABLE)
        .select("*")
        .eq("user_id", user_id)
        .is_("deleted_at", "null")
    )

    if transaction_type:
        query = query.eq("type", transaction_type)

    result = query.order("name").range(offset, offset + limit - 1).execute()

    categories = cast(List[Dict[str, Any]], result.data or [])

    logger.info(f"Fetched {len(categories)} categories for user {user_id}")

    return categories


async def get_category_by_id(
    supabase_client: Client,
    user_id: str,
    category_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Fetch a single active category by its ID.

    Returns:
        Category record if found and accessible, None otherwise
    """
    logger.debug(f"Fetching category {category_id} for user {user_id}")

    result = (
        supabase_client.table(CATEGORIES_TABLE)
        .select("*")
        .eq("id", category_id)
        .eq("user_id", user_id)
        .is_("deleted_at", "null")
        .execute()
    )

    if not result.data:
        logger.warning(f"Category {category_id} not found or not accessible by user {user_id}")
        return None

    return cast(Dict[str, Any], result.data[0])


async def create_category(
    supabase_client: Client,
    user_id: str,
    transaction_type: str,
    name: str,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a new category.

    Args:
        supabase_client: Authenticated Supabase client
        user_id: The authenticated user's ID
        transaction_type: "earn", "spend" or "save"
        name: Category display name
        description: Optional free text

    Returns:
        The created category record

    Raises:
        Exception: If the database operation returns no row
    """
    category_data = {
        "user_id": user_id,
        "type": transaction_type,
        "name": name,
        "description": description,
    }

    logger.info(f"Creating category for user {user_id}: name={name}, type={transaction_type}")

    result = supabase_client.table(CATEGORIES_TABLE).insert(category_data).execute()

    if not result.data:
        raise Exception("Failed to create category: no data returned")

    created = cast(Dict[str, Any], result.data[0])

    logger.info(f"Category created successfully: id={created.get('id')}, user_id={user_id}")

    return created


async def update_category(
    supabase_client: Client,
    user_id: str,
    category_id: str,
    updates: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    """
    Update a category (partial update).

    Only keys present in updates are written; description=None clears it.

    Raises:
        ValueError: If type or name is set to None

    Returns:
        Updated category record, or None if not found or not accessible
    """
    existing = await get_category_by_id(supabase_client, user_id, category_id)
    if not existing:
        return None

    update_data = build_update_data(
        updates,
        columns=("type", "name", "description"),
        required=("type", "name"),
    )

    if not update_data:
        return existing

    logger.info(f"Updating category {category_id} for user {user_id}: fields={list(update_data)}")

    result = (
        supabase_client.table(CATEGORIES_TABLE)
        .update(update_data)
        .eq("id", category_id)
        .execute()
    )

    if not result.data:
        logger.warning(f"Update of category {category_id} returned no rows")
        return None

    logger.info(f"Category {category_id} updated successfully")

    return cast(Dict[str, Any], result.data[0])


async def delete_category(
    supabase_client: Client,
    user_id: str,
    category_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Soft-delete a category.

    Transactions and budget links that reference the category are left alone.

    Returns:
        The soft-deleted row (with deleted_at set), or None if not found
    """
    existing = await get_category_by_id(supabase_client, user_id, category_id)
    if not existing:
        logger.warning(f"Cannot delete category {category_id}: not found or not accessible by user {user_id}")
        return None

    return delete_record(supabase_client, CATEGORIES_TABLE, category_id)
