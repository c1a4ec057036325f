"""
Bank account persistence service.

RULES:
1. Bank accounts are soft-deleted; transactions keep their bank_account_id
2. RLS is enforced automatically via the authenticated Supabase client
"""

import logging
from typing import Any, Dict, List, Optional, cast

from supabase import Client

from finance_tracker.db.partial_update import build_update_data
from finance_tracker.db.soft_delete import delete_record
from finance_tracker.utils.constants import BANK_ACCOUNTS_TABLE

logger = logging.getLogger(__name__)


async def get_user_bank_accounts(
    supabase_client: Client,
    user_id: str,
    limit: int = 100,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """
    Fetch all active bank accounts belonging to the user.

    Args:
        supabase_client: Authenticated Supabase client
        user_id: The authenticated user's ID
        limit: Maximum number of accounts to return
        offset: Number of accounts to skip

    Returns:
        List of bank account records ordered by name
    """
    logger.debug(f"Fetching bank accounts for user {user_id}")

    result = (
        supabase_client.table(BANK_ACCOUNTS_TABLE)
        .select("*")
        .eq("user_id", user_id)
        .is_("deleted_at", "null")
        .order("name")
        .range(offset, offset + limit - 1)
        .execute()
    )

    accounts = cast(List[Dict[str, Any]], result.data or [])

    logger.info(f"Fetched {len(accounts)} bank accounts for user {user_id}")

    return accounts


async def get_bank_account_by_id(
    supabase_client: Client,
    user_id: str,
    bank_account_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Fetch a single active bank account by ID.

    Returns:
        Bank account record if found and accessible, None otherwise
    """
    result = (
        supabase_client.table(BANK_ACCOUNTS_TABLE)
        .select("*")
        .eq("id", bank_account_id)
        .eq("user_id", user_id)
        .is_("deleted_at", "null")
        .execute()
    )

    if not result.data:
        logger.warning(f"Bank account {bank_account_id} not found or not accessible by user {user_id}")
        return None

    return cast(Dict[str, Any], result.data[0])


async def create_bank_account(
    supabase_client: Client,
    user_id: str,
    name: str,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a new bank account.

    Raises:
        Exception: If the database operation returns no row
    """
    logger.info(f"Creating bank account for user {user_id}: name={name}")

    result = (
        supabase_client.table(BANK_ACCOUNTS_TABLE)
        .insert({"user_id": user_id, "name": name, "description": description})
        .execute()
    )

    if not result.data:
        raise Exception("Failed to create bank account: no data returned")

    created = cast(Dict[str, Any], result.data[0])

    logger.info(f"Bank account created successfully: id={created.get('id')}")

    return created


async def update_bank_account(
    supabase_client: Client,
    user_id: str,
    bank_account_id: str,
    updates: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    """
    Update a bank account (partial update).

    Raises:
        ValueError: If name is set to None

    Returns:
        Updated record, or None if not found or not accessible
    """
    existing = await get_bank_account_by_id(supabase_client, user_id, bank_account_id)
    if not existing:
        return None

    update_data = build_update_data(updates, columns=("name", "description"), required=("name",))

    if not update_data:
        return existing

    logger.info(f"Updating bank account {bank_account_id} for user {user_id}")

    result = (
        supabase_client.table(BANK_ACCOUNTS_TABLE)
        .update(update_data)
        .eq("id", bank_account_id)
        .execute()
    )

    if not result.data:
        logger.warning(f"Update of bank account {bank_account_id} returned no rows")
        return None

    return cast(Dict[str, Any], result.data[0])


async def delete_bank_account(
    supabase_client: Client,
    user_id: str,
    bank_account_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Soft-delete a bank account.

    Returns:
        The soft-deleted row, or None if not found
    """
    existing = await get_bank_account_by_id(supabase_client, user_id, bank_account_id)
    if not existing:
        logger.warning(f"Cannot delete bank account {bank_account_id}: not found")
        return None

    return delete_record(supabase_client, BANK_ACCOUNTS_TABLE, bank_account_id)
