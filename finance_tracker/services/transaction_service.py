"""
Transaction persistence service.

RULES:
1. Lists are read from the transactions_with_details view, which resolves
   category_name, bank_account_name and tag_names
2. Tags are never written directly: set_transaction_tags(p_transaction_id, p_tag_ids)
   replaces a transaction's tag set atomically on the database side
3. A failed tag RPC does not undo the saved transaction; callers get tags_updated=False
4. Transactions are soft-deleted (deleted_at is stamped)
5. RLS is enforced automatically via the authenticated Supabase client
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, cast

from supabase import Client

from finance_tracker.db.partial_update import build_update_data
from finance_tracker.db.soft_delete import delete_record
from finance_tracker.utils.constants import TRANSACTIONS_DETAILS_VIEW, TRANSACTIONS_TABLE

logger = logging.getLogger(__name__)

# Single-record select: raw row plus tag links and the category name
TRANSACTION_DETAIL_SELECT = "*, transaction_tags(tag_id), category:categories(id, name)"

ALLOWED_SORT_FIELDS = ("date", "amount", "category_name", "bank_account_name")

TRANSACTION_COLUMNS = ("date", "type", "category_id", "amount", "bank_account_id", "notes")
REQUIRED_TRANSACTION_COLUMNS = ("date", "type", "category_id", "amount")


def flatten_transaction(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn the nested PostgREST shape of TRANSACTION_DETAIL_SELECT into flat fields.

    transaction_tags: [{"tag_id": "..."}] -> tag_ids: ["..."]
    category: {"id": "...", "name": "..."} -> category_name: "..."
    """
    flat = {k: v for k, v in row.items() if k not in ("transaction_tags", "category")}

    links = row.get("transaction_tags") or []
    flat["tag_ids"] = [str(link["tag_id"]) for link in links if link and link.get("tag_id")]

    category = row.get("category")
    if isinstance(category, list):
        category = category[0] if category else None
    if isinstance(category, dict) and "category_name" not in flat:
        flat["category_name"] = category.get("name")

    return flat


async def set_transaction_tags(
    supabase_client: Client,
    transaction_id: str,
    tag_ids: List[str],
) -> None:
    """
    Replace the tag set of a transaction via the set_transaction_tags RPC.

    Raises:
        postgrest.exceptions.APIError: If the RPC fails
    """
    logger.debug(f"Setting {len(tag_ids)} tags on transaction {transaction_id}")

    supabase_client.rpc(
        "set_transaction_tags",
        {
            "p_transaction_id": transaction_id,
            "p_tag_ids": tag_ids,
        },
    ).execute()


async def _apply_tags(
    supabase_client: Client,
    transaction_id: str,
    tag_ids: List[str],
) -> bool:
    try:
        await set_transaction_tags(supabase_client, transaction_id, tag_ids)
        return True
    except Exception as e:
        logger.error(f"Failed to set tags on transaction {transaction_id}: {e}", exc_info=True)
        return False


async def create_transaction(
    supabase_client: Client,
    user_id: str,
    date: str,
    transaction_type: str,
    category_id: str,
    amount: float,
    bank_account_id: Optional[str] = None,
    notes: Optional[str] = None,
    tag_ids: Optional[List[str]] = None,
) -> Tuple[Dict[str, Any], bool]:
    """
    Insert a transaction, then attach its tags.

    Args:
        supabase_client: Authenticated Supabase client
        user_id: The authenticated user's ID
        date: ISO-8601 date
        transaction_type: "earn", "spend" or "save"
        category_id: Category UUID
        amount: Non-negative amount
        bank_account_id: Optional bank account UUID
        notes: Optional free text
        tag_ids: Tags to attach (none by default)

    Returns:
        Tuple of (created transaction with tag_ids, tags_updated)

    Raises:
        Exception: If the insert returns no row
    """
    transaction_data = {
        "user_id": user_id,
        "date": date,
        "type": transaction_type,
        "category_id": category_id,
        "amount": amount,
        "bank_account_id": bank_account_id,
        "notes": notes,
    }

    logger.info(f"Creating {transaction_type} transaction for user {user_id}")

    result = supabase_client.table(TRANSACTIONS_TABLE).insert(transaction_data).execute()

    if not result.data:
        raise Exception("Failed to create transaction: no data returned")

    created = cast(Dict[str, Any], result.data[0])
    transaction_id = str(created["id"])

    tags_updated = True
    tag_ids = tag_ids or []
    if tag_ids:
        tags_updated = await _apply_tags(supabase_client, transaction_id, tag_ids)

    created["tag_ids"] = tag_ids if tags_updated else []

    logger.info(f"Transaction created successfully: id={transaction_id}, tags_updated={tags_updated}")

    return created, tags_updated


async def get_user_transactions(
    supabase_client: Client,
    user_id: str,
    transaction_type: str = "spend",
    limit: int = 50,
    offset: int = 0,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    category_id: Optional[str] = None,
    bank_account_id: Optional[str] = None,
    sort_by: str = "date",
    sort_order: str = "desc",
) -> List[Dict[str, Any]]:
    """
    Fetch the user's transactions of one type from transactions_with_details.

    Args:
        supabase_client: Authenticated Supabase client
        user_id: The authenticated user's ID
        transaction_type: "earn", "spend" or "save" (default "spend")
        limit: Maximum number of transactions to return
        offset: Number of transactions to skip (for pagination)
        from_date: Optional inclusive start date (ISO-8601)
        to_date: Optional inclusive end date (ISO-8601)
        category_id: Optional filter by category
        bank_account_id: Optional filter by bank account
        sort_by: date, amount, category_name or bank_account_name (default date)
        sort_order: asc or desc (default desc)

    Returns:
        List of view rows with category_name, bank_account_name and tag_names

    Security:
        - The view is defined with security_invoker, so RLS still applies
    """
    logger.debug(
        f"Fetching {transaction_type} transactions for user {user_id} "
        f"(limit={limit}, offset={offset}, sort_by={sort_by}, sort_order={sort_order})"
    )

    query = (
        supabase_client.table(TRANSACTIONS_DETAILS_VIEW)
        .select("*")
        .eq("user_id", user_id)
        .eq("type", transaction_type)
    )

    if from_date:
        query = query.gte("date", from_date)
    if to_date:
        query = query.lte("date", to_date)
    if category_id:
        query = query.eq("category_id", category_id)
    if bank_account_id:
        query = query.eq("bank_account_id", bank_account_id)

    if sort_by not in ALLOWED_SORT_FIELDS:
        logger.warning(f"Invalid sort_by '{sort_by}', defaulting to 'date'")
        sort_by = "date"

    if sort_order not in ("asc", "desc"):
        logger.warning(f"Invalid sort_order '{sort_order}', defaulting to 'desc'")
        sort_order = "desc"

    result = (
        query.order(sort_by, desc=sort_order == "desc")
        .range(offset, offset + limit - 1)
        .execute()
    )

    transactions = cast(List[Dict[str, Any]], result.data or [])

    logger.info(f"Fetched {len(transactions)} transactions for user {user_id}")

    return transactions


async def get_transaction_by_id(
    supabase_client: Client,
    user_id: str,
    transaction_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Fetch a single active transaction with its tag ids and category name.

    Returns:
        Flattened transaction record, or None if not found or soft-deleted
    """
    logger.debug(f"Fetching transaction {transaction_id} for user {user_id}")

    result = (
        supabase_client.table(TRANSACTIONS_TABLE)
        .select(TRANSACTION_DETAIL_SELECT)
        .eq("id", transaction_id)
        .eq("user_id", user_id)
        .is_("deleted_at", "null")
        .execute()
    )

    if not result.data:
        logger.warning(f"Transaction {transaction_id} not found or not accessible by user {user_id}")
        return None

    return flatten_transaction(cast(Dict[str, Any], result.data[0]))


async def update_transaction(
    supabase_client: Client,
    user_id: str,
    transaction_id: str,
    updates: Dict[str, Any],
) -> Tuple[Optional[Dict[str, Any]], bool]:
    """
    Update a transaction (partial update), then replace its tags if tag_ids is given.

    updates holds only the fields the caller sent. bank_account_id=None and
    notes=None clear those columns; date, type, category_id and amount
    cannot be cleared.

    The row is saved first. If the tag RPC then fails the update still stands
    and tags_updated is False.

    Returns:
        Tuple of (updated transaction or None if not found, tags_updated)

    Raises:
        ValueError: If a required column is set to None
    """
    update_data = build_update_data(updates, columns=TRANSACTION_COLUMNS, required=REQUIRED_TRANSACTION_COLUMNS)
    tag_ids: Optional[List[str]] = updates.get("tag_ids")

    existing = await get_transaction_by_id(supabase_client, user_id, transaction_id)
    if not existing:
        return None, False

    updated = existing
    if update_data:
        logger.info(f"Updating transaction {transaction_id} for user {user_id}: fields={list(update_data)}")

        result = (
            supabase_client.table(TRANSACTIONS_TABLE)
            .update(update_data)
            .eq("id", transaction_id)
            .execute()
        )

        if not result.data:
            logger.warning(f"Update of transaction {transaction_id} returned no rows")
            return None, False

        updated = {**existing, **cast(Dict[str, Any], result.data[0])}

    tags_updated = True
    if tag_ids is not None:
        tags_updated = await _apply_tags(supabase_client, transaction_id, tag_ids)
        if tags_updated:
            updated["tag_ids"] = tag_ids

    logger.info(f"Transaction {transaction_id} updated successfully (tags_updated={tags_updated})")

    return updated, tags_updated


async def delete_transaction(
    supabase_client: Client,
    user_id: str,
    transaction_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Soft-delete a transaction.

    Returns:
        The soft-deleted row, or None if not found
    """
    existing = await get_transaction_by_id(supabase_client, user_id, transaction_id)
    if not existing:
        logger.warning(f"Cannot delete transaction {transaction_id}: not found or not accessible")
        return None

    return delete_record(supabase_client, TRANSACTIONS_TABLE, transaction_id)
