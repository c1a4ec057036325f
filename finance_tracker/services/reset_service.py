"""
User data reset service.

reset_user_data deletes every transaction, category, tag and bank account of
auth.uid() inside one database transaction and returns the deleted counts.
This is irreversible; the route requires explicit confirmation.
"""

import logging
from typing import Any, Dict, cast

from supabase import Client

logger = logging.getLogger(__name__)


async def reset_user_data(supabase_client: Client, user_id: str) -> Dict[str, Any]:
    """
    Delete all of the caller's data via the reset_user_data RPC.

    Returns:
        Deleted counts (transactions, categories, tags, bank accounts)

    Raises:
        postgrest.exceptions.APIError: If the RPC fails
        Exception: If the RPC returns nothing
    """
    logger.warning(f"Resetting all data for user {user_id}")

    result = supabase_client.rpc("reset_user_data").execute()

    data = result.data
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, dict):
        raise Exception("reset_user_data returned no result")

    logger.info(f"Data reset completed for user {user_id}")

    return cast(Dict[str, Any], data)
