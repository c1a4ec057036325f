"""
Soft-delete aware deletion for CRUD resources.

Rows of the resources in SOFT_DELETE_RESOURCES are never removed: deleting
one stamps deleted_at with the current time so transaction history keeps
its references. Every other resource is deleted for real.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, cast

from supabase import Client

from finance_tracker.utils.constants import SOFT_DELETE_RESOURCES

logger = logging.getLogger(__name__)


def is_soft_deletable(resource: str) -> bool:
    """Return True if deletes of this resource only stamp deleted_at."""
    return resource in SOFT_DELETE_RESOURCES


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def delete_record(
    supabase_client: Client,
    resource: str,
    record_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Delete a single row by id, soft-deleting where the resource supports it.

    Args:
        supabase_client: Authenticated Supabase client
        resource: Table name (e.g. "transactions")
        record_id: UUID of the row

    Returns:
        The updated (soft) or removed (hard) row, or None if nothing matched

    Raises:
        postgrest.exceptions.APIError: If the database rejects the operation
    """
    if is_soft_deletable(resource):
        logger.info(f"Soft-deleting {resource} row {record_id}")
        result = (
            supabase_client.table(resource)
            .update({"deleted_at": _utc_now_iso()})
            .eq("id", record_id)
            .execute()
        )
    else:
        logger.info(f"Deleting {resource} row {record_id}")
        result = (
            supabase_client.table(resource)
            .delete()
            .eq("id", record_id)
            .execute()
        )

    if not result.data:
        logger.warning(f"Delete of {resource} row {record_id} matched no rows")
        return None

    return cast(Dict[str, Any], result.data[0])
