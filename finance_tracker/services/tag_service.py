"""
Tag persistence service.

Tags are soft-deleted; transaction_tags and budget_tags links are kept.
"""

import logging
from typing import Any, Dict, List, Optional, cast

from supabase import Client

from finance_tracker.db.partial_update import build_update_data
from finance_tracker.db.soft_delete import delete_record
from finance_tracker.utils.constants import TAGS_TABLE

logger = logging.getLogger(__name__)


async def get_all_tags(
    supabase_client: Client,
    user_id: str,
    limit: int = 100,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """Fetch the user's active tags ordered by name."""
    result = (
        supabase_client.table(TAGS_TABLE)
        .select("*")
        .eq("user_id", user_id)
        .is_("deleted_at", "null")
        .order("name")
        .range(offset, offset + limit - 1)
        .execute()
    )

    tags = cast(List[Dict[str, Any]], result.data or [])
    logger.info(f"Fetched {len(tags)} tags for user {user_id}")
    return tags


async def get_tag_by_id(
    supabase_client: Client,
    user_id: str,
    tag_id: str,
) -> Optional[Dict[str, Any]]:
    result = (
        supabase_client.table(TAGS_TABLE)
        .select("*")
        .eq("id", tag_id)
        .eq("user_id", user_id)
        .is_("deleted_at", "null")
        .execute()
    )

    if not result.data:
        logger.warning(f"Tag {tag_id} not found or not accessible by user {user_id}")
        return None

    return cast(Dict[str, Any], result.data[0])


async def create_tag(
    supabase_client: Client,
    user_id: str,
    name: str,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    logger.info(f"Creating tag for user {user_id}: name={name}")

    result = (
        supabase_client.table(TAGS_TABLE)
        .insert({"user_id": user_id, "name": name, "description": description})
        .execute()
    )

    if not result.data:
        raise Exception("Failed to create tag: no data returned")

    return cast(Dict[str, Any], result.data[0])


async def update_tag(
    supabase_client: Client,
    user_id: str,
    tag_id: str,
    updates: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    """Partial update. Returns None if the tag does not exist."""
    existing = await get_tag_by_id(supabase_client, user_id, tag_id)
    if not existing:
        return None

    update_data = build_update_data(updates, columns=("name", "description"), required=("name",))

    if not update_data:
        return existing

    result = (
        supabase_client.table(TAGS_TABLE)
        .update(update_data)
        .eq("id", tag_id)
        .execute()
    )

    if not result.data:
        logger.warning(f"Update of tag {tag_id} returned no rows")
        return None

    logger.info(f"Tag {tag_id} updated successfully")
    return cast(Dict[str, Any], result.data[0])


async def delete_tag(
    supabase_client: Client,
    user_id: str,
    tag_id: str,
) -> Optional[Dict[str, Any]]:
    """Soft-delete a tag. Returns None if not found."""
    existing = await get_tag_by_id(supabase_client, user_id, tag_id)
    if not existing:
        return None

    return delete_record(supabase_client, TAGS_TABLE, tag_id)
