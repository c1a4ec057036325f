"""
Bulk JSON upload service.

Accepted file shapes:
- Legacy: a top-level array, treated as the transactions section
- Object: {"categories": [...], "bank_accounts": [...], "tags": [...], "transactions": [...]},
  every section optional; sections that are not arrays are ignored

The parsed payload is forwarded verbatim to the bulk_upload_data RPC, which
validates rows, resolves names (category, bank_account, tags) and inserts
everything in one database transaction. Nothing is written here.
"""

import json
import logging
from typing import Any, Dict, List, Optional, cast

from postgrest.exceptions import APIError
from supabase import Client

from finance_tracker.schemas.settings import BulkUploadPayload

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 1024 * 1024  # 1MB

PAYLOAD_SECTIONS = ("categories", "bank_accounts", "tags", "transactions")

SECTION_LABELS = {
    "categories": "categories",
    "bank_accounts": "bank accounts",
    "tags": "tags",
    "transactions": "transactions",
}

UNSUPPORTED_SHAPE_MESSAGE = (
    "JSON must be an array of transactions or an object with optional sections: "
    "categories, bank_accounts, tags, transactions"
)

EMPTY_PAYLOAD_MESSAGE = (
    "JSON must contain at least one of: categories, bank_accounts, tags, or transactions."
)


class BulkUploadError(ValueError):
    """
    The upload was rejected, by local validation or by the bulk_upload_data RPC.

    Attributes:
        row_errors: Per-row messages ("Row 3: invalid type") when the RPC reported them
    """

    def __init__(self, message: str, row_errors: Optional[List[str]] = None):
        super().__init__(message)
        self.row_errors = row_errors or []


def format_size_limit(max_bytes: int) -> str:
    """1048576 -> "1MB", 524288 -> "512KB"."""
    mb = 1024 * 1024
    if max_bytes >= mb and max_bytes % mb == 0:
        return f"{max_bytes // mb}MB"
    if max_bytes >= 1024 and max_bytes % 1024 == 0:
        return f"{max_bytes // 1024}KB"
    return f"{max_bytes} bytes"


def validate_upload_file(
    filename: Optional[str],
    size: int,
    max_bytes: int = DEFAULT_MAX_FILE_SIZE,
) -> None:
    """
    Check size first, then extension.

    Raises:
        BulkUploadError: If the file is too large or is not a .json file
    """
    if size > max_bytes:
        raise BulkUploadError(
            f"File is too large. Maximum allowed size is {format_size_limit(max_bytes)}."
        )

    if not filename or not filename.lower().endswith(".json"):
        raise BulkUploadError("Invalid file type. Please upload a JSON file.")


def decode_upload(content: bytes) -> str:
    """
    Raises:
        BulkUploadError: If the bytes are not UTF-8
    """
    try:
        # utf-8-sig drops a BOM written by some editors
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise BulkUploadError("File must be UTF-8 encoded JSON.")


def parse_upload_file(file_content: str) -> BulkUploadPayload:
    """
    Parse the text of an upload into its typed sections.

    Raises:
        BulkUploadError: On invalid JSON or an unsupported top-level shape
    """
    try:
        parsed = json.loads(file_content)
    except json.JSONDecodeError as e:
        raise BulkUploadError(
            f"Failed to parse JSON file: {e.msg} (line {e.lineno}, column {e.colno})."
        )

    if isinstance(parsed, list):
        return BulkUploadPayload(transactions=parsed)

    if isinstance(parsed, dict):
        sections = {
            name: parsed[name]
            for name in PAYLOAD_SECTIONS
            if isinstance(parsed.get(name), list)
        }
        return BulkUploadPayload(**sections)

    raise BulkUploadError(UNSUPPORTED_SHAPE_MESSAGE)


def get_section_counts(payload: BulkUploadPayload) -> Dict[str, int]:
    return {name: len(getattr(payload, name) or []) for name in PAYLOAD_SECTIONS}


def get_upload_summary(payload: BulkUploadPayload) -> str:
    """Human readable summary, e.g. "2 categories, 5 transactions", or "No data"."""
    parts = [
        f"{count} {SECTION_LABELS[name]}"
        for name, count in get_section_counts(payload).items()
        if count
    ]
    return ", ".join(parts) or "No data"


def _row_errors_from_details(details: Any) -> List[str]:
    """Decode RPC error details of the form [{"index": 3, "error": "..."}]."""
    if not details:
        return []
    try:
        parsed = json.loads(details) if isinstance(details, str) else details
    except (TypeError, ValueError):
        return []
    if not isinstance(parsed, list):
        return []
    return [
        f"Row {item.get('index')}: {item.get('error')}"
        for item in parsed
        if isinstance(item, dict)
    ]


async def upload_payload(
    supabase_client: Client,
    user_id: str,
    payload: BulkUploadPayload,
) -> Dict[str, Any]:
    """
    Send a parsed payload to the bulk_upload_data RPC.

    Args:
        supabase_client: Authenticated Supabase client
        user_id: The authenticated user's ID (logging only; the RPC uses auth.uid())
        payload: Parsed upload

    Returns:
        The RPC result: success flag and inserted counts per section

    Raises:
        BulkUploadError: If the payload is empty, or the RPC rejects it
            (row_errors set when the RPC reported per-row problems)
    """
    if payload.is_empty():
        raise BulkUploadError(EMPTY_PAYLOAD_MESSAGE)

    logger.info(f"Bulk upload for user {user_id}: {get_upload_summary(payload)}")

    try:
        result = supabase_client.rpc(
            "bulk_upload_data",
            {"p_payload": payload.to_rpc_payload()},
        ).execute()
    except APIError as e:
        row_errors = _row_errors_from_details(e.details)
        if row_errors:
            logger.warning(f"Bulk upload rejected for user {user_id}: {len(row_errors)} row errors")
            raise BulkUploadError("\n".join(row_errors), row_errors=row_errors)
        logger.warning(f"Bulk upload rejected for user {user_id}: {e.message}")
        raise BulkUploadError(e.message or "Upload failed")

    data = result.data
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, dict):
        raise Exception("bulk_upload_data returned no result")

    data = cast(Dict[str, Any], data)
    if not data.get("success", False):
        raise BulkUploadError(str(data.get("error") or "Upload failed"))

    logger.info(f"Bulk upload completed for user {user_id}")

    return data
