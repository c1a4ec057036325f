"""
Settings API endpoints: bulk JSON upload and data reset.

Endpoints:
- POST /settings/bulk-upload/preview - Validate and summarize a JSON file (nothing is written)
- POST /settings/bulk-upload - Upload a JSON file through the bulk_upload_data RPC
- POST /settings/reset - Delete all of the user's data (requires confirm=true)
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from finance_tracker.auth.dependencies import AuthenticatedUser, get_authenticated_user
from finance_tracker.config import settings
from finance_tracker.db.client import get_supabase_client
from finance_tracker.schemas.settings import (
    BulkUploadPayload,
    BulkUploadPreviewResponse,
    BulkUploadResponse,
    BulkUploadResult,
    DataResetRequest,
    DataResetResponse,
    DataResetResult,
    SectionCounts,
)
from finance_tracker.services.bulk_upload_service import (
    BulkUploadError,
    decode_upload,
    get_section_counts,
    get_upload_summary,
    parse_upload_file,
    upload_payload,
    validate_upload_file,
)
from finance_tracker.services.reset_service import reset_user_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


def _upload_error(e: BulkUploadError) -> HTTPException:
    detail = {
        "error": "invalid_upload",
        "details": str(e),
    }
    if e.row_errors:
        detail["row_errors"] = e.row_errors
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


async def _read_payload(file: UploadFile) -> BulkUploadPayload:
    """
    Read, validate and parse an uploaded JSON file.

    Raises:
        HTTPException 400: If the file is unreadable, too large, not .json or malformed
    """
    try:
        content = await file.read()
    except Exception as e:
        logger.error(f"Failed to read uploaded file: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "file_read_error",
                "details": "Could not read uploaded file"
            }
        )

    try:
        validate_upload_file(file.filename, len(content), settings.BULK_UPLOAD_MAX_BYTES)
        return parse_upload_file(decode_upload(content))
    except BulkUploadError as e:
        logger.warning(f"Rejected upload {file.filename}: {e}")
        raise _upload_error(e)


@router.post(
    "/bulk-upload/preview",
    response_model=BulkUploadPreviewResponse,
    status_code=status.HTTP_200_OK,
    summary="Preview a bulk upload file",
    description="""
    Validate a JSON file and report what it contains.

    Accepted shapes:
    - A top-level array (treated as transactions)
    - An object with optional array sections: categories, bank_accounts, tags, transactions

    Nothing is written.
    """
)
async def preview_bulk_upload(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    file: Annotated[UploadFile, File(description="JSON file to upload")],
) -> BulkUploadPreviewResponse:
    logger.info(f"Previewing bulk upload for user {auth_user.user_id}: {file.filename}")

    payload = await _read_payload(file)

    return BulkUploadPreviewResponse(
        filename=file.filename or "",
        summary=get_upload_summary(payload),
        counts=SectionCounts(**get_section_counts(payload)),
    )


@router.post(
    "/bulk-upload",
    response_model=BulkUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Bulk upload data from a JSON file",
    description="""
    Insert categories, bank accounts, tags and transactions from a JSON file.

    The bulk_upload_data RPC validates every row, resolves names to ids and
    inserts everything in one database transaction: either the whole file is
    saved or nothing is. Row-level problems are returned in row_errors as
    "Row {index}: {error}".
    """
)
async def bulk_upload(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    file: Annotated[UploadFile, File(description="JSON file to upload")],
) -> BulkUploadResponse:
    logger.info(f"Bulk upload for user {auth_user.user_id}: {file.filename}")

    payload = await _read_payload(file)

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await upload_payload(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            payload=payload,
        )

        return BulkUploadResponse(
            status="UPLOADED",
            result=BulkUploadResult(**result),
            message=f"Uploaded {get_upload_summary(payload)}"
        )

    except BulkUploadError as e:
        raise _upload_error(e)
    except Exception as e:
        logger.error(f"Bulk upload failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "upload_error",
                "details": "Failed to upload data"
            }
        )


@router.post(
    "/reset",
    response_model=DataResetResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete all user data",
    description="""
    Permanently delete every transaction, category, tag and bank account of
    the authenticated user through the reset_user_data RPC.

    The request body must be {"confirm": true}.
    """
)
async def reset_data(
    request: DataResetRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> DataResetResponse:
    if not request.confirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "confirmation_required",
                "details": "Set confirm to true to delete all data"
            }
        )

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await reset_user_data(supabase_client, auth_user.user_id)

        return DataResetResponse(
            status="RESET",
            result=DataResetResult(**result),
            message="All data deleted successfully"
        )

    except Exception as e:
        logger.error(f"Data reset failed for user {auth_user.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "reset_error",
                "details": "Failed to reset data"
            }
        )
