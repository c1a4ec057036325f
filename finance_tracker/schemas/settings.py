"""
Pydantic schemas for the settings endpoints: bulk JSON upload and data reset.

The bulk upload payload is forwarded verbatim to the bulk_upload_data RPC,
which performs row validation and the inserts in one database transaction.
Section rows are therefore kept as raw dicts here.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Bulk upload payload ---

class BulkUploadPayload(BaseModel):
    """
    Parsed bulk upload file.

    A section is None when the file did not contain it as an array.
    """
    categories: Optional[List[Dict[str, Any]]] = None
    bank_accounts: Optional[List[Dict[str, Any]]] = None
    tags: Optional[List[Dict[str, Any]]] = None
    transactions: Optional[List[Dict[str, Any]]] = None

    def to_rpc_payload(self) -> Dict[str, Any]:
        """Sections as sent to bulk_upload_data (absent sections omitted)."""
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not (self.categories or self.bank_accounts or self.tags or self.transactions)


# --- Responses ---

class SectionCounts(BaseModel):
    categories: int = Field(0, description="Number of categories in the file")
    bank_accounts: int = Field(0, description="Number of bank accounts in the file")
    tags: int = Field(0, description="Number of tags in the file")
    transactions: int = Field(0, description="Number of transactions in the file")


class BulkUploadPreviewResponse(BaseModel):
    """What the file contains, before anything is written."""
    filename: str = Field(..., description="Uploaded file name")
    summary: str = Field(..., description="Human readable summary", examples=["2 categories, 5 transactions"])
    counts: SectionCounts = Field(..., description="Rows per section")


class BulkUploadResult(BaseModel):
    """Result returned by the bulk_upload_data RPC."""
    model_config = ConfigDict(extra="allow")

    success: bool = Field(..., description="Whether the RPC committed the upload")
    error: Optional[str] = Field(None, description="RPC-level error message")
    categories_inserted: int = Field(0, description="Categories inserted")
    bank_accounts_inserted: int = Field(0, description="Bank accounts inserted")
    tags_inserted: int = Field(0, description="Tags inserted")
    transactions_inserted: int = Field(0, description="Transactions inserted")


class BulkUploadResponse(BaseModel):
    status: Literal["UPLOADED"] = Field(..., description="Status indicator")
    result: BulkUploadResult = Field(..., description="Inserted counts")
    message: str = Field(..., description="Success message")


class DataResetRequest(BaseModel):
    """Explicit confirmation for an irreversible reset."""
    confirm: bool = Field(False, description="Must be true to delete all data")


class DataResetResult(BaseModel):
    """Result returned by the reset_user_data RPC."""
    model_config = ConfigDict(extra="allow")

    success: bool = Field(True, description="Whether the reset completed")
    transactions_deleted: int = Field(0, description="Transactions deleted")
    categories_deleted: int = Field(0, description="Categories deleted")
    tags_deleted: int = Field(0, description="Tags deleted")
    bank_accounts_deleted: int = Field(0, description="Bank accounts deleted")


class DataResetResponse(BaseModel):
    status: Literal["RESET"] = Field(..., description="Status indicator")
    result: DataResetResult = Field(..., description="Deleted counts")
    message: str = Field(..., description="Success message")
