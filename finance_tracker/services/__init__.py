"""
Service layer for the Finance Tracker backend.

Contains the logic between routes (HTTP layer) and Supabase:
- CRUD for categories, tags, bank accounts, transactions and budgets
- Dashboard aggregation on top of the sum_transactions_amount RPC
- Bulk JSON upload and data reset, delegated to database RPCs

Every function takes an authenticated Supabase client, so RLS applies.
"""

from .bank_account_service import (
    create_bank_account,
    delete_bank_account,
    get_bank_account_by_id,
    get_user_bank_accounts,
    update_bank_account,
)
from .budget_service import (
    create_budget,
    delete_budget,
    get_all_budgets,
    get_budget_by_id,
    get_budget_progress,
    update_budget,
)
from .bulk_upload_service import (
    BulkUploadError,
    get_upload_summary,
    parse_upload_file,
    upload_payload,
    validate_upload_file,
)
from .category_service import (
    create_category,
    delete_category,
    get_all_categories,
    get_category_by_id,
    update_category,
)
from .dashboard_service import (
    get_period_stats,
    sum_transactions_amount,
)
from .reset_service import reset_user_data
from .tag_service import (
    create_tag,
    delete_tag,
    get_all_tags,
    get_tag_by_id,
    update_tag,
)
from .transaction_service import (
    create_transaction,
    delete_transaction,
    get_transaction_by_id,
    get_user_transactions,
    set_transaction_tags,
    update_transaction,
)

__all__ = [
    # Bank accounts
    "create_bank_account",
    "delete_bank_account",
    "get_bank_account_by_id",
    "get_user_bank_accounts",
    "update_bank_account",
    # Budgets
    "create_budget",
    "delete_budget",
    "get_all_budgets",
    "get_budget_by_id",
    "get_budget_progress",
    "update_budget",
    # Bulk upload
    "BulkUploadError",
    "get_upload_summary",
    "parse_upload_file",
    "upload_payload",
    "validate_upload_file",
    # Categories
    "create_category",
    "delete_category",
    "get_all_categories",
    "get_category_by_id",
    "update_category",
    # Dashboard
    "get_period_stats",
    "sum_transactions_amount",
    # Data reset
    "reset_user_data",
    # Tags
    "create_tag",
    "delete_tag",
    "get_all_tags",
    "get_tag_by_id",
    "update_tag",
    # Transactions
    "create_transaction",
    "delete_transaction",
    "get_transaction_by_id",
    "get_user_transactions",
    "set_transaction_tags",
    "update_transaction",
]
