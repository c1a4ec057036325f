"""
Shared constants for the finance tracker.

Transaction types are the three money directions every category, budget and
transaction is tagged with. Table names match the Supabase schema.
"""

from typing import Dict, List, Literal

TransactionType = Literal["earn", "spend", "save"]

# Ordered earn -> spend -> save everywhere we iterate
TRANSACTION_TYPE_VALUES: List[TransactionType] = ['earn', 'spend', 'save']

TRANSACTION_TYPE_LABELS: Dict[str, str] = {
    'earn': 'Earn',
    'spend': 'Spend',
    'save': 'Save',
}

# Tables and views
CATEGORIES_TABLE = "categories"
TAGS_TABLE = "tags"
BANK_ACCOUNTS_TABLE = "bank_accounts"
TRANSACTIONS_TABLE = "transactions"
BUDGETS_TABLE = "budgets"
BUDGET_CATEGORIES_TABLE = "budget_categories"
BUDGET_TAGS_TABLE = "budget_tags"
TRANSACTIONS_DETAILS_VIEW = "transactions_with_details"

# Resources deleted by stamping deleted_at instead of issuing a DELETE
SOFT_DELETE_RESOURCES = frozenset({
    TRANSACTIONS_TABLE,
    CATEGORIES_TABLE,
    BANK_ACCOUNTS_TABLE,
    TAGS_TABLE,
    BUDGETS_TABLE,
})
