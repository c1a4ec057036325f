"""
Database access layer for the Finance Tracker backend.

All database operations MUST:
- Respect Row Level Security (RLS): user_id = auth.uid()
- Never bypass RLS
- Leave aggregation and bulk writes to the database RPCs

Includes:
- Supabase client initialization
- Soft-delete aware deletion for CRUD resources
- Column selection for partial updates (explicit null clears)
"""

from .client import get_supabase_client
from .partial_update import build_update_data
from .soft_delete import delete_record, is_soft_deletable

__all__ = ["get_supabase_client", "build_update_data", "delete_record", "is_soft_deletable"]
