"""
Supabase client factory with RLS enforcement.

This module provides authenticated Supabase clients that automatically
enforce Row Level Security (RLS) by setting the user's JWT token.

CRITICAL SECURITY RULES:
1. NEVER use the service_role key for user operations
2. ALWAYS use the user's JWT token from Supabase Auth
3. RLS policies enforce user_id = auth.uid() on every table and RPC
4. The client MUST be created per-request with the user's token
"""

import logging

from finance_tracker.config import settings
from supabase import Client, create_client

logger = logging.getLogger(__name__)


def get_supabase_client(access_token: str) -> Client:
    """
    Create an authenticated Supabase client for a specific user.

    This client respects Row Level Security (RLS) policies because it uses
    the user's JWT access token from Supabase Auth. All table queries and
    RPC calls (sum_transactions_amount, bulk_upload_data, reset_user_data...)
    run as that user.

    Args:
        access_token: The user's JWT access token from Supabase Auth.
                     This is the token verified in finance_tracker/auth/dependencies.py.

    Returns:
        An authenticated Supabase client that enforces RLS.

    Example:
        >>> client = get_supabase_client(auth_user.access_token)
        >>> result = client.table("transactions").select("*").execute()
    """
    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )

    # The token's 'sub' claim is what auth.uid() resolves to in RLS policies
    client.auth.set_session(access_token, access_token)

    logger.debug("Created authenticated Supabase client with user token (RLS enforced)")

    return client
