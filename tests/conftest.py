"""
Pytest configuration for Finance Tracker backend tests.

Sets up test environment and global fixtures.
"""
import os
import pytest
from unittest.mock import MagicMock

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")


@pytest.fixture
def supabase_client():
    """
    Mock Supabase client for service tests.

    Query builders are chained (table().select().eq()...execute()), so every
    builder method returns the same mock and only execute() needs a value.
    """
    mock_client = MagicMock()
    return mock_client


@pytest.fixture
def query_builder(supabase_client):
    """The chained query builder behind supabase_client.table(...)."""
    builder = MagicMock()
    for method in ("select", "insert", "update", "delete", "eq", "is_", "gte", "lte", "order", "range"):
        getattr(builder, method).return_value = builder
    supabase_client.table.return_value = builder
    return builder
