"""
Tests for transaction service logic.

Tag writes go through the set_transaction_tags RPC; a failing RPC must not
undo the saved transaction.
"""

import pytest
from unittest.mock import MagicMock

from finance_tracker.services.transaction_service import (
    create_transaction,
    flatten_transaction,
    get_user_transactions,
    set_transaction_tags,
    update_transaction,
)


class TestFlattenTransaction:

    def test_tag_links_and_category(self):
        row = {
            "id": "tx-1",
            "amount": 10,
            "transaction_tags": [{"tag_id": "t1"}, {"tag_id": "t2"}],
            "category": {"id": "c1", "name": "Food"},
        }

        flat = flatten_transaction(row)

        assert flat["tag_ids"] == ["t1", "t2"]
        assert flat["category_name"] == "Food"
        assert "transaction_tags" not in flat
        assert "category" not in flat

    def test_category_as_list(self):
        flat = flatten_transaction({"id": "tx-1", "category": [{"name": "Rent"}]})

        assert flat["category_name"] == "Rent"
        assert flat["tag_ids"] == []

    def test_no_category(self):
        flat = flatten_transaction({"id": "tx-1", "category": None})

        assert "category_name" not in flat


class TestSetTransactionTags:

    @pytest.mark.asyncio
    async def test_rpc_params(self, supabase_client):
        await set_transaction_tags(supabase_client, "tx-1", ["t1", "t2"])

        supabase_client.rpc.assert_called_once_with(
            "set_transaction_tags",
            {"p_transaction_id": "tx-1", "p_tag_ids": ["t1", "t2"]},
        )


class TestCreateTransaction:

    @pytest.mark.asyncio
    async def test_with_tags(self, supabase_client, query_builder):
        query_builder.execute.return_value = MagicMock(data=[{"id": "tx-1", "type": "spend"}])

        created, tags_updated = await create_transaction(
            supabase_client, "user-1", "2025-03-01", "spend", "c1", 12.5, tag_ids=["t1"],
        )

        assert tags_updated is True
        assert created["tag_ids"] == ["t1"]
        supabase_client.table.assert_called_with("transactions")
        inserted = query_builder.insert.call_args.args[0]
        assert inserted["user_id"] == "user-1"
        assert inserted["category_id"] == "c1"
        assert inserted["bank_account_id"] is None

    @pytest.mark.asyncio
    async def test_failed_tag_rpc_keeps_transaction(self, supabase_client, query_builder):
        query_builder.execute.return_value = MagicMock(data=[{"id": "tx-1", "type": "spend"}])
        supabase_client.rpc.return_value.execute.side_effect = RuntimeError("rpc failed")

        created, tags_updated = await create_transaction(
            supabase_client, "user-1", "2025-03-01", "spend", "c1", 12.5, tag_ids=["t1"],
        )

        assert tags_updated is False
        assert created["id"] == "tx-1"
        assert created["tag_ids"] == []
        query_builder.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_tags_skips_rpc(self, supabase_client, query_builder):
        query_builder.execute.return_value = MagicMock(data=[{"id": "tx-1"}])

        _, tags_updated = await create_transaction(
            supabase_client, "user-1", "2025-03-01", "earn", "c1", 100,
        )

        assert tags_updated is True
        supabase_client.rpc.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_row_returned(self, supabase_client, query_builder):
        query_builder.execute.return_value = MagicMock(data=[])

        with pytest.raises(Exception, match="Failed to create transaction"):
            await create_transaction(supabase_client, "user-1", "2025-03-01", "save", "c1", 1)


class TestGetUserTransactions:

    @pytest.mark.asyncio
    async def test_filters_and_sorting(self, supabase_client, query_builder):
        query_builder.execute.return_value = MagicMock(data=[{"id": "tx-1"}])

        rows = await get_user_transactions(
            supabase_client, "user-1", "earn",
            limit=10, offset=20,
            from_date="2025-01-01", to_date="2025-01-31",
            sort_by="amount", sort_order="asc",
        )

        assert rows == [{"id": "tx-1"}]
        supabase_client.table.assert_called_with("transactions_with_details")
        query_builder.eq.assert_any_call("type", "earn")
        query_builder.gte.assert_called_once_with("date", "2025-01-01")
        query_builder.lte.assert_called_once_with("date", "2025-01-31")
        query_builder.order.assert_called_once_with("amount", desc=False)
        query_builder.range.assert_called_once_with(20, 29)

    @pytest.mark.asyncio
    async def test_unknown_sort_falls_back_to_date_desc(self, supabase_client, query_builder):
        query_builder.execute.return_value = MagicMock(data=None)

        rows = await get_user_transactions(supabase_client, "user-1", sort_by="notes", sort_order="up")

        assert rows == []
        query_builder.order.assert_called_once_with("date", desc=True)


class TestUpdateTransaction:

    @pytest.mark.asyncio
    async def test_only_tags_changed(self, supabase_client, query_builder):
        query_builder.execute.return_value = MagicMock(data=[
            {"id": "tx-1", "transaction_tags": [{"tag_id": "old"}], "category": None},
        ])

        updated, tags_updated = await update_transaction(
            supabase_client, "user-1", "tx-1", {"tag_ids": []},
        )

        assert tags_updated is True
        assert updated["tag_ids"] == []
        query_builder.update.assert_not_called()
        supabase_client.rpc.assert_called_once_with(
            "set_transaction_tags",
            {"p_transaction_id": "tx-1", "p_tag_ids": []},
        )

    @pytest.mark.asyncio
    async def test_not_found(self, supabase_client, query_builder):
        query_builder.execute.return_value = MagicMock(data=[])

        updated, tags_updated = await update_transaction(supabase_client, "user-1", "missing", {"amount": 5})

        assert updated is None
        assert tags_updated is False

    @pytest.mark.asyncio
    async def test_explicit_none_clears_nullable_columns(self, supabase_client, query_builder):
        query_builder.execute.return_value = MagicMock(data=[
            {"id": "tx-1", "bank_account_id": "bank-1", "notes": "old", "category": None},
        ])

        updated, tags_updated = await update_transaction(
            supabase_client, "user-1", "tx-1", {"bank_account_id": None, "notes": "x"},
        )

        assert tags_updated is True
        query_builder.update.assert_called_once_with({"bank_account_id": None, "notes": "x"})
        supabase_client.rpc.assert_not_called()

    @pytest.mark.asyncio
    async def test_required_column_cannot_be_cleared(self, supabase_client, query_builder):
        with pytest.raises(ValueError, match="category_id"):
            await update_transaction(supabase_client, "user-1", "tx-1", {"category_id": None})

        query_builder.update.assert_not_called()
