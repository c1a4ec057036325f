"""
Tests for dashboard aggregation.

Covers period ranges, year options, category grouping and sorting, and the
per-type RPC calls (with retry).
"""

import pytest
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

from finance_tracker.services.dashboard_service import (
    aggregate_by_category,
    build_category_breakdown,
    get_period_range,
    get_period_stats,
    get_year_options,
    sum_transactions_amount,
    validate_year,
)


class TestPeriods:

    def test_year_range(self):
        assert get_period_range(2025) == ("2025-01-01", "2025-12-31")

    def test_month_range_handles_leap_february(self):
        assert get_period_range(2024, 2) == ("2024-02-01", "2024-02-29")
        assert get_period_range(2025, 2) == ("2025-02-01", "2025-02-28")

    def test_invalid_month(self):
        with pytest.raises(ValueError):
            get_period_range(2025, 13)

    def test_year_options_current_and_five_back(self):
        options = get_year_options(date(2026, 10, 19))

        assert [o["value"] for o in options] == [2026, 2025, 2024, 2023, 2022, 2021]
        assert options[0]["label"] == "2026"

    def test_validate_year(self):
        today = date(2026, 10, 19)
        validate_year(2021, today)
        validate_year(2026, today)
        with pytest.raises(ValueError):
            validate_year(2020, today)
        with pytest.raises(ValueError):
            validate_year(2027, today)


class TestAggregateByCategory:

    def test_groups_and_sums(self):
        rows = [
            {"type": "spend", "category_id": "c1", "categories": {"name": "Food"}, "amount": "10.50"},
            {"type": "spend", "category_id": "c1", "categories": {"name": "Food"}, "amount": 4.5},
            {"type": "earn", "category_id": "c2", "categories": [{"name": "Salary"}], "amount": 100},
        ]

        result = aggregate_by_category(rows)

        assert result == [
            {"category_id": "c1", "category_name": "Food", "type": "spend", "total": 15.0},
            {"category_id": "c2", "category_name": "Salary", "type": "earn", "total": 100.0},
        ]

    def test_skips_rows_without_category(self):
        rows = [
            {"type": "spend", "category_id": None, "categories": None, "amount": 99},
            {"type": "spend", "category_id": "c1", "categories": None, "amount": 1},
        ]

        result = aggregate_by_category(rows)

        assert len(result) == 1
        assert result[0]["category_name"] == "Unknown"

    def test_empty_join_list_is_unknown(self):
        rows = [{"type": "save", "category_id": "c3", "categories": [], "amount": 5}]

        assert aggregate_by_category(rows)[0]["category_name"] == "Unknown"


class TestBuildCategoryBreakdown:

    def test_sorted_desc_with_totals_for_every_type(self):
        summaries = [
            {"category_id": "a", "category_name": "Rent", "type": "spend", "total": 100.0},
            {"category_id": "b", "category_name": "Food", "type": "spend", "total": 250.0},
            {"category_id": "c", "category_name": "Salary", "type": "earn", "total": 1000.0},
        ]

        breakdown = build_category_breakdown(summaries)

        assert [b["type"] for b in breakdown] == ["earn", "spend", "save"]
        spend = breakdown[1]
        assert [c["category_name"] for c in spend["categories"]] == ["Food", "Rent"]
        assert spend["total"] == 350.0
        assert spend["formatted_total"] == "$350.00"
        assert breakdown[2]["categories"] == []
        assert breakdown[2]["total"] == 0


class TestSumTransactionsAmount:

    @pytest.mark.asyncio
    async def test_calls_rpc_with_period_and_type(self, supabase_client):
        supabase_client.rpc.return_value.execute.return_value = MagicMock(data="125.75")

        total = await sum_transactions_amount(supabase_client, "2025-01-01", "2025-12-31", "earn")

        assert total == 125.75
        supabase_client.rpc.assert_called_once_with(
            "sum_transactions_amount",
            {"p_from": "2025-01-01", "p_to": "2025-12-31", "p_type": "earn"},
        )

    @pytest.mark.asyncio
    async def test_null_result_counts_as_zero(self, supabase_client):
        supabase_client.rpc.return_value.execute.return_value = MagicMock(data=None)

        assert await sum_transactions_amount(supabase_client, "2025-01-01", "2025-12-31", "save") == 0.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", ["abc", "NaN", "Infinity", {"total": 1}])
    async def test_non_numeric_result_counts_as_zero(self, supabase_client, data):
        supabase_client.rpc.return_value.execute.return_value = MagicMock(data=data)

        assert await sum_transactions_amount(supabase_client, "2025-01-01", "2025-12-31", "spend") == 0.0

    @pytest.mark.asyncio
    async def test_raises_after_retries_exhausted(self, supabase_client):
        supabase_client.rpc.return_value.execute.side_effect = RuntimeError("rpc down")

        with patch("finance_tracker.utils.retry.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(RuntimeError, match="rpc down"):
                await sum_transactions_amount(supabase_client, "2025-01-01", "2025-12-31", "spend")

        assert supabase_client.rpc.return_value.execute.call_count == 3


class TestGetPeriodStats:

    @pytest.mark.asyncio
    async def test_month_stats(self, supabase_client, query_builder):
        this_year = date.today().year
        totals = {"earn": 3000, "spend": 1234.5, "save": None}

        def _rpc(name, params):
            rpc_call = MagicMock()
            rpc_call.execute.return_value = MagicMock(data=totals[params["p_type"]])
            return rpc_call

        supabase_client.rpc.side_effect = _rpc
        query_builder.execute.return_value = MagicMock(data=[
            {"type": "spend", "category_id": "c1", "categories": {"name": "Food"}, "amount": 1234.5},
        ])

        stats = await get_period_stats(supabase_client, "user-1", this_year, 3)

        assert stats["period"] == "month"
        assert stats["start_date"] == f"{this_year}-03-01"
        assert stats["end_date"] == f"{this_year}-03-31"
        assert [s["type"] for s in stats["type_summary"]] == ["earn", "spend", "save"]
        assert [s["formatted_total"] for s in stats["type_summary"]] == ["$3,000.00", "$1,234.50", "$0.00"]
        assert stats["category_breakdown"][1]["categories"][0]["category_name"] == "Food"
        query_builder.gte.assert_called_with("date", f"{this_year}-03-01")
        query_builder.lte.assert_called_with("date", f"{this_year}-03-31")

    @pytest.mark.asyncio
    async def test_rejects_old_year(self, supabase_client):
        with pytest.raises(ValueError):
            await get_period_stats(supabase_client, "user-1", date.today().year - 6)

        supabase_client.rpc.assert_not_called()
