"""
Tests for transaction CRUD endpoints.

Tests cover:
- Listing by type (default spend) from the details view
- Creation, including the partial-success path when tags fail to save
- Retrieval, partial update (tag replacement) and soft deletion
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch
from finance_tracker.main import app
from finance_tracker.auth.dependencies import get_authenticated_user, AuthenticatedUser

client = TestClient(app)


async def mock_get_authenticated_user_dependency():
    """Mock dependency that returns test AuthenticatedUser."""
    return AuthenticatedUser(
        user_id="test-user-id",
        access_token="test-access-token"
    )


@pytest.fixture
def mock_auth():
    """Override get_authenticated_user dependency."""
    app.dependency_overrides[get_authenticated_user] = mock_get_authenticated_user_dependency
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def mock_get_supabase_client():
    with patch("finance_tracker.routes.transactions.get_supabase_client") as mock:
        mock.return_value = MagicMock()
        yield mock


@pytest.fixture
def mock_view_row():
    """A transactions_with_details row (names resolved, amount as numeric string)."""
    return {
        "id": "txn-1",
        "user_id": "test-user-id",
        "date": "2025-10-30",
        "type": "spend",
        "amount": "128.50",
        "category_id": "cat-1",
        "category_name": "Groceries",
        "bank_account_id": "bank-1",
        "bank_account_name": "Main Checking",
        "notes": "Weekly groceries",
        "tag_names": ["food", "weekly"],
        "created_at": "2025-10-30T12:00:00Z",
        "updated_at": None,
        "deleted_at": None,
    }


@pytest.fixture
def mock_transaction():
    """A flattened base-table row."""
    return {
        "id": "txn-1",
        "user_id": "test-user-id",
        "date": "2025-10-30",
        "type": "spend",
        "amount": 128.5,
        "category_id": "cat-1",
        "category_name": "Groceries",
        "bank_account_id": None,
        "notes": None,
        "tag_ids": ["tag-1", "tag-2"],
        "created_at": "2025-10-30T12:00:00Z",
    }


class TestListTransactions:
    """Tests for GET /transactions"""

    @patch("finance_tracker.routes.transactions.get_user_transactions")
    def test_list_defaults_to_spend(self, mock_get, mock_auth, mock_get_supabase_client, mock_view_row):
        mock_get.return_value = [mock_view_row]

        response = client.get("/transactions")

        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "spend"
        assert data["count"] == 1
        txn = data["transactions"][0]
        assert txn["amount"] == 128.5
        assert txn["category_name"] == "Groceries"
        assert txn["bank_account_name"] == "Main Checking"
        assert txn["tag_names"] == ["food", "weekly"]
        assert mock_get.call_args.kwargs["transaction_type"] == "spend"

    @patch("finance_tracker.routes.transactions.get_user_transactions")
    def test_list_with_filters(self, mock_get, mock_auth, mock_get_supabase_client):
        mock_get.return_value = []

        response = client.get(
            "/transactions?type=earn&from_date=2025-01-01&to_date=2025-01-31"
            "&sort_by=amount&sort_order=asc"
        )

        assert response.status_code == 200
        kwargs = mock_get.call_args.kwargs
        assert kwargs["transaction_type"] == "earn"
        assert kwargs["from_date"] == "2025-01-01"
        assert kwargs["to_date"] == "2025-01-31"
        assert kwargs["sort_by"] == "amount"
        assert kwargs["sort_order"] == "asc"

    def test_list_rejects_invalid_sort(self, mock_auth, mock_get_supabase_client):
        response = client.get("/transactions?sort_by=notes")

        assert response.status_code == 422


class TestCreateTransaction:
    """Tests for POST /transactions"""

    @patch("finance_tracker.routes.transactions.create_transaction")
    def test_create_with_tags(self, mock_create, mock_auth, mock_get_supabase_client, mock_transaction):
        mock_create.return_value = (mock_transaction, True)

        response = client.post(
            "/transactions",
            json={
                "date": "2025-10-30",
                "type": "spend",
                "category_id": "cat-1",
                "amount": 128.5,
                "tag_ids": ["tag-1", "tag-2"],
            }
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "CREATED"
        assert data["tags_updated"] is True
        assert data["transaction"]["tag_ids"] == ["tag-1", "tag-2"]
        assert mock_create.call_args.kwargs["tag_ids"] == ["tag-1", "tag-2"]

    @patch("finance_tracker.routes.transactions.create_transaction")
    def test_create_reports_failed_tags(self, mock_create, mock_auth, mock_get_supabase_client, mock_transaction):
        mock_create.return_value = ({**mock_transaction, "tag_ids": []}, False)

        response = client.post(
            "/transactions",
            json={
                "date": "2025-10-30",
                "type": "spend",
                "category_id": "cat-1",
                "amount": 128.5,
                "tag_ids": ["tag-1"],
            }
        )

        assert response.status_code == 201
        data = response.json()
        assert data["tags_updated"] is False
        assert data["message"] == "Transaction saved but failed to update tags"

    def test_create_rejects_negative_amount(self, mock_auth, mock_get_supabase_client):
        response = client.post(
            "/transactions",
            json={"date": "2025-10-30", "type": "spend", "category_id": "cat-1", "amount": -1}
        )

        assert response.status_code == 422

    def test_create_rejects_unknown_type(self, mock_auth, mock_get_supabase_client):
        response = client.post(
            "/transactions",
            json={"date": "2025-10-30", "type": "income", "category_id": "cat-1", "amount": 10}
        )

        assert response.status_code == 422

    @patch("finance_tracker.routes.transactions.create_transaction")
    def test_create_database_error(self, mock_create, mock_auth, mock_get_supabase_client):
        mock_create.side_effect = Exception("insert failed")

        response = client.post(
            "/transactions",
            json={"date": "2025-10-30", "type": "save", "category_id": "cat-1", "amount": 10}
        )

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "create_error"


class TestGetTransaction:
    """Tests for GET /transactions/{transaction_id}"""

    @patch("finance_tracker.routes.transactions.get_transaction_by_id")
    def test_get_success(self, mock_get, mock_auth, mock_get_supabase_client, mock_transaction):
        mock_get.return_value = mock_transaction

        response = client.get("/transactions/txn-1")

        assert response.status_code == 200
        assert response.json()["tag_ids"] == ["tag-1", "tag-2"]

    @patch("finance_tracker.routes.transactions.get_transaction_by_id")
    def test_get_not_found(self, mock_get, mock_auth, mock_get_supabase_client):
        mock_get.return_value = None

        response = client.get("/transactions/missing")

        assert response.status_code == 404


class TestUpdateTransaction:
    """Tests for PATCH /transactions/{transaction_id}"""

    def test_update_no_fields(self, mock_auth, mock_get_supabase_client):
        response = client.patch("/transactions/txn-1", json={})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_request"

    @patch("finance_tracker.routes.transactions.update_transaction")
    def test_update_clearing_tags_is_a_change(self, mock_update, mock_auth, mock_get_supabase_client, mock_transaction):
        mock_update.return_value = ({**mock_transaction, "tag_ids": []}, True)

        response = client.patch("/transactions/txn-1", json={"tag_ids": []})

        assert response.status_code == 200
        assert response.json()["transaction"]["tag_ids"] == []
        assert mock_update.call_args.kwargs["updates"] == {"tag_ids": []}

    @patch("finance_tracker.routes.transactions.update_transaction")
    def test_update_reports_failed_tags(self, mock_update, mock_auth, mock_get_supabase_client, mock_transaction):
        mock_update.return_value = ({**mock_transaction, "notes": "edited"}, False)

        response = client.patch("/transactions/txn-1", json={"notes": "edited", "tag_ids": ["tag-9"]})

        assert response.status_code == 200
        data = response.json()
        assert data["tags_updated"] is False
        assert data["message"] == "Transaction saved but failed to update tags"

    @patch("finance_tracker.routes.transactions.update_transaction")
    def test_update_not_found(self, mock_update, mock_auth, mock_get_supabase_client):
        mock_update.return_value = (None, False)

        response = client.patch("/transactions/missing", json={"amount": 5})

        assert response.status_code == 404

    @patch("finance_tracker.routes.transactions.update_transaction")
    def test_update_clears_bank_account(self, mock_update, mock_auth, mock_get_supabase_client, mock_transaction):
        mock_update.return_value = ({**mock_transaction, "bank_account_id": None}, True)

        response = client.patch("/transactions/txn-1", json={"bank_account_id": None})

        assert response.status_code == 200
        assert response.json()["transaction"]["bank_account_id"] is None
        # explicit null is forwarded, omitted fields are not
        assert mock_update.call_args.kwargs["updates"] == {"bank_account_id": None}

    @patch("finance_tracker.routes.transactions.update_transaction")
    def test_update_cannot_clear_required_field(self, mock_update, mock_auth, mock_get_supabase_client):
        mock_update.side_effect = ValueError("Cannot clear required field(s): amount")

        response = client.patch("/transactions/txn-1", json={"amount": None})

        assert response.status_code == 400
        assert response.json()["detail"]["details"] == "Cannot clear required field(s): amount"


class TestDeleteTransaction:
    """Tests for DELETE /transactions/{transaction_id}"""

    @patch("finance_tracker.routes.transactions.delete_transaction")
    def test_delete_success(self, mock_delete, mock_auth, mock_get_supabase_client, mock_transaction):
        mock_delete.return_value = {**mock_transaction, "deleted_at": "2025-11-01T00:00:00+00:00"}

        response = client.delete("/transactions/txn-1")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "DELETED"
        assert data["deleted_at"] == "2025-11-01T00:00:00+00:00"

    @patch("finance_tracker.routes.transactions.delete_transaction")
    def test_delete_not_found(self, mock_delete, mock_auth, mock_get_supabase_client):
        mock_delete.return_value = None

        response = client.delete("/transactions/missing")

        assert response.status_code == 404
