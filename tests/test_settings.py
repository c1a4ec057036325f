"""
Tests for settings endpoints (bulk upload and data reset).

Tests cover:
- Preview of legacy array and sectioned object files
- File size and extension checks
- Upload through the bulk_upload_data RPC, including row errors
- Reset confirmation
"""

import json
import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch
from finance_tracker.main import app
from finance_tracker.auth.dependencies import get_authenticated_user, AuthenticatedUser
from finance_tracker.services.bulk_upload_service import BulkUploadError

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
    with patch("finance_tracker.routes.settings.get_supabase_client") as mock:
        mock.return_value = MagicMock()
        yield mock


def _json_file(data, filename="data.json"):
    return {"file": (filename, json.dumps(data).encode("utf-8"), "application/json")}


SECTIONED_FILE = {
    "categories": [{"name": "Groceries", "type": "spend"}, {"name": "Salary", "type": "earn"}],
    "bank_accounts": [{"name": "Main"}],
    "tags": [{"name": "food"}],
    "transactions": [
        {"date": "2025-01-02", "type": "spend", "category": "Groceries", "amount": 10},
    ],
}


class TestBulkUploadPreview:
    """Tests for POST /settings/bulk-upload/preview"""

    def test_preview_sectioned_file(self, mock_auth):
        response = client.post("/settings/bulk-upload/preview", files=_json_file(SECTIONED_FILE))

        assert response.status_code == 200
        data = response.json()
        assert data["filename"] == "data.json"
        assert data["summary"] == "2 categories, 1 bank accounts, 1 tags, 1 transactions"
        assert data["counts"]["categories"] == 2

    def test_preview_legacy_array(self, mock_auth):
        rows = [{"date": "2025-01-02", "type": "spend", "category": "Food", "amount": 1}] * 3

        response = client.post("/settings/bulk-upload/preview", files=_json_file(rows))

        assert response.status_code == 200
        assert response.json()["summary"] == "3 transactions"

    def test_preview_rejects_non_json_extension(self, mock_auth):
        response = client.post(
            "/settings/bulk-upload/preview",
            files={"file": ("data.csv", b"[]", "text/csv")}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["details"] == "Invalid file type. Please upload a JSON file."

    def test_preview_rejects_large_file(self, mock_auth):
        big = b"[" + b" " * (1024 * 1024) + b"]"

        response = client.post(
            "/settings/bulk-upload/preview",
            files={"file": ("data.json", big, "application/json")}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["details"] == "File is too large. Maximum allowed size is 1MB."

    def test_preview_rejects_scalar(self, mock_auth):
        response = client.post("/settings/bulk-upload/preview", files=_json_file(42))

        assert response.status_code == 400
        assert response.json()["detail"]["details"].startswith("JSON must be an array of transactions")


class TestBulkUpload:
    """Tests for POST /settings/bulk-upload"""

    @patch("finance_tracker.routes.settings.upload_payload")
    def test_upload_success(self, mock_upload, mock_auth, mock_get_supabase_client):
        mock_upload.return_value = {
            "success": True,
            "categories_inserted": 2,
            "bank_accounts_inserted": 1,
            "tags_inserted": 1,
            "transactions_inserted": 1,
        }

        response = client.post("/settings/bulk-upload", files=_json_file(SECTIONED_FILE))

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "UPLOADED"
        assert data["result"]["transactions_inserted"] == 1
        payload = mock_upload.call_args.kwargs["payload"]
        assert payload.to_rpc_payload() == SECTIONED_FILE

    @patch("finance_tracker.routes.settings.upload_payload")
    def test_upload_row_errors(self, mock_upload, mock_auth, mock_get_supabase_client):
        rows = ["Row 0: Category not found: Food", "Row 2: Invalid type"]
        mock_upload.side_effect = BulkUploadError("\n".join(rows), row_errors=rows)

        response = client.post("/settings/bulk-upload", files=_json_file([{}, {}, {}]))

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["row_errors"] == rows

    @patch("finance_tracker.routes.settings.upload_payload")
    def test_upload_unexpected_error(self, mock_upload, mock_auth, mock_get_supabase_client):
        mock_upload.side_effect = Exception("network down")

        response = client.post("/settings/bulk-upload", files=_json_file(SECTIONED_FILE))

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "upload_error"


class TestDataReset:
    """Tests for POST /settings/reset"""

    def test_reset_requires_confirmation(self, mock_auth, mock_get_supabase_client):
        response = client.post("/settings/reset", json={})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "confirmation_required"

    @patch("finance_tracker.routes.settings.reset_user_data")
    def test_reset_success(self, mock_reset, mock_auth, mock_get_supabase_client):
        mock_reset.return_value = {
            "success": True,
            "transactions_deleted": 12,
            "categories_deleted": 4,
            "tags_deleted": 2,
            "bank_accounts_deleted": 1,
        }

        response = client.post("/settings/reset", json={"confirm": True})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "RESET"
        assert data["result"]["transactions_deleted"] == 12
