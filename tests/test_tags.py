"""
Tests for tag CRUD endpoints.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch
from finance_tracker.main import app
from finance_tracker.auth.dependencies import get_authenticated_user, AuthenticatedUser

client = TestClient(app)


async def mock_get_authenticated_user_dependency():
    return AuthenticatedUser(
        user_id="test-user-id",
        access_token="test-access-token"
    )


@pytest.fixture
def mock_auth():
    app.dependency_overrides[get_authenticated_user] = mock_get_authenticated_user_dependency
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def mock_tag():
    return {
        "id": "tag-1",
        "user_id": "test-user-id",
        "name": "vacation",
        "description": None,
        "created_at": "2025-11-05T10:00:00Z",
        "updated_at": None,
        "deleted_at": None,
    }


@pytest.fixture
def mock_get_supabase_client():
    with patch("finance_tracker.routes.tags.get_supabase_client") as mock:
        mock.return_value = MagicMock()
        yield mock


class TestTagEndpoints:

    @patch("finance_tracker.routes.tags.get_all_tags")
    def test_list_tags(self, mock_get_all, mock_auth, mock_get_supabase_client, mock_tag):
        mock_get_all.return_value = [mock_tag]

        response = client.get("/tags")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["tags"][0]["name"] == "vacation"

    @patch("finance_tracker.routes.tags.create_tag")
    def test_create_tag(self, mock_create, mock_auth, mock_get_supabase_client, mock_tag):
        mock_create.return_value = mock_tag

        response = client.post("/tags", json={"name": "vacation"})

        assert response.status_code == 201
        assert response.json()["status"] == "CREATED"
        assert mock_create.call_args.kwargs["name"] == "vacation"

    @patch("finance_tracker.routes.tags.create_tag")
    def test_create_tag_database_error(self, mock_create, mock_auth, mock_get_supabase_client):
        mock_create.side_effect = Exception("duplicate key")

        response = client.post("/tags", json={"name": "vacation"})

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "create_error"

    @patch("finance_tracker.routes.tags.get_tag_by_id")
    def test_get_tag_not_found(self, mock_get, mock_auth, mock_get_supabase_client):
        mock_get.return_value = None

        response = client.get("/tags/missing")

        assert response.status_code == 404

    @patch("finance_tracker.routes.tags.update_tag")
    def test_update_tag(self, mock_update, mock_auth, mock_get_supabase_client, mock_tag):
        mock_update.return_value = {**mock_tag, "description": "Trips"}

        response = client.patch("/tags/tag-1", json={"description": "Trips"})

        assert response.status_code == 200
        assert response.json()["tag"]["description"] == "Trips"
        assert mock_update.call_args.kwargs["updates"] == {"description": "Trips"}

    def test_update_tag_no_fields(self, mock_auth, mock_get_supabase_client):
        response = client.patch("/tags/tag-1", json={})

        assert response.status_code == 400

    @patch("finance_tracker.routes.tags.delete_tag")
    def test_delete_tag(self, mock_delete, mock_auth, mock_get_supabase_client, mock_tag):
        mock_delete.return_value = {**mock_tag, "deleted_at": "2025-11-06T08:00:00+00:00"}

        response = client.delete("/tags/tag-1")

        assert response.status_code == 200
        assert response.json()["tag_id"] == "tag-1"
