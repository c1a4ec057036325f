"""
Tests for bearer token extraction and user resolution.
"""

import pytest
from fastapi import HTTPException
from unittest.mock import patch

from finance_tracker.auth.dependencies import extract_bearer_token, get_authenticated_user


class TestExtractBearerToken:

    def test_valid_header(self):
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_scheme_is_case_insensitive(self):
        assert extract_bearer_token("bearer token") == "token"

    @pytest.mark.parametrize("header", [None, ""])
    def test_missing_header(self, header):
        with pytest.raises(HTTPException) as exc_info:
            extract_bearer_token(header)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["details"] == "Missing Authorization header"

    @pytest.mark.parametrize("header", ["Token abc", "Bearer", "Bearer a b"])
    def test_malformed_header(self, header):
        with pytest.raises(HTTPException) as exc_info:
            extract_bearer_token(header)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["error"] == "unauthorized"


class TestGetAuthenticatedUser:

    @pytest.mark.asyncio
    async def test_claims_become_user(self):
        claims = {"sub": "user-1", "email": "a@example.com"}

        with patch("finance_tracker.auth.dependencies.decode_access_token", return_value=claims):
            user = await get_authenticated_user("Bearer tok")

        assert user.user_id == "user-1"
        assert user.email == "a@example.com"
        assert user.access_token == "tok"

    @pytest.mark.asyncio
    async def test_missing_sub_is_rejected(self):
        with patch("finance_tracker.auth.dependencies.decode_access_token", return_value={"email": "x"}):
            with pytest.raises(HTTPException) as exc_info:
                await get_authenticated_user("Bearer tok")

        assert exc_info.value.status_code == 401
