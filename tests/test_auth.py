# =============================================================================
# tests/test_auth.py - Token Verification and Admin Check Tests
# =============================================================================

import asyncio
from unittest.mock import patch
from uuid import UUID, uuid4

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from app.auth.dependencies import (
    decode_access_token,
    get_current_user_optional,
    require_admin,
)
from app.auth.models import AuthUser
from app.exceptions import AdminRequiredError
from lib.supabase_client import SupabaseClient


class TestDecodeAccessToken:

    def test_valid_token(self, make_token):
        user_id = str(uuid4())
        token = make_token(sub=user_id, email="fan@example.com")

        user = decode_access_token(token)

        assert user.id == UUID(user_id)
        assert user.email == "fan@example.com"
        assert user.access_token == token

    def test_token_not_serialized(self, make_token):
        user = decode_access_token(make_token())
        assert "access_token" not in user.model_dump()

    def test_expired(self, make_token):
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(make_token(expires_in=-60))

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test_wrong_secret(self):
        token = jwt.encode({"sub": str(uuid4()), "aud": "authenticated"}, "other-secret", algorithm="HS256")

        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail.startswith("Invalid token")

    def test_wrong_audience(self, make_token):
        with pytest.raises(HTTPException):
            decode_access_token(make_token(aud="anon"))

    def test_malformed_subject(self, make_token):
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(make_token(sub="not-a-uuid"))

        assert exc_info.value.detail == "Invalid token: malformed user ID"

    def test_empty_secret_rejects_hs256(self):
        """With no secret configured, a token signed with "" must not verify."""
        token = jwt.encode({"sub": str(uuid4()), "aud": "authenticated"}, "", algorithm="HS256")

        with patch("app.auth.dependencies.settings") as settings:
            settings.SUPABASE_JWT_SECRET = ""
            with pytest.raises(HTTPException) as exc_info:
                decode_access_token(token)

        assert exc_info.value.status_code == 401

    def test_garbage(self):
        with pytest.raises(HTTPException):
            decode_access_token("not.a.jwt")


class TestOptionalUser:

    def test_anonymous(self):
        assert asyncio.run(get_current_user_optional(None)) is None

    def test_bad_token_is_anonymous(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="junk")
        assert asyncio.run(get_current_user_optional(credentials)) is None

    def test_good_token(self, make_token):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=make_token(email="a@b.com"))
        assert asyncio.run(get_current_user_optional(credentials)).email == "a@b.com"


class TestRequireAdmin:
    """Admin rights come from user_roles, not from token claims."""

    def test_admin(self):
        user = AuthUser(id=uuid4())
        with patch.object(SupabaseClient, "fetch_roles", return_value=["admin"]):
            assert asyncio.run(require_admin(user)) is user

    def test_non_admin(self):
        with patch.object(SupabaseClient, "fetch_roles", return_value=["moderator"]):
            with pytest.raises(AdminRequiredError):
                asyncio.run(require_admin(AuthUser(id=uuid4())))
