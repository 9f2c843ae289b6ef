# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Verifies Supabase access tokens and checks admin rights.
#
# Token signatures:
# - ES256 (asymmetric Supabase signing keys), key looked up by `kid` in
#   the project's JWKS document
# - HS256 (legacy shared JWT secret)
#
# Admin rights come from the user_roles table, never from token claims.
# =============================================================================

import logging
import time
from typing import Any, Optional
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser
from app.exceptions import AdminRequiredError
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

AUDIENCE = "authenticated"

security = HTTPBearer()
security_optional = HTTPBearer(auto_error=False)

JWKS_CACHE_TTL = 3600  # seconds
_jwks: dict[str, Any] = {"keys": [], "fetched_at": 0.0}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _signing_keys() -> list[dict[str, Any]]:
    """Project JWKS keys, cached for an hour. A stale copy beats none."""
    if _jwks["keys"] and time.time() - _jwks["fetched_at"] < JWKS_CACHE_TTL:
        return _jwks["keys"]

    url = f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"
    try:
        response = httpx.get(url, timeout=settings.HTTP_TIMEOUT_SECONDS)
        response.raise_for_status()
        _jwks["keys"] = response.json().get("keys", [])
        _jwks["fetched_at"] = time.time()
        logger.debug(f"Fetched {len(_jwks['keys'])} signing keys from {url}")
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
    return _jwks["keys"]


def _verification_key(token: str) -> tuple[Any, str]:
    """Pick the (key, algorithm) pair a token should be verified with."""
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    algorithm = header.get("alg", "HS256")
    kid = header.get("kid")
    if algorithm == "HS256" or not kid:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    for key in _signing_keys():
        if key.get("kid") == kid:
            return key, algorithm

    logger.warning(f"No signing key for alg={algorithm}, kid={kid}; trying HS256")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and return its user.

    Raises:
        HTTPException: 401 if the token is expired, forged or malformed
    """
    key, algorithm = _verification_key(token)
    if algorithm == "HS256" and not key:
        # An empty secret would accept tokens signed with ""
        logger.error("HS256 token received but SUPABASE_JWT_SECRET is not set")
        raise _unauthorized("Invalid token: HS256 verification is not configured")
    try:
        payload = jwt.decode(token, key, algorithms=[algorithm], audience=AUDIENCE)
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {e}")

    subject = payload.get("sub")
    if not subject:
        raise _unauthorized("Invalid token: missing user ID")
    try:
        user_id = UUID(subject)
    except ValueError:
        raise _unauthorized("Invalid token: malformed user ID")

    return AuthUser(id=user_id, email=payload.get("email"), access_token=token)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Authenticated user from the Bearer token.

    Usage:
        @router.get("/me")
        async def me(user: AuthUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    user = decode_access_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id}")
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional)
) -> Optional[AuthUser]:
    """Like get_current_user, but anonymous (or bad) tokens give None."""
    if credentials is None:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except HTTPException:
        return None


async def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """
    Authenticated user who holds the admin role.

    Raises:
        AdminRequiredError: 403 for signed-in non-admins
    """
    if not SupabaseClient.has_role(user.id, "admin"):
        logger.warning(f"Admin access denied for {user.id}")
        raise AdminRequiredError()
    return user
