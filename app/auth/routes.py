# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Sign-up and sign-in happen client-side against Supabase Auth. These
# routes only describe the user behind a token.
# =============================================================================

import logging
from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, UserResponse
from core.services.user_service import UserService
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> UserResponse:
    """
    Get the current user's profile and role.

    Falls back to the token's claims if the profile row isn't there yet
    (the sign-up trigger may not have run).
    """
    role = UserService.get_role(user.id).value
    try:
        profile = SupabaseClient.fetch_one(
            "profiles", "id", user.id,
            columns="id, email, full_name, username, avatar_url, created_at",
        )
    except SupabaseClientError as e:
        logger.warning(f"Could not fetch profile for {user.id}: {e}")
        profile = None

    if profile:
        return UserResponse(**profile, role=role)
    return UserResponse(id=user.id, email=user.email, role=role)


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """Check that a stored token is still valid."""
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
