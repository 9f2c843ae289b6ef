# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# JWT-based authentication against Supabase Auth, plus the admin gate.
#
# Usage:
#   from app.auth import require_admin, AuthUser
#
#   @router.delete("/users/{user_id}")
#   async def delete_user(user_id: UUID, admin: AuthUser = Depends(require_admin)):
#       ...
# =============================================================================

from app.auth.dependencies import get_current_user, get_current_user_optional, require_admin
from app.auth.models import AuthUser, UserResponse

__all__ = [
    "get_current_user",
    "get_current_user_optional",
    "require_admin",
    "AuthUser",
    "UserResponse",
]
