# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# Annotated aliases so routes can declare who may call them in one word.
# =============================================================================

from typing import Annotated, Optional

from fastapi import Depends

from app.auth.dependencies import get_current_user, get_current_user_optional, require_admin
from app.auth.models import AuthUser

CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
OptionalUser = Annotated[Optional[AuthUser], Depends(get_current_user_optional)]
AdminUser = Annotated[AuthUser, Depends(require_admin)]
