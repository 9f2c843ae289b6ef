# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AuthUser(BaseModel):
    """
    Authenticated user extracted from a Supabase JWT.

    The raw token is kept so calls that must run as the user (database
    functions reading auth.uid()) can forward it.
    """
    id: UUID
    email: Optional[str] = None
    access_token: str = Field(default="", repr=False, exclude=True)

    class Config:
        frozen = True


class UserResponse(BaseModel):
    """Profile of the signed-in user, with their role."""
    id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = "user"
    created_at: Optional[datetime] = None
