# =============================================================================
# core/models/users.py - Admin User Management Schemas
# =============================================================================
# Request/response contract for the privileged user operations:
# - UserCreate: Admin creates an account on someone's behalf
# - RoleUpdate: Change a user's single role
# - PasswordReset: Admin sets a new password
# =============================================================================

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from lib.utils import normalize_email


class UserRole(str, Enum):
    """
    Roles stored in user_roles.

    A user holds at most one role; no row means USER.
    """
    ADMIN = "admin"
    MODERATOR = "moderator"
    USER = "user"


class UserCreate(BaseModel):
    """
    Schema for creating a user from the admin dashboard.

    Example:
        {
            "email": "student@example.com",
            "password": "s3cret!",
            "full_name": "Ada Student",
            "role": "user"
        }
    """

    email: str = Field(
        ...,
        min_length=3,
        max_length=320,
        description="Email address (normalised to lower case)"
    )

    password: str = Field(
        ...,
        min_length=6,
        description="Initial password (at least 6 characters)"
    )

    full_name: str | None = Field(
        default=None,
        max_length=200,
        description="Display name stored in auth metadata"
    )

    role: UserRole = Field(
        default=UserRole.USER,
        description="Role to grant after creation"
    )

    @field_validator("email")
    @classmethod
    def normalise_email(cls, value: str) -> str:
        value = normalize_email(value)
        if "@" not in value:
            raise ValueError("Invalid email address")
        return value


class UserCreated(BaseModel):
    id: UUID
    email: str


class RoleUpdate(BaseModel):
    role: UserRole = Field(..., description="The user's new role")


class RoleResponse(BaseModel):
    user_id: UUID
    role: UserRole


class PasswordReset(BaseModel):
    new_password: str = Field(
        ...,
        min_length=6,
        description="New password (at least 6 characters)"
    )


class UserDeletionResult(BaseModel):
    """
    Outcome of a full account deletion.

    `failed_tables` lists tables whose cleanup failed and was skipped; the
    auth user is still removed.
    """

    success: bool = True
    user_id: UUID
    media_deleted: int = Field(default=0, ge=0)
    failed_tables: list[str] = Field(default_factory=list)
