# =============================================================================
# app/routers/users.py - Admin User Management Endpoints
# =============================================================================
# Every route here requires the admin role.
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, status

from app.dependencies import AdminUser
from core.models.users import (
    PasswordReset,
    RoleResponse,
    RoleUpdate,
    UserCreate,
    UserCreated,
    UserDeletionResult,
)
from core.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()

UserId = Annotated[UUID, Path(description="User UUID")]


@router.post("", response_model=UserCreated, status_code=status.HTTP_201_CREATED)
async def create_user(request: UserCreate, admin: AdminUser):
    """
    Create a confirmed account on someone's behalf.

    Returns 409 if the email is already registered.
    """
    logger.info(f"Admin {admin.id} creating user {request.email}")
    created = UserService.create_user(
        email=request.email,
        password=request.password,
        full_name=request.full_name,
        role=request.role,
    )
    return UserCreated(**created)


@router.get("/{user_id}/role", response_model=RoleResponse)
async def get_user_role(user_id: UserId, admin: AdminUser):
    return RoleResponse(user_id=user_id, role=UserService.get_role(user_id))


@router.put("/{user_id}/role", response_model=RoleResponse)
async def update_user_role(user_id: UserId, request: RoleUpdate, admin: AdminUser):
    """Replace whatever role the user had with `role`."""
    role = UserService.set_role(user_id, request.role)
    return RoleResponse(user_id=user_id, role=role)


@router.post("/{user_id}/password", status_code=status.HTTP_204_NO_CONTENT)
async def reset_user_password(user_id: UserId, request: PasswordReset, admin: AdminUser):
    UserService.reset_password(user_id, request.new_password)


@router.delete("/{user_id}", response_model=UserDeletionResult)
async def delete_user(user_id: UserId, admin: AdminUser):
    """
    Delete a user with their uploads and rows.

    Admins can't delete themselves (400).
    """
    result = UserService.delete_user(admin.id, user_id)
    return UserDeletionResult(**result)
