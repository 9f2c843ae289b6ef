# =============================================================================
# app/routers/redirects.py - URL Redirect Endpoints
# =============================================================================
# Admin CRUD plus a public resolver the front end calls on unknown paths.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from app.dependencies import AdminUser
from app.exceptions import ResourceNotFoundError
from core.models.redirects import Redirection, RedirectionCreate, RedirectionUpdate
from core.services.redirect_service import RedirectService

router = APIRouter()

RedirectId = Annotated[UUID, Path(description="Redirect UUID")]


@router.get("", response_model=list[Redirection])
async def list_redirects(admin: AdminUser):
    return RedirectService.list_redirects()


@router.post("", response_model=Redirection, status_code=status.HTTP_201_CREATED)
async def create_redirect(request: RedirectionCreate, admin: AdminUser):
    """Returns 409 if the source path already has a redirect."""
    return RedirectService.create_redirect(request)


@router.patch("/{redirect_id}", response_model=Redirection)
async def update_redirect(redirect_id: RedirectId, request: RedirectionUpdate, admin: AdminUser):
    return RedirectService.update_redirect(redirect_id, request)


@router.delete("/{redirect_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_redirect(redirect_id: RedirectId, admin: AdminUser):
    RedirectService.delete_redirect(redirect_id)


@router.get("/resolve")
async def resolve_redirect(path: Annotated[str, Query(min_length=1, description="Request path, e.g. /old-course")]):
    """Where an old path should go. 404 when there's no active redirect."""
    redirect = RedirectService.resolve(path)
    if not redirect:
        raise ResourceNotFoundError("redirect", path)
    return redirect
