# =============================================================================
# app/routers/usernames.py - Username Availability Endpoint
# =============================================================================

from fastapi import APIRouter

from app.dependencies import OptionalUser
from core.models.crm import UsernameCheck, UsernameCheckRequest
from core.services.username_service import UsernameService

router = APIRouter()


@router.post("/check", response_model=UsernameCheck, response_model_exclude_none=True)
async def check_username(request: UsernameCheckRequest, user: OptionalUser):
    """
    Is this username free?

    Signed-in callers are told their own username is available.
    """
    current_user_id = str(user.id) if user else None
    return UsernameService.check_username(request.username, current_user_id)
