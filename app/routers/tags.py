# =============================================================================
# app/routers/tags.py - CRM Tag Endpoints
# =============================================================================

from fastapi import APIRouter, status

from app.dependencies import AdminUser
from core.models.crm import TagAssignment, TagAssignmentResult, TagCreate
from core.services.tag_service import TagService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tag(request: TagCreate, admin: AdminUser):
    """Create a tag, or return the existing one with the same name."""
    tag_id = TagService.find_or_create_tag(request.name, request.description, request.color)
    return {"id": tag_id, "name": request.name}


@router.post("/assign", response_model=TagAssignmentResult)
async def assign_tag(request: TagAssignment, admin: AdminUser):
    """
    Tag a user (by ID) or a contact (by email).

    Starts any active email sequences the tag triggers.
    """
    result = TagService.assign_tag(
        user_id=request.user_id,
        email=request.email,
        tag_id=request.tag_id,
        tag_name=request.tag_name,
        source=request.source,
        source_id=request.source_id,
    )
    return TagAssignmentResult(**result)
