# =============================================================================
# app/routers/podcasts.py - Podcast Admin Endpoints
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path

from app.dependencies import AdminUser
from core.models.imports import ImportTaskSubmitted
from core.models.media import PodcastSyncResult, ReorderRequest, ReorderResult
from core.services.media_service import MediaService
from core.services.podcast_service import PodcastService

logger = logging.getLogger(__name__)

router = APIRouter()

PodcastId = Annotated[UUID, Path(description="Podcast UUID")]


@router.post("/{podcast_id}/sync", response_model=PodcastSyncResult, response_model_by_alias=True)
async def sync_podcast(podcast_id: PodcastId, admin: AdminUser):
    """
    Import new episodes from the podcast's RSS feed now.

    Returns 502 if the feed can't be fetched or parsed.
    """
    logger.info(f"Admin {admin.id} syncing podcast {podcast_id}")
    return PodcastSyncResult(**PodcastService.sync_podcast(podcast_id))


@router.post("/{podcast_id}/sync/background", response_model=ImportTaskSubmitted)
async def sync_podcast_background(podcast_id: PodcastId, admin: AdminUser):
    """Queue the sync; poll /api/v1/tasks/{task_id} for the result."""
    from workers.tasks import sync_podcast_rss

    result = sync_podcast_rss.delay(str(podcast_id))
    return ImportTaskSubmitted(task_id=result.id, rows=0)


@router.put("/{podcast_id}/episodes/order", response_model=ReorderResult)
async def reorder_episodes(podcast_id: PodcastId, request: ReorderRequest, admin: AdminUser):
    """
    Save a new episode order, newest first.

    The first ID becomes the highest episode number.
    """
    return ReorderResult(**MediaService.reorder_podcast_episodes(podcast_id, request.ordered_ids))
