# =============================================================================
# app/routers/media.py - Streaming Endpoints
# =============================================================================
# Playlists belong to the user who made them; only they (or an admin) can
# change them. Plays are registered as the signed-in listener.
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, status

from app.auth.models import AuthUser
from app.dependencies import CurrentUser
from core.models.media import (
    PlayEvaluation,
    PlayEventCreate,
    PlaylistTrackAdd,
    ReorderRequest,
    ReorderResult,
)
from core.services.media_service import MediaService, evaluate_play
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter()

PlaylistId = Annotated[UUID, Path(description="Playlist UUID")]


def _ensure_can_edit(playlist: dict, user: AuthUser) -> None:
    if playlist.get("user_id") == str(user.id):
        return
    if SupabaseClient.has_role(user.id, "admin"):
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You can only change your own playlists",
    )


@router.get("/playlists/{playlist_id}")
async def get_playlist(playlist_id: PlaylistId, user: CurrentUser):
    """Playlist with its tracks in order."""
    return MediaService.get_playlist(playlist_id)


@router.post("/playlists/{playlist_id}/tracks", status_code=status.HTTP_201_CREATED)
async def add_track(playlist_id: PlaylistId, request: PlaylistTrackAdd, user: CurrentUser):
    _ensure_can_edit(MediaService.get_playlist(playlist_id), user)
    return MediaService.add_track_to_playlist(playlist_id, request.track_id)


@router.delete("/playlists/{playlist_id}/tracks/{track_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_track(playlist_id: PlaylistId, track_id: UUID, user: CurrentUser):
    _ensure_can_edit(MediaService.get_playlist(playlist_id), user)
    MediaService.remove_track_from_playlist(playlist_id, track_id)


@router.put("/playlists/{playlist_id}/order", response_model=ReorderResult)
async def reorder_playlist(playlist_id: PlaylistId, request: ReorderRequest, user: CurrentUser):
    """
    Save a new track order.

    `ordered_ids` must list every track in the playlist exactly once.
    """
    _ensure_can_edit(MediaService.get_playlist(playlist_id), user)
    return ReorderResult(**MediaService.reorder_playlist(playlist_id, request.ordered_ids))


@router.post("/plays")
async def register_play(request: PlayEventCreate, user: CurrentUser):
    """
    Record a listen.

    Short listens are answered locally without a database call; the
    database function makes the final decision (cooldowns, credits).
    """
    evaluation = evaluate_play(
        request.content_type,
        request.listen_duration_seconds,
        request.content_duration_seconds,
    )
    if not evaluation["threshold_met"]:
        return evaluation

    return MediaService.register_play(
        user.access_token,
        request.content_id,
        request.content_type,
        request.listen_duration_seconds,
        request.content_duration_seconds,
    )


@router.post("/plays/evaluate", response_model=PlayEvaluation)
async def evaluate_play_event(request: PlayEventCreate, user: CurrentUser):
    """Dry run: would this listen count, and for how many credits?"""
    return evaluate_play(
        request.content_type,
        request.listen_duration_seconds,
        request.content_duration_seconds,
    )
