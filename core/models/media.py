# =============================================================================
# core/models/media.py - Streaming Media Schemas
# =============================================================================
# Playlists, podcast episode ordering and play registration.
# =============================================================================

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class PlayContentType(str, Enum):
    """Content types that earn credits when played."""
    SONG = "song"
    PODCAST_EPISODE = "podcast_episode"


class PlaylistTrackAdd(BaseModel):
    track_id: UUID = Field(..., description="Track to append to the playlist")


class ReorderRequest(BaseModel):
    """
    New order for a playlist or a podcast's episodes.

    Must list every current item exactly once.

    Example:
        {"ordered_ids": ["c3...", "a1...", "b2..."]}
    """

    ordered_ids: list[UUID] = Field(
        ...,
        description="Item IDs in their new order (first item first)"
    )


class ReorderResult(BaseModel):
    container_id: UUID
    total: int = Field(ge=0)
    updated: int = Field(ge=0, description="Rows whose position actually changed")


class PlayEventCreate(BaseModel):
    """
    A finished (or abandoned) listen reported by the player.

    Example:
        {
            "content_id": "...",
            "content_type": "song",
            "listen_duration_seconds": 95.4,
            "content_duration_seconds": 180
        }
    """

    content_id: UUID
    content_type: PlayContentType
    listen_duration_seconds: float = Field(..., ge=0)
    content_duration_seconds: float = Field(..., gt=0)


class PlayEvaluation(BaseModel):
    """Whether a play counts and how many credits it earns."""
    threshold_met: bool
    cooldown_passed: bool = True
    credits: float = Field(default=0, ge=0)
    listen_percent: float = Field(default=0, ge=0)


class PodcastSyncResult(BaseModel):
    """
    Outcome of importing a podcast's RSS feed.

    Example:
        {
            "message": "Imported 3 new episodes",
            "totalEpisodes": 120,
            "newEpisodes": 3,
            "podcastTitle": "Rhythm Talk",
            "podcastImage": "https://..."
        }
    """

    message: str
    total_episodes: int = Field(ge=0, serialization_alias="totalEpisodes")
    new_episodes: int = Field(ge=0, serialization_alias="newEpisodes")
    podcast_title: str | None = Field(default=None, serialization_alias="podcastTitle")
    podcast_image: str | None = Field(default=None, serialization_alias="podcastImage")
