# =============================================================================
# core/services/media_service.py - Streaming Media Logic
# =============================================================================
# Playlists, podcast episode ordering and play registration.
#
# Reordering writes one row per changed position, one request at a time.
# There is no transaction: if a write fails, earlier writes stay applied
# and PartialReorderError reports how far it got.
# =============================================================================

import logging
from datetime import datetime, timedelta
from typing import Any, Sequence, TypeVar
from uuid import UUID

from app.exceptions import (
    InvalidOrderError,
    InvalidRequestError,
    PartialReorderError,
    ResourceNotFoundError,
)
from core.models.media import PlayContentType
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")

# A play counts once at least this share of the content was heard
PLAY_THRESHOLD_PERCENT = 50

PLAY_CREDITS = {
    PlayContentType.SONG: 1.0,
    PlayContentType.PODCAST_EPISODE: 0.5,
}

# Credited plays of the same content by the same user are this far apart
PLAY_COOLDOWN = timedelta(hours=1)


# =============================================================================
# Pure Helpers
# =============================================================================

def reorder(items: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """
    Move one element to a new index, shifting the others.

    Same semantics as a drag-and-drop array move.

    Example:
        reorder(["a", "b", "c", "d"], 0, 2)  # ["b", "c", "a", "d"]

    Raises:
        InvalidRequestError: If either index is out of range
    """
    size = len(items)
    if not (0 <= from_index < size) or not (0 <= to_index < size):
        raise InvalidRequestError(
            f"Reorder indices out of range for {size} items",
            details={"from_index": from_index, "to_index": to_index},
        )
    result = list(items)
    item = result.pop(from_index)
    result.insert(to_index, item)
    return result


def check_permutation(container_id: str, current_ids: Sequence[str], ordered_ids: Sequence[str]) -> None:
    """
    Ensure `ordered_ids` lists every current item exactly once.

    Raises:
        InvalidOrderError: With the missing and unexpected IDs
    """
    current = set(current_ids)
    requested = list(ordered_ids)
    missing = sorted(current - set(requested))
    unexpected = sorted(set(requested) - current)
    duplicated = len(requested) != len(set(requested))
    if missing or unexpected or duplicated:
        raise InvalidOrderError(container_id, missing=missing, unexpected=unexpected)


def evaluate_play(
    content_type: PlayContentType,
    listen_seconds: float,
    duration_seconds: float,
    last_credited_at: datetime | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Decide whether a play earns credits.

    Mirrors the register_play_event database function so the API can
    explain a result without another round trip.

    Returns:
        {"threshold_met", "cooldown_passed", "credits", "listen_percent"}
    """
    listen_percent = listen_seconds / duration_seconds * 100 if duration_seconds > 0 else 0.0
    threshold_met = listen_percent >= PLAY_THRESHOLD_PERCENT

    now = now or utc_now()
    cooldown_passed = last_credited_at is None or (now - last_credited_at) > PLAY_COOLDOWN

    credits = PLAY_CREDITS.get(content_type, 0.0) if threshold_met and cooldown_passed else 0.0
    return {
        "threshold_met": threshold_met,
        "cooldown_passed": cooldown_passed,
        "credits": credits,
        "listen_percent": listen_percent,
    }


# =============================================================================
# Service
# =============================================================================

class MediaService:
    """Service for playlists, episode order and plays."""

    # -------------------------------------------------------------------------
    # Playlists
    # -------------------------------------------------------------------------

    @staticmethod
    def get_playlist(playlist_id: str | UUID) -> dict[str, Any]:
        """
        Get a playlist with its tracks in position order.

        Raises:
            ResourceNotFoundError: If the playlist doesn't exist
        """
        playlist_id_str = normalize_uuid(playlist_id)
        playlist = SupabaseClient.fetch_one("media_playlists", "id", playlist_id_str)
        if not playlist:
            raise ResourceNotFoundError("playlist", playlist_id_str)

        client = SupabaseClient.get_client()
        response = (
            client.table("media_playlist_tracks")
            .select("position, track:media_tracks(*)")
            .eq("playlist_id", playlist_id_str)
            .order("position")
            .execute()
        )
        playlist["tracks"] = [row["track"] for row in (response.data or []) if row.get("track")]
        return playlist

    @staticmethod
    def add_track_to_playlist(playlist_id: str | UUID, track_id: str | UUID) -> dict[str, Any]:
        """Append a track after the current last position (0 for an empty playlist)."""
        client = SupabaseClient.get_client()
        playlist_id_str = normalize_uuid(playlist_id)

        existing = (
            client.table("media_playlist_tracks")
            .select("position")
            .eq("playlist_id", playlist_id_str)
            .order("position", desc=True)
            .limit(1)
            .execute()
        )
        rows = existing.data or []
        next_position = rows[0]["position"] + 1 if rows else 0

        try:
            response = (
                client.table("media_playlist_tracks")
                .insert({
                    "playlist_id": playlist_id_str,
                    "track_id": normalize_uuid(track_id),
                    "position": next_position,
                })
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to add track {track_id} to playlist {playlist_id_str}: {e}")
            raise SupabaseClientError(
                message=f"Failed to add track to playlist: {e}",
                code="PLAYLIST_ADD_FAILED",
                details={"playlist_id": playlist_id_str},
            )

        logger.info(f"Added track {track_id} to playlist {playlist_id_str} at {next_position}")
        return response.data[0] if response.data else {"position": next_position}

    @staticmethod
    def remove_track_from_playlist(playlist_id: str | UUID, track_id: str | UUID) -> None:
        client = SupabaseClient.get_client()
        (
            client.table("media_playlist_tracks")
            .delete()
            .eq("playlist_id", normalize_uuid(playlist_id))
            .eq("track_id", normalize_uuid(track_id))
            .execute()
        )
        logger.info(f"Removed track {track_id} from playlist {playlist_id}")

    @staticmethod
    def reorder_playlist(playlist_id: str | UUID, ordered_track_ids: Sequence[str | UUID]) -> dict[str, Any]:
        """
        Save a new track order; each track's position becomes its index.

        Raises:
            InvalidOrderError: If the IDs don't match the playlist's tracks
            PartialReorderError: If a write fails after others succeeded
        """
        client = SupabaseClient.get_client()
        playlist_id_str = normalize_uuid(playlist_id)
        ordered = [normalize_uuid(track_id) for track_id in ordered_track_ids]

        response = (
            client.table("media_playlist_tracks")
            .select("track_id, position")
            .eq("playlist_id", playlist_id_str)
            .execute()
        )
        current = {row["track_id"]: row["position"] for row in (response.data or [])}
        check_permutation(playlist_id_str, list(current), ordered)

        changes = [
            (track_id, index)
            for index, track_id in enumerate(ordered)
            if current[track_id] != index
        ]

        def write(track_id: str, position: int) -> None:
            (
                client.table("media_playlist_tracks")
                .update({"position": position})
                .eq("playlist_id", playlist_id_str)
                .eq("track_id", track_id)
                .execute()
            )

        MediaService._apply_changes(playlist_id_str, changes, write)
        return {"container_id": playlist_id_str, "total": len(ordered), "updated": len(changes)}

    # -------------------------------------------------------------------------
    # Podcast Episodes
    # -------------------------------------------------------------------------

    @staticmethod
    def reorder_podcast_episodes(podcast_id: str | UUID, ordered_track_ids: Sequence[str | UUID]) -> dict[str, Any]:
        """
        Save a new episode order, newest first.

        The first episode gets the highest episode_number (the count) and
        the last gets 1, matching how RSS imports number episodes.

        Raises:
            InvalidOrderError: If the IDs don't match the podcast's episodes
            PartialReorderError: If a write fails after others succeeded
        """
        client = SupabaseClient.get_client()
        podcast_id_str = normalize_uuid(podcast_id)
        ordered = [normalize_uuid(track_id) for track_id in ordered_track_ids]

        response = (
            client.table("media_tracks")
            .select("id, episode_number")
            .eq("podcast_id", podcast_id_str)
            .execute()
        )
        current = {row["id"]: row.get("episode_number") for row in (response.data or [])}
        check_permutation(podcast_id_str, list(current), ordered)

        total = len(ordered)
        changes = [
            (track_id, total - index)
            for index, track_id in enumerate(ordered)
            if current[track_id] != total - index
        ]

        def write(track_id: str, episode_number: int) -> None:
            client.table("media_tracks").update({"episode_number": episode_number}).eq("id", track_id).execute()

        MediaService._apply_changes(podcast_id_str, changes, write)
        return {"container_id": podcast_id_str, "total": total, "updated": len(changes)}

    @staticmethod
    def _apply_changes(container_id: str, changes: list[tuple[str, int]], write) -> None:
        for applied, (item_id, value) in enumerate(changes):
            try:
                write(item_id, value)
            except Exception as e:
                logger.error(f"Reorder of {container_id} failed at {item_id}: {e}")
                raise PartialReorderError(container_id, applied=applied, total=len(changes), error=str(e))
        logger.info(f"Reordered {container_id}: {len(changes)} rows updated")

    # -------------------------------------------------------------------------
    # Plays
    # -------------------------------------------------------------------------

    @staticmethod
    def register_play(
        access_token: str,
        content_id: str | UUID,
        content_type: PlayContentType,
        listen_seconds: float,
        duration_seconds: float,
    ) -> dict[str, Any]:
        """
        Record a play through the register_play_event database function.

        The function reads the listener from the JWT, so it is called with
        the user's token rather than the service key. Durations are sent as
        whole seconds.
        """
        client = SupabaseClient.user_client(access_token)
        params = {
            "p_content_id": normalize_uuid(content_id),
            "p_content_type": content_type.value,
            "p_listen_duration_seconds": int(listen_seconds),
            "p_content_duration_seconds": int(duration_seconds),
        }

        try:
            response = client.rpc("register_play_event", params).execute()
        except Exception as e:
            logger.error(f"Error registering play for {content_id}: {e}")
            raise SupabaseClientError(
                message=f"Failed to register play: {e}",
                code="RPC_FAILED",
                details={"function": "register_play_event"},
            )

        result = response.data or {}
        logger.debug(f"Play registered for {content_id}: {result}")
        return result
