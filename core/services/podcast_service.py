# =============================================================================
# core/services/podcast_service.py - Podcast RSS Import
# =============================================================================
# Pulls a podcast's RSS feed and stores any episodes not seen before as
# media_tracks rows. Existing episodes are matched by audio URL and never
# updated.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

import httpx

from app.config import settings
from app.exceptions import InvalidRequestError, PodcastFeedError, ResourceNotFoundError
from lib.rss import FeedParseError, parse_feed
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

RSS_ACCEPT = "application/rss+xml, application/xml, text/xml"


def fetch_feed_xml(url: str) -> bytes:
    """
    Download an RSS document.

    Raises:
        httpx.HTTPError: On network failures or non-2xx responses
    """
    response = httpx.get(
        url,
        headers={"User-Agent": settings.PODCAST_USER_AGENT, "Accept": RSS_ACCEPT},
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        follow_redirects=True,
    )
    response.raise_for_status()
    return response.content


class PodcastService:
    """Service for syncing podcasts from their feeds."""

    @staticmethod
    def sync_podcast(podcast_id: str | UUID) -> dict[str, Any]:
        """
        Import new episodes from the podcast's RSS feed.

        Blank title, description, author and cover on the podcast are filled
        from the feed; values already set are kept. last_fetched_at is
        always updated once the feed has been read.

        Returns:
            {"message", "total_episodes", "new_episodes", "podcast_title", "podcast_image"}

        Raises:
            ResourceNotFoundError: If the podcast doesn't exist
            InvalidRequestError: If the podcast has no RSS URL
            PodcastFeedError: If the feed can't be fetched or parsed
        """
        podcast_id_str = normalize_uuid(podcast_id)
        podcast = SupabaseClient.fetch_one("media_podcasts", "id", podcast_id_str)
        if not podcast:
            raise ResourceNotFoundError("podcast", podcast_id_str)

        rss_url = podcast.get("rss_url")
        if not rss_url:
            raise InvalidRequestError(
                "Podcast has no RSS URL configured",
                suggestion="Add the feed URL to the podcast first",
                details={"podcast_id": podcast_id_str},
            )

        logger.info(f"Fetching RSS from: {rss_url}")
        try:
            feed = parse_feed(fetch_feed_xml(rss_url))
        except httpx.HTTPStatusError as e:
            raise PodcastFeedError(podcast_id_str, f"Failed to fetch RSS: {e.response.status_code}")
        except httpx.HTTPError as e:
            raise PodcastFeedError(podcast_id_str, f"Failed to fetch RSS: {e}")
        except FeedParseError as e:
            raise PodcastFeedError(podcast_id_str, str(e))

        logger.info(f"Podcast: {feed.title}, {len(feed.episodes)} valid episodes, {feed.skipped} skipped")

        client = SupabaseClient.get_client()

        update_data: dict[str, Any] = {"last_fetched_at": utc_now_iso()}
        for column, value in (
            ("title", feed.title),
            ("description", feed.description),
            ("author", feed.author),
            ("cover_image_url", feed.image_url),
        ):
            if value and not podcast.get(column):
                update_data[column] = value

        try:
            client.table("media_podcasts").update(update_data).eq("id", podcast_id_str).execute()
        except Exception as e:
            logger.warning(f"Could not update podcast metadata for {podcast_id_str}: {e}")

        existing = (
            client.table("media_tracks")
            .select("audio_url")
            .eq("podcast_id", podcast_id_str)
            .execute()
        )
        existing_urls = {row["audio_url"] for row in (existing.data or [])}
        new_episodes = [ep for ep in feed.episodes if ep.audio_url not in existing_urls]
        logger.info(f"{len(new_episodes)} new episodes to insert")

        if new_episodes:
            try:
                (
                    client.table("media_tracks")
                    .insert([ep.to_track_row(podcast_id_str) for ep in new_episodes])
                    .execute()
                )
            except Exception as e:
                logger.error(f"Error inserting episodes: {e}")
                raise SupabaseClientError(
                    message=f"Failed to save episodes: {e}",
                    code="INSERT_FAILED",
                    details={"podcast_id": podcast_id_str},
                )

        return {
            "message": f"Imported {len(new_episodes)} new episodes",
            "total_episodes": len(feed.episodes),
            "new_episodes": len(new_episodes),
            "podcast_title": feed.title,
            "podcast_image": feed.image_url,
        }
