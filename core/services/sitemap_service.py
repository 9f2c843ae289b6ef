# =============================================================================
# core/services/sitemap_service.py - Sitemap Generation
# =============================================================================

import logging
from typing import Any

from app.config import settings
from lib.sitemap import SitemapUrl, build_sitemap_xml
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now

logger = logging.getLogger(__name__)

# (path, priority); all weekly
STATIC_ROUTES = [
    ("/", 1.0),
    ("/courses", 0.9),
    ("/listen", 0.8),
    ("/membership", 0.8),
    ("/auth", 0.3),
]

COURSE_PRIORITY = 0.8
ARTIST_PRIORITY = 0.7


def _lastmod(row: dict[str, Any], today: str) -> str:
    updated_at = row.get("updated_at")
    return updated_at[:10] if updated_at else today


class SitemapService:
    """Builds the public sitemap from published content."""

    @staticmethod
    def collect_urls(site_url: str | None = None) -> list[SitemapUrl]:
        base = (site_url or settings.SITE_URL).rstrip("/")
        today = utc_now().date().isoformat()
        urls = [SitemapUrl(f"{base}{path}", lastmod=today, priority=priority) for path, priority in STATIC_ROUTES]

        client = SupabaseClient.get_client()

        courses = (
            client.table("courses")
            .select("slug, updated_at")
            .eq("is_published", True)
            .not_.is_("slug", "null")
            .execute()
        ).data or []
        for course in courses:
            if course.get("slug"):
                urls.append(SitemapUrl(
                    f"{base}/course/{course['slug']}",
                    lastmod=_lastmod(course, today),
                    priority=COURSE_PRIORITY,
                ))

        artists = (
            client.table("media_artists")
            .select("slug, updated_at")
            .not_.is_("slug", "null")
            .execute()
        ).data or []
        for artist in artists:
            if artist.get("slug"):
                urls.append(SitemapUrl(
                    f"{base}/artist/{artist['slug']}",
                    lastmod=_lastmod(artist, today),
                    priority=ARTIST_PRIORITY,
                ))

        logger.info(f"Sitemap: {len(courses)} courses, {len(artists)} artists")
        return urls

    @staticmethod
    def generate_sitemap(site_url: str | None = None) -> str:
        return build_sitemap_xml(SitemapService.collect_urls(site_url))
