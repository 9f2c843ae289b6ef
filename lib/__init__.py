# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Supabase wrapper shared by every service
# - object_storage.py: Cloudflare R2 (S3 API) deletes
# - emailer.py: HTML email through AWS SES
# - rss.py: Podcast RSS parsing
# - csv_import.py: WordPress and contact CSV readers
# - sitemap.py: sitemaps.org XML rendering
# - utils.py: UUID, email, time and batching helpers
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_email, normalize_uuid

__all__ = [
    "SupabaseClient",
    "SupabaseClientError",
    "normalize_email",
    "normalize_uuid",
]
