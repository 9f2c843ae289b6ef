# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - users.py: Admin user management (create, role, password, delete)
# - revenue.py: Revenue pool settings, calculator and credit metrics
# - media.py: Playlists and play registration
# - podcasts.py: RSS sync and episode ordering
# - payments.py: Stripe checkout and coupon validation
# - imports.py: WordPress member and tag-repair CSV imports
# - tags.py, redirects.py, usernames.py, emails.py, exchange_rates.py
# - tasks.py: Background task status endpoints
# - sitemap.py: Public /sitemap.xml
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import users
from . import revenue
from . import media
from . import podcasts
from . import payments
from . import imports
from . import tags
from . import redirects
from . import usernames
from . import emails
from . import exchange_rates
from . import tasks
from . import sitemap

__all__ = [
    "health",
    "users",
    "revenue",
    "media",
    "podcasts",
    "payments",
    "imports",
    "tags",
    "redirects",
    "usernames",
    "emails",
    "exchange_rates",
    "tasks",
    "sitemap",
]
