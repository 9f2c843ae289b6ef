# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .user_service import UserService
from .revenue_service import RevenueService
from .media_service import MediaService
from .podcast_service import PodcastService
from .payment_service import PaymentService
from .import_service import ImportService
from .tag_service import TagService
from .redirect_service import RedirectService
from .username_service import UsernameService
from .email_service import EmailService
from .exchange_rate_service import ExchangeRateService
from .sitemap_service import SitemapService

__all__ = [
    "UserService",
    "RevenueService",
    "MediaService",
    "PodcastService",
    "PaymentService",
    "ImportService",
    "TagService",
    "RedirectService",
    "UsernameService",
    "EmailService",
    "ExchangeRateService",
    "SitemapService",
]
