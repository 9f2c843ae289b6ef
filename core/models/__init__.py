# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - users.py: Admin user management schemas
# - revenue.py: Revenue pool and artist credit schemas
# - media.py: Playlist, reorder, play and podcast sync schemas
# - payments.py: Coupon and card checkout schemas
# - imports.py: WordPress import and tag repair results
# - redirects.py: URL redirect schemas
# - crm.py: Tags, usernames, direct email, exchange rates
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# User Models - Privileged account operations
# -----------------------------------------------------------------------------
from .users import (
    PasswordReset,
    RoleResponse,
    RoleUpdate,
    UserCreate,
    UserCreated,
    UserDeletionResult,
    UserRole,
)

# -----------------------------------------------------------------------------
# Revenue Models - Monthly artist revenue pool
# -----------------------------------------------------------------------------
from .revenue import (
    ArtistCredits,
    ArtistMetrics,
    Currency,
    PlatformCredits,
    PoolAmounts,
    PoolCalculationRequest,
    RevenuePool,
    RevenuePoolUpdate,
)

# -----------------------------------------------------------------------------
# Media Models - Streaming
# -----------------------------------------------------------------------------
from .media import (
    PlayContentType,
    PlayEvaluation,
    PlayEventCreate,
    PlaylistTrackAdd,
    PodcastSyncResult,
    ReorderRequest,
    ReorderResult,
)

# -----------------------------------------------------------------------------
# Payment Models - Card checkout
# -----------------------------------------------------------------------------
from .payments import (
    CouponDiscount,
    CouponValidation,
    CouponValidationRequest,
    OrderPricing,
    PaymentCompletion,
    PaymentCompletionResult,
    PaymentIntentRequest,
    PricedProduct,
    ProductType,
    RECURRING_PRODUCT_TYPES,
)

# -----------------------------------------------------------------------------
# Import Models - Member imports
# -----------------------------------------------------------------------------
from .imports import (
    ImportMode,
    ImportRow,
    ImportRowError,
    ImportRowStatus,
    ImportTaskSubmitted,
    TagRepairResult,
    TagRepairSummary,
    WordPressImportResult,
)

# -----------------------------------------------------------------------------
# Redirect Models
# -----------------------------------------------------------------------------
from .redirects import (
    ALLOWED_STATUS_CODES,
    Redirection,
    RedirectionCreate,
    RedirectionUpdate,
)

# -----------------------------------------------------------------------------
# CRM Models - Tags, usernames, email, exchange rates
# -----------------------------------------------------------------------------
from .crm import (
    DirectEmail,
    DirectEmailResult,
    ExchangeRate,
    ExchangeRateSyncRequest,
    ExchangeRateSyncResult,
    TagAssignment,
    TagAssignmentResult,
    TagCreate,
    UsernameCheck,
    UsernameCheckRequest,
)

__all__ = [
    # Users
    "PasswordReset",
    "RoleResponse",
    "RoleUpdate",
    "UserCreate",
    "UserCreated",
    "UserDeletionResult",
    "UserRole",
    # Revenue
    "ArtistCredits",
    "ArtistMetrics",
    "Currency",
    "PlatformCredits",
    "PoolAmounts",
    "PoolCalculationRequest",
    "RevenuePool",
    "RevenuePoolUpdate",
    # Media
    "PlayContentType",
    "PlayEvaluation",
    "PlayEventCreate",
    "PlaylistTrackAdd",
    "PodcastSyncResult",
    "ReorderRequest",
    "ReorderResult",
    # Payments
    "CouponDiscount",
    "CouponValidation",
    "CouponValidationRequest",
    "OrderPricing",
    "PaymentCompletion",
    "PaymentCompletionResult",
    "PaymentIntentRequest",
    "PricedProduct",
    "ProductType",
    "RECURRING_PRODUCT_TYPES",
    # Imports
    "ImportMode",
    "ImportRow",
    "ImportRowError",
    "ImportRowStatus",
    "ImportTaskSubmitted",
    "TagRepairResult",
    "TagRepairSummary",
    "WordPressImportResult",
    # Redirects
    "ALLOWED_STATUS_CODES",
    "Redirection",
    "RedirectionCreate",
    "RedirectionUpdate",
    # CRM
    "DirectEmail",
    "DirectEmailResult",
    "ExchangeRate",
    "ExchangeRateSyncRequest",
    "ExchangeRateSyncResult",
    "TagAssignment",
    "TagAssignmentResult",
    "TagCreate",
    "UsernameCheck",
    "UsernameCheckRequest",
]
