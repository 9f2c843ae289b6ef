# =============================================================================
# core/models/revenue.py - Revenue Pool Schemas
# =============================================================================
# A revenue pool is the share of a month's net revenue paid out to artists,
# split by the credits their tracks earned that month.
#
# - RevenuePoolUpdate: Admin input for one month
# - RevenuePool: Row from revenue_pool_settings
# - PlatformCredits / ArtistMetrics: Computed read models
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Currency(str, Enum):
    """Currencies the pool is tracked in."""
    GBP = "GBP"
    USD = "USD"
    EUR = "EUR"


class RevenuePoolUpdate(BaseModel):
    """
    Schema for saving a month's pool.

    Amounts are never negative and the percentage stays within 0-100.

    Example:
        {
            "year": 2024,
            "month": 3,
            "percentage_of_revenue": 30,
            "pool_amount_gbp": 1200.50,
            "pool_amount_usd": 300,
            "pool_amount_eur": 0,
            "notes": "March payout"
        }
    """

    year: int = Field(..., ge=2000, le=2100)

    month: int = Field(..., ge=1, le=12)

    percentage_of_revenue: float = Field(
        ...,
        ge=0,
        le=100,
        description="Share of net revenue that funds the pool"
    )

    pool_amount_gbp: float = Field(default=0, ge=0)
    pool_amount_usd: float = Field(default=0, ge=0)
    pool_amount_eur: float = Field(default=0, ge=0)

    notes: str | None = Field(default=None, max_length=2000)


class RevenuePool(BaseModel):
    """A saved month as stored in revenue_pool_settings."""

    id: str | None = None
    year: int
    month: int
    percentage_of_revenue: float = 0
    pool_amount_gbp: float = 0
    pool_amount_usd: float = 0
    pool_amount_eur: float = 0
    notes: str | None = None
    updated_at: datetime | None = None

    class Config:
        """Pydantic configuration for this model."""
        from_attributes = True


class PoolCalculationRequest(BaseModel):
    """
    Preview pool amounts from a month's revenue.

    When `net_revenue` is omitted the month's net revenue is read from
    financial_transactions.
    """

    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)
    percentage_of_revenue: float = Field(..., ge=0, le=100)
    net_revenue: dict[Currency, float] | None = None


class PoolAmounts(BaseModel):
    net_revenue: dict[Currency, float]
    pool_amount_gbp: float = Field(ge=0)
    pool_amount_usd: float = Field(ge=0)
    pool_amount_eur: float = Field(ge=0)


class ArtistCredits(BaseModel):
    artist_id: str
    artist_name: str | None = None
    credits: float = Field(ge=0)


class PlatformCredits(BaseModel):
    """Credits earned across all artists in a month and what one is worth."""

    year: int
    month: int
    total_credits: float = Field(ge=0)
    artists: list[ArtistCredits] = Field(default_factory=list)
    rate_per_credit: dict[Currency, float] = Field(default_factory=dict)


class ArtistMetrics(BaseModel):
    """
    One artist's standing for a month.

    Example:
        {
            "artist_id": "...",
            "credits": 150,
            "platform_credits": 1000,
            "share_percentage": 15.0,
            "estimated_payment": {"GBP": 180.0, "USD": 45.0, "EUR": 0.0},
            "previous_credits": 100,
            "growth_percentage": 50.0
        }
    """

    artist_id: str
    year: int
    month: int
    credits: float = Field(ge=0)
    platform_credits: float = Field(ge=0)
    share_percentage: float = Field(ge=0)
    estimated_payment: dict[Currency, float] = Field(default_factory=dict)
    previous_credits: float = Field(default=0, ge=0)
    growth_percentage: float = 0
