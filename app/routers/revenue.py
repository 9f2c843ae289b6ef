# =============================================================================
# app/routers/revenue.py - Revenue Pool Endpoints
# =============================================================================
# Admin screens for the artist revenue pool:
# - Monthly pool settings (list, get, save)
# - Pool calculator from net revenue
# - Platform credits and per-artist metrics
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Path, Query

from app.dependencies import AdminUser
from app.exceptions import ResourceNotFoundError
from core.models.revenue import (
    ArtistMetrics,
    Currency,
    PlatformCredits,
    PoolAmounts,
    PoolCalculationRequest,
    RevenuePool,
    RevenuePoolUpdate,
)
from core.services.revenue_service import RevenueService, calculate_pool_amounts

logger = logging.getLogger(__name__)

router = APIRouter()

Year = Annotated[int, Path(ge=2000, le=2100)]
Month = Annotated[int, Path(ge=1, le=12)]


@router.get("/pools", response_model=list[RevenuePool])
async def list_pools(admin: AdminUser):
    return [RevenuePool.model_validate(row) for row in RevenueService.list_pools()]


@router.get("/pools/{year}/{month}", response_model=RevenuePool)
async def get_pool(year: Year, month: Month, admin: AdminUser):
    pool = RevenueService.get_pool(year, month)
    if not pool:
        raise ResourceNotFoundError("revenue pool", f"{year}-{month:02d}")
    return RevenuePool.model_validate(pool)


@router.put("/pools", response_model=RevenuePool)
async def save_pool(request: RevenuePoolUpdate, admin: AdminUser):
    """Create or replace the pool for `year`/`month`."""
    logger.info(f"Admin {admin.id} saving revenue pool {request.year}-{request.month:02d}")
    return RevenuePool.model_validate(RevenueService.save_pool(request))


@router.post("/pools/calculate", response_model=PoolAmounts)
async def calculate_pool(request: PoolCalculationRequest, admin: AdminUser):
    """
    Work out pool amounts from a percentage.

    Net revenue is read from completed transactions for the month unless
    the request supplies it.
    """
    net_revenue = request.net_revenue
    if net_revenue is None:
        net_revenue = RevenueService.net_revenue_for_month(request.year, request.month)

    amounts = calculate_pool_amounts(net_revenue, request.percentage_of_revenue)
    return PoolAmounts(
        net_revenue=net_revenue,
        pool_amount_gbp=amounts[Currency.GBP],
        pool_amount_usd=amounts[Currency.USD],
        pool_amount_eur=amounts[Currency.EUR],
    )


@router.get("/credits/{year}/{month}", response_model=PlatformCredits)
async def platform_credits(year: Year, month: Month, admin: AdminUser):
    return PlatformCredits(**RevenueService.platform_credits(year, month))


@router.get("/artists/{artist_id}/metrics", response_model=ArtistMetrics)
async def artist_metrics(
    artist_id: str,
    admin: AdminUser,
    year: Annotated[int, Query(ge=2000, le=2100)],
    month: Annotated[int, Query(ge=1, le=12)],
):
    return ArtistMetrics(**RevenueService.artist_metrics(artist_id, year, month))
