# =============================================================================
# app/routers/exchange_rates.py - Exchange Rate Endpoints
# =============================================================================

from fastapi import APIRouter

from app.dependencies import AdminUser
from core.models.crm import ExchangeRateSyncRequest, ExchangeRateSyncResult
from core.services.exchange_rate_service import ExchangeRateService

router = APIRouter()


@router.post("/sync", response_model=ExchangeRateSyncResult, response_model_by_alias=True)
async def sync_exchange_rates(request: ExchangeRateSyncRequest, admin: AdminUser):
    """Fetch today's GBP/USD/EUR rates and store them for `month` (default: this month)."""
    result = ExchangeRateService.sync_exchange_rates(request.month)
    return ExchangeRateSyncResult(
        month=result["month"],
        rates=[
            {"from_currency": rate["from"], "to_currency": rate["to"], "rate": rate["rate"]}
            for rate in result["rates"]
        ],
    )
