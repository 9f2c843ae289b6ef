# =============================================================================
# core/services/exchange_rate_service.py - Monthly Currency Rates
# =============================================================================
# Stores one rate per ordered currency pair per month, used to convert
# revenue into the pool currency. Rates are fetched once with GBP as the
# base and the other pairs are derived from it.
# =============================================================================

import logging
from datetime import date, datetime
from typing import Any

import httpx

from app.config import settings
from app.exceptions import ExternalServiceError, InvalidRequestError
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now, utc_now_iso

logger = logging.getLogger(__name__)

BASE_CURRENCY = "GBP"
CURRENCIES = ("GBP", "USD", "EUR")


def cross_rates(gbp_rates: dict[str, float]) -> list[dict[str, Any]]:
    """
    Derive every ordered pair of CURRENCIES from GBP-based rates.

    Example:
        cross_rates({"USD": 1.25, "EUR": 1.15})
        # [{"from": "GBP", "to": "USD", "rate": 1.25},
        #  {"from": "GBP", "to": "EUR", "rate": 1.15},
        #  {"from": "USD", "to": "GBP", "rate": 0.8}, ...]

    Raises:
        InvalidRequestError: If a currency is missing or not positive
    """
    for currency in CURRENCIES:
        if currency == BASE_CURRENCY:
            continue
        rate = gbp_rates.get(currency)
        if rate is None or rate <= 0:
            raise InvalidRequestError(f"No usable {BASE_CURRENCY}->{currency} rate in response")

    def gbp_to(currency: str) -> float:
        return 1.0 if currency == BASE_CURRENCY else float(gbp_rates[currency])

    pairs = []
    for from_currency in CURRENCIES:
        for to_currency in CURRENCIES:
            if from_currency == to_currency:
                continue
            pairs.append({
                "from": from_currency,
                "to": to_currency,
                "rate": gbp_to(to_currency) / gbp_to(from_currency),
            })
    return pairs


def rate_month(month: str | None = None) -> str:
    """First day of the given month (YYYY-MM or YYYY-MM-DD), or of today."""
    if month:
        try:
            target = datetime.strptime(month[:7], "%Y-%m").date()
        except ValueError:
            raise InvalidRequestError(f"Invalid month: {month}", suggestion="Use YYYY-MM")
    else:
        target = utc_now().date()
    return date(target.year, target.month, 1).isoformat()


def fetch_rates(base: str = BASE_CURRENCY) -> dict[str, float]:
    """
    Download the latest rates for a base currency.

    Raises:
        ExternalServiceError: If the rate API can't be reached or errors
    """
    url = f"{settings.EXCHANGE_RATE_API_URL}/{base}"
    try:
        response = httpx.get(url, timeout=settings.HTTP_TIMEOUT_SECONDS)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise ExternalServiceError("exchange rate API", f"Failed to fetch exchange rates: {e}")
    return response.json().get("rates") or {}


class ExchangeRateService:
    """Service for syncing exchange rates."""

    @staticmethod
    def sync_exchange_rates(month: str | None = None) -> dict[str, Any]:
        """
        Fetch current rates and store them against a month.

        A pair that fails to save is logged and left out of the result;
        the others are still stored.

        Returns:
            {"success": True, "month": "YYYY-MM-01", "rates": [...]}
        """
        month_start = rate_month(month)
        logger.info(f"Fetching exchange rates for month: {month_start}")
        client = SupabaseClient.get_client()

        sync_log_id = None
        try:
            log_response = (
                client.table("financial_sync_log")
                .insert({
                    "source": "exchange_rates",
                    "sync_type": "auto",
                    "sync_details": {"month": month_start},
                })
                .execute()
            )
            if log_response.data:
                sync_log_id = log_response.data[0]["id"]
        except Exception as e:
            logger.warning(f"Could not create sync log: {e}")

        pairs = cross_rates(fetch_rates(BASE_CURRENCY))

        saved = []
        for pair in pairs:
            try:
                (
                    client.table("exchange_rates")
                    .upsert(
                        {
                            "rate_month": month_start,
                            "from_currency": pair["from"],
                            "to_currency": pair["to"],
                            "rate": pair["rate"],
                            "source": "api",
                            "fetched_at": utc_now_iso(),
                        },
                        on_conflict="rate_month,from_currency,to_currency",
                    )
                    .execute()
                )
            except Exception as e:
                logger.error(f"Failed to save rate {pair['from']}->{pair['to']}: {e}")
                continue
            saved.append(pair)

        if sync_log_id:
            try:
                (
                    client.table("financial_sync_log")
                    .update({
                        "completed_at": utc_now_iso(),
                        "status": "completed",
                        "transactions_synced": len(saved),
                        "sync_details": {"month": month_start, "rates": saved},
                    })
                    .eq("id", sync_log_id)
                    .execute()
                )
            except Exception as e:
                logger.warning(f"Could not close sync log {sync_log_id}: {e}")

        logger.info(f"Exchange rates synced: {len(saved)} rates")
        return {"success": True, "month": month_start, "rates": saved}
