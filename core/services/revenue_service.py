# =============================================================================
# core/services/revenue_service.py - Revenue Pool Business Logic
# =============================================================================
# Each month an admin sets aside a percentage of net revenue as a pool for
# artists. The pool is split by the play credits each artist earned:
#
#   share %  = artist credits / platform credits x 100
#   payment  = pool amount x share % / 100
#
# Amounts are kept per currency (GBP, USD, EUR) and never converted here.
# =============================================================================

import logging
from typing import Any

from app.exceptions import InvalidRequestError
from core.models.revenue import Currency, RevenuePoolUpdate
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

POOL_CURRENCIES = [Currency.GBP, Currency.USD, Currency.EUR]

POOL_AMOUNT_COLUMNS = {
    Currency.GBP: "pool_amount_gbp",
    Currency.USD: "pool_amount_usd",
    Currency.EUR: "pool_amount_eur",
}


# =============================================================================
# Pure Calculations
# =============================================================================

def calculate_pool_amounts(
    net_revenue_by_currency: dict[Currency, float],
    percentage: float,
) -> dict[Currency, float]:
    """
    Apply a pool percentage to each currency's net revenue.

    Example:
        calculate_pool_amounts({Currency.GBP: 1000}, 30)
        # {GBP: 300.0, USD: 0.0, EUR: 0.0}

    Raises:
        InvalidRequestError: On a percentage outside 0-100 or negative revenue
    """
    if percentage < 0 or percentage > 100:
        raise InvalidRequestError(
            "Percentage of revenue must be between 0 and 100",
            details={"percentage": percentage},
        )

    amounts = {}
    for currency in POOL_CURRENCIES:
        revenue = float(net_revenue_by_currency.get(currency, 0) or 0)
        if revenue < 0:
            raise InvalidRequestError(
                "Amounts cannot be negative",
                details={"currency": currency.value, "amount": revenue},
            )
        amounts[currency] = round(revenue * percentage / 100, 2)
    return amounts


def share_percentage(artist_credits: float, platform_credits: float) -> float:
    if platform_credits <= 0:
        return 0.0
    return artist_credits / platform_credits * 100


def growth_percentage(current: float, previous: float) -> float:
    """
    Month-over-month change in credits.

    With no previous credits, any current credits count as 100% growth.
    """
    if previous > 0:
        return (current - previous) / previous * 100
    return 100.0 if current > 0 else 0.0


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def _month_bounds(year: int, month: int) -> tuple[str, str]:
    next_year, next_month = (year + 1, 1) if month == 12 else (year, month + 1)
    return f"{year:04d}-{month:02d}-01", f"{next_year:04d}-{next_month:02d}-01"


def _pool_amounts(pool: dict[str, Any] | None) -> dict[Currency, float]:
    if not pool:
        return {currency: 0.0 for currency in POOL_CURRENCIES}
    amounts = {
        currency: float(pool.get(column) or 0)
        for currency, column in POOL_AMOUNT_COLUMNS.items()
    }
    # Rows saved before multi-currency support only have pool_amount
    if not any(amounts.values()) and pool.get("pool_amount"):
        amounts[Currency.GBP] = float(pool["pool_amount"])
    return amounts


# =============================================================================
# Service
# =============================================================================

class RevenueService:
    """Reads and writes revenue_pool_settings and derives artist payouts."""

    @staticmethod
    def list_pools() -> list[dict[str, Any]]:
        """All saved months, newest first."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("revenue_pool_settings")
                .select("*")
                .order("year", desc=True)
                .order("month", desc=True)
                .execute()
            )
            return response.data or []
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list revenue pools: {e}",
                code="FETCH_FAILED",
            )

    @staticmethod
    def get_pool(year: int, month: int) -> dict[str, Any] | None:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("revenue_pool_settings")
                .select("*")
                .eq("year", year)
                .eq("month", month)
                .maybe_single()
                .execute()
            )
            return response.data if response is not None else None
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch revenue pool: {e}",
                code="FETCH_FAILED",
                details={"year": year, "month": month},
            )

    @staticmethod
    def save_pool(update: RevenuePoolUpdate) -> dict[str, Any]:
        """
        Create or replace the pool for a month.

        Also writes the single-currency `pool_amount`/`currency` columns older
        readers still use.
        """
        client = SupabaseClient.get_client()
        data = {
            "year": update.year,
            "month": update.month,
            "percentage_of_revenue": update.percentage_of_revenue,
            "pool_amount_gbp": update.pool_amount_gbp,
            "pool_amount_usd": update.pool_amount_usd,
            "pool_amount_eur": update.pool_amount_eur,
            "pool_amount": update.pool_amount_gbp,
            "currency": "GBP",
            "notes": update.notes or None,
            "updated_at": utc_now_iso(),
        }

        try:
            response = (
                client.table("revenue_pool_settings")
                .upsert(data, on_conflict="year,month")
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to save revenue pool {update.year}-{update.month:02d}: {e}")
            raise SupabaseClientError(
                message=f"Failed to update revenue pool: {e}",
                code="SAVE_FAILED",
                details={"year": update.year, "month": update.month},
            )

        logger.info(f"Revenue pool updated for {update.year}-{update.month:02d}")
        return response.data[0] if response.data else data

    @staticmethod
    def net_revenue_for_month(year: int, month: int) -> dict[Currency, float]:
        """
        Net revenue of completed payments in a month, per currency.

        Uses `net_amount`, or `amount - fee_amount` when it is missing.
        Rows in other currencies are ignored.
        """
        client = SupabaseClient.get_client()
        start, end = _month_bounds(year, month)

        try:
            response = (
                client.table("financial_transactions")
                .select("amount, fee_amount, net_amount, currency")
                .eq("status", "completed")
                .eq("transaction_type", "payment")
                .gte("transaction_date", start)
                .lt("transaction_date", end)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch transactions: {e}",
                code="FETCH_FAILED",
                details={"year": year, "month": month},
            )

        totals = {currency: 0.0 for currency in POOL_CURRENCIES}
        for row in response.data or []:
            try:
                currency = Currency((row.get("currency") or "").upper())
            except ValueError:
                continue
            net = row.get("net_amount")
            if net is None:
                net = float(row.get("amount") or 0) - float(row.get("fee_amount") or 0)
            totals[currency] += float(net)

        return {currency: round(amount, 2) for currency, amount in totals.items()}

    @staticmethod
    def _credit_rows(year: int, month: int, artist_id: str | None = None) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            query = (
                client.table("monthly_artist_credits")
                .select("artist_id, total_play_credits, media_artists(name)")
                .eq("year", year)
                .eq("month", month)
            )
            if artist_id:
                query = query.eq("artist_id", artist_id)
            return query.execute().data or []
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch artist credits: {e}",
                code="FETCH_FAILED",
                details={"year": year, "month": month},
            )

    @staticmethod
    def platform_credits(year: int, month: int) -> dict[str, Any]:
        """
        Total credits for a month with a per-artist breakdown.

        `rate_per_credit` is what one credit is worth in each currency.
        """
        rows = RevenueService._credit_rows(year, month)
        total = sum(float(row.get("total_play_credits") or 0) for row in rows)
        pool = _pool_amounts(RevenueService.get_pool(year, month))

        return {
            "year": year,
            "month": month,
            "total_credits": total,
            "artists": [
                {
                    "artist_id": row["artist_id"],
                    "artist_name": (row.get("media_artists") or {}).get("name"),
                    "credits": float(row.get("total_play_credits") or 0),
                }
                for row in rows
            ],
            "rate_per_credit": {
                currency: (amount / total if total > 0 else 0.0)
                for currency, amount in pool.items()
            },
        }

    @staticmethod
    def artist_metrics(artist_id: str, year: int, month: int) -> dict[str, Any]:
        """One artist's credits, pool share, estimated payment and growth."""
        current_rows = RevenueService._credit_rows(year, month, artist_id)
        credits = sum(float(row.get("total_play_credits") or 0) for row in current_rows)

        prev_year, prev_month = previous_month(year, month)
        previous_rows = RevenueService._credit_rows(prev_year, prev_month, artist_id)
        previous = sum(float(row.get("total_play_credits") or 0) for row in previous_rows)

        platform_total = sum(
            float(row.get("total_play_credits") or 0)
            for row in RevenueService._credit_rows(year, month)
        )
        share = share_percentage(credits, platform_total)
        pool = _pool_amounts(RevenueService.get_pool(year, month))

        return {
            "artist_id": artist_id,
            "year": year,
            "month": month,
            "credits": credits,
            "platform_credits": platform_total,
            "share_percentage": share,
            "estimated_payment": {
                currency: round(amount * share / 100, 2) for currency, amount in pool.items()
            },
            "previous_credits": previous,
            "growth_percentage": growth_percentage(credits, previous),
        }
