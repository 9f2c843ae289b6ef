# =============================================================================
# tests/test_revenue.py - Revenue Pool Tests
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError

from app.exceptions import InvalidRequestError
from core.models.revenue import Currency, PlatformCredits, RevenuePoolUpdate
from core.services.revenue_service import (
    RevenueService,
    _month_bounds,
    _pool_amounts,
    calculate_pool_amounts,
    growth_percentage,
    previous_month,
    share_percentage,
)


class TestCalculatePoolAmounts:

    def test_percentage_applied_per_currency(self):
        amounts = calculate_pool_amounts({Currency.GBP: 1000, Currency.USD: 250.5}, 30)

        assert amounts == {Currency.GBP: 300.0, Currency.USD: 75.15, Currency.EUR: 0.0}

    @pytest.mark.parametrize("percentage", [0, 100])
    def test_bounds_accepted(self, percentage):
        amounts = calculate_pool_amounts({Currency.GBP: 200}, percentage)
        assert amounts[Currency.GBP] == 2 * percentage

    @pytest.mark.parametrize("percentage", [-0.1, 100.5])
    def test_percentage_out_of_range(self, percentage):
        with pytest.raises(InvalidRequestError, match="between 0 and 100"):
            calculate_pool_amounts({Currency.GBP: 100}, percentage)

    def test_negative_revenue_rejected(self):
        with pytest.raises(InvalidRequestError, match="negative"):
            calculate_pool_amounts({Currency.EUR: -5}, 10)


class TestMetrics:

    def test_share(self):
        assert share_percentage(25, 200) == 12.5
        assert share_percentage(10, 0) == 0.0

    def test_growth(self):
        assert growth_percentage(150, 100) == 50.0
        assert growth_percentage(50, 100) == -50.0
        assert growth_percentage(10, 0) == 100.0
        assert growth_percentage(0, 0) == 0.0

    def test_previous_month_wraps_year(self):
        assert previous_month(2024, 1) == (2023, 12)
        assert previous_month(2024, 6) == (2024, 5)

    def test_month_bounds(self):
        assert _month_bounds(2024, 12) == ("2024-12-01", "2025-01-01")
        assert _month_bounds(2024, 2) == ("2024-02-01", "2024-03-01")

    def test_legacy_single_amount_pool(self):
        amounts = _pool_amounts({"pool_amount": 500, "currency": "GBP"})
        assert amounts[Currency.GBP] == 500.0
        assert amounts[Currency.USD] == 0.0


class TestRevenuePoolUpdate:
    """Form validation for the pool settings."""

    def test_valid(self):
        pool = RevenuePoolUpdate(year=2024, month=5, percentage_of_revenue=30, pool_amount_gbp=120.5)
        assert pool.pool_amount_usd == 0

    @pytest.mark.parametrize("field, value", [
        ("percentage_of_revenue", 101),
        ("percentage_of_revenue", -1),
        ("pool_amount_gbp", -0.01),
        ("month", 13),
    ])
    def test_invalid(self, field, value):
        data = {"year": 2024, "month": 5, "percentage_of_revenue": 30, field: value}
        with pytest.raises(ValidationError):
            RevenuePoolUpdate(**data)


class TestArtistMetrics:

    def test_metrics_from_credit_rows(self):
        def credit_rows(year, month, artist_id=None):
            if (year, month) == (2024, 4):
                return [{"artist_id": "a1", "total_play_credits": 50}]
            if artist_id:
                return [{"artist_id": "a1", "total_play_credits": 100}]
            return [
                {"artist_id": "a1", "total_play_credits": 100},
                {"artist_id": "a2", "total_play_credits": 300},
            ]

        pool = {"pool_amount_gbp": 1000, "pool_amount_usd": 0, "pool_amount_eur": 0}
        with patch.object(RevenueService, "_credit_rows", side_effect=credit_rows), \
                patch.object(RevenueService, "get_pool", MagicMock(return_value=pool)):
            metrics = RevenueService.artist_metrics("a1", 2024, 5)

        assert metrics["credits"] == 100
        assert metrics["platform_credits"] == 400
        assert metrics["share_percentage"] == 25.0
        assert metrics["estimated_payment"][Currency.GBP] == 250.0
        assert metrics["previous_credits"] == 50
        assert metrics["growth_percentage"] == 100.0


class TestPlatformCredits:

    def test_breakdown_and_rate(self):
        rows = [
            {"artist_id": "a1", "total_play_credits": 100, "media_artists": {"name": "Duo Sol"}},
            {"artist_id": "a2", "total_play_credits": 300, "media_artists": None},
        ]
        pool = {"pool_amount_gbp": 1000, "pool_amount_usd": 0, "pool_amount_eur": 0}

        with patch.object(RevenueService, "_credit_rows", return_value=rows), \
                patch.object(RevenueService, "get_pool", MagicMock(return_value=pool)):
            credits = PlatformCredits(**RevenueService.platform_credits(2024, 5))

        assert credits.total_credits == 400
        assert [(a.artist_id, a.artist_name, a.credits) for a in credits.artists] == [
            ("a1", "Duo Sol", 100.0),
            ("a2", None, 300.0),
        ]
        assert credits.rate_per_credit[Currency.GBP] == 2.5
        assert credits.rate_per_credit[Currency.USD] == 0.0

    def test_no_credits(self):
        with patch.object(RevenueService, "_credit_rows", return_value=[]), \
                patch.object(RevenueService, "get_pool", MagicMock(return_value=None)):
            credits = RevenueService.platform_credits(2024, 5)

        assert credits["artists"] == []
        assert set(credits["rate_per_credit"].values()) == {0.0}
