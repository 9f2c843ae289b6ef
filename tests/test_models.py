# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the request/response models to ensure:
# - Valid data is accepted and normalised
# - Invalid data raises ValidationError
# - camelCase aliases used by the web client are accepted
# - Default values work as expected
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

from uuid import uuid4

import pytest
from pydantic import ValidationError

from core.models import (
    CouponValidation,
    DirectEmail,
    ExchangeRate,
    ExchangeRateSyncRequest,
    ImportMode,
    PaymentCompletion,
    PaymentIntentRequest,
    PlayEventCreate,
    ReorderRequest,
    TagAssignment,
    TagCreate,
    UserCreate,
    UserRole,
    WordPressImportResult,
)


# =============================================================================
# User Model Tests
# =============================================================================

class TestUserCreate:
    """Tests for UserCreate model."""

    def test_email_normalised(self):
        """Email is trimmed and lower-cased."""
        user = UserCreate(email="  Ada@Example.COM ", password="secret1")

        assert user.email == "ada@example.com"
        assert user.role == UserRole.USER
        assert user.full_name is None

    def test_password_minimum(self):
        """Passwords shorter than 6 characters are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            UserCreate(email="a@b.com", password="12345")

        assert "password" in str(exc_info.value)

    def test_email_needs_at_sign(self):
        with pytest.raises(ValidationError):
            UserCreate(email="not-an-email", password="secret1")

    def test_unknown_role(self):
        with pytest.raises(ValidationError):
            UserCreate(email="a@b.com", password="secret1", role="superuser")


# =============================================================================
# Media Model Tests
# =============================================================================

class TestMediaModels:

    def test_reorder_ids_parsed(self):
        ids = [str(uuid4()), str(uuid4())]
        request = ReorderRequest(ordered_ids=ids)
        assert [str(item) for item in request.ordered_ids] == ids

    def test_reorder_rejects_non_uuid(self):
        with pytest.raises(ValidationError):
            ReorderRequest(ordered_ids=["track-1"])

    def test_play_content_type(self):
        with pytest.raises(ValidationError):
            PlayEventCreate(
                content_id=str(uuid4()),
                content_type="video",
                listen_duration_seconds=10,
                content_duration_seconds=20,
            )


# =============================================================================
# Payment Model Tests
# =============================================================================

class TestPaymentModels:
    """The checkout page sends camelCase fields."""

    def test_intent_aliases(self):
        request = PaymentIntentRequest.model_validate({
            "productIds": ["p1"],
            "amounts": [49.0],
            "email": "fan@example.com",
            "fullName": "Sam Fan",
            "couponCode": "SPRING",
            "creditAmountUsed": 500,
        })

        assert request.product_ids == ["p1"]
        assert request.full_name == "Sam Fan"
        assert request.credit_amount_used == 500
        assert request.currency == "USD"

    def test_negative_credits_rejected(self):
        with pytest.raises(ValidationError):
            PaymentIntentRequest(email="fan@example.com", creditAmountUsed=-1)

    def test_completion_alias(self):
        assert PaymentCompletion(paymentIntentId="pi_1").payment_intent_id == "pi_1"

    def test_coupon_failure_shape(self):
        result = CouponValidation(success=False, error="This coupon has expired")
        assert result.model_dump(exclude_none=True) == {"success": False, "error": "This coupon has expired"}

    def test_coupon_discount_from_service_shape(self):
        result = CouponValidation(
            success=True,
            coupon={"code": "SPRING", "discount_type": "percent", "percent_off": 20, "currency": None},
        )

        assert result.coupon.percent_off == 20
        assert result.model_dump(by_alias=True, exclude_none=True)["coupon"] == {
            "code": "SPRING",
            "discountType": "percent",
            "percentOff": 20,
        }


# =============================================================================
# CRM Model Tests
# =============================================================================

class TestTagAssignment:

    def test_by_email_and_name(self):
        assignment = TagAssignment.model_validate({"email": "fan@example.com", "tagName": "Newsletter"})

        assert assignment.tag_name == "Newsletter"
        assert assignment.source == "manual"

    def test_needs_tag(self):
        with pytest.raises(ValidationError, match="tagId or tagName"):
            TagAssignment(email="fan@example.com")

    def test_needs_target(self):
        with pytest.raises(ValidationError, match="userId or email"):
            TagAssignment(tag_id="t1")

    @pytest.mark.parametrize("color", ["blue", "#12345", "#GGGGGG"])
    def test_tag_color(self, color):
        with pytest.raises(ValidationError):
            TagCreate(name="Student", color=color)


class TestMiscModels:

    def test_direct_email_from_alias(self):
        email = DirectEmail.model_validate({
            "to": "fan@example.com",
            "subject": "Hello",
            "htmlBody": "<p>Hi</p>",
            "from": "team@example.com",
        })
        assert email.sender == "team@example.com"

    @pytest.mark.parametrize("month", ["2024-03", "2024-03-15", None])
    def test_sync_month_accepted(self, month):
        assert ExchangeRateSyncRequest(month=month).month == month

    def test_sync_month_rejected(self):
        with pytest.raises(ValidationError):
            ExchangeRateSyncRequest(month="March 2024")

    def test_exchange_rate_serialises_short_names(self):
        rate = ExchangeRate(from_currency="GBP", to_currency="USD", rate=1.27)
        assert rate.model_dump(by_alias=True) == {"from": "GBP", "to": "USD", "rate": 1.27}

    def test_import_result_defaults(self):
        result = WordPressImportResult(total=2, message="Preview ready")

        assert result.created == 0
        assert result.errors == []
        assert ImportMode("import") == ImportMode.IMPORT
