# =============================================================================
# core/models/payments.py - Checkout Schemas
# =============================================================================
# These models define the API contract for card checkout:
# - CouponValidationRequest / CouponValidation: Check a code before paying
# - PaymentIntentRequest: Cart sent by the checkout page
# - PricedProduct / OrderPricing: Server-side price breakdown
# - PaymentCompletion: Confirm a succeeded intent and provision access
#
# Field aliases match the camelCase payloads the checkout page sends.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ProductType(str, Enum):
    COURSE = "course"
    SUBSCRIPTION = "subscription"
    MEMBERSHIP = "membership"
    DIGITAL = "digital"
    OTHER = "other"


RECURRING_PRODUCT_TYPES = {ProductType.SUBSCRIPTION.value, ProductType.MEMBERSHIP.value}


class CouponValidationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    coupon_code: str = Field(default="", alias="couponCode")
    product_ids: list[str] = Field(default_factory=list, alias="productIds")


class CouponDiscount(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str
    discount_type: str | None = Field(default=None, alias="discountType")
    percent_off: float | None = Field(default=None, alias="percentOff")
    amount_off: float | None = Field(default=None, alias="amountOff")
    currency: str | None = None


class CouponValidation(BaseModel):
    """
    Result of a coupon check.

    Invalid coupons are not HTTP errors: `success` is False and `error`
    carries a message the checkout page shows verbatim.

    Example:
        {"success": false, "error": "This coupon has expired"}
    """

    success: bool
    error: str | None = None
    coupon: CouponDiscount | None = None


class PaymentIntentRequest(BaseModel):
    """
    Cart submitted by the checkout page.

    `amounts` are per-product prices already geo-priced and
    coupon-discounted on the client, in the same order as `product_ids`.
    `credit_amount_used` is in cents.

    Example:
        {
            "productIds": ["p1", "p2"],
            "amounts": [49.0, 15.0],
            "email": "fan@example.com",
            "fullName": "Sam Fan",
            "couponCode": "SPRING",
            "currency": "GBP",
            "creditAmountUsed": 500
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    product_ids: list[str] = Field(default_factory=list, alias="productIds")
    amounts: list[float | None] = Field(default_factory=list)
    email: str = Field(..., min_length=3)
    full_name: str | None = Field(default=None, alias="fullName")
    coupon_code: str | None = Field(default=None, alias="couponCode")
    currency: str = Field(default="USD", min_length=3, max_length=3)
    credit_amount_used: int = Field(default=0, ge=0, alias="creditAmountUsed")


class PricedProduct(BaseModel):
    id: str
    name: str | None = None
    course_id: str | None = None
    amount: float = Field(ge=0)
    product_type: str | None = None
    is_pwyf: bool = False


class OrderPricing(BaseModel):
    """
    Server-side price breakdown for a cart.

    total: Sum of product amounts
    card_discount: total x card discount rate
    credit_discount: Credits applied, in currency units
    final_price: max(0, total - card_discount - credit_discount)
    amount_cents: final_price in minor units, rounded
    """

    products: list[PricedProduct] = Field(default_factory=list)
    total: float = Field(ge=0)
    original_total: float = Field(ge=0)
    coupon_discount: float = Field(default=0, ge=0)
    card_discount: float = Field(ge=0)
    credit_discount: float = Field(ge=0)
    final_price: float = Field(ge=0)
    amount_cents: int = Field(ge=0)


class PaymentCompletion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payment_intent_id: str = Field(..., min_length=1, alias="paymentIntentId")
    password: str | None = Field(
        default=None,
        min_length=6,
        description="Password for the new account when the buyer has none"
    )


class PaymentCompletionResult(BaseModel):
    success: bool = True
    user_id: str = Field(serialization_alias="userId")
    course_ids: list[str] = Field(default_factory=list, serialization_alias="courseIds")
