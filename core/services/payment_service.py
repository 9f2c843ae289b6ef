# =============================================================================
# core/services/payment_service.py - Coupons and Card Checkout
# =============================================================================
# Server side of the card checkout:
# 1. validate_coupon: the checkout page checks a code before pricing
# 2. create_payment_intent: prices the cart and opens a Stripe PaymentIntent
# 3. complete_payment: after Stripe confirms, provision the buyer's access
#
# Amounts sent by the client are already geo-priced and coupon-discounted;
# price_order re-applies the server's own bounds and discounts on top.
# =============================================================================

import json
import math
import logging
import secrets
from typing import Any

import stripe

from app.config import settings
from app.exceptions import (
    ExternalServiceError,
    InvalidRequestError,
    PaymentNotCompletedError,
    ServiceNotConfiguredError,
)
from core.models.payments import (
    RECURRING_PRODUCT_TYPES,
    OrderPricing,
    PaymentIntentRequest,
    PricedProduct,
    ProductType,
)
from core.services.tag_service import TagService
from lib.supabase_client import SupabaseClient, SupabaseClientError, is_duplicate_error
from lib.utils import normalize_email, parse_timestamp, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

# Pay-what-you-feel amounts may drift this far outside the configured range
# before being replaced (currency conversion rounding)
PWYF_LOWER_TOLERANCE = 0.9
PWYF_UPPER_TOLERANCE = 1.1

PURCHASE_TAG_COLOR = "#10B981"


def _configure_stripe() -> None:
    if not settings.STRIPE_SECRET_KEY:
        raise ServiceNotConfiguredError("Stripe", ["STRIPE_SECRET_KEY"])
    stripe.api_key = settings.STRIPE_SECRET_KEY


def _is_recurring(product: dict[str, Any]) -> bool:
    return product.get("product_type") in RECURRING_PRODUCT_TYPES


def has_free_trial(product: dict[str, Any]) -> bool:
    """A subscription/membership whose trial costs nothing."""
    return (
        _is_recurring(product)
        and bool(product.get("trial_enabled"))
        and not product.get("trial_price_usd")
        and (product.get("trial_length_days") or 0) > 0
    )


# =============================================================================
# Pricing
# =============================================================================

def price_product(product: dict[str, Any], amount: float | None) -> float:
    """
    Decide what one product costs.

    - Pay-what-you-feel amounts outside [0.9 x min, 1.1 x max] fall back to
      the suggested price, else the minimum
    - Paid trials of subscriptions/memberships charge the trial price
      (never for pay-what-you-feel products)
    - A missing amount falls back to the base price
    """
    price = amount
    is_pwyf = bool(product.get("is_pwyf"))

    min_price = product.get("min_price")
    max_price = product.get("max_price")
    if is_pwyf and min_price is not None and max_price is not None and price is not None:
        if price < min_price * PWYF_LOWER_TOLERANCE or price > max_price * PWYF_UPPER_TOLERANCE:
            logger.warning(
                f"PWYF price out of range for {product.get('id')}: {price} not in [{min_price}, {max_price}]"
            )
            price = product.get("suggested_price") or min_price

    trial_price = product.get("trial_price_usd")
    if _is_recurring(product) and product.get("trial_enabled") and trial_price and trial_price > 0 and not is_pwyf:
        price = trial_price

    if price is None:
        price = product.get("base_price_usd") or 0

    return float(price)


def to_cents(amount: float) -> int:
    """Minor units, halves rounded up (0.125 -> 13), as the checkout page rounds."""
    return math.floor(amount * 100 + 0.5)


def price_order(
    products: list[dict[str, Any]],
    product_ids: list[str],
    amounts: list[float | None],
    credit_cents: int = 0,
    discount_rate: float = 0.02,
) -> OrderPricing:
    """
    Price a cart.

    Products are priced in `product_ids` order; IDs without a matching
    product are skipped. The card discount is taken from the total, then
    credits (in cents) are subtracted, never going below zero.

    Example:
        price_order([{"id": "p", "base_price_usd": 100}], ["p"], [None])
        # total 100, card_discount 2.0, final_price 98.0, amount_cents 9800

    Raises:
        InvalidRequestError: On negative amounts or credits
    """
    if credit_cents < 0:
        raise InvalidRequestError("Credit amount cannot be negative")

    by_id = {product["id"]: product for product in products}
    priced = []
    total = 0.0

    for index, product_id in enumerate(product_ids):
        product = by_id.get(product_id)
        if product is None:
            continue
        amount = amounts[index] if index < len(amounts) else None
        if amount is not None and amount < 0:
            raise InvalidRequestError(
                "Amounts cannot be negative",
                details={"product_id": product_id, "amount": amount},
            )
        price = price_product(product, amount)
        total += price
        priced.append(PricedProduct(
            id=product_id,
            name=product.get("name"),
            course_id=product.get("course_id"),
            amount=price,
            product_type=product.get("product_type"),
            is_pwyf=bool(product.get("is_pwyf")),
        ))

    card_discount = total * discount_rate
    credit_discount = credit_cents / 100
    final_price = max(0.0, total - card_discount - credit_discount)

    return OrderPricing(
        products=priced,
        total=total,
        original_total=total,
        card_discount=card_discount,
        credit_discount=credit_discount,
        final_price=final_price,
        amount_cents=to_cents(final_price),
    )


# =============================================================================
# Service
# =============================================================================

class PaymentService:
    """Service for coupons and card payments."""

    # -------------------------------------------------------------------------
    # Coupons
    # -------------------------------------------------------------------------

    @staticmethod
    def validate_coupon(code: str, product_ids: list[str] | None = None) -> dict[str, Any]:
        """
        Check whether a coupon can be used for a cart.

        Returns:
            {"success": True, "coupon": {...}} or {"success": False, "error": "..."}
        """
        product_ids = product_ids or []
        code = (code or "").strip()
        if not code:
            return {"success": False, "error": "Missing couponCode"}

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("coupons")
                .select("*")
                .ilike("code", code)
                .eq("is_active", True)
                .maybe_single()
                .execute()
            )
            coupon = response.data if response is not None else None
        except Exception as e:
            logger.error(f"Coupon query error: {e}")
            return {"success": False, "error": "Failed to validate coupon"}

        if not coupon:
            return {"success": False, "error": "Invalid coupon code"}

        now = utc_now()
        valid_from = parse_timestamp(coupon.get("valid_from"))
        valid_until = parse_timestamp(coupon.get("valid_until"))
        if valid_from and valid_from > now:
            return {"success": False, "error": "This coupon is not yet active"}
        if valid_until and valid_until < now:
            return {"success": False, "error": "This coupon has expired"}

        max_redemptions = coupon.get("max_redemptions")
        if max_redemptions and (coupon.get("times_redeemed") or 0) >= max_redemptions:
            return {"success": False, "error": "This coupon has reached its maximum usage"}

        scoped_products = coupon.get("applies_to_products") or []
        if scoped_products and not any(pid in scoped_products for pid in product_ids):
            return {"success": False, "error": "This coupon does not apply to the selected products"}

        if product_ids:
            try:
                products = (
                    client.table("products")
                    .select("id, product_type")
                    .in_("id", product_ids)
                    .execute()
                ).data or []
            except Exception as e:
                logger.error(f"Products query error: {e}")
                return {"success": False, "error": "Failed to validate coupon"}

            has_subscription = any(_is_recurring(p) for p in products)
            has_one_time = any(not _is_recurring(p) for p in products)

            if has_one_time and coupon.get("applies_to_one_time") is False:
                return {"success": False, "error": "This coupon only applies to subscriptions"}
            if has_subscription and coupon.get("applies_to_subscriptions") is False:
                return {"success": False, "error": "This coupon only applies to one-time purchases"}

        return {
            "success": True,
            "coupon": {
                "code": coupon["code"],
                "discount_type": coupon.get("discount_type"),
                "percent_off": coupon.get("percent_off"),
                "amount_off": coupon.get("amount_off"),
                "currency": coupon.get("currency"),
            },
        }

    # -------------------------------------------------------------------------
    # Payment Intents
    # -------------------------------------------------------------------------

    @staticmethod
    def _fetch_products(product_ids: list[str]) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            response = client.table("products").select("*").in_("id", product_ids).execute()
        except Exception as e:
            raise SupabaseClientError(message=f"Failed to fetch products: {e}", code="FETCH_FAILED")
        return response.data or []

    @staticmethod
    def create_payment_intent(request: PaymentIntentRequest) -> dict[str, Any]:
        """
        Price the cart and open a card PaymentIntent.

        Returns one of three shapes:
        - {"free_trial_mode": True, ...} for a single free-trial subscription
        - {"free_checkout": True, ...} when credits cover the whole order
        - {"client_secret", "payment_intent_id", "amount", ...} otherwise

        Raises:
            InvalidRequestError: If the cart is empty or no product exists
            ExternalServiceError: If Stripe rejects a request
        """
        if not request.product_ids:
            raise InvalidRequestError("No products provided")

        products = PaymentService._fetch_products(request.product_ids)
        if not products:
            raise InvalidRequestError("Products not found", details={"product_ids": request.product_ids})

        logger.info(f"Creating payment intent for {len(products)} products ({request.email})")

        if len(request.product_ids) == 1:
            trial = next((p for p in products if has_free_trial(p)), None)
            if trial:
                logger.info(f"Free trial detected for {trial['id']}, skipping payment")
                return {
                    "free_trial_mode": True,
                    "product_id": trial["id"],
                    "product_name": trial.get("name"),
                    "trial_days": trial.get("trial_length_days"),
                    "message": "This product has a free trial - no payment required to start",
                }

        currency = (request.currency or "USD").lower()
        pricing = price_order(
            products,
            request.product_ids,
            request.amounts,
            credit_cents=request.credit_amount_used,
            discount_rate=settings.CARD_PAYMENT_DISCOUNT_RATE,
        )

        product_details = [product.model_dump() for product in pricing.products]

        if pricing.amount_cents == 0:
            logger.info("Amount is 0 after credits - free checkout")
            return {
                "free_checkout": True,
                "credit_amount_used": request.credit_amount_used,
                "product_ids": request.product_ids,
                "product_details": product_details,
                "email": request.email,
                "full_name": request.full_name,
                "message": "Order fully covered by referral credits",
            }

        _configure_stripe()
        try:
            customer_id = PaymentService._find_or_create_customer(request.email, request.full_name)
            intent = stripe.PaymentIntent.create(
                amount=pricing.amount_cents,
                currency=currency,
                customer=customer_id,
                payment_method_types=["card"],
                metadata={
                    "product_ids": json.dumps(request.product_ids),
                    "product_details": json.dumps(product_details),
                    "email": request.email,
                    "full_name": request.full_name or "",
                    "coupon_code": request.coupon_code or "",
                    "coupon_discount": f"{pricing.coupon_discount:.2f}",
                    "stripe_discount": f"{pricing.card_discount:.2f}",
                    "credit_amount_used": str(request.credit_amount_used),
                    "currency": currency.upper(),
                    "original_amount": f"{pricing.original_total:.2f}",
                    "final_amount": f"{pricing.final_price:.2f}",
                    "has_pwyf": str(any(p.is_pwyf for p in pricing.products)).lower(),
                },
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe error creating payment intent: {e}")
            raise ExternalServiceError("Stripe", str(e))

        logger.info(f"Payment intent created: {intent.id}")
        return {
            "client_secret": intent.client_secret,
            "payment_intent_id": intent.id,
            "amount": pricing.final_price,
            "original_amount": pricing.total,
            "discount": pricing.card_discount,
            "credit_amount_used": request.credit_amount_used,
            "currency": currency.upper(),
        }

    @staticmethod
    def _find_or_create_customer(email: str, full_name: str | None) -> str:
        customers = stripe.Customer.list(email=email, limit=1)
        if customers.data:
            logger.info(f"Existing customer found: {customers.data[0].id}")
            return customers.data[0].id
        customer = stripe.Customer.create(email=email, name=full_name)
        logger.info(f"New customer created: {customer.id}")
        return customer.id

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    @staticmethod
    def complete_payment(payment_intent_id: str, password: str | None = None) -> dict[str, Any]:
        """
        Provision access after Stripe reports the payment succeeded.

        Finds the buyer's account by email (or creates one), enrols them in
        purchased courses and marks abandoned carts recovered. Purchase tags
        and sequences are best-effort.

        Raises:
            PaymentNotCompletedError: If the intent hasn't succeeded
        """
        _configure_stripe()
        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id)
        except stripe.StripeError as e:
            raise ExternalServiceError("Stripe", str(e))

        if intent.status != "succeeded":
            raise PaymentNotCompletedError(payment_intent_id, intent.status)

        metadata = dict(intent.metadata or {})
        email = normalize_email(metadata.get("email"))
        products = PaymentService._products_from_metadata(metadata)
        logger.info(f"Payment {payment_intent_id} verified for {email}, {len(products)} products")

        user_id = PaymentService._find_or_create_buyer(email, metadata.get("full_name"), password)
        client = SupabaseClient.get_client()

        course_ids = []
        for product in products:
            course_id = product.get("course_id")
            if product.get("product_type") != ProductType.COURSE.value or not course_id:
                continue
            try:
                (
                    client.table("course_enrollments")
                    .upsert(
                        {
                            "user_id": user_id,
                            "course_id": course_id,
                            "enrollment_type": "purchase",
                            "is_active": True,
                        },
                        on_conflict="user_id,course_id",
                    )
                    .execute()
                )
                course_ids.append(course_id)
            except Exception as e:
                logger.error(f"Enrollment error for course {course_id}: {e}")

        try:
            (
                client.table("cart_abandonment")
                .update({"recovered_at": utc_now_iso()})
                .or_(f"user_id.eq.{user_id},email.eq.{email}")
                .is_("recovered_at", "null")
                .execute()
            )
        except Exception as e:
            logger.warning(f"Could not mark cart recovered for {email}: {e}")

        for product in products:
            try:
                PaymentService._tag_purchase(user_id, email, product)
            except Exception as e:
                logger.error(f"Tag/sequence error (non-fatal) for {product.get('id')}: {e}")

        return {"success": True, "user_id": user_id, "course_ids": course_ids}

    @staticmethod
    def _products_from_metadata(metadata: dict[str, Any]) -> list[dict[str, Any]]:
        """Read purchased products from intent metadata (multi- or single-product form)."""
        details = metadata.get("product_details")
        if details:
            try:
                return json.loads(details)
            except ValueError:
                logger.warning("Unreadable product_details in payment metadata")
        if metadata.get("product_id"):
            return [{
                "id": metadata["product_id"],
                "product_type": metadata.get("product_type"),
                "course_id": metadata.get("course_id"),
            }]
        return []

    @staticmethod
    def _find_or_create_buyer(email: str, full_name: str | None, password: str | None) -> str:
        profile = SupabaseClient.fetch_one("profiles", "email", email, columns="id")
        if profile:
            logger.info(f"Existing user found: {profile['id']}")
            return profile["id"]

        client = SupabaseClient.get_client()
        try:
            response = client.auth.admin.create_user({
                "email": email,
                "password": password or secrets.token_urlsafe(16),
                "email_confirm": True,
                "user_metadata": {"full_name": full_name or ""},
            })
        except Exception as e:
            if is_duplicate_error(e):
                raise InvalidRequestError(
                    "An account already exists for this email but has no profile",
                    suggestion="Contact support to link the purchase",
                    details={"email": email},
                )
            raise SupabaseClientError(
                message=f"Failed to create user: {e}",
                code="CREATE_USER_FAILED",
                details={"email": email},
            )

        user_id = str(response.user.id)
        logger.info(f"New user created: {user_id}")
        return user_id

    @staticmethod
    def _tag_purchase(user_id: str, email: str, product: dict[str, Any]) -> None:
        name = product.get("name")
        if not name:
            product_row = SupabaseClient.fetch_one("products", "id", product["id"], columns="name")
            name = product_row.get("name") if product_row else None
        if not name:
            return

        tag_id = TagService.find_or_create_tag(
            f"Purchased: {name}",
            description=f"Auto-created for {name} purchases",
            color=PURCHASE_TAG_COLOR,
        )
        client = SupabaseClient.get_client()
        (
            client.table("user_tags")
            .upsert(
                {
                    "user_id": user_id,
                    "email": email,
                    "tag_id": tag_id,
                    "source": "purchase",
                    "source_id": product["id"],
                },
                on_conflict="user_id,tag_id",
                ignore_duplicates=True,
            )
            .execute()
        )
        logger.info(f"Purchase tag {tag_id} assigned to {user_id}")

        TagService.enroll_for_purchase(
            user_id,
            email,
            {"product_id": product["id"], "course_id": product.get("course_id"), "product_name": name},
        )
