# =============================================================================
# app/routers/payments.py - Checkout Endpoints
# =============================================================================
# Public: checkout happens before the buyer has an account. Stripe's
# PaymentIntent status is the proof of payment, not anything the client
# sends.
# =============================================================================

import logging

from fastapi import APIRouter

from core.models.payments import (
    CouponValidation,
    CouponValidationRequest,
    PaymentCompletion,
    PaymentCompletionResult,
    PaymentIntentRequest,
)
from core.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter()
coupons_router = APIRouter()


@router.post("/intent")
async def create_payment_intent(request: PaymentIntentRequest):
    """
    Price the cart and open a Stripe PaymentIntent.

    The response is one of:
    - `free_trial_mode`: a single free-trial subscription, no payment
    - `free_checkout`: referral credits cover the order
    - `client_secret` + `payment_intent_id`: confirm the card client-side
    """
    return PaymentService.create_payment_intent(request)


@router.post("/complete", response_model=PaymentCompletionResult, response_model_by_alias=True)
async def complete_payment(request: PaymentCompletion):
    """
    Grant access once the PaymentIntent has succeeded.

    Returns 400 if Stripe doesn't report the payment as succeeded.
    """
    result = PaymentService.complete_payment(request.payment_intent_id, password=request.password)
    return PaymentCompletionResult(**result)


@coupons_router.post("/validate", response_model=CouponValidation, response_model_exclude_none=True)
async def validate_coupon(request: CouponValidationRequest):
    """Invalid coupons are a normal answer (`success: false`), not an error."""
    return PaymentService.validate_coupon(request.coupon_code, request.product_ids)
