"""
Payment processing routes.
"""

import uuid
from typing import Annotated

import structlog
from fastapi import APIRouter, Header

from toggle_demo.core.features import (
    FeatureToggles,
    FlagEvaluation,
    FlagProject,
    amount_range,
    build_targeting_context,
)
from toggle_demo.core.features.targeting import (
    AMOUNT_RANGE,
    COUNTRY,
    CURRENCY,
    PAYMENT_PROVIDER,
)
from toggle_demo.schemas.common import ResponseMetadata
from toggle_demo.schemas.payment import (
    PaymentFeatures,
    PaymentMethod,
    PaymentRequest,
    PaymentResponse,
    PaymentStatus,
)
from toggle_demo.utils.context import get_correlation_id
from toggle_demo.utils.timezone import to_iso8601, utc_now

router = APIRouter()
logger = structlog.get_logger()


# ============================================================
# PAYMENT RULES
# ============================================================

def available_payment_methods(
    country: str | None,
    express_checkout_enabled: bool,
    recurring_payments_enabled: bool,
    is_recurring: bool,
) -> list[str]:
    """Payment methods offered for the country and flag combination."""
    methods = ["credit_card", "debit_card"]

    if country == "BR":
        methods += ["pix", "boleto"]
    if country == "US":
        methods += ["paypal", "apple_pay", "google_pay"]

    if express_checkout_enabled:
        methods.append("one_click_payment")
    if recurring_payments_enabled and is_recurring:
        methods.append("subscription_payment")

    return methods


def select_processor(
    country: str | None,
    payment_provider: str | None,
    express_checkout_enabled: bool,
    fraud_detection_level: str,
) -> str:
    """First matching rule wins."""
    if country == "BR" and payment_provider == "stripe":
        return "stripe_brazil"
    if country == "US" and express_checkout_enabled:
        return "stripe_express"
    if fraud_detection_level == "high":
        return "secure_processor"
    return "default_processor"


def simulate_payment(amount: float, fraud_detection_level: str) -> PaymentStatus:
    """Simulated outcome; stricter fraud levels hold payments for review."""
    if fraud_detection_level == "high":
        return PaymentStatus.PENDING if amount > 1000 else PaymentStatus.COMPLETED
    if fraud_detection_level == "strict":
        return PaymentStatus.PENDING
    return PaymentStatus.COMPLETED


# ============================================================
# ENDPOINTS
# ============================================================

@router.post("/process", response_model=PaymentResponse)
async def process_payment(
    request: PaymentRequest,
    toggles: FeatureToggles,
    user_id: Annotated[str | None, Header(alias="X-User-ID")] = None,
    country: Annotated[str | None, Header(alias="X-User-Country")] = None,
    payment_provider: Annotated[str | None, Header(alias="X-Payment-Provider")] = None,
) -> PaymentResponse:
    """
    Process a payment with feature flags.

    Flags evaluated against the payment project:
    - express_checkout_enabled
    - recurring_payments_enabled
    - fraud_detection_level (defaults to "standard")
    """
    correlation_id = get_correlation_id() or "unknown"
    timestamp = to_iso8601(utc_now())

    logger.info(
        "Processing payment",
        amount=request.amount,
        currency=request.currency,
        country=country,
    )

    context = build_targeting_context(
        identifier=user_id,
        attributes={
            COUNTRY: country,
            PAYMENT_PROVIDER: payment_provider,
            AMOUNT_RANGE: amount_range(request.amount),
            CURRENCY: request.currency,
        },
    )

    evaluations: list[FlagEvaluation] = []

    def flag(key: str, default: bool | str) -> bool | str:
        evaluation = toggles.evaluate(FlagProject.PAYMENT, key, default, context)
        evaluations.append(evaluation)
        return evaluation.value

    express_checkout_enabled = flag("express_checkout_enabled", False)
    recurring_payments_enabled = flag("recurring_payments_enabled", False)
    fraud_detection_level = flag("fraud_detection_level", "standard")

    processor = select_processor(
        country, payment_provider, express_checkout_enabled, fraud_detection_level
    )
    transaction_id = str(uuid.uuid4())
    payment_status = simulate_payment(request.amount, fraud_detection_level)

    response = PaymentResponse(
        transaction_id=transaction_id,
        amount=request.amount,
        currency=request.currency,
        method=PaymentMethod(
            type=request.payment_method,
            processor=processor,
            last4_digits=request.card_number[-4:] if request.card_number else None,
        ),
        status=payment_status,
        features=PaymentFeatures(
            express_checkout_enabled=express_checkout_enabled,
            recurring_payments_enabled=recurring_payments_enabled,
            fraud_detection_level=fraud_detection_level,
            payment_methods_available=available_payment_methods(
                country,
                express_checkout_enabled,
                recurring_payments_enabled,
                request.is_recurring,
            ),
        ),
        metadata=ResponseMetadata.build(correlation_id, timestamp, evaluations),
    )

    logger.info(
        "Payment processed",
        transaction_id=transaction_id,
        status=payment_status.value,
        processor=processor,
        fraud_level=fraud_detection_level,
        express_checkout=express_checkout_enabled,
    )

    return response
