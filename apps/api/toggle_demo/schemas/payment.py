"""
Payment schemas.
"""

from enum import Enum

from pydantic import Field, field_validator

from toggle_demo.schemas.common import CamelModel, ResponseMetadata


class PaymentStatus(str, Enum):
    """Payment processing status."""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class PaymentRequest(CamelModel):
    """Payment request details."""
    amount: float = Field(..., gt=0, examples=[99.99])
    currency: str = Field(..., min_length=3, max_length=3, examples=["USD"])
    payment_method: str = Field(..., min_length=1, max_length=50, examples=["credit_card"])
    card_number: str | None = Field(None, examples=["4242424242424242"])
    is_recurring: bool = False

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        if not v.isalpha():
            raise ValueError("currency must be an ISO 4217 code")
        return v.upper()


class PaymentMethod(CamelModel):
    """Payment method information."""
    type: str
    processor: str
    last4_digits: str | None = Field(None, alias="last4Digits")


class PaymentFeatures(CamelModel):
    """Feature flags evaluated from the payment project."""
    express_checkout_enabled: bool
    recurring_payments_enabled: bool
    fraud_detection_level: str = Field(..., examples=["high"])
    payment_methods_available: list[str]


class PaymentResponse(CamelModel):
    """Payment processing response with evaluated feature flags."""
    transaction_id: str
    amount: float
    currency: str
    method: PaymentMethod
    status: PaymentStatus
    features: PaymentFeatures
    metadata: ResponseMetadata
