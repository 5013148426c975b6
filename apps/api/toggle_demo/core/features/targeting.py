"""
Targeting context construction.

Turns request headers/body values into the attribute bag flag providers
target on.

Usage:
    context = build_targeting_context(
        identifier=user_id,
        attributes={"country": country, "subscription": subscription},
    )
"""

from decimal import Decimal
from typing import Any, Mapping

from .interfaces import TargetingContext

# Attribute keys used by targeting rules in both projects
COUNTRY = "country"
SUBSCRIPTION = "subscription"
AMOUNT_RANGE = "amount_range"
CURRENCY = "currency"
PAYMENT_PROVIDER = "payment_provider"


def _coerce(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    text = str(value).strip()
    return text or None


def build_targeting_context(
    identifier: str | None = None,
    email: str | None = None,
    attributes: Mapping[str, Any] | None = None,
) -> TargetingContext:
    """
    Build an immutable targeting context.

    Missing or blank values are dropped and the rest coerced to strings.
    With nothing left the anonymous context is returned, which leaves
    the provider on its unconditioned defaults.
    """
    identifier = _coerce(identifier)
    email = _coerce(email)

    coerced: dict[str, str] = {}
    for key, value in (attributes or {}).items():
        text = _coerce(value)
        if text is not None:
            coerced[key] = text

    if identifier is None and email is None and not coerced:
        return TargetingContext.anonymous()

    return TargetingContext(identifier=identifier, email=email, attributes=coerced)


def amount_range(amount: float | Decimal) -> str:
    """Bucket a payment amount for targeting rules."""
    if amount < 50:
        return "low"
    if amount < 500:
        return "medium"
    if amount < 5000:
        return "high"
    return "very_high"
