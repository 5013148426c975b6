"""
Tests for targeting context construction.
"""

from decimal import Decimal

import pytest

from toggle_demo.core.features import TargetingContext, amount_range, build_targeting_context


def test_all_absent_yields_anonymous_context():
    """No identifier, email or attributes -> anonymous context."""
    context = build_targeting_context(attributes={"country": None, "subscription": None})

    assert context.is_anonymous
    assert context.identifier is None
    assert context.email is None
    assert len(context.attributes) == 0
    assert TargetingContext.anonymous().is_anonymous


def test_blank_values_are_dropped():
    context = build_targeting_context(
        identifier="  ",
        attributes={"country": "", "subscription": "   ", "currency": "BRL"},
    )

    assert context.identifier is None
    assert dict(context.attributes) == {"currency": "BRL"}
    assert not context.is_anonymous


def test_values_coerced_to_strings():
    context = build_targeting_context(
        identifier="user123",
        email="user123@example.com",
        attributes={
            "recurring": True,
            "attempts": 3,
            "amount": Decimal("99.99"),
            "country": " BR ",
        },
    )

    assert context.identifier == "user123"
    assert context.email == "user123@example.com"
    assert dict(context.attributes) == {
        "recurring": "true",
        "attempts": "3",
        "amount": "99.99",
        "country": "BR",
    }


def test_context_is_immutable():
    context = build_targeting_context(identifier="user123", attributes={"country": "US"})

    with pytest.raises(TypeError):
        context.attributes["country"] = "BR"  # type: ignore[index]

    with pytest.raises(AttributeError):
        context.identifier = "someone-else"  # type: ignore[misc]


def test_source_mapping_changes_do_not_leak_into_context():
    attributes = {"country": "US"}
    context = build_targeting_context(identifier="user123", attributes=attributes)

    attributes["country"] = "BR"

    assert context.attributes["country"] == "US"


@pytest.mark.parametrize(
    "amount,expected",
    [
        (0.01, "low"),
        (49.99, "low"),
        (50, "medium"),
        (499.99, "medium"),
        (500, "high"),
        (4999.99, "high"),
        (5000, "very_high"),
        (Decimal("12000.00"), "very_high"),
    ],
)
def test_amount_range_buckets(amount, expected):
    assert amount_range(amount) == expected
