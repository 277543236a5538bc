from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from loguru import logger

from storefront.models.discount import DISCOUNT_FIXED, DISCOUNT_PERCENTAGE, Discount
from storefront.services.pricing import (
    calculate_shipping_cost,
    evaluate_discount,
    format_order_number,
    generate_order_number,
    is_inside_valley,
    parse_order_sequence,
)
from storefront.utils.money import quantize
from storefront.utils.slug import generate_slug, is_valid_slug, make_unique_slug
from storefront.utils.tokens import parse_duration

NOW = datetime(2026, 5, 1, 12, 0, 0)


def _discount(**fields) -> Discount:
    values = dict(
        code="TEST",
        type=DISCOUNT_PERCENTAGE,
        value=Decimal("10"),
        min_purchase_amount=None,
        max_discount_amount=None,
        start_date=NOW - timedelta(days=1),
        end_date=NOW + timedelta(days=1),
        is_active=True,
        usage_limit=None,
        used_count=0,
    )
    values.update(fields)
    return Discount(**values)


@pytest.mark.parametrize(
    "city, inside",
    [
        ("Kathmandu", True),
        ("  LALITPUR ", True),
        ("Bhaktapur Municipality", True),
        ("thimi", True),
        ("Pokhara", False),
        ("", True),
    ],
)
def test_is_inside_valley(city, inside):
    assert is_inside_valley(city) is inside


def test_shipping_cost_by_zone_and_threshold():
    assert calculate_shipping_cost("Kathmandu", Decimal("1999.99")) == Decimal("100")
    assert calculate_shipping_cost("Pokhara", Decimal("500")) == Decimal("200")
    assert calculate_shipping_cost("Pokhara", Decimal("2000")) == Decimal("0")
    assert calculate_shipping_cost("Kathmandu", 2500) == Decimal("0")
    assert calculate_shipping_cost("   ", Decimal("500")) == Decimal("100")


def test_percentage_discount():
    amount, reason = evaluate_discount(_discount(value=Decimal("15")), Decimal("1234.50"), NOW)
    assert reason is None
    assert amount == Decimal("185.18")


def test_percentage_discount_capped_by_max():
    amount, _ = evaluate_discount(_discount(max_discount_amount=Decimal("50")), Decimal("1000"), NOW)
    assert amount == Decimal("50.00")


def test_fixed_discount_never_exceeds_subtotal():
    amount, _ = evaluate_discount(_discount(type=DISCOUNT_FIXED, value=Decimal("500")), Decimal("320"), NOW)
    assert amount == Decimal("320.00")


@pytest.mark.parametrize(
    "fields, reason",
    [
        ({"is_active": False}, "This discount code is no longer active"),
        ({"start_date": NOW + timedelta(hours=1)}, "This discount code has expired"),
        ({"end_date": NOW - timedelta(seconds=1)}, "This discount code has expired"),
        ({"usage_limit": 3, "used_count": 3}, "This discount code has reached its usage limit"),
        ({"min_purchase_amount": Decimal("1500")}, "Minimum purchase amount of Rs 1500.00 required"),
    ],
)
def test_discount_rejections(fields, reason):
    assert evaluate_discount(_discount(**fields), Decimal("1000"), NOW) == (None, reason)


def test_unknown_discount():
    assert evaluate_discount(None, Decimal("1000"), NOW) == (None, "Invalid discount code")


def test_discount_window_is_inclusive():
    discount = _discount(start_date=NOW, end_date=NOW)
    amount, _ = evaluate_discount(discount, Decimal("100"), NOW)
    assert amount == Decimal("10.00")


def test_order_number_format():
    assert format_order_number(2026, 1) == "ORD-2026-001"
    assert format_order_number(2026, 42) == "ORD-2026-042"
    assert format_order_number(2026, 1234) == "ORD-2026-1234"
    assert parse_order_sequence("ORD-2026-015") == 15
    assert parse_order_sequence("garbage") == 0


def test_generate_order_number_continues_the_year(db, customer):
    from storefront.models.order import Order

    assert generate_order_number(db, NOW) == "ORD-2026-001"

    for number in ("ORD-2026-001", "ORD-2026-009", "ORD-2025-120"):
        db.add(
            Order(
                order_number=number,
                user_id=customer.id,
                subtotal=0,
                total=0,
                shipping_full_name="A",
                shipping_phone="1",
                shipping_address_line1="B",
                shipping_city="C",
                shipping_postal_code="D",
                payment_method="cod",
            )
        )
    db.commit()

    assert generate_order_number(db, NOW) == "ORD-2026-010"
    assert generate_order_number(db, datetime(2027, 1, 1)) == "ORD-2027-001"


def test_quantize_rounds_half_up():
    assert quantize("2.345") == Decimal("2.35")
    assert quantize(None) == Decimal("0.00")


def test_slugs():
    assert generate_slug("  Men's Multivitamin -- 60 Tabs ") == "mens-multivitamin-60-tabs"
    assert is_valid_slug("vitamin-c")
    assert not is_valid_slug("Vitamin C")
    assert not is_valid_slug("-leading")
    assert make_unique_slug("whey", {"whey", "whey-1"}) == "whey-2"


def test_parse_duration():
    assert parse_duration("7d") == timedelta(days=7)
    assert parse_duration("30m") == timedelta(minutes=30)
    assert parse_duration("24h") == timedelta(hours=24)
    assert parse_duration("2w") == timedelta(weeks=2)


def test_parse_duration_fallback_is_logged():
    messages = []
    sink_id = logger.add(messages.append, level="WARNING", format="{message}")
    try:
        assert parse_duration("7 days") == timedelta(hours=1)
        assert parse_duration("soon") == timedelta(hours=1)
    finally:
        logger.remove(sink_id)
    assert len(messages) == 2
    assert "7 days" in messages[0]
