"""
Checkout arithmetic: shipping fees, discount evaluation and order numbering
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.models.discount import DISCOUNT_PERCENTAGE, Discount
from storefront.models.order import Order
from storefront.utils.money import quantize, to_decimal

VALLEY_CITIES = ["kathmandu", "lalitpur", "bhaktapur", "kirtipur", "madhyapur thimi", "thimi"]

ORDER_NUMBER_PREFIX = "ORD"


def is_inside_valley(city: str) -> bool:
    normalized = (city or "").strip().lower()
    return any(valley in normalized or normalized in valley for valley in VALLEY_CITIES)


def calculate_shipping_cost(city: str, subtotal) -> Decimal:
    """Free above the threshold, otherwise a flat fee by delivery zone"""
    if to_decimal(subtotal) >= settings.free_shipping_threshold:
        return Decimal("0")
    if is_inside_valley(city):
        return Decimal(settings.shipping_inside_valley)
    return Decimal(settings.shipping_outside_valley)


def evaluate_discount(discount: Optional[Discount], subtotal, now: datetime) -> Tuple[Optional[Decimal], Optional[str]]:
    """
    Check a discount against a cart subtotal.

    Returns (amount, None) when the discount applies, or (None, reason)
    with a customer-facing reason when it does not. The amount is capped
    by max_discount_amount and by the subtotal, then rounded to cents.
    """
    if discount is None:
        return None, "Invalid discount code"

    if not discount.is_active:
        return None, "This discount code is no longer active"

    if now < discount.start_date or now > discount.end_date:
        return None, "This discount code has expired"

    if discount.usage_limit is not None and discount.used_count >= discount.usage_limit:
        return None, "This discount code has reached its usage limit"

    subtotal = to_decimal(subtotal)
    if discount.min_purchase_amount is not None and subtotal < discount.min_purchase_amount:
        return None, f"Minimum purchase amount of Rs {quantize(discount.min_purchase_amount)} required"

    if discount.type == DISCOUNT_PERCENTAGE:
        amount = subtotal * to_decimal(discount.value) / 100
    else:
        amount = to_decimal(discount.value)

    if discount.max_discount_amount is not None and amount > discount.max_discount_amount:
        amount = to_decimal(discount.max_discount_amount)

    if amount > subtotal:
        amount = subtotal

    return quantize(amount), None


def format_order_number(year: int, sequence: int) -> str:
    return f"{ORDER_NUMBER_PREFIX}-{year}-{sequence:03d}"


def parse_order_sequence(order_number: str) -> int:
    try:
        return int(order_number.rsplit("-", 1)[1])
    except (IndexError, ValueError):
        return 0


def generate_order_number(db: Session, now: datetime) -> str:
    """Next ORD-<year>-<NNN> for the year of ``now``"""
    prefix = f"{ORDER_NUMBER_PREFIX}-{now.year}-"
    numbers = db.query(Order.order_number).filter(Order.order_number.like(f"{prefix}%")).all()
    highest = max((parse_order_sequence(number) for (number,) in numbers), default=0)
    return format_order_number(now.year, highest + 1)
