"""Money helpers: Decimal conversion and rounding to cents"""
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(value) -> Decimal:
    """Round to whole cents"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def as_float(value):
    """Numeric column -> JSON number (None stays None)"""
    if value is None:
        return None
    return float(value)
