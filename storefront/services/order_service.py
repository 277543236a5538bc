"""
Checkout and order cancellation.

Both run as a single unit of work on the caller's session: either every
row change is committed or the session is rolled back.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from loguru import logger
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.models.cart import CartItem
from storefront.models.discount import Discount
from storefront.models.order import (
    ORDER_CANCELLED,
    ORDER_PENDING,
    ORDER_STATUSES,
    PAYMENT_COD,
    PAYMENT_METHODS,
    PAYMENT_PENDING,
    Order,
    OrderItem,
    requires_transaction_number,
)
from storefront.models.product import Product
from storefront.schemas.order import CheckoutRequest
from storefront.services.pricing import calculate_shipping_cost, evaluate_discount, generate_order_number
from storefront.utils.dates import utcnow
from storefront.utils.errors import BadRequestError, ConflictError
from storefront.utils.money import quantize

DEFAULT_COUNTRY = "Nepal"


def _validate_checkout(request: CheckoutRequest) -> None:
    info = request.shipping_info
    required = [info.full_name, info.phone, info.address_line1, info.city, info.postal_code] if info else []
    if not required or not all(value and value.strip() for value in required):
        raise BadRequestError("Full name, phone, address, city, and postal code are required")

    if not request.payment_method:
        raise BadRequestError("Payment method is required")
    if request.payment_method not in PAYMENT_METHODS:
        raise BadRequestError(f"Invalid payment method. Must be one of: {', '.join(PAYMENT_METHODS)}")

    if requires_transaction_number(request.payment_method):
        if not request.transaction_number or not request.transaction_number.strip():
            raise BadRequestError(
                "Transaction number is required for online payments (eSewa, Khalti, Bank Transfer)"
            )


def _decrement_stock(db: Session, product: Product, quantity: int) -> None:
    updated = (
        db.query(Product)
        .filter(Product.id == product.id, Product.stock_quantity >= quantity)
        .update({Product.stock_quantity: Product.stock_quantity - quantity}, synchronize_session=False)
    )
    if updated == 0:
        raise ConflictError(f'Insufficient stock for "{product.name}". Please review your cart.')


def _claim_discount_use(db: Session, discount_id: int) -> None:
    updated = (
        db.query(Discount)
        .filter(
            Discount.id == discount_id,
            or_(Discount.usage_limit.is_(None), Discount.used_count < Discount.usage_limit),
        )
        .update({Discount.used_count: Discount.used_count + 1}, synchronize_session=False)
    )
    if updated == 0:
        raise ConflictError("This discount code has reached its usage limit")


def place_order(db: Session, user_id: int, request: CheckoutRequest, now: Optional[datetime] = None) -> Order:
    """Turn the user's cart into a pending order"""
    _validate_checkout(request)
    now = now or utcnow()

    lines = db.query(CartItem).filter(CartItem.user_id == user_id).order_by(CartItem.id.asc()).all()
    if not lines:
        raise BadRequestError("Cart is empty. Add items before checkout.")

    for line in lines:
        if not line.product.is_active:
            raise BadRequestError(f'Product "{line.product.name}" is no longer available')
        if line.product.stock_quantity < line.quantity:
            raise BadRequestError(
                f'Insufficient stock for "{line.product.name}". Only {line.product.stock_quantity} available.'
            )

    subtotal = quantize(sum((line.product.price * line.quantity for line in lines), Decimal("0")))
    info = request.shipping_info
    shipping_cost = calculate_shipping_cost(info.city, subtotal)

    discount_amount = Decimal("0")
    applied: Optional[Discount] = None
    if request.discount_code:
        candidate = db.query(Discount).filter(Discount.code == request.discount_code.strip().upper()).first()
        amount, reason = evaluate_discount(candidate, subtotal, now)
        if amount is not None:
            discount_amount, applied = amount, candidate
        else:
            logger.info(f"Discount code {request.discount_code!r} ignored at checkout: {reason}")

    tax = Decimal("0")
    total = quantize(subtotal + shipping_cost + tax - discount_amount)

    try:
        order = Order(
            order_number=generate_order_number(db, now),
            user_id=user_id,
            status=ORDER_PENDING,
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            tax=tax,
            discount=discount_amount,
            total=total,
            shipping_full_name=info.full_name,
            shipping_phone=info.phone,
            shipping_address_line1=info.address_line1,
            shipping_address_line2=info.address_line2,
            shipping_landmark=info.landmark,
            shipping_city=info.city,
            shipping_province=info.province,
            shipping_postal_code=info.postal_code,
            shipping_country=info.country or DEFAULT_COUNTRY,
            payment_method=request.payment_method,
            payment_status=PAYMENT_PENDING,
            transaction_number=None if request.payment_method == PAYMENT_COD else request.transaction_number.strip(),
            discount_id=applied.id if applied else None,
            discount_code=applied.code if applied else None,
            customer_note=request.customer_note,
        )
        db.add(order)

        for line in lines:
            product = line.product
            primary = product.primary_image
            order.items.append(
                OrderItem(
                    product_id=product.id,
                    product_name=product.name,
                    product_sku=product.sku,
                    product_image=primary.image_url if primary else None,
                    price=product.price,
                    quantity=line.quantity,
                    subtotal=quantize(product.price * line.quantity),
                )
            )
            _decrement_stock(db, product, line.quantity)

        db.query(CartItem).filter(CartItem.user_id == user_id).delete(synchronize_session="fetch")

        if applied:
            _claim_discount_use(db, applied.id)

        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Order number collision during checkout")
        raise ConflictError("Could not place the order right now. Please try again.")
    except Exception:
        db.rollback()
        raise

    db.refresh(order)
    logger.info(f"Order {order.order_number} placed by user {user_id} (total {order.total})")
    return order


def change_status(db: Session, order: Order, status: Optional[str], admin_note: Optional[str] = None) -> Order:
    """
    Move an order to ``status``. Cancelling puts the stock back and
    releases the discount use. Cancelled orders stay cancelled.
    """
    if not status:
        raise BadRequestError("Status is required")
    if status not in ORDER_STATUSES:
        raise BadRequestError(f"Invalid status. Must be one of: {', '.join(ORDER_STATUSES)}")

    if order.status == ORDER_CANCELLED:
        if status == ORDER_CANCELLED:
            raise BadRequestError("Order is already cancelled")
        raise BadRequestError("Cancelled orders cannot change status")

    try:
        if status == ORDER_CANCELLED:
            for item in order.items:
                if item.product_id is None:
                    continue
                db.query(Product).filter(Product.id == item.product_id).update(
                    {Product.stock_quantity: Product.stock_quantity + item.quantity}, synchronize_session=False
                )
            if order.discount_id:
                db.query(Discount).filter(Discount.id == order.discount_id, Discount.used_count > 0).update(
                    {Discount.used_count: Discount.used_count - 1}, synchronize_session=False
                )

        order.status = status
        order.admin_note = admin_note or order.admin_note
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(order)
    logger.info(f"Order {order.order_number} moved to {status}")
    return order
