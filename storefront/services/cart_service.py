"""
Cart line merging shared by the cart and wishlist routes
"""
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.models.cart import CartItem
from storefront.models.product import Product
from storefront.utils.errors import BadRequestError
from storefront.utils.money import quantize


def merge_into_cart(db: Session, user_id: int, product: Product, quantity: int) -> CartItem:
    """
    Add ``quantity`` of ``product`` to the user's cart, merging with an
    existing line. The merged quantity must be covered by stock. Nothing is
    committed here.
    """
    if product.stock_quantity < quantity:
        raise BadRequestError(f"Only {product.stock_quantity} units available in stock")

    line = db.query(CartItem).filter(CartItem.user_id == user_id, CartItem.product_id == product.id).first()
    if line:
        new_quantity = line.quantity + quantity
        if product.stock_quantity < new_quantity:
            raise BadRequestError(f"Cannot add more. Only {product.stock_quantity} units available")
        line.quantity = new_quantity
    else:
        line = CartItem(user_id=user_id, product_id=product.id, quantity=quantity)
        db.add(line)
    return line


def cart_summary(lines) -> dict:
    total_items = sum(line.quantity for line in lines)
    subtotal = sum((line.product.price * line.quantity for line in lines), Decimal("0"))
    subtotal = float(quantize(subtotal))
    return {"total_items": total_items, "subtotal": subtotal, "estimated_total": subtotal}
