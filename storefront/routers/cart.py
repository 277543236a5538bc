"""
Shopping cart routes (current user only)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.dependencies import get_current_payload
from storefront.models.cart import CartItem
from storefront.models.product import Product
from storefront.schemas.shopping import CartAdd, CartUpdate
from storefront.services.auth_service import TokenPayload
from storefront.services.cart_service import cart_summary, merge_into_cart
from storefront.utils import responses
from storefront.utils.database import get_db
from storefront.utils.errors import BadRequestError, NotFoundError

router = APIRouter(prefix="/cart", tags=["cart"])


def _own_line_or_404(db: Session, line_id: int, user_id: int) -> CartItem:
    line = db.query(CartItem).filter(CartItem.id == line_id).first()
    if not line or line.user_id != user_id:
        raise NotFoundError("Cart item not found")
    return line


@router.post("")
def add_to_cart(body: CartAdd, db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    if not body.product_id:
        raise BadRequestError("Product ID is required")
    if body.quantity < 1:
        raise BadRequestError("Quantity must be at least 1")

    product = db.query(Product).filter(Product.id == body.product_id).first()
    if not product or not product.is_active:
        raise NotFoundError("Product not found or unavailable")

    line = merge_into_cart(db, payload.user_id, product, body.quantity)
    db.commit()
    db.refresh(line)
    return responses.success(line.to_dict(), "Item added to cart successfully", 201)


@router.get("")
def get_cart(db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    lines = (
        db.query(CartItem)
        .filter(CartItem.user_id == payload.user_id)
        .order_by(CartItem.created_at.desc(), CartItem.id.desc())
        .all()
    )
    return responses.success(
        {"items": [line.to_dict() for line in lines], "summary": cart_summary(lines)},
        "Cart retrieved successfully",
    )


@router.put("/{line_id}")
def update_cart_item(
    line_id: int,
    body: CartUpdate,
    db: Session = Depends(get_db),
    payload: TokenPayload = Depends(get_current_payload),
):
    if body.quantity is None or body.quantity < 1:
        raise BadRequestError("Valid quantity is required")

    line = _own_line_or_404(db, line_id, payload.user_id)
    if line.product.stock_quantity < body.quantity:
        raise BadRequestError(f"Only {line.product.stock_quantity} units available in stock")

    line.quantity = body.quantity
    db.commit()
    db.refresh(line)
    return responses.success(line.to_dict(), "Cart item updated successfully")


@router.delete("/{line_id}")
def remove_cart_item(line_id: int, db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    line = _own_line_or_404(db, line_id, payload.user_id)
    db.delete(line)
    db.commit()
    return responses.success(None, "Item removed from cart")


@router.delete("")
def clear_cart(db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    db.query(CartItem).filter(CartItem.user_id == payload.user_id).delete(synchronize_session=False)
    db.commit()
    return responses.success(None, "Cart cleared successfully")
