"""
Wishlist routes (current user only)
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.dependencies import get_current_payload
from storefront.models.cart import WishlistItem
from storefront.models.product import Product
from storefront.schemas.shopping import MoveToCart, WishlistAdd
from storefront.services.auth_service import TokenPayload
from storefront.services.cart_service import merge_into_cart
from storefront.utils import responses
from storefront.utils.database import get_db
from storefront.utils.errors import BadRequestError, NotFoundError

router = APIRouter(prefix="/wishlist", tags=["wishlist"])


def _own_entry_or_404(db: Session, entry_id: int, user_id: int) -> WishlistItem:
    entry = db.query(WishlistItem).filter(WishlistItem.id == entry_id).first()
    if not entry or entry.user_id != user_id:
        raise NotFoundError("Wishlist item not found")
    return entry


@router.post("")
def add_to_wishlist(
    body: WishlistAdd,
    db: Session = Depends(get_db),
    payload: TokenPayload = Depends(get_current_payload),
):
    if not body.product_id:
        raise BadRequestError("Product ID is required")

    product = db.query(Product).filter(Product.id == body.product_id).first()
    if not product or not product.is_active:
        raise NotFoundError("Product not found or unavailable")

    exists = (
        db.query(WishlistItem)
        .filter(WishlistItem.user_id == payload.user_id, WishlistItem.product_id == product.id)
        .first()
    )
    if exists:
        raise BadRequestError("Product already in wishlist")

    entry = WishlistItem(user_id=payload.user_id, product_id=product.id)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return responses.success(entry.to_dict(), "Item added to wishlist", 201)


@router.get("")
def get_wishlist(db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    entries = (
        db.query(WishlistItem)
        .filter(WishlistItem.user_id == payload.user_id)
        .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
        .all()
    )
    return responses.success([entry.to_dict() for entry in entries], "Wishlist retrieved successfully")


@router.delete("/{entry_id}")
def remove_from_wishlist(
    entry_id: int,
    db: Session = Depends(get_db),
    payload: TokenPayload = Depends(get_current_payload),
):
    entry = _own_entry_or_404(db, entry_id, payload.user_id)
    db.delete(entry)
    db.commit()
    return responses.success(None, "Item removed from wishlist")


@router.delete("")
def clear_wishlist(db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    db.query(WishlistItem).filter(WishlistItem.user_id == payload.user_id).delete(synchronize_session=False)
    db.commit()
    return responses.success(None, "Wishlist cleared successfully")


@router.post("/{entry_id}/move-to-cart")
def move_to_cart(
    entry_id: int,
    body: Optional[MoveToCart] = None,
    db: Session = Depends(get_db),
    payload: TokenPayload = Depends(get_current_payload),
):
    quantity = body.quantity if body else 1
    if quantity < 1:
        raise BadRequestError("Quantity must be at least 1")

    entry = _own_entry_or_404(db, entry_id, payload.user_id)
    product = entry.product
    if not product.is_active or product.stock_quantity < quantity:
        raise BadRequestError("Product out of stock")

    try:
        line = merge_into_cart(db, payload.user_id, product, quantity)
        db.delete(entry)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(line)
    return responses.success(line.to_dict(), "Item moved to cart")
