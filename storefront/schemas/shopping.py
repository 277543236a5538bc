from typing import Optional

from pydantic import BaseModel


class CartAdd(BaseModel):
    product_id: Optional[int] = None
    quantity: int = 1


class CartUpdate(BaseModel):
    quantity: Optional[int] = None


class WishlistAdd(BaseModel):
    product_id: Optional[int] = None


class MoveToCart(BaseModel):
    quantity: int = 1
