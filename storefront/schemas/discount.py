from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class DiscountValidate(BaseModel):
    code: Optional[str] = None
    cart_subtotal: Optional[float] = None


class DiscountCreate(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None
    type: Optional[str] = None
    value: Optional[float] = None
    min_purchase_amount: Optional[float] = None
    max_discount_amount: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    usage_limit: Optional[int] = None
    product_ids: Optional[List[int]] = None


class DiscountUpdate(DiscountCreate):
    pass
