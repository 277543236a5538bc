from typing import Optional

from pydantic import BaseModel


class ShippingInfo(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    landmark: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class CheckoutRequest(BaseModel):
    shipping_info: Optional[ShippingInfo] = None
    payment_method: Optional[str] = None
    transaction_number: Optional[str] = None
    customer_note: Optional[str] = None
    discount_code: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: Optional[str] = None
    admin_note: Optional[str] = None


class PaymentStatusUpdate(BaseModel):
    payment_status: Optional[str] = None
    admin_note: Optional[str] = None
