"""
Order and OrderItem models
"""
from sqlalchemy import DECIMAL, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from storefront.utils.database import Base
from storefront.utils.money import as_float

ORDER_PENDING = "pending"
ORDER_CONFIRMED = "confirmed"
ORDER_PROCESSING = "processing"
ORDER_SHIPPED = "shipped"
ORDER_DELIVERED = "delivered"
ORDER_CANCELLED = "cancelled"
ORDER_STATUSES = [
    ORDER_PENDING,
    ORDER_CONFIRMED,
    ORDER_PROCESSING,
    ORDER_SHIPPED,
    ORDER_DELIVERED,
    ORDER_CANCELLED,
]

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"
PAYMENT_FAILED = "failed"
PAYMENT_STATUSES = [PAYMENT_PENDING, PAYMENT_PAID, PAYMENT_FAILED]

PAYMENT_COD = "cod"
PAYMENT_ESEWA = "esewa"
PAYMENT_KHALTI = "khalti"
PAYMENT_BANK_TRANSFER = "bank_transfer"
PAYMENT_METHODS = [PAYMENT_COD, PAYMENT_ESEWA, PAYMENT_KHALTI, PAYMENT_BANK_TRANSFER]
# Paid by QR code / transfer, verified by an admin against the transaction number
ONLINE_PAYMENT_METHODS = [PAYMENT_ESEWA, PAYMENT_KHALTI, PAYMENT_BANK_TRANSFER]


def requires_transaction_number(payment_method: str) -> bool:
    return payment_method in ONLINE_PAYMENT_METHODS


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(30), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=ORDER_PENDING)

    subtotal = Column(DECIMAL(10, 2), nullable=False)
    shipping_cost = Column(DECIMAL(10, 2), nullable=False, default=0)
    tax = Column(DECIMAL(10, 2), nullable=False, default=0)
    discount = Column(DECIMAL(10, 2), nullable=False, default=0)
    total = Column(DECIMAL(10, 2), nullable=False)

    shipping_full_name = Column(String(150), nullable=False)
    shipping_phone = Column(String(30), nullable=False)
    shipping_address_line1 = Column(String(255), nullable=False)
    shipping_address_line2 = Column(String(255))
    shipping_landmark = Column(String(255))
    shipping_city = Column(String(100), nullable=False)
    shipping_province = Column(String(100))
    shipping_postal_code = Column(String(20), nullable=False)
    shipping_country = Column(String(100), nullable=False, default="Nepal")

    payment_method = Column(String(30), nullable=False)
    payment_status = Column(String(20), nullable=False, default=PAYMENT_PENDING)
    transaction_number = Column(String(100))

    discount_id = Column(Integer, ForeignKey("discounts.id", ondelete="SET NULL"), nullable=True)
    discount_code = Column(String(50))

    customer_note = Column(Text)
    admin_note = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id")
    applied_discount = relationship("Discount", back_populates="orders")

    def to_dict(self, include_user: bool = False, include_discount: bool = False) -> dict:
        data = {
            "id": self.id,
            "order_number": self.order_number,
            "user_id": self.user_id,
            "status": self.status,
            "subtotal": as_float(self.subtotal),
            "shipping_cost": as_float(self.shipping_cost),
            "tax": as_float(self.tax),
            "discount": as_float(self.discount),
            "total": as_float(self.total),
            "shipping_full_name": self.shipping_full_name,
            "shipping_phone": self.shipping_phone,
            "shipping_address_line1": self.shipping_address_line1,
            "shipping_address_line2": self.shipping_address_line2,
            "shipping_landmark": self.shipping_landmark,
            "shipping_city": self.shipping_city,
            "shipping_province": self.shipping_province,
            "shipping_postal_code": self.shipping_postal_code,
            "shipping_country": self.shipping_country,
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "transaction_number": self.transaction_number,
            "discount_id": self.discount_id,
            "discount_code": self.discount_code,
            "customer_note": self.customer_note,
            "admin_note": self.admin_note,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "items": [item.to_dict() for item in self.items],
        }
        if include_user and self.user:
            data["user"] = self.user.to_summary(with_phone=True)
        if include_discount:
            data["applied_discount"] = self.applied_discount.to_dict() if self.applied_discount else None
        return data

    def __repr__(self):
        return f"<Order(id={self.id}, number={self.order_number}, total={self.total}, status={self.status})>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    product_name = Column(String(255), nullable=False)
    product_sku = Column(String(100))
    product_image = Column(String(500))
    price = Column(DECIMAL(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    subtotal = Column(DECIMAL(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "product_sku": self.product_sku,
            "product_image": self.product_image,
            "price": as_float(self.price),
            "quantity": self.quantity,
            "subtotal": as_float(self.subtotal),
            "created_at": self.created_at,
        }

    def __repr__(self):
        return f"<OrderItem(id={self.id}, quantity={self.quantity}, price={self.price})>"
