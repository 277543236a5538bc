"""
Discount code and product link models
"""
from sqlalchemy import (
    DECIMAL,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from storefront.utils.database import Base
from storefront.utils.money import as_float

DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_FIXED = "fixed"
DISCOUNT_TYPES = [DISCOUNT_PERCENTAGE, DISCOUNT_FIXED]


class Discount(Base):
    __tablename__ = "discounts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    code = Column(String(50), unique=True, nullable=False, index=True)
    type = Column(String(20), nullable=False)
    value = Column(DECIMAL(10, 2), nullable=False)
    min_purchase_amount = Column(DECIMAL(10, 2))
    max_discount_amount = Column(DECIMAL(10, 2))
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    usage_limit = Column(Integer, nullable=True)
    used_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (CheckConstraint("used_count >= 0", name="ck_discounts_used_count_non_negative"),)

    # Relationships
    products = relationship("ProductDiscount", back_populates="discount", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="applied_discount")

    def to_dict(self, include_products: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "type": self.type,
            "value": as_float(self.value),
            "min_purchase_amount": as_float(self.min_purchase_amount),
            "max_discount_amount": as_float(self.max_discount_amount),
            "start_date": self.start_date,
            "end_date": self.end_date,
            "is_active": self.is_active,
            "usage_limit": self.usage_limit,
            "used_count": self.used_count,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_products:
            data["products"] = [
                {"id": link.product.id, "name": link.product.name, "price": as_float(link.product.price)}
                for link in self.products
                if link.product is not None
            ]
        return data

    def __repr__(self):
        return f"<Discount(id={self.id}, code={self.code}, type={self.type}, value={self.value})>"


class ProductDiscount(Base):
    __tablename__ = "product_discounts"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    discount_id = Column(Integer, ForeignKey("discounts.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (UniqueConstraint("product_id", "discount_id", name="uq_product_discounts_pair"),)

    # Relationships
    product = relationship("Product", back_populates="discount_links")
    discount = relationship("Discount", back_populates="products")

    def __repr__(self):
        return f"<ProductDiscount(product_id={self.product_id}, discount_id={self.discount_id})>"
