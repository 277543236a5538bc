"""
User model
"""
from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from storefront.utils.database import Base

ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    phone = Column(String(30))
    role = Column(String(20), nullable=False, default=ROLE_CUSTOMER)
    google_id = Column(String(255), unique=True, nullable=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    email_verification_token = Column(String(128), unique=True, nullable=True)
    password_reset_token = Column(String(128), unique=True, nullable=True)
    password_reset_expiry = Column(DateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    cart_items = relationship("CartItem", back_populates="user", cascade="all, delete-orphan")
    wishlist_items = relationship("WishlistItem", back_populates="user", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="user")
    reviews = relationship("Review", back_populates="user", cascade="all, delete-orphan")

    def to_dict(self, include_updated: bool = False) -> dict:
        data = {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
            "role": self.role,
            "is_email_verified": self.is_email_verified,
            "created_at": self.created_at,
        }
        if include_updated:
            data["updated_at"] = self.updated_at
        return data

    def to_summary(self, with_email: bool = True, with_phone: bool = False) -> dict:
        data = {"id": self.id, "first_name": self.first_name, "last_name": self.last_name}
        if with_email:
            data["email"] = self.email
        if with_phone:
            data["phone"] = self.phone
        return data

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
