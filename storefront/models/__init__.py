"""
SQLAlchemy models for the storefront
"""

# Import all models to make them available when importing from models
from .user import User
from .product import Category, Brand, Product, ProductImage, ProductSpecification
from .cart import CartItem, WishlistItem
from .order import Order, OrderItem
from .discount import Discount, ProductDiscount
from .review import Review, ReviewHelpful

__all__ = [
    "User",
    "Category",
    "Brand",
    "Product",
    "ProductImage",
    "ProductSpecification",
    "CartItem",
    "WishlistItem",
    "Order",
    "OrderItem",
    "Discount",
    "ProductDiscount",
    "Review",
    "ReviewHelpful",
]
