"""
API routers mounted under /api
"""
from . import auth, brands, cart, categories, diagnostics, discounts, orders, products, reviews, wishlist

__all__ = [
    "auth",
    "brands",
    "cart",
    "categories",
    "diagnostics",
    "discounts",
    "orders",
    "products",
    "reviews",
    "wishlist",
]
