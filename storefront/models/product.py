"""
Catalog models: Category, Brand, Product, ProductImage, ProductSpecification
"""
from sqlalchemy import (
    DECIMAL,
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from storefront.utils.database import Base
from storefront.utils.money import as_float

STOCK_IN = "in_stock"
STOCK_LOW = "low_stock"
STOCK_OUT = "out_of_stock"


def stock_status_for(stock_quantity: int, low_stock_threshold: int) -> str:
    if stock_quantity == 0:
        return STOCK_OUT
    if stock_quantity <= low_stock_threshold:
        return STOCK_LOW
    return STOCK_IN


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    slug = Column(String(180), unique=True, nullable=False, index=True)
    description = Column(Text)
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    level = Column(Integer, nullable=False, default=1)
    image_url = Column(String(500))
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    meta_title = Column(String(255))
    meta_description = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (CheckConstraint("level BETWEEN 1 AND 3", name="ck_categories_level"),)

    # Relationships
    parent = relationship("Category", remote_side=[id], back_populates="children")
    children = relationship("Category", back_populates="parent")
    products = relationship("Product", back_populates="category")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "parent_id": self.parent_id,
            "level": self.level,
            "image_url": self.image_url,
            "display_order": self.display_order,
            "is_active": self.is_active,
            "meta_title": self.meta_title,
            "meta_description": self.meta_description,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self):
        return f"<Category(id={self.id}, name={self.name}, level={self.level})>"


class Brand(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    slug = Column(String(180), unique=True, nullable=False, index=True)
    description = Column(Text)
    logo_url = Column(String(500))
    country_of_origin = Column(String(100))
    is_active = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    meta_title = Column(String(255))
    meta_description = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    products = relationship("Product", back_populates="brand")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "logo_url": self.logo_url,
            "country_of_origin": self.country_of_origin,
            "is_active": self.is_active,
            "is_featured": self.is_featured,
            "meta_title": self.meta_title,
            "meta_description": self.meta_description,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self):
        return f"<Brand(id={self.id}, name={self.name})>"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(280), unique=True, nullable=False, index=True)
    sku = Column(String(100), unique=True, nullable=True)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)

    price = Column(DECIMAL(10, 2), nullable=False)
    original_price = Column(DECIMAL(10, 2))
    cost_price = Column(DECIMAL(10, 2))

    short_description = Column(Text)
    long_description = Column(Text)

    volume = Column(String(50))
    weight = Column(DECIMAL(10, 2))
    country_of_origin = Column(String(100))

    effective_for = Column(JSON)
    features = Column(JSON)
    certifications = Column(JSON)
    how_to_use = Column(Text)
    ingredients = Column(Text)
    cautions = Column(Text)

    stock_quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=5)

    meta_title = Column(String(255))
    meta_description = Column(Text)

    is_active = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    badges = Column(JSON)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),)

    # Relationships
    brand = relationship("Brand", back_populates="products")
    category = relationship("Category", back_populates="products")
    images = relationship(
        "ProductImage",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductImage.display_order",
    )
    specifications = relationship(
        "ProductSpecification",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductSpecification.id",
    )
    cart_items = relationship("CartItem", back_populates="product", cascade="all, delete-orphan")
    wishlist_items = relationship("WishlistItem", back_populates="product", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="product", cascade="all, delete-orphan")
    discount_links = relationship("ProductDiscount", back_populates="product", cascade="all, delete-orphan")
    order_items = relationship("OrderItem", back_populates="product")

    @property
    def stock_status(self) -> str:
        return stock_status_for(self.stock_quantity, self.low_stock_threshold)

    @property
    def discount_percentage(self):
        if self.original_price and self.original_price > self.price:
            return round(float((self.original_price - self.price) / self.original_price * 100))
        return None

    @property
    def primary_image(self):
        for image in self.images:
            if image.is_primary:
                return image
        return None

    def to_dict(self, include_cost_price: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "sku": self.sku,
            "brand_id": self.brand_id,
            "category_id": self.category_id,
            "price": as_float(self.price),
            "original_price": as_float(self.original_price),
            "short_description": self.short_description,
            "long_description": self.long_description,
            "volume": self.volume,
            "weight": as_float(self.weight),
            "country_of_origin": self.country_of_origin,
            "effective_for": self.effective_for,
            "features": self.features,
            "certifications": self.certifications,
            "how_to_use": self.how_to_use,
            "ingredients": self.ingredients,
            "cautions": self.cautions,
            "stock_quantity": self.stock_quantity,
            "low_stock_threshold": self.low_stock_threshold,
            "stock_status": self.stock_status,
            "meta_title": self.meta_title,
            "meta_description": self.meta_description,
            "is_active": self.is_active,
            "is_featured": self.is_featured,
            "badges": self.badges,
            "discount_percentage": self.discount_percentage,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_cost_price:
            data["cost_price"] = as_float(self.cost_price)
        return data

    def to_card(self) -> dict:
        """Compact form used inside cart, wishlist and review payloads"""
        primary = self.primary_image
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "price": as_float(self.price),
            "original_price": as_float(self.original_price),
            "stock_quantity": self.stock_quantity,
            "stock_status": self.stock_status,
            "is_active": self.is_active,
            "images": [primary.to_dict()] if primary else [],
        }

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name}, price={self.price})>"


class ProductImage(Base):
    __tablename__ = "product_images"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url = Column(String(500), nullable=False)
    alt_text = Column(String(255))
    is_primary = Column(Boolean, nullable=False, default=False)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    product = relationship("Product", back_populates="images")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "image_url": self.image_url,
            "alt_text": self.alt_text,
            "is_primary": self.is_primary,
            "display_order": self.display_order,
        }

    def __repr__(self):
        return f"<ProductImage(id={self.id}, product_id={self.product_id}, primary={self.is_primary})>"


class ProductSpecification(Base):
    __tablename__ = "product_specifications"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    key = Column(String(150), nullable=False)
    value = Column(Text, nullable=False)

    # Relationships
    product = relationship("Product", back_populates="specifications")

    def to_dict(self) -> dict:
        return {"id": self.id, "product_id": self.product_id, "key": self.key, "value": self.value}

    def __repr__(self):
        return f"<ProductSpecification(id={self.id}, key={self.key})>"
