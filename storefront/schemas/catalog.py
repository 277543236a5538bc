"""
Request bodies for categories, brands, products, images and specifications.
Required-field checks happen in the routers so the messages match the API.
"""
from typing import List, Optional

from pydantic import BaseModel


class CategoryCreate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[int] = None
    level: Optional[int] = None
    image_url: Optional[str] = None
    display_order: Optional[int] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[int] = None
    level: Optional[int] = None
    image_url: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class BrandCreate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    logo_url: Optional[str] = None
    country_of_origin: Optional[str] = None
    is_featured: Optional[bool] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class BrandUpdate(BrandCreate):
    is_active: Optional[bool] = None


class ImageInput(BaseModel):
    image_url: Optional[str] = None
    alt_text: Optional[str] = None
    is_primary: Optional[bool] = None
    display_order: Optional[int] = None


class SpecificationInput(BaseModel):
    key: Optional[str] = None
    value: Optional[str] = None


class ProductBase(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    sku: Optional[str] = None
    brand_id: Optional[int] = None
    category_id: Optional[int] = None
    price: Optional[float] = None
    original_price: Optional[float] = None
    cost_price: Optional[float] = None
    short_description: Optional[str] = None
    long_description: Optional[str] = None
    volume: Optional[str] = None
    weight: Optional[float] = None
    country_of_origin: Optional[str] = None
    effective_for: Optional[List[str]] = None
    features: Optional[List[str]] = None
    certifications: Optional[List[str]] = None
    how_to_use: Optional[str] = None
    ingredients: Optional[str] = None
    cautions: Optional[str] = None
    stock_quantity: Optional[int] = None
    low_stock_threshold: Optional[int] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    badges: Optional[List[str]] = None


class ProductCreate(ProductBase):
    images: Optional[List[ImageInput]] = None
    specifications: Optional[List[SpecificationInput]] = None


class ProductUpdate(ProductBase):
    pass


class ImagesAdd(BaseModel):
    images: Optional[List[ImageInput]] = None


class ImageOrder(BaseModel):
    image_id: int
    display_order: int


class ImagesReorder(BaseModel):
    image_orders: Optional[List[ImageOrder]] = None


class SpecificationsAdd(BaseModel):
    specifications: Optional[List[SpecificationInput]] = None
