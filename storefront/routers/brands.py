"""
Brand routes
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.dependencies import require_admin
from storefront.models.product import Brand, Product
from storefront.schemas.catalog import BrandCreate, BrandUpdate
from storefront.utils import responses
from storefront.utils.database import get_db
from storefront.utils.errors import BadRequestError, ConflictError, NotFoundError
from storefront.utils.slug import generate_slug, is_valid_slug

router = APIRouter(prefix="/brands", tags=["brands"])

REQUIRED_FIELDS = ("name", "slug", "is_active", "is_featured")


def _product_count(db: Session, brand_id: int) -> int:
    return db.query(func.count(Product.id)).filter(Product.brand_id == brand_id).scalar()


def _with_count(db: Session, brand: Brand) -> dict:
    data = brand.to_dict()
    data["product_count"] = _product_count(db, brand.id)
    return data


def _get_or_404(db: Session, brand_id: int) -> Brand:
    brand = db.query(Brand).filter(Brand.id == brand_id).first()
    if not brand:
        raise NotFoundError("Brand not found")
    return brand


@router.get("")
def list_brands(
    is_active: Optional[bool] = None,
    is_featured: Optional[bool] = None,
    country_of_origin: Optional[str] = None,
    db: Session = Depends(get_db),
):
    query = db.query(Brand)
    if is_active is not None:
        query = query.filter(Brand.is_active == is_active)
    if is_featured is not None:
        query = query.filter(Brand.is_featured == is_featured)
    if country_of_origin:
        query = query.filter(Brand.country_of_origin == country_of_origin)

    brands = query.order_by(Brand.name.asc()).all()
    return responses.success([_with_count(db, b) for b in brands], "Brands retrieved successfully")


@router.get("/featured")
def featured_brands(db: Session = Depends(get_db)):
    brands = (
        db.query(Brand)
        .filter(Brand.is_featured.is_(True), Brand.is_active.is_(True))
        .order_by(Brand.name.asc())
        .all()
    )
    return responses.success([_with_count(db, b) for b in brands], "Featured brands retrieved successfully")


@router.get("/slug/{slug}")
def get_brand_by_slug(slug: str, db: Session = Depends(get_db)):
    brand = db.query(Brand).filter(Brand.slug == slug).first()
    if not brand:
        raise NotFoundError("Brand not found")
    return responses.success(_with_count(db, brand), "Brand retrieved successfully")


@router.post("")
def create_brand(body: BrandCreate, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    if not body.name:
        raise BadRequestError("Brand name is required")

    slug = body.slug or generate_slug(body.name)
    if not is_valid_slug(slug):
        raise BadRequestError("Slug may only contain lower-case letters, numbers and hyphens")
    if db.query(Brand).filter(Brand.slug == slug).first():
        raise ConflictError(f'Brand with slug "{slug}" already exists')

    brand = Brand(
        name=body.name,
        slug=slug,
        description=body.description,
        logo_url=body.logo_url,
        country_of_origin=body.country_of_origin,
        is_featured=bool(body.is_featured),
        meta_title=body.meta_title,
        meta_description=body.meta_description,
    )
    db.add(brand)
    db.commit()
    db.refresh(brand)
    return responses.success(brand.to_dict(), "Brand created successfully", 201)


@router.get("/{brand_id}")
def get_brand(brand_id: int, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    return responses.success(_with_count(db, _get_or_404(db, brand_id)), "Brand retrieved successfully")


@router.put("/{brand_id}")
def update_brand(brand_id: int, body: BrandUpdate, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    brand = _get_or_404(db, brand_id)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("slug") and changes["slug"] != brand.slug:
        if not is_valid_slug(changes["slug"]):
            raise BadRequestError("Slug may only contain lower-case letters, numbers and hyphens")
        if db.query(Brand).filter(Brand.slug == changes["slug"]).first():
            raise ConflictError("Slug already exists")

    for key, value in changes.items():
        if key in REQUIRED_FIELDS and value in (None, ""):
            continue
        setattr(brand, key, value)

    db.commit()
    db.refresh(brand)
    return responses.success(brand.to_dict(), "Brand updated successfully")


@router.delete("/{brand_id}")
def delete_brand(brand_id: int, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    brand = _get_or_404(db, brand_id)

    product_count = _product_count(db, brand.id)
    if product_count > 0:
        raise BadRequestError(f"Cannot delete brand with {product_count} products. Remove products first.")

    db.delete(brand)
    db.commit()
    return responses.success(None, "Brand deleted successfully")
