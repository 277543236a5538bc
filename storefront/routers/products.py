"""
Product catalog routes, including admin management of images and specifications
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from storefront.dependencies import require_admin
from storefront.models.order import OrderItem
from storefront.models.product import Brand, Category, Product, ProductImage, ProductSpecification
from storefront.schemas.catalog import (
    ImageInput,
    ImagesAdd,
    ImagesReorder,
    ProductCreate,
    ProductUpdate,
    SpecificationInput,
    SpecificationsAdd,
)
from storefront.utils import responses
from storefront.utils.database import get_db
from storefront.utils.errors import BadRequestError, ConflictError, NotFoundError
from storefront.utils.money import to_decimal
from storefront.utils.slug import generate_slug, is_valid_slug

router = APIRouter(prefix="/products", tags=["products"])

SORT_FIELDS = ("name", "price", "created_at", "popularity")
MONEY_FIELDS = ("price", "original_price", "cost_price", "weight")
REQUIRED_FIELDS = ("name", "slug", "price", "stock_quantity", "low_stock_threshold", "is_active", "is_featured")


# Serialization

def _category_chain(category: Optional[Category], depth: int = 2) -> Optional[dict]:
    """Category with up to ``depth`` ancestor levels nested under ``parent``"""
    if category is None:
        return None
    data = category.to_dict()
    data["parent"] = _category_chain(category.parent, depth - 1) if depth > 0 else None
    return data


def _listing(product: Product) -> dict:
    data = product.to_dict()
    data["brand"] = product.brand.to_dict() if product.brand else None
    data["category"] = product.category.to_dict() if product.category else None
    primary = product.primary_image
    data["images"] = [primary.to_dict()] if primary else []
    return data


def _detail(product: Product, include_cost_price: bool = False) -> dict:
    data = product.to_dict(include_cost_price=include_cost_price)
    data["brand"] = product.brand.to_dict() if product.brand else None
    data["category"] = _category_chain(product.category)
    data["images"] = [image.to_dict() for image in product.images]
    data["specifications"] = [spec.to_dict() for spec in product.specifications]
    return data


# Lookups

def _get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Product not found")
    return product


def _get_image_or_404(db: Session, product_id: int, image_id: int) -> ProductImage:
    image = db.query(ProductImage).filter(ProductImage.id == image_id).first()
    if not image or image.product_id != product_id:
        raise NotFoundError("Image not found")
    return image


def _get_spec_or_404(db: Session, product_id: int, spec_id: int) -> ProductSpecification:
    spec = db.query(ProductSpecification).filter(ProductSpecification.id == spec_id).first()
    if not spec or spec.product_id != product_id:
        raise NotFoundError("Specification not found")
    return spec


def _check_references(db: Session, brand_id: Optional[int], category_id: Optional[int]) -> None:
    if brand_id and not db.query(Brand).filter(Brand.id == brand_id).first():
        raise NotFoundError("Brand not found")
    if category_id and not db.query(Category).filter(Category.id == category_id).first():
        raise NotFoundError("Category not found")


def _clear_primary(db: Session, product_id: int, keep_id: Optional[int] = None) -> None:
    query = db.query(ProductImage).filter(ProductImage.product_id == product_id)
    if keep_id is not None:
        query = query.filter(ProductImage.id != keep_id)
    query.update({ProductImage.is_primary: False}, synchronize_session="fetch")


def _build_images(product_id: int, images) -> list:
    for image in images:
        if not image.image_url:
            raise BadRequestError("Image URL is required for all images")
    return [
        ProductImage(
            product_id=product_id,
            image_url=image.image_url,
            alt_text=image.alt_text,
            is_primary=bool(image.is_primary),
            display_order=image.display_order if image.display_order is not None else index + 1,
        )
        for index, image in enumerate(images)
    ]


def _build_specs(product_id: int, specifications) -> list:
    for spec in specifications:
        if not spec.key or not spec.value:
            raise BadRequestError("Key and value are required for all specifications")
    return [ProductSpecification(product_id=product_id, key=spec.key, value=spec.value) for spec in specifications]


def _money(changes: dict) -> dict:
    for field in MONEY_FIELDS:
        if changes.get(field) is not None:
            changes[field] = to_decimal(changes[field])
    return changes


# Public

@router.get("")
def list_products(
    page: int = 1,
    limit: int = 12,
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    brand_id: Optional[int] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    in_stock: Optional[bool] = None,
    is_featured: Optional[bool] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    db: Session = Depends(get_db),
):
    page = max(page, 1)
    limit = max(limit, 1)
    if sort_by not in SORT_FIELDS:
        raise BadRequestError(f"sort_by must be one of: {', '.join(SORT_FIELDS)}")
    if sort_order not in ("asc", "desc"):
        raise BadRequestError("sort_order must be asc or desc")

    query = db.query(Product).filter(Product.is_active.is_(True))
    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(
            or_(func.lower(Product.name).like(pattern), func.lower(Product.short_description).like(pattern))
        )
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if brand_id is not None:
        query = query.filter(Product.brand_id == brand_id)
    if min_price is not None:
        query = query.filter(Product.price >= to_decimal(min_price))
    if max_price is not None:
        query = query.filter(Product.price <= to_decimal(max_price))
    if in_stock:
        query = query.filter(Product.stock_quantity > 0)
    if is_featured:
        query = query.filter(Product.is_featured.is_(True))

    total = query.count()

    if sort_by == "popularity":
        sold = (
            db.query(OrderItem.product_id.label("product_id"), func.sum(OrderItem.quantity).label("sold"))
            .group_by(OrderItem.product_id)
            .subquery()
        )
        query = query.outerjoin(sold, sold.c.product_id == Product.id)
        sort_column = func.coalesce(sold.c.sold, 0)
    else:
        sort_column = getattr(Product, sort_by)

    ordering = sort_column.asc() if sort_order == "asc" else sort_column.desc()
    products = query.order_by(ordering, Product.id.desc()).offset((page - 1) * limit).limit(limit).all()

    return responses.success(
        responses.paginated([_listing(p) for p in products], page, limit, total),
        "Products retrieved successfully",
    )


@router.get("/slug/{slug}")
def get_product_by_slug(slug: str, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.slug == slug).first()
    if not product:
        raise NotFoundError("Product not found")
    if not product.is_active:
        raise NotFoundError("Product not available")
    return responses.success(_detail(product), "Product retrieved successfully")


@router.get("/{product_id}/images")
def get_images(product_id: int, db: Session = Depends(get_db)):
    product = _get_product_or_404(db, product_id)
    return responses.success([image.to_dict() for image in product.images], "Images retrieved successfully")


@router.get("/{product_id}/specifications")
def get_specifications(product_id: int, db: Session = Depends(get_db)):
    product = _get_product_or_404(db, product_id)
    return responses.success(
        [spec.to_dict() for spec in product.specifications], "Specifications retrieved successfully"
    )


# Admin: products

@router.post("")
def create_product(body: ProductCreate, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    if not body.name:
        raise BadRequestError("Product name is required")
    if not body.price or body.price <= 0:
        raise BadRequestError("Valid price is required")
    _check_references(db, body.brand_id, body.category_id)

    slug = body.slug or generate_slug(body.name)
    if not is_valid_slug(slug):
        raise BadRequestError("Slug may only contain lower-case letters, numbers and hyphens")
    if db.query(Product).filter(Product.slug == slug).first():
        raise ConflictError(f'Product with slug "{slug}" already exists')
    if body.sku and db.query(Product).filter(Product.sku == body.sku).first():
        raise ConflictError(f'Product with SKU "{body.sku}" already exists')

    fields = _money(body.model_dump(exclude={"images", "specifications"}))
    fields["slug"] = slug
    fields["stock_quantity"] = fields["stock_quantity"] or 0
    fields["low_stock_threshold"] = fields["low_stock_threshold"] or 5
    fields["is_active"] = True if fields["is_active"] is None else fields["is_active"]
    fields["is_featured"] = bool(fields["is_featured"])
    if fields["stock_quantity"] < 0:
        raise BadRequestError("Stock quantity cannot be negative")

    try:
        product = Product(**fields)
        db.add(product)
        db.flush()
        if body.images:
            db.add_all(_build_images(product.id, body.images))
        if body.specifications:
            db.add_all(_build_specs(product.id, body.specifications))
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(product)
    return responses.success(_detail(product, include_cost_price=True), "Product created successfully", 201)


@router.get("/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    product = _get_product_or_404(db, product_id)
    return responses.success(_detail(product, include_cost_price=True), "Product retrieved successfully")


@router.put("/{product_id}")
def update_product(
    product_id: int,
    body: ProductUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    product = _get_product_or_404(db, product_id)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("slug") and changes["slug"] != product.slug:
        if not is_valid_slug(changes["slug"]):
            raise BadRequestError("Slug may only contain lower-case letters, numbers and hyphens")
        if db.query(Product).filter(Product.slug == changes["slug"]).first():
            raise ConflictError("Slug already exists")
    if changes.get("sku") and changes["sku"] != product.sku:
        if db.query(Product).filter(Product.sku == changes["sku"]).first():
            raise ConflictError("SKU already exists")
    if "price" in changes and changes["price"] is not None and changes["price"] <= 0:
        raise BadRequestError("Valid price is required")
    if changes.get("stock_quantity") is not None and changes["stock_quantity"] < 0:
        raise BadRequestError("Stock quantity cannot be negative")
    _check_references(db, changes.get("brand_id"), changes.get("category_id"))

    for key, value in _money(changes).items():
        if key in REQUIRED_FIELDS and value in (None, ""):
            continue
        setattr(product, key, value)

    db.commit()
    db.refresh(product)
    return responses.success(_detail(product, include_cost_price=True), "Product updated successfully")


@router.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    product = _get_product_or_404(db, product_id)
    db.delete(product)
    db.commit()
    return responses.success(None, "Product deleted successfully")


# Admin: images

@router.post("/{product_id}/images")
def add_images(product_id: int, body: ImagesAdd, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    if not body.images:
        raise BadRequestError("Images array is required")
    _get_product_or_404(db, product_id)

    images = _build_images(product_id, body.images)
    try:
        if any(image.is_primary for image in images):
            _clear_primary(db, product_id)
        db.add_all(images)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return responses.success([image.to_dict() for image in images], "Images added successfully", 201)


@router.put("/{product_id}/images/reorder")
def reorder_images(
    product_id: int,
    body: ImagesReorder,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    if body.image_orders is None:
        raise BadRequestError("image_orders array is required")
    product = _get_product_or_404(db, product_id)

    for entry in body.image_orders:
        db.query(ProductImage).filter(
            ProductImage.id == entry.image_id, ProductImage.product_id == product_id
        ).update({ProductImage.display_order: entry.display_order}, synchronize_session="fetch")
    db.commit()

    db.expire(product, ["images"])
    return responses.success([image.to_dict() for image in product.images], "Images reordered successfully")


@router.patch("/{product_id}/images/{image_id}/primary")
def set_primary_image(product_id: int, image_id: int, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    image = _get_image_or_404(db, product_id, image_id)
    _clear_primary(db, product_id, keep_id=image.id)
    image.is_primary = True
    db.commit()
    db.refresh(image)
    return responses.success(image.to_dict(), "Primary image updated successfully")


@router.put("/{product_id}/images/{image_id}")
def update_image(
    product_id: int,
    image_id: int,
    body: ImageInput,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    image = _get_image_or_404(db, product_id, image_id)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("is_primary") is True:
        _clear_primary(db, product_id, keep_id=image.id)
    for key, value in changes.items():
        if value is None and key != "alt_text":
            continue
        setattr(image, key, value)

    db.commit()
    db.refresh(image)
    return responses.success(image.to_dict(), "Image updated successfully")


@router.delete("/{product_id}/images/{image_id}")
def delete_image(product_id: int, image_id: int, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    image = _get_image_or_404(db, product_id, image_id)
    db.delete(image)
    db.commit()
    return responses.success(None, "Image deleted successfully")


# Admin: specifications

@router.post("/{product_id}/specifications")
def add_specifications(
    product_id: int,
    body: SpecificationsAdd,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    if not body.specifications:
        raise BadRequestError("Specifications array is required")
    _get_product_or_404(db, product_id)

    specs = _build_specs(product_id, body.specifications)
    db.add_all(specs)
    db.commit()
    return responses.success([spec.to_dict() for spec in specs], "Specifications added successfully", 201)


@router.put("/{product_id}/specifications/bulk")
def replace_specifications(
    product_id: int,
    body: SpecificationsAdd,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    if body.specifications is None:
        raise BadRequestError("Specifications array is required")
    product = _get_product_or_404(db, product_id)

    specs = _build_specs(product_id, body.specifications)
    try:
        db.query(ProductSpecification).filter(ProductSpecification.product_id == product_id).delete(
            synchronize_session="fetch"
        )
        db.add_all(specs)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.expire(product, ["specifications"])
    return responses.success([spec.to_dict() for spec in specs], "Specifications updated successfully")


@router.put("/{product_id}/specifications/{spec_id}")
def update_specification(
    product_id: int,
    spec_id: int,
    body: SpecificationInput,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    spec = _get_spec_or_404(db, product_id, spec_id)
    if body.key:
        spec.key = body.key
    if body.value:
        spec.value = body.value
    db.commit()
    db.refresh(spec)
    return responses.success(spec.to_dict(), "Specification updated successfully")


@router.delete("/{product_id}/specifications/{spec_id}")
def delete_specification(
    product_id: int,
    spec_id: int,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    spec = _get_spec_or_404(db, product_id, spec_id)
    db.delete(spec)
    db.commit()
    return responses.success(None, "Specification deleted successfully")
