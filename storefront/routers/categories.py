"""
Category routes (three-level hierarchy)
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.dependencies import require_admin
from storefront.models.product import Category, Product
from storefront.schemas.catalog import CategoryCreate, CategoryUpdate
from storefront.utils import responses
from storefront.utils.database import get_db
from storefront.utils.errors import BadRequestError, ConflictError, NotFoundError
from storefront.utils.slug import generate_slug, is_valid_slug

router = APIRouter(prefix="/categories", tags=["categories"])

LEVELS = (1, 2, 3)
REQUIRED_FIELDS = ("name", "slug", "level", "display_order", "is_active")


def _product_counts(db: Session, category_ids) -> dict:
    if not category_ids:
        return {}
    rows = (
        db.query(Product.category_id, func.count(Product.id))
        .filter(Product.category_id.in_(category_ids))
        .group_by(Product.category_id)
        .all()
    )
    return dict(rows)


def _active_children(category: Category):
    children = [child for child in category.children if child.is_active]
    return sorted(children, key=lambda c: (c.display_order, c.id))


def _tree_node(db: Session, category: Category, depth: int) -> dict:
    data = category.to_dict()
    data["product_count"] = _product_counts(db, [category.id]).get(category.id, 0)
    if depth > 0:
        data["children"] = [_tree_node(db, child, depth - 1) for child in _active_children(category)]
    return data


def _get_or_404(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Category not found")
    return category


def _detail(category: Category, product_count: int, children) -> dict:
    data = category.to_dict()
    data["parent"] = category.parent.to_dict() if category.parent else None
    data["children"] = [child.to_dict() for child in children]
    data["product_count"] = product_count
    return data


@router.get("")
def list_categories(
    level: Optional[int] = None,
    parent_id: Optional[int] = None,
    is_active: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    query = db.query(Category)
    if level is not None:
        query = query.filter(Category.level == level)
    if parent_id is not None:
        query = query.filter(Category.parent_id == parent_id)
    if is_active is not None:
        query = query.filter(Category.is_active == is_active)

    categories = query.order_by(Category.display_order.asc(), Category.name.asc()).all()
    counts = _product_counts(db, [c.id for c in categories])

    data = []
    for category in categories:
        item = category.to_dict()
        item["parent"] = category.parent.to_dict() if category.parent else None
        item["product_count"] = counts.get(category.id, 0)
        item["children_count"] = len(category.children)
        data.append(item)

    return responses.success(data, "Categories retrieved successfully")


@router.get("/tree")
def category_tree(db: Session = Depends(get_db)):
    roots = (
        db.query(Category)
        .filter(Category.level == 1, Category.is_active.is_(True))
        .order_by(Category.display_order.asc(), Category.id.asc())
        .all()
    )
    return responses.success([_tree_node(db, root, 2) for root in roots], "Category tree retrieved successfully")


@router.get("/slug/{slug}")
def get_category_by_slug(slug: str, db: Session = Depends(get_db)):
    category = db.query(Category).filter(Category.slug == slug).first()
    if not category:
        raise NotFoundError("Category not found")

    count = _product_counts(db, [category.id]).get(category.id, 0)
    return responses.success(_detail(category, count, _active_children(category)), "Category retrieved successfully")


@router.post("")
def create_category(body: CategoryCreate, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    if not body.name:
        raise BadRequestError("Category name is required")
    if body.level not in LEVELS:
        raise BadRequestError("Level must be 1, 2, or 3")
    if body.level > 1 and not body.parent_id:
        raise BadRequestError(f"Parent category is required for level {body.level}")

    if body.parent_id:
        parent = db.query(Category).filter(Category.id == body.parent_id).first()
        if not parent:
            raise NotFoundError("Parent category not found")
        if parent.level != body.level - 1:
            raise BadRequestError(f"Parent must be level {body.level - 1} for level {body.level} category")

    slug = body.slug or generate_slug(body.name)
    if not is_valid_slug(slug):
        raise BadRequestError("Slug may only contain lower-case letters, numbers and hyphens")
    if db.query(Category).filter(Category.slug == slug).first():
        raise ConflictError(f'Category with slug "{slug}" already exists')

    category = Category(
        name=body.name,
        slug=slug,
        description=body.description,
        parent_id=body.parent_id,
        level=body.level,
        image_url=body.image_url,
        display_order=body.display_order or 0,
        meta_title=body.meta_title,
        meta_description=body.meta_description,
    )
    db.add(category)
    db.commit()
    db.refresh(category)

    data = category.to_dict()
    data["parent"] = category.parent.to_dict() if category.parent else None
    return responses.success(data, "Category created successfully", 201)


@router.get("/{category_id}")
def get_category(category_id: int, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    category = _get_or_404(db, category_id)
    count = _product_counts(db, [category.id]).get(category.id, 0)
    return responses.success(_detail(category, count, category.children), "Category retrieved successfully")


@router.put("/{category_id}")
def update_category(
    category_id: int,
    body: CategoryUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    category = _get_or_404(db, category_id)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("slug") and changes["slug"] != category.slug:
        if not is_valid_slug(changes["slug"]):
            raise BadRequestError("Slug may only contain lower-case letters, numbers and hyphens")
        if db.query(Category).filter(Category.slug == changes["slug"]).first():
            raise ConflictError("Slug already exists")

    if "parent_id" in changes:
        parent_id = changes["parent_id"]
        if parent_id == category.id:
            raise BadRequestError("Category cannot be its own parent")
        if parent_id is not None and not db.query(Category).filter(Category.id == parent_id).first():
            raise NotFoundError("Parent category not found")

    if "level" in changes and changes["level"] not in LEVELS:
        raise BadRequestError("Level must be 1, 2, or 3")

    for key, value in changes.items():
        if key in REQUIRED_FIELDS and value in (None, ""):
            continue
        setattr(category, key, value)

    db.commit()
    db.refresh(category)
    data = category.to_dict()
    data["parent"] = category.parent.to_dict() if category.parent else None
    data["children"] = [child.to_dict() for child in category.children]
    return responses.success(data, "Category updated successfully")


@router.delete("/{category_id}")
def delete_category(category_id: int, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    category = _get_or_404(db, category_id)

    product_count = _product_counts(db, [category.id]).get(category.id, 0)
    if product_count > 0:
        raise BadRequestError(f"Cannot delete category with {product_count} products. Remove products first.")
    if category.children:
        raise BadRequestError(
            f"Cannot delete category with {len(category.children)} subcategories. Remove subcategories first."
        )

    db.delete(category)
    db.commit()
    return responses.success(None, "Category deleted successfully")
