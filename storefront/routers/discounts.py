"""
Discount code routes: customer validation and admin management
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.dependencies import get_current_payload, require_admin
from storefront.models.discount import DISCOUNT_PERCENTAGE, DISCOUNT_TYPES, Discount, ProductDiscount
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.schemas.discount import DiscountCreate, DiscountUpdate, DiscountValidate
from storefront.services.pricing import evaluate_discount
from storefront.utils import responses
from storefront.utils.database import get_db
from storefront.utils.dates import to_naive_utc, utcnow
from storefront.utils.errors import BadRequestError, ConflictError, NotFoundError
from storefront.utils.money import as_float, to_decimal

router = APIRouter(prefix="/discounts", tags=["discounts"])

MONEY_FIELDS = ("value", "min_purchase_amount", "max_discount_amount")


def _get_or_404(db: Session, discount_id: int) -> Discount:
    discount = db.query(Discount).filter(Discount.id == discount_id).first()
    if not discount:
        raise NotFoundError("Discount not found")
    return discount


def _with_usage(db: Session, discount: Discount) -> dict:
    data = discount.to_dict(include_products=True)
    data["order_count"] = db.query(func.count(Order.id)).filter(Order.discount_id == discount.id).scalar()
    return data


def _check_value(discount_type: str, value: float) -> None:
    if value <= 0:
        raise BadRequestError("Value must be greater than 0")
    if discount_type == DISCOUNT_PERCENTAGE and value > 100:
        raise BadRequestError("Percentage value cannot exceed 100")


def _check_products(db: Session, product_ids: List[int]) -> None:
    wanted = set(product_ids)
    found = {pid for (pid,) in db.query(Product.id).filter(Product.id.in_(wanted)).all()}
    missing = sorted(wanted - found)
    if missing:
        raise BadRequestError(f"Products with IDs {', '.join(str(pid) for pid in missing)} not found")


@router.post("/validate")
def validate_code(body: DiscountValidate, db: Session = Depends(get_db), _payload=Depends(get_current_payload)):
    if not body.code:
        raise BadRequestError("Discount code is required")
    if not body.cart_subtotal or body.cart_subtotal <= 0:
        raise BadRequestError("Valid cart subtotal is required")

    discount = db.query(Discount).filter(Discount.code == body.code.strip().upper()).first()
    amount, reason = evaluate_discount(discount, to_decimal(body.cart_subtotal), utcnow())
    if amount is None:
        return responses.success({"valid": False, "message": reason}, "Discount code validation failed")

    return responses.success(
        {
            "valid": True,
            "discount": {
                "id": discount.id,
                "name": discount.name,
                "code": discount.code,
                "type": discount.type,
                "value": as_float(discount.value),
                "discount_amount": as_float(amount),
            },
        },
        "Discount code is valid",
    )


@router.post("")
def create_discount(body: DiscountCreate, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    if not all([body.name, body.code, body.type, body.value, body.start_date, body.end_date]):
        raise BadRequestError("Name, code, type, value, start date, and end date are required")
    if body.type not in DISCOUNT_TYPES:
        raise BadRequestError('Type must be "percentage" or "fixed"')
    _check_value(body.type, body.value)

    code = body.code.strip().upper()
    if db.query(Discount).filter(Discount.code == code).first():
        raise ConflictError(f'Discount code "{body.code}" already exists')

    start, end = to_naive_utc(body.start_date), to_naive_utc(body.end_date)
    if end <= start:
        raise BadRequestError("End date must be after start date")

    if body.product_ids:
        _check_products(db, body.product_ids)

    discount = Discount(
        name=body.name,
        code=code,
        type=body.type,
        value=to_decimal(body.value),
        min_purchase_amount=to_decimal(body.min_purchase_amount) if body.min_purchase_amount is not None else None,
        max_discount_amount=to_decimal(body.max_discount_amount) if body.max_discount_amount is not None else None,
        start_date=start,
        end_date=end,
        is_active=True if body.is_active is None else body.is_active,
        usage_limit=body.usage_limit,
        used_count=0,
    )
    for product_id in set(body.product_ids or []):
        discount.products.append(ProductDiscount(product_id=product_id))

    db.add(discount)
    db.commit()
    db.refresh(discount)
    return responses.success(discount.to_dict(include_products=True), "Discount created successfully", 201)


@router.get("")
def list_discounts(
    is_active: Optional[bool] = None,
    type: Optional[str] = None,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    query = db.query(Discount)
    if is_active is not None:
        query = query.filter(Discount.is_active == is_active)
    if type:
        query = query.filter(Discount.type == type)

    discounts = query.order_by(Discount.created_at.desc(), Discount.id.desc()).all()
    return responses.success([_with_usage(db, d) for d in discounts], "Discounts retrieved successfully")


@router.get("/{discount_id}")
def get_discount(discount_id: int, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    return responses.success(_with_usage(db, _get_or_404(db, discount_id)), "Discount retrieved successfully")


@router.put("/{discount_id}")
def update_discount(
    discount_id: int,
    body: DiscountUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    discount = _get_or_404(db, discount_id)
    changes = body.model_dump(exclude_unset=True)
    product_ids = changes.pop("product_ids", None)

    if changes.get("code"):
        changes["code"] = changes["code"].strip().upper()
        if changes["code"] != discount.code and db.query(Discount).filter(Discount.code == changes["code"]).first():
            raise ConflictError("Discount code already exists")

    if changes.get("type") is not None and changes["type"] not in DISCOUNT_TYPES:
        raise BadRequestError('Type must be "percentage" or "fixed"')
    if changes.get("value") is not None or changes.get("type") is not None:
        value = changes.get("value") if changes.get("value") is not None else float(discount.value)
        _check_value(changes.get("type") or discount.type, value)

    for field in ("start_date", "end_date"):
        if changes.get(field) is not None:
            changes[field] = to_naive_utc(changes[field])
    start = changes.get("start_date") or discount.start_date
    end = changes.get("end_date") or discount.end_date
    if end <= start:
        raise BadRequestError("End date must be after start date")

    if product_ids is not None:
        _check_products(db, product_ids)

    for key, value in changes.items():
        if key in MONEY_FIELDS and value is not None:
            value = to_decimal(value)
        if value is None and key in ("name", "code", "type", "value", "start_date", "end_date", "is_active"):
            continue
        setattr(discount, key, value)

    if product_ids is not None:
        wanted = set(product_ids)
        for link in list(discount.products):
            if link.product_id not in wanted:
                discount.products.remove(link)
        linked = {link.product_id for link in discount.products}
        for product_id in wanted - linked:
            discount.products.append(ProductDiscount(product_id=product_id))

    db.commit()
    db.refresh(discount)
    return responses.success(discount.to_dict(include_products=True), "Discount updated successfully")


@router.delete("/{discount_id}")
def delete_discount(discount_id: int, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    discount = _get_or_404(db, discount_id)
    db.delete(discount)
    db.commit()
    return responses.success(None, "Discount deleted successfully")
