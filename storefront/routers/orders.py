"""
Order routes: checkout, customer order history and admin order management
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.dependencies import get_current_payload, require_admin
from storefront.models.order import PAYMENT_STATUSES, Order
from storefront.schemas.order import CheckoutRequest, OrderStatusUpdate, PaymentStatusUpdate
from storefront.services import order_service
from storefront.services.auth_service import TokenPayload
from storefront.utils import responses
from storefront.utils.database import get_db
from storefront.utils.errors import BadRequestError, NotFoundError

router = APIRouter(prefix="/orders", tags=["orders"])


def _get_order_or_404(db: Session, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError("Order not found")
    return order


@router.post("/checkout")
def checkout(body: CheckoutRequest, db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    order = order_service.place_order(db, payload.user_id, body)
    return responses.success(order.to_dict(include_discount=True), "Order placed successfully", 201)


@router.get("")
def my_orders(db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    orders = (
        db.query(Order)
        .filter(Order.user_id == payload.user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return responses.success([order.to_dict() for order in orders], "Orders retrieved successfully")


# Admin routes are declared before /{order_number} so "admin" is not taken for an order number

@router.get("/admin/all")
def all_orders(
    status: Optional[str] = None,
    payment_status: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    page = max(page, 1)
    limit = max(limit, 1)

    query = db.query(Order)
    if status:
        query = query.filter(Order.status == status)
    if payment_status:
        query = query.filter(Order.payment_status == payment_status)

    total = query.count()
    orders = (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    items = []
    for order in orders:
        data = order.to_dict()
        data["user"] = order.user.to_summary() if order.user else None
        items.append(data)

    return responses.success(responses.paginated(items, page, limit, total), "Orders retrieved successfully")


@router.get("/admin/{order_id}")
def get_order_admin(order_id: int, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    order = _get_order_or_404(db, order_id)
    return responses.success(order.to_dict(include_user=True, include_discount=True), "Order retrieved successfully")


@router.patch("/admin/{order_id}/status")
def update_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    order = _get_order_or_404(db, order_id)
    order = order_service.change_status(db, order, body.status, body.admin_note)
    return responses.success(order.to_dict(include_discount=True), "Order status updated successfully")


@router.patch("/admin/{order_id}/payment")
def update_payment_status(
    order_id: int,
    body: PaymentStatusUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    if not body.payment_status:
        raise BadRequestError("Payment status is required")
    if body.payment_status not in PAYMENT_STATUSES:
        raise BadRequestError(f"Invalid payment status. Must be one of: {', '.join(PAYMENT_STATUSES)}")

    order = _get_order_or_404(db, order_id)
    order.payment_status = body.payment_status
    order.admin_note = body.admin_note or order.admin_note
    db.commit()
    db.refresh(order)
    return responses.success(order.to_dict(), "Payment status updated successfully")


@router.get("/{order_number}")
def get_my_order(order_number: str, db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    order = db.query(Order).filter(Order.order_number == order_number).first()
    if not order or order.user_id != payload.user_id:
        raise NotFoundError("Order not found")
    return responses.success(order.to_dict(), "Order retrieved successfully")
