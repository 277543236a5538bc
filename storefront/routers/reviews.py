"""
Product review routes: public listing, customer reviews, helpful votes and moderation
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.dependencies import get_current_payload, get_optional_payload, require_admin
from storefront.models.order import ORDER_DELIVERED, Order, OrderItem
from storefront.models.product import Product
from storefront.models.review import Review, ReviewHelpful
from storefront.schemas.review import ReviewCreate, ReviewModerate, ReviewUpdate
from storefront.services.auth_service import TokenPayload
from storefront.utils import responses
from storefront.utils.database import get_db
from storefront.utils.errors import BadRequestError, ConflictError, NotFoundError

router = APIRouter(prefix="/reviews", tags=["reviews"])

SORT_FIELDS = ("created_at", "rating", "helpful_count")


def _check_rating(rating: int) -> None:
    if rating < 1 or rating > 5:
        raise BadRequestError("Rating must be between 1 and 5")


def _get_or_404(db: Session, review_id: int) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise NotFoundError("Review not found")
    return review


def _own_or_404(db: Session, review_id: int, user_id: int) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review or review.user_id != user_id:
        raise NotFoundError("Review not found")
    return review


def _with_people(review: Review, with_email: bool = True) -> dict:
    data = review.to_dict()
    data["user"] = review.user.to_summary(with_email=with_email) if review.user else None
    data["product"] = {"id": review.product.id, "name": review.product.name} if review.product else None
    return data


def _delivered_order_with(db: Session, user_id: int, product_id: int) -> Optional[Order]:
    return (
        db.query(Order)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .filter(Order.user_id == user_id, Order.status == ORDER_DELIVERED, OrderItem.product_id == product_id)
        .order_by(Order.id.asc())
        .first()
    )


@router.get("/product/{product_id}")
def product_reviews(
    product_id: int,
    rating: Optional[int] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    db: Session = Depends(get_db),
    payload: Optional[TokenPayload] = Depends(get_optional_payload),
):
    if sort_by not in SORT_FIELDS:
        raise BadRequestError(f"sort_by must be one of: {', '.join(SORT_FIELDS)}")

    approved = db.query(Review).filter(Review.product_id == product_id, Review.is_approved.is_(True))
    query = approved.filter(Review.rating == rating) if rating else approved

    column = getattr(Review, sort_by)
    ordering = column.asc() if sort_order == "asc" else column.desc()
    reviews = query.order_by(ordering, Review.id.desc()).all()

    voted = set()
    if payload:
        voted = {
            review_id
            for (review_id,) in db.query(ReviewHelpful.review_id).filter(ReviewHelpful.user_id == payload.user_id)
        }

    items = []
    for review in reviews:
        data = review.to_dict()
        data["user"] = review.user.to_summary(with_email=False) if review.user else None
        data["has_voted"] = review.id in voted
        items.append(data)

    ratings = [r for (r,) in approved.with_entities(Review.rating).all()]
    distribution = {star: ratings.count(star) for star in (5, 4, 3, 2, 1)}
    average = round(sum(ratings) / len(ratings), 1) if ratings else 0

    return responses.success(
        {
            "reviews": items,
            "summary": {
                "average_rating": average,
                "total_reviews": len(ratings),
                "rating_distribution": distribution,
            },
        },
        "Reviews retrieved successfully",
    )


@router.post("")
def create_review(body: ReviewCreate, db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    if not body.product_id or not body.rating or body.comment is None:
        raise BadRequestError("Product ID, rating, and comment are required")
    _check_rating(body.rating)
    if not body.comment.strip():
        raise BadRequestError("Comment cannot be empty")

    if not db.query(Product).filter(Product.id == body.product_id).first():
        raise NotFoundError("Product not found")

    existing = (
        db.query(Review)
        .filter(Review.product_id == body.product_id, Review.user_id == payload.user_id)
        .first()
    )
    if existing:
        raise ConflictError("You have already reviewed this product")

    order = _delivered_order_with(db, payload.user_id, body.product_id)
    review = Review(
        product_id=body.product_id,
        user_id=payload.user_id,
        order_id=order.id if order else None,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
        images=body.images,
        is_verified_purchase=order is not None,
        is_approved=True,
    )
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("You have already reviewed this product")

    db.refresh(review)
    return responses.success(_with_people(review), "Review submitted successfully.", 201)


@router.get("/my-reviews")
def my_reviews(db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    reviews = (
        db.query(Review)
        .filter(Review.user_id == payload.user_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )
    items = []
    for review in reviews:
        data = review.to_dict()
        data["product"] = review.product.to_card() if review.product else None
        items.append(data)
    return responses.success(items, "Reviews retrieved successfully")


# Admin listing is declared before /{review_id} routes

@router.get("/admin/all")
def all_reviews(
    is_approved: Optional[bool] = None,
    rating: Optional[int] = None,
    page: int = 1,
    limit: int = 20,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    page = max(page, 1)
    limit = max(limit, 1)

    query = db.query(Review)
    if is_approved is not None:
        query = query.filter(Review.is_approved == is_approved)
    if rating:
        query = query.filter(Review.rating == rating)

    total = query.count()
    reviews = (
        query.order_by(Review.created_at.desc(), Review.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return responses.success(
        responses.paginated([_with_people(r) for r in reviews], page, limit, total),
        "Reviews retrieved successfully",
    )


@router.delete("/admin/{review_id}")
def admin_delete_review(review_id: int, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    review = _get_or_404(db, review_id)
    db.delete(review)
    db.commit()
    return responses.success(None, "Review deleted successfully")


@router.put("/{review_id}")
def update_review(
    review_id: int,
    body: ReviewUpdate,
    db: Session = Depends(get_db),
    payload: TokenPayload = Depends(get_current_payload),
):
    review = _own_or_404(db, review_id, payload.user_id)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("rating") is not None:
        _check_rating(changes["rating"])
    if "comment" in changes and (changes["comment"] is None or not changes["comment"].strip()):
        raise BadRequestError("Comment cannot be empty")

    if changes.get("rating") is not None:
        review.rating = changes["rating"]
    if "title" in changes:
        review.title = changes["title"]
    if "comment" in changes:
        review.comment = changes["comment"]
    if "images" in changes:
        review.images = changes["images"] or None

    db.commit()
    db.refresh(review)
    return responses.success(_with_people(review), "Review updated successfully.")


@router.delete("/{review_id}")
def delete_review(review_id: int, db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    review = _own_or_404(db, review_id, payload.user_id)
    db.delete(review)
    db.commit()
    return responses.success(None, "Review deleted successfully")


@router.post("/{review_id}/helpful")
def mark_helpful(review_id: int, db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    _get_or_404(db, review_id)

    vote = (
        db.query(ReviewHelpful)
        .filter(ReviewHelpful.review_id == review_id, ReviewHelpful.user_id == payload.user_id)
        .first()
    )
    if vote:
        raise ConflictError("You have already marked this review as helpful")

    try:
        db.add(ReviewHelpful(review_id=review_id, user_id=payload.user_id))
        db.flush()
        db.query(Review).filter(Review.id == review_id).update(
            {Review.helpful_count: Review.helpful_count + 1}, synchronize_session=False
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("You have already marked this review as helpful")
    except Exception:
        db.rollback()
        raise

    return responses.success(None, "Review marked as helpful successfully")


@router.delete("/{review_id}/helpful")
def remove_helpful(review_id: int, db: Session = Depends(get_db), payload: TokenPayload = Depends(get_current_payload)):
    vote = (
        db.query(ReviewHelpful)
        .filter(ReviewHelpful.review_id == review_id, ReviewHelpful.user_id == payload.user_id)
        .first()
    )
    if not vote:
        raise NotFoundError("Helpful vote not found")

    try:
        db.delete(vote)
        db.query(Review).filter(Review.id == review_id, Review.helpful_count > 0).update(
            {Review.helpful_count: Review.helpful_count - 1}, synchronize_session=False
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    return responses.success(None, "Helpful vote removed successfully")


@router.patch("/{review_id}/moderate")
def moderate_review(
    review_id: int,
    body: ReviewModerate,
    db: Session = Depends(get_db),
    _admin=Depends(require_admin),
):
    if body.is_approved is None:
        raise BadRequestError("is_approved field is required")

    review = _get_or_404(db, review_id)
    review.is_approved = body.is_approved
    review.admin_note = body.admin_note
    db.commit()
    db.refresh(review)

    verdict = "approved" if body.is_approved else "rejected"
    return responses.success(_with_people(review), f"Review {verdict} successfully")
