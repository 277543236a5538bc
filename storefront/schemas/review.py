from typing import List, Optional

from pydantic import BaseModel


class ReviewCreate(BaseModel):
    product_id: Optional[int] = None
    rating: Optional[int] = None
    title: Optional[str] = None
    comment: Optional[str] = None
    images: Optional[List[str]] = None


class ReviewUpdate(BaseModel):
    rating: Optional[int] = None
    title: Optional[str] = None
    comment: Optional[str] = None
    images: Optional[List[str]] = None


class ReviewModerate(BaseModel):
    is_approved: Optional[bool] = None
    admin_note: Optional[str] = None
