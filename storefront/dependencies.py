"""
Authentication dependencies for routers
"""
from typing import Optional

import jwt
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from storefront.models.user import ROLE_ADMIN, User
from storefront.services.auth_service import TokenPayload, decode_access_token
from storefront.utils.database import get_db
from storefront.utils.errors import ForbiddenError, UnauthorizedError


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer "):].strip() or None


def get_current_payload(authorization: Optional[str] = Header(None)) -> TokenPayload:
    token = _bearer_token(authorization)
    if not token:
        raise UnauthorizedError("No token provided. Please login.")
    try:
        return decode_access_token(token)
    except (jwt.PyJWTError, KeyError, ValueError):
        raise UnauthorizedError("Invalid or expired token. Please login again.")


def get_optional_payload(authorization: Optional[str] = Header(None)) -> Optional[TokenPayload]:
    """Like get_current_payload but anonymous (or badly authenticated) callers get None"""
    token = _bearer_token(authorization)
    if not token:
        return None
    try:
        return decode_access_token(token)
    except (jwt.PyJWTError, KeyError, ValueError):
        return None


def require_admin(payload: TokenPayload = Depends(get_current_payload)) -> TokenPayload:
    if payload.role != ROLE_ADMIN:
        raise ForbiddenError("Access denied. Admin privileges required.")
    return payload


def get_current_user(payload: TokenPayload = Depends(get_current_payload), db: Session = Depends(get_db)) -> User:
    user = db.query(User).filter(User.id == payload.user_id).first()
    if not user:
        raise UnauthorizedError("User not found")
    return user
