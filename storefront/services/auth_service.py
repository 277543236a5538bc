"""
Password hashing, JWT issuing/verification and credential checks
"""
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

import bcrypt
import jwt

from storefront.config import settings
from storefront.utils import tokens

JWT_ALGORITHM = "HS256"
MIN_PASSWORD_LENGTH = 6
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass
class TokenPayload:
    user_id: int
    email: str
    role: str


def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def generate_access_token(user_id: int, email: str, role: str) -> str:
    expires_at = datetime.now(timezone.utc) + tokens.parse_duration(settings.jwt_expires_in)
    payload = {"user_id": user_id, "email": email, "role": role, "exp": expires_at}
    return jwt.encode(payload, settings.effective_jwt_secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> TokenPayload:
    """
    Raises jwt.PyJWTError (expired signature, bad signature, malformed token)
    or KeyError when the claims are incomplete.
    """
    decoded = jwt.decode(token, settings.effective_jwt_secret, algorithms=[JWT_ALGORITHM])
    return TokenPayload(user_id=int(decoded["user_id"]), email=decoded["email"], role=decoded["role"])


def generate_email_verification_token() -> str:
    return tokens.generate_token(32)


def generate_password_reset_token() -> str:
    return tokens.generate_token(32)


def get_password_reset_expiry() -> datetime:
    return tokens.get_token_expiry(settings.password_reset_token_expiry)


def is_password_reset_expired(expiry: Optional[datetime]) -> bool:
    return expiry is None or tokens.is_token_expired(expiry)


def validate_password(password: str) -> Tuple[bool, Optional[str]]:
    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    return True, None


def validate_email(email: str) -> bool:
    return bool(_EMAIL_PATTERN.match(email))
