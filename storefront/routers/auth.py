"""
Authentication routes: email/password accounts and Google sign-in
"""
from typing import Optional

import jwt
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from loguru import logger
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.dependencies import get_current_user
from storefront.models.user import User
from storefront.schemas.auth import EmailRequest, LoginRequest, RegisterRequest, ResetPasswordRequest, TokenRequest
from storefront.services import auth_service
from storefront.services.email_service import EmailService, get_email_service
from storefront.services.google_oauth import GoogleAuthError, GoogleOAuthClient, get_google_client, upsert_google_user
from storefront.utils import responses
from storefront.utils.database import get_db
from storefront.utils.errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError

router = APIRouter(prefix="/auth", tags=["auth"])

FORGOT_PASSWORD_MESSAGE = "If an account exists, a password reset email has been sent"


def _token_for(user: User) -> str:
    return auth_service.generate_access_token(user.id, user.email, user.role)


def _check_password(password: str) -> None:
    valid, message = auth_service.validate_password(password)
    if not valid:
        raise BadRequestError(message or "Invalid password")


@router.post("/register")
def register(
    body: RegisterRequest,
    db: Session = Depends(get_db),
    mailer: EmailService = Depends(get_email_service),
):
    if not body.email or not body.password:
        raise BadRequestError("Email and password are required")
    if not auth_service.validate_email(body.email):
        raise BadRequestError("Invalid email format")
    _check_password(body.password)

    email = body.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("User with this email already exists")

    verification_token = auth_service.generate_email_verification_token()
    user = User(
        email=email,
        password_hash=auth_service.hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        email_verification_token=verification_token,
        is_email_verified=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    try:
        mailer.send_verification_email(user.email, verification_token)
    except Exception as e:
        # The account exists either way
        logger.error(f"Failed to send verification email: {e}")

    return responses.success(
        {
            "user": user.to_dict(),
            "token": _token_for(user),
            "message": "Registration successful! Please check your email to verify your account.",
        },
        "User registered successfully",
        201,
    )


@router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    if not body.email or not body.password:
        raise BadRequestError("Email and password are required")

    user = db.query(User).filter(User.email == body.email.lower()).first()
    if not user or not user.password_hash:
        raise UnauthorizedError("Invalid email or password")
    if not auth_service.verify_password(body.password, user.password_hash):
        raise UnauthorizedError("Invalid email or password")

    data = user.to_dict()
    data.pop("created_at")
    return responses.success({"user": data, "token": _token_for(user)}, "Login successful")


@router.post("/verify-email")
def verify_email(
    body: TokenRequest,
    db: Session = Depends(get_db),
    mailer: EmailService = Depends(get_email_service),
):
    if not body.token:
        raise BadRequestError("Verification token is required")

    user = db.query(User).filter(User.email_verification_token == body.token).first()
    if not user:
        raise BadRequestError("Invalid or expired verification token")
    if user.is_email_verified:
        raise BadRequestError("Email is already verified")

    user.is_email_verified = True
    user.email_verification_token = None
    db.commit()

    try:
        mailer.send_welcome_email(user.email, user.first_name)
    except Exception as e:
        logger.error(f"Failed to send welcome email: {e}")

    return responses.success(None, "Email verified successfully! You can now place orders.")


@router.post("/resend-verification")
def resend_verification(
    body: EmailRequest,
    db: Session = Depends(get_db),
    mailer: EmailService = Depends(get_email_service),
):
    if not body.email:
        raise BadRequestError("Email is required")

    user = db.query(User).filter(User.email == body.email.lower()).first()
    if not user:
        raise NotFoundError("User not found")
    if user.is_email_verified:
        raise BadRequestError("Email is already verified")

    user.email_verification_token = auth_service.generate_email_verification_token()
    db.commit()

    mailer.send_verification_email(user.email, user.email_verification_token)
    return responses.success(None, "Verification email sent successfully")


@router.post("/forgot-password")
def forgot_password(
    body: EmailRequest,
    db: Session = Depends(get_db),
    mailer: EmailService = Depends(get_email_service),
):
    if not body.email:
        raise BadRequestError("Email is required")

    # Same answer whether or not the account exists
    user = db.query(User).filter(User.email == body.email.lower()).first()
    if not user:
        return responses.success(None, FORGOT_PASSWORD_MESSAGE)

    user.password_reset_token = auth_service.generate_password_reset_token()
    user.password_reset_expiry = auth_service.get_password_reset_expiry()
    db.commit()

    mailer.send_password_reset_email(user.email, user.password_reset_token)
    return responses.success(None, FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password")
def reset_password(body: ResetPasswordRequest, db: Session = Depends(get_db)):
    if not body.token or not body.new_password:
        raise BadRequestError("Token and new password are required")
    _check_password(body.new_password)

    user = db.query(User).filter(User.password_reset_token == body.token).first()
    if not user:
        raise BadRequestError("Invalid or expired reset token")
    if auth_service.is_password_reset_expired(user.password_reset_expiry):
        raise BadRequestError("Reset token has expired")

    user.password_hash = auth_service.hash_password(body.new_password)
    user.password_reset_token = None
    user.password_reset_expiry = None
    db.commit()

    return responses.success(None, "Password reset successful! You can now login with your new password.")


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return responses.success(user.to_dict(include_updated=True), "User retrieved successfully")


@router.get("/google")
def google_login(client: GoogleOAuthClient = Depends(get_google_client)):
    if not client.configured:
        raise BadRequestError("Google sign-in is not configured")
    return RedirectResponse(client.build_authorization_url(), status_code=302)


@router.get("/google/callback")
def google_callback(
    code: Optional[str] = None,
    db: Session = Depends(get_db),
    client: GoogleOAuthClient = Depends(get_google_client),
):
    failure = RedirectResponse("/api/auth/google/failure", status_code=302)
    if not code:
        return failure

    try:
        profile = client.fetch_profile(client.exchange_code(code))
    except GoogleAuthError as e:
        logger.warning(f"Google authentication failed: {e}")
        return failure

    user = upsert_google_user(db, profile)
    return RedirectResponse(f"{settings.client_url}/auth/google/success?token={_token_for(user)}", status_code=302)


@router.get("/google/failure")
def google_failure():
    raise UnauthorizedError("Google authentication failed")


@router.get("/google/success")
def google_success(token: Optional[str] = None, db: Session = Depends(get_db)):
    if not token:
        raise BadRequestError("Token is required")

    try:
        payload = auth_service.decode_access_token(token)
    except (jwt.PyJWTError, KeyError, ValueError):
        raise UnauthorizedError("Invalid or expired token. Please login again.")

    user = db.query(User).filter(User.id == payload.user_id).first()
    if not user:
        raise UnauthorizedError("User not found")

    return responses.success({"user": user.to_dict(), "token": token}, "Google authentication successful")
