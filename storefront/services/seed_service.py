"""
Startup seeding
"""
from loguru import logger
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.models.user import ROLE_ADMIN, User
from storefront.services.auth_service import hash_password


def create_admin_user(db: Session, config=settings) -> User:
    """Create the admin account from ADMIN_* settings unless it already exists"""
    logger.info("Checking for admin user...")
    existing = db.query(User).filter(User.email == config.admin_email).first()
    if existing:
        logger.info("Admin user already exists")
        return existing

    admin = User(
        email=config.admin_email,
        password_hash=hash_password(config.admin_password),
        first_name=config.admin_first_name,
        last_name=config.admin_last_name,
        role=ROLE_ADMIN,
        is_email_verified=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info(f"Admin user created: {admin.email}")
    return admin


def run_seed(db: Session) -> None:
    try:
        create_admin_user(db)
    except Exception:
        db.rollback()
        logger.exception("Seed process failed")
        raise
