"""
Application settings loaded from environment variables (.env supported)
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

DEV_JWT_SECRET = "dev-secret-change-me"


def _get_bool(key: str, default: bool = False) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _get_list(key: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(key, default).split(",") if item.strip()]


@dataclass
class Settings:
    """Runtime configuration for the storefront API"""
    app_name: str = "Storefront API"
    app_version: str = "1.0.0"
    environment: str = "development"
    port: int = 5000
    database_url: str = "sqlite:///./storefront.db"
    client_url: str = "http://localhost:3000"
    allowed_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])

    jwt_secret: Optional[str] = None
    jwt_expires_in: str = "7d"
    password_reset_token_expiry: str = "1h"

    email_host: Optional[str] = None
    email_port: int = 587
    email_user: Optional[str] = None
    email_password: Optional[str] = None
    email_from: str = "noreply@dailydose.local"
    email_use_tls: bool = True

    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    google_callback_url: str = "http://localhost:5000/api/auth/google/callback"

    admin_email: str = "admin@dailydose.local"
    admin_password: str = "admin123"
    admin_first_name: str = "Admin"
    admin_last_name: str = "User"

    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Shipping (Rs)
    shipping_inside_valley: int = 100
    shipping_outside_valley: int = 200
    free_shipping_threshold: int = 2000

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def effective_jwt_secret(self) -> str:
        return self.jwt_secret or DEV_JWT_SECRET

    @classmethod
    def from_env(cls) -> "Settings":
        client_url = os.getenv("CLIENT_URL", "http://localhost:3000")
        return cls(
            app_name=os.getenv("APP_NAME", "Storefront API"),
            app_version=os.getenv("APP_VERSION", "1.0.0"),
            environment=os.getenv("ENVIRONMENT", "development"),
            port=int(os.getenv("PORT", "5000")),
            database_url=os.getenv("DATABASE_URL", "sqlite:///./storefront.db"),
            client_url=client_url,
            allowed_origins=_get_list("ALLOWED_ORIGINS", client_url),
            jwt_secret=os.getenv("JWT_SECRET") or None,
            jwt_expires_in=os.getenv("JWT_EXPIRES_IN", "7d"),
            password_reset_token_expiry=os.getenv("PASSWORD_RESET_TOKEN_EXPIRY", "1h"),
            email_host=os.getenv("EMAIL_HOST") or None,
            email_port=int(os.getenv("EMAIL_PORT", "587")),
            email_user=os.getenv("EMAIL_USER") or None,
            email_password=os.getenv("EMAIL_PASSWORD") or None,
            email_from=os.getenv("EMAIL_FROM", "noreply@dailydose.local"),
            email_use_tls=_get_bool("EMAIL_USE_TLS", True),
            google_client_id=os.getenv("GOOGLE_CLIENT_ID") or None,
            google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET") or None,
            google_callback_url=os.getenv(
                "GOOGLE_CALLBACK_URL", "http://localhost:5000/api/auth/google/callback"
            ),
            admin_email=os.getenv("ADMIN_EMAIL", "admin@dailydose.local").lower(),
            admin_password=os.getenv("ADMIN_PASSWORD", "admin123"),
            admin_first_name=os.getenv("ADMIN_FIRST_NAME", "Admin"),
            admin_last_name=os.getenv("ADMIN_LAST_NAME", "User"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("LOG_FILE") or None,
            shipping_inside_valley=int(os.getenv("SHIPPING_INSIDE_VALLEY", "100")),
            shipping_outside_valley=int(os.getenv("SHIPPING_OUTSIDE_VALLEY", "200")),
            free_shipping_threshold=int(os.getenv("FREE_SHIPPING_THRESHOLD", "2000")),
        )


settings = Settings.from_env()


def validate_settings(current: Settings = settings) -> None:
    """Fail fast on settings the app cannot run without"""
    if current.is_production and not current.jwt_secret:
        raise RuntimeError("JWT_SECRET is required in production")

    if not current.jwt_secret:
        logger.warning("JWT_SECRET not set, using the development secret")

    logger.info(f"Environment: {current.environment}")
    logger.info(f"Port: {current.port}")
