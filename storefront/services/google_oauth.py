"""
Google OAuth 2.0 sign-in (authorization code flow) using requests
"""
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import requests
from loguru import logger
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.models.user import ROLE_CUSTOMER, User

AUTHORIZATION_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
USERINFO_ENDPOINT = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = "openid email profile"
REQUEST_TIMEOUT = 10


class GoogleAuthError(Exception):
    pass


@dataclass
class GoogleProfile:
    google_id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class GoogleOAuthClient:
    def __init__(self, config=settings, http=requests):
        self.config = config
        self.http = http

    @property
    def configured(self) -> bool:
        return bool(self.config.google_client_id and self.config.google_client_secret)

    def build_authorization_url(self) -> str:
        params = {
            "client_id": self.config.google_client_id,
            "redirect_uri": self.config.google_callback_url,
            "response_type": "code",
            "scope": SCOPES,
            "access_type": "online",
            "prompt": "select_account",
        }
        return f"{AUTHORIZATION_ENDPOINT}?{urlencode(params)}"

    def exchange_code(self, code: str) -> str:
        """Trade the authorization code for an access token"""
        try:
            response = self.http.post(
                TOKEN_ENDPOINT,
                data={
                    "code": code,
                    "client_id": self.config.google_client_id,
                    "client_secret": self.config.google_client_secret,
                    "redirect_uri": self.config.google_callback_url,
                    "grant_type": "authorization_code",
                },
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise GoogleAuthError(f"Token exchange failed: {e}") from e

        if response.status_code != 200:
            raise GoogleAuthError(f"Token exchange failed: {response.status_code} - {response.text}")

        access_token = response.json().get("access_token")
        if not access_token:
            raise GoogleAuthError("Token exchange returned no access token")
        return access_token

    def fetch_profile(self, access_token: str) -> GoogleProfile:
        try:
            response = self.http.get(
                USERINFO_ENDPOINT,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise GoogleAuthError(f"Profile request failed: {e}") from e

        if response.status_code != 200:
            raise GoogleAuthError(f"Profile request failed: {response.status_code} - {response.text}")

        info = response.json()
        if not info.get("email"):
            raise GoogleAuthError("No email found in Google profile")

        return GoogleProfile(
            google_id=str(info.get("sub")),
            email=info["email"],
            first_name=info.get("given_name"),
            last_name=info.get("family_name"),
        )


def upsert_google_user(db: Session, profile: GoogleProfile) -> User:
    """
    Link a Google profile to a user.
    Existing accounts (matched by email) get the Google id and a verified
    email; missing names are filled in. Unknown emails become new verified
    customers.
    """
    email = profile.email.lower()
    user = db.query(User).filter(User.email == email).first()

    if user:
        user.google_id = profile.google_id
        user.is_email_verified = True
        user.first_name = user.first_name or profile.first_name
        user.last_name = user.last_name or profile.last_name
    else:
        user = User(
            email=email,
            google_id=profile.google_id,
            first_name=profile.first_name,
            last_name=profile.last_name,
            is_email_verified=True,
            role=ROLE_CUSTOMER,
        )
        db.add(user)

    db.commit()
    db.refresh(user)
    logger.info(f"Google sign-in for user {user.id} ({user.email})")
    return user


google_client = GoogleOAuthClient()


def get_google_client() -> GoogleOAuthClient:
    return google_client
