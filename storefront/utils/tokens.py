"""
Random tokens for email verification / password reset, and duration parsing
"""
import re
import secrets
from datetime import datetime, timedelta

from loguru import logger

from storefront.utils.dates import utcnow

_DURATION = re.compile(r"^\s*(\d+)\s*([smhdw])\s*$")
_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days", "w": "weeks"}


def generate_token(length: int = 32) -> str:
    """Hex token made of ``length`` random bytes"""
    return secrets.token_hex(length)


def parse_duration(duration: str) -> timedelta:
    """
    Parse strings such as "30m", "1h", "24h", "7d" or "2w".
    Anything unparseable falls back to one hour, with a warning.
    """
    match = _DURATION.match(duration or "")
    if not match:
        logger.warning(f"Unrecognised duration {duration!r}, using 1h")
        return timedelta(hours=1)
    value, unit = match.groups()
    return timedelta(**{_UNITS[unit]: int(value)})


def get_token_expiry(duration: str) -> datetime:
    return utcnow() + parse_duration(duration)


def is_token_expired(expiry: datetime) -> bool:
    return utcnow() > expiry
