"""
Loguru sink configuration
"""
import sys

from loguru import logger

from storefront.config import settings

_configured = False


def setup_logging(level: str = None, log_file: str = None) -> None:
    """Install the console sink and, optionally, a rotating file sink. Runs once."""
    global _configured
    if _configured:
        return

    logger.remove()
    logger.add(
        sys.stderr,
        level=level or settings.log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name} | {message}",
    )

    log_file = log_file or settings.log_file
    if log_file:
        logger.add(
            log_file,
            level=level or settings.log_level,
            mode="a",
            format="{time} | {level} | {message}",
            rotation="5 MB",
            retention="7 days",
        )

    _configured = True
