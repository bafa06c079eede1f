"""
Logging configuration helpers.
"""
import logging
from typing import Optional

from .settings import Settings, get_settings

_LOGGING_CONFIGURED = False


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure process-wide logging from settings."""
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    _LOGGING_CONFIGURED = True
