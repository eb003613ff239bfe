"""
Logging setup (loguru)

Usage:
    from src.core.logger import logger
    logger.info("Applicant created: {}", applicant_id)
"""

from __future__ import annotations

import sys

from loguru import logger

from src.config.settings import config

_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with a single stderr sink. Safe to call repeatedly."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or config.log_level),
        format=_LOG_FORMAT,
        backtrace=not config.is_production,
        diagnose=config.is_development,
        enqueue=False,
    )


def mask_email(email: str | None) -> str:
    """foo.bar@example.com -> foo***@***.com"""
    if not email:
        return "(empty)"
    if "@" not in email:
        return email[:3] + "***"
    local, domain = email.rsplit("@", 1)
    masked_local = local[:3] + "***" if len(local) > 3 else local
    parts = domain.rsplit(".", 1)
    suffix = f".{parts[-1]}" if len(parts) > 1 else ""
    return f"{masked_local}@***{suffix}"


setup_logging()


__all__ = ["logger", "setup_logging", "mask_email"]
