"""
Shared service utilities.

Provides database commit safety and email normalization. Used across
the service modules.
"""

import logging
from typing import Type, Optional

from novaplayer.models.db import db

logger = logging.getLogger(__name__)


def safe_commit(
    operation_name: str,
    exception_class: Type[Exception] = Exception,
) -> None:
    """
    Commit the current database session with rollback on failure.

    Args:
        operation_name: Human-readable description of the operation
            (used in log messages and exception text).
        exception_class: The exception class to raise on failure.

    Raises:
        The specified exception_class with a message describing
        the failure.
    """
    try:
        db.session.commit()
        logger.info("Success: %s", operation_name)
    except Exception as e:
        db.session.rollback()
        logger.error(
            "Failed to %s: %s",
            operation_name,
            e,
            exc_info=True,
        )
        raise exception_class(
            f"Failed to {operation_name}: {e}"
        )


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Emails are matched case-insensitively and stored lowercased."""
    if email is None:
        return None
    return email.strip().lower()
