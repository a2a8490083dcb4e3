"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    Use this for every timestamp written to the database.
    """
    return datetime.now(timezone.utc)


def display_date(value: Optional[datetime] = None) -> str:
    """Human-readable date for customer-facing copy, e.g. ``Oct 19, 2026``."""
    value = value or utc_now()
    return value.strftime("%b %d, %Y")
