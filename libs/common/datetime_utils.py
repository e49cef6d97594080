"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    invitation.expires_at = utc_now() + timedelta(days=7)
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    This replaces the deprecated datetime.utcnow() which returns naive datetimes.
    Always use this for timestamps written to the document store.
    """
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare against utc_now()."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
