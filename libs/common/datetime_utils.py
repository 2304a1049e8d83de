"""Timezone-aware UTC timestamps for model defaults and lifecycle stamps.

Usage:
    from libs.common.datetime_utils import utc_now

    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    order.paid_at = utc_now()
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
