"""Clock helpers; every stored timestamp is naive UTC."""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Return the current UTC time without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """Format a naive UTC datetime like ``2024-05-01T09:30:00.000Z``."""
    moment = moment or utcnow()
    return moment.isoformat(timespec="milliseconds") + "Z"
