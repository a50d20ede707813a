"""UTC datetime utilities."""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def due_date_from(start: datetime, delivery_days: int) -> datetime:
    """Deadline for an order placed at ``start`` with ``delivery_days`` to deliver."""
    return start + timedelta(days=delivery_days)


def isoformat_or_none(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
