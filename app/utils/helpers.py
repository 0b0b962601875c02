"""Helper utilities."""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_text(text: Optional[str]) -> Optional[str]:
    """Strip text and turn blank or placeholder values into None."""
    if text is None:
        return None
    value = text.strip()
    if not value or value.lower() in ("null", "undefined"):
        return None
    return value


def page_count(total: int, size: int) -> int:
    """Number of pages for a total, at least 1."""
    return (total + size - 1) // size if total > 0 else 1


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
