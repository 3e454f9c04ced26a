"""Timestamp helpers shared by the document models."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, the form MongoDB returns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
