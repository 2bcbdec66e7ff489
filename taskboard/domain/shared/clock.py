"""Time and identity helpers shared by every aggregate.

All timestamps inside the domain are timezone-aware UTC datetimes. Naive
values coming from storage or user input are interpreted as UTC.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Annotated
from uuid import uuid4

from pydantic import AfterValidator

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current UTC time."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime, or convert an aware one to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]


def day_key(value: datetime) -> str:
    """Return the UTC calendar day of ``value`` as ``YYYY-MM-DD``."""
    return as_utc(value).date().isoformat()


def days_between(start: datetime, end: datetime) -> int:
    """Count calendar days from ``start`` to ``end`` (negative if end is earlier).

    Both instants are reduced to their UTC calendar day first, so 23:59 and
    00:01 on the following day are one day apart.
    """
    return (as_utc(end).date() - as_utc(start).date()).days


def new_id(prefix: str) -> str:
    """Generate an opaque identifier such as ``proj-3f9c1a2b7d4e``."""
    return f"{prefix}-{uuid4().hex[:12]}"
