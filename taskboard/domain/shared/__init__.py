"""Shared domain building blocks.

- Result monad for explicit error handling
- Error taxonomy carried by ``Err`` results
- Clock, ID and timestamp helpers

Example usage:
    >>> from taskboard.domain.shared import Err, NotFoundError
    >>> Err(NotFoundError("Project not found: proj-9"))
"""

from taskboard.domain.shared.errors import (
    AuthorizationError,
    DomainError,
    NotFoundError,
    ReadOnlyError,
    StorageError,
    ValidationError,
)
from taskboard.domain.shared.result import (
    Err,
    Ok,
    Result,
    flat_map,
    is_err,
    is_ok,
    map_result,
)
from taskboard.domain.shared.clock import (
    Clock,
    UtcDateTime,
    as_utc,
    day_key,
    days_between,
    new_id,
    utc_now,
)

__all__ = [
    # Result monad
    "Ok",
    "Err",
    "Result",
    "is_ok",
    "is_err",
    "map_result",
    "flat_map",
    # Errors
    "DomainError",
    "NotFoundError",
    "ReadOnlyError",
    "ValidationError",
    "AuthorizationError",
    "StorageError",
    # Time and identity
    "Clock",
    "UtcDateTime",
    "as_utc",
    "day_key",
    "days_between",
    "new_id",
    "utc_now",
]
