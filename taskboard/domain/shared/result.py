"""Result monad used by every lifecycle operation.

Lifecycle managers never raise for expected failures (unknown IDs, read-only
projects, bad payloads). They return ``Ok(value)`` or ``Err(error)`` so that
callers can render the reason inline without a crash boundary.

Example usage:
    >>> result = service.set_status("proj-1", ProjectStatus.ON_HOLD, "user-1")
    >>> if is_ok(result):
    ...     print(result.value.status)
    ... else:
    ...     print(f"Rejected: {result.error}")
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying ``value``."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome carrying ``error``."""

    error: E

    @property
    def ok(self) -> bool:
        return False


# Using Union here as TypeVar aliases don't work with | syntax at runtime
Result = Union[Ok[T], Err[E]]  # noqa: UP007


def is_ok(result: Ok[T] | Err[E]) -> bool:
    """Return True if the result is an ``Ok``."""
    return isinstance(result, Ok)


def is_err(result: Ok[T] | Err[E]) -> bool:
    """Return True if the result is an ``Err``."""
    return isinstance(result, Err)


def map_result(result: Ok[T] | Err[E], fn: Callable[[T], U]) -> Ok[U] | Err[E]:
    """Transform the value of an ``Ok``; pass an ``Err`` through untouched."""
    if isinstance(result, Ok):
        return Ok(fn(result.value))
    return result


def flat_map(result: Ok[T] | Err[E], fn: Callable[[T], Ok[U] | Err[E]]) -> Ok[U] | Err[E]:
    """Chain a fallible step after a successful one.

    Args:
        result: The result to chain from.
        fn: Step that receives the Ok value and returns its own Result.

    Returns:
        The step's Result, or the original Err.
    """
    if isinstance(result, Ok):
        return fn(result.value)
    return result

