"""Helpers shared by the application services."""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from taskboard.domain.shared.errors import StorageError, ValidationError
from taskboard.domain.shared.result import Err, Ok, Result

P = TypeVar("P", bound=BaseModel)
T = TypeVar("T")


def parse_payload(model: type[P], payload: P | Mapping[str, Any] | None) -> Result[P, ValidationError]:
    """Validate a caller payload into ``model``.

    Accepts an instance of the model as-is. Pydantic errors are flattened
    into one readable ``ValidationError`` message.
    """
    if isinstance(payload, model):
        return Ok(payload)
    if payload is None:
        return Err(ValidationError("Payload is required"))
    try:
        return Ok(model.model_validate(dict(payload)))
    except PydanticValidationError as e:
        return Err(ValidationError(describe_validation_error(e)))
    except (TypeError, ValueError) as e:
        return Err(ValidationError(f"Malformed payload: {e}"))


def describe_validation_error(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "payload"
        message = item.get("msg", "invalid value").removeprefix("Value error, ")
        parts.append(f"{location}: {message}")
    return "; ".join(parts)


def saved(write: Result[None, str], value: T) -> Result[T, StorageError]:
    """Return ``Ok(value)`` if the store write succeeded."""
    if isinstance(write, Err):
        return Err(StorageError(write.error))
    return Ok(value)
