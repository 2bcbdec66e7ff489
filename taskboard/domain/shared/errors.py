"""Error taxonomy for lifecycle operations.

Errors are carried inside ``Err`` results rather than raised. They are still
``Exception`` subclasses so interface adapters can re-raise or log them with
their usual tooling.
"""


class DomainError(Exception):
    """Base class for every expected lifecycle failure."""

    code = "domain_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.message == other.message  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self.message))


class NotFoundError(DomainError):
    """An entity ID does not exist in its collection."""

    code = "not_found"


class ReadOnlyError(DomainError):
    """A mutation targeted an ON_HOLD/COMPLETED project or one of its tasks."""

    code = "read_only"


class ValidationError(DomainError):
    """A creation payload or patch is malformed."""

    code = "validation_error"


class AuthorizationError(DomainError):
    """The caller is neither an admin nor the owner of the entity."""

    code = "forbidden"


class StorageError(DomainError):
    """The entity store refused a write."""

    code = "storage_error"
