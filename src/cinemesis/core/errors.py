"""Runtime error taxonomy shared by repositories, services and the API layer."""

from __future__ import annotations

from collections.abc import Mapping


class CinemesisError(RuntimeError):
    """Base class for recoverable application errors."""


class RecordNotFoundError(CinemesisError):
    """Raised when a lookup by identifier matches no row."""


class EditConflictError(CinemesisError):
    """Raised when an optimistic version check fails during an update."""


class PermissionDeniedError(CinemesisError):
    """Raised when the caller may not modify the requested record."""


class StorageError(CinemesisError):
    """Raised when the database fails in a way the caller cannot act on.

    The original exception is chained as ``__cause__``; its text is never
    shown to clients.
    """


class FailedValidationError(CinemesisError):
    """Raised when client input fails field-level validation."""

    def __init__(self, errors: Mapping[str, str]) -> None:
        super().__init__("failed validation")
        self.errors = dict(errors)
