"""Field-keyed input validation used ahead of the query layer."""

from __future__ import annotations

from collections.abc import Hashable, Iterable

from cinemesis.core.errors import FailedValidationError


class Validator:
    """Collect field-level error messages.

    Only the first message recorded for a field is kept, so checks should be
    ordered from the most basic to the most specific.
    """

    def __init__(self) -> None:
        self.errors: dict[str, str] = {}

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        self.errors.setdefault(key, message)

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)

    def raise_if_invalid(self) -> None:
        """Raise FailedValidationError carrying every recorded message."""
        if self.errors:
            raise FailedValidationError(self.errors)


def permitted_value(value: Hashable, permitted: Iterable[Hashable]) -> bool:
    return value in set(permitted)


def unique(values: Iterable[Hashable]) -> bool:
    seen: set[Hashable] = set()
    for value in values:
        if value in seen:
            return False
        seen.add(value)
    return True
