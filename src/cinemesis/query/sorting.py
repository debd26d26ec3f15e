"""Translate client sort keys into trusted ORDER BY terms."""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass
from typing import Literal

DESCENDING_MARKER = "-"

Direction = Literal["ASC", "DESC"]


class UnsafeSortError(Exception):
    """A sort key that never passed validation reached the resolver.

    This signals a bug in the calling code rather than bad client input, so
    it deliberately does not derive from ``CinemesisError`` and is not
    mapped to a client-facing response.
    """


@dataclass(frozen=True)
class ResolvedSort:
    """Column expression and direction safe to interpolate into SQL text."""

    column: str
    direction: Direction

    @property
    def clause(self) -> str:
        return f"{self.column} {self.direction}"


def sort_field(sort: str) -> str:
    """Strip the descending marker from a sort key."""
    return sort.removeprefix(DESCENDING_MARKER)


def resolve_sort(
    sort: str,
    safelist: Collection[str],
    columns: Mapping[str, str],
) -> ResolvedSort:
    """Resolve ``sort`` against ``safelist`` and map it onto a column.

    Args:
        sort: Client sort key, e.g. ``"title"`` or ``"-year"``.
        safelist: Every permitted key including its ``-`` variants.
        columns: Bare key to SQL column expression.

    Raises:
        UnsafeSortError: If ``sort`` is not on the safelist or has no column mapping.
    """
    if sort not in safelist:
        raise UnsafeSortError(f"unsafe sort parameter: {sort!r}")
    field = sort_field(sort)
    try:
        column = columns[field]
    except KeyError as err:
        raise UnsafeSortError(f"no column mapped for sort parameter: {sort!r}") from err
    direction: Direction = "DESC" if sort.startswith(DESCENDING_MARKER) else "ASC"
    return ResolvedSort(column=column, direction=direction)
