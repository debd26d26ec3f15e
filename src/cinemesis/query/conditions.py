"""Immutable accumulator of parameterized SQL fragments.

Every ``add_*``, ``where`` and ``join`` call returns a new :class:`Conditions`
instead of mutating the receiver, so one request can never observe fragments
added by another. Placeholders are named ``:p1``, ``:p2``, ... and numbered from the
running argument count at the moment a fragment is appended, which keeps the
Nth placeholder bound to the Nth argument no matter the order of calls.

Column and table names passed in here are trusted identifiers chosen by the
filter modules. Client values only ever travel through ``args``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any

PLACEHOLDER_PREFIX = "p"


def placeholder(index: int) -> str:
    """Return the bind marker for the 1-based argument ``index``."""
    return f":{PLACEHOLDER_PREFIX}{index}"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True)
class Conditions:
    """JOIN and WHERE fragments plus their bound arguments, in emission order."""

    joins: tuple[str, ...] = ()
    predicates: tuple[str, ...] = ()
    args: tuple[Any, ...] = ()

    @property
    def arg_count(self) -> int:
        return len(self.args)

    def _markers(self, count: int) -> list[str]:
        start = self.arg_count + 1
        return [placeholder(index) for index in range(start, start + count)]

    def where(self, template: str, *values: Any) -> Conditions:
        """Append a predicate whose ``{}`` slots are filled with fresh placeholders."""
        rendered = template.format(*self._markers(len(values)))
        return replace(
            self,
            predicates=(*self.predicates, rendered),
            args=(*self.args, *values),
        )

    def join(self, template: str, *values: Any) -> Conditions:
        """Append a JOIN clause; its arguments share the same placeholder sequence."""
        rendered = template.format(*self._markers(len(values)))
        return replace(
            self,
            joins=(*self.joins, rendered),
            args=(*self.args, *values),
        )

    def add_text_search(self, column: str, term: str | None) -> Conditions:
        """Case-insensitive substring match; an empty term adds nothing."""
        if not term:
            return self
        pattern = f"%{escape_like(term.lower())}%"
        return self.where(f"lower({column}) LIKE {{}} ESCAPE '\\'", pattern)

    def add_membership(
        self,
        subject_column: str,
        *,
        association_table: str,
        association_subject: str,
        association_member: str,
        member_ids: Iterable[int],
    ) -> Conditions:
        """Require the subject to be associated with every id in ``member_ids``.

        Containment is checked by counting the subject's distinct matching
        associations and comparing against the size of the requested set.
        """
        ids = sorted(set(member_ids))
        if not ids:
            return self
        id_slots = ", ".join(["{}"] * len(ids))
        template = (
            f"{subject_column} IN ("
            f"SELECT {association_subject} FROM {association_table} "
            f"WHERE {association_member} IN ({id_slots}) "
            f"GROUP BY {association_subject} "
            f"HAVING COUNT(DISTINCT {association_member}) = {{}})"
        )
        return self.where(template, *ids, len(ids))

    def add_range(self, column: str, minimum: Any = None, maximum: Any = None) -> Conditions:
        """Bound ``column`` from either side; a missing or zero bound is open."""
        conditions = self
        if minimum:
            conditions = conditions.where(f"{column} >= {{}}", minimum)
        if maximum:
            conditions = conditions.where(f"{column} <= {{}}", maximum)
        return conditions

    def add_equality(self, column: str, value: Any = None) -> Conditions:
        if not value:
            return self
        return self.where(f"{column} = {{}}", value)
