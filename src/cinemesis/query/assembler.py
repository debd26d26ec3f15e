"""Assemble and run a filtered, sorted, paginated SELECT in one round trip."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import TextClause, bindparam, text
from sqlalchemy.orm import Session
from sqlalchemy.sql.selectable import TextualSelect
from sqlalchemy.types import TypeEngine

from cinemesis.query.conditions import PLACEHOLDER_PREFIX, Conditions, placeholder
from cinemesis.query.pagination import PageRequest
from cinemesis.query.sorting import ResolvedSort

logger = logging.getLogger(__name__)

TOTAL_COLUMN = "total_records"


@dataclass(frozen=True)
class QueryPlan:
    """Final SQL text and its positional arguments."""

    sql: str
    args: tuple[Any, ...]
    result_types: Mapping[str, TypeEngine[Any]] = field(default_factory=dict)

    @property
    def params(self) -> dict[str, Any]:
        """Arguments keyed by placeholder name (``p1``, ``p2``, ...)."""
        return {f"{PLACEHOLDER_PREFIX}{index}": value for index, value in enumerate(self.args, 1)}

    def statement(self) -> TextClause | TextualSelect:
        """Return an executable ``text()`` construct with typed bound values."""
        stmt = text(self.sql).bindparams(
            *(bindparam(name, value) for name, value in self.params.items())
        )
        if self.result_types:
            return stmt.columns(**self.result_types)
        return stmt


@dataclass(frozen=True)
class QueryPage:
    """Rows of one page plus the total number of matches across all pages."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    total_records: int = 0


def assemble_query(
    *,
    columns: Sequence[str],
    source: str,
    conditions: Conditions,
    sort: ResolvedSort,
    tiebreaker: str,
    page: PageRequest,
    result_types: Mapping[str, TypeEngine[Any]] | None = None,
) -> QueryPlan:
    """Combine conditions, sort and page window into a single query.

    Args:
        columns: Projected column expressions; a windowed total count is prepended.
        source: Trusted FROM clause, including fixed joins.
        conditions: Accumulated JOIN/WHERE fragments and their arguments.
        sort: Sort already resolved against a safelist.
        tiebreaker: Unique column appended to ORDER BY for stable paging.
        page: Page number and size.
        result_types: Types for result columns the driver returns untyped.

    Returns:
        The query text and its ordered argument list.
    """
    parts = [
        f"SELECT count(*) OVER() AS {TOTAL_COLUMN}, {', '.join(columns)}",
        f"FROM {source}",
    ]
    parts.extend(conditions.joins)
    if conditions.predicates:
        parts.append("WHERE " + " AND ".join(conditions.predicates))
    parts.append(f"ORDER BY {sort.clause}, {tiebreaker} ASC")

    limit_index = conditions.arg_count + 1
    parts.append(f"LIMIT {placeholder(limit_index)} OFFSET {placeholder(limit_index + 1)}")

    return QueryPlan(
        sql="\n".join(parts),
        args=(*conditions.args, page.limit, page.offset),
        result_types=dict(result_types or {}),
    )


def fetch_page(session: Session, plan: QueryPlan) -> QueryPage:
    """Execute ``plan`` and split the windowed total off each row.

    Database errors propagate unchanged.
    """
    logger.debug("Running page query with %d arguments:\n%s", len(plan.args), plan.sql)
    result = session.execute(plan.statement()).mappings().all()
    if not result:
        return QueryPage()

    total = int(result[0][TOTAL_COLUMN])
    rows = [{key: value for key, value in row.items() if key != TOTAL_COLUMN} for row in result]
    return QueryPage(rows=rows, total_records=total)
