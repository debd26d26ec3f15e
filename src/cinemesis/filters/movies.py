"""Movie list filters: parsing, validation and query construction."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import ClassVar

from sqlalchemy import DateTime

from cinemesis.core.validator import Validator
from cinemesis.filters.common import (
    PageFilters,
    QueryString,
    read_csv,
    read_int,
    read_string,
    validate_page_filters,
)
from cinemesis.query import Conditions, QueryPlan, assemble_query, resolve_sort

EARLIEST_YEAR = 1888
MAX_RUNTIME = 1000

MOVIE_COLUMNS = (
    "m.id",
    "m.created_at",
    "m.updated_at",
    "m.title",
    "m.year",
    "m.runtime",
    "m.version",
)

SORT_COLUMNS = {
    "id": "m.id",
    "title": "m.title",
    "year": "m.year",
    "runtime": "m.runtime",
}


@dataclass(frozen=True)
class MovieFilters(PageFilters):
    """Constraints a client may place on the movie list."""

    sort_safelist: ClassVar[tuple[str, ...]] = (
        "id", "title", "year", "runtime",
        "-id", "-title", "-year", "-runtime",
    )
    default_sort: ClassVar[str] = "id"

    sort: str = "id"
    title: str = ""
    genres: tuple[str, ...] = ()
    min_year: int = 0
    max_year: int = 0
    min_runtime: int = 0
    max_runtime: int = 0


def parse_movie_filters(qs: QueryString, v: Validator) -> MovieFilters:
    """Read movie filters from a query string, recording malformed values on ``v``."""
    return MovieFilters(
        page=read_int(qs, "page", 1, v),
        page_size=read_int(qs, "page_size", 20, v),
        sort=read_string(qs, "sort", MovieFilters.default_sort),
        title=read_string(qs, "title").strip(),
        genres=read_csv(qs, "genres"),
        min_year=read_int(qs, "min_year", 0, v),
        max_year=read_int(qs, "max_year", 0, v),
        min_runtime=read_int(qs, "min_runtime", 0, v),
        max_runtime=read_int(qs, "max_runtime", 0, v),
    )


def validate_movie_filters(v: Validator, filters: MovieFilters) -> None:
    validate_page_filters(v, filters)

    latest_year = date.today().year + 10
    v.check(
        filters.min_year == 0 or filters.min_year >= EARLIEST_YEAR,
        "min_year",
        f"must be greater than {EARLIEST_YEAR}",
    )
    v.check(
        filters.max_year == 0 or filters.max_year <= latest_year,
        "max_year",
        "must not be too far in the future",
    )
    v.check(
        filters.min_year == 0 or filters.max_year == 0 or filters.min_year <= filters.max_year,
        "max_year",
        "must be greater than min_year",
    )

    v.check(filters.min_runtime >= 0, "min_runtime", "must be greater than zero")
    v.check(
        filters.max_runtime == 0 or 0 < filters.max_runtime <= MAX_RUNTIME,
        "max_runtime",
        "must be a maximum of 1000 minutes",
    )
    v.check(
        filters.min_runtime == 0
        or filters.max_runtime == 0
        or filters.min_runtime <= filters.max_runtime,
        "max_runtime",
        "must be greater than min_runtime",
    )


def build_movie_query(filters: MovieFilters, genre_ids: Iterable[int] = ()) -> QueryPlan:
    """Build the page query for ``filters``.

    ``genre_ids`` are the resolved ids of ``filters.genres``; a movie must
    carry all of them to match.
    """
    conditions = (
        Conditions()
        .add_text_search("m.title", filters.title)
        .add_membership(
            "m.id",
            association_table="movies_genres",
            association_subject="movie_id",
            association_member="genre_id",
            member_ids=genre_ids,
        )
        .add_range("m.year", filters.min_year, filters.max_year)
        .add_range("m.runtime", filters.min_runtime, filters.max_runtime)
    )
    return assemble_query(
        columns=MOVIE_COLUMNS,
        source="movies m",
        conditions=conditions,
        sort=resolve_sort(filters.sort, MovieFilters.sort_safelist, SORT_COLUMNS),
        tiebreaker="m.id",
        page=filters.page_request,
        result_types={"created_at": DateTime(), "updated_at": DateTime()},
    )
