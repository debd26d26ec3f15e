"""Review list filters: parsing, validation and query construction."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import ClassVar

from sqlalchemy import Boolean, DateTime

from cinemesis.core.validator import Validator
from cinemesis.filters.common import (
    PageFilters,
    QueryString,
    read_date,
    read_int,
    read_string,
    validate_page_filters,
)
from cinemesis.query import Conditions, QueryPlan, assemble_query, resolve_sort

MIN_RATING = 1
MAX_RATING = 10

REVIEW_COLUMNS = (
    "r.id",
    "r.user_id",
    "r.movie_id",
    "r.text",
    "r.rating",
    "r.upvotes",
    "r.downvotes",
    "r.created_at",
    "r.edited",
    "u.name AS user_name",
    "(r.upvotes + r.downvotes) AS total_votes",
)

SORT_COLUMNS = {
    "id": "r.id",
    "created_at": "r.created_at",
    "rating": "r.rating",
    "upvotes": "r.upvotes",
    "downvotes": "r.downvotes",
    "total_votes": "(r.upvotes + r.downvotes)",
}


@dataclass(frozen=True)
class ReviewFilters(PageFilters):
    """Constraints a client may place on a review list.

    ``movie_id`` and ``user_id`` come from the route, not the query string.
    """

    sort_safelist: ClassVar[tuple[str, ...]] = (
        "id", "created_at", "rating", "upvotes", "downvotes", "total_votes",
        "-id", "-created_at", "-rating", "-upvotes", "-downvotes", "-total_votes",
    )
    default_sort: ClassVar[str] = "-created_at"

    sort: str = "-created_at"
    min_rating: int = 0
    max_rating: int = 0
    min_upvotes: int = 0
    date_from: date | None = None
    date_to: date | None = None
    movie_id: int = 0
    user_id: int = 0


def parse_review_filters(
    qs: QueryString,
    v: Validator,
    *,
    movie_id: int = 0,
    user_id: int = 0,
) -> ReviewFilters:
    """Read review filters from a query string, recording malformed values on ``v``."""
    return ReviewFilters(
        page=read_int(qs, "page", 1, v),
        page_size=read_int(qs, "page_size", 20, v),
        sort=read_string(qs, "sort", ReviewFilters.default_sort),
        min_rating=read_int(qs, "min_rating", 0, v),
        max_rating=read_int(qs, "max_rating", 0, v),
        min_upvotes=read_int(qs, "min_upvotes", 0, v),
        date_from=read_date(qs, "date_from", v),
        date_to=read_date(qs, "date_to", v),
        movie_id=movie_id,
        user_id=user_id,
    )


def validate_review_filters(v: Validator, filters: ReviewFilters) -> None:
    validate_page_filters(v, filters)

    v.check(
        filters.min_rating == 0 or MIN_RATING <= filters.min_rating <= MAX_RATING,
        "min_rating",
        "must be between 1 and 10",
    )
    v.check(
        filters.max_rating == 0 or MIN_RATING <= filters.max_rating <= MAX_RATING,
        "max_rating",
        "must be between 1 and 10",
    )
    v.check(
        filters.min_rating == 0
        or filters.max_rating == 0
        or filters.min_rating <= filters.max_rating,
        "max_rating",
        "must be greater than min_rating",
    )
    v.check(filters.min_upvotes >= 0, "min_upvotes", "must be greater than or equal to zero")
    v.check(
        filters.date_from is None
        or filters.date_to is None
        or filters.date_from <= filters.date_to,
        "date_to",
        "must not be earlier than date_from",
    )


def _day_bounds(filters: ReviewFilters) -> tuple[datetime | None, datetime | None]:
    start = datetime.combine(filters.date_from, time.min) if filters.date_from else None
    end = datetime.combine(filters.date_to, time.max) if filters.date_to else None
    return start, end


def build_review_query(filters: ReviewFilters, viewer_id: int | None = None) -> QueryPlan:
    """Build the page query for ``filters``.

    When ``viewer_id`` is given each row's ``user_vote`` holds that user's
    own vote on the review, otherwise 0.
    """
    conditions = Conditions()
    columns = list(REVIEW_COLUMNS)
    if viewer_id:
        conditions = conditions.join(
            "LEFT JOIN review_votes rv ON rv.review_id = r.id AND rv.user_id = {}",
            viewer_id,
        )
        columns.append("COALESCE(rv.vote, 0) AS user_vote")
    else:
        columns.append("0 AS user_vote")

    date_from, date_to = _day_bounds(filters)
    conditions = (
        conditions
        .add_equality("r.movie_id", filters.movie_id)
        .add_equality("r.user_id", filters.user_id)
        .add_range("r.rating", filters.min_rating, filters.max_rating)
        .add_range("r.upvotes", filters.min_upvotes)
        .add_range("r.created_at", date_from, date_to)
    )
    return assemble_query(
        columns=columns,
        source="reviews r\nJOIN users u ON u.id = r.user_id",
        conditions=conditions,
        sort=resolve_sort(filters.sort, ReviewFilters.sort_safelist, SORT_COLUMNS),
        tiebreaker="r.id",
        page=filters.page_request,
        result_types={"created_at": DateTime(), "edited": Boolean()},
    )
