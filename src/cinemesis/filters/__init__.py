"""Collection-specific list filters parsed from query strings."""

from .movies import MovieFilters, build_movie_query, parse_movie_filters
from .reviews import ReviewFilters, build_review_query, parse_review_filters

__all__ = [
    "MovieFilters",
    "ReviewFilters",
    "build_movie_query",
    "build_review_query",
    "parse_movie_filters",
    "parse_review_filters",
]
