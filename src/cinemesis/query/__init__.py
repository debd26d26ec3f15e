"""Filtered, sorted and paginated query construction."""

from .assembler import QueryPage, QueryPlan, assemble_query, fetch_page
from .conditions import Conditions
from .pagination import PageRequest, PaginationMetadata, calculate_metadata
from .sorting import ResolvedSort, UnsafeSortError, resolve_sort

__all__ = [
    "Conditions",
    "PageRequest",
    "PaginationMetadata",
    "QueryPage",
    "QueryPlan",
    "ResolvedSort",
    "UnsafeSortError",
    "assemble_query",
    "calculate_metadata",
    "fetch_page",
    "resolve_sort",
]
