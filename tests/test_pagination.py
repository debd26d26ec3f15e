# tests/test_pagination.py
"""Tests for page window arithmetic and metadata."""

import pytest

from cinemesis.query.pagination import PageRequest, PaginationMetadata, calculate_metadata


@pytest.mark.parametrize(
    ("page", "page_size", "offset"),
    [(1, 20, 0), (2, 20, 20), (5, 7, 28), (10_000_000, 100, 999_999_900)],
)
def test_offset(page: int, page_size: int, offset: int) -> None:
    request = PageRequest(page=page, page_size=page_size)
    assert request.offset == offset
    assert request.limit == page_size


def test_no_records_yields_zero_metadata() -> None:
    metadata = calculate_metadata(0, 3, 20)
    assert metadata == PaginationMetadata()
    assert metadata.model_dump() == {
        "current_page": 0,
        "page_size": 0,
        "first_page": 0,
        "last_page": 0,
        "total_records": 0,
    }


def test_single_page() -> None:
    assert calculate_metadata(5, 1, 20).model_dump() == {
        "current_page": 1,
        "page_size": 20,
        "first_page": 1,
        "last_page": 1,
        "total_records": 5,
    }


@pytest.mark.parametrize(("total", "page_size", "last"), [(40, 20, 2), (41, 20, 3), (1, 1, 1)])
def test_last_page_rounds_up(total: int, page_size: int, last: int) -> None:
    assert calculate_metadata(total, 1, page_size).last_page == last
