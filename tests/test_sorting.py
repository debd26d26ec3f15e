# tests/test_sorting.py
"""Tests for sort key resolution."""

import pytest

from cinemesis.core.errors import CinemesisError
from cinemesis.query.sorting import ResolvedSort, UnsafeSortError, resolve_sort, sort_field

SAFELIST = ("id", "title", "-id", "-title")
COLUMNS = {"id": "m.id", "title": "m.title"}


def test_ascending_key() -> None:
    assert resolve_sort("title", SAFELIST, COLUMNS) == ResolvedSort("m.title", "ASC")


def test_descending_marker() -> None:
    resolved = resolve_sort("-id", SAFELIST, COLUMNS)
    assert resolved.direction == "DESC"
    assert resolved.clause == "m.id DESC"


def test_sort_field_strips_marker() -> None:
    assert sort_field("-runtime") == "runtime"
    assert sort_field("runtime") == "runtime"


@pytest.mark.parametrize("key", ["year", "-year", "title; DROP TABLE movies", "", "--id"])
def test_unlisted_key_is_a_defect(key: str) -> None:
    with pytest.raises(UnsafeSortError):
        resolve_sort(key, SAFELIST, COLUMNS)


def test_listed_key_without_column_is_a_defect() -> None:
    with pytest.raises(UnsafeSortError, match="no column mapped"):
        resolve_sort("title", SAFELIST, {"id": "m.id"})


def test_defect_is_not_a_recoverable_error() -> None:
    assert not issubclass(UnsafeSortError, CinemesisError)
