"""Query-string readers and validation shared by every list filter."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import re
from datetime import date, datetime
from typing import ClassVar

from cinemesis.core.validator import Validator, permitted_value
from cinemesis.query.pagination import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE,
    MAX_PAGE_SIZE,
    PageRequest,
)

QueryString = Mapping[str, str]

DATE_FORMAT = "%Y-%m-%d"

_INTEGER = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class PageFilters:
    """Paging and sorting fields every collection filter carries."""

    sort_safelist: ClassVar[tuple[str, ...]] = ()
    default_sort: ClassVar[str] = "id"

    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    sort: str = ""

    @property
    def page_request(self) -> PageRequest:
        return PageRequest(page=self.page, page_size=self.page_size)


def validate_page_filters(v: Validator, filters: PageFilters) -> None:
    v.check(filters.page > 0, "page", "must be greater than zero")
    v.check(filters.page <= MAX_PAGE, "page", "must be a maximum of 10 million")
    v.check(filters.page_size > 0, "page_size", "must be greater than zero")
    v.check(filters.page_size <= MAX_PAGE_SIZE, "page_size", "must be a maximum of 100")
    v.check(
        permitted_value(filters.sort, filters.sort_safelist),
        "sort",
        "invalid sort value",
    )


def read_string(qs: QueryString, key: str, default: str = "") -> str:
    value = qs.get(key, "")
    return value if value != "" else default


def read_csv(qs: QueryString, key: str) -> tuple[str, ...]:
    """Split a comma-separated parameter, dropping blank items."""
    raw = qs.get(key, "")
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def read_int(qs: QueryString, key: str, default: int, v: Validator) -> int:
    """Read an integer parameter, recording an error when it does not parse."""
    raw = qs.get(key, "")
    if raw == "":
        return default
    if not _INTEGER.fullmatch(raw):
        v.add_error(key, "must be an integer value")
        return default
    return int(raw)


def read_date(qs: QueryString, key: str, v: Validator) -> date | None:
    """Read a YYYY-MM-DD parameter, recording an error when it does not parse."""
    raw = qs.get(key, "")
    if raw == "":
        return None
    try:
        return datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError:
        v.add_error(key, "must be a date in YYYY-MM-DD format")
        return None
