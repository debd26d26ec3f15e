"""Page window arithmetic and response metadata."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class PageRequest:
    """1-based page number and page size."""

    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def limit(self) -> int:
        return self.page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class PaginationMetadata(BaseModel):
    """Paging summary returned next to every list response."""

    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0


def calculate_metadata(total_records: int, page: int, page_size: int) -> PaginationMetadata:
    """Return paging metadata; every field is zero when nothing matched."""
    if total_records == 0:
        return PaginationMetadata()
    return PaginationMetadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=(total_records + page_size - 1) // page_size,
        total_records=total_records,
    )
