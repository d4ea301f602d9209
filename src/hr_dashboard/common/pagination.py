from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, List, TypeVar

from ..core.constants import MAX_PAGE_SIZE
from ..core.exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class Pagination:
    current_page: int
    total_pages: int
    total_count: int
    page_size: int

    def to_dict(self) -> dict:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "totalCount": self.total_count,
            "pageSize": self.page_size,
        }


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    pagination: Pagination = field(default_factory=lambda: Pagination(1, 0, 0, 10))


def page_bounds(page: int, page_size: int) -> tuple[int, int]:
    """Return (offset, limit) for a 1-based page."""
    page = int(page)
    page_size = int(page_size)
    if page < 1:
        raise ValidationError("Page must be 1 or greater")
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise ValidationError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")
    return (page - 1) * page_size, page_size


def build_page(items: List[T], *, page: int, page_size: int, total_count: int) -> Page[T]:
    total_pages = math.ceil(total_count / page_size) if page_size else 0
    return Page(
        items=list(items),
        pagination=Pagination(
            current_page=int(page),
            total_pages=total_pages,
            total_count=int(total_count),
            page_size=int(page_size),
        ),
    )
