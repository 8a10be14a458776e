# app/services/pagination.py
#
# Pagination Helpers
# Slices an already-built transaction list into fixed-size pages for the
# recent transactions table. Pages are views, recomputed on every request.

import math
from dataclasses import dataclass
from typing import Any, List, Sequence

# Rows per page in the transactions table
PAGE_SIZE = 10


@dataclass(frozen=True)
class Page:
    items: List[Any]
    number: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages


def parse_page(raw: Any) -> int:
    """
    Turn a raw ?page= query value into a 1-based page number.

    Missing, non-numeric, or < 1 values fall back to page 1.
    """
    if raw is None:
        return 1
    try:
        page = int(str(raw).strip())
    except ValueError:
        return 1
    return page if page >= 1 else 1


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size!r}")
    return math.ceil(count / page_size) if count > 0 else 0


def paginate(items: Sequence[Any], page: int, page_size: int = PAGE_SIZE) -> List[Any]:
    """
    Return items [(page-1)*page_size, page*page_size), clipped to the list.

    A page beyond the end (or below 1) is an empty list, never an error.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size!r}")
    if page < 1:
        return []

    start = (page - 1) * page_size
    return list(items[start:start + page_size])


def get_page(items: Sequence[Any], page: int, page_size: int = PAGE_SIZE) -> Page:
    return Page(
        items=paginate(items, page, page_size),
        number=page,
        total_pages=total_pages(len(items), page_size),
    )
