from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Union

import pandas as pd

from core.data import frame_records


PAGE_SIZE_SUMMARY = 10
PAGE_SIZE_FULL = 15

Rows = Union[pd.DataFrame, Sequence[Any]]


def total_pages_for(length: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(length / page_size) if length > 0 else 0


def clamp_page(page: int, total_pages: int) -> int:
    """Clamp a requested 1-based page; 0 means there are no pages."""
    if total_pages <= 0:
        return 0
    return max(1, min(int(page), total_pages))


@dataclass(frozen=True)
class Page:
    items: Rows
    page: int
    total_pages: int
    page_size: int
    total_items: int

    @property
    def start_index(self) -> int:
        return (self.page - 1) * self.page_size if self.page > 0 else 0

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return 0 < self.page < self.total_pages

    @property
    def empty(self) -> bool:
        return self.total_items == 0

    def rows(self) -> List[Dict[str, Any]]:
        """Page rows as dicts, each numbered with its 1-based position in the full list."""
        if isinstance(self.items, pd.DataFrame):
            records = frame_records(self.items)
        else:
            records = [dict(r) if isinstance(r, dict) else {"value": r} for r in self.items]
        return [{"no": self.start_index + i + 1, **r} for i, r in enumerate(records)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "total_pages": self.total_pages,
            "page_size": self.page_size,
            "total_items": self.total_items,
            "has_prev": self.has_prev,
            "has_next": self.has_next,
            "rows": self.rows(),
        }


def paginate(items: Rows, page: int, page_size: int) -> Page:
    """Slice ``items`` to the requested page, clamping the page into range.

    The returned ``Page.page`` is the page actually served; callers store it
    back into their view state.
    """
    length = len(items)
    total_pages = total_pages_for(length, page_size)
    current = clamp_page(page, total_pages)
    if current == 0:
        chunk = items.iloc[0:0] if isinstance(items, pd.DataFrame) else list(items[0:0])
    else:
        start = (current - 1) * page_size
        stop = start + page_size
        chunk = items.iloc[start:stop] if isinstance(items, pd.DataFrame) else list(items[start:stop])
    return Page(items=chunk, page=current, total_pages=total_pages, page_size=page_size, total_items=length)
