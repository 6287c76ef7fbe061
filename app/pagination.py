from __future__ import annotations

import math
from typing import Any, Generic, Iterable, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
PAGE_SIZE_OPTIONS: tuple[int, ...] = (5, 10, 20, 50, 100)


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return value


class Paginator(Generic[T]):
    """
    Page-by-page view over an ordered, immutable list.

    The current page always stays within [1, max(1, total_pages)]; a page size
    change goes back to page 1. start_index/end_index are 1-indexed and only
    meant for display ("Showing 11-20 of 23").
    """

    def __init__(
        self,
        items: Iterable[T],
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        page: int = 1,
        page_size_options: Sequence[int] = PAGE_SIZE_OPTIONS,
    ) -> None:
        self._items: tuple[T, ...] = tuple(items)
        self._page_size = _positive_int(page_size, "page_size")
        self.page_size_options: tuple[int, ...] = tuple(page_size_options)
        self._page = 1
        self.set_page(page)

    # -----------------------
    # state
    # -----------------------
    @property
    def total_items(self) -> int:
        return len(self._items)

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self._page_size)

    @property
    def current_page(self) -> int:
        return self._page

    @property
    def _offset(self) -> int:
        return (self._page - 1) * self._page_size

    @property
    def start_index(self) -> int:
        if not self.total_items:
            return 0
        return self._offset + 1

    @property
    def end_index(self) -> int:
        return min(self._offset + self._page_size, self.total_items)

    @property
    def page_items(self) -> list[T]:
        start = self._offset
        return list(self._items[start : start + self._page_size])

    @property
    def can_go_next(self) -> bool:
        return self._page < self.total_pages

    @property
    def can_go_prev(self) -> bool:
        return self._page > 1

    # -----------------------
    # navigation
    # -----------------------
    def set_page(self, page: int) -> None:
        page = int(page)
        self._page = max(1, min(page, max(1, self.total_pages)))

    def set_page_size(self, size: int) -> None:
        self._page_size = _positive_int(size, "page_size")
        self._page = 1

    def next_page(self) -> None:
        if self.can_go_next:
            self._page += 1

    def prev_page(self) -> None:
        if self.can_go_prev:
            self._page -= 1

    def first_page(self) -> None:
        self._page = 1

    def last_page(self) -> None:
        self._page = max(1, self.total_pages)

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_page": self.current_page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "total_items": self.total_items,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "can_go_next": self.can_go_next,
            "can_go_prev": self.can_go_prev,
        }
