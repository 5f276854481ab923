from __future__ import annotations

import logging
import math
from typing import NamedTuple, Optional, Sequence, TypeVar

from tracelens.explore.schemas.explore import PagerConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PagePos(NamedTuple):
    start: int
    end: int


class Pager:
    """Tracks the current page over a collection of ``num_item`` items.

    ``page`` and ``per_page`` are driven by the caller. ``num_item`` is pushed
    by the explorer whenever the filtered collection changes. The pager never
    moves ``page`` on its own: a page past the end simply yields an empty
    slice.
    """

    def __init__(self, cfg: Optional[PagerConfig] = None):
        cfg = cfg or PagerConfig()
        _check_page(cfg.page)
        _check_per_page(cfg.per_page)

        self._page = cfg.page
        self._per_page = cfg.per_page
        self._num_item = 0
        self._version = 0

    @property
    def version(self) -> int:
        """Bumped on every page or page size change."""
        return self._version

    @property
    def page(self) -> int:
        return self._page

    @page.setter
    def page(self, value: int) -> None:
        _check_page(value)
        if value != self._page:
            self._page = value
            self._version += 1

    @property
    def per_page(self) -> int:
        return self._per_page

    @per_page.setter
    def per_page(self, value: int) -> None:
        _check_per_page(value)
        if value != self._per_page:
            self._per_page = value
            self._version += 1

    @property
    def num_item(self) -> int:
        return self._num_item

    def set_count(self, n: int) -> None:
        if n < 0:
            raise ValueError(f"item count must be >= 0, got {n}")
        if n != self._num_item:
            logger.debug("Pager item count %d -> %d", self._num_item, n)
        self._num_item = n

    @property
    def num_page(self) -> int:
        return math.ceil(self._num_item / self._per_page)

    @property
    def has_prev(self) -> bool:
        return self._page > 1

    @property
    def has_next(self) -> bool:
        return self._page < self.num_page

    def prev(self) -> None:
        if self.has_prev:
            self.page = min(self._page - 1, max(self.num_page, 1))

    def next(self) -> None:
        if self.has_next:
            self.page = self._page + 1

    @property
    def pos(self) -> PagePos:
        start = min((self._page - 1) * self._per_page, self._num_item)
        end = min(start + self._per_page, self._num_item)
        return PagePos(start, end)

    def page_slice(self, seq: Sequence[T]) -> Sequence[T]:
        start, end = self.pos
        return seq[start:end]

    def __repr__(self) -> str:
        return (
            f"Pager(page={self._page}, per_page={self._per_page}, "
            f"num_item={self._num_item})"
        )


def _check_page(page: int) -> None:
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")


def _check_per_page(per_page: int) -> None:
    if per_page <= 0:
        raise ValueError(f"per_page must be > 0, got {per_page}")
