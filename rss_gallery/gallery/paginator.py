"""Page slicing, navigation and width-driven page sizing."""

import asyncio
import logging
import math
from collections.abc import AsyncIterable, Callable
from dataclasses import dataclass
from typing import Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CardLayout:
    """Card grid geometry and the two page-size tiers it maps to."""

    card_width: int = 296
    gap: int = 16
    wide_columns: int = 4
    wide_page_size: int = 8
    narrow_page_size: int = 6
    hysteresis: float = 8  # px a width must cross past a tier boundary to switch


def total_pages(count: int, page_size: int) -> int:
    """Number of pages needed for ``count`` items."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(count / page_size)


def slice_page(items: Sequence[T], page: int, page_size: int) -> list[T]:
    """Return the items on a 1-based page, empty when past the last page."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    start = max(page - 1, 0) * page_size
    return list(items[start : start + page_size])


def columns_for_width(width: float, layout: CardLayout) -> int:
    return math.floor((width + layout.gap) / (layout.card_width + layout.gap))


def page_size_for_width(width: float, layout: CardLayout | None = None) -> int:
    """Pick the page size tier for a measured container width."""
    layout = layout or CardLayout()
    if columns_for_width(width, layout) >= layout.wide_columns:
        return layout.wide_page_size
    return layout.narrow_page_size


class Paginator:
    """Current page over an immutable item sequence.

    ``next()`` and ``previous()`` stop at the last and first page. Changing
    the page size clamps the current page into the new range.
    """

    def __init__(self, items: Sequence[T], page_size: int, current_page: int = 1):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.items = tuple(items)
        self.page_size = page_size
        self.current_page = max(current_page, 1)

    @property
    def total_pages(self) -> int:
        return total_pages(len(self.items), self.page_size)

    @property
    def displayed(self) -> list[T]:
        return slice_page(self.items, self.current_page, self.page_size)

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    def previous(self) -> int:
        if self.has_previous:
            self.current_page -= 1
        return self.current_page

    def next(self) -> int:
        if self.has_next:
            self.current_page += 1
        return self.current_page

    def go_to(self, page: int) -> int:
        self.current_page = min(max(page, 1), max(self.total_pages, 1))
        return self.current_page

    def set_page_size(self, page_size: int) -> bool:
        """Apply a new page size; returns False when nothing changed."""
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        if page_size == self.page_size:
            return False
        self.page_size = page_size
        self.go_to(self.current_page)
        return True

    def replace_items(self, items: Sequence[T]) -> None:
        self.items = tuple(items)
        self.go_to(self.current_page)


class LayoutMonitor:
    """Debounced subscriber to container width measurements.

    Each ``report()`` restarts the debounce timer; when it fires the latest
    width is mapped to a page size and ``on_page_size`` is called only if the
    tier differs from the last one emitted. Once a tier is chosen the width
    is biased towards it by ``layout.hysteresis`` pixels, so measurement noise
    around a boundary keeps the current page size. Must be used from a running
    event loop.
    """

    def __init__(
        self,
        on_page_size: Callable[[int], None],
        layout: CardLayout | None = None,
        debounce: float = 0.15,
        logger: logging.Logger | None = None,
    ):
        self.on_page_size = on_page_size
        self.layout = layout or CardLayout()
        self.debounce = debounce
        self.logger = logger or logging.getLogger(__name__)
        self.page_size: int | None = None
        self._latest_width: float | None = None
        self._timer: asyncio.TimerHandle | None = None

    def report(self, width: float) -> None:
        self._latest_width = width
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce, self._apply)

    def flush(self) -> None:
        """Apply a pending measurement immediately."""
        if self._timer is not None:
            self._timer.cancel()
            self._apply()

    def _apply(self) -> None:
        self._timer = None
        if self._latest_width is None:
            return
        width = self._latest_width
        if self.page_size == self.layout.wide_page_size:
            width += self.layout.hysteresis
        elif self.page_size == self.layout.narrow_page_size:
            width -= self.layout.hysteresis
        page_size = page_size_for_width(width, self.layout)
        if page_size == self.page_size:
            return
        self.logger.debug(
            f"Container width {self._latest_width} -> {page_size} items per page",
            extra={"stage": "layout"},
        )
        self.page_size = page_size
        self.on_page_size(page_size)

    async def follow(self, measurements: AsyncIterable[float]) -> None:
        """Consume a stream of width measurements until it ends."""
        async for width in measurements:
            self.report(width)
        self.flush()

    def close(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
