# paging.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

ALL_CHANNELS = -1

MIN_WIDTH = 45
MIN_HEIGHT = 8

# lines drawn around the device list: border, padding, title, selection, pager, help
CHROME_LINES = 9
TYPICAL_CHANNELS = 2


@dataclass(frozen=True)
class Cursor:
    position: int = 0
    channel_mode: int = ALL_CHANNELS


@dataclass(frozen=True)
class Pager:
    per_page: int
    page: int = 0
    total_pages: int = 0

    @property
    def first_slot(self) -> int:
        return self.page * self.per_page

    @property
    def on_last_page(self) -> bool:
        return self.page >= self.total_pages - 1

    def with_total(self, items: int) -> "Pager":
        return replace(self, total_pages=total_pages(items, self.per_page))

    def next_page(self) -> "Pager":
        if self.on_last_page:
            return self
        return replace(self, page=self.page + 1)

    def prev_page(self) -> "Pager":
        if self.page <= 0:
            return self
        return replace(self, page=self.page - 1)

    def slice_bounds(self, length: int) -> Tuple[int, int]:
        start = min(self.page * self.per_page, length)
        end = min(start + self.per_page, length)
        return start, end


def total_pages(items: int, per_page: int) -> int:
    if items <= 0:
        return 0
    n = -(-items // per_page)
    return max(1, n)


def reconcile(cursor: Cursor, pager: Pager, navigable_total: int) -> Tuple[Cursor, Pager]:
    """Clamp cursor and page against a new device count.

    Running it twice without a new count changes nothing.
    """
    pager = pager.with_total(navigable_total)

    page = pager.page
    while page > pager.total_pages - 1 and page > 0:
        page -= 1

    pos = cursor.position
    if navigable_total <= 0:
        pos = 0
    elif pos > navigable_total - 1:
        pos = navigable_total - 1
    elif pos < 0:
        pos = 0

    if navigable_total > 0:
        # keep the cursor on the visible page when per_page changed underneath it
        page = pos // pager.per_page

    if pos == cursor.position:
        new_cursor = cursor
    else:
        new_cursor = replace(cursor, position=pos)
    return new_cursor, replace(pager, page=page)


def clamp_channel(cursor: Cursor, channel_count: int, same_device: bool = True) -> Cursor:
    """Drop a single-channel mode that no longer fits the device under the cursor."""
    if cursor.channel_mode == ALL_CHANNELS:
        return cursor
    if not same_device or cursor.channel_mode >= channel_count:
        return replace(cursor, channel_mode=ALL_CHANNELS)
    return cursor


@dataclass(frozen=True)
class Layout:
    term_width: int
    term_height: int
    width: int
    margin: int
    bar_width: int
    per_page: int

    @property
    def too_small(self) -> bool:
        return self.term_width < MIN_WIDTH or self.term_height < MIN_HEIGHT


def entry_lines(display_level: int) -> int:
    title = 2 if display_level >= 3 else 1
    return title + TYPICAL_CHANNELS + 1


def compute_layout(
    term_width: int,
    term_height: int,
    max_width: int,
    max_items: int,
    display_level: int,
) -> Layout:
    width = term_width - 4
    if width > max_width:
        width = max_width
        margin = ((term_width - width) // 2) - 1
    else:
        margin = 1
    width = max(width, 1)

    fit = (term_height - CHROME_LINES) // entry_lines(display_level)
    per_page = max(1, min(max_items, fit))

    return Layout(
        term_width=term_width,
        term_height=term_height,
        width=width,
        margin=max(margin, 0),
        bar_width=max((width // 4) * 3, 1),
        per_page=per_page,
    )
