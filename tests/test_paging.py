"""
Tests for pagination, reconciliation and layout.
"""

import pytest

from paging import (
    ALL_CHANNELS,
    Cursor,
    Pager,
    clamp_channel,
    compute_layout,
    reconcile,
    total_pages,
)


class TestTotalPages:
    """Empty lists have no pages; anything else has at least one."""

    def test_empty(self):
        assert total_pages(0, 4) == 0

    @pytest.mark.parametrize("items,per_page,expected", [(1, 4, 1), (4, 4, 1), (5, 4, 2), (9, 4, 3), (3, 1, 3)])
    def test_ceil(self, items, per_page, expected):
        assert total_pages(items, per_page) == expected


class TestReconcile:
    """Cursor and page are clamped against the new device count."""

    def test_list_shrinks(self):
        cursor, pager = reconcile(Cursor(position=4), Pager(per_page=4, page=1, total_pages=2), 3)
        assert pager.total_pages == 1
        assert pager.page == 0
        assert cursor.position == 2

    def test_empty_list(self):
        cursor, pager = reconcile(Cursor(position=3), Pager(per_page=4, page=0, total_pages=1), 0)
        assert cursor.position == 0
        assert pager.page == 0
        assert pager.total_pages == 0

    def test_idempotent(self):
        for n in range(0, 12):
            for pos in range(0, 12):
                first = reconcile(Cursor(position=pos), Pager(per_page=3, page=pos // 3), n)
                second = reconcile(*first, n)
                assert second == first

    def test_bounds_hold_for_any_prior_state(self):
        for n in range(0, 10):
            for pos in range(0, 15):
                for page in range(0, 5):
                    cursor, pager = reconcile(Cursor(position=pos), Pager(per_page=4, page=page), n)
                    if n > 0:
                        assert 0 <= cursor.position <= n - 1
                        assert 0 <= pager.page <= pager.total_pages - 1
                        assert pager.first_slot <= cursor.position < pager.first_slot + pager.per_page
                    else:
                        assert cursor.position == 0
                        assert pager.page == 0

    def test_per_page_change_realigns_page(self):
        cursor, pager = reconcile(Cursor(position=5), Pager(per_page=2, page=1), 8)
        assert pager.page == 2
        assert cursor.position == 5


class TestClampChannel:
    """A single-channel mode must fit the device now under the cursor."""

    def test_fewer_channels_resets(self):
        cursor = clamp_channel(Cursor(position=1, channel_mode=1), channel_count=1)
        assert cursor.channel_mode == ALL_CHANNELS
        assert cursor.position == 1

    def test_other_device_resets(self):
        cursor = clamp_channel(Cursor(position=1, channel_mode=0), channel_count=2, same_device=False)
        assert cursor.channel_mode == ALL_CHANNELS

    def test_same_device_keeps_mode(self):
        c = Cursor(position=1, channel_mode=1)
        assert clamp_channel(c, channel_count=2) is c

    def test_all_channels_untouched(self):
        c = Cursor(position=0)
        assert clamp_channel(c, channel_count=0, same_device=False) is c


class TestPager:
    """Page moves clamp at the ends."""

    def test_next_page_stops_at_last(self):
        p = Pager(per_page=4, page=1, total_pages=2)
        assert p.next_page() is p

    def test_prev_page_stops_at_first(self):
        p = Pager(per_page=4, page=0, total_pages=2)
        assert p.prev_page() is p

    def test_slice_bounds(self):
        assert Pager(per_page=4, page=1).slice_bounds(6) == (4, 6)
        assert Pager(per_page=4, page=3).slice_bounds(6) == (6, 6)


class TestLayout:
    """Width is capped and per-page follows the terminal height."""

    def test_width_capped_and_centered(self):
        lay = compute_layout(200, 40, 100, 4, 2)
        assert lay.width == 100
        assert lay.margin == 49
        assert lay.bar_width == 75

    def test_narrow_terminal(self):
        lay = compute_layout(60, 40, 100, 4, 2)
        assert lay.width == 56
        assert lay.margin == 1

    def test_per_page_limited_by_height(self):
        lay = compute_layout(120, 17, 100, 12, 2)
        assert lay.per_page == 2

    def test_per_page_at_least_one(self):
        assert compute_layout(120, 9, 100, 4, 3).per_page == 1

    def test_too_small(self):
        assert compute_layout(44, 40, 100, 4, 2).too_small
        assert compute_layout(80, 7, 100, 4, 2).too_small
        assert not compute_layout(45, 8, 100, 4, 2).too_small


def test_default_cursor_shows_all_channels():
    assert Cursor().channel_mode == ALL_CHANNELS
