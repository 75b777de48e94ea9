"""
Tests for cursor movement across pages.
"""

import pytest

import navigation
from models import SinkDevice
from paging import ALL_CHANNELS, Cursor, Pager


def _pager(total, per_page=4, page=0):
    return Pager(per_page=per_page, page=page).with_total(total)


class TestUpDown:
    """Single steps cross page boundaries and stop at the ends."""

    def test_down_within_page(self):
        mv = navigation.down(Cursor(position=0), _pager(6), 6)
        assert mv.moved
        assert mv.cursor.position == 1
        assert mv.pager.page == 0

    def test_down_crosses_page(self):
        mv = navigation.down(Cursor(position=3), _pager(6), 6)
        assert mv.cursor.position == 4
        assert mv.pager.page == 1

    def test_up_crosses_page(self):
        mv = navigation.up(Cursor(position=4), _pager(6, page=1), 6)
        assert mv.cursor.position == 3
        assert mv.pager.page == 0

    def test_up_at_top_is_noop(self):
        c, p = Cursor(position=0, channel_mode=1), _pager(6)
        mv = navigation.up(c, p, 6)
        assert not mv.moved
        assert mv.cursor is c
        assert mv.pager is p

    def test_down_at_bottom_is_noop(self):
        mv = navigation.down(Cursor(position=5), _pager(6, page=1), 6)
        assert not mv.moved

    def test_empty_list(self):
        assert not navigation.down(Cursor(), _pager(0), 0).moved
        assert not navigation.first(Cursor(), _pager(0), 0).moved


class TestJumps:
    """First, last and page jumps land on a page's first slot."""

    def test_first(self):
        mv = navigation.first(Cursor(position=5), _pager(6, page=1), 6)
        assert mv.cursor.position == 0
        assert mv.pager.page == 0
        assert mv.message == "go to first device"

    def test_last(self):
        mv = navigation.last(Cursor(position=0), _pager(6), 6)
        assert mv.cursor.position == 5
        assert mv.pager.page == 1

    def test_next_page(self):
        mv = navigation.next_page(Cursor(position=1), _pager(10), 10)
        assert mv.pager.page == 1
        assert mv.cursor.position == 4

    def test_next_page_on_last_page_goes_to_its_first_slot(self):
        mv = navigation.next_page(Cursor(position=9), _pager(10, page=2), 10)
        assert mv.pager.page == 2
        assert mv.cursor.position == 8

    def test_prev_page(self):
        mv = navigation.prev_page(Cursor(position=6), _pager(10, page=1), 10)
        assert mv.pager.page == 0
        assert mv.cursor.position == 0


@pytest.mark.parametrize(
    "step,position,page",
    [
        (navigation.up, 2, 0),
        (navigation.down, 2, 0),
        (navigation.first, 2, 0),
        (navigation.last, 2, 0),
        (navigation.next_page, 2, 0),
        (navigation.prev_page, 5, 1),
    ],
)
def test_moves_reset_channel_mode(step, position, page):
    mv = step(Cursor(position=position, channel_mode=1), _pager(8, page=page), 8)
    assert mv.moved
    assert mv.cursor.channel_mode == ALL_CHANNELS


class TestCycleChannel:
    """Channel mode walks every channel and wraps back to all."""

    def test_cycle(self):
        dev = SinkDevice(index=0, ordinal=0, name="s", description="S", channels=(("FL", 10.0), ("FR", 20.0)))
        c = Cursor(position=0)
        seen = []
        for _ in range(3):
            c = navigation.cycle_channel(c, dev)
            seen.append(c.channel_mode)
        assert seen == [0, 1, ALL_CHANNELS]

    def test_no_channels(self):
        dev = SinkDevice(index=0, ordinal=0, name="s", description="S")
        assert navigation.cycle_channel(Cursor(), dev).channel_mode == ALL_CHANNELS
