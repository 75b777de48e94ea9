# navigation.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from models import Device
from paging import ALL_CHANNELS, Cursor, Pager


@dataclass(frozen=True)
class Move:
    cursor: Cursor
    pager: Pager
    moved: bool
    message: Optional[str] = None


def _stay(cursor: Cursor, pager: Pager) -> Move:
    return Move(cursor=cursor, pager=pager, moved=False)


def up(cursor: Cursor, pager: Pager, total: int) -> Move:
    if total <= 0 or cursor.position <= 0:
        return _stay(cursor, pager)

    pos = cursor.position - 1
    if pos < pager.first_slot:
        pager = pager.prev_page()
        pos = min(pager.first_slot + pager.per_page - 1, total - 1)
    return Move(cursor=Cursor(position=pos), pager=pager, moved=True, message="")


def down(cursor: Cursor, pager: Pager, total: int) -> Move:
    if total <= 0 or cursor.position >= total - 1:
        return _stay(cursor, pager)

    pos = cursor.position + 1
    if pos >= pager.first_slot + pager.per_page:
        pager = pager.next_page()
        pos = pager.first_slot
    return Move(cursor=Cursor(position=pos), pager=pager, moved=True, message="")


def first(cursor: Cursor, pager: Pager, total: int) -> Move:
    if total <= 0:
        return _stay(cursor, pager)
    return Move(
        cursor=Cursor(position=0),
        pager=Pager(per_page=pager.per_page, page=0, total_pages=pager.total_pages),
        moved=True,
        message="go to first device",
    )


def last(cursor: Cursor, pager: Pager, total: int) -> Move:
    if total <= 0:
        return _stay(cursor, pager)
    return Move(
        cursor=Cursor(position=total - 1),
        pager=Pager(per_page=pager.per_page, page=max(pager.total_pages - 1, 0), total_pages=pager.total_pages),
        moved=True,
        message="go to last device",
    )


def next_page(cursor: Cursor, pager: Pager, total: int) -> Move:
    if total <= 0:
        return _stay(cursor, pager)
    pager = pager.next_page()
    pos = min(pager.first_slot, total - 1)
    return Move(cursor=Cursor(position=pos), pager=pager, moved=True, message="next page")


def prev_page(cursor: Cursor, pager: Pager, total: int) -> Move:
    if total <= 0:
        return _stay(cursor, pager)
    pager = pager.prev_page()
    return Move(cursor=Cursor(position=pager.first_slot), pager=pager, moved=True, message="prev page")


def cycle_channel(cursor: Cursor, device: Device) -> Cursor:
    if cursor.channel_mode < device.channel_count - 1:
        return Cursor(position=cursor.position, channel_mode=cursor.channel_mode + 1)
    return Cursor(position=cursor.position, channel_mode=ALL_CHANNELS)
