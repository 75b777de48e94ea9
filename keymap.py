# keymap.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Operation(Enum):
    QUIT = "quit"
    UP = "up"
    DOWN = "down"
    FIRST = "first"
    LAST = "last"
    NEXT_PAGE = "next-page"
    PREV_PAGE = "prev-page"
    ESCAPE = "escape"
    REFRESH = "refresh"
    PERFORM_ACTION = "perform-action"
    CHANGE_CHANNEL = "change-channel"
    CHANGE_DISPLAY = "change-display"
    SHOW_HELP = "show-help"
    SHOW_MESSAGES = "show-messages"
    KILL_STREAM = "kill-stream"
    UNLOAD_LOOPBACK = "unload-loopback"
    SELECT_DEVICE = "select-device"
    MUTE = "mute"
    VOLUME_UP = "volume-up"
    VOLUME_DOWN = "volume-down"
    NORMALIZE = "normalize"
    LATENCY_UP = "latency-up"
    LATENCY_DOWN = "latency-down"


@dataclass(frozen=True)
class Binding:
    op: Operation
    keys: Tuple[str, ...]
    help_key: str = ""
    help_text: str = ""
    arg: Optional[int] = None


BINDINGS: List[Binding] = [
    Binding(Operation.QUIT, ("q", "ctrl+c"), "q", "quit"),
    Binding(Operation.UP, ("up", "k"), "k", "cursor up"),
    Binding(Operation.DOWN, ("down", "j"), "j", "cursor down"),
    Binding(Operation.FIRST, ("home", "g"), "g", "first entry"),
    Binding(Operation.LAST, ("end", "G"), "G", "last entry"),
    Binding(Operation.MUTE, ("m", " "), "m", "mute"),
    Binding(Operation.VOLUME_UP, ("l", "K", "right"), "l", "volume up"),
    Binding(Operation.VOLUME_DOWN, ("h", "J", "left"), "h", "volume down"),
    Binding(Operation.NEXT_PAGE, ("n", "pgdown"), "n", "next page"),
    Binding(Operation.PREV_PAGE, ("p", "N", "pgup"), "p", "prev page"),
    Binding(Operation.ESCAPE, ("esc",), "esc", "cancel"),
    Binding(Operation.REFRESH, ("r",), "r", "refresh"),
    Binding(Operation.PERFORM_ACTION, ("enter",), "⏎", "perform action"),
    Binding(Operation.CHANGE_CHANNEL, ("c",), "c", "channel"),
    Binding(Operation.CHANGE_DISPLAY, ("t",), "t", "change display"),
    Binding(Operation.SHOW_HELP, ("?",), "?", "help"),
    Binding(Operation.SHOW_MESSAGES, ("v",), "v", "show messages"),
    Binding(Operation.KILL_STREAM, ("x", "delete"), "x", "kill stream"),
    Binding(Operation.UNLOAD_LOOPBACK, ("X",), "X", "unload loopback"),
    Binding(Operation.SELECT_DEVICE, ("s",), "s", "select device"),
    Binding(Operation.LATENCY_UP, ("+", "="), "+", "inc latency"),
    Binding(Operation.LATENCY_DOWN, ("-",), "-", "dec latency"),
] + [
    Binding(Operation.NORMALIZE, (str(n % 10),), str(n % 10), f"volume {n * 10}%", arg=n * 10)
    for n in range(1, 11)
]

# columns of the expanded help view
HELP_COLUMNS: List[Tuple[Operation, ...]] = [
    (Operation.UP, Operation.DOWN, Operation.CHANGE_CHANNEL),
    (Operation.NEXT_PAGE, Operation.PREV_PAGE, Operation.ESCAPE),
    (Operation.VOLUME_UP, Operation.VOLUME_DOWN, Operation.MUTE),
    (Operation.SELECT_DEVICE, Operation.PERFORM_ACTION, Operation.KILL_STREAM),
    (Operation.SHOW_MESSAGES, Operation.REFRESH, Operation.CHANGE_DISPLAY),
]
SHORT_HELP: Tuple[Operation, ...] = (Operation.SHOW_HELP, Operation.QUIT)


def build_keymap(bindings: List[Binding] = BINDINGS) -> Dict[str, Binding]:
    out: Dict[str, Binding] = {}
    for b in bindings:
        for k in b.keys:
            out[k] = b
    return out


KEYMAP = build_keymap()


def lookup(key: str) -> Optional[Binding]:
    return KEYMAP.get(key)


def binding_for(op: Operation) -> Binding:
    return next(b for b in BINDINGS if b.op == op)
