# terminal.py
from __future__ import annotations

import os
import shutil
import termios
import tty
from contextlib import contextmanager
from typing import Iterator, List, Tuple

# longest first so prefixes never shadow a full sequence
ESCAPE_SEQUENCES = sorted(
    {
        "\x1b[A": "up",
        "\x1b[B": "down",
        "\x1b[C": "right",
        "\x1b[D": "left",
        "\x1bOA": "up",
        "\x1bOB": "down",
        "\x1bOC": "right",
        "\x1bOD": "left",
        "\x1b[H": "home",
        "\x1b[F": "end",
        "\x1bOH": "home",
        "\x1bOF": "end",
        "\x1b[1~": "home",
        "\x1b[4~": "end",
        "\x1b[7~": "home",
        "\x1b[8~": "end",
        "\x1b[3~": "delete",
        "\x1b[5~": "pgup",
        "\x1b[6~": "pgdown",
    }.items(),
    key=lambda kv: -len(kv[0]),
)

SINGLE_KEYS = {
    "\r": "enter",
    "\n": "enter",
    "\x03": "ctrl+c",
    "\x7f": "backspace",
    "\t": "tab",
}


def decode_keys(data: str) -> List[str]:
    """Split one read from the terminal into key names."""
    keys: List[str] = []
    i = 0
    while i < len(data):
        if data[i] == "\x1b":
            for seq, name in ESCAPE_SEQUENCES:
                if data.startswith(seq, i):
                    keys.append(name)
                    i += len(seq)
                    break
            else:
                nxt = data[i + 1:i + 2]
                if nxt in ("[", "O"):
                    # unknown sequence: drop through its final byte
                    j = i + 2
                    while j < len(data) and not ("@" <= data[j] <= "~"):
                        j += 1
                    i = j + 1
                else:
                    keys.append("esc")
                    i += 1
            continue

        ch = data[i]
        keys.append(SINGLE_KEYS.get(ch, ch))
        i += 1
    return keys


def read_keys(fd: int) -> List[str]:
    raw = os.read(fd, 64)
    return decode_keys(raw.decode("utf-8", errors="ignore"))


def terminal_size() -> Tuple[int, int]:
    size = shutil.get_terminal_size(fallback=(80, 24))
    return size.columns, size.lines


def is_console() -> bool:
    return not os.environ.get("DISPLAY", "").strip() and not os.environ.get("WAYLAND_DISPLAY", "").strip()


@contextmanager
def cbreak(fd: int) -> Iterator[None]:
    old = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)
