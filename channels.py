# channels.py
from __future__ import annotations

from typing import Dict, List, Tuple

# pactl channel name -> (short position code, one-letter label drawn next to its bar)
POSITIONS: Dict[str, Tuple[str, str]] = {
    "mono": ("MONO", "M"),
    "front-left": ("FL", "L"),
    "front-right": ("FR", "R"),
    "front-center": ("FC", "C"),
    "rear-left": ("RL", "l"),
    "rear-right": ("RR", "r"),
    "rear-center": ("RC", "c"),
    "lfe": ("LFE", "S"),
    "side-left": ("SL", "<"),
    "side-right": ("SR", ">"),
}

_BY_CODE = {code.lower(): (code, label) for code, label in POSITIONS.values()}

AUX_LABEL = "A"


def _lookup(v: str) -> Tuple[str, str]:
    s = (v or "").strip().lower()
    if s in POSITIONS:
        return POSITIONS[s]
    if s in _BY_CODE:
        return _BY_CODE[s]
    if s == "low-frequency":
        return POSITIONS["lfe"]
    if s.startswith("aux") and s[3:].isdigit():
        return f"AUX{int(s[3:])}", AUX_LABEL
    return s.upper(), AUX_LABEL


def position_code(v: str) -> str:
    """Short code for a channel name: ``front-left`` and ``fl`` both give ``FL``."""
    return _lookup(v)[0]


def channel_label(v: str) -> str:
    return _lookup(v)[1]


def split_channel_map(channel_map: str) -> List[str]:
    return [c.strip() for c in (channel_map or "").split(",") if c.strip()]
