# theme.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from rich import box
from rich.box import Box
from rich.color import ColorParseError
from rich.style import Style

from models import DeviceKind
from store_config import Settings

BOXES: Dict[str, Optional[Box]] = {
    "normal": box.SQUARE,
    "rounded": box.ROUNDED,
    "heavy": box.HEAVY,
    "double": box.DOUBLE,
    "hidden": None,
}

UNICODE_ICONS = {
    "muted": "🔇 ",
    "unmuted": "🔊 ",
    "idle": "🔉 ",
    "suspended": "🔈 ",
    "mic": "🎙 ",
    "prefix": "⮞  ",
    "suffix": "  ⮜",
    "dot": "•",
}

ASCII_ICONS = {
    "muted": "",
    "unmuted": "",
    "idle": "",
    "suspended": "",
    "mic": "",
    "prefix": ">>> ",
    "suffix": " <<<",
    "dot": "*",
}


@dataclass(frozen=True)
class Theme:
    inactive: Style
    active: Style
    kinds: Dict[DeviceKind, Style]
    box: Optional[Box]
    icons: Dict[str, str]
    symbols: bool

    def kind_style(self, kind: DeviceKind) -> Style:
        return self.kinds.get(kind, self.inactive)


def _style(color: str, no_color: bool) -> Style:
    if no_color or not color:
        return Style()
    try:
        return Style(color=color)
    except ColorParseError:
        return Style()


def build_theme(settings: Settings, console: bool = False) -> Theme:
    c = settings.colors
    nc = settings.no_color
    symbols = not (settings.no_symbols or console)
    return Theme(
        inactive=_style(c.inactive, nc),
        active=_style(c.active, nc) + Style(bold=True),
        kinds={
            DeviceKind.SINK: _style(c.sink, nc),
            DeviceKind.STREAM: _style(c.stream, nc),
            DeviceKind.SOURCE: _style(c.source, nc),
            DeviceKind.OUTPUT: _style(c.output, nc),
        },
        box=BOXES.get(settings.border, box.SQUARE),
        icons=UNICODE_ICONS if symbols else ASCII_ICONS,
        symbols=symbols,
    )
