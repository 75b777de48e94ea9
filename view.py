# view.py
from __future__ import annotations

from typing import List, Optional

from rich.align import Align
from rich.console import Group, RenderableType
from rich.padding import Padding
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from channels import channel_label
from engine import DashboardEngine
from keymap import HELP_COLUMNS, SHORT_HELP, binding_for
from models import (
    IDLE_STATE,
    RUNNING_STATE,
    SUSPENDED_STATE,
    Device,
    DeviceKind,
    OutputDevice,
    StreamDevice,
)
from theme import Theme

APP_NAME = "Pulse Manager"
MUTED_TEXT = "(Muted) "


def cut_text(s: str, limit: int) -> str:
    trunc = " .."
    if limit <= 0 or len(s) < limit + len(trunc):
        return s
    return s[:limit] + trunc


def state_text(d: Device, theme: Theme) -> str:
    state = getattr(d, "state", "")
    if theme.symbols:
        if d.mute:
            return theme.icons["muted"]
        if state == RUNNING_STATE:
            return theme.icons["unmuted"]
        if state == IDLE_STATE:
            return theme.icons["idle"]
        if state == SUSPENDED_STATE:
            return theme.icons["suspended"]
        return ""
    if d.mute:
        return MUTED_TEXT
    if state in (RUNNING_STATE, IDLE_STATE, SUSPENDED_STATE):
        return state + " "
    return ""


def mute_text(d: Device, theme: Theme) -> str:
    if d.mute:
        return theme.icons["muted"] or MUTED_TEXT
    if d.kind == DeviceKind.OUTPUT:
        return theme.icons["mic"]
    return theme.icons["unmuted"]


def battery_text(status: str) -> str:
    return f"{status} " if status else ""


def _linked_label(engine: DashboardEngine, d: Device) -> str:
    idx = d.link_index
    if idx is None:
        return ""
    kind = DeviceKind.SINK if d.kind == DeviceKind.STREAM else DeviceKind.SOURCE
    target = engine.registry.find(kind, idx)
    if target is None:
        return f"{kind.label} #{idx}"
    # recordings name their source by card, playback by port
    where = getattr(target, "card_name", "") if kind == DeviceKind.SOURCE else ""
    where = where or getattr(target, "port", "")
    return f"{kind.label} #{idx} {where}".rstrip()


def endpoint_detail(d: Device, theme: Theme) -> str:
    parts = [
        f"{state_text(d, theme)}{d.kind.label} #{d.index}",
        getattr(d, "card_name", ""),
        getattr(d, "bus", ""),
        getattr(d, "sample_spec", ""),
        getattr(d, "port", ""),
    ]
    return " ".join(p for p in parts if p)


def _default_marker(engine: DashboardEngine, d: Device) -> str:
    srv = engine.server
    if srv is None:
        return ""
    if d.kind == DeviceKind.SINK and d.name == srv.default_sink:
        return "* "
    if d.kind == DeviceKind.SOURCE and d.name == srv.default_source:
        return "* "
    return ""


def title_lines(engine: DashboardEngine, d: Device, chosen: bool, theme: Theme) -> List[str]:
    limit = engine.layout.bar_width
    pref = theme.icons["prefix"] if chosen else ""
    suff = theme.icons["suffix"] if chosen else ""
    level = engine.display_level

    if level <= 1:
        return [pref + suff]

    if d.kind in (DeviceKind.SINK, DeviceKind.SOURCE):
        battery = battery_text(getattr(d, "battery", ""))
        desc = _default_marker(engine, d) + d.description
        if level == 2:
            return [pref + cut_text(f"{state_text(d, theme)}{battery}{desc}", limit - len(pref) - len(suff)) + suff]
        return [
            pref + cut_text(f"{battery}{desc}", limit - len(pref) - len(suff)) + suff,
            cut_text(endpoint_detail(d, theme), limit),
        ]

    if isinstance(d, StreamDevice):
        if level == 2:
            return [pref + cut_text(f"{mute_text(d, theme)}{d.description}", limit - len(pref) - len(suff)) + suff]
        detail = f"{mute_text(d, theme)}{d.name} #{d.index} {_linked_label(engine, d)}"
        return [
            pref + cut_text(d.description, limit - len(pref) - len(suff)) + suff,
            cut_text(detail.rstrip(), limit),
        ]

    if isinstance(d, OutputDevice):
        if level == 2:
            return [pref + cut_text(f"{mute_text(d, theme)}{d.name}", limit - len(pref) - len(suff)) + suff]
        detail = f"{mute_text(d, theme)}#{d.index} {_linked_label(engine, d)} {d.sample_spec} {d.latency_usec:g}µs"
        return [
            pref + cut_text(d.name, limit - len(pref) - len(suff)) + suff,
            cut_text(detail, limit),
        ]

    return [pref + cut_text(d.description, limit) + suff]


def channel_rows(engine: DashboardEngine, d: Device, chosen: bool, theme: Theme) -> Table:
    grid = Table.grid(padding=(0, 1))
    grid.add_column(no_wrap=True)
    grid.add_column(no_wrap=True)
    grid.add_column(no_wrap=True, justify="right")

    show_pct = engine.display_level > 1
    for i, (name, pct) in enumerate(d.channels):
        selected = chosen and engine.cursor.channel_mode == i
        marker = "> " if selected else "  "
        label = channel_label(name)
        bar_style = theme.active if selected else theme.kind_style(d.kind)
        bar = ProgressBar(
            total=100.0,
            completed=min(pct, 100.0),
            width=engine.layout.bar_width,
            style=theme.inactive,
            complete_style=bar_style,
            finished_style=bar_style,
        )
        text_style = theme.active if selected else theme.inactive
        grid.add_row(
            Text(f"{marker}{label}", style=text_style),
            bar,
            Text(f"{pct:g}%" if show_pct else "", style=text_style),
        )
    return grid


def device_entry(engine: DashboardEngine, d: Device, chosen: bool, theme: Theme) -> RenderableType:
    style = theme.active if chosen else theme.inactive
    parts: List[RenderableType] = [
        Align.center(Text(line, style=style, no_wrap=True, overflow="ellipsis")) for line in title_lines(engine, d, chosen, theme)
    ]
    if d.channels:
        parts.append(Align.center(channel_rows(engine, d, chosen, theme)))
    parts.append(Text(""))
    return Group(*parts)


def paginator_text(engine: DashboardEngine, theme: Theme) -> Text:
    out = Text()
    dot = theme.icons["dot"]
    for p in range(engine.pager.total_pages):
        out.append(dot, style=theme.active if p == engine.pager.page else theme.inactive)
    return out


def help_view(engine: DashboardEngine, theme: Theme) -> RenderableType:
    if not engine.show_full_help:
        t = Text(justify="center")
        for i, op in enumerate(SHORT_HELP):
            b = binding_for(op)
            if i:
                t.append(" • ", style=theme.inactive)
            t.append(b.help_key, style=theme.inactive)
            t.append(f" {b.help_text}", style=theme.active)
        return t

    grid = Table.grid(padding=(0, 2))
    for _ in HELP_COLUMNS:
        grid.add_column(no_wrap=True)
    for row in range(max(len(c) for c in HELP_COLUMNS)):
        cells: List[Text] = []
        for col in HELP_COLUMNS:
            if row >= len(col):
                cells.append(Text(""))
                continue
            b = binding_for(col[row])
            cell = Text(b.help_key, style=theme.inactive)
            cell.append(f" {b.help_text}", style=theme.active)
            cells.append(cell)
        grid.add_row(*cells)
    return Align.center(grid)


def _frame(engine: DashboardEngine, body: RenderableType, theme: Theme) -> RenderableType:
    inner = Padding(body, (1, 0, 0, 0))
    if theme.box is None:
        return Padding(inner, (1, 0, 1, engine.layout.margin))
    panel = Panel(inner, box=theme.box, border_style=theme.active, width=engine.layout.width + 2)
    return Padding(panel, (1, 0, 1, engine.layout.margin))


def header_text(engine: DashboardEngine, theme: Theme) -> Optional[Text]:
    if engine.settings.no_title:
        return None
    t = Text(APP_NAME, style=theme.active, justify="center")
    if engine.server is not None and engine.server.name:
        t.append(f"  ({engine.server.name})", style=theme.inactive)
    return t


def render(engine: DashboardEngine, theme: Theme) -> RenderableType:
    if engine.halted or engine.layout.too_small:
        return Text(engine.message or "terminal too small")

    header = header_text(engine, theme)
    if engine.navigable_total < 1:
        parts: List[RenderableType] = [Text(APP_NAME, style=theme.active, justify="center"), Text("")]
        parts.append(Text("No Devices To Report", style=theme.active, justify="center"))
        return _frame(engine, Group(*parts), theme)

    parts = []
    if header is not None:
        parts.append(header)

    selected = engine.selection.describe() if engine.selection is not None else ""
    parts.append(Text("  " + cut_text(selected, engine.layout.bar_width // 2), style=theme.active))
    parts.append(Text(""))

    first = engine.pager.first_slot
    for offset, d in enumerate(engine.page_devices()):
        parts.append(device_entry(engine, d, first + offset == engine.cursor.position, theme))

    footer = Table.grid(expand=True)
    footer.add_column(justify="left", no_wrap=True)
    footer.add_column(justify="right", no_wrap=True)
    message = cut_text(engine.message, engine.layout.bar_width) if engine.show_messages else ""
    footer.add_row(Text("  ").append_text(paginator_text(engine, theme)), Text(message, style=theme.active))
    parts.append(footer)
    parts.append(Text(""))

    if not engine.settings.no_help:
        parts.append(help_view(engine, theme))

    return _frame(engine, Group(*parts), theme)
