# dispatch.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from models import Device, DeviceKind, Selection


class Action(Enum):
    SET_DEFAULT_SINK = "set-default-sink"
    SET_DEFAULT_SOURCE = "set-default-source"
    SUSPEND_TOGGLE = "suspend-toggle"
    MOVE_STREAM = "move-stream"
    MOVE_OUTPUT = "move-output"
    LOOPBACK = "loopback"


# (armed kind or None, target kind) -> action; pairs not listed are rejected
MATRIX: Dict[Tuple[Optional[DeviceKind], DeviceKind], Action] = {
    (None, DeviceKind.SINK): Action.SET_DEFAULT_SINK,
    (None, DeviceKind.SOURCE): Action.SET_DEFAULT_SOURCE,
    (DeviceKind.SINK, DeviceKind.SINK): Action.SUSPEND_TOGGLE,
    (DeviceKind.SINK, DeviceKind.STREAM): Action.MOVE_STREAM,
    (DeviceKind.SINK, DeviceKind.SOURCE): Action.LOOPBACK,
    (DeviceKind.SOURCE, DeviceKind.SOURCE): Action.SUSPEND_TOGGLE,
    (DeviceKind.SOURCE, DeviceKind.OUTPUT): Action.MOVE_OUTPUT,
}

HINTS: Dict[Tuple[Optional[DeviceKind], DeviceKind], str] = {
    (None, DeviceKind.STREAM): "select a sink, then enter on a stream to move it",
    (None, DeviceKind.OUTPUT): "select a source, then enter on an output to move it",
}


@dataclass(frozen=True)
class Resolution:
    action: Optional[Action]
    message: str = ""
    drop_selection: bool = False

    @property
    def accepted(self) -> bool:
        return self.action is not None


def _reject(message: str, drop_selection: bool = False) -> Resolution:
    return Resolution(action=None, message=message, drop_selection=drop_selection)


def resolve(selection: Optional[Selection], target: Device, armed_present: bool = True) -> Resolution:
    if target.kind == DeviceKind.CARD:
        return _reject("cards have no actions")

    if selection is not None and not armed_present:
        return _reject(f"selected {selection.kind.label} #{selection.index} is gone", drop_selection=True)

    armed = selection.kind if selection is not None else None
    key = (armed, target.kind)
    action = MATRIX.get(key)

    if action is None:
        hint = HINTS.get(key)
        if hint:
            return _reject(hint)
        if armed in (DeviceKind.STREAM, DeviceKind.OUTPUT, DeviceKind.CARD):
            return _reject(f"nothing to do with a selected {armed.label}")
        return _reject(f"not a valid pairing: {armed.label} -> {target.kind.label}")

    if action == Action.SUSPEND_TOGGLE and selection is not None and selection.index != target.index:
        return _reject(
            f"not a valid pairing: {armed.label} #{selection.index} -> {target.kind.label} #{target.index}"
        )

    return Resolution(action=action)
