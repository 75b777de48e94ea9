# models.py
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Optional, Tuple


class DeviceKind(IntEnum):
    SINK = 0
    STREAM = 1
    SOURCE = 2
    OUTPUT = 3
    CARD = 4

    @property
    def label(self) -> str:
        return self.name.lower()


# registry order; cards always last so they can be cut off the navigable list
KIND_ORDER: Tuple[DeviceKind, ...] = (
    DeviceKind.SINK,
    DeviceKind.STREAM,
    DeviceKind.SOURCE,
    DeviceKind.OUTPUT,
    DeviceKind.CARD,
)

RUNNING_STATE = "RUNNING"
IDLE_STATE = "IDLE"
SUSPENDED_STATE = "SUSPENDED"

LOOPBACK_DRIVER = "module-loopback.c"

Channel = Tuple[str, float]  # (channel name, volume percent)


@dataclass(frozen=True)
class Device:
    kind: ClassVar[DeviceKind]

    index: int
    ordinal: int
    name: str
    description: str
    driver: str = ""
    module_id: str = ""
    channels: Tuple[Channel, ...] = ()
    mute: bool = False
    balance: float = 0.0

    @property
    def link_index(self) -> Optional[int]:
        return None

    @property
    def channel_count(self) -> int:
        return len(self.channels)

    @property
    def volumes(self) -> Tuple[float, ...]:
        return tuple(v for _, v in self.channels)

    @property
    def is_loopback(self) -> bool:
        return self.driver == LOOPBACK_DRIVER


@dataclass(frozen=True)
class SinkDevice(Device):
    kind: ClassVar[DeviceKind] = DeviceKind.SINK

    state: str = ""
    sample_spec: str = ""
    port: str = ""
    card_name: str = ""
    bus: str = ""
    battery: str = ""


@dataclass(frozen=True)
class SourceDevice(Device):
    kind: ClassVar[DeviceKind] = DeviceKind.SOURCE

    state: str = ""
    sample_spec: str = ""
    port: str = ""
    card_name: str = ""
    bus: str = ""
    battery: str = ""


@dataclass(frozen=True)
class StreamDevice(Device):
    kind: ClassVar[DeviceKind] = DeviceKind.STREAM

    sink_index: Optional[int] = None
    pid: str = ""

    @property
    def link_index(self) -> Optional[int]:
        return self.sink_index


@dataclass(frozen=True)
class OutputDevice(Device):
    kind: ClassVar[DeviceKind] = DeviceKind.OUTPUT

    source_index: Optional[int] = None
    pid: str = ""
    sample_spec: str = ""
    latency_usec: float = 0.0

    @property
    def link_index(self) -> Optional[int]:
        return self.source_index


@dataclass(frozen=True)
class CardDevice(Device):
    kind: ClassVar[DeviceKind] = DeviceKind.CARD

    battery: str = ""


@dataclass(frozen=True)
class DeviceCount:
    sinks: int = 0
    streams: int = 0
    sources: int = 0
    outputs: int = 0
    cards: int = 0

    @property
    def total(self) -> int:
        return self.sinks + self.streams + self.sources + self.outputs + self.cards

    @property
    def navigable_total(self) -> int:
        return self.total - self.cards


@dataclass(frozen=True)
class Selection:
    kind: DeviceKind
    index: int
    name: str

    def describe(self) -> str:
        return f"{self.kind.label} #{self.index} {self.name}"


@dataclass(frozen=True)
class ServerInfo:
    name: str = ""
    version: str = ""
    default_sink: str = ""
    default_source: str = ""
