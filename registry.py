# registry.py
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from models import Device, DeviceCount, DeviceKind


class DeviceRegistry:
    """Holds exactly one generation of devices.

    ``replace`` swaps devices and counts together; nothing patches a device
    in place.
    """

    def __init__(self) -> None:
        self._generation: Tuple[Tuple[Device, ...], DeviceCount] = ((), DeviceCount())

    def replace(self, devices: Sequence[Device], counts: DeviceCount) -> None:
        self._generation = (tuple(devices), counts)

    @property
    def devices(self) -> Tuple[Device, ...]:
        return self._generation[0]

    @property
    def counts(self) -> DeviceCount:
        return self._generation[1]

    @property
    def navigable_total(self) -> int:
        return self.counts.navigable_total

    def __len__(self) -> int:
        return len(self.devices)

    def get(self, ordinal: int) -> Optional[Device]:
        devs = self.devices
        if 0 <= ordinal < len(devs):
            return devs[ordinal]
        return None

    def navigable(self) -> Tuple[Device, ...]:
        return tuple(d for d in self.devices if d.kind != DeviceKind.CARD)

    def find(self, kind: DeviceKind, index: int) -> Optional[Device]:
        for d in self.devices:
            if d.kind == kind and d.index == index:
                return d
        return None

    def indexes_of(self, kind: DeviceKind) -> List[int]:
        return [d.index for d in self.devices if d.kind == kind]
