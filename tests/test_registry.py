"""
Tests for the device registry.
"""

from models import CardDevice, DeviceCount, DeviceKind, SinkDevice, StreamDevice
from registry import DeviceRegistry


def _generation():
    devices = [
        SinkDevice(index=0, ordinal=0, name="a", description="A"),
        StreamDevice(index=5, ordinal=1, name="b", description="B", sink_index=0),
        StreamDevice(index=6, ordinal=2, name="c", description="C", sink_index=0),
        CardDevice(index=0, ordinal=3, name="card", description="Card"),
    ]
    return devices, DeviceCount(sinks=1, streams=2, cards=1)


class TestDeviceRegistry:
    """One generation at a time, looked up by ordinal or by kind and index."""

    def test_starts_empty(self):
        reg = DeviceRegistry()
        assert len(reg) == 0
        assert reg.navigable_total == 0
        assert reg.get(0) is None

    def test_replace_swaps_everything(self):
        reg = DeviceRegistry()
        reg.replace(*_generation())
        assert len(reg) == 4
        assert reg.navigable_total == 3

        reg.replace([], DeviceCount())
        assert len(reg) == 0
        assert reg.counts.total == 0

    def test_get_out_of_range(self):
        reg = DeviceRegistry()
        reg.replace(*_generation())
        assert reg.get(1).index == 5
        assert reg.get(-1) is None
        assert reg.get(10) is None

    def test_navigable_excludes_cards(self):
        reg = DeviceRegistry()
        reg.replace(*_generation())
        assert all(d.kind != DeviceKind.CARD for d in reg.navigable())
        assert len(reg.navigable()) == 3

    def test_find_is_per_kind(self):
        reg = DeviceRegistry()
        reg.replace(*_generation())
        assert reg.find(DeviceKind.SINK, 0).name == "a"
        assert reg.find(DeviceKind.CARD, 0).name == "card"
        assert reg.find(DeviceKind.SOURCE, 0) is None

    def test_indexes_of(self):
        reg = DeviceRegistry()
        reg.replace(*_generation())
        assert reg.indexes_of(DeviceKind.STREAM) == [5, 6]
