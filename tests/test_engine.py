"""
Tests for the dashboard engine: refresh, navigation and select-then-act.
"""

import pytest

from engine import MAX_LATENCY, MIN_LATENCY, DashboardEngine
from keymap import Operation
from models import DeviceCount, ServerInfo, SinkDevice, SourceDevice, StreamDevice
from store_config import Settings


def _devices():
    return [
        SinkDevice(index=2, ordinal=0, name="speakers", description="Speakers", channels=(("FL", 50.0), ("FR", 50.0))),
        SinkDevice(index=3, ordinal=1, name="hdmi", description="HDMI", channels=(("FL", 110.0), ("FR", 110.0))),
        StreamDevice(index=11, ordinal=2, name="mpv", description="Song", sink_index=3, pid="99"),
        SourceDevice(index=5, ordinal=3, name="mic", description="Mic"),
    ], DeviceCount(sinks=2, streams=1, sources=1)


@pytest.fixture
def engine(runner):
    eng = DashboardEngine(Settings(), runner)
    eng.apply_refresh(*_devices())
    return eng


def _go_to(eng, position):
    eng.handle(Operation.FIRST)
    for _ in range(position):
        eng.handle(Operation.DOWN)
    assert eng.cursor.position == position


class TestSelectThenAct:
    """Two-step dispatch through the engine."""

    def test_toggle_mismatch_keeps_selection(self, engine, runner):
        _go_to(engine, 0)
        engine.handle(Operation.SELECT_DEVICE)
        _go_to(engine, 1)
        engine.handle(Operation.PERFORM_ACTION)

        assert runner.calls == []
        assert "not a valid pairing" in engine.message
        assert engine.selection is not None
        assert engine.selection.index == 2

    def test_single_shot_clears_selection(self, engine, runner):
        _go_to(engine, 0)
        engine.handle(Operation.SELECT_DEVICE)
        _go_to(engine, 2)
        engine.handle(Operation.PERFORM_ACTION)

        assert runner.calls == [("move-sink-input", "11", "2")]
        assert engine.selection is None

    def test_failed_action_rearms(self, make_runner):
        runner = make_runner(fail=("move-sink-input",))
        eng = DashboardEngine(Settings(), runner)
        eng.apply_refresh(*_devices())
        _go_to(eng, 0)
        eng.handle(Operation.SELECT_DEVICE)
        _go_to(eng, 2)
        eng.handle(Operation.PERFORM_ACTION)

        assert eng.selection is not None
        assert eng.selection.index == 2
        assert eng.message == "error migrating stream"

    def test_stale_selection_cleared(self, engine, runner):
        _go_to(engine, 0)
        engine.handle(Operation.SELECT_DEVICE)

        devices, _ = _devices()
        engine.apply_refresh(devices[1:], DeviceCount(sinks=1, streams=1, sources=1))
        _go_to(engine, 1)
        engine.handle(Operation.PERFORM_ACTION)

        assert runner.calls == []
        assert engine.selection is None
        assert "gone" in engine.message

    def test_default_sink_without_selection(self, engine, runner):
        _go_to(engine, 1)
        engine.handle(Operation.PERFORM_ACTION)
        assert runner.calls == [("set-default-sink", "3"), ("move-sink-input", "11", "3")]

    def test_loopback_uses_latency(self, engine, runner):
        _go_to(engine, 0)
        engine.handle(Operation.SELECT_DEVICE)
        engine.handle(Operation.LATENCY_UP)
        _go_to(engine, 3)
        engine.handle(Operation.PERFORM_ACTION)
        assert runner.calls == [("load-module", "module-loopback", "latency_msec=20", "sink=2", "source=5")]

    def test_escape_clears_selection(self, engine):
        engine.handle(Operation.SELECT_DEVICE)
        engine.handle(Operation.ESCAPE)
        assert engine.selection is None


class TestRefresh:
    """A refresh replaces the registry and clamps the cursor."""

    def test_list_shrinks(self, runner):
        eng = DashboardEngine(Settings(), runner)
        sinks = [SinkDevice(index=i, ordinal=i, name=f"s{i}", description=f"S{i}") for i in range(5)]
        eng.apply_refresh(sinks, DeviceCount(sinks=5))
        eng.handle(Operation.LAST)
        assert eng.pager.page == 1
        assert eng.cursor.position == 4

        eng.apply_refresh(sinks[:3], DeviceCount(sinks=3))
        assert eng.pager.total_pages == 1
        assert eng.pager.page == 0
        assert eng.cursor.position == 2

    def test_selection_survives_shifted_ordinal(self, engine, runner):
        _go_to(engine, 1)
        engine.handle(Operation.SELECT_DEVICE)
        assert engine.selection.index == 3

        devices, _ = _devices()
        newcomer = SinkDevice(index=7, ordinal=0, name="usb", description="USB")
        engine.apply_refresh([newcomer] + devices, DeviceCount(sinks=3, streams=1, sources=1))
        assert engine.selection.index == 3

        _go_to(engine, 3)
        engine.handle(Operation.PERFORM_ACTION)
        assert runner.calls == [("move-sink-input", "11", "3")]
        assert engine.selection is None

    def test_channel_mode_dropped_for_fewer_channels(self, engine, runner):
        _go_to(engine, 0)
        engine.handle(Operation.CHANGE_CHANNEL)
        engine.handle(Operation.CHANGE_CHANNEL)
        assert engine.cursor.channel_mode == 1

        devices, counts = _devices()
        devices[0] = SinkDevice(index=2, ordinal=0, name="speakers", description="Speakers", channels=(("mono", 50.0),))
        engine.apply_refresh(devices, counts)
        assert engine.cursor.channel_mode == -1

        engine.handle(Operation.VOLUME_UP)
        assert runner.calls == [("set-sink-volume", "2", "+5%")]

    def test_channel_mode_dropped_for_other_device(self, engine):
        _go_to(engine, 0)
        engine.handle(Operation.CHANGE_CHANNEL)
        assert engine.cursor.channel_mode == 0

        devices, _ = _devices()
        engine.apply_refresh(devices[1:], DeviceCount(sinks=1, streams=1, sources=1))
        assert engine.current().index == 3
        assert engine.cursor.channel_mode == -1

    def test_channel_mode_kept_for_same_device(self, engine):
        _go_to(engine, 0)
        engine.handle(Operation.CHANGE_CHANNEL)
        engine.apply_refresh(*_devices())
        assert engine.cursor.channel_mode == 0

    def test_server_info_kept_when_missing(self, engine):
        engine.apply_refresh(*_devices(), server=ServerInfo(name="pulseaudio"))
        engine.apply_refresh(*_devices())
        assert engine.server.name == "pulseaudio"

    def test_page_devices(self, engine):
        assert [d.index for d in engine.page_devices()] == [2, 3, 11, 5]


class TestDirectControls:
    """Mute, volume, normalize and kill act on the cursor device."""

    def test_volume_up(self, engine, runner):
        _go_to(engine, 0)
        engine.handle(Operation.VOLUME_UP)
        assert runner.calls == [("set-sink-volume", "2", "+5%", "+5%")]

    def test_volume_limit_reached(self, engine, runner):
        _go_to(engine, 1)
        engine.handle(Operation.VOLUME_UP)
        assert runner.calls == []
        assert "limit" in engine.message

    def test_single_channel_volume(self, engine, runner):
        _go_to(engine, 0)
        engine.handle(Operation.CHANGE_CHANNEL)
        assert engine.message.startswith("channel: FL")
        engine.handle(Operation.VOLUME_DOWN)
        assert runner.calls == [("set-sink-volume", "2", "-5%", "-0%")]

    def test_normalize_resets_channel(self, engine, runner):
        _go_to(engine, 0)
        engine.handle(Operation.CHANGE_CHANNEL)
        engine.handle(Operation.NORMALIZE, 40)
        assert runner.calls == [("set-sink-volume", "2", "40%")]
        assert engine.cursor.channel_mode == -1

    def test_mute(self, engine, runner):
        _go_to(engine, 2)
        engine.handle(Operation.MUTE)
        assert runner.calls == [("set-sink-input-mute", "11", "toggle")]

    def test_kill_non_stream(self, engine, runner):
        _go_to(engine, 0)
        engine.handle(Operation.KILL_STREAM)
        assert runner.killed == []
        assert "cannot kill" in engine.message

    def test_kill_stream(self, engine, runner):
        _go_to(engine, 2)
        engine.handle(Operation.KILL_STREAM)
        assert runner.killed == ["99"]


class TestViewState:
    """Latency, display level, help and terminal size."""

    def test_latency_wraps(self, engine):
        assert engine.latency_ms == MIN_LATENCY
        engine.handle(Operation.LATENCY_DOWN)
        assert engine.latency_ms == MAX_LATENCY
        engine.handle(Operation.LATENCY_UP)
        assert engine.latency_ms == MIN_LATENCY

    def test_display_level_cycles(self, engine):
        seen = []
        for _ in range(3):
            engine.handle(Operation.CHANGE_DISPLAY)
            seen.append(engine.display_level)
        assert seen == [3, 1, 2]

    def test_resize_too_small_quits(self, engine):
        effect = engine.resize(40, 20)
        assert effect.quit
        assert engine.halted
        assert engine.message == "exit. Window < 45x8."
        assert not engine.handle(Operation.DOWN).refresh

    def test_resize_shrinks_page(self, engine):
        engine.handle(Operation.LAST)
        engine.resize(120, 17)
        assert engine.pager.per_page == 2
        assert engine.pager.page == 1
        assert engine.cursor.position == 3

    def test_quit(self, engine):
        assert engine.handle(Operation.QUIT).quit

    def test_config_warning_is_first_message(self, runner):
        eng = DashboardEngine(Settings(warnings=("width=10 outside 45-300, using 100",)), runner)
        assert eng.message.startswith("width=10")
