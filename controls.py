# controls.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

from models import SUSPENDED_STATE, Device, DeviceKind
from paging import ALL_CHANNELS
from pactl_cli import CommandError, PactlRunner

logger = logging.getLogger(__name__)

TOGGLE = "toggle"
LOOPBACK_MODULE = "module-loopback"

VOLUME_COMMANDS: Dict[DeviceKind, str] = {
    DeviceKind.SINK: "set-sink-volume",
    DeviceKind.STREAM: "set-sink-input-volume",
    DeviceKind.SOURCE: "set-source-volume",
    DeviceKind.OUTPUT: "set-source-output-volume",
}

MUTE_COMMANDS: Dict[DeviceKind, str] = {
    DeviceKind.SINK: "set-sink-mute",
    DeviceKind.STREAM: "set-sink-input-mute",
    DeviceKind.SOURCE: "set-source-mute",
    DeviceKind.OUTPUT: "set-source-output-mute",
}

# streams and outputs have no get-mute counterpart
MUTE_QUERIES: Dict[DeviceKind, str] = {
    DeviceKind.SINK: "get-sink-mute",
    DeviceKind.SOURCE: "get-source-mute",
}

SUSPEND_COMMANDS: Dict[DeviceKind, str] = {
    DeviceKind.SINK: "suspend-sink",
    DeviceKind.SOURCE: "suspend-source",
}

NORMALIZE_LEVELS = (10, 20, 30, 40, 50, 60, 70, 80, 90, 100)


@dataclass(frozen=True)
class Outcome:
    ok: bool
    message: str


def _failed(message: str, err: CommandError) -> Outcome:
    logger.warning("%s: %s", message, err)
    return Outcome(False, message)


def _pct(v: float) -> str:
    return f"{v:g}%"


def set_default_sink(runner: PactlRunner, sink: Device, streams: Sequence[int]) -> Outcome:
    try:
        runner.run("set-default-sink", sink.index)
    except CommandError as e:
        return _failed("error changing default sink", e)

    failed = 0
    for stream in streams:
        try:
            runner.run("move-sink-input", stream, sink.index)
        except CommandError as e:
            logger.warning("moving stream #%s to sink #%s failed: %s", stream, sink.index, e)
            failed += 1
    if failed:
        return Outcome(False, f"default sink changed, {failed} stream(s) not moved")
    return Outcome(True, f"changed default sink to: {sink.name}")


def set_default_source(runner: PactlRunner, source: Device) -> Outcome:
    try:
        runner.run("set-default-source", source.index)
    except CommandError as e:
        return _failed("error changing default source", e)
    return Outcome(True, f"changed default source to: {source.name}")


def suspend_toggle(runner: PactlRunner, device: Device) -> Outcome:
    cmd = SUSPEND_COMMANDS.get(device.kind)
    if cmd is None:
        return Outcome(False, f"cannot suspend a {device.kind.label}")

    state = getattr(device, "state", "")
    suspend = "0" if state == SUSPENDED_STATE else "1"
    try:
        runner.run(cmd, device.index, suspend)
    except CommandError as e:
        return _failed("error suspending device", e)
    verb = "suspended" if suspend == "1" else "resumed"
    return Outcome(True, f"{verb}: {device.description}")


def move_stream(runner: PactlRunner, stream: int, sink: int) -> Outcome:
    try:
        runner.run("move-sink-input", stream, sink)
    except CommandError as e:
        return _failed("error migrating stream", e)
    return Outcome(True, f"stream: #{stream} sent to sink: #{sink}")


def move_output(runner: PactlRunner, output: int, source: int) -> Outcome:
    try:
        runner.run("move-source-output", output, source)
    except CommandError as e:
        return _failed("error migrating output", e)
    return Outcome(True, f"output: #{output} sent to source: #{source}")


def loopback(runner: PactlRunner, source: int, sink: int, latency_ms: int) -> Outcome:
    try:
        runner.run(
            "load-module",
            LOOPBACK_MODULE,
            f"latency_msec={latency_ms}",
            f"sink={sink}",
            f"source={source}",
        )
    except CommandError as e:
        return _failed("error executing source loopback", e)
    return Outcome(True, f"source: #{source} looped to sink: #{sink}")


def unload_loopbacks(runner: PactlRunner) -> Outcome:
    try:
        runner.run("unload-module", LOOPBACK_MODULE)
    except CommandError as e:
        return _failed("error unloading loopback module", e)
    return Outcome(True, "killed all loopback streams")


def toggle_mute(runner: PactlRunner, device: Device) -> Outcome:
    cmd = MUTE_COMMANDS.get(device.kind)
    if cmd is None:
        return Outcome(False, f"cannot mute a {device.kind.label}")

    try:
        runner.run(cmd, device.index, TOGGLE)
    except CommandError as e:
        return _failed("error toggling device mute", e)

    q = MUTE_QUERIES.get(device.kind)
    if q is None:
        return Outcome(True, f"mute toggled: {device.description}")

    try:
        out = runner.query(q, device.index)
    except CommandError as e:
        return _failed("error retrieving device mute", e)

    low = out.lower()
    if "yes" in low:
        return Outcome(True, f"muted: {device.description}")
    if "no" in low:
        return Outcome(True, f"unmuted: {device.description}")
    return Outcome(True, f"mute toggled: {device.description}")


def volume_step_args(
    volumes: Sequence[float],
    channel_mode: int,
    step: float,
    limit: float,
    increase: bool,
) -> List[str]:
    """Relative per-channel volume arguments for one key press.

    Channels outside the channel mode get a zero step; increases stop at the
    limit and decreases stop at zero.
    """
    sign = "+" if increase else "-"
    out: List[str] = []
    for i, v in enumerate(volumes):
        if channel_mode != ALL_CHANNELS and channel_mode != i:
            delta = 0.0
        elif increase:
            delta = max(0.0, min(step, limit - v))
        else:
            delta = max(0.0, min(step, v))
        out.append(f"{sign}{_pct(delta)}")
    return out


def change_volume(runner: PactlRunner, device: Device, args: Sequence[str]) -> Outcome:
    cmd = VOLUME_COMMANDS.get(device.kind)
    if cmd is None:
        return Outcome(False, f"cannot change volume of a {device.kind.label}")
    try:
        runner.run(cmd, device.index, *args)
    except CommandError as e:
        return _failed("error changing device volume", e)
    return Outcome(True, "")


def normalize_volume(runner: PactlRunner, device: Device, percent: int) -> Outcome:
    cmd = VOLUME_COMMANDS.get(device.kind)
    if cmd is None:
        return Outcome(False, f"cannot change volume of a {device.kind.label}")
    try:
        runner.run(cmd, device.index, f"{percent}%")
    except CommandError as e:
        return _failed("error normalizing volume", e)
    return Outcome(True, f"volume set to {percent}%")


def kill_device(runner: PactlRunner, device: Device) -> Outcome:
    if device.kind not in (DeviceKind.STREAM, DeviceKind.OUTPUT):
        return Outcome(False, f"cannot kill non-stream {device.name}")

    if device.is_loopback:
        try:
            runner.run("unload-module", device.module_id)
        except CommandError as e:
            return _failed(f"error unloading module: #{device.module_id} {device.description}", e)
        return Outcome(True, f"killed {device.description}")

    pid = getattr(device, "pid", "")
    if not pid:
        return Outcome(False, f"no process id for {device.name}")
    try:
        runner.kill(pid)
    except CommandError as e:
        return _failed(f"error killing stream: {device.name}", e)
    return Outcome(True, f"killed stream: {device.name}")
