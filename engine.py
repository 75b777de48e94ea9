# engine.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from functools import partial
from typing import Callable, Dict, Optional, Sequence

import controls
import navigation
from channels import position_code
from controls import Outcome
from dispatch import Action, resolve
from keymap import Operation
from models import Device, DeviceCount, DeviceKind, Selection, ServerInfo
from pactl_cli import PactlRunner
from paging import (
    ALL_CHANNELS,
    CHROME_LINES,
    MIN_HEIGHT,
    MIN_WIDTH,
    Cursor,
    Layout,
    Pager,
    clamp_channel,
    compute_layout,
    entry_lines,
    reconcile,
)
from registry import DeviceRegistry
from store_config import Settings

logger = logging.getLogger(__name__)

MIN_LATENCY = 10
MAX_LATENCY = 500
LATENCY_STEP = 10

Job = Callable[[], Outcome]
Done = Callable[[Outcome], None]
Submit = Callable[[Job, Done], None]


def run_inline(job: Job, done: Done) -> None:
    done(job())


@dataclass(frozen=True)
class Effect:
    refresh: bool = False
    quit: bool = False


NOTHING = Effect()
REFRESH = Effect(refresh=True)


def initial_layout(settings: Settings, display_level: int) -> Layout:
    height = CHROME_LINES + settings.items * entry_lines(display_level)
    return compute_layout(settings.width + 4, height, settings.width, settings.items, display_level)


class DashboardEngine:
    """All dashboard state, mutated only from the event loop.

    Commands that touch the sound server are handed to ``submit`` and their
    outcome comes back through a callback; nothing here waits on them.
    """

    def __init__(
        self,
        settings: Settings,
        runner: PactlRunner,
        submit: Submit = run_inline,
    ) -> None:
        self.settings = settings
        self.runner = runner
        self._submit = submit

        self.registry = DeviceRegistry()
        self.server: Optional[ServerInfo] = None
        self.display_level = settings.device_display
        self.layout = initial_layout(settings, self.display_level)
        self.cursor = Cursor()
        self.pager = Pager(per_page=self.layout.per_page)
        self.selection: Optional[Selection] = None

        self.show_messages = not settings.no_messages
        self.show_full_help = False
        self.message = settings.warnings[0] if settings.warnings else ""
        self.latency_ms = MIN_LATENCY
        self.halted = False

        self._handlers: Dict[Operation, Callable[[Optional[int]], Effect]] = {
            Operation.QUIT: lambda _a: Effect(quit=True),
            Operation.REFRESH: lambda _a: REFRESH,
            Operation.UP: lambda _a: self._move(navigation.up, refresh=True),
            Operation.DOWN: lambda _a: self._move(navigation.down, refresh=True),
            Operation.FIRST: lambda _a: self._move(navigation.first),
            Operation.LAST: lambda _a: self._move(navigation.last),
            Operation.NEXT_PAGE: lambda _a: self._move(navigation.next_page),
            Operation.PREV_PAGE: lambda _a: self._move(navigation.prev_page),
            Operation.ESCAPE: lambda _a: self.escape(),
            Operation.PERFORM_ACTION: lambda _a: self.perform_action(),
            Operation.SELECT_DEVICE: lambda _a: self.select_device(),
            Operation.CHANGE_CHANNEL: lambda _a: self.change_channel(),
            Operation.CHANGE_DISPLAY: lambda _a: self.change_display(),
            Operation.SHOW_HELP: lambda _a: self.toggle_help(),
            Operation.SHOW_MESSAGES: lambda _a: self.toggle_messages(),
            Operation.KILL_STREAM: lambda _a: self.kill_stream(),
            Operation.UNLOAD_LOOPBACK: lambda _a: self.unload_loopbacks(),
            Operation.MUTE: lambda _a: self.toggle_mute(),
            Operation.VOLUME_UP: lambda _a: self.step_volume(True),
            Operation.VOLUME_DOWN: lambda _a: self.step_volume(False),
            Operation.NORMALIZE: lambda a: self.normalize(a or 100),
            Operation.LATENCY_UP: lambda _a: self.change_latency(True),
            Operation.LATENCY_DOWN: lambda _a: self.change_latency(False),
        }

    # state -----------------------------------------------------------------

    @property
    def counts(self) -> DeviceCount:
        return self.registry.counts

    @property
    def navigable_total(self) -> int:
        return self.registry.navigable_total

    def current(self) -> Optional[Device]:
        if self.navigable_total <= 0:
            return None
        return self.registry.get(self.cursor.position)

    def page_devices(self) -> Sequence[Device]:
        devs = self.registry.navigable()
        start, end = self.pager.slice_bounds(len(devs))
        return devs[start:end]

    def _reconcile(self, before: Optional[Device] = None) -> None:
        self.cursor, self.pager = reconcile(self.cursor, self.pager, self.navigable_total)
        dev = self.current()
        same = before is None or (dev is not None and dev.kind == before.kind and dev.index == before.index)
        self.cursor = clamp_channel(self.cursor, dev.channel_count if dev is not None else 0, same)

    # events ----------------------------------------------------------------

    def apply_refresh(
        self,
        devices: Sequence[Device],
        counts: DeviceCount,
        server: Optional[ServerInfo] = None,
    ) -> None:
        before = self.current()
        self.registry.replace(devices, counts)
        if server is not None:
            self.server = server
        self._reconcile(before)

    def resize(self, width: int, height: int) -> Effect:
        self.layout = compute_layout(width, height, self.settings.width, self.settings.items, self.display_level)
        if self.layout.too_small:
            self.halted = True
            self.message = f"exit. Window < {MIN_WIDTH}x{MIN_HEIGHT}."
            logger.info("terminal too small (%dx%d), exiting", width, height)
            return Effect(quit=True)

        self.pager = replace(self.pager, per_page=self.layout.per_page)
        self._reconcile()
        return NOTHING

    def handle(self, op: Operation, arg: Optional[int] = None) -> Effect:
        if self.halted:
            return NOTHING
        return self._handlers[op](arg)

    def _finish(self, outcome: Outcome) -> None:
        if outcome.message:
            self.message = outcome.message

    def _run(self, job: Job, done: Optional[Done] = None) -> None:
        self._submit(job, done or self._finish)

    # navigation ------------------------------------------------------------

    def _move(self, step, refresh: bool = False) -> Effect:
        mv = step(self.cursor, self.pager, self.navigable_total)
        if not mv.moved:
            return NOTHING
        self.cursor, self.pager = mv.cursor, mv.pager
        if mv.message is not None:
            self.message = mv.message
        return REFRESH if refresh else NOTHING

    def escape(self) -> Effect:
        self.cursor = replace(self.cursor, channel_mode=ALL_CHANNELS)
        self.selection = None
        self.message = ""
        return REFRESH

    def change_channel(self) -> Effect:
        dev = self.current()
        if dev is None:
            return NOTHING
        self.cursor = navigation.cycle_channel(self.cursor, dev)
        mode = self.cursor.channel_mode
        if mode == ALL_CHANNELS:
            self.message = f"all channels selected balance: {dev.balance:g}"
        else:
            self.message = f"channel: {position_code(dev.channels[mode][0])} balance: {dev.balance:g}"
        return REFRESH

    # view toggles ----------------------------------------------------------

    def change_display(self) -> Effect:
        self.display_level = self.display_level + 1 if self.display_level < 3 else 1
        self.layout = compute_layout(
            self.layout.term_width,
            self.layout.term_height,
            self.settings.width,
            self.settings.items,
            self.display_level,
        )
        self.pager = replace(self.pager, per_page=self.layout.per_page)
        self._reconcile()
        return REFRESH

    def toggle_help(self) -> Effect:
        self.show_full_help = not self.show_full_help
        return NOTHING

    def toggle_messages(self) -> Effect:
        self.show_messages = not self.show_messages
        self.message = "messages on" if self.show_messages else ""
        return NOTHING

    def change_latency(self, increase: bool) -> Effect:
        if increase:
            self.latency_ms += LATENCY_STEP
            if self.latency_ms > MAX_LATENCY:
                self.latency_ms = MIN_LATENCY
        else:
            self.latency_ms -= LATENCY_STEP
            if self.latency_ms < MIN_LATENCY:
                self.latency_ms = MAX_LATENCY
        self.message = f"latency set to: {self.latency_ms} milliseconds"
        return NOTHING

    # selection & dispatch --------------------------------------------------

    def select_device(self) -> Effect:
        dev = self.current()
        if dev is None:
            return NOTHING
        self.selection = Selection(kind=dev.kind, index=dev.index, name=dev.description)
        self.message = "device selected"
        return NOTHING

    def perform_action(self) -> Effect:
        target = self.current()
        if target is None:
            self.message = "no devices"
            return NOTHING

        sel = self.selection
        present = sel is None or self.registry.find(sel.kind, sel.index) is not None
        res = resolve(sel, target, armed_present=present)
        if not res.accepted:
            self.message = res.message
            if res.drop_selection:
                self.selection = None
            return NOTHING

        job = self._action_job(res.action, sel, target)
        # single shot: disarm now so a second enter cannot fire the same pairing
        self.selection = None
        self._run(job, partial(self._matrix_done, sel))
        return NOTHING

    def _action_job(self, action: Action, sel: Optional[Selection], target: Device) -> Job:
        r = self.runner
        if action == Action.SET_DEFAULT_SINK:
            return partial(controls.set_default_sink, r, target, self.registry.indexes_of(DeviceKind.STREAM))
        if action == Action.SET_DEFAULT_SOURCE:
            return partial(controls.set_default_source, r, target)
        if action == Action.SUSPEND_TOGGLE:
            return partial(controls.suspend_toggle, r, target)
        if action == Action.MOVE_STREAM:
            return partial(controls.move_stream, r, target.index, sel.index)
        if action == Action.MOVE_OUTPUT:
            return partial(controls.move_output, r, target.index, sel.index)
        if action == Action.LOOPBACK:
            return partial(controls.loopback, r, target.index, sel.index, self.latency_ms)
        raise ValueError(f"unhandled action: {action}")

    def _matrix_done(self, armed: Optional[Selection], outcome: Outcome) -> None:
        self._finish(outcome)
        if not outcome.ok and armed is not None and self.selection is None:
            self.selection = armed

    # direct device commands ------------------------------------------------

    def toggle_mute(self) -> Effect:
        dev = self.current()
        if dev is None:
            return NOTHING
        self._run(partial(controls.toggle_mute, self.runner, dev))
        return NOTHING

    def step_volume(self, increase: bool) -> Effect:
        dev = self.current()
        if dev is None:
            return NOTHING
        if not dev.channels:
            self.message = f"no channel volumes for {dev.description or dev.name}"
            return NOTHING

        args = controls.volume_step_args(
            dev.volumes,
            self.cursor.channel_mode,
            self.settings.volume_steps,
            self.settings.volume_limit,
            increase,
        )
        if increase and all(a == "+0%" for a in args):
            self.message = f"volume limit {self.settings.volume_limit}% reached"
            return NOTHING
        self._run(partial(controls.change_volume, self.runner, dev, args))
        return NOTHING

    def normalize(self, percent: int) -> Effect:
        dev = self.current()
        if dev is None:
            return NOTHING
        self.cursor = replace(self.cursor, channel_mode=ALL_CHANNELS)
        self._run(partial(controls.normalize_volume, self.runner, dev, percent))
        return NOTHING

    def kill_stream(self) -> Effect:
        dev = self.current()
        if dev is None:
            return NOTHING
        if dev.kind not in (DeviceKind.STREAM, DeviceKind.OUTPUT):
            self.message = f"cannot kill non-stream {dev.name}"
            return NOTHING
        self._run(partial(controls.kill_device, self.runner, dev))
        return NOTHING

    def unload_loopbacks(self) -> Effect:
        self.selection = None
        self._run(partial(controls.unload_loopbacks, self.runner))
        return NOTHING
