# app.py
from __future__ import annotations

import logging
import signal
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from PySide6.QtCore import QCoreApplication, QObject, QSocketNotifier, QThread, QTimer, Signal, Slot
from rich.console import Console
from rich.live import Live

from controls import Outcome
from engine import DashboardEngine, Done, Effect, Job
from keymap import lookup
from models import Device, DeviceCount, ServerInfo
from normalize import build_devices
from pactl_cli import PactlRunner
from pactl_parse import collect_records
from server import PulseServer
from store_config import Settings
from terminal import is_console, read_keys, terminal_size
from theme import build_theme
from view import render

logger = logging.getLogger(__name__)

RESIZE_POLL_MS = 250
WORKER_WAIT_MS = 2000


@dataclass(frozen=True)
class Snapshot:
    devices: Sequence[Device]
    counts: DeviceCount
    server: Optional[ServerInfo]


def take_snapshot(runner: PactlRunner, server: PulseServer) -> Snapshot:
    devices, counts = build_devices(collect_records(runner))
    return Snapshot(devices=devices, counts=counts, server=server.info())


class TaskWorker(QThread):
    """Runs one blocking call off the event loop and emits its result (or the exception)."""

    done = Signal(object)

    def __init__(
        self,
        fn: Callable[[], object],
        on_done: Callable[[object], None],
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._fn = fn
        self.on_done = on_done

    def run(self) -> None:
        try:
            result = self._fn()
        except Exception as e:
            logger.exception("background task failed")
            result = e
        self.done.emit((self, result))


class Dashboard(QObject):
    def __init__(
        self,
        app: QCoreApplication,
        settings: Settings,
        runner: PactlRunner,
        server: PulseServer,
        console: Optional[Console] = None,
    ) -> None:
        super().__init__()
        self.app = app
        self.settings = settings
        self.runner = runner
        self.server = server
        self.console = console or Console()
        self.theme = build_theme(settings, console=is_console())
        self.engine = DashboardEngine(settings, runner, submit=self.submit)

        self._workers: List[TaskWorker] = []
        self._refreshing = False
        self._pending = False
        self._size = (0, 0)
        self.live: Optional[Live] = None

        self.tick = QTimer(self)
        self.tick.setSingleShot(True)
        self.tick.setInterval(settings.interval_ms)
        self.tick.timeout.connect(self.request_refresh)

        self.resize_timer = QTimer(self)
        self.resize_timer.setInterval(RESIZE_POLL_MS)
        self.resize_timer.timeout.connect(self.poll_size)

        self.notifier: Optional[QSocketNotifier] = None

    # workers ---------------------------------------------------------------

    def _start(self, fn: Callable[[], object], on_done: Callable[[object], None]) -> None:
        worker = TaskWorker(fn, on_done, self)
        # queued onto the loop thread
        worker.done.connect(self._worker_done)
        worker.finished.connect(worker.deleteLater)
        self._workers.append(worker)
        worker.start()

    @Slot(object)
    def _worker_done(self, payload: object) -> None:
        worker, result = payload
        if worker in self._workers:
            self._workers.remove(worker)
        worker.on_done(result)

    def submit(self, job: Job, done: Done) -> None:
        def _on_done(result: object) -> None:
            if isinstance(result, Exception):
                result = Outcome(False, str(result))
            done(result)
            self.request_refresh()
            self.redraw()

        self._start(job, _on_done)

    def request_refresh(self) -> None:
        if self._refreshing:
            self._pending = True
            return
        self._refreshing = True
        self.tick.stop()
        self._start(lambda: take_snapshot(self.runner, self.server), self._on_snapshot)

    def _on_snapshot(self, result: object) -> None:
        self._refreshing = False
        if isinstance(result, Snapshot):
            self.engine.apply_refresh(result.devices, result.counts, result.server)
        else:
            logger.warning("refresh failed: %s", result)
        self.redraw()

        if self._pending:
            self._pending = False
            self.request_refresh()
        else:
            self.tick.start()

    # input -----------------------------------------------------------------

    def on_stdin(self, *_args) -> None:
        for key in read_keys(sys.stdin.fileno()):
            b = lookup(key)
            if b is None:
                logger.debug("unbound key %r", key)
                continue
            self.apply(self.engine.handle(b.op, b.arg))
            if self.engine.halted:
                break
        self.redraw()

    def poll_size(self) -> None:
        size = terminal_size()
        if size == self._size:
            return
        self._size = size
        self.apply(self.engine.resize(*size))
        self.redraw()

    def apply(self, effect: Effect) -> None:
        if effect.quit:
            self.app.quit()
        elif effect.refresh:
            self.request_refresh()

    def redraw(self) -> None:
        if self.live is not None:
            self.live.update(render(self.engine, self.theme), refresh=True)

    # lifecycle -------------------------------------------------------------

    def run(self) -> int:
        signal.signal(signal.SIGINT, lambda *_: self.app.quit())

        self.notifier = QSocketNotifier(sys.stdin.fileno(), QSocketNotifier.Type.Read, self)
        self.notifier.activated.connect(self.on_stdin)

        with Live(
            console=self.console,
            screen=self.settings.fullscreen,
            auto_refresh=False,
            transient=False,
        ) as live:
            self.live = live
            rc = 0
            self.poll_size()
            if not self.engine.halted:
                self.request_refresh()
                self.resize_timer.start()
                rc = self.app.exec()
            self.live = None

        self.shutdown()
        if self.engine.halted and self.engine.message:
            self.console.print(self.engine.message)
        return rc

    def shutdown(self) -> None:
        self.tick.stop()
        self.resize_timer.stop()
        if self.notifier is not None:
            self.notifier.setEnabled(False)
        stuck = [w for w in list(self._workers) if not w.wait(WORKER_WAIT_MS)]
        if stuck:
            # a worker may still be inside the pulse connection
            logger.warning("%d background task(s) still running, leaving the server connection open", len(stuck))
            return
        self.server.close()


def run_dashboard(settings: Settings, runner: PactlRunner, server: PulseServer) -> int:
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    return Dashboard(app, settings, runner, server).run()
