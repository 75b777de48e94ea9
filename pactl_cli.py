# pactl_cli.py
from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
from typing import Sequence

from models import DeviceKind

logger = logging.getLogger(__name__)

PACTL = "pactl"

LIST_TARGETS = {
    DeviceKind.SINK: "sinks",
    DeviceKind.STREAM: "sink-inputs",
    DeviceKind.SOURCE: "sources",
    DeviceKind.OUTPUT: "source-outputs",
    DeviceKind.CARD: "cards",
}


class CommandError(RuntimeError):
    pass


def _run(cmd: Sequence[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(list(cmd), capture_output=True, text=True)


def have_program(name: str = PACTL) -> bool:
    return shutil.which(name) is not None


class PactlRunner:
    """Blocking wrapper around the pactl binary.

    Every method either returns the command output or raises CommandError;
    callers run it off the event loop.
    """

    def __init__(self, binary: str = PACTL) -> None:
        self.binary = binary

    def _call(self, args: Sequence[str]) -> str:
        cmd = [self.binary, *args]
        logger.debug("exec %s", " ".join(cmd))
        try:
            p = _run(cmd)
        except OSError as e:
            raise CommandError(f"{self.binary} could not be started: {e}") from e

        if p.returncode != 0:
            msg = (p.stderr or p.stdout).strip()
            raise CommandError(f"{self.binary} {' '.join(args)} failed: {msg}")
        return p.stdout

    def list(self, kind: DeviceKind) -> str:
        return self._call(["-f", "json", "list", LIST_TARGETS[kind]])

    def text_list(self) -> str:
        return self._call(["-f", "text", "list", LIST_TARGETS[DeviceKind.STREAM]])

    def run(self, command: str, *args: object) -> None:
        self._call([command, *(str(a) for a in args)])

    def query(self, command: str, *args: object) -> str:
        return self._call([command, *(str(a) for a in args)])

    def kill(self, pid: str) -> None:
        try:
            os.kill(int(pid), signal.SIGKILL)
        except ValueError as e:
            raise CommandError(f"invalid process id: {pid!r}") from e
        except OSError as e:
            raise CommandError(f"kill {pid} failed: {e.strerror or e}") from e
