"""pytest configuration and fixtures for the dashboard tests."""

import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

# Modules live at the project root
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from pactl_cli import CommandError  # noqa: E402


class FakeRunner:
    """Records every pactl call; commands listed in ``fail`` raise CommandError."""

    def __init__(self, fail: Tuple[str, ...] = (), answers: Optional[dict] = None) -> None:
        self.calls: List[Tuple[str, ...]] = []
        self.killed: List[str] = []
        self.fail = fail
        self.answers = answers or {}

    def run(self, command: str, *args: object) -> None:
        self.calls.append((command,) + tuple(str(a) for a in args))
        if command in self.fail:
            raise CommandError(f"{command} failed")

    def query(self, command: str, *args: object) -> str:
        self.calls.append((command,) + tuple(str(a) for a in args))
        if command in self.fail:
            raise CommandError(f"{command} failed")
        return self.answers.get(command, "")

    def kill(self, pid: str) -> None:
        if "kill" in self.fail:
            raise CommandError(f"kill {pid} failed")
        self.killed.append(pid)


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def make_runner():
    return FakeRunner
