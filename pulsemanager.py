# pulsemanager.py
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from pactl_cli import PACTL, PactlRunner, have_program
from server import PulseServer, ServerUnavailable
from store_config import ConfigStore, Settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="pulse-manager",
        description="Terminal dashboard for PulseAudio sinks, sources and streams",
    )
    p.add_argument("-f", "--fullscreen", dest="fullscreen", action="store_true", default=None,
                   help="use the alternate screen")
    p.add_argument("--no-fullscreen", dest="fullscreen", action="store_false",
                   help="draw inline instead of on the alternate screen")
    p.add_argument("-H", "--no-help", action="store_true", default=None, help="hide the key help")
    p.add_argument("-t", "--no-title", action="store_true", default=None, help="hide the title line")
    p.add_argument("-v", "--no-messages", action="store_true", default=None, help="hide status messages")
    p.add_argument("-u", "--no-symbols", action="store_true", default=None, help="plain text instead of icons")
    p.add_argument("-i", "--max-items", type=int, dest="items", help="devices per page (1-12)")
    p.add_argument("-w", "--max-width", type=int, dest="width", help="maximum width (45-300)")
    p.add_argument("-m", "--max-volume", type=int, dest="volume_limit", help="volume limit in percent (50-180)")
    p.add_argument("-s", "--volume-steps", type=int, dest="volume_steps", help="volume step in percent (1-30)")
    p.add_argument("-d", "--device-display", type=int, dest="device_display", help="display level (1-3)")
    p.add_argument("--log-file", help="write a log to this file")
    p.add_argument("--debug", action="store_true", help="log at debug level")
    return p.parse_args(argv)


def merge_args(settings: Settings, args: argparse.Namespace) -> Settings:
    """Layer the flags that were given over the file settings and validate again."""
    keys = (
        "fullscreen", "no_help", "no_title", "no_messages", "no_symbols",
        "items", "width", "volume_limit", "volume_steps", "device_display",
    )
    changes = {k: getattr(args, k) for k in keys if getattr(args, k) is not None}
    if not changes:
        return settings
    return replace(settings, **changes).validated()


def setup_logging(log_file: Optional[str], debug: bool) -> None:
    root = logging.getLogger()
    if not log_file:
        root.addHandler(logging.NullHandler())
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.debug)

    if not have_program(PACTL):
        print(f'pulseaudio: "{PACTL}" not found in path, is pulseaudio installed?', file=sys.stderr)
        return 1

    server = PulseServer()
    try:
        info = server.fetch_info()
    except ServerUnavailable as e:
        print(str(e), file=sys.stderr)
        return 1
    logger.info("connected to %s %s", info.name, info.version)

    settings = merge_args(ConfigStore().settings(), args)
    for w in settings.warnings:
        logger.warning("config: %s", w)

    # imported late so argument errors and missing servers never need Qt
    from app import run_dashboard
    from terminal import cbreak

    if not sys.stdin.isatty():
        print("pulse-manager needs an interactive terminal", file=sys.stderr)
        server.close()
        return 1

    with cbreak(sys.stdin.fileno()):
        return run_dashboard(settings, PactlRunner(), server)


if __name__ == "__main__":
    raise SystemExit(main())
