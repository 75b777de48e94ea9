# store_config.py
from __future__ import annotations

import configparser
import logging
import os
import platform
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)

APP_DIR = "pulsemanager"

DEFAULT_CONFIG_TEXT = """\
[Settings]
fullscreen = true
no_help = false
no_messages = false
no_title = false
no_symbols = false
width = 100
items = 4
volume_limit = 110
volume_steps = 5
device_display = 2
interval_ms = 1000

[Colors]
inactive = bright_black
active = magenta
sink = white
stream = blue
source = white
output = blue

[Styles]
border = normal
"""

# (minimum, maximum) for integer settings; values outside fall back to defaults
LIMITS: Dict[str, Tuple[int, int]] = {
    "width": (45, 300),
    "items": (1, 12),
    "volume_limit": (50, 180),
    "volume_steps": (1, 30),
    "device_display": (1, 3),
    "interval_ms": (250, 10000),
}

BORDERS = ("normal", "hidden", "rounded", "heavy", "double")


@dataclass(frozen=True)
class Colors:
    inactive: str = "bright_black"
    active: str = "magenta"
    sink: str = "white"
    stream: str = "blue"
    source: str = "white"
    output: str = "blue"


@dataclass(frozen=True)
class Settings:
    fullscreen: bool = True
    no_help: bool = False
    no_messages: bool = False
    no_title: bool = False
    no_symbols: bool = False
    no_color: bool = False
    width: int = 100
    items: int = 4
    volume_limit: int = 110
    volume_steps: int = 5
    device_display: int = 2
    interval_ms: int = 1000
    border: str = "normal"
    colors: Colors = field(default_factory=Colors)
    warnings: Tuple[str, ...] = ()

    def validated(self) -> "Settings":
        return validate(self)


def _linux_xdg_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def user_config_dir(app_name: str = APP_DIR) -> Path:
    sysname = (platform.system() or "").lower()
    if sysname.startswith("linux"):
        return _linux_xdg_config_dir() / app_name
    return Path.home() / ".config" / app_name


def have_no_color() -> bool:
    return bool(os.environ.get("NO_COLOR", ""))


def validate(s: Settings) -> Settings:
    defaults = Settings()
    warnings: List[str] = list(s.warnings)
    changes = {}
    for name, (lo, hi) in LIMITS.items():
        v = getattr(s, name)
        if not lo <= v <= hi:
            warnings.append(f"{name}={v} outside {lo}-{hi}, using {getattr(defaults, name)}")
            changes[name] = getattr(defaults, name)
    if s.border not in BORDERS:
        warnings.append(f"unknown border {s.border!r}, using normal")
        changes["border"] = "normal"
    return replace(s, warnings=tuple(warnings), **changes)


@dataclass(frozen=True)
class ConfigStore:
    app_name: str = APP_DIR
    filename: str = "pulsemanager.cfg"
    base_dir: Path | None = None

    @property
    def dir_path(self) -> Path:
        if self.base_dir is not None:
            return self.base_dir
        return user_config_dir(self.app_name)

    @property
    def file_path(self) -> Path:
        return self.dir_path / self.filename

    def ensure_exists(self) -> None:
        self.dir_path.mkdir(parents=True, exist_ok=True)
        if not self.file_path.exists():
            self.file_path.write_text(DEFAULT_CONFIG_TEXT, encoding="utf-8")

    def load(self) -> configparser.ConfigParser:
        cfg = configparser.ConfigParser()
        cfg.read_string(DEFAULT_CONFIG_TEXT)
        try:
            self.ensure_exists()
            cfg.read(self.file_path, encoding="utf-8")
        except OSError as e:
            logger.warning("config file %s unreadable: %s", self.file_path, e)
        return cfg

    def settings(self) -> Settings:
        """Read the file into a validated Settings value.

        A broken file never stops the program; every problem becomes a
        warning and the default for that key is used.
        """
        warnings: List[str] = []
        try:
            cfg = self.load()
        except configparser.Error as e:
            logger.warning("config file %s is malformed: %s", self.file_path, e)
            cfg = configparser.ConfigParser()
            cfg.read_string(DEFAULT_CONFIG_TEXT)
            warnings.append("error reading config file")

        defaults = Settings()
        values = {}
        for f in fields(Settings):
            if f.name in ("colors", "warnings", "border", "no_color"):
                continue
            default = getattr(defaults, f.name)
            try:
                if isinstance(default, bool):
                    values[f.name] = cfg.getboolean("Settings", f.name, fallback=default)
                else:
                    values[f.name] = cfg.getint("Settings", f.name, fallback=default)
            except ValueError:
                warnings.append(f"invalid value for {f.name}, using {default}")
                values[f.name] = default

        dc = Colors()
        colors = Colors(**{
            f.name: cfg.get("Colors", f.name, fallback=getattr(dc, f.name)).strip() or getattr(dc, f.name)
            for f in fields(Colors)
        })
        border = cfg.get("Styles", "border", fallback="normal").strip().lower()

        s = Settings(
            **values,
            border=border,
            colors=colors,
            no_color=have_no_color(),
            warnings=tuple(warnings),
        )
        return validate(s)
