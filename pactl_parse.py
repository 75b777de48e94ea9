# pactl_parse.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from channels import split_channel_map
from models import KIND_ORDER, Channel, DeviceKind
from pactl_cli import CommandError, PactlRunner

logger = logging.getLogger(__name__)

TITLE_FIELD = "media.name"

RecordMap = Dict[DeviceKind, List["RawRecord"]]


@dataclass(frozen=True)
class RawRecord:
    kind: DeviceKind
    fields: Dict[str, Any]
    properties: Dict[str, str] = field(default_factory=dict)
    channels: Tuple[Channel, ...] = ()
    title: Optional[str] = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    def prop(self, key: str) -> str:
        return self.properties.get(key, "")


def as_int(v: Any, default: Optional[int] = None) -> Optional[int]:
    if isinstance(v, bool):
        return default
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def as_float(v: Any, default: float = 0.0) -> float:
    if isinstance(v, bool):
        return default
    try:
        return float(v)
    except (TypeError, ValueError):
        return default


def as_str(v: Any) -> str:
    if v is None:
        return ""
    return str(v).strip('"')


def _props(obj: Dict[str, Any]) -> Dict[str, str]:
    src = obj.get("properties")
    if not isinstance(src, dict):
        return {}
    return {str(k): as_str(v) for k, v in src.items()}


def channel_list(channel_map: str) -> List[str]:
    return split_channel_map(channel_map)


def parse_percent(v: Any) -> Optional[float]:
    if not isinstance(v, str):
        return None
    s = v.strip().rstrip("%").strip()
    if not s:
        return None
    try:
        return float(s)
    except ValueError:
        return None


def channel_volumes(volume: Any, channels: List[str]) -> List[Channel]:
    """Pair every channel name with its ``value_percent`` entry.

    Channels whose entry is missing or unreadable are left out.
    """
    if not isinstance(volume, dict):
        return []

    out: List[Channel] = []
    for ch in channels:
        entry = volume.get(ch)
        if not isinstance(entry, dict):
            continue
        pct = parse_percent(entry.get("value_percent"))
        if pct is None:
            continue
        out.append((ch, pct))
    return out


def parse_payload(kind: DeviceKind, payload: str) -> List[RawRecord]:
    if not payload or not payload.strip():
        return []

    try:
        data = json.loads(payload)
    except ValueError as e:
        logger.debug("skipping %s: malformed json (%s)", kind.label, e)
        return []

    if not isinstance(data, list):
        logger.debug("skipping %s: json is not a list", kind.label)
        return []

    out: List[RawRecord] = []
    for obj in data:
        if not isinstance(obj, dict):
            continue
        chans: Tuple[Channel, ...] = ()
        if kind != DeviceKind.CARD:
            names = channel_list(as_str(obj.get("channel_map")))
            chans = tuple(channel_volumes(obj.get("volume"), names))
        out.append(RawRecord(kind=kind, fields=obj, properties=_props(obj), channels=chans))
    return out


def _unquote(s: str) -> str:
    s = s.strip()
    if len(s) >= 2 and s[0] == s[-1] == '"':
        return s[1:-1].strip()
    return s


def stream_titles(text: str) -> List[str]:
    if not text:
        return []

    marker = f"{TITLE_FIELD} ="
    titles: List[str] = []
    for line in text.splitlines():
        s = line.strip()
        if not s.startswith(marker):
            continue
        titles.append(_unquote(s[len(marker):]))
    return titles


def attach_titles(records: List[RawRecord], titles: List[str]) -> List[RawRecord]:
    if len(titles) < len(records):
        logger.debug(
            "stream text listing has %d titles for %d streams, falling back to json",
            len(titles),
            len(records),
        )

    out: List[RawRecord] = []
    for i, r in enumerate(records):
        if i < len(titles):
            out.append(replace(r, title=titles[i]))
        else:
            out.append(replace(r, title=r.prop(TITLE_FIELD)))
    return out


def collect_records(runner: PactlRunner) -> RecordMap:
    records: RecordMap = {}
    for kind in KIND_ORDER:
        try:
            payload = runner.list(kind)
        except CommandError as e:
            logger.debug("skipping %s: %s", kind.label, e)
            continue

        parsed = parse_payload(kind, payload)
        if not parsed:
            continue

        if kind == DeviceKind.STREAM:
            try:
                text = runner.text_list()
            except CommandError as e:
                logger.debug("stream text listing failed: %s", e)
                text = ""
            parsed = attach_titles(parsed, stream_titles(text))

        records[kind] = parsed
    return records
