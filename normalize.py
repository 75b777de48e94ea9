# normalize.py
from __future__ import annotations

from typing import Callable, Dict, List, Tuple

from models import (
    KIND_ORDER,
    CardDevice,
    Device,
    DeviceCount,
    DeviceKind,
    OutputDevice,
    SinkDevice,
    SourceDevice,
    StreamDevice,
)
from pactl_parse import RawRecord, RecordMap, as_float, as_int, as_str


def _common(r: RawRecord, ordinal: int) -> Dict[str, object]:
    return {
        "index": as_int(r.get("index"), -1),
        "ordinal": ordinal,
        "driver": as_str(r.get("driver")),
        "module_id": as_str(r.get("owner_module")),
        "channels": r.channels,
        "mute": r.get("mute") is True,
        "balance": as_float(r.get("balance")),
    }


def _endpoint_fields(r: RawRecord) -> Dict[str, object]:
    return {
        "name": as_str(r.get("name")),
        "description": as_str(r.get("description")),
        "state": as_str(r.get("state")),
        "sample_spec": as_str(r.get("sample_specification")),
        "port": as_str(r.get("active_port")),
        "card_name": r.prop("alsa.card_name"),
        "bus": r.prop("device.bus"),
        "battery": r.prop("bluetooth.battery"),
    }


def sink_from_record(r: RawRecord, ordinal: int) -> SinkDevice:
    return SinkDevice(**_common(r, ordinal), **_endpoint_fields(r))


def source_from_record(r: RawRecord, ordinal: int) -> SourceDevice:
    return SourceDevice(**_common(r, ordinal), **_endpoint_fields(r))


def stream_from_record(r: RawRecord, ordinal: int) -> StreamDevice:
    # the json encoder mangles non-ascii titles; the text listing does not
    title = r.title if r.title is not None else r.prop("media.name")
    return StreamDevice(
        **_common(r, ordinal),
        name=r.prop("application.process.binary"),
        description=title,
        sink_index=as_int(r.get("sink")),
        pid=r.prop("application.process.id"),
    )


def output_from_record(r: RawRecord, ordinal: int) -> OutputDevice:
    return OutputDevice(
        **_common(r, ordinal),
        name=r.prop("media.name"),
        description=r.prop("application.icon_name"),
        source_index=as_int(r.get("source")),
        pid=r.prop("application.process.id"),
        sample_spec=as_str(r.get("sample_specification")),
        latency_usec=as_float(r.get("source_latency_usec")),
    )


def card_from_record(r: RawRecord, ordinal: int) -> CardDevice:
    c = _common(r, ordinal)
    c["channels"] = ()
    return CardDevice(
        **c,
        name=as_str(r.get("name")),
        description=r.prop("device.description"),
        battery=r.prop("bluetooth.battery"),
    )


BUILDERS: Dict[DeviceKind, Callable[[RawRecord, int], Device]] = {
    DeviceKind.SINK: sink_from_record,
    DeviceKind.STREAM: stream_from_record,
    DeviceKind.SOURCE: source_from_record,
    DeviceKind.OUTPUT: output_from_record,
    DeviceKind.CARD: card_from_record,
}


def build_devices(records: RecordMap) -> Tuple[List[Device], DeviceCount]:
    ordered = [r for kind in KIND_ORDER for r in records.get(kind, [])]
    devices = [BUILDERS[r.kind](r, ordinal) for ordinal, r in enumerate(ordered)]

    counts = DeviceCount(
        sinks=len(records.get(DeviceKind.SINK, [])),
        streams=len(records.get(DeviceKind.STREAM, [])),
        sources=len(records.get(DeviceKind.SOURCE, [])),
        outputs=len(records.get(DeviceKind.OUTPUT, [])),
        cards=len(records.get(DeviceKind.CARD, [])),
    )
    return devices, counts
