# server.py
from __future__ import annotations

import logging
from typing import Optional

import pulsectl

from models import ServerInfo

logger = logging.getLogger(__name__)


class ServerUnavailable(RuntimeError):
    pass


class PulseServer:
    """Native connection to the sound server, used for facts pactl lists lack."""

    def __init__(self, client_name: str = "pulse-manager") -> None:
        self._client_name = client_name
        self._pulse: Optional[pulsectl.Pulse] = None

    def _pulse_connect(self) -> pulsectl.Pulse:
        if self._pulse is None:
            self._pulse = pulsectl.Pulse(self._client_name)
        return self._pulse

    def close(self) -> None:
        if self._pulse is not None:
            try:
                self._pulse.close()
            except pulsectl.PulseError as e:
                logger.debug("closing pulse connection: %s", e)
        self._pulse = None

    def fetch_info(self) -> ServerInfo:
        try:
            si = self._pulse_connect().server_info()
        except pulsectl.PulseError as e:
            self.close()
            raise ServerUnavailable(f"pulseaudio server process not found: {e}") from e
        return ServerInfo(
            name=str(getattr(si, "server_name", "") or ""),
            version=str(getattr(si, "server_version", "") or ""),
            default_sink=str(getattr(si, "default_sink_name", "") or ""),
            default_source=str(getattr(si, "default_source_name", "") or ""),
        )

    def info(self) -> Optional[ServerInfo]:
        try:
            return self.fetch_info()
        except ServerUnavailable as e:
            logger.debug("server info unavailable: %s", e)
            return None
