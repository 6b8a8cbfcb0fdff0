"""Streaming output over RTMP with retrying connection setup."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass

from robs.errors import InvalidStateError, OutputConnectFailedError
from robs.interfaces import (
    EncodedPacket,
    Output,
    OutputFactory,
    PropertyDef,
    PropertyType,
    PropertyValue,
)

_log = logging.getLogger(__name__)

_U32_MASK = 0xFFFFFFFF


@dataclass
class OutputStatistics:
    total_bytes_sent: int = 0
    total_frames_sent: int = 0
    bitrate: int = 0
    frame_rate: float = 0.0
    dropped_frames: int = 0
    total_duration_ms: int = 0
    connect_time_ms: int = 0


class RtmpOutput(Output):
    """An RTMP destination given by a server URL and a stream key.

    ``connect_delay`` and ``handshake_delay`` are the pauses, in seconds, taken
    while setting up the connection.
    """

    max_attempts = 5
    connect_delay = 0.5
    handshake_delay = 0.1

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.server = ""
        self.stream_key = ""
        self.reconnect_attempts = 0
        self._connected = False
        self._reconnecting = False
        self._stats = OutputStatistics()

    def set_server(self, server: str, stream_key: str) -> None:
        self.server = server
        self.stream_key = stream_key

    async def _connect_rtmp(self) -> None:
        _log.info("Connecting to: %s", self.server)
        await asyncio.sleep(self.connect_delay)
        if await self._perform_handshake():
            _log.info("Handshake complete")
            self._perform_connect_phase()

    async def _perform_handshake(self) -> bool:
        for step in ("C0", "C1", "C2"):
            _log.debug("Handshake %s", step)
        await asyncio.sleep(self.handshake_delay)
        return True

    def _perform_connect_phase(self) -> None:
        _log.debug("Connect: app=live")
        for command in ("ReleaseStream", "FCSubscribe", "FCPublish"):
            _log.debug("%s", command)
        _log.debug("CreateStream")
        _log.debug("Publish")

    def _record_sent(self, packet: EncodedPacket) -> None:
        stats = self._stats
        stats.total_bytes_sent += len(packet.data)
        stats.total_frames_sent += 1
        if stats.total_frames_sent % 30 == 0:
            stats.frame_rate = 30.0
            stats.bitrate = (len(packet.data) * 8 * 30 // 1000) & _U32_MASK

    def stats(self) -> OutputStatistics:
        """A snapshot of the transfer statistics."""
        return dataclasses.replace(self._stats)

    def protocol(self) -> str:
        return "rtmp"

    def is_connected(self) -> bool:
        return self._connected

    def is_reconnecting(self) -> bool:
        return self._reconnecting

    async def connect(self) -> None:
        """Connect, retrying with growing pauses (2, 4, 8, ... up to 30 s)."""
        self._reconnecting = True
        for attempt in range(1, self.max_attempts + 1):
            self.reconnect_attempts = attempt
            _log.info("Connection attempt %d/%d", attempt, self.max_attempts)
            try:
                await self._connect_rtmp()
            except Exception as exc:  # noqa: BLE001 - any failure leads to a retry
                _log.warning("Connection failed: %s", exc)
                if attempt < self.max_attempts:
                    await asyncio.sleep(min(2**attempt, 30))
            else:
                self._connected = True
                self._reconnecting = False
                self.reconnect_attempts = 0
                _log.info("Connected to %s", self.server)
                return
        self._reconnecting = False
        raise OutputConnectFailedError(f"Failed after {self.max_attempts} attempts")

    async def disconnect(self) -> None:
        self._connected = False
        _log.info("Disconnected from %s", self.server)

    async def send_packet(self, packet: EncodedPacket) -> None:
        """Send one packet; raises if not connected."""
        if not self._connected:
            raise InvalidStateError("Not connected")
        self._record_sent(packet)

    def properties_definition(self) -> list[PropertyDef]:
        return [
            PropertyDef(
                name="server",
                display_name="Server URL",
                description="RTMP server URL (e.g., rtmp://live.twitch.tv/app)",
                property_type=PropertyType.STRING,
                default=PropertyValue(PropertyType.STRING, "rtmp://live.twitch.tv/app"),
            ),
            PropertyDef(
                name="stream_key",
                display_name="Stream Key",
                description="Your stream key from the platform",
                property_type=PropertyType.STRING,
                default=PropertyValue(PropertyType.STRING, ""),
            ),
        ]

    def get_property(self, name: str) -> PropertyValue | None:
        if name == "server":
            return PropertyValue(PropertyType.STRING, self.server)
        if name == "stream_key":
            return PropertyValue(PropertyType.STRING, self.stream_key)
        return None

    def set_property(self, name: str, value: PropertyValue) -> None:
        """Set ``server`` or ``stream_key`` (STRING values); anything else is ignored."""
        if value.kind is not PropertyType.STRING:
            return
        if name == "server":
            self.server = value.value
        elif name == "stream_key":
            self.stream_key = value.value


def create_rtmp_output(name: str) -> RtmpOutput:
    return RtmpOutput(name)


class RtmpOutputFactory(OutputFactory):
    def output_type(self) -> str:
        return "rtmp_output"

    def display_name(self) -> str:
        return "RTMP Stream"

    def protocol(self) -> str:
        return "rtmp"

    def create(self) -> RtmpOutput:
        return RtmpOutput("RTMP Output")