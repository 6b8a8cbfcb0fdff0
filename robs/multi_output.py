"""Sending one stream to several outputs, and presets for common streaming services."""

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass

from robs.errors import OutputConnectFailedError, UnknownError
from robs.interfaces import EncodedPacket, Output

_log = logging.getLogger(__name__)


class MultiDestinationOutput:
    """A list of outputs that are connected, fed and disconnected together."""

    def __init__(self) -> None:
        self._outputs: list[Output] = []
        self._packets: queue.SimpleQueue[EncodedPacket] = queue.SimpleQueue()

    def add_output(self, output: Output) -> None:
        self._outputs.append(output)

    def remove_output(self, index: int) -> None:
        """Remove the output at ``index``; an index out of range is ignored."""
        if 0 <= index < len(self._outputs):
            del self._outputs[index]

    def output_count(self) -> int:
        return len(self._outputs)

    def get_output(self, index: int) -> Output | None:
        if 0 <= index < len(self._outputs):
            return self._outputs[index]
        return None

    async def connect_all(self) -> None:
        """Connect every output, trying all of them before reporting failures."""
        errors: list[tuple[int, str]] = []
        for index, output in enumerate(self._outputs):
            try:
                await output.connect()
            except Exception as exc:  # noqa: BLE001 - every failure is collected
                errors.append((index, str(exc)))
                _log.warning("Destination %d failed: %s", index + 1, exc)
            else:
                _log.info("Destination %d connected", index + 1)
        if errors:
            error = OutputConnectFailedError(f"Some connections failed: {errors}")
            error.failures = errors
            raise error

    async def disconnect_all(self) -> None:
        """Disconnect every output that is connected."""
        for index, output in enumerate(self._outputs):
            if output.is_connected():
                await output.disconnect()
                _log.info("Destination %d disconnected", index + 1)

    async def send_to_all(self, packet: EncodedPacket) -> None:
        """Send ``packet`` to every connected output, reporting failures afterwards."""
        failed: list[tuple[int, str]] = []
        for index, output in enumerate(self._outputs):
            if not output.is_connected():
                continue
            try:
                await output.send_packet(packet)
            except Exception as exc:  # noqa: BLE001 - every failure is collected
                failed.append((index, str(exc)))
        if failed:
            error = UnknownError(f"Some sends failed: {failed}")
            error.failures = failed
            raise error

    def packet_sender(self) -> queue.SimpleQueue[EncodedPacket]:
        """The unbounded queue through which packets can be handed in."""
        return self._packets


@dataclass
class DestinationConfig:
    name: str
    platform: str
    server: str
    stream_key: str
    enabled: bool = True
    bandwidth_limit: int | None = None


class StreamingDestinations:
    """An ordered list of configured streaming destinations."""

    def __init__(self) -> None:
        self._destinations: list[DestinationConfig] = []

    def add(self, config: DestinationConfig) -> None:
        self._destinations.append(config)

    def remove(self, name: str) -> None:
        """Remove every destination called ``name``."""
        self._destinations = [d for d in self._destinations if d.name != name]

    def get(self, name: str) -> DestinationConfig | None:
        return next((d for d in self._destinations if d.name == name), None)

    def list(self) -> list[DestinationConfig]:
        return list(self._destinations)

    @staticmethod
    def twitch_default(server_override: str | None, key: str) -> DestinationConfig:
        return DestinationConfig(
            name="Twitch",
            platform="twitch",
            server=server_override if server_override is not None else "rtmp://live.twitch.tv/app",
            stream_key=key,
            enabled=True,
            bandwidth_limit=6000,
        )

    @staticmethod
    def youtube_default(key: str) -> DestinationConfig:
        return DestinationConfig(
            name="YouTube",
            platform="youtube",
            server="rtmp://a.rtmp.youtube.com/live2",
            stream_key=key,
            enabled=True,
            bandwidth_limit=12000,
        )

    @staticmethod
    def facebook_default(key: str) -> DestinationConfig:
        return DestinationConfig(
            name="Facebook",
            platform="facebook",
            server="rtmps://live-api-s.facebook.com:443/rtmp",
            stream_key=key,
            enabled=True,
            bandwidth_limit=6000,
        )