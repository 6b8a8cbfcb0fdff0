"""Recording to a file through an ffmpeg process."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from robs.errors import RobsIoError
from robs.interfaces import EncodedPacket, Output, PropertyDef, PropertyType, PropertyValue

_log = logging.getLogger(__name__)


@dataclass
class FileOutputStats:
    bytes_written: int = 0
    frames_written: int = 0
    duration_ms: int = 0


class FileOutput(Output):
    """Writes incoming data to ffmpeg, which muxes it into ``<path>.<format>``."""

    def __init__(self, name: str, path: str | Path) -> None:
        super().__init__(name)
        self.path = Path(path)
        self.format = "mp4"
        self.video_encoder = "libx264"
        self.audio_encoder = "aac"
        self.stats = FileOutputStats()
        self._active = False
        self._process: subprocess.Popen | None = None

    def _output_path(self) -> str:
        return f"{self.path}.{self.format}"

    def ffmpeg_args(self, width: int, height: int, fps: int) -> list[str]:
        """The ffmpeg command line used to record at the given size and rate."""
        args = [
            "ffmpeg",
            "-f", "rawvideo",
            "-pix_fmt", "bgra",
            "-s", f"{width}x{height}",
            "-r", str(fps),
            "-i", "-",
            "-f", "s16le",
            "-ar", "48000",
            "-ac", "2",
            "-i", "-",
        ]
        if self.video_encoder == "h264_nvenc":
            args += ["-c:v", "h264_nvenc", "-preset", "p4", "-cq", "23"]
        else:
            args += ["-c:v", "libx264", "-preset", "fast", "-crf", "23"]
        args += ["-c:a", "aac", "-b:a", "192k"]
        args += ["-y", self._output_path()]
        return args

    def _start_ffmpeg(self, width: int, height: int, fps: int) -> None:
        try:
            self._process = subprocess.Popen(
                self.ffmpeg_args(width, height, fps),
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            raise RobsIoError(exc) from exc
        _log.info("Recording started: %s", self._output_path())

    def _stop_ffmpeg(self) -> None:
        process, self._process = self._process, None
        if process is not None:
            if process.stdin is not None:
                process.stdin.close()
            process.wait()
        _log.info(
            "Recording saved: %d bytes, %d frames",
            self.stats.bytes_written,
            self.stats.frames_written,
        )

    def protocol(self) -> str:
        return "file"

    def is_connected(self) -> bool:
        return self._active

    def is_reconnecting(self) -> bool:
        return False

    async def connect(self) -> None:
        """Start recording at 1920x1080, 30 fps."""
        self._active = True
        self._start_ffmpeg(1920, 1080, 30)

    async def disconnect(self) -> None:
        """Close ffmpeg's input and wait for it to finish the file."""
        self._active = False
        self._stop_ffmpeg()

    async def send_packet(self, packet: EncodedPacket) -> None:
        """Write the packet's data to ffmpeg; ignored while not recording."""
        if not self._active:
            return
        process = self._process
        if process is None or process.stdin is None:
            return
        process.stdin.write(packet.data)
        process.stdin.flush()
        self.stats.bytes_written += len(packet.data)
        self.stats.frames_written += 1

    def properties_definition(self) -> list[PropertyDef]:
        return [
            PropertyDef(
                name="path",
                display_name="File Path",
                property_type=PropertyType.PATH,
                default=PropertyValue(PropertyType.PATH, str(self.path)),
            ),
            PropertyDef(
                name="format",
                display_name="Container Format",
                property_type=PropertyType.ENUM,
                default=PropertyValue(PropertyType.ENUM, self.format),
                enum_values=[("mp4", "MP4"), ("mkv", "MKV"), ("flv", "FLV"), ("mov", "MOV")],
            ),
        ]

    def get_property(self, name: str) -> PropertyValue | None:
        if name == "path":
            return PropertyValue(PropertyType.PATH, str(self.path))
        if name == "format":
            return PropertyValue(PropertyType.ENUM, self.format)
        return None

    def set_property(self, name: str, value: PropertyValue) -> None:
        """Set ``path`` (a PATH value) or ``format`` (an ENUM value); others are ignored."""
        if name == "path" and value.kind is PropertyType.PATH:
            self.path = Path(value.value)
        elif name == "format" and value.kind is PropertyType.ENUM:
            self.format = value.value