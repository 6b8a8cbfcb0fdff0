"""Software H.264 encoding through an ffmpeg (libx264) process."""

from __future__ import annotations

import logging
import queue
import re
import subprocess
import threading
from typing import IO

from robs.core_types import (
    EncoderCapabilities,
    EncoderPreset,
    MediaType,
    PixelFormat,
    RateControlMode,
    TrackId,
    VideoInfo,
)
from robs.errors import RobsIoError
from robs.interfaces import (
    EncodedPacket,
    Encoder,
    PropertyDef,
    PropertyType,
    PropertyValue,
    VideoEncodeInfo,
    VideoFrame,
)

_log = logging.getLogger(__name__)

_READ_SIZE = 65536
_U32_MASK = 0xFFFFFFFF
_UNSIGNED = re.compile(r"\+?\d+")


def _pump(stream: IO[bytes], chunks: queue.SimpleQueue) -> None:
    """Move everything the process writes to ``chunks`` until the stream ends."""
    read = getattr(stream, "read1", stream.read)
    try:
        while True:
            data = read(_READ_SIZE)
            if not data:
                break
            chunks.put(bytes(data))
    except (OSError, ValueError):
        pass


def _as_u32(value: object) -> int:
    return int(value) & _U32_MASK


def _parse_u32(text: str) -> int | None:
    if not _UNSIGNED.fullmatch(text):
        return None
    number = int(text)
    return number if number <= _U32_MASK else None


class _FfmpegPipe:
    """An ffmpeg process fed through stdin whose stdout is collected in chunks."""

    def __init__(self, args: list[str]) -> None:
        try:
            self._process = subprocess.Popen(
                args,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            raise RobsIoError(exc) from exc
        self._chunks: queue.SimpleQueue[bytes] = queue.SimpleQueue()
        self._reader = threading.Thread(
            target=_pump, args=(self._process.stdout, self._chunks), daemon=True
        )
        self._reader.start()

    def write(self, data: bytes) -> None:
        stdin = self._process.stdin
        if stdin is None or stdin.closed:
            return
        try:
            stdin.write(data)
            stdin.flush()
        except OSError as exc:
            raise RobsIoError(exc) from exc

    def next_chunk(self) -> bytes | None:
        """The oldest output chunk not yet taken, or None if there is none yet."""
        try:
            return self._chunks.get_nowait()
        except queue.Empty:
            return None

    def finish(self) -> list[bytes]:
        """Close the input, wait for the process to end and return the remaining output."""
        stdin = self._process.stdin
        if stdin is not None:
            try:
                stdin.close()
            except OSError:
                pass
        self._reader.join()
        self._process.wait()
        remaining: list[bytes] = []
        while True:
            chunk = self.next_chunk()
            if chunk is None:
                return remaining
            remaining.append(chunk)


_PIXEL_FORMAT_NAMES = {
    PixelFormat.NV12: "nv12",
    PixelFormat.I420: "yuv420p",
    PixelFormat.I422: "yuv422p",
    PixelFormat.I444: "yuv444p",
    PixelFormat.RGBA: "rgba",
    PixelFormat.BGRA: "bgra",
    PixelFormat.RGB24: "rgb24",
    PixelFormat.BGR24: "bgr24",
}

_X264_PRESETS = (
    EncoderPreset(0, "ultrafast", "Fastest, lowest quality", 1, 9),
    EncoderPreset(1, "superfast", "Very fast", 2, 8),
    EncoderPreset(2, "veryfast", "Fast", 3, 7),
    EncoderPreset(3, "faster", "Faster", 4, 6),
    EncoderPreset(4, "fast", "Quick", 5, 5),
    EncoderPreset(5, "medium", "Balanced", 6, 5),
    EncoderPreset(6, "slow", "Slower, better quality", 7, 3),
    EncoderPreset(7, "slower", "Much slower, high quality", 8, 2),
    EncoderPreset(8, "veryslow", "Slowest, best quality", 9, 1),
)

_DEFAULT_PRESET = EncoderPreset(3, "faster", "Faster", 4, 6)

_RATE_CONTROL_NAMES = {mode.value: mode for mode in RateControlMode}


class FfmpegH264Encoder(Encoder):
    """H.264 encoder that pipes raw frames through ffmpeg's libx264."""

    def __init__(self) -> None:
        super().__init__("FFmpeg x264")
        self.bitrate = 6000
        self.keyint = 2
        self.rate_control = RateControlMode.CBR
        self.preset = "faster"
        self.profile = "high"
        self.width = 1920
        self.height = 1080
        self.fps_num = 30
        self.fps_den = 1
        self.pixel_format = "nv12"
        self.frame_count = 0
        self.initialized = False
        self._caps = EncoderCapabilities(
            max_width=4096,
            max_height=2160,
            max_fps=120,
            supports_hardware=False,
            supported_pixel_formats=(
                PixelFormat.NV12,
                PixelFormat.I420,
                PixelFormat.I422,
                PixelFormat.I444,
            ),
        )
        self._input_info: VideoInfo | None = None
        self._pipe: _FfmpegPipe | None = None

    @staticmethod
    def is_available() -> bool:
        """Whether an ffmpeg executable runs successfully."""
        try:
            result = subprocess.run(["ffmpeg", "-version"], capture_output=True)
        except OSError:
            return False
        return result.returncode == 0

    @staticmethod
    def pixel_format_name(format: PixelFormat) -> str:
        """The ffmpeg name of a pixel format; formats ffmpeg is not given fall back to nv12."""
        return _PIXEL_FORMAT_NAMES.get(format, "nv12")

    def command_args(self) -> list[str]:
        """The ffmpeg command line for the current settings."""
        bitrate = f"{self.bitrate}k"
        double = f"{self.bitrate * 2}k"
        quadruple = f"{self.bitrate * 4}k"
        keyint = self.keyint * self.fps_num // self.fps_den
        args = [
            "ffmpeg",
            "-f", "rawvideo",
            "-pix_fmt", self.pixel_format,
            "-s", f"{self.width}x{self.height}",
            "-r", f"{self.fps_num}/{self.fps_den}",
            "-i", "-",
            "-c:v", "libx264",
            "-preset", self.preset,
            "-profile:v", self.profile,
            "-tune", "zerolatency",
        ]
        if self.rate_control is RateControlMode.CBR:
            args += [
                "-b:v", bitrate,
                "-maxrate", bitrate,
                "-bufsize", double,
                "-x264-params", "nal-hrd=cbr:force-cfr=1",
            ]
        elif self.rate_control is RateControlMode.VBR:
            args += ["-b:v", bitrate, "-maxrate", double, "-bufsize", quadruple]
        elif self.rate_control is RateControlMode.CRF:
            args += ["-crf", "23"]
        else:
            args += ["-qp", "23"]
        args += [
            "-g", str(keyint),
            "-keyint_min", str(self.keyint),
            "-f", "h264",
            "-",
        ]
        return args

    def codec_name(self) -> str:
        return "h264"

    def media_type(self) -> MediaType:
        return MediaType.VIDEO

    def input_info(self) -> VideoEncodeInfo | None:
        if self._input_info is None:
            return None
        return VideoEncodeInfo(video=self._input_info, encoder_name="libx264", codec_params={})

    def output_info(self) -> None:
        return None

    def caps(self) -> EncoderCapabilities:
        return self._caps

    def presets(self) -> list[EncoderPreset]:
        return list(_X264_PRESETS)

    def current_preset(self) -> EncoderPreset:
        """The preset matching the current preset name, or "faster" if none does."""
        return next((p for p in _X264_PRESETS if p.name == self.preset), _DEFAULT_PRESET)

    def set_preset(self, preset: EncoderPreset) -> None:
        self.preset = preset.name

    def parameters_definition(self) -> list[PropertyDef]:
        return [
            PropertyDef(
                name="bitrate",
                display_name="Bitrate (kbps)",
                property_type=PropertyType.INT,
                default=PropertyValue(PropertyType.INT, 6000),
                min=100.0,
                max=50000.0,
            ),
            PropertyDef(
                name="keyint",
                display_name="Keyframe Interval (seconds)",
                property_type=PropertyType.INT,
                default=PropertyValue(PropertyType.INT, 2),
                min=1.0,
                max=20.0,
            ),
            PropertyDef(
                name="rate_control",
                display_name="Rate Control",
                property_type=PropertyType.ENUM,
                default=PropertyValue(PropertyType.ENUM, "CBR"),
                enum_values=[("CBR", "CBR"), ("VBR", "VBR"), ("CRF", "CRF"), ("CQP", "CQP")],
            ),
            PropertyDef(
                name="profile",
                display_name="H.264 Profile",
                property_type=PropertyType.ENUM,
                default=PropertyValue(PropertyType.ENUM, "high"),
                enum_values=[("baseline", "Baseline"), ("main", "Main"), ("high", "High")],
            ),
        ]

    def get_parameter(self, name: str) -> PropertyValue | None:
        if name == "bitrate":
            return PropertyValue(PropertyType.INT, self.bitrate)
        if name == "keyint":
            return PropertyValue(PropertyType.INT, self.keyint)
        if name == "rate_control":
            return PropertyValue(PropertyType.ENUM, self.rate_control.value)
        if name == "profile":
            return PropertyValue(PropertyType.ENUM, self.profile)
        return None

    def set_parameter(self, name: str, value: PropertyValue) -> None:
        """Change a parameter; values of the wrong kind and unknown names are ignored."""
        if name == "bitrate" and value.kind is PropertyType.INT:
            self.bitrate = _as_u32(value.value)
        elif name == "keyint" and value.kind is PropertyType.INT:
            self.keyint = _as_u32(value.value)
        elif name == "rate_control" and value.kind is PropertyType.ENUM:
            self.rate_control = _RATE_CONTROL_NAMES.get(value.value, RateControlMode.CBR)
        elif name == "profile" and value.kind is PropertyType.ENUM:
            self.profile = value.value

    async def initialize(self, input, output) -> None:
        """Take the picture layout from ``input`` and start ffmpeg; non-video input is ignored."""
        if not isinstance(input, VideoEncodeInfo):
            return
        info = input.video
        self._input_info = info
        self.width = info.width
        self.height = info.height
        self.fps_num = info.fps_num
        self.fps_den = info.fps_den
        self.pixel_format = self.pixel_format_name(info.format)
        self._pipe = _FfmpegPipe(self.command_args())
        self.initialized = True
        _log.info(
            "Initialized: %dx%d @ %dfps, %dkbps, preset=%s",
            self.width,
            self.height,
            self.fps_num // self.fps_den,
            self.bitrate,
            self.preset,
        )

    async def encode(self, data) -> EncodedPacket | None:
        """Feed one video frame; returns an encoded packet if ffmpeg has produced one."""
        if not self.initialized or not isinstance(data, VideoFrame):
            return None
        packet = None
        if self._pipe is not None:
            self._pipe.write(bytes(data.data))
            chunk = self._pipe.next_chunk()
            if chunk is not None:
                packet = EncodedPacket(
                    data=chunk,
                    pts=self.frame_count,
                    dts=self.frame_count,
                    duration=0,
                    keyframe=self.frame_count == 0,
                    track=TrackId(0),
                )
        self.frame_count += 1
        return packet

    async def flush(self) -> list[EncodedPacket]:
        """End the ffmpeg process and return whatever output it still had."""
        pipe, self._pipe = self._pipe, None
        chunks = pipe.finish() if pipe is not None else []
        self.initialized = False
        return [
            EncodedPacket(
                data=chunk,
                pts=self.frame_count,
                dts=self.frame_count,
                duration=0,
                keyframe=False,
                track=TrackId(0),
            )
            for chunk in chunks
        ]


def create_ffmpeg_h264_encoder() -> FfmpegH264Encoder:
    return FfmpegH264Encoder()