"""Hardware H.264 encoding through ffmpeg's NVIDIA NVENC encoder."""

from __future__ import annotations

import logging
import subprocess

from robs.core_types import (
    EncoderCapabilities,
    EncoderPreset,
    MediaType,
    PixelFormat,
    RateControlMode,
    TrackId,
    VideoInfo,
)
from robs.ffmpeg_encoder import _FfmpegPipe, _as_u32
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

_NVENC_PRESETS = (
    EncoderPreset(0, "p1", "Fastest", 1, 7),
    EncoderPreset(1, "p2", "Faster", 2, 6),
    EncoderPreset(2, "p3", "Fast", 3, 5),
    EncoderPreset(3, "p4", "Medium", 4, 4),
    EncoderPreset(4, "p5", "Slow", 5, 3),
    EncoderPreset(5, "p6", "Slower", 6, 2),
    EncoderPreset(6, "p7", "Slowest", 7, 1),
)

_DEFAULT_PRESET = EncoderPreset(3, "p4", "Medium", 4, 4)

_PIXEL_FORMAT_NAMES = {
    PixelFormat.NV12: "nv12",
    PixelFormat.I420: "yuv420p",
}

_RATE_CONTROL_NAMES = {
    "CBR": RateControlMode.CBR,
    "VBR": RateControlMode.VBR,
    "CQP": RateControlMode.CQP,
}


class NvencH264Encoder(Encoder):
    """H.264 encoder that pipes raw frames through ffmpeg's h264_nvenc."""

    def __init__(self) -> None:
        super().__init__("NVIDIA NVENC H.264")
        self.bitrate = 6000
        self.keyint = 2
        self.rate_control = RateControlMode.CBR
        self.preset = "p4"
        self.profile = "high"
        self.gpu_index = 0
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
            supports_hardware=True,
            supported_pixel_formats=(PixelFormat.NV12, PixelFormat.I420),
        )
        self._input_info: VideoInfo | None = None
        self._pipe: _FfmpegPipe | None = None

    @staticmethod
    def is_available() -> bool:
        """Whether ffmpeg runs and lists the h264_nvenc encoder."""
        try:
            result = subprocess.run(["ffmpeg", "-encoders"], capture_output=True)
        except OSError:
            return False
        combined = result.stdout.decode("utf-8", errors="replace") + result.stderr.decode(
            "utf-8", errors="replace"
        )
        return "h264_nvenc" in combined

    @staticmethod
    def gpu_count() -> int:
        """One GPU when NVENC is available, otherwise none."""
        return 1 if NvencH264Encoder.is_available() else 0

    def command_args(self) -> list[str]:
        """The ffmpeg command line for the current settings."""
        bitrate = f"{self.bitrate}k"
        double = f"{self.bitrate * 2}k"
        keyint = self.keyint * self.fps_num // self.fps_den
        args = [
            "ffmpeg",
            "-f", "rawvideo",
            "-pix_fmt", self.pixel_format,
            "-s", f"{self.width}x{self.height}",
            "-r", f"{self.fps_num}/{self.fps_den}",
            "-i", "-",
            "-c:v", "h264_nvenc",
            "-preset", self.preset,
            "-profile:v", self.profile,
            "-tune", "ll",
            "-gpu", str(self.gpu_index),
        ]
        if self.rate_control is RateControlMode.CBR:
            args += ["-b:v", bitrate, "-maxrate", bitrate, "-bufsize", double, "-rc", "cbr"]
        elif self.rate_control is RateControlMode.VBR:
            args += ["-b:v", bitrate, "-rc", "vbr"]
        elif self.rate_control is RateControlMode.CQP:
            args += ["-rc", "constqp", "-cq", "23"]
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
        return VideoEncodeInfo(video=self._input_info, encoder_name="h264_nvenc", codec_params={})

    def output_info(self) -> None:
        return None

    def caps(self) -> EncoderCapabilities:
        return self._caps

    def presets(self) -> list[EncoderPreset]:
        return list(_NVENC_PRESETS)

    def current_preset(self) -> EncoderPreset:
        """The preset matching the current preset name, or "p4" if none does."""
        return next((p for p in _NVENC_PRESETS if p.name == self.preset), _DEFAULT_PRESET)

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
                enum_values=[("CBR", "CBR"), ("VBR", "VBR"), ("CQP", "CQP")],
            ),
            PropertyDef(
                name="profile",
                display_name="H.264 Profile",
                property_type=PropertyType.ENUM,
                default=PropertyValue(PropertyType.ENUM, "high"),
                enum_values=[("baseline", "Baseline"), ("main", "Main"), ("high", "High")],
            ),
            PropertyDef(
                name="gpu",
                display_name="GPU Index",
                property_type=PropertyType.INT,
                default=PropertyValue(PropertyType.INT, 0),
                min=0.0,
                max=7.0,
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
        if name == "gpu":
            return PropertyValue(PropertyType.INT, self.gpu_index)
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
        elif name == "gpu" and value.kind is PropertyType.INT:
            self.gpu_index = _as_u32(value.value)

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
        self.pixel_format = _PIXEL_FORMAT_NAMES.get(info.format, "nv12")
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


def create_nvenc_h264_encoder() -> NvencH264Encoder:
    return NvencH264Encoder()