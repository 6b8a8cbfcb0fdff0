"""AAC audio encoding through an ffmpeg process."""

from __future__ import annotations

import logging
import subprocess

from robs.core_types import AudioInfo, EncoderCapabilities, EncoderPreset, MediaType, TrackId
from robs.ffmpeg_encoder import _FfmpegPipe, _as_u32, _parse_u32
from robs.interfaces import (
    AudioEncodeInfo,
    AudioFrame,
    EncodedPacket,
    Encoder,
    PropertyDef,
    PropertyType,
    PropertyValue,
)

_log = logging.getLogger(__name__)

_AAC_PRESETS = (
    EncoderPreset(0, "64kbps", "Low quality, voice only", 1, 5),
    EncoderPreset(1, "96kbps", "Low quality", 2, 5),
    EncoderPreset(2, "128kbps", "Standard quality", 4, 5),
    EncoderPreset(3, "160kbps", "Good quality", 5, 5),
    EncoderPreset(4, "192kbps", "High quality", 6, 5),
    EncoderPreset(5, "256kbps", "Very high quality", 7, 5),
    EncoderPreset(6, "320kbps", "Maximum quality", 8, 5),
)

_DEFAULT_PRESET = EncoderPreset(2, "128kbps", "Standard", 4, 5)


class FfmpegAacEncoder(Encoder):
    """AAC encoder that pipes interleaved float samples through ffmpeg into ADTS."""

    def __init__(self) -> None:
        super().__init__("FFmpeg AAC")
        self.bitrate = 128
        self.sample_rate = 48000
        self.channels = 2
        self.frame_count = 0
        self.initialized = False
        self._caps = EncoderCapabilities(
            max_width=0,
            max_height=0,
            max_fps=0,
            supports_hardware=False,
            supported_pixel_formats=(),
        )
        self._input_info: AudioInfo | None = None
        self._pipe: _FfmpegPipe | None = None

    @staticmethod
    def is_available() -> bool:
        """Whether ffmpeg runs and lists an AAC codec."""
        try:
            result = subprocess.run(["ffmpeg", "-codecs"], capture_output=True)
        except OSError:
            return False
        combined = result.stdout.decode("utf-8", errors="replace") + result.stderr.decode(
            "utf-8", errors="replace"
        )
        return "AAC" in combined

    def command_args(self) -> list[str]:
        """The ffmpeg command line for the current settings."""
        return [
            "ffmpeg",
            "-f", "f32le",
            "-ar", str(self.sample_rate),
            "-ac", str(self.channels),
            "-i", "-",
            "-c:a", "aac",
            "-b:a", f"{self.bitrate}k",
            "-f", "adts",
            "-",
        ]

    def codec_name(self) -> str:
        return "aac"

    def media_type(self) -> MediaType:
        return MediaType.AUDIO

    def input_info(self) -> AudioEncodeInfo | None:
        if self._input_info is None:
            return None
        return AudioEncodeInfo(audio=self._input_info, encoder_name="aac", codec_params={})

    def output_info(self) -> None:
        return None

    def caps(self) -> EncoderCapabilities:
        return self._caps

    def presets(self) -> list[EncoderPreset]:
        return list(_AAC_PRESETS)

    def current_preset(self) -> EncoderPreset:
        """The preset named after the current bitrate, or the 128 kbps one if none is."""
        name = f"{self.bitrate}kbps"
        return next((p for p in _AAC_PRESETS if p.name == name), _DEFAULT_PRESET)

    def set_preset(self, preset: EncoderPreset) -> None:
        """Take the bitrate from a name like "192kbps"; unreadable names give 128."""
        text = preset.name
        while text.endswith("kbps"):
            text = text[: -len("kbps")]
        parsed = _parse_u32(text)
        self.bitrate = 128 if parsed is None else parsed

    def parameters_definition(self) -> list[PropertyDef]:
        return [
            PropertyDef(
                name="bitrate",
                display_name="Bitrate (kbps)",
                property_type=PropertyType.INT,
                default=PropertyValue(PropertyType.INT, 128),
                min=64.0,
                max=320.0,
            ),
            PropertyDef(
                name="sample_rate",
                display_name="Sample Rate",
                property_type=PropertyType.ENUM,
                default=PropertyValue(PropertyType.ENUM, "48000"),
                enum_values=[("44100", "44.1 kHz"), ("48000", "48 kHz")],
            ),
        ]

    def get_parameter(self, name: str) -> PropertyValue | None:
        if name == "bitrate":
            return PropertyValue(PropertyType.INT, self.bitrate)
        if name == "sample_rate":
            return PropertyValue(PropertyType.INT, self.sample_rate)
        return None

    def set_parameter(self, name: str, value: PropertyValue) -> None:
        """Change ``bitrate`` or ``sample_rate`` (INT values); anything else is ignored."""
        if value.kind is not PropertyType.INT:
            return
        if name == "bitrate":
            self.bitrate = _as_u32(value.value)
        elif name == "sample_rate":
            self.sample_rate = _as_u32(value.value)

    async def initialize(self, input, output) -> None:
        """Take rate and channels from ``input`` and start ffmpeg; non-audio input is ignored."""
        if not isinstance(input, AudioEncodeInfo):
            return
        info = input.audio
        self._input_info = info
        self.sample_rate = info.sample_rate
        self.channels = info.channels()
        self._pipe = _FfmpegPipe(self.command_args())
        self.initialized = True
        _log.info(
            "Initialized: %dHz, %dch, %dkbps", self.sample_rate, self.channels, self.bitrate
        )

    async def encode(self, data) -> EncodedPacket | None:
        """Feed one audio frame; returns an encoded packet if ffmpeg has produced one."""
        if not self.initialized or not isinstance(data, AudioFrame):
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
                    keyframe=True,
                    track=TrackId(0),
                )
        self.frame_count += data.frames
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
                keyframe=True,
                track=TrackId(0),
            )
            for chunk in chunks
        ]


def create_ffmpeg_aac_encoder() -> FfmpegAacEncoder:
    return FfmpegAacEncoder()