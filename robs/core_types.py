"""Identifiers, media formats and descriptive value types shared by the whole package."""

from __future__ import annotations

import itertools
import threading
import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

_id_counter = itertools.count(1)
_id_lock = threading.Lock()


def next_object_id() -> int:
    """Return a fresh, process-wide unique object number (starting at 1)."""
    with _id_lock:
        return next(_id_counter)


@dataclass(frozen=True, order=True)
class _CounterId:
    value: int = field(default_factory=next_object_id)


class SourceId(_CounterId):
    """Identifier of a source."""


class EncoderId(_CounterId):
    """Identifier of an encoder."""


class OutputId(_CounterId):
    """Identifier of an output."""


class SceneId(_CounterId):
    """Identifier of a scene."""


class SceneItemId(_CounterId):
    """Identifier of an item inside a scene."""


@dataclass(frozen=True)
class ProfileId:
    """Identifier of a profile, backed by a random UUID."""

    value: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(frozen=True, order=True)
class TrackId:
    """Index of an audio track."""

    value: int


class MediaType(Enum):
    VIDEO = "Video"
    AUDIO = "Audio"


class PixelFormat(Enum):
    NV12 = "NV12"
    I420 = "I420"
    I422 = "I422"
    I444 = "I444"
    YUY2 = "YUY2"
    UYVY = "UYVY"
    RGBA = "RGBA"
    BGRA = "BGRA"
    RGB24 = "Rgb24"
    BGR24 = "Bgr24"

    def bytes_per_pixel(self) -> int:
        """Bytes per pixel of the first plane."""
        if self in (PixelFormat.RGBA, PixelFormat.BGRA):
            return 4
        if self in (PixelFormat.RGB24, PixelFormat.BGR24):
            return 3
        if self in (PixelFormat.YUY2, PixelFormat.UYVY):
            return 2
        return 1

    def is_planar(self) -> bool:
        return self in (PixelFormat.NV12, PixelFormat.I420, PixelFormat.I422, PixelFormat.I444)


class AudioFormat(Enum):
    U8 = "U8"
    S16 = "S16"
    S32 = "S32"
    F32 = "F32"
    F64 = "F64"

    def bytes_per_sample(self) -> int:
        return {
            AudioFormat.U8: 1,
            AudioFormat.S16: 2,
            AudioFormat.S32: 4,
            AudioFormat.F32: 4,
            AudioFormat.F64: 8,
        }[self]


class AudioSpeaker(Enum):
    FL = "FL"
    FR = "FR"
    FC = "FC"
    LFE = "LFE"
    BL = "BL"
    BR = "BR"
    SL = "SL"
    SR = "SR"


_S = AudioSpeaker
SPEAKERS_2POINT1 = (_S.FL, _S.FR, _S.LFE)
SPEAKERS_4POINT0 = (_S.FL, _S.FR, _S.BL, _S.BR)
SPEAKERS_4POINT1 = (_S.FL, _S.FR, _S.FC, _S.BL, _S.BR)
SPEAKERS_5POINT1 = (_S.FL, _S.FR, _S.FC, _S.LFE, _S.BL, _S.BR)
SPEAKERS_7POINT1 = (_S.FL, _S.FR, _S.FC, _S.LFE, _S.BL, _S.BR, _S.SL, _S.SR)


class VideoRange(Enum):
    PARTIAL = "Partial"
    FULL = "Full"


class ColorSpace(Enum):
    REC601 = "Rec601"
    REC709 = "Rec709"
    REC2020 = "Rec2020"
    SRGB = "SRGB"


@dataclass(frozen=True)
class VideoInfo:
    """Resolution, frame rate and pixel layout of a video stream."""

    width: int = 1920
    height: int = 1080
    fps_num: int = 30
    fps_den: int = 1
    format: PixelFormat = PixelFormat.NV12
    range: VideoRange = VideoRange.PARTIAL
    color_space: ColorSpace = ColorSpace.REC709

    def fps(self) -> float:
        return self.fps_num / self.fps_den

    def frame_duration(self) -> timedelta:
        """Duration of one frame, truncated to whole microseconds."""
        return timedelta(microseconds=1_000_000 * self.fps_den // self.fps_num)

    def frame_size_bytes(self, format: PixelFormat) -> int:
        """Size in bytes of one frame of this resolution in ``format``."""
        pixels = self.width * self.height
        if format in (PixelFormat.NV12, PixelFormat.I420):
            return pixels * 3 // 2
        if format in (PixelFormat.I422, PixelFormat.YUY2, PixelFormat.UYVY):
            return pixels * 2
        if format in (PixelFormat.I444, PixelFormat.RGB24, PixelFormat.BGR24):
            return pixels * 3
        return pixels * 4


@dataclass(frozen=True)
class AudioInfo:
    """Sample rate, sample format and speaker layout of an audio stream."""

    sample_rate: int = 48000
    format: AudioFormat = AudioFormat.F32
    speakers: tuple[AudioSpeaker, ...] = SPEAKERS_2POINT1

    def __post_init__(self) -> None:
        object.__setattr__(self, "speakers", tuple(self.speakers))

    def channels(self) -> int:
        return len(self.speakers)

    def bytes_per_frame(self) -> int:
        return self.format.bytes_per_sample() * self.channels()


@dataclass(frozen=True)
class EncoderCapabilities:
    max_width: int
    max_height: int
    max_fps: int
    supports_hardware: bool
    supported_pixel_formats: tuple[PixelFormat, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "supported_pixel_formats", tuple(self.supported_pixel_formats))


@dataclass(frozen=True)
class EncoderPreset:
    id: int
    name: str
    description: str
    quality_level: int
    speed_level: int


class RateControlMode(Enum):
    CBR = "CBR"
    VBR = "VBR"
    CQP = "CQP"
    CRF = "CRF"


@dataclass(frozen=True)
class EncoderRateControl:
    bitrate: int
    keyframe_interval: int
    rate_control_mode: RateControlMode
    buffer_size: int | None = None