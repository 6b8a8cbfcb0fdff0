"""Frames, packets, properties and the abstract source, encoder and output interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from robs.core_types import (
    AudioFormat,
    AudioInfo,
    AudioSpeaker,
    EncoderCapabilities,
    EncoderId,
    EncoderPreset,
    MediaType,
    OutputId,
    PixelFormat,
    SourceId,
    TrackId,
    VideoInfo,
)


class PropertyType(Enum):
    BOOL = "Bool"
    INT = "Int"
    FLOAT = "Float"
    STRING = "String"
    ENUM = "Enum"
    PATH = "Path"
    COLOR = "Color"
    FONT = "Font"
    OBJECT = "Object"


@dataclass(frozen=True)
class PropertyValue:
    """A typed property value; ``kind`` tells how ``value`` is to be read."""

    kind: PropertyType
    value: Any


@dataclass(frozen=True)
class FontInfo:
    family: str
    size: int
    bold: bool = False
    italic: bool = False


@dataclass
class PropertyDef:
    """Description of one configurable property."""

    name: str
    display_name: str = ""
    description: str = ""
    property_type: PropertyType = PropertyType.STRING
    default: PropertyValue = PropertyValue(PropertyType.STRING, "")
    min: float | None = None
    max: float | None = None
    step: float | None = None
    enum_values: list[tuple[str, str]] = field(default_factory=list)
    visible: bool = True
    enabled: bool = True


def calculate_linesize(width: int, height: int, format: PixelFormat) -> list[int]:
    """Per-plane row strides in bytes for a frame of the given format."""
    if format in (PixelFormat.RGBA, PixelFormat.BGRA):
        return [width * 4]
    if format in (PixelFormat.RGB24, PixelFormat.BGR24):
        return [width * 3]
    if format in (PixelFormat.YUY2, PixelFormat.UYVY):
        return [width * 2]
    if format is PixelFormat.NV12:
        return [width, width]
    if format is PixelFormat.I420:
        return [width, width // 2, width // 2]
    return [width]


@dataclass
class VideoFrame:
    width: int
    height: int
    format: PixelFormat
    data: bytearray
    pts: int = 0
    duration: int = 0
    linesize: list[int] = field(default_factory=list)

    @classmethod
    def blank(cls, width: int, height: int, format: PixelFormat) -> VideoFrame:
        """A zero-filled frame whose buffer holds the sum of its line sizes."""
        linesize = calculate_linesize(width, height, format)
        return cls(width, height, format, bytearray(sum(linesize)), linesize=linesize)


@dataclass
class AudioFrame:
    sample_rate: int
    format: AudioFormat
    speakers: tuple[AudioSpeaker, ...]
    data: bytearray
    frames: int
    pts: int = 0

    @classmethod
    def blank(cls, frames: int, audio_info: AudioInfo) -> AudioFrame:
        """A silent frame sized for ``frames`` samples per channel."""
        size = frames * audio_info.channels() * audio_info.format.bytes_per_sample()
        return cls(
            sample_rate=audio_info.sample_rate,
            format=audio_info.format,
            speakers=tuple(audio_info.speakers),
            data=bytearray(size),
            frames=frames,
        )


@dataclass
class EncodedPacket:
    data: bytes
    pts: int
    dts: int
    duration: int
    keyframe: bool
    track: TrackId


@dataclass
class VideoEncodeInfo:
    video: VideoInfo
    encoder_name: str
    codec_params: dict[str, Any] = field(default_factory=dict)


@dataclass
class AudioEncodeInfo:
    audio: AudioInfo
    encoder_name: str
    codec_params: dict[str, Any] = field(default_factory=dict)


MediaInfo = Union[VideoEncodeInfo, AudioEncodeInfo]
MediaData = Union[VideoFrame, AudioFrame]


class Source(ABC):
    """Something that produces video and/or audio."""

    def __init__(self, name: str) -> None:
        self.id = SourceId()
        self.name = name

    @abstractmethod
    def video_info(self) -> VideoInfo | None: ...

    @abstractmethod
    def audio_info(self) -> AudioInfo | None: ...

    @abstractmethod
    async def activate(self) -> None: ...

    @abstractmethod
    async def deactivate(self) -> None: ...

    @abstractmethod
    def is_active(self) -> bool: ...

    @abstractmethod
    def properties_definition(self) -> list[PropertyDef]: ...

    @abstractmethod
    def get_property(self, name: str) -> PropertyValue | None: ...

    @abstractmethod
    def set_property(self, name: str, value: PropertyValue) -> None: ...


class VideoSource(Source):
    @abstractmethod
    async def get_frame(self) -> VideoFrame | None: ...


class AudioSource(Source):
    @abstractmethod
    async def get_audio(self, frames: int) -> AudioFrame | None: ...


class Encoder(ABC):
    """Turns raw media into encoded packets."""

    def __init__(self, name: str) -> None:
        self.id = EncoderId()
        self.name = name

    @abstractmethod
    def codec_name(self) -> str: ...

    @abstractmethod
    def media_type(self) -> MediaType: ...

    @abstractmethod
    def input_info(self) -> MediaInfo | None: ...

    @abstractmethod
    def output_info(self) -> MediaInfo | None: ...

    @abstractmethod
    def caps(self) -> EncoderCapabilities: ...

    @abstractmethod
    def presets(self) -> list[EncoderPreset]: ...

    @abstractmethod
    def current_preset(self) -> EncoderPreset: ...

    @abstractmethod
    def set_preset(self, preset: EncoderPreset) -> None: ...

    @abstractmethod
    def parameters_definition(self) -> list[PropertyDef]: ...

    @abstractmethod
    def get_parameter(self, name: str) -> PropertyValue | None: ...

    @abstractmethod
    def set_parameter(self, name: str, value: PropertyValue) -> None: ...

    @abstractmethod
    async def initialize(self, input: MediaInfo, output: MediaInfo | None) -> None: ...

    @abstractmethod
    async def encode(self, data: MediaData) -> EncodedPacket | None: ...

    @abstractmethod
    async def flush(self) -> list[EncodedPacket]: ...


class Output(ABC):
    """A destination for encoded packets."""

    def __init__(self, name: str) -> None:
        self.id = OutputId()
        self.name = name

    @abstractmethod
    def protocol(self) -> str: ...

    @abstractmethod
    def is_connected(self) -> bool: ...

    @abstractmethod
    def is_reconnecting(self) -> bool: ...

    @abstractmethod
    async def connect(self) -> None: ...

    @abstractmethod
    async def disconnect(self) -> None: ...

    @abstractmethod
    async def send_packet(self, packet: EncodedPacket) -> None: ...

    @abstractmethod
    def properties_definition(self) -> list[PropertyDef]: ...

    @abstractmethod
    def get_property(self, name: str) -> PropertyValue | None: ...

    @abstractmethod
    def set_property(self, name: str, value: PropertyValue) -> None: ...


class SourceFactory(ABC):
    @abstractmethod
    def source_type(self) -> str: ...

    @abstractmethod
    def display_name(self) -> str: ...

    @abstractmethod
    def create(self) -> Source: ...

    @abstractmethod
    def properties_definition(self) -> list[PropertyDef]: ...


class EncoderFactory(ABC):
    @abstractmethod
    def encoder_type(self) -> str: ...

    @abstractmethod
    def display_name(self) -> str: ...

    @abstractmethod
    def codec_name(self) -> str: ...

    @abstractmethod
    def create(self) -> Encoder: ...


class OutputFactory(ABC):
    @abstractmethod
    def output_type(self) -> str: ...

    @abstractmethod
    def display_name(self) -> str: ...

    @abstractmethod
    def protocol(self) -> str: ...

    @abstractmethod
    def create(self) -> Output: ...