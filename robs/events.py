"""Application events and the bus that carries them."""

from __future__ import annotations

import queue
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, Mapping, Union

from robs.core_types import (
    AudioInfo,
    EncoderId,
    OutputId,
    ProfileId,
    SceneId,
    SceneItemId,
    SourceId,
    VideoInfo,
)


class _Checked:
    """Rejects events whose kind needs a field that was left unset."""

    _required: ClassVar[Mapping[Enum, tuple[str, ...]]] = {}

    def __post_init__(self) -> None:
        needed = self._required.get(self.kind, ())  # type: ignore[attr-defined]
        missing = [name for name in needed if getattr(self, name) is None]
        if missing:
            raise ValueError(f"{self.kind.name} event needs: {', '.join(missing)}")  # type: ignore[attr-defined]


class SessionEventKind(Enum):
    STARTING = auto()
    STARTED = auto()
    STOPPING = auto()
    STOPPED = auto()
    RECORDING_STARTING = auto()
    RECORDING_STARTED = auto()
    RECORDING_STOPPING = auto()
    RECORDING_STOPPED = auto()
    STREAMING_STARTING = auto()
    STREAMING_STARTED = auto()
    STREAMING_STOPPING = auto()
    STREAMING_STOPPED = auto()
    REPLAY_BUFFER_STARTING = auto()
    REPLAY_BUFFER_STARTED = auto()
    REPLAY_BUFFER_STOPPING = auto()
    REPLAY_BUFFER_STOPPED = auto()
    REPLAY_BUFFER_SAVED = auto()


@dataclass(frozen=True)
class SessionEvent(_Checked):
    kind: SessionEventKind
    duration_ms: int | None = None
    path: str | None = None

    _required: ClassVar[Mapping[Enum, tuple[str, ...]]] = {
        SessionEventKind.STREAMING_STARTING: ("duration_ms",),
        SessionEventKind.REPLAY_BUFFER_SAVED: ("path",),
    }


class SourceEventKind(Enum):
    CREATED = auto()
    REMOVED = auto()
    RENAMED = auto()
    ACTIVATED = auto()
    DEACTIVATED = auto()
    PROPERTIES_CHANGED = auto()
    VIDEO_PROPERTIES_CHANGED = auto()
    AUDIO_PROPERTIES_CHANGED = auto()


@dataclass(frozen=True)
class SourceEvent(_Checked):
    kind: SourceEventKind
    id: SourceId
    name: str | None = None
    source_type: str | None = None
    old_name: str | None = None
    new_name: str | None = None
    properties: tuple[str, ...] | None = None
    video_info: VideoInfo | None = None
    audio_info: AudioInfo | None = None

    _required: ClassVar[Mapping[Enum, tuple[str, ...]]] = {
        SourceEventKind.CREATED: ("name", "source_type"),
        SourceEventKind.RENAMED: ("old_name", "new_name"),
        SourceEventKind.PROPERTIES_CHANGED: ("properties",),
        SourceEventKind.VIDEO_PROPERTIES_CHANGED: ("video_info",),
        SourceEventKind.AUDIO_PROPERTIES_CHANGED: ("audio_info",),
    }


class EncoderEventKind(Enum):
    CREATED = auto()
    REMOVED = auto()
    PARAMETERS_CHANGED = auto()
    ERROR = auto()


@dataclass(frozen=True)
class EncoderEvent(_Checked):
    kind: EncoderEventKind
    id: EncoderId
    name: str | None = None
    codec: str | None = None
    message: str | None = None

    _required: ClassVar[Mapping[Enum, tuple[str, ...]]] = {
        EncoderEventKind.CREATED: ("name", "codec"),
        EncoderEventKind.ERROR: ("message",),
    }


@dataclass(frozen=True)
class OutputStats:
    total_bytes: int = 0
    total_frames: int = 0
    bitrate: int = 0
    frame_rate: float = 0.0
    dropped_frames: int = 0
    total_duration_ms: int = 0


class OutputEventKind(Enum):
    CREATED = auto()
    REMOVED = auto()
    CONNECTING = auto()
    CONNECTED = auto()
    DISCONNECTING = auto()
    DISCONNECTED = auto()
    RECONNECTING = auto()
    ERROR = auto()
    STATS_UPDATED = auto()


@dataclass(frozen=True)
class OutputEvent(_Checked):
    kind: OutputEventKind
    id: OutputId
    name: str | None = None
    protocol: str | None = None
    server: str | None = None
    attempt: int | None = None
    message: str | None = None
    stats: OutputStats | None = None

    _required: ClassVar[Mapping[Enum, tuple[str, ...]]] = {
        OutputEventKind.CREATED: ("name", "protocol"),
        OutputEventKind.CONNECTED: ("server",),
        OutputEventKind.RECONNECTING: ("attempt",),
        OutputEventKind.ERROR: ("message",),
        OutputEventKind.STATS_UPDATED: ("stats",),
    }


class SceneEventKind(Enum):
    CREATED = auto()
    REMOVED = auto()
    RENAMED = auto()
    ITEM_ADDED = auto()
    ITEM_REMOVED = auto()
    ITEM_ORDER_CHANGED = auto()
    ITEM_TRANSFORM_CHANGED = auto()
    ITEM_VISIBILITY_CHANGED = auto()
    CURRENT_CHANGED = auto()


@dataclass(frozen=True)
class SceneEvent(_Checked):
    kind: SceneEventKind
    id: SceneId
    item: SceneItemId | None = None
    name: str | None = None
    items: tuple[SceneItemId, ...] | None = None
    visible: bool | None = None

    _required: ClassVar[Mapping[Enum, tuple[str, ...]]] = {
        SceneEventKind.CREATED: ("name",),
        SceneEventKind.RENAMED: ("name",),
        SceneEventKind.ITEM_ADDED: ("item", "name"),
        SceneEventKind.ITEM_REMOVED: ("item",),
        SceneEventKind.ITEM_ORDER_CHANGED: ("items",),
        SceneEventKind.ITEM_TRANSFORM_CHANGED: ("item",),
        SceneEventKind.ITEM_VISIBILITY_CHANGED: ("item", "visible"),
    }


class ProfileEventKind(Enum):
    CREATED = auto()
    REMOVED = auto()
    RENAMED = auto()
    SWITCHED = auto()
    SAVED = auto()
    LOADED = auto()
    ERROR = auto()


@dataclass(frozen=True)
class ProfileEvent(_Checked):
    kind: ProfileEventKind
    id: ProfileId
    name: str | None = None
    message: str | None = None

    _required: ClassVar[Mapping[Enum, tuple[str, ...]]] = {
        ProfileEventKind.CREATED: ("name",),
        ProfileEventKind.RENAMED: ("name",),
        ProfileEventKind.ERROR: ("message",),
    }


@dataclass(frozen=True)
class ChatMessage:
    id: str
    platform: str
    channel: str
    user: str
    user_id: str
    content: str
    timestamp: int
    color: str | None = None
    badges: tuple[str, ...] = field(default_factory=tuple)
    is_mod: bool = False
    is_subscriber: bool = False
    is_vip: bool = False
    is_broadcaster: bool = False
    is_first_message: bool = False
    is_highlighted: bool = False
    reply_count: int = 0
    bits: int = 0


class ChatEventKind(Enum):
    CONNECTED = auto()
    DISCONNECTED = auto()
    MESSAGE = auto()
    USER_JOINED = auto()
    USER_LEFT = auto()
    USER_BANNED = auto()
    GIFTED_SUB = auto()
    RAIDED = auto()


_WHERE = ("platform", "channel")


@dataclass(frozen=True)
class ChatEvent(_Checked):
    kind: ChatEventKind
    platform: str | None = None
    channel: str | None = None
    message: ChatMessage | None = None
    user: str | None = None
    reason: str | None = None
    gifter: str | None = None
    recipient: str | None = None
    months: int | None = None
    raider: str | None = None
    viewers: int | None = None

    _required: ClassVar[Mapping[Enum, tuple[str, ...]]] = {
        ChatEventKind.CONNECTED: _WHERE,
        ChatEventKind.DISCONNECTED: _WHERE,
        ChatEventKind.MESSAGE: ("message",),
        ChatEventKind.USER_JOINED: _WHERE + ("user",),
        ChatEventKind.USER_LEFT: _WHERE + ("user",),
        ChatEventKind.USER_BANNED: _WHERE + ("user", "reason"),
        ChatEventKind.GIFTED_SUB: _WHERE + ("gifter", "recipient", "months"),
        ChatEventKind.RAIDED: _WHERE + ("raider", "viewers"),
    }


@dataclass(frozen=True)
class ErrorEvent:
    code: str
    message: str
    details: str | None = None


class LogLevel(Enum):
    DEBUG = "Debug"
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"
    CRITICAL = "Critical"


@dataclass(frozen=True)
class LogEvent:
    level: LogLevel
    message: str
    module: str | None = None


RobsEvent = Union[
    SessionEvent,
    SourceEvent,
    EncoderEvent,
    OutputEvent,
    SceneEvent,
    ProfileEvent,
    ChatEvent,
    ErrorEvent,
    LogEvent,
]


class EventBus:
    """Unbounded, thread-safe FIFO of application events."""

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[RobsEvent] = queue.SimpleQueue()

    def send(self, event: RobsEvent) -> None:
        self._queue.put(event)

    def receive(self, timeout: float | None = None) -> RobsEvent | None:
        """Wait for the next event; return None if ``timeout`` seconds pass first."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[RobsEvent]:
        """Remove and return every event queued right now, oldest first."""
        events: list[RobsEvent] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events