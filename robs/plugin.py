"""Plugin interface, plugin metadata and the source definition record."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from robs.interfaces import EncoderFactory, OutputFactory, SourceFactory

SOURCE_FLAG_VIDEO = 1 << 0
SOURCE_FLAG_AUDIO = 1 << 1
SOURCE_FLAG_ASYNC = 1 << 2
SOURCE_FLAG_INTERACTION = 1 << 3


def plugin_api_version() -> int:
    """Version of the plugin interface."""
    return 1


@dataclass(frozen=True)
class SourceDefinition:
    """A source type offered by a plugin; ``flags`` combines the SOURCE_FLAG_* bits."""

    id: str
    type_name: str
    display_name: str
    flags: int = 0


@dataclass
class PluginInfo:
    name: str
    version: str
    author: str
    description: str
    path: str


@dataclass
class PluginCapabilities:
    sources: bool = False
    encoders: bool = False
    outputs: bool = False
    audio: bool = False
    ui: bool = False


class Plugin(ABC):
    """An extension providing sources, encoders and outputs."""

    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def version(self) -> str: ...

    @abstractmethod
    def author(self) -> str: ...

    @abstractmethod
    def description(self) -> str: ...

    @abstractmethod
    def capabilities(self) -> PluginCapabilities: ...

    @abstractmethod
    def get_sources(self) -> list[SourceFactory]: ...

    @abstractmethod
    def get_encoders(self) -> list[EncoderFactory]: ...

    @abstractmethod
    def get_outputs(self) -> list[OutputFactory]: ...

    @abstractmethod
    def initialize(self) -> None: ...

    @abstractmethod
    def shutdown(self) -> None: ...


class UnknownPlugin(Plugin):
    """A plugin known only by its metadata; it provides nothing."""

    def __init__(self, info: PluginInfo) -> None:
        self.info = info

    def name(self) -> str:
        return self.info.name

    def version(self) -> str:
        return self.info.version

    def author(self) -> str:
        return self.info.author

    def description(self) -> str:
        return self.info.description

    def capabilities(self) -> PluginCapabilities:
        return PluginCapabilities()

    def get_sources(self) -> list[SourceFactory]:
        return []

    def get_encoders(self) -> list[EncoderFactory]:
        return []

    def get_outputs(self) -> list[OutputFactory]:
        return []

    def initialize(self) -> None:
        return None

    def shutdown(self) -> None:
        return None