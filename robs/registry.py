"""Name-keyed registries of factories and the collection of scenes."""

from __future__ import annotations

from typing import Generic, TypeVar

from robs.scene import Scene

T = TypeVar("T")


class Registry(Generic[T]):
    """Items stored under unique names; registering a name again replaces its item."""

    def __init__(self) -> None:
        self._items: dict[str, T] = {}

    def register(self, name: str, item: T) -> None:
        self._items[name] = item

    def unregister(self, name: str) -> None:
        self._items.pop(name, None)

    def get(self, name: str) -> T | None:
        return self._items.get(name)

    def list(self) -> list[str]:
        return list(self._items)

    def count(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return name in self._items


class SceneCollection:
    """All scenes of a session, keyed by name, with one optionally current."""

    def __init__(self) -> None:
        self._scenes: dict[str, Scene] = {}
        self._current_scene_name: str | None = None

    def create_scene(self, name: str) -> Scene:
        """Create a scene, replacing any scene of the same name."""
        scene = Scene(name)
        self._scenes[name] = scene
        return scene

    def create_scene_with_resolution(self, name: str, width: int, height: int) -> Scene:
        scene = Scene.with_resolution(name, width, height)
        self._scenes[name] = scene
        return scene

    def get(self, name: str) -> Scene | None:
        return self._scenes.get(name)

    def current_scene(self) -> Scene | None:
        if self._current_scene_name is None:
            return None
        return self._scenes.get(self._current_scene_name)

    def set_current_scene(self, name: str) -> bool:
        """Make ``name`` current; return False if no such scene exists."""
        if name not in self._scenes:
            return False
        self._current_scene_name = name
        return True

    def current_scene_name(self) -> str | None:
        return self._current_scene_name

    def list(self) -> list[str]:
        return list(self._scenes)

    def remove(self, name: str) -> bool:
        """Remove a scene, clearing the current scene if it was that one."""
        if name == (self._current_scene_name or ""):
            self._current_scene_name = None
        return self._scenes.pop(name, None) is not None

    def count(self) -> int:
        return len(self._scenes)

    def exists(self, name: str) -> bool:
        return name in self._scenes

    def scenes(self) -> dict[str, Scene]:
        """The live mapping of scene names to scenes."""
        return self._scenes

    def __len__(self) -> int:
        return len(self._scenes)

    def __contains__(self, name: object) -> bool:
        return name in self._scenes