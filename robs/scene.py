"""Scenes: ordered stacks of scene items rendered into one output picture."""

from __future__ import annotations

from typing import Any, Sequence

from robs.core_types import SceneId, SceneItemId, SourceId
from robs.scene_item import Alignment, BoundsType, Crop, Position, Scale, SceneItem


class Scene:
    """A named set of items; index 0 is the bottom layer, drawn first."""

    def __init__(self, name: str = "Main Scene", width: int = 1920, height: int = 1080) -> None:
        self.id = SceneId()
        self.name = name
        self._items: list[SceneItem] = []
        self._output_width = width
        self._output_height = height
        self._background_color: tuple[int, int, int, int] = (0, 0, 0, 255)

    @classmethod
    def with_resolution(cls, name: str, width: int, height: int) -> Scene:
        return cls(name, width, height)

    def __repr__(self) -> str:
        return f"Scene(name={self.name!r}, items={len(self._items)})"

    @property
    def items(self) -> tuple[SceneItem, ...]:
        """Items in z-order, bottom first."""
        return tuple(self._items)

    @property
    def background_color(self) -> tuple[int, int, int, int]:
        """Background colour as an RGBA tuple."""
        return self._background_color

    @background_color.setter
    def background_color(self, color: Sequence[int]) -> None:
        rgba = tuple(color)
        if len(rgba) != 4:
            raise ValueError("background colour needs four components (RGBA)")
        self._background_color = rgba  # type: ignore[assignment]

    def output_size(self) -> tuple[int, int]:
        return (self._output_width, self._output_height)

    def set_output_resolution(self, width: int, height: int) -> None:
        self._output_width = width
        self._output_height = height

    def item(self, item_id: SceneItemId) -> SceneItem | None:
        return next((item for item in self._items if item.id == item_id), None)

    def item_index(self, item_id: SceneItemId) -> int | None:
        return next((i for i, item in enumerate(self._items) if item.id == item_id), None)

    def visible_items(self) -> list[SceneItem]:
        """Visible items, top first."""
        return [item for item in reversed(self._items) if item.visible]

    def add_source(self, source_id: SourceId, source_name: str) -> SceneItemId:
        """Put a source on top of the scene and return the new item's id."""
        item = SceneItem(source_id, source_name)
        self._items.append(item)
        return item.id

    def remove_item(self, item_id: SceneItemId) -> bool:
        index = self.item_index(item_id)
        if index is None:
            return False
        del self._items[index]
        return True

    def item_count(self) -> int:
        return len(self._items)

    def _update(self, item_id: SceneItemId, **changes: Any) -> bool:
        item = self.item(item_id)
        if item is None:
            return False
        for attribute, value in changes.items():
            setattr(item, attribute, value)
        return True

    def set_item_position(self, item_id: SceneItemId, position: Position) -> bool:
        return self._update(item_id, position=position)

    def set_item_scale(self, item_id: SceneItemId, scale: Scale) -> bool:
        return self._update(item_id, scale=scale)

    def set_item_rotation(self, item_id: SceneItemId, rotation: float) -> bool:
        return self._update(item_id, rotation=rotation)

    def set_item_crop(self, item_id: SceneItemId, crop: Crop) -> bool:
        return self._update(item_id, crop=crop)

    def set_item_visible(self, item_id: SceneItemId, visible: bool) -> bool:
        return self._update(item_id, visible=visible)

    def set_item_locked(self, item_id: SceneItemId, locked: bool) -> bool:
        return self._update(item_id, locked=locked)

    def set_item_alignment(self, item_id: SceneItemId, alignment: Alignment) -> bool:
        return self._update(item_id, alignment=alignment)

    def set_item_bounds(
        self,
        item_id: SceneItemId,
        bounds_type: BoundsType,
        width: float,
        height: float,
        alignment: Alignment,
    ) -> bool:
        item = self.item(item_id)
        if item is None:
            return False
        item.set_bounds(bounds_type, width, height, alignment)
        return True

    def reorder_item(self, item_id: SceneItemId, new_index: int) -> bool:
        """Move an item to ``new_index`` in z-order, clamped to the end."""
        current = self.item_index(item_id)
        if current is None:
            return False
        if current == new_index:
            return True
        item = self._items.pop(current)
        self._items.insert(min(new_index, len(self._items)), item)
        return True

    def move_item_up(self, item_id: SceneItemId) -> bool:
        index = self.item_index(item_id)
        if index is None or index >= len(self._items) - 1:
            return False
        self._items[index], self._items[index + 1] = self._items[index + 1], self._items[index]
        return True

    def move_item_down(self, item_id: SceneItemId) -> bool:
        index = self.item_index(item_id)
        if index is None or index == 0:
            return False
        self._items[index], self._items[index - 1] = self._items[index - 1], self._items[index]
        return True

    def move_item_to_top(self, item_id: SceneItemId) -> bool:
        index = self.item_index(item_id)
        if index is None or index >= len(self._items) - 1:
            return False
        self._items.append(self._items.pop(index))
        return True

    def move_item_to_bottom(self, item_id: SceneItemId) -> bool:
        index = self.item_index(item_id)
        if index is None or index == 0:
            return False
        self._items.insert(0, self._items.pop(index))
        return True