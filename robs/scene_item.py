"""Scene items: one layer of a scene with its transform, bounds and crop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from robs.core_types import SceneItemId, SourceId


class Alignment(Enum):
    """Anchor point for positioning and scaling."""

    TOP_LEFT = "TopLeft"
    TOP_CENTER = "TopCenter"
    TOP_RIGHT = "TopRight"
    CENTER_LEFT = "CenterLeft"
    CENTER = "Center"
    CENTER_RIGHT = "CenterRight"
    BOTTOM_LEFT = "BottomLeft"
    BOTTOM_CENTER = "BottomCenter"
    BOTTOM_RIGHT = "BottomRight"


@dataclass(frozen=True)
class Position:
    """Position in output coordinates."""

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def zero(cls) -> Position:
        return cls(0.0, 0.0)


@dataclass(frozen=True)
class Scale:
    """Scale factors; 1.0 keeps the original size."""

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def uniform(cls, s: float) -> Scale:
        return cls(s, s)

    @classmethod
    def one(cls) -> Scale:
        return cls(1.0, 1.0)


@dataclass(frozen=True)
class Crop:
    """Crop in source pixels, applied before scaling."""

    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0

    @classmethod
    def none(cls) -> Crop:
        return cls(0, 0, 0, 0)

    def cropped_width(self, source_width: int) -> int:
        """Width left after cropping, never below zero."""
        return max(0, max(0, source_width - self.left) - self.right)

    def cropped_height(self, source_height: int) -> int:
        """Height left after cropping, never below zero."""
        return max(0, max(0, source_height - self.top) - self.bottom)


class BoundsType(Enum):
    NONE = "None"
    MAX = "Max"
    SCALE = "Scale"
    NONE_KEEP_RATIO = "NoneKeepRatio"
    MAX_KEEP_RATIO = "MaxKeepRatio"


class SceneItem:
    """A source placed in a scene.

    While ``locked`` is true, changes to the transform, crop and bounds are ignored;
    visibility and the lock itself can always be changed.
    """

    def __init__(self, source_id: SourceId, source_name: str) -> None:
        self.id = SceneItemId()
        self.source_id = source_id
        self.source_name = source_name
        self._position = Position.zero()
        self._scale = Scale.one()
        self._rotation = 0.0
        self._alignment = Alignment.TOP_LEFT
        self._bounds_type = BoundsType.NONE
        self._bounds_alignment = Alignment.CENTER
        self._bounds_width = 0.0
        self._bounds_height = 0.0
        self._crop = Crop.none()
        self.visible = True
        self.locked = False

    def __repr__(self) -> str:
        return (
            f"SceneItem(id={self.id!r}, source_name={self.source_name!r}, "
            f"visible={self.visible}, locked={self.locked})"
        )

    @property
    def position(self) -> Position:
        return self._position

    @position.setter
    def position(self, value: Position) -> None:
        if not self.locked:
            self._position = value

    @property
    def scale(self) -> Scale:
        return self._scale

    @scale.setter
    def scale(self, value: Scale) -> None:
        if not self.locked:
            self._scale = value

    @property
    def rotation(self) -> float:
        """Rotation in degrees."""
        return self._rotation

    @rotation.setter
    def rotation(self, value: float) -> None:
        if not self.locked:
            self._rotation = value

    @property
    def alignment(self) -> Alignment:
        return self._alignment

    @alignment.setter
    def alignment(self, value: Alignment) -> None:
        if not self.locked:
            self._alignment = value

    @property
    def crop(self) -> Crop:
        return self._crop

    @crop.setter
    def crop(self, value: Crop) -> None:
        if not self.locked:
            self._crop = value

    @property
    def bounds_type(self) -> BoundsType:
        return self._bounds_type

    @property
    def bounds_alignment(self) -> Alignment:
        return self._bounds_alignment

    @property
    def bounds(self) -> tuple[float, float]:
        """Bounds as (width, height)."""
        return (self._bounds_width, self._bounds_height)

    def set_bounds(
        self, bounds_type: BoundsType, width: float, height: float, alignment: Alignment
    ) -> None:
        if self.locked:
            return
        self._bounds_type = bounds_type
        self._bounds_width = width
        self._bounds_height = height
        self._bounds_alignment = alignment

    @property
    def name(self) -> str:
        """Display name, the name of the source."""
        return self.source_name