"""
Layer - A document-wide layer declared by a 0x2004 chunk.

Layers are stored in a flat tuple ordered by stacking index (0 = bottom).
Group nesting is expressed with `parent_index`, a plain index back into the
same tuple, the same way a flat layer stack with parent ids works:

    0  Background          parent=None
    1  Body (group)        parent=None
    2    Arm               parent=1
    3    Torso             parent=1
    4  Effects             parent=None
"""

from enum import Enum, IntEnum, IntFlag
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .user_data import UserData


class LayerFlags(IntFlag):
    """Layer chunk flag bits."""
    VISIBLE = 1
    EDITABLE = 2
    LOCK_MOVEMENT = 4
    BACKGROUND = 8
    PREFER_LINKED_CELS = 16
    COLLAPSED = 32
    REFERENCE = 64


class LayerKind(str, Enum):
    """Layer kind identifiers."""
    NORMAL = "normal"
    GROUP = "group"
    REFERENCE = "reference"


class BlendMode(IntEnum):
    """Layer blend modes, valued as stored in the layer chunk."""
    NORMAL = 0
    MULTIPLY = 1
    SCREEN = 2
    OVERLAY = 3
    DARKEN = 4
    LIGHTEN = 5
    COLOR_DODGE = 6
    COLOR_BURN = 7
    HARD_LIGHT = 8
    SOFT_LIGHT = 9
    DIFFERENCE = 10
    EXCLUSION = 11
    HUE = 12
    SATURATION = 13
    COLOR = 14
    LUMINOSITY = 15
    ADDITION = 16
    SUBTRACT = 17
    DIVIDE = 18


class Layer(BaseModel):
    """A layer in the document's stacking order."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    name: str = Field(default='Layer')
    flags: int = Field(default=int(LayerFlags.VISIBLE | LayerFlags.EDITABLE))
    kind: LayerKind = Field(default=LayerKind.NORMAL)
    blend_mode: BlendMode = Field(default=BlendMode.NORMAL)
    opacity: int = Field(default=255, ge=0, le=255)

    # Hierarchy (None = root level)
    child_level: int = Field(default=0, ge=0)
    parent_index: Optional[int] = Field(default=None)

    user_data: Optional[UserData] = Field(default=None)

    @property
    def visible(self) -> bool:
        """The layer's own visibility flag (ignores parent groups)."""
        return bool(self.flags & LayerFlags.VISIBLE)

    @property
    def is_group(self) -> bool:
        return self.kind == LayerKind.GROUP

    @property
    def is_reference(self) -> bool:
        return self.kind == LayerKind.REFERENCE

    @property
    def is_background(self) -> bool:
        return bool(self.flags & LayerFlags.BACKGROUND)

    def has_content(self) -> bool:
        """Whether cels on this layer are drawn into composited frames."""
        return not (self.is_group or self.is_reference)
