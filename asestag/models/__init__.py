"""
asestag Document Models

Immutable pydantic models for a decoded Aseprite file.

Model Hierarchy:
    Document
    ├── Header
    ├── Layer[]          (flat, bottom to top; groups via parent_index)
    ├── Frame[]
    │   └── Cel[]        (InlinePixels | LinkedCel payload)
    ├── Palette
    │   └── PaletteEntry[]
    ├── Tag{}            (by name)
    └── Slice[]
        └── SliceKey[]

Layers, cels, tags and slices may carry UserData.
"""

from .palette import Color, Palette, PaletteEntry, TRANSPARENT
from .user_data import UserData
from .header import ColorDepth, Header, HEADER_SIZE
from .layer import BlendMode, Layer, LayerFlags, LayerKind
from .cel import Cel, CelExtra, CelPayload, InlinePixels, LinkedCel
from .frame import Frame
from .tag import AnimationDirection, Tag
from .slice import Pivot, Slice, SliceCenter, SliceKey
from .document import Document

__all__ = [
    # Colors
    'Color',
    'Palette',
    'PaletteEntry',
    'TRANSPARENT',
    'UserData',
    # Header
    'ColorDepth',
    'Header',
    'HEADER_SIZE',
    # Layers
    'BlendMode',
    'Layer',
    'LayerFlags',
    'LayerKind',
    # Cels and frames
    'Cel',
    'CelExtra',
    'CelPayload',
    'InlinePixels',
    'LinkedCel',
    'Frame',
    # Animation
    'AnimationDirection',
    'Tag',
    # Slices
    'Pivot',
    'Slice',
    'SliceCenter',
    'SliceKey',
    # Document
    'Document',
]
