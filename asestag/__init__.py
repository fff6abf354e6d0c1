"""
asestag - Aseprite file decoding and frame compositing for Python
"""

from .errors import (
    AsepriteError,
    ChunkKind,
    CorruptCelData,
    InvalidCelReference,
    InvalidMagicNumber,
    MalformedChunk,
    MalformedFrame,
    MalformedHeader,
    PaletteIndexOutOfRange,
    TruncatedInput,
)
from .config import DecoderSettings, settings
from .models import (
    AnimationDirection,
    BlendMode,
    Cel,
    Color,
    ColorDepth,
    Document,
    Frame,
    Header,
    Layer,
    LayerKind,
    Palette,
    Slice,
    SliceKey,
    Tag,
    UserData,
)
from .formats import parse_document
from .compositor import CompositeImage, composite_frame, composite_frames
from .animation import (
    cycle_length,
    frame_at_time,
    frame_sequence,
    next_frame,
    start_frame,
    total_steps,
)
from .slices import NineSlice, SliceImage, slice_image

__all__ = [
    # Entry point
    "parse_document",
    # Models
    "AnimationDirection",
    "BlendMode",
    "Cel",
    "Color",
    "ColorDepth",
    "Document",
    "Frame",
    "Header",
    "Layer",
    "LayerKind",
    "Palette",
    "Slice",
    "SliceKey",
    "Tag",
    "UserData",
    # Compositing
    "CompositeImage",
    "composite_frame",
    "composite_frames",
    # Playback
    "cycle_length",
    "frame_at_time",
    "frame_sequence",
    "next_frame",
    "start_frame",
    "total_steps",
    # Slices
    "NineSlice",
    "SliceImage",
    "slice_image",
    # Configuration
    "DecoderSettings",
    "settings",
    # Errors
    "AsepriteError",
    "ChunkKind",
    "CorruptCelData",
    "InvalidCelReference",
    "InvalidMagicNumber",
    "MalformedChunk",
    "MalformedFrame",
    "MalformedHeader",
    "PaletteIndexOutOfRange",
    "TruncatedInput",
]

__version__ = "0.1.0"
