"""
Header - The fixed 128-byte file header.

Layout (little-endian):
    DWORD   file size
    WORD    magic number (0xA5E0)
    WORD    frames
    WORD    width, height
    WORD    color depth (32 RGBA, 16 grayscale, 8 indexed)
    DWORD   flags (1 = layer opacity has a valid value)
    WORD    speed (deprecated, ms between frames)
    DWORD   0, 0
    BYTE    transparent palette index (indexed sprites only)
    BYTE[3] ignored
    WORD    number of colors (0 means 256)
    BYTE    pixel width, pixel height
    SHORT   grid x, grid y
    WORD    grid width, grid height
    BYTE[84] reserved
"""

from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


HEADER_SIZE = 128
HEADER_FLAG_LAYER_OPACITY = 0x1


class ColorDepth(IntEnum):
    """Color depth in bits per pixel, as stored in the header."""
    INDEXED = 8
    GRAYSCALE = 16
    RGBA = 32

    @property
    def bytes_per_pixel(self) -> int:
        return self.value // 8


class Header(BaseModel):
    """Decoded file header."""

    model_config = ConfigDict(frozen=True)

    file_size: int = Field(default=0, ge=0)
    frame_count: int = Field(default=1, ge=0)
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    color_depth: ColorDepth = Field(default=ColorDepth.RGBA)
    flags: int = Field(default=HEADER_FLAG_LAYER_OPACITY)
    speed_ms: int = Field(default=100, ge=0)
    transparent_index: int = Field(default=0, ge=0, le=255)
    color_count: int = Field(default=256, ge=0)
    pixel_width: int = Field(default=1, ge=0)
    pixel_height: int = Field(default=1, ge=0)
    grid_x: int = Field(default=0)
    grid_y: int = Field(default=0)
    grid_width: int = Field(default=16, ge=0)
    grid_height: int = Field(default=16, ge=0)

    @property
    def layer_opacity_valid(self) -> bool:
        """Whether layer chunks carry a meaningful opacity value."""
        return bool(self.flags & HEADER_FLAG_LAYER_OPACITY)

    @property
    def pixel_aspect_ratio(self) -> float:
        """Pixel width divided by pixel height (1.0 when either is unset)."""
        if self.pixel_width == 0 or self.pixel_height == 0:
            return 1.0
        return self.pixel_width / self.pixel_height

    @property
    def initial_palette_size(self) -> int:
        return self.color_count or 256

    @property
    def transparent_color_index(self) -> Optional[int]:
        """The transparent palette index, only meaningful for indexed sprites."""
        if self.color_depth == ColorDepth.INDEXED:
            return self.transparent_index
        return None
