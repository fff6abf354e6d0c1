"""
Color resolution from depth-native cel pixels to RGBA8.

Pixel layouts by color depth:
    RGBA (32 bpp):       R, G, B, A
    Grayscale (16 bpp):  value, alpha
    Indexed (8 bpp):     palette index
"""

from typing import Optional

import numpy as np

from asestag.errors import CorruptCelData, PaletteIndexOutOfRange
from asestag.models.header import ColorDepth
from asestag.models.palette import Palette


def bytes_per_pixel(depth: ColorDepth) -> int:
    """Bytes one pixel occupies in a cel of the given depth."""
    return ColorDepth(depth).bytes_per_pixel


def resolve_pixels(
    data: bytes,
    width: int,
    height: int,
    depth: ColorDepth,
    palette: Optional[Palette] = None,
    transparent_index: Optional[int] = None,
) -> np.ndarray:
    """
    Convert depth-native pixel bytes to an RGBA8 array.

    For indexed pixels, the transparent index resolves to (0, 0, 0, 0) on
    every layer; on the background layer this is the transparent pixel the
    file asks for, elsewhere it is transparent black rather than the palette
    color.

    Args:
        data: Pixel bytes, row-major, width * height * bytes_per_pixel long
        width: Width in pixels
        height: Height in pixels
        depth: Color depth of the document
        palette: Palette for indexed pixels
        transparent_index: Transparent palette index (indexed only)

    Returns:
        Array of shape (height, width, 4), dtype uint8
    """
    depth = ColorDepth(depth)
    expected = width * height * depth.bytes_per_pixel
    if len(data) != expected:
        raise CorruptCelData(f"Pixel buffer holds {len(data)} bytes, expected {expected}")

    raw = np.frombuffer(data, dtype=np.uint8)

    if depth == ColorDepth.RGBA:
        return raw.reshape((height, width, 4)).copy()

    if depth == ColorDepth.GRAYSCALE:
        gray = raw.reshape((height, width, 2))
        result = np.empty((height, width, 4), dtype=np.uint8)
        result[:, :, 0] = gray[:, :, 0]
        result[:, :, 1] = gray[:, :, 0]
        result[:, :, 2] = gray[:, :, 0]
        result[:, :, 3] = gray[:, :, 1]
        return result

    return _resolve_indexed(raw.reshape((height, width)), palette, transparent_index)


def _resolve_indexed(
    indices: np.ndarray,
    palette: Optional[Palette],
    transparent_index: Optional[int],
) -> np.ndarray:
    lut = palette.to_array() if palette is not None else np.zeros((0, 4), dtype=np.uint8)

    if transparent_index is not None:
        transparent = indices == transparent_index
    else:
        transparent = np.zeros(indices.shape, dtype=bool)

    if indices.size:
        out_of_range = (indices >= len(lut)) & ~transparent
        if out_of_range.any():
            bad = int(indices[out_of_range].max())
            raise PaletteIndexOutOfRange(bad, len(lut))

    # Extend the table so the transparent index is always addressable
    table = np.zeros((256, 4), dtype=np.uint8)
    table[:min(len(lut), 256)] = lut[:256]
    result = table[indices]
    result[transparent] = 0
    return result
