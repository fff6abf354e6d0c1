"""
Cel pixel payload checks and zlib inflation.

Compressed cels store a complete zlib stream (2-byte header, deflate data,
Adler-32 trailer). The inflated data must be exactly width * height * bpp
bytes; anything else is corrupt.
"""

import zlib
from typing import Optional

from asestag.errors import CorruptCelData


def expected_cel_size(width: int, height: int, bytes_per_pixel: int) -> int:
    """Number of bytes a cel of the given size occupies once inflated."""
    return width * height * bytes_per_pixel


def check_raw_cel(
    data: bytes,
    width: int,
    height: int,
    bytes_per_pixel: int,
    offset: Optional[int] = None,
) -> bytes:
    """
    Validate an uncompressed cel payload.

    Args:
        data: Pixel bytes following the cel's width/height fields
        width: Cel width in pixels
        height: Cel height in pixels
        bytes_per_pixel: 4 (RGBA), 2 (grayscale) or 1 (indexed)
        offset: File offset of the payload, for error reports

    Returns:
        The payload unchanged
    """
    expected = expected_cel_size(width, height, bytes_per_pixel)
    if len(data) != expected:
        raise CorruptCelData(
            f"Raw cel {width}x{height} holds {len(data)} bytes, expected {expected}",
            offset=offset,
        )
    return data


def decompress_cel(
    data: bytes,
    width: int,
    height: int,
    bytes_per_pixel: int,
    max_bytes: Optional[int] = None,
    offset: Optional[int] = None,
) -> bytes:
    """
    Inflate a compressed cel payload and verify its size.

    Args:
        data: zlib stream
        width: Cel width in pixels
        height: Cel height in pixels
        bytes_per_pixel: 4 (RGBA), 2 (grayscale) or 1 (indexed)
        max_bytes: Refuse cels larger than this once inflated
        offset: File offset of the payload, for error reports

    Returns:
        Inflated pixel bytes, exactly width * height * bytes_per_pixel long
    """
    expected = expected_cel_size(width, height, bytes_per_pixel)
    if max_bytes is not None and expected > max_bytes:
        raise CorruptCelData(
            f"Cel {width}x{height} would inflate to {expected} bytes, limit is {max_bytes}",
            offset=offset,
        )

    inflater = zlib.decompressobj()
    try:
        # One byte of headroom so an oversized stream is detected without
        # inflating all of it.
        pixels = inflater.decompress(data, expected + 1)
        if not inflater.eof and len(pixels) <= expected:
            pixels += inflater.flush()
    except zlib.error as e:
        raise CorruptCelData(f"Invalid compressed cel data: {e}", offset=offset) from e

    if len(pixels) != expected:
        raise CorruptCelData(
            f"Compressed cel {width}x{height} inflated to {len(pixels)} bytes, expected {expected}",
            offset=offset,
        )
    if not inflater.eof:
        raise CorruptCelData(
            "Compressed cel data ends before the end of the zlib stream",
            offset=offset,
        )
    return pixels
