"""
Aseprite (.ase/.aseprite) file decoding.

File structure:
    HEADER (128 bytes, see asestag.models.header)
    FRAME[frame count]
        frame header (16 bytes, see asestag.formats.frames)
        CHUNK[]

Decoding is a single synchronous pass over an in-memory buffer. All
intermediate state lives in a DocumentBuilder local to the call, so
parse_document can run concurrently on different buffers.

Example:
    from asestag.formats import parse_document

    with open('hero.aseprite', 'rb') as f:
        doc = parse_document(f.read())
    image = doc.composite(0).to_pil()
"""

import logging
from typing import Optional

from asestag.config import DecoderSettings, settings as default_settings
from asestag.errors import InvalidMagicNumber, MalformedHeader
from asestag.models import ColorDepth, Document, Header, HEADER_SIZE

from .builder import DocumentBuilder
from .cursor import BufferTypes, ByteCursor
from .frames import parse_frame

logger = logging.getLogger(__name__)

FILE_MAGIC = 0xA5E0


def parse_header(cursor: ByteCursor) -> Header:
    """
    Decode the 128-byte file header.

    Args:
        cursor: Cursor positioned at the start of the file

    Returns:
        Decoded header. The cursor ends right after it.
    """
    start = cursor.absolute_offset
    file_size = cursor.read_u32()
    magic = cursor.read_u16()
    if magic != FILE_MAGIC:
        raise InvalidMagicNumber(f"Not an Aseprite file (magic 0x{magic:04x})", offset=start + 4)

    # The rest of the header is checked as a whole
    header = cursor.sub_cursor(HEADER_SIZE - 6)

    frame_count = header.read_u16()
    width = header.read_u16()
    height = header.read_u16()
    depth_value = header.read_u16()
    flags = header.read_u32()
    speed_ms = header.read_u16()
    header.skip(8)
    transparent_index = header.read_u8()
    header.skip(3)
    color_count = header.read_u16()
    pixel_width = header.read_u8()
    pixel_height = header.read_u8()
    grid_x = header.read_i16()
    grid_y = header.read_i16()
    grid_width = header.read_u16()
    grid_height = header.read_u16()

    if width == 0 or height == 0:
        raise MalformedHeader(f"Invalid canvas size {width}x{height}", offset=start + 8)
    try:
        color_depth = ColorDepth(depth_value)
    except ValueError as e:
        raise MalformedHeader(f"Unknown color depth {depth_value}", offset=start + 12) from e

    return Header(
        file_size=file_size,
        frame_count=frame_count,
        width=width,
        height=height,
        color_depth=color_depth,
        flags=flags,
        speed_ms=speed_ms,
        transparent_index=transparent_index,
        color_count=color_count,
        pixel_width=pixel_width,
        pixel_height=pixel_height,
        grid_x=grid_x,
        grid_y=grid_y,
        grid_width=grid_width,
        grid_height=grid_height,
    )


def parse_document(data: BufferTypes, settings: Optional[DecoderSettings] = None) -> Document:
    """
    Decode a complete Aseprite file.

    Args:
        data: File contents
        settings: Decoder settings (default: the module-level settings)

    Returns:
        Immutable Document

    Raises:
        AsepriteError: Any subclass, on the first problem found
    """
    if settings is None:
        settings = default_settings
    cursor = ByteCursor(data)

    header = parse_header(cursor)
    if header.file_size != cursor.end:
        message = f"Header declares {header.file_size} bytes, buffer holds {cursor.end}"
        if settings.STRICT_FILE_SIZE:
            raise MalformedHeader(message, offset=0)
        logger.warning(message)

    builder = DocumentBuilder(header)
    for index in range(header.frame_count):
        parse_frame(cursor, index, builder, settings)

    if not cursor.at_end:
        logger.debug(f"Ignoring {cursor.remaining} bytes after the last frame")

    document = builder.seal()
    logger.debug(
        f"Decoded {document.width}x{document.height} document: "
        f"{document.frame_count} frames, {len(document.layers)} layers, {len(document.tags)} tags"
    )
    return document
