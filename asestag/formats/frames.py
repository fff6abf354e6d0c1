"""
Frame decoding.

Frame layout (little-endian, 16-byte header):

    DWORD   bytes in this frame (including the header)
    WORD    magic number (0xF1FA)
    WORD    old chunk count (0xFFFF means "see the new field")
    WORD    frame duration in milliseconds
    BYTE[2] reserved
    DWORD   new chunk count (0 means "use the old field")
    CHUNK[] chunks
"""

import logging

from asestag.config import DecoderSettings
from asestag.errors import MalformedFrame, TruncatedInput
from asestag.models import Frame, Header

from .builder import DocumentBuilder
from .chunks import ChunkContext, parse_chunk
from .cursor import ByteCursor

logger = logging.getLogger(__name__)

FRAME_HEADER_SIZE = 16
FRAME_MAGIC = 0xF1FA
LEGACY_COUNT_SENTINEL = 0xFFFF


def chunk_count(legacy_count: int, extended_count: int) -> int:
    """Number of chunks a frame declares."""
    if legacy_count == LEGACY_COUNT_SENTINEL and extended_count != 0:
        return extended_count
    return legacy_count


def frame_duration(duration_ms: int, header: Header, settings: DecoderSettings) -> int:
    """Resolve a frame duration of 0 to the header speed, then the configured default."""
    if duration_ms:
        return duration_ms
    if header.speed_ms:
        return header.speed_ms
    return settings.DEFAULT_FRAME_DURATION_MS


def parse_frame(
    cursor: ByteCursor,
    index: int,
    builder: DocumentBuilder,
    settings: DecoderSettings,
) -> Frame:
    """
    Decode one frame and feed its chunks to the builder.

    Args:
        cursor: Cursor positioned at the frame header
        index: Frame index
        builder: Document builder of the current parse
        settings: Decoder settings

    Returns:
        The decoded frame. The cursor ends at the frame's declared end.
    """
    start = cursor.absolute_offset
    length = cursor.read_u32()
    if length < FRAME_HEADER_SIZE:
        raise MalformedFrame(f"Frame {index} declares {length} bytes, less than its header", offset=start)
    if length - 4 > cursor.remaining:
        raise TruncatedInput(
            f"Frame {index} declares {length} bytes, only {cursor.remaining + 4} left",
            offset=start,
        )
    body = cursor.sub_cursor(length - 4)

    magic = body.read_u16()
    if magic != FRAME_MAGIC:
        raise MalformedFrame(f"Frame {index} has bad magic number 0x{magic:04x}", offset=start + 4)

    legacy_count = body.read_u16()
    duration_ms = body.read_u16()
    body.skip(2)
    extended_count = body.read_u32()

    count = chunk_count(legacy_count, extended_count)
    duration = frame_duration(duration_ms, builder.header, settings)
    if duration != duration_ms:
        logger.debug(f"Frame {index} has no duration, using {duration} ms")

    ctx = ChunkContext(header=builder.header, settings=settings, frame_index=index)
    builder.begin_frame(index, duration)
    for _ in range(count):
        offset = body.absolute_offset
        record = parse_chunk(body, ctx)
        if record is not None:
            builder.apply(record, offset)

    if not body.at_end:
        logger.debug(f"Frame {index} has {body.remaining} bytes after its last chunk")
    return builder.end_frame()
