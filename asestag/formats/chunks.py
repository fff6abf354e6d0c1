"""
Chunk decoding.

Every chunk inside a frame starts with a 6-byte header:

    DWORD   chunk size (including this header)
    WORD    chunk type

The body is decoded by one parser per known type into a small record; the
DocumentBuilder then applies the records in stream order. Unknown types are
skipped by size, which keeps newer files readable.

Decoding here only checks what the chunk itself can prove (field ranges,
string encoding, pixel payload sizes). Checks that need earlier chunks
(layer existence, link targets, group nesting) live in the builder.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Optional, Union

from asestag.compression import check_raw_cel, decompress_cel
from asestag.config import DecoderSettings
from asestag.errors import ChunkKind, MalformedChunk, TruncatedInput
from asestag.models import (
    AnimationDirection,
    BlendMode,
    CelExtra,
    Color,
    Header,
    InlinePixels,
    LayerFlags,
    LayerKind,
    LinkedCel,
    PaletteEntry,
    Pivot,
    SliceCenter,
    SliceKey,
    UserData,
)
from asestag.models.slice import SLICE_FLAG_NINE_PATCH, SLICE_FLAG_PIVOT

from .cursor import ByteCursor

logger = logging.getLogger(__name__)

CHUNK_HEADER_SIZE = 6


class ChunkType(IntEnum):
    """Chunk type identifiers."""
    OLD_PALETTE_256 = 0x0004
    OLD_PALETTE_64 = 0x0011
    LAYER = 0x2004
    CEL = 0x2005
    CEL_EXTRA = 0x2006
    COLOR_PROFILE = 0x2007
    MASK = 0x2016
    TAGS = 0x2018
    PALETTE = 0x2019
    USER_DATA = 0x2020
    SLICE = 0x2022

    @property
    def kind(self) -> ChunkKind:
        return _CHUNK_KINDS[self]


_CHUNK_KINDS = {
    ChunkType.OLD_PALETTE_256: ChunkKind.OLD_PALETTE,
    ChunkType.OLD_PALETTE_64: ChunkKind.OLD_PALETTE,
    ChunkType.LAYER: ChunkKind.LAYER,
    ChunkType.CEL: ChunkKind.CEL,
    ChunkType.CEL_EXTRA: ChunkKind.CEL_EXTRA,
    ChunkType.COLOR_PROFILE: ChunkKind.COLOR_PROFILE,
    ChunkType.MASK: ChunkKind.MASK,
    ChunkType.TAGS: ChunkKind.TAGS,
    ChunkType.PALETTE: ChunkKind.PALETTE,
    ChunkType.USER_DATA: ChunkKind.USER_DATA,
    ChunkType.SLICE: ChunkKind.SLICE,
}


@dataclass
class ChunkContext:
    """Document facts a chunk body needs to decode itself."""
    header: Header
    settings: DecoderSettings
    frame_index: int = 0


# =============================================================================
# Records
# =============================================================================

@dataclass
class OldPaletteChunk:
    """Packets of (skip, colors) applied one after another."""
    packets: list[tuple[int, list[Color]]] = field(default_factory=list)


@dataclass
class LayerChunk:
    flags: int
    kind: LayerKind
    child_level: int
    blend_mode: BlendMode
    opacity: int
    name: str


@dataclass
class CelChunk:
    layer_index: int
    x: int
    y: int
    opacity: int
    payload: Union[InlinePixels, LinkedCel]


@dataclass
class CelExtraChunk:
    extra: CelExtra


@dataclass
class TagRecord:
    name: str
    from_frame: int
    to_frame: int
    direction: AnimationDirection
    repeat: int
    color: Color


@dataclass
class TagsChunk:
    tags: list[TagRecord] = field(default_factory=list)


@dataclass
class PaletteChunk:
    size: int
    first: int
    entries: list[PaletteEntry] = field(default_factory=list)


@dataclass
class UserDataChunk:
    user_data: UserData


@dataclass
class SliceChunk:
    name: str
    flags: int
    keys: list[SliceKey] = field(default_factory=list)


@dataclass
class IgnoredChunk:
    """A recognized chunk the decoder does not use (color profile, mask)."""
    chunk_type: ChunkType


ChunkRecord = Union[
    OldPaletteChunk,
    LayerChunk,
    CelChunk,
    CelExtraChunk,
    TagsChunk,
    PaletteChunk,
    UserDataChunk,
    SliceChunk,
    IgnoredChunk,
]


# =============================================================================
# Parsers
# =============================================================================

def _scale_6bit(value: int) -> int:
    value &= 0x3F
    return (value << 2) | (value >> 4)


def _parse_old_palette(cursor: ByteCursor, ctx: ChunkContext, six_bit: bool) -> OldPaletteChunk:
    record = OldPaletteChunk()
    packet_count = cursor.read_u16()
    for _ in range(packet_count):
        skip = cursor.read_u8()
        count = cursor.read_u8() or 256
        colors = []
        for _ in range(count):
            r, g, b = cursor.read_u8(), cursor.read_u8(), cursor.read_u8()
            if six_bit:
                r, g, b = _scale_6bit(r), _scale_6bit(g), _scale_6bit(b)
            colors.append(Color(r, g, b, 255))
        record.packets.append((skip, colors))
    return record


def parse_old_palette_256(cursor: ByteCursor, ctx: ChunkContext) -> OldPaletteChunk:
    return _parse_old_palette(cursor, ctx, six_bit=False)


def parse_old_palette_64(cursor: ByteCursor, ctx: ChunkContext) -> OldPaletteChunk:
    return _parse_old_palette(cursor, ctx, six_bit=True)


def parse_layer(cursor: ByteCursor, ctx: ChunkContext) -> LayerChunk:
    start = cursor.absolute_offset
    flags = cursor.read_u16()
    layer_type = cursor.read_u16()
    child_level = cursor.read_u16()
    cursor.skip(4)  # default width/height, unused
    blend_value = cursor.read_u16()
    opacity = cursor.read_u8()
    cursor.skip(3)
    name = cursor.read_string(ChunkKind.LAYER)

    if layer_type == 0:
        kind = LayerKind.REFERENCE if flags & LayerFlags.REFERENCE else LayerKind.NORMAL
    elif layer_type == 1:
        kind = LayerKind.GROUP
    else:
        raise MalformedChunk(ChunkKind.LAYER, f"Unknown layer type {layer_type}", offset=start)

    try:
        blend_mode = BlendMode(blend_value)
    except ValueError as e:
        raise MalformedChunk(ChunkKind.LAYER, f"Unknown blend mode {blend_value}", offset=start) from e

    if not ctx.header.layer_opacity_valid:
        opacity = 255

    return LayerChunk(
        flags=flags,
        kind=kind,
        child_level=child_level,
        blend_mode=blend_mode,
        opacity=opacity,
        name=name,
    )


def parse_cel(cursor: ByteCursor, ctx: ChunkContext) -> CelChunk:
    start = cursor.absolute_offset
    layer_index = cursor.read_u16()
    x = cursor.read_i16()
    y = cursor.read_i16()
    opacity = cursor.read_u8()
    cel_type = cursor.read_u16()
    cursor.skip(7)

    bpp = ctx.header.color_depth.bytes_per_pixel

    if cel_type == 0:
        width = cursor.read_u16()
        height = cursor.read_u16()
        data_offset = cursor.absolute_offset
        data = check_raw_cel(cursor.rest(), width, height, bpp, offset=data_offset)
        payload = InlinePixels(width=width, height=height, compressed=False, data=data)
    elif cel_type == 1:
        payload = LinkedCel(frame_index=cursor.read_u16())
    elif cel_type == 2:
        width = cursor.read_u16()
        height = cursor.read_u16()
        data_offset = cursor.absolute_offset
        data = decompress_cel(
            cursor.rest(),
            width,
            height,
            bpp,
            max_bytes=ctx.settings.MAX_CEL_BYTES,
            offset=data_offset,
        )
        payload = InlinePixels(width=width, height=height, compressed=True, data=data)
    else:
        raise MalformedChunk(ChunkKind.CEL, f"Unknown cel type {cel_type}", offset=start)

    return CelChunk(layer_index=layer_index, x=x, y=y, opacity=opacity, payload=payload)


def parse_cel_extra(cursor: ByteCursor, ctx: ChunkContext) -> CelExtraChunk:
    flags = cursor.read_u32()
    x = cursor.read_fixed_point()
    y = cursor.read_fixed_point()
    width = cursor.read_fixed_point()
    height = cursor.read_fixed_point()
    return CelExtraChunk(extra=CelExtra(flags=flags, x=x, y=y, width=width, height=height))


def parse_tags(cursor: ByteCursor, ctx: ChunkContext) -> TagsChunk:
    record = TagsChunk()
    count = cursor.read_u16()
    cursor.skip(8)
    frame_count = ctx.header.frame_count

    for _ in range(count):
        start = cursor.absolute_offset
        from_frame = cursor.read_u16()
        to_frame = cursor.read_u16()
        direction_value = cursor.read_u8()
        repeat = cursor.read_u16()
        cursor.skip(6)
        r, g, b = cursor.read_u8(), cursor.read_u8(), cursor.read_u8()
        cursor.skip(1)
        name = cursor.read_string(ChunkKind.TAGS)

        try:
            direction = AnimationDirection(direction_value)
        except ValueError as e:
            raise MalformedChunk(
                ChunkKind.TAGS, f"Tag '{name}' has unknown direction {direction_value}", offset=start
            ) from e
        if from_frame > to_frame or to_frame >= frame_count:
            raise MalformedChunk(
                ChunkKind.TAGS,
                f"Tag '{name}' range [{from_frame}, {to_frame}] invalid for {frame_count} frames",
                offset=start,
            )

        record.tags.append(TagRecord(
            name=name,
            from_frame=from_frame,
            to_frame=to_frame,
            direction=direction,
            repeat=repeat,
            color=Color(r, g, b, 255),
        ))
    return record


def parse_palette(cursor: ByteCursor, ctx: ChunkContext) -> PaletteChunk:
    start = cursor.absolute_offset
    size = cursor.read_u32()
    first = cursor.read_u32()
    last = cursor.read_u32()
    cursor.skip(8)

    if not first <= last < size:
        raise MalformedChunk(
            ChunkKind.PALETTE,
            f"Palette range [{first}, {last}] invalid for size {size}",
            offset=start,
        )

    record = PaletteChunk(size=size, first=first)
    for _ in range(last - first + 1):
        flags = cursor.read_u16()
        color = Color(cursor.read_u8(), cursor.read_u8(), cursor.read_u8(), cursor.read_u8())
        name = cursor.read_string(ChunkKind.PALETTE) if flags & 0x1 else None
        record.entries.append(PaletteEntry(color=color, name=name))
    return record


def parse_user_data(cursor: ByteCursor, ctx: ChunkContext) -> UserDataChunk:
    flags = cursor.read_u32()
    text = cursor.read_string(ChunkKind.USER_DATA) if flags & 0x1 else None
    color = None
    if flags & 0x2:
        color = Color(cursor.read_u8(), cursor.read_u8(), cursor.read_u8(), cursor.read_u8())
    # Property maps (flag 4) are not decoded
    return UserDataChunk(user_data=UserData(text=text, color=color))


def parse_slice(cursor: ByteCursor, ctx: ChunkContext) -> SliceChunk:
    key_count = cursor.read_u32()
    flags = cursor.read_u32()
    cursor.skip(4)
    name = cursor.read_string(ChunkKind.SLICE)
    frame_count = ctx.header.frame_count

    record = SliceChunk(name=name, flags=flags)
    previous_frame = -1
    for _ in range(key_count):
        start = cursor.absolute_offset
        frame_index = cursor.read_u32()
        x = cursor.read_i32()
        y = cursor.read_i32()
        width = cursor.read_u32()
        height = cursor.read_u32()

        center = None
        if flags & SLICE_FLAG_NINE_PATCH:
            center = SliceCenter(
                x=cursor.read_i32(),
                y=cursor.read_i32(),
                width=cursor.read_u32(),
                height=cursor.read_u32(),
            )
        pivot = None
        if flags & SLICE_FLAG_PIVOT:
            pivot = Pivot(x=cursor.read_i32(), y=cursor.read_i32())

        if frame_index <= previous_frame or frame_index >= frame_count:
            raise MalformedChunk(
                ChunkKind.SLICE,
                f"Slice '{name}' key at frame {frame_index} out of order or out of range",
                offset=start,
            )
        previous_frame = frame_index

        record.keys.append(SliceKey(
            frame_index=frame_index,
            x=x,
            y=y,
            width=width,
            height=height,
            center=center,
            pivot=pivot,
        ))
    return record


def _ignore(chunk_type: ChunkType) -> Callable[[ByteCursor, ChunkContext], IgnoredChunk]:
    def parse(cursor: ByteCursor, ctx: ChunkContext) -> IgnoredChunk:
        return IgnoredChunk(chunk_type=chunk_type)
    return parse


CHUNK_PARSERS: dict[ChunkType, Callable[[ByteCursor, ChunkContext], ChunkRecord]] = {
    ChunkType.OLD_PALETTE_256: parse_old_palette_256,
    ChunkType.OLD_PALETTE_64: parse_old_palette_64,
    ChunkType.LAYER: parse_layer,
    ChunkType.CEL: parse_cel,
    ChunkType.CEL_EXTRA: parse_cel_extra,
    ChunkType.COLOR_PROFILE: _ignore(ChunkType.COLOR_PROFILE),
    ChunkType.MASK: _ignore(ChunkType.MASK),
    ChunkType.TAGS: parse_tags,
    ChunkType.PALETTE: parse_palette,
    ChunkType.USER_DATA: parse_user_data,
    ChunkType.SLICE: parse_slice,
}


# =============================================================================
# Stream
# =============================================================================

def parse_chunk(cursor: ByteCursor, ctx: ChunkContext) -> Optional[ChunkRecord]:
    """
    Decode the next chunk of a frame.

    The cursor must be bounded to the frame; it is advanced past the whole
    chunk whatever the body parser consumed.

    Args:
        cursor: Cursor positioned at a chunk header
        ctx: Decoding context

    Returns:
        The decoded record, or None for an unknown chunk type
    """
    start = cursor.absolute_offset
    try:
        size = cursor.read_u32()
        type_value = cursor.read_u16()
    except TruncatedInput as e:
        raise MalformedChunk(ChunkKind.CHUNK, "Chunk header is truncated", offset=start) from e

    if size < CHUNK_HEADER_SIZE:
        raise MalformedChunk(ChunkKind.CHUNK, f"Chunk size {size} is smaller than its header", offset=start)
    body_size = size - CHUNK_HEADER_SIZE
    if body_size > cursor.remaining:
        raise MalformedChunk(
            ChunkKind.CHUNK,
            f"Chunk of {size} bytes overruns its frame ({cursor.remaining + CHUNK_HEADER_SIZE} left)",
            offset=start,
        )
    body = cursor.sub_cursor(body_size)

    try:
        chunk_type = ChunkType(type_value)
    except ValueError:
        logger.debug(f"Skipping unknown chunk type 0x{type_value:04x} ({size} bytes) at 0x{start:x}")
        return None

    parser = CHUNK_PARSERS[chunk_type]
    try:
        record = parser(body, ctx)
    except TruncatedInput as e:
        raise MalformedChunk(
            chunk_type.kind, f"Chunk body is truncated: {e.message}", offset=e.offset
        ) from e

    if isinstance(record, IgnoredChunk):
        logger.debug(f"Ignoring {chunk_type.kind.value} chunk at 0x{start:x}")
    return record
