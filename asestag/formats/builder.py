"""
DocumentBuilder - Parse-local state that accumulates chunk records.

Layers, tags, slices and the palette are document-wide but arrive spread
over frames, and user data chunks attach to whatever came right before
them. The builder owns all of that mutable state for one parse call and is
sealed into an immutable Document at the end.

Layer nesting is rebuilt from child levels with a stack of the most recent
layer at each level:

    level 0  Body (group)    stack: [Body]
    level 1    Arm           stack: [Body, Arm]        parent = Body
    level 1    Head (group)  stack: [Body, Head]       parent = Body
    level 2      Eyes        stack: [Body, Head, Eyes] parent = Head
    level 0  Shadow          stack: [Shadow]           parent = None
"""

import logging
from typing import Optional

from asestag.errors import ChunkKind, InvalidCelReference, MalformedChunk
from asestag.models import (
    Cel,
    Color,
    Document,
    Frame,
    Header,
    Layer,
    LinkedCel,
    Palette,
    PaletteEntry,
    Slice,
    Tag,
    UserData,
)

from .chunks import (
    CelChunk,
    CelExtraChunk,
    ChunkRecord,
    IgnoredChunk,
    LayerChunk,
    OldPaletteChunk,
    PaletteChunk,
    SliceChunk,
    TagsChunk,
    UserDataChunk,
)

logger = logging.getLogger(__name__)

_DEFAULT_PALETTE_ENTRY = PaletteEntry(color=Color(0, 0, 0, 255))


class DocumentBuilder:
    """Accumulates chunk records of one file into a Document."""

    def __init__(self, header: Header):
        self.header = header
        self.layers: list[Layer] = []
        self.frames: list[Frame] = []
        self.tags: dict[str, Tag] = {}
        self.slices: list[Slice] = []
        self.palette: list[PaletteEntry] = [_DEFAULT_PALETTE_ENTRY] * header.initial_palette_size
        self.unattached_user_data: list[UserData] = []

        self._level_stack: list[int] = []
        self._has_new_palette = False

        # Current frame
        self._frame_index: Optional[int] = None
        self._duration_ms = 0
        self._cels: dict[int, Cel] = {}
        self._last_cel_layer: Optional[int] = None

        # User data target: ('layer', index), ('cel', layer_index),
        # ('slice', index) or ('tags', [names]) for pending tags
        self._attach_target: Optional[tuple] = None

    # -------------------------------------------------------------------------
    # Frames
    # -------------------------------------------------------------------------

    def begin_frame(self, index: int, duration_ms: int) -> None:
        """Start collecting cels for a frame."""
        self._frame_index = index
        self._duration_ms = duration_ms
        self._cels = {}
        self._last_cel_layer = None
        self._attach_target = None

    def end_frame(self) -> Frame:
        """Close the current frame and store it."""
        frame = Frame(
            index=self._frame_index,
            duration_ms=self._duration_ms,
            cels=tuple(self._cels[layer] for layer in sorted(self._cels)),
        )
        self.frames.append(frame)
        self._frame_index = None
        self._attach_target = None
        return frame

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def apply(self, record: ChunkRecord, offset: Optional[int] = None) -> None:
        """
        Apply one decoded chunk.

        Args:
            record: Record from asestag.formats.chunks.parse_chunk
            offset: File offset of the chunk, for error reports
        """
        if isinstance(record, UserDataChunk):
            self._add_user_data(record.user_data)
            return

        if isinstance(record, CelExtraChunk):
            # Sits between a cel and its user data
            self._add_cel_extra(record, offset)
            return

        self._attach_target = None

        if isinstance(record, LayerChunk):
            self._add_layer(record, offset)
        elif isinstance(record, CelChunk):
            self._add_cel(record, offset)
        elif isinstance(record, TagsChunk):
            self._add_tags(record)
        elif isinstance(record, SliceChunk):
            self._add_slice(record)
        elif isinstance(record, PaletteChunk):
            self._apply_palette(record)
        elif isinstance(record, OldPaletteChunk):
            self._apply_old_palette(record)
        elif isinstance(record, IgnoredChunk):
            pass
        else:
            raise TypeError(f"Unsupported chunk record: {type(record).__name__}")

    def _add_layer(self, record: LayerChunk, offset: Optional[int]) -> None:
        index = len(self.layers)
        level = record.child_level

        if level > len(self._level_stack):
            raise MalformedChunk(
                ChunkKind.LAYER,
                f"Layer '{record.name}' at child level {level} has no parent group",
                offset=offset,
            )
        parent_index = self._level_stack[level - 1] if level > 0 else None
        if parent_index is not None and not self.layers[parent_index].is_group:
            raise MalformedChunk(
                ChunkKind.LAYER,
                f"Layer '{record.name}' is nested under non-group layer "
                f"'{self.layers[parent_index].name}'",
                offset=offset,
            )

        del self._level_stack[level:]
        self._level_stack.append(index)

        self.layers.append(Layer(
            index=index,
            name=record.name,
            flags=record.flags,
            kind=record.kind,
            blend_mode=record.blend_mode,
            opacity=record.opacity,
            child_level=level,
            parent_index=parent_index,
        ))
        self._attach_target = ('layer', index)

    def _add_cel(self, record: CelChunk, offset: Optional[int]) -> None:
        frame_index = self._frame_index
        layer_index = record.layer_index

        if layer_index >= len(self.layers):
            raise MalformedChunk(
                ChunkKind.CEL,
                f"Cel in frame {frame_index} refers to missing layer {layer_index}",
                offset=offset,
            )
        if self.layers[layer_index].is_group:
            raise MalformedChunk(
                ChunkKind.CEL,
                f"Cel in frame {frame_index} is placed on group layer {layer_index}",
                offset=offset,
            )
        if layer_index in self._cels:
            raise MalformedChunk(
                ChunkKind.CEL,
                f"Frame {frame_index} has two cels on layer {layer_index}",
                offset=offset,
            )

        if isinstance(record.payload, LinkedCel):
            target = record.payload.frame_index
            if target >= frame_index:
                raise InvalidCelReference(
                    f"Cel on layer {layer_index} in frame {frame_index} links to frame {target}",
                    offset=offset,
                )
            if self.frames[target].get_cel(layer_index) is None:
                raise InvalidCelReference(
                    f"Cel on layer {layer_index} in frame {frame_index} links to frame "
                    f"{target}, which has no cel on that layer",
                    offset=offset,
                )

        self._cels[layer_index] = Cel(
            frame_index=frame_index,
            layer_index=layer_index,
            x=record.x,
            y=record.y,
            opacity=record.opacity,
            payload=record.payload,
        )
        self._last_cel_layer = layer_index
        self._attach_target = ('cel', layer_index)

    def _add_cel_extra(self, record: CelExtraChunk, offset: Optional[int]) -> None:
        if self._last_cel_layer is None:
            raise MalformedChunk(ChunkKind.CEL_EXTRA, "Cel extra chunk without a cel", offset=offset)
        cel = self._cels[self._last_cel_layer]
        self._cels[self._last_cel_layer] = cel.model_copy(update={'extra': record.extra})

    def _add_tags(self, record: TagsChunk) -> None:
        names = []
        for tag in record.tags:
            if tag.name in self.tags:
                logger.warning(f"Duplicate tag name '{tag.name}', keeping the later one")
                del self.tags[tag.name]
            self.tags[tag.name] = Tag(
                name=tag.name,
                from_frame=tag.from_frame,
                to_frame=tag.to_frame,
                direction=tag.direction,
                repeat=tag.repeat,
                color=tag.color,
            )
            names.append(tag.name)
        if names:
            self._attach_target = ('tags', names)

    def _add_slice(self, record: SliceChunk) -> None:
        self.slices.append(Slice(name=record.name, flags=record.flags, keys=tuple(record.keys)))
        self._attach_target = ('slice', len(self.slices) - 1)

    def _add_user_data(self, user_data: UserData) -> None:
        target = self._attach_target
        self._attach_target = None

        if target is None:
            logger.warning(f"User data in frame {self._frame_index} has no chunk to attach to")
            self.unattached_user_data.append(user_data)
            return

        kind, key = target
        if kind == 'layer':
            self.layers[key] = self.layers[key].model_copy(update={'user_data': user_data})
        elif kind == 'cel':
            self._cels[key] = self._cels[key].model_copy(update={'user_data': user_data})
        elif kind == 'slice':
            self.slices[key] = self.slices[key].model_copy(update={'user_data': user_data})
        elif kind == 'tags':
            # One user data chunk per tag, in declaration order
            name, pending = key[0], key[1:]
            self.tags[name] = self.tags[name].model_copy(update={'user_data': user_data})
            if pending:
                self._attach_target = ('tags', pending)

    # -------------------------------------------------------------------------
    # Palette
    # -------------------------------------------------------------------------

    def _apply_palette(self, record: PaletteChunk) -> None:
        if record.size < len(self.palette):
            del self.palette[record.size:]
        else:
            self.palette.extend([_DEFAULT_PALETTE_ENTRY] * (record.size - len(self.palette)))
        self.palette[record.first:record.first + len(record.entries)] = record.entries
        self._has_new_palette = True

    def _apply_old_palette(self, record: OldPaletteChunk) -> None:
        if self._has_new_palette:
            logger.debug("Ignoring old palette chunk after a palette chunk")
            return
        index = 0
        for skip, colors in record.packets:
            index += skip
            for color in colors:
                entry = PaletteEntry(color=color)
                if index < len(self.palette):
                    self.palette[index] = entry
                else:
                    self.palette.extend([_DEFAULT_PALETTE_ENTRY] * (index - len(self.palette)))
                    self.palette.append(entry)
                index += 1

    # -------------------------------------------------------------------------
    # Result
    # -------------------------------------------------------------------------

    def seal(self) -> Document:
        """Freeze everything collected so far into a Document."""
        return Document(
            header=self.header,
            frames=tuple(self.frames),
            layers=tuple(self.layers),
            palette=Palette(entries=tuple(self.palette)),
            tags=tuple(self.tags.values()),
            slices=tuple(self.slices),
            unattached_user_data=tuple(self.unattached_user_data),
        )
