"""Exception classes for the Aseprite decoder.

Every parse error is terminal for the document being parsed. Errors carry the
absolute byte offset and the chunk kind where they are known so a broken file
can be inspected with a hex viewer.
"""

from enum import Enum
from typing import Optional


class ChunkKind(str, Enum):
    """Chunk kinds named in error reports."""
    CHUNK = "chunk"
    OLD_PALETTE = "old_palette"
    LAYER = "layer"
    CEL = "cel"
    CEL_EXTRA = "cel_extra"
    COLOR_PROFILE = "color_profile"
    MASK = "mask"
    TAGS = "tags"
    PALETTE = "palette"
    USER_DATA = "user_data"
    SLICE = "slice"


class AsepriteError(Exception):
    """Base exception for all decoder errors."""

    def __init__(
        self,
        message: str,
        *,
        offset: Optional[int] = None,
        chunk_kind: Optional[ChunkKind] = None,
    ):
        self.message = message
        self.offset = offset
        self.chunk_kind = chunk_kind
        super().__init__(self._format())

    def _format(self) -> str:
        details = []
        if self.chunk_kind is not None:
            details.append(f"chunk={ChunkKind(self.chunk_kind).value}")
        if self.offset is not None:
            details.append(f"offset=0x{self.offset:x}")
        if details:
            return f"{self.message} ({', '.join(details)})"
        return self.message


class TruncatedInput(AsepriteError):
    """Raised when the buffer is shorter than a field or frame declares."""

    pass


class InvalidMagicNumber(AsepriteError):
    """Raised when the file magic number is missing."""

    pass


class MalformedHeader(AsepriteError):
    """Raised for header fields outside their valid range."""

    pass


class MalformedFrame(AsepriteError):
    """Raised for a frame with a bad magic number or length."""

    pass


class MalformedChunk(AsepriteError):
    """Raised when a known chunk type fails to decode or validate."""

    def __init__(self, kind: ChunkKind, message: str, *, offset: Optional[int] = None):
        super().__init__(message, offset=offset, chunk_kind=kind)

    @property
    def kind(self) -> ChunkKind:
        return self.chunk_kind


class CorruptCelData(AsepriteError):
    """Raised when cel pixels fail to inflate or have the wrong size."""

    pass


class PaletteIndexOutOfRange(AsepriteError):
    """Raised when an indexed pixel points past the end of the palette."""

    def __init__(self, index: int, palette_size: int):
        self.index = index
        self.palette_size = palette_size
        super().__init__(
            f"Palette index {index} out of range for palette of {palette_size} colors"
        )


class InvalidCelReference(AsepriteError):
    """Raised when a linked cel points forward, at itself or at nothing."""

    pass
