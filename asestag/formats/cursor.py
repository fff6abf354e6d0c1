"""
ByteCursor - Bounds-checked little-endian reader over an in-memory buffer.

A cursor never reads past its `end`, so handing a chunk parser a sub-cursor
bounded to the chunk's declared size keeps it from reading into the next
chunk. Offsets in errors are absolute positions in the input.
"""

import struct
from typing import Optional, Union

from asestag.errors import ChunkKind, MalformedChunk, TruncatedInput


BufferTypes = Union[bytes, bytearray, memoryview]

_U8 = struct.Struct('<B')
_U16 = struct.Struct('<H')
_U32 = struct.Struct('<I')
_I16 = struct.Struct('<h')
_I32 = struct.Struct('<i')


class ByteCursor:
    """Sequential reader over a read-only byte buffer."""

    def __init__(
        self,
        data: BufferTypes,
        offset: int = 0,
        end: Optional[int] = None,
        base_offset: int = 0,
    ):
        """
        Args:
            data: Buffer to read from (not copied)
            offset: Start position within `data`
            end: Exclusive end position within `data` (default: len(data))
            base_offset: Absolute file position of `data[0]`, for error reports
        """
        view = memoryview(data)
        self._data = view if view.format == 'B' else view.cast('B')
        self._start = offset
        self._offset = offset
        self._end = len(self._data) if end is None else end
        self._base_offset = base_offset
        if not 0 <= self._offset <= self._end <= len(self._data):
            raise ValueError(f"Invalid cursor bounds {offset}..{end} for {len(self._data)} bytes")

    # -------------------------------------------------------------------------
    # Position
    # -------------------------------------------------------------------------

    @property
    def offset(self) -> int:
        """Current position relative to the start of the buffer."""
        return self._offset

    @property
    def absolute_offset(self) -> int:
        """Current position in the input."""
        return self._base_offset + self._offset

    @property
    def end(self) -> int:
        return self._end

    @property
    def remaining(self) -> int:
        return self._end - self._offset

    @property
    def at_end(self) -> bool:
        return self._offset >= self._end

    def _require(self, size: int) -> int:
        if size < 0:
            raise ValueError(f"Negative read size {size}")
        if size > self.remaining:
            raise TruncatedInput(
                f"Needed {size} bytes, only {self.remaining} left",
                offset=self.absolute_offset,
            )
        start = self._offset
        self._offset += size
        return start

    def skip(self, size: int) -> None:
        """Advance past `size` reserved or uninteresting bytes."""
        self._require(size)

    # -------------------------------------------------------------------------
    # Primitives
    # -------------------------------------------------------------------------

    def read_bytes(self, size: int) -> bytes:
        start = self._require(size)
        return bytes(self._data[start:start + size])

    def read_u8(self) -> int:
        return _U8.unpack_from(self._data, self._require(1))[0]

    def read_u16(self) -> int:
        return _U16.unpack_from(self._data, self._require(2))[0]

    def read_u32(self) -> int:
        return _U32.unpack_from(self._data, self._require(4))[0]

    def read_i16(self) -> int:
        return _I16.unpack_from(self._data, self._require(2))[0]

    def read_i32(self) -> int:
        return _I32.unpack_from(self._data, self._require(4))[0]

    def read_fixed_point(self) -> float:
        """Read a 16.16 fixed point number."""
        return self.read_i32() / 0x10000

    def read_string(self, kind: ChunkKind = ChunkKind.CHUNK) -> str:
        """
        Read a length-prefixed UTF-8 string.

        Args:
            kind: Chunk kind reported if the bytes are not valid UTF-8
        """
        start = self.absolute_offset
        length = self.read_u16()
        raw = self.read_bytes(length)
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedChunk(kind, f"Invalid UTF-8 string: {e}", offset=start) from e

    # -------------------------------------------------------------------------
    # Spans
    # -------------------------------------------------------------------------

    def sub_cursor(self, size: int) -> 'ByteCursor':
        """
        Split off the next `size` bytes as a bounded cursor.

        This cursor advances past the span.
        """
        start = self._require(size)
        return ByteCursor(self._data, start, start + size, self._base_offset)

    def rest(self) -> bytes:
        """Read everything up to the end of the cursor."""
        return self.read_bytes(self.remaining)
