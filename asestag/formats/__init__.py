"""
Aseprite binary format decoding.

Layers of the decoder, bottom up:

- cursor: bounds-checked little-endian reads
- chunks: one decoder per chunk type, unknown types skipped
- frames: frame headers and chunk streams
- builder: parse-local accumulation, sealed into a Document
- aseprite: file header and the parse_document entry point
"""

from .aseprite import FILE_MAGIC, parse_document, parse_header
from .builder import DocumentBuilder
from .chunks import ChunkContext, ChunkType, parse_chunk
from .cursor import ByteCursor
from .frames import FRAME_MAGIC, parse_frame

__all__ = [
    'ByteCursor',
    'ChunkContext',
    'ChunkType',
    'DocumentBuilder',
    'FILE_MAGIC',
    'FRAME_MAGIC',
    'parse_chunk',
    'parse_document',
    'parse_frame',
    'parse_header',
]
