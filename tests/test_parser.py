"""
Tests for file header and frame decoding.
"""

import logging
import struct

import pytest
from pydantic import ValidationError

from asestag import parse_document
from asestag.config import DecoderSettings
from asestag.errors import (
    ChunkKind,
    InvalidMagicNumber,
    MalformedChunk,
    MalformedFrame,
    MalformedHeader,
    TruncatedInput,
)
from asestag.models import ColorDepth, LinkedCel
from helpers import aseprite_writer as ase

RED = (255, 0, 0, 255)


def single_layer_frame(duration: int = 100) -> bytes:
    return ase.frame([
        ase.layer_chunk('Layer'),
        ase.cel_chunk(0, ase.solid_rgba(2, 2, RED), 2, 2),
    ], duration=duration)


class TestHeader:
    """The 128-byte file header."""

    def test_fields(self, sprite):
        """Header fields are decoded."""
        header = sprite.header
        assert header.width == 4
        assert header.height == 4
        assert header.color_depth == ColorDepth.RGBA
        assert header.frame_count == 3
        assert header.speed_ms == 100
        assert header.grid_width == 16
        assert header.layer_opacity_valid

    @pytest.mark.parametrize("pixel_width,pixel_height,ratio", [
        (1, 1, 1.0),
        (2, 1, 2.0),
        (1, 2, 0.5),
        (0, 2, 1.0),
        (2, 0, 1.0),
    ])
    def test_pixel_aspect_ratio(self, pixel_width, pixel_height, ratio):
        """An unset pixel dimension means square pixels."""
        data = ase.aseprite_file(
            2, 2, [single_layer_frame()], pixel_width=pixel_width, pixel_height=pixel_height,
        )
        assert parse_document(data).header.pixel_aspect_ratio == ratio

    def test_too_short_for_magic(self):
        """Fewer than 6 bytes is truncated, not a magic number error."""
        with pytest.raises(TruncatedInput):
            parse_document(b'\x00\x01\x02')

    def test_bad_magic(self):
        data = ase.aseprite_file(2, 2, [single_layer_frame()], magic=0x1234)
        with pytest.raises(InvalidMagicNumber):
            parse_document(data)

    def test_png_is_not_aseprite(self):
        with pytest.raises(InvalidMagicNumber):
            parse_document(b'\x89PNG\r\n\x1a\n' + bytes(200))

    def test_truncated_header(self):
        """A valid magic number followed by a short header is truncated."""
        data = ase.aseprite_file(2, 2, [])[:64]
        with pytest.raises(TruncatedInput):
            parse_document(data)

    @pytest.mark.parametrize("width,height", [(0, 4), (4, 0)])
    def test_zero_size(self, width, height):
        with pytest.raises(MalformedHeader):
            parse_document(ase.aseprite_file(width, height, []))

    def test_unknown_depth(self):
        with pytest.raises(MalformedHeader):
            parse_document(ase.aseprite_file(2, 2, [], depth=24))

    def test_file_size_mismatch_logged(self, caplog):
        """A wrong file size is only a warning by default."""
        data = ase.aseprite_file(2, 2, [single_layer_frame()], file_size=9999)
        with caplog.at_level(logging.WARNING):
            doc = parse_document(data, DecoderSettings(STRICT_FILE_SIZE=False))
        assert doc.frame_count == 1
        assert "9999" in caplog.text

    def test_file_size_mismatch_strict(self):
        data = ase.aseprite_file(2, 2, [single_layer_frame()], file_size=9999)
        with pytest.raises(MalformedHeader):
            parse_document(data, DecoderSettings(STRICT_FILE_SIZE=True))


class TestFrames:
    """Frame headers and chunk streams."""

    def test_frame_count_matches_header(self, sprite):
        assert sprite.frame_count == sprite.header.frame_count == 3
        assert [frame.index for frame in sprite.frames] == [0, 1, 2]

    def test_durations(self, sprite):
        assert sprite.frame_durations() == [100, 150, 200]

    def test_zero_duration_uses_header_speed(self, settings):
        data = ase.aseprite_file(2, 2, [single_layer_frame(duration=0)], speed=75)
        assert parse_document(data, settings).frames[0].duration_ms == 75

    def test_zero_duration_and_speed_uses_default(self):
        data = ase.aseprite_file(2, 2, [single_layer_frame(duration=0)], speed=0)
        doc = parse_document(data, DecoderSettings(DEFAULT_FRAME_DURATION_MS=42))
        assert doc.frames[0].duration_ms == 42

    def test_extended_chunk_count(self, settings):
        """The new chunk count field is used when the old one is 0xFFFF."""
        frame = ase.frame([
            ase.layer_chunk('Layer'),
            ase.cel_chunk(0, ase.solid_rgba(2, 2, RED), 2, 2),
        ], extended_count=True)
        doc = parse_document(ase.aseprite_file(2, 2, [frame]), settings)
        assert len(doc.layers) == 1
        assert len(doc.frames[0].cels) == 1

    def test_truncated_last_frame(self, sprite_bytes, settings):
        """A buffer shorter than a frame's declared length is truncated."""
        with pytest.raises(TruncatedInput):
            parse_document(sprite_bytes[:-10], settings)

    def test_missing_frame(self, settings):
        """A header declaring more frames than the buffer holds is truncated."""
        data = ase.aseprite_file(2, 2, [single_layer_frame()], frame_count=2)
        with pytest.raises(TruncatedInput):
            parse_document(data, settings)

    def test_frame_length_too_small(self, settings):
        frame = ase.frame([], length=8)
        with pytest.raises(MalformedFrame):
            parse_document(ase.aseprite_file(2, 2, [frame]), settings)

    def test_bad_frame_magic(self, settings):
        frame = ase.frame([ase.layer_chunk('Layer')], magic=0xBEEF)
        with pytest.raises(MalformedFrame):
            parse_document(ase.aseprite_file(2, 2, [frame]), settings)

    def test_trailing_bytes_ignored(self, sprite_bytes, settings):
        """Bytes after the last frame do not change the document."""
        assert parse_document(sprite_bytes + b'\x00' * 32, settings) == parse_document(sprite_bytes, settings)

    def test_more_chunks_declared_than_present(self, settings):
        frame = bytearray(single_layer_frame())
        struct.pack_into('<H', frame, 6, 3)
        with pytest.raises(MalformedChunk) as exc_info:
            parse_document(ase.aseprite_file(2, 2, [bytes(frame)]), settings)
        assert exc_info.value.kind == ChunkKind.CHUNK


class TestChunkStream:
    """Chunk framing inside a frame."""

    def test_unknown_chunk_skipped(self, settings):
        """Unknown chunk types are skipped and later chunks still decode."""
        frame = ase.frame([
            ase.unknown_chunk(0x7777, b'\xff' * 13),
            ase.layer_chunk('Layer'),
            ase.unknown_chunk(0x2023),
            ase.cel_chunk(0, ase.solid_rgba(2, 2, RED), 2, 2),
        ])
        doc = parse_document(ase.aseprite_file(2, 2, [frame]), settings)
        assert [layer.name for layer in doc.layers] == ['Layer']
        assert doc.frames[0].get_cel(0) is not None

    def test_ignored_chunks(self, settings):
        """Color profile and mask chunks are recognized and ignored."""
        frame = ase.frame([
            ase.chunk(ase.COLOR_PROFILE, struct.pack('<HHi8x', 1, 0, 0)),
            ase.chunk(ase.MASK, b'\x00' * 16),
            ase.layer_chunk('Layer'),
        ])
        doc = parse_document(ase.aseprite_file(2, 2, [frame]), settings)
        assert len(doc.layers) == 1

    def test_chunk_size_smaller_than_header(self, settings):
        frame = ase.frame([ase.chunk(ase.LAYER, b'', size=4)])
        with pytest.raises(MalformedChunk) as exc_info:
            parse_document(ase.aseprite_file(2, 2, [frame]), settings)
        assert exc_info.value.kind == ChunkKind.CHUNK

    def test_chunk_overruns_frame(self, settings):
        frame = ase.frame([ase.chunk(ase.LAYER, b'\x00' * 4, size=500)])
        with pytest.raises(MalformedChunk):
            parse_document(ase.aseprite_file(2, 2, [frame]), settings)

    def test_truncated_chunk_body(self, settings):
        """Running out of bytes inside a chunk is a malformed chunk of that kind."""
        frame = ase.frame([ase.chunk(ase.LAYER, b'\x03\x00\x00\x00\x00')])
        with pytest.raises(MalformedChunk) as exc_info:
            parse_document(ase.aseprite_file(2, 2, [frame]), settings)
        assert exc_info.value.kind == ChunkKind.LAYER
        assert isinstance(exc_info.value.__cause__, TruncatedInput)

    def test_trailing_bytes_in_chunk(self, settings):
        """Extra bytes at the end of a known chunk are skipped."""
        layer = ase.layer_chunk('Layer')
        padded = ase.chunk(ase.LAYER, layer[6:] + b'\x00\x00\x00')
        frame = ase.frame([padded, ase.cel_chunk(0, ase.solid_rgba(2, 2, RED), 2, 2)])
        doc = parse_document(ase.aseprite_file(2, 2, [frame]), settings)
        assert doc.layers[0].name == 'Layer'


class TestDocumentProperties:
    """Properties that hold for every successfully parsed document."""

    def test_idempotent(self, sprite_bytes, settings):
        """Parsing the same bytes twice gives equal documents."""
        first = parse_document(sprite_bytes, settings)
        second = parse_document(sprite_bytes, settings)
        assert first == second
        assert first is not second

    def test_buffer_types(self, sprite_bytes, settings):
        """bytes, bytearray and memoryview decode the same."""
        expected = parse_document(sprite_bytes, settings)
        assert parse_document(bytearray(sprite_bytes), settings) == expected
        assert parse_document(memoryview(sprite_bytes), settings) == expected

    def test_links_point_backwards(self, sprite):
        """Every linked cel refers to an earlier frame."""
        links = [
            cel for frame in sprite.frames for cel in frame.cels
            if isinstance(cel.payload, LinkedCel)
        ]
        assert links
        for cel in links:
            assert cel.payload.frame_index < cel.frame_index

    def test_document_is_frozen(self, sprite):
        with pytest.raises(ValidationError):
            sprite.frames = ()
