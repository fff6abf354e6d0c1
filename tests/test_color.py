"""
Tests for resolving depth-native pixels to RGBA8.
"""

import numpy as np
import pytest

from asestag.color import bytes_per_pixel, resolve_pixels
from asestag.errors import CorruptCelData, PaletteIndexOutOfRange
from asestag.models import Color, ColorDepth, Palette, PaletteEntry


@pytest.fixture
def palette():
    """Four opaque colors."""
    colors = [Color(0, 0, 0), Color(255, 0, 0), Color(0, 255, 0), Color(0, 0, 255)]
    return Palette(entries=tuple(PaletteEntry(color=c) for c in colors))


class TestRgba:

    def test_copy(self):
        """RGBA pixels pass through unchanged."""
        data = bytes([10, 20, 30, 40, 50, 60, 70, 80])
        result = resolve_pixels(data, 2, 1, ColorDepth.RGBA)
        assert result.shape == (1, 2, 4)
        assert result.dtype == np.uint8
        assert result[0, 1].tolist() == [50, 60, 70, 80]

    def test_result_is_writable(self):
        """The result does not alias the input buffer."""
        result = resolve_pixels(bytes(4), 1, 1, ColorDepth.RGBA)
        result[0, 0, 0] = 1
        assert result[0, 0, 0] == 1

    def test_wrong_size(self):
        with pytest.raises(CorruptCelData):
            resolve_pixels(bytes(7), 2, 1, ColorDepth.RGBA)


class TestGrayscale:

    def test_value_and_alpha(self):
        """(value, alpha) expands to (v, v, v, alpha)."""
        result = resolve_pixels(bytes([100, 200, 7, 0]), 2, 1, ColorDepth.GRAYSCALE)
        assert result[0, 0].tolist() == [100, 100, 100, 200]
        assert result[0, 1].tolist() == [7, 7, 7, 0]


class TestIndexed:

    def test_lookup(self, palette):
        result = resolve_pixels(bytes([1, 2, 3]), 3, 1, ColorDepth.INDEXED, palette=palette)
        assert result[0, 0].tolist() == [255, 0, 0, 255]
        assert result[0, 1].tolist() == [0, 255, 0, 255]
        assert result[0, 2].tolist() == [0, 0, 255, 255]

    def test_transparent_index(self, palette):
        """The transparent index resolves to alpha 0 even though its palette color is opaque."""
        result = resolve_pixels(
            bytes([1, 3, 1]), 3, 1, ColorDepth.INDEXED, palette=palette, transparent_index=1
        )
        assert result[0, 0].tolist() == [0, 0, 0, 0]
        assert result[0, 1].tolist() == [0, 0, 255, 255]
        assert result[0, 2, 3] == 0

    def test_transparent_index_outside_palette(self, palette):
        """A transparent index past the palette end is not an error."""
        result = resolve_pixels(
            bytes([200, 2]), 2, 1, ColorDepth.INDEXED, palette=palette, transparent_index=200
        )
        assert result[0, 0].tolist() == [0, 0, 0, 0]

    def test_out_of_range(self, palette):
        """Other indices past the palette end raise."""
        with pytest.raises(PaletteIndexOutOfRange) as exc_info:
            resolve_pixels(bytes([0, 9]), 2, 1, ColorDepth.INDEXED, palette=palette)
        assert exc_info.value.index == 9
        assert exc_info.value.palette_size == 4

    def test_no_palette(self):
        """Without a palette every non-transparent index is out of range."""
        with pytest.raises(PaletteIndexOutOfRange):
            resolve_pixels(bytes([0]), 1, 1, ColorDepth.INDEXED)


class TestBytesPerPixel:

    @pytest.mark.parametrize("depth,expected", [
        (ColorDepth.RGBA, 4),
        (ColorDepth.GRAYSCALE, 2),
        (ColorDepth.INDEXED, 1),
    ])
    def test_bytes_per_pixel(self, depth, expected):
        assert bytes_per_pixel(depth) == expected
