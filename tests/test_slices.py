"""
Tests for cutting slices out of composited frames.
"""

import pytest

from asestag import parse_document
from asestag.slices import NineSlice, slice_image
from helpers import aseprite_writer as ase

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


@pytest.fixture
def panel(settings):
    """
    An 8x8 sprite, red with a blue 2x2 square at (3,3), and two frames.

    Slices:
        'panel' 6x6 at (1,1), 9-patch center (2,2,2,2), moves to (0,0) in frame 1
        'late'  keyed only from frame 1
        'edge'  partly outside the canvas
    """
    frames = [
        ase.frame([
            ase.layer_chunk('Background'),
            ase.layer_chunk('Square'),
            ase.cel_chunk(0, ase.solid_rgba(8, 8, RED), 8, 8),
            ase.cel_chunk(1, ase.solid_rgba(2, 2, BLUE), 2, 2, x=3, y=3),
            ase.slice_chunk('panel', [
                dict(frame=0, x=1, y=1, width=6, height=6, center=(2, 2, 2, 2)),
                dict(frame=1, x=0, y=0, width=6, height=6, center=(2, 2, 2, 2)),
            ], flags=1),
            ase.slice_chunk('late', [dict(frame=1, x=0, y=0, width=2, height=2)]),
            ase.slice_chunk('edge', [dict(frame=0, x=6, y=-1, width=4, height=4)]),
        ]),
        ase.frame([ase.linked_cel_chunk(0, 0), ase.linked_cel_chunk(1, 0, x=3, y=3)]),
    ]
    return parse_document(ase.aseprite_file(8, 8, frames), settings)


class TestSliceImage:

    def test_crop(self, panel):
        result = slice_image(panel, 'panel')
        assert result.name == 'panel'
        assert (result.image.width, result.image.height) == (6, 6)
        assert tuple(result.image.pixels[0, 0].tolist()) == RED
        assert tuple(result.image.pixels[2, 2].tolist()) == BLUE

    def test_key_for_later_frame(self, panel):
        result = slice_image(panel, 'panel', frame=1)
        assert result.key.x == 0
        assert tuple(result.image.pixels[3, 3].tolist()) == BLUE

    def test_nine_slices(self, panel):
        nine = slice_image(panel, 'panel').nine_slices
        assert set(nine) == set(NineSlice)
        center = nine[NineSlice.CENTER]
        assert (center.width, center.height) == (2, 2)
        assert {tuple(p) for p in center.pixels.reshape(-1, 4).tolist()} == {BLUE}
        corner = nine[NineSlice.BOTTOM_RIGHT]
        assert (corner.width, corner.height) == (2, 2)
        assert {tuple(p) for p in corner.pixels.reshape(-1, 4).tolist()} == {RED}

    def test_without_nine_patch(self, panel):
        assert slice_image(panel, 'edge').nine_slices is None

    def test_clipped_to_canvas(self, panel):
        result = slice_image(panel, 'edge')
        assert (result.image.width, result.image.height) == (2, 3)

    def test_unknown_slice(self, panel):
        assert slice_image(panel, 'nothing') is None

    def test_frame_before_first_key(self, panel):
        assert slice_image(panel, 'late', frame=0) is None
        assert slice_image(panel, 'late', frame=1) is not None

    def test_key_for_frame(self, panel):
        panel_slice = panel.get_slice('panel')
        assert panel_slice.key_for_frame(0).x == 1
        assert panel_slice.key_for_frame(1).x == 0
        assert panel_slice.key_for_frame(5).x == 0
