"""
Pytest fixtures for asestag tests
"""

import pytest

from asestag import parse_document
from asestag.config import DecoderSettings
from helpers import aseprite_writer as ase

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)


@pytest.fixture
def settings() -> DecoderSettings:
    """Settings isolated from the environment."""
    return DecoderSettings(MAX_CEL_BYTES=1024 * 1024, DEFAULT_FRAME_DURATION_MS=100, STRICT_FILE_SIZE=False)


@pytest.fixture
def sprite_bytes() -> bytes:
    """
    A 4x4 RGBA sprite with three frames.

    Layers: Background (red, full canvas), Top (blue 2x2 at 1,1).
    Frame 1 links the Top cel of frame 0, frame 2 moves it to (2,2).
    Tags: 'idle' [0, 0] forward, 'walk' [0, 2] ping-pong.
    """
    frames = [
        ase.frame([
            ase.palette_chunk([RED, GREEN, BLUE]),
            ase.layer_chunk('Background', flags=1 | 2 | 8),
            ase.layer_chunk('Top'),
            ase.tags_chunk([('idle', 0, 0, 0, 0), ('walk', 0, 2, 2, 0)]),
            ase.cel_chunk(0, ase.solid_rgba(4, 4, RED), 4, 4, compressed=True),
            ase.cel_chunk(1, ase.solid_rgba(2, 2, BLUE), 2, 2, x=1, y=1),
        ], duration=100),
        ase.frame([
            ase.linked_cel_chunk(0, 0),
            ase.linked_cel_chunk(1, 0, x=1, y=1),
        ], duration=150),
        ase.frame([
            ase.linked_cel_chunk(0, 0),
            ase.cel_chunk(1, ase.solid_rgba(2, 2, BLUE), 2, 2, x=2, y=2, compressed=True),
        ], duration=200),
    ]
    return ase.aseprite_file(4, 4, frames)


@pytest.fixture
def sprite(sprite_bytes, settings):
    """The parsed sprite_bytes document."""
    return parse_document(sprite_bytes, settings)
