"""
Tests for Document queries and settings.
"""

import json

import pytest
from pydantic import ValidationError

from asestag import DecoderSettings
from asestag.models import AnimationDirection, BlendMode, Color, LayerKind


class TestQueries:
    """Lookups that never composite."""

    def test_dimensions(self, sprite):
        assert (sprite.width, sprite.height, sprite.frame_count) == (4, 4, 3)

    def test_tag_names(self, sprite):
        assert sprite.tag_names() == ['idle', 'walk']

    def test_get_tag(self, sprite):
        walk = sprite.get_tag('walk')
        assert walk.direction == AnimationDirection.PING_PONG
        assert walk.frame_count == 3
        assert sprite.get_tag('run') is None

    def test_tags_are_read_only(self, sprite):
        with pytest.raises(TypeError):
            sprite.tags[0] = sprite.get_tag('walk')
        with pytest.raises(ValidationError):
            sprite.tags = ()
        assert sprite.tag_names() == ['idle', 'walk']

    def test_layers(self, sprite):
        background = sprite.get_layer('Background')
        assert background.is_background
        assert background.kind == LayerKind.NORMAL
        assert background.blend_mode == BlendMode.NORMAL
        assert sprite.get_layer('Nope') is None

    def test_cel_at(self, sprite):
        assert sprite.cel_at(2, 1).x == 2
        assert sprite.cel_at(1, 1).is_linked

    def test_frame_durations_for_tag(self, sprite):
        assert sprite.frame_durations('idle') == [100]
        assert sprite.frame_durations('walk') == [100, 150, 200]
        assert sprite.frame_durations('missing') == []

    def test_palette(self, sprite):
        assert len(sprite.palette) == 3
        assert sprite.palette[2] == Color(0, 0, 255, 255)
        assert sprite.palette.to_array().shape == (3, 4)


class TestInfoDict:

    def test_contents(self, sprite):
        info = sprite.to_info_dict()
        assert info['width'] == 4
        assert info['colorDepth'] == 32
        assert info['frameCount'] == 3
        assert info['frameDurations'] == [100, 150, 200]
        assert [layer['name'] for layer in info['layers']] == ['Background', 'Top']
        assert [tag['name'] for tag in info['tags']] == ['idle', 'walk']
        assert info['palette'][0] == [255, 0, 0, 255]

    def test_is_json_serializable(self, sprite):
        json.dumps(sprite.to_info_dict())


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv('ASESTAG_MAX_CEL_BYTES', raising=False)
        settings = DecoderSettings()
        assert settings.MAX_CEL_BYTES == 256 * 1024 * 1024
        assert settings.DEFAULT_FRAME_DURATION_MS == 100
        assert settings.STRICT_FILE_SIZE is False

    def test_environment(self, monkeypatch):
        monkeypatch.setenv('ASESTAG_STRICT_FILE_SIZE', 'true')
        monkeypatch.setenv('ASESTAG_DEFAULT_FRAME_DURATION_MS', '40')
        settings = DecoderSettings()
        assert settings.STRICT_FILE_SIZE is True
        assert settings.DEFAULT_FRAME_DURATION_MS == 40
