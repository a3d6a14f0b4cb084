"""Shared fixtures for font atlas tests"""

import json

import pytest

from sdftext.loaders.texture_atlas import SpriteFrame, TextureAtlas


class FakeTextureAtlas:
    """In-memory sprite lookup returning fixed UV quads."""

    def __init__(self, uv_regions):
        self.uv_regions = uv_regions
        self.queries = []

    def get_texture_coordinates_of_sub_texture(self, sprite_name):
        self.queries.append(sprite_name)
        return self.uv_regions[sprite_name]


def glyph(width, height, origin_x=0, origin_y=0, advance=None):
    return {
        "width": width,
        "height": height,
        "originX": origin_x,
        "originY": origin_y,
        "advance": width if advance is None else advance,
    }


def unit_quad(offset=0.0):
    return [(offset, 0.0), (offset + 0.1, 0.0), (offset + 0.1, 0.1), (offset, 0.1)]


@pytest.fixture
def font_description():
    return {
        "name": "Test Serif",
        "size": 64,
        "bold": False,
        "italic": False,
        "width": 256,
        "height": 128,
        "characters": {
            "A": glyph(10, 20, 0, 0, 12),
            "B": glyph(14, 20, 1, 18, 15),
            "g": glyph(12, 24, 0, 16, 13),
            " ": glyph(0, 0, 0, 0, 8),
        },
    }


@pytest.fixture
def fake_atlas():
    return FakeTextureAtlas({
        "A": unit_quad(0.0),
        "B": unit_quad(0.2),
        "g": unit_quad(0.4),
        " ": unit_quad(0.6),
    })


@pytest.fixture
def font_info_file(tmp_path, font_description):
    path = tmp_path / "font_info.json"
    path.write_text(json.dumps(font_description), encoding="utf-8")
    return path


@pytest.fixture
def sprite_atlas():
    return TextureAtlas(
        {
            "A": SpriteFrame(0, 0, 10, 20),
            "B": SpriteFrame(10, 0, 14, 20),
        },
        size=(100, 50),
    )
