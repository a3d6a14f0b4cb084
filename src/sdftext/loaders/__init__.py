"""Loader utilities for font descriptions and texture atlases."""

from .font_metrics import (
    FontInfo,
    FontMetrics,
    FontMetricsError,
    RawGlyphMetrics,
    load_font_metrics,
    parse_font_metrics,
)
from .texture_atlas import SpriteFrame, TextureAtlas, TextureAtlasError

__all__ = [
    'FontInfo',
    'FontMetrics',
    'FontMetricsError',
    'RawGlyphMetrics',
    'load_font_metrics',
    'parse_font_metrics',
    'SpriteFrame',
    'TextureAtlas',
    'TextureAtlasError',
]
