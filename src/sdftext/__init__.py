"""
SDFText - Signed distance field text meshes

Lays out strings as textured quads sampled from a pre-baked SDF glyph atlas,
ready for upload to a ModernGL pipeline.
"""

# Configuration
from .config.settings import *

# Loaders
from .loaders import (
    FontInfo,
    FontMetricsError,
    TextureAtlas,
    TextureAtlasError,
    load_font_metrics,
)

# Rendering
from .rendering import (
    FontAtlas,
    GlyphRecord,
    TextMesh,
    TextMeshRenderer,
    compute_default_scale,
    load_sdf_text_program,
)

__version__ = "0.1.0"
__all__ = [
    # Config (exported via *)
    # Loaders
    "FontInfo",
    "FontMetricsError",
    "TextureAtlas",
    "TextureAtlasError",
    "load_font_metrics",
    # Rendering
    "FontAtlas",
    "GlyphRecord",
    "TextMesh",
    "TextMeshRenderer",
    "compute_default_scale",
    "load_sdf_text_program",
]
