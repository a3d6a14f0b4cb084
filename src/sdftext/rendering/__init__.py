"""Rendering subsystem"""
from .font_atlas import FontAtlas, GlyphRecord, TextMesh, compute_default_scale
from .text_mesh_renderer import TextMeshDrawData, TextMeshRenderer, load_sdf_text_program

__all__ = [
    "FontAtlas",
    "GlyphRecord",
    "TextMesh",
    "compute_default_scale",
    "TextMeshDrawData",
    "TextMeshRenderer",
    "load_sdf_text_program",
]
