"""
Text Rendering Configuration Settings

All configuration constants for the SDF text library.
Modify these values to change layout and rendering defaults.
"""

from pathlib import Path

# ============================================================================
# Project Paths
# ============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
ASSETS_DIR = PROJECT_ROOT / "assets"
SHADERS_DIR = ASSETS_DIR / "shaders"
FONTS_DIR = ASSETS_DIR / "fonts"

# Bundled sample font (5x7 pixel glyphs covering EXAMPLE_TEXT)
DEFAULT_FONT_INFO_PATH = FONTS_DIR / "sample_sdf_font_info.json"
DEFAULT_TEXTURE_ATLAS_PATH = FONTS_DIR / "sample_sdf_atlas.json"
DEFAULT_TEXTURE_PATH = FONTS_DIR / "sample_sdf_atlas.png"

# Shader files for the SDF text program
SDF_TEXT_VERTEX_SHADER = "sdf_text.vert"
SDF_TEXT_FRAGMENT_SHADER = "sdf_text.frag"

# ============================================================================
# Layout Settings
# ============================================================================

# Normalized device coordinates span [-1, 1] horizontally
NDC_SCREEN_WIDTH = 2.0

# How many average-width glyphs fit across the screen at scale 1.0
NUM_CHARS_PER_SCREEN_WIDTH = 50

# ============================================================================
# Texture Atlas Settings
# ============================================================================

ATLAS_FLIP_TEXTURE = False      # Flip atlas image vertically on load (bottom-up rows)
ATLAS_TOP_LEFT_COORDS = True    # Sprite frames measured from the image's top-left corner

# Image extensions stripped from sprite names ("A.png" -> "A")
ATLAS_SPRITE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".bmp", ".tga")

# ============================================================================
# SDF Text Rendering Settings
# ============================================================================

SDF_TEXT_COLOR = (0.5, 0.5, 1.0)     # RGB
SDF_CHARACTER_WIDTH = 0.5            # Distance value treated as the glyph edge
SDF_EDGE_TRANSITION = 0.1            # Smoothstep width around the edge (anti-aliasing)

# ============================================================================
# Example Window Configuration
# ============================================================================

WINDOW_SIZE = (800, 800)  # Width, Height
ASPECT_RATIO = 1.0
WINDOW_TITLE = "SDF Text Rendering"
RESIZABLE = True

# OpenGL version (4.1 is max for macOS)
GL_VERSION = (4, 1)

EXAMPLE_TEXT = "text rendering with SDFs!"
EXAMPLE_TEXT_ORIGIN = (-1.0, 0.0)
