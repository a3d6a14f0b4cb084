"""
Font Atlas

Turns pre-baked SDF font metrics plus a texture atlas into text meshes.

Glyph metrics are in source pixels; layout happens in normalized device
coordinates, where the visible width spans ``NDC_SCREEN_WIDTH`` units. A single
``default_scale`` converts between the two so that
``NUM_CHARS_PER_SCREEN_WIDTH`` average-width glyphs fill the screen.

Glyphs are keyed by code point and cover only the alphabet the font
description defines (typically printable ASCII).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np

from ..config.settings import NDC_SCREEN_WIDTH, NUM_CHARS_PER_SCREEN_WIDTH
from ..core.geometry_utils import (
    VERTICES_PER_QUAD,
    generate_rectangle_indices,
    generate_rectangle_vertices,
)
from ..loaders.font_metrics import (
    FontInfo,
    FontMetrics,
    FontMetricsError,
    load_font_metrics,
    parse_font_metrics,
)

logger = logging.getLogger(__name__)

UV = Tuple[float, float]


@dataclass(frozen=True)
class GlyphRecord:
    """Pixel metrics and atlas UV region of a single glyph."""

    width_px: float
    height_px: float
    origin_x: float      # Bitmap top-left -> pen anchor, horizontal
    origin_y: float      # Bitmap top-left -> pen anchor, vertical (down)
    advance_px: float    # Pen movement after drawing this glyph
    uv_region: Tuple[UV, UV, UV, UV]  # lower-left, lower-right, upper-right, upper-left


@dataclass
class TextMesh:
    """Vertex, UV and index buffers for one laid-out string."""

    vertex_positions: np.ndarray     # shape (4N, 3), float32
    texture_coordinates: np.ndarray  # shape (4N, 2), float32
    indices: np.ndarray              # shape (6N,), uint32
    missing_characters: Tuple[str, ...] = ()

    @property
    def glyph_count(self) -> int:
        return len(self.vertex_positions) // VERTICES_PER_QUAD

    @property
    def vertex_count(self) -> int:
        return len(self.vertex_positions)

    @property
    def index_count(self) -> int:
        return len(self.indices)

    @property
    def triangle_count(self) -> int:
        return 2 * self.glyph_count

    @property
    def is_empty(self) -> bool:
        return self.glyph_count == 0


def compute_default_scale(widths: Iterable[float],
                          num_chars_per_screen_width: float = NUM_CHARS_PER_SCREEN_WIDTH) -> float:
    """
    Compute the pixel -> NDC scale for a set of glyph widths.

    Dividing by the average glyph width brings glyphs to roughly unit size;
    multiplying by the NDC width makes one average glyph span the screen, and
    dividing by ``num_chars_per_screen_width`` fits that many across instead.

    Raises:
        FontMetricsError: If there are no widths or the result would not be a positive finite number
    """
    widths = list(widths)
    if not widths:
        raise FontMetricsError("Cannot compute a text scale without any glyphs")
    if num_chars_per_screen_width <= 0:
        raise FontMetricsError(
            f"num_chars_per_screen_width must be positive, got {num_chars_per_screen_width}"
        )

    average_char_width_px = sum(widths) / len(widths)
    if average_char_width_px <= 0:
        raise FontMetricsError("Average glyph width must be positive to compute a text scale")

    return (NDC_SCREEN_WIDTH / average_char_width_px) / num_chars_per_screen_width


class FontAtlas:
    """
    Immutable glyph table plus the text mesh generator.

    Build instances with :meth:`load` or :meth:`from_metrics`; both either
    return a fully populated atlas or raise :class:`FontMetricsError`.
    """

    def __init__(self, glyphs: Mapping[int, GlyphRecord], default_scale: float,
                 font_info: Optional[FontInfo] = None):
        """
        Initialize font atlas from an already-built glyph table.

        Args:
            glyphs: Code point -> glyph record
            default_scale: Pixel -> NDC scale (see :func:`compute_default_scale`)
            font_info: Optional font header

        Raises:
            FontMetricsError: If the table is empty or the scale is not positive and finite
        """
        if not glyphs:
            raise FontMetricsError("Font atlas has no glyphs")
        if not math.isfinite(default_scale) or default_scale <= 0:
            raise FontMetricsError(f"Invalid default scale: {default_scale}")

        self._glyphs: Mapping[int, GlyphRecord] = MappingProxyType(dict(glyphs))
        self._default_scale = float(default_scale)
        self._font_info = font_info if font_info is not None else FontInfo()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def load(cls, font_info_path: Path | str, texture_atlas: Any,
             num_chars_per_screen_width: float = NUM_CHARS_PER_SCREEN_WIDTH) -> "FontAtlas":
        """
        Load a font atlas from a font description JSON file.

        Args:
            font_info_path: Path to the font description (``characters`` metrics)
            texture_atlas: Object providing ``get_texture_coordinates_of_sub_texture(name)``
            num_chars_per_screen_width: Average-width glyphs that fit across the screen at scale 1

        Raises:
            FontMetricsError: If the description cannot be read or yields no usable glyphs
        """
        try:
            metrics = load_font_metrics(font_info_path)
        except FontMetricsError as exc:
            logger.error("Failed to load font atlas: %s", exc)
            raise

        return cls.from_metrics(metrics, texture_atlas, num_chars_per_screen_width)

    @classmethod
    def from_metrics(cls, metrics: Union[FontMetrics, Mapping[str, Any]], texture_atlas: Any,
                     num_chars_per_screen_width: float = NUM_CHARS_PER_SCREEN_WIDTH) -> "FontAtlas":
        """
        Build a font atlas from parsed metrics or a decoded font description.

        Characters whose sprite is missing from ``texture_atlas`` are logged
        and left out of the glyph table.
        """
        if not isinstance(metrics, FontMetrics):
            metrics = parse_font_metrics(metrics)

        glyphs: Dict[int, GlyphRecord] = {}
        for char, raw in metrics.characters.items():
            uv_region = _lookup_uv_region(texture_atlas, char)
            if uv_region is None:
                continue

            glyphs[ord(char)] = GlyphRecord(
                width_px=raw.width,
                height_px=raw.height,
                origin_x=raw.origin_x,
                origin_y=raw.origin_y,
                advance_px=raw.advance,
                uv_region=uv_region,
            )

        if not glyphs:
            logger.error("Font atlas has no glyphs with a matching sprite")
            raise FontMetricsError("Font atlas has no glyphs with a matching sprite")

        default_scale = compute_default_scale(
            (glyph.width_px for glyph in glyphs.values()),
            num_chars_per_screen_width,
        )
        logger.debug("Loaded %d glyphs, default scale %.6f", len(glyphs), default_scale)
        return cls(glyphs, default_scale, metrics.info)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def default_scale(self) -> float:
        return self._default_scale

    @property
    def glyphs(self) -> Mapping[int, GlyphRecord]:
        """Read-only code point -> glyph table."""
        return self._glyphs

    @property
    def font_info(self) -> FontInfo:
        return self._font_info

    def __len__(self) -> int:
        return len(self._glyphs)

    def get_glyph(self, char: str) -> Optional[GlyphRecord]:
        """
        Get the glyph for a character.

        Returns:
            Glyph record, or None if the character is not in the atlas
            (including anything that is not exactly one character)
        """
        if len(char) != 1:
            return None
        return self._glyphs.get(ord(char))

    def has_glyph(self, char: str) -> bool:
        return self.get_glyph(char) is not None

    def measure_text(self, text: str, scale_multiplier: float = 1.0) -> float:
        """Horizontal pen travel of ``text`` in NDC units; unknown characters add nothing."""
        scale = self._default_scale * scale_multiplier
        return sum(
            glyph.advance_px * scale
            for glyph in (self._glyphs.get(ord(char)) for char in text)
            if glyph is not None
        )

    # ------------------------------------------------------------------
    # Mesh generation
    # ------------------------------------------------------------------
    def generate_text_mesh(self, text: str, origin_x: float, origin_y: float,
                           scale_multiplier: float = 1.0) -> TextMesh:
        """
        Lay out ``text`` on a single line starting at the pen position (origin_x, origin_y).

        Each resolved character becomes one quad: 4 vertices, 4 UVs and
        6 indices. Characters without a glyph are skipped and reported on
        ``TextMesh.missing_characters``; the pen does not move for them.

        Args:
            text: Characters to lay out
            origin_x: Pen start X in NDC
            origin_y: Pen start Y (baseline) in NDC
            scale_multiplier: Multiplier on ``default_scale``

        Returns:
            Freshly allocated text mesh
        """
        scale = self._default_scale * scale_multiplier
        pen_x = origin_x
        pen_y = origin_y

        vertices: List[Tuple[float, float, float]] = []
        uvs: List[UV] = []
        indices: List[int] = []
        missing: List[str] = []
        vertex_offset = 0

        for char in text:
            glyph = self._glyphs.get(ord(char))
            if glyph is None:
                logger.warning("Character %r not found in the font atlas", char)
                missing.append(char)
                continue

            # Put the glyph's anchor on the pen; y measured from the bitmap bottom
            x = pen_x - glyph.origin_x * scale
            y = pen_y - (glyph.height_px - glyph.origin_y) * scale
            w = glyph.width_px * scale
            h = glyph.height_px * scale

            vertices.extend(generate_rectangle_vertices(x + w / 2, y + h / 2, w, h))
            uvs.extend(glyph.uv_region)
            indices.extend(generate_rectangle_indices(vertex_offset))
            vertex_offset += VERTICES_PER_QUAD

            pen_x += glyph.advance_px * scale

        return TextMesh(
            vertex_positions=np.array(vertices, dtype='f4').reshape(-1, 3),
            texture_coordinates=np.array(uvs, dtype='f4').reshape(-1, 2),
            indices=np.array(indices, dtype='u4').reshape(-1),
            missing_characters=tuple(missing),
        )


def _lookup_uv_region(texture_atlas: Any, char: str) -> Optional[Tuple[UV, UV, UV, UV]]:
    try:
        coordinates = texture_atlas.get_texture_coordinates_of_sub_texture(char)
    except KeyError:
        coordinates = None

    if coordinates is None or len(coordinates) == 0:
        logger.warning("No sprite for character %r in the texture atlas; glyph skipped", char)
        return None

    if len(coordinates) != VERTICES_PER_QUAD:
        raise FontMetricsError(
            f"Sprite for character {char!r} has {len(coordinates)} UV coordinates, expected {VERTICES_PER_QUAD}"
        )

    # Copy so later atlas changes do not leak into the glyph table
    uv_a, uv_b, uv_c, uv_d = (
        (float(u), float(v)) for u, v in coordinates
    )
    return uv_a, uv_b, uv_c, uv_d
