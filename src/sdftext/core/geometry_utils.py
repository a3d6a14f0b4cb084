"""
Quad Geometry Utilities

Rectangle primitives shared by the text mesh generator.
Corner order everywhere is lower-left, lower-right, upper-right, upper-left.
"""

from typing import List, Tuple

# Two triangles covering a quad, relative to its first vertex
RECTANGLE_INDICES: Tuple[int, ...] = (0, 1, 2, 2, 3, 0)

VERTICES_PER_QUAD = 4
INDICES_PER_QUAD = len(RECTANGLE_INDICES)


def generate_rectangle_vertices(center_x: float, center_y: float,
                                width: float, height: float) -> List[Tuple[float, float, float]]:
    """
    Create the four corners of an axis-aligned rectangle at z = 0.

    Args:
        center_x: Rectangle center X
        center_y: Rectangle center Y
        width: Full width
        height: Full height

    Returns:
        Corners as (x, y, z) in lower-left, lower-right, upper-right, upper-left order
    """
    half_w = width / 2.0
    half_h = height / 2.0

    return [
        (center_x - half_w, center_y - half_h, 0.0),  # lower-left
        (center_x + half_w, center_y - half_h, 0.0),  # lower-right
        (center_x + half_w, center_y + half_h, 0.0),  # upper-right
        (center_x - half_w, center_y + half_h, 0.0),  # upper-left
    ]


def generate_rectangle_indices(vertex_offset: int = 0) -> List[int]:
    """Indices for two triangles covering the quad whose first vertex is ``vertex_offset``."""
    return [vertex_offset + i for i in RECTANGLE_INDICES]

