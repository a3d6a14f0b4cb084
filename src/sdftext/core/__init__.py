"""Core geometry helpers"""
from .geometry_utils import (
    RECTANGLE_INDICES,
    generate_rectangle_indices,
    generate_rectangle_vertices,
)

__all__ = [
    "RECTANGLE_INDICES",
    "generate_rectangle_indices",
    "generate_rectangle_vertices",
]
