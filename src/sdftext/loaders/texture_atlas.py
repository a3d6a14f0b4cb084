"""
Texture Atlas

Loads sprite-sheet JSON descriptors and resolves sprite names to UV rectangles
inside the shared atlas texture. Optionally loads the atlas image with Pillow
and uploads it to the GPU.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import moderngl
import numpy as np
from PIL import Image

from ..config.settings import ATLAS_SPRITE_EXTENSIONS

logger = logging.getLogger(__name__)

UV = Tuple[float, float]


class TextureAtlasError(ValueError):
    """Raised when a sprite-sheet descriptor cannot be read or parsed."""


@dataclass(frozen=True)
class SpriteFrame:
    """Pixel rectangle of one sprite inside the atlas image."""

    x: int
    y: int
    width: int
    height: int


class TextureAtlas:
    """
    Sprite sheet with named sub-textures.

    Frames are stored in atlas pixel space with the origin at the image's
    top-left corner. UV rectangles are returned in the quad corner order
    lower-left, lower-right, upper-right, upper-left.
    """

    def __init__(self, frames: Dict[str, SpriteFrame], size: Tuple[int, int],
                 flip_texture: bool = False, image: Optional[Image.Image] = None):
        """
        Initialize texture atlas.

        Args:
            frames: Sprite name -> frame, measured from the top-left corner
            size: Atlas image size (width, height) in pixels
            flip_texture: True if the image rows are stored bottom-up (v grows upward)
            image: Loaded atlas image, if any
        """
        width, height = size
        if width <= 0 or height <= 0:
            raise TextureAtlasError(f"Texture atlas size must be positive, got {size}")

        self.frames: Dict[str, SpriteFrame] = dict(frames)
        self.size = (int(width), int(height))
        self.flip_texture = flip_texture
        self.image = image

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    @classmethod
    def load(cls, atlas_json_path: Path | str, texture_path: Path | str | None = None,
             flip_texture: bool = False, top_left_coords: bool = False) -> "TextureAtlas":
        """
        Load a sprite-sheet descriptor (and optionally its image) from disk.

        Args:
            atlas_json_path: Sprite sheet JSON (``frames`` + ``meta.size``)
            texture_path: Atlas image; also supplies the size when ``meta`` lacks one
            flip_texture: Flip the image vertically so rows run bottom-up
            top_left_coords: Frame ``y`` values are measured from the top edge

        Raises:
            TextureAtlasError: If the descriptor is missing, unreadable, or malformed
        """
        json_path = Path(atlas_json_path)
        try:
            with json_path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except OSError as exc:
            raise TextureAtlasError(f"Failed to open texture atlas file: {json_path}") from exc
        except json.JSONDecodeError as exc:
            raise TextureAtlasError(f"Invalid JSON in texture atlas file {json_path}: {exc}") from exc

        if not isinstance(payload, dict):
            raise TextureAtlasError(f"Texture atlas file {json_path} must contain a JSON object")

        image = None
        if texture_path is not None:
            image = _load_image(Path(texture_path), flip_texture)

        size = _parse_size(payload, image, json_path)
        frames = _parse_frames(payload, size, top_left_coords, json_path)

        logger.debug("Loaded texture atlas %s with %d sprites (%dx%d)",
                     json_path, len(frames), size[0], size[1])
        return cls(frames, size, flip_texture=flip_texture, image=image)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def has_sub_texture(self, sprite_name: str) -> bool:
        return sprite_name in self.frames

    def get_texture_coordinates_of_sub_texture(self, sprite_name: str) -> List[UV]:
        """
        Get the UV rectangle of a named sprite.

        Args:
            sprite_name: Sprite name (image extension already stripped)

        Returns:
            New list of four (u, v) pairs: lower-left, lower-right, upper-right, upper-left

        Raises:
            KeyError: If the atlas has no sprite with that name
        """
        frame = self.frames.get(sprite_name)
        if frame is None:
            raise KeyError(sprite_name)

        atlas_w, atlas_h = self.size
        u_left = frame.x / atlas_w
        u_right = (frame.x + frame.width) / atlas_w

        # Rows measured from the top of the image
        top_row = frame.y
        bottom_row = frame.y + frame.height
        if self.flip_texture:
            v_upper = 1.0 - top_row / atlas_h
            v_lower = 1.0 - bottom_row / atlas_h
        else:
            v_upper = top_row / atlas_h
            v_lower = bottom_row / atlas_h

        return [
            (u_left, v_lower),
            (u_right, v_lower),
            (u_right, v_upper),
            (u_left, v_upper),
        ]

    def create_texture(self, ctx: moderngl.Context) -> moderngl.Texture:
        """
        Upload the atlas image to the GPU.

        Raises:
            RuntimeError: If the atlas was loaded without an image
        """
        if self.image is None:
            raise RuntimeError("Texture atlas has no image to upload")

        rgba = self.image.convert("RGBA")
        data = np.array(rgba, dtype="uint8")
        texture = ctx.texture(rgba.size, components=4, data=data.tobytes(), dtype="u1")

        # SDF sampling needs interpolated distances
        texture.filter = (moderngl.LINEAR, moderngl.LINEAR)
        texture.repeat_x = False
        texture.repeat_y = False
        return texture


def _load_image(texture_path: Path, flip_texture: bool) -> Image.Image:
    if not texture_path.exists():
        raise TextureAtlasError(f"Texture atlas image not found: {texture_path}")

    with Image.open(texture_path) as image:
        loaded = image.copy()
    if flip_texture:
        loaded = loaded.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
    return loaded


def _parse_size(payload: Dict[str, Any], image: Optional[Image.Image], path: Path) -> Tuple[int, int]:
    meta = payload.get("meta")
    size = meta.get("size") if isinstance(meta, dict) else None
    if size is not None:
        try:
            return int(size["w"]), int(size["h"])
        except (KeyError, TypeError, ValueError) as exc:
            raise TextureAtlasError(f"Malformed 'meta.size' in texture atlas file {path}") from exc

    if image is not None:
        return image.size

    raise TextureAtlasError(f"Texture atlas file {path} has no 'meta.size' and no image was given")


def _parse_frames(payload: Dict[str, Any], size: Tuple[int, int],
                  top_left_coords: bool, path: Path) -> Dict[str, SpriteFrame]:
    raw_frames = payload.get("frames")
    if isinstance(raw_frames, dict):
        entries = list(raw_frames.items())
    elif isinstance(raw_frames, list):
        entries = []
        for entry in raw_frames:
            if not isinstance(entry, dict):
                raise TextureAtlasError(f"Frame entry {entry!r} in texture atlas file {path} must be an object")
            entries.append((entry.get("filename"), entry))
    else:
        raise TextureAtlasError(f"Texture atlas file {path} has no 'frames' collection")

    atlas_h = size[1]
    frames: Dict[str, SpriteFrame] = {}
    for raw_name, entry in entries:
        if not raw_name:
            raise TextureAtlasError(f"Sprite without a name in texture atlas file {path}")

        rect = entry.get("frame", entry) if isinstance(entry, dict) else None
        try:
            x = int(rect["x"])
            y = int(rect["y"])
            width = int(rect["w"])
            height = int(rect["h"])
        except (KeyError, TypeError, ValueError) as exc:
            raise TextureAtlasError(f"Malformed frame for sprite '{raw_name}' in {path}") from exc

        if not top_left_coords:
            # Bottom-left origin: convert to a top-origin row
            y = atlas_h - y - height

        frames[_strip_extension(str(raw_name))] = SpriteFrame(x, y, width, height)

    return frames


def _strip_extension(name: str) -> str:
    lowered = name.lower()
    for extension in ATLAS_SPRITE_EXTENSIONS:
        # Names that are only an extension stay as they are
        if lowered.endswith(extension) and len(name) > len(extension):
            return name[: -len(extension)]
    return name
