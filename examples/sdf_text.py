#!/usr/bin/env python3
"""
SDF Text Example

Loads the bundled SDF font atlas and draws a single line of text in NDC.

Usage:
    python examples/sdf_text.py
"""

import logging

import moderngl
import moderngl_window as mglw

from sdftext import (
    ASPECT_RATIO,
    ATLAS_FLIP_TEXTURE,
    ATLAS_TOP_LEFT_COORDS,
    DEFAULT_FONT_INFO_PATH,
    DEFAULT_TEXTURE_ATLAS_PATH,
    DEFAULT_TEXTURE_PATH,
    EXAMPLE_TEXT,
    EXAMPLE_TEXT_ORIGIN,
    GL_VERSION,
    RESIZABLE,
    SDF_CHARACTER_WIDTH,
    SDF_EDGE_TRANSITION,
    SDF_TEXT_COLOR,
    WINDOW_SIZE,
    WINDOW_TITLE,
    FontAtlas,
    TextMeshRenderer,
    TextureAtlas,
    load_sdf_text_program,
)

logger = logging.getLogger(__name__)


class SDFTextExample(mglw.WindowConfig):
    """Single-line SDF text demo"""

    gl_version = GL_VERSION
    title = WINDOW_TITLE
    window_size = WINDOW_SIZE
    aspect_ratio = ASPECT_RATIO
    resizable = RESIZABLE

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        texture_atlas = TextureAtlas.load(
            DEFAULT_TEXTURE_ATLAS_PATH,
            DEFAULT_TEXTURE_PATH,
            flip_texture=ATLAS_FLIP_TEXTURE,
            top_left_coords=ATLAS_TOP_LEFT_COORDS,
        )
        self.font_atlas = FontAtlas.load(DEFAULT_FONT_INFO_PATH, texture_atlas)
        self.texture = texture_atlas.create_texture(self.ctx)

        self.renderer = TextMeshRenderer(self.ctx, load_sdf_text_program(self.ctx))

        origin_x, origin_y = EXAMPLE_TEXT_ORIGIN
        mesh = self.font_atlas.generate_text_mesh(EXAMPLE_TEXT, origin_x, origin_y)
        if mesh.missing_characters:
            logger.warning("Skipped characters: %s", "".join(mesh.missing_characters))
        self.draw_data = self.renderer.upload(mesh)

    def on_render(self, time: float, frame_time: float):
        self.ctx.viewport = (0, 0, *self.wnd.buffer_size)
        self.ctx.clear(0.0, 0.0, 0.0)

        self.renderer.render(
            self.draw_data,
            self.texture,
            color=SDF_TEXT_COLOR,
            character_width=SDF_CHARACTER_WIDTH,
            edge_transition=SDF_EDGE_TRANSITION,
        )

    def on_close(self):
        if self.draw_data is not None:
            self.draw_data.release()
        self.texture.release()


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    SDFTextExample.run()
