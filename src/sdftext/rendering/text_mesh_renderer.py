"""
Text Mesh Renderer

Uploads text meshes to GPU buffers and draws them with the SDF text shader.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import moderngl
import numpy as np
from pyrr import matrix44

from ..config.settings import (
    SDF_CHARACTER_WIDTH,
    SDF_EDGE_TRANSITION,
    SDF_TEXT_COLOR,
    SDF_TEXT_FRAGMENT_SHADER,
    SDF_TEXT_VERTEX_SHADER,
    SHADERS_DIR,
)
from .font_atlas import TextMesh


def load_sdf_text_program(ctx: moderngl.Context, shader_dir: Path = SHADERS_DIR) -> moderngl.Program:
    """
    Compile the SDF text shader program.

    Raises:
        FileNotFoundError: If a shader file doesn't exist
        moderngl.Error: If compilation fails
    """
    shader_dir = Path(shader_dir)
    vert_path = shader_dir / SDF_TEXT_VERTEX_SHADER
    frag_path = shader_dir / SDF_TEXT_FRAGMENT_SHADER

    if not vert_path.exists():
        raise FileNotFoundError(f"Vertex shader not found: {vert_path}")
    if not frag_path.exists():
        raise FileNotFoundError(f"Fragment shader not found: {frag_path}")

    try:
        return ctx.program(
            vertex_shader=vert_path.read_text(),
            fragment_shader=frag_path.read_text(),
        )
    except moderngl.Error as e:
        raise moderngl.Error(f"Failed to compile SDF text program: {e}") from e


@dataclass
class TextMeshDrawData:
    """GPU resources for one uploaded text mesh."""

    vao: moderngl.VertexArray
    position_buffer: moderngl.Buffer
    uv_buffer: moderngl.Buffer
    index_buffer: moderngl.Buffer
    index_count: int

    def release(self) -> None:
        self.vao.release()
        self.position_buffer.release()
        self.uv_buffer.release()
        self.index_buffer.release()


class TextMeshRenderer:
    """
    Draws text meshes in NDC with alpha-blended SDF sampling.

    Pipeline:
    1. Upload positions, UVs and indices into separate buffers
    2. Enable alpha blending, disable depth testing
    3. Set SDF uniforms and draw indexed triangles
    4. Restore OpenGL state
    """

    def __init__(self, ctx: moderngl.Context, shader_program: moderngl.Program):
        """
        Initialize text mesh renderer.

        Args:
            ctx: ModernGL context
            shader_program: Compiled SDF text program (see :func:`load_sdf_text_program`)
        """
        self.ctx = ctx
        self.program = shader_program

    def upload(self, mesh: TextMesh) -> Optional[TextMeshDrawData]:
        """
        Create GPU buffers for a text mesh.

        Returns:
            Draw data, or None for an empty mesh
        """
        if mesh.is_empty:
            return None

        position_buffer = self.ctx.buffer(np.ascontiguousarray(mesh.vertex_positions, dtype='f4').tobytes())
        uv_buffer = self.ctx.buffer(np.ascontiguousarray(mesh.texture_coordinates, dtype='f4').tobytes())
        index_buffer = self.ctx.buffer(np.ascontiguousarray(mesh.indices, dtype='u4').tobytes())

        vao = self.ctx.vertex_array(
            self.program,
            [
                (position_buffer, "3f", "in_position"),
                (uv_buffer, "2f", "in_uv"),
            ],
            index_buffer=index_buffer,
            index_element_size=4,
        )

        return TextMeshDrawData(
            vao=vao,
            position_buffer=position_buffer,
            uv_buffer=uv_buffer,
            index_buffer=index_buffer,
            index_count=mesh.index_count,
        )

    def render(self, draw_data: Optional[TextMeshDrawData], texture: moderngl.Texture,
               color: Tuple[float, float, float] = SDF_TEXT_COLOR,
               character_width: float = SDF_CHARACTER_WIDTH,
               edge_transition: float = SDF_EDGE_TRANSITION,
               transform: Optional[np.ndarray] = None):
        """
        Draw an uploaded text mesh.

        Args:
            draw_data: Result of :meth:`upload`; None draws nothing
            texture: SDF atlas texture
            color: Text color (RGB)
            character_width: Distance value treated as the glyph edge
            edge_transition: Width of the edge smoothing band
            transform: 4x4 matrix applied to NDC positions (identity by default)
        """
        if draw_data is None or draw_data.index_count == 0:
            return

        if transform is None:
            transform = matrix44.create_identity(dtype=np.float32)

        self._setup_state()

        self.program["transform"].write(np.asarray(transform, dtype='f4').tobytes())
        self.program["rgb_color"].value = tuple(color)
        self.program["character_width"].value = character_width
        self.program["edge_transition_width"].value = edge_transition

        texture.use(location=0)
        self.program["font_atlas"].value = 0

        # Two triangles per glyph
        draw_data.vao.render(moderngl.TRIANGLES, vertices=draw_data.index_count)

        self._restore_state()

    def _setup_state(self):
        self.ctx.enable(moderngl.BLEND)
        self.ctx.blend_func = moderngl.SRC_ALPHA, moderngl.ONE_MINUS_SRC_ALPHA
        self.ctx.disable(moderngl.DEPTH_TEST)

    def _restore_state(self):
        self.ctx.enable(moderngl.DEPTH_TEST)
        self.ctx.disable(moderngl.BLEND)
