"""Tests for FontAtlas glyph table, scale and mesh generation"""

import json
import logging
import threading

import numpy as np
import pytest

from sdftext.loaders.font_metrics import FontMetricsError
from sdftext.rendering.font_atlas import FontAtlas, GlyphRecord, compute_default_scale

from conftest import FakeTextureAtlas, glyph, unit_quad


@pytest.fixture
def font_atlas(font_description, fake_atlas):
    return FontAtlas.from_metrics(font_description, fake_atlas)


@pytest.fixture
def single_glyph_atlas():
    metrics = {"characters": {"A": glyph(10, 20, 0, 0, 12)}}
    return FontAtlas.from_metrics(metrics, FakeTextureAtlas({"A": unit_quad()}))


# ----------------------------------------------------------------------
# Glyph table
# ----------------------------------------------------------------------
def test_glyph_table_from_description(font_atlas):
    """Every described character gets a record keyed by code point"""
    assert len(font_atlas) == 4
    assert set(font_atlas.glyphs) == {ord("A"), ord("B"), ord("g"), ord(" ")}

    b = font_atlas.get_glyph("B")
    assert b == GlyphRecord(
        width_px=14.0,
        height_px=20.0,
        origin_x=1.0,
        origin_y=18.0,
        advance_px=15.0,
        uv_region=tuple(unit_quad(0.2)),
    )


def test_every_glyph_has_four_uv_coordinates(font_atlas):
    for record in font_atlas.glyphs.values():
        assert len(record.uv_region) == 4


def test_atlas_queried_once_per_glyph(font_description, fake_atlas):
    font_atlas = FontAtlas.from_metrics(font_description, fake_atlas)
    assert sorted(fake_atlas.queries) == sorted(font_description["characters"])

    font_atlas.generate_text_mesh("ABBA", 0.0, 0.0)
    assert len(fake_atlas.queries) == len(font_description["characters"])


def test_uv_region_copied_from_atlas(font_description, fake_atlas):
    """Changing the atlas afterwards must not affect loaded glyphs"""
    font_atlas = FontAtlas.from_metrics(font_description, fake_atlas)

    fake_atlas.uv_regions["A"][0] = (0.9, 0.9)
    fake_atlas.uv_regions["A"] = unit_quad(0.5)

    assert font_atlas.get_glyph("A").uv_region == tuple(unit_quad(0.0))


def test_glyph_table_is_read_only(font_atlas):
    with pytest.raises(TypeError):
        font_atlas.glyphs[ord("Z")] = font_atlas.get_glyph("A")


def test_has_glyph(font_atlas):
    assert font_atlas.has_glyph("g")
    assert not font_atlas.has_glyph("Z")
    assert font_atlas.get_glyph("Z") is None


def test_lookup_requires_single_character(font_atlas):
    """Empty and multi-character strings are never glyphs"""
    assert font_atlas.get_glyph("") is None
    assert font_atlas.get_glyph("AB") is None
    assert not font_atlas.has_glyph("")
    assert not font_atlas.has_glyph("AB")


def test_font_info_header(font_atlas):
    info = font_atlas.font_info
    assert info.name == "Test Serif"
    assert info.size == 64
    assert info.atlas_width == 256
    assert info.atlas_height == 128


def test_missing_sprite_reported_at_load(font_description, fake_atlas, caplog):
    """A character without a sprite is logged and left out of the table"""
    del fake_atlas.uv_regions["g"]

    with caplog.at_level(logging.WARNING, logger="sdftext.rendering.font_atlas"):
        font_atlas = FontAtlas.from_metrics(font_description, fake_atlas)

    assert not font_atlas.has_glyph("g")
    assert len(font_atlas) == 3
    assert any("'g'" in record.getMessage() for record in caplog.records)


def test_empty_uv_region_treated_as_missing_sprite(font_description, fake_atlas):
    fake_atlas.uv_regions["g"] = []

    font_atlas = FontAtlas.from_metrics(font_description, fake_atlas)
    assert not font_atlas.has_glyph("g")


def test_wrong_uv_corner_count_fails(font_description, fake_atlas):
    fake_atlas.uv_regions["A"] = unit_quad()[:3]

    with pytest.raises(FontMetricsError):
        FontAtlas.from_metrics(font_description, fake_atlas)


def test_load_from_file(font_info_file, fake_atlas):
    font_atlas = FontAtlas.load(font_info_file, fake_atlas)
    assert len(font_atlas) == 4
    assert font_atlas.default_scale > 0


def test_load_missing_file_fails(tmp_path, fake_atlas, caplog):
    with caplog.at_level(logging.ERROR, logger="sdftext.rendering.font_atlas"):
        with pytest.raises(FontMetricsError):
            FontAtlas.load(tmp_path / "missing.json", fake_atlas)

    assert caplog.records


def test_load_invalid_json_fails(tmp_path, fake_atlas):
    path = tmp_path / "broken.json"
    path.write_text("{ not json", encoding="utf-8")

    with pytest.raises(FontMetricsError):
        FontAtlas.load(path, fake_atlas)


def test_load_missing_field_fails(tmp_path, fake_atlas):
    path = tmp_path / "font_info.json"
    description = {"characters": {"A": {"width": 10, "height": 20, "originX": 0, "originY": 0}}}
    path.write_text(json.dumps(description), encoding="utf-8")

    with pytest.raises(FontMetricsError):
        FontAtlas.load(path, fake_atlas)


def test_empty_glyph_table_fails(fake_atlas):
    with pytest.raises(FontMetricsError):
        FontAtlas.from_metrics({"characters": {}}, fake_atlas)


def test_no_matching_sprites_fails():
    metrics = {"characters": {"A": glyph(10, 20)}}

    with pytest.raises(FontMetricsError):
        FontAtlas.from_metrics(metrics, FakeTextureAtlas({}))


def test_constructor_rejects_invalid_state():
    record = GlyphRecord(10.0, 20.0, 0.0, 0.0, 12.0, tuple(unit_quad()))

    with pytest.raises(FontMetricsError):
        FontAtlas({}, 0.004)
    with pytest.raises(FontMetricsError):
        FontAtlas({ord("A"): record}, float("nan"))
    with pytest.raises(FontMetricsError):
        FontAtlas({ord("A"): record}, 0.0)


# ----------------------------------------------------------------------
# Scale
# ----------------------------------------------------------------------
def test_default_scale_single_glyph(single_glyph_atlas):
    """(2 / 10) / 50"""
    assert single_glyph_atlas.default_scale == pytest.approx(0.004)


def test_default_scale_uses_mean_width(font_atlas):
    mean_width = (10 + 14 + 12 + 0) / 4
    assert font_atlas.default_scale == pytest.approx((2.0 / mean_width) / 50)
    assert font_atlas.default_scale > 0


def test_default_scale_custom_density(font_description, fake_atlas):
    font_atlas = FontAtlas.from_metrics(font_description, fake_atlas, num_chars_per_screen_width=25)
    assert font_atlas.default_scale == pytest.approx((2.0 / 9.0) / 25)


def test_default_scale_excludes_glyphs_without_sprite(font_description, fake_atlas):
    del fake_atlas.uv_regions[" "]

    font_atlas = FontAtlas.from_metrics(font_description, fake_atlas)
    assert font_atlas.default_scale == pytest.approx((2.0 / 12.0) / 50)


def test_compute_default_scale_errors():
    with pytest.raises(FontMetricsError):
        compute_default_scale([])
    with pytest.raises(FontMetricsError):
        compute_default_scale([0.0, 0.0])
    with pytest.raises(FontMetricsError):
        compute_default_scale([10.0], num_chars_per_screen_width=0)


# ----------------------------------------------------------------------
# Mesh generation
# ----------------------------------------------------------------------
def test_single_glyph_mesh(single_glyph_atlas):
    mesh = single_glyph_atlas.generate_text_mesh("A", 0.0, 0.0, 1.0)

    assert mesh.vertex_positions.shape == (4, 3)
    assert mesh.texture_coordinates.shape == (4, 2)
    assert mesh.indices.tolist() == [0, 1, 2, 2, 3, 0]
    assert mesh.indices.dtype == np.uint32

    expected = [
        [0.0, -0.08, 0.0],
        [0.04, -0.08, 0.0],
        [0.04, 0.0, 0.0],
        [0.0, 0.0, 0.0],
    ]
    assert np.allclose(mesh.vertex_positions, expected, atol=1e-6)

    xs = mesh.vertex_positions[:, 0]
    ys = mesh.vertex_positions[:, 1]
    assert xs.max() - xs.min() == pytest.approx(0.04, abs=1e-6)
    assert ys.max() - ys.min() == pytest.approx(0.08, abs=1e-6)


def test_uvs_follow_vertex_winding(single_glyph_atlas):
    mesh = single_glyph_atlas.generate_text_mesh("A", 0.0, 0.0)
    assert np.allclose(mesh.texture_coordinates, unit_quad())


def test_glyph_origin_offsets_quad(font_atlas):
    """The origin anchor sits on the pen position"""
    scale = font_atlas.default_scale
    mesh = font_atlas.generate_text_mesh("B", 0.5, 0.25)

    lower_left = mesh.vertex_positions[0]
    assert lower_left[0] == pytest.approx(0.5 - 1 * scale, abs=1e-6)
    assert lower_left[1] == pytest.approx(0.25 - (20 - 18) * scale, abs=1e-6)
    assert lower_left[2] == 0.0


def test_mesh_buffer_sizes(font_atlas):
    for text in ["", "A", "AB", "gAB A", "ABgABg"]:
        mesh = font_atlas.generate_text_mesh(text, -1.0, 0.0)
        resolved = sum(1 for char in text if font_atlas.has_glyph(char))

        assert mesh.glyph_count == resolved
        assert len(mesh.indices) == 6 * resolved
        assert len(mesh.vertex_positions) == 4 * resolved
        assert len(mesh.texture_coordinates) == 4 * resolved
        assert mesh.triangle_count == 2 * resolved


def test_indices_offset_per_glyph(font_atlas):
    mesh = font_atlas.generate_text_mesh("ABg", 0.0, 0.0)
    assert mesh.indices.tolist() == [
        0, 1, 2, 2, 3, 0,
        4, 5, 6, 6, 7, 4,
        8, 9, 10, 10, 11, 8,
    ]
    assert mesh.indices.max() < mesh.vertex_count


def test_pen_advances_left_to_right(font_atlas):
    mesh = font_atlas.generate_text_mesh("ABgAB", -1.0, 0.0)
    quad_x = mesh.vertex_positions[0::4, 0]
    assert np.all(np.diff(quad_x) > 0)


def test_pen_advance_uses_advance_width(single_glyph_atlas):
    scale = single_glyph_atlas.default_scale
    mesh = single_glyph_atlas.generate_text_mesh("AA", 0.0, 0.0)
    assert mesh.vertex_positions[4, 0] - mesh.vertex_positions[0, 0] == pytest.approx(12 * scale, abs=1e-6)


def test_scale_multiplier(single_glyph_atlas):
    mesh = single_glyph_atlas.generate_text_mesh("A", 0.0, 0.0, 2.0)
    xs = mesh.vertex_positions[:, 0]
    assert xs.max() - xs.min() == pytest.approx(0.08, abs=1e-6)


def test_single_line_layout(font_atlas):
    """Baseline-aligned glyphs keep the same pen y"""
    mesh = font_atlas.generate_text_mesh("AAA", 0.0, 0.3)
    assert np.allclose(mesh.vertex_positions[2::4, 1], 0.3)


def test_missing_character_skipped(single_glyph_atlas, caplog):
    with caplog.at_level(logging.WARNING, logger="sdftext.rendering.font_atlas"):
        mesh = single_glyph_atlas.generate_text_mesh("AB", 0.0, 0.0)

    assert mesh.vertex_count == 4
    assert mesh.index_count == 6
    assert mesh.missing_characters == ("B",)
    assert any("'B'" in record.getMessage() for record in caplog.records)


def test_missing_character_does_not_advance_pen(font_atlas):
    with_gap = font_atlas.generate_text_mesh("A?B", 0.0, 0.0)
    without_gap = font_atlas.generate_text_mesh("AB", 0.0, 0.0)

    assert with_gap.glyph_count == 2
    assert np.array_equal(with_gap.vertex_positions, without_gap.vertex_positions)
    assert with_gap.missing_characters == ("?",)


def test_unicode_outside_alphabet_skipped(font_atlas):
    mesh = font_atlas.generate_text_mesh("Aé中B", 0.0, 0.0)
    assert mesh.glyph_count == 2
    assert mesh.missing_characters == ("é", "中")


def test_empty_text(font_atlas):
    mesh = font_atlas.generate_text_mesh("", 0.0, 0.0)
    assert mesh.is_empty
    assert mesh.vertex_positions.shape == (0, 3)
    assert mesh.texture_coordinates.shape == (0, 2)
    assert mesh.indices.shape == (0,)


def test_mesh_generation_deterministic(font_atlas):
    first = font_atlas.generate_text_mesh("gAB A", -0.7, 0.1, 1.5)
    second = font_atlas.generate_text_mesh("gAB A", -0.7, 0.1, 1.5)

    assert first.vertex_positions.tobytes() == second.vertex_positions.tobytes()
    assert first.texture_coordinates.tobytes() == second.texture_coordinates.tobytes()
    assert first.indices.tobytes() == second.indices.tobytes()


def test_meshes_are_independent(font_atlas):
    first = font_atlas.generate_text_mesh("AB", 0.0, 0.0)
    first.vertex_positions[:] = 0.0

    second = font_atlas.generate_text_mesh("AB", 0.0, 0.0)
    assert np.any(second.vertex_positions != 0.0)


def test_concurrent_generation_matches_serial(font_atlas):
    expected = font_atlas.generate_text_mesh("ABgAB gA", -1.0, 0.0).vertex_positions.tobytes()
    results = []

    def worker():
        for _ in range(20):
            results.append(font_atlas.generate_text_mesh("ABgAB gA", -1.0, 0.0).vertex_positions.tobytes())

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 80
    assert all(result == expected for result in results)


def test_measure_text_matches_pen_travel(font_atlas):
    scale = font_atlas.default_scale
    assert font_atlas.measure_text("AB") == pytest.approx((12 + 15) * scale)
    assert font_atlas.measure_text("A?B", 2.0) == pytest.approx((12 + 15) * scale * 2.0)
    assert font_atlas.measure_text("") == 0.0

    # Next glyph after "AA" starts where the pen ended
    mesh = font_atlas.generate_text_mesh("AAA", 0.0, 0.0)
    assert mesh.vertex_positions[8, 0] == pytest.approx(font_atlas.measure_text("AA"), abs=1e-6)
