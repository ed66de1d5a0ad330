"""
Tests for grid layout and the transform compositor.

Covers:
- Row-major layout, unique cells, canvas extent
- Fit scale and offset scale
- Default transform places the content center on the cell center
- Pivot invariance (rotate by θ then -θ restores the matrix)
- Pivot override reduces to the plain chain at the cell center
- Purity (no instance mutation, same inputs -> same output)
- Zero-size glyph definitions stay finite
- Affine helpers (inverse, singular matrices, QTransform)
"""
import math

import numpy as np
import pytest

from glyph_editor.constants import QUADRAT
from glyph_editor.models import Affine, GlyphInstance, Vec2
from glyph_editor.utils.compositor import (
    build_matrix, build_transform, fit_scale, offset_scale, transform_chain,
)
from glyph_editor.utils.layout import (
    canvas_extent, cell_center, compute_cell_step, layout_rows, stage_item,
)
from conftest import make_glyph


def _rows(*lengths):
    return [[GlyphInstance('A1') for _ in range(n)] for n in lengths]


# ══════════════════════════════════════════════════════════════════════════
# Layout
# ══════════════════════════════════════════════════════════════════════════

class TestLayout:

    def test_row_major_positions(self):
        rows = _rows(3, 0, 2)
        items = layout_rows(rows, 100)
        assert [(i.row, i.col) for i in items] == [(0, 0), (0, 1), (0, 2), (2, 0), (2, 1)]
        assert [(i.x, i.y) for i in items] == [(0, 0), (100, 0), (200, 0), (0, 200), (100, 200)]

    def test_no_two_items_share_a_cell(self):
        rows = _rows(4, 1, 7, 3)
        cells = [(i.row, i.col) for i in layout_rows(rows, QUADRAT)]
        assert len(cells) == len(set(cells))

    def test_items_keep_identity_and_order(self):
        rows = _rows(2, 2)
        items = layout_rows(rows, 10)
        assert [i.instance for i in items] == rows[0] + rows[1]

    def test_cell_step(self):
        rows = _rows(2)
        assert compute_cell_step(rows) == QUADRAT
        rows[0][1].scale_x = 1.8
        assert compute_cell_step(rows) == pytest.approx(QUADRAT * 1.8)

    def test_canvas_extent(self):
        extent = canvas_extent(_rows(3, 1), 100)
        assert (extent.x, extent.y) == (300, 200)

    def test_canvas_extent_never_empty(self):
        extent = canvas_extent([[]], 100)
        assert (extent.x, extent.y) == (100, 100)

    def test_cell_center(self):
        item = layout_rows(_rows(2), 100)[1]
        center = cell_center(item, 100)
        assert (center.x, center.y) == (150, 50)


# ══════════════════════════════════════════════════════════════════════════
# Compositor
# ══════════════════════════════════════════════════════════════════════════

class TestCompositor:

    def test_fit_scale_uses_longest_side(self):
        assert fit_scale(make_glyph('W', view_box=(0, 0, 200, 100))) == QUADRAT / 200

    def test_offset_scale(self):
        assert offset_scale(QUADRAT) == 1.0
        assert offset_scale(QUADRAT * 1.5) == 1.5

    def test_default_transform_string(self):
        item = stage_item(GlyphInstance('A1'))
        assert build_transform(item, make_glyph('A1'), QUADRAT) == (
            "translate(0 0) translate(900 900) rotate(0) scale(1 1) "
            "scale(18 18) translate(-50 -50)"
        )

    def test_content_center_lands_on_cell_center(self):
        glyph = make_glyph('N35', view_box=(0, 0, 200, 100), content=(0, 10, 200, 80))
        item = layout_rows([[GlyphInstance('A1'), GlyphInstance('N35')]], QUADRAT)[1]
        x, y = build_matrix(item, glyph, QUADRAT).map_point(100, 50)
        assert (x, y) == pytest.approx((QUADRAT * 1.5, QUADRAT / 2))

    def test_glyph_fills_quadrat(self):
        item = stage_item(GlyphInstance('A1'))
        matrix = build_matrix(item, make_glyph('A1'), QUADRAT)
        assert matrix.map_point(0, 0) == pytest.approx((0, 0))
        assert matrix.map_point(100, 100) == pytest.approx((QUADRAT, QUADRAT))

    def test_offset_is_not_rotated(self):
        inst = GlyphInstance('A1', {'rotate': 90, 'offset_x': 100})
        matrix = build_matrix(stage_item(inst), make_glyph('A1'), QUADRAT)
        assert matrix.map_point(50, 50) == pytest.approx((1000, 900))

    def test_flip_mirrors_about_center(self):
        inst = GlyphInstance('A1', {'flip_x': True})
        matrix = build_matrix(stage_item(inst), make_glyph('A1'), QUADRAT)
        assert matrix.map_point(0, 0) == pytest.approx((QUADRAT, 0))

    @pytest.mark.parametrize("theta", [0, 17, 45, 90, 133, 271])
    def test_pivot_invariance(self, theta):
        glyph = make_glyph('A1')
        inst = GlyphInstance('A1', {'scale_x': 1.3, 'offset_y': 40, 'flip_y': True})
        item = stage_item(inst)
        before = build_matrix(item, glyph, QUADRAT)
        inst.rotate_by(theta)
        inst.rotate_by(-theta)
        assert build_matrix(item, glyph, QUADRAT).almost_equals(before, 1e-6)

    def test_pivot_override_at_cell_center_is_identity_change(self):
        glyph = make_glyph('A1')
        item = stage_item(GlyphInstance('A1', {'rotate': 30, 'scale': 1.2}))
        plain = build_matrix(item, glyph, QUADRAT)
        overridden = build_matrix(item, glyph, QUADRAT, pivot=cell_center(item, QUADRAT))
        assert overridden.almost_equals(plain, 1e-6)

    def test_pivot_override_orbits_cell_center(self):
        glyph = make_glyph('A1')
        item = stage_item(GlyphInstance('A1', {'rotate': 180}))
        matrix = build_matrix(item, glyph, QUADRAT, pivot=Vec2(0, 0))
        # Cell center (900, 900) rotated 180 degrees about the origin
        assert matrix.map_point(50, 50) == pytest.approx((-900, -900))

    def test_pure(self):
        glyph = make_glyph('A1')
        inst = GlyphInstance('A1', {'rotate': 45, 'scale_y': 0.7})
        before = inst.to_dict()
        item = stage_item(inst)
        first = build_transform(item, glyph, QUADRAT, pivot=Vec2(10, 20))
        second = build_transform(item, glyph, QUADRAT, pivot=Vec2(10, 20))
        assert first == second
        assert inst.to_dict() == before

    def test_zero_size_glyph_is_finite(self):
        glyph = make_glyph('Z', view_box=(0, 0, 0, 0))
        matrix = build_matrix(stage_item(GlyphInstance('Z')), glyph, QUADRAT)
        assert np.all(np.isfinite(matrix.matrix))

    def test_chain_and_string_agree(self):
        glyph = make_glyph('A1')
        item = stage_item(GlyphInstance('A1', {'rotate': 33, 'scale_x': 1.1, 'offset_x': -12.5}))
        chain = transform_chain(item, glyph, QUADRAT)
        assert [op[0] for op in chain] == ['translate', 'translate', 'rotate', 'scale', 'scale', 'translate']
        assert build_transform(item, glyph, QUADRAT).count('(') == len(chain)


# ══════════════════════════════════════════════════════════════════════════
# Affine
# ══════════════════════════════════════════════════════════════════════════

class TestAffine:

    def test_compose_order(self):
        m = Affine.translation(10, 0).compose(Affine.rotation(90))
        assert m.map_point(1, 0) == pytest.approx((10, 1))

    def test_inverse(self):
        m = Affine.translation(5, 7).compose(Affine.scaling(2, 4))
        inv = m.inverted()
        assert inv.map_point(*m.map_point(3, 9)) == pytest.approx((3, 9))

    def test_singular_has_no_inverse(self):
        assert Affine.scaling(0, 1).inverted() is None

    def test_rotation_degrees(self):
        x, y = Affine.rotation(45).map_point(1, 0)
        assert (x, y) == pytest.approx((math.sqrt(0.5), math.sqrt(0.5)))

    def test_svg_matrix(self):
        assert Affine.translation(3, 4).to_svg_matrix() == "matrix(1 0 0 1 3 4)"

    def test_qtransform_round_trip(self):
        m = Affine.translation(5, 6).compose(Affine.rotation(30))
        assert Affine.from_qtransform(m.to_qtransform()).almost_equals(m, 1e-9)
