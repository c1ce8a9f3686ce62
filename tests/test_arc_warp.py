"""
Tests for the arc warp post-process.
"""

import math

import numpy as np
import pytest

from textstag.arc_warp import arc_geometry, arc_warp, bilinear_sample, column_angles


@pytest.fixture
def opaque_block():
    """An opaque 120x40 premultiplied RGBA raster."""
    pixels = np.zeros((40, 120, 4), dtype=np.float32)
    pixels[...] = (1.0, 0.5, 0.0, 1.0)
    return pixels


class TestArcGeometry:
    """Tests for the arc circle."""

    def test_radius_formula(self):
        """Test R = w^2 / (8 s) + s / 2 and d = R - s."""
        sag, radius, d = arc_geometry(200, 100, 50)
        assert sag == pytest.approx(17.5)
        assert radius == pytest.approx(200 * 200 / (8 * 17.5) + 17.5 / 2)
        assert d == pytest.approx(radius - sag)

    def test_angles_clamped(self):
        """Test that the asin input never leaves +-0.999999."""
        sin_t, cos_t = column_angles(100, 1.0)
        assert sin_t.max() <= 0.999999
        assert sin_t.min() >= -0.999999
        assert np.all(np.isfinite(cos_t))


class TestArcWarp:
    """Tests for arc_warp."""

    def test_zero_is_identity(self, opaque_block):
        """Test that 0 % returns the raster unchanged."""
        before = opaque_block.copy()
        result = arc_warp(opaque_block, 0)
        assert result is opaque_block
        assert np.array_equal(result, before)

    def test_negative_is_identity(self, opaque_block):
        """Test that negative percentages disable the warp."""
        assert arc_warp(opaque_block, -20) is opaque_block

    def test_canvas_grows(self, opaque_block):
        """Test that the height grows by the displacement range, the width stays."""
        h0, w0 = opaque_block.shape[:2]
        result = arc_warp(opaque_block, 50)

        _, radius, d = arc_geometry(w0, h0, 50)
        sin_t, cos_t = column_angles(w0, radius)
        y_arc = d - radius * cos_t
        expected_h = h0 + math.ceil(y_arc.max() - y_arc.min())

        assert result.shape == (expected_h, w0, 4)
        assert expected_h > h0

    def test_input_not_modified(self, opaque_block):
        """Test that the source raster is left alone."""
        before = opaque_block.copy()
        arc_warp(opaque_block, 80)
        assert np.array_equal(opaque_block, before)

    def test_no_holes(self, opaque_block):
        """Test that every column still carries opaque content."""
        result = arc_warp(opaque_block, 100)
        assert np.all(result[..., 3].max(axis=0) > 0.99)

    def test_transparent_stays_transparent(self):
        """Test that nothing appears out of an empty raster."""
        empty = np.zeros((30, 60, 4), dtype=np.float32)
        assert not np.any(arc_warp(empty, 60))

    def test_edges_bend_down(self, opaque_block):
        """Test that the center is shifted up relative to the edges."""
        result = arc_warp(opaque_block, 100)
        alpha = result[..., 3] > 0.5

        def top_row(column):
            return int(np.argmax(alpha[:, column]))

        center = opaque_block.shape[1] // 2
        assert top_row(center) < top_row(2)
        assert top_row(center) < top_row(opaque_block.shape[1] - 3)


class TestBilinearSample:
    """Tests for bilinear_sample."""

    @pytest.fixture
    def grid(self):
        return np.array([[[0.0], [1.0]], [[2.0], [3.0]]], dtype=np.float32)

    def test_center_average(self, grid):
        """Test sampling between four pixels."""
        value = bilinear_sample(grid, np.array([0.5]), np.array([0.5]))
        assert value[0, 0] == pytest.approx(1.5)

    def test_exact_pixel(self, grid):
        """Test sampling on a pixel corner."""
        value = bilinear_sample(grid, np.array([1.0]), np.array([1.0]))
        assert value[0, 0] == pytest.approx(3.0)

    def test_outside_is_transparent(self, grid):
        """Test that samples outside [0, w) x [0, h) are zero."""
        xs = np.array([-0.1, 2.0, 0.5, 0.5])
        ys = np.array([0.5, 0.5, -1.0, 2.0])
        assert np.all(bilinear_sample(grid, xs, ys) == 0)

    def test_last_column_clamped(self, grid):
        """Test that the right neighbor of the last column is the column itself."""
        value = bilinear_sample(grid, np.array([1.5]), np.array([0.0]))
        assert value[0, 0] == pytest.approx(1.0)
