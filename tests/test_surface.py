"""
Tests for the raster surface: sizing, compositing operators and glyph masks.
"""

import numpy as np
import pytest
from PIL import Image

from textstag.surface import MULTIPLY, Surface


def _full_mask(surface, value=1.0):
    return np.full((surface.height, surface.width), value, dtype=np.float32)


class TestSurfaceSize:
    """Tests for creation and resizing."""

    def test_resize_floors(self):
        """Test that sizes are floored."""
        surface = Surface(10.9, 5.2)
        assert surface.size == (10, 5)

    def test_minimum_size(self):
        """Test that a surface is at least 1x1."""
        assert Surface(0, -3).size == (1, 1)

    def test_resize_clears(self):
        """Test that resizing clears the content."""
        surface = Surface(4, 4)
        surface.fill_rect((255, 0, 0))
        surface.resize(6, 3)
        assert surface.size == (6, 3)
        assert not np.any(surface.pixels)

    def test_scratch_matches_size(self):
        """Test that scratch surfaces are transparent and the same size."""
        surface = Surface(7, 9)
        surface.fill_rect((1, 2, 3))
        scratch = surface.create_scratch()
        assert scratch.size == surface.size
        assert not np.any(scratch.pixels)


class TestCompositing:
    """Tests for source-over, multiply, erase and destination-over."""

    def test_fill_rect(self):
        """Test an opaque fill."""
        surface = Surface(3, 2)
        surface.fill_rect((255, 128, 0))
        assert tuple(surface.get_pixels()[1, 2]) == (255, 128, 0, 255)

    def test_source_over_half_alpha(self):
        """Test half-transparent red over opaque blue."""
        surface = Surface(2, 2)
        surface.fill_rect((0, 0, 255))
        surface.fill_mask(_full_mask(surface), (255, 0, 0), alpha=0.5)
        r, g, b, a = surface.get_pixels()[0, 0]
        assert abs(int(r) - 128) <= 1
        assert g == 0
        assert abs(int(b) - 128) <= 1
        assert a == 255

    def test_multiply_on_opaque(self):
        """Test that multiply darkens by the product of the colors."""
        surface = Surface(2, 2)
        surface.fill_rect((255, 128, 0))
        surface.fill_mask(_full_mask(surface), (128, 128, 128), mode=MULTIPLY)
        r, g, b, a = surface.get_pixels()[0, 0]
        assert abs(int(r) - 128) <= 1
        assert abs(int(g) - 64) <= 1
        assert b == 0
        assert a == 255

    def test_multiply_on_transparent(self):
        """Test that multiply onto nothing keeps the source color."""
        surface = Surface(2, 2)
        surface.fill_mask(_full_mask(surface), (200, 100, 50), mode=MULTIPLY)
        assert tuple(surface.get_pixels()[0, 0]) == (200, 100, 50, 255)

    def test_erase_removes_alpha(self):
        """Test that a full mask erases completely."""
        surface = Surface(2, 2)
        surface.fill_rect((255, 0, 0))
        surface.erase(_full_mask(surface))
        assert not np.any(surface.get_pixels())

    def test_erase_is_subtraction_not_blend(self):
        """Test that a partial erase lowers alpha and keeps the color."""
        surface = Surface(2, 2)
        surface.fill_rect((255, 0, 0))
        surface.erase(_full_mask(surface, 0.5))
        r, g, b, a = surface.get_pixels()[0, 0]
        assert (r, g, b) == (255, 0, 0)
        assert abs(int(a) - 128) <= 1

    def test_fill_behind(self):
        """Test that the background shows only where content is transparent."""
        surface = Surface(2, 1)
        mask = np.array([[1.0, 0.0]], dtype=np.float32)
        surface.fill_mask(mask, (255, 0, 0))
        surface.fill_behind((0, 0, 255))
        pixels = surface.get_pixels()
        assert tuple(pixels[0, 0]) == (255, 0, 0, 255)
        assert tuple(pixels[0, 1]) == (0, 0, 255, 255)

    def test_draw_surface(self):
        """Test compositing one surface onto another."""
        base = Surface(2, 2)
        base.fill_rect((0, 255, 0))
        overlay = base.create_scratch()
        overlay.fill_mask(np.array([[1, 0], [0, 0]], dtype=np.float32), (255, 0, 0))
        base.draw_surface(overlay)
        pixels = base.get_pixels()
        assert tuple(pixels[0, 0]) == (255, 0, 0, 255)
        assert tuple(pixels[1, 1]) == (0, 255, 0, 255)


class TestPixelAccess:
    """Tests for reading and writing pixels."""

    def test_put_pixels_adopts_size(self):
        """Test that written pixels define the new size."""
        surface = Surface(2, 2)
        surface.put_pixels(np.zeros((5, 3, 4), dtype=np.float32))
        assert surface.size == (3, 5)

    def test_put_pixels_rejects_bad_shape(self):
        """Test that non-RGBA arrays are rejected."""
        with pytest.raises(ValueError):
            Surface().put_pixels(np.zeros((4, 4, 3), dtype=np.float32))

    def test_to_pil(self):
        """Test conversion to a PIL RGBA image."""
        surface = Surface(8, 4)
        surface.fill_rect((10, 20, 30))
        image = surface.to_pil()
        assert isinstance(image, Image.Image)
        assert image.mode == 'RGBA'
        assert image.size == (8, 4)
        assert image.getpixel((0, 0)) == (10, 20, 30, 255)


class TestGlyphMask:
    """Tests for glyph coverage masks."""

    def test_mask_shape_and_range(self, make_placement):
        """Test that the mask covers the surface and holds coverage values."""
        placement = make_placement()
        surface = Surface(300, 240)
        mask = surface.glyph_mask(placement)
        assert mask.shape == (240, 300)
        assert mask.max() == pytest.approx(1.0)
        assert mask.min() == 0.0

    def test_offset_moves_glyph(self, make_placement):
        """Test that an offset shifts the coverage."""
        placement = make_placement()
        surface = Surface(300, 240)
        base = surface.glyph_mask(placement)
        shifted = surface.glyph_mask(placement, dx=10, dy=0)
        cols = np.nonzero(base.max(axis=0) > 0.5)[0]
        shifted_cols = np.nonzero(shifted.max(axis=0) > 0.5)[0]
        assert shifted_cols[0] - cols[0] == 10
        assert shifted_cols[-1] - cols[-1] == 10

    def test_stroke_grows_mask(self, make_placement):
        """Test that a stroked mask covers more than the plain glyph."""
        placement = make_placement()
        surface = Surface(300, 240)
        plain = surface.glyph_mask(placement)
        stroked = surface.glyph_mask(placement, stroke_width=10)
        assert stroked.sum() > plain.sum()
        assert np.all(stroked[plain > 0.99] > 0.99)

    def test_blur_spreads_mask(self, make_placement):
        """Test that blurring reaches pixels the glyph does not cover."""
        placement = make_placement()
        surface = Surface(300, 240)
        plain = surface.glyph_mask(placement)
        blurred = surface.glyph_mask(placement, blur_radius=6)
        assert np.count_nonzero(blurred > 0.01) > np.count_nonzero(plain > 0.01)

    def test_anisotropic_scale(self, make_placement):
        """Test that a horizontal scale of 2 doubles the glyph width."""
        surface = Surface(400, 240)
        narrow = surface.glyph_mask(make_placement(width=400))
        wide = surface.glyph_mask(make_placement(width=400, scale_x=2.0))

        def ink_width(mask):
            cols = np.nonzero(mask.max(axis=0) > 0.5)[0]
            return cols[-1] - cols[0] + 1

        assert abs(ink_width(wide) - 2 * ink_width(narrow)) <= 3
