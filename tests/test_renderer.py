"""
Tests for the render entry point: sizing, placement and end-to-end properties.
"""

import numpy as np
import pytest
from pydantic import ValidationError

from textstag.config import Style
from textstag.exceptions import SurfaceUnavailableError
from textstag.font_registry import FontRegistry
from textstag.layer_effects import DropShadow, Extrusion, Fill, GradientFill, LayerEffect, OuterGlow, Stroke
from textstag.renderer import RenderRequest, render_image, render_to_surface
from textstag.surface import Surface
from textstag.text_layout import measure_text_block


def _alpha(image):
    return np.asarray(image)[..., 3]


def _ink_box(alpha, threshold=0):
    rows = np.nonzero((alpha > threshold).any(axis=1))[0]
    cols = np.nonzero((alpha > threshold).any(axis=0))[0]
    return cols[0], rows[0], cols[-1], rows[-1]


def _edges(alpha):
    return np.concatenate([alpha[0, :], alpha[-1, :], alpha[:, 0], alpha[:, -1]])


class TestRenderRequest:
    """Tests for request coercion."""

    def test_defaults(self):
        """Test the configured defaults."""
        request = RenderRequest()
        assert request.font_size == 143
        assert request.padding == 24
        assert request.scale == 1
        assert request.alignment == 'center'
        assert request.anchor == 'topleft'
        assert request.background_color == '#7D2ED7'

    def test_coercion(self):
        """Test that malformed values fall back instead of failing."""
        request = RenderRequest(
            text=None,
            font_size='abc',
            scale_x=-1,
            scale_y=float('nan'),
            scale=0,
            alignment='justify',
            anchor='bottom',
            padding='x',
            target_width='wide',
            background_color='purple',
        )
        assert request.text == ''
        assert request.font_size == 143
        assert (request.scale_x, request.scale_y, request.scale) == (1, 1, 1)
        assert request.alignment == 'center'
        assert request.anchor == 'topleft'
        assert request.padding == 0
        assert request.target_width is None
        assert request.background_color == '#7D2ED7'

    def test_frozen(self):
        """Test that requests are immutable."""
        request = RenderRequest(text='A')
        with pytest.raises(ValidationError):
            request.text = 'B'


class TestRenderToSurface:
    """Tests for render_to_surface."""

    def test_missing_surface(self, test_style):
        """Test that rendering without a surface fails before drawing."""
        with pytest.raises(SurfaceUnavailableError):
            render_to_surface(None, RenderRequest(text='A'), [Fill()], test_style)

    def test_returns_surface_size(self, test_style):
        """Test that the returned size is the surface size."""
        surface = Surface()
        size = render_to_surface(surface, RenderRequest(text='Hi'), [Fill()], test_style)
        assert size == surface.size
        assert size[0] > 1 and size[1] > 1

    def test_auto_fit_size(self, test_style):
        """Test that the canvas is the block plus padding and effect pad."""
        request = RenderRequest(text='Hi', font_size=80, padding=10)
        surface = Surface()
        width, height = render_to_surface(surface, request, [Fill()], test_style)

        font = FontRegistry.resolve(test_style, 80)
        metrics = measure_text_block(font, ['Hi'], 80, test_style.line_height)
        pad = 2 * (10 + test_style.effect_pad)
        assert width == int(metrics.width + pad)
        assert height == int(metrics.height + pad)

    def test_target_box(self, test_style):
        """Test a fixed export box."""
        request = RenderRequest(text='A', target_width=300, target_height=200, scale=2)
        assert render_image(request, [Fill()], test_style).size == (600, 400)

    def test_layer_dicts_accepted(self, test_style):
        """Test that layers may be given in their document form."""
        image = render_image(RenderRequest(text='A'), [Fill(params={'color': '#FF0000'}).to_dict()], test_style)
        assert _alpha(image).max() == 255

    def test_unknown_layers_skipped(self, test_style):
        """Test that unknown types render as if absent."""
        unknown = LayerEffect.from_dict({'id': 'u', 'type': 'sparkle', 'params': {}})
        fill = Fill()
        with_unknown = np.asarray(render_image(RenderRequest(text='A'), [unknown, fill], test_style))
        without = np.asarray(render_image(RenderRequest(text='A'), [fill], test_style))
        assert np.array_equal(with_unknown, without)

    def test_no_base_fill(self, test_style):
        """Test that a stack without fills renders only its effects."""
        image = render_image(RenderRequest(text='A'), [Stroke()], test_style)
        assert _alpha(image).max() > 0

    def test_empty_text(self, test_style):
        """Test that empty text renders an empty canvas."""
        image = render_image(RenderRequest(text=''), [Fill(), Stroke()], test_style)
        assert image.size[0] >= 1
        assert _alpha(image).max() == 0


class TestPlainFillScenario:
    """Text "A", one black fill, padding 24, scale 1."""

    @pytest.fixture
    def alpha(self, test_style):
        request = RenderRequest(text='A', padding=24, alignment='center')
        return _alpha(render_image(request, [Fill(params={'color': '#000000'})], test_style))

    def test_canvas_exceeds_ink(self, alpha, test_style):
        """Test that the canvas is larger than the ink by twice padding plus effect pad."""
        left, top, right, bottom = _ink_box(alpha)
        height, width = alpha.shape
        minimum = 2 * (24 + test_style.effect_pad)
        assert width - (right - left + 1) >= minimum - 2
        assert height - (bottom - top + 1) >= minimum - 2

    def test_ink_inside_padding(self, alpha, test_style):
        """Test that no ink touches the padding band."""
        pad = int(24 + test_style.effect_pad)
        left, top, right, bottom = _ink_box(alpha)
        assert top >= pad - 1
        assert left >= pad - 4

    def test_centroid_at_alignment_anchor(self, alpha, test_style):
        """Test that the glyph is centered on the center-alignment anchor."""
        font = FontRegistry.resolve(test_style, 143)
        advance = font.getlength('A')
        anchor_x = 24 + test_style.effect_pad + advance / 2

        weights = alpha.astype(float)
        centroid_x = (weights.sum(axis=0) * np.arange(alpha.shape[1])).sum() / weights.sum()
        assert abs(centroid_x + 0.5 - anchor_x) <= 5


class TestNoClip:
    """Every effect pixel fits on the canvas."""

    @pytest.mark.parametrize("scale", [1.0, 2.0])
    def test_large_glow(self, test_style, scale):
        """Test a sizePx=40 glow leaves every edge pixel transparent."""
        layers = [OuterGlow(params={'sizePx': 40, 'opacityPct': 100}), Fill()]
        image = render_image(RenderRequest(text='Ag', padding=0, scale=scale), layers, test_style)
        assert _edges(_alpha(image)).max() == 0

    def test_all_effects(self, test_style):
        """Test a full stack of effects with zero user padding."""
        layers = [
            DropShadow(params={'sizePx': 20, 'distancePx': 30, 'angleDeg': 135, 'opacityPct': 100}),
            OuterGlow(params={'sizePx': 25, 'dx': -20, 'dy': 10, 'opacityPct': 100}),
            Extrusion(params={'steps': 12, 'dx': 4, 'dy': 5}),
            GradientFill(),
            Stroke(params={'widthPx': 30}),
        ]
        image = render_image(RenderRequest(text='Wy', padding=0), layers, test_style)
        assert _edges(_alpha(image)).max() == 0

    def test_zero_effect_pad(self):
        """Test that the effect margins alone keep an extrusion off the edge."""
        style = Style(font_family='TextStagTestMissingFont', effect_pad=0)
        layers = [Extrusion(params={'steps': 10, 'dx': 6, 'dy': 0, 'opacityPct': 100}), Fill()]
        image = render_image(RenderRequest(text='I', padding=4), layers, style)
        alpha = _alpha(image)
        assert alpha[:, -1].max() == 0

    def test_fractional_extrusion(self):
        """Test that the partial last extrusion copy stays on the canvas."""
        style = Style(font_family='TextStagTestMissingFont', effect_pad=0)
        layers = [Extrusion(params={'steps': 2.5, 'dx': 0, 'dy': 20, 'opacityPct': 100}), Fill()]
        alpha = _alpha(render_image(RenderRequest(text='A', padding=0), layers, style))
        assert alpha[-1, :].max() == 0
        # The faded copy is drawn, not cut away
        assert alpha[-20:, :].max() > 0

    def test_anisotropic_scale(self, test_style):
        """Test that every effect follows a stretched, squashed text block."""
        layers = [
            DropShadow(params={'opacityPct': 100}),
            OuterGlow(params={'sizePx': 20, 'dx': -10, 'opacityPct': 100}),
            Extrusion(params={'steps': 6.5, 'dx': 4, 'dy': 5}),
            Fill(),
            Stroke(params={'widthPx': 10}),
        ]
        request = RenderRequest(text='Ag', padding=0, scale_x=2, scale_y=0.5)
        alpha = _alpha(render_image(request, layers, test_style))
        assert _edges(alpha).max() == 0


class TestGradientSensitivity:
    """Changing the 0 % stop changes the output."""

    def test_first_stop_matters(self, test_style):
        """Test that only recoloring the 0 % stop changes pixels."""
        def render(first_color):
            gradient = GradientFill(params={'stops': [
                {'offsetPct': 0, 'color': first_color},
                {'offsetPct': 50, 'color': '#00FF00'},
                {'offsetPct': 100, 'color': '#0000FF'},
            ]})
            return np.asarray(render_image(RenderRequest(text='A'), [gradient], test_style))

        assert not np.array_equal(render('#FF0000'), render('#FFFF00'))

    def test_last_stop_matters(self, test_style):
        """Test the same for the 100 % stop."""
        def render(last_color):
            gradient = GradientFill(params={'angleDeg': 0, 'stops': [
                {'offsetPct': 0, 'color': '#FF0000'},
                {'offsetPct': 100, 'color': last_color},
            ]})
            return np.asarray(render_image(RenderRequest(text='A'), [gradient], test_style))

        assert not np.array_equal(render('#0000FF'), render('#00FFFF'))


class TestArc:
    """Tests for the arc warp inside a render."""

    def test_zero_arc_unchanged(self, test_style):
        """Test that arc 0 equals skipping the warp."""
        layers = [DropShadow(), GradientFill(), Stroke()]
        plain = np.asarray(render_image(RenderRequest(text='Arc'), layers, test_style))
        zero = np.asarray(render_image(RenderRequest(text='Arc', arc_pct=0), layers, test_style))
        assert np.array_equal(plain, zero)

    def test_arc_grows_height(self, test_style):
        """Test that bending adds rows but keeps the width."""
        layers = [Fill()]
        flat = render_image(RenderRequest(text='Arc text'), layers, test_style)
        bent = render_image(RenderRequest(text='Arc text', arc_pct=60), layers, test_style)
        assert bent.width == flat.width
        assert bent.height > flat.height

    def test_background_fills_grown_canvas(self, test_style):
        """Test that the background covers the rows added by the warp."""
        request = RenderRequest(text='Arc text', arc_pct=100, show_background=True, background_color='#102030')
        pixels = np.asarray(render_image(request, [Fill()], test_style))
        assert np.all(pixels[..., 3] == 255)
        assert tuple(pixels[0, 0]) == (16, 32, 48, 255)
        assert tuple(pixels[-1, -1]) == (16, 32, 48, 255)


class TestScale:
    """Export renders scale the preview."""

    @pytest.mark.parametrize("text", ['H', 'Hello', 'Mississippi', 'Arc text', 'Wy', 'Two\nlines'])
    def test_double_scale_doubles_size(self, test_style, text):
        """Test that scale 2 doubles width and height to the pixel."""
        layers = [DropShadow(), OuterGlow(), Extrusion(), Fill(), Stroke()]
        preview = render_image(RenderRequest(text=text, scale=1), layers, test_style)
        export = render_image(RenderRequest(text=text, scale=2), layers, test_style)
        assert abs(export.width - 2 * preview.width) <= 1
        assert abs(export.height - 2 * preview.height) <= 1

    def test_fractional_scale(self, test_style):
        """Test a non-integer export scale against the preview size."""
        layers = [OuterGlow(), Fill()]
        preview = render_image(RenderRequest(text='Mississippi', scale=1), layers, test_style)
        export = render_image(RenderRequest(text='Mississippi', scale=3.5), layers, test_style)
        assert abs(export.width - 3.5 * preview.width) <= 3.5
        assert abs(export.height - 3.5 * preview.height) <= 3.5


class TestBackground:
    """Tests for the optional background."""

    def test_background(self, test_style):
        """Test that the background is opaque everywhere."""
        request = RenderRequest(text='A', show_background=True)
        pixels = np.asarray(render_image(request, [Fill(params={'color': '#FFFFFF'})], test_style))
        assert np.all(pixels[..., 3] == 255)
        assert tuple(pixels[0, 0]) == (0x7D, 0x2E, 0xD7, 255)

    def test_no_background(self, test_style):
        """Test that corners stay transparent by default."""
        pixels = np.asarray(render_image(RenderRequest(text='A'), [Fill()], test_style))
        assert pixels[0, 0, 3] == 0


class TestAnchor:
    """Tests for center anchoring with offsets."""

    def test_center_anchor_with_offset(self, test_style):
        """Test that the offset moves centered content by offset x scale."""
        def ink_center(offset_x, scale):
            request = RenderRequest(
                text='H', anchor='center', target_width=400, target_height=300,
                offset_x=offset_x, scale=scale,
            )
            alpha = _alpha(render_image(request, [Fill()], test_style))
            left, _, right, _ = _ink_box(alpha, 127)
            return (left + right) / 2

        centered = ink_center(0, 1.0)
        assert abs(centered - 200) <= 3
        assert abs(ink_center(30, 1.0) - centered - 30) <= 1
        assert abs(ink_center(30, 2.0) - ink_center(0, 2.0) - 60) <= 1


def _line_bands(alpha):
    """(first row, last row, rightmost column, leftmost column) of each inked row band."""
    inked = (alpha > 0).any(axis=1)
    bands = []
    start = None
    for row, has_ink in enumerate(inked):
        if has_ink and start is None:
            start = row
        elif not has_ink and start is not None:
            bands.append((start, row - 1))
            start = None
    if start is not None:
        bands.append((start, len(inked) - 1))

    result = []
    for top, bottom in bands:
        cols = np.nonzero((alpha[top:bottom + 1] > 0).any(axis=0))[0]
        result.append((top, bottom, cols[-1], cols[0]))
    return result


class TestMultiline:
    """Tests for blocks of several lines."""

    @pytest.mark.parametrize("scale_y", [1.0, 0.5])
    def test_baselines_advance_by_line_height(self, test_style, scale_y):
        """Test that each line sits one line height below the previous one."""
        request = RenderRequest(text='I\nI\nI', font_size=100, padding=0, scale_y=scale_y)
        bands = _line_bands(_alpha(render_image(request, [Fill()], test_style)))
        assert len(bands) == 3
        line_height = 100 * test_style.line_height * scale_y
        for (_, previous_bottom, _, _), (_, bottom, _, _) in zip(bands, bands[1:]):
            assert abs(bottom - previous_bottom - line_height) <= 1

    def test_right_alignment(self, test_style):
        """Test that right-aligned lines share their right edge."""
        request = RenderRequest(text='I\nIIII', font_size=100, padding=0, alignment='right')
        bands = _line_bands(_alpha(render_image(request, [Fill()], test_style)))
        assert len(bands) == 2
        (_, _, right_1, left_1), (_, _, right_2, left_2) = bands
        assert abs(right_1 - right_2) <= 2
        # The short line starts further right
        assert left_1 - left_2 > 50

    def test_left_alignment(self, test_style):
        """Test that left-aligned lines share their left edge."""
        request = RenderRequest(text='I\nIIII', font_size=100, padding=0, alignment='left')
        bands = _line_bands(_alpha(render_image(request, [Fill()], test_style)))
        (_, _, right_1, left_1), (_, _, right_2, left_2) = bands
        assert abs(left_1 - left_2) <= 1
        assert right_2 - right_1 > 50

    def test_canvas_holds_every_line(self, test_style):
        """Test that the block height covers all lines plus padding."""
        request = RenderRequest(text='A\nB\nC', font_size=100, padding=0, scale_y=0.5)
        alpha = _alpha(render_image(request, [Fill(), Stroke()], test_style))
        assert _edges(alpha).max() == 0
        assert len(_line_bands(alpha)) == 3
