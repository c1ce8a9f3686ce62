"""
Pytest fixtures for TextStag tests

The tests never depend on installed fonts: the style names a family that does
not exist, so the font registry falls back to Pillow's bundled default font.
"""

import pytest

from textstag.config import Style
from textstag.font_registry import FontRegistry
from textstag.text_layout import layout_text, measure_text_block, split_lines

TEST_FONT_FAMILY = "TextStagTestMissingFont"


@pytest.fixture
def test_style() -> Style:
    """Style with the default effect pad and a font that falls back to Pillow's default."""
    return Style(font_family=TEST_FONT_FAMILY)


@pytest.fixture
def make_placement(test_style):
    """
    Factory for glyph placements on a canvas of a given size.

    :return: Callable(text, font_size, width, height, **layout overrides)
    """

    def factory(text="A", font_size=100, width=300, height=240, **kwargs):
        lines = split_lines(text)
        font = FontRegistry.resolve(test_style, font_size)
        scale_x = kwargs.pop("scale_x", 1.0)
        scale_y = kwargs.pop("scale_y", 1.0)
        metrics = measure_text_block(font, lines, font_size, test_style.line_height).scaled(scale_x, scale_y)
        options = dict(
            pad=0.0,
            extra_left=0.0,
            extra_top=0.0,
            alignment="center",
            anchor="center",
            shift_x=0.0,
            shift_y=0.0,
            scale=1.0,
        )
        options.update(kwargs)
        return layout_text(
            lines,
            font,
            metrics,
            canvas_width=width,
            canvas_height=height,
            scale_x=scale_x,
            scale_y=scale_y,
            **options,
        )

    return factory
