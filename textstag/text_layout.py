"""
Text block measurement and placement.

Every layer draws the same glyphs at the same positions; this module computes
those positions once per render. Coordinates are device pixels unless noted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

from PIL import ImageFont

Alignment = Literal['left', 'center', 'right']
AnchorMode = Literal['topleft', 'center']

# Pillow anchors: horizontal part per alignment, vertical part = alphabetic baseline
PIL_ANCHORS = {'left': 'ls', 'center': 'ms', 'right': 'rs'}

ASCENT_FALLBACK = 0.8
DESCENT_FALLBACK = 0.2


@dataclass(frozen=True)
class TextMetrics:
    """Measured size of a text block."""
    width: float
    height: float
    ascent: float
    descent: float
    line_height: float

    def scaled(self, scale_x: float, scale_y: float) -> 'TextMetrics':
        return TextMetrics(
            width=self.width * scale_x,
            height=self.height * scale_y,
            ascent=self.ascent * scale_y,
            descent=self.descent * scale_y,
            line_height=self.line_height * scale_y,
        )


@dataclass(frozen=True)
class TextPlacement:
    """
    Where the glyphs go.

    ``anchor_x`` and ``baseline_y`` are the device position of the first line's
    alignment anchor; following lines move down by ``line_height``. The block
    rectangle is the measured text block, used by gradients.
    """
    lines: tuple[str, ...]
    font: ImageFont.FreeTypeFont
    alignment: Alignment
    anchor_x: float
    baseline_y: float
    line_height: float
    block_left: float
    block_top: float
    block_width: float
    block_height: float
    scale: float = 1.0
    scale_x: float = 1.0
    scale_y: float = 1.0

    @property
    def pil_anchor(self) -> str:
        return PIL_ANCHORS.get(self.alignment, 'ms')

    def line_positions(self, dx: float = 0.0, dy: float = 0.0) -> list[tuple[str, float, float]]:
        """``(line, x, y)`` in the unscaled drawing space, shifted by a device offset."""
        return [
            (
                line,
                (self.anchor_x + dx) / self.scale_x,
                (self.baseline_y + i * self.line_height + dy) / self.scale_y,
            )
            for i, line in enumerate(self.lines)
        ]


def split_lines(text: str | None) -> list[str]:
    """Split on newlines (CRLF normalized). Always at least one line."""
    lines = (text or '').replace('\r\n', '\n').split('\n')
    return lines or ['']


def measure_text_block(
    font: ImageFont.FreeTypeFont,
    lines: Sequence[str],
    font_size_px: float,
    line_height_multiplier: float,
) -> TextMetrics:
    """
    Measure a block of lines in unscaled pixels.

    Width is the widest advance. Ascent and descent are the ink extents of the
    first line above and below the baseline; fonts that cannot report them
    use 0.8 / 0.2 of the font size.
    """
    max_width = 0.0
    for line in lines:
        max_width = max(max_width, float(font.getlength(line)))

    try:
        _, top, _, bottom = font.getbbox(lines[0] if lines and lines[0] else ' ', anchor='ls')
        ascent = float(-top)
        descent = float(bottom)
    except (TypeError, ValueError, AttributeError):
        ascent = font_size_px * ASCENT_FALLBACK
        descent = font_size_px * DESCENT_FALLBACK

    line_height = font_size_px * line_height_multiplier
    height = ascent + descent + (len(lines) - 1) * line_height
    return TextMetrics(
        width=max_width,
        height=height,
        ascent=ascent,
        descent=descent,
        line_height=line_height,
    )


def align_x(alignment: str, x_left: float, block_width: float) -> float:
    """Anchor x shared by every layer, from the block's left edge."""
    if alignment == 'left':
        return x_left
    if alignment == 'right':
        return x_left + block_width
    return x_left + block_width / 2


def layout_text(
    lines: Sequence[str],
    font: ImageFont.FreeTypeFont,
    metrics: TextMetrics,
    *,
    canvas_width: int,
    canvas_height: int,
    pad: float,
    extra_left: float,
    extra_top: float,
    alignment: str,
    anchor: str,
    shift_x: float,
    shift_y: float,
    scale: float,
    scale_x: float,
    scale_y: float,
) -> TextPlacement:
    """
    Place a measured block on the canvas.

    ``topleft`` insets the block by the padding plus the left/top effect
    margins; ``center`` centers it in the canvas. The pixel shift applies to
    both.
    """
    if anchor == 'center':
        x_left = (canvas_width - metrics.width) / 2 + shift_x
        baseline_y = (canvas_height - metrics.height) / 2 + metrics.ascent + shift_y
    else:
        x_left = pad + extra_left + shift_x
        baseline_y = pad + extra_top + metrics.ascent + shift_y

    if alignment not in PIL_ANCHORS:
        alignment = 'center'

    return TextPlacement(
        lines=tuple(lines),
        font=font,
        alignment=alignment,
        anchor_x=align_x(alignment, x_left, metrics.width),
        baseline_y=baseline_y,
        line_height=metrics.line_height,
        block_left=x_left,
        block_top=baseline_y - metrics.ascent,
        block_width=metrics.width,
        block_height=metrics.height,
        scale=scale,
        scale_x=scale_x,
        scale_y=scale_y,
    )
