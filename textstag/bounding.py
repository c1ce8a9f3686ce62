"""
Canvas bounds.

Every effect reports how far its pixels reach beyond the text block. The
margins of all layers combine per side by maximum: overlapping effects share
the same space instead of stacking. The canvas then adds the user padding and
the style's effect pad on every side, so nothing an effect draws is clipped.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Tuple

from .layer_effects import Expansion, LayerEffect
from .text_layout import TextMetrics


def compute_margins(
    draw_stack: Iterable[LayerEffect],
    scale: float,
    scale_x: float = 1.0,
    scale_y: float = 1.0,
) -> Expansion:
    """
    Extra space each side of the text block needs, in device pixels.

    :param draw_stack: Layers that will be drawn
    :param scale: Device/export scale multiplier
    :param scale_x: Horizontal text scale
    :param scale_y: Vertical text scale
    :return: Non-negative margins per side
    """
    margins = Expansion()
    for layer in draw_stack:
        margins = margins.merge(layer.get_expansion(scale, scale_x, scale_y))
    return margins


def content_padding(padding: float, effect_pad: float, scale: float) -> float:
    """User padding plus the effect pad, scaled."""
    return (padding + effect_pad) * scale


def compute_canvas_size(
    metrics: TextMetrics,
    margins: Expansion,
    pad: float,
    scale: float,
    target_width: Optional[float] = None,
    target_height: Optional[float] = None,
) -> Tuple[int, int]:
    """
    Pixel size of the canvas.

    Auto-fit size is the scaled text block plus ``pad`` twice plus the
    margins. A target width or height (in unscaled pixels) replaces the
    auto-fit value on its axis. Dimensions are floored and at least 1.
    """
    width = metrics.width + pad * 2 + margins.left + margins.right
    height = metrics.height + pad * 2 + margins.top + margins.bottom

    if target_width is not None:
        width = target_width * scale
    if target_height is not None:
        height = target_height * scale

    return max(1, int(math.floor(width))), max(1, int(math.floor(height)))
