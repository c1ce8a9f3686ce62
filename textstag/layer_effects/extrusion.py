"""
Extrusion layer.

Fakes depth by stacking solid copies of the glyphs behind the face:
- ``floor(steps)`` copies at offsets (dx, dy) x 1..floor(steps)
- If ``steps`` has a fractional part, one more copy at the next offset whose
  opacity is scaled by that fraction, so non-integer step counts fade in
  smoothly
- Every copy can be blurred (``blurPx``)
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, ClassVar, Dict, List, Literal, Tuple

from pydantic import Field

from ..color import hex_to_rgb, opacity_from_pct
from .base import EffectParams, Expansion, LayerEffect

if TYPE_CHECKING:
    from ..surface import Surface
    from ..text_layout import TextPlacement


class ExtrusionParams(EffectParams):
    value_ranges: ClassVar[Dict[str, Tuple[float, float]]] = {
        'opacity_pct': (0.0, 100.0),
        'steps': (0.0, 200.0),
        'blur_px': (0.0, 50.0),
    }

    color: str = Field(default='#DE5221')
    opacity_pct: float = Field(default=96.0, alias='opacityPct')
    steps: float = Field(default=7.0)
    dx: float = Field(default=0.0)
    dy: float = Field(default=3.0)
    blur_px: float = Field(default=0.0, alias='blurPx')


class Extrusion(LayerEffect):
    """
    Extruded trail behind the text.

    Example:
        >>> from textstag.layer_effects import Extrusion
        >>> layer = Extrusion(params={'steps': 2.5, 'dx': 0, 'dy': 3})
        >>> layer.copy_offsets(1.0, 1.0, 1.0)
        [(0.0, 3.0, 1.0), (0.0, 6.0, 1.0), (0.0, 9.0, 0.5)]
    """

    effect_type: ClassVar[str] = "extrusion"
    display_name: ClassVar[str] = "Extrusion"

    layer_type: Literal["extrusion"] = Field(default="extrusion", alias="type")
    params: ExtrusionParams = Field(default_factory=ExtrusionParams)

    def copy_offsets(self, scale: float, scale_x: float, scale_y: float) -> List[Tuple[float, float, float]]:
        """
        The copies to draw, back to front of the trail.

        Returns:
            List of (dx, dy, opacity factor), offsets in device pixels
        """
        steps = self.params.steps
        full_steps = int(math.floor(steps))
        fraction = steps - full_steps
        step_x = self.params.dx * scale * scale_x
        step_y = self.params.dy * scale * scale_y

        copies = [(step_x * step, step_y * step, 1.0) for step in range(1, full_steps + 1)]
        if fraction > 0:
            step = full_steps + 1
            copies.append((step_x * step, step_y * step, fraction))
        return copies

    def get_expansion(self, scale: float, scale_x: float, scale_y: float) -> Expansion:
        """
        Only the trailing side grows; the leading side gets nothing.

        A fractional step count still draws a full extra copy, so the trail
        reaches ceil(steps) offsets.
        """
        reach = math.ceil(self.params.steps)
        dx = self.params.dx * reach * scale * scale_x
        dy = self.params.dy * reach * scale * scale_y
        return Expansion.directional(0.0, dx, dy)

    def paint(self, surface: 'Surface', placement: 'TextPlacement') -> None:
        rgb = hex_to_rgb(self.params.color)
        opacity = opacity_from_pct(self.params.opacity_pct)
        blur = self.params.blur_px * placement.scale

        for dx, dy, factor in self.copy_offsets(placement.scale, placement.scale_x, placement.scale_y):
            mask = surface.glyph_mask(placement, dx=dx, dy=dy, blur_radius=blur)
            surface.fill_mask(mask, rgb, opacity * factor)

    def __repr__(self) -> str:
        return f"Extrusion(steps={self.params.steps}, dx={self.params.dx}, dy={self.params.dy})"
