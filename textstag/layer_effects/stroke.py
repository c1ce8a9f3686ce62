"""
Stroke layer.

Outlines the text. Same isolate-then-composite technique as the outer glow:
the outline is drawn on a scratch surface, the solid glyph shape is erased
from it so only the ring outside the glyphs remains, and the ring is
composited on top of everything drawn before.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, Dict, Literal, Tuple

from pydantic import Field

from ..color import hex_to_rgb, opacity_from_pct
from ..exceptions import SurfaceUnavailableError
from .base import EffectParams, Expansion, LayerEffect

if TYPE_CHECKING:
    from ..surface import Surface
    from ..text_layout import TextPlacement


class StrokeParams(EffectParams):
    value_ranges: ClassVar[Dict[str, Tuple[float, float]]] = {
        'opacity_pct': (0.0, 100.0),
        'width_px': (0.0, 200.0),
    }

    color: str = Field(default='#000000')
    opacity_pct: float = Field(default=100.0, alias='opacityPct')
    width_px: float = Field(default=4.0, alias='widthPx')


class Stroke(LayerEffect):
    """
    Outline around the text.

    Example:
        >>> from textstag.layer_effects import Stroke
        >>> layer = Stroke(params={'widthPx': 6, 'color': '#FFFFFF'})
    """

    effect_type: ClassVar[str] = "stroke"
    display_name: ClassVar[str] = "Stroke"

    layer_type: Literal["stroke"] = Field(default="stroke", alias="type")
    params: StrokeParams = Field(default_factory=StrokeParams)

    def get_expansion(self, scale: float, scale_x: float, scale_y: float) -> Expansion:
        return Expansion.uniform(self.params.width_px * scale * max(scale_x, scale_y))

    def paint(self, surface: 'Surface', placement: 'TextPlacement') -> None:
        width = self.params.width_px * placement.scale
        if width <= 0:
            return

        ring = surface.create_scratch()
        if ring is None:
            raise SurfaceUnavailableError("Could not allocate a scratch surface for the stroke")

        ring.fill_mask(
            surface.glyph_mask(placement, stroke_width=width),
            hex_to_rgb(self.params.color),
            opacity_from_pct(self.params.opacity_pct),
        )
        ring.erase(surface.glyph_mask(placement))

        surface.draw_surface(ring)

    def __repr__(self) -> str:
        return f"Stroke(width={self.params.width_px}, color={self.params.color})"
