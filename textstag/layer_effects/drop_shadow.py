"""
Drop Shadow layer.

Creates a shadow behind the text by:
1. Rendering the glyph coverage at the shadow offset
2. Blurring it with a Gaussian kernel (sigma = sizePx / 2)
3. Optionally thickening the core with an unblurred outline of the glyphs
4. Colorizing with the shadow color and opacity
5. Compositing with normal or multiply blending

The fill drawn later sits on top of the shadow.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Literal, Tuple

from pydantic import Field, field_validator

from ..color import hex_to_rgb, opacity_from_pct
from ..exceptions import SurfaceUnavailableError
from ..surface import MULTIPLY, SOURCE_OVER
from .base import EffectParams, Expansion, LayerEffect

if TYPE_CHECKING:
    from ..surface import Surface
    from ..text_layout import TextPlacement

# Spread lines thinner than this are not drawn
MIN_SPREAD_PX = 0.1


class DropShadowParams(EffectParams):
    value_ranges: ClassVar[Dict[str, Tuple[float, float]]] = {
        'opacity_pct': (0.0, 100.0),
        'spread_pct': (0.0, 100.0),
        'size_px': (0.0, math.inf),
        'distance_px': (0.0, math.inf),
    }

    blend: Literal['normal', 'multiply'] = Field(default='normal')
    color: str = Field(default='#000000')
    opacity_pct: float = Field(default=19.0, alias='opacityPct')
    angle_deg: float = Field(default=66.0, alias='angleDeg')
    distance_px: float = Field(default=7.0, alias='distancePx')
    spread_pct: float = Field(default=15.0, alias='spreadPct')
    size_px: float = Field(default=10.0, alias='sizePx')

    @field_validator('blend', mode='before')
    @classmethod
    def _normalize_blend(cls, value: Any) -> str:
        return 'multiply' if value == 'multiply' else 'normal'


class DropShadow(LayerEffect):
    """
    Drop shadow of the text.

    Example:
        >>> from textstag.layer_effects import DropShadow
        >>> layer = DropShadow(params={'sizePx': 12, 'distancePx': 8, 'angleDeg': 90})
    """

    effect_type: ClassVar[str] = "dropShadow"
    display_name: ClassVar[str] = "Drop Shadow"

    layer_type: Literal["dropShadow"] = Field(default="dropShadow", alias="type")
    params: DropShadowParams = Field(default_factory=DropShadowParams)

    def offset(self, scale: float, scale_x: float, scale_y: float) -> Tuple[float, float]:
        """Shadow offset in device pixels."""
        distance = self.params.distance_px * scale
        angle = math.radians(self.params.angle_deg)
        return distance * math.cos(angle) * scale_x, distance * math.sin(angle) * scale_y

    def spread_width(self, scale: float) -> float:
        """Outline width that thickens the shadow core, unscaled pixels."""
        return (self.params.spread_pct / 100.0) * self.params.size_px * 2 * scale

    def get_expansion(self, scale: float, scale_x: float, scale_y: float) -> Expansion:
        """Blur on every side, the offset on the side the shadow travels to, spread everywhere."""
        blur_scale = max(scale_x, scale_y)
        blur = self.params.size_px * scale * blur_scale
        dx, dy = self.offset(scale, scale_x, scale_y)
        spread = self.spread_width(scale) * blur_scale
        return Expansion.directional(blur, dx, dy).merge(Expansion.uniform(spread))

    def paint(self, surface: 'Surface', placement: 'TextPlacement') -> None:
        shadow = surface.create_scratch()
        if shadow is None:
            raise SurfaceUnavailableError("Could not allocate a scratch surface for the drop shadow")

        p = self.params
        rgb = hex_to_rgb(p.color)
        opacity = opacity_from_pct(p.opacity_pct)
        dx, dy = self.offset(placement.scale, placement.scale_x, placement.scale_y)
        blur = p.size_px * placement.scale

        shadow.fill_mask(
            surface.glyph_mask(placement, dx=dx, dy=dy, blur_radius=blur / 2),
            rgb,
            opacity,
        )

        spread = self.spread_width(placement.scale)
        if spread > MIN_SPREAD_PX:
            shadow.fill_mask(
                surface.glyph_mask(placement, dx=dx, dy=dy, stroke_width=spread),
                rgb,
                opacity,
            )

        surface.draw_surface(shadow, MULTIPLY if p.blend == 'multiply' else SOURCE_OVER)

    def __repr__(self) -> str:
        return (
            f"DropShadow(size={self.params.size_px}, distance={self.params.distance_px}, "
            f"angle={self.params.angle_deg}, blend={self.params.blend!r})"
        )
