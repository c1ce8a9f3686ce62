"""
Outer Glow layer.

Creates a glow outside the glyph edges by:
1. Rendering a blurred, optionally offset halo of the glyphs on a scratch surface
2. Erasing the solid glyph shape from the halo (destination-out)
3. Compositing the isolated glow onto the main surface
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


class OuterGlowParams(EffectParams):
    value_ranges: ClassVar[Dict[str, Tuple[float, float]]] = {
        'opacity_pct': (0.0, 100.0),
        'size_px': (0.0, float('inf')),
    }

    color: str = Field(default='#6E00AF')
    opacity_pct: float = Field(default=55.0, alias='opacityPct')
    size_px: float = Field(default=14.0, alias='sizePx')
    dx: float = Field(default=0.0)
    dy: float = Field(default=8.0)


class OuterGlow(LayerEffect):
    """
    Outer glow around the text.

    Example:
        >>> from textstag.layer_effects import OuterGlow
        >>> layer = OuterGlow(params={'sizePx': 40, 'color': '#FFFF00'})
    """

    effect_type: ClassVar[str] = "outerGlow"
    display_name: ClassVar[str] = "Outer Glow"

    layer_type: Literal["outerGlow"] = Field(default="outerGlow", alias="type")
    params: OuterGlowParams = Field(default_factory=OuterGlowParams)

    def get_expansion(self, scale: float, scale_x: float, scale_y: float) -> Expansion:
        blur = self.params.size_px * scale * max(scale_x, scale_y)
        dx = self.params.dx * scale * scale_x
        dy = self.params.dy * scale * scale_y
        return Expansion.directional(blur, dx, dy)

    def paint(self, surface: 'Surface', placement: 'TextPlacement') -> None:
        glow = surface.create_scratch()
        if glow is None:
            raise SurfaceUnavailableError("Could not allocate a scratch surface for the outer glow")

        p = self.params
        dx = p.dx * placement.scale * placement.scale_x
        dy = p.dy * placement.scale * placement.scale_y
        blur = p.size_px * placement.scale

        halo = surface.glyph_mask(placement, dx=dx, dy=dy, blur_radius=blur / 2)
        glow.fill_mask(halo, hex_to_rgb(p.color), opacity_from_pct(p.opacity_pct))
        glow.erase(surface.glyph_mask(placement))

        surface.draw_surface(glow)

    def __repr__(self) -> str:
        return f"OuterGlow(size={self.params.size_px}, color={self.params.color})"
