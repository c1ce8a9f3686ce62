"""
Fill layer.

Flat solid color on the glyph shapes. No blur, no blend mode.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, Literal

from pydantic import Field

from ..color import hex_to_rgb
from .base import EffectParams, Expansion, LayerEffect

if TYPE_CHECKING:
    from ..surface import Surface
    from ..text_layout import TextPlacement


class FillParams(EffectParams):
    color: str = Field(default='#000000')


class Fill(LayerEffect):
    """
    Solid fill of the text.

    Example:
        >>> from textstag.layer_effects import Fill
        >>> layer = Fill(params={'color': '#FF0000'})
    """

    effect_type: ClassVar[str] = "fill"
    display_name: ClassVar[str] = "Fill"

    layer_type: Literal["fill"] = Field(default="fill", alias="type")
    params: FillParams = Field(default_factory=FillParams)

    def get_expansion(self, scale: float, scale_x: float, scale_y: float) -> Expansion:
        """A fill stays inside the glyphs."""
        return Expansion()

    def paint(self, surface: 'Surface', placement: 'TextPlacement') -> None:
        surface.fill_mask(surface.glyph_mask(placement), hex_to_rgb(self.params.color))

    def __repr__(self) -> str:
        return f"Fill(color={self.params.color}, enabled={self.enabled})"
