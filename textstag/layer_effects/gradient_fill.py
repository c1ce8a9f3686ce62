"""
Gradient Fill layer.

Fills the glyph shapes with a linear color ramp. The ramp axis points along
``angleDeg`` (0 = +x, 90 = +y, i.e. downwards), and its ends are the extreme
projections of the text block's four corners onto that axis, so the first stop
touches the block on one side and the last stop on the other.
"""

from __future__ import annotations

import copy
import math
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Literal, Optional

import numpy as np
from pydantic import Field, field_validator, model_validator

from ..color import coerce_number, hex_to_rgb
from ..gradient_stops import DEFAULT_STOPS, normalize_gradient_stops
from .base import EffectParams, Expansion, LayerEffect

if TYPE_CHECKING:
    from ..surface import Surface
    from ..text_layout import TextPlacement

# Smallest projection range; keeps the ramp defined for degenerate blocks
MIN_RAMP_LENGTH = 1e-6

LEGACY_KEYS = ('topColor', 'midColor', 'bottomColor', 'midpointPct')


class GradientFillParams(EffectParams):
    # Stops stored as dicts: [{"offsetPct": 0, "color": "#RRGGBB"}, ...]
    stops: Optional[List[Dict[str, Any]]] = Field(default=None)
    angle_deg: float = Field(default=90.0, alias='angleDeg')

    # Legacy three-color form, only read when there are no stops
    top_color: Optional[str] = Field(default=None, alias='topColor')
    mid_color: Optional[str] = Field(default=None, alias='midColor')
    bottom_color: Optional[str] = Field(default=None, alias='bottomColor')
    midpoint_pct: Optional[float] = Field(default=None, alias='midpointPct')

    @field_validator('stops', mode='before')
    @classmethod
    def _stop_dicts(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return None
        return [dict(stop) for stop in value if isinstance(stop, dict)]

    @field_validator('midpoint_pct', mode='before')
    @classmethod
    def _midpoint(cls, value: Any) -> Optional[float]:
        number = coerce_number(value, math.nan)
        return None if math.isnan(number) else number

    @model_validator(mode='before')
    @classmethod
    def _default_stops(cls, data: Any) -> Any:
        """New gradients get the default stops; legacy documents keep their colors."""
        if isinstance(data, dict) and data.get('stops') is None:
            if not any(key in data for key in LEGACY_KEYS):
                data = {**data, 'stops': copy.deepcopy(DEFAULT_STOPS)}
        return data


class GradientFill(LayerEffect):
    """
    Linear gradient fill of the text.

    Example:
        >>> from textstag.layer_effects import GradientFill
        >>> layer = GradientFill(params={
        ...     'stops': [
        ...         {'offsetPct': 0, 'color': '#FF0000'},
        ...         {'offsetPct': 100, 'color': '#0000FF'},
        ...     ],
        ...     'angleDeg': 90,
        ... })
    """

    effect_type: ClassVar[str] = "gradientFill"
    display_name: ClassVar[str] = "Gradient Fill"

    layer_type: Literal["gradientFill"] = Field(default="gradientFill", alias="type")
    params: GradientFillParams = Field(default_factory=GradientFillParams)

    def get_expansion(self, scale: float, scale_x: float, scale_y: float) -> Expansion:
        """A fill stays inside the glyphs."""
        return Expansion()

    def ramp_endpoints(self, placement: 'TextPlacement') -> tuple[float, float, float, float]:
        """
        Axis direction and projection range of the ramp.

        Returns:
            (vx, vy, start, length) with ``length`` >= MIN_RAMP_LENGTH
        """
        angle = math.radians(self.params.angle_deg)
        vx, vy = math.cos(angle), math.sin(angle)

        left = placement.block_left
        right = left + placement.block_width
        top = placement.block_top
        bottom = top + placement.block_height
        projections = [x * vx + y * vy for x in (left, right) for y in (top, bottom)]

        start = min(projections)
        length = max(MIN_RAMP_LENGTH, max(projections) - start)
        return vx, vy, start, length

    def color_field(self, placement: 'TextPlacement', width: int, height: int) -> np.ndarray:
        """Ramp colors at every pixel center, shape (H, W, 3), straight 0..1."""
        stops = normalize_gradient_stops(self.params.model_dump(by_alias=True, exclude_none=True))
        vx, vy, start, length = self.ramp_endpoints(placement)

        xs = np.arange(width, dtype=np.float64) + 0.5
        ys = np.arange(height, dtype=np.float64) + 0.5
        t = (xs[None, :] * vx + ys[:, None] * vy - start) / length

        # Equal offsets become a hard edge; np.interp needs increasing positions
        offsets = np.array([s.offset for s in stops]) + np.arange(len(stops)) * 1e-9
        colors = np.array([hex_to_rgb(s.color) for s in stops], dtype=np.float64) / 255.0
        field = np.stack([np.interp(t, offsets, colors[:, c]) for c in range(3)], axis=-1)
        return field.astype(np.float32)

    def paint(self, surface: 'Surface', placement: 'TextPlacement') -> None:
        field = self.color_field(placement, surface.width, surface.height)
        surface.fill_mask_with(surface.glyph_mask(placement), field)

    def __repr__(self) -> str:
        return f"GradientFill(angle={self.params.angle_deg}, enabled={self.enabled})"
