"""
Draw order of a layer stack.

The order is fixed, independent of how the user arranged the layers:

1. Effects drawn behind the face (drop shadow, outer glow, extrusion), in
   stack order
2. The single base fill: the last enabled gradient fill, else the last
   enabled solid fill, else nothing
3. Layers of types this version does not know, in stack order
4. Strokes, in stack order, so the outline sits on top of the face
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .layer_effects import LayerEffect

BACKGROUND_EFFECT_TYPES = ('dropShadow', 'outerGlow', 'extrusion')
GRADIENT_FILL_TYPE = 'gradientFill'
FILL_TYPE = 'fill'
STROKE_TYPE = 'stroke'

KNOWN_TYPES = BACKGROUND_EFFECT_TYPES + (GRADIENT_FILL_TYPE, FILL_TYPE, STROKE_TYPE)


@dataclass(frozen=True)
class RenderStack:
    """Enabled layers in stack order, and the layers to draw in draw order."""
    enabled_layers: tuple[LayerEffect, ...]
    draw_stack: tuple[LayerEffect, ...]

    @property
    def base_fill(self) -> Optional[LayerEffect]:
        for layer in self.draw_stack:
            if layer.layer_type in (GRADIENT_FILL_TYPE, FILL_TYPE):
                return layer
        return None

    def types(self) -> List[str]:
        return [layer.layer_type for layer in self.draw_stack]


def _last(layers: Sequence[LayerEffect]) -> Optional[LayerEffect]:
    return layers[-1] if layers else None


def build_render_stack(layers: Optional[Iterable[LayerEffect]]) -> RenderStack:
    """
    Resolve the draw order of ``layers``.

    Disabled layers are left out; the model itself is not touched. Zero base
    fills is a valid stack that simply draws no face.

    :param layers: Layers in stack order
    :return: The enabled layers and the draw stack
    """
    enabled = [layer for layer in (layers or []) if layer is not None and layer.enabled]

    effects = [layer for layer in enabled if layer.layer_type in BACKGROUND_EFFECT_TYPES]
    gradient_fills = [layer for layer in enabled if layer.layer_type == GRADIENT_FILL_TYPE]
    fills = [layer for layer in enabled if layer.layer_type == FILL_TYPE]
    strokes = [layer for layer in enabled if layer.layer_type == STROKE_TYPE]
    other = [layer for layer in enabled if layer.layer_type not in KNOWN_TYPES]

    base_fill = _last(gradient_fills)
    if base_fill is None:
        base_fill = _last(fills)
    base = [base_fill] if base_fill is not None else []

    return RenderStack(
        enabled_layers=tuple(enabled),
        draw_stack=tuple(effects + base + other + strokes),
    )
