"""
TextStag Layers

One visual effect per layer, applied to a block of text.

Example:
    >>> from textstag.layer_effects import LayerEffect, Stroke
    >>> stroke = Stroke(params={'widthPx': 6})
    >>> data = stroke.to_dict()
    >>> LayerEffect.from_dict(data).params.width_px
    6.0

Supported Layers:
    - Fill: Solid color face
    - GradientFill: Linear gradient face with editable stops
    - DropShadow: Blurred, offset shadow behind the text
    - OuterGlow: Halo outside the glyph edges
    - Stroke: Outline ring around the glyphs
    - Extrusion: Stacked trailing copies for a 3D look
"""

from .base import EffectParams, Expansion, LayerEffect, UnknownLayer
from .fill import Fill, FillParams
from .gradient_fill import GradientFill, GradientFillParams
from .drop_shadow import DropShadow, DropShadowParams
from .outer_glow import OuterGlow, OuterGlowParams
from .stroke import Stroke, StrokeParams
from .extrusion import Extrusion, ExtrusionParams

__all__ = [
    # Base classes
    "LayerEffect",
    "EffectParams",
    "Expansion",
    "UnknownLayer",
    # Layers
    "Fill",
    "GradientFill",
    "DropShadow",
    "OuterGlow",
    "Stroke",
    "Extrusion",
    # Params
    "FillParams",
    "GradientFillParams",
    "DropShadowParams",
    "OuterGlowParams",
    "StrokeParams",
    "ExtrusionParams",
]
