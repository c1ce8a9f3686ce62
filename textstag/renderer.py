"""
Render entry point.

Orchestrates one render of a layer stack onto a surface:

1. Measure the text block with the style's font
2. Resolve the draw stack and the margins its effects need
3. Size the surface (auto-fit, or a fixed target box) and place the text
4. Paint every layer in draw order
5. Optionally bend the result onto an arc

The same path serves the live preview (scale 1) and exports (any scale). A
render holds no state between calls; every call allocates its own scratch
surfaces.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Literal, Mapping, Optional, Union

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .arc_warp import arc_warp
from .bounding import compute_canvas_size, compute_margins, content_padding
from .color import coerce_number, hex_to_rgb, is_hex_color
from .config import Style, settings
from .exceptions import SurfaceUnavailableError
from .font_registry import FontRegistry
from .layer_effects import LayerEffect
from .render_stack import build_render_stack
from .surface import Surface
from .text_layout import layout_text, measure_text_block, split_lines

logger = logging.getLogger(__name__)

LayerLike = Union[LayerEffect, Mapping[str, Any]]


class RenderRequest(BaseModel):
    """
    Everything a single render needs besides the layers and the style.

    Immutable. Malformed numbers fall back to their defaults rather than
    failing validation.

    Example:
        >>> request = RenderRequest(text="Hello", font_size=96, scale=2)
        >>> request.scale
        2.0
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(default='')
    font_size: float = Field(default_factory=lambda: settings.DEFAULT_FONT_SIZE)
    scale_x: float = Field(default=1.0)
    scale_y: float = Field(default=1.0)
    alignment: Literal['left', 'center', 'right'] = Field(default='center')
    padding: float = Field(default_factory=lambda: settings.DEFAULT_PADDING)
    arc_pct: float = Field(default=0.0)
    scale: float = Field(default=1.0)
    target_width: Optional[float] = Field(default=None)
    target_height: Optional[float] = Field(default=None)
    anchor: Literal['topleft', 'center'] = Field(default='topleft')
    offset_x: float = Field(default=0.0)
    offset_y: float = Field(default=0.0)
    show_background: bool = Field(default=False)
    background_color: str = Field(default_factory=lambda: settings.BACKGROUND_COLOR)

    @field_validator('text', mode='before')
    @classmethod
    def _text(cls, value: Any) -> str:
        return '' if value is None else str(value)

    @field_validator('font_size', mode='before')
    @classmethod
    def _font_size(cls, value: Any) -> float:
        size = coerce_number(value, settings.DEFAULT_FONT_SIZE)
        return size if size > 0 else settings.DEFAULT_FONT_SIZE

    @field_validator('scale_x', 'scale_y', 'scale', mode='before')
    @classmethod
    def _positive_factor(cls, value: Any) -> float:
        factor = coerce_number(value, 1.0)
        return factor if factor > 0 else 1.0

    @field_validator('padding', 'offset_x', 'offset_y', 'arc_pct', mode='before')
    @classmethod
    def _number(cls, value: Any) -> float:
        return coerce_number(value, 0.0)

    @field_validator('target_width', 'target_height', mode='before')
    @classmethod
    def _target(cls, value: Any) -> Optional[float]:
        if value is None:
            return None
        number = coerce_number(value, math.nan)
        return None if math.isnan(number) else number

    @field_validator('alignment', mode='before')
    @classmethod
    def _alignment(cls, value: Any) -> str:
        return value if value in ('left', 'right') else 'center'

    @field_validator('anchor', mode='before')
    @classmethod
    def _anchor(cls, value: Any) -> str:
        return 'center' if value == 'center' else 'topleft'

    @field_validator('background_color', mode='before')
    @classmethod
    def _background_color(cls, value: Any) -> str:
        return value.strip() if is_hex_color(value) else settings.BACKGROUND_COLOR


def _as_layers(layers: Optional[Iterable[LayerLike]]) -> list[LayerEffect]:
    result = []
    for layer in layers or []:
        if isinstance(layer, LayerEffect):
            result.append(layer)
        elif isinstance(layer, Mapping):
            result.append(LayerEffect.from_dict(dict(layer)))
    return result


def render_to_surface(
    surface: Optional[Surface],
    request: RenderRequest,
    layers: Optional[Iterable[LayerLike]],
    style: Optional[Style] = None,
) -> tuple[int, int]:
    """
    Render ``layers`` onto ``surface``.

    The surface is resized (and thereby cleared) to the final canvas size.

    :param surface: Target surface
    :param request: Text, sizes and placement of this render
    :param layers: Layer stack in stack order (models or their dict form)
    :param style: Text style, the configured one if omitted
    :return: Final pixel width and height
    :raises SurfaceUnavailableError: If there is no surface to draw on
    :raises FontNotReadyError: If no font at all can be loaded
    """
    if surface is None:
        raise SurfaceUnavailableError("No surface to render onto")

    style = style or settings.style()
    FontRegistry.ensure_ready(style)

    sx, sy, scale = request.scale_x, request.scale_y, request.scale

    lines = split_lines(request.text)
    # Measured once at the unscaled size; hinted advances do not scale linearly
    measure_font = FontRegistry.resolve(style, request.font_size)
    metrics = measure_text_block(measure_font, lines, request.font_size, style.line_height)
    metrics = metrics.scaled(sx * scale, sy * scale)
    font = FontRegistry.resolve(style, request.font_size * scale)

    pad = content_padding(request.padding, style.effect_pad, scale)
    stack = build_render_stack(_as_layers(layers))
    margins = compute_margins(stack.draw_stack, scale, sx, sy)

    width, height = compute_canvas_size(
        metrics,
        margins,
        pad,
        scale,
        target_width=request.target_width,
        target_height=request.target_height,
    )
    surface.resize(width, height)
    logger.debug(f"Rendering {len(lines)} line(s) at {width}x{height}, draw stack {stack.types()}")

    background = hex_to_rgb(request.background_color)
    if request.show_background:
        surface.fill_rect(background)

    placement = layout_text(
        lines,
        font,
        metrics,
        canvas_width=surface.width,
        canvas_height=surface.height,
        pad=pad,
        extra_left=margins.left,
        extra_top=margins.top,
        alignment=request.alignment,
        anchor=request.anchor,
        shift_x=request.offset_x * scale,
        shift_y=request.offset_y * scale,
        scale=scale,
        scale_x=sx,
        scale_y=sy,
    )

    for layer in stack.draw_stack:
        layer.paint(surface, placement)

    if request.arc_pct > 0:
        surface.put_pixels(arc_warp(surface.pixels, request.arc_pct))
        if request.show_background:
            # Rows added by the warp start out transparent
            surface.fill_behind(background)

    return surface.size


def render_image(
    request: RenderRequest,
    layers: Optional[Iterable[LayerLike]],
    style: Optional[Style] = None,
) -> Image.Image:
    """
    Render into a fresh surface and return it as an RGBA image.

    Example:
        >>> from textstag.layer_effects import Fill
        >>> image = render_image(RenderRequest(text="A"), [Fill()])
        >>> image.mode
        'RGBA'
    """
    surface = Surface()
    render_to_surface(surface, request, layers, style)
    return surface.to_pil()
