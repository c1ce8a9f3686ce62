"""
TextStag - Styled text rendering: layered fills, shadows, glows, strokes,
extrusion and arc warps, exported as raster images at any scale
"""

from .config import Settings, Style, settings
from .exceptions import ConfigError, FontNotReadyError, SurfaceUnavailableError, TextStagError
from .layer_effects import (
    DropShadow,
    Expansion,
    Extrusion,
    Fill,
    GradientFill,
    LayerEffect,
    OuterGlow,
    Stroke,
    UnknownLayer,
)
from .gradient_stops import NormalizedStop, normalize_gradient_stops
from .render_stack import RenderStack, build_render_stack
from .layer_stack import LayerStack, create_layer
from .bounding import compute_canvas_size, compute_margins
from .text_layout import TextMetrics, TextPlacement, layout_text, measure_text_block
from .surface import Surface
from .arc_warp import arc_warp
from .font_registry import FontRegistry
from .renderer import RenderRequest, render_image, render_to_surface
from .serialize import ImportedConfig, export_config, import_config

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "Settings",
    "Style",
    "settings",
    # Errors
    "TextStagError",
    "SurfaceUnavailableError",
    "FontNotReadyError",
    "ConfigError",
    # Layers
    "LayerEffect",
    "Expansion",
    "Fill",
    "GradientFill",
    "DropShadow",
    "OuterGlow",
    "Stroke",
    "Extrusion",
    "UnknownLayer",
    "LayerStack",
    "create_layer",
    # Pipeline
    "NormalizedStop",
    "normalize_gradient_stops",
    "RenderStack",
    "build_render_stack",
    "compute_margins",
    "compute_canvas_size",
    "TextMetrics",
    "TextPlacement",
    "measure_text_block",
    "layout_text",
    "Surface",
    "arc_warp",
    "FontRegistry",
    "RenderRequest",
    "render_to_surface",
    "render_image",
    # Documents
    "ImportedConfig",
    "export_config",
    "import_config",
]
