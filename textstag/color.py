"""Hex color and numeric coercion helpers shared by layers and gradients."""

from __future__ import annotations

import math
import re
from typing import Any, Optional, Tuple

_HEX_COLOR = re.compile(r'^#?([0-9a-fA-F]{6})$')


def is_hex_color(value: Any) -> bool:
    """Check for a ``#RRGGBB`` (or ``RRGGBB``) string."""
    return isinstance(value, str) and _HEX_COLOR.match(value.strip()) is not None


def hex_to_rgb(hex_str: Any) -> Tuple[int, int, int]:
    """Convert a hex color string to an RGB tuple, black if malformed."""
    m = _HEX_COLOR.match(str(hex_str or '').strip())
    if not m:
        return (0, 0, 0)
    n = int(m.group(1), 16)
    return ((n >> 16) & 255, (n >> 8) & 255, n & 255)


def coerce_number(value: Any, default: float) -> float:
    """Coerce to a finite float, falling back to ``default``."""
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def opacity_from_pct(pct: Optional[float]) -> float:
    """Percentage to 0..1 alpha."""
    return min(1.0, max(0.0, (pct or 0.0) / 100.0))
