"""
Gradient stop normalization.

Turns the user-editable stop list of a gradient fill into the sorted form the
compositor draws with. Old documents that predate editable stops describe the
gradient with ``topColor``/``midColor``/``bottomColor``/``midpointPct``; those
still render exactly as they always did.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .color import coerce_number, is_hex_color

# Stop list of a freshly created gradient fill
DEFAULT_STOPS: List[Dict[str, Any]] = [
    {'offsetPct': 0, 'color': '#FF8F1F'},
    {'offsetPct': 55, 'color': '#FFD33A'},
    {'offsetPct': 100, 'color': '#FFF2A6'},
]

LEGACY_TOP_COLOR = '#FFF2A6'
LEGACY_MID_COLOR = '#FFD33A'
LEGACY_BOTTOM_COLOR = '#FF8F1F'
LEGACY_MIDPOINT_PCT = 55.0


@dataclass(frozen=True)
class NormalizedStop:
    """A renderable stop: offset in 0..1."""
    offset: float
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {'offset': self.offset, 'color': self.color}


def _pct(value: Any, fallback: float) -> float:
    return min(100.0, max(0.0, coerce_number(value, fallback)))


def _as_stop(stop: Any) -> Optional[NormalizedStop]:
    if isinstance(stop, NormalizedStop):
        return stop
    if not isinstance(stop, Mapping) or not is_hex_color(stop.get('color')):
        return None
    # Already-normalized stops carry ``offset`` in 0..1
    if 'offsetPct' not in stop and 'offset' in stop:
        offset = min(1.0, max(0.0, coerce_number(stop.get('offset'), 0.0)))
    else:
        offset = _pct(stop.get('offsetPct'), 0.0) / 100.0
    return NormalizedStop(offset=offset, color=stop['color'])


def normalize_gradient_stops(params: Optional[Mapping[str, Any]]) -> List[NormalizedStop]:
    """
    Normalize gradient params to a sorted stop list.

    Stops without a valid hex color are dropped, offsets are clamped to
    0..100 % and sorted ascending. Equal offsets keep their original order.
    Without any usable stop the legacy three-color form is used.

    Args:
        params: Raw gradient fill params (``stops`` or legacy fields)

    Returns:
        Stops with offsets in 0..1
    """
    p = params or {}

    raw_stops = p.get('stops')
    if isinstance(raw_stops, (list, tuple)) and raw_stops:
        normalized = [s for s in (_as_stop(stop) for stop in raw_stops) if s is not None]
        if normalized:
            # sorted() is stable: ties keep insertion order, never compare colors
            return sorted(normalized, key=lambda s: s.offset)

    top_color = p.get('topColor') or LEGACY_TOP_COLOR
    mid_color = p.get('midColor') or LEGACY_MID_COLOR
    bottom_color = p.get('bottomColor') or LEGACY_BOTTOM_COLOR
    midpoint = _pct(p.get('midpointPct'), LEGACY_MIDPOINT_PCT) / 100.0

    return [
        NormalizedStop(offset=0.0, color=top_color),
        NormalizedStop(offset=midpoint, color=mid_color),
        NormalizedStop(offset=1.0, color=bottom_color),
    ]


def _nearest_mid_index(stops: List[Mapping[str, Any]]) -> int:
    best_idx = 0
    best_dist = float('inf')
    for i, stop in enumerate(stops):
        dist = abs(_pct(stop.get('offsetPct') if isinstance(stop, Mapping) else None, 0.0) - 50.0)
        if dist < best_dist:
            best_dist = dist
            best_idx = i
    return best_idx


def get_gradient_mid_color(params: Optional[Mapping[str, Any]], fallback: str) -> str:
    """Color of the stop nearest 50 %, the first one on ties."""
    stops = (params or {}).get('stops')
    if not isinstance(stops, list) or not stops:
        return fallback
    best = stops[_nearest_mid_index(stops)]
    color = best.get('color') if isinstance(best, Mapping) else None
    return color if isinstance(color, str) else fallback


def set_gradient_mid_color(params: Dict[str, Any], color: str) -> bool:
    """Recolor the stop nearest 50 % in place. Adds a 50 % stop to an empty list."""
    if not isinstance(params, dict):
        return False
    stops = list(params.get('stops') or [])
    if not stops:
        params['stops'] = [{'offsetPct': 50, 'color': color}]
        return True
    idx = _nearest_mid_index(stops)
    stops[idx] = {**stops[idx], 'color': color}
    params['stops'] = stops
    return True
