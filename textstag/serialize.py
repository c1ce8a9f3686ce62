"""
Layer configuration documents.

A configuration is the JSON form of a layer stack::

    {"version": 1, "layers": [{"id": ..., "type": ..., "name": ...,
                               "enabled": ..., "params": {...}}, ...]}

Export writes gradient fills in the ``stops`` form and drops the editor-only
``locked`` flag. Import accepts documents of any age: it drops entries
without a string ``id``/``type``, turns legacy three-color gradients into
stops and guarantees an enabled base fill.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from .exceptions import ConfigError
from .gradient_stops import DEFAULT_STOPS
from .layer_effects import LayerEffect, UnknownLayer

logger = logging.getLogger(__name__)

CONFIG_VERSION = 1

LEGACY_GRADIENT_KEYS = (
    'topColor',
    'midColor',
    'bottomColor',
    'midpointPct',
    'highlightColor',
    'highlightOpacityPct',
    'highlightY0Pct',
    'highlightY1Pct',
)

# Editor-only flags that never go into a document
UI_ONLY_KEYS = ('locked',)

BASE_FILL_NAMES = {'gradientFill': 'Gradient Fill', 'fill': 'Fill'}
DEFAULT_FILL_COLOR = '#000000'
LEGACY_MIDPOINT_PCT = 55


@dataclass
class ImportedConfig:
    """Result of importing a configuration document."""
    version: int
    layers: List[LayerEffect] = field(default_factory=list)
    selected_layer_id: Optional[str] = None


def migrate_gradient_params(params: Any, fill_color_fallback: Optional[str] = None) -> Dict[str, Any]:
    """
    Gradient params in the ``stops`` form.

    - An existing, empty ``stops`` list becomes a single 50 % stop of the
      fallback color
    - Legacy ``topColor``/``midColor``/``bottomColor`` become stops at 0 %,
      ``midpointPct`` (55 % if missing) and 100 %, for the colors present
    - Without any of these the default stops are used, the 55 % stop taking
      the fallback color if one is given

    The input is not modified.
    """
    p = dict(params) if isinstance(params, dict) else {}
    if isinstance(p.get('stops'), list):
        if not p['stops']:
            p['stops'] = [{'offsetPct': 50, 'color': fill_color_fallback or DEFAULT_FILL_COLOR}]
        return p

    stops = []
    if isinstance(p.get('topColor'), str):
        stops.append({'offsetPct': 0, 'color': p['topColor']})
    if isinstance(p.get('midColor'), str):
        midpoint = p.get('midpointPct')
        if isinstance(midpoint, bool) or not isinstance(midpoint, (int, float)):
            midpoint = LEGACY_MIDPOINT_PCT
        stops.append({'offsetPct': midpoint, 'color': p['midColor']})
    if isinstance(p.get('bottomColor'), str):
        stops.append({'offsetPct': 100, 'color': p['bottomColor']})

    if not stops:
        stops = copy.deepcopy(DEFAULT_STOPS)
        if fill_color_fallback:
            stops[1]['color'] = fill_color_fallback

    p['stops'] = stops
    for key in LEGACY_GRADIENT_KEYS:
        p.pop(key, None)
    return p


def _strip_ui_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k not in UI_ONLY_KEYS}


def export_config(layers: Iterable[LayerEffect]) -> Dict[str, Any]:
    """
    Serialize a layer stack to a configuration document.

    :param layers: Layers in stack order
    :return: ``{"version": 1, "layers": [...]}``, ready for ``json.dumps``
    """
    exported = []
    for layer in layers:
        data = _strip_ui_keys(layer.to_dict())
        if data.get('type') == 'gradientFill':
            data['params'] = migrate_gradient_params(data.get('params'))
        exported.append(data)
    return {'version': CONFIG_VERSION, 'layers': exported}


def export_config_json(layers: Iterable[LayerEffect], indent: Optional[int] = 2) -> str:
    return json.dumps(export_config(layers), indent=indent)


def _find_base_fill(entries: List[Any]) -> Optional[Dict[str, Any]]:
    for wanted in ('gradientFill', 'fill'):
        for entry in entries:
            if isinstance(entry, dict) and entry.get('type') == wanted:
                return entry
    return None


def import_config(json_text: Optional[str], fill_color_fallback: Optional[str] = None) -> ImportedConfig:
    """
    Parse a configuration document into layers.

    :param json_text: The document; empty input is an empty document
    :param fill_color_fallback: Color for base fills the document lacks
    :return: Layers in stack order, the first one selected
    :raises ConfigError: If the text is not a JSON object
    """
    try:
        parsed = json.loads(json_text or '{}')
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    if not isinstance(parsed, dict):
        raise ConfigError(f"Configuration must be a JSON object, got {type(parsed).__name__}")

    entries = parsed.get('layers')
    entries = [copy.deepcopy(e) for e in entries] if isinstance(entries, list) else []

    base = _find_base_fill(entries)
    if base is None:
        base = LayerEffect.create('gradientFill').to_dict()
        if fill_color_fallback:
            for stop in base['params']['stops']:
                if stop.get('offsetPct') == LEGACY_MIDPOINT_PCT:
                    stop['color'] = fill_color_fallback
        entries.insert(0, base)
        logger.debug(f"Configuration has no base fill, inserted gradient fill {base['id']}")

    base['enabled'] = True
    base['name'] = BASE_FILL_NAMES[base['type']]
    if base['type'] == 'fill':
        if not isinstance(base.get('params'), dict):
            base['params'] = {}
        if not base['params'].get('color'):
            base['params']['color'] = fill_color_fallback or DEFAULT_FILL_COLOR

    layers: List[LayerEffect] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        if not isinstance(entry.get('id'), str) or not isinstance(entry.get('type'), str):
            logger.warning(f"Skipping layer without string id/type: {entry!r:.80}")
            continue
        data = _strip_ui_keys(entry)
        if data['type'] == 'gradientFill':
            data['params'] = migrate_gradient_params(data.get('params'), fill_color_fallback)
        try:
            layer = LayerEffect.from_dict(data)
        except ValidationError as e:
            logger.warning(f"Skipping invalid layer {data['id']!r}: {e.error_count()} error(s)")
            continue
        if isinstance(layer, UnknownLayer):
            logger.warning(f"Unknown layer type '{layer.layer_type}' kept but not rendered")
        layers.append(layer)

    version = parsed.get('version')
    return ImportedConfig(
        version=version if isinstance(version, int) and not isinstance(version, bool) else CONFIG_VERSION,
        layers=layers,
        selected_layer_id=layers[0].id if layers else None,
    )
