"""
Editable layer stack.

Holds the layers of one document in stack order plus the selected layer, and
implements the editing operations: add, remove, reorder, update and the
switch between a solid and a gradient base fill. The stack always keeps at
least one base fill once a removal would leave none.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Optional

from .gradient_stops import DEFAULT_STOPS, get_gradient_mid_color, set_gradient_mid_color
from .layer_effects import LayerEffect

logger = logging.getLogger(__name__)

FILL_TYPES = ('fill', 'gradientFill')
DEFAULT_FILL_COLOR = '#000000'

# Keys an update may never change
IMMUTABLE_KEYS = ('id', 'type', 'layer_type')


def create_layer(layer_type: str) -> LayerEffect:
    """
    Create a layer of ``layer_type`` with default params and a fresh id.

    :raises ValueError: For unknown layer types
    """
    return LayerEffect.create(layer_type)


def solid_fill(color: Optional[str] = None) -> LayerEffect:
    """A new solid fill layer of ``color`` (black by default)."""
    return LayerEffect.from_dict({'type': 'fill', 'params': {'color': color or DEFAULT_FILL_COLOR}})


def find_base_fill_index(layers: List[LayerEffect]) -> int:
    """Index of the first gradient fill, else of the first solid fill, else -1."""
    for wanted in ('gradientFill', 'fill'):
        for i, layer in enumerate(layers):
            if layer.layer_type == wanted:
                return i
    return -1


@dataclass
class LayerStack:
    """
    Layers of a document in stack order, plus the selected layer.

    Example:
        stack = LayerStack.with_default_fill('#FFFFFF')
        shadow = stack.add_layer('dropShadow')
        stack.move_layer(shadow.id, -1)
        stack.switch_base_fill_type('gradientFill')
    """

    layers: List[LayerEffect] = field(default_factory=list)
    selected_layer_id: Optional[str] = None

    @classmethod
    def with_default_fill(cls, fill_color: Optional[str] = None) -> 'LayerStack':
        """A stack holding a single solid fill."""
        fill = solid_fill(fill_color)
        return cls(layers=[fill], selected_layer_id=fill.id)

    def get_layer(self, layer_id: str) -> Optional[LayerEffect]:
        """
        Get a layer by ID.

        :param layer_id: Layer ID
        :return: The layer or None if not found
        """
        for layer in self.layers:
            if layer.id == layer_id:
                return layer
        return None

    def select_layer(self, layer_id: Optional[str]) -> None:
        self.selected_layer_id = layer_id

    def add_layer(self, layer_type: str) -> LayerEffect:
        """
        Append a new layer of ``layer_type`` and select it.

        :raises ValueError: For unknown layer types
        """
        layer = create_layer(layer_type)
        self.layers.append(layer)
        self.selected_layer_id = layer.id
        return layer

    def remove_layer(self, layer_id: str) -> bool:
        """
        Remove a layer by ID.

        If that removes the last base fill, a black solid fill is put at the
        bottom of the stack and selected.

        :return: False if no such layer exists
        """
        if self.get_layer(layer_id) is None:
            return False

        self.layers = [layer for layer in self.layers if layer.id != layer_id]
        if self.selected_layer_id == layer_id:
            self.selected_layer_id = self.layers[0].id if self.layers else None

        self.ensure_base_fill(DEFAULT_FILL_COLOR)
        return True

    def ensure_base_fill(self, fill_color: Optional[str] = None) -> None:
        """Insert a solid fill at the front if the stack has no base fill."""
        if find_base_fill_index(self.layers) != -1:
            return
        fill = solid_fill(fill_color)
        self.layers.insert(0, fill)
        self.selected_layer_id = fill.id
        logger.debug(f"Inserted base fill {fill.id}")

    def move_layer(self, layer_id: str, direction: int) -> bool:
        """
        Swap a layer with its neighbor ``direction`` steps away (-1 or +1).

        :return: False if the layer is unknown or the move would leave the stack
        """
        idx = next((i for i, layer in enumerate(self.layers) if layer.id == layer_id), -1)
        if idx == -1:
            return False
        target = idx + direction
        if target < 0 or target >= len(self.layers):
            return False
        self.layers[idx], self.layers[target] = self.layers[target], self.layers[idx]
        return True

    def update_layer(self, layer_id: str, patch: Dict[str, Any]) -> bool:
        """
        Shallow-merge ``patch`` into a layer.

        Top-level keys replace the layer's values; ``params`` merges key by key
        into the current params. ``id`` and ``type`` cannot be changed here.

        :return: False if no such layer exists
        """
        for i, layer in enumerate(self.layers):
            if layer.id != layer_id:
                continue
            patch = {k: v for k, v in (patch or {}).items() if k not in IMMUTABLE_KEYS}
            data = layer.to_dict()
            params = {**data.get('params', {}), **(patch.pop('params', None) or {})}
            data.update(patch)
            data['params'] = params
            self.layers[i] = LayerEffect.from_dict(data)
            return True
        return False

    def switch_base_fill_type(self, new_type: str, fill_color_fallback: Optional[str] = None) -> bool:
        """
        Turn the base fill into a solid or gradient fill, keeping its id and position.

        A solid color becomes the color of the gradient stop nearest 50 %;
        a gradient hands that stop's color to the solid fill. The replaced
        layer is enabled, renamed to its type's name and selected.

        :param new_type: 'fill' or 'gradientFill'
        :param fill_color_fallback: Color to use when the old layer has none
        :return: False if ``new_type`` is not a fill type or there is no base
            fill; True otherwise (also when it already has that type)
        """
        if new_type not in FILL_TYPES:
            return False
        idx = find_base_fill_index(self.layers)
        if idx == -1:
            return False
        current = self.layers[idx]
        if current.layer_type == new_type:
            return True

        fallback = fill_color_fallback or DEFAULT_FILL_COLOR
        old_params = current.params.model_dump(by_alias=True, exclude_none=True)

        if new_type == 'fill':
            params = {'color': get_gradient_mid_color(old_params, fallback)}
        else:
            color = old_params.get('color')
            params = {'stops': copy.deepcopy(DEFAULT_STOPS)}
            set_gradient_mid_color(params, color if isinstance(color, str) else fallback)

        replacement = LayerEffect.from_dict({
            'id': current.id,
            'type': new_type,
            'enabled': True,
            'params': params,
        })
        self.layers[idx] = replacement
        self.selected_layer_id = replacement.id
        return True
